"""
stats.py  –  Per-match statistics tracking.

MatchStats collects combat events during a single match and samples both
fighters' health once per second of match time.  At match end it prints a
formatted summary and saves a health-trend line graph via matplotlib.

Nothing here feeds back into the simulation.
"""

import logging

logger = logging.getLogger(__name__)

import matplotlib
matplotlib.use("Agg")  # non-interactive backend so the plot doesn't block pygame
import matplotlib.pyplot as plt

# Health sampling interval (seconds of match time)
_SAMPLE_INTERVAL = 1.0

_SIDES = ("player", "opponent")


class MatchStats:
    """Tracks events for one match and produces end-of-match reports.

    Per side ("player" / "opponent"):
        attacks      – dict[move, int]  swings started
        hits         – int  clean hits landed
        blocked      – int  hits that met a guard
        damage_dealt – int  damage inflicted (chip included)
    Match-wide:
        combos          – int  hit strings of two or more
        round_results   – list[dict]
        health_history  – list[(t, player_hp, opponent_hp)]
    """

    def __init__(self, escalation_level: int = 0, plot_path: str = "health_trend.png"):
        self.escalation_level = escalation_level
        self.plot_path = plot_path

        self.attacks: dict[str, dict[str, int]] = {s: {} for s in _SIDES}
        self.hits: dict[str, int] = {s: 0 for s in _SIDES}
        self.blocked: dict[str, int] = {s: 0 for s in _SIDES}
        self.damage_dealt: dict[str, int] = {s: 0 for s in _SIDES}
        self.combos: int = 0

        self.round_results: list[dict] = []
        self.health_history: list[tuple[float, int, int]] = []
        self._next_sample: float = 0.0

        self.match_duration: float = 0.0
        self.result: str | None = None

    # ===========================================================
    #  Per-frame / per-event recorders
    # ===========================================================

    def record_attack(self, side: str, move: str):
        """Call when a fighter commits to a swing (hit or miss)."""
        per_side = self.attacks[side]
        per_side[move] = per_side.get(move, 0) + 1

    def record_hit(self, side: str, move: str, damage: int, blocked: bool):
        """Call when *side*'s attack connects with the other fighter."""
        if blocked:
            self.blocked[side] += 1
        else:
            self.hits[side] += 1
        self.damage_dealt[side] += damage

    def record_combo(self):
        self.combos += 1

    def record_round(self, winner: str, player_health: int, opponent_health: int):
        self.round_results.append({
            "round": len(self.round_results) + 1,
            "winner": winner,
            "player_health": player_health,
            "opponent_health": opponent_health,
        })

    def sample_health(self, t: float, player_health: int, opponent_health: int):
        """Call once per tick with the match clock; keeps one sample per second."""
        self.match_duration = t
        if t >= self._next_sample:
            self.health_history.append((t, player_health, opponent_health))
            self._next_sample = t + _SAMPLE_INTERVAL

    # ===========================================================
    #  End-of-match
    # ===========================================================

    def end_match(self, result: str):
        """Finalise stats, print summary, and save the health graph.

        Parameters
        ----------
        result : "player" or "opponent" (match winner)
        """
        self.result = result
        self._print_summary(result)
        self._plot_health()

    # ===========================================================
    #  Reports
    # ===========================================================

    def _print_summary(self, result: str):
        """Print a clean formatted match summary to stdout."""
        print("\n" + "=" * 52)
        print("  MATCH SUMMARY")
        print("=" * 52)
        print(f"  Result           : {'Player Wins' if result == 'player' else 'Opponent Wins'}")
        print(f"  Escalation       : {self.escalation_level}")
        print(f"  Match Duration   : {self.match_duration:.1f}s")
        print("-" * 52)
        for side in _SIDES:
            swings = sum(self.attacks[side].values())
            print(f"  {side.capitalize():<9} swings {swings:>3}  hits {self.hits[side]:>3}"
                  f"  blocked {self.blocked[side]:>3}  damage {self.damage_dealt[side]:>4}")
        print(f"  Combos           : {self.combos}")
        print("-" * 52)
        for r in self.round_results:
            print(f"  Round {r['round']}: {r['winner']:<8} "
                  f"({r['player_health']} vs {r['opponent_health']})")
        print("=" * 52 + "\n")

    def _plot_health(self):
        """Save a line graph of both fighters' health to disk."""
        if not self.health_history:
            return

        t = [s[0] for s in self.health_history]
        fig, ax = plt.subplots()
        ax.plot(t, [s[1] for s in self.health_history], label="Player")
        ax.plot(t, [s[2] for s in self.health_history], label="Opponent")
        ax.set_xlabel("Match time (seconds)")
        ax.set_ylabel("Health")
        ax.set_title(f"Health Trend  –  escalation {self.escalation_level}")
        ax.legend()
        ax.grid(True)

        fig.savefig(self.plot_path, dpi=100, bbox_inches="tight")
        plt.close(fig)
        logger.info("Health graph saved to %s", self.plot_path)

    # ===========================================================
    #  Data accessors
    # ===========================================================

    def as_dict(self) -> dict:
        """Return a plain dict snapshot (useful for JSON serialisation)."""
        return {
            "escalation_level": self.escalation_level,
            "result":           self.result,
            "attacks":          {s: dict(v) for s, v in self.attacks.items()},
            "hits":             dict(self.hits),
            "blocked":          dict(self.blocked),
            "damage_dealt":     dict(self.damage_dealt),
            "combos":           self.combos,
            "rounds":           [dict(r) for r in self.round_results],
            "match_duration":   round(self.match_duration, 2),
            "health_samples":   len(self.health_history),
        }
