"""
round_controller.py – Round / match orchestration.

Owns both fighters, the match tallies and every timer.  One ``tick(dt,
frame)`` per rendered frame; inside a fighting tick the order is fixed:

  1. round-level timers / phase (anything but *fighting* stops here)
  2. human fighter from input
  3. AI decision + AI fighter
  4. body push-apart
  5. hits, player → opponent then opponent → player
  6. round-end checks (health, timer)
  7. cosmetic, combo and hazard timers

Phases:  starting → fighting → ended → starting … → match_over
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)

from settings import (
    PLAYER_START_X, OPPONENT_START_X, PLAYER_NAME, OPPONENT_NAME,
    PLAYER_COLOR, OPPONENT_COLOR,
    ROUND_TIME, ROUND_START_DURATION, ROUND_FIGHT_BANNER_AT,
    ROUND_END_DURATION, WIN_ROUNDS,
    COMBO_WINDOW, SCORE_PER_DAMAGE, SCORE_ROUND_WIN,
    SCREEN_SHAKE_HIT, SCREEN_SHAKE_HAZARD,
    SPARK_HIT_COLOR, SPARK_BLOCK_COLOR, SPARK_HAZARD_COLOR,
    POSSESSION_FLASH_CHANCE, OMNISCIENT_WHISPER_CHANCE,
    STRICT_INVARIANTS,
)
from entities.fighter import Fighter
from ai.ai_core import AIBrain, HOLD
from systems.escalation import EscalationPolicy, LevelProvider, constant_level
from systems.hazard import HazardDirector
from systems.hit_resolver import HitResolver, HitResult
from systems.input_source import InputFrame, NEUTRAL
from systems.vfx_system import CombatEffects

CueSink = Callable[[str], Any]
NarrativeSink = Callable[[dict], Any]

# Human action → audio cue
ACTION_CUES: dict[str, str] = {
    "jump": "jump",
    "punch": "punch",
    "kick": "punch",
    "special": "shoot",
}


class RoundPhase(str, Enum):
    STARTING = "starting"
    FIGHTING = "fighting"
    ENDED = "ended"
    MATCH_OVER = "match_over"


class MatchOverError(RuntimeError):
    """A tick was delivered after the match finished."""


@dataclass
class MatchState:
    """Match-level tallies and round timers."""

    round_number: int = 1
    player_wins: int = 0
    opponent_wins: int = 0
    round_timer: float = ROUND_TIME
    phase: RoundPhase = RoundPhase.STARTING
    phase_timer: float = ROUND_START_DURATION
    combo_count: int = 0
    combo_timer: float = 0.0
    score: int = 0
    banner_text: str = ""
    last_round_winner: str | None = None
    elapsed: float = 0.0

    @property
    def match_decided(self) -> bool:
        return self.player_wins >= WIN_ROUNDS or self.opponent_wins >= WIN_ROUNDS

    @property
    def winner(self) -> str | None:
        if self.player_wins >= WIN_ROUNDS:
            return "player"
        if self.opponent_wins >= WIN_ROUNDS:
            return "opponent"
        return None


@dataclass(frozen=True)
class MatchSnapshot:
    """Read-only view for the presentation layer."""

    phase: str
    round_number: int
    round_timer: float
    player_wins: int
    opponent_wins: int
    score: int
    banner: str
    escalation_level: int
    player: dict
    opponent: dict
    player_health_true: float
    player_health_displayed: float
    combo_count: int
    combo_timer: float
    screen_shake: float
    sparks: tuple = field(default_factory=tuple)
    blood: tuple = field(default_factory=tuple)
    flashes: tuple = field(default_factory=tuple)
    hazard: dict | None = None


class RoundController:
    """Runs one match of human vs. AI."""

    def __init__(self, escalation: LevelProvider | int = 0,
                 cue_sink: CueSink | None = None,
                 narrative_sink: NarrativeSink | None = None,
                 rng: random.Random | None = None,
                 stats=None,
                 strict: bool = STRICT_INVARIANTS):
        self._level_provider = (escalation if callable(escalation)
                                else constant_level(escalation))
        self.cue_sink = cue_sink
        self.narrative_sink = narrative_sink
        self.rng = rng or random.Random()
        self.stats = stats
        self.strict = strict

        self.brain = AIBrain(self.rng)
        self.resolver = HitResolver()
        self.effects = CombatEffects(self.rng)
        self.hazard = HazardDirector(self.rng)
        self.policy = EscalationPolicy.from_level(0)

        self.match = MatchState()
        self.player: Fighter | None = None
        self.opponent: Fighter | None = None

        # Single-slot observation of the human's latest action for the AI
        self._observation: str | None = None

        self.reset_match()

    # ══════════════════════════════════════════════════════
    #  Lifecycle
    # ══════════════════════════════════════════════════════

    def reset_match(self):
        """Fresh match: tallies, score and hazard state all cleared."""
        self.match = MatchState()
        self.hazard.reset()
        self.reset_round()
        logger.info("Match reset (escalation %d)", self.policy.level)

    def reset_round(self):
        """Recreate both fighters and restart the round countdown.

        Any timers in flight are abandoned; match tallies survive.
        """
        m = self.match
        self.policy = self._poll_policy()
        self.player = Fighter(PLAYER_START_X, 1, PLAYER_NAME, PLAYER_COLOR,
                              strict=self.strict)
        self.opponent = Fighter(OPPONENT_START_X, -1, OPPONENT_NAME,
                                OPPONENT_COLOR, strict=self.strict)
        m.round_timer = ROUND_TIME
        m.phase = RoundPhase.STARTING
        m.phase_timer = ROUND_START_DURATION
        m.banner_text = f"ROUND {m.round_number}"
        m.combo_count = 0
        m.combo_timer = 0.0
        self.effects.clear()
        self.brain.reset()
        self._observation = None
        self.hazard.arm(self.policy.hazard_eligible)
        logger.info("Round %d starting", m.round_number)

    # ══════════════════════════════════════════════════════
    #  Tick
    # ══════════════════════════════════════════════════════

    def tick(self, dt: float, frame: InputFrame = NEUTRAL):
        m = self.match
        if m.phase == RoundPhase.MATCH_OVER:
            if self.strict:
                raise MatchOverError("tick delivered after the match ended")
            logger.warning("Ignoring tick after match over")
            return

        m.elapsed += dt
        self.policy = self._poll_policy()

        # 1. round-level timers
        if not self._advance_phase(dt):
            return
        m.round_timer = max(0.0, m.round_timer - dt)

        player, opponent = self.player, self.opponent

        # 2. human fighter
        action = player.update(dt, frame, opponent.x)
        if action:
            self._cue(ACTION_CUES[action])
            if self.stats is not None and action != "jump":
                self.stats.record_attack("player", action)

        # 3. AI fighter – sees the human's action from an earlier tick only
        decision = HOLD
        if opponent.begin_tick(dt, player.x):
            decision = self.brain.update(opponent, player, dt, self.policy,
                                         self._observation)
            opponent.apply_decision(decision)
        if decision.consumed_observation:
            self._observation = None
        if decision.attack:
            self._cue(ACTION_CUES[decision.attack])
            if self.stats is not None:
                self.stats.record_attack("opponent", decision.attack)
        opponent.end_tick()
        if action and self.policy.ai_omniscient:
            self._observation = action

        # 4. bodies
        self.resolver.push_apart(player, opponent)

        # 5. hits
        self._apply_hit(self.resolver.resolve(player, opponent, self.policy,
                                              defender_is_human=False),
                        by_player=True)
        self._apply_hit(self.resolver.resolve(opponent, player, self.policy,
                                              defender_is_human=True),
                        by_player=False)

        # 6. round end
        if player.health <= 0 or opponent.health <= 0 or m.round_timer <= 0:
            self._end_round()

        # 7. cosmetics, combo, hazard
        self.effects.update(dt)
        if m.combo_timer > 0:
            m.combo_timer -= dt
            if m.combo_timer <= 0:
                m.combo_timer = 0.0
                m.combo_count = 0
        if m.phase == RoundPhase.FIGHTING:
            self._update_hazard(dt)
            self._maybe_whisper()
            # contact damage can end the round too
            if player.health <= 0:
                self._end_round()
        if self.stats is not None:
            self.stats.sample_health(m.elapsed, player.health, opponent.health)

    # ══════════════════════════════════════════════════════
    #  Phase handling
    # ══════════════════════════════════════════════════════

    def _advance_phase(self, dt: float) -> bool:
        """Run non-fighting phase timers.  True when gameplay should run."""
        m = self.match
        if m.phase == RoundPhase.STARTING:
            m.phase_timer -= dt
            if m.phase_timer <= ROUND_FIGHT_BANNER_AT and m.banner_text.startswith("ROUND"):
                m.banner_text = "FIGHT!"
            if m.phase_timer <= 0:
                m.phase_timer = 0.0
                m.phase = RoundPhase.FIGHTING
                m.banner_text = ""
                logger.info("Round %d: fight", m.round_number)
            return False

        if m.phase == RoundPhase.ENDED:
            m.phase_timer -= dt
            if m.phase_timer <= 0:
                self._advance_round()
            return False

        return True

    def _end_round(self):
        """Award the round.  Anything short of a strictly higher player
        health goes to the opponent, ties included."""
        m = self.match
        player_health = self.player.health
        opponent_health = self.opponent.health
        if player_health > opponent_health:
            m.player_wins += 1
            m.last_round_winner = "player"
            m.banner_text = "YOU WIN"
            m.score += SCORE_ROUND_WIN
        else:
            m.opponent_wins += 1
            m.last_round_winner = "opponent"
            m.banner_text = ("YOU WERE ALWAYS GOING TO LOSE"
                             if self.policy.possession_effects else "YOU LOSE")
        m.phase = RoundPhase.ENDED
        m.phase_timer = ROUND_END_DURATION
        logger.info("Round %d to %s (%d vs %d, timer %.1f) – %d:%d",
                    m.round_number, m.last_round_winner, player_health,
                    opponent_health, m.round_timer, m.player_wins,
                    m.opponent_wins)
        if self.stats is not None:
            self.stats.record_round(m.last_round_winner, player_health,
                                    opponent_health)

    def _advance_round(self):
        m = self.match
        if m.match_decided:
            m.phase = RoundPhase.MATCH_OVER
            m.phase_timer = 0.0
            logger.info("Match over – %s wins %d:%d", m.winner,
                        m.player_wins, m.opponent_wins)
            return
        m.round_number += 1
        self.reset_round()

    # ══════════════════════════════════════════════════════
    #  Hit / hazard reactions
    # ══════════════════════════════════════════════════════

    def _apply_hit(self, result: HitResult, by_player: bool):
        if not result.connected:
            return
        m = self.match
        attacker = "player" if by_player else "opponent"
        if self.stats is not None:
            self.stats.record_hit(attacker, result.attack_name, result.damage,
                                  result.blocked)

        if result.blocked:
            self._cue("block")
            self.effects.spawn_sparks(result.spark_x, result.spark_y,
                                      SPARK_BLOCK_COLOR)
            return

        self._cue("hit")
        self.effects.trigger_shake(SCREEN_SHAKE_HIT)
        m.combo_count += 1
        m.combo_timer = COMBO_WINDOW
        if m.combo_count == 2 and self.stats is not None:
            self.stats.record_combo()
        m.score += result.attempted_damage * SCORE_PER_DAMAGE
        self.effects.spawn_sparks(result.spark_x, result.spark_y, SPARK_HIT_COLOR)
        if self.policy.ai_omniscient:
            defender = self.opponent if by_player else self.player
            self.effects.spawn_blood(result.spark_x, result.spark_y,
                                     defender.facing)
        if self.policy.possession_effects and self.rng.random() < POSSESSION_FLASH_CHANCE:
            self.effects.spawn_flash(result.spark_x, result.spark_y)

    def _update_hazard(self, dt: float):
        events = self.hazard.update(dt, self.player, self.policy.hazard_eligible)
        if events.spawned:
            self._cue("scare")
            self._narrate({"type": "third_fighter", "game": "street-fighter"})
            self._narrate({"id": "sf-glitch",
                           "text": "PLAYER 3 HAS ENTERED THE GAME"})
        if events.teleported:
            self._cue("glitch")
        if events.contact_damage:
            gf = self.hazard.glitch
            self._cue("scare")
            self.effects.trigger_shake(SCREEN_SHAKE_HAZARD)
            if gf is not None:
                self.effects.spawn_sparks(gf.x, gf.y - 30, SPARK_HAZARD_COLOR)

    def _maybe_whisper(self):
        if (self.policy.ai_omniscient and self.match.round_number >= 2
                and self.rng.random() < OMNISCIENT_WHISPER_CHANCE):
            self._narrate({
                "text": "THE OPPONENT KNOWS WHAT YOU WILL DO BEFORE YOU DO IT",
                "game": "street-fighter",
            })

    # ══════════════════════════════════════════════════════
    #  Collaborators
    # ══════════════════════════════════════════════════════

    def _poll_policy(self) -> EscalationPolicy:
        return EscalationPolicy.from_level(self._level_provider())

    def _cue(self, name: str):
        if self.cue_sink is None:
            return
        try:
            self.cue_sink(name)
        except Exception as exc:  # cue sink is best effort
            logger.debug("Cue %r dropped: %s", name, exc)

    def _narrate(self, payload: dict):
        if self.narrative_sink is None:
            return
        try:
            self.narrative_sink(payload)
        except Exception as exc:
            logger.debug("Narrative event dropped: %s", exc)

    # ══════════════════════════════════════════════════════
    #  Presentation
    # ══════════════════════════════════════════════════════

    def snapshot(self) -> MatchSnapshot:
        m = self.match
        true_frac = self.player.health_fraction
        glitch = self.hazard.glitch
        return MatchSnapshot(
            phase=m.phase.value,
            round_number=m.round_number,
            round_timer=m.round_timer,
            player_wins=m.player_wins,
            opponent_wins=m.opponent_wins,
            score=m.score,
            banner=m.banner_text,
            escalation_level=self.policy.level,
            player=self.player.get_state_snapshot(),
            opponent=self.opponent.get_state_snapshot(),
            player_health_true=true_frac,
            player_health_displayed=self.policy.displayed_health_fraction(
                true_frac, m.elapsed),
            combo_count=m.combo_count,
            combo_timer=m.combo_timer,
            screen_shake=self.effects.shake,
            sparks=tuple((s.x, s.y, s.color, s.size, s.life)
                         for s in self.effects.sparks),
            blood=tuple((d.x, d.y, d.size, d.life)
                        for d in self.effects.blood),
            flashes=tuple((f.x, f.y, f.text, f.life)
                          for f in self.effects.flashes),
            hazard=glitch.get_state_snapshot() if glitch else None,
        )
