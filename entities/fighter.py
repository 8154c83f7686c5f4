"""
fighter.py – Per-combatant state machine.

States: idle, walking, jumping, blocking, attacking, hitstun, knockdown

Exactly one state is active at a time.  A tick is split in three so the
round controller can slot the AI between the forced-state handling and the
physics step:

    begin_tick()  – timers, forced states (hitstun / knockdown / attack)
    apply_input() or apply_decision()   – only when begin_tick() says free
    end_tick()    – friction, gravity, arena clamp, invariant check

``update()`` runs the three steps for a human-controlled fighter.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

from settings import (
    GROUND_Y, ARENA_LEFT, ARENA_RIGHT, GRAVITY, JUMP_FORCE, MOVE_SPEED,
    GROUND_FRICTION,
    FIGHTER_WIDTH, FIGHTER_HEIGHT, MAX_HEALTH,
    BLOCK_HOLD_DURATION, KNOCKDOWN_DURATION, KNOCKDOWN_INVINCIBILITY,
    HITSTUN_DECAY, KNOCKDOWN_DECAY,
    SPECIAL_CHARGE_MAX, SPECIAL_CHARGE_RATE, SPECIAL_CHARGE_COST,
    PLAYER_SPECIAL_COOLDOWN,
    ATTACK_BOX_HEIGHT_FRAC, ATTACK_BOX_TOP_FRAC,
    STRICT_INVARIANTS,
)
from systems.attack_catalog import AttackDefinition, get_attack
from systems.input_source import InputFrame, Button, ATTACK_BUTTONS
from utils.geometry import Box


class CombatState(str, Enum):
    IDLE = "idle"
    WALKING = "walking"
    JUMPING = "jumping"
    BLOCKING = "blocking"
    ATTACKING = "attacking"
    HITSTUN = "hitstun"
    KNOCKDOWN = "knockdown"


# States in which the fighter neither reads input nor thinks
LOCKED_STATES = frozenset({
    CombatState.ATTACKING, CombatState.HITSTUN, CombatState.KNOCKDOWN,
})


class InvariantViolation(AssertionError):
    """A fighter ended a tick in an impossible configuration."""


class Fighter:
    """One combatant.  Recreated at the start of every round."""

    def __init__(self, x: float, facing: int = 1, name: str = "",
                 color: tuple = (255, 255, 255), max_health: int = MAX_HEALTH,
                 strict: bool = STRICT_INVARIANTS):
        self.name = name
        self.color = color
        self.strict = strict

        # Kinematics – x is the left edge, y the feet line
        self.x = float(x)
        self.y = float(GROUND_Y)
        self.vx = 0.0
        self.vy = 0.0
        self.facing = facing
        self.width = FIGHTER_WIDTH
        self.height = FIGHTER_HEIGHT
        self.on_ground = True

        # Health
        self.max_health = max_health
        self.health = max_health

        # State machine
        self.state = CombatState.IDLE
        self.state_timer = 0.0
        self.active_attack: AttackDefinition | None = None
        self.attack_frame = 0
        self.block_timer = 0.0
        self.hitstun_timer = 0.0
        self.knockdown_timer = 0.0
        self.invincible_timer = 0.0
        self.crouching = False

        # Special meter
        self.special_charge = 0.0
        self.special_cooldown = 0.0

        # Cosmetic clock for idle bob / walk cycle
        self.anim_timer = 0.0

    # ── Properties ────────────────────────────────────────

    @property
    def alive(self) -> bool:
        return self.health > 0

    @property
    def is_invincible(self) -> bool:
        return self.invincible_timer > 0

    @property
    def can_act(self) -> bool:
        return self.state not in LOCKED_STATES

    @property
    def can_special(self) -> bool:
        return (self.special_charge >= SPECIAL_CHARGE_COST
                and self.special_cooldown <= 0)

    @property
    def health_fraction(self) -> float:
        return self.health / self.max_health

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def body_box(self) -> Box:
        """Full bounding rectangle; doubles as the hurtbox."""
        return Box(self.x, self.y - self.height, self.width, self.height)

    def attack_box(self, attack: AttackDefinition | None = None) -> Box | None:
        """Reach rectangle in front of the fighter for *attack*.

        Anchored at the leading edge: the right edge when facing +1,
        ``range`` behind the left edge when facing -1.
        """
        attack = attack or self.active_attack
        if attack is None:
            return None
        left = self.x + self.width if self.facing > 0 else self.x - attack.range
        top = self.y - self.height * ATTACK_BOX_TOP_FRAC
        return Box(left, top, attack.range, self.height * ATTACK_BOX_HEIGHT_FRAC)

    # ── Tick phase 1: timers and forced states ────────────

    def begin_tick(self, dt: float, opponent_x: float | None = None) -> bool:
        """Advance timers and forced states.

        Returns True when the fighter is free to take input or an AI
        decision this tick.
        """
        self.anim_timer += dt
        self.state_timer += dt
        if self.invincible_timer > 0:
            self.invincible_timer = max(0.0, self.invincible_timer - dt)
        if self.special_cooldown > 0:
            self.special_cooldown = max(0.0, self.special_cooldown - dt)
        self.special_charge = min(SPECIAL_CHARGE_MAX,
                                  self.special_charge + dt * SPECIAL_CHARGE_RATE)

        if opponent_x is not None:
            self.face_toward(opponent_x)

        if self.state == CombatState.HITSTUN:
            self.hitstun_timer -= dt
            self.x += self.vx * 0.5
            self.vx *= HITSTUN_DECAY
            if self.hitstun_timer <= 0:
                self.hitstun_timer = 0.0
                self._recover()
            return False

        if self.state == CombatState.KNOCKDOWN:
            self.knockdown_timer -= dt
            self.x += self.vx
            self.vx *= KNOCKDOWN_DECAY
            if self.knockdown_timer <= 0:
                self.knockdown_timer = 0.0
                self.invincible_timer = KNOCKDOWN_INVINCIBILITY
                self._recover()
            return False

        if self.state == CombatState.ATTACKING:
            self.attack_frame += 1
            if self.attack_frame >= self.active_attack.total_frames:
                self.active_attack = None
                self.attack_frame = 0
                self._recover()
            return False

        if self.state == CombatState.BLOCKING:
            self.block_timer -= dt
            if self.block_timer <= 0:
                self.block_timer = 0.0
                self._recover()

        return True

    # ── Tick phase 2a: human input ────────────────────────

    def apply_input(self, frame: InputFrame) -> str | None:
        """Read one tick of controller input.

        Returns the discrete action initiated this tick
        ("punch" / "kick" / "special" / "jump") or None.
        """
        dx, dy = frame.dpad
        self.crouching = dy > 0
        holding_back = dx != 0 and (dx > 0) != (self.facing > 0)

        if holding_back and self.on_ground:
            self.start_block(BLOCK_HOLD_DURATION)
            return None
        if self.state == CombatState.BLOCKING:
            return None

        if dx != 0:
            self.x += dx * MOVE_SPEED
        self._set_state(self._free_state(moving=dx != 0))

        action = None
        if frame.is_just_pressed(Button.UP) and self.jump():
            action = "jump"

        for button, move in ATTACK_BUTTONS.items():
            if not frame.is_just_pressed(button):
                continue
            if move == "special" and not self.can_special:
                continue
            self.start_attack(move, PLAYER_SPECIAL_COOLDOWN)
            action = move
            break
        return action

    # ── Tick phase 2b: AI decision ────────────────────────

    def apply_decision(self, decision) -> None:
        """Carry out an ai.ai_core.AIDecision.  No decision holds state."""
        if decision is None or not decision.acted:
            return
        if decision.move:
            self.x += decision.move * MOVE_SPEED
            self.block_timer = 0.0
            self._set_state(self._free_state(moving=True))
        elif self.state == CombatState.WALKING:
            self._set_state(self._free_state(moving=False))

        if decision.attack:
            self.start_attack(decision.attack, decision.special_cooldown)
        if decision.jump:
            self.jump()
        if decision.block_duration:
            self.start_block(decision.block_duration)

    # ── Tick phase 3: physics ─────────────────────────────

    def end_tick(self) -> None:
        if self.state not in (CombatState.HITSTUN, CombatState.KNOCKDOWN):
            if abs(self.vx) > 0.05:
                self.x += self.vx
                self.vx *= GROUND_FRICTION
            else:
                self.vx = 0.0
        self.apply_gravity()
        self.clamp_to_arena()
        self.check_invariants()

    def update(self, dt: float, frame: InputFrame,
               opponent_x: float | None = None) -> str | None:
        """Full tick for a human-controlled fighter."""
        action = None
        if self.begin_tick(dt, opponent_x):
            action = self.apply_input(frame)
        self.end_tick()
        return action

    # ── Actions ───────────────────────────────────────────

    def start_attack(self, name: str, special_cooldown: float = 0.0) -> None:
        attack = get_attack(name)
        self.active_attack = attack
        self.attack_frame = 0
        self.block_timer = 0.0
        self._set_state(CombatState.ATTACKING)
        if name == "special":
            self.special_charge = 0.0
            self.special_cooldown = special_cooldown

    def start_block(self, duration: float) -> bool:
        if not self.on_ground or not self.can_act:
            return False
        self.block_timer = duration
        self._set_state(CombatState.BLOCKING)
        return True

    def jump(self) -> bool:
        if not self.on_ground:
            return False
        self.vy = JUMP_FORCE
        self.on_ground = False
        if self.state != CombatState.ATTACKING:
            self.block_timer = 0.0
            self._set_state(CombatState.JUMPING)
        return True

    def face_toward(self, target_x: float) -> None:
        self.facing = 1 if self.x < target_x else -1

    # ── Receiving damage ──────────────────────────────────

    def take_damage(self, amount: int) -> int:
        """Lower health by *amount* (never below zero). Returns damage dealt."""
        amount = max(0, int(amount))
        before = self.health
        self.health = max(0, self.health - amount)
        logger.debug("%s health %d -> %d", self.name, before, self.health)
        return before - self.health

    def receive_hit(self, damage: int, hitstun: float, push_vx: float,
                    knockdown: bool = False, lift: float = 0.0) -> int:
        dealt = self.take_damage(damage)
        self.active_attack = None
        self.attack_frame = 0
        self.block_timer = 0.0
        self.vx = push_vx
        if knockdown:
            self.hitstun_timer = 0.0
            self.knockdown_timer = KNOCKDOWN_DURATION
            if lift:
                self.vy = lift
                self.on_ground = False
            self._set_state(CombatState.KNOCKDOWN)
        else:
            self.hitstun_timer = hitstun
            self._set_state(CombatState.HITSTUN)
        return dealt

    def receive_block(self, chip: int, push_vx: float) -> int:
        self.vx = push_vx
        return self.take_damage(chip)

    # ── Physics helpers ───────────────────────────────────

    def apply_gravity(self) -> None:
        if self.on_ground:
            return
        self.vy += GRAVITY
        self.y += self.vy
        if self.y >= GROUND_Y:
            self.y = float(GROUND_Y)
            self.vy = 0.0
            self.on_ground = True
            if self.state == CombatState.JUMPING:
                self._set_state(CombatState.IDLE)

    def clamp_to_arena(self) -> None:
        self.x = max(ARENA_LEFT, min(ARENA_RIGHT - self.width, self.x))

    # ── State helpers ─────────────────────────────────────

    def _free_state(self, moving: bool) -> CombatState:
        if not self.on_ground:
            return CombatState.JUMPING
        return CombatState.WALKING if moving else CombatState.IDLE

    def _recover(self) -> None:
        self._set_state(self._free_state(moving=False))

    def _set_state(self, state: CombatState) -> None:
        if state != self.state:
            self.state = state
            self.state_timer = 0.0

    # ── Invariants ────────────────────────────────────────

    def check_invariants(self) -> None:
        """Raise InvariantViolation (strict) or clamp and warn."""
        problems: list[str] = []
        if not 0 <= self.health <= self.max_health:
            problems.append(f"health {self.health} outside [0, {self.max_health}]")
        if not isinstance(self.state, CombatState):
            problems.append(f"unknown state {self.state!r}")
        elif (self.state == CombatState.ATTACKING) != (self.active_attack is not None):
            problems.append(f"state {self.state.value} with attack {self.active_attack}")
        if not 0 <= self.special_charge <= SPECIAL_CHARGE_MAX:
            problems.append(f"special charge {self.special_charge}")
        if not problems:
            return

        if self.strict:
            raise InvariantViolation(f"{self.name}: " + "; ".join(problems))
        logger.warning("%s invariant repaired: %s", self.name, "; ".join(problems))
        self.health = max(0, min(self.max_health, self.health))
        self.special_charge = max(0.0, min(SPECIAL_CHARGE_MAX, self.special_charge))
        if not isinstance(self.state, CombatState) or (
                (self.state == CombatState.ATTACKING) != (self.active_attack is not None)):
            self.active_attack = None
            self.attack_frame = 0
            self.state = self._free_state(moving=False)

    # ── Serialization helpers ─────────────────────────────

    def get_state_snapshot(self) -> dict[str, Any]:
        attack = self.active_attack
        return {
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "facing": self.facing,
            "state": self.state.value,
            "attack": attack.name if attack else None,
            "attack_frame": self.attack_frame,
            "attack_progress": (self.attack_frame / attack.total_frames
                                if attack else 0.0),
            "health": self.health,
            "max_health": self.max_health,
            "invincible": self.is_invincible,
            "on_ground": self.on_ground,
            "crouching": self.crouching,
            "special_charge": self.special_charge,
        }
