"""
settings.py - Game constants for Possessed Fighter.

All configurable values live here so they're easy to tweak
and easy to reference from any module.
"""

# ── Screen ────────────────────────────────────────────────
SCREEN_WIDTH = 512
SCREEN_HEIGHT = 448
FPS = 60
TITLE = "Possessed Fighter"
BG_COLOR = (10, 8, 24)

# ── Debug / invariants ────────────────────────────────────
# Raise on invariant breaks (python without -O); clamp and log otherwise.
STRICT_INVARIANTS = __debug__

# ── Arena ─────────────────────────────────────────────────
GROUND_Y = 340                 # feet line of a grounded fighter
ARENA_LEFT = 30
ARENA_RIGHT = 482
GRAVITY = 0.6                  # units / tick²
JUMP_FORCE = -12.0             # units / tick
MOVE_SPEED = 3.5               # units / tick
PUSH_BACK = 4.0
GROUND_FRICTION = 0.8          # vx decay outside stun states
BODY_OVERLAP_FRACTION = 0.35   # of combined width

# ── Fighter ───────────────────────────────────────────────
FIGHTER_WIDTH = 36
FIGHTER_HEIGHT = 64
MAX_HEALTH = 100
PLAYER_START_X = 120
OPPONENT_START_X = 380
PLAYER_NAME = "RYU"
OPPONENT_NAME = "KEN"
PLAYER_COLOR = (51, 102, 255)
OPPONENT_COLOR = (204, 51, 51)

BLOCK_HOLD_DURATION = 0.2      # seconds a held block survives release
KNOCKDOWN_DURATION = 0.8
KNOCKDOWN_INVINCIBILITY = 0.5
HITSTUN_DECAY = 0.9
KNOCKDOWN_DECAY = 0.85

SPECIAL_CHARGE_MAX = 100.0
SPECIAL_CHARGE_RATE = 10.0     # per second
SPECIAL_CHARGE_COST = 50.0     # minimum charge to throw a special
PLAYER_SPECIAL_COOLDOWN = 1.5
AI_SPECIAL_COOLDOWN = 2.0

# ── Attack table (frames at 60 fps) ──────────────────────
ATTACK_TABLE = {
    "punch":   {"damage": 8,  "range": 50.0, "startup": 4,  "active": 3,
                "recovery": 8,  "hitstun": 12, "height": "high"},
    "kick":    {"damage": 12, "range": 60.0, "startup": 6,  "active": 4,
                "recovery": 12, "hitstun": 16, "height": "low"},
    "special": {"damage": 20, "range": 80.0, "startup": 10, "active": 6,
                "recovery": 20, "hitstun": 24, "height": "mid"},
}
HITSTUN_FRAME_RATE = 60.0
ATTACK_BOX_HEIGHT_FRAC = 0.6
ATTACK_BOX_TOP_FRAC = 0.5      # box top sits this far above the feet line

# ── Hit resolution ────────────────────────────────────────
BLOCK_PUSH_MULT = 0.5
CHIP_DAMAGE_FRACTION = 0.15
FALSIFIED_DAMAGE_MULT = 1.3
KNOCKDOWN_PUSH_MULT = 2.0
KNOCKDOWN_LIFT = -6.0
COMBO_WINDOW = 0.8
SCORE_PER_DAMAGE = 10
SCORE_ROUND_WIN = 1000

# ── Rounds ────────────────────────────────────────────────
ROUND_TIME = 99.0
ROUND_START_DURATION = 2.0
ROUND_FIGHT_BANNER_AT = 0.5    # "FIGHT!" shown in the last half second
ROUND_END_DURATION = 2.5
WIN_ROUNDS = 2

# ── AI ────────────────────────────────────────────────────
AI_REACTION_TIME = 0.15
AI_OMNISCIENT_REACTION_TIME = 0.05
AI_APPROACH_DISTANCE = 80.0
AI_APPROACH_SPEED_MULT = 0.8
AI_RETREAT_DISTANCE = 40.0
AI_RETREAT_CHANCE = 0.4
AI_RETREAT_SPEED_MULT = 0.5
AI_ATTACK_DISTANCE = 80.0
AI_ATTACK_CHANCE = 0.15
AI_AGGRESSIVE_ATTACK_BONUS = 0.10
AI_PUNCH_WEIGHT = 0.40         # cumulative roll thresholds
AI_KICK_WEIGHT = 0.75
AI_JUMP_CHANCE = 0.02
AI_BLOCK_DISTANCE = 100.0
AI_BLOCK_CHANCE = 0.35
AI_OMNISCIENT_BLOCK_BONUS = 0.30
AI_COUNTER_BLOCK_DURATION = 0.3
AI_REACTIVE_BLOCK_DURATION = 0.4

# ── Escalation thresholds ─────────────────────────────────
ESCALATION_OMNISCIENT = 2
ESCALATION_FALSIFIED_DISPLAY = 3
ESCALATION_CHIP_DAMAGE = 3
ESCALATION_HAZARD = 4
DISPLAY_HEALTH_BONUS = 0.15
DISPLAY_HEALTH_WOBBLE = 0.05

# ── Hazard (third combatant) ──────────────────────────────
HAZARD_SPAWN_MIN = 10.0        # seconds after round setup
HAZARD_SPAWN_SPREAD = 15.0
HAZARD_LIFETIME = 8.0
HAZARD_TELEPORT_CHANCE = 0.02
HAZARD_CONTACT_RANGE = 50.0
HAZARD_CONTACT_CHANCE = 0.01
HAZARD_CONTACT_DAMAGE = 5
HAZARD_CONTACT_STUN = 0.2
HAZARD_CONTACT_PUSH = 3.0
HAZARD_WIDTH = 34
HAZARD_HEIGHT = 60

# ── Cosmetic effects ──────────────────────────────────────
HIT_SPARK_COUNT = 8
HIT_SPARK_SPEED = 5.0
SCREEN_SHAKE_HIT = 5.0
SCREEN_SHAKE_HAZARD = 8.0
SCREEN_SHAKE_DECAY = 0.9
POSSESSION_FLASH_CHANCE = 0.2
POSSESSION_FLASH_LIFE = 0.3
POSSESSION_WORDS = ("SUFFER", "PAIN", "MORE", "YES")
BLOOD_PARTICLE_COUNT = 5
BLOOD_SPEED = 6.0
BLOOD_GRAVITY = 0.3           # units / tick²
OMNISCIENT_WHISPER_CHANCE = 0.0004

# ── Colors (R, G, B) ─────────────────────────────────────
WHITE = (255, 255, 255)
GRAY = (51, 51, 51)
GREEN = (51, 204, 51)
RED = (204, 51, 51)
YELLOW = (255, 204, 0)
MAGENTA = (255, 0, 255)
SPARK_HIT_COLOR = (255, 204, 0)
SPARK_BLOCK_COLOR = (136, 170, 255)
SPARK_HAZARD_COLOR = (255, 0, 102)
FLASH_COLOR = (255, 0, 80)
BLOOD_COLOR = (136, 0, 0)
FLOOR_COLOR = (42, 42, 58)

# ── Health bar display ────────────────────────────────────
HEALTHBAR_WIDTH = 180
HEALTHBAR_HEIGHT = 16
HEALTHBAR_Y = 20
HEALTHBAR_GAP = 20
LOW_HEALTH_FRACTION = 0.3

# ── Font ──────────────────────────────────────────────────
FONT_SIZE = 22
SMALL_FONT_SIZE = 16
