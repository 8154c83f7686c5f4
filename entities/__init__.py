"""entities package – Fighter state machine."""

from .fighter import Fighter, CombatState, InvariantViolation
