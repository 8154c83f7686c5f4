"""systems package – Attack catalog, input, escalation, hit resolution, hazard, VFX, HUD, rounds.

Only the leaf modules are re-exported here; entities.fighter imports from
this package, so modules that depend on Fighter are imported directly.
"""

from .attack_catalog import AttackDefinition, AttackHeight, ATTACKS, get_attack
from .input_source import Button, InputFrame, ButtonTracker, NEUTRAL
from .escalation import EscalationPolicy, constant_level
