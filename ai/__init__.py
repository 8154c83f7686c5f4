"""
ai package – Opponent decision making and match statistics.

Modules:
    ai_core  – AIBrain: reaction-delayed opponent with an input-reading mode
    stats    – Per-match statistics and health-trend report
"""
