"""
Engine configuration.

Rule constants live here so every subsystem agrees on them. A few AI
tuning knobs and the card data location can be overridden from the
environment.
"""

from __future__ import annotations
import os
from dataclasses import dataclass


# Rules of the game
MAX_PLAYER_HP = 10
STARTING_HP = 10
FIELD_SIZE = 3
TRAP_SLOTS = 3
PARALYSIS_DURATION = 1  # Paralysis expires at current turn + this

# Alternative card catalog (JSON)
CARD_DATA_PATH = os.getenv("FOODCHAIN_CARD_DATA", None)


@dataclass
class AIConfig:
    """
    Thresholds used by the threat detector and combat evaluator.
    """
    must_kill_score: int = int(os.getenv("FOODCHAIN_AI_MUST_KILL_SCORE", "60"))
    caution_score: int = 40
    critical_kill_bonus: int = 200
    must_kill_bonus: int = 25
    survival_kill_score: int = 500
    survival_soften_score: int = 300
    lethal_score: int = 1000
    min_plan_score: int = -50
