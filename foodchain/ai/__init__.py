"""
AI module - Combat decision-making.

Provides:
- ThreatDetector: Lethal checks, threat ranking and kill searches
- CombatEvaluator: Trade prediction, attack scoring and combat planning
"""

from .threat_detector import (
    DangerLevel,
    KillOptions,
    KillPriority,
    KillSolution,
    LethalCheck,
    MustKillTarget,
    SurvivalAnalysis,
    ThreatAssessment,
    ThreatDetector,
)
from .combat_evaluator import (
    AttackEvaluation,
    CombatEvaluator,
    CombatPlan,
    PlannedAttack,
    TargetChoice,
    TradeAnalysis,
    TradeOutcome,
)

__all__ = [
    "DangerLevel",
    "KillOptions",
    "KillPriority",
    "KillSolution",
    "LethalCheck",
    "MustKillTarget",
    "SurvivalAnalysis",
    "ThreatAssessment",
    "ThreatDetector",
    "AttackEvaluation",
    "CombatEvaluator",
    "CombatPlan",
    "PlannedAttack",
    "TargetChoice",
    "TradeAnalysis",
    "TradeOutcome",
]
