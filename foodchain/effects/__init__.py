"""
Effects - generator library, selections and ability targeting.
"""

from .context import EffectContext
from .selection import Candidate, PendingSelection, SelectionKind, TargetKind, TargetRef
from .targeting import build_target_candidates, can_target_with_ability, filter_for_lure
from .library import (
    COMPLETIONS,
    GENERATORS,
    make_effect,
    resolve_effect,
    resume_selection,
    run_definition,
)

__all__ = [
    "EffectContext",
    "Candidate",
    "PendingSelection",
    "SelectionKind",
    "TargetKind",
    "TargetRef",
    "build_target_candidates",
    "can_target_with_ability",
    "filter_for_lure",
    "COMPLETIONS",
    "GENERATORS",
    "make_effect",
    "resolve_effect",
    "resume_selection",
    "run_definition",
]
