"""
Card schema - declarative card and effect definitions.
"""

from .effect_dsl import (
    ABILITY_TRIGGERS,
    EffectDefinition,
    EffectSpec,
    EffectType,
    TriggerKind,
    as_definition,
    effect,
)
from .card_definition import CardCatalog, CardDefinition, CardType
from .validation import ValidationResult, load_catalog, validate_catalog

__all__ = [
    "ABILITY_TRIGGERS",
    "EffectDefinition",
    "EffectSpec",
    "EffectType",
    "TriggerKind",
    "as_definition",
    "effect",
    "CardCatalog",
    "CardDefinition",
    "CardType",
    "ValidationResult",
    "load_catalog",
    "validate_catalog",
]
