"""
Card definitions - the immutable catalog entries.

Definitions are validated with pydantic when the catalog is loaded.
Runtime state lives on CardInstance (engine_core.state), never here.
"""

from __future__ import annotations
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from .effect_dsl import EffectDefinition, TriggerKind


class CardType(str, Enum):
    PREY = "Prey"
    PREDATOR = "Predator"
    SPELL = "Spell"
    FREE_SPELL = "Free Spell"
    TRAP = "Trap"


class CardDefinition(BaseModel):
    """
    A card as printed.

    effects maps a trigger kind to one definition or an ordered list.
    """
    id: str = Field(description="Unique card id, e.g. 'fish-prey-goldfish'")
    name: str
    type: CardType
    tribe: str | None = None
    atk: int = 0
    hp: int = 0
    nutrition: int | None = Field(default=None, description="Prey only")
    keywords: list[str] = Field(default_factory=list)
    effects: dict[TriggerKind, EffectDefinition | list[EffectDefinition]] = Field(
        default_factory=dict
    )
    trigger: str | None = Field(default=None, description="Trap trigger condition")
    is_token: bool = False
    is_field_spell: bool = False

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("effects", mode="before")
    @classmethod
    def _drop_empty_effects(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {k: v for k, v in value.items() if v}
        return value

    @model_validator(mode="after")
    def _check_nutrition(self) -> CardDefinition:
        if self.nutrition is not None and self.type != CardType.PREY:
            raise ValueError(f"{self.id}: only Prey cards carry nutrition")
        return self

    @property
    def is_creature(self) -> bool:
        return self.type in (CardType.PREY, CardType.PREDATOR)


class CardCatalog(BaseModel):
    """The JSON document holding every card and token."""
    cards: list[CardDefinition] = Field(default_factory=list)
    tokens: list[CardDefinition] = Field(default_factory=list)
