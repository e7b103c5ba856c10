"""
Effect DSL - Declarative effect definitions for cards.

Card abilities are stored as data:
- A trigger kind (when the ability fires)
- One effect definition, or an ordered list of them
- Each definition names an EffectType plus its parameters

Key design decisions:
- Effect types and trigger kinds are closed enums
- Parameters are plain JSON-compatible values
- Nested effects (options, group selections, conditionals) are
  definitions themselves and are validated recursively
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, Field


class TriggerKind(str, Enum):
    """When a card's effect fires."""
    ON_PLAY = "onPlay"
    ON_CONSUME = "onConsume"
    ON_SLAIN = "onSlain"
    ON_DEFEND = "onDefend"
    ON_BEFORE_COMBAT = "onBeforeCombat"
    ON_AFTER_COMBAT = "onAfterCombat"
    ON_START = "onStart"
    ON_END = "onEnd"
    ON_TARGETED = "onTargeted"
    DISCARD_EFFECT = "discardEffect"

    # Non-creature cards
    SPELL_EFFECT = "effect"
    TRAP_EFFECT = "trapEffect"


# Triggers that come from a creature's abilities; suppressed when dry-dropped
ABILITY_TRIGGERS = frozenset({
    TriggerKind.ON_PLAY,
    TriggerKind.ON_CONSUME,
    TriggerKind.ON_SLAIN,
    TriggerKind.ON_DEFEND,
    TriggerKind.ON_BEFORE_COMBAT,
    TriggerKind.ON_AFTER_COMBAT,
    TriggerKind.ON_START,
    TriggerKind.ON_END,
    TriggerKind.ON_TARGETED,
})


class EffectType(str, Enum):
    """Registered effect generators."""
    # Players
    HEAL = "heal"
    DRAW = "draw"
    DAMAGE_RIVAL = "damage_rival"
    DAMAGE_BOTH_PLAYERS = "damage_both_players"

    # Single creature (context-relative)
    DAMAGE_CREATURE = "damage_creature"
    KILL_CREATURE = "kill_creature"
    GRANT_KEYWORD = "grant_keyword"
    BUFF_STATS = "buff_stats"
    TRANSFORM_CARD = "transform_card"
    REGEN_SELF = "regen_self"
    REMOVE_ABILITIES = "remove_abilities"

    # Cards and zones
    SUMMON_TOKENS = "summon_tokens"
    ADD_TO_HAND = "add_to_hand"
    SELECT_CARD_TO_DISCARD = "select_card_to_discard"
    TUTOR_FROM_DECK = "tutor_from_deck"

    # Targeted selections
    DESTROY = "destroy"
    ADD_KEYWORD = "add_keyword"
    BUFF = "buff"
    SELECT_FROM_GROUP = "select_from_group"
    SELECT_ENEMY_TO_KILL = "select_enemy_to_kill"
    SELECT_CREATURE_FOR_DAMAGE = "select_creature_for_damage"
    SELECT_ENEMY_TO_FREEZE = "select_enemy_to_freeze"
    SELECT_ENEMY_TO_RETURN = "select_enemy_to_return"
    STEAL_CREATURE = "steal_creature"

    # Options
    CHOOSE_OPTION = "choose_option"
    CHOICE = "choice"
    CONDITIONAL = "conditional"

    # Field-wide
    DAMAGE_ALL_CREATURES = "damage_all_creatures"
    DAMAGE_ALL_ENEMY_CREATURES = "damage_all_enemy_creatures"
    KILL_ALL = "kill_all"
    FREEZE_ALL_ENEMIES = "freeze_all_enemies"
    REMOVE_FROZEN_FROM_FRIENDLIES = "remove_frozen_from_friendlies"
    RETURN_ALL_ENEMIES = "return_all_enemies"
    KILL_ENEMY_TOKENS = "kill_enemy_tokens"
    REGEN_OTHER_CREATURES = "regen_other_creatures"

    # Reactions (traps, onDefend)
    NEGATE_ATTACK = "negate_attack"
    KILL_ATTACKER = "kill_attacker"
    DEAL_DAMAGE_TO_ATTACKER = "deal_damage_to_attacker"
    FREEZE_ATTACKER = "freeze_attacker"
    WEB_ATTACKER = "web_attacker"
    APPLY_NEUROTOXIC_TO_ATTACKER = "apply_neurotoxic_to_attacker"

    # Arachnid
    WEB_ALL_ENEMIES = "web_all_enemies"
    DAMAGE_WEBBED = "damage_webbed"
    DRAW_PER_WEBBED = "draw_per_webbed"


class EffectDefinition(BaseModel):
    """
    A single declarative effect.

    Examples:
    - EffectDefinition(type=EffectType.HEAL, params={"amount": 2})
    - EffectDefinition(type=EffectType.SUMMON_TOKENS, params={"token_ids": ["token-kit"]})
    """
    type: EffectType
    params: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}


EffectSpec = Union[EffectDefinition, list[EffectDefinition]]


def effect(effect_type: EffectType, **params: Any) -> EffectDefinition:
    """Shorthand for building a definition in code."""
    return EffectDefinition(type=effect_type, params=params)


def as_definition(raw: Any) -> EffectSpec | None:
    """
    Coerce a nested effect (dict, list of dicts or definition) into a spec.

    Nested effects inside params arrive as plain dicts from JSON.
    """
    if raw is None:
        return None
    if isinstance(raw, EffectDefinition):
        return raw
    if isinstance(raw, list):
        return [d for d in (as_definition(item) for item in raw) if d is not None]
    return EffectDefinition.model_validate(raw)
