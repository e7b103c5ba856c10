"""
Engine Core - Shared game state and the rules that mutate it.

The engine is the runtime that:
1. Holds GameState (players, zones, narration)
2. Answers keyword questions through behavioural primitives
3. Applies effect results via the resolver
4. Dispatches card triggers
5. Resolves consumption and combat
6. Runs end-of-turn keyword upkeep
"""

from .state import CardInstance, GamePhase, GameState, LogCategory, LogEntry, Player, VisualEffect
from .keywords import (
    Keyword,
    Primitive,
    KEYWORD_PRIMITIVES,
    are_abilities_active,
    calculate_pack_bonus,
    calculate_pride_bonus,
    calculate_total_pounce,
    calculate_total_venom,
    cant_attack,
    cant_be_consumed,
    cant_consume,
    get_active_primitives,
    get_effective_attack,
    has_keyword,
    has_primitive,
    keyword_magnitude,
    loses_status_on_damage,
)
from .effect_result import EffectResult, MutationKind
from .resolver import resolve_effect_result
from .triggers import fire_trigger, resolve_card_effect
from .consumption import can_consume, consume_prey, get_nutrition_value
from .combat import (
    AttackTarget,
    CombatOutcome,
    CombatPhase,
    CombatResolution,
    ValidTargets,
    cleanup_destroyed,
    continue_attack,
    get_valid_targets,
    resolve_attack,
    resolve_creature_combat,
    resolve_direct_attack,
)
from .upkeep import apply_end_of_turn_statuses, apply_pounce, apply_venom

__all__ = [
    "CardInstance",
    "GamePhase",
    "GameState",
    "LogCategory",
    "LogEntry",
    "Player",
    "VisualEffect",
    "Keyword",
    "Primitive",
    "KEYWORD_PRIMITIVES",
    "are_abilities_active",
    "calculate_pack_bonus",
    "calculate_pride_bonus",
    "calculate_total_pounce",
    "calculate_total_venom",
    "cant_attack",
    "cant_be_consumed",
    "cant_consume",
    "get_active_primitives",
    "get_effective_attack",
    "has_keyword",
    "has_primitive",
    "keyword_magnitude",
    "loses_status_on_damage",
    "EffectResult",
    "MutationKind",
    "resolve_effect_result",
    "fire_trigger",
    "resolve_card_effect",
    "can_consume",
    "consume_prey",
    "get_nutrition_value",
    "AttackTarget",
    "CombatOutcome",
    "CombatPhase",
    "CombatResolution",
    "ValidTargets",
    "cleanup_destroyed",
    "continue_attack",
    "get_valid_targets",
    "resolve_attack",
    "resolve_creature_combat",
    "resolve_direct_attack",
    "apply_end_of_turn_statuses",
    "apply_pounce",
    "apply_venom",
]
