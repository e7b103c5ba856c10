"""
Trigger Dispatcher - finds and runs a card's effect for a trigger kind.

Lookup order: the instance's own effect table, then its definition in the
registry (unless its abilities were cancelled). Nothing fires for a
cancelled instance, and ability triggers never fire for a dry-dropped
predator.
"""

from __future__ import annotations
import logging
from dataclasses import replace
from typing import Any, TYPE_CHECKING

from ..card_schema.effect_dsl import ABILITY_TRIGGERS, TriggerKind
from .effect_result import EffectResult
from .state import CardInstance, GameState

if TYPE_CHECKING:
    from ..cards.registry import CardRegistry
    from ..effects.context import EffectContext
    from ..effects.selection import PendingSelection

logger = logging.getLogger(__name__)


def get_effect_definition(
    instance: CardInstance,
    trigger: TriggerKind,
    registry: CardRegistry | None = None,
) -> Any:
    """The effect spec for a trigger, or None."""
    spec = instance.effects.get(trigger.value)
    if spec:
        return spec
    if instance.abilities_cancelled or registry is None:
        return None
    definition = registry.find(instance.card_id)
    if definition is None:
        return None
    return definition.effects.get(trigger)


def has_trigger(instance: CardInstance, trigger: TriggerKind, registry: CardRegistry | None = None) -> bool:
    return get_effect_definition(instance, trigger, registry) is not None


def is_suppressed(instance: CardInstance, trigger: TriggerKind) -> bool:
    if instance.abilities_cancelled:
        return True
    return trigger in ABILITY_TRIGGERS and instance.is_predator and instance.dry_dropped


def resolve_card_effect(
    instance: CardInstance,
    trigger: TriggerKind,
    context: EffectContext,
) -> EffectResult | None:
    """
    Generate the effect result for a trigger.

    Returns None when nothing should fire; the caller must then skip the
    resolver entirely.
    """
    from ..effects.library import resolve_effect

    if is_suppressed(instance, trigger):
        return None
    spec = get_effect_definition(instance, trigger, context.state.registry)
    if spec is None:
        return None

    if context.creature is None:
        context = replace(context, creature=instance)
    logger.debug("Firing %s for %s", trigger.value, instance.name)
    return resolve_effect(spec, context)


def fire_trigger(
    state: GameState,
    instance: CardInstance,
    trigger: TriggerKind,
    player_index: int,
    **refs: CardInstance | None,
) -> PendingSelection | None:
    """
    Resolve and apply a trigger in one step.

    refs may name attacker, defender, target or killer.
    Returns the pending selection, if the effect needs a choice.
    """
    from ..effects.context import EffectContext
    from .resolver import resolve_effect_result

    context = EffectContext(state=state, player_index=player_index, creature=instance, **refs)
    result = resolve_card_effect(instance, trigger, context)
    if result is None:
        return None
    return resolve_effect_result(state, result, context)
