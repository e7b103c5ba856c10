"""
Consumption - a predator eating prey from the field or the carrion pile.

Consumed prey is not slain: no onSlain trigger fires, ever.
"""

from __future__ import annotations
from typing import Callable

from .keywords import Keyword, cant_be_consumed, cant_consume, has_keyword
from .state import CardInstance, GameState, LogCategory, VisualEffect


def get_nutrition_value(card: CardInstance) -> int:
    """An Edible predator feeds its current attack; anything else its nutrition."""
    if card.is_predator and has_keyword(card, Keyword.EDIBLE):
        return card.current_atk
    return card.nutrition or 0


def can_consume(predator: CardInstance, prey: CardInstance) -> bool:
    if predator is None or prey is None:
        return False
    if cant_consume(predator) or cant_be_consumed(prey):
        return False
    return prey.is_prey or (prey.is_predator and has_keyword(prey, Keyword.EDIBLE))


def consume_prey(
    predator: CardInstance,
    prey_list: list[CardInstance],
    carrion_list: list[CardInstance],
    state: GameState,
    player_index: int,
    on_broadcast: Callable[[GameState], None] | None = None,
) -> None:
    """
    Feed prey_list (from the field) and carrion_list to predator.

    The predator gains the summed nutrition in attack and health. Field
    prey go to their owner's carrion pile; carrion prey are removed from it.
    """
    if not prey_list and not carrion_list:
        return

    total = sum(get_nutrition_value(p) for p in [*prey_list, *carrion_list])
    predator.current_atk += total
    predator.current_hp += total

    for prey in prey_list:
        location = state.find_card_slot(prey)
        if location is None:
            continue
        owner_index, slot = location
        state.players[owner_index].field[slot] = None
        state.players[owner_index].carrion.append(prey)
        state.queue_visual_effect(VisualEffect(
            effect_type="consumption",
            source_id=predator.instance_id,
            target_id=prey.instance_id,
            owner_index=owner_index,
            slot_index=slot,
            data={"nutrition": get_nutrition_value(prey)},
        ))

    for prey in carrion_list:
        for player in state.players:
            if prey in player.carrion:
                player.carrion.remove(prey)
                break

    names = ", ".join(p.name for p in [*prey_list, *carrion_list])
    state.log_message(
        f"{state.players[player_index].name}'s {predator.name} consumes {names} "
        f"for +{total}/+{total}.",
        LogCategory.BUFF,
    )

    if on_broadcast is not None:
        on_broadcast(state)
