"""
End-of-turn keyword upkeep, run by the turn controller.

Order within a player's end step is the controller's call; each function
here is independent and leaves dead creatures for cleanup_destroyed.
"""

from __future__ import annotations

from .effect_result import DamageCreature, EffectResult
from .keywords import (
    Keyword,
    Primitive,
    calculate_total_pounce,
    calculate_total_venom,
    has_keyword,
    has_primitive,
)
from .resolver import resolve_effect_result
from .state import GameState, LogCategory


def apply_end_of_turn_statuses(state: GameState, player_index: int) -> list[str]:
    """
    Expire statuses on player_index's creatures.

    - Creatures whose frozen or paralysis deadline has arrived die
    - Creatures carrying diesEndOfTurn from Neurotoxined die
    - Surviving frozen creatures thaw

    Returns the names of creatures that died.
    """
    died: list[str] = []
    for creature in state.players[player_index].creatures():
        if creature.current_hp <= 0:
            continue

        doomed = (
            (creature.frozen and creature.frozen_dies_turn is not None
             and creature.frozen_dies_turn <= state.turn)
            or (creature.paralyzed and creature.paralyzed_until_turn is not None
                and creature.paralyzed_until_turn <= state.turn)
            or has_keyword(creature, Keyword.NEUROTOXINED)
        )
        if doomed:
            creature.current_hp = 0
            died.append(creature.name)
            state.log_message(f"{creature.name} succumbs at the end of the turn.", LogCategory.DEATH)
            continue

        if creature.frozen:
            creature.frozen = False
            creature.frozen_dies_turn = None
            if Keyword.FROZEN.value in creature.keywords:
                creature.keywords.remove(Keyword.FROZEN.value)
            state.log_message(f"{creature.name} thaws.", LogCategory.INFO)
    return died


def _damage_each(state: GameState, player_index: int, amount: int, marked, label: str) -> int:
    targets = [c for c in state.players[state.opponent_index(player_index)].creatures() if marked(c)]
    if amount <= 0 or not targets:
        return 0
    resolve_effect_result(state, EffectResult(mutations=[
        DamageCreature(creature=c, amount=amount, source_label=label) for c in targets
    ]))
    return len(targets)


def apply_venom(state: GameState, player_index: int) -> int:
    """Total Venom of player_index's field damages each webbed enemy. Returns targets hit."""
    return _damage_each(
        state, player_index, calculate_total_venom(state, player_index),
        lambda c: has_primitive(c, Primitive.LOSES_ON_DAMAGE), "venom",
    )


def apply_pounce(state: GameState, player_index: int) -> int:
    """Total Pounce of player_index's field damages each stalked enemy. Returns targets hit."""
    return _damage_each(
        state, player_index, calculate_total_pounce(state, player_index),
        lambda c: c.current_hp > 0 and has_keyword(c, Keyword.STALKED), "pounce",
    )
