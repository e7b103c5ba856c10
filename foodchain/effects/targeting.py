"""
Ability targeting - which creatures, players and cards an effect may pick.

Rules for abilities (attacks have their own rules in engine_core.combat):
- Invisible blocks ability targeting unless the caster has Acuity
- Hidden does not block abilities
- Lure overrides Invisible
- If an enemy creature has Lure, enemy picks are restricted to Lure creatures
"""

from __future__ import annotations
import logging
from typing import Callable

from ..engine_core.keywords import Keyword, has_keyword, is_hidden_from_spells
from ..engine_core.state import CardInstance, GameState
from .context import EffectContext
from .selection import Candidate, TargetKind, TargetRef

logger = logging.getLogger(__name__)


def can_target_with_ability(target: CardInstance | None, caster: CardInstance | None) -> bool:
    if target is None:
        return False
    if has_keyword(target, Keyword.LURE):
        return True
    if is_hidden_from_spells(target):
        return caster is not None and has_keyword(caster, Keyword.ACUITY)
    return True


def filter_for_lure(targets: list[CardInstance]) -> list[CardInstance]:
    """If any target has Lure, only Lure targets remain."""
    lured = [c for c in targets if has_keyword(c, Keyword.LURE)]
    return lured if lured else targets


def targetable_enemy_creatures(
    context: EffectContext,
    predicate: Callable[[CardInstance], bool] | None = None,
) -> list[CardInstance]:
    """Enemy creatures an ability may pick, Lure restriction applied."""
    creatures = [
        c for c in context.opponent.creatures()
        if can_target_with_ability(c, context.creature)
        and (predicate is None or predicate(c))
    ]
    return filter_for_lure(creatures)


def creature_candidate(card: CardInstance, owner_index: int) -> Candidate:
    return Candidate(
        label=card.name,
        value=TargetRef(TargetKind.CREATURE, owner_index, card.instance_id),
        description=f"{card.current_atk}/{card.current_hp}",
    )


def player_candidate(state: GameState, player_index: int) -> Candidate:
    player = state.players[player_index]
    return Candidate(
        label=player.name,
        value=TargetRef(TargetKind.PLAYER, player_index),
        description=f"{player.hp} HP",
    )


def _zone_candidates(cards: list[CardInstance], owner_index: int, kind: TargetKind) -> list[Candidate]:
    return [Candidate(label=c.name, value=TargetRef(kind, owner_index, c.instance_id)) for c in cards]


def build_target_candidates(group: str, context: EffectContext) -> list[Candidate]:
    """
    Candidates for a named target group.

    Unknown groups produce no candidates.
    """
    me, them = context.player_index, context.opponent_index
    state = context.state
    source = context.creature

    def friendly(predicate: Callable[[CardInstance], bool] = lambda c: True) -> list[Candidate]:
        return [creature_candidate(c, me) for c in context.player.creatures() if predicate(c)]

    def enemy(predicate: Callable[[CardInstance], bool] = lambda c: True) -> list[Candidate]:
        return [creature_candidate(c, them) for c in targetable_enemy_creatures(context, predicate)]

    def is_prey(c: CardInstance) -> bool:
        return c.is_prey

    if group == "friendly-creatures":
        return friendly()
    if group == "enemy-creatures":
        return enemy()
    if group == "all-creatures":
        return friendly() + enemy()
    if group == "friendly-entities":
        return [player_candidate(state, me)] + friendly()
    if group == "enemy-entities":
        return [player_candidate(state, them)] + enemy()
    if group == "all-entities":
        return [player_candidate(state, me), player_candidate(state, them)] + friendly() + enemy()
    if group == "rival":
        return [player_candidate(state, them)]
    if group == "self":
        return [player_candidate(state, me)]
    if group == "enemy-prey":
        return enemy(is_prey)
    if group == "friendly-prey":
        return friendly(is_prey)
    if group == "all-prey":
        return friendly(is_prey) + enemy(is_prey)
    if group == "friendly-predators":
        return friendly(lambda c: c.is_predator)
    if group == "other-creatures":
        return friendly(lambda c: c != source) + enemy(lambda c: c != source)
    if group == "carrion":
        return (
            _zone_candidates(context.player.carrion, me, TargetKind.CARRION)
            + _zone_candidates(context.opponent.carrion, them, TargetKind.CARRION)
        )
    if group == "friendly-carrion":
        return _zone_candidates(context.player.carrion, me, TargetKind.CARRION)
    if group == "hand-prey":
        return _zone_candidates([c for c in context.player.hand if c.is_prey], me, TargetKind.HAND)

    logger.warning("Unknown target group: %s", group)
    return []


def resolve_target(state: GameState, ref: TargetRef) -> CardInstance | None:
    """
    Look up the live instance a reference points at.

    Returns None if it has left the referenced zone (or for player refs).
    """
    if ref.kind == TargetKind.PLAYER or ref.instance_id is None:
        return None
    player = state.players[ref.owner_index]
    zone = {
        TargetKind.CREATURE: player.field,
        TargetKind.CARRION: player.carrion,
        TargetKind.HAND: player.hand,
        TargetKind.DECK: player.deck,
    }[ref.kind]
    for card in zone:
        if card is not None and card.instance_id == ref.instance_id:
            return card
    logger.debug("Stale target reference %s", ref)
    return None
