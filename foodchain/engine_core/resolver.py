"""
Effect Resolver - Applies effect results to the game state.

This is the only place generator output touches the state:
- Mutations are applied strictly in list order
- Dispatch goes through a handler table keyed by MutationKind
- None or an empty result is a no-op
- A handler may return a PendingSelection (token onPlay, discard effects);
  the first one is returned to the caller
"""

from __future__ import annotations
import logging
from typing import Callable, TYPE_CHECKING

from ..card_schema.effect_dsl import TriggerKind
from ..config import MAX_PLAYER_HP, PARALYSIS_DURATION
from ..errors import RulesEngineError
from .effect_result import (
    AddCarrionToHand,
    AddToHand,
    BuffCreature,
    ConsumeEnemyPrey,
    CopyAbilities,
    CopyStats,
    DamageBothPlayers,
    DamageCreature,
    DamagePlayer,
    DestroyCreature,
    DiscardCards,
    Draw,
    EffectResult,
    FreezeCreature,
    GrantKeyword,
    Heal,
    HealCreature,
    KillCreature,
    MoveDeckCardToHand,
    MutationKind,
    NegateAttack,
    ParalyzeCreature,
    PlayFromCarrion,
    RegenCreature,
    RemoveAbilities,
    RemoveKeyword,
    ReturnToHand,
    StealCreature,
    SummonTokens,
    ThawCreature,
    TransformCard,
    WebCreature,
)
from .keywords import Keyword, has_active_barrier, has_keyword, loses_status_on_damage
from .state import CardInstance, GameState, LogCategory, VisualEffect

if TYPE_CHECKING:
    from ..cards.registry import CardRegistry
    from ..effects.context import EffectContext
    from ..effects.selection import PendingSelection

logger = logging.getLogger(__name__)


def resolve_effect_result(
    state: GameState,
    result: EffectResult | None,
    context: EffectContext | None = None,
) -> PendingSelection | None:
    """
    Apply every mutation of result, in order.

    Returns the result's own selection if it carries one, otherwise the
    first selection raised while applying (e.g. a summoned token's onPlay).
    Only one selection can be pending; any other is logged and dropped.
    """
    if result is None or result.is_empty:
        return None

    player_index = context.player_index if context is not None else state.active_player_index
    raised: PendingSelection | None = None

    for mutation in result.mutations:
        handler = _HANDLERS[mutation.kind]
        selection = handler(state, mutation, player_index)
        if selection is None:
            continue
        if raised is None:
            raised = selection
        else:
            _drop_selection(selection, raised)

    if result.selection is not None and raised is not None:
        _drop_selection(raised, result.selection)
    return result.selection or raised


def _drop_selection(dropped: PendingSelection, kept: PendingSelection) -> None:
    logger.warning(
        "Dropping selection '%s' (%s): '%s' is already pending",
        dropped.title, dropped.generator.value, kept.title,
    )


def _registry(state: GameState) -> CardRegistry:
    if state.registry is None:
        raise RulesEngineError("No card registry attached to the game state")
    return state.registry


def _on_field(state: GameState, creature: CardInstance) -> bool:
    if state.find_card_slot(creature) is None:
        logger.debug("Skipping mutation on %s: not on the field", creature.name)
        return False
    return True


def _fire(state: GameState, instance: CardInstance, trigger: TriggerKind, player_index: int) -> PendingSelection | None:
    from .triggers import fire_trigger
    return fire_trigger(state, instance, trigger, player_index)


# ============================================================================
# Players
# ============================================================================

def _apply_heal(state: GameState, m: Heal, player_index: int) -> None:
    idx = m.player_index if m.player_index is not None else player_index
    player = state.players[idx]
    healed = max(player.hp, min(MAX_PLAYER_HP, player.hp + m.amount))
    if healed == player.hp:
        return None
    state.log_message(f"{player.name} heals {healed - player.hp} HP ({healed}).", LogCategory.HEAL)
    player.hp = healed
    return None


def _damage_player(state: GameState, idx: int, amount: int) -> None:
    player = state.players[idx]
    player.hp -= amount
    state.log_message(f"{player.name} takes {amount} damage ({player.hp} HP).", LogCategory.DAMAGE)


def _apply_damage_player(state: GameState, m: DamagePlayer, player_index: int) -> None:
    _damage_player(state, m.player_index, m.amount)


def _apply_damage_both_players(state: GameState, m: DamageBothPlayers, player_index: int) -> None:
    for idx in range(len(state.players)):
        _damage_player(state, idx, m.amount)


# ============================================================================
# Creature stats
# ============================================================================

def apply_creature_damage(
    state: GameState,
    creature: CardInstance,
    amount: int,
    source_label: str = "damage",
) -> int:
    """
    Damage a creature, honouring Immune and Barrier.

    Returns the health actually lost (0 when blocked).
    """
    if amount <= 0:
        return 0
    if has_keyword(creature, Keyword.IMMUNE):
        state.log_message(f"{creature.name} is immune to {source_label}.", LogCategory.INFO)
        return 0
    if has_active_barrier(creature):
        creature.has_barrier = False
        state.log_message(f"{creature.name}'s barrier absorbs the {source_label}.", LogCategory.INFO)
        return 0

    creature.current_hp -= amount
    state.log_message(
        f"{creature.name} takes {amount} {source_label} ({creature.current_hp} HP).",
        LogCategory.DAMAGE,
    )
    if loses_status_on_damage(creature):
        creature.webbed = False
        if Keyword.WEBBED.value in creature.keywords:
            creature.keywords.remove(Keyword.WEBBED.value)
        state.log_message(f"{creature.name} breaks free of the web.", LogCategory.INFO)
    state.queue_visual_effect(VisualEffect(
        effect_type="damage", target_id=creature.instance_id, data={"amount": amount},
    ))
    return amount


def _apply_damage_creature(state: GameState, m: DamageCreature, player_index: int) -> None:
    if _on_field(state, m.creature):
        apply_creature_damage(state, m.creature, m.amount, m.source_label)


def _apply_kill_creature(state: GameState, m: KillCreature, player_index: int) -> None:
    if _on_field(state, m.creature):
        m.creature.current_hp = 0
        state.log_message(f"{m.creature.name} is destroyed.", LogCategory.DEATH)


def _apply_destroy_creature(state: GameState, m: DestroyCreature, player_index: int) -> None:
    owner = state.remove_from_field(m.creature)
    if owner is None:
        return None
    if not m.creature.is_token:
        state.players[owner].exile.append(m.creature)
    state.log_message(f"{m.creature.name} is exiled.", LogCategory.DEATH)
    return None


def _apply_buff_creature(state: GameState, m: BuffCreature, player_index: int) -> None:
    m.creature.current_atk += m.attack
    m.creature.current_hp += m.health
    category = LogCategory.BUFF if m.attack >= 0 and m.health >= 0 else LogCategory.DEBUFF
    state.log_message(
        f"{m.creature.name} gets {m.attack:+d}/{m.health:+d} "
        f"({m.creature.current_atk}/{m.creature.current_hp}).",
        category,
    )


def _apply_heal_creature(state: GameState, m: HealCreature, player_index: int) -> None:
    creature = m.creature
    creature.current_hp = max(creature.current_hp, min(creature.hp, creature.current_hp + m.amount))
    state.log_message(f"{creature.name} recovers ({creature.current_hp} HP).", LogCategory.HEAL)


def _apply_regen_creature(state: GameState, m: RegenCreature, player_index: int) -> None:
    m.creature.current_hp = max(m.creature.current_hp, m.creature.hp)
    state.log_message(f"{m.creature.name} regenerates.", LogCategory.HEAL)


# ============================================================================
# Keywords and statuses
# ============================================================================

# Keywords whose presence is mirrored by a status flag
_FLAG_KEYWORDS = {
    Keyword.BARRIER.value: "has_barrier",
    Keyword.FROZEN.value: "frozen",
    Keyword.WEBBED.value: "webbed",
}


def _apply_grant_keyword(state: GameState, m: GrantKeyword, player_index: int) -> None:
    creature = m.creature
    if m.keyword not in creature.keywords:
        creature.keywords.append(m.keyword)
    flag = _FLAG_KEYWORDS.get(m.keyword)
    if flag:
        setattr(creature, flag, True)
    state.log_message(f"{creature.name} gains {m.keyword}.", LogCategory.BUFF)


def _apply_remove_keyword(state: GameState, m: RemoveKeyword, player_index: int) -> None:
    creature = m.creature
    if m.keyword in creature.keywords:
        creature.keywords.remove(m.keyword)
    flag = _FLAG_KEYWORDS.get(m.keyword)
    if flag:
        setattr(creature, flag, False)
    state.log_message(f"{creature.name} loses {m.keyword}.", LogCategory.DEBUFF)


def _apply_remove_abilities(state: GameState, m: RemoveAbilities, player_index: int) -> None:
    creature = m.creature
    creature.keywords = []
    creature.effects = {}
    creature.has_barrier = False
    creature.abilities_cancelled = True
    state.log_message(f"{creature.name} loses its abilities.", LogCategory.DEBUFF)


def _apply_freeze(state: GameState, m: FreezeCreature, player_index: int) -> None:
    m.creature.frozen = True
    if m.dies_turn is not None:
        m.creature.frozen_dies_turn = m.dies_turn
    state.log_message(f"{m.creature.name} is frozen.", LogCategory.DEBUFF)


def _apply_thaw(state: GameState, m: ThawCreature, player_index: int) -> None:
    m.creature.frozen = False
    m.creature.frozen_dies_turn = None
    if Keyword.FROZEN.value in m.creature.keywords:
        m.creature.keywords.remove(Keyword.FROZEN.value)
    state.log_message(f"{m.creature.name} thaws.", LogCategory.INFO)


def _apply_paralyze(state: GameState, m: ParalyzeCreature, player_index: int) -> None:
    creature = m.creature
    creature.keywords = [Keyword.HARMLESS.value]
    creature.has_barrier = False
    creature.abilities_cancelled = True
    creature.paralyzed = True
    creature.paralyzed_until_turn = state.turn + PARALYSIS_DURATION
    state.log_message(f"{creature.name} is paralyzed.", LogCategory.DEBUFF)


def _apply_web(state: GameState, m: WebCreature, player_index: int) -> None:
    m.creature.webbed = True
    state.log_message(f"{m.creature.name} is caught in a web.", LogCategory.DEBUFF)


# ============================================================================
# Cards and zones
# ============================================================================

def _apply_draw(state: GameState, m: Draw, player_index: int) -> None:
    idx = m.player_index if m.player_index is not None else player_index
    player = state.players[idx]
    drawn = 0
    for _ in range(m.count):
        if not player.deck:
            state.log_message(f"{player.name}'s deck is empty; nothing to draw.", LogCategory.INFO)
            break
        card = player.deck.pop(0)
        player.hand.append(card)
        state.recently_drawn.append(card.instance_id)
        drawn += 1
    if drawn:
        state.log_message(f"{player.name} draws {drawn} card(s).", LogCategory.INFO)


def _apply_add_to_hand(state: GameState, m: AddToHand, player_index: int) -> None:
    idx = m.player_index if m.player_index is not None else player_index
    registry = _registry(state)
    instance = registry.create_card_instance(registry.get_any_by_id(m.card_id), state.turn)
    state.players[idx].hand.append(instance)
    state.log_message(f"{instance.name} is added to {state.players[idx].name}'s hand.", LogCategory.INFO)


def _apply_add_carrion_to_hand(state: GameState, m: AddCarrionToHand, player_index: int) -> None:
    carrion = state.players[m.owner_index].carrion
    if m.card not in carrion:
        return None
    carrion.remove(m.card)
    m.card.reset_to_base()
    state.players[player_index].hand.append(m.card)
    state.log_message(f"{m.card.name} is taken from carrion into hand.", LogCategory.INFO)
    return None


def _apply_discard(state: GameState, m: DiscardCards, player_index: int) -> PendingSelection | None:
    player = state.players[m.player_index]
    first: PendingSelection | None = None
    for card in m.cards:
        if card not in player.hand:
            continue
        player.hand.remove(card)
        player.carrion.append(card)
        state.log_message(f"{player.name} discards {card.name}.", LogCategory.INFO)
        selection = _fire(state, card, TriggerKind.DISCARD_EFFECT, m.player_index)
        if selection is not None and first is None:
            first = selection
    return first


def _apply_move_deck_card(state: GameState, m: MoveDeckCardToHand, player_index: int) -> None:
    player = state.players[m.player_index]
    if m.card not in player.deck:
        return None
    player.deck.remove(m.card)
    player.hand.append(m.card)
    state.log_message(f"{player.name} searches their deck for {m.card.name}.", LogCategory.INFO)
    return None


def _apply_return_to_hand(state: GameState, m: ReturnToHand, player_index: int) -> None:
    creature = m.creature
    owner = state.remove_from_field(creature)
    if owner is None:
        return None
    if creature.is_token:
        state.log_message(f"{creature.name} is a token and vanishes.", LogCategory.INFO)
        return None
    creature.reset_to_base()
    state.players[owner].hand.append(creature)
    state.log_message(f"{creature.name} returns to hand.", LogCategory.INFO)
    return None


def _apply_summon_tokens(state: GameState, m: SummonTokens, player_index: int) -> PendingSelection | None:
    idx = m.player_index if m.player_index is not None else player_index
    player = state.players[idx]
    registry = _registry(state)
    first: PendingSelection | None = None

    for token_id in m.token_ids:
        definition = registry.get_token_by_id(token_id)
        slot = player.empty_slot()
        if slot is None:
            state.log_message(f"No room to summon {definition.name}.", LogCategory.INFO)
            continue
        token = registry.create_card_instance(definition, state.turn)
        player.field[slot] = token
        state.log_message(f"{definition.name} token is summoned.", LogCategory.SUMMON)
        state.queue_visual_effect(VisualEffect(
            effect_type="summon", target_id=token.instance_id, owner_index=idx, slot_index=slot,
        ))
        selection = _fire(state, token, TriggerKind.ON_PLAY, idx)
        if selection is not None and first is None:
            first = selection
    return first


def _apply_transform(state: GameState, m: TransformCard, player_index: int) -> None:
    location = state.find_card_slot(m.creature)
    if location is None:
        return None
    owner, slot = location
    registry = _registry(state)
    replacement = registry.create_card_instance(registry.get_any_by_id(m.card_id), state.turn)
    replacement.summoned_turn = m.creature.summoned_turn
    state.players[owner].field[slot] = replacement
    state.log_message(f"{m.creature.name} transforms into {replacement.name}.", LogCategory.INFO)
    return None


def _apply_steal(state: GameState, m: StealCreature, player_index: int) -> None:
    slot = state.players[m.to_index].empty_slot()
    if slot is None or state.owner_of(m.creature) != m.from_index:
        return None
    state.remove_from_field(m.creature)
    m.creature.summoned_turn = state.turn
    m.creature.has_attacked = False
    state.players[m.to_index].field[slot] = m.creature
    state.log_message(
        f"{state.players[m.to_index].name} takes control of {m.creature.name}.", LogCategory.INFO
    )
    return None


def _apply_copy_stats(state: GameState, m: CopyStats, player_index: int) -> None:
    m.target.current_atk = m.source.atk
    m.target.current_hp = m.source.hp
    state.log_message(
        f"{m.target.name} copies {m.source.name}'s stats ({m.source.atk}/{m.source.hp}).",
        LogCategory.BUFF,
    )


def _apply_copy_abilities(state: GameState, m: CopyAbilities, player_index: int) -> None:
    for keyword in m.source.base_keywords:
        if keyword not in m.target.keywords:
            m.target.keywords.append(keyword)
    m.target.effects = {**m.target.effects, **m.source.effects}
    if Keyword.BARRIER.value in m.source.base_keywords:
        m.target.has_barrier = True
    state.log_message(f"{m.target.name} copies {m.source.name}'s abilities.", LogCategory.BUFF)


def _apply_play_from_carrion(state: GameState, m: PlayFromCarrion, player_index: int) -> PendingSelection | None:
    owner = state.players[m.owner_index]
    zone = owner.carrion if m.card in owner.carrion else owner.hand
    if m.card not in zone:
        return None
    player = state.players[m.player_index]
    slot = player.empty_slot()
    if slot is None:
        state.log_message(f"No room to play {m.card.name}.", LogCategory.INFO)
        return None
    zone.remove(m.card)
    m.card.reset_to_base()
    m.card.summoned_turn = state.turn
    player.field[slot] = m.card
    state.log_message(f"{m.card.name} is played onto the field.", LogCategory.SUMMON)
    return _fire(state, m.card, TriggerKind.ON_PLAY, m.player_index)


def _apply_consume_enemy_prey(state: GameState, m: ConsumeEnemyPrey, player_index: int) -> None:
    from .consumption import get_nutrition_value

    owner = state.remove_from_field(m.prey)
    if owner is None:
        return None
    state.players[owner].carrion.append(m.prey)
    nutrition = get_nutrition_value(m.prey)
    m.predator.current_atk += nutrition
    m.predator.current_hp += nutrition
    state.log_message(
        f"{m.predator.name} consumes {m.prey.name} for +{nutrition}/+{nutrition}.", LogCategory.BUFF
    )
    state.queue_visual_effect(VisualEffect(
        effect_type="consumption", source_id=m.predator.instance_id, target_id=m.prey.instance_id,
        owner_index=owner,
    ))
    return None


def _apply_negate_attack(state: GameState, m: NegateAttack, player_index: int) -> None:
    state.attack_negated = True
    state.log_message("The attack is negated.", LogCategory.COMBAT)


_HANDLERS: dict[MutationKind, Callable] = {
    MutationKind.HEAL: _apply_heal,
    MutationKind.DAMAGE_PLAYER: _apply_damage_player,
    MutationKind.DAMAGE_BOTH_PLAYERS: _apply_damage_both_players,
    MutationKind.DAMAGE_CREATURE: _apply_damage_creature,
    MutationKind.KILL_CREATURE: _apply_kill_creature,
    MutationKind.DESTROY_CREATURE: _apply_destroy_creature,
    MutationKind.BUFF_CREATURE: _apply_buff_creature,
    MutationKind.HEAL_CREATURE: _apply_heal_creature,
    MutationKind.REGEN_CREATURE: _apply_regen_creature,
    MutationKind.GRANT_KEYWORD: _apply_grant_keyword,
    MutationKind.REMOVE_KEYWORD: _apply_remove_keyword,
    MutationKind.REMOVE_ABILITIES: _apply_remove_abilities,
    MutationKind.FREEZE_CREATURE: _apply_freeze,
    MutationKind.THAW_CREATURE: _apply_thaw,
    MutationKind.PARALYZE_CREATURE: _apply_paralyze,
    MutationKind.WEB_CREATURE: _apply_web,
    MutationKind.DRAW: _apply_draw,
    MutationKind.ADD_TO_HAND: _apply_add_to_hand,
    MutationKind.ADD_CARRION_TO_HAND: _apply_add_carrion_to_hand,
    MutationKind.DISCARD_CARDS: _apply_discard,
    MutationKind.MOVE_DECK_CARD_TO_HAND: _apply_move_deck_card,
    MutationKind.RETURN_TO_HAND: _apply_return_to_hand,
    MutationKind.SUMMON_TOKENS: _apply_summon_tokens,
    MutationKind.TRANSFORM_CARD: _apply_transform,
    MutationKind.STEAL_CREATURE: _apply_steal,
    MutationKind.COPY_STATS: _apply_copy_stats,
    MutationKind.COPY_ABILITIES: _apply_copy_abilities,
    MutationKind.PLAY_FROM_CARRION: _apply_play_from_carrion,
    MutationKind.CONSUME_ENEMY_PREY: _apply_consume_enemy_prey,
    MutationKind.NEGATE_ATTACK: _apply_negate_attack,
}

_unhandled = set(MutationKind) - set(_HANDLERS)
if _unhandled:
    raise RuntimeError(f"Mutation kinds without handlers: {sorted(k.value for k in _unhandled)}")
