"""
Effect Library - Generators keyed by EffectType.

Each generator is a pure function of (params, context) returning an
EffectResult. Generators never mutate state; narration happens when the
resolver applies the mutations.

Selection-producing generators follow one rule set (see _select):
- No eligible candidates: empty result
- Exactly one candidate: resolve it immediately
- Otherwise: return a PendingSelection; resume_selection completes it

The same completion function serves the auto-resolve path and resumption,
so both produce identical mutations.
"""

from __future__ import annotations
import logging
from functools import partial
from typing import Any, Callable

from ..card_schema.effect_dsl import EffectDefinition, EffectType, TriggerKind, as_definition
from ..engine_core.effect_result import (
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
    NegateAttack,
    ParalyzeCreature,
    PlayFromCarrion,
    RegenCreature,
    RemoveAbilities,
    ReturnToHand,
    StealCreature,
    SummonTokens,
    ThawCreature,
    TransformCard,
    WebCreature,
)
from ..engine_core.keywords import Keyword, has_keyword
from ..engine_core.state import CardInstance, GameState
from ..errors import UnknownEffectError
from .context import EffectContext
from .selection import Candidate, PendingSelection, SelectionKind, TargetKind, TargetRef
from .targeting import (
    build_target_candidates,
    creature_candidate,
    resolve_target,
    targetable_enemy_creatures,
)

logger = logging.getLogger(__name__)

Generator = Callable[[dict[str, Any], EffectContext], EffectResult]
Completion = Callable[[dict[str, Any], EffectContext, Candidate], EffectResult]

GENERATORS: dict[EffectType, Generator] = {}
COMPLETIONS: dict[EffectType, Completion] = {}


def generator(effect_type: EffectType) -> Callable[[Generator], Generator]:
    def register(fn: Generator) -> Generator:
        GENERATORS[effect_type] = fn
        return fn
    return register


def completion(effect_type: EffectType) -> Callable[[Completion], Completion]:
    def register(fn: Completion) -> Completion:
        COMPLETIONS[effect_type] = fn
        return fn
    return register


# ============================================================================
# Dispatch
# ============================================================================

def run_definition(definition: EffectDefinition, context: EffectContext) -> EffectResult:
    """Invoke the generator for one definition."""
    gen = GENERATORS.get(definition.type)
    if gen is None:
        raise UnknownEffectError(str(definition.type))
    return gen(definition.params, context)


def resolve_effect(spec: Any, context: EffectContext) -> EffectResult:
    """
    Run a definition or an ordered list of definitions.

    Mutations are merged in order. At the first selection the merged result
    is returned and the rest of the list is stored on the selection.
    """
    spec = as_definition(spec)
    if spec is None:
        return EffectResult.empty()
    definitions = spec if isinstance(spec, list) else [spec]

    merged = EffectResult.empty()
    for i, definition in enumerate(definitions):
        result = run_definition(definition, context)
        merged = merged.merge(result)
        if result.selection is not None:
            result.selection.remaining.extend(
                d.model_dump(mode="json") for d in definitions[i + 1:]
            )
            return merged
    return merged


def make_effect(effect_type: EffectType, **params: Any) -> Callable[[EffectContext], EffectResult]:
    """Bind a definition so it can be called with just a context."""
    return partial(run_definition, EffectDefinition(type=effect_type, params=params))


def resume_selection(state: GameState, selection: PendingSelection, choice: Any) -> EffectResult:
    """
    Complete a pending selection with the chosen candidate.

    The candidate is re-resolved against the current state by id, then the
    definitions left in selection.remaining continue in order.
    Raises InvalidSelectionError if the choice is not a candidate.
    """
    candidate = selection.find_candidate(choice)
    context = EffectContext.from_refs(state, selection.context_refs)

    complete = COMPLETIONS.get(selection.generator)
    if complete is None:
        raise UnknownEffectError(f"{selection.generator} (no completion)")
    result = complete(selection.params, context, candidate)

    if selection.remaining:
        if result.selection is not None:
            result.selection.remaining.extend(selection.remaining)
        else:
            result = result.merge(resolve_effect(selection.remaining, context))
    return result


def _select(
    effect_type: EffectType,
    params: dict[str, Any],
    context: EffectContext,
    candidates: list[Candidate],
    title: str,
    kind: SelectionKind = SelectionKind.TARGET,
) -> EffectResult:
    if not candidates:
        logger.debug("%s: no valid candidates", effect_type.value)
        return EffectResult.empty()

    complete = COMPLETIONS[effect_type]
    if len(candidates) == 1:
        return complete(params, context, candidates[0])

    return EffectResult.pending(PendingSelection(
        kind=kind,
        title=params.get("title", title),
        candidates=candidates,
        generator=effect_type,
        params=dict(params),
        player_index=context.player_index,
        context_refs=context.refs(),
    ))


# ============================================================================
# Helpers
# ============================================================================

def _context_creature(context: EffectContext, which: str) -> CardInstance | None:
    """Map 'self', 'attacker', 'defender', 'target' or 'killer' to an instance."""
    if which == "self":
        return context.creature
    if which in ("attacker", "defender", "target", "killer"):
        return getattr(context, which)
    logger.warning("Unknown context creature '%s'", which)
    return None


def _chosen_creature(context: EffectContext, candidate: Candidate) -> CardInstance | None:
    ref = candidate.value
    if not isinstance(ref, TargetRef):
        return None
    return resolve_target(context.state, ref)


def _targeted_response(context: EffectContext, target: CardInstance, owner_index: int) -> EffectResult | None:
    """A creature with an onTargeted reaction answers abilities aimed at it."""
    from ..engine_core.triggers import resolve_card_effect

    reaction_context = EffectContext(
        state=context.state,
        player_index=owner_index,
        creature=target,
        attacker=context.creature,
    )
    return resolve_card_effect(target, TriggerKind.ON_TARGETED, reaction_context)


def _enemy_candidates(context: EffectContext, predicate: Callable[[CardInstance], bool] | None = None) -> list[Candidate]:
    return [
        creature_candidate(c, context.opponent_index)
        for c in targetable_enemy_creatures(context, predicate)
    ]


# ============================================================================
# Players
# ============================================================================

@generator(EffectType.HEAL)
def heal(params: dict[str, Any], context: EffectContext) -> EffectResult:
    return EffectResult.of(Heal(amount=params["amount"], player_index=context.player_index))


@generator(EffectType.DRAW)
def draw(params: dict[str, Any], context: EffectContext) -> EffectResult:
    return EffectResult.of(Draw(count=params.get("count", 1), player_index=context.player_index))


@generator(EffectType.DAMAGE_RIVAL)
def damage_rival(params: dict[str, Any], context: EffectContext) -> EffectResult:
    return EffectResult.of(DamagePlayer(player_index=context.opponent_index, amount=params["amount"]))


@generator(EffectType.DAMAGE_BOTH_PLAYERS)
def damage_both_players(params: dict[str, Any], context: EffectContext) -> EffectResult:
    return EffectResult.of(DamageBothPlayers(amount=params["amount"]))


# ============================================================================
# Single creature, picked from the context
# ============================================================================

@generator(EffectType.DAMAGE_CREATURE)
def damage_creature(params: dict[str, Any], context: EffectContext) -> EffectResult:
    creature = _context_creature(context, params.get("target", "target"))
    if creature is None:
        return EffectResult.empty()
    return EffectResult.of(DamageCreature(
        creature=creature,
        amount=params["amount"],
        source_label=params.get("label", "damage"),
    ))


@generator(EffectType.KILL_CREATURE)
def kill_creature(params: dict[str, Any], context: EffectContext) -> EffectResult:
    creature = _context_creature(context, params.get("target", "target"))
    if creature is None:
        return EffectResult.empty()
    return EffectResult.of(KillCreature(creature=creature))


@generator(EffectType.GRANT_KEYWORD)
def grant_keyword(params: dict[str, Any], context: EffectContext) -> EffectResult:
    creature = _context_creature(context, params.get("target", "self"))
    if creature is None:
        return EffectResult.empty()
    return EffectResult.of(GrantKeyword(creature=creature, keyword=params["keyword"]))


@generator(EffectType.BUFF_STATS)
def buff_stats(params: dict[str, Any], context: EffectContext) -> EffectResult:
    creature = _context_creature(context, params.get("target", "self"))
    if creature is None:
        return EffectResult.empty()
    return EffectResult.of(BuffCreature(
        creature=creature,
        attack=params.get("attack", 0),
        health=params.get("health", 0),
    ))


@generator(EffectType.TRANSFORM_CARD)
def transform_card(params: dict[str, Any], context: EffectContext) -> EffectResult:
    creature = _context_creature(context, params.get("target", "self"))
    if creature is None:
        return EffectResult.empty()
    return EffectResult.of(TransformCard(creature=creature, card_id=params["card_id"]))


@generator(EffectType.REGEN_SELF)
def regen_self(params: dict[str, Any], context: EffectContext) -> EffectResult:
    if context.creature is None:
        return EffectResult.empty()
    return EffectResult.of(RegenCreature(creature=context.creature))


@generator(EffectType.REMOVE_ABILITIES)
def remove_abilities(params: dict[str, Any], context: EffectContext) -> EffectResult:
    creature = _context_creature(context, params.get("target", "target"))
    if creature is None:
        return EffectResult.empty()
    return EffectResult.of(RemoveAbilities(creature=creature))


# ============================================================================
# Cards and zones
# ============================================================================

@generator(EffectType.SUMMON_TOKENS)
def summon_tokens(params: dict[str, Any], context: EffectContext) -> EffectResult:
    return EffectResult.of(SummonTokens(
        token_ids=list(params["token_ids"]),
        player_index=context.player_index,
    ))


@generator(EffectType.ADD_TO_HAND)
def add_to_hand(params: dict[str, Any], context: EffectContext) -> EffectResult:
    count = params.get("count", 1)
    return EffectResult.of(*[
        AddToHand(card_id=params["card_id"], player_index=context.player_index)
        for _ in range(count)
    ])


@generator(EffectType.SELECT_CARD_TO_DISCARD)
def select_card_to_discard(params: dict[str, Any], context: EffectContext) -> EffectResult:
    candidates = [
        Candidate(label=c.name, value=TargetRef(TargetKind.HAND, context.player_index, c.instance_id))
        for c in context.player.hand
    ]
    return _select(EffectType.SELECT_CARD_TO_DISCARD, params, context, candidates, "Choose a card to discard")


@completion(EffectType.SELECT_CARD_TO_DISCARD)
def _complete_discard(params: dict[str, Any], context: EffectContext, candidate: Candidate) -> EffectResult:
    card = resolve_target(context.state, candidate.value)
    if card is None:
        return EffectResult.empty()
    return EffectResult.of(DiscardCards(player_index=candidate.value.owner_index, cards=[card]))


@generator(EffectType.TUTOR_FROM_DECK)
def tutor_from_deck(params: dict[str, Any], context: EffectContext) -> EffectResult:
    card_type = params.get("card_type")
    candidates = [
        Candidate(label=c.name, value=TargetRef(TargetKind.DECK, context.player_index, c.instance_id))
        for c in context.player.deck
        if card_type is None or c.card_type.value == card_type
    ]
    return _select(EffectType.TUTOR_FROM_DECK, params, context, candidates, "Choose a card from your deck")


@completion(EffectType.TUTOR_FROM_DECK)
def _complete_tutor(params: dict[str, Any], context: EffectContext, candidate: Candidate) -> EffectResult:
    card = resolve_target(context.state, candidate.value)
    if card is None:
        return EffectResult.empty()
    return EffectResult.of(MoveDeckCardToHand(player_index=candidate.value.owner_index, card=card))


# ============================================================================
# Targeted selections
# ============================================================================

def _creature_completion(
    build: Callable[[dict[str, Any], EffectContext, CardInstance], EffectResult],
) -> Completion:
    """Wrap a per-creature builder with stale-reference and onTargeted handling."""
    def complete(params: dict[str, Any], context: EffectContext, candidate: Candidate) -> EffectResult:
        creature = _chosen_creature(context, candidate)
        if creature is None:
            return EffectResult.empty()
        if candidate.value.owner_index != context.player_index:
            reaction = _targeted_response(context, creature, candidate.value.owner_index)
            if reaction is not None:
                return reaction
        return build(params, context, creature)
    return complete


@generator(EffectType.DESTROY)
def destroy(params: dict[str, Any], context: EffectContext) -> EffectResult:
    candidates = build_target_candidates(params.get("group", "enemy-creatures"), context)
    candidates = [c for c in candidates if c.value.kind == TargetKind.CREATURE]
    return _select(EffectType.DESTROY, params, context, candidates, "Choose a creature to destroy")


COMPLETIONS[EffectType.DESTROY] = _creature_completion(
    lambda params, context, creature: EffectResult.of(DestroyCreature(creature=creature))
)


@generator(EffectType.ADD_KEYWORD)
def add_keyword(params: dict[str, Any], context: EffectContext) -> EffectResult:
    candidates = build_target_candidates(params.get("group", "friendly-creatures"), context)
    return _select(
        EffectType.ADD_KEYWORD, params, context, candidates,
        f"Choose a creature to gain {params.get('keyword')}",
    )


COMPLETIONS[EffectType.ADD_KEYWORD] = _creature_completion(
    lambda params, context, creature: EffectResult.of(
        GrantKeyword(creature=creature, keyword=params["keyword"])
    )
)


@generator(EffectType.BUFF)
def buff(params: dict[str, Any], context: EffectContext) -> EffectResult:
    candidates = build_target_candidates(params.get("group", "friendly-creatures"), context)
    return _select(EffectType.BUFF, params, context, candidates, "Choose a creature to buff")


COMPLETIONS[EffectType.BUFF] = _creature_completion(
    lambda params, context, creature: EffectResult.of(BuffCreature(
        creature=creature,
        attack=params.get("attack", 0),
        health=params.get("health", 0),
    ))
)


@generator(EffectType.SELECT_ENEMY_TO_KILL)
def select_enemy_to_kill(params: dict[str, Any], context: EffectContext) -> EffectResult:
    return _select(
        EffectType.SELECT_ENEMY_TO_KILL, params, context,
        _enemy_candidates(context), "Choose an enemy creature to kill",
    )


COMPLETIONS[EffectType.SELECT_ENEMY_TO_KILL] = _creature_completion(
    lambda params, context, creature: EffectResult.of(KillCreature(creature=creature))
)


@generator(EffectType.SELECT_CREATURE_FOR_DAMAGE)
def select_creature_for_damage(params: dict[str, Any], context: EffectContext) -> EffectResult:
    candidates = build_target_candidates(params.get("group", "all-creatures"), context)
    return _select(
        EffectType.SELECT_CREATURE_FOR_DAMAGE, params, context, candidates,
        f"Choose a creature to take {params['amount']} damage",
    )


COMPLETIONS[EffectType.SELECT_CREATURE_FOR_DAMAGE] = _creature_completion(
    lambda params, context, creature: EffectResult.of(DamageCreature(
        creature=creature, amount=params["amount"], source_label=params.get("label", "damage"),
    ))
)


@generator(EffectType.SELECT_ENEMY_TO_FREEZE)
def select_enemy_to_freeze(params: dict[str, Any], context: EffectContext) -> EffectResult:
    return _select(
        EffectType.SELECT_ENEMY_TO_FREEZE, params, context,
        _enemy_candidates(context, lambda c: not c.frozen), "Choose an enemy creature to freeze",
    )


COMPLETIONS[EffectType.SELECT_ENEMY_TO_FREEZE] = _creature_completion(
    lambda params, context, creature: EffectResult.of(FreezeCreature(creature=creature))
)


@generator(EffectType.SELECT_ENEMY_TO_RETURN)
def select_enemy_to_return(params: dict[str, Any], context: EffectContext) -> EffectResult:
    return _select(
        EffectType.SELECT_ENEMY_TO_RETURN, params, context,
        _enemy_candidates(context), "Choose an enemy creature to return to hand",
    )


COMPLETIONS[EffectType.SELECT_ENEMY_TO_RETURN] = _creature_completion(
    lambda params, context, creature: EffectResult.of(ReturnToHand(creature=creature))
)


@generator(EffectType.STEAL_CREATURE)
def steal_creature(params: dict[str, Any], context: EffectContext) -> EffectResult:
    if context.player.empty_slot() is None:
        return EffectResult.empty()
    return _select(
        EffectType.STEAL_CREATURE, params, context,
        _enemy_candidates(context), "Choose an enemy creature to take",
    )


COMPLETIONS[EffectType.STEAL_CREATURE] = _creature_completion(
    lambda params, context, creature: EffectResult.of(StealCreature(
        creature=creature, from_index=context.opponent_index, to_index=context.player_index,
    ))
)


# ---------------------------------------------------------------------------
# select_from_group
# ---------------------------------------------------------------------------

@generator(EffectType.SELECT_FROM_GROUP)
def select_from_group(params: dict[str, Any], context: EffectContext) -> EffectResult:
    candidates = build_target_candidates(params["group"], context)
    return _select(EffectType.SELECT_FROM_GROUP, params, context, candidates, "Choose a target")


@completion(EffectType.SELECT_FROM_GROUP)
def _complete_select_from_group(params: dict[str, Any], context: EffectContext, candidate: Candidate) -> EffectResult:
    ref: TargetRef = candidate.value
    if ref.kind == TargetKind.CREATURE and ref.owner_index != context.player_index:
        creature = resolve_target(context.state, ref)
        if creature is not None:
            reaction = _targeted_response(context, creature, ref.owner_index)
            if reaction is not None:
                return reaction
    return apply_effect_to_selection(ref, params["effect"], context)


def apply_effect_to_selection(ref: TargetRef, effect: dict[str, Any], context: EffectContext) -> EffectResult:
    """
    Apply a verb map ({"damage": 2, "keyword": "Haste"}, ...) to a selected target.

    Several verbs may combine; each one that fits the target kind contributes.
    """
    mutations: list = []

    if ref.kind == TargetKind.PLAYER:
        if effect.get("damage"):
            mutations.append(DamagePlayer(player_index=ref.owner_index, amount=effect["damage"]))
        if effect.get("heal"):
            mutations.append(Heal(amount=effect["heal"], player_index=ref.owner_index))
        return EffectResult(mutations=mutations)

    card = resolve_target(context.state, ref)
    if card is None:
        return EffectResult.empty()

    if ref.kind == TargetKind.CREATURE:
        if effect.get("damage"):
            mutations.append(DamageCreature(
                creature=card, amount=effect["damage"], source_label=effect.get("label", "damage"),
            ))
        if effect.get("heal"):
            mutations.append(HealCreature(creature=card, amount=effect["heal"]))
        if effect.get("kill"):
            mutations.append(KillCreature(creature=card))
        if effect.get("buff"):
            mutations.append(BuffCreature(
                creature=card,
                attack=effect["buff"].get("attack", 0),
                health=effect["buff"].get("health", 0),
            ))
        if effect.get("keyword"):
            mutations.append(GrantKeyword(creature=card, keyword=effect["keyword"]))
        if effect.get("regen"):
            mutations.append(RegenCreature(creature=card))
        if effect.get("freeze"):
            mutations.append(FreezeCreature(creature=card))
        if effect.get("paralyze"):
            mutations.append(ParalyzeCreature(creature=card))
        if effect.get("remove_abilities"):
            mutations.append(RemoveAbilities(creature=card))
        if effect.get("return_to_hand"):
            mutations.append(ReturnToHand(creature=card))
        if effect.get("steal") and ref.owner_index != context.player_index:
            mutations.append(StealCreature(
                creature=card, from_index=ref.owner_index, to_index=context.player_index,
            ))
        if effect.get("consume") and context.creature is not None:
            mutations.append(ConsumeEnemyPrey(
                predator=context.creature, prey=card, opponent_index=ref.owner_index,
            ))
        if effect.get("copy_stats") and context.creature is not None:
            mutations.append(CopyStats(target=context.creature, source=card))
        if effect.get("copy_abilities") and context.creature is not None:
            mutations.append(CopyAbilities(target=context.creature, source=card))

    elif ref.kind == TargetKind.CARRION:
        if effect.get("add_to_hand"):
            mutations.append(AddCarrionToHand(card=card, owner_index=ref.owner_index))
        if effect.get("play") or effect.get("revive"):
            mutations.append(PlayFromCarrion(
                card=card, owner_index=ref.owner_index, player_index=context.player_index,
            ))
        if effect.get("copy_stats") and context.creature is not None:
            mutations.append(CopyStats(target=context.creature, source=card))
        if effect.get("copy_abilities") and context.creature is not None:
            mutations.append(CopyAbilities(target=context.creature, source=card))

    elif ref.kind == TargetKind.HAND:
        if effect.get("discard"):
            mutations.append(DiscardCards(player_index=ref.owner_index, cards=[card]))
        if effect.get("play"):
            mutations.append(PlayFromCarrion(
                card=card, owner_index=ref.owner_index, player_index=context.player_index,
            ))

    return EffectResult(mutations=mutations)


# ============================================================================
# Options
# ============================================================================

def _option_candidates(options: list[dict[str, Any]]) -> list[Candidate]:
    return [
        Candidate(label=o.get("label", f"Option {i + 1}"), value=i, description=o.get("description"))
        for i, o in enumerate(options)
    ]


@generator(EffectType.CHOOSE_OPTION)
def choose_option(params: dict[str, Any], context: EffectContext) -> EffectResult:
    return _select(
        EffectType.CHOOSE_OPTION, params, context,
        _option_candidates(params["options"]), "Choose an option", SelectionKind.OPTION,
    )


@completion(EffectType.CHOOSE_OPTION)
def _complete_choose_option(params: dict[str, Any], context: EffectContext, candidate: Candidate) -> EffectResult:
    option = params["options"][candidate.value]
    return resolve_effect(option.get("effect"), context)


@generator(EffectType.CHOICE)
def choice(params: dict[str, Any], context: EffectContext) -> EffectResult:
    return _select(
        EffectType.CHOICE, params, context,
        _option_candidates(params["choices"]), "Choose one", SelectionKind.OPTION,
    )


@completion(EffectType.CHOICE)
def _complete_choice(params: dict[str, Any], context: EffectContext, candidate: Candidate) -> EffectResult:
    picked = params["choices"][candidate.value]
    return resolve_effect({"type": picked["type"], "params": picked.get("params", {})}, context)


@generator(EffectType.CONDITIONAL)
def conditional(params: dict[str, Any], context: EffectContext) -> EffectResult:
    branch = "then" if evaluate_condition(params["condition"], context) else "else"
    return resolve_effect(params.get(branch), context)


def evaluate_condition(condition: Any, context: EffectContext) -> bool:
    """
    Evaluate a named condition.

    A condition is a name, or {"name": ..., "value": ...} for thresholds.
    """
    if isinstance(condition, str):
        name, value = condition, None
    else:
        name, value = condition.get("name"), condition.get("value")

    if name == "rival_has_creatures":
        return bool(context.opponent.creatures())
    if name == "rival_has_webbed":
        return any(c.webbed for c in context.opponent.creatures())
    if name == "self_hp_below":
        return context.player.hp < (value if value is not None else 0)
    if name == "hand_empty":
        return not context.player.hand
    if name == "field_full":
        return context.player.empty_slot() is None
    if name == "carrion_not_empty":
        return bool(context.player.carrion)

    logger.warning("Unknown condition '%s'", name)
    return False


# ============================================================================
# Field-wide
# ============================================================================

def _all_creatures(context: EffectContext) -> list[CardInstance]:
    return context.player.creatures() + context.opponent.creatures()


@generator(EffectType.DAMAGE_ALL_CREATURES)
def damage_all_creatures(params: dict[str, Any], context: EffectContext) -> EffectResult:
    return EffectResult.of(*[
        DamageCreature(creature=c, amount=params["amount"], source_label=params.get("label", "damage"))
        for c in _all_creatures(context)
    ])


@generator(EffectType.DAMAGE_ALL_ENEMY_CREATURES)
def damage_all_enemy_creatures(params: dict[str, Any], context: EffectContext) -> EffectResult:
    return EffectResult.of(*[
        DamageCreature(creature=c, amount=params["amount"], source_label=params.get("label", "damage"))
        for c in context.opponent.creatures()
    ])


@generator(EffectType.KILL_ALL)
def kill_all(params: dict[str, Any], context: EffectContext) -> EffectResult:
    scope = params.get("scope", "all")
    creatures = context.opponent.creatures() if scope == "enemy" else _all_creatures(context)
    return EffectResult.of(*[KillCreature(creature=c) for c in creatures])


@generator(EffectType.FREEZE_ALL_ENEMIES)
def freeze_all_enemies(params: dict[str, Any], context: EffectContext) -> EffectResult:
    return EffectResult.of(*[FreezeCreature(creature=c) for c in context.opponent.creatures()])


@generator(EffectType.REMOVE_FROZEN_FROM_FRIENDLIES)
def remove_frozen_from_friendlies(params: dict[str, Any], context: EffectContext) -> EffectResult:
    return EffectResult.of(*[ThawCreature(creature=c) for c in context.player.creatures() if c.frozen])


@generator(EffectType.RETURN_ALL_ENEMIES)
def return_all_enemies(params: dict[str, Any], context: EffectContext) -> EffectResult:
    return EffectResult.of(*[ReturnToHand(creature=c) for c in context.opponent.creatures()])


@generator(EffectType.KILL_ENEMY_TOKENS)
def kill_enemy_tokens(params: dict[str, Any], context: EffectContext) -> EffectResult:
    return EffectResult.of(*[KillCreature(creature=c) for c in context.opponent.creatures() if c.is_token])


@generator(EffectType.REGEN_OTHER_CREATURES)
def regen_other_creatures(params: dict[str, Any], context: EffectContext) -> EffectResult:
    return EffectResult.of(*[
        RegenCreature(creature=c) for c in context.player.creatures() if c != context.creature
    ])


# ============================================================================
# Reactions
# ============================================================================

@generator(EffectType.NEGATE_ATTACK)
def negate_attack(params: dict[str, Any], context: EffectContext) -> EffectResult:
    return EffectResult.of(NegateAttack())


def _attacker_effect(build: Callable[[CardInstance, dict[str, Any]], Any]) -> Generator:
    def gen(params: dict[str, Any], context: EffectContext) -> EffectResult:
        if context.attacker is None:
            return EffectResult.empty()
        return EffectResult.of(build(context.attacker, params))
    return gen


GENERATORS[EffectType.KILL_ATTACKER] = _attacker_effect(
    lambda attacker, params: KillCreature(creature=attacker)
)
GENERATORS[EffectType.DEAL_DAMAGE_TO_ATTACKER] = _attacker_effect(
    lambda attacker, params: DamageCreature(
        creature=attacker, amount=params["amount"], source_label=params.get("label", "damage"),
    )
)
GENERATORS[EffectType.FREEZE_ATTACKER] = _attacker_effect(
    lambda attacker, params: FreezeCreature(creature=attacker)
)
GENERATORS[EffectType.WEB_ATTACKER] = _attacker_effect(
    lambda attacker, params: WebCreature(creature=attacker)
)
GENERATORS[EffectType.APPLY_NEUROTOXIC_TO_ATTACKER] = _attacker_effect(
    lambda attacker, params: ParalyzeCreature(creature=attacker)
)


# ============================================================================
# Arachnid
# ============================================================================

@generator(EffectType.WEB_ALL_ENEMIES)
def web_all_enemies(params: dict[str, Any], context: EffectContext) -> EffectResult:
    return EffectResult.of(*[WebCreature(creature=c) for c in context.opponent.creatures()])


@generator(EffectType.DAMAGE_WEBBED)
def damage_webbed(params: dict[str, Any], context: EffectContext) -> EffectResult:
    return EffectResult.of(*[
        DamageCreature(creature=c, amount=params["amount"], source_label="venom")
        for c in context.opponent.creatures()
        if c.webbed or has_keyword(c, Keyword.WEBBED)
    ])


@generator(EffectType.DRAW_PER_WEBBED)
def draw_per_webbed(params: dict[str, Any], context: EffectContext) -> EffectResult:
    count = sum(1 for c in context.opponent.creatures() if c.webbed)
    if count == 0:
        return EffectResult.empty()
    return EffectResult.of(Draw(count=count, player_index=context.player_index))


_missing = set(EffectType) - set(GENERATORS)
if _missing:
    raise RuntimeError(f"Effect types without generators: {sorted(t.value for t in _missing)}")
