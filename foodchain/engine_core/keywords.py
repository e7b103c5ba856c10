"""
Keyword Primitives - Maps keywords and status flags onto behaviour.

A primitive is the canonical behavioural tag the engine actually checks:
- Several keywords and flags may map to the same primitive
- The active set is the union of flag-derived and keyword-derived primitives
- A dry-dropped Predator has its keywords suppressed, so only flags count

Numeric keywords ("Venom 2", "Pounce 1") carry a magnitude and map to no
primitive. Effective attack (Pack and Pride) is derived here and never
written back to the instance.
"""

from __future__ import annotations
from enum import Enum
from typing import TYPE_CHECKING

from .state import CardInstance

if TYPE_CHECKING:
    from .state import GameState


class Keyword(str, Enum):
    HASTE = "Haste"
    FREE_PLAY = "Free Play"
    HIDDEN = "Hidden"
    LURE = "Lure"
    INVISIBLE = "Invisible"
    PASSIVE = "Passive"
    BARRIER = "Barrier"
    ACUITY = "Acuity"
    IMMUNE = "Immune"
    EDIBLE = "Edible"
    INEDIBLE = "Inedible"
    SCAVENGE = "Scavenge"
    NEUROTOXIC = "Neurotoxic"
    NEUROTOXINED = "Neurotoxined"
    AMBUSH = "Ambush"
    TOXIC = "Toxic"
    POISONOUS = "Poisonous"
    HARMLESS = "Harmless"
    FROZEN = "Frozen"
    PACK = "Pack"
    HOWL = "Howl"
    WEB = "Web"
    WEBBED = "Webbed"
    VENOM = "Venom"
    PRIDE = "Pride"
    STALKED = "Stalked"
    POUNCE = "Pounce"


class Primitive(str, Enum):
    CANT_ATTACK = "cantAttack"
    CANT_BE_CONSUMED = "cantBeConsumed"
    CANT_CONSUME = "cantConsume"
    LOSES_ON_DAMAGE = "losesOnDamage"
    CANT_BE_TARGETED_BY_ATTACKS = "cantBeTargetedByAttacks"
    CANT_BE_TARGETED_BY_SPELLS = "cantBeTargetedBySpells"
    DIES_END_OF_TURN = "diesEndOfTurn"


KEYWORD_PRIMITIVES: dict[str, frozenset[Primitive]] = {
    Keyword.FROZEN.value: frozenset({
        Primitive.CANT_ATTACK,
        Primitive.CANT_BE_CONSUMED,
        Primitive.CANT_CONSUME,
    }),
    Keyword.WEBBED.value: frozenset({Primitive.CANT_ATTACK, Primitive.LOSES_ON_DAMAGE}),
    Keyword.PASSIVE.value: frozenset({Primitive.CANT_ATTACK}),
    Keyword.HARMLESS.value: frozenset({Primitive.CANT_ATTACK}),
    Keyword.INEDIBLE.value: frozenset({Primitive.CANT_BE_CONSUMED}),
    Keyword.HIDDEN.value: frozenset({Primitive.CANT_BE_TARGETED_BY_ATTACKS}),
    Keyword.INVISIBLE.value: frozenset({
        Primitive.CANT_BE_TARGETED_BY_ATTACKS,
        Primitive.CANT_BE_TARGETED_BY_SPELLS,
    }),
    Keyword.NEUROTOXINED.value: frozenset({Primitive.DIES_END_OF_TURN}),
}

# Status flag attribute -> primitives while the flag is set
FLAG_PRIMITIVES: dict[str, frozenset[Primitive]] = {
    "frozen": KEYWORD_PRIMITIVES[Keyword.FROZEN.value],
    "webbed": KEYWORD_PRIMITIVES[Keyword.WEBBED.value],
    # Paralysis blocks attacking only; it never blocks consumption or targeting
    "paralyzed": frozenset({Primitive.CANT_ATTACK, Primitive.DIES_END_OF_TURN}),
}

PRIMITIVE_DESCRIPTIONS: dict[Primitive, str] = {
    Primitive.CANT_ATTACK: "Cannot declare attacks.",
    Primitive.CANT_BE_CONSUMED: "Cannot be eaten by a predator.",
    Primitive.CANT_CONSUME: "Cannot eat prey.",
    Primitive.LOSES_ON_DAMAGE: "Loses this status when it takes damage.",
    Primitive.CANT_BE_TARGETED_BY_ATTACKS: "Cannot be chosen as an attack target.",
    Primitive.CANT_BE_TARGETED_BY_SPELLS: "Cannot be chosen by spells or abilities.",
    Primitive.DIES_END_OF_TURN: "Dies at the end of its owner's turn.",
}

KEYWORD_DESCRIPTIONS: dict[Keyword, str] = {
    Keyword.HASTE: "Can attack the rival directly on the turn it is played.",
    Keyword.FREE_PLAY: "Does not count toward the one-card-per-turn limit.",
    Keyword.HIDDEN: "Cannot be targeted by attacks, but can be targeted by spells.",
    Keyword.LURE: "Rival's creatures must attack this creature if able.",
    Keyword.INVISIBLE: "Cannot be targeted by attacks or spells.",
    Keyword.PASSIVE: "Cannot attack but can still defend and be consumed.",
    Keyword.BARRIER: "Negates the first instance of damage taken.",
    Keyword.ACUITY: "Can target Hidden and Invisible creatures.",
    Keyword.IMMUNE: "Takes no damage from effects or combat.",
    Keyword.EDIBLE: "Can be consumed as prey; nutrition equals its attack.",
    Keyword.INEDIBLE: "Cannot be consumed.",
    Keyword.SCAVENGE: "May consume from the carrion pile when played.",
    Keyword.NEUROTOXIC: "Combat paralyzes the other creature until it dies next turn.",
    Keyword.NEUROTOXINED: "Poisoned; dies at the end of its owner's turn.",
    Keyword.AMBUSH: "When attacking, takes no combat damage and ignores defend reactions.",
    Keyword.TOXIC: "Kills any creature it damages in combat regardless of health.",
    Keyword.POISONOUS: "When defending, kills the attacker after combat.",
    Keyword.HARMLESS: "Cannot attack.",
    Keyword.FROZEN: "Cannot attack or be consumed. Thaws at the end of its owner's turn.",
    Keyword.PACK: "Gains +1 attack for each other active creature of its tribe.",
    Keyword.HOWL: "On play, buffs its tribe until end of turn.",
    Keyword.WEB: "On attack, webs the defender if it survives.",
    Keyword.WEBBED: "Cannot attack. Lost when the creature takes damage.",
    Keyword.VENOM: "At end of turn, deals damage to each webbed enemy creature.",
    Keyword.PRIDE: "Gains +1 attack for each other creature of its tribe with Pride.",
    Keyword.STALKED: "Marked by a predator; Pounce damages it at end of turn.",
    Keyword.POUNCE: "At end of turn, deals damage to each stalked enemy creature.",
}


def parse_keyword(keyword: str) -> tuple[str, int | None]:
    """Split 'Venom 2' into ('Venom', 2). Plain keywords return (name, None)."""
    name, _, suffix = keyword.strip().rpartition(" ")
    if name and suffix.isdigit():
        return name, int(suffix)
    return keyword.strip(), None


def are_abilities_active(instance: CardInstance | None) -> bool:
    """Dry-dropped predators have their keyword abilities suppressed."""
    if instance is None:
        return False
    if instance.is_predator and instance.dry_dropped:
        return False
    return True


def has_keyword(instance: CardInstance | None, keyword: Keyword | str) -> bool:
    if not are_abilities_active(instance):
        return False
    name = keyword.value if isinstance(keyword, Keyword) else keyword
    return any(parse_keyword(k)[0] == name for k in instance.keywords)


def keyword_magnitude(instance: CardInstance | None, keyword: Keyword | str) -> int:
    """
    Magnitude of a numeric keyword, 0 if absent.

    A bare numeric keyword ("Venom") counts as 1.
    """
    if not are_abilities_active(instance):
        return 0
    name = keyword.value if isinstance(keyword, Keyword) else keyword
    for k in instance.keywords:
        parsed_name, value = parse_keyword(k)
        if parsed_name == name:
            return value if value is not None else 1
    return 0


def get_active_primitives(instance: CardInstance | None) -> set[Primitive]:
    if instance is None:
        return set()

    primitives: set[Primitive] = set()
    for flag, implied in FLAG_PRIMITIVES.items():
        if getattr(instance, flag, False):
            primitives |= implied

    if are_abilities_active(instance):
        for k in instance.keywords:
            primitives |= KEYWORD_PRIMITIVES.get(parse_keyword(k)[0], frozenset())
    return primitives


def has_primitive(instance: CardInstance | None, primitive: Primitive) -> bool:
    return primitive in get_active_primitives(instance)


def cant_attack(instance: CardInstance | None) -> bool:
    return has_primitive(instance, Primitive.CANT_ATTACK)


def cant_be_consumed(instance: CardInstance | None) -> bool:
    return has_primitive(instance, Primitive.CANT_BE_CONSUMED)


def cant_consume(instance: CardInstance | None) -> bool:
    return has_primitive(instance, Primitive.CANT_CONSUME)


def loses_status_on_damage(instance: CardInstance | None) -> bool:
    return has_primitive(instance, Primitive.LOSES_ON_DAMAGE)


def is_hidden_from_attacks(instance: CardInstance | None) -> bool:
    return has_primitive(instance, Primitive.CANT_BE_TARGETED_BY_ATTACKS)


def is_hidden_from_spells(instance: CardInstance | None) -> bool:
    return has_primitive(instance, Primitive.CANT_BE_TARGETED_BY_SPELLS)


def has_active_barrier(instance: CardInstance | None) -> bool:
    """An unbroken barrier on a creature whose abilities are intact."""
    return instance is not None and instance.has_barrier and are_abilities_active(instance)


# ============================================================================
# Derived attack
# ============================================================================

def _field_others(instance: CardInstance, state: GameState, owner_index: int) -> list[CardInstance]:
    if owner_index is None or not 0 <= owner_index < len(state.players):
        return []
    return [
        c for c in state.players[owner_index].field
        if c is not None and c.instance_id != instance.instance_id
    ]


def calculate_pack_bonus(instance: CardInstance | None, state: GameState, owner_index: int) -> int:
    """+1 for each other same-tribe creature on the field with active abilities."""
    if instance is None or state is None or not has_keyword(instance, Keyword.PACK):
        return 0
    return sum(
        1 for c in _field_others(instance, state, owner_index)
        if c.tribe == instance.tribe and are_abilities_active(c)
    )


def calculate_pride_bonus(instance: CardInstance | None, state: GameState, owner_index: int) -> int:
    """+1 for each other same-tribe creature on the field with active Pride."""
    if instance is None or state is None or not has_keyword(instance, Keyword.PRIDE):
        return 0
    return sum(
        1 for c in _field_others(instance, state, owner_index)
        if c.tribe == instance.tribe and has_keyword(c, Keyword.PRIDE)
    )


def get_effective_attack(
    instance: CardInstance | None,
    state: GameState | None = None,
    owner_index: int | None = None,
) -> int:
    """current_atk plus Pack and Pride bonuses. Read-only."""
    if instance is None:
        return 0
    if state is None:
        return instance.current_atk
    if owner_index is None:
        owner_index = state.owner_of(instance)
    return (
        instance.current_atk
        + calculate_pack_bonus(instance, state, owner_index)
        + calculate_pride_bonus(instance, state, owner_index)
    )


def calculate_total_venom(state: GameState, player_index: int) -> int:
    return sum(keyword_magnitude(c, Keyword.VENOM) for c in state.players[player_index].field if c)


def calculate_total_pounce(state: GameState, player_index: int) -> int:
    return sum(keyword_magnitude(c, Keyword.POUNCE) for c in state.players[player_index].field if c)
