"""
Effect Results - Ordered lists of typed mutations.

Generators never touch the state. They describe what should happen as
mutation records, and the resolver applies them in list order:
- Every mutation kind is a MutationKind member with one dataclass
- An empty result is a valid no-op
- A result may carry one PendingSelection, which suspends the caller
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, TYPE_CHECKING

from .state import CardInstance

if TYPE_CHECKING:
    from ..effects.selection import PendingSelection


class MutationKind(Enum):
    # Players
    HEAL = "heal"
    DAMAGE_PLAYER = "damage_player"
    DAMAGE_BOTH_PLAYERS = "damage_both_players"

    # Creature stats
    DAMAGE_CREATURE = "damage_creature"
    KILL_CREATURE = "kill_creature"
    DESTROY_CREATURE = "destroy_creature"
    BUFF_CREATURE = "buff_creature"
    HEAL_CREATURE = "heal_creature"
    REGEN_CREATURE = "regen_creature"

    # Keywords and statuses
    GRANT_KEYWORD = "grant_keyword"
    REMOVE_KEYWORD = "remove_keyword"
    REMOVE_ABILITIES = "remove_abilities"
    FREEZE_CREATURE = "freeze_creature"
    THAW_CREATURE = "thaw_creature"
    PARALYZE_CREATURE = "paralyze_creature"
    WEB_CREATURE = "web_creature"

    # Cards and zones
    DRAW = "draw"
    ADD_TO_HAND = "add_to_hand"
    ADD_CARRION_TO_HAND = "add_carrion_to_hand"
    DISCARD_CARDS = "discard_cards"
    MOVE_DECK_CARD_TO_HAND = "move_deck_card_to_hand"
    RETURN_TO_HAND = "return_to_hand"
    SUMMON_TOKENS = "summon_tokens"
    TRANSFORM_CARD = "transform_card"
    STEAL_CREATURE = "steal_creature"
    COPY_STATS = "copy_stats"
    COPY_ABILITIES = "copy_abilities"
    PLAY_FROM_CARRION = "play_from_carrion"
    CONSUME_ENEMY_PREY = "consume_enemy_prey"

    # Combat
    NEGATE_ATTACK = "negate_attack"


@dataclass
class Heal:
    kind: ClassVar[MutationKind] = MutationKind.HEAL
    amount: int
    player_index: int | None = None  # None: the acting player


@dataclass
class DamagePlayer:
    kind: ClassVar[MutationKind] = MutationKind.DAMAGE_PLAYER
    player_index: int
    amount: int


@dataclass
class DamageBothPlayers:
    kind: ClassVar[MutationKind] = MutationKind.DAMAGE_BOTH_PLAYERS
    amount: int


@dataclass
class DamageCreature:
    kind: ClassVar[MutationKind] = MutationKind.DAMAGE_CREATURE
    creature: CardInstance
    amount: int
    source_label: str = "damage"


@dataclass
class KillCreature:
    kind: ClassVar[MutationKind] = MutationKind.KILL_CREATURE
    creature: CardInstance


@dataclass
class DestroyCreature:
    """Exile a creature outright (no carrion, no death trigger)."""
    kind: ClassVar[MutationKind] = MutationKind.DESTROY_CREATURE
    creature: CardInstance


@dataclass
class BuffCreature:
    kind: ClassVar[MutationKind] = MutationKind.BUFF_CREATURE
    creature: CardInstance
    attack: int = 0
    health: int = 0


@dataclass
class HealCreature:
    kind: ClassVar[MutationKind] = MutationKind.HEAL_CREATURE
    creature: CardInstance
    amount: int


@dataclass
class RegenCreature:
    """Restore a creature to its printed health."""
    kind: ClassVar[MutationKind] = MutationKind.REGEN_CREATURE
    creature: CardInstance


@dataclass
class GrantKeyword:
    kind: ClassVar[MutationKind] = MutationKind.GRANT_KEYWORD
    creature: CardInstance
    keyword: str


@dataclass
class RemoveKeyword:
    kind: ClassVar[MutationKind] = MutationKind.REMOVE_KEYWORD
    creature: CardInstance
    keyword: str


@dataclass
class RemoveAbilities:
    kind: ClassVar[MutationKind] = MutationKind.REMOVE_ABILITIES
    creature: CardInstance


@dataclass
class FreezeCreature:
    kind: ClassVar[MutationKind] = MutationKind.FREEZE_CREATURE
    creature: CardInstance
    dies_turn: int | None = None


@dataclass
class ThawCreature:
    kind: ClassVar[MutationKind] = MutationKind.THAW_CREATURE
    creature: CardInstance


@dataclass
class ParalyzeCreature:
    """Strip abilities, mark Harmless and paralyze until next turn."""
    kind: ClassVar[MutationKind] = MutationKind.PARALYZE_CREATURE
    creature: CardInstance


@dataclass
class WebCreature:
    kind: ClassVar[MutationKind] = MutationKind.WEB_CREATURE
    creature: CardInstance


@dataclass
class Draw:
    kind: ClassVar[MutationKind] = MutationKind.DRAW
    count: int
    player_index: int | None = None


@dataclass
class AddToHand:
    kind: ClassVar[MutationKind] = MutationKind.ADD_TO_HAND
    card_id: str
    player_index: int | None = None


@dataclass
class AddCarrionToHand:
    kind: ClassVar[MutationKind] = MutationKind.ADD_CARRION_TO_HAND
    card: CardInstance
    owner_index: int


@dataclass
class DiscardCards:
    kind: ClassVar[MutationKind] = MutationKind.DISCARD_CARDS
    player_index: int
    cards: list[CardInstance] = field(default_factory=list)


@dataclass
class MoveDeckCardToHand:
    kind: ClassVar[MutationKind] = MutationKind.MOVE_DECK_CARD_TO_HAND
    player_index: int
    card: CardInstance


@dataclass
class ReturnToHand:
    kind: ClassVar[MutationKind] = MutationKind.RETURN_TO_HAND
    creature: CardInstance


@dataclass
class SummonTokens:
    kind: ClassVar[MutationKind] = MutationKind.SUMMON_TOKENS
    token_ids: list[str]
    player_index: int | None = None


@dataclass
class TransformCard:
    kind: ClassVar[MutationKind] = MutationKind.TRANSFORM_CARD
    creature: CardInstance
    card_id: str


@dataclass
class StealCreature:
    kind: ClassVar[MutationKind] = MutationKind.STEAL_CREATURE
    creature: CardInstance
    from_index: int
    to_index: int


@dataclass
class CopyStats:
    kind: ClassVar[MutationKind] = MutationKind.COPY_STATS
    target: CardInstance
    source: CardInstance


@dataclass
class CopyAbilities:
    kind: ClassVar[MutationKind] = MutationKind.COPY_ABILITIES
    target: CardInstance
    source: CardInstance


@dataclass
class PlayFromCarrion:
    kind: ClassVar[MutationKind] = MutationKind.PLAY_FROM_CARRION
    card: CardInstance
    owner_index: int
    player_index: int


@dataclass
class ConsumeEnemyPrey:
    kind: ClassVar[MutationKind] = MutationKind.CONSUME_ENEMY_PREY
    predator: CardInstance
    prey: CardInstance
    opponent_index: int


@dataclass
class NegateAttack:
    kind: ClassVar[MutationKind] = MutationKind.NEGATE_ATTACK


Mutation = (
    Heal | DamagePlayer | DamageBothPlayers
    | DamageCreature | KillCreature | DestroyCreature | BuffCreature
    | HealCreature | RegenCreature | GrantKeyword | RemoveKeyword
    | RemoveAbilities | FreezeCreature | ThawCreature | ParalyzeCreature
    | WebCreature | Draw | AddToHand | AddCarrionToHand | DiscardCards
    | MoveDeckCardToHand | ReturnToHand | SummonTokens | TransformCard
    | StealCreature | CopyStats | CopyAbilities | PlayFromCarrion
    | ConsumeEnemyPrey | NegateAttack
)


@dataclass
class EffectResult:
    """
    Output of an effect generator.

    Contains:
    - mutations, applied in order by the resolver
    - at most one pending selection
    """
    mutations: list[Mutation] = field(default_factory=list)
    selection: PendingSelection | None = None

    @classmethod
    def empty(cls) -> EffectResult:
        return cls()

    @classmethod
    def of(cls, *mutations: Mutation) -> EffectResult:
        return cls(mutations=list(mutations))

    @classmethod
    def pending(cls, selection: PendingSelection) -> EffectResult:
        return cls(selection=selection)

    @property
    def is_empty(self) -> bool:
        return not self.mutations and self.selection is None

    @property
    def needs_selection(self) -> bool:
        return self.selection is not None

    def merge(self, other: EffectResult | None) -> EffectResult:
        """Concatenate mutations; the later selection wins if both carry one."""
        if other is None:
            return self
        return EffectResult(
            mutations=[*self.mutations, *other.mutations],
            selection=other.selection or self.selection,
        )

    def kinds(self) -> list[MutationKind]:
        return [m.kind for m in self.mutations]
