"""
Game State - Mutable state shared by every engine subsystem.

Design principles:
- One aggregate: players, zones, log and visual events live on GameState
- Mutable in place: the resolver, combat and consumption write directly
- Narration is data: log entries and visual effects are appended, never printed
- Card instances compare by instance_id, not by value
"""

from __future__ import annotations
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TYPE_CHECKING

from ..config import FIELD_SIZE, STARTING_HP
from ..card_schema.card_definition import CardType

if TYPE_CHECKING:
    from ..cards.registry import CardRegistry


class GamePhase(str, Enum):
    """Turn phases, owned by the turn controller."""
    START = "Start"
    DRAW = "Draw"
    MAIN_1 = "Main 1"
    BEFORE_COMBAT = "Before Combat"
    COMBAT = "Combat"
    MAIN_2 = "Main 2"
    END = "End"


class LogCategory(str, Enum):
    """Narration categories for the game log."""
    INFO = "info"
    COMBAT = "combat"
    DAMAGE = "damage"
    DEATH = "death"
    SUMMON = "summon"
    BUFF = "buff"
    DEBUFF = "debuff"
    HEAL = "heal"
    CHOICE = "choice"
    SPELL = "spell"


def new_instance_id() -> str:
    return uuid.uuid4().hex


@dataclass
class CardInstance:
    """
    A card in play.

    Note: This is a runtime instance, not the definition.
    The definition lives in the CardRegistry; card_id points back to it.
    """
    card_id: str
    name: str
    card_type: CardType
    instance_id: str = field(default_factory=new_instance_id)
    tribe: str | None = None

    # Printed stats
    atk: int = 0
    hp: int = 0
    nutrition: int = 0

    # Abilities
    keywords: list[str] = field(default_factory=list)
    base_keywords: list[str] = field(default_factory=list)
    effects: dict[str, Any] = field(default_factory=dict)  # TriggerKind value -> EffectSpec

    # Runtime stats
    current_atk: int = 0
    current_hp: int = 0

    # Status flags
    frozen: bool = False
    frozen_dies_turn: int | None = None
    paralyzed: bool = False
    paralyzed_until_turn: int | None = None
    webbed: bool = False
    has_barrier: bool = False
    has_attacked: bool = False
    dry_dropped: bool = False
    abilities_cancelled: bool = False
    is_token: bool = False
    summoned_turn: int = 0

    # Per-attack
    before_combat_fired: bool = False

    # Death bookkeeping
    died_in_combat: bool = False
    slain_by: str | None = None  # instance_id of the killer

    # Spells and traps
    trap_trigger: str | None = None
    is_field_spell: bool = False

    def __hash__(self):
        return hash(self.instance_id)

    def __eq__(self, other):
        if not isinstance(other, CardInstance):
            return False
        return self.instance_id == other.instance_id

    @property
    def is_creature(self) -> bool:
        return self.card_type in (CardType.PREY, CardType.PREDATOR)

    @property
    def is_predator(self) -> bool:
        return self.card_type == CardType.PREDATOR

    @property
    def is_prey(self) -> bool:
        return self.card_type == CardType.PREY

    @property
    def is_dead(self) -> bool:
        return self.current_hp <= 0

    def reset_to_base(self) -> None:
        """Restore printed stats and keywords, clearing every status."""
        self.current_atk = self.atk
        self.current_hp = self.hp
        self.keywords = list(self.base_keywords)
        self.frozen = False
        self.frozen_dies_turn = None
        self.paralyzed = False
        self.paralyzed_until_turn = None
        self.webbed = False
        self.has_barrier = "Barrier" in self.base_keywords
        self.has_attacked = False
        self.dry_dropped = False
        self.abilities_cancelled = False
        self.before_combat_fired = False
        self.died_in_combat = False
        self.slain_by = None


@dataclass
class Player:
    """
    State for a single player.

    The field always has FIELD_SIZE slots; an empty slot is None.
    """
    name: str
    hp: int = STARTING_HP
    hand: list[CardInstance] = field(default_factory=list)
    deck: list[CardInstance] = field(default_factory=list)
    carrion: list[CardInstance] = field(default_factory=list)
    exile: list[CardInstance] = field(default_factory=list)
    traps: list[CardInstance] = field(default_factory=list)

    # Per-turn flags
    cards_played_this_turn: int = 0

    # Declared last: the name shadows dataclasses.field in this class body
    field: list[CardInstance | None] = field(default_factory=lambda: [None] * FIELD_SIZE)

    def empty_slot(self) -> int | None:
        """Index of the first empty field slot, or None if the field is full."""
        for i, card in enumerate(self.field):
            if card is None:
                return i
        return None

    def creatures(self) -> list[CardInstance]:
        """Creatures currently on the field, in slot order."""
        return [c for c in self.field if c is not None and c.is_creature]

    def slot_of(self, instance: CardInstance) -> int | None:
        for i, card in enumerate(self.field):
            if card is not None and card.instance_id == instance.instance_id:
                return i
        return None


@dataclass
class LogEntry:
    """One line of game narration."""
    text: str
    category: LogCategory = LogCategory.INFO
    turn: int = 0


@dataclass
class VisualEffect:
    """
    A presentation event queued by the engine.

    Renderers drain state.visual_effects; the engine never reads them back.
    """
    effect_type: str  # "consumption", "damage", "summon", ...
    source_id: str | None = None
    target_id: str | None = None
    owner_index: int | None = None
    slot_index: int | None = None
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class FieldSpell:
    """A field spell and the creature it is bound to."""
    card: CardInstance
    owner_index: int


@dataclass
class GameState:
    """
    Complete game state at a point in time.

    Every mutation goes through the resolver, combat or consumption entry points.
    """
    players: list[Player] = field(default_factory=list)
    turn: int = 1
    phase: GamePhase = GamePhase.MAIN_1
    active_player_index: int = 0

    # Narration
    log: list[LogEntry] = field(default_factory=list)
    visual_effects: list[VisualEffect] = field(default_factory=list)

    # Bookkeeping read by the turn controller
    recently_drawn: list[str] = field(default_factory=list)
    field_spell: FieldSpell | None = None
    last_played_creature: str | None = None
    attack_negated: bool = False

    registry: CardRegistry | None = None

    @classmethod
    def create(
        cls,
        player_names: tuple[str, str] = ("Player 1", "Player 2"),
        registry: CardRegistry | None = None,
    ) -> GameState:
        """Factory for a fresh two-player game."""
        return cls(players=[Player(name=n) for n in player_names], registry=registry)

    @property
    def active_player(self) -> Player:
        return self.players[self.active_player_index]

    def opponent_index(self, player_index: int) -> int:
        return (player_index + 1) % 2

    def log_message(self, text: str, category: LogCategory = LogCategory.INFO) -> None:
        """Append a narration line."""
        self.log.append(LogEntry(text=text, category=category, turn=self.turn))

    def queue_visual_effect(self, effect: VisualEffect) -> None:
        self.visual_effects.append(effect)

    def find_card_slot(self, instance: CardInstance) -> tuple[int, int] | None:
        """Return (owner_index, slot_index) of a creature on any field."""
        for owner_index, player in enumerate(self.players):
            slot = player.slot_of(instance)
            if slot is not None:
                return owner_index, slot
        return None

    def find_on_field(self, instance_id: str) -> tuple[int, CardInstance] | None:
        """Return (owner_index, instance) for an instance id on any field."""
        for owner_index, player in enumerate(self.players):
            for card in player.field:
                if card is not None and card.instance_id == instance_id:
                    return owner_index, card
        return None

    def owner_of(self, instance: CardInstance) -> int | None:
        location = self.find_card_slot(instance)
        return location[0] if location else None

    def remove_from_field(self, instance: CardInstance) -> int | None:
        """Empty the slot holding instance. Returns the owner index."""
        location = self.find_card_slot(instance)
        if location is None:
            return None
        owner_index, slot = location
        self.players[owner_index].field[slot] = None
        return owner_index
