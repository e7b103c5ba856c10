"""
Pytest fixtures for Food Chain tests.
"""

import pytest

from ..card_schema.card_definition import CardType
from ..cards.registry import CardRegistry
from ..engine_core.keywords import Keyword
from ..engine_core.state import CardInstance, GameState


@pytest.fixture(scope="session")
def registry() -> CardRegistry:
    """The packaged card catalog."""
    return CardRegistry.load()


@pytest.fixture
def state(registry: CardRegistry) -> GameState:
    """A two-player game on turn 2 with empty boards."""
    state = GameState.create(("Alice", "Bob"), registry=registry)
    state.turn = 2
    return state


@pytest.fixture
def make_creature():
    """Build an ad-hoc creature that is not in the catalog."""
    def make(
        name: str = "Creature",
        atk: int = 1,
        hp: int = 1,
        keywords=(),
        card_type: CardType = CardType.PREY,
        tribe: str | None = None,
        nutrition: int = 1,
        summoned_turn: int = 1,
        effects: dict | None = None,
    ) -> CardInstance:
        keywords = list(keywords)
        return CardInstance(
            card_id=f"test-{name.lower().replace(' ', '-')}",
            name=name,
            card_type=card_type,
            tribe=tribe,
            atk=atk,
            hp=hp,
            nutrition=nutrition if card_type == CardType.PREY else 0,
            keywords=keywords,
            base_keywords=list(keywords),
            effects=effects or {},
            current_atk=atk,
            current_hp=hp,
            has_barrier=Keyword.BARRIER.value in keywords,
            summoned_turn=summoned_turn,
        )
    return make


@pytest.fixture
def place(state: GameState):
    """Put a creature into a player's first empty slot (or a given one)."""
    def put(player_index: int, creature: CardInstance, slot: int | None = None) -> CardInstance:
        player = state.players[player_index]
        if slot is None:
            slot = player.empty_slot()
        player.field[slot] = creature
        return creature
    return put


@pytest.fixture
def summon(registry: CardRegistry, place):
    """Create a catalog card and place it, ready to attack by default."""
    def play(player_index: int, card_id: str, summoned_turn: int = 1) -> CardInstance:
        return place(player_index, registry.create_card_instance(card_id, summoned_turn))
    return play
