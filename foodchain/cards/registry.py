"""
Card Registry - the loaded catalog, and instance creation.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from pathlib import Path

from ..card_schema.card_definition import CardCatalog, CardDefinition, CardType
from ..card_schema.validation import ValidationResult, load_catalog, validate_catalog
from ..config import CARD_DATA_PATH
from ..engine_core.keywords import Keyword
from ..engine_core.state import CardInstance
from ..errors import CardDataError, CardNotFoundError


def default_card_path() -> Path:
    """The catalog shipped with the package, unless FOODCHAIN_CARD_DATA overrides it."""
    if CARD_DATA_PATH:
        return Path(CARD_DATA_PATH)
    return Path(str(resources.files("foodchain.cards") / "data" / "cards.json"))


@dataclass
class CardRegistry:
    """
    Lookup tables over a validated catalog.

    Cards and tokens share one id space.
    """
    cards: dict[str, CardDefinition] = field(default_factory=dict)
    tokens: dict[str, CardDefinition] = field(default_factory=dict)

    @classmethod
    def from_catalog(cls, catalog: CardCatalog) -> CardRegistry:
        return cls(
            cards={c.id: c for c in catalog.cards},
            tokens={t.id: t for t in catalog.tokens},
        )

    @classmethod
    def load(cls, path: str | Path | None = None, strict: bool = True) -> CardRegistry:
        """
        Load and validate a catalog file.

        Raises CardDataError on schema errors, or (when strict) on
        cross-reference errors found by validate_catalog.
        """
        catalog = load_catalog(path or default_card_path())
        if strict:
            result = validate_catalog(catalog)
            if not result.valid:
                raise CardDataError(result.errors)
        return cls.from_catalog(catalog)

    def find(self, card_id: str) -> CardDefinition | None:
        return self.cards.get(card_id) or self.tokens.get(card_id)

    def get_card_definition_by_id(self, card_id: str) -> CardDefinition:
        if card_id not in self.cards:
            raise CardNotFoundError(card_id)
        return self.cards[card_id]

    def get_token_by_id(self, token_id: str) -> CardDefinition:
        if token_id not in self.tokens:
            raise CardNotFoundError(token_id)
        return self.tokens[token_id]

    def get_any_by_id(self, card_id: str) -> CardDefinition:
        definition = self.find(card_id)
        if definition is None:
            raise CardNotFoundError(card_id)
        return definition

    def all_cards(self) -> list[CardDefinition]:
        return list(self.cards.values())

    def create_card_instance(self, definition: CardDefinition | str, current_turn: int) -> CardInstance:
        """A fresh runtime instance, stats copied from the definition."""
        if isinstance(definition, str):
            definition = self.get_any_by_id(definition)
        keywords = list(definition.keywords)
        return CardInstance(
            card_id=definition.id,
            name=definition.name,
            card_type=definition.type,
            tribe=definition.tribe,
            atk=definition.atk,
            hp=definition.hp,
            nutrition=definition.nutrition or 0,
            keywords=keywords,
            base_keywords=list(keywords),
            effects={
                trigger.value: (
                    [d.model_dump(mode="json") for d in spec]
                    if isinstance(spec, list) else spec.model_dump(mode="json")
                )
                for trigger, spec in definition.effects.items()
            },
            current_atk=definition.atk,
            current_hp=definition.hp,
            has_barrier=Keyword.BARRIER.value in keywords,
            frozen=Keyword.FROZEN.value in keywords,
            is_token=definition.is_token,
            summoned_turn=current_turn,
            trap_trigger=definition.trigger if definition.type == CardType.TRAP else None,
            is_field_spell=definition.is_field_spell,
        )

    def validate_effects(self) -> ValidationResult:
        """Audit every effect definition in the registry."""
        catalog = CardCatalog(cards=list(self.cards.values()), tokens=list(self.tokens.values()))
        return validate_catalog(catalog)


@lru_cache(maxsize=1)
def default_registry() -> CardRegistry:
    """The packaged (or FOODCHAIN_CARD_DATA) catalog, loaded once."""
    return CardRegistry.load()
