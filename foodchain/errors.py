"""
Engine exceptions.

Only data-integrity problems raise. Illegal game operations are logged
and reported through result objects instead.
"""


class RulesEngineError(Exception):
    """Base class for engine errors."""


class CardNotFoundError(RulesEngineError):
    """A card or token id is absent from the registry."""

    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(f"Card not found in registry: {card_id}")


class UnknownEffectError(RulesEngineError):
    """An effect definition names a type with no registered generator."""

    def __init__(self, effect_type: str):
        self.effect_type = effect_type
        super().__init__(f"No generator registered for effect type: {effect_type}")


class InvalidSelectionError(RulesEngineError):
    """A selection was resumed with a choice that is not one of its candidates."""


class CardDataError(RulesEngineError):
    """Raised when card data fails validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Card data validation failed with {len(errors)} error(s)")
