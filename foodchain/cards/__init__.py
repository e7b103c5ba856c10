"""Card catalog - registry and packaged card data."""

from .registry import CardRegistry, default_card_path, default_registry

__all__ = ["CardRegistry", "default_card_path", "default_registry"]
