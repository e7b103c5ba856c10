"""
Food Chain - Rules engine for a two-player creature-battling card game.

The engine decides what happens when a card, ability, or attack resolves:
- Keyword primitives (cannot attack, cannot be consumed, ...)
- Effect results as ordered lists of typed mutations, applied by one resolver
- A generator library producing effects or pending selections
- Trigger dispatch for card abilities
- Consumption (predators eating prey)
- A combat state machine
- AI threat, lethal and kill-combination search
"""

__version__ = "0.1.0"
