"""
Effect context - who is acting, and which creatures are involved.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Any

from ..engine_core.state import CardInstance, GameState, LogCategory, Player


@dataclass
class EffectContext:
    """
    Context for generating an effect.

    creature is the card whose effect is running. attacker, defender,
    target and killer are filled in by combat and trigger dispatch.
    """
    state: GameState
    player_index: int
    creature: CardInstance | None = None
    attacker: CardInstance | None = None
    defender: CardInstance | None = None
    target: CardInstance | None = None
    killer: CardInstance | None = None

    @property
    def opponent_index(self) -> int:
        return self.state.opponent_index(self.player_index)

    @property
    def player(self) -> Player:
        return self.state.players[self.player_index]

    @property
    def opponent(self) -> Player:
        return self.state.players[self.opponent_index]

    def log(self, text: str, category: LogCategory = LogCategory.INFO) -> None:
        self.state.log_message(text, category)

    def with_target(self, target: CardInstance | None) -> EffectContext:
        return replace(self, target=target)

    def refs(self) -> dict[str, Any]:
        """Serializable references for a PendingSelection."""
        refs: dict[str, Any] = {"player_index": self.player_index}
        for name in ("creature", "attacker", "defender", "target", "killer"):
            instance = getattr(self, name)
            if instance is not None:
                refs[name] = instance.instance_id
        return refs

    @classmethod
    def from_refs(cls, state: GameState, refs: dict[str, Any]) -> EffectContext:
        """
        Rebuild a context from refs.

        Instances that have left every zone resolve to None.
        """
        def lookup(instance_id: str | None) -> CardInstance | None:
            if instance_id is None:
                return None
            return find_instance(state, instance_id)

        return cls(
            state=state,
            player_index=refs.get("player_index", 0),
            creature=lookup(refs.get("creature")),
            attacker=lookup(refs.get("attacker")),
            defender=lookup(refs.get("defender")),
            target=lookup(refs.get("target")),
            killer=lookup(refs.get("killer")),
        )


def find_instance(state: GameState, instance_id: str) -> CardInstance | None:
    """Search every zone of every player for an instance."""
    for player in state.players:
        for zone in (player.field, player.hand, player.carrion, player.traps, player.deck, player.exile):
            for card in zone:
                if card is not None and card.instance_id == instance_id:
                    return card
    if state.field_spell and state.field_spell.card.instance_id == instance_id:
        return state.field_spell.card
    return None
