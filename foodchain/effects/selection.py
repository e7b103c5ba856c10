"""
Pending selections - deferred player choices as plain data.

A selection holds ids and parameters only, never live objects or closures,
so it can outlive the call that produced it. Resumption re-resolves the
chosen candidate against the current state.
"""

from __future__ import annotations
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..errors import InvalidSelectionError
from ..card_schema.effect_dsl import EffectType


class SelectionKind(Enum):
    TARGET = "target"
    OPTION = "option"


class TargetKind(Enum):
    CREATURE = "creature"
    PLAYER = "player"
    CARRION = "carrion"
    HAND = "hand"
    DECK = "deck"


@dataclass(frozen=True)
class TargetRef:
    """
    Reference to a selectable thing.

    For PLAYER targets instance_id is None and owner_index is the player.
    """
    kind: TargetKind
    owner_index: int
    instance_id: str | None = None


@dataclass
class Candidate:
    label: str
    value: Any  # TargetRef for targets, int option index for options
    description: str | None = None


@dataclass
class PendingSelection:
    """
    Represents a choice that must be made by a player.

    This is returned to the UI/bot when a generator needs input.
    """
    kind: SelectionKind
    title: str
    candidates: list[Candidate]
    generator: EffectType
    params: dict[str, Any] = field(default_factory=dict)
    player_index: int = 0
    selection_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    # Source context as ids and indices (see EffectContext.refs)
    context_refs: dict[str, Any] = field(default_factory=dict)

    # Definitions still to run after this one, in order
    remaining: list[Any] = field(default_factory=list)

    def find_candidate(self, choice: Any) -> Candidate:
        """
        Match a choice against the candidates.

        Accepts a Candidate, a candidate value, or an index into candidates.
        """
        if isinstance(choice, Candidate):
            choice = choice.value
        for candidate in self.candidates:
            if candidate.value == choice:
                return candidate
        if isinstance(choice, int) and not isinstance(choice, bool) and self.kind == SelectionKind.TARGET:
            if 0 <= choice < len(self.candidates):
                return self.candidates[choice]
        raise InvalidSelectionError(
            f"Choice {choice!r} is not a candidate of selection '{self.title}'"
        )
