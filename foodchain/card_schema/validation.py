"""
Card Validation - Checks on a loaded card catalog.

Validates that:
1. Card and token ids are unique
2. Token and card references inside effects resolve
3. Every effect definition carries its required parameters
4. Nested effects (options, group selections, conditionals) are well-formed
5. Keywords are known (unknown keywords are warnings)
"""

from __future__ import annotations
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

from pydantic import ValidationError

from ..errors import CardDataError
from .card_definition import CardCatalog, CardDefinition
from .effect_dsl import EffectDefinition, EffectType, as_definition


# Parameters a definition must carry for its generator to run
REQUIRED_PARAMS: dict[EffectType, tuple[str, ...]] = {
    EffectType.HEAL: ("amount",),
    EffectType.DAMAGE_RIVAL: ("amount",),
    EffectType.DAMAGE_BOTH_PLAYERS: ("amount",),
    EffectType.DAMAGE_CREATURE: ("amount",),
    EffectType.GRANT_KEYWORD: ("keyword",),
    EffectType.ADD_KEYWORD: ("keyword",),
    EffectType.TRANSFORM_CARD: ("card_id",),
    EffectType.SUMMON_TOKENS: ("token_ids",),
    EffectType.ADD_TO_HAND: ("card_id",),
    EffectType.SELECT_FROM_GROUP: ("group", "effect"),
    EffectType.SELECT_CREATURE_FOR_DAMAGE: ("amount",),
    EffectType.CHOOSE_OPTION: ("options",),
    EffectType.CHOICE: ("choices",),
    EffectType.CONDITIONAL: ("condition", "then"),
    EffectType.DAMAGE_ALL_CREATURES: ("amount",),
    EffectType.DAMAGE_ALL_ENEMY_CREATURES: ("amount",),
    EffectType.DEAL_DAMAGE_TO_ATTACKER: ("amount",),
    EffectType.DAMAGE_WEBBED: ("amount",),
}

TARGET_GROUPS = frozenset({
    "friendly-creatures", "enemy-creatures", "all-creatures",
    "friendly-entities", "enemy-entities", "all-entities",
    "rival", "self",
    "enemy-prey", "friendly-prey", "all-prey",
    "friendly-predators", "other-creatures",
    "carrion", "friendly-carrion", "hand-prey",
})

CONDITIONS = frozenset({
    "rival_has_creatures", "rival_has_webbed", "self_hp_below",
    "hand_empty", "field_full", "carrion_not_empty",
})


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def load_catalog(path: str | Path) -> CardCatalog:
    """
    Parse and validate a catalog file.

    Raises CardDataError if the JSON is malformed or fails the schema.
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise CardDataError([f"{path}: invalid JSON ({e})"]) from e

    try:
        return CardCatalog.model_validate(raw)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]
        raise CardDataError(errors) from e


def validate_catalog(catalog: CardCatalog) -> ValidationResult:
    """
    Validate cross-references and effect parameters of a parsed catalog.

    Returns ValidationResult with errors and warnings.
    """
    from ..engine_core.keywords import Keyword, parse_keyword

    errors: list[str] = []
    warnings: list[str] = []

    card_ids: set[str] = set()
    for card in [*catalog.cards, *catalog.tokens]:
        if card.id in card_ids:
            errors.append(f"Duplicate card id '{card.id}'")
        card_ids.add(card.id)

    token_ids = {t.id for t in catalog.tokens}
    known_keywords = {k.value for k in Keyword}

    for card in [*catalog.cards, *catalog.tokens]:
        errors.extend(_validate_card(card, card_ids, token_ids))
        for keyword in card.keywords:
            name, _ = parse_keyword(keyword)
            if name not in known_keywords:
                warnings.append(f"Card '{card.id}': unknown keyword '{keyword}'")

    for token in catalog.tokens:
        if not token.is_token:
            warnings.append(f"Token '{token.id}' is not flagged is_token")

    if not catalog.cards:
        warnings.append("No cards defined - catalog may be incomplete")

    return ValidationResult(valid=len(errors) == 0, errors=errors, warnings=warnings)


def _validate_card(card: CardDefinition, card_ids: set[str], token_ids: set[str]) -> list[str]:
    """Validate a single card definition."""
    errors = []
    if not card.name:
        errors.append(f"Card '{card.id}' has empty name")
    if card.is_creature and card.hp <= 0:
        errors.append(f"Card '{card.id}' is a creature with no health")

    for trigger, spec in card.effects.items():
        for definition in iter_definitions(spec):
            for e in validate_definition(definition, card_ids, token_ids):
                errors.append(f"Card '{card.id}' [{trigger.value}]: {e}")
    return errors


def iter_definitions(spec: Any) -> Iterator[EffectDefinition]:
    """Yield every definition in a spec, including nested ones."""
    spec = as_definition(spec)
    if spec is None:
        return
    if isinstance(spec, list):
        for item in spec:
            yield from iter_definitions(item)
        return

    yield spec
    params = spec.params
    if spec.type == EffectType.CHOOSE_OPTION:
        for option in params.get("options", []):
            if isinstance(option, dict) and option.get("effect"):
                yield from iter_definitions(option["effect"])
    elif spec.type == EffectType.CHOICE:
        for choice in params.get("choices", []):
            if isinstance(choice, dict) and choice.get("type"):
                yield from iter_definitions(
                    {"type": choice["type"], "params": choice.get("params", {})}
                )
    elif spec.type == EffectType.CONDITIONAL:
        for branch in ("then", "else"):
            if params.get(branch):
                yield from iter_definitions(params[branch])


def validate_definition(
    definition: EffectDefinition,
    card_ids: set[str],
    token_ids: set[str],
) -> list[str]:
    """Validate one definition's parameters (not its nested children)."""
    errors = []
    params = definition.params

    for name in REQUIRED_PARAMS.get(definition.type, ()):
        if name not in params:
            errors.append(f"{definition.type.value} missing required param '{name}'")

    if definition.type == EffectType.SUMMON_TOKENS:
        ids = params.get("token_ids", [])
        if not isinstance(ids, list):
            errors.append("summon_tokens 'token_ids' must be a list")
        else:
            for token_id in ids:
                if token_id not in token_ids:
                    errors.append(f"summon_tokens references unknown token '{token_id}'")

    if definition.type in (EffectType.ADD_TO_HAND, EffectType.TRANSFORM_CARD):
        card_id = params.get("card_id")
        if card_id is not None and card_id not in card_ids:
            errors.append(f"{definition.type.value} references unknown card '{card_id}'")

    group = params.get("group")
    if definition.type == EffectType.SELECT_FROM_GROUP and group not in TARGET_GROUPS:
        errors.append(f"select_from_group has unknown group '{group}'")

    if definition.type == EffectType.CONDITIONAL:
        condition = params.get("condition", {})
        name = condition.get("name") if isinstance(condition, dict) else condition
        if name not in CONDITIONS:
            errors.append(f"conditional has unknown condition '{name}'")

    if definition.type == EffectType.CHOOSE_OPTION:
        for i, option in enumerate(params.get("options", [])):
            if not isinstance(option, dict) or "label" not in option:
                errors.append(f"choose_option option {i} has no label")

    for name in ("amount", "count"):
        value = params.get(name)
        if value is not None and not isinstance(value, int):
            errors.append(f"{definition.type.value} '{name}' must be an integer")

    return errors
