"""
Combat - resolves one attack as a small state machine.

Phases, in order:
1. TARGET_SELECTION - legality of the declared target
2. PRE_COMBAT       - the attacker's onBeforeCombat, once per attack
3. DEFEND           - defender's traps, then onDefend (skipped against Ambush)
4. DAMAGE_EXCHANGE  - simultaneous hits with keyword modifiers
5. POST_COMBAT      - onAfterCombat for a surviving attacker
6. CLEANUP          - dead creatures leave the field, onSlain fires
7. DONE

Any phase that raises a PendingSelection suspends the attack. The returned
CombatResolution remembers where to pick up; continue_attack resumes it.
Illegal attacks are logged and reported as failures, never raised.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, TYPE_CHECKING

from ..card_schema.effect_dsl import TriggerKind
from .effect_result import EffectResult, ParalyzeCreature, WebCreature
from .keywords import (
    Keyword,
    cant_attack,
    get_effective_attack,
    has_keyword,
    is_hidden_from_attacks,
)
from .resolver import apply_creature_damage, resolve_effect_result
from .state import CardInstance, GameState, LogCategory, VisualEffect
from .triggers import fire_trigger

if TYPE_CHECKING:
    from ..effects.selection import PendingSelection

logger = logging.getLogger(__name__)


class CombatPhase(Enum):
    TARGET_SELECTION = "target_selection"
    PRE_COMBAT = "pre_combat"
    DEFEND = "defend"
    DAMAGE_EXCHANGE = "damage_exchange"
    POST_COMBAT = "post_combat"
    CLEANUP = "cleanup"
    DONE = "done"


class TrapTrigger(str, Enum):
    """When a face-down trap springs."""
    ANY_ATTACK = "attack"
    DIRECT_ATTACK = "direct_attack"
    CREATURE_ATTACKED = "creature_attacked"


@dataclass(frozen=True)
class AttackTarget:
    """A declared attack target: a creature (by instance id) or a player."""
    player_index: int
    instance_id: str | None = None

    @classmethod
    def creature(cls, card: CardInstance, owner_index: int) -> AttackTarget:
        return cls(player_index=owner_index, instance_id=card.instance_id)

    @classmethod
    def player(cls, player_index: int) -> AttackTarget:
        return cls(player_index=player_index)

    @property
    def is_player(self) -> bool:
        return self.instance_id is None


@dataclass
class ValidTargets:
    creatures: list[CardInstance]
    player: bool


@dataclass
class CombatOutcome:
    """What happened in one creature-versus-creature exchange."""
    attacker: CardInstance
    defender: CardInstance
    damage_to_defender: int = 0
    damage_to_attacker: int = 0
    attacker_died: bool = False
    defender_died: bool = False
    ambushed: bool = False


@dataclass
class CombatResolution:
    """
    Result of resolve_attack / continue_attack.

    Contains:
    - Whether the attack was legal
    - The phase to resume from, if suspended on a selection
    - The exchange outcome or direct damage, once dealt
    """
    success: bool
    phase: CombatPhase = CombatPhase.TARGET_SELECTION
    attacker_id: str | None = None
    attacker_owner: int | None = None
    target: AttackTarget | None = None
    outcome: CombatOutcome | None = None
    player_damage: int = 0
    pending_selection: PendingSelection | None = None
    traps_sprung: bool = False
    error: str | None = None

    @classmethod
    def failure(cls, error: str) -> CombatResolution:
        """Create a failure result."""
        return cls(success=False, phase=CombatPhase.DONE, error=error)

    @property
    def is_suspended(self) -> bool:
        return self.pending_selection is not None

    @property
    def is_done(self) -> bool:
        return self.phase == CombatPhase.DONE and self.pending_selection is None


# ============================================================================
# Target selection
# ============================================================================

def can_attack_player(state: GameState, attacker: CardInstance) -> bool:
    return has_keyword(attacker, Keyword.HASTE) or attacker.summoned_turn < state.turn


def get_valid_targets(state: GameState, attacker: CardInstance, opponent_index: int) -> ValidTargets:
    """
    Legal attack targets.

    Hidden and Invisible creatures are excluded unless the attacker has
    Acuity. A visible Lure creature forces the attack onto Lure creatures.
    """
    acuity = has_keyword(attacker, Keyword.ACUITY)
    creatures = [
        c for c in state.players[opponent_index].creatures()
        if acuity or not is_hidden_from_attacks(c)
    ]
    lured = [c for c in creatures if has_keyword(c, Keyword.LURE)]
    if lured:
        return ValidTargets(creatures=lured, player=False)
    return ValidTargets(creatures=creatures, player=can_attack_player(state, attacker))


def _illegal(state: GameState, message: str) -> CombatResolution:
    state.log_message(message, LogCategory.COMBAT)
    return CombatResolution.failure(message)


def resolve_attack(state: GameState, attacker: CardInstance, target: AttackTarget) -> CombatResolution:
    """
    Declare and resolve an attack.

    Returns a suspended resolution if a trigger needs a choice.
    """
    owner = state.owner_of(attacker)
    if owner is None:
        return _illegal(state, f"{attacker.name} is not on the field.")
    if attacker.current_hp <= 0:
        return _illegal(state, f"{attacker.name} is dead and cannot attack.")
    if attacker.has_attacked:
        return _illegal(state, f"{attacker.name} has already attacked this turn.")
    if cant_attack(attacker):
        return _illegal(state, f"{attacker.name} cannot attack.")

    opponent = state.opponent_index(owner)
    if target.player_index != opponent:
        return _illegal(state, f"{attacker.name} can only attack the rival's side.")

    valid = get_valid_targets(state, attacker, opponent)
    if target.is_player:
        if not valid.player:
            return _illegal(state, f"{attacker.name} cannot attack the rival directly.")
    elif not any(c.instance_id == target.instance_id for c in valid.creatures):
        return _illegal(state, f"{attacker.name} cannot attack that creature.")

    state.attack_negated = False
    state.log_message(
        f"{attacker.name} attacks {_target_name(state, target)}.", LogCategory.COMBAT
    )
    resolution = CombatResolution(
        success=True,
        phase=CombatPhase.PRE_COMBAT,
        attacker_id=attacker.instance_id,
        attacker_owner=owner,
        target=target,
    )
    return _advance(state, resolution)


def continue_attack(state: GameState, resolution: CombatResolution, choice: Any) -> CombatResolution:
    """
    Resume a suspended attack with the chosen candidate.

    Raises InvalidSelectionError if choice is not a candidate.
    """
    from ..effects.context import EffectContext
    from ..effects.library import resume_selection

    selection = resolution.pending_selection
    if selection is None:
        return CombatResolution.failure("No selection is pending for this attack.")

    result = resume_selection(state, selection, choice)
    context = EffectContext.from_refs(state, selection.context_refs)
    resolution.pending_selection = resolve_effect_result(state, result, context)
    if resolution.pending_selection is not None:
        return resolution
    return _advance(state, resolution)


# ============================================================================
# Phase machine
# ============================================================================

def _target_name(state: GameState, target: AttackTarget) -> str:
    if target.is_player:
        return state.players[target.player_index].name
    found = state.find_on_field(target.instance_id)
    return found[1].name if found else "a creature"


def _attacker(state: GameState, resolution: CombatResolution) -> CardInstance | None:
    found = state.find_on_field(resolution.attacker_id)
    return found[1] if found else None


def _defender(state: GameState, resolution: CombatResolution) -> CardInstance | None:
    if resolution.target is None or resolution.target.is_player:
        return None
    found = state.find_on_field(resolution.target.instance_id)
    return found[1] if found else None


def _interrupted(state: GameState, resolution: CombatResolution) -> bool:
    """The attack ends early if it was negated or a participant is gone."""
    if state.attack_negated:
        return True
    attacker = _attacker(state, resolution)
    if attacker is None or attacker.current_hp <= 0:
        return True
    if resolution.target.is_player:
        return False
    defender = _defender(state, resolution)
    return defender is None or defender.current_hp <= 0


def _advance(state: GameState, resolution: CombatResolution) -> CombatResolution:
    while resolution.phase != CombatPhase.DONE:
        step = _PHASES[resolution.phase]
        next_phase, selection = step(state, resolution)
        resolution.phase = next_phase
        if selection is not None:
            resolution.pending_selection = selection
            return resolution
    return resolution


def _phase_pre_combat(state: GameState, resolution: CombatResolution):
    attacker = _attacker(state, resolution)
    defender = _defender(state, resolution)
    selection = None
    if attacker is not None and not attacker.before_combat_fired:
        attacker.before_combat_fired = True
        selection = fire_trigger(
            state, attacker, TriggerKind.ON_BEFORE_COMBAT, resolution.attacker_owner,
            defender=defender, target=defender,
        )
    return CombatPhase.DEFEND, selection


def _phase_defend(state: GameState, resolution: CombatResolution):
    if _interrupted(state, resolution):
        return CombatPhase.CLEANUP, None

    attacker = _attacker(state, resolution)
    defender = _defender(state, resolution)
    defender_owner = resolution.target.player_index
    selection = None

    # A trap that needs a choice suspends here; DEFEND resumes without it
    if not resolution.traps_sprung:
        resolution.traps_sprung = True
        selection = _spring_traps(state, resolution, attacker, defender)
        if selection is not None:
            return CombatPhase.DEFEND, selection
    if state.attack_negated:
        return CombatPhase.CLEANUP, None

    if defender is not None:
        if has_keyword(attacker, Keyword.AMBUSH):
            state.log_message(f"{attacker.name} strikes from ambush.", LogCategory.COMBAT)
        else:
            selection = fire_trigger(
                state, defender, TriggerKind.ON_DEFEND, defender_owner,
                attacker=attacker, defender=defender, target=attacker,
            )
    return CombatPhase.DAMAGE_EXCHANGE, selection


def _spring_traps(
    state: GameState,
    resolution: CombatResolution,
    attacker: CardInstance,
    defender: CardInstance | None,
) -> PendingSelection | None:
    """Fire the first matching face-down trap of the defending player."""
    defender_owner = resolution.target.player_index
    traps = state.players[defender_owner].traps
    wanted = {TrapTrigger.ANY_ATTACK.value}
    wanted.add(TrapTrigger.DIRECT_ATTACK.value if defender is None else TrapTrigger.CREATURE_ATTACKED.value)

    for trap in list(traps):
        if trap.trap_trigger not in wanted:
            continue
        traps.remove(trap)
        state.players[defender_owner].carrion.append(trap)
        state.log_message(f"{state.players[defender_owner].name} springs {trap.name}!", LogCategory.SPELL)
        return fire_trigger(
            state, trap, TriggerKind.TRAP_EFFECT, defender_owner,
            attacker=attacker, defender=defender, target=attacker,
        )
    return None


def _phase_damage(state: GameState, resolution: CombatResolution):
    if _interrupted(state, resolution):
        return CombatPhase.CLEANUP, None

    attacker = _attacker(state, resolution)
    if resolution.target.is_player:
        resolution.player_damage = resolve_direct_attack(state, attacker, resolution.target.player_index)
    else:
        resolution.outcome = resolve_creature_combat(
            state, attacker, _defender(state, resolution),
            resolution.attacker_owner, resolution.target.player_index,
        )
    return CombatPhase.POST_COMBAT, None


def _phase_post_combat(state: GameState, resolution: CombatResolution):
    attacker = _attacker(state, resolution)
    if attacker is None:
        return CombatPhase.CLEANUP, None
    attacker.has_attacked = True
    selection = None
    if attacker.current_hp > 0:
        defender = _defender(state, resolution)
        selection = fire_trigger(
            state, attacker, TriggerKind.ON_AFTER_COMBAT, resolution.attacker_owner,
            defender=defender, target=defender,
        )
    return CombatPhase.CLEANUP, selection


def _phase_cleanup(state: GameState, resolution: CombatResolution):
    attacker = _attacker(state, resolution)
    if attacker is not None:
        attacker.has_attacked = True
        attacker.before_combat_fired = False
    state.attack_negated = False
    selection = cleanup_destroyed(state)
    return CombatPhase.DONE, selection


_PHASES = {
    CombatPhase.TARGET_SELECTION: lambda state, resolution: (CombatPhase.PRE_COMBAT, None),
    CombatPhase.PRE_COMBAT: _phase_pre_combat,
    CombatPhase.DEFEND: _phase_defend,
    CombatPhase.DAMAGE_EXCHANGE: _phase_damage,
    CombatPhase.POST_COMBAT: _phase_post_combat,
    CombatPhase.CLEANUP: _phase_cleanup,
}


# ============================================================================
# Damage
# ============================================================================

def _combat_hit(state: GameState, source: CardInstance, target: CardInstance, amount: int) -> int:
    dealt = apply_creature_damage(state, target, amount, "combat damage")
    if dealt > 0 and has_keyword(source, Keyword.TOXIC) and target.current_hp > 0:
        target.current_hp = 0
        state.log_message(f"{source.name}'s toxin kills {target.name}.", LogCategory.DEATH)
    return dealt


def resolve_creature_combat(
    state: GameState,
    attacker: CardInstance,
    defender: CardInstance,
    attacker_owner: int,
    defender_owner: int,
) -> CombatOutcome:
    """
    Exchange damage between two creatures.

    Hits are simultaneous: both powers are read before either lands.
    An Ambush attacker takes no counter-damage and ignores the defender's
    Toxic, Neurotoxic and Poisonous.
    """
    attack_power = get_effective_attack(attacker, state, attacker_owner)
    defense_power = get_effective_attack(defender, state, defender_owner)
    ambush = has_keyword(attacker, Keyword.AMBUSH)

    outcome = CombatOutcome(attacker=attacker, defender=defender, ambushed=ambush)
    outcome.damage_to_defender = _combat_hit(state, attacker, defender, attack_power)
    if not ambush:
        outcome.damage_to_attacker = _combat_hit(state, defender, attacker, defense_power)

    if not ambush and has_keyword(defender, Keyword.POISONOUS) and attacker.current_hp > 0:
        attacker.current_hp = 0
        state.log_message(f"{defender.name}'s poison kills {attacker.name}.", LogCategory.DEATH)

    # Statuses only land on survivors, so a slain creature keeps its onSlain
    statuses: list = []
    if has_keyword(attacker, Keyword.NEUROTOXIC) and defender.current_hp > 0:
        statuses.append(ParalyzeCreature(creature=defender))
    if not ambush and has_keyword(defender, Keyword.NEUROTOXIC) and attacker.current_hp > 0:
        statuses.append(ParalyzeCreature(creature=attacker))
    if has_keyword(attacker, Keyword.WEB) and defender.current_hp > 0:
        statuses.append(WebCreature(creature=defender))
    resolve_effect_result(state, EffectResult(mutations=statuses))

    if defender.current_hp <= 0:
        defender.died_in_combat = True
        defender.slain_by = attacker.instance_id
        outcome.defender_died = True
    if attacker.current_hp <= 0:
        attacker.died_in_combat = True
        attacker.slain_by = defender.instance_id
        outcome.attacker_died = True

    if ambush:
        state.log_message(
            f"{attacker.name} ambushes {defender.name} and avoids damage "
            f"({attacker.current_atk}/{attacker.current_hp}).",
            LogCategory.COMBAT,
        )
    else:
        state.log_message(
            f"{attacker.name} and {defender.name} trade blows "
            f"({attacker.current_atk}/{attacker.current_hp} vs "
            f"{defender.current_atk}/{defender.current_hp}).",
            LogCategory.COMBAT,
        )
    return outcome


def resolve_direct_attack(state: GameState, attacker: CardInstance, defender_index: int) -> int:
    """Hit a player for the attacker's effective attack. Returns the damage."""
    damage = max(0, get_effective_attack(attacker, state))
    player = state.players[defender_index]
    player.hp -= damage
    state.log_message(f"{attacker.name} hits {player.name} for {damage} HP.", LogCategory.DAMAGE)
    state.queue_visual_effect(VisualEffect(
        effect_type="direct_attack", source_id=attacker.instance_id, owner_index=defender_index,
        data={"amount": damage},
    ))
    return damage


# ============================================================================
# Cleanup
# ============================================================================

def cleanup_destroyed(state: GameState, silent: bool = False) -> PendingSelection | None:
    """
    Remove every creature at 0 health or less.

    Creatures go to their owner's carrion pile; tokens leave play entirely.
    onSlain fires only for combat deaths of creatures whose abilities are
    intact. Repeats until no dead creature remains, since onSlain effects
    can kill. Returns the first selection an onSlain effect raised.
    """
    first: PendingSelection | None = None

    while True:
        dead = [
            (owner_index, slot, card)
            for owner_index, player in enumerate(state.players)
            for slot, card in enumerate(player.field)
            if card is not None and card.is_creature and card.current_hp <= 0
        ]
        if not dead:
            return first

        for owner_index, slot, card in dead:
            player = state.players[owner_index]
            player.field[slot] = None
            if not card.is_token:
                player.carrion.append(card)
            if not silent:
                where = "leaves play" if card.is_token else "is destroyed and sent to carrion"
                state.log_message(f"{card.name} {where}.", LogCategory.DEATH)
            if state.field_spell is not None and state.field_spell.card.instance_id == card.instance_id:
                state.field_spell = None

            if card.died_in_combat and not card.abilities_cancelled:
                killer = state.find_on_field(card.slain_by) if card.slain_by else None
                selection = fire_trigger(
                    state, card, TriggerKind.ON_SLAIN, owner_index,
                    killer=killer[1] if killer else None,
                )
                if selection is not None and first is None:
                    first = selection
            card.died_in_combat = False
