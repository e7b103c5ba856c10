"""
Combat Evaluator - Scores attacks and plans a combat phase.

Trades are predicted with the same rules combat applies:
- Barrier eats the first hit, Immune eats every hit
- Toxic kills on any damage that lands
- Ambush takes no counter-damage and ignores Poisonous
- A Poisonous defender kills a non-Ambush attacker that survives

The planner works in three passes: take lethal if we have it, then
coordinate attackers onto threats that would kill us, then give every
remaining attacker its best individual target.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, TYPE_CHECKING

from ..config import AIConfig
from ..engine_core.combat import AttackTarget, ValidTargets, get_valid_targets
from ..engine_core.keywords import Keyword, get_effective_attack, has_active_barrier, has_keyword
from .threat_detector import KillPriority, ThreatDetector

if TYPE_CHECKING:
    from ..engine_core.state import CardInstance, GameState

logger = logging.getLogger(__name__)

TargetFinder = Callable[["GameState", "CardInstance", int], ValidTargets]


class TradeOutcome(str, Enum):
    WE_WIN = "we-win"  # We kill them, we survive
    TRADE = "trade"  # Both die
    WE_LOSE = "we-lose"  # They survive, we die
    NEITHER = "neither"  # Chip damage


@dataclass
class TradeAnalysis:
    type: TradeOutcome
    we_kill: bool
    we_survive: bool
    damage_to_them: int = 0
    damage_to_us: int = 0

    @property
    def they_kill(self) -> bool:
        return not self.we_survive

    @property
    def they_survive(self) -> bool:
        return not self.we_kill


@dataclass
class AttackEvaluation:
    score: int
    reason: str
    trade: TradeAnalysis | None = None


@dataclass
class TargetChoice:
    target: AttackTarget | None
    score: int
    reason: str


@dataclass
class PlannedAttack:
    """One entry of a combat plan, in the order it should be declared."""
    attacker: CardInstance
    target: AttackTarget
    score: int
    reason: str


@dataclass
class CombatPlan:
    attacks: list[PlannedAttack] = field(default_factory=list)

    def __iter__(self):
        return iter(self.attacks)

    def __len__(self):
        return len(self.attacks)


def _hit_lands(target: CardInstance, amount: int) -> int:
    if amount <= 0 or has_keyword(target, Keyword.IMMUNE) or has_active_barrier(target):
        return 0
    return amount


class CombatEvaluator:
    """Attack scoring on top of a ThreatDetector."""

    def __init__(self, threat_detector: ThreatDetector | None = None, config: AIConfig | None = None):
        self.config = config or (threat_detector.config if threat_detector else AIConfig())
        self.threat_detector = threat_detector or ThreatDetector(self.config)

    def analyze_trade_outcome(
        self,
        attacker: CardInstance | None,
        defender: CardInstance | None,
        state: GameState | None = None,
    ) -> TradeAnalysis:
        """Predict who dies if attacker hits defender."""
        if attacker is None or defender is None:
            return TradeAnalysis(type=TradeOutcome.NEITHER, we_kill=False, we_survive=True)

        ambush = has_keyword(attacker, Keyword.AMBUSH)
        to_them = _hit_lands(defender, get_effective_attack(attacker, state))
        to_us = 0 if ambush else _hit_lands(attacker, get_effective_attack(defender, state))

        we_kill = to_them >= defender.current_hp or (to_them > 0 and has_keyword(attacker, Keyword.TOXIC))
        they_kill = to_us >= attacker.current_hp or (to_us > 0 and has_keyword(defender, Keyword.TOXIC))
        if not ambush and has_keyword(defender, Keyword.POISONOUS):
            they_kill = True

        if we_kill and not they_kill:
            outcome = TradeOutcome.WE_WIN
        elif we_kill:
            outcome = TradeOutcome.TRADE
        elif they_kill:
            outcome = TradeOutcome.WE_LOSE
        else:
            outcome = TradeOutcome.NEITHER
        return TradeAnalysis(
            type=outcome, we_kill=we_kill, we_survive=not they_kill,
            damage_to_them=to_them, damage_to_us=to_us,
        )

    def evaluate_attack(
        self, state: GameState, attacker: CardInstance | None, target: AttackTarget, player_index: int,
    ) -> AttackEvaluation:
        if attacker is None:
            return AttackEvaluation(score=-100, reason="No attacker")

        power = get_effective_attack(attacker, state, player_index)
        opponent = state.players[state.opponent_index(player_index)]

        if target.is_player:
            if power >= opponent.hp:
                return AttackEvaluation(
                    score=self.config.lethal_score,
                    reason=f"Lethal! {power} damage kills {opponent.name} ({opponent.hp} HP)",
                )
            score = power * 10
            blockers = [c for c in opponent.creatures() if not c.frozen and not has_keyword(c, Keyword.PASSIVE)]
            if not blockers:
                score += 15
            if opponent.hp <= 5:
                score += 10
            return AttackEvaluation(score=score, reason=f"Face damage: {power} ({opponent.name} at {opponent.hp} HP)")

        found = state.find_on_field(target.instance_id)
        if found is None:
            return AttackEvaluation(score=-100, reason="Invalid target")
        defender = found[1]
        trade = self.analyze_trade_outcome(attacker, defender, state)

        their_value = get_effective_attack(defender, state) + defender.current_hp
        our_value = power + attacker.current_hp
        if trade.type == TradeOutcome.WE_WIN:
            score, reason = 30 + their_value, f"Favorable trade: kill {defender.name}, survive"
        elif trade.type == TradeOutcome.TRADE:
            if their_value >= our_value:
                score = 15 + (their_value - our_value)
                reason = f"Even trade: worth it (their {their_value} >= our {our_value})"
            else:
                score, reason = 5, "Even trade: slightly unfavorable"
        elif trade.type == TradeOutcome.WE_LOSE:
            score, reason = -20, "Bad trade: we die, they survive"
        else:
            score = 2 + trade.damage_to_them
            reason = f"Chip damage: {trade.damage_to_them} to {defender.name}"

        ranked = [t.creature.instance_id for t in self.threat_detector.rank_threats(state, player_index)]
        if ranked[:1] == [defender.instance_id]:
            score += 15
            reason += " [TOP THREAT]"
        elif ranked[1:2] == [defender.instance_id]:
            score += 8
            reason += " [2nd threat]"

        if trade.we_kill:
            for must_kill in self.threat_detector.find_must_kill_targets(state, player_index):
                if must_kill.creature.instance_id != defender.instance_id:
                    continue
                if must_kill.priority == KillPriority.CRITICAL:
                    score += self.config.critical_kill_bonus
                    reason += " [SURVIVAL - MUST KILL]"
                else:
                    score += self.config.must_kill_bonus
                    reason += " [MUST KILL]"
                break

        if has_keyword(defender, Keyword.NEUROTOXIC) and not trade.we_kill:
            score -= 15
            reason += " (Neurotoxic risk)"

        return AttackEvaluation(score=score, reason=reason, trade=trade)

    def find_best_target(
        self, state: GameState, attacker: CardInstance, valid_targets: ValidTargets, player_index: int,
    ) -> TargetChoice:
        """
        Best target for one attacker.

        A critical threat we can kill wins outright. Failing that, a
        critical threat we can damage is softened. Otherwise every legal
        target is scored and the highest wins.
        """
        opponent_index = state.opponent_index(player_index)
        critical = {
            m.creature.instance_id
            for m in self.threat_detector.find_must_kill_targets(state, player_index)
            if m.priority == KillPriority.CRITICAL
        }

        if critical:
            softenable: CardInstance | None = None
            for creature in valid_targets.creatures:
                if creature.instance_id not in critical:
                    continue
                trade = self.analyze_trade_outcome(attacker, creature, state)
                if trade.we_kill:
                    return TargetChoice(
                        target=AttackTarget.creature(creature, opponent_index),
                        score=self.config.survival_kill_score,
                        reason=f"SURVIVAL: Must kill {creature.name} or we die!",
                    )
                if softenable is None and (trade.damage_to_them > 0 or has_active_barrier(creature)):
                    softenable = creature
            if softenable is not None:
                return TargetChoice(
                    target=AttackTarget.creature(softenable, opponent_index),
                    score=self.config.survival_soften_score,
                    reason=f"SURVIVAL: Soften {softenable.name} for the follow-up",
                )

        best = TargetChoice(target=None, score=-(10 ** 9), reason="")
        candidates: list[AttackTarget] = []
        if valid_targets.player:
            candidates.append(AttackTarget.player(opponent_index))
        candidates.extend(AttackTarget.creature(c, opponent_index) for c in valid_targets.creatures)

        for target in candidates:
            evaluation = self.evaluate_attack(state, attacker, target, player_index)
            if evaluation.score > best.score:
                best = TargetChoice(target=target, score=evaluation.score, reason=evaluation.reason)
        return best

    def plan_combat_phase(
        self,
        state: GameState,
        player_index: int,
        get_valid_targets: TargetFinder = get_valid_targets,
    ) -> CombatPlan:
        """
        Ordered attacks for this combat phase.

        get_valid_targets(state, attacker, opponent_index) is injectable so
        a caller can plan against a restricted view of the board.
        """
        opponent_index = state.opponent_index(player_index)
        attackers = self.threat_detector.available_attackers(state, player_index)
        plan = CombatPlan()

        if self.threat_detector.detect_our_lethal(state, player_index).is_lethal:
            for attacker in attackers:
                if get_valid_targets(state, attacker, opponent_index).player:
                    plan.attacks.append(PlannedAttack(
                        attacker=attacker,
                        target=AttackTarget.player(opponent_index),
                        score=self.config.lethal_score + get_effective_attack(attacker, state, player_index),
                        reason="Lethal: Go face",
                    ))
            logger.debug("Lethal plan with %d attackers", len(plan))
            return plan

        assigned: set[str] = set()
        survival = self.threat_detector.analyze_survival_options(state, player_index)
        if survival.in_danger:
            for option in survival.options:
                if option.type == "kill_threat":
                    team = option.solution.attackers
                    label = "Must kill"
                    score = self.config.survival_kill_score
                elif option.type == "soften_threat":
                    team = option.creatures
                    label = "Soften"
                    score = self.config.survival_soften_score
                else:
                    continue
                if any(a.instance_id in assigned for a in team):
                    continue
                for position, attacker in enumerate(team, start=1):
                    assigned.add(attacker.instance_id)
                    plan.attacks.append(PlannedAttack(
                        attacker=attacker,
                        target=AttackTarget.creature(option.threat, opponent_index),
                        score=score,
                        reason=f"SURVIVAL: {label} {option.threat.name} ({position}/{len(team)})",
                    ))
            logger.debug("Survival plan assigned %d attackers", len(assigned))

        rest: list[PlannedAttack] = []
        for attacker in attackers:
            if attacker.instance_id in assigned:
                continue
            choice = self.find_best_target(
                state, attacker, get_valid_targets(state, attacker, opponent_index), player_index,
            )
            if choice.target is not None and choice.score > self.config.min_plan_score:
                rest.append(PlannedAttack(
                    attacker=attacker, target=choice.target, score=choice.score, reason=choice.reason,
                ))
        rest.sort(key=lambda p: p.score, reverse=True)
        plan.attacks.extend(rest)
        return plan

    def should_attack_this_turn(self, state: GameState, player_index: int) -> bool:
        if self.threat_detector.detect_our_lethal(state, player_index).is_lethal:
            return True
        if self.threat_detector.detect_lethal(state, player_index).is_lethal:
            return True
        return bool(self.threat_detector.available_attackers(state, player_index))
