"""
Threat Detector - Reads the board for danger and opportunity.

The detector answers questions for the combat planner:
- Can the rival kill us next turn? Can we kill the rival now?
- Which enemy creatures are most threatening?
- Which of them must die this turn, and which attackers can do it?

Every query is read-only. Attack values are effective attack, so Pack
and Pride bonuses are counted the same way combat counts them.
"""

from __future__ import annotations
import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from ..card_schema.card_definition import CardType
from ..card_schema.effect_dsl import EffectType, TriggerKind, as_definition
from ..config import AIConfig
from ..engine_core.combat import get_valid_targets
from ..engine_core.keywords import (
    Keyword,
    cant_attack,
    get_effective_attack,
    has_active_barrier,
    has_keyword,
)

if TYPE_CHECKING:
    from ..card_schema.card_definition import CardDefinition
    from ..engine_core.state import CardInstance, GameState


class DangerLevel(str, Enum):
    SAFE = "safe"
    CAUTION = "caution"
    DANGER = "danger"
    CRITICAL = "critical"


class KillPriority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"


@dataclass
class LethalCheck:
    """
    Damage one side can push through next attack step.

    deficit is damage minus the defending player's hp; positive means
    the damage is more than enough.
    """
    is_lethal: bool
    damage: int
    deficit: int
    hp: int


@dataclass
class ThreatAssessment:
    creature: CardInstance
    score: int
    reasons: list[str] = field(default_factory=list)


@dataclass
class DangerAssessment:
    level: DangerLevel
    details: list[str]
    lethal: LethalCheck
    top_threat: ThreatAssessment | None = None
    threat_count: int = 0


@dataclass
class MustKillTarget:
    creature: CardInstance
    reason: str
    priority: KillPriority


@dataclass
class KillSolution:
    """A set of attackers whose hits, in order, kill one creature."""
    type: str  # "single" or "combo"
    attackers: list[CardInstance]
    total_damage: int

    @property
    def loss_count(self) -> int:
        return len(self.attackers)


@dataclass
class KillOptions:
    can_kill: bool
    solutions: list[KillSolution] = field(default_factory=list)
    best_solution: KillSolution | None = None


@dataclass
class SofteningPotential:
    max_damage: int
    remaining_hp: int
    attackers: list[CardInstance]
    can_kill: bool


@dataclass
class DefensivePosition:
    has_defense: bool
    lure_creatures: list[CardInstance]
    blockers: list[CardInstance]
    lure_total_hp: int = 0


@dataclass
class SurvivalOption:
    """
    One way out of a lethal board.

    Types:
    - kill_threat: solution removes the threat
    - soften_threat: damage it without killing
    - has_lure: a Lure creature soaks attacks
    """
    type: str
    effectiveness: str
    threat: CardInstance | None = None
    solution: KillSolution | None = None
    damage: int = 0
    remaining_hp: int = 0
    creatures: list[CardInstance] = field(default_factory=list)


@dataclass
class SurvivalAnalysis:
    in_danger: bool
    survival_possible: bool
    options: list[SurvivalOption] = field(default_factory=list)
    hp: int = 0
    incoming_damage: int = 0
    critical_threats: list[MustKillTarget] = field(default_factory=list)


class ThreatDetector:
    """
    Board analysis for one player.

    Thresholds come from AIConfig so they can be tuned per bot.
    """

    def __init__(self, config: AIConfig | None = None):
        self.config = config or AIConfig()

    # ========================================================================
    # Damage races
    # ========================================================================

    def assess_incoming_damage(self, state: GameState, player_index: int) -> int:
        """Attack the rival's creatures could send at our face next turn."""
        opponent_index = state.opponent_index(player_index)
        damage = 0
        for creature in state.players[opponent_index].creatures():
            if cant_attack(creature) or creature.current_hp <= 0:
                continue
            if has_keyword(creature, Keyword.HASTE) or creature.summoned_turn < state.turn:
                damage += get_effective_attack(creature, state, opponent_index)
        return damage

    def detect_lethal(self, state: GameState, player_index: int) -> LethalCheck:
        hp = state.players[player_index].hp
        damage = self.assess_incoming_damage(state, player_index)
        return LethalCheck(is_lethal=damage >= hp, damage=damage, deficit=damage - hp, hp=hp)

    def assess_outgoing_damage(self, state: GameState, player_index: int) -> int:
        """Attack our ready creatures can send at the rival's face right now."""
        opponent_index = state.opponent_index(player_index)
        damage = 0
        for creature in self.available_attackers(state, player_index):
            if get_valid_targets(state, creature, opponent_index).player:
                damage += get_effective_attack(creature, state, player_index)
        return damage

    def detect_our_lethal(self, state: GameState, player_index: int) -> LethalCheck:
        hp = state.players[state.opponent_index(player_index)].hp
        damage = self.assess_outgoing_damage(state, player_index)
        return LethalCheck(is_lethal=damage >= hp, damage=damage, deficit=damage - hp, hp=hp)

    def available_attackers(self, state: GameState, player_index: int) -> list[CardInstance]:
        """Living creatures that may still declare an attack this turn."""
        return [
            c for c in state.players[player_index].creatures()
            if c.current_hp > 0 and not c.has_attacked and not cant_attack(c)
        ]

    # ========================================================================
    # Threats
    # ========================================================================

    def evaluate_creature_threat(self, creature: CardInstance | None, state: GameState) -> ThreatAssessment:
        if creature is None:
            return ThreatAssessment(creature=creature, score=0)

        reasons: list[str] = []
        atk = get_effective_attack(creature, state)
        score = atk * 10 + creature.current_hp * 2
        if atk >= 3:
            reasons.append(f"High attack ({atk})")

        ready = creature.summoned_turn < state.turn or has_keyword(creature, Keyword.HASTE)
        if ready and not cant_attack(creature):
            score += 10
            reasons.append("Can attack now")

        for keyword, bonus in _KEYWORD_THREAT:
            if has_keyword(creature, keyword):
                score += bonus
                reasons.append(keyword.value)
        if has_active_barrier(creature):
            score += 10
            reasons.append("Has Barrier")

        for trigger, bonus, reason in _TRIGGER_THREAT:
            if trigger.value in creature.effects:
                score += bonus
                reasons.append(reason)

        if has_keyword(creature, Keyword.PASSIVE):
            score -= 20
            reasons.append("Passive")
        if has_keyword(creature, Keyword.HARMLESS):
            score -= 25
            reasons.append("Harmless")
        if creature.frozen or creature.webbed:
            score -= 15
            reasons.append("Frozen" if creature.frozen else "Webbed")

        return ThreatAssessment(creature=creature, score=max(0, score), reasons=reasons)

    def rank_threats(self, state: GameState, player_index: int) -> list[ThreatAssessment]:
        """Enemy creatures, most threatening first."""
        opponent = state.players[state.opponent_index(player_index)]
        threats = [self.evaluate_creature_threat(c, state) for c in opponent.creatures()]
        return sorted(threats, key=lambda t: t.score, reverse=True)

    def assess_danger_level(self, state: GameState, player_index: int) -> DangerAssessment:
        hp = state.players[player_index].hp
        lethal = self.detect_lethal(state, player_index)
        threats = self.rank_threats(state, player_index)
        top_score = threats[0].score if threats else 0

        level = DangerLevel.SAFE
        details: list[str] = []
        if lethal.is_lethal:
            level = DangerLevel.CRITICAL
            details.append(f"Lethal threat: {lethal.damage} damage vs {hp} HP")
        elif hp <= 3 or lethal.damage >= hp - 2:
            level = DangerLevel.DANGER
            details.append(f"Low HP ({hp}) with {lethal.damage} incoming")
        elif top_score >= self.config.caution_score or lethal.damage >= hp / 2:
            level = DangerLevel.CAUTION
            details.append("Significant threats on board")

        return DangerAssessment(
            level=level,
            details=details,
            lethal=lethal,
            top_threat=threats[0] if threats else None,
            threat_count=len(threats),
        )

    def find_must_kill_targets(self, state: GameState, player_index: int) -> list[MustKillTarget]:
        """
        Enemy creatures that have to die this turn.

        - critical: its attack alone is at least our HP
        - high: Toxic, or a threat score at or above must_kill_score
        """
        hp = state.players[player_index].hp
        opponent_index = state.opponent_index(player_index)
        must_kill: list[MustKillTarget] = []

        for threat in self.rank_threats(state, player_index):
            creature = threat.creature
            atk = get_effective_attack(creature, state, opponent_index)
            if atk >= hp:
                must_kill.append(MustKillTarget(
                    creature=creature,
                    reason=f"{creature.name} can deal {atk} damage (we have {hp} HP)",
                    priority=KillPriority.CRITICAL,
                ))
            elif has_keyword(creature, Keyword.TOXIC):
                must_kill.append(MustKillTarget(
                    creature=creature,
                    reason=f"{creature.name} is Toxic and kills any blocker",
                    priority=KillPriority.HIGH,
                ))
            elif threat.score >= self.config.must_kill_score:
                must_kill.append(MustKillTarget(
                    creature=creature,
                    reason=f"{creature.name} is extremely threatening (score: {threat.score})",
                    priority=KillPriority.HIGH,
                ))
        return must_kill

    # ========================================================================
    # Answers
    # ========================================================================

    def _attackers_for(self, state: GameState, threat: CardInstance, player_index: int) -> list[CardInstance]:
        """Ready attackers that can legally hit threat. Summoning sickness only guards the face."""
        opponent_index = state.opponent_index(player_index)
        return [
            c for c in self.available_attackers(state, player_index)
            if any(t.instance_id == threat.instance_id
                   for t in get_valid_targets(state, c, opponent_index).creatures)
        ]

    def _kills(self, state: GameState, threat: CardInstance, attackers: tuple, player_index: int) -> bool:
        """Whether these attacks, weakest first, bring threat to 0 HP."""
        if has_keyword(threat, Keyword.IMMUNE):
            return False
        remaining = threat.current_hp
        barrier = has_active_barrier(threat)
        for attacker in attackers:
            power = get_effective_attack(attacker, state, player_index)
            if power <= 0:
                continue
            if barrier:
                barrier = False
                continue
            if has_keyword(attacker, Keyword.TOXIC):
                return True
            remaining -= power
            if remaining <= 0:
                return True
        return False

    def analyze_kill_options(self, state: GameState, threat: CardInstance, player_index: int) -> KillOptions:
        """
        Ways to kill threat with this turn's attacks.

        Subsets are tried in increasing size; a subset containing a smaller
        working one is skipped. The best solution loses the fewest attackers.
        """
        def power(creature: CardInstance) -> int:
            return get_effective_attack(creature, state, player_index)

        attackers = sorted(self._attackers_for(state, threat, player_index), key=power)
        solutions: list[KillSolution] = []

        for size in range(1, len(attackers) + 1):
            for combo in itertools.combinations(attackers, size):
                if any(set(s.attackers) <= set(combo) for s in solutions):
                    continue
                if self._kills(state, threat, combo, player_index):
                    solutions.append(KillSolution(
                        type="single" if size == 1 else "combo",
                        attackers=list(combo),
                        total_damage=sum(power(c) for c in combo),
                    ))

        solutions.sort(key=lambda s: (s.loss_count, -s.total_damage))
        return KillOptions(
            can_kill=bool(solutions),
            solutions=solutions,
            best_solution=solutions[0] if solutions else None,
        )

    def analyze_softening_potential(
        self, state: GameState, threat: CardInstance, player_index: int,
    ) -> SofteningPotential:
        """Total damage every ready attacker could put on threat."""
        attackers = self._attackers_for(state, threat, player_index)
        max_damage = sum(get_effective_attack(c, state, player_index) for c in attackers)
        if has_keyword(threat, Keyword.IMMUNE):
            max_damage = 0
        return SofteningPotential(
            max_damage=max_damage,
            remaining_hp=max(0, threat.current_hp - max_damage),
            attackers=attackers,
            can_kill=self._kills(state, threat, tuple(attackers), player_index),
        )

    def analyze_defensive_position(self, state: GameState, player_index: int) -> DefensivePosition:
        creatures = [c for c in state.players[player_index].creatures() if c.current_hp > 0]
        lures = [c for c in creatures if has_keyword(c, Keyword.LURE)]
        blockers = [c for c in creatures if c.current_hp >= 2]
        return DefensivePosition(
            has_defense=bool(lures or blockers),
            lure_creatures=lures,
            blockers=blockers,
            lure_total_hp=sum(c.current_hp for c in lures),
        )

    def analyze_survival_options(self, state: GameState, player_index: int) -> SurvivalAnalysis:
        """Everything we could do this turn to avoid dying on the next."""
        hp = state.players[player_index].hp
        lethal = self.detect_lethal(state, player_index)
        if not lethal.is_lethal:
            return SurvivalAnalysis(in_danger=False, survival_possible=True, hp=hp, incoming_damage=lethal.damage)

        critical = [
            m for m in self.find_must_kill_targets(state, player_index)
            if m.priority == KillPriority.CRITICAL
        ]
        options: list[SurvivalOption] = []
        for must_kill in critical:
            threat = must_kill.creature
            kill = self.analyze_kill_options(state, threat, player_index)
            if kill.can_kill:
                options.append(SurvivalOption(
                    type="kill_threat", effectiveness="removes_threat",
                    threat=threat, solution=kill.best_solution,
                ))
                continue
            softening = self.analyze_softening_potential(state, threat, player_index)
            if softening.max_damage > 0:
                options.append(SurvivalOption(
                    type="soften_threat",
                    effectiveness="partial" if softening.remaining_hp > 0 else "kills_threat",
                    threat=threat,
                    damage=softening.max_damage,
                    remaining_hp=softening.remaining_hp,
                    creatures=softening.attackers,
                ))

        defense = self.analyze_defensive_position(state, player_index)
        if defense.lure_creatures:
            options.append(SurvivalOption(
                type="has_lure", effectiveness="redirects_damage", creatures=defense.lure_creatures,
            ))

        return SurvivalAnalysis(
            in_danger=True,
            survival_possible=any(o.effectiveness in ("removes_threat", "kills_threat") for o in options),
            options=options,
            hp=hp,
            incoming_damage=lethal.damage,
            critical_threats=critical,
        )

    def calculate_damage_with_card(
        self, state: GameState, card: CardDefinition | None, player_index: int,
    ) -> int:
        """Face damage available this turn if card were played first."""
        damage = self.assess_outgoing_damage(state, player_index)
        if card is None:
            return damage

        if card.is_creature and Keyword.HASTE.value in card.keywords:
            damage += card.atk
            if card.type == CardType.PREDATOR:
                prey = [
                    c for c in state.players[player_index].creatures()
                    if c.is_prey or has_keyword(c, Keyword.EDIBLE)
                ]
                damage += sum(c.nutrition or 1 for c in prey[:3])

        if card.type in (CardType.SPELL, CardType.FREE_SPELL):
            spec = as_definition(card.effects.get(TriggerKind.SPELL_EFFECT))
            for definition in spec if isinstance(spec, list) else [spec]:
                if definition is not None and definition.type == EffectType.DAMAGE_RIVAL:
                    damage += int(definition.params.get("amount", 0))
        return damage


_KEYWORD_THREAT: list[tuple[Keyword, int]] = [
    (Keyword.TOXIC, 25),
    (Keyword.NEUROTOXIC, 20),
    (Keyword.AMBUSH, 15),
    (Keyword.INVISIBLE, 15),
    (Keyword.HIDDEN, 10),
    (Keyword.POISONOUS, 8),
    (Keyword.HASTE, 5),
]

_TRIGGER_THREAT: list[tuple[TriggerKind, int, str]] = [
    (TriggerKind.ON_BEFORE_COMBAT, 10, "Combat trigger"),
    (TriggerKind.ON_END, 8, "End-of-turn effect"),
    (TriggerKind.ON_START, 8, "Start-of-turn effect"),
]
