"""
Tests for combat resolution.

Tests:
- Attack legality and valid targets
- Damage exchange keywords (Ambush, Toxic, Poisonous, Neurotoxic, Web)
- Defend reactions and traps
- Suspension and resumption on a selection
- Cleanup and onSlain
"""

import pytest

from ..card_schema.card_definition import CardType
from ..card_schema.effect_dsl import TriggerKind
from ..engine_core.combat import (
    AttackTarget,
    CombatPhase,
    cleanup_destroyed,
    continue_attack,
    get_valid_targets,
    resolve_attack,
)
from ..engine_core.triggers import fire_trigger


def attack_creature(state, attacker, defender):
    return resolve_attack(state, attacker, AttackTarget.creature(defender, state.owner_of(defender)))


def attack_player(state, attacker, player_index=1):
    return resolve_attack(state, attacker, AttackTarget.player(player_index))


class TestValidTargets:
    """Tests for get_valid_targets."""

    def test_open_board(self, state, summon):
        """A ready attacker may hit every visible creature or the player."""
        lion = summon(0, "feline-predator-lion")
        wolf = summon(1, "canine-predator-gray-wolf")

        targets = get_valid_targets(state, lion, 1)

        assert targets.creatures == [wolf]
        assert targets.player

    def test_summoning_sickness(self, state, summon):
        """A creature played this turn can't go face without Haste."""
        lion = summon(0, "feline-predator-lion", summoned_turn=state.turn)
        flying_fish = summon(0, "fish-prey-flying-fish", summoned_turn=state.turn)

        assert not get_valid_targets(state, lion, 1).player
        assert get_valid_targets(state, flying_fish, 1).player

    def test_hidden_and_invisible(self, state, summon):
        """Hidden and Invisible creatures can't be attacked without Acuity."""
        lion = summon(0, "feline-predator-lion")
        spider = summon(0, "arachnid-prey-jumping-spider")
        insect = summon(1, "insect-prey-stick-insect")
        chameleon = summon(1, "reptile-prey-chameleon")

        assert get_valid_targets(state, lion, 1).creatures == []
        assert get_valid_targets(state, spider, 1).creatures == [insect, chameleon]

    def test_lure_forces_target(self, state, summon):
        """A Lure creature must be attacked and shields the player."""
        lion = summon(0, "feline-predator-lion")
        wolf = summon(1, "canine-predator-gray-wolf")
        peacock = summon(1, "bird-prey-peacock")

        targets = get_valid_targets(state, lion, 1)

        assert targets.creatures == [peacock]
        assert not targets.player
        assert not attack_creature(state, lion, wolf).success


class TestAttackLegality:
    """Tests for illegal attacks, which fail without raising."""

    def test_sick_attacker_cannot_go_face(self, state, summon):
        """Summoning sickness blocks direct attacks only."""
        lion = summon(0, "feline-predator-lion", summoned_turn=state.turn)
        summon(1, "canine-prey-jackal")

        result = attack_player(state, lion)

        assert not result.success
        assert "directly" in result.error
        assert state.log[-1].text == result.error
        assert state.players[1].hp == 10

    def test_already_attacked(self, state, summon):
        """Each creature attacks once per turn."""
        lion = summon(0, "feline-predator-lion")
        assert attack_player(state, lion).success

        result = attack_player(state, lion)

        assert not result.success
        assert state.players[1].hp == 7

    def test_frozen_and_passive(self, state, summon):
        """cantAttack blocks declaring an attack."""
        lion = summon(0, "feline-predator-lion")
        lion.frozen = True
        crab = summon(0, "crustacean-prey-hermit-crab")

        assert not attack_player(state, lion).success
        assert not attack_player(state, crab).success

    def test_wrong_side(self, state, summon):
        """Attacks go at the rival's side only."""
        lion = summon(0, "feline-predator-lion")
        jackal = summon(0, "canine-prey-jackal")

        assert not attack_creature(state, lion, jackal).success
        assert not attack_player(state, lion, player_index=0).success

    def test_not_on_field(self, state, registry):
        """A creature in hand can't attack."""
        lion = registry.create_card_instance("feline-predator-lion", 1)

        assert resolve_attack(state, lion, AttackTarget.player(1)).error == "Lion is not on the field."


class TestDirectAttack:
    """Tests for attacks on a player."""

    def test_hits_for_effective_attack(self, state, summon):
        """Pack bonuses count when hitting the player."""
        wolf = summon(0, "canine-predator-gray-wolf")
        summon(0, "canine-prey-jackal")

        result = attack_player(state, wolf)

        assert result.is_done
        assert result.player_damage == 3
        assert state.players[1].hp == 7
        assert wolf.has_attacked
        assert state.visual_effects[-1].effect_type == "direct_attack"

    def test_snare_negates(self, state, registry, summon):
        """The snare springs on a direct attack and stops it."""
        lion = summon(0, "feline-predator-lion")
        snare = registry.create_card_instance("trap-snare", 1)
        state.players[1].traps.append(snare)

        result = attack_player(state, lion)

        assert result.success
        assert result.player_damage == 0
        assert state.players[1].hp == 10
        assert state.players[1].traps == []
        assert state.players[1].carrion == [snare]
        assert lion.has_attacked
        assert not state.attack_negated


class TestCreatureCombat:
    """Tests for the damage exchange."""

    def test_simultaneous_exchange(self, state, summon):
        """Both creatures hit, and both may die."""
        lion = summon(0, "feline-predator-lion")
        jaguar = summon(1, "feline-predator-jaguar")

        result = attack_creature(state, lion, jaguar)

        assert result.outcome.attacker_died and result.outcome.defender_died
        assert state.players[0].carrion == [lion]
        assert state.players[1].carrion == [jaguar]

    def test_ambush_skips_defend_and_counter(self, state, summon):
        """An Ambush attacker ignores onDefend and takes no damage."""
        jaguar = summon(0, "feline-predator-jaguar")
        turtle = summon(1, "reptile-prey-snapping-turtle")

        result = attack_creature(state, jaguar, turtle)

        assert result.outcome.ambushed
        assert result.outcome.damage_to_attacker == 0
        assert jaguar.current_hp == 3
        assert turtle.current_hp == 1

    def test_on_defend_then_counter_kills(self, state, summon):
        """The turtle's bite and its counter-attack together kill the Lion."""
        lion = summon(0, "feline-predator-lion")
        turtle = summon(1, "reptile-prey-snapping-turtle")

        result = attack_creature(state, lion, turtle)

        assert result.outcome.attacker_died
        assert turtle.current_hp == 1
        assert lion in state.players[0].carrion

    def test_toxic(self, state, summon):
        """Any Toxic damage that lands kills."""
        frog = summon(0, "amphibian-prey-poison-dart-frog")
        wolf = summon(1, "canine-predator-gray-wolf")

        result = attack_creature(state, frog, wolf)

        assert result.outcome.defender_died
        assert result.outcome.attacker_died

    def test_toxic_blocked_by_barrier(self, state, summon):
        """Toxic needs damage to land."""
        frog = summon(0, "amphibian-prey-poison-dart-frog")
        crab = summon(1, "crustacean-prey-hermit-crab")

        attack_creature(state, frog, crab)

        assert crab.current_hp == 3
        assert not crab.has_barrier

    def test_poisonous_defender(self, state, summon):
        """The pufferfish kills whatever attacks it."""
        wolf = summon(0, "canine-predator-gray-wolf")
        puffer = summon(1, "fish-prey-pufferfish")

        result = attack_creature(state, wolf, puffer)

        assert result.outcome.attacker_died
        assert result.outcome.defender_died

    def test_ambush_ignores_poisonous(self, state, summon):
        """An Ambush attacker is safe from Poisonous."""
        jaguar = summon(0, "feline-predator-jaguar")
        puffer = summon(1, "fish-prey-pufferfish")

        result = attack_creature(state, jaguar, puffer)

        assert not result.outcome.attacker_died
        assert jaguar.current_hp == 3

    def test_neurotoxic_paralyzes_survivor(self, state, summon):
        """The Cobra paralyzes a defender that lives."""
        cobra = summon(0, "reptile-predator-cobra")
        wolf = summon(1, "canine-predator-gray-wolf")

        attack_creature(state, cobra, wolf)

        assert wolf.current_hp == 1
        assert wolf.paralyzed
        assert wolf.keywords == ["Harmless"]
        assert not cobra.paralyzed

    def test_web_on_survivor(self, state, summon):
        """Web lands after damage, so the web stays on."""
        weaver = summon(0, "arachnid-predator-orb-weaver")
        wolf = summon(1, "canine-predator-gray-wolf")

        attack_creature(state, weaver, wolf)

        assert wolf.webbed
        assert wolf.current_hp == 2

    def test_immune_and_barrier_defenders(self, state, summon):
        """Immune takes nothing; Barrier eats one hit."""
        wolf = summon(0, "canine-predator-gray-wolf")
        lion = summon(0, "feline-predator-lion")
        bee = summon(1, "insect-prey-bee")
        crab = summon(1, "crustacean-prey-hermit-crab")

        attack_creature(state, wolf, bee)
        attack_creature(state, lion, crab)

        assert bee.current_hp == 1
        assert crab.current_hp == 3
        assert not crab.has_barrier

    def test_after_combat_for_survivor(self, state, registry, summon):
        """The Eagle draws only when it survives."""
        state.players[0].deck.append(registry.create_card_instance("fish-prey-goldfish", 1))
        eagle = summon(0, "bird-predator-eagle")
        jackal = summon(1, "canine-prey-jackal")

        attack_creature(state, eagle, jackal)

        assert eagle.current_hp == 1
        assert len(state.players[0].hand) == 1

    def test_zero_attack_neurotoxic(self, state, make_creature, place):
        """Neurotoxic applies even when the hit deals nothing."""
        stinger = place(0, make_creature("Stinger", atk=0, hp=2, keywords=["Neurotoxic"]))
        target = place(1, make_creature("Target", atk=0, hp=3))

        attack_creature(state, stinger, target)

        assert target.current_hp == 3
        assert target.paralyzed

    def test_toxic_defender_kills_attacker(self, state, summon):
        """Toxic works on the counter-hit too."""
        wolf = summon(0, "canine-predator-gray-wolf")
        frog = summon(1, "amphibian-prey-poison-dart-frog")

        result = attack_creature(state, wolf, frog)

        assert result.outcome.damage_to_attacker == 1
        assert result.outcome.attacker_died
        assert wolf in state.players[0].carrion

    def test_neurotoxic_defender_paralyzes_attacker(self, state, summon):
        """A surviving attacker is paralyzed by a Neurotoxic defender."""
        lion = summon(0, "feline-predator-lion")
        cobra = summon(1, "reptile-predator-cobra")

        result = attack_creature(state, lion, cobra)

        assert result.outcome.defender_died
        assert lion.current_hp == 1
        assert lion.paralyzed

    def test_dry_dropped_attacker_loses_keywords(self, state, make_creature, place):
        """A dry-dropped predator fights without Toxic, Neurotoxic or Ambush."""
        husk = place(0, make_creature(
            "Husk", atk=1, hp=3, keywords=["Toxic", "Neurotoxic", "Ambush"], card_type=CardType.PREDATOR,
        ))
        husk.dry_dropped = True
        target = place(1, make_creature("Target", atk=1, hp=3))

        result = attack_creature(state, husk, target)

        assert not result.outcome.ambushed
        assert result.outcome.damage_to_attacker == 1
        assert target.current_hp == 2
        assert not target.paralyzed

    def test_barrier_across_two_attacks(self, state, make_creature, place):
        """The first 2-damage attack breaks the barrier, the second lands."""
        shell = place(1, make_creature("Shell", atk=0, hp=5, keywords=["Barrier"]))
        first = place(0, make_creature("First", atk=2, hp=3))
        second = place(0, make_creature("Second", atk=2, hp=3))

        attack_creature(state, first, shell)

        assert shell.current_hp == 5
        assert not shell.has_barrier

        attack_creature(state, second, shell)

        assert shell.current_hp == 3


class TestDefendAndTraps:
    """Tests for the DEFEND phase."""

    def test_bear_trap(self, state, registry, summon):
        """The bear trap wounds the attacker and ends the attack."""
        lion = summon(0, "feline-predator-lion")
        wolf = summon(1, "canine-predator-gray-wolf")
        state.players[1].traps.append(registry.create_card_instance("trap-bear-trap", 1))

        result = attack_creature(state, lion, wolf)

        assert result.outcome is None
        assert wolf.current_hp == 3
        assert lion in state.players[0].carrion

    def test_trap_trigger_must_match(self, state, registry, summon):
        """A direct-attack trap ignores attacks on creatures."""
        lion = summon(0, "feline-predator-lion")
        jackal = summon(1, "canine-prey-jackal")
        state.players[1].traps.append(registry.create_card_instance("trap-snare", 1))

        result = attack_creature(state, lion, jackal)

        assert result.outcome.defender_died
        assert len(state.players[1].traps) == 1

    def test_trap_choice_then_on_defend(self, state, make_creature, place):
        """A trap that needs a choice still lets onDefend fire afterwards."""
        raider = place(0, make_creature("Raider", atk=1, hp=10))
        guard = place(1, make_creature("Guard", atk=0, hp=5, effects={
            "onDefend": {"type": "deal_damage_to_attacker", "params": {"amount": 2}},
        }))
        pit = make_creature("Pit", card_type=CardType.TRAP, effects={
            "trapEffect": {"type": "select_creature_for_damage", "params": {"amount": 1}},
        })
        pit.trap_trigger = "creature_attacked"
        state.players[1].traps.append(pit)

        result = attack_creature(state, raider, guard)

        assert result.is_suspended
        assert result.phase == CombatPhase.DEFEND
        assert raider.current_hp == 10

        choice = next(c for c in result.pending_selection.candidates if c.label == "Guard")
        result = continue_attack(state, result, choice)

        assert result.is_done
        assert raider.current_hp == 8
        assert guard.current_hp == 3
        assert state.players[1].traps == []
        assert state.players[1].carrion == [pit]


class TestSuspension:
    """Tests for attacks that stop on a choice."""

    @pytest.fixture
    def harrier(self, make_creature, place):
        return place(0, make_creature("Harrier", atk=2, hp=3, effects={
            "onBeforeCombat": {
                "type": "select_creature_for_damage",
                "params": {"amount": 1, "group": "enemy-creatures"},
            },
        }))

    def test_suspend_and_resume(self, state, harrier, make_creature, place):
        """The attack pauses after onBeforeCombat and finishes on resume."""
        target = place(1, make_creature("Target", atk=1, hp=3))
        bystander = place(1, make_creature("Bystander", atk=1, hp=3))

        result = attack_creature(state, harrier, target)

        assert result.is_suspended
        assert result.phase == CombatPhase.DEFEND
        assert target.current_hp == 3

        result = continue_attack(state, result, 1)

        assert result.is_done
        assert bystander.current_hp == 2
        assert target.current_hp == 1
        assert harrier.current_hp == 2
        assert harrier.has_attacked
        assert not harrier.before_combat_fired

    def test_continue_without_selection(self, state, harrier, make_creature, place):
        """Nothing to continue is a failure, not an error."""
        target = place(1, make_creature("Target", atk=1, hp=3))

        result = attack_creature(state, harrier, target)

        assert result.is_done
        assert not continue_attack(state, result, 0).success


class TestCleanup:
    """Tests for cleanup_destroyed and onSlain."""

    def test_combat_death_fires_on_slain(self, state, summon):
        """The Possum leaves a Kit when slain in combat."""
        wolf = summon(0, "canine-predator-gray-wolf")
        possum = summon(1, "mammal-prey-possum")

        attack_creature(state, wolf, possum)

        assert possum in state.players[1].carrion
        assert [c.card_id for c in state.players[1].creatures()] == ["token-kit"]

    def test_spell_death_does_not(self, state, registry, summon):
        """Non-combat deaths don't fire onSlain."""
        possum = summon(1, "mammal-prey-possum")
        eruption = registry.create_card_instance("spell-volcanic-eruption", state.turn)

        fire_trigger(state, eruption, TriggerKind.SPELL_EFFECT, 0)
        cleanup_destroyed(state)

        assert possum in state.players[1].carrion
        assert state.players[1].creatures() == []

    def test_tokens_leave_play(self, state, summon):
        """Dead tokens go nowhere."""
        pup = summon(1, "token-pup")
        pup.current_hp = 0

        cleanup_destroyed(state)

        assert state.players[1].field[0] is None
        assert state.players[1].carrion == []
        assert state.players[1].exile == []

    def test_silent_cleanup(self, state, summon):
        """silent skips narration."""
        jackal = summon(1, "canine-prey-jackal")
        jackal.current_hp = -1

        cleanup_destroyed(state, silent=True)

        assert state.log == []
        assert state.players[1].carrion == [jackal]
