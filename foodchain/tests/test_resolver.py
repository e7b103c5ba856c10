"""
Tests for the effect resolver.

Tests:
- Player mutations (heal cap, damage, draw)
- Creature damage with Barrier, Immune and Webbed
- Keyword and status mutations
- Zone moves, tokens and summoning
- Selections dropped while resolving
"""

import logging

from ..card_schema.effect_dsl import EffectType
from ..effects.selection import Candidate, PendingSelection, SelectionKind
from ..engine_core.effect_result import (
    AddToHand,
    BuffCreature,
    DamageBothPlayers,
    DamageCreature,
    DamagePlayer,
    DestroyCreature,
    DiscardCards,
    Draw,
    EffectResult,
    GrantKeyword,
    Heal,
    HealCreature,
    KillCreature,
    MutationKind,
    ParalyzeCreature,
    RemoveKeyword,
    ReturnToHand,
    StealCreature,
    SummonTokens,
    TransformCard,
)
from ..engine_core.keywords import Keyword
from ..engine_core.resolver import _HANDLERS, apply_creature_damage, resolve_effect_result
from ..engine_core.state import LogCategory


def apply(state, *mutations):
    return resolve_effect_result(state, EffectResult.of(*mutations))


class TestResolverBasics:
    """Tests for dispatch and ordering."""

    def test_every_kind_has_a_handler(self):
        """The handler table covers every mutation kind."""
        assert set(_HANDLERS) == set(MutationKind)

    def test_none_and_empty_are_noops(self, state):
        """Nothing is logged for an empty result."""
        assert resolve_effect_result(state, None) is None
        assert resolve_effect_result(state, EffectResult.empty()) is None
        assert state.log == []

    def test_mutations_apply_in_order(self, state, make_creature, place):
        """A buff listed before damage lets the creature survive it."""
        creature = place(0, make_creature(hp=2))

        apply(state, BuffCreature(creature=creature, health=2), DamageCreature(creature=creature, amount=3))

        assert creature.current_hp == 1


class TestPlayerMutations:
    """Tests for player-targeting mutations."""

    def test_heal_is_capped(self, state):
        """Healing never goes above the maximum."""
        state.players[0].hp = 9

        apply(state, Heal(amount=3, player_index=0))

        assert state.players[0].hp == 10
        assert state.log[-1].category == LogCategory.HEAL

    def test_heal_at_max_does_nothing(self, state):
        """A full-health player is left alone and nothing is logged."""
        apply(state, Heal(amount=2, player_index=1))

        assert state.players[1].hp == 10
        assert state.log == []

    def test_heal_defaults_to_active_player(self, state):
        """Without a player index the active player heals."""
        state.active_player_index = 1
        state.players[1].hp = 4

        apply(state, Heal(amount=2))

        assert state.players[1].hp == 6

    def test_damage_player_is_absolute(self, state):
        """DamagePlayer hits the named player, not the acting one's rival."""
        state.active_player_index = 1

        apply(state, DamagePlayer(player_index=1, amount=3))

        assert state.players[1].hp == 7
        assert state.players[0].hp == 10

    def test_damage_both(self, state):
        """Both players take the damage."""
        apply(state, DamageBothPlayers(amount=2))

        assert [p.hp for p in state.players] == [8, 8]

    def test_draw_stops_at_empty_deck(self, state, registry):
        """Drawing past the deck draws what is there and logs the rest."""
        card = registry.create_card_instance("fish-prey-goldfish", 1)
        state.players[0].deck.append(card)

        apply(state, Draw(count=3, player_index=0))

        assert state.players[0].hand == [card]
        assert state.players[0].deck == []
        assert state.recently_drawn == [card.instance_id]
        assert any("deck is empty" in entry.text for entry in state.log)

    def test_add_to_hand_creates_instance(self, state):
        """A new instance of the card joins the hand."""
        apply(state, AddToHand(card_id="token-kit", player_index=1))

        assert [c.card_id for c in state.players[1].hand] == ["token-kit"]


class TestCreatureDamage:
    """Tests for apply_creature_damage and friends."""

    def test_barrier_absorbs_first_hit(self, state, make_creature, place):
        """Barrier eats the first hit whole, then is gone."""
        creature = place(0, make_creature(hp=5, keywords=["Barrier"]))

        assert apply_creature_damage(state, creature, 2) == 0
        assert creature.current_hp == 5
        assert not creature.has_barrier

        assert apply_creature_damage(state, creature, 2) == 2
        assert creature.current_hp == 3

    def test_immune_takes_nothing(self, state, summon):
        """Immune blocks every hit."""
        bee = summon(0, "insect-prey-bee")

        apply(state, DamageCreature(creature=bee, amount=5))

        assert bee.current_hp == 1

    def test_damage_breaks_web(self, state, make_creature, place):
        """A webbed creature is freed by damage."""
        creature = place(0, make_creature(hp=3))
        creature.webbed = True

        apply_creature_damage(state, creature, 1)

        assert not creature.webbed
        assert creature.current_hp == 2

    def test_zero_damage_is_ignored(self, state, make_creature, place):
        """Zero damage does not consume Barrier."""
        creature = place(0, make_creature(hp=2, keywords=["Barrier"]))

        assert apply_creature_damage(state, creature, 0) == 0
        assert creature.has_barrier

    def test_damage_queues_visual_effect(self, state, make_creature, place):
        """Damage that lands is queued for renderers."""
        creature = place(0, make_creature(hp=3))

        apply_creature_damage(state, creature, 2)

        assert state.visual_effects[-1].effect_type == "damage"
        assert state.visual_effects[-1].data == {"amount": 2}

    def test_off_field_creature_is_skipped(self, state, make_creature):
        """Mutations aimed at a creature no longer in play do nothing."""
        creature = make_creature(hp=3)

        apply(state, DamageCreature(creature=creature, amount=2), KillCreature(creature=creature))

        assert creature.current_hp == 3

    def test_kill_leaves_body_for_cleanup(self, state, make_creature, place):
        """Kill sets health to zero; the creature stays until cleanup."""
        creature = place(0, make_creature(hp=4))

        apply(state, KillCreature(creature=creature))

        assert creature.current_hp == 0
        assert state.players[0].field[0] is creature

    def test_heal_creature_capped_at_printed(self, state, make_creature, place):
        """Creature healing stops at printed health."""
        creature = place(0, make_creature(hp=4))
        creature.current_hp = 1

        apply(state, HealCreature(creature=creature, amount=10))

        assert creature.current_hp == 4


class TestKeywordMutations:
    """Tests for keyword and status mutations."""

    def test_grant_keyword_once(self, state, make_creature, place):
        """Granting twice does not duplicate the keyword."""
        creature = place(0, make_creature())

        apply(state, GrantKeyword(creature=creature, keyword="Haste"), GrantKeyword(creature=creature, keyword="Haste"))

        assert creature.keywords == ["Haste"]

    def test_grant_flag_keyword_sets_flag(self, state, make_creature, place):
        """Barrier, Frozen and Webbed keywords mirror their flags."""
        creature = place(0, make_creature())

        apply(state, GrantKeyword(creature=creature, keyword="Barrier"))
        assert creature.has_barrier

        apply(state, RemoveKeyword(creature=creature, keyword="Barrier"))
        assert not creature.has_barrier
        assert "Barrier" not in creature.keywords

    def test_paralyze(self, state, make_creature, place):
        """Paralysis strips abilities and sets a deadline."""
        creature = place(1, make_creature(keywords=["Toxic", "Barrier"]))

        apply(state, ParalyzeCreature(creature=creature))

        assert creature.keywords == [Keyword.HARMLESS.value]
        assert not creature.has_barrier
        assert creature.paralyzed
        assert creature.paralyzed_until_turn == state.turn + 1


class TestZoneMutations:
    """Tests for mutations that move cards."""

    def test_return_to_hand_resets(self, state, summon):
        """A returned creature is reset to its printed stats."""
        wolf = summon(1, "canine-predator-gray-wolf")
        wolf.current_atk = 9
        wolf.frozen = True

        apply(state, ReturnToHand(creature=wolf))

        assert state.players[1].field[0] is None
        assert state.players[1].hand == [wolf]
        assert wolf.current_atk == 2
        assert not wolf.frozen

    def test_returned_token_vanishes(self, state, summon):
        """Tokens never reach the hand, or any other zone."""
        kit = summon(1, "token-kit")

        apply(state, ReturnToHand(creature=kit))

        assert state.players[1].hand == []
        assert state.players[1].field[0] is None
        assert state.players[1].exile == []
        assert state.players[1].carrion == []

    def test_destroy_exiles(self, state, summon):
        """Destroyed creatures are exiled, tokens simply vanish."""
        wolf = summon(0, "canine-predator-gray-wolf")
        pup = summon(0, "token-pup")

        apply(state, DestroyCreature(creature=wolf), DestroyCreature(creature=pup))

        assert state.players[0].creatures() == []
        assert state.players[0].exile == [wolf]
        assert state.players[0].carrion == []

    def test_summon_fills_empty_slots_only(self, state, summon):
        """Tokens that don't fit are skipped, and each placed token's onPlay fires."""
        summon(0, "fish-prey-goldfish")
        summon(0, "fish-prey-goldfish")

        apply(state, SummonTokens(token_ids=["token-pup", "token-pup"], player_index=0))

        pups = [c for c in state.players[0].creatures() if c.card_id == "token-pup"]
        assert len(pups) == 1
        assert pups[0].summoned_turn == state.turn
        assert state.players[1].hp == 9
        assert any("No room" in entry.text for entry in state.log)

    def test_transform_keeps_slot(self, state, summon):
        """The replacement takes the same slot and summoning turn."""
        rabbit = summon(0, "mammal-prey-rabbit", summoned_turn=1)

        apply(state, TransformCard(creature=rabbit, card_id="feline-prey-gazelle"))

        replacement = state.players[0].field[0]
        assert replacement.card_id == "feline-prey-gazelle"
        assert replacement.summoned_turn == 1

    def test_steal_moves_and_resets_sickness(self, state, summon):
        """A stolen creature joins the thief's field, summoned this turn."""
        wolf = summon(1, "canine-predator-gray-wolf")
        wolf.has_attacked = True

        apply(state, StealCreature(creature=wolf, from_index=1, to_index=0))

        assert state.players[0].field[0] is wolf
        assert wolf.summoned_turn == state.turn
        assert not wolf.has_attacked

    def test_discard_fires_discard_effect(self, state, make_creature):
        """A discarded card with a discard effect resolves it."""
        card = make_creature(effects={"discardEffect": {"type": "draw", "params": {"count": 1}}})
        deck_card = make_creature("Deck Card")
        state.players[0].hand.append(card)
        state.players[0].deck.append(deck_card)

        apply(state, DiscardCards(player_index=0, cards=[card]))

        assert state.players[0].carrion == [card]
        assert state.players[0].hand == [deck_card]


class TestSelections:
    """Tests for selections raised while resolving."""

    def test_second_selection_is_logged(self, state, make_creature, place, caplog):
        """Only one selection survives; the other is reported in the log."""
        curse = make_creature("Curse", effects={"discardEffect": {"type": "select_enemy_to_kill", "params": {}}})
        state.players[0].hand.append(curse)
        place(1, make_creature("A"))
        place(1, make_creature("B"))
        own = PendingSelection(
            kind=SelectionKind.OPTION,
            title="Pick one",
            candidates=[Candidate(label="Left", value=0), Candidate(label="Right", value=1)],
            generator=EffectType.CHOOSE_OPTION,
        )
        result = EffectResult(mutations=[DiscardCards(player_index=0, cards=[curse])], selection=own)

        with caplog.at_level(logging.WARNING, logger="foodchain.engine_core.resolver"):
            pending = resolve_effect_result(state, result)

        assert pending is own
        assert state.players[0].carrion == [curse]
        assert "Dropping selection 'Choose an enemy creature to kill'" in caplog.text
