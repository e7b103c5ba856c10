"""
Tests for trigger dispatch.
"""

from ..card_schema.card_definition import CardType
from ..card_schema.effect_dsl import EffectType, TriggerKind
from ..engine_core.effect_result import DamageCreature, EffectResult, RemoveAbilities
from ..engine_core.resolver import resolve_effect_result
from ..engine_core.triggers import (
    fire_trigger,
    get_effect_definition,
    has_trigger,
    is_suppressed,
    resolve_card_effect,
)
from ..effects.context import EffectContext


class TestEffectLookup:
    """Tests for finding a card's effect."""

    def test_instance_table_first(self, registry, summon):
        """The instance's own effects are used when present."""
        goldfish = summon(0, "fish-prey-goldfish")

        spec = get_effect_definition(goldfish, TriggerKind.ON_PLAY, registry)

        assert spec == {"type": "draw", "params": {"count": 1}}
        assert not has_trigger(goldfish, TriggerKind.ON_SLAIN, registry)

    def test_registry_fallback(self, registry, summon):
        """An instance with an empty table falls back to its definition."""
        goldfish = summon(0, "fish-prey-goldfish")
        goldfish.effects = {}

        spec = get_effect_definition(goldfish, TriggerKind.ON_PLAY, registry)

        assert spec.type == EffectType.DRAW

    def test_cancelled_has_nothing(self, state, summon):
        """Removing abilities also blocks the registry fallback."""
        goldfish = summon(0, "fish-prey-goldfish")

        resolve_effect_result(state, EffectResult.of(RemoveAbilities(creature=goldfish)))

        assert get_effect_definition(goldfish, TriggerKind.ON_PLAY, state.registry) is None
        assert is_suppressed(goldfish, TriggerKind.ON_PLAY)


class TestSuppression:
    """Tests for dry-dropped predators."""

    def test_dry_dropped_predator_abilities(self, state, summon):
        """Ability triggers of a dry-dropped predator never fire."""
        hyena = summon(0, "mammal-predator-hyena")
        hyena.dry_dropped = True
        context = EffectContext(state=state, player_index=0, creature=hyena)

        assert is_suppressed(hyena, TriggerKind.ON_CONSUME)
        assert resolve_card_effect(hyena, TriggerKind.ON_CONSUME, context) is None

    def test_spell_triggers_not_suppressed(self, make_creature):
        """Only ability triggers are affected by dry-dropping."""
        creature = make_creature(card_type=CardType.PREDATOR)
        creature.dry_dropped = True

        assert not is_suppressed(creature, TriggerKind.TRAP_EFFECT)
        assert not is_suppressed(creature, TriggerKind.DISCARD_EFFECT)


class TestFireTrigger:
    """Tests for resolve-and-apply in one step."""

    def test_on_play_draws(self, state, registry, summon):
        """Goldfish draws a card when played."""
        card = registry.create_card_instance("fish-prey-flying-fish", 1)
        state.players[0].deck.append(card)
        goldfish = summon(0, "fish-prey-goldfish")

        assert fire_trigger(state, goldfish, TriggerKind.ON_PLAY, 0) is None
        assert state.players[0].hand == [card]

    def test_refs_reach_the_effect(self, state, summon):
        """Combat refs are visible to the generator."""
        grizzly = summon(0, "mammal-predator-grizzly")
        wolf = summon(1, "canine-predator-gray-wolf")

        fire_trigger(state, grizzly, TriggerKind.ON_BEFORE_COMBAT, 0, defender=wolf, target=wolf)

        assert wolf.current_hp == 1

    def test_no_effect_is_silent(self, state, summon):
        """A card without the trigger does nothing."""
        wolf = summon(0, "canine-predator-gray-wolf")

        assert fire_trigger(state, wolf, TriggerKind.ON_PLAY, 0) is None
        assert state.log == []

    def test_spell_effect(self, state, registry, summon):
        """Spells resolve through the same path."""
        wolf = summon(0, "canine-predator-gray-wolf")
        jackal = summon(1, "canine-prey-jackal")
        eruption = registry.create_card_instance("spell-volcanic-eruption", state.turn)

        fire_trigger(state, eruption, TriggerKind.SPELL_EFFECT, 0)

        assert wolf.current_hp == 1
        assert jackal.current_hp == 0

    def test_selection_is_returned_unapplied(self, state, summon):
        """A trigger that needs a choice returns it and changes nothing."""
        mako = summon(0, "fish-predator-mako")
        wolf = summon(1, "canine-predator-gray-wolf")
        jackal = summon(1, "canine-prey-jackal")

        selection = fire_trigger(state, mako, TriggerKind.ON_CONSUME, 0)

        assert selection is not None
        assert selection.context_refs["creature"] == mako.instance_id
        assert wolf.current_hp == 3
        assert jackal.current_hp == 2

    def test_context_creature_defaults_to_instance(self, state, make_creature, place):
        """'self' resolves to the firing card."""
        creature = place(0, make_creature(
            hp=3, effects={"onEnd": {"type": "damage_creature", "params": {"amount": 1, "target": "self"}}},
        ))
        context = EffectContext(state=state, player_index=0)

        result = resolve_card_effect(creature, TriggerKind.ON_END, context)

        assert result.mutations == [DamageCreature(creature=creature, amount=1)]
