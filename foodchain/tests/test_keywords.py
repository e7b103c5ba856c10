"""
Tests for the keyword primitive layer.

Tests:
- Flag and keyword primitives
- Dry-dropped suppression
- Numeric keywords
- Pack and Pride effective attack
"""

from ..card_schema.card_definition import CardType
from ..engine_core.keywords import (
    Keyword,
    Primitive,
    are_abilities_active,
    calculate_pack_bonus,
    calculate_total_pounce,
    calculate_total_venom,
    cant_attack,
    cant_be_consumed,
    cant_consume,
    get_active_primitives,
    get_effective_attack,
    has_keyword,
    has_primitive,
    keyword_magnitude,
    loses_status_on_damage,
    parse_keyword,
)


class TestPrimitives:
    """Tests for primitive lookup."""

    def test_frozen_flag_blocks_attack_and_eating(self, make_creature):
        """A frozen creature can't attack, be consumed, or consume."""
        creature = make_creature()
        creature.frozen = True

        assert cant_attack(creature)
        assert cant_be_consumed(creature)
        assert cant_consume(creature)
        assert not loses_status_on_damage(creature)

    def test_webbed_flag_loses_on_damage(self, make_creature):
        """Webbed shares cantAttack with frozen but adds losesOnDamage."""
        creature = make_creature()
        creature.webbed = True

        assert cant_attack(creature)
        assert loses_status_on_damage(creature)
        assert not cant_be_consumed(creature)

    def test_paralysis_only_blocks_attacking(self, make_creature):
        """Paralysis never blocks consumption."""
        creature = make_creature()
        creature.paralyzed = True

        assert get_active_primitives(creature) == {Primitive.CANT_ATTACK, Primitive.DIES_END_OF_TURN}
        assert not cant_be_consumed(creature)
        assert not cant_consume(creature)

    def test_keyword_primitives(self, make_creature):
        """Passive and Inedible map through the keyword table."""
        assert cant_attack(make_creature(keywords=["Passive"]))
        assert cant_be_consumed(make_creature(keywords=["Inedible"]))
        assert not cant_attack(make_creature(keywords=["Haste"]))

    def test_targeting_primitives(self, make_creature):
        """Hidden dodges attacks only; Invisible dodges attacks and spells."""
        hidden = make_creature(keywords=["Hidden"])
        invisible = make_creature(keywords=["Invisible"])

        assert has_primitive(hidden, Primitive.CANT_BE_TARGETED_BY_ATTACKS)
        assert not has_primitive(hidden, Primitive.CANT_BE_TARGETED_BY_SPELLS)
        assert has_primitive(invisible, Primitive.CANT_BE_TARGETED_BY_SPELLS)

    def test_none_has_no_primitives(self):
        """Missing instances answer no to everything."""
        assert get_active_primitives(None) == set()
        assert not cant_attack(None)
        assert not are_abilities_active(None)


class TestDryDropped:
    """Tests for dry-dropped predators."""

    def test_keywords_suppressed(self, make_creature):
        """A dry-dropped predator's keywords do nothing."""
        predator = make_creature(keywords=["Passive", "Haste"], card_type=CardType.PREDATOR)
        predator.dry_dropped = True

        assert not are_abilities_active(predator)
        assert not has_keyword(predator, Keyword.HASTE)
        assert not cant_attack(predator)

    def test_flags_still_apply(self, make_creature):
        """Status flags are not abilities and still count."""
        predator = make_creature(card_type=CardType.PREDATOR)
        predator.dry_dropped = True
        predator.frozen = True

        assert cant_attack(predator)

    def test_dry_dropped_prey_is_unaffected(self, make_creature):
        """Only predators are suppressed."""
        prey = make_creature(keywords=["Haste"])
        prey.dry_dropped = True

        assert has_keyword(prey, Keyword.HASTE)


class TestNumericKeywords:
    """Tests for keywords with a magnitude."""

    def test_parse(self):
        """The trailing number is split off."""
        assert parse_keyword("Venom 2") == ("Venom", 2)
        assert parse_keyword("Free Play") == ("Free Play", None)
        assert parse_keyword("Haste") == ("Haste", None)

    def test_magnitude(self, make_creature):
        """Magnitude reads the suffix; bare keywords count 1; absent is 0."""
        assert keyword_magnitude(make_creature(keywords=["Venom 3"]), Keyword.VENOM) == 3
        assert keyword_magnitude(make_creature(keywords=["Venom"]), Keyword.VENOM) == 1
        assert keyword_magnitude(make_creature(), Keyword.VENOM) == 0

    def test_numeric_keyword_has_no_primitive(self, make_creature):
        """Venom maps to no primitive."""
        assert get_active_primitives(make_creature(keywords=["Venom 2"])) == set()

    def test_field_totals(self, state, make_creature, place):
        """Venom and Pounce are summed over one player's field."""
        place(0, make_creature("Spider", keywords=["Venom 1"]))
        place(0, make_creature("Widow", keywords=["Venom 2", "Pounce 1"]))
        place(1, make_creature("Other", keywords=["Venom 5"]))

        assert calculate_total_venom(state, 0) == 3
        assert calculate_total_pounce(state, 0) == 1


class TestEffectiveAttack:
    """Tests for Pack and Pride."""

    def test_pack_of_three(self, state, make_creature, place):
        """N pack creatures of one tribe each get +(N-1)."""
        wolves = [
            place(0, make_creature(f"Wolf {i}", atk=2, hp=2, keywords=["Pack"], tribe="Canine"))
            for i in range(3)
        ]
        for wolf in wolves:
            assert get_effective_attack(wolf, state, 0) == 4
            assert wolf.current_atk == 2

    def test_pack_ignores_other_tribes_and_sides(self, state, make_creature, place):
        """Only same-tribe creatures on the same field count."""
        wolf = place(0, make_creature("Wolf", atk=2, keywords=["Pack"], tribe="Canine"))
        place(0, make_creature("Cat", tribe="Feline"))
        place(1, make_creature("Rival Wolf", keywords=["Pack"], tribe="Canine"))

        assert calculate_pack_bonus(wolf, state, 0) == 0

    def test_pack_skips_suppressed_members(self, state, make_creature, place):
        """A dry-dropped packmate does not count."""
        wolf = place(0, make_creature("Wolf", atk=2, keywords=["Pack"], tribe="Canine"))
        dry = place(0, make_creature("Dry", keywords=["Pack"], tribe="Canine", card_type=CardType.PREDATOR))
        dry.dry_dropped = True

        assert get_effective_attack(wolf, state, 0) == 2
        assert get_effective_attack(dry, state, 0) == dry.current_atk

    def test_pride(self, state, summon):
        """Pride counts other same-tribe creatures with Pride."""
        lion = summon(0, "feline-predator-lion")
        lioness = summon(0, "feline-predator-lioness")
        summon(0, "feline-prey-gazelle")

        assert get_effective_attack(lion, state, 0) == 4
        assert get_effective_attack(lioness, state, 0) == 3

    def test_owner_is_found_when_omitted(self, state, summon):
        """Without an owner index the instance's side is looked up."""
        lion = summon(1, "feline-predator-lion")
        summon(1, "feline-predator-lioness")

        assert get_effective_attack(lion, state) == 4

    def test_no_state_is_current_attack(self, make_creature):
        """Without a state only current attack is known."""
        assert get_effective_attack(make_creature(atk=5, keywords=["Pack"])) == 5
