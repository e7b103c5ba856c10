"""
Food Chain CLI - Command-line tools for the rules engine.

Usage:
    foodchain audit [--cards FILE]   Validate card data and effect definitions
    foodchain cards [--cards FILE]   List the card catalog
    foodchain plan                   Run the combat planner on a sample board
"""

import argparse
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Food Chain - TCG rules engine",
        prog="foodchain",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Audit command
    audit_parser = subparsers.add_parser("audit", help="Validate card data")
    audit_parser.add_argument("--cards", help="Path to a card catalog JSON file")

    # Cards command
    cards_parser = subparsers.add_parser("cards", help="List the card catalog")
    cards_parser.add_argument("--cards", help="Path to a card catalog JSON file")

    # Plan command
    subparsers.add_parser("plan", help="Plan combat on a sample board")

    args = parser.parse_args(argv)

    if args.command == "audit":
        cmd_audit(args)
    elif args.command == "cards":
        cmd_cards(args)
    elif args.command == "plan":
        cmd_plan(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_audit(args):
    """Validate card data."""
    from .cards import CardRegistry
    from .errors import CardDataError

    try:
        registry = CardRegistry.load(args.cards, strict=False)
    except CardDataError as e:
        print(f"Error: {e}")
        for error in e.errors:
            print(f"  - {error}")
        sys.exit(1)

    result = registry.validate_effects()
    print(f"Cards: {len(registry.cards)}")
    print(f"Tokens: {len(registry.tokens)}")

    if result.warnings:
        print("\nWarnings:")
        for w in result.warnings:
            print(f"  - {w}")

    if result.errors:
        print("\nErrors:")
        for e in result.errors:
            print(f"  - {e}")
        sys.exit(1)

    print("\nAll card data is valid.")


def cmd_cards(args):
    """List the card catalog."""
    from .cards import CardRegistry
    from .errors import CardDataError

    try:
        registry = CardRegistry.load(args.cards)
    except CardDataError as e:
        print(f"Error: {e}")
        sys.exit(1)

    for card in registry.all_cards():
        stats = f"{card.atk}/{card.hp}" if card.is_creature else "-"
        keywords = ", ".join(card.keywords)
        print(f"{card.id:<36} {card.type.value:<10} {stats:<5} {card.name}" + (f" [{keywords}]" if keywords else ""))


def cmd_plan(args):
    """Plan combat on a sample board."""
    from .ai import CombatEvaluator
    from .cards import default_registry
    from .engine_core import GameState

    registry = default_registry()
    state = GameState.create(("Automa", "Rival"), registry=registry)
    state.turn = 3
    state.players[0].hp = 3

    board = {
        0: ["fish-predator-sailfish", "canine-predator-gray-wolf", "canine-prey-jackal"],
        1: ["mammal-predator-grizzly", "reptile-prey-snapping-turtle"],
    }
    for player_index, card_ids in board.items():
        for slot, card_id in enumerate(card_ids):
            state.players[player_index].field[slot] = registry.create_card_instance(card_id, current_turn=1)

    for player_index, player in enumerate(state.players):
        creatures = ", ".join(f"{c.name} {c.current_atk}/{c.current_hp}" for c in player.creatures())
        print(f"{player.name} ({player.hp} HP): {creatures}")

    plan = CombatEvaluator().plan_combat_phase(state, 0)
    print("\nPlan:")
    if not len(plan):
        print("  (no attacks)")
    for step, attack in enumerate(plan, start=1):
        if attack.target.is_player:
            target = state.players[attack.target.player_index].name
        else:
            target = state.find_on_field(attack.target.instance_id)[1].name
        print(f"  {step}. {attack.attacker.name} -> {target} ({attack.score}): {attack.reason}")


if __name__ == "__main__":
    main()
