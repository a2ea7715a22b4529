"""
Skirmish CLI - Command-line interface for the engine.

Usage:
    skirmish serve [--host H] [--port P]        Run the API server
    skirmish cards                              List the card catalog
    skirmish combat --round N [--player 1,6,11] Simulate one autobattler round
"""

import argparse
import logging
import sys


def configure_logging(level: str = "INFO"):
    """Root logging setup for command-line entry points."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Skirmish - Card duel and autobattler engine",
        prog="skirmish",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")

    # Cards command
    subparsers.add_parser("cards", help="List the card catalog")

    # Combat command
    combat_parser = subparsers.add_parser("combat", help="Simulate one autobattler round")
    combat_parser.add_argument("--round", type=int, default=1, dest="round_number", help="Round number")
    combat_parser.add_argument(
        "--player",
        help="Comma-separated pool unit ids for your roster (default: a generated roster)",
    )

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "cards":
        cmd_cards(args)
    elif args.command == "combat":
        cmd_combat(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args):
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "skirmish.api.app:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
    )


def cmd_cards(args):
    """List the card catalog."""
    from .catalog import CardKind, default_catalog

    for card in default_catalog().cards():
        if card.kind == CardKind.UNIT:
            stats = f"{card.attack}/{card.health}"
        elif card.kind == CardKind.WEAPON:
            stats = f"{card.attack}/{card.durability}"
        else:
            stats = "-"
        print(f"{card.card_id:<18} {card.cost:>2}  {card.kind.value:<6} {stats:<5} {card.name}")


def cmd_combat(args):
    """Simulate one autobattler round against a generated opponent."""
    from .catalog.pool import generate_opponent_roster, get_unit
    from .combat import CombatResolver

    if args.round_number < 1:
        print("Error: --round must be at least 1")
        sys.exit(1)

    if args.player:
        player = []
        for unit_id in args.player.split(","):
            unit = get_unit(unit_id.strip())
            if unit is None:
                print(f"Error: Unknown unit id: {unit_id}")
                sys.exit(1)
            player.append(unit)
    else:
        player = generate_opponent_roster(args.round_number)

    opponent = generate_opponent_roster(args.round_number)
    outcome = CombatResolver().resolve(player, opponent, round_number=args.round_number)

    for event in outcome.events:
        data = event.to_dict()
        step = data.pop("step")
        kind = data.pop("kind")
        print(f"[{step:>2}] {kind}: {data}")

    print(f"\nResult: {outcome.result.value} ({outcome.damage} damage, {outcome.steps} steps)")


if __name__ == "__main__":
    main()
