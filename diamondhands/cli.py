"""
Diamond Hands CLI - Command-line interface for the game.

Usage:
    diamondhands play [--rounds N] [--seed S]    Hot-seat game in the terminal
    diamondhands serve [--host H] [--port P]     Run the HTTP API

Playing locally never touches a ledger: there is nothing to replicate to.
"""

import argparse
import random
import sys

from .config import get_settings, setup_logging


def main(argv=None):
    """Main CLI entry point."""
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Diamond Hands - two-player push-your-luck card game",
        prog="diamondhands",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a hot-seat game in the terminal")
    play_parser.add_argument("--rounds", type=int, default=settings.total_rounds, help="Number of rounds")
    play_parser.add_argument("--seed", type=int, help="Seed the shuffle for a repeatable game")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")

    args = parser.parse_args(argv)

    if args.command == "play":
        cmd_play(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def render(state) -> str:
    """Text view of a game state."""
    lines = [f"Round {state.current_round}/{state.total_rounds}  ({state.deck.count} cards left)"]
    for player in state.players:
        marker = ">" if player.is_active else " "
        secured = " [secured]" if player.has_secured else ""
        lines.append(
            f" {marker} {player.name}: round {player.round_score}, total {player.total_score}{secured}"
        )
    if state.revealed_cards:
        shown = ", ".join(f"{c.card_type.value}({c.value})" for c in state.revealed_cards)
        lines.append(f"   Table: {shown}")
    return "\n".join(lines)


def cmd_play(args):
    """Hot-seat game: both players share the keyboard."""
    from .session import HostGame

    if args.rounds < 1:
        print("Error: --rounds must be at least 1")
        sys.exit(1)

    rng = random.Random(args.seed) if args.seed is not None else None
    game = HostGame(total_rounds=args.rounds, rng=rng)

    print("Diamond Hands - first to 100 wins. [h]old to draw, [s]ecure to bank, [q]uit.")
    while not game.state.is_over:
        print()
        print(render(game.state))
        active = game.state.active_player
        try:
            choice = input(f"{active.name}> ").strip().lower()
        except EOFError:
            choice = "q"

        if choice in ("q", "quit"):
            print("Bye.")
            return
        if choice in ("h", "hold"):
            result = game.hold()
        elif choice in ("s", "secure"):
            result = game.secure()
        else:
            print("Type h, s or q.")
            continue

        if not result.success:
            print(f"Not allowed: {result.error}")
            continue
        for change in result.changes:
            print(f"  {change}")

    print()
    print(render(game.state))
    winner = game.state.winner
    print(f"\nGame over. {winner.name} wins with {winner.total_score}.")


def cmd_serve(args):
    """Run the API with uvicorn."""
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install diamond-hands[api]")
        sys.exit(1)

    from .api import create_app

    setup_logging()
    uvicorn.run(create_app(), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
