"""Command line entry point: scripted simulations and the interactive console."""

# Court Rotation
# Copyright (C) 2025  Court Rotation developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import argparse
import itertools
import logging
import sys
from typing import List, Optional, Tuple

from courtrotation import __version__
from courtrotation.constants import (
    DEFAULT_COURT_COUNT,
    DEFAULT_PRIORITY,
    MAX_COURTS,
    MIN_COURTS,
    PRIORITY_MODES,
)
from courtrotation.engine.randomness import SeededRandom
from courtrotation.exceptions import CourtRotationException
from courtrotation.models.config import SessionConfig
from courtrotation.session import Session
from courtrotation.utils import set_global_level, setup_logger

logger = setup_logger(__name__)

# Levels handed out round-robin to simulated players
SIMULATED_LEVELS = ("A", "B", "C", "A/B", "B/C", "A/B/C")


def court_count(value: str) -> int:
    """argparse type for a court count within the supported range."""
    try:
        count = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid court count '{value}'") from None
    if not MIN_COURTS <= count <= MAX_COURTS:
        raise argparse.ArgumentTypeError(
            f"Court count must be between {MIN_COURTS} and {MAX_COURTS}"
        )
    return count


def build_simulation(args: argparse.Namespace) -> Session:
    """Set up a session with generated players.

    Simulated time advances one minute per scheduling pass so results do
    not depend on the wall clock.
    """
    ticks = itertools.count(start=60, step=60)
    config = SessionConfig(
        court_count=args.courts,
        level_priority=args.priority,
        order_first_match_by_list=args.list_first,
    )
    session = Session(config, rng=SeededRandom(args.seed), clock=lambda: float(next(ticks)))
    for i in range(args.players):
        session.add_player(f"P{i + 1:02d}", SIMULATED_LEVELS[i % len(SIMULATED_LEVELS)])
    for player in session.players[: args.inactive]:
        session.set_active(player.id, False)
    return session


def run_simulation(session: Session, rounds: int, late_ids: List[int]) -> None:
    """Rotate ``rounds`` times; ``late_ids`` join halfway through."""
    for round_number in range(1, rounds + 1):
        if round_number == rounds // 2 + 1:
            for player_id in late_ids:
                session.set_active(player_id, True)
        session.rotate()
        logger.debug("Round %s: %s matches", round_number, len(session.history))


def most_repeated_pairs(session: Session, limit: int = 5) -> List[Tuple[str, str, int]]:
    """Partner pairs sorted by how often they teamed up, most first."""
    pairs = []
    for player in session.roster:
        for other_id, count in player.pair_history.items():
            if player.id < other_id and other_id in session.roster and count > 0:
                pairs.append((player.name, session.roster[other_id].name, count))
    pairs.sort(key=lambda p: (-p[2], p[0], p[1]))
    return pairs[:limit]


def format_summary(session: Session) -> str:
    lines = [
        f"{'Player':<8}{'Level':<7}{'Plays':>6}{'Imputed':>9}",
        "-" * 30,
    ]
    for player in session.players:
        lines.append(
            f"{player.name:<8}{player.level:<7}"
            f"{player.play_count:>6}{player.imputed_play_count:>9}"
        )
    lines.append("")
    lines.append(f"Matches played: {len(session.history)}")
    pairs = most_repeated_pairs(session)
    if pairs:
        lines.append("Most repeated partners:")
        for a, b, count in pairs:
            lines.append(f"  {a} & {b}: {count}")
    return "\n".join(lines)


def run_simulate_command(args: argparse.Namespace) -> int:
    if args.players < 0 or args.rounds < 0 or args.inactive < 0:
        logger.error("--players, --rounds and --inactive must not be negative")
        return 1
    session = build_simulation(args)
    late_ids = [p.id for p in session.players[: args.inactive]]
    run_simulation(session, args.rounds, late_ids)
    print(format_summary(session))
    return 0


def run_console_command(args: argparse.Namespace) -> int:
    # Imported here so simulations do not pay for prompt_toolkit startup
    from courtrotation.console import run_interactive
    from courtrotation.persistence import load_session

    session = load_session(args.load) if args.load else None
    return run_interactive(session)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="court-rotation",
        description="Doubles court rotation: fair match assignment for club sessions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Twenty players on four courts, ten rotations
  court-rotation simulate --players 20 --courts 4 --rounds 10 --seed 1

  # Strong level grouping, three late arrivals
  court-rotation simulate --players 16 --priority strong --inactive 3

  # Interactive console with a saved session
  court-rotation console --load club.json
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    sim_parser = subparsers.add_parser("simulate", help="Run a scripted session")
    sim_parser.add_argument("--players", type=int, default=16, help="Number of players (default: 16)")
    sim_parser.add_argument(
        "--courts",
        type=court_count,
        default=DEFAULT_COURT_COUNT,
        help=f"Number of courts (default: {DEFAULT_COURT_COUNT})",
    )
    sim_parser.add_argument("--rounds", type=int, default=8, help="Number of rotations (default: 8)")
    sim_parser.add_argument(
        "--priority",
        choices=PRIORITY_MODES,
        default=DEFAULT_PRIORITY,
        help=f"Level priority (default: {DEFAULT_PRIORITY})",
    )
    sim_parser.add_argument("--seed", type=int, help="Random seed for reproducibility")
    sim_parser.add_argument(
        "--inactive",
        type=int,
        default=0,
        help="Players who sit out the first half of the session (default: 0)",
    )
    sim_parser.add_argument(
        "--list-first",
        action="store_true",
        help="Fill first matches in list order",
    )
    sim_parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    sim_parser.set_defaults(func=run_simulate_command)

    console_parser = subparsers.add_parser("console", help="Start the interactive console")
    console_parser.add_argument("--load", help="Session file to open")
    console_parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    console_parser.set_defaults(func=run_console_command)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI.

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if getattr(args, "verbose", False):
        set_global_level(logging.DEBUG)

    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except CourtRotationException as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
