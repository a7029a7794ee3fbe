#!/usr/bin/env python3
"""Calculate hold'em equities from the command line."""

import argparse
import logging
import os
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from equilab.errors import EquityError
from equilab.game.cards import format_cards, parse_cards
from equilab.game.equity import EquityCalculator, EquityConfig, Exact, MonteCarlo
from equilab.game.players import RangeHand, parse_player
from equilab.viz import display_range, display_report


def main():
    parser = argparse.ArgumentParser(
        description="Calculate equity for two or more hold'em hands"
    )
    parser.add_argument(
        "players",
        nargs="+",
        help="Hole cards ('AsKh', 'Ah??', '??') or a range ('QQ+,AKs', 'premium')",
    )
    parser.add_argument(
        "-b", "--board",
        default="",
        help="Board cards (e.g., 'Ks7d2c' or 'Ks 7d 2c')",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--exact",
        action="store_true",
        help="Enumerate every runout",
    )
    mode.add_argument(
        "-n", "--samples",
        type=int,
        help="Monte Carlo samples (default: exact when small enough)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for reproducible Monte Carlo runs",
    )
    parser.add_argument(
        "-w", "--workers",
        type=int,
        default=os.cpu_count() or 1,
        help="Worker processes (default: CPU count)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Stop after this many seconds and report a partial result",
    )
    parser.add_argument(
        "--ceiling",
        type=int,
        default=EquityConfig.exact_ceiling,
        help=f"Max deals for exact enumeration (default: {EquityConfig.exact_ceiling:,})",
    )
    parser.add_argument(
        "--show-range",
        action="store_true",
        help="Show a matrix for each range player",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output",
    )

    args = parser.parse_args()
    console = Console()

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )

    try:
        players = [parse_player(token) for token in args.players]
        board = parse_cards(args.board)
    except EquityError as e:
        console.print(f"[red]{e}[/]")
        return 1

    if args.exact:
        strategy = Exact()
    elif args.samples is not None:
        strategy = MonteCarlo(args.samples)
    else:
        strategy = None

    config = EquityConfig(
        exact_ceiling=args.ceiling,
        workers=max(1, args.workers),
        seed=args.seed,
        timeout=args.timeout,
    )
    calculator = EquityCalculator(config)

    if board:
        console.print(f"[bold]Board:[/] {format_cards(board)}")
    for i, player in enumerate(players, start=1):
        console.print(f"[bold]Player {i}:[/] {player}")
        if args.show_range and isinstance(player, RangeHand):
            display_range(player.range, title=f"Player {i} range", console=console)
    console.print()

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Calculating...", total=None)

            def callback(done, total):
                progress.update(task, completed=done, total=total)

            report = calculator.calculate(players, board, strategy, callback=callback)
    except EquityError as e:
        console.print(f"[red]{e}[/]")
        return 1

    display_report(report, labels=[str(p) for p in players], console=console)
    return 0


if __name__ == "__main__":
    sys.exit(main())
