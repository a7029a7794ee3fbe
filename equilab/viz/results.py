"""Terminal rendering of equity reports and ranges."""

from dataclasses import dataclass
from typing import Optional, Sequence

from rich.console import Console
from rich.style import Style
from rich.table import Table
from rich.text import Text

from equilab.game.equity import EquityReport, Exact
from equilab.game.ranges import HandRange


# Standard hand matrix layout (13x13)
RANKS = "AKQJT98765432"

# Pre-computed hand matrix positions
# Pairs on diagonal, suited above, offsuit below
HAND_MATRIX = []
for i, r1 in enumerate(RANKS):
    row = []
    for j, r2 in enumerate(RANKS):
        if i == j:
            row.append(f"{r1}{r2}")  # Pair
        elif i < j:
            row.append(f"{r1}{r2}s")  # Suited (above diagonal)
        else:
            row.append(f"{r2}{r1}o")  # Offsuit (below diagonal)
    HAND_MATRIX.append(row)


def _pct(value: float) -> str:
    return f"{value * 100:.2f}%"


def report_table(
    report: EquityReport,
    labels: Optional[Sequence[str]] = None,
) -> Table:
    """
    Build a rich table for an equity report.

    Args:
        report: Result of an equity calculation
        labels: Hand description per player (default: 'Player N')

    Returns:
        Table with win, tie and equity percentages per player
    """
    table = Table(title="Equity", show_header=True, header_style="bold")
    table.add_column("Player", style="bold")
    table.add_column("Hand")
    table.add_column("Win", justify="right")
    table.add_column("Tie", justify="right")
    table.add_column("Equity", justify="right", style="bold")

    best = max(report.equities)
    for i, result in enumerate(report.results):
        label = labels[i] if labels else ""
        equity = Text(_pct(result.equity))
        if result.equity == best:
            equity.stylize("green")
        table.add_row(
            f"Player {i + 1}",
            label,
            _pct(result.win_rate),
            _pct(result.tie_rate),
            equity,
        )

    method = "exact" if isinstance(report.strategy, Exact) else str(report.strategy)
    deals = report.total_deals
    deals_text = f"{deals:,}" if isinstance(deals, int) else f"{float(deals):,.2f} (weighted)"
    caption = f"{method}, {deals_text} deals in {report.elapsed:.2f}s"
    if report.seed is not None:
        caption += f", seed {report.seed}"
    table.caption = caption
    return table


def display_report(
    report: EquityReport,
    labels: Optional[Sequence[str]] = None,
    console: Optional[Console] = None,
) -> None:
    """Print an equity report, flagging runs stopped by the deadline."""
    console = console or Console()
    console.print(report_table(report, labels))

    if report.undersampled:
        console.print(
            f"[yellow]Stopped early: {report.partitions_completed} of "
            f"{report.partitions} partitions finished. Treat these numbers "
            "as lower confidence.[/]"
        )


@dataclass
class RangeCell:
    """Data for a single hand in the range."""
    hand: str
    frequency: float = 0.0  # 0-1, share of the hand's combos in range


class RangeDisplay:
    """Display a HandRange as a 13x13 matrix."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self.cells: dict[str, RangeCell] = {}

        # Initialize all hands with zero frequency
        for row in HAND_MATRIX:
            for hand in row:
                self.cells[hand] = RangeCell(hand=hand)

    def set_frequency(self, hand: str, frequency: float) -> None:
        """Set frequency for a hand."""
        if hand in self.cells:
            self.cells[hand].frequency = frequency

    def load_range(self, hand_range: HandRange) -> None:
        """Fill the matrix from a range's per-hand weights."""
        for hand, frequency in hand_range.class_weights().items():
            self.set_frequency(hand, min(frequency, 1.0))

    def build_table(self, title: str = "Range") -> Table:
        table = Table(title=title, show_header=True, header_style="bold")

        # Add column headers
        table.add_column("", style="bold")
        for rank in RANKS:
            table.add_column(rank, justify="center")

        for i, rank in enumerate(RANKS):
            row = [rank]
            for j in range(13):
                freq = self.cells[HAND_MATRIX[i][j]].frequency

                # Color based on frequency
                if freq > 0.8:
                    style = Style(bgcolor="green", color="white")
                elif freq > 0.5:
                    style = Style(bgcolor="yellow", color="black")
                elif freq > 0.2:
                    style = Style(bgcolor="orange3", color="black")
                elif freq > 0:
                    style = Style(bgcolor="red", color="white")
                else:
                    style = Style(bgcolor="grey30", color="grey50")

                cell = f"{freq * 100:.0f}" if freq > 0 else ""
                row.append(Text(cell.center(3), style=style))

            table.add_row(*row)

        return table

    def display_terminal(self, title: str = "Range") -> None:
        """Display range in terminal using rich."""
        self.console.print(self.build_table(title))


def display_range(
    hand_range: HandRange,
    title: str = "Range",
    console: Optional[Console] = None,
) -> None:
    """
    Convenience function to display a range.

    Args:
        hand_range: Range to show
        title: Display title
        console: Console to print to
    """
    display = RangeDisplay(console)
    display.load_range(hand_range)
    display.display_terminal(title=title)
