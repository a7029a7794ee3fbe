"""Pytest configuration and fixtures."""

import pytest

from equilab.game.cards import parse_cards
from equilab.game.equity import EquityCalculator, EquityConfig


@pytest.fixture
def cards():
    """Parse card notation, e.g. cards('AsKh')."""
    return parse_cards


@pytest.fixture
def calculator():
    return EquityCalculator(EquityConfig(seed=1234))


@pytest.fixture
def board_flop():
    return parse_cards("Ks7d2c")


@pytest.fixture
def board_river():
    return parse_cards("Ks7d2c9h3s")
