"""Tests for equity calculations."""

import os
from fractions import Fraction

import pytest

from equilab.errors import (
    CombinationSpaceTooLarge, DuplicateCard, EmptyRange, InsufficientDeck,
    InvalidBoard, NoPlayers, SampleCountInvalid, TooFewPlayers,
)
from equilab.game.equity import (
    EquityCalculator, EquityConfig, Exact, MonteCarlo, calculate_equity,
)
from equilab.game.players import ExactHand, RangeHand, parse_player


def snapshot(report):
    return [(r.wins, r.ties, r.losses, r.total_deals) for r in report.results]


class TestExact:
    def test_river_single_deal(self, calculator, board_river):
        # KK makes trips on a K-high board, AA has one pair
        report = calculator.calculate(["AsAh", "KhKc"], board_river, Exact())

        assert report.total_deals == 1
        assert report.partitions == 1
        assert report.results[1].wins == 1
        assert report.results[0].losses == 1
        assert report.equities == [0.0, 1.0]

    def test_river_split_pot(self, calculator):
        report = calculator.calculate(["2c3d", "4h5s"], "AcKdQhJsTc", Exact())

        assert report.total_deals == 1
        assert [r.ties for r in report.results] == [Fraction(1, 2)] * 2
        assert report.equities == [0.5, 0.5]

    def test_flop(self, calculator, board_flop):
        report = calculator.calculate(["AsAh", "KhKc"], board_flop, Exact())

        assert report.total_deals == 990  # C(45, 2)
        assert report.results[1].equity > 0.85
        assert sum(r.equity_fraction for r in report.results) == 1
        assert report.is_exact

    def test_turn(self, calculator):
        report = calculator.calculate(["AsAh", "KhKc"], "Ks7d2c9h", Exact())
        assert report.total_deals == 44

    def test_three_way_conservation(self, calculator):
        report = calculator.calculate(["AhKh", "QsQd", "7c8c"], "2h5h9c", Exact())

        assert report.total_deals == 903  # C(43, 2)
        assert sum(r.equity_fraction for r in report.results) == 1
        assert abs(sum(report.equities) - 1) <= 1e-9

    def test_results_follow_player_order(self, calculator, board_river):
        forward = calculator.calculate(["AsAh", "KhKc"], board_river, Exact())
        backward = calculator.calculate(["KhKc", "AsAh"], board_river, Exact())
        assert forward.equities == list(reversed(backward.equities))

    def test_workers_do_not_change_result(self, board_flop):
        players = ["AsAh", "KhKc"]
        inline = EquityCalculator(EquityConfig(workers=1)).calculate(players, board_flop, Exact())
        pooled = EquityCalculator(EquityConfig(workers=2)).calculate(players, board_flop, Exact())
        assert snapshot(inline) == snapshot(pooled)

    def test_callback(self, calculator, board_flop):
        calls = []
        report = calculator.calculate(
            ["AsAh", "KhKc"], board_flop, Exact(),
            callback=lambda done, total: calls.append((done, total)),
        )
        assert len(calls) == report.partitions
        assert calls[-1] == (report.partitions, report.partitions)

    @pytest.mark.slow
    def test_aces_vs_kings_preflop(self):
        config = EquityConfig(workers=os.cpu_count() or 1)
        report = calculate_equity(["AhAc", "KhKc"], strategy=Exact(), config=config)

        assert report.total_deals == 1_712_304  # C(48, 5)
        aces, kings = report.results
        assert 0.17 < kings.equity < 0.19
        assert aces.equity_fraction == 1 - kings.equity_fraction


class TestUnknownCards:
    def test_partial_hand(self, calculator):
        report = calculator.calculate(["Ah??", "KsKd"], "Qs7d2c9h3s", Exact())

        assert report.total_deals == 44
        assert sum(r.equity_fraction for r in report.results) == 1

    def test_random_hand_on_river(self, calculator):
        report = calculator.calculate(
            [ExactHand(), parse_player("AsAh")], "Ks7d2c9h3s", Exact()
        )
        assert report.total_deals == 990  # C(45, 2)
        assert report.results[1].equity > 0.8


class TestRanges:
    def test_range_on_river(self, calculator):
        report = calculator.calculate(["AsAh", "KK"], "2c7d9hTs3c", Exact())

        assert report.total_deals == 6
        assert report.equities == [1.0, 0.0]

    def test_clashing_ranges_split(self, calculator):
        report = calculator.calculate(["AA", "AA"], "2c7d9hTs3c", Exact())

        assert report.total_deals == 6
        assert report.equities == [0.5, 0.5]

    def test_weighted_range(self, calculator):
        # Three KK combos make a set (weight 1/2 each), six QQ combos lose
        report = calculator.calculate(["AsAh", "KK:1/2,QQ"], "Kc7d2s9h3c", Exact())

        assert report.total_deals == Fraction(15, 2)
        assert report.results[1].equity_fraction == Fraction(1, 5)
        assert report.results[0].equity_fraction == Fraction(4, 5)

    def test_range_hand_object(self, calculator):
        hero = parse_player("AsAh")
        villain = RangeHand.from_string("KK")
        report = calculator.calculate([hero, villain], "2c7d9hTs3c", Exact())
        assert report.equities == [1.0, 0.0]

    def test_blocked_range(self, calculator):
        with pytest.raises(EmptyRange):
            calculator.calculate(["AsAh", "AdAc", "AA"], "2c7d9hTs3c", Exact())

    def test_ranges_that_always_clash_exact(self, calculator):
        with pytest.raises(EmptyRange):
            calculator.calculate(["AsAh,", "AsKs,"], "2c7d9hTd3c", Exact())

    def test_ranges_that_always_clash_monte_carlo(self):
        calculator = EquityCalculator(EquityConfig(seed=5, max_rejections=50))
        with pytest.raises(EmptyRange):
            calculator.calculate(["AsAh,", "AsKs,"], "2c7d9hTd3c", MonteCarlo(10))

    def test_monte_carlo_range_weights(self):
        calculator = EquityCalculator(EquityConfig(seed=11))
        report = calculator.calculate(["AsAh", "KK:1/2,QQ"], "Kc7d2s9h3c", MonteCarlo(20_000))
        assert report.results[1].equity == pytest.approx(0.2, abs=0.02)


class TestMonteCarlo:
    def test_aces_vs_kings(self):
        calculator = EquityCalculator(EquityConfig(seed=2024))
        report = calculator.calculate(["AhAc", "KhKc"], strategy=MonteCarlo(20_000))

        assert report.total_deals == 20_000
        assert 0.16 < report.results[1].equity < 0.20

    def test_same_seed_same_counts(self, board_flop):
        config = EquityConfig(seed=99)
        first = EquityCalculator(config).calculate(["AsKh", "QdQc"], board_flop, MonteCarlo(5000))
        second = EquityCalculator(config).calculate(["AsKh", "QdQc"], board_flop, MonteCarlo(5000))
        assert snapshot(first) == snapshot(second)

    def test_seed_independent_of_workers(self, board_flop):
        players = ["AsKh", "QdQc", "??"]
        inline = EquityCalculator(EquityConfig(seed=3, workers=1))
        pooled = EquityCalculator(EquityConfig(seed=3, workers=2))
        assert snapshot(inline.calculate(players, board_flop, MonteCarlo(3000))) == \
            snapshot(pooled.calculate(players, board_flop, MonteCarlo(3000)))

    def test_reported_seed_reproduces(self, board_flop):
        first = EquityCalculator().calculate(["AsKh", "QdQc"], board_flop, MonteCarlo(2000))
        again = EquityCalculator(EquityConfig(seed=first.seed)).calculate(
            ["AsKh", "QdQc"], board_flop, MonteCarlo(2000)
        )
        assert first.seed is not None
        assert snapshot(first) == snapshot(again)

    def test_fewer_samples_than_partitions(self, calculator, board_flop):
        report = calculator.calculate(["AsKh", "QdQc"], board_flop, MonteCarlo(3))
        assert report.total_deals == 3
        assert report.partitions == 3

    def test_deadline_marks_undersampled(self):
        calculator = EquityCalculator(EquityConfig(seed=1, timeout=-1))
        report = calculator.calculate(["AhAc", "KhKc"], strategy=MonteCarlo(1_000_000))

        assert report.undersampled
        assert report.partitions_completed < report.partitions
        assert report.total_deals < 1_000_000
        assert not report.is_exact

    def test_deadline_stops_inside_partition(self):
        config = EquityConfig(seed=1, timeout=0.5, mc_partitions=1, check_interval=64)
        report = EquityCalculator(config).calculate(
            ["AhAc", "KhKc"], strategy=MonteCarlo(10_000_000)
        )

        assert report.undersampled
        assert report.partitions == 1
        assert report.partitions_completed == 0
        assert 0 < report.total_deals < 10_000_000


class TestStrategySelection:
    def test_auto_exact_when_small(self, calculator, board_flop):
        report = calculator.calculate(["AsAh", "KhKc"], board_flop)
        assert report.strategy == Exact()

    def test_auto_monte_carlo_when_large(self):
        calculator = EquityCalculator(EquityConfig(exact_ceiling=1000, samples=2000, seed=1))
        report = calculator.calculate(["AsAh", "KhKc"])
        assert report.strategy == MonteCarlo(2000)
        assert report.total_deals == 2000

    def test_exact_above_ceiling(self):
        calculator = EquityCalculator(EquityConfig(exact_ceiling=1000))
        with pytest.raises(CombinationSpaceTooLarge) as exc:
            calculator.calculate(["AsAh", "KhKc"], strategy=Exact())
        assert exc.value.count == 1_712_304
        assert exc.value.ceiling == 1000

    def test_exact_deadline_stops_inside_partition(self):
        config = EquityConfig(timeout=0.5, check_interval=64)
        report = EquityCalculator(config).calculate(["AhAc", "KhKc"], strategy=Exact())

        assert report.undersampled
        assert not report.is_exact
        assert 0 < report.total_deals < 1_712_304


class TestValidation:
    def test_shared_hole_card(self, calculator):
        with pytest.raises(DuplicateCard):
            calculator.calculate(["AsKh", "AsQd"], strategy=Exact())

    def test_hole_card_on_board(self, calculator, board_river):
        with pytest.raises(DuplicateCard):
            calculator.calculate(["KsQh", "JsTh"], board_river, Exact())

    def test_duplicate_in_board(self, calculator):
        with pytest.raises(DuplicateCard):
            calculator.calculate(["AsKh", "QdQc"], "2c2c7d")

    @pytest.mark.parametrize("players", [[], ["AsKh"]])
    def test_too_few_players(self, calculator, players):
        with pytest.raises(TooFewPlayers):
            calculator.calculate(players)
        assert NoPlayers is TooFewPlayers

    def test_board_too_long(self, calculator):
        with pytest.raises(InvalidBoard):
            calculator.calculate(["AsKh", "QdQc"], "2c3c4c5c6c7c")

    @pytest.mark.parametrize("board", ["Ks", "Ks7d"])
    def test_partial_flop(self, calculator, board):
        with pytest.raises(InvalidBoard):
            calculator.calculate(["AsAh", "QdQc"], board, MonteCarlo(100))

    @pytest.mark.parametrize("samples", [0, -5])
    def test_sample_count(self, calculator, samples):
        with pytest.raises(SampleCountInvalid):
            calculator.calculate(["AsKh", "QdQc"], strategy=MonteCarlo(samples))

    def test_insufficient_deck(self, calculator):
        with pytest.raises(InsufficientDeck) as exc:
            calculator.calculate([ExactHand()] * 24)
        assert exc.value.needed == 53
        assert exc.value.available == 52

    def test_errors_are_value_errors(self, calculator):
        with pytest.raises(ValueError):
            calculator.calculate(["AsKh", "AsQd"])
