"""Tests for card representation and deck bookkeeping."""

import pytest

from equilab.errors import DuplicateCard, InvalidCard
from equilab.game.cards import (
    Card, Rank, Suit, FULL_DECK,
    check_disjoint, format_cards, parse_cards, remaining_deck,
)


class TestCard:
    def test_from_string(self):
        card = Card.from_string("As")
        assert card.rank == Rank.ACE
        assert card.suit == Suit.SPADES

    def test_from_string_ten(self):
        card = Card.from_string("Th")
        assert card.rank == Rank.TEN
        assert card.suit == Suit.HEARTS

    def test_from_string_lowercase(self):
        card = Card.from_string("kd")
        assert card.rank == Rank.KING
        assert card.suit == Suit.DIAMONDS

    def test_str(self):
        card = Card(Rank.ACE, Suit.SPADES)
        assert str(card) == "As"

    def test_from_string_invalid_rank(self):
        with pytest.raises(InvalidCard):
            Card.from_string("Xs")

    def test_from_string_invalid_suit(self):
        with pytest.raises(InvalidCard):
            Card.from_string("Ax")

    def test_from_string_wrong_length(self):
        with pytest.raises(InvalidCard):
            Card.from_string("10h")

    def test_invalid_card_is_value_error(self):
        with pytest.raises(ValueError):
            Card.from_string("1s")

    @pytest.mark.parametrize("rank, suit", [(1, 0), (15, 0), (14, 4), (2, -1)])
    def test_constructor_validates(self, rank, suit):
        with pytest.raises(InvalidCard):
            Card(rank, suit)

    def test_equality(self):
        card1 = Card.from_string("As")
        card2 = Card.from_string("As")
        assert card1 == card2
        assert hash(card1) == hash(card2)
        assert card1 != Card.from_string("Ah")

    def test_index(self):
        assert Card.from_string("2c").index == 0
        assert Card.from_string("As").index == 51
        assert [c.index for c in FULL_DECK] == list(range(52))

    def test_to_treys(self):
        card = Card.from_string("As")
        treys_card = card.to_treys()
        assert isinstance(treys_card, int)


class TestParseCards:
    def test_compact(self):
        assert parse_cards("AsKhTd") == [
            Card(Rank.ACE, Suit.SPADES),
            Card(Rank.KING, Suit.HEARTS),
            Card(Rank.TEN, Suit.DIAMONDS),
        ]

    def test_separators(self):
        assert parse_cards("As Kh,Td") == parse_cards("AsKhTd")

    def test_empty(self):
        assert parse_cards("") == []

    def test_odd_length(self):
        with pytest.raises(InvalidCard):
            parse_cards("AsK")

    def test_format_cards(self):
        assert format_cards(parse_cards("AsKh")) == "As Kh"


class TestDeck:
    def test_full_deck(self):
        assert len(FULL_DECK) == 52
        assert len(set(FULL_DECK)) == 52

    def test_remaining_deck(self, cards):
        hole = cards("AsKh")
        board = cards("2c3d4h")
        remaining = remaining_deck(hole, board)

        assert len(remaining) + len(hole) + len(board) == 52
        assert not set(remaining) & set(hole + board)

    def test_remaining_deck_keeps_deck_order(self, cards):
        remaining = remaining_deck(cards("2c"))
        assert remaining == list(FULL_DECK[1:])

    def test_remaining_deck_duplicate(self, cards):
        with pytest.raises(DuplicateCard) as exc:
            remaining_deck(cards("AsKh"), cards("Ks7d2cAs"))
        assert exc.value.card == Card.from_string("As")

    def test_check_disjoint_within_group(self, cards):
        with pytest.raises(DuplicateCard):
            check_disjoint(cards("AsAs"))

    def test_check_disjoint_ok(self, cards):
        check_disjoint(cards("AsKh"), cards("QdJc"), [])
