"""Tests for hand evaluation."""

import pytest
from decimal import Decimal

from hypothesis import given

from blackjack.hand import Hand, HandValue, evaluate, is_blackjack
from tests.helpers import card_list_strategy, cards


class TestEvaluate:
    """Tests for evaluate() and is_blackjack()."""

    def test_empty(self):
        assert evaluate([]) == HandValue(0, False)

    def test_ace_king_is_blackjack(self):
        result = evaluate(cards("AS", "KH"))
        assert result.value == 21
        assert is_blackjack(cards("AS", "KH"))

    def test_ace_king_reports_soft(self):
        """An unreduced ace at 21 counts as soft under the literal rule."""
        assert evaluate(cards("AS", "KH")).is_soft

    def test_two_aces_reduce_once(self):
        """11 + 11 + 9 = 31, reduce one ace to reach 21."""
        result = evaluate(cards("AS", "AH", "9C"))
        assert result.value == 21
        assert result.is_soft
        assert not is_blackjack(cards("AS", "AH", "9C"))

    def test_bust_without_aces(self):
        result = evaluate(cards("KS", "QH", "5C"))
        assert result.value == 25
        assert not result.is_soft

    def test_soft_17(self, soft_17_hand):
        assert evaluate(soft_17_hand.cards) == HandValue(17, True)

    def test_hard_16(self, hard_16_hand):
        assert evaluate(hard_16_hand.cards) == HandValue(16, False)

    def test_reduced_ace_still_reports_soft(self):
        """A-9-5 totals 15 with the ace at 1, but the flag stays on."""
        assert evaluate(cards("AS", "9H", "5C")) == HandValue(15, True)

    def test_busted_hand_with_ace_is_not_soft(self):
        result = evaluate(cards("AS", "9H", "5C", "KD"))
        assert result.value == 25
        assert not result.is_soft

    @pytest.mark.parametrize(
        "codes, expected",
        [
            (("AS", "AH"), 12),
            (("AS", "AH", "AC"), 13),
            (("AS", "AH", "AC", "9D"), 12),
            (("AS", "5H", "8C"), 14),
            (("7S", "7H", "7C"), 21),
            (("JS", "QH"), 20),
        ],
    )
    def test_totals(self, codes, expected):
        assert evaluate(cards(*codes)).value == expected

    def test_three_card_21_is_not_blackjack(self):
        assert not is_blackjack(cards("7S", "7H", "7C"))

    def test_ten_and_ace_in_either_order(self):
        assert is_blackjack(cards("10S", "AD"))
        assert is_blackjack(cards("AD", "QS"))

    @given(card_list_strategy())
    def test_value_is_best_total(self, hand_cards):
        """The total is the hard total plus 10 for every ace left at 11."""
        hard_total = sum(1 if c.is_ace else c.value for c in hand_cards)
        result = evaluate(hand_cards)

        assert (result.value - hard_total) % 10 == 0
        assert result.value >= hard_total
        if result.value > 21:
            assert result.value == hard_total

    @given(card_list_strategy())
    def test_soft_flag_follows_literal_rule(self, hand_cards):
        result = evaluate(hand_cards)
        has_ace = any(c.is_ace for c in hand_cards)
        assert result.is_soft == (has_ace and result.value <= 21)


class TestHand:
    """Tests for the Hand class."""

    def test_empty_hand(self, empty_hand):
        """Test empty hand properties."""
        assert len(empty_hand) == 0
        assert empty_hand.value == 0
        assert empty_hand.bet == Decimal("0")
        assert not empty_hand.is_soft
        assert not empty_hand.is_blackjack
        assert not empty_hand.is_busted
        assert not empty_hand.finished
        assert not empty_hand.doubled

    def test_add_card(self, empty_hand):
        empty_hand.add_card(cards("10S")[0])
        assert len(empty_hand) == 1
        assert empty_hand.value == 10

    def test_blackjack(self, blackjack_hand):
        assert blackjack_hand.is_blackjack
        assert blackjack_hand.value == 21

    def test_bust(self, bust_hand):
        assert bust_hand.is_busted
        assert bust_hand.value == 26

    def test_soft_to_hard_transition(self):
        """Test ace switching from 11 to 1."""
        hand = Hand(cards=cards("AS"))
        assert hand.value == 11

        hand.add_card(cards("5H")[0])
        assert hand.value == 16

        hand.add_card(cards("8C")[0])
        assert hand.value == 14

    def test_pair_detection(self, pair_8s_hand):
        assert pair_8s_hand.is_pair
        assert pair_8s_hand.value == 16

    def test_ten_value_cards_of_different_rank_are_not_a_pair(self):
        assert not Hand(cards=cards("10S", "KH")).is_pair

    def test_three_cards_are_not_a_pair(self):
        assert not Hand(cards=cards("8S", "8H", "2C")).is_pair

    def test_bet_is_decimal(self):
        hand = Hand(bet=25)
        assert hand.bet == Decimal("25")
        assert isinstance(hand.bet, Decimal)

    def test_negative_bet_raises(self):
        with pytest.raises(ValueError):
            Hand(bet=Decimal("-1"))

    def test_str(self, blackjack_hand, bust_hand, soft_17_hand):
        assert "BLACKJACK" in str(blackjack_hand)
        assert "BUST" in str(bust_hand)
        assert "soft 17" in str(soft_17_hand)
