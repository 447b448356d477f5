"""Settlement of finished hands into balance credits."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Sequence

from blackjack.hand import BLACKJACK, Hand

# Natural blackjack pays 3:2 on top of the returned stake.
BLACKJACK_PAYOUT = Decimal("1.5")


class Outcome(Enum):
    """How a single player hand ended."""

    WIN = "win"
    LOSE = "lose"
    PUSH = "push"
    BLACKJACK = "blackjack"
    BUST = "bust"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class HandResult:
    """
    Settled result of one player hand.

    ``credit`` is the amount paid back to the balance. The stake was taken when
    the bet was placed, so a loss credits zero and a push credits the stake.
    """

    hand_index: int
    outcome: Outcome
    bet: Decimal
    credit: Decimal

    @property
    def net(self) -> Decimal:
        """Return the win (positive) or loss (negative) for this hand."""
        return self.credit - self.bet


def _blackjack_credit(bet: Decimal) -> Decimal:
    return bet + bet * BLACKJACK_PAYOUT


def settle_naturals(player_hand: Hand, dealer_hand: Hand) -> HandResult:
    """
    Settle a freshly dealt round where at least one side holds a natural.

    Only applies to the single, unsplit, two-card hand straight off the deal.

    Raises:
        ValueError: If neither hand is a natural blackjack
    """
    player_bj = player_hand.is_blackjack
    dealer_bj = dealer_hand.is_blackjack
    bet = player_hand.bet

    if player_bj and dealer_bj:
        return HandResult(0, Outcome.PUSH, bet, bet)
    if player_bj:
        return HandResult(0, Outcome.BLACKJACK, bet, _blackjack_credit(bet))
    if dealer_bj:
        return HandResult(0, Outcome.LOSE, bet, Decimal("0"))
    raise ValueError("Neither hand is a natural blackjack")


def settle_hand(index: int, hand: Hand, dealer_hand: Hand) -> HandResult:
    """Settle one player hand against the dealer's final hand."""
    bet = hand.bet

    if len(hand.cards) == 2 and hand.is_blackjack:
        if dealer_hand.is_blackjack:
            return HandResult(index, Outcome.PUSH, bet, bet)
        return HandResult(index, Outcome.BLACKJACK, bet, _blackjack_credit(bet))

    player_value = hand.value
    if player_value > BLACKJACK:
        return HandResult(index, Outcome.BUST, bet, Decimal("0"))

    dealer_value = dealer_hand.value
    if dealer_value > BLACKJACK:
        return HandResult(index, Outcome.WIN, bet, bet * 2)

    if player_value > dealer_value:
        return HandResult(index, Outcome.WIN, bet, bet * 2)
    if player_value == dealer_value:
        return HandResult(index, Outcome.PUSH, bet, bet)
    return HandResult(index, Outcome.LOSE, bet, Decimal("0"))


def settle_hands(
    player_hands: Sequence[Hand],
    dealer_hand: Hand,
) -> list[HandResult]:
    """Settle every player hand, in order, after the dealer has finished."""
    return [
        settle_hand(i, hand, dealer_hand)
        for i, hand in enumerate(player_hands)
    ]


def total_credit(results: Sequence[HandResult]) -> Decimal:
    """Return the sum credited back to the balance."""
    return sum((r.credit for r in results), Decimal("0"))
