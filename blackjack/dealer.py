"""Dealer drawing rule."""

from typing import Sequence

from blackjack.cards import Card
from blackjack.hand import evaluate

# Dealer stands on every 17, soft or hard.
DEALER_STANDS_ON = 17


def should_hit(cards: Sequence[Card]) -> bool:
    """Return True if the dealer must draw another card."""
    return evaluate(cards).value < DEALER_STANDS_ON
