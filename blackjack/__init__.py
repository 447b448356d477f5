"""Core blackjack engine - 100% UI-agnostic."""

from blackjack.cards import Card, EmptyShoeError, Rank, Shoe, Suit
from blackjack.hand import Hand, HandValue, evaluate, is_blackjack

__all__ = [
    "Card",
    "EmptyShoeError",
    "Rank",
    "Shoe",
    "Suit",
    "Hand",
    "HandValue",
    "evaluate",
    "is_blackjack",
]
