"""Hand evaluation for blackjack."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterator, NamedTuple, Sequence

from blackjack.cards import Card

BLACKJACK = 21


class HandValue(NamedTuple):
    """Result of evaluating a set of cards."""

    value: int
    is_soft: bool


def card_value(card: Card) -> int:
    """Return a card's base value: Ace 11, K/Q/J 10, numerals their face value."""
    return card.value


def evaluate(cards: Sequence[Card]) -> HandValue:
    """
    Calculate the best total for a set of cards.

    Every Ace starts at 11. While the total is over 21, one Ace at a time is
    reduced to 1 until the total fits or no Ace is left to reduce.

    The soft flag is true when the hand holds an Ace, the final total is 21 or
    less, and some card counts 11 on its own. That last check looks at card
    values in isolation, not at which Aces were reduced, so a hand such as
    A-9-5 (15, every Ace reduced) still reports soft. Settlement only ever
    looks at ``value``.
    """
    total = 0
    aces = 0

    for card in cards:
        if card.is_ace:
            aces += 1
        total += card_value(card)

    while total > BLACKJACK and aces > 0:
        total -= 10
        aces -= 1

    is_soft = (
        any(card.is_ace for card in cards)
        and total <= BLACKJACK
        and any(card_value(card) == 11 for card in cards)
    )
    return HandValue(total, is_soft)


def is_blackjack(cards: Sequence[Card]) -> bool:
    """Check if the cards are a natural blackjack (21 with exactly 2 cards)."""
    return len(cards) == 2 and evaluate(cards).value == BLACKJACK


@dataclass
class Hand:
    """
    A blackjack hand.

    Cards are only ever appended during play. ``bet`` is zero for the dealer's
    hand; player hands carry the stake already taken from the balance.
    """

    cards: list[Card] = field(default_factory=list)
    bet: Decimal = Decimal("0")
    finished: bool = False
    doubled: bool = False

    def __post_init__(self) -> None:
        self.bet = Decimal(self.bet)
        if self.bet < 0:
            raise ValueError("Hand bet cannot be negative")

    def add_card(self, card: Card) -> None:
        """Add a card to the hand."""
        self.cards.append(card)

    @property
    def value(self) -> int:
        return evaluate(self.cards).value

    @property
    def is_soft(self) -> bool:
        return evaluate(self.cards).is_soft

    @property
    def is_blackjack(self) -> bool:
        return is_blackjack(self.cards)

    @property
    def is_busted(self) -> bool:
        """Check if the hand has busted (value > 21)."""
        return self.value > BLACKJACK

    @property
    def is_pair(self) -> bool:
        """Check if the hand is two cards of the same rank."""
        return (
            len(self.cards) == 2
            and self.cards[0].rank == self.cards[1].rank
        )

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        cards_str = " ".join(str(card) for card in self.cards)
        value_str = f"({self.value})"
        if self.is_soft:
            value_str = f"(soft {self.value})"
        if self.is_blackjack:
            value_str = "(BLACKJACK)"
        if self.is_busted:
            value_str = "(BUST)"
        return f"{cards_str} {value_str}"

    def __repr__(self) -> str:
        return f"Hand({self.cards!r}, value={self.value}, bet={self.bet})"
