"""Card and Shoe classes - immutable card representations."""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from random import Random
from typing import Iterable, Iterator

logger = logging.getLogger(__name__)

CARDS_PER_DECK = 52


class EmptyShoeError(ValueError):
    """Raised when a shoe is configured so that it can never hold a card."""


class Suit(Enum):
    """Card suits."""

    CLUBS = auto()
    DIAMONDS = auto()
    HEARTS = auto()
    SPADES = auto()

    def __str__(self) -> str:
        symbols = {
            Suit.CLUBS: "♣",
            Suit.DIAMONDS: "♦",
            Suit.HEARTS: "♥",
            Suit.SPADES: "♠",
        }
        return symbols[self]


class Rank(Enum):
    """Card ranks with blackjack values."""

    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    def __str__(self) -> str:
        if self.value <= 10:
            return str(self.value)
        return {
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
            Rank.ACE: "A",
        }[self]

    @property
    def blackjack_value(self) -> int:
        """Return the blackjack point value (Ace = 11, face cards = 10)."""
        if self.value <= 10:
            return self.value
        if self == Rank.ACE:
            return 11
        return 10  # Face cards

    @property
    def is_ace(self) -> bool:
        return self == Rank.ACE


_RANK_CODES = {
    "2": Rank.TWO,
    "3": Rank.THREE,
    "4": Rank.FOUR,
    "5": Rank.FIVE,
    "6": Rank.SIX,
    "7": Rank.SEVEN,
    "8": Rank.EIGHT,
    "9": Rank.NINE,
    "10": Rank.TEN,
    "T": Rank.TEN,
    "J": Rank.JACK,
    "Q": Rank.QUEEN,
    "K": Rank.KING,
    "A": Rank.ACE,
}

_SUIT_CODES = {
    "C": Suit.CLUBS,
    "♣": Suit.CLUBS,
    "D": Suit.DIAMONDS,
    "♦": Suit.DIAMONDS,
    "H": Suit.HEARTS,
    "♥": Suit.HEARTS,
    "S": Suit.SPADES,
    "♠": Suit.SPADES,
}


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card. Two cards with the same rank and suit are equal."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name})"

    @property
    def value(self) -> int:
        """Return the blackjack point value, counting an Ace as 11."""
        return self.rank.blackjack_value

    @property
    def is_ace(self) -> bool:
        return self.rank.is_ace

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like '2♣', 'AS', 'Kh', '10d'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        if rank_str not in _RANK_CODES:
            raise ValueError(f"Invalid rank: {rank_str}")
        if suit_str not in _SUIT_CODES:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(_RANK_CODES[rank_str], _SUIT_CODES[suit_str])


def build_cards(decks: int) -> list[Card]:
    """
    Build an unshuffled pool of cards.

    Args:
        decks: Number of full 52-card decks to concatenate

    Returns:
        One card of every (rank, suit) pair per deck, in deck order
    """
    return [
        Card(rank, suit)
        for _ in range(decks)
        for suit in Suit
        for rank in Rank
    ]


def shuffle_cards(cards: list[Card], rng: Random) -> None:
    """Shuffle cards in place with a uniform Fisher-Yates permutation."""
    rng.shuffle(cards)


class Shoe:
    """
    A multi-deck shoe for blackjack.

    Cards are drawn from the end of the internal list. When fewer than one
    deck's worth of cards remain the whole shoe is thrown away and a fresh,
    shuffled shoe takes its place before the draw.
    """

    def __init__(
        self,
        num_decks: int = 6,
        rng: Random | None = None,
    ) -> None:
        """
        Initialize a shuffled shoe with multiple decks.

        Args:
            num_decks: Number of decks in the shoe
            rng: Random number generator for shuffling
        """
        if num_decks < 1:
            raise EmptyShoeError("Shoe must have at least 1 deck")

        self._num_decks = num_decks
        self._rng = rng or Random()
        self._cards: list[Card] = []
        self._reshuffles = 0
        self.reset()

    @classmethod
    def restore(
        cls,
        num_decks: int,
        cards: Iterable[Card],
        rng: Random | None = None,
    ) -> "Shoe":
        """
        Rebuild a shoe holding exactly the given cards.

        The last card of ``cards`` is the next one drawn.
        """
        shoe = cls(num_decks=num_decks, rng=rng)
        shoe._cards = list(cards)
        return shoe

    def reset(self) -> None:
        """Replace the shoe with a freshly built and shuffled one."""
        self._cards = build_cards(self._num_decks)
        if not self._cards:
            raise EmptyShoeError("Shoe configuration yields no cards")
        shuffle_cards(self._cards, self._rng)

    def draw(self) -> Card:
        """Draw a card, replacing the whole shoe first if it is running low."""
        if len(self._cards) < CARDS_PER_DECK:
            logger.info(
                "Replacing shoe with %d cards remaining (%d decks)",
                len(self._cards),
                self._num_decks,
            )
            self.reset()
            self._reshuffles += 1
        return self._cards.pop()

    @property
    def cards_remaining(self) -> int:
        return len(self._cards)

    @property
    def total_cards(self) -> int:
        """Return the number of cards in a full shoe."""
        return self._num_decks * CARDS_PER_DECK

    @property
    def num_decks(self) -> int:
        return self._num_decks

    @property
    def reshuffles(self) -> int:
        """Return how many times the shoe has been replaced since creation."""
        return self._reshuffles

    @property
    def cards(self) -> list[Card]:
        """Return a copy of the remaining cards, next draw last."""
        return self._cards.copy()

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)
