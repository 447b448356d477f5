"""Shared helpers for building cards, shoes and tables in tests."""

from decimal import Decimal

from hypothesis import strategies as st

from blackjack.cards import Card, Rank, Shoe, Suit, build_cards
from blackjack.game import RoundController


def cards(*codes: str) -> list[Card]:
    """Build a list of cards from short codes like 'AS', '10H'."""
    return [Card.from_string(code) for code in codes]


def stacked_shoe(*codes: str, num_decks: int = 6) -> Shoe:
    """
    A shoe whose next draws are exactly ``codes``, in order.

    A full unshuffled shoe sits underneath so the stacked cards are drawn
    without triggering a shoe replacement.
    """
    base = build_cards(num_decks)
    return Shoe.restore(num_decks, base + list(reversed(cards(*codes))))


def make_table(
    *codes: str,
    balance: int | str = 1000,
    auto_play_dealer: bool = True,
) -> RoundController:
    """A table whose shoe deals ``codes`` first (player, player, dealer, dealer, ...)."""
    return RoundController(
        starting_balance=Decimal(str(balance)),
        auto_play_dealer=auto_play_dealer,
        shoe=stacked_shoe(*codes),
    )


@st.composite
def card_strategy(draw):
    """Generate a random card."""
    rank = draw(st.sampled_from(list(Rank)))
    suit = draw(st.sampled_from(list(Suit)))
    return Card(rank, suit)


def card_list_strategy(min_cards: int = 0, max_cards: int = 8):
    """Generate a random list of cards."""
    return st.lists(card_strategy(), min_size=min_cards, max_size=max_cards)
