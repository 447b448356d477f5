"""Pytest fixtures for blackjack table tests."""

import pytest
from decimal import Decimal
from random import Random

from blackjack.cards import Shoe
from blackjack.game import RoundController
from blackjack.hand import Hand
from tests.helpers import cards


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def shoe(rng):
    """A shuffled 6-deck shoe."""
    return Shoe(num_decks=6, rng=rng)


@pytest.fixture
def table(rng):
    """A new table with default settings."""
    return RoundController(rng=rng)


@pytest.fixture
def empty_hand():
    """An empty player hand."""
    return Hand()


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    return Hand(cards=cards("AS", "KH"), bet=Decimal("10"))


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    return Hand(cards=cards("AS", "6H"))


@pytest.fixture
def hard_16_hand():
    """A hard 16 hand (10-6)."""
    return Hand(cards=cards("10S", "6H"))


@pytest.fixture
def pair_8s_hand():
    """A pair of 8s hand."""
    return Hand(cards=cards("8S", "8H"), bet=Decimal("50"))


@pytest.fixture
def bust_hand():
    """A busted hand."""
    return Hand(cards=cards("10S", "6H", "KC"), bet=Decimal("10"))
