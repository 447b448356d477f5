"""Round phase enumeration."""

from enum import Enum, auto


class Phase(Enum):
    """
    Round state machine phases.

    Flow: IDLE → PLAYER_ACTING → DEALER_ACTING → SETTLED, with IDLE → SETTLED
    when a natural blackjack is dealt.
    """

    # No round in progress, waiting for a bet
    IDLE = auto()

    # Player is acting on the active hand
    PLAYER_ACTING = auto()

    # Dealer draws to 17
    DEALER_ACTING = auto()

    # Bets paid, round is read-only
    SETTLED = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()
