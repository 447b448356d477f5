"""Read-only views of a round for the presentation layer."""

from dataclasses import dataclass
from decimal import Decimal

from blackjack.cards import Card
from blackjack.game.errors import Refusal
from blackjack.game.state import Phase
from blackjack.hand import Hand, evaluate
from blackjack.settlement import HandResult, total_credit as sum_credits


@dataclass(frozen=True)
class HandView:
    """Snapshot of a player hand."""

    cards: tuple[Card, ...]
    bet: Decimal
    value: int
    is_soft: bool
    is_blackjack: bool
    is_busted: bool
    doubled: bool
    finished: bool

    @classmethod
    def of(cls, hand: Hand) -> "HandView":
        hand_value = evaluate(hand.cards)
        return cls(
            cards=tuple(hand.cards),
            bet=hand.bet,
            value=hand_value.value,
            is_soft=hand_value.is_soft,
            is_blackjack=hand.is_blackjack,
            is_busted=hand.is_busted,
            doubled=hand.doubled,
            finished=hand.finished,
        )


@dataclass(frozen=True)
class DealerView:
    """
    Snapshot of the dealer's hand.

    While the player is acting the second card is the hole card and should be
    drawn face down; ``visible_cards`` and ``visible_value`` already account
    for that.
    """

    cards: tuple[Card, ...]
    hole_card_hidden: bool
    value: int
    is_soft: bool

    @classmethod
    def of(cls, hand: Hand, phase: Phase) -> "DealerView":
        hand_value = evaluate(hand.cards)
        hidden = (
            phase == Phase.PLAYER_ACTING
            and len(hand.cards) >= 2
            and not hand.is_blackjack
        )
        return cls(
            cards=tuple(hand.cards),
            hole_card_hidden=hidden,
            value=hand_value.value,
            is_soft=hand_value.is_soft,
        )

    @property
    def visible_cards(self) -> tuple[Card, ...]:
        if self.hole_card_hidden:
            return self.cards[:1] + self.cards[2:]
        return self.cards

    @property
    def visible_value(self) -> int:
        """Return the total of the face-up cards only."""
        return evaluate(self.visible_cards).value


@dataclass(frozen=True)
class RoundSnapshot:
    """Everything the presentation layer needs to render a round."""

    phase: Phase
    balance: Decimal
    dealer: DealerView
    player_hands: tuple[HandView, ...]
    active_hand_index: int | None
    results: tuple[HandResult, ...]
    available_actions: frozenset[str]
    cards_remaining: int

    @property
    def total_credit(self) -> Decimal:
        """Return the total paid back at settlement (zero before SETTLED)."""
        return sum_credits(self.results)

    @property
    def active_hand(self) -> HandView | None:
        if self.active_hand_index is None:
            return None
        return self.player_hands[self.active_hand_index]


@dataclass(frozen=True)
class ActionResult:
    """Return value of every round operation."""

    snapshot: RoundSnapshot
    refusal: Refusal | None = None

    @property
    def accepted(self) -> bool:
        return self.refusal is None

    def __bool__(self) -> bool:
        return self.accepted
