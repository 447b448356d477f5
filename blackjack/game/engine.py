"""Blackjack round controller with state machine."""

import logging
from decimal import Decimal, InvalidOperation
from random import Random
from typing import Any, Iterable

from transitions import Machine

from blackjack.cards import Card, Shoe
from blackjack.dealer import should_hit
from blackjack.game.errors import Refusal, RefusalKind
from blackjack.game.snapshot import ActionResult, DealerView, HandView, RoundSnapshot
from blackjack.game.state import Phase
from blackjack.hand import BLACKJACK, Hand
from blackjack.settlement import HandResult, settle_hands, settle_naturals, total_credit

logger = logging.getLogger(__name__)

ACTION_DEAL = "deal"
ACTION_HIT = "hit"
ACTION_STAND = "stand"
ACTION_DOUBLE = "double"
ACTION_SPLIT = "split"
ACTION_NEW_ROUND = "new_round"


class RoundController:
    """
    Single-table blackjack round engine using a state machine.

    Owns the shoe, the dealer hand, the player hands, the balance and the
    active-hand pointer. Every public operation either completes its change
    and returns a fresh snapshot, or returns a refusal and leaves the round
    untouched. Nothing in here knows about rendering.
    """

    # State machine states
    STATES = [p.name.lower() for p in Phase]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "begin_player_turn", "source": "idle", "dest": "player_acting"},
        {"trigger": "natural_dealt", "source": "idle", "dest": "settled"},
        {"trigger": "begin_dealer_turn", "source": "player_acting", "dest": "dealer_acting"},
        {"trigger": "finish_round", "source": "dealer_acting", "dest": "settled"},
        {"trigger": "reset_round", "source": "settled", "dest": "idle"},
    ]

    def __init__(
        self,
        decks_in_shoe: int = 6,
        starting_balance: Decimal | int | str = Decimal("1000"),
        min_bet: Decimal | int | str = Decimal("1"),
        auto_play_dealer: bool = True,
        rng: Random | None = None,
        shoe: Shoe | None = None,
    ) -> None:
        """
        Initialize a table.

        Args:
            decks_in_shoe: Number of decks in the shoe
            starting_balance: Player bankroll at the start
            min_bet: Smallest accepted bet
            auto_play_dealer: Run the dealer's turn as soon as player play ends.
                When False the round waits in DEALER_ACTING for
                ``dealer_step``/``play_dealer``.
            rng: Random number generator for reproducible games
            shoe: Pre-built shoe (overrides ``decks_in_shoe`` and ``rng``)
        """
        self.balance = Decimal(str(starting_balance))
        self.min_bet = Decimal(str(min_bet))
        if self.balance < 0:
            raise ValueError("starting_balance cannot be negative")
        if self.min_bet <= 0:
            raise ValueError("min_bet must be positive")

        self.shoe = shoe if shoe is not None else Shoe(num_decks=decks_in_shoe, rng=rng)
        self.auto_play_dealer = auto_play_dealer

        self.dealer_hand = Hand()
        self.player_hands: list[Hand] = []
        self.active_hand_index: int | None = None
        self.results: list[HandResult] = []

        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="idle",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @classmethod
    def from_config(cls, game_config: Any, rng: Random | None = None) -> "RoundController":
        """Build a table from a ``config.GameConfig``."""
        return cls(
            decks_in_shoe=game_config.decks_in_shoe,
            starting_balance=game_config.starting_balance,
            min_bet=game_config.min_bet,
            auto_play_dealer=game_config.auto_play_dealer,
            rng=rng,
        )

    @classmethod
    def restore(
        cls,
        *,
        phase: Phase,
        balance: Decimal,
        shoe: Shoe,
        dealer_hand: Hand,
        player_hands: Iterable[Hand],
        active_hand_index: int | None,
        results: Iterable[HandResult] = (),
        min_bet: Decimal = Decimal("1"),
        auto_play_dealer: bool = True,
    ) -> "RoundController":
        """Rebuild a table from previously captured state."""
        controller = cls(
            starting_balance=balance,
            min_bet=min_bet,
            auto_play_dealer=auto_play_dealer,
            shoe=shoe,
        )
        controller._machine_state = phase.name.lower()
        controller.dealer_hand = dealer_hand
        controller.player_hands = list(player_hands)
        controller.active_hand_index = active_hand_index
        controller.results = list(results)
        return controller

    @property
    def phase(self) -> Phase:
        """Get current phase as enum."""
        return Phase[self._machine_state.upper()]  # type: ignore[attr-defined]

    @property
    def active_hand(self) -> Hand | None:
        if self.active_hand_index is None:
            return None
        return self.player_hands[self.active_hand_index]

    # ------------------------------------------------------------------
    # Player operations
    # ------------------------------------------------------------------

    def deal(self, bet_amount: Decimal | int | str) -> ActionResult:
        """
        Place a bet and deal a new round.

        Deals player, player, dealer, dealer. A natural on either side settles
        the round on the spot.
        """
        if self.phase not in (Phase.IDLE, Phase.SETTLED):
            return self._refuse(RefusalKind.WRONG_PHASE, "Finish the current round before dealing")

        amount = _parse_amount(bet_amount)
        if amount is None:
            return self._refuse(RefusalKind.INVALID_BET, "Bet must be a number")
        if amount < self.min_bet:
            return self._refuse(RefusalKind.INVALID_BET, f"Bet must be at least {self.min_bet}")
        if amount > self.balance:
            return self._refuse(RefusalKind.INVALID_BET, "Bet exceeds balance")

        if self.phase == Phase.SETTLED:
            self._clear_round()

        self.balance -= amount
        player_hand = Hand(bet=amount)
        self.player_hands = [player_hand]
        self.dealer_hand = Hand()
        self.results = []

        self._draw_to(player_hand)
        self._draw_to(player_hand)
        self._draw_to(self.dealer_hand)
        self._draw_to(self.dealer_hand)
        self.active_hand_index = 0

        logger.info(
            "Dealt round: bet=%s player=%s dealer up=%s balance=%s",
            amount,
            player_hand,
            self.dealer_hand.cards[0],
            self.balance,
        )

        if player_hand.is_blackjack or self.dealer_hand.is_blackjack:
            player_hand.finished = True
            self.active_hand_index = None
            self.natural_dealt()
            self._pay([settle_naturals(player_hand, self.dealer_hand)])
            return self._accept()

        self.begin_player_turn()
        return self._accept()

    def hit(self) -> ActionResult:
        """Draw a card onto the active hand. A bust ends that hand."""
        refusal = self._check_player_turn()
        if refusal is not None:
            return refusal

        hand = self.active_hand
        self._draw_to(hand)
        if hand.value > BLACKJACK:
            logger.debug("Hand %d busts with %d", self.active_hand_index, hand.value)
            hand.finished = True
            self._advance()
        return self._accept()

    def stand(self) -> ActionResult:
        """Finish the active hand as it is."""
        refusal = self._check_player_turn()
        if refusal is not None:
            return refusal

        self.active_hand.finished = True
        self._advance()
        return self._accept()

    def double(self) -> ActionResult:
        """Double the active hand's bet, take exactly one card and finish it."""
        refusal = self._check_player_turn()
        if refusal is not None:
            return refusal

        hand = self.active_hand
        if len(hand.cards) != 2:
            return self._refuse(RefusalKind.INVALID_ACTION, "Can only double on the first two cards")
        if self.balance < hand.bet:
            return self._refuse(RefusalKind.INSUFFICIENT_BALANCE, "Insufficient balance to double")

        self.balance -= hand.bet
        hand.bet *= 2
        hand.doubled = True
        self._draw_to(hand)
        hand.finished = True
        self._advance()
        return self._accept()

    def split(self) -> ActionResult:
        """Split a pair into two hands, each with its own bet. Only once per round."""
        refusal = self._check_player_turn()
        if refusal is not None:
            return refusal

        if len(self.player_hands) != 1:
            return self._refuse(RefusalKind.INVALID_ACTION, "Hands can only be split once")
        hand = self.player_hands[0]
        if len(hand.cards) != 2:
            return self._refuse(RefusalKind.INVALID_ACTION, "Can only split the first two cards")
        if not hand.is_pair:
            return self._refuse(RefusalKind.RANK_MISMATCH, "Cannot split: ranks differ")
        if self.balance < hand.bet:
            return self._refuse(RefusalKind.INSUFFICIENT_BALANCE, "Insufficient balance to split")

        self.balance -= hand.bet
        new_hand = Hand(cards=[hand.cards.pop()], bet=hand.bet)
        self._draw_to(hand)
        self._draw_to(new_hand)
        self.player_hands.append(new_hand)
        self.active_hand_index = 0

        logger.debug("Split into %s | %s", hand, new_hand)
        return self._accept()

    def start_new_round(self) -> ActionResult:
        """Clear a settled round back to IDLE. Balance is never touched."""
        if self.phase == Phase.IDLE:
            return self._accept()
        if self.phase != Phase.SETTLED:
            return self._refuse(RefusalKind.WRONG_PHASE, "A round in progress must be played out")

        self._clear_round()
        return self._accept()

    # ------------------------------------------------------------------
    # Dealer operations
    # ------------------------------------------------------------------

    def dealer_step(self) -> ActionResult:
        """
        Advance the dealer's turn by one step.

        Draws a single card while the dealer must hit; once the dealer stands
        the next call settles the round.
        """
        if self.phase != Phase.DEALER_ACTING:
            return self._refuse(RefusalKind.WRONG_PHASE, "It is not the dealer's turn")

        if should_hit(self.dealer_hand.cards):
            self._draw_to(self.dealer_hand)
        else:
            self._settle()
        return self._accept()

    def play_dealer(self) -> ActionResult:
        """Run the rest of the dealer's turn and settle."""
        if self.phase != Phase.DEALER_ACTING:
            return self._refuse(RefusalKind.WRONG_PHASE, "It is not the dealer's turn")

        self._run_dealer()
        return self._accept()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def can_deal(self) -> bool:
        return self.phase in (Phase.IDLE, Phase.SETTLED) and self.balance >= self.min_bet

    @property
    def can_hit(self) -> bool:
        return self.phase == Phase.PLAYER_ACTING

    @property
    def can_stand(self) -> bool:
        return self.phase == Phase.PLAYER_ACTING

    @property
    def can_double(self) -> bool:
        """Check if doubling is allowed."""
        if self.phase != Phase.PLAYER_ACTING:
            return False
        hand = self.active_hand
        return len(hand.cards) == 2 and self.balance >= hand.bet

    @property
    def can_split(self) -> bool:
        """Check if splitting is allowed."""
        if self.phase != Phase.PLAYER_ACTING or len(self.player_hands) != 1:
            return False
        hand = self.player_hands[0]
        return hand.is_pair and self.balance >= hand.bet

    @property
    def available_actions(self) -> frozenset[str]:
        checks = {
            ACTION_DEAL: self.can_deal,
            ACTION_HIT: self.can_hit,
            ACTION_STAND: self.can_stand,
            ACTION_DOUBLE: self.can_double,
            ACTION_SPLIT: self.can_split,
            ACTION_NEW_ROUND: self.phase == Phase.SETTLED,
        }
        return frozenset(name for name, allowed in checks.items() if allowed)

    def snapshot(self) -> RoundSnapshot:
        """Return a read-only view of the current round."""
        phase = self.phase
        return RoundSnapshot(
            phase=phase,
            balance=self.balance,
            dealer=DealerView.of(self.dealer_hand, phase),
            player_hands=tuple(HandView.of(h) for h in self.player_hands),
            active_hand_index=self.active_hand_index,
            results=tuple(self.results) if phase == Phase.SETTLED else (),
            available_actions=self.available_actions,
            cards_remaining=self.shoe.cards_remaining,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _draw_to(self, hand: Hand) -> Card:
        card = self.shoe.draw()
        hand.add_card(card)
        logger.debug(
            "Drew %s to %s hand",
            card,
            "dealer" if hand is self.dealer_hand else "player",
        )
        return card

    def _check_player_turn(self) -> ActionResult | None:
        if self.phase != Phase.PLAYER_ACTING:
            return self._refuse(RefusalKind.WRONG_PHASE, f"No player action allowed while {self.phase}")
        return None

    def _advance(self) -> None:
        """Move to the next unfinished hand, or hand over to the dealer."""
        current = self.active_hand_index if self.active_hand_index is not None else -1

        for i in range(current + 1, len(self.player_hands)):
            if not self.player_hands[i].finished:
                self.active_hand_index = i
                return

        for i, hand in enumerate(self.player_hands):
            if not hand.finished:
                self.active_hand_index = i
                return

        self.active_hand_index = None
        self.begin_dealer_turn()
        if self.auto_play_dealer:
            self._run_dealer()

    def _run_dealer(self) -> None:
        while should_hit(self.dealer_hand.cards):
            self._draw_to(self.dealer_hand)
        self._settle()

    def _settle(self) -> None:
        self.finish_round()
        self._pay(settle_hands(self.player_hands, self.dealer_hand))

    def _pay(self, results: list[HandResult]) -> None:
        self.results = results
        credit = total_credit(results)
        self.balance += credit
        logger.info(
            "Round settled: dealer=%s outcomes=%s credit=%s balance=%s",
            self.dealer_hand,
            ", ".join(str(r.outcome) for r in results),
            credit,
            self.balance,
        )

    def _clear_round(self) -> None:
        self.reset_round()
        self.dealer_hand = Hand()
        self.player_hands = []
        self.active_hand_index = None
        self.results = []

    def _refuse(self, kind: RefusalKind, message: str) -> ActionResult:
        refusal = Refusal(kind, message)
        logger.debug("Refused in %s: %s", self.phase, refusal)
        return ActionResult(self.snapshot(), refusal)

    def _accept(self) -> ActionResult:
        return ActionResult(self.snapshot())


def _parse_amount(amount: Decimal | int | str) -> Decimal | None:
    """Turn a bet amount into a finite Decimal, or None if it is not a number."""
    if isinstance(amount, bool):
        return None
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None
    return value
