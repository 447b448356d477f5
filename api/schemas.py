"""Pydantic schemas for API requests and responses."""

from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from typing import Literal


# Game schemas
class BetRequest(BaseModel):
    """Request to place a bet and deal."""

    amount: Decimal = Field(..., description="Bet amount; the table enforces its minimum")


class ActionRequest(BaseModel):
    """Request for player action."""

    action: Literal["hit", "stand", "double", "split"]


class CardResponse(BaseModel):
    """Card representation."""

    model_config = ConfigDict(from_attributes=True)

    rank: str
    suit: str
    value: int


class HandResponse(BaseModel):
    """Player hand representation."""

    cards: list[CardResponse]
    bet: Decimal
    value: int
    is_soft: bool
    is_blackjack: bool
    is_busted: bool
    doubled: bool
    finished: bool


class DealerResponse(BaseModel):
    """Dealer hand as the player may see it."""

    cards: list[CardResponse]
    hole_card_hidden: bool
    value: int
    is_soft: bool


class HandResultResponse(BaseModel):
    """Settled result of one hand."""

    hand_index: int
    outcome: Literal["win", "lose", "push", "blackjack", "bust"]
    bet: Decimal
    credit: Decimal
    net: Decimal


class GameStateResponse(BaseModel):
    """Current round snapshot."""

    phase: str
    balance: Decimal
    dealer: DealerResponse
    player_hands: list[HandResponse]
    active_hand_index: int | None
    results: list[HandResultResponse]
    total_credit: Decimal
    available_actions: list[str]
    cards_remaining: int


class RefusalDetail(BaseModel):
    """Why an action was refused."""

    kind: str
    message: str


# Game State Persistence schemas
class CardData(BaseModel):
    """Serialized card data."""

    rank: int
    suit: int


class HandData(BaseModel):
    """Serialized hand data."""

    cards: list[CardData]
    bet: Decimal
    finished: bool = False
    doubled: bool = False


class HandResultData(BaseModel):
    """Serialized settlement result."""

    hand_index: int
    outcome: str
    bet: Decimal
    credit: Decimal


class GameStateData(BaseModel):
    """Serialized table state for session storage."""

    phase: str
    balance: Decimal
    min_bet: Decimal
    auto_play_dealer: bool = True
    active_hand_index: int | None
    shoe_cards: list[CardData]
    shoe_num_decks: int
    player_hands: list[HandData]
    dealer_hand: HandData
    results: list[HandResultData] = []
