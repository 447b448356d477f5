"""Game API endpoints."""

import time
from fastapi import APIRouter, Depends, HTTPException, Header
from typing import Annotated, Any, Callable

from api.schemas import (
    ActionRequest,
    BetRequest,
    CardData,
    CardResponse,
    DealerResponse,
    GameStateData,
    GameStateResponse,
    HandData,
    HandResponse,
    HandResultData,
    HandResultResponse,
    RefusalDetail,
)
from api.session import (
    create_session,
    extract_session_id,
    get_session_store,
    locked_session_ids,
    release_session_lock,
    session_lock,
)
from blackjack.cards import Card, Rank, Shoe, Suit
from blackjack.game import ActionResult, Phase, RoundController, RoundSnapshot
from blackjack.hand import Hand
from blackjack.settlement import HandResult, Outcome
from config import config

router = APIRouter()

# Tables of live sessions, keyed by raw session id and backed by the session store
_tables: dict[str, RoundController] = {}

# Session data keys
SESSION_KEY_GAME = "game"
SESSION_KEY_CREATED_AT = "created_at"
SESSION_KEY_LAST_ACTIVITY = "last_activity"


def _serialize_card(card: Card) -> CardData:
    """Serialize a card."""
    return CardData(rank=card.rank.value, suit=card.suit.value)


def _deserialize_card(data: CardData) -> Card:
    """Deserialize a card."""
    return Card(Rank(data.rank), Suit(data.suit))


def _serialize_hand(hand: Hand) -> HandData:
    """Serialize a hand."""
    return HandData(
        cards=[_serialize_card(c) for c in hand.cards],
        bet=hand.bet,
        finished=hand.finished,
        doubled=hand.doubled,
    )


def _deserialize_hand(data: HandData) -> Hand:
    """Deserialize a hand."""
    return Hand(
        cards=[_deserialize_card(c) for c in data.cards],
        bet=data.bet,
        finished=data.finished,
        doubled=data.doubled,
    )


def _serialize_game(table: RoundController) -> dict[str, Any]:
    """Serialize table state for session storage."""
    state = GameStateData(
        phase=table.phase.name,
        balance=table.balance,
        min_bet=table.min_bet,
        auto_play_dealer=table.auto_play_dealer,
        active_hand_index=table.active_hand_index,
        shoe_cards=[_serialize_card(c) for c in table.shoe.cards],
        shoe_num_decks=table.shoe.num_decks,
        player_hands=[_serialize_hand(h) for h in table.player_hands],
        dealer_hand=_serialize_hand(table.dealer_hand),
        results=[
            HandResultData(
                hand_index=r.hand_index,
                outcome=r.outcome.value,
                bet=r.bet,
                credit=r.credit,
            )
            for r in table.results
        ],
    )
    return state.model_dump(mode="json")


def _deserialize_game(data: dict[str, Any]) -> RoundController:
    """Restore a table from session data."""
    state = GameStateData.model_validate(data)
    shoe = Shoe.restore(
        num_decks=state.shoe_num_decks,
        cards=[_deserialize_card(c) for c in state.shoe_cards],
    )
    return RoundController.restore(
        phase=Phase[state.phase],
        balance=state.balance,
        shoe=shoe,
        dealer_hand=_deserialize_hand(state.dealer_hand),
        player_hands=[_deserialize_hand(h) for h in state.player_hands],
        active_hand_index=state.active_hand_index,
        results=[
            HandResult(
                hand_index=r.hand_index,
                outcome=Outcome(r.outcome),
                bet=r.bet,
                credit=r.credit,
            )
            for r in state.results
        ],
        min_bet=state.min_bet,
        auto_play_dealer=state.auto_play_dealer,
    )


def _new_table() -> RoundController:
    return RoundController.from_config(config.game)


async def _load_game(session_id: str) -> RoundController | None:
    """Load a table from the session store."""
    store = await get_session_store()
    session_data = await store.get(session_id)
    if session_data and SESSION_KEY_GAME in session_data:
        return _deserialize_game(session_data[SESSION_KEY_GAME])
    return None


async def _save_game(session_id: str, table: RoundController) -> None:
    """Save a table to the session store."""
    store = await get_session_store()
    session_data = await store.get(session_id) or {}
    session_data[SESSION_KEY_GAME] = _serialize_game(table)
    session_data[SESSION_KEY_LAST_ACTIVITY] = int(time.time())
    if SESSION_KEY_CREATED_AT not in session_data:
        session_data[SESSION_KEY_CREATED_AT] = int(time.time())
    await store.set(session_id, session_data)


async def _get_game(session_id: str) -> RoundController:
    """Get or create a table for the session."""
    if session_id in _tables:
        return _tables[session_id]

    table = await _load_game(session_id)
    if table is not None:
        _tables[session_id] = table
        return table

    table = _new_table()
    _tables[session_id] = table
    await _save_game(session_id, table)
    return table


def _card_response(card: Card) -> CardResponse:
    return CardResponse(rank=str(card.rank), suit=str(card.suit), value=card.value)


def _game_state_response(snapshot: RoundSnapshot) -> GameStateResponse:
    """Convert a round snapshot to a response."""
    dealer = snapshot.dealer
    return GameStateResponse(
        phase=snapshot.phase.name,
        balance=snapshot.balance,
        dealer=DealerResponse(
            cards=[_card_response(c) for c in dealer.visible_cards],
            hole_card_hidden=dealer.hole_card_hidden,
            value=dealer.visible_value,
            is_soft=dealer.is_soft and not dealer.hole_card_hidden,
        ),
        player_hands=[
            HandResponse(
                cards=[_card_response(c) for c in h.cards],
                bet=h.bet,
                value=h.value,
                is_soft=h.is_soft,
                is_blackjack=h.is_blackjack,
                is_busted=h.is_busted,
                doubled=h.doubled,
                finished=h.finished,
            )
            for h in snapshot.player_hands
        ],
        active_hand_index=snapshot.active_hand_index,
        results=[
            HandResultResponse(
                hand_index=r.hand_index,
                outcome=r.outcome.value,
                bet=r.bet,
                credit=r.credit,
                net=r.net,
            )
            for r in snapshot.results
        ],
        total_credit=snapshot.total_credit,
        available_actions=sorted(snapshot.available_actions),
        cards_remaining=snapshot.cards_remaining,
    )


def _respond(result: ActionResult) -> GameStateResponse:
    """Turn an action result into a response, or a 400 if it was refused."""
    if result.refusal is not None:
        detail = RefusalDetail(kind=result.refusal.kind.name, message=result.refusal.message)
        raise HTTPException(status_code=400, detail=detail.model_dump())
    return _game_state_response(result.snapshot)


def _forget(session_id: str) -> None:
    """Drop everything held in memory for a session."""
    _tables.pop(session_id, None)
    release_session_lock(session_id)


async def current_session(
    token: Annotated[str | None, Header(alias="X-Session-ID")] = None,
) -> str:
    """Resolve the X-Session-ID token to a live session id."""
    if token is None:
        raise HTTPException(status_code=401, detail="Missing X-Session-ID header")
    session_id = extract_session_id(token)
    if session_id is None:
        raise HTTPException(status_code=401, detail="Invalid session token")

    store = await get_session_store()
    if not await store.exists(session_id):
        _forget(session_id)
        raise HTTPException(status_code=404, detail="Session expired or unknown")
    return session_id


SessionId = Annotated[str, Depends(current_session)]


async def sweep_expired_sessions() -> int:
    """Release cached tables and locks of sessions the store no longer holds."""
    store = await get_session_store()
    await store.purge_expired()

    released = 0
    for session_id in set(_tables) | set(locked_session_ids()):
        if not await store.exists(session_id):
            _forget(session_id)
            released += 1
    return released


@router.post("/new")
async def new_game(
    token: Annotated[str | None, Header(alias="X-Session-ID")] = None,
) -> dict[str, str]:
    """
    Open a fresh table.

    A live session passed in the header keeps its token and gets a new table;
    anything else starts a new session.
    """
    store = await get_session_store()
    session_id = extract_session_id(token) if token else None
    if session_id is None or not await store.exists(session_id):
        session_id, token = await create_session()

    async with session_lock(session_id):
        table = _new_table()
        _tables[session_id] = table
        await _save_game(session_id, table)

    return {"session_id": token}


@router.get("/state")
async def get_state(session_id: SessionId) -> GameStateResponse:
    """Get current round snapshot."""
    async with session_lock(session_id):
        table = await _get_game(session_id)
        return _game_state_response(table.snapshot())


async def _run(session_id: str, operation: Callable[[RoundController], ActionResult]) -> GameStateResponse:
    """Apply one table operation under the session lock, saving it if accepted."""
    async with session_lock(session_id):
        table = await _get_game(session_id)
        result = operation(table)
        if result.accepted:
            await _save_game(session_id, table)
        return _respond(result)


@router.post("/deal")
async def deal(request: BetRequest, session_id: SessionId) -> GameStateResponse:
    """Place a bet and deal cards."""
    return await _run(session_id, lambda table: table.deal(request.amount))


_PLAYER_ACTIONS: dict[str, Callable[[RoundController], ActionResult]] = {
    "hit": RoundController.hit,
    "stand": RoundController.stand,
    "double": RoundController.double,
    "split": RoundController.split,
}


@router.post("/action")
async def player_action(request: ActionRequest, session_id: SessionId) -> GameStateResponse:
    """Execute a player action."""
    return await _run(session_id, _PLAYER_ACTIONS[request.action])


@router.post("/dealer-step")
async def dealer_step(session_id: SessionId) -> GameStateResponse:
    """Advance a manually paced dealer turn by one card."""
    return await _run(session_id, RoundController.dealer_step)


@router.post("/play-dealer")
async def play_dealer(session_id: SessionId) -> GameStateResponse:
    """Finish a manually paced dealer turn and settle."""
    return await _run(session_id, RoundController.play_dealer)


@router.post("/new-round")
async def new_round(session_id: SessionId) -> GameStateResponse:
    """Clear a settled round so the next bet can be placed."""
    return await _run(session_id, RoundController.start_new_round)
