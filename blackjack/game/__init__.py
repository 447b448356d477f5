"""Round controller and state management."""

from blackjack.game.errors import Refusal, RefusalKind
from blackjack.game.state import Phase
from blackjack.game.snapshot import ActionResult, DealerView, HandView, RoundSnapshot
from blackjack.game.engine import RoundController

__all__ = [
    "ActionResult",
    "DealerView",
    "HandView",
    "Phase",
    "Refusal",
    "RefusalKind",
    "RoundController",
    "RoundSnapshot",
]
