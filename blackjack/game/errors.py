"""Structured refusals for actions that are not legal right now."""

from dataclasses import dataclass
from enum import Enum, auto


class RefusalKind(Enum):
    """Why an operation was refused."""

    INVALID_BET = auto()
    INSUFFICIENT_BALANCE = auto()
    RANK_MISMATCH = auto()
    INVALID_ACTION = auto()
    WRONG_PHASE = auto()


@dataclass(frozen=True)
class Refusal:
    """
    A refused operation.

    Refusals are returned, never raised: the round is left exactly as it was
    and the caller is expected to show ``message`` and let the player retry.
    """

    kind: RefusalKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.name}: {self.message}"
