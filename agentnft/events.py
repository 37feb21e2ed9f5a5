"""
Typed lookup of contract events in a transaction receipt.

Receipts carry logs already decoded by the contract binding. Lookups are
first-match by event name and never raise; callers decide whether a missing
event is an error.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from agentnft.types.tokens import TxReceipt


@dataclass(frozen=True)
class EventShape:
    """Event name plus the argument names that may carry its token id."""

    name: str
    token_id_args: tuple[str, ...] = ()


@dataclass
class DecodedEvent:
    """One event pulled out of a receipt."""

    name: str
    args: dict[str, Any] = field(default_factory=dict)
    token_id: int | None = None


MINTED = EventShape("Minted", ("_tokenId", "tokenId"))
CLONED = EventShape("Cloned", ("newTokenId", "_clonedTokenId"))


def find_event(receipt: TxReceipt, shape: EventShape) -> DecodedEvent | None:
    """Return the first log matching ``shape``, or None."""
    for log in receipt.logs:
        if not isinstance(log, Mapping) or log.get("event") != shape.name:
            continue
        args = log.get("args")
        if args is None:
            args = {}
        elif not isinstance(args, Mapping):
            continue
        return DecodedEvent(name=shape.name, args=dict(args), token_id=_token_id(args, shape))
    return None


def _token_id(args: Mapping[str, Any], shape: EventShape) -> int | None:
    for name in shape.token_id_args:
        value = args.get(name)
        if value is None:
            continue
        try:
            return int(value, 0) if isinstance(value, str) else int(value)
        except (TypeError, ValueError):
            return None
    return None


__all__ = [
    "EventShape",
    "DecodedEvent",
    "MINTED",
    "CLONED",
    "find_event",
]
