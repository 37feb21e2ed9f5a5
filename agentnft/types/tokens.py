"""Token and chain receipt data models."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class TxReceipt:
    """
    Confirmation receipt returned by the contract binding.

    ``logs`` hold events already decoded by the binding, each shaped as
    ``{"event": name, "args": {...}}``.
    """

    tx_hash: str
    logs: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class TokenInfo:
    """Read-only view of a token assembled from contract calls."""

    token_id: int
    owner: str
    data_hashes: list[str]
    data_descriptions: list[str]
    authorized_users: list[str]


@dataclass
class MintResult:
    """Outcome of a mint."""

    token_id: int
    tx_hash: str
    content_address: str
    sealed_key: str


@dataclass
class CloneTokenResult:
    """Outcome of an on-chain clone."""

    new_token_id: int
    tx_hash: str
    content_addresses: list[str]
    sealed_keys: list[str]
