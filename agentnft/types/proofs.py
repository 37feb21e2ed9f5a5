"""Proof and transfer data models."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ProofData:
    """The four fixed-width fields of a 144-byte transfer proof."""

    old_data_hash: bytes  # 32
    new_data_hash: bytes  # 32
    public_key: bytes  # 64
    sealed_key: bytes  # 16

    def to_hex(self) -> dict[str, str]:
        """Each field as ``0x``-prefixed hex."""
        return {
            "oldDataHash": "0x" + self.old_data_hash.hex(),
            "newDataHash": "0x" + self.new_data_hash.hex(),
            "pubKey": "0x" + self.public_key.hex(),
            "sealedKey": "0x" + self.sealed_key.hex(),
        }


@dataclass
class TransferResult:
    """Parallel per-item outputs of a multi-item transfer."""

    proofs: list[str] = field(default_factory=list)
    new_content_addresses: list[str] = field(default_factory=list)
    sealed_keys: list[str] = field(default_factory=list)
    # symmetric keys of the new items; never sent on-chain
    encryption_keys: list[bytes] = field(default_factory=list, repr=False)


@dataclass
class CloneResult(TransferResult):
    """Per-item outputs of a multi-item clone."""

    @property
    def new_token_data(self) -> dict[str, Any]:
        return {
            "contentAddresses": list(self.new_content_addresses),
            "sealedKeys": list(self.sealed_keys),
        }
