"""AgentNFT SDK type definitions.

This module exports all data model types used by the SDK.
"""

from agentnft.types.metadata import AgentMetadata, DecryptedMetadata, EncryptedMetadataResult
from agentnft.types.proofs import CloneResult, ProofData, TransferResult
from agentnft.types.storage import (
    CleanupResult,
    FallbackConfig,
    LocalRecord,
    StorageConfig,
    StorageResult,
)
from agentnft.types.tokens import CloneTokenResult, MintResult, TokenInfo, TxReceipt

__all__ = [
    # Metadata
    "AgentMetadata",
    "EncryptedMetadataResult",
    "DecryptedMetadata",
    # Storage
    "StorageResult",
    "StorageConfig",
    "FallbackConfig",
    "LocalRecord",
    "CleanupResult",
    # Proofs
    "ProofData",
    "TransferResult",
    "CloneResult",
    # Tokens
    "TxReceipt",
    "TokenInfo",
    "MintResult",
    "CloneTokenResult",
]
