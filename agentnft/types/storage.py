"""Storage-related data models."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class StorageResult:
    """Outcome of storing one blob."""

    transaction_reference: str
    content_address: str
    size_bytes: int

    @property
    def is_local(self) -> bool:
        """True when the blob landed in the local tier instead of the chain."""
        return self.transaction_reference.startswith("local-")


@dataclass
class FallbackConfig:
    """Retry and local fallback policy for the storage backend."""

    enable_fallback: bool = True
    local_storage_dir: str = "./temp/local-storage"
    retry_attempts: int = 1
    retry_delay_ms: int = 1000
    prefer_local: bool = False


@dataclass
class StorageConfig:
    """Connection settings for the remote storage tier."""

    rpc_url: str
    indexer_url: str
    chain_id: int
    upload_timeout_ms: int = 10000
    fallback: FallbackConfig = field(default_factory=FallbackConfig)


@dataclass
class LocalRecord:
    """One entry of the local tier's ``metadata.json`` index."""

    size: int
    timestamp: str  # ISO 8601, UTC
    file_path: str  # relative to the local storage root
    content_type: str = "application/octet-stream"
    provenance: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.provenance,
            "timestamp": self.timestamp,
            "size": self.size,
            "filePath": self.file_path,
            "contentType": self.content_type,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LocalRecord":
        known = {"timestamp", "size", "filePath", "contentType"}
        return cls(
            size=int(data.get("size", 0)),
            timestamp=data.get("timestamp", ""),
            file_path=data.get("filePath", ""),
            content_type=data.get("contentType", "application/octet-stream"),
            provenance={k: v for k, v in data.items() if k not in known},
        )


@dataclass
class CleanupResult:
    """Totals reported by local tier cleanup."""

    deleted_count: int
    freed_bytes: int
