"""
Local disk tier of the storage backend.

Layout under the storage root:

    files/<first 2 hex>/<address hex>.bin
    metadata.json        address -> LocalRecord

The index is read, modified and rewritten whole on every write with no
locking; only one writer may use a root at a time.
"""

import json
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from agentnft.addressing import merkle_root, normalize_address, strip_hex_prefix
from agentnft.exceptions import NotFoundError
from agentnft.logging import get_logger, log_storage_attempt, truncate_hex
from agentnft.types.storage import CleanupResult, LocalRecord, StorageResult

logger = get_logger("storage")

INDEX_FILE = "metadata.json"
FILES_DIR = "files"
LOCAL_TX_PREFIX = "local-"


class LocalStore:
    """Content-addressed blob store on the local filesystem."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self.index_path = self.root / INDEX_FILE

    def ensure_root(self) -> None:
        """Create the storage root if it does not exist."""
        if not self.root.exists():
            self.root.mkdir(parents=True, exist_ok=True)
            logger.info("Created local storage directory: %s", self.root)

    def path_for(self, address: str) -> Path:
        """Return the file path for ``address``; does not touch the disk."""
        body = strip_hex_prefix(normalize_address(address))
        return self.root / FILES_DIR / body[:2] / f"{body}.bin"

    def exists(self, address: str) -> bool:
        return self.path_for(address).exists()

    def store(self, data: bytes, provenance: dict[str, Any] | None = None) -> StorageResult:
        """
        Write ``data`` and record it in the index.

        Storing bytes that are already present and indexed is a no-op that
        returns the same address. A file without an index entry gets one.
        """
        address = merkle_root(data)
        result = StorageResult(
            transaction_reference=f"{LOCAL_TX_PREFIX}{strip_hex_prefix(address)}",
            content_address=address,
            size_bytes=len(data),
        )

        file_path = self.path_for(address)
        index = self.load_index()
        if file_path.exists():
            if address in index:
                logger.info("File already exists locally: %s", truncate_hex(address))
                return result
            logger.warning("Indexing local file missing from %s: %s", INDEX_FILE, truncate_hex(address))
        else:
            log_storage_attempt("local", "store", address)
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_bytes(data)

        index[address] = LocalRecord(
            size=len(data),
            timestamp=datetime.now(timezone.utc).isoformat(),
            file_path=str(file_path.relative_to(self.root)),
            provenance=dict(provenance or {}),
        )
        self.save_index(index)

        logger.info("Stored %d bytes locally: %s", len(data), truncate_hex(address))
        return result

    def retrieve(self, address: str) -> bytes:
        """
        Read the blob stored under ``address``.

        Raises:
            NotFoundError: If no file exists for the address
            OSError: If the file exists but cannot be read
        """
        file_path = self.path_for(address)
        if not file_path.exists():
            raise NotFoundError(f"File not found locally: {address}", address=address)

        data = file_path.read_bytes()
        log_storage_attempt("local", "retrieve", address)
        return data

    def load_index(self) -> dict[str, LocalRecord]:
        """Load the index, starting fresh if it is missing or unreadable."""
        if not self.index_path.exists():
            return {}
        try:
            raw = json.loads(self.index_path.read_text(encoding="utf-8"))
            return {address: LocalRecord.from_dict(entry) for address, entry in raw.items()}
        except (OSError, ValueError, AttributeError) as e:
            logger.warning("Failed to load local metadata file, starting fresh: %s", e)
            return {}

    def save_index(self, index: dict[str, LocalRecord]) -> None:
        """Rewrite the whole index file."""
        self.ensure_root()
        payload = {address: record.to_dict() for address, record in index.items()}
        tmp_path = self.index_path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        os.replace(tmp_path, self.index_path)

    def cleanup(self, max_age_days: float = 30, now: datetime | None = None) -> CleanupResult:
        """
        Delete objects whose index timestamp is older than ``max_age_days``.

        Entries with unparseable timestamps are left alone.
        """
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(days=max_age_days)

        index = self.load_index()
        deleted_count = 0
        freed_bytes = 0

        for address, record in list(index.items()):
            stored_at = _parse_timestamp(record.timestamp)
            if stored_at is None or stored_at >= cutoff:
                continue

            try:
                file_path = self.path_for(address)
                if file_path.exists():
                    file_path.unlink()
                    deleted_count += 1
                    freed_bytes += record.size
            except OSError as e:
                logger.warning("Failed to delete old file %s: %s", truncate_hex(address), e)
                continue

            del index[address]

        self.save_index(index)
        logger.info("Cleanup completed: deleted %d files, freed %d bytes", deleted_count, freed_bytes)
        return CleanupResult(deleted_count=deleted_count, freed_bytes=freed_bytes)


def _parse_timestamp(value: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
