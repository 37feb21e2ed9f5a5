"""
Encrypted agent metadata lifecycle.

Every write produces a fresh key, a fresh blob and therefore a fresh content
address; nothing is ever rewritten in place.
"""

import hashlib
import json
import time
from typing import Any

from agentnft.cipher import CipherService
from agentnft.exceptions import AgentNFTError, IntegrityError
from agentnft.logging import get_logger, truncate_hex
from agentnft.storage.backend import StorageBackend
from agentnft.types.metadata import AgentMetadata, DecryptedMetadata, EncryptedMetadataResult

logger = get_logger("metadata")

DEFAULT_BUMPED_VERSION = "1.1"
CLONE_VERSION = "1.0"


def now_millis() -> int:
    return time.time_ns() // 1_000_000


def increment_version(current: Any) -> str:
    """
    Bump the minor part of a "major.minor" version string.

    ``"1.9"`` becomes ``"1.10"``. An unparseable major part counts as 1 and
    an unparseable minor part as 0; anything that is not a string yields
    ``"1.1"``.
    """
    if not isinstance(current, str):
        return DEFAULT_BUMPED_VERSION

    parts = current.split(".")
    major = _leading_int(parts[0]) or 1
    minor = _leading_int(parts[1]) if len(parts) > 1 else 0
    return f"{major}.{(minor or 0) + 1}"


def _leading_int(text: str) -> int | None:
    """
    Leading optional sign and digits of ``text`` as an int, ignoring
    surrounding whitespace and anything after the digits. None when no digit
    leads, so ``"3.x"`` gives 3 and ``"x3"`` gives None.
    """
    text = text.strip()
    end = 1 if text[:1] in ("+", "-") else 0
    while end < len(text) and text[end].isdigit():
        end += 1
    try:
        return int(text[:end])
    except ValueError:
        return None


def validate_metadata(metadata: AgentMetadata) -> bool:
    """Structural check: name and version present, createdAt a number."""
    created_at = metadata.created_at
    return bool(
        metadata.name
        and metadata.version
        and created_at
        and isinstance(created_at, (int, float))
        and not isinstance(created_at, bool)
    )


def metadata_hash(metadata: AgentMetadata) -> str:
    """SHA-256 over the record's JSON with sorted keys, as ``0x`` hex."""
    canonical = json.dumps(metadata.to_dict(), sort_keys=True, separators=(",", ":"))
    return "0x" + hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class MetadataManager:
    """Creates, reads, versions, re-keys and clones encrypted agent metadata."""

    def __init__(self, storage: StorageBackend, cipher: CipherService) -> None:
        self.storage = storage
        self.cipher = cipher

    async def create_ai_agent(
        self,
        metadata: AgentMetadata,
        recipient_public_key: str,
    ) -> EncryptedMetadataResult:
        """
        Encrypt and store a new metadata record sealed for one recipient.

        The returned ``encryption_key`` lets the caller chain further calls
        immediately; it is not persisted anywhere.
        """
        try:
            return await self._write(metadata, recipient_public_key)
        except AgentNFTError as e:
            raise e.with_context("Failed to create AI agent") from e

    async def retrieve_ai_agent(self, address: str, key: bytes) -> DecryptedMetadata:
        """
        Fetch, decrypt and structurally check a record.

        A record failing the check is returned with ``is_valid=False``.
        """
        try:
            blob = await self.storage.retrieve(address)
            payload = self.cipher.decrypt_json(blob, key)
            if not isinstance(payload, dict):
                raise IntegrityError("Decrypted metadata is not a JSON object")
        except AgentNFTError as e:
            raise e.with_context("Failed to retrieve AI agent") from e

        metadata = AgentMetadata.from_dict(payload)
        return DecryptedMetadata(metadata=metadata, is_valid=validate_metadata(metadata))

    async def update_ai_agent(
        self,
        address: str,
        key: bytes,
        patch: dict[str, Any],
        recipient_public_key: str,
    ) -> EncryptedMetadataResult:
        """
        Shallow-merge ``patch`` over the current record and bump its version.

        Keys in ``patch`` use the serialized (camelCase) names. The new record
        is sealed for the same recipient as before.
        """
        try:
            current = (await self.retrieve_ai_agent(address, key)).metadata
            merged = {**current.to_dict(), **patch}
            merged["version"] = increment_version(current.version)
            merged["updatedAt"] = now_millis()
            updated = AgentMetadata.from_dict(merged)
            result = await self._write(updated, recipient_public_key)
        except AgentNFTError as e:
            raise e.with_context("Failed to update AI agent") from e

        logger.info("Updated agent %r to version %s", updated.name, updated.version)
        return result

    async def reencrypt_for_transfer(
        self,
        address: str,
        key: bytes,
        new_owner_public_key: str,
    ) -> EncryptedMetadataResult:
        """
        Re-key an unchanged record for a new owner.

        The fresh nonce alone guarantees a new blob and a new address.
        """
        try:
            current = (await self.retrieve_ai_agent(address, key)).metadata
            return await self._write(current, new_owner_public_key)
        except AgentNFTError as e:
            raise e.with_context("Failed to re-encrypt for transfer") from e

    async def clone_ai_agent(
        self,
        source_address: str,
        key: bytes,
        new_owner_public_key: str,
        modifications: dict[str, Any] | None = None,
    ) -> EncryptedMetadataResult:
        """
        Start a new lineage from an existing record.

        The clone gets version "1.0" and a createdAt strictly later than the
        source's, whatever ``modifications`` say.
        """
        try:
            source = (await self.retrieve_ai_agent(source_address, key)).metadata
            cloned = {**source.to_dict(), **(modifications or {})}
            cloned["createdAt"] = self._clone_timestamp(source.created_at)
            cloned["version"] = CLONE_VERSION
            result = await self._write(AgentMetadata.from_dict(cloned), new_owner_public_key)
        except AgentNFTError as e:
            raise e.with_context("Failed to clone AI agent") from e

        logger.info("Cloned agent %r into %s", source.name, truncate_hex(result.content_address))
        return result

    async def _write(self, metadata: AgentMetadata, recipient_public_key: str) -> EncryptedMetadataResult:
        key = self.cipher.generate_key()
        blob = self.cipher.encrypt_json(metadata.to_dict(), key)
        stored = await self.storage.store(blob)
        sealed_key = self.cipher.seal_key(key, recipient_public_key)
        return EncryptedMetadataResult(
            content_address=stored.content_address,
            sealed_key=sealed_key,
            encryption_key=key,
            metadata=metadata,
        )

    @staticmethod
    def _clone_timestamp(source_created_at: Any) -> int:
        now = now_millis()
        if isinstance(source_created_at, (int, float)) and not isinstance(source_created_at, bool):
            # same-millisecond clones still sort after their source
            return max(now, int(source_created_at) + 1)
        return now
