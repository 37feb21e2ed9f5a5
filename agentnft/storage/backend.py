"""
Storage backend with remote upload, bounded retries and local fallback.

Writes go to the remote tier unless ``prefer_local`` is set; when every
remote attempt fails and fallback is enabled the blob lands on local disk.
Reads prefer the local tier and cache remote hits locally.
"""

import asyncio
import dataclasses
from datetime import datetime, timezone
from typing import Any

from agentnft.addressing import merkle_root, normalize_address
from agentnft.exceptions import AgentNFTError, NotFoundError, TransportError
from agentnft.logging import get_logger, log_storage_attempt, truncate_hex
from agentnft.storage.local import LocalStore
from agentnft.storage.remote import IndexerStorage, RemoteStorage
from agentnft.types.storage import CleanupResult, FallbackConfig, StorageConfig, StorageResult

logger = get_logger("storage")

# Failures from either tier that the backend handles rather than propagates
_TIER_ERRORS = (AgentNFTError, OSError)


class StorageBackend:
    """
    Content-addressed object store over a remote tier and a local tier.

    Both tiers key objects by :func:`agentnft.addressing.merkle_root`, so an
    address returned by one tier can always be looked up in the other.
    """

    def __init__(self, config: StorageConfig, remote: RemoteStorage | None = None) -> None:
        """
        Initialize the storage backend.

        Args:
            config: Remote endpoints, upload timeout and fallback policy
            remote: Remote tier implementation (default: IndexerStorage
                against ``config.indexer_url``)
        """
        self.config = config
        self._remote = remote or IndexerStorage(config.indexer_url)
        self._local = LocalStore(config.fallback.local_storage_dir)

        if config.fallback.enable_fallback:
            self._local.ensure_root()

        logger.info(
            "Storage initialized: fallback=%s local_dir=%s retry_attempts=%d prefer_local=%s",
            config.fallback.enable_fallback,
            config.fallback.local_storage_dir,
            config.fallback.retry_attempts,
            config.fallback.prefer_local,
        )

    @property
    def fallback_config(self) -> FallbackConfig:
        """A copy of the current fallback policy."""
        return dataclasses.replace(self.config.fallback)

    @property
    def local(self) -> LocalStore:
        return self._local

    def set_fallback_config(self, **changes: Any) -> None:
        """
        Update fields of the fallback policy.

        Changing ``local_storage_dir`` re-roots the local tier.
        """
        self.config.fallback = dataclasses.replace(self.config.fallback, **changes)
        if "local_storage_dir" in changes:
            self._local = LocalStore(self.config.fallback.local_storage_dir)
            if self.config.fallback.enable_fallback:
                self._local.ensure_root()
        logger.info("Fallback config updated: %s", self.config.fallback)

    async def aclose(self) -> None:
        await self._remote.aclose()

    async def __aenter__(self) -> "StorageBackend":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def store(self, data: bytes) -> StorageResult:
        """
        Store ``data`` and return its content address.

        Raises:
            TransportError: If every remote attempt fails and fallback is
                disabled, or the local fallback write fails too
        """
        fallback = self.config.fallback

        if fallback.prefer_local:
            logger.info("Prefer local mode enabled, storing locally")
            return self._local.store(data)

        address = merkle_root(data)
        failures: list[str] = []

        for attempt in range(1, fallback.retry_attempts + 1):
            log_storage_attempt("remote", "store", address, attempt, fallback.retry_attempts)
            try:
                return await self._store_remote(data, address)
            except _TIER_ERRORS as e:
                failures.append(f"attempt {attempt}: {e}")
                logger.warning("Remote storage attempt %d failed: %s", attempt, e)

            if attempt < fallback.retry_attempts:
                logger.info("Retrying in %dms...", fallback.retry_delay_ms)
                await asyncio.sleep(fallback.retry_delay_ms / 1000)

        last_error = failures[-1] if failures else "no remote attempts configured"

        if not fallback.enable_fallback:
            raise TransportError(
                f"Remote storage failed after {fallback.retry_attempts} attempts: {'; '.join(failures)}",
                attempts=failures,
            )

        logger.warning("All remote storage attempts failed, falling back to local storage: %s", last_error)
        try:
            return self._local.store(
                data,
                {"fallbackReason": "Remote storage unavailable", "remoteError": last_error},
            )
        except OSError as e:
            raise TransportError(
                f"Both remote storage and local fallback failed. Remote: {last_error}, Local: {e}",
                attempts=failures,
            ) from e

    async def retrieve(self, address: str) -> bytes:
        """
        Fetch the blob stored under ``address``.

        Raises:
            ValidationError: If the address is malformed
            NotFoundError: If neither tier holds the address
            OSError: If the object is only available locally and the local
                read fails
        """
        address = normalize_address(address)
        exists_locally = self._local.exists(address)

        if exists_locally:
            try:
                return self._local.retrieve(address)
            except OSError as e:
                logger.warning("Local retrieval failed: %s, trying remote storage", e)

        log_storage_attempt("remote", "retrieve", address)
        try:
            data = await self._remote.download(address)
        except _TIER_ERRORS as remote_error:
            if not exists_locally:
                raise NotFoundError(
                    f"File not found in remote storage or locally: {address}. Remote error: {remote_error}",
                    address=address,
                ) from remote_error
            logger.warning("Remote retrieval failed: %s, falling back to local", remote_error)
            return self._local.retrieve(address)

        if self.config.fallback.enable_fallback:
            try:
                self._local.store(
                    data,
                    {
                        "source": "cached-from-remote",
                        "cachedAt": datetime.now(timezone.utc).isoformat(),
                        "originalAddress": address,
                    },
                )
                log_storage_attempt("local", "cache", address)
            except OSError as e:
                logger.warning("Failed to cache file locally: %s", e)

        return data

    def exists_local(self, address: str) -> bool:
        return self._local.exists(address)

    async def cleanup_local(self, max_age_days: float = 30) -> CleanupResult:
        """
        Purge local objects older than ``max_age_days``. Never touches the
        remote tier.
        """
        if not self.config.fallback.enable_fallback:
            return CleanupResult(deleted_count=0, freed_bytes=0)
        return self._local.cleanup(max_age_days)

    async def _store_remote(self, data: bytes, address: str) -> StorageResult:
        timeout_ms = self.config.upload_timeout_ms
        try:
            # a timed-out upload may still complete server side
            tx_ref = await asyncio.wait_for(self._remote.upload(data, address), timeout_ms / 1000)
        except asyncio.TimeoutError:
            raise TransportError(f"Remote upload timed out after {timeout_ms}ms") from None

        logger.info("Remote upload successful: %s", truncate_hex(tx_ref))
        return StorageResult(transaction_reference=tx_ref, content_address=address, size_bytes=len(data))
