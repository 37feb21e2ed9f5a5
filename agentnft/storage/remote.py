"""
Remote tier of the storage backend.

``IndexerStorage`` talks to a storage indexer over HTTP:

    POST {indexer}/file?root={address}   raw bytes in, {code, message, data: {txHash}} out
    GET  {indexer}/file?root={address}   raw bytes, or a JSON error envelope
"""

import time
from abc import ABC, abstractmethod
from typing import Any

import httpx

from agentnft.addressing import normalize_address
from agentnft.exceptions import NotFoundError, TransportError
from agentnft.logging import log_http_request, log_http_response, truncate_hex

# Indexer error code for an unknown root
FILE_NOT_FOUND_CODE = 101


class RemoteStorage(ABC):
    """Abstract remote content-addressed store."""

    @abstractmethod
    async def upload(self, data: bytes, address: str) -> str:
        """Upload ``data`` under ``address`` and return a transaction reference."""
        pass

    @abstractmethod
    async def download(self, address: str) -> bytes:
        """Fetch the bytes stored under ``address``."""
        pass

    async def aclose(self) -> None:
        """Release any held resources."""
        return None


class IndexerStorage(RemoteStorage):
    """
    Remote storage backed by an indexer HTTP API.

    Network errors surface as ``TransportError``; a JSON error envelope with
    code 101 surfaces as ``NotFoundError``.
    """

    def __init__(
        self,
        indexer_url: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the indexer client.

        Args:
            indexer_url: Base URL of the indexer
            timeout: Per-request timeout in seconds
            client: Pre-built client (tests pass one with a MockTransport)
        """
        self.indexer_url = indexer_url.rstrip("/")
        self._client = client or httpx.AsyncClient(base_url=self.indexer_url, timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "IndexerStorage":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def upload(self, data: bytes, address: str) -> str:
        url = f"{self.indexer_url}/file"
        params = {"root": address}
        log_http_request("POST", url, params=params, size=len(data))

        started = time.monotonic()
        try:
            response = await self._client.post(
                url,
                params=params,
                content=data,
                headers={"Content-Type": "application/octet-stream"},
            )
        except httpx.RequestError as e:
            raise TransportError(f"Upload request failed: {e}") from e
        log_http_response(response.status_code, url, elapsed_ms=(time.monotonic() - started) * 1000)

        envelope = self._json_body(response)
        if envelope is None:
            if not response.is_success:
                raise TransportError(
                    f"Upload failed with status {response.status_code}: {response.text}",
                    status_code=response.status_code,
                )
            raise TransportError("Upload response was not JSON", status_code=response.status_code)

        if not response.is_success or envelope.get("code"):
            raise TransportError(
                f"Upload error: {envelope.get('message') or 'Unknown error'}",
                status_code=response.status_code,
            )

        tx_hash = (envelope.get("data") or {}).get("txHash")
        if not tx_hash:
            raise TransportError("Upload response carried no transaction hash")
        return tx_hash

    async def download(self, address: str) -> bytes:
        address = normalize_address(address)
        url = f"{self.indexer_url}/file"
        params = {"root": address}
        log_http_request("GET", url, params=params)

        started = time.monotonic()
        try:
            response = await self._client.get(url, params=params)
        except httpx.RequestError as e:
            raise TransportError(f"Download request failed: {e}") from e
        log_http_response(
            response.status_code,
            url,
            size=len(response.content),
            elapsed_ms=(time.monotonic() - started) * 1000,
        )

        envelope = self._json_body(response)
        if envelope is not None and (not response.is_success or envelope.get("code")):
            if envelope.get("code") == FILE_NOT_FOUND_CODE:
                raise NotFoundError(
                    f'File not found: the file with root "{truncate_hex(address)}" does not exist in storage',
                    address=address,
                )
            raise TransportError(
                f"Download failed: {envelope.get('message') or 'Unknown error'}",
                status_code=response.status_code,
            )

        if not response.is_success:
            raise TransportError(
                f"Download failed with status {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        if not response.content:
            raise TransportError("Downloaded file is empty", status_code=response.status_code)

        return response.content

    @staticmethod
    def _json_body(response: httpx.Response) -> dict[str, Any] | None:
        """Return the JSON object body, or None for non-JSON responses."""
        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            return None
        try:
            data = response.json()
        except ValueError:
            return None
        return data if isinstance(data, dict) else None
