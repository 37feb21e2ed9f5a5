"""
AgentNFT SDK logging utilities.

Provides configurable logging for storage traffic, chain submissions and
cipher operations. Symmetric keys, private keys and sealed keys never reach
the log output in full.
"""

import logging
import re
from typing import Any

_sdk_logger = logging.getLogger("agentnft")
_http_logger = logging.getLogger("agentnft.http")
_storage_logger = logging.getLogger("agentnft.storage")
_crypto_logger = logging.getLogger("agentnft.crypto")
_registry_logger = logging.getLogger("agentnft.registry")

# Patterns for sensitive data that should be masked
_SENSITIVE_PATTERNS = [
    # PEM private keys
    (re.compile(r"-----BEGIN[^-]*PRIVATE KEY-----.*?-----END[^-]*PRIVATE KEY-----", re.DOTALL), "[PRIVATE_KEY_REDACTED]"),
    # 32-byte secrets in hex, with or without 0x
    (re.compile(r"(private_key|privateKey|encryption_key|encryptionKey)['\"]?\s*[:=]\s*['\"]?(0x)?[a-fA-F0-9]{64}['\"]?"), r"\1: [REDACTED]"),
    # Sealed keys (16 bytes)
    (re.compile(r"(sealed_key|sealedKey)['\"]?\s*[:=]\s*['\"]?(0x)?[a-fA-F0-9]{32}['\"]?"), r"\1: [REDACTED]"),
    # Signatures in hex
    (re.compile(r"signature['\"]?\s*[:=]\s*['\"]?(0x)?[a-fA-F0-9]{128,}['\"]?"), "signature: [SIGNATURE_REDACTED]"),
    # Generic secrets
    (re.compile(r"(secret|token|password|api_key)['\"]?\s*[:=]\s*['\"][^'\"]+['\"]", re.IGNORECASE), r"\1: [REDACTED]"),
]

_SENSITIVE_KEYS = {
    "private_key",
    "privatekey",
    "encryption_key",
    "encryptionkey",
    "sealed_key",
    "sealedkey",
    "signature",
    "secret",
    "password",
    "api_key",
}

# Characters kept at each end of a truncated hex value
_HEX_PREVIEW_LENGTH = 10


def configure_logging(
    level: int = logging.INFO,
    http_level: int | None = None,
    storage_level: int | None = None,
    handler: logging.Handler | None = None,
    format_string: str | None = None,
) -> None:
    """
    Configure AgentNFT SDK logging.

    Args:
        level: Default log level for all SDK loggers (default: INFO)
        http_level: Log level for indexer request/response logging
        storage_level: Log level for storage tier decisions
        handler: Custom handler to use (default: StreamHandler to stderr)
        format_string: Custom format string

    Example:
        ```python
        import logging
        from agentnft.logging import configure_logging

        configure_logging(level=logging.INFO, storage_level=logging.DEBUG)
        ```
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    formatter = logging.Formatter(format_string)

    if handler is None:
        handler = logging.StreamHandler()

    handler.setFormatter(formatter)

    _sdk_logger.setLevel(level)
    _sdk_logger.addHandler(handler)

    _http_logger.setLevel(http_level if http_level is not None else level)
    _storage_logger.setLevel(storage_level if storage_level is not None else level)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get an AgentNFT SDK logger.

    Args:
        name: Logger name suffix (e.g., "storage", "registry"). If None,
            returns the main SDK logger.
    """
    if name is None:
        return _sdk_logger
    return logging.getLogger(f"agentnft.{name}")


def mask_sensitive_data(text: str) -> str:
    """
    Mask sensitive data in a string.

    Replaces private keys, symmetric keys, sealed keys and signatures with
    redacted placeholders.
    """
    result = text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def truncate_hex(value: str) -> str:
    """
    Shorten a long hex value (content address, tx hash) for log lines.

    Returns something like ``0xabc12345...9f8e7d6c5b``.
    """
    if len(value) <= _HEX_PREVIEW_LENGTH * 2 + 3:
        return value
    return f"{value[:_HEX_PREVIEW_LENGTH]}...{value[-_HEX_PREVIEW_LENGTH:]}"


def safe_log_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """
    Create a copy of a dictionary with sensitive values masked.

    Args:
        data: Dictionary that may contain sensitive values
        sensitive_keys: Lower-cased keys to mask (default: key material and
            signatures)
    """
    if sensitive_keys is None:
        sensitive_keys = _SENSITIVE_KEYS

    result: dict[str, Any] = {}
    for key, value in data.items():
        if key.lower() in sensitive_keys:
            result[key] = "[REDACTED]"
        elif isinstance(value, dict):
            result[key] = safe_log_dict(value, sensitive_keys)
        elif isinstance(value, list):
            result[key] = [
                safe_log_dict(item, sensitive_keys) if isinstance(item, dict) else item
                for item in value
            ]
        elif isinstance(value, bytes):
            result[key] = f"<{len(value)} bytes>"
        else:
            result[key] = value

    return result


def log_http_request(
    method: str,
    url: str,
    params: dict[str, Any] | None = None,
    size: int | None = None,
) -> None:
    """Log an indexer request at DEBUG level."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"{method} {url}"]

    if params:
        log_parts.append(f"params={safe_log_dict(params)}")

    if size is not None:
        log_parts.append(f"size={size}")

    _http_logger.debug(" | ".join(log_parts))


def log_http_response(
    status_code: int,
    url: str,
    size: int | None = None,
    elapsed_ms: float | None = None,
) -> None:
    """Log an indexer response at DEBUG level."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"Response {status_code} from {url}"]

    if elapsed_ms is not None:
        log_parts.append(f"elapsed={elapsed_ms:.2f}ms")

    if size is not None:
        log_parts.append(f"size={size}")

    _http_logger.debug(" | ".join(log_parts))


def log_storage_attempt(
    tier: str,
    operation: str,
    address: str | None = None,
    attempt: int | None = None,
    total: int | None = None,
) -> None:
    """
    Log a storage tier operation at DEBUG level.

    Args:
        tier: "remote" or "local"
        operation: "store", "retrieve", "cache", ...
        address: Content address, truncated in the output
        attempt: 1-based attempt number for retried operations
        total: Total attempts allowed
    """
    if not _storage_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"{tier} {operation}"]

    if address:
        log_parts.append(f"address={truncate_hex(address)}")

    if attempt is not None:
        log_parts.append(f"attempt={attempt}/{total if total is not None else '?'}")

    _storage_logger.debug(" | ".join(log_parts))


__all__ = [
    "configure_logging",
    "get_logger",
    "mask_sensitive_data",
    "truncate_hex",
    "safe_log_dict",
    "log_http_request",
    "log_http_response",
    "log_storage_attempt",
]
