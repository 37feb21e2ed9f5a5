"""
Content addressing for stored blobs.

Both storage tiers key objects by the same value: a SHA-256 binary Merkle
root over fixed 256-byte segments of the blob. Leaves and internal nodes use
distinct one-byte prefixes so a leaf can never be mistaken for a node.
"""

import hashlib
import re

from agentnft.exceptions import ValidationError

SEGMENT_SIZE = 256

_LEAF_PREFIX = b"\x00"
_NODE_PREFIX = b"\x01"

_HEX32 = re.compile(r"^[0-9a-f]{64}$")


def merkle_root_bytes(data: bytes) -> bytes:
    """Return the raw 32-byte Merkle root of ``data``."""
    segments = [data[i:i + SEGMENT_SIZE] for i in range(0, len(data), SEGMENT_SIZE)] or [b""]
    level = [hashlib.sha256(_LEAF_PREFIX + seg).digest() for seg in segments]

    while len(level) > 1:
        next_level = []
        for i in range(0, len(level), 2):
            if i + 1 < len(level):
                next_level.append(hashlib.sha256(_NODE_PREFIX + level[i] + level[i + 1]).digest())
            else:
                # odd node is promoted as-is
                next_level.append(level[i])
        level = next_level

    return level[0]


def merkle_root(data: bytes) -> str:
    """Return the content address of ``data`` as ``0x`` + 64 hex chars."""
    return "0x" + merkle_root_bytes(data).hex()


def strip_hex_prefix(value: str) -> str:
    """Drop a leading ``0x``/``0X`` marker if present."""
    if value[:2] in ("0x", "0X"):
        return value[2:]
    return value


def normalize_address(value: str) -> str:
    """
    Validate a content address and return it lower-cased with ``0x``.

    Raises:
        ValidationError: If the value is not 32 bytes of hex
    """
    if not isinstance(value, str) or not value:
        raise ValidationError("Content address is required")

    body = strip_hex_prefix(value).lower()
    if not _HEX32.match(body):
        raise ValidationError(f"Malformed content address: {value!r}")

    return "0x" + body


def hex_to_bytes(value: str | bytes, length: int | None = None, field: str = "value") -> bytes:
    """
    Decode a hex string (optionally ``0x``-prefixed) into bytes.

    Args:
        value: Hex string or raw bytes (returned unchanged)
        length: Expected byte length, checked when given
        field: Name used in error messages

    Raises:
        ValidationError: On non-hex input or a length mismatch
    """
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    else:
        try:
            raw = bytes.fromhex(strip_hex_prefix(value))
        except (ValueError, TypeError) as e:
            raise ValidationError(f"{field} is not valid hex: {e}") from e

    if length is not None and len(raw) != length:
        raise ValidationError(f"{field} must be {length} bytes, got {len(raw)}")

    return raw
