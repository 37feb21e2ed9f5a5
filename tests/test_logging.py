"""
Property-based tests for AgentNFT SDK logging.

Feature: agentnft-sdk
"""

import io
import logging

from hypothesis import given, settings
from hypothesis import strategies as st

from agentnft.logging import (
    configure_logging,
    get_logger,
    log_http_request,
    log_storage_attempt,
    mask_sensitive_data,
    safe_log_dict,
    truncate_hex,
)

hex32_strategy = st.text(alphabet=st.sampled_from("0123456789abcdef"), min_size=64, max_size=64)
hex16_strategy = st.text(alphabet=st.sampled_from("0123456789abcdef"), min_size=32, max_size=32)


@given(key=hex32_strategy)
@settings(max_examples=100)
def test_property_no_full_key_in_masked_output(key: str) -> None:
    """
    Property 9: No key material in logs

    For any private or encryption key, masked output SHALL NOT contain the
    full key.
    """
    for field in ("private_key", "encryptionKey"):
        masked = mask_sensitive_data(f'{{"{field}": "0x{key}"}}')
        assert key not in masked
        assert "[REDACTED]" in masked


@given(sealed=hex16_strategy)
@settings(max_examples=50)
def test_property_sealed_key_masked(sealed: str) -> None:
    masked = mask_sensitive_data(f"sealedKey={sealed}")
    assert sealed not in masked


def test_safe_log_dict() -> None:
    data = {
        "contentAddress": "0x" + "ab" * 32,
        "encryption_key": b"\x00" * 32,
        "nested": {"sealedKey": "00" * 16, "blob": b"\x01\x02"},
    }

    safe = safe_log_dict(data)

    assert safe["contentAddress"] == data["contentAddress"]
    assert safe["encryption_key"] == "[REDACTED]"
    assert safe["nested"]["sealedKey"] == "[REDACTED]"
    assert safe["nested"]["blob"] == "<2 bytes>"


def test_truncate_hex() -> None:
    address = "0x" + "ab" * 32
    truncated = truncate_hex(address)

    assert truncated == address[:10] + "..." + address[-10:]
    assert truncate_hex("0x1234") == "0x1234"


def test_get_logger_names() -> None:
    assert get_logger().name == "agentnft"
    assert get_logger("storage").name == "agentnft.storage"


def test_configure_logging_routes_storage_debug() -> None:
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    configure_logging(level=logging.INFO, storage_level=logging.DEBUG, handler=handler)

    try:
        log_storage_attempt("remote", "store", "0x" + "cd" * 32, attempt=1, total=2)
        log_http_request("GET", "http://indexer.test/file", params={"root": "0x01"})
    finally:
        logging.getLogger("agentnft").removeHandler(handler)
        logging.getLogger("agentnft").setLevel(logging.NOTSET)
        logging.getLogger("agentnft.http").setLevel(logging.NOTSET)
        logging.getLogger("agentnft.storage").setLevel(logging.NOTSET)

    output = stream.getvalue()
    assert "remote store" in output
    assert "attempt=1/2" in output
    assert "0xcdcdcdcd...cdcdcdcdcd" in output
    # http logging stays at INFO
    assert "GET http://indexer.test/file" not in output
