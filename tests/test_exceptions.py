"""
Tests for the exception hierarchy.

Feature: agentnft-sdk
"""

from agentnft.exceptions import (
    AgentNFTError,
    EventNotFoundError,
    NotFoundError,
    PartialTransferError,
    RegistryError,
    TransportError,
)


def test_with_context_keeps_class_and_attributes() -> None:
    error = TransportError("boom", attempts=["attempt 1: boom"], status_code=503)

    wrapped = error.with_context("Mint failed")

    assert type(wrapped) is TransportError
    assert wrapped.message == "Mint failed: boom"
    assert wrapped.attempts == ["attempt 1: boom"]
    assert wrapped.status_code == 503
    assert str(wrapped) == "[TRANSPORT_ERROR] Mint failed: boom"
    # the original is unchanged
    assert error.message == "boom"


def test_codes() -> None:
    assert NotFoundError("x").code == "NOT_FOUND"
    assert RegistryError("Clone", "reverted").message == "Clone failed: reverted"
    assert EventNotFoundError("Minted", "0xabc").message == "Minted event not found in receipt 0xabc"


def test_partial_transfer_error() -> None:
    cause = NotFoundError("gone")
    error = PartialTransferError("failed at item 1", failed_index=1, completed=[{"index": 0}], cause=cause)

    assert isinstance(error, AgentNFTError)
    assert error.failed_index == 1
    assert error.completed == [{"index": 0}]
    assert error.cause is cause
