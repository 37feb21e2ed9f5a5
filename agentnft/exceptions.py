"""AgentNFT SDK exception classes."""

from typing import Any


class AgentNFTError(Exception):
    """Base exception for all AgentNFT SDK errors."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")

    def with_context(self, prefix: str) -> "AgentNFTError":
        """
        Return a copy of this error with ``prefix`` prepended to the message.

        The copy keeps the concrete class and every extra attribute so callers
        can still catch the specific error type.
        """
        err = self.__class__.__new__(self.__class__)
        err.__dict__.update(self.__dict__)
        err.message = f"{prefix}: {self.message}"
        Exception.__init__(err, f"[{self.code}] {err.message}")
        return err


class ConfigurationError(AgentNFTError):
    """Raised when SDK configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class ValidationError(AgentNFTError):
    """Raised on malformed addresses, hashes, keys or proofs."""

    def __init__(self, message: str) -> None:
        super().__init__("VALIDATION_ERROR", message)


class NotFoundError(AgentNFTError):
    """Raised when an object is absent from every storage tier."""

    def __init__(self, message: str, address: str | None = None) -> None:
        super().__init__("NOT_FOUND", message)
        self.address = address


class TransportError(AgentNFTError):
    """Raised on network failures and timeouts, after retries are exhausted."""

    def __init__(
        self,
        message: str,
        attempts: list[str] | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__("TRANSPORT_ERROR", message)
        self.attempts = attempts or []
        self.status_code = status_code


class CryptoError(AgentNFTError):
    """Raised when a cipher operation is called with unusable key material."""

    def __init__(self, message: str) -> None:
        super().__init__("CRYPTO_ERROR", message)


class IntegrityError(AgentNFTError):
    """Raised on authentication tag mismatch or a malformed encrypted blob."""

    def __init__(self, message: str) -> None:
        super().__init__("INTEGRITY_ERROR", message)


class EventNotFoundError(AgentNFTError):
    """Raised when an expected contract event is missing from a receipt."""

    def __init__(self, event_name: str, tx_hash: str | None = None) -> None:
        message = f"{event_name} event not found"
        if tx_hash:
            message += f" in receipt {tx_hash}"
        super().__init__("EVENT_NOT_FOUND", message)
        self.event_name = event_name
        self.tx_hash = tx_hash


class PartialTransferError(AgentNFTError):
    """
    Raised when a multi-item transfer or clone fails part way through.

    Items before ``failed_index`` were already re-encrypted and stored; they
    are listed in ``completed`` so a caller can compensate if it needs to.
    Nothing has been submitted on-chain.
    """

    def __init__(
        self,
        message: str,
        failed_index: int,
        completed: list[dict[str, Any]],
        cause: Exception,
    ) -> None:
        super().__init__("PARTIAL_TRANSFER", message)
        self.failed_index = failed_index
        self.completed = completed
        self.cause = cause


class RegistryError(AgentNFTError):
    """Raised when a registry operation fails for a reason outside the SDK."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__("REGISTRY_ERROR", f"{operation} failed: {message}")
        self.operation = operation
