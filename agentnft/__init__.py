"""AgentNFT SDK - encrypted agent metadata, content-addressed storage and transfer proofs."""

from agentnft.cipher import CipherService
from agentnft.config import RegistryConfig
from agentnft.contract import AgentNFTContract
from agentnft.exceptions import (
    AgentNFTError,
    ConfigurationError,
    CryptoError,
    EventNotFoundError,
    IntegrityError,
    NotFoundError,
    PartialTransferError,
    RegistryError,
    TransportError,
    ValidationError,
)
from agentnft.keys import (
    Account,
    DerivedKeyCustody,
    InMemoryKeyCustody,
    KeyCustody,
    SealedKeyCustody,
)
from agentnft.logging import configure_logging, get_logger
from agentnft.metadata import MetadataManager, increment_version
from agentnft.proofs import build_proof, parse_proof, validate_proof
from agentnft.registry import AgentRegistryClient, RegistryContext
from agentnft.storage import IndexerStorage, LocalStore, RemoteStorage, StorageBackend
from agentnft.transfer import TransferCoordinator

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Main client
    "AgentRegistryClient",
    "RegistryContext",
    "RegistryConfig",
    "AgentNFTContract",
    # Services
    "CipherService",
    "StorageBackend",
    "MetadataManager",
    "TransferCoordinator",
    "increment_version",
    # Storage tiers
    "RemoteStorage",
    "IndexerStorage",
    "LocalStore",
    # Keys
    "Account",
    "KeyCustody",
    "DerivedKeyCustody",
    "SealedKeyCustody",
    "InMemoryKeyCustody",
    # Proofs
    "build_proof",
    "parse_proof",
    "validate_proof",
    # Exceptions
    "AgentNFTError",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "TransportError",
    "CryptoError",
    "IntegrityError",
    "EventNotFoundError",
    "PartialTransferError",
    "RegistryError",
    # Logging
    "configure_logging",
    "get_logger",
]
