"""
Pytest fixtures for AgentNFT SDK testing.

Every fixture that touches disk keeps the local tier under ``tmp_path``.
"""

from collections.abc import Generator

import pytest

from agentnft.cipher import CipherService
from agentnft.config import RegistryConfig
from agentnft.keys import Account
from agentnft.metadata import MetadataManager, now_millis
from agentnft.registry import AgentRegistryClient, RegistryContext
from agentnft.storage.backend import StorageBackend
from agentnft.testing.mock import InMemoryRemoteStorage, MockAgentNFTContract
from agentnft.transfer import TransferCoordinator
from agentnft.types.metadata import AgentMetadata
from agentnft.types.storage import FallbackConfig, StorageConfig


# ============================================================================
# Factories
# ============================================================================


def create_storage_config(local_dir: str, **fallback: object) -> StorageConfig:
    """
    Build a StorageConfig for tests: short timeouts, no retry delay.

    Example:
        ```python
        config = create_storage_config(str(tmp_path), retry_attempts=2)
        ```
    """
    options: dict[str, object] = {"local_storage_dir": local_dir, "retry_delay_ms": 0}
    options.update(fallback)
    return StorageConfig(
        rpc_url="http://localhost:8545",
        indexer_url="http://indexer.test",
        chain_id=16601,
        upload_timeout_ms=200,
        fallback=FallbackConfig(**options),  # type: ignore[arg-type]
    )


def create_agent_metadata(**overrides: object) -> AgentMetadata:
    """Build a valid AgentMetadata with sensible defaults."""
    values: dict[str, object] = {
        "name": "scout",
        "created_at": now_millis(),
        "description": "Finds things",
        "parameters": {"temperature": 0.2},
        "metadata": {"owner": "tests"},
    }
    values.update(overrides)
    return AgentMetadata(**values)  # type: ignore[arg-type]


# ============================================================================
# Key Fixtures
# ============================================================================


@pytest.fixture
def account() -> Account:
    """Provide a freshly generated secp256k1 account."""
    return Account.generate()


@pytest.fixture
def cipher() -> CipherService:
    return CipherService()


# ============================================================================
# Storage Fixtures
# ============================================================================


@pytest.fixture
def remote_storage() -> InMemoryRemoteStorage:
    """Provide an in-memory remote tier with no injected failures."""
    return InMemoryRemoteStorage()


@pytest.fixture
def storage_config(tmp_path) -> StorageConfig:
    return create_storage_config(str(tmp_path / "local-storage"))


@pytest.fixture
def storage_backend(storage_config, remote_storage) -> StorageBackend:
    """
    Provide a StorageBackend over the in-memory remote tier.

    Example:
        ```python
        def test_store(storage_backend):
            result = asyncio.run(storage_backend.store(b"data"))
            assert not result.is_local
        ```
    """
    return StorageBackend(storage_config, remote=remote_storage)


@pytest.fixture
def metadata_manager(storage_backend, cipher) -> MetadataManager:
    return MetadataManager(storage_backend, cipher)


@pytest.fixture
def transfer_coordinator(metadata_manager, cipher) -> TransferCoordinator:
    return TransferCoordinator(metadata_manager, cipher)


@pytest.fixture
def sample_metadata() -> AgentMetadata:
    return create_agent_metadata()


# ============================================================================
# Registry Fixtures
# ============================================================================


@pytest.fixture
def mock_contract() -> Generator[MockAgentNFTContract, None, None]:
    """Provide an in-memory AgentNFT contract."""
    contract = MockAgentNFTContract()
    yield contract
    contract.reset()


@pytest.fixture
def registry_config(tmp_path, account) -> RegistryConfig:
    config = RegistryConfig(
        rpc_url="http://localhost:8545",
        private_key=account.private_key_hex,
        contract_address="0x" + "cd" * 20,
        indexer_url="http://indexer.test",
        upload_timeout_ms=200,
    )
    config.fallback.local_storage_dir = str(tmp_path / "local-storage")
    config.fallback.retry_delay_ms = 0
    return config


@pytest.fixture
def registry_context(registry_config, mock_contract, account, remote_storage) -> RegistryContext:
    return RegistryContext.create(registry_config, mock_contract, account=account, remote=remote_storage)


@pytest.fixture
def registry_client(registry_context) -> AgentRegistryClient:
    """
    Provide an AgentRegistryClient wired to mocks.

    Example:
        ```python
        def test_mint(registry_client, sample_metadata, mock_contract):
            minted = asyncio.run(registry_client.mint(sample_metadata))
            assert mock_contract.was_called("mint")
        ```
    """
    return AgentRegistryClient(registry_context)
