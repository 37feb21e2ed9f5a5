"""
Pytest plugin for AgentNFT SDK testing fixtures.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["agentnft.testing.conftest"]

Or import the fixtures directly:

    from agentnft.testing.fixtures import storage_backend, registry_client
"""

# Re-export all fixtures for pytest auto-discovery
from agentnft.testing.fixtures import (
    account,
    cipher,
    metadata_manager,
    mock_contract,
    registry_client,
    registry_config,
    registry_context,
    remote_storage,
    sample_metadata,
    storage_backend,
    storage_config,
    transfer_coordinator,
)

__all__ = [
    "account",
    "cipher",
    "remote_storage",
    "storage_config",
    "storage_backend",
    "metadata_manager",
    "transfer_coordinator",
    "sample_metadata",
    "mock_contract",
    "registry_config",
    "registry_context",
    "registry_client",
]
