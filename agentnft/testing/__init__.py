"""AgentNFT SDK testing utilities.

Provides in-memory doubles and fixtures for testing applications that use the
AgentNFT SDK.
"""

from agentnft.testing.fixtures import create_agent_metadata, create_storage_config
from agentnft.testing.mock import InMemoryRemoteStorage, MockAgentNFTContract, MockCall

__all__ = [
    # Doubles
    "InMemoryRemoteStorage",
    "MockAgentNFTContract",
    "MockCall",
    # Helper functions
    "create_storage_config",
    "create_agent_metadata",
]
