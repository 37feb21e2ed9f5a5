#!/usr/bin/env python3
"""
Basic AgentNFT SDK usage example.

Runs a full mint / update / transfer / clone cycle against the in-memory
contract, storing blobs on local disk only.
Run with: python examples/basic_usage.py
"""

import asyncio
import logging
import tempfile

from agentnft import (
    Account,
    AgentNFTError,
    AgentRegistryClient,
    ConfigurationError,
    RegistryConfig,
    RegistryContext,
    configure_logging,
)
from agentnft.metadata import now_millis
from agentnft.testing import InMemoryRemoteStorage, MockAgentNFTContract
from agentnft.types import AgentMetadata

print("=== AgentNFT SDK Basic Usage Example ===\n")

configure_logging(level=logging.WARNING)

# 1. Configuration errors surface eagerly
print("1. Loading configuration from an empty environment...")
try:
    RegistryConfig.from_env({})
except AgentNFTError as e:
    assert isinstance(e, ConfigurationError)
    print(f"   Caught {type(e).__name__}: {e.message}")

print("\n   OK: configuration checked\n")


async def main() -> None:
    owner = Account.generate()
    recipient = "0x" + "be" * 20

    config = RegistryConfig(
        rpc_url="http://localhost:8545",
        private_key=owner.private_key_hex,
        contract_address="0x" + "cd" * 20,
    )
    config.fallback.local_storage_dir = tempfile.mkdtemp(prefix="agentnft-")
    config.fallback.prefer_local = True

    contract = MockAgentNFTContract()
    context = RegistryContext.create(config, contract, account=owner, remote=InMemoryRemoteStorage())

    async with AgentRegistryClient(context) as client:
        # 2. Mint
        print("2. Minting an agent...")
        metadata = AgentMetadata(name="scout", created_at=now_millis(), description="Finds things")
        minted = await client.mint(metadata)
        print(f"   Token {minted.token_id} at {minted.content_address}")

        # 3. Update
        print("\n3. Updating the agent...")
        await client.update(minted.token_id, {"description": "Finds more things"})
        key = await context.custody.key_for(minted.token_id, 0)
        address = context.content_addresses[minted.token_id][0]
        current = await context.metadata.retrieve_ai_agent(address, key)
        print(f"   Version is now {current.metadata.version}")
        assert current.metadata.version == "1.1"

        # 4. Clone, then transfer the original
        print("\n4. Cloning for a recipient, then transferring...")
        cloned = await client.clone(minted.token_id, recipient, {"name": "scout-copy"})
        print(f"   Clone is token {cloned.new_token_id}")
        tx_hash = await client.transfer(minted.token_id, recipient)
        print(f"   Transfer tx {tx_hash}")

        info = await client.get_token_info(minted.token_id)
        assert info.owner == recipient
        print(f"   Owner is now {info.owner}")

    print("\n=== All operations completed ===")


asyncio.run(main())
