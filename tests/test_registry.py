"""
End-to-end tests for the registry client against in-memory doubles.

Feature: agentnft-sdk
"""

import asyncio

import pytest

from agentnft.exceptions import CryptoError, EventNotFoundError, IntegrityError, RegistryError, TransportError
from agentnft.proofs import parse_proof, preimage_proof
from agentnft.types.tokens import TxReceipt

RECIPIENT = "0x" + "be" * 20


class TestMint:
    def test_mint_submits_preimage_proof(self, registry_client, sample_metadata, mock_contract) -> None:
        minted = asyncio.run(registry_client.mint(sample_metadata))

        call = mock_contract.get_calls("mint")[0]
        proofs, descriptions, recipient = call.args
        assert proofs == [preimage_proof(minted.content_address)]
        assert descriptions == ["INFT: scout - Finds things"]
        assert recipient == mock_contract.account
        assert minted.token_id == 1
        assert mock_contract.tokens[1].data_hashes == proofs

    def test_description_defaults(self, registry_client, sample_metadata, mock_contract) -> None:
        sample_metadata.name = ""
        sample_metadata.description = None

        asyncio.run(registry_client.mint(sample_metadata, recipient=RECIPIENT))

        _, descriptions, recipient = mock_contract.get_calls("mint")[0].args
        assert descriptions == ["INFT: Agent - Intelligent NFT"]
        assert recipient == RECIPIENT

    def test_precomputed_skips_storage(self, registry_client, sample_metadata, remote_storage) -> None:
        prepared = asyncio.run(registry_client.make_metadata(sample_metadata))
        uploads = remote_storage.upload_calls

        minted = asyncio.run(registry_client.mint(sample_metadata, precomputed=prepared))

        assert remote_storage.upload_calls == uploads
        assert minted.content_address == prepared.content_address
        assert minted.sealed_key == prepared.sealed_key

    def test_missing_minted_event(self, registry_client, sample_metadata, mock_contract) -> None:
        mock_contract.configure("mint", receipt=TxReceipt(tx_hash="0xabc", logs=[]))

        with pytest.raises(EventNotFoundError) as exc_info:
            asyncio.run(registry_client.mint(sample_metadata))
        assert exc_info.value.message.startswith("Mint failed: Minted event not found")

    def test_foreign_errors_become_registry_errors(self, registry_client, sample_metadata, mock_contract) -> None:
        mock_contract.configure("mint", error=RuntimeError("execution reverted"))

        with pytest.raises(RegistryError) as exc_info:
            asyncio.run(registry_client.mint(sample_metadata))
        assert exc_info.value.message == "Mint failed: execution reverted"
        assert exc_info.value.operation == "Mint"

    def test_storage_errors_keep_their_class(self, registry_client, sample_metadata, remote_storage, registry_context) -> None:
        registry_context.storage.set_fallback_config(enable_fallback=False)
        remote_storage.fail_uploads = -1

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(registry_client.mint(sample_metadata))
        assert exc_info.value.message.startswith("Mint failed: Failed to create AI agent:")


class TestTokenLifecycle:
    def test_transfer_rekeys_every_item(self, registry_client, sample_metadata, mock_contract, registry_context) -> None:
        minted = asyncio.run(registry_client.mint(sample_metadata))
        old_hashes = list(mock_contract.tokens[minted.token_id].data_hashes)

        tx_hash = asyncio.run(registry_client.transfer(minted.token_id, RECIPIENT))

        to, token_id, proofs = mock_contract.get_calls("transfer")[0].args
        assert (to, token_id) == (RECIPIENT, minted.token_id)
        parsed = parse_proof(proofs[0])
        assert parsed.old_data_hash == bytes.fromhex(old_hashes[0][2:])
        new_address = registry_context.content_addresses[minted.token_id][0]
        assert parsed.new_data_hash == bytes.fromhex(new_address[2:])
        assert new_address != minted.content_address
        assert mock_contract.tokens[minted.token_id].owner == RECIPIENT
        assert tx_hash.startswith("0x")

    def test_clone_reads_cloned_event(self, registry_client, sample_metadata, mock_contract) -> None:
        minted = asyncio.run(registry_client.mint(sample_metadata))

        cloned = asyncio.run(registry_client.clone(minted.token_id, RECIPIENT, {"name": "copy"}))

        assert cloned.new_token_id == 2
        assert mock_contract.tokens[2].owner == RECIPIENT
        assert len(cloned.content_addresses) == len(cloned.sealed_keys) == 1
        # the source token is untouched
        assert mock_contract.tokens[1].owner == mock_contract.account

    def test_clone_without_event(self, registry_client, sample_metadata, mock_contract) -> None:
        minted = asyncio.run(registry_client.mint(sample_metadata))
        mock_contract.configure("clone", receipt=TxReceipt(tx_hash="0xabc", logs=[]))

        with pytest.raises(EventNotFoundError):
            asyncio.run(registry_client.clone(minted.token_id, RECIPIENT))

    def test_update_bumps_version(self, registry_client, sample_metadata, mock_contract, registry_context) -> None:
        minted = asyncio.run(registry_client.mint(sample_metadata))

        asyncio.run(registry_client.update(minted.token_id, {"description": "sharper"}))

        new_address = registry_context.content_addresses[minted.token_id][0]
        assert mock_contract.tokens[minted.token_id].data_hashes == [preimage_proof(new_address)]

        key = asyncio.run(registry_context.custody.key_for(minted.token_id, 0))
        current = asyncio.run(registry_context.metadata.retrieve_ai_agent(new_address, key))
        assert current.metadata.version == "1.1"
        assert current.metadata.description == "sharper"

        # a second update chains from the first
        asyncio.run(registry_client.update(minted.token_id, {"description": "sharpest"}))
        new_address = registry_context.content_addresses[minted.token_id][0]
        key = asyncio.run(registry_context.custody.key_for(minted.token_id, 0))
        assert asyncio.run(registry_context.metadata.retrieve_ai_agent(new_address, key)).metadata.version == "1.2"

    def test_update_with_wrong_key(self, registry_client, sample_metadata, registry_context) -> None:
        minted = asyncio.run(registry_client.mint(sample_metadata))
        registry_context.custody.record(minted.token_id, 0, b"\x00" * 32)

        with pytest.raises(IntegrityError) as exc_info:
            asyncio.run(registry_client.update(minted.token_id, {"name": "x"}))
        assert exc_info.value.message.startswith("Update failed:")

    def test_clone_can_be_updated(self, registry_client, sample_metadata, mock_contract, registry_context) -> None:
        minted = asyncio.run(registry_client.mint(sample_metadata))
        cloned = asyncio.run(registry_client.clone(minted.token_id, mock_contract.account))

        asyncio.run(registry_client.update(cloned.new_token_id, {"description": "forked"}))

        address = registry_context.content_addresses[cloned.new_token_id][0]
        key = asyncio.run(registry_context.custody.key_for(cloned.new_token_id, 0))
        current = asyncio.run(registry_context.metadata.retrieve_ai_agent(address, key))
        assert current.metadata.version == "1.1"
        assert current.metadata.description == "forked"

    def test_transfer_to_self_keeps_keys(self, registry_client, sample_metadata, mock_contract, registry_context) -> None:
        minted = asyncio.run(registry_client.mint(sample_metadata))

        asyncio.run(registry_client.transfer(minted.token_id, mock_contract.account))
        asyncio.run(registry_client.transfer(minted.token_id, mock_contract.account))

        assert mock_contract.call_count("transfer") == 2
        address = registry_context.content_addresses[minted.token_id][0]
        key = asyncio.run(registry_context.custody.key_for(minted.token_id, 0))
        current = asyncio.run(registry_context.metadata.retrieve_ai_agent(address, key))
        assert current.metadata.name == sample_metadata.name

    def test_transfer_away_drops_keys(self, registry_client, sample_metadata, registry_context) -> None:
        minted = asyncio.run(registry_client.mint(sample_metadata))

        asyncio.run(registry_client.transfer(minted.token_id, RECIPIENT))

        with pytest.raises(CryptoError, match="No key held"):
            asyncio.run(registry_context.custody.key_for(minted.token_id, 0))

    def test_unknown_token(self, registry_client) -> None:
        with pytest.raises(RegistryError, match="Transfer failed"):
            asyncio.run(registry_client.transfer(404, RECIPIENT))


class TestReadsAndAuthorization:
    def test_get_token_info(self, registry_client, sample_metadata, mock_contract) -> None:
        minted = asyncio.run(registry_client.mint(sample_metadata))
        asyncio.run(registry_client.authorize_usage(minted.token_id, RECIPIENT))

        info = asyncio.run(registry_client.get_token_info(minted.token_id))

        assert info.token_id == minted.token_id
        assert info.owner == mock_contract.account
        assert info.data_descriptions == ["INFT: scout - Finds things"]
        assert info.authorized_users == [RECIPIENT]
        assert len(info.data_hashes) == 1

    def test_authorization_failure(self, registry_client, mock_contract) -> None:
        mock_contract.configure("authorize_usage", error=RuntimeError("not owner"))
        with pytest.raises(RegistryError, match="Authorization failed: not owner"):
            asyncio.run(registry_client.authorize_usage(1, RECIPIENT))

    def test_extract_token_id(self, registry_client) -> None:
        receipt = TxReceipt(tx_hash="0x1", logs=[{"event": "Minted", "args": {"_tokenId": 5}}])
        assert registry_client.extract_token_id(receipt) == 5
        assert registry_client.extract_token_id(TxReceipt(tx_hash="0x2")) is None
