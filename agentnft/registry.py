"""
End-to-end orchestration of token operations.

``AgentRegistryClient`` drives the metadata manager and the transfer
coordinator, then submits the resulting proofs through an
:class:`agentnft.contract.AgentNFTContract`. All collaborators live in an
explicit :class:`RegistryContext` built once by the application.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any

from agentnft.cipher import CipherService
from agentnft.config import RegistryConfig
from agentnft.contract import AgentNFTContract
from agentnft.events import CLONED, MINTED, EventShape, find_event
from agentnft.exceptions import AgentNFTError, EventNotFoundError, RegistryError, ValidationError
from agentnft.keys import Account, InMemoryKeyCustody, KeyCustody
from agentnft.logging import get_logger, truncate_hex
from agentnft.metadata import MetadataManager
from agentnft.proofs import preimage_proof
from agentnft.storage.backend import StorageBackend
from agentnft.storage.remote import RemoteStorage
from agentnft.transfer import TransferCoordinator
from agentnft.types.metadata import AgentMetadata, EncryptedMetadataResult
from agentnft.types.tokens import CloneTokenResult, MintResult, TokenInfo, TxReceipt

logger = get_logger("registry")

DEFAULT_AGENT_NAME = "Agent"
DEFAULT_AGENT_DESCRIPTION = "Intelligent NFT"


@dataclass
class RegistryContext:
    """
    Collaborators shared by registry operations.

    ``content_addresses`` maps a token id to the storage addresses of its
    data items as last written by this context. The contract only records
    data hashes, which are not addresses.
    """

    config: RegistryConfig
    account: Account
    cipher: CipherService
    storage: StorageBackend
    metadata: MetadataManager
    transfers: TransferCoordinator
    contract: AgentNFTContract
    custody: KeyCustody
    content_addresses: dict[int, list[str]] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        config: RegistryConfig,
        contract: AgentNFTContract,
        account: Account | None = None,
        remote: RemoteStorage | None = None,
        custody: KeyCustody | None = None,
    ) -> "RegistryContext":
        """
        Wire up every collaborator from a config.

        Args:
            config: SDK configuration
            contract: Binding to the deployed contract
            account: Owner account (default: loaded from ``config.private_key``)
            remote: Remote storage tier (default: IndexerStorage)
            custody: Source of item keys (default: InMemoryKeyCustody)
        """
        account = account or Account.from_hex(config.private_key)
        cipher = CipherService()
        storage = StorageBackend(config.storage_config(), remote)
        metadata = MetadataManager(storage, cipher)
        return cls(
            config=config,
            account=account,
            cipher=cipher,
            storage=storage,
            metadata=metadata,
            transfers=TransferCoordinator(metadata, cipher),
            contract=contract,
            custody=custody or InMemoryKeyCustody(),
        )

    async def aclose(self) -> None:
        await self.storage.aclose()


class AgentRegistryClient:
    """
    Mint, transfer, clone and update intelligent NFTs.

    Every failure is re-raised with an ``"<Operation> failed: "`` prefix.
    SDK errors keep their class; anything else becomes ``RegistryError``.

    Example:
        ```python
        context = RegistryContext.create(RegistryConfig.from_env(), contract)
        client = AgentRegistryClient(context)

        minted = await client.mint(AgentMetadata(name="scout", created_at=now_millis()))
        await client.transfer(minted.token_id, "0xRecipient...")
        ```
    """

    def __init__(self, context: RegistryContext) -> None:
        self.context = context

    async def __aenter__(self) -> "AgentRegistryClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.context.aclose()

    async def make_metadata(
        self,
        metadata: AgentMetadata,
        recipient: str | None = None,
    ) -> EncryptedMetadataResult:
        """
        Encrypt and store metadata without minting.

        The key is sealed for the owner account; ``recipient`` only matters
        once the result is passed to :meth:`mint`.
        """
        try:
            result = await self.context.metadata.create_ai_agent(metadata, self.context.account.public_key)
        except Exception as e:
            raise _failure("Make metadata", e) from e

        logger.info("Metadata stored at %s", truncate_hex(result.content_address))
        return result

    async def mint(
        self,
        metadata: AgentMetadata,
        recipient: str | None = None,
        precomputed: EncryptedMetadataResult | None = None,
    ) -> MintResult:
        """
        Mint a token holding one encrypted metadata item.

        Args:
            metadata: Agent record; also used for the on-chain description
            recipient: Token receiver (default: the contract's sending account)
            precomputed: Result of an earlier :meth:`make_metadata`; skips
                encryption and storage

        Raises:
            EventNotFoundError: If the receipt carries no Minted event
        """
        ctx = self.context
        to = recipient or ctx.contract.account
        try:
            encrypted = precomputed or await ctx.metadata.create_ai_agent(metadata, ctx.account.public_key)
            proof = preimage_proof(encrypted.content_address)
            description = (
                f"INFT: {metadata.name or DEFAULT_AGENT_NAME} - "
                f"{metadata.description or DEFAULT_AGENT_DESCRIPTION}"
            )

            logger.info("Minting token for %s", to)
            receipt = await ctx.contract.mint([proof], [description], to)
            token_id = self.extract_token_id(receipt)
            if token_id is None:
                raise EventNotFoundError(MINTED.name, receipt.tx_hash)
        except Exception as e:
            raise _failure("Mint", e) from e

        ctx.content_addresses[token_id] = [encrypted.content_address]
        ctx.custody.record(token_id, 0, encrypted.encryption_key)
        logger.info("Token %d minted in %s", token_id, truncate_hex(receipt.tx_hash))

        return MintResult(
            token_id=token_id,
            tx_hash=receipt.tx_hash,
            content_address=encrypted.content_address,
            sealed_key=encrypted.sealed_key,
        )

    async def transfer(self, token_id: int, to: str) -> str:
        """Re-key every data item for ``to`` and transfer the token. Returns the tx hash."""
        ctx = self.context
        try:
            addresses, data_hashes = await self._token_data(token_id)
            prepared = await ctx.transfers.prepare_transfer(token_id, ctx.custody, to, addresses, data_hashes)

            logger.info("Transferring token %d to %s", token_id, to)
            receipt = await ctx.contract.transfer(to, token_id, prepared.proofs)
        except Exception as e:
            raise _failure("Transfer", e) from e

        ctx.content_addresses[token_id] = list(prepared.new_content_addresses)
        if _same_address(to, ctx.contract.account):
            for index, key in enumerate(prepared.encryption_keys):
                ctx.custody.record(token_id, index, key)
        else:
            ctx.custody.forget(token_id)
        logger.info("Token %d transferred in %s", token_id, truncate_hex(receipt.tx_hash))
        return receipt.tx_hash

    async def clone(
        self,
        token_id: int,
        to: str,
        modifications: dict[str, Any] | None = None,
    ) -> CloneTokenResult:
        """
        Fork a token's data into a new token owned by ``to``.

        Raises:
            EventNotFoundError: If the receipt carries no Cloned event
        """
        ctx = self.context
        try:
            addresses, data_hashes = await self._token_data(token_id)
            prepared = await ctx.transfers.prepare_clone(
                token_id, ctx.custody, to, addresses, data_hashes, modifications
            )

            logger.info("Cloning token %d for %s", token_id, to)
            receipt = await ctx.contract.clone(to, token_id, prepared.proofs)
            new_token_id = self.extract_token_id(receipt, CLONED)
            if new_token_id is None:
                raise EventNotFoundError(CLONED.name, receipt.tx_hash)
        except Exception as e:
            raise _failure("Clone", e) from e

        ctx.content_addresses[new_token_id] = list(prepared.new_content_addresses)
        for index, key in enumerate(prepared.encryption_keys):
            ctx.custody.record(new_token_id, index, key)
        logger.info("Token %d cloned into %d", token_id, new_token_id)

        return CloneTokenResult(
            new_token_id=new_token_id,
            tx_hash=receipt.tx_hash,
            content_addresses=list(prepared.new_content_addresses),
            sealed_keys=list(prepared.sealed_keys),
        )

    async def update(self, token_id: int, patch: dict[str, Any]) -> str:
        """
        Merge ``patch`` into the token's first data item and record the new
        version on-chain. Returns the tx hash.

        ``patch`` uses serialized (camelCase) field names.
        """
        ctx = self.context
        try:
            addresses, _ = await self._token_data(token_id)
            key = await ctx.custody.key_for(token_id, 0)
            updated = await ctx.metadata.update_ai_agent(addresses[0], key, patch, ctx.account.public_key)
            proof = preimage_proof(updated.content_address)

            logger.info("Updating token %d", token_id)
            receipt = await ctx.contract.update(token_id, [proof])
        except Exception as e:
            raise _failure("Update", e) from e

        ctx.content_addresses[token_id] = [updated.content_address]
        ctx.custody.record(token_id, 0, updated.encryption_key)
        return receipt.tx_hash

    async def get_token_info(self, token_id: int) -> TokenInfo:
        contract = self.context.contract
        try:
            owner, data_hashes, descriptions, authorized = await asyncio.gather(
                contract.owner_of(token_id),
                contract.data_hashes_of(token_id),
                contract.data_descriptions_of(token_id),
                contract.authorized_users_of(token_id),
            )
        except Exception as e:
            raise _failure("Get token info", e) from e

        return TokenInfo(
            token_id=token_id,
            owner=owner,
            data_hashes=list(data_hashes),
            data_descriptions=list(descriptions),
            authorized_users=list(authorized),
        )

    async def authorize_usage(self, token_id: int, user: str) -> str:
        try:
            receipt = await self.context.contract.authorize_usage(token_id, user)
        except Exception as e:
            raise _failure("Authorization", e) from e
        return receipt.tx_hash

    @staticmethod
    def extract_token_id(receipt: TxReceipt, shape: EventShape = MINTED) -> int | None:
        """Token id carried by the first ``shape`` event of a receipt, if any."""
        event = find_event(receipt, shape)
        return event.token_id if event else None

    async def _token_data(self, token_id: int) -> tuple[list[str], list[str]]:
        """
        Current storage addresses and on-chain data hashes of a token.

        Tokens this context never wrote fall back to treating the data
        hashes as addresses.
        """
        data_hashes = list(await self.context.contract.data_hashes_of(token_id))
        if not data_hashes:
            raise ValidationError(f"Token {token_id} holds no data")

        addresses = self.context.content_addresses.get(token_id)
        if addresses is None or len(addresses) != len(data_hashes):
            logger.warning("No recorded addresses for token %d, using on-chain data hashes", token_id)
            addresses = list(data_hashes)
        return list(addresses), data_hashes


def _failure(operation: str, error: Exception) -> AgentNFTError:
    if isinstance(error, AgentNFTError):
        return error.with_context(f"{operation} failed")
    return RegistryError(operation, str(error))


def _same_address(a: str, b: str) -> bool:
    return a.lower() == b.lower()
