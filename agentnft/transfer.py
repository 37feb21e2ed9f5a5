"""
Multi-item transfer and clone orchestration.

Items are processed strictly in order. A failure at item i stops the run;
items before i stay re-encrypted and stored (harmless content-addressed
orphans) and are reported through ``PartialTransferError.completed``.
Nothing reaches the chain until the caller submits the whole batch.
"""

from typing import Any

from agentnft import proofs
from agentnft.addressing import hex_to_bytes
from agentnft.cipher import CipherService
from agentnft.exceptions import AgentNFTError, PartialTransferError, ValidationError
from agentnft.keys import Account, KeyCustody, public_key_from_address, verify_with_public_key
from agentnft.logging import get_logger
from agentnft.metadata import MetadataManager
from agentnft.types.metadata import EncryptedMetadataResult
from agentnft.types.proofs import CloneResult, ProofData, TransferResult

logger = get_logger("transfer")


class TransferCoordinator:
    """Builds the proofs the contract needs when ownership changes."""

    def __init__(self, metadata_manager: MetadataManager, cipher: CipherService) -> None:
        self.metadata_manager = metadata_manager
        self.cipher = cipher

    async def prepare_transfer(
        self,
        token_id: int,
        custody: KeyCustody,
        recipient_address: str,
        old_addresses: list[str],
        old_content_hashes: list[str],
    ) -> TransferResult:
        """
        Re-encrypt every data item of a token for a new owner.

        Args:
            token_id: Token being transferred
            custody: Source of the current item keys
            recipient_address: On-chain address of the new owner
            old_addresses: Content addresses of the current items
            old_content_hashes: Data hashes the contract holds for each item

        Returns:
            TransferResult with one proof, address and sealed key per item

        Raises:
            ValidationError: If the input lists differ in length
            PartialTransferError: If an item fails
        """
        recipient_public_key = self.recipient_public_key(recipient_address)

        async def reencrypt(address: str, key: bytes) -> EncryptedMetadataResult:
            return await self.metadata_manager.reencrypt_for_transfer(address, key, recipient_public_key)

        result = TransferResult()
        await self._run_items(
            "Transfer", token_id, custody, recipient_public_key,
            old_addresses, old_content_hashes, reencrypt, result,
        )
        return result

    async def prepare_clone(
        self,
        token_id: int,
        custody: KeyCustody,
        recipient_address: str,
        old_addresses: list[str],
        old_content_hashes: list[str],
        modifications: dict[str, Any] | None = None,
    ) -> CloneResult:
        """
        Clone every data item of a token for a recipient.

        The same ``modifications`` apply to every item. Proofs use the
        transfer proof format.
        """
        recipient_public_key = self.recipient_public_key(recipient_address)

        async def clone(address: str, key: bytes) -> EncryptedMetadataResult:
            return await self.metadata_manager.clone_ai_agent(
                address, key, recipient_public_key, modifications
            )

        result = CloneResult()
        await self._run_items(
            "Clone", token_id, custody, recipient_public_key,
            old_addresses, old_content_hashes, clone, result,
        )
        return result

    def build_proof(
        self,
        old_hash: str | bytes,
        new_hash: str | bytes,
        recipient_public_key: str | bytes,
        sealed_key: str | bytes,
    ) -> str:
        return proofs.build_proof(old_hash, new_hash, recipient_public_key, sealed_key)

    def validate_proof(self, proof: str | bytes) -> bool:
        return proofs.validate_proof(proof)

    def parse_proof(self, proof: str | bytes) -> ProofData:
        return proofs.parse_proof(proof)

    def sign_transfer_confirmation(
        self,
        old_hashes: list[str],
        new_hashes: list[str],
        recipient_private_key: str,
    ) -> str:
        """
        Recipient's off-chain acknowledgement of a transfer.

        Returns:
            DER-encoded ECDSA/secp256k1 signature over
            :func:`agentnft.proofs.confirmation_digest`, as ``0x`` hex
        """
        digest = proofs.confirmation_digest(old_hashes, new_hashes)
        signature = Account.from_hex(recipient_private_key).sign_digest(digest)
        return "0x" + signature.hex()

    def verify_transfer_confirmation(
        self,
        old_hashes: list[str],
        new_hashes: list[str],
        signature: str,
        recipient_public_key: str | bytes,
    ) -> bool:
        """
        Check a confirmation produced by :meth:`sign_transfer_confirmation`.

        Raises:
            ValidationError: If the signature or public key is malformed
        """
        digest = proofs.confirmation_digest(old_hashes, new_hashes)
        raw = hex_to_bytes(signature, field="signature")
        return verify_with_public_key(recipient_public_key, raw, digest)

    @staticmethod
    def recipient_public_key(address: str) -> str:
        return public_key_from_address(address)

    async def _run_items(
        self,
        operation: str,
        token_id: int,
        custody: KeyCustody,
        recipient_public_key: str,
        old_addresses: list[str],
        old_content_hashes: list[str],
        rewrite,
        result: TransferResult,
    ) -> None:
        if len(old_addresses) != len(old_content_hashes):
            raise ValidationError(
                f"{operation} needs one data hash per item: "
                f"{len(old_addresses)} addresses, {len(old_content_hashes)} hashes"
            )

        completed: list[dict[str, Any]] = []
        for index, (address, old_hash) in enumerate(zip(old_addresses, old_content_hashes)):
            try:
                key = await custody.key_for(token_id, index)
                written = await rewrite(address, key)
                proof = proofs.build_proof(
                    old_hash, written.content_address, recipient_public_key, written.sealed_key
                )
            except AgentNFTError as e:
                raise PartialTransferError(
                    f"{operation} preparation failed at item {index}: {e.message}",
                    failed_index=index,
                    completed=completed,
                    cause=e,
                ) from e

            result.proofs.append(proof)
            result.new_content_addresses.append(written.content_address)
            result.sealed_keys.append(written.sealed_key)
            result.encryption_keys.append(written.encryption_key)
            completed.append({
                "index": index,
                "oldAddress": address,
                "newAddress": written.content_address,
            })

        logger.info("%s prepared for token %d: %d item(s)", operation, token_id, len(completed))
