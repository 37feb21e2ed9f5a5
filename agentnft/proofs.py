"""
Binary proof formats submitted to the AgentNFT contract.

Transfer/clone proof, exactly 144 bytes:

    old data hash (32) || new data hash (32) || recipient public key (64) || sealed key (16)

serialized as ``0x`` + 288 hex chars.

The preimage proof used by mint and update is a different, unrelated format:
a SHA-256 digest of the content address string.
"""

import hashlib

from agentnft.addressing import hex_to_bytes
from agentnft.exceptions import ValidationError
from agentnft.types.proofs import ProofData

OLD_HASH_SIZE = 32
NEW_HASH_SIZE = 32
PUBLIC_KEY_SIZE = 64
SEALED_KEY_PREFIX_SIZE = 16
PROOF_SIZE = OLD_HASH_SIZE + NEW_HASH_SIZE + PUBLIC_KEY_SIZE + SEALED_KEY_PREFIX_SIZE


def build_proof_bytes(
    old_hash: str | bytes,
    new_hash: str | bytes,
    recipient_public_key: str | bytes,
    sealed_key: str | bytes,
) -> bytes:
    """
    Concatenate the four proof fields.

    A 65-byte uncompressed public key (``0x04`` prefix) is accepted and
    trimmed to its 64-byte X || Y form. Only the first 16 bytes of the sealed
    key are used.

    Raises:
        ValidationError: If any field has the wrong width
    """
    old = hex_to_bytes(old_hash, OLD_HASH_SIZE, "old data hash")
    new = hex_to_bytes(new_hash, NEW_HASH_SIZE, "new data hash")

    pub = hex_to_bytes(recipient_public_key, field="recipient public key")
    if len(pub) == PUBLIC_KEY_SIZE + 1 and pub[0] == 0x04:
        pub = pub[1:]
    if len(pub) != PUBLIC_KEY_SIZE:
        raise ValidationError(f"recipient public key must be {PUBLIC_KEY_SIZE} bytes, got {len(pub)}")

    sealed = hex_to_bytes(sealed_key, field="sealed key")[:SEALED_KEY_PREFIX_SIZE]
    if len(sealed) != SEALED_KEY_PREFIX_SIZE:
        raise ValidationError(
            f"sealed key must hold at least {SEALED_KEY_PREFIX_SIZE} bytes, got {len(sealed)}"
        )

    return old + new + pub + sealed


def build_proof(
    old_hash: str | bytes,
    new_hash: str | bytes,
    recipient_public_key: str | bytes,
    sealed_key: str | bytes,
) -> str:
    """Build a transfer proof and return it as a 290-char ``0x`` hex string."""
    return "0x" + build_proof_bytes(old_hash, new_hash, recipient_public_key, sealed_key).hex()


def validate_proof(proof: str | bytes) -> bool:
    """True iff ``proof`` decodes to exactly 144 bytes."""
    try:
        return len(hex_to_bytes(proof, field="proof")) == PROOF_SIZE
    except ValidationError:
        return False


def parse_proof(proof: str | bytes) -> ProofData:
    """
    Split a transfer proof back into its fields.

    Raises:
        ValidationError: If the proof is not hex or not 144 bytes
    """
    raw = hex_to_bytes(proof, field="proof")
    if len(raw) != PROOF_SIZE:
        raise ValidationError(f"Invalid proof length: expected {PROOF_SIZE} bytes, got {len(raw)}")

    new_start = OLD_HASH_SIZE
    pub_start = new_start + NEW_HASH_SIZE
    sealed_start = pub_start + PUBLIC_KEY_SIZE
    return ProofData(
        old_data_hash=raw[:new_start],
        new_data_hash=raw[new_start:pub_start],
        public_key=raw[pub_start:sealed_start],
        sealed_key=raw[sealed_start:],
    )


def preimage_proof(content_address: str) -> str:
    """
    Placeholder proof of knowledge for mint and update.

    Not a TEE or zero-knowledge proof: just SHA-256 of the address string.
    """
    return "0x" + hashlib.sha256(content_address.encode("utf-8")).hexdigest()


def confirmation_digest(old_hashes: list[str], new_hashes: list[str]) -> bytes:
    """
    Digest a recipient signs to acknowledge a transfer.

    SHA-256 over the packed 32-byte old hashes followed by the packed new
    hashes, in order.
    """
    packed = b"".join(hex_to_bytes(h, 32, "old data hash") for h in old_hashes)
    packed += b"".join(hex_to_bytes(h, 32, "new data hash") for h in new_hashes)
    return hashlib.sha256(packed).digest()


__all__ = [
    "PROOF_SIZE",
    "build_proof",
    "build_proof_bytes",
    "validate_proof",
    "parse_proof",
    "preimage_proof",
    "confirmation_digest",
]
