"""
Key material for the AgentNFT SDK.

Holds the secp256k1 account used to derive public keys and sign transfer
confirmations, the placeholder address-to-public-key derivation, and the key
custody capability that transfer and clone logic asks for item keys.
"""

import hashlib
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, utils

from agentnft.addressing import hex_to_bytes
from agentnft.exceptions import CryptoError, ValidationError

if TYPE_CHECKING:
    from agentnft.cipher import CipherService


class Account:
    """secp256k1 key pair in the shape the chain toolkit uses."""

    def __init__(self, private_key: ec.EllipticCurvePrivateKey) -> None:
        """
        Initialize with a secp256k1 private key.

        Args:
            private_key: secp256k1 private key from cryptography library
        """
        if not isinstance(private_key.curve, ec.SECP256K1):
            raise TypeError(
                f"Expected secp256k1 curve, got {type(private_key.curve).__name__}"
            )
        self._private_key = private_key
        self._public_key = private_key.public_key()

    @classmethod
    def from_hex(cls, private_key_hex: str) -> "Account":
        """
        Load an account from a 32-byte hex private key.

        Raises:
            ValidationError: If the key is not 32 bytes or out of curve range
        """
        raw = hex_to_bytes(private_key_hex, length=32, field="private key")
        try:
            private_key = ec.derive_private_key(int.from_bytes(raw, "big"), ec.SECP256K1())
        except ValueError as e:
            raise ValidationError(f"Invalid secp256k1 private key: {e}") from e
        return cls(private_key)

    @classmethod
    def generate(cls) -> "Account":
        """Generate a fresh random account."""
        return cls(ec.generate_private_key(ec.SECP256K1()))

    @property
    def private_key_hex(self) -> str:
        """Private scalar as ``0x`` + 64 hex chars."""
        scalar = self._private_key.private_numbers().private_value
        return "0x" + scalar.to_bytes(32, "big").hex()

    @property
    def public_key(self) -> str:
        """Uncompressed public key (``0x04`` || X || Y) as hex."""
        return "0x" + self._public_key.public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.UncompressedPoint,
        ).hex()

    def public_key_bytes(self) -> bytes:
        """Raw 64-byte X || Y public key, without the point-format prefix."""
        return self._public_key.public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.UncompressedPoint,
        )[1:]

    def sign_digest(self, digest: bytes) -> bytes:
        """
        Sign a precomputed 32-byte SHA-256 digest.

        Returns:
            DER-encoded ECDSA signature
        """
        if len(digest) != 32:
            raise CryptoError(f"Digest must be 32 bytes, got {len(digest)}")
        return self._private_key.sign(digest, ec.ECDSA(utils.Prehashed(hashes.SHA256())))

    def verify_digest(self, signature: bytes, digest: bytes) -> bool:
        """Verify a signature produced by :meth:`sign_digest`."""
        try:
            self._public_key.verify(signature, digest, ec.ECDSA(utils.Prehashed(hashes.SHA256())))
            return True
        except InvalidSignature:
            return False


def public_key_from_private(private_key_hex: str) -> str:
    """Return the uncompressed public key hex for a hex private key."""
    return Account.from_hex(private_key_hex).public_key


def verify_with_public_key(public_key: str | bytes, signature: bytes, digest: bytes) -> bool:
    """
    Verify a :meth:`Account.sign_digest` signature against a public key.

    Args:
        public_key: Uncompressed secp256k1 key, 65 bytes (``0x04`` || X || Y)
            or the raw 64-byte X || Y form

    Raises:
        ValidationError: If the key is not a point on secp256k1
    """
    raw = hex_to_bytes(public_key, field="public key")
    if len(raw) == 64:
        raw = b"\x04" + raw
    try:
        key = ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), raw)
    except ValueError as e:
        raise ValidationError(f"Invalid secp256k1 public key: {e}") from e
    try:
        key.verify(signature, digest, ec.ECDSA(utils.Prehashed(hashes.SHA256())))
        return True
    except InvalidSignature:
        return False


def public_key_from_address(address: str) -> str:
    """
    Derive a stand-in 64-byte "public key" from an on-chain address.

    This is not a key lookup: ``h = sha256(lowercase address)`` and the
    result is ``h || h``. Real recipients need their actual public key.
    """
    digest = hashlib.sha256(address.lower().encode("utf-8")).digest()
    return "0x" + (digest + digest).hex()


class KeyCustody(ABC):
    """Capability that hands out the symmetric key of a token's data item."""

    @abstractmethod
    async def key_for(self, token_id: int, index: int) -> bytes:
        """Return the 32-byte key protecting item ``index`` of ``token_id``."""
        pass

    @abstractmethod
    async def unseal(self, sealed_key: str | bytes, identity: str) -> bytes:
        """Recover a symmetric key from its sealed form for ``identity``."""
        pass

    def record(self, token_id: int, index: int, key: bytes) -> None:
        """Called with the key of every item written for the owner. No-op by default."""
        return None

    def forget(self, token_id: int) -> None:
        """Called once the owner no longer holds ``token_id``. No-op by default."""
        return None


class DerivedKeyCustody(KeyCustody):
    """
    Placeholder custody: keys are derived from owner key material.

    ``key = sha256(f"{material}-{token_id}-{index}")``. Only useful where the
    same derivation was used to encrypt the data in the first place.
    """

    def __init__(self, owner_key_material: str) -> None:
        self._material = owner_key_material

    async def key_for(self, token_id: int, index: int) -> bytes:
        key_material = f"{self._material}-{token_id}-{index}"
        return hashlib.sha256(key_material.encode("utf-8")).digest()

    async def unseal(self, sealed_key: str | bytes, identity: str) -> bytes:
        raise CryptoError("DerivedKeyCustody does not hold sealed keys")


class SealedKeyCustody(KeyCustody):
    """Custody backed by sealed keys and the owner's private key."""

    def __init__(self, cipher: "CipherService", account: Account) -> None:
        self._cipher = cipher
        self._account = account
        self._sealed: dict[tuple[int, int], str] = {}

    def remember(self, token_id: int, index: int, sealed_key: str) -> None:
        """Record the sealed key for a token's data item."""
        self._sealed[(token_id, index)] = sealed_key

    async def key_for(self, token_id: int, index: int) -> bytes:
        try:
            sealed = self._sealed[(token_id, index)]
        except KeyError:
            raise CryptoError(f"No sealed key held for token {token_id} item {index}") from None
        return await self.unseal(sealed, self._account.private_key_hex)

    async def unseal(self, sealed_key: str | bytes, identity: str) -> bytes:
        return self._cipher.unseal_key(sealed_key, identity)


class InMemoryKeyCustody(KeyCustody):
    """
    Custody holding raw item keys in process memory.

    The registry records the key of every item it writes for the owner, so a
    single process can mint, update and transfer without a key service.
    """

    def __init__(self) -> None:
        self._keys: dict[tuple[int, int], bytes] = {}

    def record(self, token_id: int, index: int, key: bytes) -> None:
        self._keys[(token_id, index)] = bytes(key)

    def forget(self, token_id: int) -> None:
        """Drop every key held for ``token_id``."""
        for slot in [slot for slot in self._keys if slot[0] == token_id]:
            del self._keys[slot]

    async def key_for(self, token_id: int, index: int) -> bytes:
        try:
            return self._keys[(token_id, index)]
        except KeyError:
            raise CryptoError(f"No key held for token {token_id} item {index}") from None

    async def unseal(self, sealed_key: str | bytes, identity: str) -> bytes:
        raise CryptoError("InMemoryKeyCustody does not hold sealed keys")
