"""
Symmetric encryption and key sealing for AgentNFT metadata.

Blobs are AES-256-GCM: 16-byte nonce || ciphertext || 16-byte tag.

Key sealing here is a demo scheme kept for compatibility with tokens already
minted: only the first 16 bytes of the key are sealed, masked with
``sha256(recipient public key)``. Unsealing cannot recover the second half.
Do not build new features on it; swap in real key wrapping behind the same
seal/unseal pair.
"""

import hashlib
import json
import os
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from agentnft.addressing import hex_to_bytes
from agentnft.exceptions import CryptoError, IntegrityError, ValidationError
from agentnft.keys import public_key_from_private
from agentnft.logging import get_logger

KEY_SIZE = 32
NONCE_SIZE = 16
TAG_SIZE = 16
SEALED_KEY_SIZE = 16

logger = get_logger("crypto")


class CipherService:
    """AEAD encryption, key generation and key sealing."""

    def generate_key(self) -> bytes:
        """Return a fresh random 256-bit key."""
        return os.urandom(KEY_SIZE)

    def encrypt(self, plaintext: bytes | str, key: bytes) -> bytes:
        """
        Encrypt with AES-256-GCM under a fresh random nonce.

        Args:
            plaintext: Bytes, or text encoded as UTF-8
            key: 32-byte key

        Returns:
            nonce || ciphertext || tag

        Raises:
            CryptoError: If the key is not 32 bytes
        """
        self._check_key(key)
        if isinstance(plaintext, str):
            plaintext = plaintext.encode("utf-8")

        nonce = os.urandom(NONCE_SIZE)
        # AESGCM appends the 16-byte tag to the ciphertext
        sealed = AESGCM(key).encrypt(nonce, plaintext, None)
        return nonce + sealed

    def decrypt(self, blob: bytes, key: bytes) -> bytes:
        """
        Verify and decrypt a blob produced by :meth:`encrypt`.

        Raises:
            CryptoError: If the key is not 32 bytes
            IntegrityError: On tag mismatch or a blob too short to hold
                nonce and tag
        """
        self._check_key(key)
        if len(blob) < NONCE_SIZE + TAG_SIZE:
            raise IntegrityError(
                f"Encrypted blob too short: {len(blob)} bytes, need at least {NONCE_SIZE + TAG_SIZE}"
            )

        nonce, sealed = blob[:NONCE_SIZE], blob[NONCE_SIZE:]
        try:
            return AESGCM(key).decrypt(nonce, sealed, None)
        except InvalidTag:
            raise IntegrityError("Authentication tag mismatch: wrong key or corrupted data") from None

    def encrypt_json(self, obj: Any, key: bytes) -> bytes:
        """Serialize ``obj`` as JSON and encrypt it."""
        return self.encrypt(json.dumps(obj, separators=(",", ":")), key)

    def decrypt_json(self, blob: bytes, key: bytes) -> Any:
        """
        Decrypt a blob and parse it as JSON.

        Raises:
            IntegrityError: If decryption fails or the plaintext is not JSON
        """
        plaintext = self.decrypt(blob, key)
        try:
            return json.loads(plaintext.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise IntegrityError(f"Decrypted payload is not valid JSON: {e}") from e

    def seal_key(self, key: bytes, recipient_public_key: str | bytes) -> str:
        """
        Seal the first half of ``key`` for a recipient public key.

        Returns:
            16 sealed bytes as 32 hex chars (no ``0x``)
        """
        self._check_key(key)
        mask = self._mask(recipient_public_key)
        sealed = bytes(k ^ m for k, m in zip(key[:SEALED_KEY_SIZE], mask[:SEALED_KEY_SIZE]))
        return sealed.hex()

    def unseal_key(self, sealed_key: str | bytes, private_key: str) -> bytes:
        """
        Recover the sealed half of a key with the recipient's private key.

        The public key is recomputed from ``private_key`` in uncompressed
        form. Bytes 16..31 of the result are zero.

        Raises:
            ValidationError: If the sealed key is not 16 bytes or the private
                key is malformed
        """
        sealed = hex_to_bytes(sealed_key, length=SEALED_KEY_SIZE, field="sealed key")
        mask = self._mask(public_key_from_private(private_key))

        key = bytearray(KEY_SIZE)
        for i in range(SEALED_KEY_SIZE):
            key[i] = sealed[i] ^ mask[i]

        logger.debug("Unsealed key: %d of %d bytes recovered", SEALED_KEY_SIZE, KEY_SIZE)
        return bytes(key)

    def _mask(self, public_key: str | bytes) -> bytes:
        try:
            pub = hex_to_bytes(public_key, field="public key")
        except ValidationError as e:
            raise CryptoError(f"Key sealing failed: {e.message}") from e
        return hashlib.sha256(pub).digest()

    @staticmethod
    def _check_key(key: bytes) -> None:
        if not isinstance(key, (bytes, bytearray)) or len(key) != KEY_SIZE:
            got = len(key) if isinstance(key, (bytes, bytearray)) else type(key).__name__
            raise CryptoError(f"Key must be {KEY_SIZE} bytes, got {got}")
