"""
================================================================================
ENCRYPTION - Password-Based AES Cipher for Statement Fields
================================================================================

Encrypts individual strings with a key derived from the user's password.
Every call is self-contained: it draws its own salt and IV and ships both
inside the output block, so the only secret needed to decrypt is the password.

Encryption Technology:
    - Algorithm: AES-CBC with PKCS7 padding
    - Key Derivation: PBKDF2-HMAC-SHA1
    - Iterations: 65,536
    - Salt Length: 20 bytes (cryptographically random, per call)
    - IV Length: 16 bytes (cryptographically random, per call)
    - Key Length: 128, 192 or 256 bits (default 256)

Block Layout (hex encoded):
    IV (16 bytes) || ciphertext (n * 16 bytes) || salt (20 bytes)

Password Pre-Hash:
    By default the password goes through one unsalted SHA-256 round before
    PBKDF2. This is weak on its own, and only kept so files written by
    earlier versions stay readable. New deployments can set
    crypto.hash_password to false in config.json.

Integrity:
    There is no authentication tag. A wrong password or a tampered block is
    detected through invalid padding, which raises DecryptionError. The
    decrypted text is never returned when padding is invalid.

Key Length Policy:
    Requests above the AES maximum (any larger power of two) are clamped to
    256 bits. The cipher logs one warning per instance and marks every block
    it produces with key_length_clamped=True.

Usage:
    cipher = AESCipher(key_length=256)
    token = cipher.encrypt_text('hunter2', 'Dec 17, 2015')
    cipher.decrypt_text('hunter2', token)
================================================================================
"""

import hashlib
import os
import logging
from dataclasses import dataclass
from typing import Tuple, Union

from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ccstats.core.exceptions import DecryptionError, KeyLengthError
from ccstats.utils.constants import (
    AES_SALT_LENGTH,
    AES_IV_LENGTH,
    AES_BLOCK_SIZE,
    AES_KDF_ITERATIONS,
    AES_DEFAULT_KEY_LENGTH,
    AES_MAX_KEY_LENGTH,
    AES_KEY_LENGTHS,
)

logger = logging.getLogger("ccstats")

_BLOCK_BYTES = AES_BLOCK_SIZE // 8


def resolve_key_length(requested) -> Tuple[int, bool]:
    """
    Map a requested key length onto one AES accepts.

    Returns:
        (key_length, clamped) tuple

    Raises:
        KeyLengthError: not a usable length (too small, not an AES size,
            or above the maximum without being a power of two)
    """
    if isinstance(requested, bool) or not isinstance(requested, int) or requested <= 0:
        raise KeyLengthError(f"AES key length must be a positive number of bits, got {requested!r}")

    if requested > AES_MAX_KEY_LENGTH:
        if requested & (requested - 1):
            raise KeyLengthError(f"AES key length must be a power of two, got {requested}")
        return AES_MAX_KEY_LENGTH, True

    if requested not in AES_KEY_LENGTHS:
        raise KeyLengthError(
            f"AES key length must be one of {', '.join(str(k) for k in AES_KEY_LENGTHS)} bits, got {requested}"
        )
    return requested, False


@dataclass(frozen=True)
class EncryptedBlock:
    """One encrypted value together with everything needed to decrypt it."""
    iv: bytes
    ciphertext: bytes
    salt: bytes
    key_length: int = AES_DEFAULT_KEY_LENGTH
    key_length_clamped: bool = False

    def to_bytes(self) -> bytes:
        return self.iv + self.ciphertext + self.salt

    def to_hex(self) -> str:
        return self.to_bytes().hex()

    @classmethod
    def from_bytes(cls, data: bytes, key_length: int = AES_DEFAULT_KEY_LENGTH) -> 'EncryptedBlock':
        """
        Split IV || ciphertext || salt.

        Raises:
            DecryptionError: block too short, or ciphertext not whole AES blocks
        """
        ciphertext_length = len(data) - AES_IV_LENGTH - AES_SALT_LENGTH
        if ciphertext_length <= 0 or ciphertext_length % _BLOCK_BYTES:
            raise DecryptionError(
                f"Encrypted block has invalid length {len(data)} bytes"
            )
        return cls(
            iv=data[:AES_IV_LENGTH],
            ciphertext=data[AES_IV_LENGTH:len(data) - AES_SALT_LENGTH],
            salt=data[len(data) - AES_SALT_LENGTH:],
            key_length=key_length,
        )

    @classmethod
    def from_hex(cls, text: str, key_length: int = AES_DEFAULT_KEY_LENGTH) -> 'EncryptedBlock':
        try:
            data = bytes.fromhex(text)
        except (TypeError, ValueError):
            raise DecryptionError("Encrypted block is not valid hexadecimal") from None
        return cls.from_bytes(data, key_length)


class AESCipher:
    """
    Password-based AES-CBC cipher.

    Holds no secrets between calls: only the key length policy and the
    pre-hash switch are instance state.
    """

    def __init__(self, key_length: int = AES_DEFAULT_KEY_LENGTH, hash_password: bool = True):
        self._policy_warned = False
        self.hash_password = hash_password
        self.key_length = key_length

    @property
    def key_length(self) -> int:
        return self._key_length

    @key_length.setter
    def key_length(self, requested: int):
        key_length, clamped = resolve_key_length(requested)
        if clamped and not self._policy_warned:
            logger.warning(
                f"[ENCRYPTION] Maximum AES key length is {AES_MAX_KEY_LENGTH} bits. "
                f"Requested {requested} bits, key length limited to {AES_MAX_KEY_LENGTH} bits."
            )
            self._policy_warned = True
        self._key_length = key_length
        self._clamped = clamped

    @property
    def key_length_clamped(self) -> bool:
        return self._clamped

    def _password_material(self, password: str) -> bytes:
        encoded = password.encode('utf-8')
        if not self.hash_password:
            return encoded
        return hashlib.sha256(encoded).hexdigest().encode('ascii')

    def derive_key_from_password(self, password: str, salt: bytes = None):
        """
        Derive an AES key from password using PBKDF2.

        Args:
            password: User password
            salt: Optional salt. If None, generates random salt.

        Returns:
            (key, salt) tuple where key is key_length / 8 raw bytes
        """
        if salt is None:
            salt = os.urandom(AES_SALT_LENGTH)

        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA1(),
            length=self._key_length // 8,
            salt=salt,
            iterations=AES_KDF_ITERATIONS,
        )
        return kdf.derive(self._password_material(password)), salt

    def encrypt(self, password: str, plaintext: Union[str, bytes]) -> EncryptedBlock:
        """
        Encrypt plaintext under a key derived from password and a fresh salt.

        Returns:
            EncryptedBlock carrying IV, ciphertext and salt
        """
        if isinstance(plaintext, str):
            plaintext = plaintext.encode('utf-8')

        key, salt = self.derive_key_from_password(password)
        iv = os.urandom(AES_IV_LENGTH)

        padder = padding.PKCS7(AES_BLOCK_SIZE).padder()
        padded = padder.update(plaintext) + padder.finalize()

        encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        return EncryptedBlock(
            iv=iv,
            ciphertext=ciphertext,
            salt=salt,
            key_length=self._key_length,
            key_length_clamped=self._clamped,
        )

    def encrypt_text(self, password: str, plaintext: Union[str, bytes]) -> str:
        """Encrypt and hex-encode in one step."""
        return self.encrypt(password, plaintext).to_hex()

    def decrypt(self, password: str, block: Union[EncryptedBlock, str]) -> bytes:
        """
        Decrypt a block produced by encrypt() (or its hex form).

        Raises:
            DecryptionError: malformed block, wrong password or tampered data
        """
        if not isinstance(block, EncryptedBlock):
            block = EncryptedBlock.from_hex(block, self._key_length)

        key, _ = self.derive_key_from_password(password, block.salt)

        decryptor = Cipher(algorithms.AES(key), modes.CBC(block.iv)).decryptor()
        padded = decryptor.update(block.ciphertext) + decryptor.finalize()

        unpadder = padding.PKCS7(AES_BLOCK_SIZE).unpadder()
        try:
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError:
            raise DecryptionError(
                "Decryption failed: invalid padding (wrong password or corrupted data)"
            ) from None

    def decrypt_text(self, password: str, block: Union[EncryptedBlock, str]) -> str:
        """Decrypt and decode as UTF-8."""
        plaintext = self.decrypt(password, block)
        try:
            return plaintext.decode('utf-8')
        except UnicodeDecodeError:
            raise DecryptionError(
                "Decryption failed: plaintext is not valid UTF-8 (wrong password or corrupted data)"
            ) from None
