"""
Encryption envelope using AES-256-GCM

Payload string format: base64(salt):base64(nonce):base64(ciphertext+tag)
"""

import logging
import os
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives import hashes

from .errors import AuthenticationFailure, CorruptPayload, FormatError, InputMissing
from .utils import base64_to_bytes, bytes_to_base64

logger = logging.getLogger(__name__)

# Constants
SALT_SIZE = 16
NONCE_SIZE = 12
KEY_SIZE = 32  # 256 bits
ITERATIONS = 100000
DELIMITER = ':'


@dataclass(frozen=True)
class EncryptedPayload:
    """Parsed form of the salt:iv:ciphertext envelope."""

    salt: bytes
    iv: bytes
    ciphertext: bytes

    def to_string(self) -> str:
        return DELIMITER.join(
            bytes_to_base64(part) for part in (self.salt, self.iv, self.ciphertext)
        )

    @classmethod
    def from_string(cls, payload: str) -> "EncryptedPayload":
        parts = payload.split(DELIMITER)
        if len(parts) != 3:
            raise FormatError("Invalid encrypted payload format. Expected salt:iv:ciphertext.")
        if not all(parts):
            raise FormatError("Invalid encrypted payload format: empty segment.")

        salt, iv, ciphertext = (base64_to_bytes(part) for part in parts)
        if len(salt) != SALT_SIZE or len(iv) != NONCE_SIZE:
            raise FormatError(
                f"Invalid encrypted payload: expected {SALT_SIZE}-byte salt "
                f"and {NONCE_SIZE}-byte IV"
            )
        return cls(salt=salt, iv=iv, ciphertext=ciphertext)

    def __str__(self) -> str:
        return self.to_string()


def derive_key(password: str, salt: bytes) -> bytes:
    """Stretch a password into an AES-256 key with PBKDF2-HMAC-SHA256."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=salt,
        iterations=ITERATIONS,
    )
    return kdf.derive(password.encode('utf-8'))


def encrypt(message: str, password: str) -> str:
    """
    Encrypt a text message using AES-256-GCM.

    A fresh salt and nonce are drawn for every call.

    Args:
        message: plaintext
        password: encryption password

    Returns:
        Envelope string base64(salt):base64(iv):base64(ciphertext)
    """
    if not password:
        raise InputMissing("password")

    salt = os.urandom(SALT_SIZE)
    nonce = os.urandom(NONCE_SIZE)
    key = derive_key(password, salt)

    # ciphertext carries the 16-byte auth tag at its end
    ciphertext = AESGCM(key).encrypt(nonce, message.encode('utf-8'), None)
    logger.debug("Encrypted %d-byte message", len(ciphertext) - 16)

    return EncryptedPayload(salt=salt, iv=nonce, ciphertext=ciphertext).to_string()


def decrypt(payload: str, password: str) -> str:
    """
    Decrypt an envelope string produced by encrypt().

    Raises:
        FormatError: if the payload is not three base64 segments
        AuthenticationFailure: wrong password or corrupted data
    """
    if not payload:
        raise InputMissing("encrypted payload")
    if not password:
        raise InputMissing("password")

    envelope = EncryptedPayload.from_string(payload)
    key = derive_key(password, envelope.salt)

    try:
        plaintext = AESGCM(key).decrypt(envelope.iv, envelope.ciphertext, None)
    except InvalidTag as e:
        raise AuthenticationFailure() from e

    try:
        return plaintext.decode('utf-8')
    except UnicodeDecodeError as e:
        raise CorruptPayload("Decrypted data is not valid UTF-8 text") from e
