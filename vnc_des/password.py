"""
VNC password encryption, decryption and verification.

A VNC password is at most 8 bytes. It is NUL padded into a single block and
encrypted under a fixed key; the 8 ciphertext bytes (usually stored as 16 hex
characters) are what servers keep in their configuration.
"""

import logging
import string
from typing import Optional, Tuple

from . import des
from .config import VncDesConfig
from .errors import (DecryptionFailed, EncryptionFailed, HexDecodeError,
                     InvalidPasswordFormat, InvalidPasswordLength)

log = logging.getLogger(__name__)

HEX_LENGTH = des.BLOCK_SIZE * 2


class PasswordProcessor:
    """
    Apply a configuration's password policy and key to VNC passwords.

    The processor keeps no cipher state between calls, so one instance can
    be shared between threads.
    """

    def __init__(self, config: Optional[VncDesConfig] = None):
        self.config = config if config is not None else VncDesConfig()

    @classmethod
    def with_key(cls, key: bytes) -> 'PasswordProcessor':
        return cls(VncDesConfig(encryption_key=key))

    @classmethod
    def with_hex_key(cls, hex_key: str) -> 'PasswordProcessor':
        return cls(VncDesConfig().with_hex_key(hex_key))

    def process_password(self, password: str) -> str:
        """
        Apply the length policy to a password.

        :param password: The plain text password
        :ret: The password, truncated to ``max_password_length`` characters
              when the policy allows it
        """
        if not password:
            raise InvalidPasswordLength("password cannot be empty")

        limit = self.config.max_password_length
        if len(password) > limit:
            if self.config.strict_mode and not self.config.auto_truncate:
                raise InvalidPasswordLength(
                    f"password is longer than the maximum of {limit} characters")
            log.debug("truncating password from %d to %d characters", len(password), limit)
            return password[:limit]
        return password

    def encrypt_password(self, password: str) -> bytes:
        processed = self.process_password(password)

        # Protocol passwords never exceed one block; anything longer is cut.
        block = processed.encode('utf-8')[:des.BLOCK_SIZE].ljust(des.BLOCK_SIZE, b'\0')
        try:
            return des.encrypt_block(block, self.config.encryption_key)
        except ValueError as exc:
            raise EncryptionFailed(f"encryption failed: {exc}") from exc

    def decrypt_password(self, encrypted: bytes) -> str:
        if len(encrypted) != des.BLOCK_SIZE:
            raise InvalidPasswordFormat(
                f"encrypted password must be {des.BLOCK_SIZE} bytes, got {len(encrypted)}")

        try:
            decrypted = des.decrypt_block(bytes(encrypted), self.config.encryption_key)
        except ValueError as exc:
            raise DecryptionFailed(f"decryption failed: {exc}") from exc

        end = decrypted.find(b'\0')
        if end != -1:
            decrypted = decrypted[:end]
        try:
            return decrypted.decode('utf-8')
        except UnicodeDecodeError as exc:
            raise DecryptionFailed(f"decrypted password is not valid UTF-8: {exc}") from exc

    def verify_password(self, password: str, encrypted: bytes) -> bool:
        """
        Check whether ``password`` encrypts to ``encrypted``.

        A mismatch returns False. Errors from encrypting ``password`` are
        raised. The comparison is not constant time.
        """
        return self.encrypt_password(password) == bytes(encrypted)

    def generate_test_pair(self, password: str) -> Tuple[str, str]:
        return password, to_hex_string(self.encrypt_password(password))


def to_hex_string(encrypted: bytes) -> str:
    return bytes(encrypted).hex()


def from_hex_string(text: str) -> bytes:
    """
    Parse 16 hex characters into an 8-byte encrypted password.

    Whitespace anywhere in ``text`` is dropped and case is ignored.
    """
    clean = ''.join(text.split()).lower()
    if len(clean) != HEX_LENGTH:
        raise HexDecodeError(
            f"hex password must be {HEX_LENGTH} characters, got {len(clean)}")
    if any(c not in string.hexdigits for c in clean):
        raise HexDecodeError(f"hex password contains non-hex characters: {clean!r}")

    decoded = bytes.fromhex(clean)
    if len(decoded) != des.BLOCK_SIZE:
        raise HexDecodeError(
            f"hex password must decode to {des.BLOCK_SIZE} bytes, got {len(decoded)}")
    return decoded


def encrypt_with_default(password: str) -> bytes:
    return PasswordProcessor().encrypt_password(password)


def decrypt_with_default(encrypted: bytes) -> str:
    return PasswordProcessor().decrypt_password(encrypted)


def verify_with_default(password: str, encrypted: bytes) -> bool:
    return PasswordProcessor().verify_password(password, encrypted)


def encrypt_with_key(password: str, key: bytes) -> bytes:
    return PasswordProcessor.with_key(key).encrypt_password(password)


def decrypt_with_key(encrypted: bytes, key: bytes) -> str:
    return PasswordProcessor.with_key(key).decrypt_password(encrypted)


def verify_with_key(password: str, encrypted: bytes, key: bytes) -> bool:
    return PasswordProcessor.with_key(key).verify_password(password, encrypted)
