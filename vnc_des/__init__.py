"""
vnc_des - the DES variant VNC servers and clients use to store passwords.
"""

from .config import TIGHTVNC_DEFAULT_KEY, VncDesConfig
from .des import decrypt_block, encrypt_block
from .errors import (ConfigError, DecryptionFailed, EncryptionFailed,
                     HexDecodeError, InvalidKeyFormat, InvalidPasswordFormat,
                     InvalidPasswordLength, VncDesError)
from .password import (PasswordProcessor, decrypt_with_default,
                       decrypt_with_key, encrypt_with_default,
                       encrypt_with_key, from_hex_string, to_hex_string,
                       verify_with_default, verify_with_key)

NAME = 'vnc_des'
VERSION = '0.1.0'


def version() -> str:
    return VERSION


def name() -> str:
    return NAME


def info() -> str:
    return f"{NAME} v{VERSION}"
