"""
Key and password policy configuration, with JSON load/save.

The JSON layout is::

    {
      "encryption_key": [23, 82, 107, 6, 35, 78, 88, 7],
      "strict_mode": false,
      "auto_truncate": true,
      "max_password_length": 8
    }

``encryption_key`` may also be given as a 16 character hex string.
"""

import dataclasses
import json
import logging
import os
import string
from dataclasses import dataclass
from typing import Any, Dict, Union

from .errors import ConfigError, HexDecodeError, InvalidKeyFormat

log = logging.getLogger(__name__)

# Hardcoded key used by TightVNC and most servers derived from it
# (util/VncPassCrypt.cpp). A convention of those implementations, not part
# of the RFB protocol.
TIGHTVNC_DEFAULT_KEY = bytes([23, 82, 107, 6, 35, 78, 88, 7])

MAX_PASSWORD_LENGTH_LIMIT = 256


def parse_hex_key(hex_key: str) -> bytes:
    """
    Decode a 16 character hex key into 8 bytes.
    """
    text = hex_key.strip()
    if not text or any(c not in string.hexdigits for c in text) or len(text) % 2:
        raise HexDecodeError(f"cannot parse hex key {hex_key!r}")
    key = bytes.fromhex(text)
    if len(key) != 8:
        raise InvalidKeyFormat(f"key must be 8 bytes, got {len(key)}")
    return key


@dataclass(frozen=True)
class VncDesConfig:
    encryption_key: bytes = TIGHTVNC_DEFAULT_KEY
    strict_mode: bool = False
    auto_truncate: bool = True
    max_password_length: int = 8

    def __post_init__(self):
        key = self.encryption_key
        if not isinstance(key, (bytes, bytearray)):
            raise InvalidKeyFormat(f"key must be bytes, got {type(key).__name__}")
        if len(key) != 8:
            raise InvalidKeyFormat(f"key must be 8 bytes, got {len(key)}")
        object.__setattr__(self, 'encryption_key', bytes(key))
        self.validate()

    def with_key(self, key: bytes) -> 'VncDesConfig':
        return dataclasses.replace(self, encryption_key=key)

    def with_hex_key(self, hex_key: str) -> 'VncDesConfig':
        return dataclasses.replace(self, encryption_key=parse_hex_key(hex_key))

    def with_strict_mode(self, strict: bool) -> 'VncDesConfig':
        return dataclasses.replace(self, strict_mode=strict)

    def with_auto_truncate(self, truncate: bool) -> 'VncDesConfig':
        return dataclasses.replace(self, auto_truncate=truncate)

    def with_max_password_length(self, length: int) -> 'VncDesConfig':
        return dataclasses.replace(self, max_password_length=length)

    def validate(self) -> None:
        """
        Check the password policy. Raises ConfigError when
        ``max_password_length`` is outside 1..256. Runs on construction,
        so the ``with_*`` copies are checked too.
        """
        length = self.max_password_length
        if isinstance(length, bool) or not isinstance(length, int):
            raise ConfigError(f"max_password_length must be an integer, got {length!r}")
        if length < 1:
            raise ConfigError("max_password_length must be at least 1")
        if length > MAX_PASSWORD_LENGTH_LIMIT:
            raise ConfigError(f"max_password_length cannot exceed {MAX_PASSWORD_LENGTH_LIMIT}")

    def key_as_hex(self) -> str:
        return self.encryption_key.hex()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'encryption_key': list(self.encryption_key),
            'strict_mode': self.strict_mode,
            'auto_truncate': self.auto_truncate,
            'max_password_length': self.max_password_length,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VncDesConfig':
        if not isinstance(data, dict):
            raise ConfigError("configuration must be a JSON object")
        missing = [name for name in ('encryption_key', 'strict_mode', 'auto_truncate',
                                     'max_password_length') if name not in data]
        if missing:
            raise ConfigError(f"missing configuration field(s): {', '.join(missing)}")

        return cls(
            encryption_key=_key_from_json(data['encryption_key']),
            strict_mode=_bool_from_json('strict_mode', data['strict_mode']),
            auto_truncate=_bool_from_json('auto_truncate', data['auto_truncate']),
            max_password_length=data['max_password_length'],
        )

    @classmethod
    def from_json(cls, text: str) -> 'VncDesConfig':
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"invalid configuration JSON: {exc}") from exc
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: Union[str, os.PathLike]) -> 'VncDesConfig':
        log.debug("loading configuration from %s", path)
        with open(path, encoding='utf-8') as fp:
            return cls.from_json(fp.read())

    def save_to_file(self, path: Union[str, os.PathLike]) -> None:
        log.debug("writing configuration to %s", path)
        with open(path, 'w', encoding='utf-8') as fp:
            fp.write(self.to_json())
            fp.write('\n')


def _key_from_json(value: Any) -> bytes:
    if isinstance(value, str):
        return parse_hex_key(value)
    if isinstance(value, list):
        if not all(isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 255 for b in value):
            raise ConfigError("encryption_key must be a list of byte values")
        return bytes(value)
    raise ConfigError("encryption_key must be a list of 8 bytes or a hex string")


def _bool_from_json(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{name} must be true or false, got {value!r}")
    return value
