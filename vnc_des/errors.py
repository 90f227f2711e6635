"""
Error kinds raised by the vnc_des package.

Every error is a subclass of VncDesError, so callers that only care about
"did it work" can catch the base class. HexDecodeError is also a ValueError
because it is raised for malformed text input.
"""


class VncDesError(Exception):
    """Base class for all vnc_des errors."""


class InvalidPasswordLength(VncDesError):
    """The password is empty or violates the length policy."""


class InvalidKeyFormat(VncDesError):
    """The key is not exactly 8 bytes."""


class InvalidPasswordFormat(VncDesError):
    """An encrypted password is not exactly 8 bytes."""


class HexDecodeError(VncDesError, ValueError):
    """Text could not be decoded as the expected hex string."""


class EncryptionFailed(VncDesError):
    pass


class DecryptionFailed(VncDesError):
    pass


class ConfigError(VncDesError):
    """Configuration could not be parsed or failed validation."""
