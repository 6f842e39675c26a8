"""Exceptions raised by :mod:`hexcrypt.core`.

Strict codec functions raise these directly. Cipher operations raise them
internally and turn them into a logged ``None`` at their public boundary.
"""


class HexCryptError(Exception):
    """Base error for codec and cipher operations."""


class MalformedInputError(HexCryptError, ValueError):
    """Odd-length or wrong-alphabet hex/radix strings."""


class InvalidArgumentError(HexCryptError, ValueError):
    """Unsupported radix, bad group width or an out-of-bounds window."""


class KeyMaterialError(HexCryptError):
    """Key hex cannot be decoded, or decodes to the wrong length."""


class CipherInitError(HexCryptError):
    """The cipher or key-generation facility is unavailable or misconfigured."""


class TransformError(HexCryptError):
    """Encryption or decryption itself failed (corrupt ciphertext, bad padding)."""


class EncodingError(HexCryptError):
    """Charset lookup or conversion failed for a string payload."""
