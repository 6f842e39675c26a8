"""Triple-DES encryption under caller-held hex keys, plus a passphrase cipher.

The primary cipher is ``DESede`` as the JCE defaults it: three-key EDE, ECB mode,
PKCS#7 padding. Keys travel as 48 lowercase hex characters and are rebuilt on
every call.

Every public function returns ``None`` on failure after logging the cause, so
callers only ever have to check for ``None``.
"""

import codecs
from secrets import token_bytes

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.decrepit.ciphers.algorithms import TripleDES
from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from hexcrypt.core.codec import bytes_from_hex_strict, hex_from_bytes
from hexcrypt.core.errors import (
    CipherInitError,
    EncodingError,
    HexCryptError,
    KeyMaterialError,
    MalformedInputError,
    TransformError,
)
from hexcrypt.core.lazy import LazyHandle
from hexcrypt.shared import Logger, load_config
from hexcrypt.shared.config import AltCipher

logger = Logger(__name__).get_logger()

config = load_config()

ALGORITHM = "DESede"
KEY_SIZE = 24  # 3 x 64-bit DES keys
BLOCK_SIZE = 64


def _with_odd_parity(raw: bytes) -> bytes:
    # DES uses the low bit of every key byte as an odd-parity bit
    return bytes(
        (b & 0xFE) | ((bin(b & 0xFE).count("1") + 1) % 2) for b in raw
    )


def _encode(text: str, charset: str) -> bytes:
    try:
        codecs.lookup(charset)
        return text.encode(charset)
    except (LookupError, UnicodeError, AttributeError) as e:
        raise EncodingError(f"Cannot encode with charset {charset!r}: {e}") from e


def _decode(data: bytes, charset: str) -> str:
    try:
        codecs.lookup(charset)
        return data.decode(charset)
    except (LookupError, UnicodeError, AttributeError) as e:
        raise EncodingError(f"Cannot decode with charset {charset!r}: {e}") from e


def _pad(data: bytes, block_size: int) -> bytes:
    padder = padding.PKCS7(block_size).padder()
    return padder.update(data) + padder.finalize()


def _unpad(data: bytes, block_size: int) -> bytes:
    unpadder = padding.PKCS7(block_size).unpadder()
    return unpadder.update(data) + unpadder.finalize()


def _ciphertext_from_hex(data: str) -> bytes:
    try:
        ciphertext = bytes_from_hex_strict(data)
    except TypeError as e:
        raise MalformedInputError(f"Ciphertext hex cannot be decoded: {e}") from e

    if ciphertext is None:
        raise MalformedInputError("Ciphertext hex is missing")

    return ciphertext


def _generate_key() -> bytes:
    try:
        raw = token_bytes(KEY_SIZE)
    except (OSError, NotImplementedError) as e:
        raise CipherInitError(f"No randomness source for {ALGORITHM} keys: {e}") from e

    return _with_odd_parity(raw)


def _load_key(key_hex: str) -> bytes:
    try:
        key = bytes_from_hex_strict(key_hex)
    except (MalformedInputError, TypeError) as e:
        raise KeyMaterialError(f"Key hex cannot be decoded: {e}") from e

    if key is None:
        raise KeyMaterialError("Key hex is missing")

    if len(key) != KEY_SIZE:
        raise KeyMaterialError(
            f"Invalid key length: {len(key)} bytes ({ALGORITHM} needs {KEY_SIZE})"
        )

    return key


def _new_cipher(key: bytes) -> Cipher:
    try:
        return Cipher(TripleDES(key), modes.ECB())
    except (ValueError, UnsupportedAlgorithm) as e:
        raise CipherInitError(f"{ALGORITHM} is unavailable: {e}") from e


def _transform(key_hex: str, data: bytes, encrypting: bool) -> bytes:
    cipher = _new_cipher(_load_key(key_hex))

    try:
        if encrypting:
            encryptor = cipher.encryptor()
            return encryptor.update(_pad(data, BLOCK_SIZE)) + encryptor.finalize()

        decryptor = cipher.decryptor()
        padded = decryptor.update(data) + decryptor.finalize()
        return _unpad(padded, BLOCK_SIZE)
    except (ValueError, TypeError) as e:
        mode = "encryption" if encrypting else "decryption"
        raise TransformError(f"{ALGORITHM} {mode} failed: {e}") from e


def generate_key_hex() -> str | None:
    """Generate a fresh Triple-DES key as hex.

    Store the result (for instance in the application config) and pass it to
    every later ``encrypt``/``decrypt`` call.
    """
    try:
        raw_key = _generate_key()
    except CipherInitError as e:
        logger.error("generate_key_hex :: %s", e)
        return None

    return hex_from_bytes(raw_key)


def encrypt(key_hex: str, data: bytes) -> bytes | None:
    try:
        return _transform(key_hex, data, encrypting=True)
    except HexCryptError as e:
        logger.error("encrypt :: %s", e)
        return None


def decrypt(key_hex: str, data: bytes) -> bytes | None:
    try:
        return _transform(key_hex, data, encrypting=False)
    except HexCryptError as e:
        logger.error("decrypt :: %s", e)
        return None


def encrypt_string(key_hex: str, data: str, charset: str = "utf-8") -> str | None:
    """Encrypt ``data`` encoded with ``charset``; the ciphertext comes back as hex."""
    try:
        encrypted = _transform(key_hex, _encode(data, charset), encrypting=True)
    except HexCryptError as e:
        logger.error("encrypt_string :: %s", e)
        return None

    return hex_from_bytes(encrypted)


def decrypt_string(key_hex: str, data: str, charset: str = "utf-8") -> str | None:
    """Inverse of :func:`encrypt_string`."""
    try:
        ciphertext = _ciphertext_from_hex(data)
        decrypted = _transform(key_hex, ciphertext, encrypting=False)
        return _decode(decrypted, charset)
    except HexCryptError as e:
        logger.error("decrypt_string :: %s", e)
        return None


class PassphraseCipher:
    """Camellia-128-CBC keyed by PBKDF2 over a fixed passphrase.

    Output is the hex of ``iv || ciphertext`` with a random IV per message.
    """

    KEY_SIZE = 16
    IV_SIZE = 16
    BLOCK_SIZE = 128

    def __init__(self, key: bytes, charset: str = "utf-8"):
        try:
            self._algorithm = algorithms.Camellia(key)
        except (ValueError, UnsupportedAlgorithm) as e:
            raise CipherInitError(f"Camellia is unavailable: {e}") from e
        self.charset = charset

    @classmethod
    def from_passphrase(
        cls,
        passphrase: str,
        salt: str,
        iterations: int,
        charset: str = "utf-8",
    ) -> "PassphraseCipher":
        if not passphrase:
            raise CipherInitError("Passphrase must not be empty")

        try:
            kdf = PBKDF2HMAC(
                algorithm=hashes.SHA256(),
                length=cls.KEY_SIZE,
                salt=salt.encode("utf-8"),
                iterations=iterations,
            )
            key = kdf.derive(passphrase.encode("utf-8"))
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise CipherInitError(f"Key derivation failed: {e}") from e

        return cls(key, charset=charset)

    @classmethod
    def from_config(cls, settings: AltCipher) -> "PassphraseCipher":
        return cls.from_passphrase(
            settings.passphrase,
            settings.salt,
            settings.iterations,
            charset=settings.charset,
        )

    def encrypt_string(self, data: str) -> str:
        iv = token_bytes(self.IV_SIZE)
        encryptor = Cipher(self._algorithm, modes.CBC(iv)).encryptor()
        padded = _pad(_encode(data, self.charset), self.BLOCK_SIZE)
        return hex_from_bytes(iv + encryptor.update(padded) + encryptor.finalize())

    def decrypt_string(self, data: str) -> str:
        raw = _ciphertext_from_hex(data)
        if len(raw) < self.IV_SIZE + self.BLOCK_SIZE // 8:
            raise MalformedInputError("Ciphertext is too short to hold an IV and a block")

        iv, ciphertext = raw[: self.IV_SIZE], raw[self.IV_SIZE :]
        try:
            decryptor = Cipher(self._algorithm, modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            plaintext = _unpad(padded, self.BLOCK_SIZE)
        except ValueError as e:
            raise TransformError(f"Camellia decryption failed: {e}") from e

        return _decode(plaintext, self.charset)


_alt_cipher: LazyHandle[PassphraseCipher] = LazyHandle(
    lambda: PassphraseCipher.from_config(config.alt_cipher),
    name="alt cipher",
)


def encrypt_alt(data: str) -> str | None:
    """Encrypt with the process-wide passphrase cipher."""
    try:
        return _alt_cipher.get().encrypt_string(data)
    except HexCryptError as e:
        logger.error("encrypt_alt :: %s", e)
        return None


def decrypt_alt(data: str) -> str | None:
    try:
        return _alt_cipher.get().decrypt_string(data)
    except HexCryptError as e:
        logger.error("decrypt_alt :: %s", e)
        return None
