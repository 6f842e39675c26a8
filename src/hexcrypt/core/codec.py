"""Conversions between bytes, big-endian integers and radix strings.

Every function here is pure. Functions documented as lenient log and return
``None`` on malformed input; the others raise :class:`MalformedInputError` or
:class:`InvalidArgumentError`.
"""

import codecs
import string

from hexcrypt.core.errors import InvalidArgumentError, MalformedInputError
from hexcrypt.shared import Logger

logger = Logger(__name__).get_logger()

RADIX_16 = 16
RADIX_10 = 10
RADIX_8 = 8

UNSIGNED_8BIT_MAX = 0xFF

_RADIX_ALPHABETS = {
    RADIX_16: frozenset(string.hexdigits),
    RADIX_10: frozenset(string.digits),
    RADIX_8: frozenset(string.octdigits),
}


def _parse_groups(digits: str, radix: int, width: int) -> bytes:
    alphabet = _RADIX_ALPHABETS[radix]
    groups = []
    for index in range(0, len(digits), width):
        group = digits[index : index + width]
        if not alphabet.issuperset(group):
            raise MalformedInputError(f"For input string: {group!r} (radix {radix})")
        groups.append(int(group, radix) & UNSIGNED_8BIT_MAX)
    return bytes(groups)


def _check_window(size: int, offset: int, length: int):
    if offset < 0 or length < 0 or offset + length > size:
        raise InvalidArgumentError(
            f"Window offset={offset} length={length} out of bounds for {size} bytes"
        )


def equals(array1: bytes | None, array2: bytes | None) -> bool:
    """Compare two byte sequences element by element.

    ``equals(None, None)`` is ``True``; ``None`` against anything else is ``False``.
    """
    if array1 is array2:
        return True

    if array1 is None or array2 is None:
        return False

    if len(array1) != len(array2):
        return False

    for left, right in zip(array1, array2):
        if left != right:
            return False

    return True


def bytes_from_hex(digits: str | None) -> bytes | None:
    """Lenient hex parser.

    Returns ``None`` for ``None`` and, after logging, for odd-length or non-hex
    input. Never raises.
    """
    if digits is None:
        return None

    try:
        return bytes_from_hex_strict(digits)
    except MalformedInputError as e:
        logger.error("bytes_from_hex :: %s", e)
        return None


def bytes_from_hex_strict(digits: str | None) -> bytes | None:
    """Strict hex parser: two characters per byte, ``MalformedInputError`` otherwise.

    >>> bytes_from_hex_strict("48414e")
    b'HAN'
    """
    if digits is None:
        return None

    if len(digits) % 2 == 1:
        raise MalformedInputError(f"Hex string {digits!r} must have an even length")

    return _parse_groups(digits, RADIX_16, 2)


def bytes_from_radix_string(digits: str | None, radix: int) -> bytes | None:
    """Parse a radix 8, 10 or 16 string into bytes.

    Radix 16 uses two characters per byte, radix 8 and 10 use three. Group values
    above 255 keep only their low 8 bits.
    """
    if digits is None:
        return None

    if radix not in _RADIX_ALPHABETS:
        raise InvalidArgumentError(f"For input radix: {radix!r}")

    width = 2 if radix == RADIX_16 else 3

    if len(digits) % width != 0:
        raise InvalidArgumentError(
            f"For input string: {digits!r} (length must be a multiple of {width})"
        )

    return _parse_groups(digits, radix, width)


def hex_from_byte(b: int) -> str:
    """``hex_from_byte(1) == "01"``, ``hex_from_byte(-1) == "ff"``."""
    return format(b & UNSIGNED_8BIT_MAX, "02x")


def hex_from_bytes(
    data: bytes | None, offset: int | None = None, length: int | None = None
) -> str | None:
    """Encode bytes as lowercase hex, optionally restricted to a window.

    >>> hex_from_bytes(b"\\x01\\xff")
    '01ff'
    >>> hex_from_bytes(b"\\x01\\xff", 1, 1)
    'ff'
    """
    if data is None:
        return None

    if offset is None and length is None:
        return bytes(data).hex()

    offset = offset or 0
    if length is None:
        length = len(data) - offset

    _check_window(len(data), offset, length)
    return bytes(data[offset : offset + length]).hex()


def pretty_hex(value: bytes | str) -> str:
    """Group hex pairs for display: 8 per half line, 16 per line."""
    if isinstance(value, str):
        hex_str = value
        if len(hex_str) % 2 == 1:
            raise MalformedInputError(f"Hex string {hex_str!r} must have an even length")
    else:
        hex_str = bytes(value).hex()

    parts = []
    for i, index in enumerate(range(0, len(hex_str), 2), start=1):
        parts.append(hex_str[index : index + 2] + " ")
        if i % 16 == 0:
            parts.append("\r\n")
        elif i % 8 == 0:
            parts.append(" ")

    return "".join(parts)


def _pack(value: int, size: int, dest: bytearray | None, dest_pos: int):
    packed = (value & ((1 << (size * 8)) - 1)).to_bytes(size, "big")
    if dest is None:
        return packed

    _check_window(len(dest), dest_pos, size)
    dest[dest_pos : dest_pos + size] = packed
    return dest


def int_to_bytes(value: int, dest: bytearray | None = None, dest_pos: int = 0):
    """Pack into 4 big-endian bytes; the value is taken modulo 2**32.

    With ``dest``, the bytes are written into it at ``dest_pos`` and ``dest`` is
    returned instead of a new ``bytes``.
    """
    return _pack(value, 4, dest, dest_pos)


def long_to_bytes(value: int, dest: bytearray | None = None, dest_pos: int = 0):
    """Pack into 8 big-endian bytes; the value is taken modulo 2**64."""
    return _pack(value, 8, dest, dest_pos)


def _unpack(src: bytes, offset: int, size: int) -> int:
    _check_window(len(src), offset, size)

    word = 0
    for b in src[offset : offset + size]:
        word = (word << 8) | (b & UNSIGNED_8BIT_MAX)

    # Two's complement of the fixed width
    sign_bit = 1 << (size * 8 - 1)
    return (word ^ sign_bit) - sign_bit


def bytes_to_int(src: bytes, offset: int = 0) -> int:
    """Read a signed 32-bit big-endian value from ``src[offset:offset + 4]``."""
    return _unpack(src, offset, 4)


def bytes_to_long(src: bytes, offset: int = 0) -> int:
    """Read a signed 64-bit big-endian value from ``src[offset:offset + 8]``."""
    return _unpack(src, offset, 8)


def bytes_to_string(data: bytes, charset: str = "utf-8") -> str | None:
    try:
        codecs.lookup(charset)
        return bytes(data).decode(charset)
    except (LookupError, UnicodeDecodeError) as e:
        logger.error("bytes_to_string :: %s", e)
        return None


def unsigned_byte_value(b: int) -> int:
    return b & UNSIGNED_8BIT_MAX
