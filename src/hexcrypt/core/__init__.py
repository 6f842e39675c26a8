from .errors import (
    CipherInitError,
    EncodingError,
    HexCryptError,
    InvalidArgumentError,
    KeyMaterialError,
    MalformedInputError,
    TransformError,
)
from .lazy import HandleState, LazyHandle

__all__ = [
    "CipherInitError",
    "EncodingError",
    "HandleState",
    "HexCryptError",
    "InvalidArgumentError",
    "KeyMaterialError",
    "LazyHandle",
    "MalformedInputError",
    "TransformError",
]
