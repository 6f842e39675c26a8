from hexcrypt.core import cipher, codec

__all__ = ["cipher", "codec"]
