#!/usr/bin/env python3
"""
Test Triple-DES key generation and encrypt/decrypt over bytes and hex strings.
"""

import logging

import pytest
from cryptography.hazmat.decrepit.ciphers.algorithms import TripleDES
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, modes

import hexcrypt.core.cipher as cipher_module
from hexcrypt.core import codec
from hexcrypt.core.cipher import (
    decrypt,
    decrypt_string,
    encrypt,
    encrypt_string,
    generate_key_hex,
)


@pytest.fixture(scope="module")
def key_hex():
    return generate_key_hex()


def test_generate_key_hex_format(key_hex):
    assert isinstance(key_hex, str)
    assert len(key_hex) == 2 * cipher_module.KEY_SIZE
    assert key_hex == key_hex.lower()
    assert codec.bytes_from_hex_strict(key_hex) is not None


def test_generated_key_has_odd_parity(key_hex):
    for b in codec.bytes_from_hex(key_hex):
        assert bin(b).count("1") % 2 == 1


def test_generated_keys_differ():
    assert generate_key_hex() != generate_key_hex()


def test_generate_key_hex_without_randomness(monkeypatch, caplog):
    def broken_token_bytes(n):
        raise NotImplementedError("no entropy source")

    monkeypatch.setattr(cipher_module, "token_bytes", broken_token_bytes)

    with caplog.at_level(logging.ERROR, logger="hexcrypt.core.cipher"):
        assert generate_key_hex() is None
    assert "generate_key_hex" in caplog.text


def test_hello_roundtrip(key_hex):
    ciphertext = encrypt(key_hex, "hello".encode("utf-8"))
    assert ciphertext is not None
    assert ciphertext != b"hello"
    assert decrypt(key_hex, ciphertext).decode("utf-8") == "hello"


@pytest.mark.parametrize("size", [0, 1, 7, 8, 9, 16, 100])
def test_bytes_roundtrip_pads_to_block(key_hex, size):
    data = bytes(range(size))
    ciphertext = encrypt(key_hex, data)
    # PKCS#7 always adds between 1 and 8 bytes
    assert len(ciphertext) % 8 == 0
    assert len(data) < len(ciphertext) <= len(data) + 8
    assert decrypt(key_hex, ciphertext) == data


def test_encrypt_matches_desede_ecb_pkcs5(key_hex):
    key = codec.bytes_from_hex(key_hex)
    padder = padding.PKCS7(64).padder()
    padded = padder.update(b"interop check") + padder.finalize()
    encryptor = Cipher(TripleDES(key), modes.ECB()).encryptor()
    expected = encryptor.update(padded) + encryptor.finalize()

    assert encrypt(key_hex, b"interop check") == expected


def test_encrypt_is_deterministic_per_key(key_hex):
    assert encrypt(key_hex, b"same input") == encrypt(key_hex, b"same input")


@pytest.mark.parametrize(
    "bad_key",
    [None, "", "abc", "zz" * 24, "00" * 16, "00" * 25, 42],
)
def test_bad_key_returns_none(bad_key, caplog):
    with caplog.at_level(logging.ERROR, logger="hexcrypt.core.cipher"):
        assert encrypt(bad_key, b"data") is None
        assert decrypt(bad_key, b"\x00" * 8) is None
    assert "encrypt ::" in caplog.text
    assert "decrypt ::" in caplog.text


def test_decrypt_corrupt_ciphertext(key_hex):
    # Not a whole number of blocks
    assert decrypt(key_hex, b"\x01\x02\x03") is None


def test_decrypt_with_other_key(key_hex):
    ciphertext = encrypt(key_hex, b"secret payload")
    other_key = generate_key_hex()
    # Padding usually fails; if it happens to parse, the plaintext is still wrong
    assert decrypt(other_key, ciphertext) != b"secret payload"


def test_encrypt_non_bytes_returns_none(key_hex):
    assert encrypt(key_hex, None) is None
    assert encrypt(key_hex, "not bytes") is None


def test_string_roundtrip(key_hex):
    encrypted = encrypt_string(key_hex, "hello", "UTF-8")
    assert encrypted is not None
    assert encrypted == encrypted.lower()
    assert len(encrypted) == 16
    assert decrypt_string(key_hex, encrypted, "UTF-8") == "hello"


def test_string_roundtrip_euc_kr(key_hex):
    encrypted = encrypt_string(key_hex, "안녕하세요", "euc-kr")
    assert decrypt_string(key_hex, encrypted, "euc-kr") == "안녕하세요"


def test_string_hex_matches_bytes_api(key_hex):
    expected = codec.hex_from_bytes(encrypt(key_hex, "hello".encode("utf-8")))
    assert encrypt_string(key_hex, "hello") == expected


def test_unknown_charset_fails(key_hex, caplog):
    with caplog.at_level(logging.ERROR, logger="hexcrypt.core.cipher"):
        assert encrypt_string(key_hex, "hello", "no-such-charset") is None
    assert "encrypt_string" in caplog.text

    encrypted = encrypt_string(key_hex, "hello")
    assert decrypt_string(key_hex, encrypted, "no-such-charset") is None


def test_unencodable_text_fails(key_hex):
    assert encrypt_string(key_hex, "안녕", "ascii") is None


def test_decrypt_string_bad_hex(key_hex):
    assert decrypt_string(key_hex, "abc") is None
    assert decrypt_string(key_hex, "zz" * 8) is None
    assert decrypt_string(key_hex, None) is None


@pytest.mark.parametrize("data", [42, ["00"], ["0", "0"], b"00"])
def test_decrypt_string_non_str_ciphertext(key_hex, data, caplog):
    with caplog.at_level(logging.ERROR, logger="hexcrypt.core.cipher"):
        assert decrypt_string(key_hex, data) is None
    assert "decrypt_string ::" in caplog.text


def test_decrypt_string_undecodable_plaintext(key_hex):
    encrypted = codec.hex_from_bytes(encrypt(key_hex, b"\xff\xfe\xfd"))
    assert decrypt_string(key_hex, encrypted, "utf-8") is None
