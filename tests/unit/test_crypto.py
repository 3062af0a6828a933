"""
Unit tests for cryptographic primitives.

Tests cover:
1. Key generation
2. Public key compression
3. Hashing functions
4. Address encoding
"""

import base58
import pytest

from privnet.crypto import (
    ADDRESS_VERSION,
    SECP256K1_ORDER,
    compress_public_key,
    generate_keypair,
    hash160,
    hex_to_bytes,
    is_compressed_public_key,
    keypair_from_private_key,
    private_key_to_public_key,
    ripemd160,
    script_hash_to_address,
    sha256,
)

GENERATOR_X = "79be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"


class TestKeyGeneration:
    """Tests for key generation."""

    def test_keypair_generation_produces_valid_lengths(self):
        """KeyPair should have correct field lengths."""
        kp = generate_keypair()
        assert len(kp.private_key) == 32
        assert len(kp.public_key) == 64
        assert len(kp.compressed_public_key) == 33

    def test_private_key_in_range(self):
        kp = generate_keypair()
        assert 1 <= int.from_bytes(kp.private_key, "big") < SECP256K1_ORDER

    def test_keypairs_are_unique(self):
        """Each keypair should be different."""
        kp1 = generate_keypair()
        kp2 = generate_keypair()
        assert kp1.private_key != kp2.private_key
        assert kp1.public_key != kp2.public_key

    def test_derive_public_key_from_private(self):
        """Should derive correct public key from private key."""
        kp = generate_keypair()
        assert private_key_to_public_key(kp.private_key) == kp.public_key

    def test_keypair_from_private_key_roundtrip(self):
        kp = generate_keypair()
        restored = keypair_from_private_key(hex_to_bytes(kp.private_key_hex))
        assert restored == kp

    def test_private_key_length_checked(self):
        with pytest.raises(ValueError):
            private_key_to_public_key(b"\x01" * 31)


class TestCompression:
    """Tests for compressed public keys."""

    def test_generator_point(self):
        """Private key 1 is the curve generator, which has an even y."""
        kp = keypair_from_private_key((1).to_bytes(32, "big"))
        assert kp.compressed_public_key.hex() == "02" + GENERATOR_X

    def test_prefix_matches_parity(self):
        kp = generate_keypair()
        y = int.from_bytes(kp.public_key[32:], "big")
        assert kp.compressed_public_key[0] == (0x03 if y & 1 else 0x02)
        assert kp.compressed_public_key[1:] == kp.public_key[:32]

    def test_compressed_key_is_recognized(self):
        assert is_compressed_public_key(generate_keypair().compressed_public_key)

    def test_malformed_keys_rejected(self):
        key = generate_keypair().compressed_public_key
        assert not is_compressed_public_key(key[:-1])
        assert not is_compressed_public_key(b"\x04" + key[1:])
        assert not is_compressed_public_key(b"\x02" + b"\xff" * 32)

    def test_compress_requires_64_bytes(self):
        with pytest.raises(ValueError):
            compress_public_key(b"\x00" * 33)


class TestHashing:
    """Tests for hash functions."""

    def test_sha256_known_vector(self):
        expected = "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        assert sha256(b"abc").hex() == expected

    def test_ripemd160_known_vector(self):
        assert ripemd160(b"").hex() == "9c1185a5c5e9fc54612808977ee8f548b2258d31"

    def test_hash160_composition(self):
        data = b"privnet"
        assert hash160(data) == ripemd160(sha256(data))
        assert len(hash160(data)) == 20


class TestAddresses:
    """Tests for Base58Check addresses."""

    def test_address_encoding(self):
        script_hash = hash160(b"script")
        address = script_hash_to_address(script_hash)
        assert base58.b58decode_check(address) == bytes([ADDRESS_VERSION]) + script_hash

    def test_address_prefix(self):
        """Version byte 0x35 gives addresses starting with N."""
        assert ADDRESS_VERSION == 0x35
        assert script_hash_to_address(b"\x00" * 20).startswith("N")

    def test_wrong_length_script_hash(self):
        with pytest.raises(ValueError):
            script_hash_to_address(b"\x00" * 19)


class TestUtilities:
    """Tests for utility functions."""

    def test_hex_conversion(self):
        data = b"\x01\x02\xff"
        assert hex_to_bytes("0x0102ff") == data
        assert hex_to_bytes("0102ff") == data
