"""
Cryptographic primitives for privnet.

This module provides:
- Hashing functions (SHA-256, RIPEMD-160, Hash160)
- Key generation and management (secp256k1)
- Base58Check encoding used for account addresses

Design Notes:
-------------
Accounts are identified by the Hash160 (RIPEMD-160 of SHA-256) of their
verification script, rendered as a Base58Check address. Public keys are
carried in 33-byte compressed form inside scripts.

RIPEMD-160 comes from pycryptodome because hashlib only exposes it when the
linked OpenSSL still ships the legacy provider.
"""

import hashlib
import secrets
from dataclasses import dataclass

import base58
from Crypto.Hash import RIPEMD160
from py_ecc.secp256k1 import secp256k1


# =============================================================================
# Constants
# =============================================================================

# secp256k1 curve order (number of points on the curve)
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

# secp256k1 field prime
SECP256K1_PRIME = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F

COMPRESSED_PUBLIC_KEY_SIZE = 33

# Version byte prepended to a script hash before Base58Check encoding
ADDRESS_VERSION = 0x35


# =============================================================================
# Hashing
# =============================================================================


def sha256(data: bytes) -> bytes:
    """Compute SHA-256 hash."""
    return hashlib.sha256(data).digest()


def ripemd160(data: bytes) -> bytes:
    """Compute RIPEMD-160 hash."""
    return RIPEMD160.new(data).digest()


def hash160(data: bytes) -> bytes:
    """
    Compute RIPEMD-160(SHA-256(data)).

    Used for: script hashes (account identity).
    """
    return ripemd160(sha256(data))


# =============================================================================
# Key Generation
# =============================================================================


@dataclass
class KeyPair:
    """
    An ECDSA keypair on secp256k1.

    Attributes:
        private_key: 32-byte secret key (integer in [1, order-1])
        public_key: 64-byte uncompressed public key (x || y coordinates)
    """
    private_key: bytes  # 32 bytes
    public_key: bytes   # 64 bytes (uncompressed, no 0x04 prefix)

    @property
    def compressed_public_key(self) -> bytes:
        """33-byte SEC1 compressed public key (parity prefix || x)."""
        return compress_public_key(self.public_key)

    @property
    def private_key_hex(self) -> str:
        """Return private key as hex string."""
        return self.private_key.hex()


def generate_keypair() -> KeyPair:
    """
    Generate a new random keypair.

    Uses cryptographically secure random number generator.
    """
    # Private key in valid range [1, order-1]
    private_key_int = secrets.randbelow(SECP256K1_ORDER - 1) + 1
    private_key = private_key_int.to_bytes(32, byteorder="big")

    return keypair_from_private_key(private_key)


def private_key_to_public_key(private_key: bytes) -> bytes:
    """
    Derive public key from private key.

    Args:
        private_key: 32-byte private key

    Returns:
        64-byte uncompressed public key
    """
    if len(private_key) != 32:
        raise ValueError("Private key must be 32 bytes")

    # P = k * G, as an (x, y) tuple of integers
    public_key_point = secp256k1.privtopub(private_key)
    x_bytes = public_key_point[0].to_bytes(32, byteorder="big")
    y_bytes = public_key_point[1].to_bytes(32, byteorder="big")
    return x_bytes + y_bytes


def keypair_from_private_key(private_key: bytes) -> KeyPair:
    """Rebuild a KeyPair from a stored private key."""
    return KeyPair(private_key=private_key, public_key=private_key_to_public_key(private_key))


def compress_public_key(public_key: bytes) -> bytes:
    """
    Convert a 64-byte uncompressed public key to 33-byte compressed form.

    Args:
        public_key: 64-byte public key (x || y)

    Returns:
        0x02/0x03 prefix (y parity) followed by the 32-byte x coordinate
    """
    if len(public_key) != 64:
        raise ValueError("Public key must be 64 bytes")

    y = int.from_bytes(public_key[32:], byteorder="big")
    prefix = 0x03 if y & 1 else 0x02
    return bytes([prefix]) + public_key[:32]


def is_compressed_public_key(data: bytes) -> bool:
    """Check that data is a well-formed compressed secp256k1 point encoding."""
    if len(data) != COMPRESSED_PUBLIC_KEY_SIZE or data[0] not in (0x02, 0x03):
        return False
    x = int.from_bytes(data[1:], byteorder="big")
    if x >= SECP256K1_PRIME:
        return False
    # x must be on the curve: y^2 = x^3 + 7 has a solution mod p
    rhs = (pow(x, 3, SECP256K1_PRIME) + 7) % SECP256K1_PRIME
    return pow(rhs, (SECP256K1_PRIME - 1) // 2, SECP256K1_PRIME) in (0, 1)


# =============================================================================
# Addresses
# =============================================================================


def script_hash_to_address(script_hash: bytes) -> str:
    """Encode a 20-byte script hash as a Base58Check address."""
    if len(script_hash) != 20:
        raise ValueError("Script hash must be 20 bytes")
    return base58.b58encode_check(bytes([ADDRESS_VERSION]) + script_hash).decode("ascii")


# =============================================================================
# Utility Functions
# =============================================================================


def hex_to_bytes(hex_str: str) -> bytes:
    """Convert hex string (with or without 0x prefix) to bytes."""
    if hex_str.startswith("0x") or hex_str.startswith("0X"):
        hex_str = hex_str[2:]
    return bytes.fromhex(hex_str)
