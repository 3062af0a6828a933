"""
Verification script construction.

Builds the locking scripts that define an account:
- Signature contracts: satisfied by one signature from one key
- Multi-signature contracts: satisfied by any m-of-n signatures over a
  fixed set of public keys

Scripts are pure functions of their inputs. Multi-sig keys are emitted in
canonical order (x coordinate, then parity), so every participant derives
the same script, script hash and address from the same key set.

Script layout:
    signature:  PUSHDATA1 33 <key> SYSCALL <CheckSig>
    multi-sig:  PUSH(m) {PUSHDATA1 33 <key>}*n PUSH(n) SYSCALL <CheckMultisig>
"""

from enum import IntEnum
from typing import List, Optional, Sequence, Tuple

from privnet.crypto import (
    COMPRESSED_PUBLIC_KEY_SIZE,
    hash160,
    is_compressed_public_key,
    script_hash_to_address,
    sha256,
)


MAX_MULTISIG_KEYS = 1024


class OpCode(IntEnum):
    """Opcodes used by verification scripts."""
    PUSHINT8 = 0x00
    PUSHINT16 = 0x01
    PUSHDATA1 = 0x0C
    PUSH0 = 0x10
    PUSH1 = 0x11
    PUSH16 = 0x20
    SYSCALL = 0x41


def interop_hash(name: str) -> bytes:
    """4-byte identifier of an interop service (first 4 bytes of SHA-256)."""
    return sha256(name.encode("ascii"))[:4]


CHECK_SIG = interop_hash("System.Crypto.CheckSig")
CHECK_MULTISIG = interop_hash("System.Crypto.CheckMultisig")


# =============================================================================
# Emitters
# =============================================================================


def _emit_push_int(value: int) -> bytes:
    if 0 <= value <= 16:
        return bytes([OpCode.PUSH0 + value])
    if value <= 0x7F:
        return bytes([OpCode.PUSHINT8]) + value.to_bytes(1, "little")
    if value <= 0x7FFF:
        return bytes([OpCode.PUSHINT16]) + value.to_bytes(2, "little")
    raise ValueError(f"Integer {value} out of range for a verification script")


def _emit_push_key(public_key: bytes) -> bytes:
    return bytes([OpCode.PUSHDATA1, COMPRESSED_PUBLIC_KEY_SIZE]) + public_key


def _check_key(public_key: bytes):
    if not is_compressed_public_key(public_key):
        raise ValueError(f"Invalid compressed public key: {public_key.hex()}")


def _key_order(public_key: bytes) -> Tuple[bytes, int]:
    return public_key[1:], public_key[0]


def sort_public_keys(public_keys: Sequence[bytes]) -> List[bytes]:
    """Canonical ordering of a public key set."""
    return sorted(public_keys, key=_key_order)


# =============================================================================
# Builders
# =============================================================================


def create_signature_redeem_script(public_key: bytes) -> bytes:
    """
    Build a single-signature verification script.

    Args:
        public_key: 33-byte compressed public key

    Returns:
        Script bytes
    """
    _check_key(public_key)
    return _emit_push_key(public_key) + bytes([OpCode.SYSCALL]) + CHECK_SIG


def create_multisig_redeem_script(m: int, public_keys: Sequence[bytes]) -> bytes:
    """
    Build an m-of-n multi-signature verification script.

    Args:
        m: Number of signatures required
        public_keys: 33-byte compressed public keys (any order)

    Returns:
        Script bytes

    Raises:
        ValueError: If m is outside [1, n], n exceeds 1024, keys repeat
            or a key is malformed
    """
    n = len(public_keys)
    if not (1 <= m <= n <= MAX_MULTISIG_KEYS):
        raise ValueError(f"Invalid multi-sig parameters m={m}, n={n}")
    if len(set(public_keys)) != n:
        raise ValueError("Duplicate public key in multi-sig set")
    for key in public_keys:
        _check_key(key)

    script = bytearray(_emit_push_int(m))
    for key in sort_public_keys(public_keys):
        script += _emit_push_key(key)
    script += _emit_push_int(n)
    script += bytes([OpCode.SYSCALL]) + CHECK_MULTISIG
    return bytes(script)


def get_bft_threshold(count: int) -> int:
    """Signatures needed among `count` consensus nodes: floor(2n/3) + 1."""
    return count * 2 // 3 + 1


# =============================================================================
# Parsers
# =============================================================================


def _read_push_int(script: bytes, pos: int) -> Optional[Tuple[int, int]]:
    if pos >= len(script):
        return None
    op = script[pos]
    if OpCode.PUSH0 <= op <= OpCode.PUSH16:
        return op - OpCode.PUSH0, pos + 1
    if op == OpCode.PUSHINT8 and pos + 2 <= len(script):
        return script[pos + 1], pos + 2
    if op == OpCode.PUSHINT16 and pos + 3 <= len(script):
        return int.from_bytes(script[pos + 1:pos + 3], "little"), pos + 3
    return None


def parse_multisig_script(script: bytes) -> Optional[Tuple[int, List[bytes]]]:
    """
    Recognize a multi-signature verification script.

    Returns:
        (m, public_keys) if the script has the multi-sig shape, else None
    """
    head = _read_push_int(script, 0)
    if head is None:
        return None
    m, pos = head

    keys: List[bytes] = []
    key_len = COMPRESSED_PUBLIC_KEY_SIZE + 2
    while pos + key_len <= len(script) and script[pos] == OpCode.PUSHDATA1 \
            and script[pos + 1] == COMPRESSED_PUBLIC_KEY_SIZE:
        keys.append(script[pos + 2:pos + key_len])
        pos += key_len

    tail = _read_push_int(script, pos)
    if tail is None:
        return None
    n, pos = tail

    if n != len(keys) or not (1 <= m <= n):
        return None
    if script[pos:] != bytes([OpCode.SYSCALL]) + CHECK_MULTISIG:
        return None
    return m, keys


def is_multisig_script(script: bytes) -> bool:
    return parse_multisig_script(script) is not None


def is_signature_script(script: bytes) -> bool:
    return (
        len(script) == COMPRESSED_PUBLIC_KEY_SIZE + 7
        and script[0] == OpCode.PUSHDATA1
        and script[1] == COMPRESSED_PUBLIC_KEY_SIZE
        and script[-5:] == bytes([OpCode.SYSCALL]) + CHECK_SIG
    )


# =============================================================================
# Identity
# =============================================================================


def to_script_hash(script: bytes) -> bytes:
    """20-byte script hash identifying the contract."""
    return hash160(script)


def to_address(script: bytes) -> str:
    """Address of the account locked by `script`."""
    return script_hash_to_address(to_script_hash(script))
