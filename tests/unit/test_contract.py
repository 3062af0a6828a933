"""
Unit tests for verification scripts.

Tests cover:
1. Signature scripts
2. Multi-signature scripts (determinism, canonical key order, bounds)
3. Script recognition
4. BFT thresholds
"""

import random

import base58
import pytest

from privnet.core.chain.contract import (
    CHECK_MULTISIG,
    CHECK_SIG,
    OpCode,
    create_multisig_redeem_script,
    create_signature_redeem_script,
    get_bft_threshold,
    is_multisig_script,
    is_signature_script,
    parse_multisig_script,
    sort_public_keys,
    to_address,
    to_script_hash,
)
from privnet.crypto import ADDRESS_VERSION, generate_keypair


@pytest.fixture
def public_keys():
    return [generate_keypair().compressed_public_key for _ in range(7)]


class TestSignatureScript:
    """Tests for single-signature scripts."""

    def test_layout(self):
        key = generate_keypair().compressed_public_key
        script = create_signature_redeem_script(key)
        assert script[0] == OpCode.PUSHDATA1
        assert script[1] == 33
        assert script[2:35] == key
        assert script[35] == OpCode.SYSCALL
        assert script[36:] == CHECK_SIG

    def test_recognized_as_signature_not_multisig(self):
        script = create_signature_redeem_script(generate_keypair().compressed_public_key)
        assert is_signature_script(script)
        assert not is_multisig_script(script)

    def test_rejects_uncompressed_key(self):
        with pytest.raises(ValueError):
            create_signature_redeem_script(generate_keypair().public_key)


class TestMultisigScript:
    """Tests for m-of-n scripts."""

    def test_deterministic(self, public_keys):
        assert create_multisig_redeem_script(5, public_keys) == create_multisig_redeem_script(5, public_keys)

    def test_independent_of_key_order(self, public_keys):
        shuffled = list(public_keys)
        random.shuffle(shuffled)
        assert create_multisig_redeem_script(5, shuffled) == create_multisig_redeem_script(5, public_keys)

    def test_keys_emitted_in_canonical_order(self, public_keys):
        m, keys = parse_multisig_script(create_multisig_redeem_script(3, public_keys))
        assert m == 3
        assert keys == sort_public_keys(public_keys)

    def test_layout(self, public_keys):
        script = create_multisig_redeem_script(5, public_keys)
        assert script[0] == OpCode.PUSH0 + 5
        assert script[-6] == OpCode.PUSH0 + 7
        assert script[-5] == OpCode.SYSCALL
        assert script[-4:] == CHECK_MULTISIG

    def test_one_of_one(self):
        key = generate_keypair().compressed_public_key
        script = create_multisig_redeem_script(1, [key])
        assert parse_multisig_script(script) == (1, [key])
        assert script != create_signature_redeem_script(key)

    def test_large_key_count_uses_pushint(self):
        keys = [generate_keypair().compressed_public_key for _ in range(17)]
        script = create_multisig_redeem_script(17, keys)
        assert script[0] == OpCode.PUSHINT8
        assert parse_multisig_script(script) == (17, sort_public_keys(keys))

    @pytest.mark.parametrize("m", [0, 8, -1])
    def test_invalid_threshold(self, public_keys, m):
        with pytest.raises(ValueError):
            create_multisig_redeem_script(m, public_keys)

    def test_empty_key_set(self):
        with pytest.raises(ValueError):
            create_multisig_redeem_script(1, [])

    def test_duplicate_keys(self, public_keys):
        with pytest.raises(ValueError):
            create_multisig_redeem_script(2, [public_keys[0], public_keys[0]])

    def test_address_depends_on_threshold(self, public_keys):
        script = create_multisig_redeem_script(4, public_keys)
        a = to_address(script)
        b = to_address(create_multisig_redeem_script(5, public_keys))
        assert a != b
        assert base58.b58decode_check(a) == bytes([ADDRESS_VERSION]) + to_script_hash(script)


class TestScriptRecognition:
    """Tests for structural multi-sig detection."""

    def test_truncated_script(self, public_keys):
        script = create_multisig_redeem_script(5, public_keys)
        assert parse_multisig_script(script[:-1]) is None

    def test_wrong_key_count(self, public_keys):
        script = bytearray(create_multisig_redeem_script(5, public_keys))
        script[-6] = OpCode.PUSH0 + 6
        assert parse_multisig_script(bytes(script)) is None

    def test_garbage(self):
        assert parse_multisig_script(b"") is None
        assert parse_multisig_script(b"\x41\x41\x41") is None

    def test_script_hash_length(self, public_keys):
        assert len(to_script_hash(create_multisig_redeem_script(1, public_keys))) == 20


class TestBftThreshold:
    """Tests for consensus thresholds."""

    @pytest.mark.parametrize("count,expected", [(1, 1), (4, 3), (7, 5)])
    def test_threshold(self, count, expected):
        assert get_bft_threshold(count) == expected
