"""
Unit tests for input validators.
"""

import pytest

from privnet.core.chain import create_chain
from privnet.utils.validation import (
    is_reserved_name,
    names_equal,
    validate_node_count,
    validate_node_index,
    validate_single_node,
    validate_wallet_name,
)


class TestNodeCount:
    """Tests for validate_node_count."""

    @pytest.mark.parametrize("count", [1, 4, 7])
    def test_valid(self, count):
        assert validate_node_count(count) == (True, "")

    @pytest.mark.parametrize("count", [0, 2, 3, 5, 6, 8])
    def test_invalid(self, count):
        ok, error = validate_node_count(count)
        assert not ok
        assert str(count) in error

    @pytest.mark.parametrize("count", ["4", 4.0, True, None])
    def test_wrong_type(self, count):
        ok, _ = validate_node_count(count)
        assert not ok


class TestChainValidators:
    """Tests for validators taking a descriptor."""

    def test_node_index(self):
        chain = create_chain(4)
        assert validate_node_index(chain, 3)[0]
        assert not validate_node_index(chain, 4)[0]
        assert not validate_node_index(chain, -1)[0]

    def test_single_node(self):
        assert validate_single_node(create_chain(1), "create")[0]
        ok, error = validate_single_node(create_chain(4), "create")
        assert not ok
        assert "single node" in error

    def test_reserved_names(self):
        chain = create_chain(1)
        assert is_reserved_name(chain, "GeNeSiS")
        assert is_reserved_name(chain, "NODE1")
        assert not is_reserved_name(chain, "node2")

    def test_wallet_name_messages(self):
        chain = create_chain(1)
        ok, error = validate_wallet_name(chain, "genesis")
        assert not ok
        assert error == "genesis is a reserved name. Choose a different wallet name."
        assert validate_wallet_name(chain, "alice") == (True, "")

    def test_names_equal(self):
        assert names_equal("Alice", "aLICE")
        assert not names_equal("alice", "alicia")
