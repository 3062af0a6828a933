"""
Input Validation - checks run before any key material or file is touched.

Each validator returns (is_valid, error_message) so callers can decide how
to surface the failure.
"""

from typing import TYPE_CHECKING, Any, Tuple

if TYPE_CHECKING:
    from privnet.core.chain.models import ChainDescriptor


GENESIS = "genesis"  # reserved name of the consensus multi-sig identity
VALID_NODE_COUNTS = (1, 4, 7)


def names_equal(a: str, b: str) -> bool:
    """Case-insensitive name comparison."""
    return a.casefold() == b.casefold()


def validate_node_count(count: Any) -> Tuple[bool, str]:
    """Node count must be one of the supported BFT group sizes."""
    if not isinstance(count, int) or isinstance(count, bool):
        return False, f"node count must be int, got {type(count).__name__}"

    if count not in VALID_NODE_COUNTS:
        allowed = ", ".join(str(c) for c in VALID_NODE_COUNTS)
        return False, f"invalid blockchain node count {count}, must be one of {allowed}"

    return True, ""


def validate_node_index(chain: "ChainDescriptor", index: Any) -> Tuple[bool, str]:
    """Index must address an existing consensus node."""
    if not isinstance(index, int) or isinstance(index, bool):
        return False, f"node index must be int, got {type(index).__name__}"

    if not (0 <= index < len(chain.consensus_nodes)):
        return False, f"invalid node index {index}"

    return True, ""


def validate_single_node(chain: "ChainDescriptor", operation: str) -> Tuple[bool, str]:
    """Checkpoints are bound to one multi-sig identity, so one node only."""
    if len(chain.consensus_nodes) != 1:
        return False, f"Checkpoint {operation} is only supported on single node networks"

    return True, ""


def is_reserved_name(chain: "ChainDescriptor", name: str) -> bool:
    """True for the genesis keyword and for any consensus node wallet name."""
    if names_equal(name, GENESIS):
        return True

    return any(names_equal(name, node.wallet.name) for node in chain.consensus_nodes)


def validate_wallet_name(chain: "ChainDescriptor", name: Any) -> Tuple[bool, str]:
    """
    Validate a name for a new ad-hoc wallet.

    Args:
        chain: Descriptor the wallet will belong to
        name: Proposed wallet name

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(name, str) or not name.strip():
        return False, "wallet name must be a non-empty string"

    if is_reserved_name(chain, name):
        return False, f"{name} is a reserved name. Choose a different wallet name."

    if any(names_equal(name, w.name) for w in chain.wallets):
        return False, f"wallet {name} already exists"

    return True, ""
