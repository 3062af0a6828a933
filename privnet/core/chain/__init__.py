"""Chain descriptors, wallets, contracts and port topology"""
from privnet.core.chain.models import (
    GENESIS,
    MULTISIG_LABEL,
    VALID_NODE_COUNTS,
    Account,
    AccountContract,
    ChainDescriptor,
    ConsensusNode,
    Wallet,
    load_chain,
    save_chain,
)
from privnet.core.chain.contract import (
    create_multisig_redeem_script,
    create_signature_redeem_script,
    get_bft_threshold,
    parse_multisig_script,
    to_address,
    to_script_hash,
)
from privnet.core.chain.topology import PortAssignment, get_port_numbers
from privnet.core.chain.wallet import (
    create_account,
    create_multisig_account,
    create_wallet,
    get_account,
    get_multisig_account,
    get_runtime_identity,
)
from privnet.core.chain.network import create_chain, create_network, generate_magic

__all__ = [
    "GENESIS",
    "MULTISIG_LABEL",
    "VALID_NODE_COUNTS",
    "Account",
    "AccountContract",
    "ChainDescriptor",
    "ConsensusNode",
    "Wallet",
    "load_chain",
    "save_chain",
    "create_multisig_redeem_script",
    "create_signature_redeem_script",
    "get_bft_threshold",
    "parse_multisig_script",
    "to_address",
    "to_script_hash",
    "PortAssignment",
    "get_port_numbers",
    "create_account",
    "create_multisig_account",
    "create_wallet",
    "get_account",
    "get_multisig_account",
    "get_runtime_identity",
    "create_chain",
    "create_network",
    "generate_magic",
]
