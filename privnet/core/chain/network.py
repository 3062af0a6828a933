"""
Network bootstrap.

Builds a complete ChainDescriptor for a new private network:
1. Validate the node count (before any key is generated)
2. Generate one keypair and default account per node
3. Derive the shared m-of-n multi-sig contract, m = floor(2n/3) + 1
4. Allocate ports per node index and pick a random magic value
"""

import secrets
from pathlib import Path
from typing import List, Optional, Union

from privnet.core.chain.contract import get_bft_threshold
from privnet.core.chain.models import (
    MULTISIG_LABEL,
    ChainDescriptor,
    ConsensusNode,
    Wallet,
    save_chain,
)
from privnet.core.chain.topology import get_port_numbers
from privnet.core.chain.wallet import create_multisig_account, new_wallet
from privnet.core.config import DEFAULT_BASE_PORT
from privnet.core.errors import configuration_error, precondition_error
from privnet.crypto import KeyPair, generate_keypair
from privnet.utils.logger import get_logger
from privnet.utils.validation import validate_node_count

logger = get_logger("chain.network")


def generate_magic() -> int:
    """Random non-zero 32-bit network identifier."""
    while True:
        magic = secrets.randbits(32)
        if magic != 0:
            return magic


def build_consensus_wallets(keypairs: List[KeyPair]) -> List[Wallet]:
    """
    Node wallets for a consensus group.

    Each wallet gets its node's default single-sig account plus the shared
    multi-sig account over all the group's public keys.
    """
    wallets = [new_wallet(f"node{i + 1}", kp) for i, kp in enumerate(keypairs)]

    public_keys = [kp.compressed_public_key for kp in keypairs]
    threshold = get_bft_threshold(len(public_keys))
    for wallet, kp in zip(wallets, keypairs):
        wallet.accounts.append(
            create_multisig_account(kp, threshold, public_keys, label=MULTISIG_LABEL)
        )
    return wallets


def create_chain(count: int, base_port: int = DEFAULT_BASE_PORT) -> ChainDescriptor:
    """
    Build the descriptor of a new `count`-node network (no I/O).

    Raises:
        PrivnetError(CONFIGURATION): If count is not 1, 4 or 7
    """
    ok, error = validate_node_count(count)
    if not ok:
        raise configuration_error(error)

    # Fail on bad ports before generating keys
    ports = [get_port_numbers(i, base_port) for i in range(count)]

    keypairs = [generate_keypair() for _ in range(count)]
    wallets = build_consensus_wallets(keypairs)

    nodes = [
        ConsensusNode(tcp_port=p.tcp, ws_port=p.ws, rpc_port=p.rpc, wallet=w)
        for p, w in zip(ports, wallets)
    ]
    return ChainDescriptor(magic=generate_magic(), consensus_nodes=nodes)


def create_network(
    count: int,
    output: Optional[Union[str, Path]] = None,
    base_port: int = DEFAULT_BASE_PORT,
) -> ChainDescriptor:
    """
    Create a private network and optionally persist its descriptor.

    Args:
        count: Number of consensus nodes (1, 4 or 7)
        output: Descriptor file to write; must not exist yet
        base_port: First port of the allocation range

    Returns:
        The new ChainDescriptor

    Raises:
        PrivnetError(CONFIGURATION): Invalid count
        PrivnetError(PRECONDITION): Output file already exists
    """
    ok, error = validate_node_count(count)
    if not ok:
        raise configuration_error(error)

    if output is not None and Path(output).exists():
        raise precondition_error(f"{output} already exists")

    chain = create_chain(count, base_port)

    if output is not None:
        save_chain(chain, output)
        logger.info(f"Created {count} node privatenet at {output}")
    else:
        logger.info(f"Created {count} node privatenet (magic {chain.magic})")

    return chain
