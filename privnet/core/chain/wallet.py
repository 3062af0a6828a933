"""
Wallet and account construction.

Accounts come in two shapes:
- single-sig: one keypair, a signature verification script
- multi-sig: a threshold script over the consensus nodes' public keys,
  stored in each node's wallet together with that node's own key
"""

from typing import List, Optional, Sequence

from privnet.core.chain.contract import (
    create_multisig_redeem_script,
    create_signature_redeem_script,
    sort_public_keys,
    to_address,
)
from privnet.core.chain.models import (
    GENESIS,
    Account,
    AccountContract,
    ChainDescriptor,
    ConsensusNode,
    Wallet,
    names_equal,
)
from privnet.core.errors import configuration_error
from privnet.crypto import KeyPair, generate_keypair
from privnet.utils.logger import get_logger
from privnet.utils.validation import validate_wallet_name

logger = get_logger("chain.wallet")


def create_account(
    keypair: KeyPair,
    is_default: bool = False,
    label: Optional[str] = None,
) -> Account:
    """Single-signature account for `keypair`."""
    public_key = keypair.compressed_public_key
    script = create_signature_redeem_script(public_key)
    return Account(
        script_hash=to_address(script),
        private_key=keypair.private_key_hex,
        is_default=is_default,
        label=label,
        contract=AccountContract(
            script=script.hex(),
            threshold=1,
            public_keys=[public_key.hex()],
        ),
    )


def create_multisig_account(
    keypair: KeyPair,
    threshold: int,
    public_keys: Sequence[bytes],
    label: Optional[str] = None,
) -> Account:
    """
    Multi-signature account held by the owner of `keypair`.

    The script depends only on (threshold, public key set); the keypair is
    the holder's share used for signing.
    """
    script = create_multisig_redeem_script(threshold, public_keys)
    return Account(
        script_hash=to_address(script),
        private_key=keypair.private_key_hex,
        is_default=False,
        label=label,
        contract=AccountContract(
            script=script.hex(),
            threshold=threshold,
            public_keys=[k.hex() for k in sort_public_keys(public_keys)],
        ),
    )


def new_wallet(name: str, keypair: Optional[KeyPair] = None) -> Wallet:
    """Wallet holding one default single-sig account."""
    keypair = keypair or generate_keypair()
    return Wallet(name=name, accounts=[create_account(keypair, is_default=True)])


def create_wallet(chain: ChainDescriptor, name: str) -> Wallet:
    """
    Create an ad-hoc wallet for `chain`.

    The descriptor is not modified; the caller decides whether to add the
    wallet and persist it.

    Raises:
        PrivnetError(CONFIGURATION): If the name is reserved (genesis or a
            consensus node wallet) or already used, case-insensitively
    """
    ok, error = validate_wallet_name(chain, name)
    if not ok:
        raise configuration_error(error)

    wallet = new_wallet(name)
    logger.info(f"Created wallet {name} ({wallet.default_account.script_hash})")
    return wallet


# =============================================================================
# Lookup
# =============================================================================


def get_multisig_account(node: ConsensusNode) -> Account:
    """
    The node's multi-sig account.

    Raises:
        PrivnetError(CONFIGURATION): If the node wallet does not hold
            exactly one multi-sig account
    """
    accounts: List[Account] = [a for a in node.wallet.accounts if a.is_multi_sig()]
    if len(accounts) != 1:
        raise configuration_error(
            f"Wallet {node.wallet.name} must hold exactly one multi-sig account, found {len(accounts)}"
        )
    return accounts[0]


def get_account(chain: ChainDescriptor, name: str) -> Optional[Account]:
    """
    Resolve an account by wallet name.

    Ad-hoc wallets win over node wallets; "genesis" names the consensus
    multi-sig account.
    """
    for wallet in chain.wallets:
        if names_equal(name, wallet.name):
            return wallet.default_account

    for node in chain.consensus_nodes:
        if names_equal(name, node.wallet.name):
            return node.wallet.default_account

    if names_equal(name, GENESIS):
        return get_multisig_account(chain.consensus_nodes[0])

    return None


def get_runtime_identity(chain: ChainDescriptor, index: int) -> str:
    """
    Runtime guard key of consensus node `index`.

    The multi-sig address itself for a single-node chain. Nodes of a larger
    chain share that address, so their index is appended.
    """
    address = get_multisig_account(chain.consensus_nodes[index]).script_hash
    if len(chain.consensus_nodes) == 1:
        return address
    return f"{address}-{index}"
