"""
Chain descriptor models.

A ChainDescriptor is the persisted description of one private network:
its magic value, the consensus nodes (ports + wallet) and any ad-hoc
wallets created afterwards. Models are pydantic so the descriptor file is
validated on load.
"""

from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, Field, model_validator

from privnet.core.chain.contract import (
    is_multisig_script,
    is_signature_script,
    parse_multisig_script,
    to_address,
)
from privnet.crypto import COMPRESSED_PUBLIC_KEY_SIZE, hex_to_bytes
from privnet.utils.validation import GENESIS, VALID_NODE_COUNTS, names_equal


MULTISIG_LABEL = "MultiSigContract"


class AccountContract(BaseModel):
    """Verification script of an account and the keys it names."""
    script: str  # hex
    threshold: int = Field(ge=1)
    public_keys: List[str]  # hex, compressed

    @property
    def script_bytes(self) -> bytes:
        return hex_to_bytes(self.script)


class Account(BaseModel):
    """
    One account inside a wallet.

    The account is multi-sig when its contract script has the multi-sig
    shape; nothing else marks it.
    """
    script_hash: str  # address derived from contract.script
    private_key: Optional[str] = None  # hex, unencrypted
    is_default: bool = False
    label: Optional[str] = None
    contract: AccountContract

    @model_validator(mode="after")
    def check_contract(self):
        script = self.contract.script_bytes
        if to_address(script) != self.script_hash:
            raise ValueError(f"Account {self.script_hash} does not match its contract script")

        parsed = parse_multisig_script(script)
        if parsed is None:
            if not is_signature_script(script):
                raise ValueError(f"Account {self.script_hash} has an unrecognized contract script")
            parsed = 1, [script[2:2 + COMPRESSED_PUBLIC_KEY_SIZE]]

        # Stored threshold and keys must restate the script
        threshold, keys = parsed
        if self.contract.threshold != threshold or self.contract.public_keys != [k.hex() for k in keys]:
            raise ValueError(f"Account {self.script_hash} threshold or public keys differ from its script")
        return self

    def is_multi_sig(self) -> bool:
        return is_multisig_script(self.contract.script_bytes)

    @property
    def threshold(self) -> int:
        return self.contract.threshold


class Wallet(BaseModel):
    """Named collection of accounts with exactly one default account."""
    name: str = Field(min_length=1)
    accounts: List[Account] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_default(self):
        defaults = sum(1 for a in self.accounts if a.is_default)
        if defaults != 1:
            raise ValueError(f"Wallet {self.name} must have exactly one default account, found {defaults}")
        return self

    @property
    def default_account(self) -> Account:
        return next(a for a in self.accounts if a.is_default)


class ConsensusNode(BaseModel):
    """One participant: its port triple and its wallet."""
    tcp_port: int = Field(ge=1, le=0xFFFF)
    ws_port: int = Field(ge=1, le=0xFFFF)
    rpc_port: int = Field(ge=1, le=0xFFFF)
    wallet: Wallet


class ChainDescriptor(BaseModel):
    """Aggregate model of one private network."""
    magic: int = Field(gt=0, le=0xFFFFFFFF)
    consensus_nodes: List[ConsensusNode]
    wallets: List[Wallet] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_structure(self):
        if len(self.consensus_nodes) not in VALID_NODE_COUNTS:
            raise ValueError(f"Invalid consensus node count {len(self.consensus_nodes)}")

        names: List[str] = []
        for wallet in self.all_wallets():
            if names_equal(wallet.name, GENESIS):
                raise ValueError(f"{wallet.name} is a reserved wallet name")
            if any(names_equal(wallet.name, n) for n in names):
                raise ValueError(f"Duplicate wallet name {wallet.name}")
            names.append(wallet.name)
        return self

    def all_wallets(self) -> List[Wallet]:
        return [n.wallet for n in self.consensus_nodes] + list(self.wallets)


# =============================================================================
# Persistence
# =============================================================================


def save_chain(chain: ChainDescriptor, path: Union[str, Path]):
    """Write the descriptor as indented JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(chain.model_dump_json(indent=2), encoding="utf-8")


def load_chain(path: Union[str, Path]) -> ChainDescriptor:
    """
    Read and validate a descriptor file.

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If the content is not a valid descriptor
    """
    return ChainDescriptor.model_validate_json(Path(path).read_text(encoding="utf-8"))
