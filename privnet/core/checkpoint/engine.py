"""
Checkpoint Engine - create, validate and restore node snapshots.

A checkpoint is a zip archive holding a storage snapshot directory plus an
ADDRESS.privnet file with two lines: the network magic (decimal) and the
multi-sig address of the node. The metadata binds the snapshot to exactly
one network and one account, so it can never be restored elsewhere.

Creation:
- node running (runtime guard held): the node writes the archive itself,
  requested over RPC
- node stopped: the store is snapshotted directly into a temp directory,
  which is then archived

Restore extracts into a temp directory next to the node's data directory,
validates, strips the metadata and renames the directory into place. Temp
directories are removed on every exit path.

Only single-node networks can be checkpointed.
"""

import re
import shutil
import tempfile
import zipfile
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from privnet.core.chain.models import Account, ChainDescriptor, ConsensusNode
from privnet.core.chain.wallet import get_multisig_account, get_runtime_identity
from privnet.core.config import PrivnetConfig
from privnet.core.errors import configuration_error, invalid_checkpoint, precondition_error
from privnet.core.node.guard import NodeRuntimeGuard
from privnet.core.storage import SQLiteStorageBackend, StorageBackend
from privnet.network.rpc import ChainRpcClient
from privnet.utils.logger import get_logger
from privnet.utils.validation import validate_single_node

logger = get_logger("checkpoint")

ADDRESS_FILENAME = "ADDRESS.privnet"
CHECKPOINT_EXTENSION = ".privnet-checkpoint"

_DECIMAL = re.compile(r"[0-9]+")

PathLike = Union[str, Path]


class CheckpointMode(Enum):
    ONLINE = "online"
    OFFLINE = "offline"


@dataclass
class CheckpointResult:
    """Where a checkpoint was written and how it was taken."""
    path: Path
    mode: CheckpointMode


# =============================================================================
# Helpers
# =============================================================================


def resolve_checkpoint_path(name: Optional[str] = None, now: Optional[datetime] = None) -> Path:
    """
    Absolute checkpoint path for `name`.

    Defaults to a timestamp name; the checkpoint extension is appended when
    missing.
    """
    if not name:
        name = f"{(now or datetime.now()):%Y%m%d-%H%M%S}{CHECKPOINT_EXTENSION}"
    if not name.endswith(CHECKPOINT_EXTENSION):
        name += CHECKPOINT_EXTENSION
    return Path(name).expanduser().resolve()


def get_address_file_path(directory: PathLike) -> Path:
    return Path(directory) / ADDRESS_FILENAME


def write_checkpoint_metadata(directory: PathLike, magic: int, account: Account):
    """Write the two-line provenance file into `directory`."""
    path = get_address_file_path(directory)
    path.write_text(f"{magic}\n{account.script_hash}\n", encoding="utf-8")


def validate_checkpoint(directory: PathLike, magic: int, account: Account):
    """
    Check an extracted checkpoint belongs to (magic, account).

    Raises:
        PrivnetError(INVALID_CHECKPOINT): Metadata missing, malformed or
            naming another network/account. The message is the same for
            every cause.
    """
    path = get_address_file_path(directory)
    if not path.is_file():
        raise invalid_checkpoint()

    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except UnicodeDecodeError:
        raise invalid_checkpoint() from None

    if len(lines) != 2 or not _DECIMAL.fullmatch(lines[0]):
        raise invalid_checkpoint()

    if int(lines[0]) != magic or lines[1] != account.script_hash:
        raise invalid_checkpoint()


def create_archive(source_dir: PathLike, archive_path: PathLike):
    """
    Zip the contents of `source_dir` into a new file at `archive_path`.

    The archive is created exclusively; a partly written archive is
    removed if archiving fails.
    """
    source_dir = Path(source_dir)
    archive_path = Path(archive_path)

    with open(archive_path, "xb") as fh:
        try:
            with zipfile.ZipFile(fh, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                for path in sorted(source_dir.rglob("*")):
                    zf.write(path, path.relative_to(source_dir).as_posix())
        except BaseException:
            fh.close()
            archive_path.unlink()
            raise


def extract_checkpoint(archive_path: PathLike, dest_dir: PathLike, magic: int, account: Account):
    """Extract an archive into `dest_dir` and validate its metadata."""
    with zipfile.ZipFile(archive_path) as zf:
        zf.extractall(dest_dir)
    validate_checkpoint(dest_dir, magic, account)


def _remove_tree(path: Path):
    if path.exists():
        shutil.rmtree(path)


# =============================================================================
# Engine
# =============================================================================


class CheckpointEngine:
    """
    Checkpoint operations for the nodes of a chain.

    Args:
        config: Host configuration (data and lock directories, timeouts)
        storage: Storage backend used for offline snapshots
        rpc_client: Client used for online checkpoints
        guard: Runtime guard deciding online vs offline
    """

    def __init__(
        self,
        config: Optional[PrivnetConfig] = None,
        storage: Optional[StorageBackend] = None,
        rpc_client: Optional[ChainRpcClient] = None,
        guard: Optional[NodeRuntimeGuard] = None,
    ):
        self.config = config or PrivnetConfig()
        self.storage = storage or SQLiteStorageBackend()
        self.rpc_client = rpc_client or ChainRpcClient(timeout=self.config.rpc_timeout)
        self.guard = guard or NodeRuntimeGuard(
            self.config.lock_dir, acquire_timeout=self.config.guard_acquire_timeout
        )

    def node_path(self, chain: ChainDescriptor, index: int = 0) -> Path:
        return self.config.node_path(chain.magic, index)

    @staticmethod
    def _single_node(chain: ChainDescriptor, operation: str) -> ConsensusNode:
        ok, error = validate_single_node(chain, operation)
        if not ok:
            raise configuration_error(error)
        return chain.consensus_nodes[0]

    # =========================================================================
    # Create
    # =========================================================================

    def create_checkpoint(self, chain: ChainDescriptor, archive_path: PathLike) -> CheckpointResult:
        """
        Snapshot the single node of `chain` into `archive_path`.

        Raises:
            PrivnetError(PRECONDITION): Archive already exists
            PrivnetError(CONFIGURATION): Chain has more than one node
            RpcError: The running node rejected the request
        """
        archive_path = Path(archive_path).expanduser().resolve()
        if archive_path.exists():
            raise precondition_error(f"Checkpoint file {archive_path} already exists")

        node = self._single_node(chain, "create")
        account = get_multisig_account(node)

        identity = get_runtime_identity(chain, 0)
        if self.guard.probe(identity):
            uri = self.rpc_client.get_uri(chain, 0, host=self.config.rpc_host)
            self.rpc_client.create_checkpoint(uri, str(archive_path))
            logger.info(f"Created {archive_path.name} checkpoint online")
            return CheckpointResult(archive_path, CheckpointMode.ONLINE)

        # Hold the guard so the node cannot start mid-snapshot
        with self.guard.acquire(identity):
            store = self.storage.open(self.node_path(chain, 0))
            try:
                self.create_offline_checkpoint(store, archive_path, chain.magic, account)
            finally:
                self.storage.close(store)

        logger.info(f"Created {archive_path.name} checkpoint offline")
        return CheckpointResult(archive_path, CheckpointMode.OFFLINE)

    def create_offline_checkpoint(self, store, archive_path: PathLike, magic: int, account: Account):
        """Export `store`, stamp it with (magic, account) and archive it."""
        temp_dir = Path(tempfile.mkdtemp(prefix="privnet-checkpoint-"))
        logger.debug(f"Checkpoint staging directory {temp_dir}")
        try:
            self.storage.export_snapshot(store, temp_dir)
            write_checkpoint_metadata(temp_dir, magic, account)
            create_archive(temp_dir, archive_path)
        finally:
            _remove_tree(temp_dir)

    # =========================================================================
    # Restore
    # =========================================================================

    def restore_checkpoint(self, chain: ChainDescriptor, archive_path: PathLike, force: bool = False) -> Path:
        """
        Replace the node's data directory with the checkpoint contents.

        Args:
            chain: Single-node chain the checkpoint must belong to
            archive_path: Checkpoint archive
            force: Allow overwriting an existing data directory

        Returns:
            The restored data directory

        Raises:
            PrivnetError(CONFIGURATION): Chain has more than one node
            PrivnetError(PRECONDITION): Data directory exists and not force
            PrivnetError(INVALID_CHECKPOINT): Checkpoint from another
                network or account, or without valid metadata
            PrivnetError(ALREADY_RUNNING): The node is running
        """
        node = self._single_node(chain, "restore")
        data_path = self.node_path(chain, 0)

        if not force and data_path.exists():
            raise precondition_error(
                "You must specify force to restore a checkpoint to an existing blockchain."
            )

        account = get_multisig_account(node)
        with self.guard.acquire(get_runtime_identity(chain, 0)):
            data_path.parent.mkdir(parents=True, exist_ok=True)
            # Sibling of the data directory so the final move is a rename
            temp_dir = Path(tempfile.mkdtemp(prefix=f".{data_path.name}-restore-", dir=data_path.parent))
            logger.debug(f"Restore staging directory {temp_dir}")
            try:
                extract_checkpoint(archive_path, temp_dir, chain.magic, account)
                get_address_file_path(temp_dir).unlink()

                _remove_tree(data_path)
                temp_dir.rename(data_path)
            finally:
                _remove_tree(temp_dir)

        logger.info(f"Restored {Path(archive_path).name} to {data_path}")
        return data_path
