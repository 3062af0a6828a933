"""
Node lifecycle around an external runtime.

The runtime (consensus, VM, P2P) is not part of privnet; it is anything
with an async `run(chain, node, store, cancel)` that returns once `cancel`
is set. These functions own everything around it: data directory, runtime
guard, storage handle and cleanup, in that order of acquisition and the
reverse order of release.
"""

import asyncio
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Protocol, Union

from privnet.core.chain.models import ChainDescriptor, ConsensusNode
from privnet.core.chain.wallet import get_multisig_account, get_runtime_identity
from privnet.core.checkpoint.engine import extract_checkpoint
from privnet.core.config import PrivnetConfig
from privnet.core.errors import ErrorKind, PrivnetError, configuration_error, precondition_error
from privnet.core.node.guard import NodeRuntimeGuard
from privnet.core.storage import NodeStore, SQLiteStorageBackend, StorageBackend
from privnet.utils.logger import get_logger
from privnet.utils.validation import validate_node_index, validate_single_node

logger = get_logger("node")


class NodeRuntime(Protocol):
    """External node implementation driven by the runner."""

    async def run(
        self,
        chain: ChainDescriptor,
        node: ConsensusNode,
        store: NodeStore,
        cancel: asyncio.Event,
    ) -> None:
        ...


class NodeRunner:
    """
    Runs, resets and restores consensus nodes of a chain on this host.

    Args:
        config: Host configuration
        storage: Storage backend handed to the runtime
        guard: Runtime guard advertising that a node is up
    """

    def __init__(
        self,
        config: Optional[PrivnetConfig] = None,
        storage: Optional[StorageBackend] = None,
        guard: Optional[NodeRuntimeGuard] = None,
    ):
        self.config = config or PrivnetConfig()
        self.storage = storage or SQLiteStorageBackend()
        self.guard = guard or NodeRuntimeGuard(
            self.config.lock_dir, acquire_timeout=self.config.guard_acquire_timeout
        )

    def _node(self, chain: ChainDescriptor, index: int) -> ConsensusNode:
        ok, error = validate_node_index(chain, index)
        if not ok:
            raise configuration_error(error)
        return chain.consensus_nodes[index]

    def node_path(self, chain: ChainDescriptor, index: int) -> Path:
        return self.config.node_path(chain.magic, index)

    def is_running(self, chain: ChainDescriptor, index: int) -> bool:
        self._node(chain, index)
        return self.guard.probe(get_runtime_identity(chain, index))

    async def _run_on(
        self,
        chain: ChainDescriptor,
        index: int,
        path: Path,
        runtime: NodeRuntime,
        cancel: asyncio.Event,
    ):
        # Guard and store are released even when the runtime is cancelled
        node = chain.consensus_nodes[index]
        with self.guard.acquire(get_runtime_identity(chain, index)):
            store = self.storage.open(path)
            try:
                logger.info(f"Node {node.wallet.name} running from {path}")
                await runtime.run(chain, node, store, cancel)
            finally:
                self.storage.close(store)
                logger.info(f"Node {node.wallet.name} stopped")

    async def run_node(
        self,
        chain: ChainDescriptor,
        index: int,
        runtime: NodeRuntime,
        cancel: asyncio.Event,
        discard: bool = False,
    ):
        """
        Run consensus node `index` until `cancel` is set.

        Args:
            discard: Run against a throwaway copy of the data directory, so
                nothing the node writes is kept

        Raises:
            PrivnetError(CONFIGURATION): Invalid node index
            PrivnetError(ALREADY_RUNNING): The node is already running
        """
        self._node(chain, index)
        path = self.node_path(chain, index)
        path.mkdir(parents=True, exist_ok=True)

        if not discard:
            await self._run_on(chain, index, path, runtime, cancel)
            return

        temp_root = Path(tempfile.mkdtemp(prefix="privnet-discard-"))
        try:
            work_path = temp_root / path.name
            shutil.copytree(path, work_path)
            await self._run_on(chain, index, work_path, runtime, cancel)
        finally:
            shutil.rmtree(temp_root)

    async def run_checkpoint(
        self,
        chain: ChainDescriptor,
        archive_path: Union[str, Path],
        runtime: NodeRuntime,
        cancel: asyncio.Event,
    ):
        """
        Run the single node of `chain` from a checkpoint without restoring it.

        The checkpoint is extracted and validated into a temp directory that
        is removed when the node stops.
        """
        ok, error = validate_single_node(chain, "run")
        if not ok:
            raise configuration_error(error)
        node = chain.consensus_nodes[0]
        account = get_multisig_account(node)

        temp_dir = Path(tempfile.mkdtemp(prefix="privnet-run-checkpoint-"))
        try:
            extract_checkpoint(archive_path, temp_dir, chain.magic, account)
            await self._run_on(chain, 0, temp_dir, runtime, cancel)
        finally:
            shutil.rmtree(temp_dir)

    def reset_node(self, chain: ChainDescriptor, index: int, force: bool = False) -> bool:
        """
        Delete the data directory of node `index`.

        Returns:
            True if a directory was removed

        Raises:
            PrivnetError(ALREADY_RUNNING): The node is running
            PrivnetError(PRECONDITION): Data exists and force was not given
        """
        node = self._node(chain, index)
        path = self.node_path(chain, index)
        if not path.exists():
            return False
        if not force:
            raise precondition_error(f"Node {node.wallet.name} has data; specify force to reset it")

        try:
            handle = self.guard.acquire(get_runtime_identity(chain, index))
        except PrivnetError as err:
            if err.kind is ErrorKind.ALREADY_RUNNING:
                raise PrivnetError(
                    ErrorKind.ALREADY_RUNNING, f"Cannot reset node {node.wallet.name} while it is running"
                ) from err
            raise

        with handle:
            shutil.rmtree(path)
        logger.info(f"Reset node {node.wallet.name} ({path})")
        return True
