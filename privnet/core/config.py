"""
Host configuration parameters for privnet.

Defines where node data and guard lock files live, the port range used for
new networks, and the timeouts used when talking to a running node.
"""

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv


DEFAULT_BASE_PORT = 49152  # First port of the IANA dynamic/private range


def _default_lock_dir() -> Path:
    return Path(tempfile.gettempdir()) / "privnet-locks"


@dataclass
class PrivnetConfig:
    """Host-wide configuration parameters"""

    # Paths
    data_dir: Path = Path("~/.privnet")
    lock_dir: Path = field(default_factory=_default_lock_dir)

    # Network topology
    base_port: int = DEFAULT_BASE_PORT
    rpc_host: str = "127.0.0.1"

    # Timeouts (seconds)
    rpc_timeout: float = 30.0
    guard_acquire_timeout: float = 0.5

    def __post_init__(self):
        """Normalize paths"""
        self.data_dir = Path(self.data_dir).expanduser()
        self.lock_dir = Path(self.lock_dir).expanduser()

    @property
    def nodes_dir(self) -> Path:
        return self.data_dir / "blockchain-nodes"

    def node_path(self, magic: int, index: int) -> Path:
        """Data directory of consensus node `index` of network `magic`."""
        return self.nodes_dir / str(magic) / f"node{index}"


def load_config(env_file: Optional[str] = None) -> PrivnetConfig:
    """
    Load configuration from the environment.

    Values from a .env file (if present) are loaded first; variables already
    set in the process environment take precedence.

    Args:
        env_file: Optional path to a .env file

    Returns:
        PrivnetConfig instance
    """
    load_dotenv(env_file or find_dotenv(usecwd=True))

    config = PrivnetConfig()
    if "PRIVNET_DATA_DIR" in os.environ:
        config.data_dir = Path(os.environ["PRIVNET_DATA_DIR"]).expanduser()
    if "PRIVNET_LOCK_DIR" in os.environ:
        config.lock_dir = Path(os.environ["PRIVNET_LOCK_DIR"]).expanduser()
    if "PRIVNET_BASE_PORT" in os.environ:
        config.base_port = int(os.environ["PRIVNET_BASE_PORT"])
    if "PRIVNET_RPC_TIMEOUT" in os.environ:
        config.rpc_timeout = float(os.environ["PRIVNET_RPC_TIMEOUT"])

    return config
