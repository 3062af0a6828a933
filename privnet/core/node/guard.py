"""
Node runtime guard - host-wide "is this node running" signal.

A running node holds an exclusive flock on `<lock_dir>/<identity>.lock`,
where the identity is the node's multi-sig address. The kernel drops the
lock when the holder's file descriptor closes, including on crash or kill,
so there is no heartbeat or timeout.

Probing takes a shared, non-blocking lock and drops it at once. It never
creates the lock file. A starting node retries its exclusive lock for
`acquire_timeout` seconds, so a probe racing with it cannot make the start
fail.
"""

import errno
import fcntl
import os
import time
from pathlib import Path
from typing import Optional, Union

from privnet.core.errors import ErrorKind, PrivnetError, configuration_error
from privnet.utils.logger import get_logger

logger = get_logger("guard")

RETRY_INTERVAL = 0.05


def _is_contended(exc: OSError) -> bool:
    return exc.errno in (errno.EAGAIN, errno.EACCES, errno.EWOULDBLOCK)


class GuardHandle:
    """Held runtime lock. Release it when the node stops."""

    def __init__(self, identity: str, path: Path, fd: int):
        self.identity = identity
        self.path = path
        self._fd: Optional[int] = fd

    @property
    def released(self) -> bool:
        return self._fd is None

    def release(self):
        if self._fd is None:
            return
        fd, self._fd = self._fd, None
        try:
            fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)
        logger.debug(f"Released runtime guard {self.identity}")

    def __enter__(self) -> "GuardHandle":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()


class NodeRuntimeGuard:
    """
    Cross-process liveness detector keyed by account address.

    Args:
        lock_dir: Directory holding the lock files (shared by every process
            on the host that should see each other)
        acquire_timeout: Seconds `acquire` keeps retrying a contended lock
    """

    def __init__(self, lock_dir: Union[str, Path], acquire_timeout: float = 0.5):
        self.lock_dir = Path(lock_dir)
        self.acquire_timeout = acquire_timeout

    def lock_path(self, identity: str) -> Path:
        if not identity or "/" in identity or identity in (".", ".."):
            raise configuration_error(f"Invalid guard identity {identity!r}")
        return self.lock_dir / f"{identity}.lock"

    def acquire(self, identity: str, timeout: Optional[float] = None) -> GuardHandle:
        """
        Take the runtime lock for `identity`.

        Raises:
            PrivnetError(ALREADY_RUNNING): Another holder kept the lock for
                the whole timeout
        """
        path = self.lock_path(identity)
        self.lock_dir.mkdir(parents=True, exist_ok=True)
        timeout = self.acquire_timeout if timeout is None else timeout
        deadline = time.monotonic() + timeout

        fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o644)
        try:
            while True:
                try:
                    fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
                    break
                except OSError as exc:
                    if not _is_contended(exc):
                        raise
                    if time.monotonic() >= deadline:
                        raise PrivnetError(
                            ErrorKind.ALREADY_RUNNING, f"Node {identity} is already running"
                        ) from exc
                    time.sleep(RETRY_INTERVAL)

            # Holder pid, for operators inspecting the lock directory
            os.ftruncate(fd, 0)
            os.write(fd, f"{os.getpid()}\n".encode())
        except BaseException:
            os.close(fd)
            raise

        logger.debug(f"Acquired runtime guard {identity} ({path})")
        return GuardHandle(identity, path, fd)

    def probe(self, identity: str) -> bool:
        """True while some process holds the runtime lock for `identity`."""
        path = self.lock_path(identity)
        try:
            fd = os.open(path, os.O_RDONLY)
        except FileNotFoundError:
            return False

        try:
            try:
                fcntl.flock(fd, fcntl.LOCK_SH | fcntl.LOCK_NB)
            except OSError as exc:
                if _is_contended(exc):
                    return True
                raise
            fcntl.flock(fd, fcntl.LOCK_UN)
            return False
        finally:
            os.close(fd)
