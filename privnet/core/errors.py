"""
Error taxonomy for privnet operations.

Every failure the engine itself detects is a PrivnetError tagged with an
ErrorKind; callers branch on `error.kind`. Disk, archive and transport
failures are not wrapped and propagate as the underlying exception.
"""

from enum import Enum, auto


class ErrorKind(Enum):
    """Category of an engine-detected failure."""
    CONFIGURATION = auto()       # bad node count/index, reserved or duplicate wallet name
    PRECONDITION = auto()        # archive or destination already exists, missing force
    INVALID_CHECKPOINT = auto()  # missing/malformed metadata, magic or account mismatch
    ALREADY_RUNNING = auto()     # runtime guard held by another process
    RPC = auto()                 # error response returned by a running node


INVALID_CHECKPOINT_MESSAGE = "Invalid checkpoint"


class PrivnetError(Exception):
    """Failure detected by a privnet operation."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"PrivnetError({self.kind.name}, {self.message!r})"


def configuration_error(message: str) -> PrivnetError:
    return PrivnetError(ErrorKind.CONFIGURATION, message)


def precondition_error(message: str) -> PrivnetError:
    return PrivnetError(ErrorKind.PRECONDITION, message)


def invalid_checkpoint() -> PrivnetError:
    # Same message for every cause; which field mismatched is never reported
    return PrivnetError(ErrorKind.INVALID_CHECKPOINT, INVALID_CHECKPOINT_MESSAGE)
