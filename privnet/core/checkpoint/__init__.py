"""Checkpoint creation, validation and restore"""
from privnet.core.checkpoint.engine import (
    ADDRESS_FILENAME,
    CHECKPOINT_EXTENSION,
    CheckpointEngine,
    CheckpointMode,
    CheckpointResult,
    create_archive,
    extract_checkpoint,
    resolve_checkpoint_path,
    validate_checkpoint,
    write_checkpoint_metadata,
)

__all__ = [
    "ADDRESS_FILENAME",
    "CHECKPOINT_EXTENSION",
    "CheckpointEngine",
    "CheckpointMode",
    "CheckpointResult",
    "create_archive",
    "extract_checkpoint",
    "resolve_checkpoint_path",
    "validate_checkpoint",
    "write_checkpoint_metadata",
]
