"""pyfoldersync - two-phase reconciling folder synchronizer."""

from .exceptions import (
    CopyFailure,
    FolderSyncConfigError,
    FolderSyncError,
    HashComputationFailure,
    InvalidSizeExpression,
    RootNotFound,
)
from .sync import FixedActions, ResolutionAction, SyncEngine, SyncSummary
from .utils import parse_size

__all__ = [
    "SyncEngine",
    "SyncSummary",
    "FixedActions",
    "ResolutionAction",
    "FolderSyncError",
    "FolderSyncConfigError",
    "InvalidSizeExpression",
    "RootNotFound",
    "HashComputationFailure",
    "CopyFailure",
    "parse_size",
]
