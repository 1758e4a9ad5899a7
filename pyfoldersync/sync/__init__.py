"""Sync engine for pyfoldersync - two-phase folder reconciliation."""

from .applier import ResolutionAction, SyncApplier
from .comparator import DeltaRow, FileComparator, RowClass, SyncDirection
from .engine import SyncEngine, SyncPhase
from .filters import filter_by_extension, normalize_extensions
from .hashing import compute_file_hash
from .operations import (
    SyncOperations,
    duplicate_path,
    list_files,
    move_file,
    unique_path,
)
from .prompts import ActionChooser, FixedActions, InteractivePrompt, parse_action
from .scanner import DirectoryScanner, LocalFile, ScanResult
from .summary import ApplyResult, SyncSummary

__all__ = [
    "SyncEngine",
    "SyncPhase",
    "SyncApplier",
    "ResolutionAction",
    "FileComparator",
    "DeltaRow",
    "RowClass",
    "SyncDirection",
    "DirectoryScanner",
    "LocalFile",
    "ScanResult",
    "SyncOperations",
    "ActionChooser",
    "FixedActions",
    "InteractivePrompt",
    "parse_action",
    "ApplyResult",
    "SyncSummary",
    "compute_file_hash",
    "filter_by_extension",
    "normalize_extensions",
    "duplicate_path",
    "unique_path",
    "list_files",
    "move_file",
]
