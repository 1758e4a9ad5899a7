"""File comparison logic for sync operations."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from ..utils import DEFAULT_HASH_THRESHOLD, hash_suffix, parse_size, truncate_mtime
from .filters import filter_by_extension
from .hashing import compute_file_hash
from .scanner import DirectoryScanner, LocalFile, ScanResult

logger = logging.getLogger(__name__)


class SyncDirection(str, Enum):
    """Direction of a sync pass."""

    FORWARD = "forward"
    """Source to destination"""

    REVERSE = "reverse"
    """Destination back to source"""

    @property
    def arrow(self) -> str:
        return "->" if self is SyncDirection.FORWARD else "<-"


class RowClass(str, Enum):
    """Classification of a delta row."""

    COPY = "copy"
    """Target side has nothing at this path"""

    CONFLICT = "conflict"
    """Target side has a differing file, or a folder, at this path"""


REASON_MISSING_AT_DESTINATION = "Does not exist at destination"
REASON_MISSING_AT_SOURCE = "Does not exist at source"
REASON_FOLDER_AT_DESTINATION = "Folder exists at destination"
REASON_FOLDER_AT_SOURCE = "Folder exists at source"
REASON_HASHES_DIFFER = "Hashes differ"
REASON_SIZE_TIME_DIFFER = "Size/timestamp differ"
LARGE_FILE_NOTE = " (large file: hash skipped)"


@dataclass(frozen=True)
class DeltaRow:
    """One file-level difference between the from and to side of a pass.

    ``source_*`` fields describe the from side and ``dest_*`` fields the to
    side of the pass that produced the row.
    """

    relative_path: str
    source_path: Path
    dest_path: Path
    source_size: int
    source_time: float
    reason: str
    classification: RowClass
    direction: SyncDirection = SyncDirection.FORWARD
    source_hash_suffix: str = ""
    dest_size: Optional[int] = None
    dest_time: Optional[float] = None
    dest_hash_suffix: str = ""

    @property
    def is_orphan(self) -> bool:
        """True if nothing exists at this path on the to side."""
        return self.classification is RowClass.COPY


class FileComparator:
    """Computes folder and file deltas between two directory trees.

    Files up to ``hash_threshold`` bytes (inclusive) are compared by SHA-256
    when ``check_hash`` is enabled; larger files, or all files when hashing
    is disabled, are compared by size and whole-second modification time.
    """

    def __init__(
        self,
        check_hash: bool = True,
        hash_threshold: int = parse_size(DEFAULT_HASH_THRESHOLD),
        include: Optional[Iterable[str]] = None,
        exclude: Optional[Iterable[str]] = None,
        scanner: Optional[DirectoryScanner] = None,
    ):
        """Initialize file comparator.

        Args:
            check_hash: Compare contents by hash when files are small enough
            hash_threshold: Largest file size (bytes) that is still hashed
            include: Extensions that participate (empty means all)
            exclude: Extensions that never participate
            scanner: Directory scanner to use
        """
        self.check_hash = check_hash
        self.hash_threshold = hash_threshold
        self.include = list(include or [])
        self.exclude = list(exclude or [])
        self.scanner = scanner or DirectoryScanner()

    def should_hash(self, size: int) -> bool:
        """Whether a file of this size is compared by content hash."""
        return self.check_hash and size <= self.hash_threshold

    def compute_delta(
        self,
        from_root: Path,
        to_root: Path,
        direction: SyncDirection = SyncDirection.FORWARD,
    ) -> tuple[list[str], list[DeltaRow]]:
        """Compute folder and file delta of one pass, scanning each tree once.

        Args:
            from_root: Tree being synced from
            to_root: Tree being synced to (may not exist yet)
            direction: Which pass this is; selects the reason texts

        Returns:
            (missing folders, delta rows)

        Raises:
            RootNotFound: If from_root is missing
            HashComputationFailure: If a file cannot be hashed
        """
        from_scan, to_scan = self._scan_pair(from_root, to_root)
        return (
            self._folder_delta(from_scan, to_scan),
            self._file_delta(from_scan, to_scan, Path(to_root), direction),
        )

    def compute_folder_delta(self, from_root: Path, to_root: Path) -> list[str]:
        """List directories under from_root that are missing under to_root.

        Args:
            from_root: Tree being synced from
            to_root: Tree being synced to (may not exist yet)

        Returns:
            Relative directory paths, parents before children
        """
        return self._folder_delta(*self._scan_pair(from_root, to_root))

    def compute_file_delta(
        self,
        from_root: Path,
        to_root: Path,
        direction: SyncDirection = SyncDirection.FORWARD,
    ) -> list[DeltaRow]:
        """Compute the file differences of one sync pass.

        Returns:
            Delta rows sorted by relative path

        Raises:
            RootNotFound: If from_root is missing
            HashComputationFailure: If a file cannot be hashed
        """
        from_scan, to_scan = self._scan_pair(from_root, to_root)
        return self._file_delta(from_scan, to_scan, Path(to_root), direction)

    def _scan_pair(
        self, from_root: Path, to_root: Path
    ) -> tuple[ScanResult, ScanResult]:
        from_scan = self.scanner.scan(from_root)
        if Path(to_root).is_dir():
            to_scan = self.scanner.scan(to_root)
        else:
            to_scan = ScanResult()
        return from_scan, to_scan

    def _folder_delta(self, from_scan: ScanResult, to_scan: ScanResult) -> list[str]:
        to_dirs = set(to_scan.directories)
        return [d for d in from_scan.directories if d not in to_dirs]

    def _file_delta(
        self,
        from_scan: ScanResult,
        to_scan: ScanResult,
        to_root: Path,
        direction: SyncDirection,
    ) -> list[DeltaRow]:
        from_files = filter_by_extension(from_scan.files, self.include, self.exclude)
        to_map = to_scan.file_map()
        to_dirs = set(to_scan.directories)

        rows: list[DeltaRow] = []
        for from_file in from_files:
            to_file = to_map.get(from_file.relative_path)
            if from_file.relative_path in to_dirs:
                row: Optional[DeltaRow] = self._handle_folder_clash(
                    from_file, to_root, direction
                )
            elif to_file is None:
                row = self._handle_missing(from_file, to_root, direction)
            else:
                row = self._compare_existing_files(from_file, to_file, direction)
            if row is not None:
                rows.append(row)

        logger.debug(f"{direction.value} delta -> {to_root}: {len(rows)} row(s)")
        return rows

    def _handle_folder_clash(
        self, from_file: LocalFile, to_root: Path, direction: SyncDirection
    ) -> DeltaRow:
        """Handle a file whose path is a folder on the to side."""
        logger.warning(
            f"{from_file.relative_path} is a file on one side and a folder "
            "on the other"
        )
        if direction is SyncDirection.FORWARD:
            reason = REASON_FOLDER_AT_DESTINATION
        else:
            reason = REASON_FOLDER_AT_SOURCE

        return DeltaRow(
            relative_path=from_file.relative_path,
            source_path=from_file.path,
            dest_path=to_root / from_file.relative_path,
            source_size=from_file.size,
            source_time=from_file.mtime,
            reason=reason,
            classification=RowClass.CONFLICT,
            direction=direction,
        )

    def _handle_missing(
        self, from_file: LocalFile, to_root: Path, direction: SyncDirection
    ) -> DeltaRow:
        """Handle a file that only exists on the from side."""
        if self.should_hash(from_file.size):
            from_file = from_file.with_hash(compute_file_hash(from_file.path))

        if direction is SyncDirection.FORWARD:
            reason = REASON_MISSING_AT_DESTINATION
        else:
            reason = REASON_MISSING_AT_SOURCE

        return DeltaRow(
            relative_path=from_file.relative_path,
            source_path=from_file.path,
            dest_path=to_root / from_file.relative_path,
            source_size=from_file.size,
            source_time=from_file.mtime,
            source_hash_suffix=hash_suffix(from_file.content_hash),
            reason=reason,
            classification=RowClass.COPY,
            direction=direction,
        )

    def _compare_existing_files(
        self, from_file: LocalFile, to_file: LocalFile, direction: SyncDirection
    ) -> Optional[DeltaRow]:
        """Compare files that exist on both sides; None if identical."""
        if self.should_hash(from_file.size) and self.should_hash(to_file.size):
            from_file = from_file.with_hash(compute_file_hash(from_file.path))
            to_file = to_file.with_hash(compute_file_hash(to_file.path))
            if from_file.content_hash == to_file.content_hash:
                return None
            reason = REASON_HASHES_DIFFER
        else:
            if from_file.size == to_file.size and truncate_mtime(
                from_file.mtime
            ) == truncate_mtime(to_file.mtime):
                return None
            reason = REASON_SIZE_TIME_DIFFER
            if self.check_hash:
                logger.debug(
                    f"Hash skipped for {from_file.relative_path} "
                    f"({from_file.size} / {to_file.size} bytes)"
                )
                reason += LARGE_FILE_NOTE

        return DeltaRow(
            relative_path=from_file.relative_path,
            source_path=from_file.path,
            dest_path=to_file.path,
            source_size=from_file.size,
            source_time=from_file.mtime,
            source_hash_suffix=hash_suffix(from_file.content_hash),
            dest_size=to_file.size,
            dest_time=to_file.mtime,
            dest_hash_suffix=hash_suffix(to_file.content_hash),
            reason=reason,
            classification=RowClass.CONFLICT,
            direction=direction,
        )
