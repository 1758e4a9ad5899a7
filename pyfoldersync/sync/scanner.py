"""Directory scanning utilities for sync operations."""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

from ..exceptions import RootNotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalFile:
    """Represents a local file with metadata, as seen at scan time."""

    path: Path
    """Absolute path to the file"""

    relative_path: str
    """Relative path (using forward slashes for cross-platform compatibility)"""

    size: int
    """File size in bytes"""

    mtime: float
    """Last modification time (Unix timestamp)"""

    content_hash: Optional[str] = None
    """Hex SHA-256 digest, filled in lazily with with_hash()"""

    @classmethod
    def from_path(cls, file_path: Path, base_path: Path) -> "LocalFile":
        """Create LocalFile from a path.

        Args:
            file_path: Absolute path to the file
            base_path: Base path for calculating relative paths

        Returns:
            LocalFile instance
        """
        stat = file_path.stat()
        # Use as_posix() to ensure forward slashes on all platforms
        relative_path = file_path.relative_to(base_path).as_posix()

        return cls(
            path=file_path,
            relative_path=relative_path,
            size=stat.st_size,
            mtime=stat.st_mtime,
        )

    def with_hash(self, content_hash: str) -> "LocalFile":
        """Return a copy of this entry carrying a content hash."""
        return replace(self, content_hash=content_hash)


@dataclass(frozen=True)
class ScanResult:
    """Files and directories found below a scan root."""

    files: list[LocalFile] = field(default_factory=list)
    directories: list[str] = field(default_factory=list)

    def file_map(self) -> dict[str, LocalFile]:
        """Map relative path to file entry."""
        return {f.relative_path: f for f in self.files}


class DirectoryScanner:
    """Recursively scans a directory tree.

    Symlinked directories are never followed, so link cycles cannot occur.
    Symlinks pointing at files are reported as files with their target's
    metadata.

    Examples:
        >>> scanner = DirectoryScanner()
        >>> result = scanner.scan(Path("/photos"))
        >>> for f in result.files:
        ...     print(f.relative_path, f.size)
    """

    def scan(self, root: Path) -> ScanResult:
        """Scan a directory tree.

        Args:
            root: Directory to scan

        Returns:
            ScanResult with files and directories sorted by relative path

        Raises:
            RootNotFound: If root does not exist or is not a directory
        """
        root = Path(root)
        if not root.exists():
            raise RootNotFound(root)
        if not root.is_dir():
            raise RootNotFound(root, reason="is not a directory")

        files: list[LocalFile] = []
        directories: list[str] = []
        self._scan_directory(root, root, files, directories)

        files.sort(key=lambda f: f.relative_path)
        directories.sort()
        logger.debug(
            f"Scanned {root}: {len(files)} file(s), {len(directories)} folder(s)"
        )
        return ScanResult(files=files, directories=directories)

    def _scan_directory(
        self,
        directory: Path,
        base_path: Path,
        files: list[LocalFile],
        directories: list[str],
    ) -> None:
        try:
            items = sorted(directory.iterdir())
        except PermissionError as e:
            # Skip directories we can't read
            logger.warning(f"Permission denied, skipping {directory}: {e}")
            return

        for item in items:
            if item.is_symlink() and item.is_dir():
                logger.debug(f"Not following directory symlink: {item}")
                continue

            if item.is_file():
                try:
                    files.append(LocalFile.from_path(item, base_path))
                except OSError as e:
                    # File vanished or became unreadable between listing and stat
                    logger.warning(f"Cannot stat {item}, skipping: {e}")
            elif item.is_dir():
                directories.append(item.relative_to(base_path).as_posix())
                self._scan_directory(item, base_path, files, directories)

    def scan_directories(self, root: Path) -> list[str]:
        """Return only the relative directory paths below root."""
        return self.scan(root).directories
