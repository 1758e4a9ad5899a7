"""Filesystem operations used by the sync applier and helper commands."""

import logging
import shutil
from pathlib import Path
from typing import Callable

from ..exceptions import CopyFailure

logger = logging.getLogger(__name__)

DUPLICATE_MARKER = "-duplicate"


def find_available_path(target: Path, candidate: Callable[[int], str]) -> Path:
    """Return the first candidate path that does not exist.

    Args:
        target: Desired path
        candidate: Maps an attempt number (0, 1, 2, ...) to a file name

    Returns:
        First unused path in the target's directory
    """
    attempt = 0
    while True:
        path = target.with_name(candidate(attempt))
        if not path.exists():
            return path
        attempt += 1


def duplicate_path(target: Path) -> Path:
    """Return a non-colliding duplicate name for target.

    ``name.ext`` becomes ``name-duplicate.ext``, then
    ``name-duplicate1.ext``, ``name-duplicate2.ext`` and so on.

    Examples:
        >>> duplicate_path(Path("/dst/photo.jpg"))  # doctest: +SKIP
        PosixPath('/dst/photo-duplicate.jpg')
    """
    stem, suffix = target.stem, target.suffix

    def name(attempt: int) -> str:
        counter = str(attempt) if attempt else ""
        return f"{stem}{DUPLICATE_MARKER}{counter}{suffix}"

    return find_available_path(target, name)


def unique_path(target: Path) -> Path:
    """Return target, or ``name (1).ext``, ``name (2).ext``... if taken."""
    if not target.exists():
        return target
    stem, suffix = target.stem, target.suffix
    return find_available_path(target, lambda n: f"{stem} ({n + 1}){suffix}")


def list_files(directory: Path) -> list[Path]:
    """List the top-level files of a directory, sorted by name."""
    return sorted(p for p in Path(directory).iterdir() if p.is_file())


def move_file(source: Path, target: Path) -> Path:
    """Move or rename a file, adding a `` (n)`` suffix on collision.

    Args:
        source: File to move
        target: Desired new path

    Returns:
        Path the file ended up at
    """
    if Path(source) == Path(target):
        return Path(target)
    final = unique_path(Path(target))
    final.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(source), str(final))
    logger.debug(f"Moved {source} -> {final}")
    return final


class SyncOperations:
    """Copy and directory operations for applying a sync pass."""

    def ensure_directory(self, directory: Path) -> bool:
        """Create a directory and its parents if missing.

        Args:
            directory: Directory to create

        Returns:
            True if the directory was created, False if it already existed

        Raises:
            CopyFailure: If the directory cannot be created
        """
        if directory.is_dir():
            return False
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CopyFailure(directory, directory, e) from e
        return True

    def copy_file(self, source: Path, target: Path) -> Path:
        """Copy a file, replacing the target if it exists.

        File contents and modification time are copied. The target's parent
        directory is created if needed.

        Args:
            source: File to copy
            target: Destination path

        Returns:
            Destination path

        Raises:
            CopyFailure: If the copy fails or target is a folder
        """
        if target.is_dir():
            raise CopyFailure(source, target, IsADirectoryError("target is a folder"))
        self.ensure_directory(target.parent)
        try:
            shutil.copy2(source, target)
        except OSError as e:
            raise CopyFailure(source, target, e) from e
        logger.debug(f"Copied {source} -> {target}")
        return target

    def copy_as_duplicate(self, source: Path, target: Path) -> Path:
        """Copy a file next to target under a duplicate name.

        Args:
            source: File to copy
            target: Path whose name is already taken

        Returns:
            Path of the duplicate that was written
        """
        self.ensure_directory(target.parent)
        return self.copy_file(source, duplicate_path(target))
