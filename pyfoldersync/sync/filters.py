"""Extension based include/exclude filtering."""

from collections.abc import Iterable
from pathlib import PurePosixPath
from typing import Optional, TypeVar

from .scanner import LocalFile

F = TypeVar("F", bound=LocalFile)


def normalize_extension(extension: str) -> str:
    """Normalize an extension to lower-case with a leading dot.

    Examples:
        >>> normalize_extension("JPG")
        '.jpg'
        >>> normalize_extension("*.Png")
        '.png'
    """
    ext = extension.strip().lower()
    if ext.startswith("*"):
        ext = ext[1:]
    if ext and not ext.startswith("."):
        ext = "." + ext
    return ext


def normalize_extensions(extensions: Optional[Iterable[str]]) -> frozenset[str]:
    """Normalize a collection of extensions, dropping empty entries."""
    if not extensions:
        return frozenset()
    normalized = (normalize_extension(ext) for ext in extensions)
    return frozenset(ext for ext in normalized if ext)


def file_extension(relative_path: str) -> str:
    """Return the lower-cased extension of a path ('' if none)."""
    return PurePosixPath(relative_path).suffix.lower()


def filter_by_extension(
    files: list[F],
    include: Optional[Iterable[str]] = None,
    exclude: Optional[Iterable[str]] = None,
) -> list[F]:
    """Filter files by extension.

    If ``include`` is non-empty, only files with one of those extensions
    pass. ``exclude`` is applied afterwards and removes matching files.
    Order is preserved.

    Args:
        files: Files to filter
        include: Extensions to keep (empty keeps everything)
        exclude: Extensions to drop

    Returns:
        Filtered list of files
    """
    include_set = normalize_extensions(include)
    exclude_set = normalize_extensions(exclude)

    if not include_set and not exclude_set:
        return list(files)

    result = []
    for f in files:
        ext = file_extension(f.relative_path)
        if include_set and ext not in include_set:
            continue
        if ext in exclude_set:
            continue
        result.append(f)
    return result
