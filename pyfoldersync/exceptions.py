"""Exceptions raised by pyfoldersync."""

from typing import Any, Optional


class FolderSyncError(Exception):
    """Base exception for all pyfoldersync errors."""


class FolderSyncConfigError(FolderSyncError):
    """Raised when the configuration file or a configuration value is invalid."""


class InvalidSizeExpression(FolderSyncError, ValueError):
    """Raised when a size expression such as a hash threshold cannot be parsed."""

    def __init__(self, expression: Any):
        self.expression = expression
        super().__init__(
            f"Invalid size expression: {expression!r} "
            "(expected e.g. '500MB', '2GB' or a byte count)"
        )


class RootNotFound(FolderSyncError):
    """Raised when a scan root does not exist or is not a directory."""

    def __init__(self, path: Any, reason: str = "does not exist"):
        self.path = path
        super().__init__(f"Directory {reason}: {path}")


class HashComputationFailure(FolderSyncError):
    """Raised when a file digest cannot be computed."""

    def __init__(self, path: Any, cause: Optional[BaseException] = None):
        self.path = path
        message = f"Failed to hash {path}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class CopyFailure(FolderSyncError):
    """Raised when a copy or directory creation fails during an apply pass.

    ``result`` holds what was already applied in the aborted pass, since
    nothing is rolled back.
    """

    def __init__(self, source: Any, target: Any, cause: Optional[BaseException] = None):
        self.source = source
        self.target = target
        self.result: Any = None
        message = f"Failed to copy {source} -> {target}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
