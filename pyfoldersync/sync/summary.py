"""Result values for sync passes."""

from dataclasses import dataclass, replace

from .comparator import SyncDirection


@dataclass(frozen=True)
class ApplyResult:
    """What a single apply pass changed."""

    folders_created: int = 0
    files_applied: int = 0

    def added(self, folders: int = 0, files: int = 0) -> "ApplyResult":
        """Return a new result with the given counts added."""
        return ApplyResult(
            folders_created=self.folders_created + folders,
            files_applied=self.files_applied + files,
        )


@dataclass(frozen=True)
class SyncSummary:
    """Counters for one two-phase sync invocation."""

    forward_folders_created: int = 0
    forward_files_applied: int = 0
    reverse_folders_created: int = 0
    reverse_files_applied: int = 0

    def merged_with(
        self, direction: SyncDirection, result: ApplyResult
    ) -> "SyncSummary":
        """Return a new summary including the result of one phase.

        Args:
            direction: Phase the result belongs to
            result: Counts applied in that phase

        Returns:
            Updated summary
        """
        if direction is SyncDirection.FORWARD:
            return replace(
                self,
                forward_folders_created=self.forward_folders_created
                + result.folders_created,
                forward_files_applied=self.forward_files_applied
                + result.files_applied,
            )
        return replace(
            self,
            reverse_folders_created=self.reverse_folders_created
            + result.folders_created,
            reverse_files_applied=self.reverse_files_applied + result.files_applied,
        )

    @property
    def total_changes(self) -> int:
        return (
            self.forward_folders_created
            + self.forward_files_applied
            + self.reverse_folders_created
            + self.reverse_files_applied
        )

    def to_dict(self) -> dict:
        """Convert summary to a dictionary for JSON output."""
        return {
            "forward_folders_created": self.forward_folders_created,
            "forward_files_applied": self.forward_files_applied,
            "reverse_folders_created": self.reverse_folders_created,
            "reverse_files_applied": self.reverse_files_applied,
        }
