"""Applying a resolution action to the rows of a sync pass."""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

from ..exceptions import CopyFailure
from ..output import OutputFormatter
from .comparator import DeltaRow, SyncDirection
from .operations import SyncOperations
from .summary import ApplyResult

logger = logging.getLogger(__name__)


class ResolutionAction(str, Enum):
    """Action chosen by the operator for one sync phase."""

    COPY = "c"
    """Copy new files only; conflicts are left alone"""

    OVERWRITE = "o"
    """Copy new files and overwrite conflicting ones (forward only)"""

    DUPLICATE = "d"
    """Copy new files; write conflicting ones under a duplicate name"""

    SKIP = "s"
    """Do nothing"""

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def allowed_for(cls, direction: SyncDirection) -> list["ResolutionAction"]:
        """Actions offered for a phase; the reverse phase never overwrites."""
        if direction is SyncDirection.FORWARD:
            return [cls.COPY, cls.OVERWRITE, cls.DUPLICATE, cls.SKIP]
        return [cls.COPY, cls.DUPLICATE, cls.SKIP]


class SyncApplier:
    """Executes a resolution action against a delta table."""

    def __init__(
        self,
        output: Optional[OutputFormatter] = None,
        operations: Optional[SyncOperations] = None,
    ):
        """Initialize applier.

        Args:
            output: Output formatter for per-action log lines
            operations: Filesystem operations to use
        """
        self.output = output or OutputFormatter()
        self.operations = operations or SyncOperations()

    def apply(
        self,
        rows: list[DeltaRow],
        folders: list[str],
        from_root: Path,
        to_root: Path,
        direction: SyncDirection,
        action: ResolutionAction,
    ) -> ApplyResult:
        """Apply an action to one pass.

        Args:
            rows: Delta rows of the pass
            folders: Relative folders missing on the to side
            from_root: Tree being synced from
            to_root: Tree being synced to
            direction: Pass direction
            action: Operator-chosen action

        Returns:
            Counts of folders created and files copied

        Raises:
            ValueError: If OVERWRITE is requested for the reverse pass
            CopyFailure: If a copy fails; ``result`` holds the partial counts
        """
        if action not in ResolutionAction.allowed_for(direction):
            raise ValueError(
                f"Action {action.label} is not allowed for the {direction.value} pass"
            )

        if action is ResolutionAction.SKIP:
            logger.debug(f"Skipping {direction.value} pass ({len(rows)} row(s))")
            return ApplyResult()

        result = ApplyResult()
        try:
            for folder in folders:
                folder_path = Path(to_root) / folder
                if self.operations.ensure_directory(folder_path):
                    result = result.added(folders=1)
                    self.output.info(f"Created folder: {folder_path}")

            for row in rows:
                if self._apply_row(row, action):
                    result = result.added(files=1)
        except CopyFailure as e:
            e.result = result
            self.output.error(f"{direction.value.capitalize()} pass aborted: {e}")
            raise

        return result

    def _apply_row(self, row: DeltaRow, action: ResolutionAction) -> bool:
        """Apply an action to a single row; True if a file was written."""
        if row.is_orphan:
            return self._apply_new_file(row, action)
        return self._apply_conflict(row, action)

    def _apply_new_file(self, row: DeltaRow, action: ResolutionAction) -> bool:
        target = row.dest_path
        exists = target.exists()

        if action is ResolutionAction.COPY:
            if exists:
                logger.debug(f"Target appeared since scan, not copying: {target}")
                return False
            self.operations.copy_file(row.source_path, target)
            self.output.info(f"Copied: {target}")
            return True

        if action is ResolutionAction.OVERWRITE:
            if exists:
                return self._overwrite(row)
            self.operations.copy_file(row.source_path, target)
            self.output.info(f"Copied: {target}")
            return True

        if action is ResolutionAction.DUPLICATE:
            if exists:
                written = self.operations.copy_as_duplicate(row.source_path, target)
                self.output.info(f"Duplicated as: {written}")
            else:
                self.operations.copy_file(row.source_path, target)
                self.output.info(f"Copied: {target}")
            return True

        return False

    def _apply_conflict(self, row: DeltaRow, action: ResolutionAction) -> bool:
        if action is ResolutionAction.OVERWRITE:
            return self._overwrite(row)

        if action is ResolutionAction.DUPLICATE:
            written = self.operations.copy_as_duplicate(row.source_path, row.dest_path)
            self.output.info(f"Duplicated as: {written}")
            return True

        # COPY only handles new files
        return False

    def _overwrite(self, row: DeltaRow) -> bool:
        target = row.dest_path
        if target.is_dir():
            logger.warning(f"Refusing to overwrite folder {target} with a file")
            self.output.warning(f"Not overwriting folder: {target}")
            return False
        self.operations.copy_file(row.source_path, target)
        self.output.info(f"Overwrote: {target}")
        return True
