"""Core sync engine driving the two-phase reconciliation."""

import logging
import time
from collections.abc import Iterable
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

from rich.progress import Progress, SpinnerColumn, TextColumn

from ..exceptions import RootNotFound
from ..output import OutputFormatter
from ..utils import DEFAULT_HASH_THRESHOLD, format_size, format_timestamp, parse_size
from .applier import ResolutionAction, SyncApplier
from .comparator import DeltaRow, FileComparator, SyncDirection
from .prompts import ActionChooser, InteractivePrompt
from .summary import ApplyResult, SyncSummary

logger = logging.getLogger(__name__)


class SyncPhase(str, Enum):
    """States of one sync invocation, in order."""

    INIT = "init"
    FORWARD_SCAN = "forward_scan"
    FORWARD_PREVIEW = "forward_preview"
    FORWARD_APPLY = "forward_apply"
    FORWARD_SKIP = "forward_skip"
    REVERSE_SCAN = "reverse_scan"
    REVERSE_PREVIEW = "reverse_preview"
    REVERSE_APPLY = "reverse_apply"
    REVERSE_SKIP = "reverse_skip"
    SUMMARY = "summary"
    DONE = "done"


_PHASES = {
    SyncDirection.FORWARD: (
        SyncPhase.FORWARD_SCAN,
        SyncPhase.FORWARD_PREVIEW,
        SyncPhase.FORWARD_APPLY,
        SyncPhase.FORWARD_SKIP,
    ),
    SyncDirection.REVERSE: (
        SyncPhase.REVERSE_SCAN,
        SyncPhase.REVERSE_PREVIEW,
        SyncPhase.REVERSE_APPLY,
        SyncPhase.REVERSE_SKIP,
    ),
}


class SyncEngine:
    """Orchestrates a forward and a reverse sync pass between two folders."""

    def __init__(
        self,
        output: Optional[OutputFormatter] = None,
        chooser: Optional[ActionChooser] = None,
        applier: Optional[SyncApplier] = None,
        phase_callback: Optional[Callable[[SyncPhase], None]] = None,
    ):
        """Initialize sync engine.

        Args:
            output: Output formatter for displaying previews and progress
            chooser: Decides the action per phase (interactive by default)
            applier: Applies the chosen action
            phase_callback: Called with every state the engine enters
        """
        self.output = output or OutputFormatter()
        self.chooser = chooser or InteractivePrompt(self.output)
        self.applier = applier or SyncApplier(self.output)
        self.phase_callback = phase_callback

    def sync_folders(
        self,
        source: Union[str, Path],
        destination: Union[str, Path],
        check_hash: bool = True,
        hash_threshold: Union[str, int] = DEFAULT_HASH_THRESHOLD,
        include_extensions: Optional[Iterable[str]] = None,
        exclude_extensions: Optional[Iterable[str]] = None,
        dry_run: bool = False,
    ) -> SyncSummary:
        """Synchronize two folders in both directions.

        Args:
            source: Source folder (must exist)
            destination: Destination folder (created if missing)
            check_hash: Compare file contents by SHA-256
            hash_threshold: Files larger than this skip hashing
            include_extensions: Only these extensions participate
            exclude_extensions: These extensions never participate
            dry_run: Only preview both phases, change nothing

        Returns:
            SyncSummary with the counts applied in each phase

        Raises:
            InvalidSizeExpression: If hash_threshold is malformed
            RootNotFound: If source is missing or not a directory
            HashComputationFailure: If a file cannot be hashed
            CopyFailure: If a copy fails mid-pass

        Examples:
            >>> engine = SyncEngine(chooser=FixedActions())
            >>> summary = engine.sync_folders("/photos", "/backup/photos")
            >>> print(summary.forward_files_applied)
        """
        self._enter(SyncPhase.INIT)
        threshold_bytes = parse_size(hash_threshold)

        source = Path(source)
        destination = Path(destination)
        if not source.exists():
            raise RootNotFound(source)
        if not source.is_dir():
            raise RootNotFound(source, reason="is not a directory")
        if destination.exists() and not destination.is_dir():
            raise RootNotFound(destination, reason="is not a directory")

        if not dry_run and not destination.exists():
            destination.mkdir(parents=True)
            logger.debug(f"Created destination {destination}")

        if not self.output.quiet:
            self.output.info(f"Syncing: {source} <-> {destination}")
            if check_hash:
                self.output.info(
                    f"Hash check: enabled (files up to {format_size(threshold_bytes)})"
                )
            else:
                self.output.info("Hash check: disabled (size/timestamp only)")
            if dry_run:
                self.output.info("Dry run: No changes will be made")
            self.output.print("")

        comparator = FileComparator(
            check_hash=check_hash,
            hash_threshold=threshold_bytes,
            include=include_extensions,
            exclude=exclude_extensions,
        )

        summary = SyncSummary()
        forward = self._run_phase(
            SyncDirection.FORWARD, source, destination, comparator, dry_run
        )
        summary = summary.merged_with(SyncDirection.FORWARD, forward)

        reverse = self._run_phase(
            SyncDirection.REVERSE, destination, source, comparator, dry_run
        )
        summary = summary.merged_with(SyncDirection.REVERSE, reverse)

        self._enter(SyncPhase.SUMMARY)
        self._display_summary(summary, dry_run)
        self._enter(SyncPhase.DONE)
        return summary

    def _enter(self, phase: SyncPhase) -> None:
        logger.debug(f"Entering phase {phase.value}")
        if self.phase_callback is not None:
            self.phase_callback(phase)

    def _run_phase(
        self,
        direction: SyncDirection,
        from_root: Path,
        to_root: Path,
        comparator: FileComparator,
        dry_run: bool,
    ) -> ApplyResult:
        """Scan, preview, choose and apply one direction."""
        scan_phase, preview_phase, apply_phase, skip_phase = _PHASES[direction]

        self._enter(scan_phase)
        folders, rows = self._compute_delta(comparator, from_root, to_root, direction)

        self._enter(preview_phase)
        self._display_preview(direction, rows, folders)

        if not rows and not folders:
            self._enter(skip_phase)
            return ApplyResult()

        if dry_run:
            self._enter(skip_phase)
            return ApplyResult()

        action = self.chooser.choose(direction, rows, folders)
        logger.debug(f"{direction.value} action: {action.label}")
        if action is ResolutionAction.SKIP:
            self._enter(skip_phase)
            if not self.output.quiet:
                self.output.info(f"Skipped {direction.value} pass")
            return ApplyResult()

        self._enter(apply_phase)
        start = time.time()
        result = self.applier.apply(
            rows, folders, from_root, to_root, direction, action
        )
        logger.debug(f"{direction.value} apply took {time.time() - start:.2f}s")

        if not self.output.quiet:
            self.output.success(
                f"{direction.value.capitalize()} pass: "
                f"{result.folders_created} folder(s) created, "
                f"{result.files_applied} file(s) applied"
            )
            self.output.print("")
        return result

    def _compute_delta(
        self,
        comparator: FileComparator,
        from_root: Path,
        to_root: Path,
        direction: SyncDirection,
    ) -> tuple[list[str], list[DeltaRow]]:
        # Destination of a dry run may not exist yet
        if not from_root.is_dir():
            return [], []

        if self.output.quiet or self.output.json_output:
            return comparator.compute_delta(from_root, to_root, direction)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            task = progress.add_task(
                f"Comparing {from_root} {direction.arrow} {to_root}...", total=None
            )
            folders, rows = comparator.compute_delta(from_root, to_root, direction)
            progress.update(task, description=f"Found {len(rows)} difference(s)")
        return folders, rows

    def _display_preview(
        self,
        direction: SyncDirection,
        rows: list[DeltaRow],
        folders: list[str],
    ) -> None:
        """Display the delta of one phase.

        Columns always show the source tree on the left and the destination
        tree on the right; the arrow shows which way files would go.
        """
        if self.output.quiet:
            return

        title = (
            "Forward: source -> destination"
            if direction is SyncDirection.FORWARD
            else "Reverse: destination -> source"
        )
        if not rows and not folders:
            self.output.info(f"{title}: no differences")
            self.output.print("")
            return

        if folders:
            self.output.info(f"{title}: {len(folders)} folder(s) to create")
            for folder in folders:
                self.output.info(f"  + {folder}")

        if rows:
            table_rows = []
            for row in rows:
                from_cells = [
                    str(row.source_path),
                    format_size(row.source_size),
                    format_timestamp(row.source_time),
                    row.source_hash_suffix,
                ]
                to_cells = [
                    str(row.dest_path),
                    format_size(row.dest_size),
                    format_timestamp(row.dest_time),
                    row.dest_hash_suffix,
                ]
                if direction is SyncDirection.FORWARD:
                    left, right = from_cells, to_cells
                else:
                    left, right = to_cells, from_cells
                table_rows.append(left + [direction.arrow] + right + [row.reason])

            self.output.output_table(
                [
                    "Source file",
                    "Src size",
                    "Src time",
                    "Src hash",
                    "",
                    "Dst file",
                    "Dst size",
                    "Dst time",
                    "Dst hash",
                    "Reason",
                ],
                table_rows,
                title=f"{title}: {len(rows)} file(s)",
            )
        self.output.print("")

    def _display_summary(self, summary: SyncSummary, dry_run: bool) -> None:
        """Display the final summary block."""
        if self.output.quiet:
            return

        self.output.print_summary(
            "Dry run complete" if dry_run else "Sync complete",
            [
                ("Forward folders created", summary.forward_folders_created),
                ("Forward files applied", summary.forward_files_applied),
                ("Reverse folders created", summary.reverse_folders_created),
                ("Reverse files applied", summary.reverse_files_applied),
            ],
        )
        if summary.total_changes == 0 and not dry_run:
            self.output.info("No changes made.")
