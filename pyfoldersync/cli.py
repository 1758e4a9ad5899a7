"""CLI interface for pyfoldersync."""

import logging
from pathlib import Path
from typing import Any, Callable, Optional

import click

from .config import KNOWN_KEYS, load_config, save_value
from .exceptions import FolderSyncError
from .output import OutputFormatter
from .sync import (
    FixedActions,
    InteractivePrompt,
    ResolutionAction,
    SyncEngine,
    list_files,
    move_file,
)

logger = logging.getLogger(__name__)

FORWARD_CODES = [a.value for a in ResolutionAction]
REVERSE_CODES = [
    a.value for a in ResolutionAction if a is not ResolutionAction.OVERWRITE
]


def _split_extensions(values: tuple[str, ...]) -> list[str]:
    """Flatten repeated and comma-separated extension options."""
    result: list[str] = []
    for value in values:
        result.extend(item.strip() for item in value.split(",") if item.strip())
    return result


def _action_or_none(code: Optional[str]) -> Optional[ResolutionAction]:
    return ResolutionAction(code.lower()) if code else None


def _delta_options(func: Callable) -> Callable:
    """Options shared by commands that compute a delta."""
    options = [
        click.argument("source", type=click.Path(path_type=Path)),
        click.argument("destination", type=click.Path(path_type=Path)),
        click.option(
            "--no-check-hash",
            is_flag=True,
            help="Compare by size and timestamp only (faster, less accurate)",
        ),
        click.option(
            "--hash-threshold",
            "-t",
            default=None,
            help="Skip hashing files larger than this, e.g. 500MB (default: 2GB)",
        ),
        click.option(
            "--include",
            "-i",
            multiple=True,
            help="Only sync files with this extension (repeatable, e.g. -i jpg)",
        ),
        click.option(
            "--exclude",
            "-e",
            multiple=True,
            help="Never sync files with this extension (repeatable)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _run_engine(
    ctx: Any,
    engine: SyncEngine,
    source: Path,
    destination: Path,
    no_check_hash: bool,
    hash_threshold: Optional[str],
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    dry_run: bool,
) -> None:
    """Resolve settings against the config and run the engine."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        settings = load_config()
        check_hash = settings.check_hash and not no_check_hash
        threshold = hash_threshold or settings.hash_threshold
        include_list = _split_extensions(include) or settings.include_extensions
        exclude_list = _split_extensions(exclude) or settings.exclude_extensions

        summary = engine.sync_folders(
            source,
            destination,
            check_hash=check_hash,
            hash_threshold=threshold,
            include_extensions=include_list,
            exclude_extensions=exclude_list,
            dry_run=dry_run,
        )

        if out.json_output:
            out.output_json({"dry_run": dry_run, "summary": summary.to_dict()})

    except (KeyboardInterrupt, click.Abort):
        out.warning("\nSync cancelled by user")
        ctx.exit(130)
    except FolderSyncError as e:
        out.error(f"Error: {e}")
        ctx.exit(1)
    except OSError as e:
        out.error(f"I/O error: {e}")
        ctx.exit(1)


@click.group()
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output results in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="pyfoldersync")
@click.pass_context
def main(ctx: Any, quiet: bool, json: bool, verbose: bool) -> None:
    """pyfoldersync - Reconcile two folders in both directions."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pyfoldersync").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@_delta_options
@click.option(
    "--forward-action",
    "-f",
    type=click.Choice(FORWARD_CODES, case_sensitive=False),
    default=None,
    help="Action for the forward pass without prompting: "
    "c=copy, o=overwrite, d=duplicate, s=skip",
)
@click.option(
    "--reverse-action",
    "-r",
    type=click.Choice(REVERSE_CODES, case_sensitive=False),
    default=None,
    help="Action for the reverse pass without prompting: "
    "c=copy, d=duplicate, s=skip",
)
@click.option(
    "--dry-run", is_flag=True, help="Show differences without changing anything"
)
@click.pass_context
def sync(
    ctx: Any,
    source: Path,
    destination: Path,
    no_check_hash: bool,
    hash_threshold: Optional[str],
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    forward_action: Optional[str],
    reverse_action: Optional[str],
    dry_run: bool,
) -> None:
    """Sync SOURCE and DESTINATION in both directions.

    The forward pass copies from SOURCE to DESTINATION, the reverse pass
    from DESTINATION back to SOURCE. Each pass shows its differences and
    asks what to do:

    \b
      c  copy new files only
      o  also overwrite conflicting files (forward pass only)
      d  copy conflicting files under a "-duplicate" name
      s  skip this pass

    Examples:

    \b
        pyfoldersync sync ~/Pictures /mnt/backup/Pictures
        pyfoldersync sync ./src ./dst --no-check-hash
        pyfoldersync sync ./src ./dst -t 500MB -i jpg -i png
        pyfoldersync sync ./src ./dst -f c -r c      # no prompts
    """
    out: OutputFormatter = ctx.obj["out"]

    if out.quiet and not dry_run and not (forward_action and reverse_action):
        # Prompting needs the preview, which --quiet hides
        raise click.UsageError(
            "--quiet requires both --forward-action and --reverse-action", ctx
        )

    prompt = InteractivePrompt(out)
    if forward_action or reverse_action:
        chooser: Any = FixedActions(
            forward=_action_or_none(forward_action),
            reverse=_action_or_none(reverse_action),
            fallback=prompt,
        )
    else:
        chooser = prompt

    engine = SyncEngine(out, chooser=chooser)
    _run_engine(
        ctx,
        engine,
        source,
        destination,
        no_check_hash,
        hash_threshold,
        include,
        exclude,
        dry_run,
    )


@main.command()
@_delta_options
@click.pass_context
def diff(
    ctx: Any,
    source: Path,
    destination: Path,
    no_check_hash: bool,
    hash_threshold: Optional[str],
    include: tuple[str, ...],
    exclude: tuple[str, ...],
) -> None:
    """Show the differences between SOURCE and DESTINATION.

    Same comparison as ``sync --dry-run``: both passes are previewed and
    nothing is changed.
    """
    out: OutputFormatter = ctx.obj["out"]
    # Dry runs never ask for an action
    engine = SyncEngine(out)
    _run_engine(
        ctx,
        engine,
        source,
        destination,
        no_check_hash,
        hash_threshold,
        include,
        exclude,
        dry_run=True,
    )


@main.command()
@click.argument(
    "directory", type=click.Path(exists=True, file_okay=False, path_type=Path)
)
@click.argument("prefix")
@click.option("--dry-run", is_flag=True, help="Show renames without renaming")
@click.pass_context
def prefix(ctx: Any, directory: Path, prefix: str, dry_run: bool) -> None:
    """Prepend PREFIX to the name of every file directly in DIRECTORY.

    Files already starting with PREFIX are left alone. When the new name is
    taken, a " (n)" counter is added.
    """
    out: OutputFormatter = ctx.obj["out"]

    if not prefix:
        out.error("Prefix must not be empty")
        ctx.exit(1)

    renamed = []
    try:
        for file_path in list_files(directory):
            if file_path.name.startswith(prefix):
                continue
            target = file_path.with_name(f"{prefix}{file_path.name}")
            if dry_run:
                out.info(f"Would rename: {file_path.name} -> {target.name}")
                renamed.append({"from": str(file_path), "to": str(target)})
                continue
            final = move_file(file_path, target)
            out.info(f"Renamed: {file_path.name} -> {final.name}")
            renamed.append({"from": str(file_path), "to": str(final)})
    except OSError as e:
        out.error(f"I/O error: {e}")
        ctx.exit(1)

    if out.json_output:
        out.output_json({"dry_run": dry_run, "renamed": renamed})
    else:
        out.success(f"{len(renamed)} file(s) {'to rename' if dry_run else 'renamed'}")


@main.group(name="config")
def config_group() -> None:
    """Show or change default settings."""


@config_group.command("show")
@click.pass_context
def config_show(ctx: Any) -> None:
    """Show the effective configuration."""
    out: OutputFormatter = ctx.obj["out"]
    try:
        settings = load_config().as_dict()
    except FolderSyncError as e:
        out.error(f"Error: {e}")
        ctx.exit(1)
        return  # Unreachable, but helps type checker

    if out.json_output:
        out.output_json(settings)
        return

    out.print_summary(
        "Configuration",
        [
            ("Config file", settings["config_file"]),
            ("Hash threshold", settings["hash_threshold"]),
            ("Check hash", settings["check_hash"]),
            ("Include", ", ".join(settings["include_extensions"]) or "(all)"),
            ("Exclude", ", ".join(settings["exclude_extensions"]) or "(none)"),
        ],
    )


@config_group.command("set")
@click.argument("key", type=click.Choice(KNOWN_KEYS, case_sensitive=False))
@click.argument("value")
@click.pass_context
def config_set(ctx: Any, key: str, value: str) -> None:
    """Store a default setting, e.g. ``config set HASH_THRESHOLD 500MB``."""
    out: OutputFormatter = ctx.obj["out"]
    try:
        path = save_value(key, value)
    except FolderSyncError as e:
        out.error(f"Error: {e}")
        ctx.exit(1)
        return

    out.success(f"Saved {key.upper()}={value} to {path}")


if __name__ == "__main__":
    main()
