"""Strategies for choosing the resolution action of a sync phase."""

from typing import Optional, Protocol

import click

from ..output import OutputFormatter
from .applier import ResolutionAction
from .comparator import DeltaRow, SyncDirection


class ActionChooser(Protocol):
    """Decides which action to apply to a previewed phase."""

    def choose(
        self,
        direction: SyncDirection,
        rows: list[DeltaRow],
        folders: list[str],
    ) -> ResolutionAction: ...


def parse_action(code: str, direction: SyncDirection) -> ResolutionAction:
    """Convert a single-letter code into an action allowed for a phase.

    Args:
        code: One of c, o, d, s (case-insensitive)
        direction: Phase the action is for

    Returns:
        ResolutionAction

    Raises:
        ValueError: If the code is unknown or not allowed for the phase
    """
    try:
        action = ResolutionAction(code.strip().lower())
    except ValueError:
        raise ValueError(f"Unknown action code: {code!r}") from None
    if action not in ResolutionAction.allowed_for(direction):
        raise ValueError(
            f"Action {action.label} is not allowed for the {direction.value} pass"
        )
    return action


class InteractivePrompt:
    """Asks the operator on the terminal, re-prompting until a valid code."""

    def __init__(self, output: Optional[OutputFormatter] = None):
        self.output = output or OutputFormatter()

    def choose(
        self,
        direction: SyncDirection,
        rows: list[DeltaRow],
        folders: list[str],
    ) -> ResolutionAction:
        allowed = ResolutionAction.allowed_for(direction)
        menu = ", ".join(f"[{a.value.upper()}] {a.label}" for a in allowed)
        # Prompt text goes to stderr in JSON mode so stdout stays parseable
        click.echo(f"Choose action: {menu}", err=self.output.json_output)

        code = click.prompt(
            "Action",
            type=click.Choice([a.value for a in allowed], case_sensitive=False),
            err=self.output.json_output,
        )
        return parse_action(code, direction)


class FixedActions:
    """Pre-supplied actions for headless runs.

    A phase whose action is None is delegated to ``fallback``, which lets
    the CLI fix one phase and still prompt for the other.
    """

    def __init__(
        self,
        forward: Optional[ResolutionAction] = ResolutionAction.COPY,
        reverse: Optional[ResolutionAction] = ResolutionAction.COPY,
        fallback: Optional[ActionChooser] = None,
    ):
        """Initialize with the action of each phase.

        Raises:
            ValueError: If reverse is OVERWRITE
        """
        if reverse is not None and reverse not in ResolutionAction.allowed_for(
            SyncDirection.REVERSE
        ):
            raise ValueError(
                f"Action {reverse.label} is not allowed for the reverse pass"
            )
        self.forward = forward
        self.reverse = reverse
        self.fallback = fallback

    def choose(
        self,
        direction: SyncDirection,
        rows: list[DeltaRow],
        folders: list[str],
    ) -> ResolutionAction:
        if direction is SyncDirection.FORWARD:
            action = self.forward
        else:
            action = self.reverse

        if action is None:
            if self.fallback is None:
                raise ValueError(f"No action configured for the {direction.value} pass")
            return self.fallback.choose(direction, rows, folders)
        return action
