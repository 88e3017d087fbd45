"""Prompter protocol: the questions the library asks before destructive steps.

The manager never talks to a terminal directly. The CLI passes a
`ConsolePrompter`; scripts and tests pass an `AutoPrompter` with fixed answers.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Callable, Protocol, runtime_checkable

from steerkit.frameworks.models import ConflictAction, UpdateAction

if TYPE_CHECKING:
    from steerkit.frameworks.models import Framework

logger = logging.getLogger(__name__)


@runtime_checkable
class Prompter(Protocol):
    """Protocol that every prompt backend must implement."""

    def resolve_conflict(self, file_name: str) -> ConflictAction:
        """An install target already exists. Decide what to do with it."""
        ...

    def confirm_update(self, framework: Framework, customized: bool) -> UpdateAction:
        """Ask before replacing an installed framework with the library version."""
        ...

    def confirm_after_diff(self, framework: Framework, customized: bool) -> bool:
        """Second confirmation after the diff has been shown."""
        ...

    def confirm_delete(self, file_name: str) -> bool:
        """Ask before deleting a steering document. Deletion cannot be undone."""
        ...

    def show_diff(self, diff: str) -> None: ...

    def notify(self, message: str) -> None: ...


class AutoPrompter:
    """Non-interactive prompter with fixed answers. Records notifications."""

    def __init__(
        self,
        conflict: ConflictAction = ConflictAction.CANCEL,
        update: UpdateAction = UpdateAction.UPDATE,
        confirm: bool = True,
        write: Callable[[str], None] | None = None,
    ) -> None:
        self.conflict = conflict
        self.update = update
        self.confirm = confirm
        self.messages: list[str] = []
        self.diffs: list[str] = []
        self._write = write

    def resolve_conflict(self, file_name: str) -> ConflictAction:
        logger.debug("Conflict on %s resolved as %s", file_name, self.conflict.value)
        return self.conflict

    def confirm_update(self, framework: Framework, customized: bool) -> UpdateAction:
        return self.update

    def confirm_after_diff(self, framework: Framework, customized: bool) -> bool:
        return self.confirm

    def confirm_delete(self, file_name: str) -> bool:
        return self.confirm

    def show_diff(self, diff: str) -> None:
        self.diffs.append(diff)

    def notify(self, message: str) -> None:
        self.messages.append(message)
        logger.info(message)
        if self._write is not None:
            self._write(message)


class ConsolePrompter:
    """Interactive prompter. Reads answers from stdin and writes to stdout."""

    def __init__(
        self,
        read: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
    ) -> None:
        self._read = read
        self._write = write

    def _choose(self, question: str, choices: dict[str, str], default: str) -> str:
        """Ask until the answer matches a choice key. EOF picks the default."""
        options = "/".join(choices)
        while True:
            try:
                answer = self._read(f"{question} [{options}] ").strip().lower()
            except EOFError:
                return choices[default]
            if not answer:
                return choices[default]
            if answer in choices:
                return choices[answer]
            self._write(f"Please answer one of: {options}")

    def resolve_conflict(self, file_name: str) -> ConflictAction:
        value = self._choose(
            f'Framework file "{file_name}" already exists. '
            "(o)verwrite, (m)erge, (k)eep existing or (c)ancel?",
            {"o": "overwrite", "m": "merge", "k": "keep", "c": "cancel"},
            default="c",
        )
        return ConflictAction(value)

    def confirm_update(self, framework: Framework, customized: bool) -> UpdateAction:
        if customized:
            question = (
                f'The framework "{framework.name}" has been customized. '
                "Updating will overwrite your changes (a backup will be created). "
                "(d)iff, (u)pdate with backup or (c)ancel?"
            )
        else:
            question = (
                f'Update framework "{framework.name}" to version {framework.version}? '
                "(d)iff, (u)pdate or (c)ancel?"
            )
        value = self._choose(
            question, {"d": "show-diff", "u": "update", "c": "cancel"}, default="c"
        )
        return UpdateAction(value)

    def confirm_after_diff(self, framework: Framework, customized: bool) -> bool:
        question = (
            "Do you want to proceed with the update? A backup will be created."
            if customized
            else "Proceed with the update?"
        )
        return self._choose(question, {"y": "yes", "n": "no"}, default="n") == "yes"

    def confirm_delete(self, file_name: str) -> bool:
        question = f'Are you sure you want to delete "{file_name}"? This action cannot be undone.'
        return self._choose(question, {"y": "yes", "n": "no"}, default="n") == "yes"

    def show_diff(self, diff: str) -> None:
        self._write(diff or "(no differences)")

    def notify(self, message: str) -> None:
        self._write(message)
        sys.stdout.flush()
