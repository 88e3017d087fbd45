"""`{{variable}}` substitution for steering and spec templates."""

from __future__ import annotations

import getpass
import logging
import re
import subprocess
from datetime import date
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from steerkit.workspace import Workspace

logger = logging.getLogger(__name__)

AVAILABLE_VARIABLES = ["feature-name", "date", "author", "project-name"]

_ESCAPED_RE = re.compile(r"\\\{\{([^}]+)\}\}")
_ESCAPE_MARK = "\x00ESCAPED\x00"
_RESTORE_RE = re.compile(f"{_ESCAPE_MARK}(.+?){_ESCAPE_MARK}")


class TemplateEngine:
    def render(self, template: str, variables: dict[str, str | None]) -> str:
        """Replace {{key}} for every defined variable.

        `\\{{key}}` renders as a literal `{{key}}`; unknown placeholders stay.
        """
        result = _ESCAPED_RE.sub(lambda m: f"{_ESCAPE_MARK}{m.group(1)}{_ESCAPE_MARK}", template)
        for key, value in variables.items():
            if value is not None:
                result = result.replace("{{" + key + "}}", value)
        return _RESTORE_RE.sub(lambda m: "{{" + m.group(1) + "}}", result)

    def get_available_variables(self) -> list[str]:
        return list(AVAILABLE_VARIABLES)

    def get_default_variables(self, workspace: Workspace | None = None) -> dict[str, str]:
        return {
            "date": date.today().isoformat(),
            "author": self._get_author(),
            "project-name": workspace.name if workspace is not None else "project",
        }

    def _get_author(self) -> str:
        """git user.name, falling back to the login name."""
        try:
            proc = subprocess.run(
                ["git", "config", "user.name"],
                capture_output=True,
                text=True,
                timeout=5,
                check=False,
            )
            name = proc.stdout.strip()
            if proc.returncode == 0 and name:
                return name
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("git config user.name unavailable: %s", e)
        try:
            return getpass.getuser()
        except (KeyError, OSError):
            return "unknown"
