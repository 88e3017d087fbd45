"""Workspace initialisation: directory layout plus recommended frameworks."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from steerkit.config import DEFAULT_RECOMMENDED
from steerkit.errors import SteerkitError

if TYPE_CHECKING:
    from steerkit.frameworks.manager import FrameworkManager
    from steerkit.workspace import Workspace

logger = logging.getLogger(__name__)


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


@dataclass
class InstallSummary:
    installed: list[str] = field(default_factory=list)
    kept: list[str] = field(default_factory=list)
    failures: list[tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def message(self) -> str:
        failed = [f"{framework_id}: {error}" for framework_id, error in self.failures]
        if not self.failures:
            count = len(self.installed)
            message = f"Successfully installed {count} recommended framework{_plural(count)}"
            if self.kept:
                message += f", kept {len(self.kept)} existing: {', '.join(self.kept)}"
            return message
        if not self.installed:
            return "Failed to install recommended frameworks:\n" + "\n".join(failed)
        count = len(self.installed)
        return (
            f"Installed {count} framework{_plural(count)}, {len(self.failures)} failed:\n"
            + "\n".join(failed)
        )


def install_recommended_frameworks(
    manager: FrameworkManager, framework_ids: Sequence[str] = DEFAULT_RECOMMENDED
) -> InstallSummary:
    """Install each framework, collecting failures instead of stopping at the first."""
    summary = InstallSummary()
    for framework_id in framework_ids:
        try:
            installed = manager.install_framework(framework_id)
        except SteerkitError as e:
            logger.warning("Failed to install %s: %s", framework_id, e)
            summary.failures.append((framework_id, str(e)))
            continue
        if installed:
            summary.installed.append(framework_id)
        else:
            summary.kept.append(framework_id)
    return summary


def initialize_workspace(
    workspace: Workspace,
    manager: FrameworkManager | None = None,
    recommended: Sequence[str] | None = None,
) -> InstallSummary | None:
    """Create the .kiro/ layout; install `recommended` frameworks when given."""
    workspace.initialize()
    if manager is None or not recommended:
        return None
    return install_recommended_frameworks(manager, recommended)
