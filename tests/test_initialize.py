"""Tests for workspace initialisation."""

from __future__ import annotations

from pathlib import Path

from steerkit.frameworks.manager import FrameworkManager
from steerkit.frameworks.models import ConflictAction
from steerkit.initialize import InstallSummary, initialize_workspace, install_recommended_frameworks
from steerkit.prompts import AutoPrompter
from steerkit.workspace import Workspace


class TestInitializeWorkspace:
    def test_layout_only(self, tmp_path: Path):
        ws = Workspace(tmp_path)
        assert initialize_workspace(ws) is None
        assert ws.steering_path.is_dir()

    def test_with_recommended(self, manager: FrameworkManager, workspace: Workspace):
        summary = initialize_workspace(
            workspace, manager, ["tdd-bdd-strategy", "c4-model-strategy"]
        )
        assert summary.ok
        assert summary.installed == ["tdd-bdd-strategy", "c4-model-strategy"]
        assert summary.message == "Successfully installed 2 recommended frameworks"
        assert (workspace.steering_path / "strategy-c4-model.md").is_file()

    def test_bundled_recommended(self, workspace: Workspace):
        from steerkit.config import DEFAULT_RECOMMENDED, LibraryConfig

        manager = FrameworkManager(workspace, LibraryConfig().frameworks_dir)
        summary = initialize_workspace(workspace, manager, DEFAULT_RECOMMENDED)
        assert summary.ok, summary.message
        assert len(list(workspace.steering_path.glob("strategy-*.md"))) == 4


class TestInstallSummary:
    def test_partial_failure(self, manager: FrameworkManager):
        summary = install_recommended_frameworks(manager, ["tdd-bdd-strategy", "nope"])
        assert not summary.ok
        assert summary.failures == [("nope", "Framework not found: nope")]
        assert summary.message == "Installed 1 framework, 1 failed:\nnope: Framework not found: nope"

    def test_total_failure(self, manager: FrameworkManager):
        summary = install_recommended_frameworks(manager, ["nope"])
        assert summary.message.startswith("Failed to install recommended frameworks:\n")

    def test_singular(self):
        assert InstallSummary(installed=["a"]).message == (
            "Successfully installed 1 recommended framework"
        )

    def test_kept_files_are_not_counted(self, workspace: Workspace, library: Path):
        manager = FrameworkManager(
            workspace, library, prompter=AutoPrompter(conflict=ConflictAction.KEEP)
        )
        manager.install_framework("tdd-bdd-strategy")
        summary = install_recommended_frameworks(
            manager, ["tdd-bdd-strategy", "c4-model-strategy"]
        )
        assert summary.ok
        assert summary.installed == ["c4-model-strategy"]
        assert summary.kept == ["tdd-bdd-strategy"]
        assert summary.message == (
            "Successfully installed 1 recommended framework, kept 1 existing: tdd-bdd-strategy"
        )
