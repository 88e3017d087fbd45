"""Tests for the framework glossary."""

from __future__ import annotations

from pathlib import Path

from steerkit.frameworks.glossary import TERM_DEFINITIONS, find_definition, is_steering_document
from steerkit.workspace import Workspace


class TestFindDefinition:
    def test_exact(self):
        assert find_definition("WSJF") == TERM_DEFINITIONS["WSJF"]

    def test_case_insensitive(self):
        assert find_definition("wsjf") == TERM_DEFINITIONS["WSJF"]

    def test_contained_term(self):
        assert find_definition("our SLO targets") == TERM_DEFINITIONS["SLO"]

    def test_unknown_and_blank(self):
        assert find_definition("banana") is None
        assert find_definition("   ") is None

    def test_apm_terms(self):
        for term in ["APM", "IaC", "SLI", "SLA"]:
            assert find_definition(term)


class TestIsSteeringDocument:
    def test_inside_steering(self, workspace: Workspace):
        assert is_steering_document(workspace.steering_path / "tech.md", workspace)

    def test_outside_steering(self, workspace: Workspace):
        assert not is_steering_document(workspace.frameworks_path / "c4-model.md", workspace)
        assert not is_steering_document(workspace.steering_path / "notes.txt", workspace)

    def test_no_workspace(self, tmp_path: Path):
        assert not is_steering_document(tmp_path / "a.md", Workspace(None))
