"""Shared fixtures: a temporary workspace and a small framework library."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from steerkit.frameworks.manager import FrameworkManager
from steerkit.prompts import AutoPrompter
from steerkit.workspace import Workspace

TDD_DOC = """---
framework: tdd-bdd-strategy
version: 1.0.0
---

# TDD Strategy

## Purpose

Drive every change with a failing test first.

## Key Concepts

Red, green, refactor.

## Best Practices

- Write the test first.

## Summary

Test first.
"""

C4_DOC = """# C4 Strategy

## Purpose

Diagrams at four levels.
"""


def write_library(root: Path, tdd_version: str = "1.0.0") -> Path:
    root.mkdir(parents=True, exist_ok=True)
    manifest = {
        "version": "1.0.0",
        "frameworks": [
            {
                "id": "tdd-bdd-strategy",
                "name": "TDD/BDD Testing Strategy",
                "description": "Red-Green-Refactor and Given-When-Then",
                "category": "testing",
                "version": tdd_version,
                "file_name": "strategy-tdd-bdd.md",
                "dependencies": [],
            },
            {
                "id": "c4-model-strategy",
                "name": "C4 Model Architecture",
                "description": "Context, containers, components and code",
                "category": "architecture",
                "version": "1.0.0",
                "file_name": "strategy-c4-model.md",
            },
        ],
    }
    (root / "manifest.json").write_text(json.dumps(manifest))
    (root / "strategy-tdd-bdd.md").write_text(TDD_DOC)
    (root / "strategy-c4-model.md").write_text(C4_DOC)
    return root


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    ws = Workspace(tmp_path / "project")
    ws.initialize()
    return ws


@pytest.fixture
def library(tmp_path: Path) -> Path:
    return write_library(tmp_path / "library")


@pytest.fixture
def prompter() -> AutoPrompter:
    return AutoPrompter()


@pytest.fixture
def manager(workspace: Workspace, library: Path, prompter: AutoPrompter) -> FrameworkManager:
    return FrameworkManager(workspace, library, prompter=prompter)
