"""Framework reference documentation in the workspace `frameworks/` directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from steerkit.errors import ReferenceNotFoundError, SteerkitError

if TYPE_CHECKING:
    from steerkit.workspace import Workspace

logger = logging.getLogger(__name__)

# Steering document -> the reference doc it summarises
STEERING_REFERENCE_MAP = {
    "strategy-tdd-bdd.md": "test-driven-development.md",
    "strategy-security.md": "sabsa-framework.md",
    "strategy-c4-model.md": "c4-model.md",
    "strategy-azure.md": "azure-well-architected.md",
    "strategy-devops.md": "devops-frameworks.md",
    "strategy-iac.md": "pulumi.md",
    "strategy-4d-safe.md": "4d-sdlc.md",
    "strategy-ea.md": "domain-driven-design.md",
    "tech.md": "net-best-practices.md",
    "product.md": "4d-sdlc.md",
    "structure.md": "net-best-practices.md",
}

_MATCH_CONTEXT_CHARS = 50


@dataclass
class SearchResult:
    file_name: str
    file_path: Path
    line_number: int
    line: str
    context: str
    matched_text: str


def extract_matched_text(line: str, query: str) -> str:
    """Up to 50 chars either side of the first match, with ... where cut."""
    index = line.lower().find(query.lower())
    if index == -1:
        return line[:100]

    start = max(0, index - _MATCH_CONTEXT_CHARS)
    end = min(len(line), index + len(query) + _MATCH_CONTEXT_CHARS)
    result = line[start:end]
    if start > 0:
        result = "..." + result
    if end < len(line):
        result = result + "..."
    return result


class FrameworkReferenceManager:
    """Copies bundled reference docs into a workspace and searches them."""

    def __init__(self, workspace: Workspace, bundled_dir: Path) -> None:
        self.workspace = workspace
        self.bundled_dir = Path(bundled_dir)

    def frameworks_directory_exists(self) -> bool:
        try:
            return self.workspace.directory_exists(self.workspace.frameworks_path)
        except SteerkitError:
            return False

    def initialize_frameworks_directory(self) -> int:
        """Copy bundled reference docs that are not already present.

        Existing files are never overwritten. Returns the number copied.
        """
        frameworks_path = self.workspace.frameworks_path
        self.workspace.ensure_directory(frameworks_path)

        copied = 0
        for file_name in self.workspace.list_files(self.bundled_dir, "*.md"):
            destination = frameworks_path / file_name
            if self.workspace.file_exists(destination):
                continue
            self.workspace.copy_file(self.bundled_dir / file_name, destination)
            copied += 1

        logger.info(
            "Initialized frameworks directory with %d reference document%s",
            copied,
            "" if copied == 1 else "s",
        )
        return copied

    def open_framework_reference(self, reference_file_name: str, initialize: bool = False) -> Path:
        """Resolve a reference doc in the workspace, optionally initialising first."""
        if not self.frameworks_directory_exists():
            if not initialize:
                raise ReferenceNotFoundError(
                    "Framework reference documentation not found. "
                    "Initialize the frameworks directory first."
                )
            self.initialize_frameworks_directory()

        path = self.workspace.frameworks_path / reference_file_name
        if not self.workspace.file_exists(path):
            raise ReferenceNotFoundError(f"Framework reference not found: {reference_file_name}")
        return path

    def search_framework_references(self, query: str) -> list[SearchResult]:
        if not self.frameworks_directory_exists():
            return []

        frameworks_path = self.workspace.frameworks_path
        q = query.lower()
        results: list[SearchResult] = []

        for file_name in self.workspace.list_files(frameworks_path, "*.md"):
            file_path = frameworks_path / file_name
            try:
                lines = self.workspace.read_file(file_path).split("\n")
            except SteerkitError as e:
                logger.error("Error searching file %s: %s", file_name, e)
                continue

            for i, line in enumerate(lines):
                if q not in line.lower():
                    continue
                context = "\n".join(lines[max(0, i - 1) : min(len(lines), i + 2)])
                results.append(
                    SearchResult(
                        file_name=file_name,
                        file_path=file_path,
                        line_number=i + 1,
                        line=line.strip(),
                        context=context,
                        matched_text=extract_matched_text(line, query),
                    )
                )
        return results

    def get_framework_reference_for_steering(self, steering_file_name: str) -> str | None:
        return STEERING_REFERENCE_MAP.get(steering_file_name)
