"""Group the documents in .kiro/steering/ the way the steering view shows them.

    Strategies (Installed)   strategy-*.md
    Project (Team-Created)   product.md, tech.md, structure.md
    Custom (Team-Created)    everything else
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

import frontmatter

from steerkit.errors import SteerkitError
from steerkit.steering.models import SteeringCategory, SteeringItem

if TYPE_CHECKING:
    from pathlib import Path

    from steerkit.frameworks.manager import FrameworkManager
    from steerkit.workspace import Workspace

logger = logging.getLogger(__name__)

PROJECT_FILES = {
    "product.md": SteeringCategory.PRODUCT,
    "tech.md": SteeringCategory.TECHNICAL,
    "structure.md": SteeringCategory.STRUCTURE,
}

CATEGORY_GROUP_LABELS = {
    SteeringCategory.STRATEGY: "Strategies (Installed)",
    SteeringCategory.PRODUCT: "Project (Team-Created)",
    SteeringCategory.CUSTOM: "Custom (Team-Created)",
}


def categorize_file(file_name: str) -> SteeringCategory:
    if file_name.startswith("strategy-"):
        return SteeringCategory.STRATEGY
    return PROJECT_FILES.get(file_name, SteeringCategory.CUSTOM)


def _group_of(category: SteeringCategory) -> SteeringCategory:
    if category in (SteeringCategory.TECHNICAL, SteeringCategory.STRUCTURE):
        return SteeringCategory.PRODUCT
    return category


def context_value(category: SteeringCategory) -> str:
    if category == SteeringCategory.STRATEGY:
        return "steeringStrategy"
    if category == SteeringCategory.CUSTOM:
        return "steeringCustom"
    return "steeringProject"


class SteeringCatalog:
    """Read-only view over the steering directory."""

    def __init__(self, workspace: Workspace, manager: FrameworkManager | None = None) -> None:
        self.workspace = workspace
        self.manager = manager

    def _steering_files(self) -> list[str]:
        try:
            steering_path = self.workspace.steering_path
        except SteerkitError:
            return []
        if not self.workspace.directory_exists(steering_path):
            return []
        return self.workspace.list_files(steering_path, "*.md")

    def _read_frontmatter(self, path: Path) -> dict:
        try:
            return dict(frontmatter.load(str(path)).metadata)
        except Exception as e:
            logger.debug("No usable frontmatter in %s: %s", path, e)
            return {}

    def extract_framework_id(self, file_name: str, meta: dict | None = None) -> str | None:
        """`framework:` frontmatter wins; otherwise strategy-x.md -> x-strategy."""
        if meta and meta.get("framework"):
            return str(meta["framework"])
        if file_name.startswith("strategy-"):
            return file_name[len("strategy-") :].removesuffix(".md") + "-strategy"
        return None

    def get_categories(self) -> list[SteeringItem]:
        present = {_group_of(categorize_file(name)) for name in self._steering_files()}
        return [
            SteeringItem(
                label=CATEGORY_GROUP_LABELS[group],
                path=None,
                category=group,
                is_custom=group == SteeringCategory.CUSTOM,
                context_value="steeringCategory",
                is_category=True,
            )
            for group in (SteeringCategory.STRATEGY, SteeringCategory.PRODUCT, SteeringCategory.CUSTOM)
            if group in present
        ]

    def get_files_for_category(self, category: SteeringCategory) -> list[SteeringItem]:
        items = []
        for name in self._steering_files():
            file_category = categorize_file(name)
            if _group_of(file_category) != _group_of(category):
                continue
            path = self.workspace.steering_path / name
            meta = self._read_frontmatter(path)
            items.append(
                SteeringItem(
                    label=name,
                    path=path,
                    category=file_category,
                    framework_id=self.extract_framework_id(name, meta),
                    version=str(meta["version"]) if meta.get("version") else None,
                    is_custom=file_category == SteeringCategory.CUSTOM,
                    context_value=context_value(file_category),
                )
            )
        items.sort(key=lambda item: item.label)
        return items

    def get_children(self, item: SteeringItem | None = None) -> list[SteeringItem]:
        if item is None:
            return self.get_categories()
        if item.is_category:
            return self.get_files_for_category(item.category)
        return []

    def describe(self, item: SteeringItem) -> str:
        """Tooltip text: file name, framework name, last modified date."""
        lines = [item.label]
        if item.framework_id and self.manager is not None:
            try:
                framework = self.manager.get_framework_by_id(item.framework_id)
            except SteerkitError:
                framework = None
            if framework is not None:
                lines.append(framework.name)
        if item.path is not None:
            try:
                modified = datetime.fromtimestamp(item.path.stat().st_mtime)
                lines.append(f"Last modified: {modified.date().isoformat()}")
            except OSError:
                pass
        return "\n".join(lines)
