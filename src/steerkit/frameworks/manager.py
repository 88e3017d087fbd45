"""Framework discovery, installation, updates and removal.

Installed steering documents live in `.kiro/steering/`; what was installed
(and at which version) is recorded in `.kiro/.metadata/installed-frameworks.json`.
Customisation is detected by comparing content hashes with the library copy.
"""

from __future__ import annotations

import copy
import difflib
import hashlib
import json
import logging
import time
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from steerkit.errors import (
    FileOperationError,
    FrameworkNotFoundError,
    FrameworkNotInstalledError,
    OperationCancelledError,
)
from steerkit.frameworks.models import (
    ConflictAction,
    Framework,
    FrameworkCategory,
    FrameworkManifest,
    FrameworkUpdate,
    InstalledFramework,
    InstalledFrameworksMetadata,
    InstallOptions,
    UpdateAction,
)
from steerkit.prompts import AutoPrompter

if TYPE_CHECKING:
    from steerkit.prompts import Prompter
    from steerkit.workspace import Workspace

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.json"
METADATA_FILENAME = "installed-frameworks.json"

MERGE_START = (
    "<!-- ========== MERGE CONFLICT: New Framework Content Below ========== -->\n"
    "<!-- Review and integrate the content below, then remove conflict markers -->"
)
MERGE_END = "<!-- ========== END MERGE CONFLICT ========== -->"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def backup_timestamp(now: datetime | None = None) -> str:
    """UTC ISO timestamp safe for file names: 2024-01-01T12-00-00-000Z."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H-%M-%S-") + f"{now.microsecond // 1000:03d}Z"


def merge_content(existing: str, new: str) -> str:
    """Append library content below the user's copy, fenced by conflict markers."""
    return f"{existing}\n\n{MERGE_START}\n\n{new}\n\n{MERGE_END}\n"


class FrameworkManager:
    """Install, update and remove framework steering documents in a workspace."""

    def __init__(
        self,
        workspace: Workspace,
        library_dir: Path,
        prompter: Prompter | None = None,
        metadata_ttl: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.workspace = workspace
        self.library_dir = Path(library_dir)
        self.prompter: Prompter = prompter or AutoPrompter()
        self._metadata_ttl = metadata_ttl
        self._clock = clock
        self._manifest_cache: FrameworkManifest | None = None
        self._metadata_cache: InstalledFrameworksMetadata | None = None
        self._metadata_cache_time = 0.0

    # ── Manifest ─────────────────────────────────────────────

    def _load_manifest(self) -> FrameworkManifest:
        if self._manifest_cache is None:
            content = self.workspace.read_file(self.library_dir / MANIFEST_FILENAME)
            self._manifest_cache = FrameworkManifest.from_dict(json.loads(content))
            logger.debug(
                "Loaded manifest v%s (%d frameworks)",
                self._manifest_cache.version,
                len(self._manifest_cache.frameworks),
            )
        return self._manifest_cache

    def list_available_frameworks(self) -> list[Framework]:
        return list(self._load_manifest().frameworks)

    def get_framework_by_id(self, framework_id: str) -> Framework | None:
        for framework in self._load_manifest().frameworks:
            if framework.id == framework_id:
                return framework
        return None

    def _require_framework(self, framework_id: str) -> Framework:
        framework = self.get_framework_by_id(framework_id)
        if framework is None:
            raise FrameworkNotFoundError(framework_id)
        return framework

    def search_frameworks(self, query: str) -> list[Framework]:
        """Case-insensitive match on name, description or category."""
        frameworks = self.list_available_frameworks()
        if not query or not query.strip():
            return frameworks
        q = query.lower()
        return [
            f
            for f in frameworks
            if q in f.name.lower() or q in f.description.lower() or q in f.category.value
        ]

    def get_frameworks_by_category(self, category: FrameworkCategory) -> list[Framework]:
        return [f for f in self.list_available_frameworks() if f.category == category]

    # ── Installed metadata ───────────────────────────────────

    def _metadata_file(self) -> Path:
        return self.workspace.metadata_path / METADATA_FILENAME

    def _installed_path(self, framework: Framework) -> Path:
        return self.workspace.steering_path / framework.file_name

    def _library_path(self, framework: Framework) -> Path:
        return self.library_dir / framework.file_name

    def _get_installed_metadata(self) -> InstalledFrameworksMetadata:
        now = self._clock()
        if (
            self._metadata_cache is not None
            and now - self._metadata_cache_time < self._metadata_ttl
        ):
            return self._metadata_cache

        try:
            content = self.workspace.read_file(self._metadata_file())
            metadata = InstalledFrameworksMetadata.from_dict(json.loads(content))
        except FileOperationError:
            metadata = InstalledFrameworksMetadata()
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Ignoring unreadable %s: %s", METADATA_FILENAME, e)
            metadata = InstalledFrameworksMetadata()

        self._metadata_cache = metadata
        self._metadata_cache_time = now
        return metadata

    def _editable_metadata(self) -> InstalledFrameworksMetadata:
        """A copy to change; the cache only sees it once it is saved."""
        return copy.deepcopy(self._get_installed_metadata())

    def _save_installed_metadata(self, metadata: InstalledFrameworksMetadata) -> None:
        self.workspace.write_file(
            self._metadata_file(), json.dumps(metadata.to_dict(), indent=2) + "\n"
        )
        self._metadata_cache = metadata
        self._metadata_cache_time = self._clock()

    def is_framework_installed(self, framework_id: str) -> bool:
        framework = self.get_framework_by_id(framework_id)
        if framework is None:
            return False
        return self.workspace.file_exists(self._installed_path(framework))

    def get_installed_frameworks(self) -> list[Framework]:
        installed = []
        for entry in self._get_installed_metadata().frameworks:
            framework = self.get_framework_by_id(entry.id)
            if framework is not None:
                installed.append(framework)
        return installed

    def get_installed_framework_metadata(self, framework_id: str) -> InstalledFramework | None:
        return self._get_installed_metadata().find(framework_id)

    def mark_framework_as_customized(self, framework_id: str) -> None:
        metadata = self._editable_metadata()
        entry = metadata.find(framework_id)
        if entry is None:
            return
        entry.customized = True
        entry.customized_at = _now_iso()
        self._save_installed_metadata(metadata)

    # ── Install ──────────────────────────────────────────────

    def _backup(self, path: Path) -> Path:
        backup_path = path.with_name(f"{path.name}.backup-{backup_timestamp()}")
        self.workspace.copy_file(path, backup_path)
        logger.info("Backup created: %s", backup_path)
        return backup_path

    def install_framework(self, framework_id: str, options: InstallOptions | None = None) -> bool:
        """Install a framework into .kiro/steering/.

        Returns False when the user chose to keep an existing file.
        """
        framework = self._require_framework(framework_id)
        options = replace(options) if options else InstallOptions()
        destination = self._installed_path(framework)
        exists = self.workspace.file_exists(destination)

        if exists and not options.overwrite and not options.merge:
            action = self.prompter.resolve_conflict(framework.file_name)
            if action == ConflictAction.CANCEL:
                raise OperationCancelledError("Installation cancelled by user")
            if action == ConflictAction.KEEP:
                logger.info("Kept existing %s", framework.file_name)
                return False
            if action == ConflictAction.OVERWRITE:
                options.overwrite = True
                options.backup = True
            elif action == ConflictAction.MERGE:
                options.merge = True
                options.backup = True

        if exists and options.backup:
            self._backup(destination)

        if exists and options.merge:
            existing = self.workspace.read_file(destination)
            new = self.workspace.read_file(self._library_path(framework))
            self.workspace.write_file(destination, merge_content(existing, new))
        else:
            self.workspace.copy_file(self._library_path(framework), destination)

        metadata = self._editable_metadata()
        entry = InstalledFramework(
            id=framework_id,
            version=framework.version,
            installed_at=_now_iso(),
            customized=False,
            content_hash=self._content_hash(self._library_path(framework)),
        )
        for i, existing_entry in enumerate(metadata.frameworks):
            if existing_entry.id == framework_id:
                metadata.frameworks[i] = entry
                break
        else:
            metadata.frameworks.append(entry)
        self._save_installed_metadata(metadata)

        logger.info("Installed %s v%s -> %s", framework_id, framework.version, destination)
        self.prompter.notify(f"Framework installed: {framework.name}")
        return True

    # ── Updates ──────────────────────────────────────────────

    def check_for_updates(self) -> list[FrameworkUpdate]:
        updates = []
        for entry in self._get_installed_metadata().frameworks:
            framework = self.get_framework_by_id(entry.id)
            if framework is None:
                continue
            if framework.version != entry.version:
                updates.append(
                    FrameworkUpdate(
                        framework_id=entry.id,
                        current_version=entry.version,
                        latest_version=framework.version,
                        changes=[f"Updated to version {framework.version}"],
                    )
                )
        return updates

    def _content_hash(self, path: Path) -> str:
        return hashlib.sha256(self.workspace.read_file(path).encode("utf-8")).hexdigest()

    def is_framework_customized(self, framework_id: str) -> bool:
        """True if the installed copy differs from what was installed.

        Entries written before hashes were recorded compare against the
        current library copy instead.
        """
        framework = self.get_framework_by_id(framework_id)
        if framework is None:
            return False
        entry = self._get_installed_metadata().find(framework_id)
        try:
            installed = self._content_hash(self._installed_path(framework))
            if entry is not None and entry.content_hash:
                return installed != entry.content_hash
            return installed != self._content_hash(self._library_path(framework))
        except FileOperationError:
            return False

    def diff_preview(self, framework_id: str) -> str:
        """Unified diff from the installed copy to the library version."""
        framework = self._require_framework(framework_id)
        installed_path = self._installed_path(framework)
        current = (
            self.workspace.read_file(installed_path)
            if self.workspace.file_exists(installed_path)
            else ""
        )
        new = self.workspace.read_file(self._library_path(framework))
        diff = difflib.unified_diff(
            current.splitlines(keepends=True),
            new.splitlines(keepends=True),
            fromfile=f"{framework.file_name} (current)",
            tofile=f"{framework.file_name} (v{framework.version})",
        )
        return "".join(diff)

    def update_framework(self, framework_id: str) -> None:
        """Replace an installed framework with the library version.

        A customized copy is backed up first.
        """
        if not self.is_framework_installed(framework_id):
            raise FrameworkNotInstalledError(framework_id)
        framework = self._require_framework(framework_id)
        customized = self.is_framework_customized(framework_id)

        choice = self.prompter.confirm_update(framework, customized)
        if choice == UpdateAction.CANCEL:
            raise OperationCancelledError("Update cancelled by user")
        if choice == UpdateAction.SHOW_DIFF:
            self.prompter.show_diff(self.diff_preview(framework_id))
            if not self.prompter.confirm_after_diff(framework, customized):
                raise OperationCancelledError("Update cancelled by user")

        if customized:
            backup_path = self._backup(self._installed_path(framework))
            self.prompter.notify(f"Backup created: {backup_path.name}")

        self.install_framework(framework_id, InstallOptions(overwrite=True, backup=False))

        metadata = self._editable_metadata()
        entry = metadata.find(framework_id)
        if entry is not None:
            entry.customized = False
            entry.customized_at = None
            self._save_installed_metadata(metadata)

        self.prompter.notify(f"Framework updated: {framework.name} (v{framework.version})")

    def update_all_frameworks(self) -> list[str]:
        updated = []
        for update in self.check_for_updates():
            self.update_framework(update.framework_id)
            updated.append(update.framework_id)
        return updated

    def sync_customizations(self) -> list[str]:
        """Mark installed frameworks whose content was edited locally."""
        marked = []
        for entry in self._get_installed_metadata().frameworks:
            if entry.customized:
                continue
            if self.is_framework_customized(entry.id):
                self.mark_framework_as_customized(entry.id)
                marked.append(entry.id)
        if marked:
            logger.info("Marked as customized: %s", ", ".join(marked))
        return marked

    # ── Removal ──────────────────────────────────────────────

    def remove_framework(self, framework_id: str) -> None:
        framework = self._require_framework(framework_id)
        self.workspace.delete_file(self._installed_path(framework))

        metadata = self._editable_metadata()
        metadata.frameworks = [f for f in metadata.frameworks if f.id != framework_id]
        self._save_installed_metadata(metadata)
        logger.info("Removed %s", framework_id)

    def clear_caches(self) -> None:
        self._manifest_cache = None
        self._metadata_cache = None
        self._metadata_cache_time = 0.0
