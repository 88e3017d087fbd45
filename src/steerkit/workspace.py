"""File-system access for a steering workspace.

Every read and write the library performs goes through `Workspace`, which
turns OSErrors into `FileOperationError` with a message a user can act on.
"""

from __future__ import annotations

import errno
import fnmatch
import logging
import re
import shutil
from pathlib import Path

from steerkit.errors import FileOperationError, WorkspaceError

logger = logging.getLogger(__name__)

KIRO_DIR = ".kiro"
FRAMEWORKS_DIR = "frameworks"


class Workspace:
    """A project root containing `.kiro/` and `frameworks/`."""

    def __init__(self, root: Path | str | None) -> None:
        self.root = Path(root) if root is not None else None

    # ── Paths ────────────────────────────────────────────────

    def _require_root(self) -> Path:
        if self.root is None:
            raise WorkspaceError("No workspace open")
        return self.root

    @property
    def name(self) -> str:
        return self.root.resolve().name if self.root is not None else "project"

    @property
    def kiro_path(self) -> Path:
        return self._require_root() / KIRO_DIR

    @property
    def steering_path(self) -> Path:
        return self.kiro_path / "steering"

    @property
    def metadata_path(self) -> Path:
        return self.kiro_path / ".metadata"

    @property
    def specs_path(self) -> Path:
        return self.kiro_path / "specs"

    @property
    def settings_path(self) -> Path:
        return self.kiro_path / "settings"

    @property
    def frameworks_path(self) -> Path:
        return self._require_root() / FRAMEWORKS_DIR

    def initialize(self) -> None:
        """Create the .kiro/ layout and frameworks/. Idempotent."""
        for path in [
            self.steering_path,
            self.specs_path,
            self.settings_path,
            self.metadata_path,
            self.frameworks_path,
        ]:
            self.ensure_directory(path)
        logger.info("Workspace initialized at %s", self.root)

    # ── File operations ──────────────────────────────────────

    def ensure_directory(self, path: Path) -> None:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileOperationError(f"Failed to create directory {path}: {e.strerror or e}") from e

    def directory_exists(self, path: Path) -> bool:
        return path.is_dir()

    def file_exists(self, path: Path) -> bool:
        return path.is_file()

    def list_files(self, directory: Path, pattern: str | None = None) -> list[str]:
        """Names of regular files directly inside `directory`, sorted.

        A pattern with `*` or `?` is a glob over the whole name, anything
        else is a regular expression searched in the name.
        """
        try:
            names = sorted(p.name for p in directory.iterdir() if p.is_file())
        except FileNotFoundError:
            return []
        except OSError as e:
            raise FileOperationError(f"Failed to list files in {directory}: {e.strerror or e}") from e

        if pattern:
            if "*" in pattern or "?" in pattern:
                names = [n for n in names if fnmatch.fnmatchcase(n, pattern)]
            else:
                regex = re.compile(pattern)
                names = [n for n in names if regex.search(n)]
        return names

    def read_file(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise FileOperationError(f"File not found: {path}") from e
        except UnicodeDecodeError as e:
            raise FileOperationError(f"Failed to read file {path}: not valid UTF-8") from e
        except OSError as e:
            raise FileOperationError(f"Failed to read file {path}: {e.strerror or e}") from e

    def write_file(self, path: Path, content: str) -> None:
        self.ensure_directory(path.parent)
        try:
            path.write_text(content, encoding="utf-8")
        except PermissionError as e:
            raise FileOperationError(f"Permission denied writing to {path}") from e
        except OSError as e:
            raise FileOperationError(f"Failed to write file {path}: {e.strerror or e}") from e

    def copy_file(self, source: Path, destination: Path) -> None:
        self.ensure_directory(destination.parent)
        try:
            shutil.copyfile(source, destination)
        except FileNotFoundError as e:
            raise FileOperationError(f"Source file not found: {source}") from e
        except OSError as e:
            raise FileOperationError(
                f"Failed to copy file from {source} to {destination}: {e.strerror or e}"
            ) from e

    def delete_file(self, path: Path) -> None:
        """Delete a file. A file that is already gone counts as deleted."""
        try:
            path.unlink()
        except OSError as e:
            if e.errno == errno.ENOENT:
                return
            raise FileOperationError(f"Failed to delete file {path}: {e.strerror or e}") from e
