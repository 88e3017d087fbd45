"""Exception hierarchy shared by the library and the CLI."""

from __future__ import annotations


class SteerkitError(Exception):
    """Base class for every error steerkit raises on purpose."""


class WorkspaceError(SteerkitError):
    """No workspace is open, or its layout is unusable."""


class FileOperationError(SteerkitError):
    """A read, write, copy or delete inside the workspace failed."""


class FrameworkNotFoundError(SteerkitError):
    def __init__(self, framework_id: str) -> None:
        super().__init__(f"Framework not found: {framework_id}")
        self.framework_id = framework_id


class FrameworkNotInstalledError(SteerkitError):
    def __init__(self, framework_id: str) -> None:
        super().__init__(f"Framework not installed: {framework_id}")
        self.framework_id = framework_id


class ReferenceNotFoundError(SteerkitError):
    """A framework reference document (or the whole directory) is missing."""


class OperationCancelledError(SteerkitError):
    """The user declined a prompt that guards a destructive step."""


class InvalidDocumentNameError(SteerkitError):
    """A custom steering document name is not kebab-case or has a bad length."""


class DocumentExistsError(SteerkitError):
    """The target steering document already exists."""


class NotCustomDocumentError(SteerkitError):
    """Only team-created custom documents may be renamed or deleted."""
