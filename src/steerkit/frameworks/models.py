"""Framework library types and the installed-frameworks metadata file."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class FrameworkCategory(str, Enum):
    ARCHITECTURE = "architecture"
    TESTING = "testing"
    SECURITY = "security"
    DEVOPS = "devops"
    CLOUD = "cloud"
    INFRASTRUCTURE = "infrastructure"
    WORK_MANAGEMENT = "work-management"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


CATEGORY_LABELS = {
    FrameworkCategory.ARCHITECTURE: "Architecture",
    FrameworkCategory.TESTING: "Testing",
    FrameworkCategory.SECURITY: "Security",
    FrameworkCategory.DEVOPS: "DevOps",
    FrameworkCategory.CLOUD: "Cloud",
    FrameworkCategory.INFRASTRUCTURE: "Infrastructure",
    FrameworkCategory.WORK_MANAGEMENT: "Work Management",
}


class ConflictAction(str, Enum):
    """What to do when an install target already exists."""

    OVERWRITE = "overwrite"
    MERGE = "merge"
    KEEP = "keep"
    CANCEL = "cancel"


class UpdateAction(str, Enum):
    SHOW_DIFF = "show-diff"
    UPDATE = "update"
    CANCEL = "cancel"


@dataclass
class Framework:
    """A steering document shipped in the framework library."""

    id: str
    name: str
    description: str
    category: FrameworkCategory
    version: str
    file_name: str
    dependencies: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> Framework:
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description", ""),
            category=FrameworkCategory(data["category"]),
            version=str(data["version"]),
            file_name=data["file_name"],
            dependencies=list(data.get("dependencies", [])),
        )


@dataclass
class FrameworkManifest:
    version: str
    frameworks: list[Framework] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> FrameworkManifest:
        return cls(
            version=str(data.get("version", "")),
            frameworks=[Framework.from_dict(f) for f in data.get("frameworks", [])],
        )


@dataclass
class InstallOptions:
    overwrite: bool = False
    merge: bool = False
    backup: bool = False


@dataclass
class FrameworkUpdate:
    framework_id: str
    current_version: str
    latest_version: str
    changes: list[str] = field(default_factory=list)


@dataclass
class InstalledFramework:
    """One entry of .kiro/.metadata/installed-frameworks.json."""

    id: str
    version: str
    installed_at: str
    customized: bool = False
    customized_at: str | None = None
    # sha256 of the library copy at install time
    content_hash: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> InstalledFramework:
        if not isinstance(data, dict):
            raise TypeError(f"expected a framework entry object, got {type(data).__name__}")
        return cls(
            id=data["id"],
            version=str(data["version"]),
            installed_at=data.get("installed_at", ""),
            customized=bool(data.get("customized", False)),
            customized_at=data.get("customized_at"),
            content_hash=data.get("content_hash"),
        )

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "version": self.version,
            "installed_at": self.installed_at,
            "customized": self.customized,
        }
        if self.customized_at is not None:
            data["customized_at"] = self.customized_at
        if self.content_hash is not None:
            data["content_hash"] = self.content_hash
        return data


@dataclass
class InstalledFrameworksMetadata:
    frameworks: list[InstalledFramework] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> InstalledFrameworksMetadata:
        if not isinstance(data, dict) or not isinstance(data.get("frameworks", []), list):
            raise TypeError("metadata must be an object with a frameworks list")
        return cls(frameworks=[InstalledFramework.from_dict(f) for f in data.get("frameworks", [])])

    def to_dict(self) -> dict:
        return {"frameworks": [f.to_dict() for f in self.frameworks]}

    def find(self, framework_id: str) -> InstalledFramework | None:
        for entry in self.frameworks:
            if entry.id == framework_id:
                return entry
        return None
