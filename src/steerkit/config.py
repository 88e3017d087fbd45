"""Configuration loading from environment variables and steerkit.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_CONFIG_FILENAME = "steerkit.toml"
_RESOURCES_DIR = Path(__file__).parent / "resources"

DEFAULT_RECOMMENDED = [
    "tdd-bdd-strategy",
    "c4-model-strategy",
    "devops-strategy",
    "4d-safe-strategy",
]

DEFAULT_REQUIRED_SECTIONS = ["Purpose", "Key Concepts", "Best Practices", "Summary"]


@dataclass
class LibraryConfig:
    """Where bundled steering documents and reference docs come from."""

    frameworks_dir: Path = _RESOURCES_DIR / "frameworks"
    references_dir: Path = _RESOURCES_DIR / "references"
    recommended: list[str] = field(default_factory=lambda: list(DEFAULT_RECOMMENDED))
    metadata_cache_ttl: float = 5.0


@dataclass
class ValidationConfig:
    """Steering document quality rules."""

    required_sections: list[str] = field(
        default_factory=lambda: list(DEFAULT_REQUIRED_SECTIONS)
    )
    min_length: int = 500


@dataclass
class LintConfig:
    """Markdown corpus lint settings."""

    duplicate_threshold: float = 0.9
    check_code_blocks: bool = True
    exclude: list[str] = field(default_factory=list)


@dataclass
class SteerkitConfig:
    """Top-level steerkit configuration."""

    workspace: Path | None = None
    library: LibraryConfig = field(default_factory=LibraryConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    lint: LintConfig = field(default_factory=LintConfig)
    log_level: str = "WARNING"


def _optional_path(value: str | None) -> Path | None:
    return Path(value).expanduser() if value else None


def load_config(config_path: Path | None = None) -> SteerkitConfig:
    """Load configuration from environment variables and optional steerkit.toml.

    Priority: environment variables > steerkit.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.steerkit/
        for candidate in [
            Path.cwd() / _CONFIG_FILENAME,
            Path.home() / ".steerkit" / _CONFIG_FILENAME,
        ]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    workspace_data = file_data.get("workspace", {})
    library_data = file_data.get("library", {})
    validation_data = file_data.get("validation", {})
    lint_data = file_data.get("lint", {})

    library_defaults = LibraryConfig()
    frameworks_dir = _optional_path(
        os.getenv("STEERKIT_LIBRARY_DIR", library_data.get("frameworks_dir"))
    )
    references_dir = _optional_path(
        os.getenv("STEERKIT_REFERENCES_DIR", library_data.get("references_dir"))
    )

    config = SteerkitConfig(
        workspace=_optional_path(os.getenv("STEERKIT_WORKSPACE", workspace_data.get("root"))),
        library=LibraryConfig(
            frameworks_dir=frameworks_dir or library_defaults.frameworks_dir,
            references_dir=references_dir or library_defaults.references_dir,
            recommended=library_data.get("recommended", list(DEFAULT_RECOMMENDED)),
            metadata_cache_ttl=float(library_data.get("metadata_cache_ttl", 5.0)),
        ),
        validation=ValidationConfig(
            required_sections=validation_data.get(
                "required_sections", list(DEFAULT_REQUIRED_SECTIONS)
            ),
            min_length=int(validation_data.get("min_length", 500)),
        ),
        lint=LintConfig(
            duplicate_threshold=float(
                os.getenv(
                    "STEERKIT_DUPLICATE_THRESHOLD", lint_data.get("duplicate_threshold", 0.9)
                )
            ),
            check_code_blocks=bool(lint_data.get("check_code_blocks", True)),
            exclude=lint_data.get("exclude", []),
        ),
        log_level=os.getenv("STEERKIT_LOG_LEVEL", file_data.get("log_level", "WARNING")),
    )
    return config
