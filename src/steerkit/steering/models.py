"""Steering document types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class SteeringCategory(str, Enum):
    STRATEGY = "strategy"
    PRODUCT = "product"
    TECHNICAL = "technical"
    STRUCTURE = "structure"
    CUSTOM = "custom"


@dataclass
class SteeringItem:
    """A category group or a single document in the steering catalogue."""

    label: str
    path: Path | None
    category: SteeringCategory
    is_custom: bool
    context_value: str
    framework_id: str | None = None
    version: str | None = None
    is_category: bool = False
