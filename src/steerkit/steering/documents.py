"""Team-created custom steering documents (`custom-<name>.md`)."""

from __future__ import annotations

import logging
import re
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING

from steerkit.errors import (
    DocumentExistsError,
    InvalidDocumentNameError,
    NotCustomDocumentError,
    OperationCancelledError,
)
from steerkit.frameworks.glossary import is_steering_document
from steerkit.prompts import AutoPrompter
from steerkit.steering.catalog import categorize_file
from steerkit.steering.models import SteeringCategory

if TYPE_CHECKING:
    from steerkit.prompts import Prompter
    from steerkit.workspace import Workspace

logger = logging.getLogger(__name__)

CUSTOM_PREFIX = "custom-"

_KEBAB_CASE_RE = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


def validate_document_name(value: str) -> str | None:
    """Return an error message, or None if `value` is an acceptable name."""
    if not value:
        return "Document name is required"
    if not _KEBAB_CASE_RE.match(value):
        return (
            "Document name must be in kebab-case format "
            "(lowercase letters, numbers, and hyphens only)"
        )
    if len(value) < 3:
        return "Document name must be at least 3 characters long"
    if len(value) > 50:
        return "Document name must be 50 characters or less"
    return None


def custom_file_name(name: str) -> str:
    return f"{CUSTOM_PREFIX}{name}.md"


def generate_custom_steering_template(document_name: str, today: date | None = None) -> str:
    display_name = " ".join(word.capitalize() for word in document_name.split("-"))
    created = (today or date.today()).isoformat()
    return f"""# {display_name} Guide

**Created:** {created}
**Status:** Draft

## Purpose

Define the purpose and scope of this custom steering document. Explain what problem it solves and when it should be applied.

**Key Questions:**
- What problem does this practice solve?
- When should this guidance be applied?
- Who is the target audience?

## Key Concepts

List and explain the core concepts that developers need to understand.

### Concept 1

Explain the first key concept with clear definitions and context.

### Concept 2

Explain the second key concept with clear definitions and context.

## Best Practices

Define the recommended practices and patterns to follow.

### Practice 1: [Name]

**Description:** Explain what this practice is and why it's important.

**When to Use:** Describe the scenarios where this practice applies.

**How to Implement:**
1. Step-by-step instructions
2. Code examples or configuration samples
3. Expected outcomes

**Example:**
```
// Provide concrete code examples
```

### Practice 2: [Name]

**Description:** Explain what this practice is and why it's important.

**When to Use:** Describe the scenarios where this practice applies.

**How to Implement:**
1. Step-by-step instructions
2. Code examples or configuration samples
3. Expected outcomes

## Anti-Patterns

Identify common mistakes and what to avoid.

### Anti-Pattern 1: [Name]

**Problem:** Describe the problematic approach.

**Why It's Bad:** Explain the negative consequences.

**Instead Do:** Provide the correct alternative approach.

**Example:**
```
❌ Bad approach
// Show what NOT to do

✅ Good approach
// Show the correct way
```

## Integration with Development Process

Explain how this guidance integrates with the development workflow.

### Requirements Phase

How this practice applies during requirements gathering.

### Design Phase

How this practice applies during design.

### Development Phase

How this practice applies during implementation.

### Testing Phase

How this practice applies during testing.

## Quality Standards

Define measurable quality criteria for this practice.

**Checklist:**
- [ ] Criterion 1
- [ ] Criterion 2
- [ ] Criterion 3

## Tools and Resources

List relevant tools, libraries, and reference materials.

**Tools:**
- Tool 1: Description and link
- Tool 2: Description and link

**References:**
- Reference 1: Link and description
- Reference 2: Link and description

## Summary

Provide a concise summary of the key takeaways.

**Core Principles:**
1. Principle 1
2. Principle 2
3. Principle 3

**Quick Reference:**
- Do: List of recommended actions
- Don't: List of things to avoid

**Golden Rule:** State the single most important principle in one sentence.
"""


class CustomSteeringDocuments:
    """Create, rename and delete custom steering documents.

    Rename and delete only touch `custom-*.md` files inside the workspace's
    steering directory.
    """

    def __init__(self, workspace: Workspace, prompter: Prompter | None = None) -> None:
        self.workspace = workspace
        self.prompter: Prompter = prompter or AutoPrompter()

    def _check_name(self, name: str) -> None:
        error = validate_document_name(name)
        if error:
            raise InvalidDocumentNameError(error)

    def _check_custom(self, path: Path) -> None:
        if categorize_file(path.name) != SteeringCategory.CUSTOM:
            raise NotCustomDocumentError(
                f"Only custom steering documents can be changed: {path.name}"
            )
        if not is_steering_document(path, self.workspace):
            raise NotCustomDocumentError(
                f"Not a steering document in {self.workspace.steering_path}: {path}"
            )

    def create(self, name: str, overwrite: bool = False, today: date | None = None) -> Path:
        self._check_name(name)
        path = self.workspace.steering_path / custom_file_name(name)
        if self.workspace.file_exists(path) and not overwrite:
            raise DocumentExistsError(f'File "{path.name}" already exists.')
        self.workspace.write_file(path, generate_custom_steering_template(name, today))
        logger.info("Custom steering document created: %s", path.name)
        return path

    def rename(self, path: Path, new_name: str) -> Path:
        """Rename to custom-<new_name>.md. Same name is a no-op."""
        path = Path(path)
        self._check_custom(path)
        self._check_name(new_name)

        new_path = self.workspace.steering_path / custom_file_name(new_name)
        if new_path.name == path.name:
            return path
        if self.workspace.file_exists(new_path):
            raise DocumentExistsError(
                f'File "{new_path.name}" already exists. Choose a different name.'
            )

        content = self.workspace.read_file(path)
        self.workspace.write_file(new_path, content)
        self.workspace.delete_file(path)
        logger.info('Renamed "%s" to "%s"', path.name, new_path.name)
        return new_path

    def delete(self, path: Path) -> None:
        path = Path(path)
        self._check_custom(path)
        if not self.prompter.confirm_delete(path.name):
            raise OperationCancelledError("Deletion cancelled by user")
        self.workspace.delete_file(path)
        logger.info('Deleted "%s"', path.name)
