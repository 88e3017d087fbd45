"""Validate steering documents against the team's quality standards.

Three passes, each returning `ValidationIssue`s:

- structure:  required sections present as headings
- content:    actionable guidance, examples, minimum length
- formatting: heading hierarchy, closed code blocks, non-empty links
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from steerkit import markdown
from steerkit.config import DEFAULT_REQUIRED_SECTIONS


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class ValidationIssue:
    severity: Severity
    message: str
    code: str
    line: int = 0
    start: int = 0
    end: int = 0


@dataclass
class ValidationResult:
    is_valid: bool
    issues: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)


_ACTIONABLE_PATTERNS = [
    re.compile(r"^\s*[-*+]\s+", re.MULTILINE),
    re.compile(r"^\s*\d+\.\s+", re.MULTILINE),
    re.compile(
        r"\b(use|implement|create|define|ensure|verify|check|validate|configure|set up|install|deploy)\b",
        re.IGNORECASE,
    ),
]

_EXAMPLE_PATTERNS = [
    re.compile(r"```[\s\S]*?```"),
    re.compile(r"^#+\s*example", re.IGNORECASE | re.MULTILINE),
    re.compile(r"\bexample:", re.IGNORECASE),
    re.compile(r"\bfor example\b", re.IGNORECASE),
]


class SteeringValidator:
    """Checks a steering document and reports errors and warnings."""

    def __init__(
        self,
        required_sections: Sequence[str] = tuple(DEFAULT_REQUIRED_SECTIONS),
        min_length: int = 500,
    ) -> None:
        self.required_sections = list(required_sections)
        self.min_length = min_length

    def validate(self, content: str) -> ValidationResult:
        doc = markdown.parse(content)
        all_issues = [
            *self.validate_structure(content, doc),
            *self.validate_content(content),
            *self.validate_formatting(content, doc),
        ]
        errors = [i for i in all_issues if i.severity == Severity.ERROR]
        warnings = [i for i in all_issues if i.severity == Severity.WARNING]
        return ValidationResult(is_valid=not errors, issues=errors, warnings=warnings)

    # ── Structure ────────────────────────────────────────────

    def validate_structure(
        self, content: str, doc: markdown.MarkdownDocument | None = None
    ) -> list[ValidationIssue]:
        doc = doc or markdown.parse(content)
        heading_texts = [h.text.lower() for h in doc.headings]
        issues = []
        for section in self.required_sections:
            if not any(text.startswith(section.lower()) for text in heading_texts):
                issues.append(
                    ValidationIssue(
                        severity=Severity.ERROR,
                        message=f'Missing required section: "{section}"',
                        code="missing-section",
                    )
                )
        return issues

    # ── Content ──────────────────────────────────────────────

    def validate_content(self, content: str) -> list[ValidationIssue]:
        issues = []
        if not any(p.search(content) for p in _ACTIONABLE_PATTERNS):
            issues.append(
                ValidationIssue(
                    severity=Severity.WARNING,
                    message="Document should include actionable guidance "
                    "(use bullet points, numbered lists, or imperative verbs)",
                    code="no-actionable-guidance",
                )
            )
        if not any(p.search(content) for p in _EXAMPLE_PATTERNS):
            issues.append(
                ValidationIssue(
                    severity=Severity.WARNING,
                    message="Document should include examples to illustrate key concepts",
                    code="no-examples",
                )
            )
        if len(content.strip()) < self.min_length:
            issues.append(
                ValidationIssue(
                    severity=Severity.WARNING,
                    message="Document appears too short. "
                    "Consider adding more detailed guidance and examples.",
                    code="content-too-short",
                )
            )
        return issues

    # ── Formatting ───────────────────────────────────────────

    def validate_formatting(
        self, content: str, doc: markdown.MarkdownDocument | None = None
    ) -> list[ValidationIssue]:
        doc = doc or markdown.parse(content)
        return [
            *self._validate_heading_hierarchy(doc),
            *self._validate_code_blocks(doc),
            *self._validate_links(doc),
        ]

    def _validate_heading_hierarchy(self, doc: markdown.MarkdownDocument) -> list[ValidationIssue]:
        issues = []
        previous_level = 0
        for heading in doc.headings:
            length = len(doc.lines[heading.line])
            if not heading.text:
                issues.append(
                    ValidationIssue(
                        severity=Severity.ERROR,
                        message="Heading cannot be empty",
                        code="empty-heading",
                        line=heading.line,
                        end=length,
                    )
                )
            if previous_level > 0 and heading.level > previous_level + 1:
                issues.append(
                    ValidationIssue(
                        severity=Severity.WARNING,
                        message=f"Heading level skipped (from {previous_level} to "
                        f"{heading.level}). Use proper hierarchy.",
                        code="heading-hierarchy",
                        line=heading.line,
                        end=length,
                    )
                )
            previous_level = heading.level
        return issues

    def _validate_code_blocks(self, doc: markdown.MarkdownDocument) -> list[ValidationIssue]:
        issues = []
        for fence in doc.fences:
            if fence.end is None:
                issues.append(
                    ValidationIssue(
                        severity=Severity.ERROR,
                        message=f"Code block is not closed (missing closing {fence.marker})",
                        code="unclosed-code-block",
                        line=fence.start,
                        end=len(doc.lines[fence.start]),
                    )
                )
        return issues

    def _validate_links(self, doc: markdown.MarkdownDocument) -> list[ValidationIssue]:
        issues = []
        for link in doc.links:
            span = {"line": link.line, "start": link.column, "end": link.column + link.length}
            if not link.is_image and not link.text.strip():
                issues.append(
                    ValidationIssue(
                        severity=Severity.WARNING,
                        message="Link has empty text",
                        code="empty-link-text",
                        **span,
                    )
                )
            if not link.target:
                issues.append(
                    ValidationIssue(
                        severity=Severity.ERROR,
                        message="Link has empty URL",
                        code="empty-link-url",
                        **span,
                    )
                )
        return issues
