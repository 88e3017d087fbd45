"""Markdown corpus linter.

Checks a tree of Markdown documents for the properties a documentation
corpus can actually break:

- well-formed structure: closed code fences, heading hierarchy, one H1,
  tables whose rows match the header
- internal links: relative targets exist, `#anchors` match a heading
- code blocks: a declared language, and json/yaml/python blocks that parse
- duplicates: byte-identical files, or same title with high textual overlap

Illustrative snippets that elide code with a `...` line are not parsed.
"""

from __future__ import annotations

import ast
import fnmatch
import hashlib
import json
import logging
import re
from dataclasses import dataclass, field
from difflib import SequenceMatcher
from itertools import combinations
from pathlib import Path
from urllib.parse import unquote

import yaml

from steerkit import markdown
from steerkit.config import LintConfig
from steerkit.errors import FileOperationError
from steerkit.steering.validator import Severity

logger = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")
_ELLIPSIS_RE = re.compile(r"^\s*(?:\.\.\.|…|(?://|#|--)\s*\.\.\..*|/\*\s*\.\.\.\s*\*/)\s*$")
_TITLE_RE = re.compile(r"^#(?:\s|$)")

_JSON_LANGUAGES = {"json"}
_YAML_LANGUAGES = {"yaml", "yml"}
_PYTHON_LANGUAGES = {"python", "py", "python3"}

# Shorter bodies than this are too small to call a near-duplicate
_MIN_OVERLAP_LINES = 3


@dataclass
class Finding:
    path: Path
    line: int  # 1-based
    code: str
    severity: Severity
    message: str

    def format(self) -> str:
        return f"{self.path}:{self.line}: {self.severity.value} {self.code} {self.message}"

    def to_dict(self) -> dict:
        return {
            "path": str(self.path),
            "line": self.line,
            "code": self.code,
            "severity": self.severity.value,
            "message": self.message,
        }


@dataclass
class LintReport:
    files_checked: int = 0
    findings: list[Finding] = field(default_factory=list)

    @property
    def errors(self) -> list[Finding]:
        return [f for f in self.findings if f.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Finding]:
        return [f for f in self.findings if f.severity == Severity.WARNING]

    def codes(self) -> list[str]:
        return [f.code for f in self.findings]

    def format_text(self) -> str:
        lines = [f.format() for f in self.findings]
        lines.append(
            f"{self.files_checked} file(s) checked: {len(self.errors)} error(s), "
            f"{len(self.warnings)} warning(s)"
        )
        return "\n".join(lines)

    def to_json(self) -> str:
        return json.dumps(
            {
                "files_checked": self.files_checked,
                "findings": [f.to_dict() for f in self.findings],
            },
            indent=2,
        )


@dataclass
class _Parsed:
    path: Path
    root: Path
    content: str
    doc: markdown.MarkdownDocument


def _is_illustrative(body: list[str]) -> bool:
    return any(_ELLIPSIS_RE.match(line) for line in body)


def _body_lines(content: str) -> list[str]:
    """Non-blank, whitespace-normalised lines without H1 titles."""
    lines = (" ".join(line.split()) for line in content.splitlines())
    return [line for line in lines if line and not _TITLE_RE.match(line)]


def text_overlap(a: str, b: str) -> float:
    """Share of the shorter body's lines that also appear, in order, in the longer.

    Titles are left out. A shorter body with fewer than three lines only
    scores when both bodies are equal.
    """
    a_lines, b_lines = _body_lines(a), _body_lines(b)
    if a_lines == b_lines:
        return 1.0
    shorter = min(len(a_lines), len(b_lines))
    if shorter < _MIN_OVERLAP_LINES:
        return 0.0
    matcher = SequenceMatcher(None, a_lines, b_lines, autojunk=False)
    matched = sum(block.size for block in matcher.get_matching_blocks())
    return matched / shorter


class CorpusLinter:
    def __init__(self, config: LintConfig | None = None) -> None:
        self.config = config or LintConfig()
        self._cache: dict[Path, _Parsed | None] = {}

    # ── Discovery ────────────────────────────────────────────

    def _excluded(self, path: Path, root: Path) -> bool:
        try:
            rel = path.relative_to(root).as_posix()
        except ValueError:
            rel = path.as_posix()
        return any(fnmatch.fnmatch(rel, pattern) for pattern in self.config.exclude)

    def discover(self, paths: list[Path]) -> list[tuple[Path, Path]]:
        """(file, root) pairs. Directories are searched recursively for *.md."""
        found: list[tuple[Path, Path]] = []
        seen: set[Path] = set()
        for path in paths:
            path = Path(path)
            if path.is_dir():
                candidates = [(p, path) for p in sorted(path.rglob("*.md")) if p.is_file()]
            else:
                candidates = [(path, path.parent)]
            for file_path, root in candidates:
                resolved = file_path.resolve()
                if resolved in seen or self._excluded(file_path, root):
                    continue
                seen.add(resolved)
                found.append((file_path, root))
        return found

    def _load(self, path: Path, root: Path) -> _Parsed | None:
        key = path.resolve()
        if key not in self._cache:
            try:
                content = path.read_text(encoding="utf-8")
            except FileNotFoundError as e:
                raise FileOperationError(f"File not found: {path}") from e
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping unreadable %s: %s", path, e)
                self._cache[key] = None
                return None
            self._cache[key] = _Parsed(path=path, root=root, content=content, doc=markdown.parse(content))
        return self._cache[key]

    # ── Entry points ─────────────────────────────────────────

    def lint_paths(self, paths: list[Path]) -> LintReport:
        report = LintReport()
        parsed: list[_Parsed] = []
        for file_path, root in self.discover(paths):
            item = self._load(file_path, root)
            if item is None:
                continue
            parsed.append(item)
            report.findings.extend(self._lint_parsed(item))
        report.files_checked = len(parsed)
        report.findings.extend(self.find_duplicates(parsed))
        logger.info(
            "Linted %d file(s): %d finding(s)", report.files_checked, len(report.findings)
        )
        return report

    def lint_file(self, path: Path, root: Path | None = None) -> list[Finding]:
        path = Path(path)
        item = self._load(path, Path(root) if root else path.parent)
        return self._lint_parsed(item) if item is not None else []

    def _lint_parsed(self, item: _Parsed) -> list[Finding]:
        findings = [
            *self._check_structure(item),
            *self._check_tables(item),
            *self._check_links(item),
        ]
        if self.config.check_code_blocks:
            findings.extend(self._check_code_blocks(item))
        findings.sort(key=lambda f: f.line)
        return findings

    # ── Structure ────────────────────────────────────────────

    def _check_structure(self, item: _Parsed) -> list[Finding]:
        findings = []
        doc = item.doc
        for fence in doc.fences:
            if fence.end is None:
                findings.append(
                    Finding(
                        item.path,
                        fence.start + 1,
                        "unclosed-code-fence",
                        Severity.ERROR,
                        f"Code fence {fence.marker} opened here is never closed",
                    )
                )

        previous_level = 0
        seen_h1 = False
        for heading in doc.headings:
            line = heading.line + 1
            if not heading.text:
                findings.append(
                    Finding(item.path, line, "empty-heading", Severity.ERROR, "Heading cannot be empty")
                )
            if previous_level and heading.level > previous_level + 1:
                findings.append(
                    Finding(
                        item.path,
                        line,
                        "heading-hierarchy",
                        Severity.WARNING,
                        f"Heading level skipped (from {previous_level} to {heading.level})",
                    )
                )
            if heading.level == 1:
                if seen_h1:
                    findings.append(
                        Finding(
                            item.path,
                            line,
                            "multiple-h1",
                            Severity.WARNING,
                            f'Second top-level heading "{heading.text}"',
                        )
                    )
                seen_h1 = True
            previous_level = heading.level
        return findings

    def _check_tables(self, item: _Parsed) -> list[Finding]:
        findings = []
        for table in item.doc.tables:
            for index, (line, columns) in enumerate(table.rows):
                if columns == table.header_columns:
                    continue
                is_separator = index == 0
                findings.append(
                    Finding(
                        item.path,
                        line + 1,
                        "table-column-mismatch",
                        Severity.ERROR if is_separator else Severity.WARNING,
                        f"{'Separator' if is_separator else 'Row'} has {columns} column(s), "
                        f"header has {table.header_columns}",
                    )
                )
        return findings

    # ── Links ────────────────────────────────────────────────

    def _check_links(self, item: _Parsed) -> list[Finding]:
        findings = []
        own_anchors: set[str] | None = None
        for link in item.doc.links:
            line = link.line + 1
            target = link.target
            if target.startswith("<") and ">" in target:
                target = target[1 : target.index(">")]
            else:
                target = target.split()[0] if target else ""

            if not target:
                findings.append(
                    Finding(item.path, line, "empty-link-url", Severity.ERROR, "Link has empty URL")
                )
                continue
            if _SCHEME_RE.match(target) or target.startswith("//"):
                continue

            path_part, _, anchor = target.partition("#")
            path_part, anchor = unquote(path_part), unquote(anchor)

            if not path_part:
                if own_anchors is None:
                    own_anchors = markdown.anchors(item.doc.headings)
                if anchor and anchor.lower() not in own_anchors:
                    findings.append(
                        Finding(
                            item.path,
                            line,
                            "broken-anchor",
                            Severity.ERROR,
                            f"No heading for anchor #{anchor}",
                        )
                    )
                continue

            if path_part.startswith("/"):
                resolved = item.root / path_part.lstrip("/")
            else:
                resolved = item.path.parent / path_part
            if not resolved.exists():
                findings.append(
                    Finding(
                        item.path,
                        line,
                        "broken-link",
                        Severity.ERROR,
                        f"Link target does not exist: {path_part}",
                    )
                )
                continue

            if anchor and resolved.is_file() and resolved.suffix.lower() == ".md":
                linked = self._load(resolved, item.root)
                if linked is not None and anchor.lower() not in markdown.anchors(linked.doc.headings):
                    findings.append(
                        Finding(
                            item.path,
                            line,
                            "broken-anchor",
                            Severity.ERROR,
                            f"No heading for anchor #{anchor} in {path_part}",
                        )
                    )
        return findings

    # ── Code blocks ──────────────────────────────────────────

    def _check_code_blocks(self, item: _Parsed) -> list[Finding]:
        findings = []
        for fence in item.doc.fences:
            line = fence.start + 1
            language = fence.language
            if not language:
                findings.append(
                    Finding(
                        item.path,
                        line,
                        "missing-code-language",
                        Severity.INFO,
                        "Code block has no language tag",
                    )
                )
                continue
            if fence.end is None or _is_illustrative(fence.body):
                continue
            error = self._syntax_error(language, "\n".join(fence.body))
            if error:
                findings.append(
                    Finding(
                        item.path,
                        line,
                        "invalid-code-block",
                        Severity.WARNING,
                        f"{language} block does not parse: {error}",
                    )
                )
        return findings

    def _syntax_error(self, language: str, source: str) -> str | None:
        """Best-effort parse of a snippet; None when it parses or is not checked."""
        if not source.strip():
            return None
        try:
            if language in _JSON_LANGUAGES:
                json.loads(source)
            elif language in _YAML_LANGUAGES:
                list(yaml.safe_load_all(source))
            elif language in _PYTHON_LANGUAGES:
                ast.parse(source)
        except json.JSONDecodeError as e:
            return f"line {e.lineno}: {e.msg}"
        except yaml.YAMLError as e:
            mark = getattr(e, "problem_mark", None)
            problem = getattr(e, "problem", None) or str(e)
            return f"line {mark.line + 1}: {problem}" if mark is not None else problem
        except SyntaxError as e:
            return f"line {e.lineno}: {e.msg}"
        return None

    # ── Duplicates ───────────────────────────────────────────

    def find_duplicates(self, parsed: list[_Parsed]) -> list[Finding]:
        """One finding per duplicate pair, reported on the later file."""
        findings = []
        digests = {
            item.path: hashlib.sha256(item.content.encode("utf-8")).hexdigest() for item in parsed
        }
        for first, second in combinations(parsed, 2):
            if digests[first.path] == digests[second.path]:
                findings.append(
                    Finding(
                        second.path,
                        1,
                        "duplicate-document",
                        Severity.WARNING,
                        f"Identical to {first.path}",
                    )
                )
                continue

            title = first.doc.title
            if not title or second.doc.title is None:
                continue
            if title.casefold() != second.doc.title.casefold():
                continue
            overlap = text_overlap(first.content, second.content)
            if overlap >= self.config.duplicate_threshold:
                findings.append(
                    Finding(
                        second.path,
                        1,
                        "duplicate-document",
                        Severity.WARNING,
                        f'Near-duplicate of {first.path} (title "{title}", '
                        f"{overlap:.0%} overlap); reconcile the two copies",
                    )
                )
        return findings
