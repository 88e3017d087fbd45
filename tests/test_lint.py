"""Tests for the Markdown corpus linter."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from steerkit.config import LibraryConfig, LintConfig
from steerkit.errors import FileOperationError
from steerkit.lint import CorpusLinter, text_overlap
from steerkit.steering.validator import Severity

APM_DRAFT = """# Application Performance Monitoring (APM) Strategy

## Goals

- Detect user-visible degradation before users report it.
- Trace a slow request across every service it touches.
- Tie alerts to service level objectives.

## Signals

| Signal | Examples |
|--------|----------|
| Metrics | latency, throughput, error rate |
| Traces | distributed request spans |
| Logs | structured application events |

## Service Level Objectives

- SLI: the measured indicator.
- SLO: the target for the SLI.
- SLA: the contractual promise.
"""

APM_COMPLETE = APM_DRAFT + """
## Alerting

Alert on error budget burn rate rather than raw thresholds.

## Dashboards

One dashboard per service with the four golden signals.
"""


def _write(root: Path, name: str, content: str) -> Path:
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture
def linter() -> CorpusLinter:
    return CorpusLinter()


class TestStructure:
    def test_clean_document(self, tmp_path: Path, linter: CorpusLinter):
        _write(tmp_path, "doc.md", "# Title\n\n## Section\n\nText.\n")
        report = linter.lint_paths([tmp_path])
        assert report.files_checked == 1
        assert report.findings == []

    def test_unclosed_fence(self, tmp_path: Path, linter: CorpusLinter):
        path = _write(tmp_path, "doc.md", "# Title\n\n```yaml\nkey: value\n")
        findings = linter.lint_file(path)
        assert [(f.code, f.line, f.severity) for f in findings] == [
            ("unclosed-code-fence", 3, Severity.ERROR)
        ]

    def test_headings(self, tmp_path: Path, linter: CorpusLinter):
        path = _write(tmp_path, "doc.md", "# One\n\n### Three\n\n##\n\n# Two\n")
        codes = [(f.code, f.line) for f in linter.lint_file(path)]
        assert codes == [("heading-hierarchy", 3), ("empty-heading", 5), ("multiple-h1", 7)]

    def test_table_mismatch(self, tmp_path: Path, linter: CorpusLinter):
        path = _write(
            tmp_path,
            "doc.md",
            "# T\n\n| a | b | c |\n|---|---|\n| 1 | 2 | 3 |\n| 1 | 2 |\n",
        )
        findings = linter.lint_file(path)
        assert [(f.code, f.line, f.severity) for f in findings] == [
            ("table-column-mismatch", 4, Severity.ERROR),
            ("table-column-mismatch", 6, Severity.WARNING),
        ]
        assert findings[0].message == "Separator has 2 column(s), header has 3"


class TestLinks:
    def test_relative_links(self, tmp_path: Path, linter: CorpusLinter):
        _write(tmp_path, "guide.md", "# Guide\n\n## Setup Steps\n")
        path = _write(
            tmp_path,
            "index.md",
            "# Index\n\n"
            "[ok](guide.md) [ok](guide.md#setup-steps) [ok](#index)\n"
            "[missing](nope.md)\n"
            "[bad](guide.md#install)\n"
            "[bad](#nowhere)\n"
            "[web](https://example.com/x.md) [mail](mailto:a@b.c) [proto](//cdn/x)\n"
            "[empty]()\n",
        )
        findings = linter.lint_file(path)
        assert [(f.code, f.line) for f in findings] == [
            ("broken-link", 4),
            ("broken-anchor", 5),
            ("broken-anchor", 6),
            ("empty-link-url", 8),
        ]
        assert findings[0].message == "Link target does not exist: nope.md"
        assert findings[1].message == "No heading for anchor #install in guide.md"

    def test_root_relative_and_encoded(self, tmp_path: Path, linter: CorpusLinter):
        _write(tmp_path, "docs/my guide.md", "# My Guide\n")
        _write(tmp_path, "docs/sub/page.md", "# Page\n\n[up](/docs/my%20guide.md) [rel](../my%20guide.md)\n")
        report = linter.lint_paths([tmp_path])
        assert report.findings == []

    def test_parentheses_in_targets(self, tmp_path: Path, linter: CorpusLinter):
        _write(tmp_path, "docs/a_(b).md", "# A\n")
        path = _write(tmp_path, "index.md", "# Index\n\n[a](docs/a_(b).md) (see [gone](docs/c_(d).md))\n")
        findings = linter.lint_file(path)
        assert [(f.code, f.message) for f in findings] == [
            ("broken-link", "Link target does not exist: docs/c_(d).md")
        ]

    def test_linked_file_not_utf8(self, tmp_path: Path, linter: CorpusLinter):
        (tmp_path / "bad.md").write_bytes(b"# T\n\xff\xfe\n")
        _write(tmp_path, "index.md", "# Index\n\n[bad](bad.md#t)\n")
        report = linter.lint_paths([tmp_path])
        assert report.files_checked == 1
        assert report.findings == []

    def test_links_in_code_are_ignored(self, tmp_path: Path, linter: CorpusLinter):
        path = _write(tmp_path, "doc.md", "# T\n\n```text\n[x](missing.md)\n```\n\n`[y](gone.md)`\n")
        assert linter.lint_file(path) == []


class TestCodeBlocks:
    def test_missing_language_is_info(self, tmp_path: Path, linter: CorpusLinter):
        path = _write(tmp_path, "doc.md", "# T\n\n```\nplain\n```\n")
        findings = linter.lint_file(path)
        assert [(f.code, f.severity) for f in findings] == [
            ("missing-code-language", Severity.INFO)
        ]

    def test_invalid_snippets(self, tmp_path: Path, linter: CorpusLinter):
        path = _write(
            tmp_path,
            "doc.md",
            "# T\n\n"
            "```json\n{\"a\": 1,}\n```\n\n"
            "```yaml\nkey: [unclosed\n```\n\n"
            "```python\ndef broken(:\n```\n",
        )
        findings = linter.lint_file(path)
        assert [(f.code, f.line) for f in findings] == [
            ("invalid-code-block", 3),
            ("invalid-code-block", 7),
            ("invalid-code-block", 11),
        ]
        assert findings[0].message.startswith("json block does not parse: line 1")

    def test_valid_and_illustrative_snippets(self, tmp_path: Path, linter: CorpusLinter):
        path = _write(
            tmp_path,
            "doc.md",
            "# T\n\n"
            "```json\n{\"a\": [1, 2]}\n```\n\n"
            "```yaml\n---\na: 1\n---\nb: 2\n```\n\n"
            "```python\nclass Service:\n    # ...\n    def run(self\n```\n\n"
            "```csharp\npublic class X { ... }\n```\n",
        )
        assert linter.lint_file(path) == []

    def test_code_checks_can_be_disabled(self, tmp_path: Path):
        path = _write(tmp_path, "doc.md", "# T\n\n```\nplain\n```\n")
        assert CorpusLinter(LintConfig(check_code_blocks=False)).lint_file(path) == []


class TestDuplicates:
    def test_overlap_measure(self):
        assert text_overlap(APM_DRAFT, APM_COMPLETE) == 1.0
        assert text_overlap("a\nb\n", "c\nd\n") == 0.0
        assert text_overlap("", "") == 1.0

    def test_title_only_stub_is_not_a_duplicate(self, tmp_path: Path, linter: CorpusLinter):
        body = "".join(f"Unrelated line {i}.\n" for i in range(100))
        _write(tmp_path, "a.md", "# APM Strategy\n")
        _write(tmp_path, "b.md", "# APM Strategy\n\n" + body)
        assert text_overlap("# APM Strategy\n", "# APM Strategy\n\n" + body) == 0.0
        assert linter.lint_paths([tmp_path]).findings == []

    def test_short_bodies_need_to_match_exactly(self):
        assert text_overlap("# T\n\none\n", "# T\n\none\ntwo\nthree\n") == 0.0
        assert text_overlap("# T\n\none\n", "# T\n\n  one\n") == 1.0

    def test_apm_documents_at_different_completion_states(self, tmp_path: Path, linter):
        _write(tmp_path, "apm/apm-strategy.md", APM_DRAFT)
        _write(tmp_path, "monitoring/apm-strategy-complete.md", APM_COMPLETE)
        report = linter.lint_paths([tmp_path])

        duplicates = [f for f in report.findings if f.code == "duplicate-document"]
        assert len(duplicates) == 1
        finding = duplicates[0]
        assert finding.path == tmp_path / "monitoring" / "apm-strategy-complete.md"
        assert finding.severity == Severity.WARNING
        assert "Application Performance Monitoring (APM) Strategy" in finding.message
        assert "100% overlap" in finding.message
        assert str(tmp_path / "apm" / "apm-strategy.md") in finding.message

    def test_same_title_different_content(self, tmp_path: Path, linter: CorpusLinter):
        _write(tmp_path, "a.md", "# Overview\n\nAlpha.\nBeta.\n")
        _write(tmp_path, "b.md", "# Overview\n\nGamma.\nDelta.\n")
        assert linter.lint_paths([tmp_path]).findings == []

    def test_threshold_is_configurable(self, tmp_path: Path):
        _write(tmp_path, "a.md", "# Notes\n\none\ntwo\nthree\nfour\n")
        _write(tmp_path, "b.md", "# Notes\n\none\ntwo\nthree\nfive\n")
        assert CorpusLinter(LintConfig(duplicate_threshold=0.9)).lint_paths([tmp_path]).findings == []
        report = CorpusLinter(LintConfig(duplicate_threshold=0.75)).lint_paths([tmp_path])
        assert report.codes() == ["duplicate-document"]

    def test_identical_files(self, tmp_path: Path, linter: CorpusLinter):
        _write(tmp_path, "a.md", "No title here.\n")
        _write(tmp_path, "b.md", "No title here.\n")
        report = linter.lint_paths([tmp_path])
        assert [f.message for f in report.findings] == [f"Identical to {tmp_path / 'a.md'}"]


class TestReport:
    def test_discovery_and_exclude(self, tmp_path: Path):
        _write(tmp_path, "keep.md", "# Keep\n")
        _write(tmp_path, "drafts/skip.md", "# Skip\n\n```\n")
        _write(tmp_path, "notes.txt", "ignored")
        linter = CorpusLinter(LintConfig(exclude=["drafts/*"]))
        report = linter.lint_paths([tmp_path, tmp_path / "keep.md"])
        assert report.files_checked == 1
        assert report.findings == []

    def test_missing_path(self, tmp_path: Path, linter: CorpusLinter):
        with pytest.raises(FileOperationError, match="File not found"):
            linter.lint_paths([tmp_path / "missing.md"])

    def test_text_and_json(self, tmp_path: Path, linter: CorpusLinter):
        path = _write(tmp_path, "doc.md", "# T\n\n[x](gone.md)\n")
        report = linter.lint_paths([path])
        assert report.format_text().splitlines() == [
            f"{path}:3: error broken-link Link target does not exist: gone.md",
            "1 file(s) checked: 1 error(s), 0 warning(s)",
        ]
        data = json.loads(report.to_json())
        assert data["files_checked"] == 1
        assert data["findings"][0]["code"] == "broken-link"
        assert data["findings"][0]["line"] == 3

    def test_bundled_corpus_is_clean(self):
        library = LibraryConfig()
        report = CorpusLinter().lint_paths([library.frameworks_dir, library.references_dir])
        assert report.files_checked >= 13
        assert report.findings == [], report.format_text()
