"""Minimal line-oriented Markdown scanning shared by the validator and the linter.

Only the parts of CommonMark/GFM that the checks need: fenced code blocks,
ATX headings, inline links and pipe tables. Everything is reported with
0-based line numbers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)$")
_HEADING_RE = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?[ \t]*$")
_CLOSING_HASHES_RE = re.compile(r"(?:^|[ \t]+)#+$")
_LINK_RE = re.compile(r"(!?)\[([^\]]*)\]\(((?:[^()]|\([^()]*\))*)\)")
_INLINE_CODE_RE = re.compile(r"`+[^`]*`+")
_TABLE_SEPARATOR_RE = re.compile(r"^\s*\|?\s*:?-+:?\s*(\|\s*:?-+:?\s*)*\|?\s*$")
_SLUG_STRIP_RE = re.compile(r"[^\w\- ]", re.UNICODE)


@dataclass
class CodeFence:
    start: int
    end: int | None  # None: never closed
    marker: str
    info: str
    body: list[str] = field(default_factory=list)

    @property
    def language(self) -> str:
        return self.info.split()[0].lower() if self.info.strip() else ""


@dataclass
class Heading:
    line: int
    level: int
    text: str


@dataclass
class Link:
    line: int
    column: int
    length: int
    text: str
    target: str
    is_image: bool = False


@dataclass
class Table:
    line: int
    header_columns: int
    rows: list[tuple[int, int]]  # (line, column count), separator row included


@dataclass
class MarkdownDocument:
    lines: list[str]
    fences: list[CodeFence]
    headings: list[Heading]
    links: list[Link]
    tables: list[Table]

    @property
    def title(self) -> str | None:
        for heading in self.headings:
            if heading.level == 1:
                return heading.text
        return None


def find_fences(lines: list[str]) -> list[CodeFence]:
    """Fenced code blocks. A closing fence uses the opening character, at least as long."""
    fences: list[CodeFence] = []
    current: CodeFence | None = None
    for i, line in enumerate(lines):
        match = _FENCE_RE.match(line)
        if current is None:
            if match:
                marker, info = match.group(1), match.group(2)
                # Backtick fences may not carry backticks in the info string
                if marker[0] == "`" and "`" in info:
                    continue
                current = CodeFence(start=i, end=None, marker=marker, info=info.strip())
            continue
        if (
            match
            and match.group(1)[0] == current.marker[0]
            and len(match.group(1)) >= len(current.marker)
            and not match.group(2).strip()
        ):
            current.end = i
            fences.append(current)
            current = None
        else:
            current.body.append(line)
    if current is not None:
        fences.append(current)
    return fences


def fenced_lines(fences: list[CodeFence], line_count: int) -> set[int]:
    inside: set[int] = set()
    for fence in fences:
        end = fence.end if fence.end is not None else line_count - 1
        inside.update(range(fence.start, end + 1))
    return inside


def _heading_text(raw: str | None) -> str:
    text = (raw or "").strip()
    return _CLOSING_HASHES_RE.sub("", text).strip() if text.endswith("#") else text


def parse(content: str) -> MarkdownDocument:
    lines = content.split("\n")
    fences = find_fences(lines)
    skip = fenced_lines(fences, len(lines))

    headings: list[Heading] = []
    links: list[Link] = []
    tables: list[Table] = []
    table: Table | None = None

    for i, line in enumerate(lines):
        if i in skip:
            table = None
            continue

        match = _HEADING_RE.match(line)
        if match:
            headings.append(Heading(line=i, level=len(match.group(1)), text=_heading_text(match.group(2))))

        scrubbed = _INLINE_CODE_RE.sub(lambda m: " " * len(m.group(0)), line)
        for link in _LINK_RE.finditer(scrubbed):
            links.append(
                Link(
                    line=i,
                    column=link.start(),
                    length=len(link.group(0)),
                    text=link.group(2),
                    target=link.group(3).strip(),
                    is_image=bool(link.group(1)),
                )
            )

        if table is not None:
            if "|" in line and line.strip():
                table.rows.append((i, count_cells(line)))
                continue
            table = None
        next_line = lines[i + 1] if i + 1 < len(lines) else ""
        if "|" in line and i + 1 not in skip and "|" in next_line and _TABLE_SEPARATOR_RE.match(next_line):
            table = Table(line=i, header_columns=count_cells(line), rows=[])
            tables.append(table)

    return MarkdownDocument(lines=lines, fences=fences, headings=headings, links=links, tables=tables)


def count_cells(line: str) -> int:
    """Number of cells in a pipe-table row. Escaped pipes do not split cells."""
    row = line.strip()
    row = row.replace("\\|", "")
    row = _INLINE_CODE_RE.sub("", row)
    if row.startswith("|"):
        row = row[1:]
    if row.endswith("|"):
        row = row[:-1]
    return len(row.split("|"))


def slugify(text: str) -> str:
    """GitHub-style heading anchor (before duplicate numbering)."""
    text = re.sub(r"[*`]", "", text)
    slug = _SLUG_STRIP_RE.sub("", text.strip().lower())
    return slug.replace(" ", "-")


def anchors(headings: list[Heading]) -> set[str]:
    """All anchors a renderer would generate, including -1, -2 suffixes."""
    seen: dict[str, int] = {}
    result: set[str] = set()
    for heading in headings:
        slug = slugify(heading.text)
        count = seen.get(slug, 0)
        result.add(slug if count == 0 else f"{slug}-{count}")
        seen[slug] = count + 1
    return result
