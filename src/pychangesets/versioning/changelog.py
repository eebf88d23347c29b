"""Extracting version sections from Markdown changelogs."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from pychangesets.versioning.bump import BumpType

# ATX heading: up to three spaces, 1-6 '#', text, optional closing '#'s
HEADING_PATTERN = re.compile(
    r"^ {0,3}(?P<marks>#{1,6})(?:[ \t]+(?P<text>.*?))?(?:[ \t]+#+)?[ \t]*$"
)
FENCE_PATTERN = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})")
LINK_PATTERN = re.compile(r"\[([^\]]*)\]\([^)]*\)")
BUMP_WORD_PATTERN = re.compile(r"\b(major|minor|patch)\b", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class ChangelogEntry:
    """Body of one version section.

    Attributes:
        version: Heading text that matched.
        content: Markdown between the heading and the next heading of the
            same or shallower depth, without surrounding blank lines.
        highest_level: Most significant bump named in the section's
            sub-headings (e.g. "### Minor Changes").
    """

    version: str
    content: str
    highest_level: BumpType = BumpType.NONE


@dataclass(frozen=True, slots=True)
class _Heading:
    index: int
    depth: int
    text: str


def heading_text(raw: str) -> str:
    """Plain text of a heading, with Markdown links reduced to their label."""
    return LINK_PATTERN.sub(r"\1", raw).strip()


def _scan_headings(lines: list[str]) -> list[_Heading]:
    headings: list[_Heading] = []
    fence: str | None = None
    for i, line in enumerate(lines):
        fence_match = FENCE_PATTERN.match(line)
        if fence_match:
            marker = fence_match.group("fence")
            if fence is None:
                fence = marker[0] * 3
            elif marker.startswith(fence):
                fence = None
            continue
        if fence is not None:
            continue

        match = HEADING_PATTERN.match(line)
        if match:
            headings.append(
                _Heading(
                    index=i,
                    depth=len(match.group("marks")),
                    text=heading_text(match.group("text") or ""),
                )
            )
    return headings


def extract_changelog_entry(changelog: str, version: str) -> ChangelogEntry | None:
    """Find the section for a version in a changelog.

    Changelogs hold one heading per released version, newest first; the
    heading text must equal the version string exactly.

    Args:
        changelog: Changelog Markdown.
        version: Version to look up, e.g. ``"1.2.0"``.

    Returns:
        The matching entry, or None when no heading matches.
    """
    lines = changelog.splitlines()
    headings = _scan_headings(lines)

    start = next((h for h in headings if h.text == version), None)
    if start is None:
        return None

    end_index = len(lines)
    highest = BumpType.NONE
    for heading in headings:
        if heading.index <= start.index:
            continue
        if heading.depth <= start.depth:
            end_index = heading.index
            break
        match = BUMP_WORD_PATTERN.search(heading.text)
        if match:
            highest = max(highest, BumpType.parse(match.group(1)))

    content = "\n".join(lines[start.index + 1 : end_index]).strip("\n")
    return ChangelogEntry(version=version, content=content.strip(), highest_level=highest)


def read_changelog_entry(path: Path, version: str) -> ChangelogEntry | None:
    """Read a changelog file and extract a version entry.

    A missing file is treated like a missing entry.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    return extract_changelog_entry(text, version)
