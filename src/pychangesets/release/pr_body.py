"""Rendering the description of the version pull request.

The body lists every changed package with its changelog entry. GitHub caps
the size of a pull request body, so when the full rendering is too long the
changelog of the lowest priority packages is collapsed one at a time into a
one-line pointer to their CHANGELOG.md. Package headings are always kept. If
the body is still too long with every entry collapsed, it is cut off with a
trailing marker.

Everything here is pure: no I/O, and the same input renders the same text.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from pychangesets.config.schema import DEFAULT_PR_BODY_MAX_CHARACTERS
from pychangesets.versioning.bump import BumpType

TRUNCATION_MARKER = "\n\n> ... The rest of this description was cut off to fit the size limit."
COLLAPSED_NOTE = (
    "> The changelog of some packages has been collapsed, "
    "as the full description exceeds the size limit."
)


@dataclass(frozen=True, slots=True)
class PackageSection:
    """One package entry of the body.

    Attributes:
        name: Package name.
        version: New version.
        content: Changelog entry for the new version, empty if none.
        private: Private packages are listed after publishable ones.
        highest_level: Most significant bump in the entry.
        changelog_path: Changelog path relative to the repository root.
    """

    name: str
    version: str
    content: str = ""
    private: bool = False
    highest_level: BumpType = BumpType.NONE
    changelog_path: str | None = None


@dataclass(frozen=True, slots=True)
class BodyOptions:
    """Settings for rendering.

    Attributes:
        branch: Base branch the pull request targets.
        has_publish_script: Whether merging triggers an automated publish.
        pre_tag: Pre-release tag when the base branch is in pre mode.
        max_characters: Maximum length of the rendered body.
        changelog_base_url: URL that changelog paths are appended to,
            e.g. ``https://github.com/owner/repo/blob/changeset-release/main``.
    """

    branch: str
    has_publish_script: bool = False
    pre_tag: str | None = None
    max_characters: int = DEFAULT_PR_BODY_MAX_CHARACTERS
    changelog_base_url: str | None = None


@dataclass(frozen=True, slots=True)
class PrBody:
    """Rendered body.

    Attributes:
        text: Markdown to send.
        collapsed: Names of packages whose changelog was collapsed.
        truncated: True when the text had to be cut off.
    """

    text: str
    collapsed: tuple[str, ...] = ()
    truncated: bool = False


def sort_sections(sections: Iterable[PackageSection]) -> list[PackageSection]:
    """Order sections by priority: publishable first, bigger bumps first, then by name."""
    return sorted(sections, key=lambda s: (s.private, -int(s.highest_level), s.name))


def _intro(options: BodyOptions) -> str:
    if options.has_publish_script:
        after_merge = "the packages will be published automatically"
    else:
        after_merge = "you can publish the packages yourself"
    return (
        "This PR was opened by the release workflow. When you're ready to do a release, "
        f"you can merge this and {after_merge}. If you're not ready to do a release yet, "
        f"that's fine: whenever you add more changesets to `{options.branch}`, "
        "this PR will be updated."
    )


def _pre_mode_warning(options: BodyOptions) -> str:
    return (
        "⚠️⚠️⚠️⚠️⚠️⚠️\n\n"
        f"`{options.branch}` is currently in **pre mode** (`{options.pre_tag}`), so this branch "
        "has prereleases rather than normal releases. If you want to exit prereleases, run "
        f"`changeset pre exit` on `{options.branch}`.\n\n"
        "⚠️⚠️⚠️⚠️⚠️⚠️"
    )


def collapsed_summary(section: PackageSection, options: BodyOptions) -> str:
    """One-line replacement for a collapsed changelog entry."""
    if section.changelog_path and options.changelog_base_url:
        url = f"{options.changelog_base_url.rstrip('/')}/{section.changelog_path}"
        return f"_See [{section.changelog_path}]({url}) for the changes in this release._"
    if section.changelog_path:
        return f"_See `{section.changelog_path}` for the changes in this release._"
    return "_See the package changelog for the changes in this release._"


def can_collapse(section: PackageSection, options: BodyOptions) -> bool:
    """A section is worth collapsing only if the summary is shorter than its entry."""
    return len(collapsed_summary(section, options)) < len(section.content)


def render_section(section: PackageSection, options: BodyOptions, *, collapsed: bool) -> str:
    header = f"## {section.name}@{section.version}"
    body = collapsed_summary(section, options) if collapsed else section.content
    return f"{header}\n\n{body}" if body else header


def render_body(
    sections: Sequence[PackageSection],
    options: BodyOptions,
    collapsed: frozenset[str] = frozenset(),
) -> str:
    """Render sections in the given order, collapsing the named ones."""
    parts = [_intro(options)]
    if options.pre_tag:
        parts.append(_pre_mode_warning(options))
    parts.append("# Releases")
    if collapsed:
        parts.append(COLLAPSED_NOTE)
    parts.extend(render_section(s, options, collapsed=s.name in collapsed) for s in sections)
    return "\n\n".join(parts) + "\n"


def fits(text: str, max_characters: int) -> bool:
    return len(text) <= max_characters


def truncate(text: str, max_characters: int) -> str:
    """Cut text to max_characters, ending with the truncation marker."""
    if fits(text, max_characters):
        return text
    if max_characters <= len(TRUNCATION_MARKER):
        return TRUNCATION_MARKER[:max_characters]
    return text[: max_characters - len(TRUNCATION_MARKER)] + TRUNCATION_MARKER


def build_pr_body(sections: Iterable[PackageSection], options: BodyOptions) -> PrBody:
    """Render the pull request body within options.max_characters.

    Args:
        sections: One section per changed package, in any order.
        options: Rendering settings.

    Returns:
        The rendered body, with the names of collapsed packages and whether
        the text had to be truncated.
    """
    ordered = sort_sections(sections)
    collapsed: list[str] = []
    text = render_body(ordered, options)

    for section in reversed(ordered):
        if fits(text, options.max_characters):
            break
        if not can_collapse(section, options):
            continue
        collapsed.append(section.name)
        text = render_body(ordered, options, frozenset(collapsed))

    if fits(text, options.max_characters):
        return PrBody(text=text, collapsed=tuple(collapsed))

    return PrBody(
        text=truncate(text, options.max_characters),
        collapsed=tuple(collapsed),
        truncated=True,
    )
