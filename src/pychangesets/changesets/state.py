"""Reading pending changesets and pre-release state from disk.

A changeset is a Markdown file in ``.changeset/`` with a YAML front matter
block mapping package names to bump kinds::

    ---
    "pkg-a": minor
    "pkg-b": patch
    ---

    Add a shiny new option.

While a pre-release line is active, ``.changeset/pre.json`` records which
changesets were already folded into it. Those are hidden so they are not
applied twice.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from pychangesets.errors import ChangesetError
from pychangesets.versioning.bump import BumpType

logger = logging.getLogger(__name__)

CHANGESET_DIR = ".changeset"
PRE_STATE_FILE = "pre.json"

_IGNORED_FILES = frozenset({"README.md"})


@dataclass(frozen=True, slots=True)
class ChangeDescriptor:
    """A single pending changeset.

    Attributes:
        id: Identifier, the file name without extension.
        summary: Human-readable description of the change.
        releases: Mapping of package name to bump kind.
    """

    id: str
    summary: str
    releases: Mapping[str, BumpType] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """True when the changeset bumps no package."""
        return not self.releases


@dataclass(frozen=True, slots=True)
class PreReleaseState:
    """Active pre-release line.

    Attributes:
        mode: ``"pre"`` while the line is active, ``"exit"`` once exiting.
        tag: Pre-release tag, e.g. ``"beta"``.
        changesets: Identifiers already released on this line.
        initial_versions: Package versions when the line started.
    """

    mode: str
    tag: str
    changesets: frozenset[str] = frozenset()
    initial_versions: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_active(self) -> bool:
        return self.mode == "pre"


@dataclass(frozen=True, slots=True)
class ReleasePlan:
    """Changesets pending for this run, after pre-release filtering."""

    changesets: tuple[ChangeDescriptor, ...] = ()
    pre_state: PreReleaseState | None = None

    @property
    def has_changesets(self) -> bool:
        return bool(self.changesets)

    @property
    def has_effective_changesets(self) -> bool:
        """True when at least one changeset bumps a package."""
        return any(not c.is_empty for c in self.changesets)


def parse_changeset(text: str, changeset_id: str) -> ChangeDescriptor:
    """Parse the contents of a changeset file.

    Args:
        text: File contents.
        changeset_id: Identifier to assign.

    Returns:
        Parsed changeset.

    Raises:
        ChangesetError: If the front matter is missing or malformed.
    """
    lines = text.lstrip("\ufeff").splitlines()
    if not lines or lines[0].strip() != "---":
        raise ChangesetError("missing front matter", path=changeset_id)

    try:
        end = next(i for i in range(1, len(lines)) if lines[i].strip() == "---")
    except StopIteration:
        raise ChangesetError("unterminated front matter", path=changeset_id) from None

    try:
        front = yaml.safe_load("\n".join(lines[1:end]))
    except yaml.YAMLError as e:
        raise ChangesetError(f"invalid front matter: {e}", path=changeset_id) from e

    if front is None:
        front = {}
    if not isinstance(front, dict):
        raise ChangesetError("front matter must be a mapping", path=changeset_id)

    releases: dict[str, BumpType] = {}
    for name, bump in front.items():
        if not isinstance(bump, str):
            raise ChangesetError(f"invalid bump type for {name}: {bump!r}", path=changeset_id)
        try:
            releases[str(name)] = BumpType.parse(bump)
        except ValueError as e:
            raise ChangesetError(str(e), path=changeset_id) from e

    summary = "\n".join(lines[end + 1 :]).strip()
    return ChangeDescriptor(id=changeset_id, summary=summary, releases=releases)


def read_changesets(root: Path) -> list[ChangeDescriptor]:
    """Read all changeset files under ``root/.changeset``, sorted by id."""
    directory = root / CHANGESET_DIR
    if not directory.is_dir():
        return []

    changesets = []
    for path in sorted(directory.glob("*.md")):
        if path.name in _IGNORED_FILES:
            continue
        changesets.append(parse_changeset(path.read_text(encoding="utf-8"), path.stem))
    return changesets


def read_pre_state(root: Path) -> PreReleaseState | None:
    """Read ``.changeset/pre.json``, or None when no pre-release line exists.

    Raises:
        ChangesetError: If the file exists but is malformed.
    """
    path = root / CHANGESET_DIR / PRE_STATE_FILE
    if not path.is_file():
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ChangesetError(f"invalid JSON: {e}", path=str(path)) from e

    if not isinstance(data, dict):
        raise ChangesetError("expected an object", path=str(path))

    mode = data.get("mode")
    tag = data.get("tag")
    if not isinstance(mode, str) or not isinstance(tag, str):
        raise ChangesetError("'mode' and 'tag' are required", path=str(path))

    released = data.get("changesets") or []
    initial = data.get("initialVersions") or {}
    if not isinstance(released, list):
        raise ChangesetError("'changesets' must be a list", path=str(path))
    if not isinstance(initial, dict):
        raise ChangesetError("'initialVersions' must be an object", path=str(path))
    return PreReleaseState(
        mode=mode,
        tag=tag,
        changesets=frozenset(str(c) for c in released),
        initial_versions={str(k): str(v) for k, v in initial.items()},
    )


def read_changeset_state(root: Path) -> ReleasePlan:
    """Load pending changesets and pre-release state for a workspace.

    In pre mode, changesets already folded into the pre-release line are
    dropped. No changesets is a normal state and yields an empty plan.

    Args:
        root: Workspace root.

    Returns:
        Release plan for this run.
    """
    pre_state = read_pre_state(root)
    changesets = read_changesets(root)

    if pre_state is not None and pre_state.is_active:
        before = len(changesets)
        changesets = [c for c in changesets if c.id not in pre_state.changesets]
        if len(changesets) != before:
            logger.debug(
                "Skipped %d changeset(s) already released in pre mode (%s)",
                before - len(changesets),
                pre_state.tag,
            )

    return ReleasePlan(changesets=tuple(changesets), pre_state=pre_state)
