"""Tests for changeset and pre-release state reading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from pychangesets.changesets.state import (
    ChangeDescriptor,
    parse_changeset,
    read_changeset_state,
    read_changesets,
    read_pre_state,
)
from pychangesets.errors import ChangesetError
from pychangesets.versioning.bump import BumpType


class TestParseChangeset:
    """Tests for parse_changeset."""

    def test_parses_releases_and_summary(self) -> None:
        text = '---\n"pkg-a": minor\n"@scope/pkg-b": patch\n---\n\nAdd an option.\n'
        changeset = parse_changeset(text, "brave-cats")

        assert changeset.id == "brave-cats"
        assert changeset.releases == {"pkg-a": BumpType.MINOR, "@scope/pkg-b": BumpType.PATCH}
        assert changeset.summary == "Add an option."
        assert not changeset.is_empty

    def test_empty_front_matter(self) -> None:
        changeset = parse_changeset("---\n---\n\nDocs only.\n", "docs")
        assert changeset.is_empty
        assert changeset.summary == "Docs only."

    def test_strips_byte_order_mark(self) -> None:
        changeset = parse_changeset("\ufeff---\npkg-a: major\n---\n", "bom")
        assert changeset.releases == {"pkg-a": BumpType.MAJOR}

    def test_multiline_summary_kept(self) -> None:
        changeset = parse_changeset("---\npkg-a: patch\n---\n\nFirst line\n\n- detail\n", "x")
        assert changeset.summary == "First line\n\n- detail"

    def test_missing_front_matter(self) -> None:
        with pytest.raises(ChangesetError, match="missing front matter"):
            parse_changeset("Just text\n", "bad")

    def test_unterminated_front_matter(self) -> None:
        with pytest.raises(ChangesetError, match="unterminated"):
            parse_changeset("---\npkg-a: patch\n", "bad")

    def test_unknown_bump_type(self) -> None:
        with pytest.raises(ChangesetError, match="Unknown bump type"):
            parse_changeset("---\npkg-a: huge\n---\n", "bad")

    def test_front_matter_must_be_mapping(self) -> None:
        with pytest.raises(ChangesetError, match="mapping"):
            parse_changeset("---\n- pkg-a\n---\n", "bad")

    def test_error_names_changeset(self) -> None:
        with pytest.raises(ChangesetError) as exc_info:
            parse_changeset("nope", "odd-id")
        assert str(exc_info.value).startswith("odd-id:")


class TestReadChangesets:
    """Tests for read_changesets."""

    def test_no_directory(self, temp_dir: Path) -> None:
        assert read_changesets(temp_dir) == []

    def test_sorted_and_readme_ignored(self, workspace_dir: Path, add_changeset) -> None:
        add_changeset(workspace_dir, "zebra", {"pkg-a": "patch"}, "Z")
        add_changeset(workspace_dir, "alpha", {"pkg-a": "minor"}, "A")

        changesets = read_changesets(workspace_dir)

        assert [c.id for c in changesets] == ["alpha", "zebra"]


class TestReadPreState:
    """Tests for read_pre_state."""

    def test_no_file(self, workspace_dir: Path) -> None:
        assert read_pre_state(workspace_dir) is None

    def test_reads_state(self, workspace_dir: Path) -> None:
        (workspace_dir / ".changeset" / "pre.json").write_text(
            json.dumps(
                {
                    "mode": "pre",
                    "tag": "beta",
                    "initialVersions": {"pkg-a": "1.0.0"},
                    "changesets": ["old-one"],
                }
            )
        )
        state = read_pre_state(workspace_dir)

        assert state is not None
        assert state.is_active
        assert state.tag == "beta"
        assert state.changesets == frozenset({"old-one"})
        assert state.initial_versions == {"pkg-a": "1.0.0"}

    def test_exit_mode_is_not_active(self, workspace_dir: Path) -> None:
        (workspace_dir / ".changeset" / "pre.json").write_text(
            json.dumps({"mode": "exit", "tag": "beta"})
        )
        state = read_pre_state(workspace_dir)
        assert state is not None
        assert not state.is_active

    def test_invalid_json(self, workspace_dir: Path) -> None:
        (workspace_dir / ".changeset" / "pre.json").write_text("{")
        with pytest.raises(ChangesetError, match="invalid JSON"):
            read_pre_state(workspace_dir)

    def test_missing_tag(self, workspace_dir: Path) -> None:
        (workspace_dir / ".changeset" / "pre.json").write_text(json.dumps({"mode": "pre"}))
        with pytest.raises(ChangesetError, match="required"):
            read_pre_state(workspace_dir)

    @pytest.mark.parametrize(
        ("field", "value", "message"),
        [
            ("changesets", "brave-cats", "must be a list"),
            ("initialVersions", ["pkg-a", "1.0.0"], "must be an object"),
        ],
    )
    def test_malformed_fields(self, workspace_dir: Path, field: str, value, message: str) -> None:
        (workspace_dir / ".changeset" / "pre.json").write_text(
            json.dumps({"mode": "pre", "tag": "next", field: value})
        )
        with pytest.raises(ChangesetError, match=message):
            read_pre_state(workspace_dir)


class TestReadChangesetState:
    """Tests for read_changeset_state."""

    def test_empty_workspace_is_not_an_error(self, workspace_dir: Path) -> None:
        plan = read_changeset_state(workspace_dir)
        assert not plan.has_changesets
        assert not plan.has_effective_changesets
        assert plan.pre_state is None

    def test_pre_mode_hides_released_changesets(self, workspace_dir: Path, add_changeset) -> None:
        add_changeset(workspace_dir, "old-one", {"pkg-a": "patch"}, "Old")
        add_changeset(workspace_dir, "new-one", {"pkg-a": "minor"}, "New")
        (workspace_dir / ".changeset" / "pre.json").write_text(
            json.dumps({"mode": "pre", "tag": "next", "changesets": ["old-one"]})
        )

        plan = read_changeset_state(workspace_dir)

        assert [c.id for c in plan.changesets] == ["new-one"]
        assert plan.pre_state is not None
        assert plan.pre_state.tag == "next"

    def test_only_empty_changesets(self, workspace_dir: Path) -> None:
        (workspace_dir / ".changeset" / "empty.md").write_text("---\n---\n\nNothing.\n")

        plan = read_changeset_state(workspace_dir)

        assert plan.has_changesets
        assert not plan.has_effective_changesets


def test_change_descriptor_is_immutable() -> None:
    changeset = ChangeDescriptor(id="x", summary="s")
    with pytest.raises(AttributeError):
        changeset.id = "y"  # type: ignore[misc]
