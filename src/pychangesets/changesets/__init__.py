"""Pending changesets and pre-release state."""

from pychangesets.changesets.state import (
    CHANGESET_DIR,
    ChangeDescriptor,
    PreReleaseState,
    ReleasePlan,
    parse_changeset,
    read_changeset_state,
    read_changesets,
    read_pre_state,
)

__all__ = [
    "CHANGESET_DIR",
    "ChangeDescriptor",
    "PreReleaseState",
    "ReleasePlan",
    "parse_changeset",
    "read_changeset_state",
    "read_changesets",
    "read_pre_state",
]
