"""Version bump kinds."""

from __future__ import annotations

from enum import IntEnum


class BumpType(IntEnum):
    """Kind of version bump, ordered by significance."""

    NONE = 0
    PATCH = 1
    MINOR = 2
    MAJOR = 3

    @classmethod
    def parse(cls, value: str) -> BumpType:
        """Parse a bump kind such as ``"minor"``.

        Raises:
            ValueError: If value is not a known bump kind.
        """
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown bump type: {value!r}") from None

    @property
    def label(self) -> str:
        """Lowercase name as written in changeset files."""
        return self.name.lower()
