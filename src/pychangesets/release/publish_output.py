"""Recovering published packages from publish command output."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass

from pychangesets.workspace.package import Package

logger = logging.getLogger(__name__)

# "New tag: pkg@1.0.0" or "New tag: @scope/pkg@1.0.0"
NEW_TAG_PATTERN = re.compile(r"New tag:\s+(?P<name>@[^/\s]+/[^@\s]+|[^/@\s]+)@(?P<version>\S+)")
# Single-package repositories print the tag without a package name
ROOT_TAG_PATTERN = re.compile(r"New tag:\s+v?(?P<version>\S+)")


@dataclass(frozen=True, slots=True)
class PublishedPackage:
    """A package the publish command reported as published."""

    name: str
    version: str

    @property
    def tag(self) -> str:
        return f"{self.name}@{self.version}"


def parse_publish_output(output: str) -> list[PublishedPackage]:
    """Extract ``New tag:`` announcements from publish command output.

    Lines that do not match are ignored, so unexpected output yields an
    empty list rather than an error. Duplicate announcements are reported once.

    Args:
        output: Combined stdout and stderr of the publish command.

    Returns:
        Candidates in output order.
    """
    candidates: list[PublishedPackage] = []
    seen: set[tuple[str, str]] = set()
    for line in output.splitlines():
        match = NEW_TAG_PATTERN.search(line)
        if match is None:
            continue
        key = (match.group("name"), match.group("version"))
        if key in seen:
            continue
        seen.add(key)
        candidates.append(PublishedPackage(name=key[0], version=key[1]))
    return candidates


def parse_root_publish_output(output: str, package: Package) -> list[PublishedPackage]:
    """Check whether a single-package repository was published.

    Any ``New tag:`` line counts; the version comes from the manifest.
    """
    for line in output.splitlines():
        if ROOT_TAG_PATTERN.search(line):
            return [PublishedPackage(name=package.name, version=package.version)]
    return []


def match_published_packages(
    candidates: Iterable[PublishedPackage],
    packages: dict[str, Package],
) -> list[PublishedPackage]:
    """Keep candidates that name a local package.

    Unknown names are logged and dropped; the publish tool's output format
    is not under our control and must not crash the run.
    """
    matched = []
    for candidate in candidates:
        if candidate.name not in packages:
            logger.warning(
                "Publish output mentions %s, which is not a package in this workspace; ignoring",
                candidate.tag,
            )
            continue
        matched.append(candidate)
    return matched
