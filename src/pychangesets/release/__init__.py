"""Pull request bodies and publish output parsing."""

from pychangesets.release.pr_body import (
    BodyOptions,
    PackageSection,
    PrBody,
    build_pr_body,
    sort_sections,
)
from pychangesets.release.publish_output import (
    PublishedPackage,
    match_published_packages,
    parse_publish_output,
    parse_root_publish_output,
)

__all__ = [
    "BodyOptions",
    "PackageSection",
    "PrBody",
    "PublishedPackage",
    "build_pr_body",
    "match_published_packages",
    "parse_publish_output",
    "parse_root_publish_output",
    "sort_sections",
]
