"""Feature compatibility matrix.

Joins the raw support table (feature -> browser -> version -> status) with
polyfill metadata from the registry into the rows shown on the features
page.  Pure: no I/O and nothing is cached.
"""

from __future__ import annotations

import re
from functools import cmp_to_key

import markdown

from polyfill_docs.core.collaborators import SupportRegistry, SupportTable
from polyfill_docs.models.docs.schemas import SupportRecord, VersionSupport

TRACKED_BROWSERS = ("ie", "firefox", "chrome", "safari", "opera", "ios_saf")

STATUS_MESSAGES = {
    "native": "Supported natively",
    "polyfilled": "Supported with polyfill service",
    "missing": "Not supported",
}

# Features whose name starts with this are internal and never listed.
INTERNAL_MARKER = "_"

# License strings longer than this are URLs rather than SPDX-style codes.
_LICENSE_CODE_MAX_LENGTH = 5


def looks_like_url(license: str | None) -> bool:
    """Guess whether *license* is a link rather than a short code like ``MIT``.

    This is a length check only, so long plain codes (``Apache-2.0``) also
    count as URLs.  Page templates rely on it to decide whether to link.
    """
    return bool(license) and len(license) > _LICENSE_CODE_MAX_LENGTH


# Plain decimal numbers only; tokens like "inf" or "1_0" are not versions.
_NUMERIC_VERSION = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?\s*$")


def _as_number(version: str) -> float | None:
    if not _NUMERIC_VERSION.match(version):
        return None
    return float(version)


def compare_versions(a: str, b: str) -> int:
    """Order numeric versions ascending with non-numeric tokens last.

    Two non-numeric tokens compare equal, so their input order is kept.
    """
    num_a, num_b = _as_number(a), _as_number(b)
    if num_a is None and num_b is None:
        return 0
    if num_a is None:
        return 1
    if num_b is None:
        return -1
    return (num_a > num_b) - (num_a < num_b)


def sort_versions(versions) -> list[str]:
    return sorted(versions, key=cmp_to_key(compare_versions))


def feature_slug(feature: str) -> str:
    return feature.replace(".", "_")


def build_compat_matrix(
    support_table: SupportTable, registry: SupportRegistry
) -> list[SupportRecord]:
    """Return one ``SupportRecord`` per public feature, sorted by name."""
    features = sorted(
        feature
        for feature in support_table
        if registry.polyfill_exists(feature) and not feature.startswith(INTERNAL_MARKER)
    )
    return [_build_record(feature, support_table[feature], registry) for feature in features]


def _build_record(feature: str, browsers: dict, registry: SupportRegistry) -> SupportRecord:
    polyfill = registry.polyfill_metadata(feature)
    license = polyfill.license
    if license is None and "default" in polyfill.variants:
        license = polyfill.variants["default"].license

    per_browser: dict[str, list[VersionSupport]] = {}
    for browser in TRACKED_BROWSERS:
        versions = browsers.get(browser)
        if versions is None:
            continue
        per_browser[browser] = [
            VersionSupport(
                version=version,
                status=versions[version],
                status_message=STATUS_MESSAGES.get(versions[version]),
            )
            for version in sort_versions(versions)
        ]

    return SupportRecord(
        feature=feature,
        slug=feature_slug(feature),
        size=max((len(v.min_source) for v in polyfill.variants.values()), default=0),
        is_default="default" in polyfill.aliases,
        has_tests=polyfill.has_tests,
        docs=polyfill.docs,
        spec=polyfill.spec,
        notes=[markdown.markdown(note) for note in polyfill.notes],
        license=license,
        license_is_url=looks_like_url(license),
        per_browser=per_browser,
    )
