from __future__ import annotations

import pytest

from polyfill_docs.services.docs.compat import (
    build_compat_matrix,
    compare_versions,
    feature_slug,
    looks_like_url,
    sort_versions,
)
from tests.support import POLYFILL_METADATA, StubRegistry


def _matrix(table, metadata=POLYFILL_METADATA):
    registry = StubRegistry(table, metadata)
    return build_compat_matrix(registry.support_table(), registry)


class TestVersionOrder:
    def test_numeric_ascending_then_non_numeric(self):
        assert sort_versions({"all": "native", "2": "polyfilled", "10": "missing"}) == [
            "2",
            "10",
            "all",
        ]

    def test_decimal_versions_compare_numerically(self):
        assert sort_versions(["10.1", "9.3", "10", "4.4.4"]) == ["9.3", "10", "10.1", "4.4.4"]

    def test_non_numeric_tokens_keep_input_order(self):
        assert sort_versions(["tp", "3", "all", "1"]) == ["1", "3", "tp", "all"]

    def test_float_like_tokens_are_not_numeric(self):
        assert sort_versions(["inf", "1_0", "2", "all", "infinity", "1e1"]) == [
            "2",
            "1e1",
            "inf",
            "1_0",
            "all",
            "infinity",
        ]

    @pytest.mark.parametrize(
        "a, b, expected",
        [("2", "10", -1), ("10", "2", 1), ("5", "5", 0), ("all", "2", 1), ("2", "all", -1), ("all", "tp", 0)],
    )
    def test_compare_versions(self, a, b, expected):
        assert compare_versions(a, b) == expected


class TestLicenseHeuristic:
    def test_url_license(self):
        assert looks_like_url("https://x.io") is True

    def test_short_code(self):
        assert looks_like_url("MIT") is False

    def test_boundary_is_exclusive(self):
        assert looks_like_url("CC0-1") is False
        assert looks_like_url("CC0-10") is True

    def test_missing_license(self):
        assert looks_like_url(None) is False
        assert looks_like_url("") is False


class TestBuildCompatMatrix:
    def test_sorted_and_filtered(self, registry):
        rows = build_compat_matrix(registry.support_table(), registry)
        assert [row.feature for row in rows] == ["Array.from", "Promise"]

    def test_ordinal_sort(self):
        table = {name: {"chrome": {"1": "native"}} for name in ("b", "B", "a", "A")}
        metadata = {name: {} for name in table}
        assert [row.feature for row in _matrix(table, metadata)] == ["A", "B", "a", "b"]

    def test_internal_features_excluded_even_when_registered(self, registry):
        features = {row.feature for row in build_compat_matrix(registry.support_table(), registry)}
        assert "_mutation" not in features
        assert "Unregistered" not in features

    def test_record_fields(self, registry):
        row = build_compat_matrix(registry.support_table(), registry)[0]

        assert row.slug == "Array_from"
        assert row.size == 300
        assert row.is_default is True
        assert row.has_tests is True
        assert row.docs == "https://developer.mozilla.org/Array/from"
        assert row.license == "MIT"
        assert row.license_is_url is False
        assert row.notes == ["<p>Works with <em>iterables</em>.</p>"]

    def test_record_without_default_alias(self, registry):
        promise = build_compat_matrix(registry.support_table(), registry)[1]
        assert promise.is_default is False
        assert promise.license_is_url is True
        assert promise.notes == []
        assert promise.size == 80

    def test_only_tracked_browsers_present_in_table(self, registry):
        row = build_compat_matrix(registry.support_table(), registry)[0]
        assert list(row.per_browser) == ["ie", "chrome"]

    def test_browser_versions_and_messages(self, registry):
        promise = build_compat_matrix(registry.support_table(), registry)[1]
        chrome = promise.per_browser["chrome"]

        assert [v.version for v in chrome] == ["2", "10", "all"]
        assert [v.status for v in chrome] == ["missing", "polyfilled", "native"]
        assert [v.status_message for v in chrome] == [
            "Not supported",
            "Supported with polyfill service",
            "Supported natively",
        ]

    def test_tracked_browser_without_versions_is_kept(self):
        rows = _matrix({"Foo": {"ie": {}, "chrome": {"1": "native"}}}, {"Foo": {}})
        assert list(rows[0].per_browser) == ["ie", "chrome"]
        assert rows[0].per_browser["ie"] == []

    def test_unknown_status_passes_through_without_message(self):
        rows = _matrix({"Foo": {"ie": {"8": "partial", "9": "native"}}}, {"Foo": {}})
        ie = rows[0].per_browser["ie"]
        assert [(v.version, v.status, v.status_message) for v in ie] == [
            ("8", "partial", None),
            ("9", "native", "Supported natively"),
        ]

    def test_license_falls_back_to_default_variant(self):
        metadata = {
            "Foo": {
                "variants": {
                    "default": {"minSource": "x", "license": "https://example.com/LICENSE"},
                    "alt": {"minSource": "xy", "license": "MIT"},
                }
            }
        }
        row = _matrix({"Foo": {"ie": {"8": "missing"}}}, metadata)[0]
        assert row.license == "https://example.com/LICENSE"
        assert row.license_is_url is True

    def test_top_level_license_wins_over_variant(self, registry):
        row = build_compat_matrix(registry.support_table(), registry)[0]
        assert row.license == "MIT"

    def test_feature_without_variants_has_zero_size(self):
        rows = _matrix({"Foo": {"ie": {"8": "missing"}}}, {"Foo": {}})
        assert rows[0].size == 0

    def test_page_payload_uses_camel_case(self, registry):
        row = build_compat_matrix(registry.support_table(), registry)[0]
        payload = row.model_dump(by_alias=True)
        assert payload["licenseIsUrl"] is False
        assert payload["perBrowser"]["ie"][0]["statusMessage"] == "Supported with polyfill service"

    def test_empty_table(self, registry):
        assert build_compat_matrix({}, registry) == []


def test_feature_slug():
    assert feature_slug("Intl.DateTimeFormat.prototype") == "Intl_DateTimeFormat_prototype"
