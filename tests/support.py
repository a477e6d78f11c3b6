"""Stub collaborators and fixture data shared by the tests."""

from __future__ import annotations

from polyfill_docs.models.docs.registry import PolyfillMetadata

SUPPORT_TABLE = {
    "Array.from": {
        "chrome": {"10": "polyfilled", "2": "polyfilled", "all": "native"},
        "ie": {"9": "polyfilled", "11": "polyfilled"},
        "edge": {"12": "native"},
    },
    "Promise": {
        "chrome": {"2": "missing", "10": "polyfilled", "all": "native"},
        "ie": {"9": "polyfilled", "11": "polyfilled"},
        "edge": {"12": "native"},
    },
    "_mutation": {
        "chrome": {"2": "polyfilled", "10": "native", "all": "native"},
    },
    "Unregistered": {
        "chrome": {"2": "missing"},
    },
}

POLYFILL_METADATA = {
    "Array.from": {
        "variants": {
            "default": {"minSource": "a" * 120, "license": "MIT"},
            "spec": {"minSource": "a" * 300, "license": "MIT"},
        },
        "aliases": ["default", "es6"],
        "hasTests": True,
        "docs": "https://developer.mozilla.org/Array/from",
        "spec": "https://tc39.es/ecma262/#sec-array.from",
        "notes": ["Works with *iterables*."],
        "license": "MIT",
    },
    "Promise": {
        "variants": {"default": {"minSource": "p" * 80}},
        "aliases": ["es6"],
        "hasTests": False,
        "license": "https://github.com/example/promise/LICENSE",
    },
    "_mutation": {
        "variants": {"default": {"minSource": "m"}},
    },
}


class StubRegistry:
    """In-memory support registry."""

    def __init__(self, table: dict, metadata: dict) -> None:
        self._table = table
        self._metadata = {
            name: PolyfillMetadata.model_validate(meta) for name, meta in metadata.items()
        }

    def support_table(self) -> dict:
        return self._table

    def polyfill_metadata(self, feature: str) -> PolyfillMetadata:
        return self._metadata[feature]

    def polyfill_exists(self, feature: str) -> bool:
        return feature in self._metadata


class StubBuilder:
    """Bundle builder returning deterministic source, recording every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], str, bool]] = []

    def build(self, features: list[str], ua_string: str, minify: bool) -> str:
        self.calls.append((features, ua_string, minify))
        if minify:
            return f"/*{ua_string}*/" + "p();" * 20
        return f"/* {ua_string} */\n" + "polyfill();\n" * 20


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


