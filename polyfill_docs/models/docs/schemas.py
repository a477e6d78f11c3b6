from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _PageModel(BaseModel):
    """Serialises with camelCase keys, the shape the page templates expect."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Compatibility matrix
# ---------------------------------------------------------------------------


class VersionSupport(_PageModel):
    version: str
    # native, polyfilled or missing; other values pass through without a message
    status: str
    status_message: str | None = None


class SupportRecord(_PageModel):
    """One row of the feature compatibility table."""

    feature: str
    slug: str
    size: int
    is_default: bool
    has_tests: bool
    docs: str | None = None
    spec: str | None = None
    notes: list[str] = Field(default_factory=list)
    license: str | None = None
    license_is_url: bool = False
    per_browser: dict[str, list[VersionSupport]] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Provider outputs
# ---------------------------------------------------------------------------


class SizeSample(_PageModel):
    """Size of the default polyfill bundle served to one browser version.

    ``gzip_bytes`` stays ``None`` when compressing the bundle failed.
    """

    family: str
    version: str
    raw_bytes: int
    minified_bytes: int
    gzip_bytes: int | None = None


class HourlyTraffic(_PageModel):
    date: int
    requests: int = 0
    hits: int = 0
    miss: int = 0


class TrafficRollup(_PageModel):
    requests: int = 0
    hits: int = 0
    miss: int = 0
    bandwidth: int = 0


class TrafficStats(_PageModel):
    byhour: list[HourlyTraffic] = Field(default_factory=list)
    rollup: TrafficRollup = Field(default_factory=TrafficRollup)


class ResponseTimeSample(_PageModel):
    date: int
    resp_time: float | None = None


class Outage(_PageModel):
    date: int
    status: str
    duration: int


# ---------------------------------------------------------------------------
# Page payloads
# ---------------------------------------------------------------------------


class UsagePage(_PageModel):
    """Data for the usage page.

    When any provider failed only ``msg`` is populated.
    """

    section: str = "usage"
    requests_data: list[HourlyTraffic] | None = None
    outages: list[Outage] | None = None
    resp_times: list[ResponseTimeSample] | None = None
    hit_count: int | None = None
    miss_count: int | None = None
    msg: str | None = None


class FeaturesPage(_PageModel):
    section: str = "features"
    compat: list[SupportRecord]
    sizes: list[SizeSample]
