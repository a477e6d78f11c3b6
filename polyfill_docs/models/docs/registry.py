from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PolyfillVariant(BaseModel):
    """One implementation of a polyfill, as held by the support registry."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    min_source: str = ""
    license: str | None = None


class PolyfillMetadata(BaseModel):
    """Registry metadata for a single feature.

    Field names accept the registry's camelCase spelling (``hasTests``,
    ``minSource``) as well as the Python names.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    variants: dict[str, PolyfillVariant] = Field(default_factory=dict)
    aliases: list[str] = Field(default_factory=list)
    has_tests: bool = False
    docs: str | None = None
    spec: str | None = None
    notes: list[str] = Field(default_factory=list)
    license: str | None = None
