"""
Typed shapes of the three catalog files (errors, system, flags).

Parsing is tolerant: unknown properties are ignored and property names are
matched case-insensitively against either the JSON (camelCase) name or the
Python attribute name. Instances are frozen; list-valued fields are tuples.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CatalogModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @model_validator(mode="before")
    @classmethod
    def _match_keys_case_insensitively(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        lookup: Dict[str, str] = {}
        for name, field in cls.model_fields.items():
            alias = field.alias or name
            lookup[name.lower()] = alias
            lookup[alias.lower()] = alias
        normalized: Dict[Any, Any] = {}
        for key, value in data.items():
            target = lookup.get(key.lower(), key) if isinstance(key, str) else key
            # first spelling wins when a file repeats a key with different case
            normalized.setdefault(target, value)
        return normalized


# errors.json ---------------------------------------------------------------


class ErrorLink(CatalogModel):
    label: str
    url: str


class ErrorEntry(CatalogModel):
    title: str
    severity: str
    services: Tuple[str, ...] = ()
    message_patterns: Tuple[str, ...] = ()
    causes: Tuple[str, ...] = ()
    fix: Tuple[str, ...] = ()
    links: Tuple[ErrorLink, ...] = ()


ErrorCatalog = Dict[str, ErrorEntry]


# system.json ---------------------------------------------------------------


class ApiEndpoint(CatalogModel):
    method: str
    path: str
    auth: Optional[str] = None


class ServiceEntry(CatalogModel):
    description: Optional[str] = None
    owners: Tuple[str, ...] = ()
    repo: Optional[str] = None
    language: Optional[str] = None
    depends_on: Tuple[str, ...] = ()
    api: Tuple[ApiEndpoint, ...] = ()


class OwnerInfo(CatalogModel):
    team: str
    slack: Optional[str] = None
    pager: Optional[str] = None
    runbook: Optional[str] = None


class SystemData(CatalogModel):
    services: Dict[str, ServiceEntry] = Field(default_factory=dict)
    owners: Dict[str, OwnerInfo] = Field(default_factory=dict)


# flags.json ----------------------------------------------------------------


class FeatureFlag(CatalogModel):
    key: str
    type: str
    service: Optional[str] = None
    default: Any = None
    variants: Optional[Tuple[Any, ...]] = None
    environments: Dict[str, Any] = Field(default_factory=dict)
    owners: Tuple[str, ...] = ()
    description: Optional[str] = None


class FlagsData(CatalogModel):
    flags: Tuple[FeatureFlag, ...] = ()
