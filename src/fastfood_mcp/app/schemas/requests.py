from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ToolRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class ExplainErrorRequest(ToolRequest):
    code: str = Field(min_length=1)
    service: Optional[str] = None
    trace_id: Optional[str] = None


class SearchErrorsRequest(ToolRequest):
    query: str = Field(min_length=1)
    limit: int = 10


class SuggestFixRequest(ToolRequest):
    code: str = Field(min_length=1)


class GetServiceRequest(ToolRequest):
    name: str = Field(min_length=1)


class ListDependenciesRequest(ToolRequest):
    name: str = Field(min_length=1)
    direction: str = "outbound"
    depth: int = Field(default=1, ge=1, le=5)


class FindEndpointRequest(ToolRequest):
    name: str = Field(min_length=1)
    path: Optional[str] = None


class ServiceOwnerRequest(ToolRequest):
    name: str = Field(min_length=1)


class ListFlagsRequest(ToolRequest):
    service: Optional[str] = None


class GetFlagRequest(ToolRequest):
    key: str = Field(min_length=1)


class FlagStatusRequest(ToolRequest):
    key: str = Field(min_length=1)
    environment: str = Field(min_length=1)
