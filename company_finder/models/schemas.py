from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


# --- Requests ---


class SearchRequest(BaseModel):
    companies: list[Any] = Field(default_factory=list)


class ExportRequest(BaseModel):
    results: list[dict[str, Any]] = Field(default_factory=list)
    format: Literal["csv", "tsv"] = "csv"
    bom: bool | None = None


# --- Responses ---


class SearchResponse(BaseModel):
    results: list[dict[str, Any]]


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    service: str
