"""
API Response Schemas

Pydantic models for API responses. Field names are snake_case in Python and
camelCase on the wire.

Request bodies have no models on purpose: they go through bounded JSON
ingestion and the shortbox.core validators instead.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ShortenResponse(CamelModel):
    """Response model for the shorten endpoint."""
    short_url: str = Field(..., alias="shortUrl", description="The complete short URL")
    slug: str = Field(..., description="The assigned slug")
    url: str = Field(..., description="The canonical destination URL")


class BatchLookupResponse(CamelModel):
    """Response model for a batch lookup."""
    results: List[Dict[str, Any]]
    not_found: List[str] = Field(..., alias="notFound")
    count: int


class AdminListResponse(CamelModel):
    """Every stored record, including private fields."""
    links: List[Dict[str, Any]]
    count: int


class DeleteResponse(CamelModel):
    success: bool = True
    slug: str


class PurgeResponse(CamelModel):
    success: bool = True
    deleted: int
