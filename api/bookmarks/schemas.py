"""
Pydantic schemas for bookmark endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from urllib.parse import urlsplit

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MAX_URL_LENGTH = 2048


def _check_url(value: str) -> str:
    if len(value) > MAX_URL_LENGTH:
        raise ValueError(f"url must be at most {MAX_URL_LENGTH} characters")
    parts = urlsplit(value)
    if parts.scheme not in {"http", "https"} or not parts.netloc or any(ch.isspace() for ch in value):
        raise ValueError("url must be a valid http(s) URL")
    return value


BookmarkUrl = Annotated[str, AfterValidator(_check_url)]


class CreateBookmarkRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    url: BookmarkUrl
    description: str | None = Field(default=None, max_length=5000)
    tags: list[str] | None = None


class UpdateBookmarkRequest(BaseModel):
    """
    Partial update. Only fields present in the request body are written;
    `tags` replaces the stored sequence when given.
    """

    title: str | None = Field(default=None, min_length=1, max_length=500)
    url: BookmarkUrl | None = None
    description: str | None = Field(default=None, max_length=5000)
    tags: list[str] | None = None


class BookmarkQuery(BaseModel):
    search: str | None = None
    tags: list[str] = Field(default_factory=list)
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1)


class BookmarkResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    url: str
    description: str | None = None
    tags: list[str]
    created_at: datetime
    updated_at: datetime


class Pagination(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int


class BookmarkListResponse(BaseModel):
    bookmarks: list[BookmarkResponse]
    pagination: Pagination


class TagsResponse(BaseModel):
    tags: list[str]
