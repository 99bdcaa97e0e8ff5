"""
Bookmark API endpoints. Every route requires an authenticated user.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter(prefix="/bookmarks")


def _split_tags(values: list[str] | None) -> list[str]:
    # Accept both ?tags=a&tags=b and ?tags=a,b
    tags: list[str] = []
    for value in values or []:
        tags.extend(part.strip() for part in value.split(",") if part.strip())
    return tags


@router.post("", status_code=status.HTTP_201_CREATED, response_model=schemas.BookmarkResponse)
async def create_bookmark(
    payload: schemas.CreateBookmarkRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.BookmarkResponse:
    return await service.create(str(current_user["id"]), payload)


@router.get("", response_model=schemas.BookmarkListResponse)
async def list_bookmarks(
    search: str | None = Query(default=None, max_length=500),
    tags: list[str] | None = Query(default=None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.BookmarkListResponse:
    query = schemas.BookmarkQuery(search=search, tags=_split_tags(tags), page=page, limit=limit)
    return await service.find_all(str(current_user["id"]), query)


@router.get("/tags", response_model=schemas.TagsResponse)
async def list_tags(
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.TagsResponse:
    return await service.get_all_tags(str(current_user["id"]))


@router.get("/{bookmark_id}", response_model=schemas.BookmarkResponse)
async def get_bookmark(
    bookmark_id: str,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.BookmarkResponse:
    return await service.find_one(bookmark_id, str(current_user["id"]))


@router.patch("/{bookmark_id}", response_model=schemas.BookmarkResponse)
async def update_bookmark(
    bookmark_id: str,
    payload: schemas.UpdateBookmarkRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.BookmarkResponse:
    return await service.update(bookmark_id, str(current_user["id"]), payload)


@router.delete("/{bookmark_id}", response_model=schemas.BookmarkResponse)
async def delete_bookmark(
    bookmark_id: str,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.BookmarkResponse:
    return await service.remove(bookmark_id, str(current_user["id"]))
