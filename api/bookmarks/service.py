"""
Bookmark business logic.

Every operation is scoped to the calling user:
- create stamps the owner
- find_one/update/remove check existence first, then ownership
- find_all/get_all_tags only ever read the caller's rows
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any

from core.errors import ForbiddenError, NotFoundError

from . import repository, schemas

logger = logging.getLogger(__name__)


def parse_tags(raw: str | None) -> list[str]:
    """
    Decode the stored tag sequence. Anything that is not a JSON list decodes
    to an empty sequence.
    """
    try:
        tags = json.loads(raw or "[]")
    except ValueError:
        return []
    if not isinstance(tags, list):
        return []
    return [str(tag) for tag in tags]


def dump_tags(tags: list[str] | None) -> str:
    return json.dumps(list(tags or []), ensure_ascii=False)


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit)


def _to_bookmark_response(row: dict[str, Any]) -> schemas.BookmarkResponse:
    return schemas.BookmarkResponse(
        id=str(row["id"]),
        title=str(row["title"]),
        url=str(row["url"]),
        description=row.get("description"),
        tags=parse_tags(row.get("tags")),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


async def create(user_id: str, payload: schemas.CreateBookmarkRequest) -> schemas.BookmarkResponse:
    row = await repository.create_bookmark(
        user_id=user_id,
        title=payload.title,
        url=payload.url,
        description=payload.description,
        tags_json=dump_tags(payload.tags),
    )
    logger.info("bookmark_created bookmark_id=%s user_id=%s", row["id"], user_id)
    return _to_bookmark_response(row)


async def find_all(user_id: str, query: schemas.BookmarkQuery) -> schemas.BookmarkListResponse:
    """
    List one page of the user's bookmarks.

    The tag filter runs in memory on the page that was already fetched, so a
    page may hold fewer than `limit` rows while `total` still counts every
    row matching the search.
    """
    search = query.search or None
    rows = await repository.list_bookmarks(
        user_id=user_id,
        search=search,
        limit=query.limit,
        offset=page_offset(query.page, query.limit),
    )
    bookmarks = [_to_bookmark_response(row) for row in rows]

    if query.tags:
        wanted = set(query.tags)
        bookmarks = [bookmark for bookmark in bookmarks if wanted.intersection(bookmark.tags)]

    total = await repository.count_bookmarks(user_id=user_id, search=search)
    return schemas.BookmarkListResponse(
        bookmarks=bookmarks,
        pagination=schemas.Pagination(
            page=query.page,
            limit=query.limit,
            total=total,
            total_pages=total_pages(total, query.limit),
        ),
    )


async def _get_owned_row(bookmark_id: str, user_id: str) -> dict:
    row = await repository.get_bookmark(bookmark_id)
    if row is None:
        raise NotFoundError("Bookmark not found")
    if str(row["user_id"]) != str(user_id):
        raise ForbiddenError("You can only access your own bookmarks")
    return row


async def find_one(bookmark_id: str, user_id: str) -> schemas.BookmarkResponse:
    row = await _get_owned_row(bookmark_id, user_id)
    return _to_bookmark_response(row)


async def update(
    bookmark_id: str,
    user_id: str,
    payload: schemas.UpdateBookmarkRequest,
) -> schemas.BookmarkResponse:
    await _get_owned_row(bookmark_id, user_id)

    fields = payload.model_dump(exclude_unset=True)
    # title/url/tags are NOT NULL; an explicit null leaves them untouched.
    for name in ("title", "url", "tags"):
        if name in fields and fields[name] is None:
            del fields[name]
    if "tags" in fields:
        fields["tags"] = dump_tags(fields["tags"])

    row = await repository.update_bookmark(bookmark_id, fields)
    if row is None:
        # Deleted between the ownership check and the write.
        raise NotFoundError("Bookmark not found")
    logger.info(
        "bookmark_updated bookmark_id=%s user_id=%s fields=%s",
        bookmark_id,
        user_id,
        ",".join(sorted(fields)) or "-",
    )
    return _to_bookmark_response(row)


async def remove(bookmark_id: str, user_id: str) -> schemas.BookmarkResponse:
    await _get_owned_row(bookmark_id, user_id)

    row = await repository.delete_bookmark(bookmark_id)
    if row is None:
        raise NotFoundError("Bookmark not found")
    logger.info("bookmark_deleted bookmark_id=%s user_id=%s", bookmark_id, user_id)
    return _to_bookmark_response(row)


async def get_all_tags(user_id: str) -> schemas.TagsResponse:
    blobs = await repository.list_tag_blobs(user_id)
    all_tags = [tag for blob in blobs for tag in parse_tags(blob)]
    return schemas.TagsResponse(tags=sorted(dict.fromkeys(all_tags)))
