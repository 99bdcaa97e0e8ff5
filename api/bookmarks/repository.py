"""
Bookmark persistence.
This module is where bookmark-related SQL lives.

Tags are stored as a JSON-encoded text column, so every tag predicate is
applied in Python by the service layer, never here.
"""

from __future__ import annotations

from typing import Any

from core import db

_COLUMNS = "id, title, url, description, tags, user_id, created_at, updated_at"

# Columns a partial update may touch.
_UPDATABLE_COLUMNS = ("title", "url", "description", "tags")


def _bookmark_row(row: dict[str, Any] | None) -> dict[str, Any] | None:
    if row is None:
        return None
    return {**row, "id": str(row["id"]), "user_id": str(row["user_id"])}


def _like_pattern(search: str | None) -> str | None:
    """
    Build an ILIKE substring pattern, escaping LIKE wildcards in user input.
    """
    if not search:
        return None
    escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


_SEARCH_PREDICATE = """
    user_id = $1
    AND (
      $2::text IS NULL
      OR title ILIKE $2
      OR description ILIKE $2
      OR url ILIKE $2
    )
"""


async def create_bookmark(
    *,
    user_id: str,
    title: str,
    url: str,
    description: str | None,
    tags_json: str,
) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO bookmarks (title, url, description, tags, user_id)
        VALUES ($1, $2, $3, $4, $5)
        RETURNING {_COLUMNS}
        """,
        title,
        url,
        description,
        tags_json,
        db.parse_uuid(user_id),
    )
    if row is None:
        raise RuntimeError("Failed to create bookmark.")
    return _bookmark_row(row)


async def get_bookmark(bookmark_id: str) -> dict | None:
    bookmark_uuid = db.parse_uuid(bookmark_id)
    if bookmark_uuid is None:
        return None
    row = await db.fetch_one(
        f"""
        SELECT {_COLUMNS}
        FROM bookmarks
        WHERE id = $1
        """,
        bookmark_uuid,
    )
    return _bookmark_row(row)


async def list_bookmarks(
    *,
    user_id: str,
    search: str | None,
    limit: int,
    offset: int,
) -> list[dict]:
    """
    One page of the user's bookmarks, newest first.
    """
    rows = await db.fetch_all(
        f"""
        SELECT {_COLUMNS}
        FROM bookmarks
        WHERE {_SEARCH_PREDICATE}
        ORDER BY created_at DESC
        LIMIT $3
        OFFSET $4
        """,
        db.parse_uuid(user_id),
        _like_pattern(search),
        limit,
        offset,
    )
    return [_bookmark_row(row) for row in rows]


async def count_bookmarks(*, user_id: str, search: str | None) -> int:
    total = await db.fetch_value(
        f"""
        SELECT count(*)
        FROM bookmarks
        WHERE {_SEARCH_PREDICATE}
        """,
        db.parse_uuid(user_id),
        _like_pattern(search),
    )
    return int(total or 0)


async def update_bookmark(bookmark_id: str, fields: dict[str, Any]) -> dict | None:
    bookmark_uuid = db.parse_uuid(bookmark_id)
    if bookmark_uuid is None:
        return None

    columns = [name for name in _UPDATABLE_COLUMNS if name in fields]
    assignments = [f"{name} = ${index}" for index, name in enumerate(columns, start=2)]
    assignments.append("updated_at = now()")

    row = await db.fetch_one(
        f"""
        UPDATE bookmarks
        SET {", ".join(assignments)}
        WHERE id = $1
        RETURNING {_COLUMNS}
        """,
        bookmark_uuid,
        *(fields[name] for name in columns),
    )
    return _bookmark_row(row)


async def delete_bookmark(bookmark_id: str) -> dict | None:
    bookmark_uuid = db.parse_uuid(bookmark_id)
    if bookmark_uuid is None:
        return None
    row = await db.fetch_one(
        f"""
        DELETE FROM bookmarks
        WHERE id = $1
        RETURNING {_COLUMNS}
        """,
        bookmark_uuid,
    )
    return _bookmark_row(row)


async def list_tag_blobs(user_id: str) -> list[str]:
    rows = await db.fetch_all(
        """
        SELECT tags
        FROM bookmarks
        WHERE user_id = $1
        """,
        db.parse_uuid(user_id),
    )
    return [row["tags"] for row in rows]
