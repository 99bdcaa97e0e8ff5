"""
User persistence helpers.

Read paths that return data to callers select only the public columns. The
password hash is selected by `get_user_by_email` alone, for credential checks.
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db

_PUBLIC_COLUMNS = "id, email, username, created_at, updated_at"


def _user_row(row: dict[str, Any] | None) -> dict[str, Any] | None:
    if row is None:
        return None
    return {**row, "id": str(row["id"])}


async def find_user_by_email_or_username(*, email: str, username: str) -> dict | None:
    row = await db.fetch_one(
        f"""
        SELECT {_PUBLIC_COLUMNS}
        FROM users
        WHERE email = $1
           OR username = $2
        LIMIT 1
        """,
        email,
        username,
    )
    return _user_row(row)


async def create_user(*, email: str, username: str, password_hash: str) -> dict | None:
    """
    Insert a user and return its public columns.

    Returns None when the insert loses a race against another registration
    with the same email or username (unique constraint violation).
    """
    try:
        row = await db.fetch_one(
            f"""
            INSERT INTO users (email, username, password_hash)
            VALUES ($1, $2, $3)
            RETURNING {_PUBLIC_COLUMNS}
            """,
            email,
            username,
            password_hash,
        )
    except asyncpg.UniqueViolationError:
        return None
    if row is None:
        raise RuntimeError("Failed to create user.")
    return _user_row(row)


async def get_user_by_email(email: str) -> dict | None:
    row = await db.fetch_one(
        f"""
        SELECT {_PUBLIC_COLUMNS}, password_hash
        FROM users
        WHERE email = $1
        """,
        email,
    )
    return _user_row(row)


async def get_user_by_id(user_id: str) -> dict | None:
    user_uuid = db.parse_uuid(user_id)
    if user_uuid is None:
        return None
    row = await db.fetch_one(
        f"""
        SELECT {_PUBLIC_COLUMNS}
        FROM users
        WHERE id = $1
        """,
        user_uuid,
    )
    return _user_row(row)


async def get_user_profile(user_id: str) -> dict | None:
    user_uuid = db.parse_uuid(user_id)
    if user_uuid is None:
        return None
    row = await db.fetch_one(
        """
        SELECT u.id, u.email, u.username, u.created_at, u.updated_at,
               (SELECT count(*) FROM bookmarks b WHERE b.user_id = u.id) AS bookmark_count
        FROM users u
        WHERE u.id = $1
        """,
        user_uuid,
    )
    return _user_row(row)
