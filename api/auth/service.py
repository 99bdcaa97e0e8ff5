"""
Auth business logic.
"""

from __future__ import annotations

import logging

from core.errors import ConflictError, NotFoundError, UnauthorizedError

from . import repository, schemas, security

logger = logging.getLogger(__name__)

_PUBLIC_USER_FIELDS = ("id", "email", "username", "created_at", "updated_at")


def _public_user(user_row: dict) -> dict:
    return {key: user_row[key] for key in _PUBLIC_USER_FIELDS if key in user_row}


def _to_user_response(user_row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=str(user_row["id"]),
        email=str(user_row["email"]),
        username=str(user_row["username"]),
        created_at=user_row["created_at"],
    )


def _issue_auth_response(user_row: dict, *, tokens: security.TokenCodec) -> schemas.AuthResponse:
    access_token = tokens.issue(user_id=str(user_row["id"]), email=str(user_row["email"]))
    return schemas.AuthResponse(access_token=access_token, user=_to_user_response(user_row))


async def register(
    payload: schemas.RegisterRequest,
    *,
    tokens: security.TokenCodec,
    rounds: int = security.DEFAULT_BCRYPT_ROUNDS,
) -> schemas.AuthResponse:
    existing = await repository.find_user_by_email_or_username(
        email=payload.email,
        username=payload.username,
    )
    if existing is not None:
        raise ConflictError("User with this email or username already exists")

    password_hash = security.hash_password(payload.password, rounds=rounds)
    user_row = await repository.create_user(
        email=payload.email,
        username=payload.username,
        password_hash=password_hash,
    )
    if user_row is None:
        # Lost a race against a concurrent registration; the unique constraint won.
        raise ConflictError("User with this email or username already exists")

    logger.info("user_registered user_id=%s", user_row["id"])
    return _issue_auth_response(user_row, tokens=tokens)


async def validate_user(email: str, password: str) -> dict | None:
    """
    Check credentials and return the user's public view, or None.

    Unknown email and wrong password both yield None; the caller decides how
    to reject. The hash verifier is only consulted when the user exists.
    """
    user_row = await repository.get_user_by_email(email)
    if user_row is None:
        return None

    if not security.verify_password(password, str(user_row.get("password_hash") or "")):
        return None

    return _public_user(user_row)


async def login(user: dict, *, tokens: security.TokenCodec) -> schemas.AuthResponse:
    return _issue_auth_response(user, tokens=tokens)


async def authenticate(
    payload: schemas.LoginRequest,
    *,
    tokens: security.TokenCodec,
) -> schemas.AuthResponse:
    user = await validate_user(payload.email, payload.password)
    if user is None:
        logger.info("login_failed email=%s", payload.email)
        raise UnauthorizedError("Invalid credentials")
    return await login(user, tokens=tokens)


async def get_user_from_access_token(access_token: str, *, tokens: security.TokenCodec) -> dict:
    payload = tokens.verify(access_token)
    if payload is None:
        logger.debug("access_token_rejected reason=invalid")
        raise UnauthorizedError("Invalid access token")

    user_row = await repository.get_user_by_id(str(payload["sub"]))
    if user_row is None:
        logger.debug("access_token_rejected reason=unknown_subject sub=%s", payload["sub"])
        raise UnauthorizedError("User not found")
    return _public_user(user_row)


async def profile(user_id: str) -> schemas.ProfileResponse:
    row = await repository.get_user_profile(user_id)
    if row is None:
        raise NotFoundError("User not found")
    return schemas.ProfileResponse(
        id=str(row["id"]),
        email=str(row["email"]),
        username=str(row["username"]),
        created_at=row["created_at"],
        bookmark_count=int(row["bookmark_count"]),
    )
