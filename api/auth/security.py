"""
Auth security helpers: password hashing and session tokens.
"""

from __future__ import annotations

import time
from typing import Any

import bcrypt
import jwt
from jwt.utils import base64url_decode, base64url_encode

DEFAULT_BCRYPT_ROUNDS = 12


class AuthSecurityError(RuntimeError):
    pass


def now_epoch_s() -> int:
    return int(time.time())


def _is_canonical_signature(token: str) -> bool:
    """
    True when the signature segment re-encodes to exactly itself.

    Base64 ignores the unused low bits of the last character, so without this
    check a token with an altered final character can decode to the same
    signature bytes.
    """
    signature = token.rpartition(".")[2]
    try:
        canonical = base64url_encode(base64url_decode(signature))
    except ValueError:
        return False
    return canonical.decode("ascii") == signature


def hash_password(plain_password: str, *, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        # Malformed stored hash.
        return False


class TokenCodec:
    """
    Issues and verifies signed session tokens.

    Tokens carry `sub` (user id), `email` and `iat`. There is no `exp` claim:
    a token stays valid for as long as the signing key does.
    """

    def __init__(self, *, secret: str, algorithm: str = "HS256") -> None:
        if not secret:
            raise AuthSecurityError("Token signing secret is empty.")
        self._secret = secret
        self._algorithm = algorithm

    def issue(self, *, user_id: str, email: str) -> str:
        payload = {
            "sub": str(user_id),
            "email": email,
            "iat": now_epoch_s(),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> dict[str, Any] | None:
        raw = (token or "").strip()
        if not raw or not _is_canonical_signature(raw):
            return None

        try:
            payload = jwt.decode(
                raw,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub"]},
            )
        except jwt.InvalidTokenError:
            return None

        subject = str(payload.get("sub") or "").strip()
        if not subject:
            return None
        return payload
