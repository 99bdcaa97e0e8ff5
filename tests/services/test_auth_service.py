"""
Tests for the identity service: registration, credential validation, login
and access-token resolution.
"""
from unittest.mock import AsyncMock, Mock

import pytest

from auth import repository, schemas, security, service
from core.errors import ConflictError, NotFoundError, UnauthorizedError
from fakes import InMemoryStore

ROUNDS = 4


def _register_payload(**overrides: str) -> schemas.RegisterRequest:
    data = {"email": "test@example.com", "username": "testuser", "password": "password123"}
    data.update(overrides)
    return schemas.RegisterRequest(**data)


class TestRegister:
    async def test__register__returns_token_and_public_user(
        self,
        store: InMemoryStore,
        tokens: security.TokenCodec,
    ) -> None:
        result = await service.register(_register_payload(), tokens=tokens, rounds=ROUNDS)

        dumped = result.user.model_dump(by_alias=True)
        assert set(dumped) == {"id", "email", "username", "createdAt"}
        assert dumped["email"] == "test@example.com"
        assert dumped["username"] == "testuser"
        assert tokens.verify(result.access_token)["sub"] == result.user.id

        stored = store.users[result.user.id]
        assert stored["password_hash"] != "password123"
        assert security.verify_password("password123", stored["password_hash"])

    async def test__register__duplicate_email_conflicts_without_insert(
        self,
        store: InMemoryStore,
        tokens: security.TokenCodec,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        await service.register(_register_payload(), tokens=tokens, rounds=ROUNDS)

        create_user = AsyncMock(wraps=store.create_user)
        hash_password = Mock(wraps=security.hash_password)
        monkeypatch.setattr(repository, "create_user", create_user)
        monkeypatch.setattr(security, "hash_password", hash_password)

        with pytest.raises(ConflictError):
            await service.register(
                _register_payload(username="otheruser"),
                tokens=tokens,
                rounds=ROUNDS,
            )

        create_user.assert_not_called()
        hash_password.assert_not_called()
        assert len(store.users) == 1

    async def test__register__duplicate_username_conflicts(
        self,
        store: InMemoryStore,  # noqa: ARG002
        tokens: security.TokenCodec,
    ) -> None:
        await service.register(_register_payload(), tokens=tokens, rounds=ROUNDS)

        with pytest.raises(ConflictError):
            await service.register(
                _register_payload(email="other@example.com"),
                tokens=tokens,
                rounds=ROUNDS,
            )

    async def test__register__insert_losing_race_is_a_conflict(
        self,
        store: InMemoryStore,  # noqa: ARG002
        tokens: security.TokenCodec,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        # Pre-check passed, but the unique constraint rejected the insert.
        monkeypatch.setattr(repository, "create_user", AsyncMock(return_value=None))

        with pytest.raises(ConflictError):
            await service.register(_register_payload(), tokens=tokens, rounds=ROUNDS)

    async def test__register__stores_username_without_trimming(
        self,
        store: InMemoryStore,
        tokens: security.TokenCodec,
    ) -> None:
        result = await service.register(
            _register_payload(username="  testuser  "), tokens=tokens, rounds=ROUNDS,
        )

        assert result.user.username == "  testuser  "
        assert store.users[result.user.id]["username"] == "  testuser  "


class TestValidateUser:
    async def test__validate_user__returns_public_view_for_valid_credentials(
        self,
        store: InMemoryStore,  # noqa: ARG002
        tokens: security.TokenCodec,
    ) -> None:
        registered = await service.register(_register_payload(), tokens=tokens, rounds=ROUNDS)

        user = await service.validate_user("test@example.com", "password123")

        assert user is not None
        assert user["id"] == registered.user.id
        assert "password_hash" not in user
        assert "password" not in user

    async def test__validate_user__returns_none_for_unknown_email_without_verifying(
        self,
        store: InMemoryStore,  # noqa: ARG002
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        verify_password = Mock(return_value=True)
        monkeypatch.setattr(security, "verify_password", verify_password)

        assert await service.validate_user("nobody@example.com", "password123") is None
        verify_password.assert_not_called()

    async def test__validate_user__returns_none_for_wrong_password(
        self,
        store: InMemoryStore,  # noqa: ARG002
        tokens: security.TokenCodec,
    ) -> None:
        await service.register(_register_payload(), tokens=tokens, rounds=ROUNDS)

        assert await service.validate_user("test@example.com", "wrong-password") is None

    async def test__validate_user__email_match_is_case_sensitive(
        self,
        store: InMemoryStore,  # noqa: ARG002
        tokens: security.TokenCodec,
    ) -> None:
        await service.register(_register_payload(), tokens=tokens, rounds=ROUNDS)

        assert await service.validate_user("TEST@example.com", "password123") is None


class TestLogin:
    async def test__authenticate__issues_token_for_valid_credentials(
        self,
        store: InMemoryStore,  # noqa: ARG002
        tokens: security.TokenCodec,
    ) -> None:
        registered = await service.register(_register_payload(), tokens=tokens, rounds=ROUNDS)

        result = await service.authenticate(
            schemas.LoginRequest(email="test@example.com", password="password123"),
            tokens=tokens,
        )

        assert result.user.id == registered.user.id
        assert tokens.verify(result.access_token)["email"] == "test@example.com"

    async def test__authenticate__rejects_before_issuing_token(
        self,
        store: InMemoryStore,  # noqa: ARG002
    ) -> None:
        codec = Mock(spec=security.TokenCodec)

        with pytest.raises(UnauthorizedError):
            await service.authenticate(
                schemas.LoginRequest(email="nobody@example.com", password="password123"),
                tokens=codec,
            )

        codec.issue.assert_not_called()


class TestAccessTokenResolution:
    async def test__get_user_from_access_token__resolves_subject(
        self,
        store: InMemoryStore,  # noqa: ARG002
        tokens: security.TokenCodec,
    ) -> None:
        registered = await service.register(_register_payload(), tokens=tokens, rounds=ROUNDS)

        user = await service.get_user_from_access_token(registered.access_token, tokens=tokens)

        assert user["id"] == registered.user.id
        assert "password_hash" not in user

    async def test__get_user_from_access_token__rejects_invalid_token(
        self,
        store: InMemoryStore,  # noqa: ARG002
        tokens: security.TokenCodec,
    ) -> None:
        with pytest.raises(UnauthorizedError):
            await service.get_user_from_access_token("not-a-token", tokens=tokens)

    async def test__get_user_from_access_token__rejects_dangling_subject(
        self,
        store: InMemoryStore,
        tokens: security.TokenCodec,
    ) -> None:
        registered = await service.register(_register_payload(), tokens=tokens, rounds=ROUNDS)
        del store.users[registered.user.id]

        with pytest.raises(UnauthorizedError, match="User not found"):
            await service.get_user_from_access_token(registered.access_token, tokens=tokens)


class TestProfile:
    async def test__profile__includes_bookmark_count(
        self,
        store: InMemoryStore,
        tokens: security.TokenCodec,
    ) -> None:
        registered = await service.register(_register_payload(), tokens=tokens, rounds=ROUNDS)
        for title in ("one", "two"):
            await store.create_bookmark(
                user_id=registered.user.id,
                title=title,
                url="https://example.com",
                description=None,
                tags_json="[]",
            )

        result = await service.profile(registered.user.id)

        assert result.bookmark_count == 2
        assert result.model_dump(by_alias=True)["bookmarkCount"] == 2

    async def test__profile__unknown_user_is_not_found(
        self,
        store: InMemoryStore,  # noqa: ARG002
    ) -> None:
        with pytest.raises(NotFoundError):
            await service.profile("missing-user")
