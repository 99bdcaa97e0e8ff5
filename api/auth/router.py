"""
Auth and user-profile API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from core.config import Settings

from . import dependencies, schemas, security, service

router = APIRouter()


@router.post(
    "/auth/register",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.AuthResponse,
)
async def register(
    payload: schemas.RegisterRequest,
    tokens: security.TokenCodec = Depends(dependencies.get_token_codec),
    settings: Settings = Depends(dependencies.get_settings),
) -> schemas.AuthResponse:
    return await service.register(payload, tokens=tokens, rounds=settings.bcrypt_rounds)


@router.post(
    "/auth/login",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.AuthResponse,
)
async def login(
    payload: schemas.LoginRequest,
    tokens: security.TokenCodec = Depends(dependencies.get_token_codec),
) -> schemas.AuthResponse:
    return await service.authenticate(payload, tokens=tokens)


@router.get("/user/profile", response_model=schemas.ProfileResponse)
async def profile(
    current_user: dict = Depends(dependencies.get_current_user),
) -> schemas.ProfileResponse:
    return await service.profile(str(current_user["id"]))
