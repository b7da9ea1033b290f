"""Authentication routes.

Provides:
    POST /auth/login  — exchange email + password for a bearer token.
    GET  /auth/me     — the user behind the current token.
"""

import logging

from fastapi import APIRouter

from src.api.dependencies import CurrentUserDep, DBDep, SettingsDep
from src.schemas.auth import LoginRequest, TokenResponse, UserOut
from src.services.auth import authenticate, create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Log in",
    responses={401: {"description": "Invalid credentials or disabled account"}},
)
async def login(payload: LoginRequest, db: DBDep, settings: SettingsDep) -> TokenResponse:
    user = await authenticate(db, payload.email, payload.password)
    logger.info("User %s logged in (role=%s)", user.email, user.role)
    return TokenResponse(
        access_token=create_access_token(user, settings),
        user=UserOut.model_validate(user),
    )


@router.get("/me", response_model=UserOut, summary="Current user")
async def me(user: CurrentUserDep) -> UserOut:
    return UserOut.model_validate(user)
