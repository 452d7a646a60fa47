"""Account endpoints -- login, registration, password reset, logout."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from backend import auth
from backend.database import get_session
from backend.errors import AuthError
from backend.models import User
from backend.schemas import (
    ForgotPasswordIn,
    LoginIn,
    RegisterIn,
    ResetPasswordIn,
    SessionOut,
    UserOut,
)

router = APIRouter(tags=["auth"])


def user_out(ctx: auth.SessionContext) -> UserOut:
    return UserOut(
        id=ctx.user_id,
        email=ctx.email,
        display_name=ctx.display_name,
        role=ctx.role,
        is_admin=ctx.is_admin,
    )


def session_out(user: User, token: str) -> SessionOut:
    return SessionOut(token=token, user=user_out(auth.SessionContext.from_user(user)))


@router.post("/login", response_model=SessionOut)
async def login(body: LoginIn, session: AsyncSession = Depends(get_session)):
    user, token = await auth.sign_in_with_email(session, body.email, body.password)
    return session_out(user, token)


@router.post("/register", response_model=SessionOut, status_code=201)
async def register(body: RegisterIn, session: AsyncSession = Depends(get_session)):
    user, token = await auth.sign_up(session, body.email, body.password, body.display_name)
    return session_out(user, token)


@router.post("/forgot-password")
async def forgot_password(body: ForgotPasswordIn, session: AsyncSession = Depends(get_session)):
    await auth.send_password_reset_email(session, body.email)
    # same answer for known and unknown addresses
    return {"ok": True, "message": "Если такой email зарегистрирован, мы отправили ссылку для сброса"}


@router.post("/reset-password")
async def reset_password(body: ResetPasswordIn, session: AsyncSession = Depends(get_session)):
    await auth.reset_password(session, body.token, body.password)
    return {"ok": True}


@router.post("/logout")
async def logout(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(auth.bearer),
    session: AsyncSession = Depends(get_session),
):
    if credentials is None:
        raise AuthError("expired_session")
    await auth.sign_out(session, credentials.credentials)
    return {"ok": True}


@router.get("/me", response_model=UserOut)
async def me(ctx: auth.SessionContext = Depends(auth.current_user)):
    return user_out(ctx)
