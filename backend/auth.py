"""
Accounts, sessions and the admin gate.

Passwords are PBKDF2-HMAC-SHA256 with a per-user salt. Sessions are opaque
bearer tokens stored in ``auth_sessions``. Admin status is the ``admin`` role
only; roles come from ``role_grants`` which is seeded from ``ADMIN_EMAILS``
at startup.

Views receive the caller as an explicit ``SessionContext`` through the
``optional_user`` / ``current_user`` / ``require_admin`` dependencies.
"""

from __future__ import annotations

import datetime as dt
import hashlib
import logging
import secrets
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import MIN_PASSWORD_LENGTH, RESET_TOKEN_TTL_MINUTES, SESSION_TTL_HOURS
from backend.database import get_session
from backend.errors import AuthError, PermissionDenied, ValidationError
from backend.models import AuthSession, PasswordReset, RoleGrant, User, utcnow

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 120_000

bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class SessionContext:
    user_id: str
    email: str = ""
    display_name: Optional[str] = None
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @classmethod
    def from_user(cls, user: User) -> "SessionContext":
        return cls(
            user_id=user.id,
            email=user.email,
            display_name=user.display_name,
            role=user.role or "user",
        )


SYSTEM = SessionContext(user_id="system", role="admin")


# -----------------
# Helper functions
# -----------------

def hash_password(password: str, salt: Optional[str] = None):
    if not salt:
        salt = secrets.token_hex(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode(), bytes.fromhex(salt), PBKDF2_ITERATIONS)
    return dk.hex(), salt


def verify_password(password: str, password_hash: str, salt: str) -> bool:
    candidate, _ = hash_password(password, salt)
    return secrets.compare_digest(candidate, password_hash)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _check_password(password: str):
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise AuthError("weak_password")


async def _role_for(session: AsyncSession, email: str) -> str:
    grant = (
        await session.execute(select(RoleGrant).where(RoleGrant.email == email))
    ).scalar_one_or_none()
    return grant.role if grant else "user"


async def _open_session(session: AsyncSession, user: User) -> str:
    token = secrets.token_urlsafe(32)
    session.add(AuthSession(
        token=token,
        user_id=user.id,
        expires_at=utcnow() + dt.timedelta(hours=SESSION_TTL_HOURS),
    ))
    await session.commit()
    return token


# -----------------
# Provider operations
# -----------------

async def sign_up(
    session: AsyncSession,
    email: str,
    password: str,
    display_name: str = "",
) -> tuple[User, str]:
    """Register and sign in; returns the user and a fresh session token."""
    email = normalize_email(email)
    if not email or "@" not in email:
        raise ValidationError("Введите корректный email")
    _check_password(password)

    existing = (
        await session.execute(select(User).where(User.email == email))
    ).scalar_one_or_none()
    if existing is not None:
        raise AuthError("duplicate_registration")

    password_hash, salt = hash_password(password)
    user = User(
        email=email,
        display_name=(display_name or "").strip() or None,
        role=await _role_for(session, email),
        password_hash=password_hash,
        salt=salt,
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise AuthError("duplicate_registration")

    logger.info(f"✅ Зарегистрирован пользователь {user.id} (role={user.role})")
    return user, await _open_session(session, user)


async def sign_in_with_email(session: AsyncSession, email: str, password: str) -> tuple[User, str]:
    email = normalize_email(email)
    user = (
        await session.execute(select(User).where(User.email == email))
    ).scalar_one_or_none()
    if user is None or not verify_password(password or "", user.password_hash, user.salt):
        logger.info("Неудачная попытка входа")
        raise AuthError("bad_credentials")
    if not user.email_verified:
        raise AuthError("not_verified")
    return user, await _open_session(session, user)


def deliver_reset(email: str, token: str):
    """Hand-off point to the mail provider; delivery itself is external."""
    logger.info(f"📧 Ссылка для сброса пароля подготовлена для {email}")
    logger.debug("reset token for %s: %s", email, token)


async def send_password_reset_email(
    session: AsyncSession,
    email: str,
    deliver: Callable[[str, str], None] = deliver_reset,
) -> Optional[str]:
    """Create a reset token and pass it to ``deliver``.

    Unknown addresses succeed silently so the endpoint does not reveal
    which e-mails are registered. Returns the token (or None).
    """
    email = normalize_email(email)
    user = (
        await session.execute(select(User).where(User.email == email))
    ).scalar_one_or_none()
    if user is None:
        return None

    token = secrets.token_urlsafe(32)
    session.add(PasswordReset(
        token=token,
        user_id=user.id,
        expires_at=utcnow() + dt.timedelta(minutes=RESET_TOKEN_TTL_MINUTES),
    ))
    await session.commit()
    deliver(email, token)
    return token


async def reset_password(session: AsyncSession, token: str, new_password: str):
    _check_password(new_password)
    reset = (
        await session.execute(select(PasswordReset).where(PasswordReset.token == token))
    ).scalar_one_or_none()
    if reset is None or reset.used or reset.expires_at < utcnow():
        raise AuthError("expired_session")

    user = await session.get(User, reset.user_id)
    if user is None:
        raise AuthError("expired_session")

    user.password_hash, user.salt = hash_password(new_password)
    reset.used = True
    # все старые сессии становятся недействительными
    await session.execute(delete(AuthSession).where(AuthSession.user_id == user.id))
    await session.commit()
    logger.info(f"🔑 Пароль пользователя {user.id} обновлён")


async def sign_out(session: AsyncSession, token: str):
    await session.execute(delete(AuthSession).where(AuthSession.token == token))
    await session.commit()


async def resolve_session(session: AsyncSession, token: str) -> SessionContext:
    row = (
        await session.execute(select(AuthSession).where(AuthSession.token == token))
    ).scalar_one_or_none()
    if row is None or row.expires_at < utcnow():
        raise AuthError("expired_session")
    user = await session.get(User, row.user_id)
    if user is None:
        raise AuthError("expired_session")
    return SessionContext.from_user(user)


async def seed_role_grants(session: AsyncSession, emails: list[str], role: str = "admin") -> int:
    """Ensure a grant exists for every e-mail and promote matching accounts."""
    created = 0
    for email in {normalize_email(e) for e in emails if e}:
        grant = (
            await session.execute(select(RoleGrant).where(RoleGrant.email == email))
        ).scalar_one_or_none()
        if grant is None:
            session.add(RoleGrant(email=email, role=role))
            created += 1
        user = (
            await session.execute(select(User).where(User.email == email))
        ).scalar_one_or_none()
        if user is not None and user.role != role:
            user.role = role
    await session.commit()
    if created:
        logger.info(f"👑 Добавлено выдач роли {role}: {created}")
    return created


# -----------------
# FastAPI dependencies
# -----------------

async def optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    session: AsyncSession = Depends(get_session),
) -> Optional[SessionContext]:
    if credentials is None:
        return None
    return await resolve_session(session, credentials.credentials)


async def current_user(
    ctx: Optional[SessionContext] = Depends(optional_user),
) -> SessionContext:
    if ctx is None:
        raise AuthError("expired_session", message="Войдите, чтобы продолжить")
    return ctx


async def require_admin(ctx: SessionContext = Depends(current_user)) -> SessionContext:
    if not ctx.is_admin:
        raise PermissionDenied()
    return ctx
