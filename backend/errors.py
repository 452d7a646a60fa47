"""
Error taxonomy shared by services and routes.

Services raise these; ``backend.app`` turns every ``PortalError`` into a JSON
response with the error's status code, so routes never build HTTP errors
themselves.
"""

from __future__ import annotations

from typing import Optional


class PortalError(Exception):
    status_code = 400
    code = "error"

    def __init__(self, message: str = "Произошла ошибка"):
        super().__init__(message)
        self.message = message


class ValidationError(PortalError):
    status_code = 422
    code = "validation_error"

    def __init__(self, message: str = "Заполните обязательные поля"):
        super().__init__(message)


class NotFound(PortalError):
    status_code = 404
    code = "not_found"

    def __init__(self, message: str = "Не найдено"):
        super().__init__(message)


class Conflict(PortalError):
    status_code = 409
    code = "conflict"


class SlugConflict(Conflict):
    code = "slug_conflict"

    def __init__(self, slug: str):
        super().__init__(f"Адрес «{slug}» уже занят")
        self.slug = slug


class DuplicateSubscription(Conflict):
    code = "duplicate_subscription"

    def __init__(self, message: str = "Вы уже подписаны на рассылку"):
        super().__init__(message)


class CategoryInUse(Conflict):
    code = "category_in_use"

    def __init__(self, dependents: int):
        super().__init__(
            f"Категория используется ({dependents}). Перенесите записи в другую категорию"
        )
        self.dependents = dependents


class CategoryTypeMismatch(PortalError):
    status_code = 422
    code = "category_type_mismatch"

    def __init__(self, expected: str, actual: str):
        super().__init__(f"Категория типа «{actual}» не подходит, нужна «{expected}»")
        self.expected = expected
        self.actual = actual


class TopicLocked(PortalError):
    status_code = 403
    code = "topic_locked"

    def __init__(self, message: str = "Тема закрыта для ответов"):
        super().__init__(message)


class PermissionDenied(PortalError):
    status_code = 403
    code = "forbidden"

    def __init__(self, message: str = "У вас нет доступа к админ-панели"):
        super().__init__(message)


class RemoteCallFailure(PortalError):
    status_code = 502
    code = "remote_call_failure"


class AssistUnavailable(RemoteCallFailure):
    status_code = 503
    code = "assist_unavailable"

    def __init__(self, message: str = "Сервис генерации временно недоступен"):
        super().__init__(message)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

AUTH_ERROR_TEXT = {
    "not_verified": "Пожалуйста, подтвердите ваш email",
    "bad_credentials": "Неверный email или пароль",
    "rate_limited": "Слишком много попыток. Попробуйте позже",
    "duplicate_registration": "Пользователь с таким email уже существует",
    "weak_password": "Пароль слишком слабый. Минимум 6 символов",
    "cancelled": "Вход был отменен",
    "expired_session": "Сессия истекла. Войдите снова",
    "network": "Ошибка сети. Проверьте подключение",
}


class AuthError(PortalError):
    status_code = 401
    code = "auth_error"

    def __init__(self, category: Optional[str] = None, message: Optional[str] = None):
        text = message or AUTH_ERROR_TEXT.get(category or "", "Произошла ошибка")
        super().__init__(text)
        self.category = category


def classify_auth_message(message: str) -> Optional[str]:
    """Map a provider message onto one of the fixed auth categories."""
    m = (message or "").lower()
    if "not verified" in m:
        return "not_verified"
    if any(s in m for s in ("invalid", "credentials", "wrong password", "user not found")):
        return "bad_credentials"
    if "rate" in m or "too many" in m:
        return "rate_limited"
    if any(s in m for s in ("already exists", "already registered", "email in use")):
        return "duplicate_registration"
    if "weak" in m or ("password" in m and "short" in m):
        return "weak_password"
    if "cancel" in m or "popup" in m:
        return "cancelled"
    if "expired" in m or "token" in m:
        return "expired_session"
    if any(s in m for s in ("network", "connection", "fetch")):
        return "network"
    return None


def translate_auth_error(message: str) -> str:
    """Provider message -> Russian text; unmatched messages pass through."""
    category = classify_auth_message(message)
    if category:
        return AUTH_ERROR_TEXT[category]
    return message or "Произошла ошибка"
