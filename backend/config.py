# Конфигурация из переменных окружения (.env или переменные платформы).

import os
from dotenv import load_dotenv

load_dotenv()


def _env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _env_int(key: str, default: int) -> int:
    try:
        return int(_env(key, str(default)))
    except ValueError:
        return default


def _env_float(key: str, default: float) -> float:
    try:
        return float(_env(key, str(default)))
    except ValueError:
        return default


def _env_list(key: str, default: list = None) -> list:
    s = _env(key)
    if not s:
        return default or []
    s = s.strip().strip("[]")
    result = []
    for x in s.split(","):
        x = x.strip().strip("[]").strip("'\"")
        if x:
            result.append(x)
    return result if result else (default or [])


# ============================================================================
# Database
# ============================================================================
DATABASE_URL_RAW = _env("DATABASE_URL")
DATABASE_URL_FALLBACK = _env("DATABASE_URL_FALLBACK", "sqlite+aiosqlite:///./metod_hub.db")

# ============================================================================
# Site
# ============================================================================
LOG_LEVEL = _env("LOG_LEVEL", "INFO").upper()
SITE_NAME = _env("SITE_NAME", "M-etod Hub")
SITE_BASE_URL = _env("SITE_BASE_URL", "http://localhost:8000").rstrip("/")

# Роль admin выдаётся через таблицу role_grants; этот список только засевает её
ADMIN_EMAILS = [e.lower() for e in _env_list("ADMIN_EMAILS")]

SESSION_TTL_HOURS = _env_int("SESSION_TTL_HOURS", 720)
RESET_TOKEN_TTL_MINUTES = _env_int("RESET_TOKEN_TTL_MINUTES", 60)
MIN_PASSWORD_LENGTH = _env_int("MIN_PASSWORD_LENGTH", 6)

FEATURED_OFFERS_LIMIT = _env_int("FEATURED_OFFERS_LIMIT", 3)
FEATURED_NEWS_LIMIT = _env_int("FEATURED_NEWS_LIMIT", 2)

# ============================================================================
# LLM (OpenAI-compatible) -- генерация и рерайт статей
# ============================================================================
LLM_API_KEY = _env("LLM_API_KEY")
LLM_BASE_URL = _env("LLM_BASE_URL", "https://api.openai.com/v1")
LLM_MODEL = _env("LLM_MODEL", "gpt-4o-mini")
LLM_MAX_TOKENS = _env_int("LLM_MAX_TOKENS", 3000)
LLM_TEMPERATURE = _env_float("LLM_TEMPERATURE", 0.7)
LLM_TIMEOUT = _env_float("LLM_TIMEOUT", 60.0)

# ============================================================================
# Scraping
# ============================================================================
SCRAPE_TIMEOUT = _env_float("SCRAPE_TIMEOUT", 30.0)
SCRAPE_USER_AGENT = _env("SCRAPE_USER_AGENT", "MetodHub/1.0")
BANKI_NEWS_URL = _env("BANKI_NEWS_URL", "https://www.banki.ru/news/")

# ============================================================================
# IndexNow
# ============================================================================
INDEXNOW_ENDPOINT = _env("INDEXNOW_ENDPOINT", "https://yandex.com/indexnow")
INDEXNOW_KEY = _env("INDEXNOW_KEY")
