"""
LLM client over any OpenAI-compatible endpoint (OpenAI, NeuroAPI, local proxies).

Every failure, including an empty answer, surfaces as ``AssistUnavailable``;
there are no retries.
"""

import logging
from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from backend.config import (
    LLM_API_KEY,
    LLM_BASE_URL,
    LLM_MAX_TOKENS,
    LLM_MODEL,
    LLM_TEMPERATURE,
    LLM_TIMEOUT,
)
from backend.errors import AssistUnavailable

logger = logging.getLogger(__name__)


class LLMClient:
    """Text generation through the chat completions API."""

    def __init__(
        self,
        api_key: str = LLM_API_KEY,
        base_url: str = LLM_BASE_URL,
        model: str = LLM_MODEL,
        timeout: float = LLM_TIMEOUT,
    ):
        self.model_name = model
        self.client: Optional[AsyncOpenAI] = None
        if api_key:
            self.client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
            logger.info(f"✅ LLM клиент инициализирован: {self.model_name}")
        else:
            logger.warning("⚠️ LLM_API_KEY не задан, генерация текста недоступна")

    async def generate_text(
        self,
        messages: Optional[list[dict]] = None,
        prompt: Optional[str] = None,
        max_tokens: int = LLM_MAX_TOKENS,
    ) -> str:
        if not messages:
            if not prompt:
                raise ValueError("generate_text needs messages or prompt")
            messages = [{"role": "user", "content": prompt}]
        if self.client is None:
            raise AssistUnavailable()

        try:
            logger.info(f"🔄 Запрос к LLM ({self.model_name}), max_tokens={max_tokens}")
            response = await self.client.chat.completions.create(
                model=self.model_name,
                messages=messages,
                max_tokens=max_tokens,
                temperature=LLM_TEMPERATURE,
            )
        except OpenAIError as e:
            logger.error(f"❌ Ошибка LLM ({self.model_name}): {e}")
            raise AssistUnavailable()

        text = response.choices[0].message.content if response.choices else None
        if not text or not text.strip():
            logger.error(f"❌ Пустой ответ LLM ({self.model_name})")
            raise AssistUnavailable()
        return text.strip()

    async def close(self):
        if self.client is not None:
            await self.client.close()
