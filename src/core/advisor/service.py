# src/core/advisor/service.py
"""
Советник: короткие тексты от внешней модели (Google Gemini REST API).
Любой сбой заменяется статической строкой, на цену и статусы не влияет.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from src.common.logger import log_warning
from src.config.loader import AdvisorSettings


INSIGHT_EMPTY_FALLBACK = "Traffic is light, enjoy the ride!"
INSIGHT_ERROR_FALLBACK = "Route optimized for safety and speed."
BRIEFING_EMPTY_FALLBACK = "Operations are stable. Consider peak hour incentives."
BRIEFING_ERROR_FALLBACK = "Operations running smoothly."


class AdvisorUnavailableError(Exception):
    """Внутренняя ошибка вызова модели, наружу не выходит."""
    pass


class AdvisorService:
    """Клиент генерации подсказок для пассажира и сводок для администратора."""

    def __init__(self, config: AdvisorSettings, client: Optional[httpx.AsyncClient] = None) -> None:
        """
        Args:
            config: Секция advisor настроек
            client: HTTP клиент (для тестов); по умолчанию создаётся свой
        """
        self._config = config
        self._owns_client = client is None
        self.http = client or httpx.AsyncClient(timeout=config.ADVISOR_TIMEOUT_SECONDS)

    async def close(self) -> None:
        """Закрыть HTTP клиент."""
        if self._owns_client:
            await self.http.aclose()

    async def _generate(self, prompt: str, temperature: float) -> str:
        """
        Один вызов generateContent.

        Returns:
            Текст ответа (может быть пустым)

        Raises:
            AdvisorUnavailableError: Ключ не задан, HTTP ошибка или неожиданный ответ
        """
        if not self._config.is_configured:
            raise AdvisorUnavailableError("GEMINI_API_KEY не задан")

        url = f"{self._config.GEMINI_BASE_URL}/models/{self._config.GEMINI_MODEL}:generateContent"
        body: dict[str, Any] = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": temperature},
        }

        try:
            response = await self.http.post(
                url,
                json=body,
                headers={"x-goog-api-key": self._config.GEMINI_API_KEY},
                timeout=self._config.ADVISOR_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise AdvisorUnavailableError(str(e)) from e

        try:
            candidates = data.get("candidates") or []
            if not candidates:
                return ""
            parts = candidates[0].get("content", {}).get("parts", [])
            return "".join(part.get("text", "") for part in parts).strip()
        except (AttributeError, TypeError) as e:
            raise AdvisorUnavailableError(f"Неожиданный ответ модели: {e}") from e

    async def ride_insight(self, origin: str, destination: str, price: float) -> str:
        """Короткое пояснение стоимости поездки для пассажира."""
        prompt = (
            f"Provide a very short, witty explanation of why a ride from {origin} to {destination} "
            f"costs ${price:.2f}. Mention one imaginary local landmark or traffic condition in Brazil "
            f"context. Keep it under 20 words."
        )
        try:
            text = await self._generate(prompt, self._config.INSIGHT_TEMPERATURE)
        except AdvisorUnavailableError as e:
            await log_warning(f"Советник недоступен (insight): {e}")
            return INSIGHT_ERROR_FALLBACK
        return text or INSIGHT_EMPTY_FALLBACK

    async def admin_briefing(self, active_rides: int, total_revenue: float) -> str:
        """Операционная сводка для администратора."""
        prompt = (
            f"You are a logistics consultant. Briefly summarize performance: {active_rides} active "
            f"rides and ${total_revenue:.2f} revenue. Suggest one growth tip."
        )
        try:
            text = await self._generate(prompt, self._config.BRIEFING_TEMPERATURE)
        except AdvisorUnavailableError as e:
            await log_warning(f"Советник недоступен (briefing): {e}")
            return BRIEFING_ERROR_FALLBACK
        return text or BRIEFING_EMPTY_FALLBACK
