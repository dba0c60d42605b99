# src/infra/event_bus.py
"""
Шина доменных событий внутри процесса.
Паттерн Pub/Sub: ядро публикует, внешний слой (UI, чат, уведомления) подписывается.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable
from uuid import uuid4

from src.common.constants import TypeMsg
from src.common.logger import log_error, log_info


# =============================================================================
# ДОМЕННЫЕ СОБЫТИЯ
# =============================================================================

@dataclass
class DomainEvent:
    """Доменное событие."""
    event_id: str = field(default_factory=lambda: str(uuid4()))
    event_type: str = ""
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    )
    payload: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> str:
        """Сериализует событие в JSON."""
        return json.dumps({
            "event_id": self.event_id,
            "event_type": self.event_type,
            "timestamp": self.timestamp,
            "payload": self.payload,
        }, ensure_ascii=False, default=str)

    @classmethod
    def from_json(cls, data: str) -> DomainEvent:
        """Десериализует событие из JSON."""
        parsed = json.loads(data)
        return cls(
            event_id=parsed.get("event_id", str(uuid4())),
            event_type=parsed.get("event_type", ""),
            timestamp=parsed.get("timestamp", ""),
            payload=parsed.get("payload", {}),
        )


class EventTypes:
    """Константы типов событий."""
    # Поездки
    RIDE_REQUESTED = "ride.requested"
    RIDE_ACCEPTED = "ride.accepted"
    RIDE_STATUS_CHANGED = "ride.status_changed"
    RIDE_CANCELLED = "ride.cancelled"
    RIDE_COMPLETED = "ride.completed"
    RIDE_RATED = "ride.rated"
    RIDE_MESSAGE_APPENDED = "ride.message_appended"

    # Биллинг
    PAYMENT_SETTLED = "payment.settled"

    # Подписка на все события
    ALL = "*"


EventHandler = Callable[[DomainEvent], Awaitable[None]]


class EventBus:
    """
    Шина событий в памяти.

    Обработчики вызываются по порядку подписки. Ошибка обработчика
    логируется и не мешает остальным обработчикам и публикующему коду.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """
        Подписывает обработчик на тип события.

        Args:
            event_type: Тип события или EventTypes.ALL
            handler: Асинхронный обработчик
        """
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    async def publish(self, event: DomainEvent) -> None:
        """
        Доставляет событие подписчикам.

        Args:
            event: Доменное событие
        """
        handlers = [
            *self._handlers.get(event.event_type, []),
            *self._handlers.get(EventTypes.ALL, []),
        ]

        await log_info(
            f"Событие {event.event_type} ({len(handlers)} подписчиков)",
            type_msg=TypeMsg.DEBUG,
        )

        for handler in handlers:
            try:
                await handler(event)
            except Exception as e:
                await log_error(
                    f"Ошибка обработчика события {event.event_type}: {e}",
                    exc_info=True,
                )

    def clear(self) -> None:
        self._handlers.clear()
