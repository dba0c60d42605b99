#!/usr/bin/env python3
# main.py
"""
Главная точка входа приложения.
Запускает HTTP API ядра поездок.
"""

from __future__ import annotations

import asyncio
import signal
import sys

from src.config import settings
from src.common.logger import setup_logging, log_info
from src.common.constants import TypeMsg


_shutdown_event: asyncio.Event | None = None
_running_tasks: list[asyncio.Task] = []


def setup_signal_handlers() -> None:
    """Настраивает обработчики сигналов для graceful shutdown."""
    global _shutdown_event
    _shutdown_event = asyncio.Event()

    def signal_handler(sig: int) -> None:
        if _shutdown_event and not _shutdown_event.is_set():
            print(f"\nПолучен сигнал остановки (sig={sig}), завершаем работу...")
            _shutdown_event.set()
            for task in _running_tasks:
                if not task.done():
                    task.cancel()

    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda s=sig: signal_handler(s))
    except NotImplementedError:
        # Windows не поддерживает add_signal_handler
        signal.signal(signal.SIGINT, lambda s, f: signal_handler(s))
        signal.signal(signal.SIGTERM, lambda s, f: signal_handler(s))


async def run_ride_api() -> None:
    """Запускает Ride API (поездки, расчёты, администрирование)."""
    import uvicorn

    await log_info(
        f"Запуск Ride API на {settings.api.API_HOST}:{settings.api.API_PORT}...",
        type_msg=TypeMsg.INFO,
    )

    config = uvicorn.Config(
        "src.services.ride_api.app:app",
        host=settings.api.API_HOST,
        port=settings.api.API_PORT,
        log_level="debug" if settings.system.DEBUG else "info",
    )

    server = uvicorn.Server(config)
    try:
        await server.serve()
    except asyncio.CancelledError:
        await log_info("Ride API: graceful shutdown", type_msg=TypeMsg.DEBUG)
        await server.shutdown()


async def main() -> None:
    """Главная функция запуска."""
    setup_logging()
    setup_signal_handlers()

    await log_info(
        f"{settings.system.PROJECT_NAME} v{settings.system.VERSION} ({settings.system.ENVIRONMENT})",
        type_msg=TypeMsg.INFO,
    )

    task = asyncio.create_task(run_ride_api())
    _running_tasks.append(task)
    try:
        await task
    except asyncio.CancelledError:
        pass

    await log_info("Приложение остановлено", type_msg=TypeMsg.INFO)


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1].lower() in ("--help", "-h"):
        print("Использование: python main.py\n\nЗапускает Ride API (настройки: config/config.json, .env)")
        sys.exit(0)

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
