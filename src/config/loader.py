# src/config/loader.py
"""
Загрузчик конфигурации проекта.
Единственный источник истины: config/config.json.
Секретные данные переопределяются из переменных окружения.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.common.constants import PaymentProvider


# =============================================================================
# ОПРЕДЕЛЕНИЕ ПУТЕЙ
# =============================================================================

def get_project_root() -> Path:
    """Возвращает корневую директорию проекта."""
    return Path(__file__).parent.parent.parent


def get_config_path() -> Path:
    """Возвращает путь к файлу конфигурации."""
    return get_project_root() / "config" / "config.json"


def load_config_json(path: Path | None = None) -> dict[str, Any]:
    """Загружает config.json и возвращает словарь без ключей-комментариев."""
    config_path = path or get_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Файл конфигурации не найден: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return {k: v for k, v in data.items() if not k.startswith("_comment_")}


# =============================================================================
# PYDANTIC МОДЕЛИ КОНФИГУРАЦИИ
# =============================================================================

class SystemSettings(BaseModel):
    """Системные настройки."""
    PROJECT_NAME: str = "ride_hailing"
    VERSION: str = "1.0.0"
    DEBUG: bool = True
    ENVIRONMENT: str = "development"
    SEED_DEMO_DATA: bool = True


class LoggingSettings(BaseModel):
    """Настройки логирования."""
    LOG_LEVEL: str = "DEBUG"
    LOG_FORMAT: str = "colored"
    LOG_TO_FILE: bool = False
    LOG_FILE_PATH: str = "logs/app.log"
    LOG_MAX_BYTES: int = 10485760
    LOG_BACKUP_COUNT: int = 5


class PaymentsSettings(BaseModel):
    """Настройки оплаты и комиссии платформы."""
    PAYMENT_PROVIDER: PaymentProvider = PaymentProvider.STRIPE
    PAYMENT_API_KEY: str = ""
    PLATFORM_COMMISSION_PERCENT: float = Field(15.0, ge=0.0, le=100.0)
    CURRENCY: str = "BRL"

    @field_validator("PAYMENT_API_KEY", mode="before")
    @classmethod
    def get_from_env(cls, v: str | None) -> str:
        """Получает ключ провайдера из переменных окружения, если не задан."""
        if not v:
            return os.getenv("PAYMENT_API_KEY", "")
        return v


class PricingRuleConfig(BaseModel):
    """Тарифное правило в конфигурации."""
    id: str = Field(..., min_length=1)
    region_name: str = Field(..., min_length=1)
    base_price: float = Field(..., ge=0.0)
    price_per_km: float = Field(..., ge=0.0)
    active: bool = True


def _default_pricing_rules() -> list[PricingRuleConfig]:
    return [
        PricingRuleConfig(id="default", region_name="Geral (Padrão)", base_price=5.0, price_per_km=2.5),
        PricingRuleConfig(id="center", region_name="Centro Histórico", base_price=8.0, price_per_km=3.5),
    ]


class PricingSettings(BaseModel):
    """Настройки тарифов."""
    PRICING_RULES: list[PricingRuleConfig] = Field(default_factory=_default_pricing_rules)
    ESTIMATED_DISTANCE_KM: float = Field(4.8, ge=0.0)


class AdvisorSettings(BaseModel):
    """Настройки внешнего генератора подсказок (Gemini)."""
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-3-flash-preview"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    ADVISOR_TIMEOUT_SECONDS: float = 5.0
    INSIGHT_TEMPERATURE: float = 0.7
    BRIEFING_TEMPERATURE: float = 0.8

    @field_validator("GEMINI_API_KEY", mode="before")
    @classmethod
    def get_from_env(cls, v: str | None) -> str:
        """Получает API ключ из переменных окружения."""
        if not v:
            return os.getenv("GEMINI_API_KEY", "")
        return v

    @property
    def is_configured(self) -> bool:
        """Задан ли API ключ."""
        return bool(self.GEMINI_API_KEY)


class ApiSettings(BaseModel):
    """Настройки HTTP сервиса."""
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8080


# =============================================================================
# ГЛАВНЫЙ КЛАСС НАСТРОЕК
# =============================================================================

class Settings(BaseSettings):
    """
    Главный класс настроек приложения.
    Агрегирует все секции конфигурации.
    """
    system: SystemSettings = Field(default_factory=SystemSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    payments: PaymentsSettings = Field(default_factory=PaymentsSettings)
    pricing: PricingSettings = Field(default_factory=PricingSettings)
    advisor: AdvisorSettings = Field(default_factory=AdvisorSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        """
        Создаёт Settings из плоского словаря config.json.
        Секреты и адреса переопределяются из переменных окружения.
        """
        rules = data.get("PRICING_RULES")

        return cls(
            system=SystemSettings(
                PROJECT_NAME=data.get("PROJECT_NAME", "ride_hailing"),
                VERSION=data.get("VERSION", "1.0.0"),
                DEBUG=data.get("DEBUG", True),
                ENVIRONMENT=os.getenv("ENVIRONMENT", data.get("ENVIRONMENT", "development")),
                SEED_DEMO_DATA=data.get("SEED_DEMO_DATA", True),
            ),
            logging=LoggingSettings(
                LOG_LEVEL=os.getenv("LOG_LEVEL", data.get("LOG_LEVEL", "DEBUG")),
                LOG_FORMAT=data.get("LOG_FORMAT", "colored"),
                LOG_TO_FILE=data.get("LOG_TO_FILE", False),
                LOG_FILE_PATH=data.get("LOG_FILE_PATH", "logs/app.log"),
                LOG_MAX_BYTES=data.get("LOG_MAX_BYTES", 10485760),
                LOG_BACKUP_COUNT=data.get("LOG_BACKUP_COUNT", 5),
            ),
            payments=PaymentsSettings(
                PAYMENT_PROVIDER=data.get("PAYMENT_PROVIDER", "stripe"),
                PAYMENT_API_KEY=os.getenv("PAYMENT_API_KEY") or data.get("PAYMENT_API_KEY", ""),
                PLATFORM_COMMISSION_PERCENT=data.get("PLATFORM_COMMISSION_PERCENT", 15.0),
                CURRENCY=data.get("CURRENCY", "BRL"),
            ),
            pricing=PricingSettings(
                PRICING_RULES=rules if rules is not None else _default_pricing_rules(),
                ESTIMATED_DISTANCE_KM=data.get("ESTIMATED_DISTANCE_KM", 4.8),
            ),
            advisor=AdvisorSettings(
                GEMINI_API_KEY=os.getenv("GEMINI_API_KEY") or data.get("GEMINI_API_KEY", ""),
                GEMINI_MODEL=data.get("GEMINI_MODEL", "gemini-3-flash-preview"),
                GEMINI_BASE_URL=data.get("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"),
                ADVISOR_TIMEOUT_SECONDS=data.get("ADVISOR_TIMEOUT_SECONDS", 5.0),
                INSIGHT_TEMPERATURE=data.get("INSIGHT_TEMPERATURE", 0.7),
                BRIEFING_TEMPERATURE=data.get("BRIEFING_TEMPERATURE", 0.8),
            ),
            api=ApiSettings(
                API_HOST=os.getenv("API_HOST", data.get("API_HOST", "0.0.0.0")),
                API_PORT=int(os.getenv("API_PORT", data.get("API_PORT", 8080))),
            ),
        )

    @classmethod
    def from_config_json(cls, path: Path | None = None) -> "Settings":
        """Создаёт объект Settings из config.json."""
        return cls.from_dict(load_config_json(path))


@lru_cache()
def get_settings() -> Settings:
    """
    Возвращает синглтон настроек приложения.
    Использует кэширование для производительности.
    """
    from dotenv import load_dotenv

    env_path = get_project_root() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return Settings.from_config_json()


# Экспорт синглтона для удобного импорта
settings = get_settings()
