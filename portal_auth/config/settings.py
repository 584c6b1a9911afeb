# caminho: portal_auth/config/settings.py
# Conteúdo:
# - Settings: carrega configurações do .env com validações/tipos
# - Normalização das rotas padrão (landing/login) e da URL do backend

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Carrega variáveis de ambiente do .env com defaults sensatos e validações."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # -------------------------------------------------------------------------
    # Sistema / Log
    # -------------------------------------------------------------------------
    DEPLOYMENT_ENVIRONMENT: Literal["development", "staging", "production"] = "development"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    LOG_TO_FILE: bool = False
    DEFAULT_LOCALE: str = "es_pe"

    # -------------------------------------------------------------------------
    # Backend REST
    # - API_URL sem o sufixo /api (ex.: http://localhost:3001)
    # -------------------------------------------------------------------------
    API_URL: str = "http://localhost:3001"
    API_TIMEOUT_S: float = Field(default=15.0, gt=0)

    @field_validator("API_URL", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v):
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v

    # -------------------------------------------------------------------------
    # Armazenamento da sessão
    # -------------------------------------------------------------------------
    STORAGE_BACKEND: Literal["redis", "memory"] = "redis"
    REDIS_URL: str = "redis://localhost:6379/0"
    STORAGE_KEY_PREFIX: str = "portal:auth"

    # -------------------------------------------------------------------------
    # Fluxo de login (documento -> código)
    # -------------------------------------------------------------------------
    RESEND_COOLDOWN_UNITS: int = Field(default=60, ge=1)
    RESEND_TICK_SECONDS: float = Field(default=1.0, gt=0)
    VERIFICATION_CODE_LENGTH: int = Field(default=6, ge=4, le=12)

    # -------------------------------------------------------------------------
    # Rotas e permissões
    # -------------------------------------------------------------------------
    DEFAULT_ROUTE: str = "/"
    LOGIN_ROUTE: str = "/login"
    ADMIN_USER_TYPE: str = "Admin"
    ACCESS_DENIED_REDIRECT_SECONDS: int = 3
    PERMISSION_SETTLE_TIMEOUT_S: float = Field(default=5.0, ge=0)

    @field_validator("DEFAULT_ROUTE", "LOGIN_ROUTE", mode="before")
    @classmethod
    def ensure_leading_slash(cls, v):
        if isinstance(v, str):
            value = v.strip() or "/"
            return value if value.startswith("/") else f"/{value}"
        return v

    # -------------------------------------------------------------------------
    # Conveniências derivadas
    # -------------------------------------------------------------------------
    @property
    def API_BASE_URL(self) -> str:
        """URL base usada pelo cliente HTTP (todas as rotas ficam sob /api)."""
        return f"{self.API_URL}/api"
