from __future__ import annotations

import os
from dataclasses import dataclass


def _csv(value: str) -> list[str]:
    items: list[str] = []
    for part in (value or "").split(","):
        item = part.strip()
        if item:
            items.append(item)
    return items


def _env_str(name: str, default: str) -> str:
    return str(os.getenv(name, default) or default)


def _env_bool(name: str, default: bool = False) -> bool:
    raw = str(os.getenv(name, "") or "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except Exception:
        return default


@dataclass(frozen=True)
class BaseConfig:
    ENV: str = "development"
    DEBUG: bool = False
    TESTING: bool = False

    APP_VERSION: str = "dev"
    BRAND_NAME: str = "Job Genie"
    SITE_URL: str = "http://localhost:3000"

    DATABASE_URL: str = "sqlite:///./jobgenie.db"

    JWT_SECRET: str = "dev-secret"
    JWT_EXP_MINUTES: int = 720

    CORS_ORIGINS: list[str] | str = "http://localhost:3000,http://127.0.0.1:3000"
    CORS_ALLOW_CREDENTIALS: bool = False

    LOG_LEVEL: str = "INFO"

    RATE_LIMIT_GLOBAL: str = "1200 per minute"
    RATE_LIMIT_DEFAULT: str = "300 per minute"

    MAIL_SERVER: str = "smtp.gmail.com"
    MAIL_PORT: int = 587
    MAIL_USE_TLS: bool = True
    MAIL_USE_SSL: bool = False
    MAIL_USERNAME: str = ""
    MAIL_PASSWORD: str = ""
    MAIL_DEFAULT_SENDER: str = "noreply@jobgenie.com"
    MAIL_SUPPRESS_SEND: bool = False

    # Background pool for approval emails.
    NOTIFY_MAX_WORKERS: int = 4

    def __post_init__(self) -> None:
        object.__setattr__(self, "APP_VERSION", _env_str("APP_VERSION", self.APP_VERSION))
        object.__setattr__(self, "BRAND_NAME", _env_str("BRAND_NAME", self.BRAND_NAME))
        object.__setattr__(self, "SITE_URL", _env_str("SITE_URL", self.SITE_URL).rstrip("/"))

        object.__setattr__(self, "DATABASE_URL", _env_str("DATABASE_URL", self.DATABASE_URL).strip())

        object.__setattr__(self, "JWT_SECRET", _env_str("JWT_SECRET", self.JWT_SECRET))
        object.__setattr__(self, "JWT_EXP_MINUTES", _env_int("JWT_EXP_MINUTES", self.JWT_EXP_MINUTES))

        cors_raw = os.getenv("CORS_ORIGINS")
        if cors_raw is not None:
            cors_raw = str(cors_raw or "").strip()
            if cors_raw == "*":
                object.__setattr__(self, "CORS_ORIGINS", "*")
            else:
                object.__setattr__(self, "CORS_ORIGINS", _csv(cors_raw))
        else:
            object.__setattr__(self, "CORS_ORIGINS", _csv(str(self.CORS_ORIGINS)))

        object.__setattr__(
            self, "CORS_ALLOW_CREDENTIALS", _env_bool("CORS_ALLOW_CREDENTIALS", self.CORS_ALLOW_CREDENTIALS)
        )

        object.__setattr__(self, "LOG_LEVEL", _env_str("LOG_LEVEL", self.LOG_LEVEL).upper())

        object.__setattr__(self, "RATE_LIMIT_GLOBAL", _env_str("RATE_LIMIT_GLOBAL", self.RATE_LIMIT_GLOBAL))
        object.__setattr__(self, "RATE_LIMIT_DEFAULT", _env_str("RATE_LIMIT_DEFAULT", self.RATE_LIMIT_DEFAULT))

        object.__setattr__(self, "MAIL_SERVER", _env_str("MAIL_SERVER", self.MAIL_SERVER))
        object.__setattr__(self, "MAIL_PORT", _env_int("MAIL_PORT", self.MAIL_PORT))
        object.__setattr__(self, "MAIL_USE_TLS", _env_bool("MAIL_USE_TLS", self.MAIL_USE_TLS))
        object.__setattr__(self, "MAIL_USE_SSL", _env_bool("MAIL_USE_SSL", self.MAIL_USE_SSL))
        object.__setattr__(self, "MAIL_USERNAME", _env_str("MAIL_USERNAME", self.MAIL_USERNAME))
        object.__setattr__(self, "MAIL_PASSWORD", _env_str("MAIL_PASSWORD", self.MAIL_PASSWORD))
        object.__setattr__(
            self,
            "MAIL_DEFAULT_SENDER",
            _env_str("MAIL_DEFAULT_SENDER", self.MAIL_USERNAME or self.MAIL_DEFAULT_SENDER),
        )
        object.__setattr__(self, "MAIL_SUPPRESS_SEND", _env_bool("MAIL_SUPPRESS_SEND", self.MAIL_SUPPRESS_SEND))

        object.__setattr__(self, "NOTIFY_MAX_WORKERS", max(1, _env_int("NOTIFY_MAX_WORKERS", self.NOTIFY_MAX_WORKERS)))

    @property
    def IS_PRODUCTION(self) -> bool:
        return str(self.ENV or "").lower() == "production"

    def mail_settings(self) -> dict[str, object]:
        return {
            "MAIL_SERVER": self.MAIL_SERVER,
            "MAIL_PORT": self.MAIL_PORT,
            "MAIL_USE_TLS": self.MAIL_USE_TLS,
            "MAIL_USE_SSL": self.MAIL_USE_SSL,
            "MAIL_USERNAME": self.MAIL_USERNAME or None,
            "MAIL_PASSWORD": self.MAIL_PASSWORD or None,
            "MAIL_DEFAULT_SENDER": (self.BRAND_NAME, self.MAIL_DEFAULT_SENDER),
            "MAIL_SUPPRESS_SEND": self.MAIL_SUPPRESS_SEND,
        }

    def validate(self) -> None:
        if not str(self.DATABASE_URL or "").strip():
            raise RuntimeError("DATABASE_URL must be set")
        if self.IS_PRODUCTION and str(self.JWT_SECRET or "").strip() in {"", "dev-secret"}:
            raise RuntimeError("JWT_SECRET must be set in production")
        if self.IS_PRODUCTION and str(self.DATABASE_URL or "").startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production")
        if self.IS_PRODUCTION and self.CORS_ORIGINS == "*":
            raise RuntimeError("CORS_ORIGINS must not be '*' in production")
        if self.IS_PRODUCTION and not self.MAIL_SUPPRESS_SEND and not str(self.MAIL_USERNAME or "").strip():
            raise RuntimeError("MAIL_USERNAME must be set in production")


@dataclass(frozen=True)
class DevelopmentConfig(BaseConfig):
    ENV: str = "development"
    DEBUG: bool = True


@dataclass(frozen=True)
class ProductionConfig(BaseConfig):
    ENV: str = "production"
    DEBUG: bool = False


@dataclass(frozen=True)
class TestingConfig(BaseConfig):
    ENV: str = "testing"
    TESTING: bool = True
    JWT_SECRET: str = "test-secret"
    MAIL_SUPPRESS_SEND: bool = True


def get_config() -> BaseConfig:
    env = str(os.getenv("ENV") or os.getenv("APP_ENV") or "development").strip().lower()
    if env in {"prod", "production"}:
        cfg: BaseConfig = ProductionConfig()
    elif env in {"test", "testing"}:
        cfg = TestingConfig()
    else:
        cfg = DevelopmentConfig()

    cfg.validate()
    return cfg
