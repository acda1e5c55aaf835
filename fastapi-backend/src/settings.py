# src/settings.py
from __future__ import annotations

import json
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from windows import NAMED_WINDOWS


class AppSettings(BaseSettings):
    # Application
    app_name: str = Field(default="servicenow-analytics-api", env="APP_NAME")
    app_version: str = Field(default="0.1.0", env="APP_VERSION")
    log_level: str = Field(default="INFO", env="LOG_LEVEL")

    # CORS
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["*"], env="CORS_ALLOW_ORIGINS")
    cors_allow_methods: List[str] = Field(default_factory=lambda: ["*"], env="CORS_ALLOW_METHODS")
    cors_allow_headers: List[str] = Field(default_factory=lambda: ["*"], env="CORS_ALLOW_HEADERS")
    cors_allow_credentials: bool = Field(default=False, env="CORS_ALLOW_CREDENTIALS")

    # Metrics source: "synthetic" samples mock series, "feed" reads a reporting feed over HTTP
    metrics_source: str = Field(default="synthetic", env="METRICS_SOURCE")
    metrics_feed_url: Optional[str] = Field(default=None, env="METRICS_FEED_URL")
    metrics_feed_timeout: float = Field(default=10.0, env="METRICS_FEED_TIMEOUT")
    metrics_seed: Optional[int] = Field(default=None, env="METRICS_SEED")

    # Reporting
    default_window: str = Field(default="12m", env="DEFAULT_WINDOW")
    max_window_months: int = Field(default=24, env="MAX_WINDOW_MONTHS")
    sla_target: float = Field(default=85.0, env="SLA_TARGET")

    # Celery
    celery_broker_url: Optional[str] = Field(default=None, env="CELERY_BROKER_URL")
    celery_result_backend: Optional[str] = Field(default=None, env="CELERY_RESULT_BACKEND")
    celery_task_default_queue: str = Field(default="default", env="CELERY_TASK_DEFAULT_QUEUE")

    # Host / Port for serving the app
    host: str = Field(default="0.0.0.0", env="HOST")
    port: int = Field(default=8000, env="PORT")

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file="../.env",  # Look for .env in parent directory
        env_file_encoding="utf-8",
        protected_namespaces=(),
        validate_default=True,
        extra="ignore",
    )

    @staticmethod
    def _parse_list(value: object) -> List[str]:
        """
        Accept JSON array, '*' literal, or comma-separated string.
        Always returns a list of stripped strings. Empty parts are discarded.
        """
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return [str(v).strip() for v in value if str(v).strip()]
        if isinstance(value, str):
            s = value.strip()
            if s == "*":
                return ["*"]
            if s.startswith("[") and s.endswith("]"):
                try:
                    parsed = json.loads(s)
                    if not isinstance(parsed, list):
                        raise ValueError("Expected JSON array")
                    return [str(v).strip() for v in parsed if str(v).strip()]
                except json.JSONDecodeError as e:
                    raise ValueError(f"Invalid JSON array: {e}") from e
            return [part.strip() for part in s.split(",") if part.strip()]
        raise TypeError(f"Unsupported list value type: {type(value).__name__}")

    @field_validator(
        "cors_allow_origins",
        "cors_allow_methods",
        "cors_allow_headers",
        mode="before",
    )
    @classmethod
    def _lists_from_env(cls, v: object) -> List[str]:
        return cls._parse_list(v)

    @field_validator("log_level", mode="after")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        x = (v or "INFO").upper()
        valid = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}
        if x not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(valid)}")
        return x

    @field_validator("metrics_source", mode="after")
    @classmethod
    def _normalize_source(cls, v: str) -> str:
        x = (v or "synthetic").strip().lower()
        if x not in {"synthetic", "feed"}:
            raise ValueError("METRICS_SOURCE must be 'synthetic' or 'feed'")
        return x

    @field_validator("default_window", mode="after")
    @classmethod
    def _check_default_window(cls, v: str) -> str:
        x = v.strip().lower()
        if x not in NAMED_WINDOWS:
            raise ValueError(f"DEFAULT_WINDOW must be one of {list(NAMED_WINDOWS)}")
        return x

    @field_validator("sla_target", mode="after")
    @classmethod
    def _check_sla_target(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError("SLA_TARGET must lie within [0, 100]")
        return v

    @model_validator(mode="after")
    def _check_metrics_wiring(self) -> "AppSettings":
        if self.metrics_source == "feed" and not self.metrics_feed_url:
            raise ValueError("METRICS_FEED_URL is required when METRICS_SOURCE=feed")
        # named windows must always be servable
        if self.max_window_months < max(NAMED_WINDOWS.values()):
            raise ValueError(f"MAX_WINDOW_MONTHS must be at least {max(NAMED_WINDOWS.values())}")
        return self


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()
