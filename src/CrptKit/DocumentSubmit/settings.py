"""Environment-driven configuration for the registry client.

Settings are read with Pydantic v2 ``BaseSettings`` using the ``CRPT_`` prefix,
for example ``CRPT_BASE_URL``, ``CRPT_WINDOW_UNIT=minute``,
``CRPT_MAX_REQUESTS_PER_WINDOW=100``, or the shorthand ``CRPT_QUOTA=100/second``.
Values are validated on load; an invalid environment raises
``pydantic.ValidationError`` naming the offending field.
"""

from __future__ import annotations

import threading
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from CrptKit.DocumentSubmit.network.policy import (
    DEMO_BASE_URL,
    HTTP2_ENABLED,
    HTTP_CONNECT_TIMEOUT,
    HTTP_REQUEST_TIMEOUT,
    TLS_VERIFY_ENABLED,
)
from CrptKit.DocumentSubmit.ratelimit.config import WindowUnit, parse_quota

__all__ = ["LogLevel", "SubmitSettings", "get_settings", "reset_settings"]


class LogLevel(str, Enum):
    """Supported logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class SubmitSettings(BaseSettings):
    """Connection, quota, and logging settings for the registry client."""

    model_config = SettingsConfigDict(
        env_prefix="CRPT_",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: str = Field(DEMO_BASE_URL, description="API root, e.g. https://ismp.crpt.ru/api/v3")
    window_unit: WindowUnit = Field(WindowUnit.SECOND, description="Length of one rate-limit window")
    max_requests_per_window: int = Field(
        10,
        description="Maximum create-document calls per window",
        gt=0,
    )
    request_timeout_s: float = Field(
        HTTP_REQUEST_TIMEOUT,
        description="Per-request timeout (seconds)",
        gt=0,
    )
    connect_timeout_s: float = Field(
        HTTP_CONNECT_TIMEOUT,
        description="Connection timeout (seconds)",
        gt=0,
    )
    http2: bool = Field(HTTP2_ENABLED, description="Negotiate HTTP/2")
    verify_tls: bool = Field(TLS_VERIFY_ENABLED, description="Verify server certificates")
    token: Optional[SecretStr] = Field(None, description="Default bearer token")
    log_level: LogLevel = Field(LogLevel.INFO, description="Root logging level")
    log_dir: Optional[Path] = Field(None, description="Directory for JSONL logs (disabled if unset)")
    quota: Optional[str] = Field(
        None,
        description="Quota shorthand such as 100/second; overrides window_unit and the request limit",
    )

    @field_validator("base_url")
    @classmethod
    def strip_base_url(cls, value: str) -> str:
        """Reject blank URLs and drop one trailing slash."""
        stripped = value.strip()
        if not stripped:
            raise ValueError("base_url must not be blank")
        return stripped[:-1] if stripped.endswith("/") else stripped

    @field_validator("window_unit", mode="before")
    @classmethod
    def parse_window_unit(cls, value: Any) -> Any:
        if isinstance(value, str):
            return WindowUnit.parse(value)
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("log_dir", mode="before")
    @classmethod
    def expand_log_dir(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return Path(value).expanduser()

    @model_validator(mode="after")
    def apply_quota(self) -> "SubmitSettings":
        """Expand ``quota`` into ``max_requests_per_window`` and ``window_unit``."""
        if self.quota is not None and self.quota.strip():
            self.max_requests_per_window, self.window_unit = parse_quota(self.quota)
        return self

    def masked_dump(self) -> Dict[str, Any]:
        """Return settings as plain values with the token masked."""
        data = self.model_dump(mode="json")
        if self.token is not None:
            data["token"] = "***masked***"
        return data


_settings: Optional[SubmitSettings] = None
_settings_lock = threading.Lock()


def get_settings() -> SubmitSettings:
    """Return the cached settings, loading them from the environment once."""
    global _settings
    if _settings is not None:
        return _settings
    with _settings_lock:
        if _settings is None:
            _settings = SubmitSettings()
        return _settings


def reset_settings() -> None:
    """Drop cached settings (primarily for testing)."""
    global _settings
    with _settings_lock:
        _settings = None
