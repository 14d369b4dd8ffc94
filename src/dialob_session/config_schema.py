"""Unified configuration schema for dialob_session.

Defines Pydantic models for the YAML config structure with dedicated
sections for the session API and logging.  The ``dialob`` section feeds
``load_config()`` as YAML fallbacks.

Usage:
    from dialob_session.config_schema import build_config

    raw = load_hierarchical_config()
    unified = build_config(raw)
    fallbacks = unified.dialob.model_dump(exclude_none=True)
"""

from __future__ import annotations

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class DialobConfig(BaseModel):
    """Session API connection and sync settings.

    All fields are optional to support zero-config: env vars and CLI args
    can supply them at runtime instead.
    """

    url: str | None = Field(default=None, description="Session API base URL")
    username: str | None = Field(
        default=None, description="Basic auth username"
    )
    password: str | None = Field(
        default=None, description="Basic auth password"
    )
    token: str | None = Field(default=None, description="Bearer token")
    insecure: bool = Field(
        default=False,
        description="Disable SSL verification (development only)",
    )
    debug: bool = Field(default=False, description="Enable debug mode")
    debounce_ms: int = Field(
        default=500,
        ge=0,
        le=60000,
        description="Quiet period before queued actions are sent (0-60000 ms)",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        le=600,
        description="Read timeout per request in seconds",
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
        format: ``text`` or ``json``.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")
    format: str = Field(default="text", description="text or json")

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Every section has sensible defaults, so ``UnifiedConfig()`` is valid.
    """

    dialob: DialobConfig = Field(default_factory=DialobConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Args:
        raw_data: Merged configuration dictionary.

    Returns:
        Validated ``UnifiedConfig`` instance.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)

