"""Connection and sync settings for the session client.

Reads settings from CLI args, environment variables, .env files, and YAML
config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    DIALOB_URL: Session API base URL (required)
    DIALOB_USERNAME: Basic auth username (optional)
    DIALOB_PASSWORD: Basic auth password (required when a username is set)
    DIALOB_TOKEN: Bearer token (optional)
    DIALOB_INSECURE: Skip SSL verification (optional, default: false)
    DIALOB_DEBUG: Enable debug logging (optional, default: false)
    DIALOB_DEBOUNCE_MS: Quiet period before queued answers are sent (optional, default: 500)
    DIALOB_REQUEST_TIMEOUT: Read timeout in seconds (optional, default: 30)
"""

import logging
import os
from dataclasses import dataclass
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


@dataclass
class Config:
    api_url: str
    username: str | None = None
    password: str | None = None
    token: str | None = None
    insecure: bool = False
    debug: bool = False
    debounce_ms: int = 500
    request_timeout: float = 30.0

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000


def validate_config(config: Config) -> None:
    """Validate configuration values and raise ValueError if invalid.

    Args:
        config: Config instance to validate.

    Raises:
        ValueError: If URL format is invalid or credentials are incomplete.
    """
    # Normalize URL: strip whitespace
    config.api_url = config.api_url.strip()

    if not config.api_url.startswith(("http://", "https://")):
        raise ValueError(
            f"Invalid API URL '{config.api_url}': must start with http:// or https://"
        )

    parsed = urlparse(config.api_url)
    if not parsed.hostname:
        raise ValueError(
            f"Invalid API URL '{config.api_url}': URL must include a hostname"
        )

    config.api_url = config.api_url.removesuffix("/")

    if config.username and not (config.password or "").strip():
        raise ValueError(
            "Password cannot be empty when a username is set. "
            "Set DIALOB_PASSWORD environment variable."
        )

    if not 0 <= config.debounce_ms <= 60000:
        raise ValueError(
            f"Invalid debounce '{config.debounce_ms}': must be between 0 and 60000 ms"
        )

    if not 0 < config.request_timeout <= 600:
        raise ValueError(
            f"Invalid request timeout '{config.request_timeout}': must be between 0 and 600 seconds"
        )

    if config.insecure:
        logger.warning(
            "WARNING: SSL verification disabled (insecure=True). Use only for development."
        )


def _get_bool_env(key: str) -> bool | None:
    """Return True/False from env var, or None if unset."""
    val = os.getenv(key)
    if val is None:
        return None
    return val.lower() in ("true", "1", "yes", "on")


def _resolve_bool(cli_value: bool, env_key: str, fallback: object) -> bool:
    if cli_value:
        return True
    env_value = _get_bool_env(env_key)
    if env_value is not None:
        return env_value
    return bool(fallback)


def load_config(
    url: str | None = None,
    username: str | None = None,
    password: str | None = None,
    token: str | None = None,
    insecure: bool = False,
    debug: bool = False,
    yaml_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        url: Override API URL (takes precedence over env var and YAML).
        username: Override username.
        password: Override password.
        token: Override bearer token.
        insecure: Skip SSL verification (CLI flag).
        debug: Enable debug logging (CLI flag).
        yaml_fallbacks: Dict of values from YAML config file ``dialob`` section.
            Used as fallback when CLI arg and env var are both unset.

    Returns:
        Validated Config instance.

    Raises:
        ValueError: If the API URL is missing after checking all sources, or
            a numeric setting is out of range.
    """
    fb = yaml_fallbacks or {}

    api_url = url or os.getenv("DIALOB_URL") or fb.get("url")
    if not api_url:
        raise ValueError(
            "Session API URL not found. Set DIALOB_URL environment variable, "
            "pass --url CLI argument, or add 'url' to config.yml."
        )

    final_username = username or os.getenv("DIALOB_USERNAME") or fb.get("username")
    final_password = password or os.getenv("DIALOB_PASSWORD") or fb.get("password")
    final_token = token or os.getenv("DIALOB_TOKEN") or fb.get("token")

    # --- Numeric fields: env > YAML > default ---

    debounce_raw = os.getenv("DIALOB_DEBOUNCE_MS")
    if debounce_raw is not None:
        try:
            final_debounce = int(debounce_raw)
        except ValueError:
            raise ValueError(
                f"Invalid DIALOB_DEBOUNCE_MS '{debounce_raw}': must be a number between 0 and 60000"
            ) from None
    else:
        final_debounce = int(fb.get("debounce_ms", 500))

    timeout_raw = os.getenv("DIALOB_REQUEST_TIMEOUT")
    if timeout_raw is not None:
        try:
            final_timeout = float(timeout_raw)
        except ValueError:
            raise ValueError(
                f"Invalid DIALOB_REQUEST_TIMEOUT '{timeout_raw}': must be a number of seconds"
            ) from None
    else:
        final_timeout = float(fb.get("request_timeout", 30.0))

    config = Config(
        api_url=api_url,
        username=final_username.strip() if final_username else None,
        password=final_password,
        token=final_token.strip() if final_token else None,
        insecure=_resolve_bool(insecure, "DIALOB_INSECURE", fb.get("insecure", False)),
        debug=_resolve_bool(debug, "DIALOB_DEBUG", fb.get("debug", False)),
        debounce_ms=final_debounce,
        request_timeout=final_timeout,
    )

    validate_config(config)

    return config
