"""
Settings for the screener.

Values come from, lowest to highest precedence: field defaults, an optional
YAML file (config.yaml in the working directory, or $SCREENER_CONFIG), and
environment variables (a .env file is loaded first).
"""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from screener.core.errors import ConfigurationError

DEFAULT_CONFIG_PATH = Path("config.yaml")

# environment variable -> settings field
ENV_FIELDS = {
    "ALPHA_VANTAGE_API_KEY": "alpha_vantage_api_key",
    "ALPHA_VANTAGE_BASE_URL": "alpha_vantage_base_url",
    "CALLS_PER_MINUTE": "calls_per_minute",
    "RATE_LIMIT_MARGIN_SECONDS": "rate_limit_margin_seconds",
    "REQUEST_TIMEOUT_SECONDS": "request_timeout_seconds",
    "CACHE_TTL_SECONDS": "cache_ttl_seconds",
    "CACHE_MAX_ENTRIES": "cache_max_entries",
    "MAX_SYMBOLS_PER_SCREEN": "max_symbols_per_screen",
    "FIXED_MA_DIVISOR": "fixed_ma_divisor",
    "LOG_LEVEL": "log_level",
    "HOST": "host",
    "PORT": "port",
}


class ScreenerSettings(BaseModel):
    alpha_vantage_api_key: Optional[str] = None
    alpha_vantage_base_url: str = "https://www.alphavantage.co/query"

    # provider budget; the inter-call delay is 60 / calls_per_minute + margin
    calls_per_minute: float = Field(5, gt=0)
    rate_limit_margin_seconds: float = Field(1.0, ge=0)
    request_timeout_seconds: float = Field(30, gt=0)

    cache_ttl_seconds: float = Field(300, gt=0)
    cache_max_entries: int = Field(1024, ge=1)

    max_symbols_per_screen: int = Field(3, ge=1)
    fixed_ma_divisor: bool = True

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000

    @field_validator("alpha_vantage_api_key", mode="before")
    @classmethod
    def _strip_key(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @property
    def call_interval_seconds(self) -> float:
        return 60.0 / self.calls_per_minute + self.rate_limit_margin_seconds

    def require_api_key(self) -> str:
        if not self.alpha_vantage_api_key:
            raise ConfigurationError(
                "ALPHA_VANTAGE_API_KEY not found in environment or .env file. "
                "Add 'ALPHA_VANTAGE_API_KEY=your_key_here' to .env and try again."
            )
        return self.alpha_vantage_api_key


def _read_yaml(path: Path) -> Dict[str, Any]:
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def load_settings(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    dotenv: bool = True,
) -> ScreenerSettings:
    """Build validated settings from YAML and the environment."""
    if dotenv:
        load_dotenv()
    env = os.environ if environ is None else environ

    if config_path is None and env.get("SCREENER_CONFIG"):
        config_path = Path(env["SCREENER_CONFIG"])
    path = config_path or DEFAULT_CONFIG_PATH

    values: Dict[str, Any] = {}
    if path.exists():
        values.update(_read_yaml(path))
    elif config_path is not None:
        raise ConfigurationError(f"Config file {path} does not exist")

    for env_name, field in ENV_FIELDS.items():
        if env.get(env_name) is not None:
            values[field] = env[env_name]

    try:
        return ScreenerSettings(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
