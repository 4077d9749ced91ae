"""Configuration models and loading."""

import json
from pathlib import Path

import httpx
from pydantic import BaseModel, Field, ValidationError, field_validator

from core.exceptions import ConfigurationError

CONFIG_DIR = Path.home() / ".config" / "gemini-proxy"
CONFIG_FILE = CONFIG_DIR / "config.json"

DEFAULT_UPSTREAM = "https://generativelanguage.googleapis.com"


class ProxySettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False


class UpstreamSettings(BaseModel):
    base_url: str = DEFAULT_UPSTREAM

    @field_validator("base_url")
    @classmethod
    def _check_origin(cls, value: str) -> str:
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as e:
            raise ValueError(f"invalid upstream URL: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError("upstream URL must be http(s) with a host")
        if url.query or url.fragment:
            raise ValueError("upstream URL must not carry a query or fragment")
        return value.rstrip("/")


class LimitSettings(BaseModel):
    """Transport limits. ``None`` leaves the library default in place."""

    timeout: float | None = Field(default=None, gt=0)
    max_connections: int | None = Field(default=None, ge=1)
    max_keepalive_connections: int | None = Field(default=None, ge=1)
    keep_alive_timeout: int | None = Field(default=None, ge=0)
    max_body_size: int | None = Field(default=None, ge=0)


class Config(BaseModel):
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)
    limits: LimitSettings = Field(default_factory=LimitSettings)


def load_config(config_file: Path = CONFIG_FILE) -> Config:
    """Load configuration from JSON file, creating default if needed."""
    if not config_file.exists():
        config_file.parent.mkdir(parents=True, exist_ok=True)
        default = Config()
        config_file.write_text(default.model_dump_json(indent=2))
        return default

    try:
        data = json.loads(config_file.read_text())
    except json.JSONDecodeError:
        # Backup corrupted config and recreate default
        backup = config_file.with_suffix(".json.bak")
        config_file.rename(backup)
        default = Config()
        config_file.write_text(default.model_dump_json(indent=2))
        return default

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config {config_file}: {e}") from e
