"""Configuration helpers for contentkit."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, HttpUrl, ValidationError


class MediaApiCredentials(BaseModel):
    """Connection information for the media catalogue REST API."""

    base_url: HttpUrl = Field(..., description="Base URL of the content management instance")
    username: str = Field(..., description="Account the API token belongs to")
    api_token: str = Field(..., description="API token generated for the account")


class ContentDefaults(BaseModel):
    """Default context parameters for content and smart content operations."""

    locale: str = Field("en", description="Locale used when none is given")
    webspace_key: Optional[str] = Field(None, description="Default webspace of new documents")
    workspace: Optional[Path] = Field(None, description="Root directory of the local content workspace")


class ContentKitConfig(BaseModel):
    """Aggregate configuration for the CLI."""

    media_api: Optional[MediaApiCredentials] = None
    defaults: ContentDefaults = Field(default_factory=ContentDefaults)


ENV_PREFIX = "CONTENTKIT"
DEFAULT_CONFIG_PATHS = (
    Path.cwd() / "contentkit.toml",
    Path.home() / ".config" / "contentkit" / "config.toml",
)


@dataclasses.dataclass
class ConfigSource:
    """Result of attempting to resolve configuration data."""

    config: Optional[ContentKitConfig]
    path: Optional[Path]
    error: Optional[Exception]


def _load_from_env() -> dict[str, object]:
    """Return configuration values extracted from ``CONTENTKIT_*`` environment variables."""

    def _get(name: str) -> Optional[str]:
        return os.getenv(f"{ENV_PREFIX}_{name}")

    media_api: dict[str, str] = {}
    for key in ("BASE_URL", "USERNAME", "API_TOKEN"):
        value = _get(key)
        if value:
            media_api[key.lower()] = value

    defaults: dict[str, str] = {}
    for key in ("LOCALE", "WEBSPACE_KEY", "WORKSPACE"):
        value = _get(key)
        if value:
            defaults[key.lower()] = value

    env_data: dict[str, object] = {}
    if media_api:
        env_data["media_api"] = media_api
    if defaults:
        env_data["defaults"] = defaults
    return env_data


def _load_toml(path: Path) -> Optional[dict]:
    if not path.exists():
        return None

    try:  # Python 3.11+
        import tomllib  # type: ignore
    except ModuleNotFoundError:  # pragma: no cover - Python <3.11 fallback
        import tomli as tomllib  # type: ignore

    with path.open("rb") as handle:
        return tomllib.load(handle)


def resolve_config(explicit_path: Optional[Path] = None) -> ConfigSource:
    """Discover configuration using the first available source.

    The priority order is:
    1. Explicit path provided via CLI argument.
    2. Default configuration files in the working directory or the user's config directory.
    3. Environment variables with the `CONTENTKIT_` prefix.
    """

    errors: list[Exception] = []
    sources: list[tuple[Optional[Path], Optional[dict]]] = []

    if explicit_path:
        try:
            data = _load_toml(explicit_path)
            if data is not None:
                sources.append((explicit_path, data))
        except Exception as exc:  # pragma: no cover - configuration loading failure path
            errors.append(exc)

    if not sources:
        for path in DEFAULT_CONFIG_PATHS:
            try:
                data = _load_toml(path)
            except Exception as exc:  # pragma: no cover
                errors.append(exc)
                continue
            if data is not None:
                sources.append((path, data))
                break

    if not sources:
        env_data = _load_from_env()
        if env_data:
            sources.append((None, env_data))

    for path, data in sources:
        try:
            config = ContentKitConfig.model_validate(data)
            return ConfigSource(config=config, path=path, error=None)
        except ValidationError as exc:
            errors.append(exc)

    error = errors[0] if errors else None
    return ConfigSource(config=None, path=None, error=error)


def ensure_config(
    *,
    base_url: Optional[str] = None,
    username: Optional[str] = None,
    api_token: Optional[str] = None,
    locale: Optional[str] = None,
    webspace_key: Optional[str] = None,
    workspace: Optional[Path] = None,
    config_path: Optional[Path] = None,
    require_media_api: bool = False,
) -> ContentKitConfig:
    """Resolve configuration from precedence order and apply explicit CLI options."""

    source = resolve_config(config_path)
    config = source.config.model_copy(deep=True) if source.config else ContentKitConfig()

    if base_url or username or api_token:
        current = config.media_api
        merged = {
            "base_url": base_url or (str(current.base_url) if current else None),
            "username": username or (current.username if current else None),
            "api_token": api_token or (current.api_token if current else None),
        }
        if all(merged.values()):
            config.media_api = MediaApiCredentials.model_validate(merged)

    if require_media_api and config.media_api is None:
        hint = " or configuration file" if config_path else ""
        raise RuntimeError(
            "Missing media API credentials. Provide them via CLI options, environment variables," + hint
        )

    if locale:
        config.defaults.locale = locale
    if webspace_key:
        config.defaults.webspace_key = webspace_key
    if workspace:
        config.defaults.workspace = workspace

    return config
