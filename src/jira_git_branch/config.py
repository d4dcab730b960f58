"""Configuration for git-gb.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present), whose values override the environment

Personal settings (JIRA_BASE_URL, JIRA_EMAIL, JIRA_API_TOKEN) should live in the
user's shell profile; the board id is per-repository and may be shared via `.env`.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

from dotenv import dotenv_values
from pydantic import Field, ValidationError, ValidationInfo, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from jira_git_branch.jira.cache import cache_file_path

_DIGITS = re.compile(r"[0-9]+")

# Where each required setting is expected to come from, shown in error messages.
_REQUIRED_HINTS: dict[str, str] = {
    "JIRA_BASE_URL": "personal",
    "JIRA_EMAIL": "personal",
    "JIRA_API_TOKEN": "personal",
    "JIRA_BOARD_ID": "repo .env / .envrc",
}


def _env_name(field_name: str, field: FieldInfo) -> str:
    alias = field.validation_alias
    return alias if isinstance(alias, str) else field_name.upper()


def read_env_file(path: Path | str | None) -> dict[str, str]:
    """Read literal KEY=VALUE pairs from a dotenv file.

    `export` prefixes, comments and blank lines are accepted; `${VAR}` references
    are kept verbatim. Surrounding quotes and unquoted ` # comment` suffixes are
    removed.
    """

    if path is None:
        return {}
    env_path = Path(path)
    if not env_path.is_file():
        return {}
    values = dotenv_values(env_path, interpolate=False, encoding="utf-8")
    return {key: value for key, value in values.items() if value is not None}


class DotEnvOverrideSource(PydanticBaseSettingsSource):
    """Settings source for the local `.env` file.

    Ranked above the process environment, mirroring a shell script that exports
    every `.env` line before reading its settings.
    """

    def __init__(self, settings_cls: type[BaseSettings], env_file: Path | str | None) -> None:
        super().__init__(settings_cls)
        self._values = {key.lower(): value for key, value in read_env_file(env_file).items()}

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        env_name = _env_name(field_name, field)
        return self._values.get(env_name.lower()), env_name, False

    def __call__(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for field_name, field in self.settings_cls.model_fields.items():
            value, key, _ = self.get_field_value(field, field_name)
            if value is not None:
                data[key] = value
        return data


class GbSettings(BaseSettings):
    """Settings for git-gb.

    Environment variables:
    - JIRA_BASE_URL        e.g. https://xxx.atlassian.net
    - JIRA_EMAIL
    - JIRA_API_TOKEN
    - JIRA_BOARD_ID        e.g. 206
    - GB_BRANCH_PREFIX     (optional, default: feature)
    - GB_CACHE_TTL_SEC     (optional, default: 900)
    - GB_MAX_RESULTS       (optional, default: 200)
    - GB_HTTP_TIMEOUT_SEC  (optional, default: 30)
    - GB_LOG_LEVEL         (optional, default: WARNING)
    - XDG_CACHE_HOME       (optional, default: ~/.cache)

    Notes:
        The `.env` file can be overridden in tests via `GbSettings(_env_file=path)`,
        or disabled with `_env_file=None`.
    """

    # Required values default to empty so that validation below reports every
    # missing one by its env var name.
    jira_base_url: str = Field(
        default="",
        validation_alias="JIRA_BASE_URL",
        description="Root of the Jira REST API",
    )
    jira_email: str = Field(
        default="",
        validation_alias="JIRA_EMAIL",
        description="Account identity used for basic auth",
    )
    jira_api_token: str = Field(
        default="",
        validation_alias="JIRA_API_TOKEN",
        description="API token used for basic auth",
    )
    jira_board_id: str = Field(
        default="",
        validation_alias="JIRA_BOARD_ID",
        description="Numeric id of the board to query",
    )

    branch_prefix: str = Field(
        default="feature",
        validation_alias="GB_BRANCH_PREFIX",
        description="Prefix for created branch names",
    )
    cache_ttl_sec: int = Field(
        default=900,
        validation_alias="GB_CACHE_TTL_SEC",
        description="Seconds after which the issue cache is considered stale",
    )
    max_results: int = Field(
        default=200,
        validation_alias="GB_MAX_RESULTS",
        description="Maximum number of issues requested from Jira",
    )
    http_timeout_sec: float = Field(
        default=30.0,
        gt=0,
        validation_alias="GB_HTTP_TIMEOUT_SEC",
        description="Timeout applied to every Jira request",
    )
    log_level: str = Field(
        default="WARNING",
        validation_alias="GB_LOG_LEVEL",
        description="Root logging level",
    )
    xdg_cache_home: Path | None = Field(
        default=None,
        validation_alias="XDG_CACHE_HOME",
        description="Base cache directory (falls back to ~/.cache)",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
        validate_default=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        env_file = getattr(dotenv_settings, "env_file", None)
        if isinstance(env_file, (list, tuple)):
            env_file = env_file[-1] if env_file else None
        return (
            init_settings,
            DotEnvOverrideSource(settings_cls, env_file),
            env_settings,
            file_secret_settings,
        )

    @field_validator("jira_base_url", "jira_email", "jira_api_token", "jira_board_id")
    @classmethod
    def _require_value(cls, value: str, info: ValidationInfo) -> str:
        value = value.strip()
        if not value:
            field_name = info.field_name or ""
            env_name = _env_name(field_name, cls.model_fields[field_name])
            raise ValueError(f"set {env_name} ({_REQUIRED_HINTS.get(env_name, 'required')})")
        return value

    @field_validator("jira_base_url")
    @classmethod
    def _strip_base_url(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("jira_board_id")
    @classmethod
    def _board_id_is_numeric(cls, value: str) -> str:
        if not _DIGITS.fullmatch(value):
            raise ValueError(f"JIRA_BOARD_ID must be a number (got: {value})")
        return value

    @field_validator("cache_ttl_sec", "max_results", mode="before")
    @classmethod
    def _non_negative_int(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
            return value
        if isinstance(value, str) and _DIGITS.fullmatch(value.strip()):
            return int(value.strip())
        field_name = info.field_name or ""
        env_name = _env_name(field_name, cls.model_fields[field_name])
        raise ValueError(f"{env_name} must be a non-negative integer (got: {value})")

    @field_validator("branch_prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        # Avoid feature//KEY_...
        return value.strip().rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"GB_LOG_LEVEL is not a logging level (got: {value})")
        return level

    @field_validator("xdg_cache_home", mode="before")
    @classmethod
    def _blank_cache_home_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def cache_dir(self) -> Path:
        """Directory holding the per-board issue caches."""

        base = self.xdg_cache_home or Path.home() / ".cache"
        return base / "jira"

    @property
    def cache_file(self) -> Path:
        """Path of the issue cache for the configured board."""

        return cache_file_path(self.cache_dir, self.jira_board_id)


def describe_validation_error(error: ValidationError) -> list[str]:
    """Turn a settings validation error into short, user-facing lines."""

    lines: list[str] = []
    for item in error.errors():
        message = str(item.get("msg", ""))
        if item.get("type") == "value_error":
            lines.append(message.removeprefix("Value error, "))
            continue
        loc = item.get("loc") or ()
        name = str(loc[0]) if loc else "configuration"
        lines.append(f"{name}: {message}")
    return lines
