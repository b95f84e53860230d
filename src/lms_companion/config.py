"""Configuration management for the LMS companion core."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated
from pathlib import Path
import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class CompanionSettings(BaseSettings):
    """Runtime configuration sourced from environment variables and optional .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    url_scheme: str = Field(default="app", validation_alias="LMS_URL_SCHEME")
    defaults_path: Path = Field(
        default=Path("./storage/defaults.json"), validation_alias="LMS_DEFAULTS_PATH"
    )
    search_index_path: Path = Field(
        default=Path("./storage/search"), validation_alias="LMS_SEARCH_INDEX_PATH"
    )
    search_domain: str = Field(default="com.lms.companion", validation_alias="LMS_SEARCH_DOMAIN")
    catalog_paths: Annotated[tuple[Path, ...], NoDecode] = Field(
        default=(Path("catalog"),), validation_alias="LMS_CATALOG_PATHS"
    )
    log_level: str = Field(default="INFO", validation_alias="LMS_LOG_LEVEL")
    watch_assignment_limit: int = Field(default=20, validation_alias="LMS_WATCH_ASSIGNMENT_LIMIT")

    @field_validator("url_scheme")
    @classmethod
    def _normalize_scheme(cls, value: str) -> str:
        normalized = value.strip().lower().rstrip(":/")
        if not normalized:
            raise ValueError("LMS_URL_SCHEME must not be empty")
        return normalized

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(
                "LMS_LOG_LEVEL must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG"
            )
        return normalized

    @field_validator("catalog_paths", mode="before")
    @classmethod
    def _parse_catalog_paths(cls, value):
        if value is None or value == "":
            return (Path("catalog"),)
        if isinstance(value, (list, tuple)):
            return tuple(Path(str(item)) for item in value)
        if isinstance(value, str):
            parts = [part.strip() for part in value.split(os.pathsep) if part.strip()]
            return tuple(Path(part) for part in parts) or (Path("catalog"),)
        raise TypeError("LMS_CATALOG_PATHS must be a list of paths or a path-separated string")

    @field_validator("watch_assignment_limit")
    @classmethod
    def _validate_assignment_limit(cls, value: int) -> int:
        if value < 1:
            raise ValueError("LMS_WATCH_ASSIGNMENT_LIMIT must be >= 1")
        return value


@lru_cache(maxsize=1)
def get_settings() -> CompanionSettings:
    """Return cached settings instance."""

    settings = CompanionSettings()
    settings.defaults_path = settings.defaults_path.expanduser().resolve()
    settings.search_index_path = settings.search_index_path.expanduser().resolve()
    settings.catalog_paths = tuple(path.expanduser().resolve() for path in settings.catalog_paths)
    return settings


__all__ = ["CompanionSettings", "get_settings"]
