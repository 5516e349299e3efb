"""Unified configuration loaded from .forumstore.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".forumstore.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "forumstore" / "config.toml"


class StoreSectionConfig(BaseModel):
    """[store] section."""

    directory: str = "./forum-data"


class OrgSectionConfig(BaseModel):
    """[org] section - the organization whose root anchors every key."""

    slug: str = "default"


class ListingSectionConfig(BaseModel):
    """[listing] section."""

    limit: int = 100
    max_count: int = 100

    @field_validator("limit", "max_count")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value


class FeedSectionConfig(BaseModel):
    """[feed] section."""

    title: str = "posts"
    description: str = ""
    base_url: str = ""


class LoggingSectionConfig(BaseModel):
    """[logging] section."""

    level: str = "WARNING"

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {value}")
        return level


class ForumConfig(BaseModel):
    """Top-level configuration for the forum store."""

    store: StoreSectionConfig = Field(default_factory=StoreSectionConfig)
    org: OrgSectionConfig = Field(default_factory=OrgSectionConfig)
    listing: ListingSectionConfig = Field(default_factory=ListingSectionConfig)
    feed: FeedSectionConfig = Field(default_factory=FeedSectionConfig)
    logging: LoggingSectionConfig = Field(default_factory=LoggingSectionConfig)

    @property
    def store_directory(self) -> Path:
        return Path(self.store.directory).expanduser()


def load_config(path: str | Path | None = None) -> ForumConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .forumstore.toml in CWD
    3. ~/.config/forumstore/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged ForumConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    config = ForumConfig.model_validate(data) if data else ForumConfig()

    return _apply_env_vars(config)


def merge_cli_overrides(config: ForumConfig, **cli_kwargs: object) -> ForumConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "store_dir": ("store", "directory"),
        "org": ("org", "slug"),
        "max_count": ("listing", "max_count"),
        "feed_base_url": ("feed", "base_url"),
        "log_level": ("logging", "level"),
    }

    for key, value in cli_kwargs.items():
        if value is None or key not in mapping:
            continue
        section, field = mapping[key]
        data[section][field] = str(value) if isinstance(value, Path) else value

    return ForumConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: ForumConfig) -> ForumConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "FORUMSTORE_STORE_DIR": ("store", "directory"),
        "FORUMSTORE_ORG": ("org", "slug"),
        "FORUMSTORE_FEED_BASE_URL": ("feed", "base_url"),
        "FORUMSTORE_FEED_TITLE": ("feed", "title"),
        "FORUMSTORE_LOG_LEVEL": ("logging", "level"),
    }
    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    for env_var, field in [
        ("FORUMSTORE_LIST_LIMIT", "limit"),
        ("FORUMSTORE_MAX_COUNT", "max_count"),
    ]:
        raw = os.environ.get(env_var)
        if raw is None:
            continue
        try:
            data["listing"][field] = int(raw)
        except ValueError:
            logger.warning("Ignoring non-integer %s=%r", env_var, raw)

    return ForumConfig.model_validate(data)
