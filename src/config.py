"""Unified configuration loaded from .magazeen.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from magazeen.clustering.models import ClusteringOptions
from magazeen.content.models import (
    DEFAULT_AUTHOR,
    DEFAULT_DESCRIPTION,
    DEFAULT_TITLE,
    DEFAULT_WORDS_PER_PAGE,
    MagazineMetadata,
)
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".magazeen.toml"
GLOBAL_CONFIG = Path.home() / ".config" / "magazeen" / "config.toml"


class PathsConfig(BaseModel):
    """[paths] section."""

    content_file: str = "out/magazine-content.json"
    output_dir: str = "out"
    scratch_file: str = "out/magazine-scratch.txt"


class EpubConfig(BaseModel):
    """[epub] section."""

    words_per_page: int = DEFAULT_WORDS_PER_PAGE
    max_file_size: int = 10 * 1024 * 1024
    title: str = DEFAULT_TITLE
    author: str = DEFAULT_AUTHOR
    description: str = DEFAULT_DESCRIPTION


class ServerConfig(BaseModel):
    """[server] section."""

    host: str = "127.0.0.1"
    port: int = 3000
    session_timeout: int = 900


class ContentConfig(BaseModel):
    """[content] section."""

    max_recent_interests: int = 5
    max_chat_highlights: int = 3
    default_category: str = "General"
    enable_clustering: bool = True
    clustering_similarity: float = 30.0


class LoggingConfig(BaseModel):
    """[logging] section."""

    level: str = "info"


class MagazeenConfig(BaseModel):
    """Top-level configuration model."""

    paths: PathsConfig = Field(default_factory=PathsConfig)
    epub: EpubConfig = Field(default_factory=EpubConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    content: ContentConfig = Field(default_factory=ContentConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def to_clustering_options(self, metadata: MagazineMetadata | None = None) -> ClusteringOptions:
        """Clustering options, with per-issue metadata taking precedence."""
        enabled = self.content.enable_clustering
        similarity = self.content.clustering_similarity
        if metadata is not None:
            if metadata.enable_clustering is not None:
                enabled = metadata.enable_clustering
            if metadata.clustering_similarity is not None:
                similarity = metadata.clustering_similarity
        return ClusteringOptions(min_similarity=similarity, enable_clustering=enabled)

    @property
    def content_path(self) -> Path:
        return Path(self.paths.content_file)

    @property
    def output_path(self) -> Path:
        return Path(self.paths.output_dir)

    @property
    def scratch_path(self) -> Path:
        return Path(self.paths.scratch_file)


def load_config(path: str | Path | None = None) -> MagazeenConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .magazeen.toml in CWD
    3. ~/.config/magazeen/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged MagazeenConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for candidate in (Path(CONFIG_FILENAME), GLOBAL_CONFIG):
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break

    config = MagazeenConfig.model_validate(data) if data else MagazeenConfig()

    return _apply_env_vars(config)


def merge_cli_overrides(config: MagazeenConfig, **cli_kwargs: object) -> MagazeenConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "content_file": ("paths", "content_file"),
        "output_dir": ("paths", "output_dir"),
        "scratch_file": ("paths", "scratch_file"),
        "enable_clustering": ("content", "enable_clustering"),
        "min_similarity": ("content", "clustering_similarity"),
        "log_level": ("logging", "level"),
        "host": ("server", "host"),
        "port": ("server", "port"),
    }

    for key, value in cli_kwargs.items():
        if value is None or key not in mapping:
            continue
        section, field = mapping[key]
        data[section][field] = str(value) if isinstance(value, Path) else value

    return MagazeenConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: MagazeenConfig) -> MagazeenConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    str_mapping: dict[str, tuple[str, str]] = {
        "CONTENT_FILE": ("paths", "content_file"),
        "OUTPUT_DIR": ("paths", "output_dir"),
        "SCRATCH_FILE": ("paths", "scratch_file"),
        "DEFAULT_TITLE": ("epub", "title"),
        "DEFAULT_AUTHOR": ("epub", "author"),
        "DEFAULT_DESCRIPTION": ("epub", "description"),
        "DEFAULT_CATEGORY": ("content", "default_category"),
        "HOST": ("server", "host"),
        "LOG_LEVEL": ("logging", "level"),
    }
    for env_var, (section, field) in str_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    int_mapping: dict[str, tuple[str, str]] = {
        "WORDS_PER_PAGE": ("epub", "words_per_page"),
        "MAX_FILE_SIZE": ("epub", "max_file_size"),
        "PORT": ("server", "port"),
        "SESSION_TIMEOUT": ("server", "session_timeout"),
        "MAX_RECENT_INTERESTS": ("content", "max_recent_interests"),
        "MAX_CHAT_HIGHLIGHTS": ("content", "max_chat_highlights"),
    }
    for env_var, (section, field) in int_mapping.items():
        raw = os.environ.get(env_var)
        if raw is None:
            continue
        try:
            data[section][field] = int(raw)
        except ValueError:
            logger.warning("Ignoring non-integer %s=%r", env_var, raw)

    similarity_raw = os.environ.get("CLUSTERING_SIMILARITY")
    if similarity_raw is not None:
        try:
            data["content"]["clustering_similarity"] = float(similarity_raw)
        except ValueError:
            logger.warning("Ignoring non-numeric CLUSTERING_SIMILARITY=%r", similarity_raw)

    clustering_raw = os.environ.get("ENABLE_CLUSTERING")
    if clustering_raw is not None:
        data["content"]["enable_clustering"] = clustering_raw.lower() != "false"

    return MagazeenConfig.model_validate(data)
