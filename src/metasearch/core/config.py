"""Configuration management for metasearch."""

import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class Schema:
    """Well-known property URIs of the metadata store.

    The search-output properties are stems: highlight statements are
    emitted as ``{stem}{i}`` for the i-th full-text term (1-based).
    """

    id: str = "https://vocabs.example.org/schema#hasIdentifier"
    label: str = "https://vocabs.example.org/schema#hasTitle"
    parent: str = "https://vocabs.example.org/schema#isPartOf"
    search_fts: str = "search://matchValue"
    search_fts_property: str = "search://matchProperty"
    search_fts_query: str = "search://matchQuery"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Schema":
        """Build a schema from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: str(v) for k, v in data.items() if k in known})


def _default_db_path() -> Path:
    """Get default database path."""
    cache_dir = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    return cache_dir / "metasearch" / "store.db"


@dataclass
class Config:
    """Main application configuration."""

    db_path: Path = field(default_factory=_default_db_path)
    base_url: str = "http://127.0.0.1/api/"
    pool_size: int = 4
    # Properties stored only as literals even when their values are URIs
    non_relation_properties: list[str] = field(default_factory=list)
    schema: Schema = field(default_factory=Schema)

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        config = cls()
        config._apply_env()
        return config

    @classmethod
    def from_file(cls, path: Path | str) -> "Config":
        """Load configuration from a TOML file, then apply env overrides.

        Args:
            path: Path to the TOML configuration file.

        Returns:
            Config with file values overridden by environment variables.
        """
        with open(path, "rb") as f:
            data = tomllib.load(f)

        config = cls()
        if "db_path" in data:
            config.db_path = Path(data["db_path"])
        if "base_url" in data:
            config.base_url = str(data["base_url"])
        if "pool_size" in data:
            config.pool_size = int(data["pool_size"])
        if "non_relation_properties" in data:
            config.non_relation_properties = list(data["non_relation_properties"])
        if isinstance(data.get("schema"), dict):
            config.schema = Schema.from_dict(data["schema"])

        config._apply_env()
        return config

    @classmethod
    def from_env_or_file(cls, path: Path | str | None = None) -> "Config":
        """Load from an explicit path, $METASEARCH_CONFIG, or the environment."""
        path = path or os.environ.get("METASEARCH_CONFIG")
        if path:
            return cls.from_file(path)
        return cls.from_env()

    def _apply_env(self) -> None:
        if path := os.environ.get("METASEARCH_DB"):
            self.db_path = Path(path)
        if url := os.environ.get("METASEARCH_BASE_URL"):
            self.base_url = url
        if size := os.environ.get("METASEARCH_POOL_SIZE"):
            self.pool_size = int(size)
