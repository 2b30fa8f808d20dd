"""Transaction store settings loaded from environment variables and config files.

Configuration is loaded from (highest priority first):
1. Environment variables (prefix: ``RELAY_TXSTORE_``)
2. YAML config file (``config_path`` / ``RELAY_TXSTORE_CONFIG_PATH``)
3. Defaults defined here

The store itself never reads the environment: callers build a
:class:`StoreConfig` and pass it in.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

TXSTORE_FILENAME = "txstore.db"

MEMORY_DSN = "sqlite+aiosqlite:///:memory:"


def _load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file and return its contents as a dict.

    Returns an empty dict if the file doesn't exist or is empty.
    """
    p = Path(path)
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


class StoreConfig(BaseSettings):
    """Durability target of the transaction store."""

    model_config = SettingsConfigDict(
        env_prefix="RELAY_TXSTORE_",
        case_sensitive=False,
    )

    workdir: str = Field(
        default="/tmp/test/",  # noqa: S108
        description="Directory holding the txstore database file",
    )
    in_memory: bool = Field(
        default=False,
        description="Keep everything in memory; nothing survives a restart",
    )
    debug_sql: bool = False
    config_path: str = ""

    @model_validator(mode="before")
    @classmethod
    def _merge_yaml(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Merge YAML config file contents under the env var overrides."""
        config_path = values.get("config_path", "")
        if not config_path:
            return values
        for key, val in _load_yaml(config_path).items():
            if key not in values or values[key] is None:
                values[key] = val
        return values

    @classmethod
    def from_yaml(cls, path: str | Path) -> Self:
        """Construct ``StoreConfig`` loading defaults from a YAML file.

        Environment variables still override YAML values.
        """
        return cls(config_path=str(path))

    @property
    def db_path(self) -> Path | None:
        """Path of the database file, or ``None`` when running in memory."""
        if self.in_memory:
            return None
        return Path(self.workdir) / TXSTORE_FILENAME

    @property
    def dsn(self) -> str:
        """Async SQLAlchemy connection string for the configured target."""
        path = self.db_path
        if path is None:
            return MEMORY_DSN
        return f"sqlite+aiosqlite:///{path}"

    @property
    def location(self) -> str:
        """Human-readable description of where records live."""
        path = self.db_path
        return "memory" if path is None else str(path)
