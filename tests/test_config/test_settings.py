"""Tests for the configuration system."""

from __future__ import annotations

import textwrap
from typing import TYPE_CHECKING

from relay_txstore.config.settings import MEMORY_DSN, TXSTORE_FILENAME, StoreConfig, _load_yaml

if TYPE_CHECKING:
    from pathlib import Path

    import pytest


class TestDefaults:
    def test_store_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for var in ("WORKDIR", "IN_MEMORY", "DEBUG_SQL", "CONFIG_PATH"):
            monkeypatch.delenv(f"RELAY_TXSTORE_{var}", raising=False)
        cfg = StoreConfig()
        assert cfg.workdir == "/tmp/test/"  # noqa: S108
        assert cfg.in_memory is False
        assert cfg.debug_sql is False

    def test_filename_constant(self) -> None:
        assert TXSTORE_FILENAME == "txstore.db"


class TestTarget:
    def test_file_dsn(self, tmp_path: Path) -> None:
        cfg = StoreConfig(workdir=str(tmp_path))
        assert cfg.db_path == tmp_path / TXSTORE_FILENAME
        assert cfg.dsn == f"sqlite+aiosqlite:///{tmp_path / TXSTORE_FILENAME}"
        assert cfg.location == str(tmp_path / TXSTORE_FILENAME)

    def test_memory_dsn(self, tmp_path: Path) -> None:
        cfg = StoreConfig(workdir=str(tmp_path), in_memory=True)
        assert cfg.db_path is None
        assert cfg.dsn == MEMORY_DSN
        assert cfg.location == "memory"


class TestEnvironment:
    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("RELAY_TXSTORE_WORKDIR", str(tmp_path))
        monkeypatch.setenv("RELAY_TXSTORE_IN_MEMORY", "true")
        cfg = StoreConfig()
        assert cfg.workdir == str(tmp_path)
        assert cfg.in_memory is True

    def test_explicit_args_win(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RELAY_TXSTORE_IN_MEMORY", "true")
        assert StoreConfig(in_memory=False).in_memory is False


class TestYaml:
    def test_load_missing_file(self, tmp_path: Path) -> None:
        assert _load_yaml(tmp_path / "nope.yaml") == {}

    def test_load_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        assert _load_yaml(path) == {}

    def test_from_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("RELAY_TXSTORE_IN_MEMORY", raising=False)
        monkeypatch.delenv("RELAY_TXSTORE_WORKDIR", raising=False)
        path = tmp_path / "txstore.yaml"
        path.write_text(
            textwrap.dedent(
                f"""\
                workdir: {tmp_path / "data"}
                in_memory: true
                """
            )
        )
        cfg = StoreConfig.from_yaml(path)
        assert cfg.workdir == str(tmp_path / "data")
        assert cfg.in_memory is True

    def test_env_beats_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RELAY_TXSTORE_IN_MEMORY", "false")
        path = tmp_path / "txstore.yaml"
        path.write_text("in_memory: true\n")
        cfg = StoreConfig.from_yaml(path)
        assert cfg.in_memory is False
