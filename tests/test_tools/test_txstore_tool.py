"""Tests for the txstore admin CLI — tools/txstore_tool.py."""

from __future__ import annotations

import asyncio
import sys

import pytest

from relay_txstore.config.settings import StoreConfig
from relay_txstore.store.manager import TransactionStore
from relay_txstore.tools import txstore_tool

from ..conftest import OTHER_SIGNER, SIGNER


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.setenv("RELAY_TXSTORE_WORKDIR", str(tmp_path))
    monkeypatch.setenv("RELAY_TXSTORE_IN_MEMORY", "false")
    return tmp_path


def _seed(workdir, records) -> None:
    async def _go() -> None:
        async with TransactionStore(StoreConfig(workdir=str(workdir))) as store:
            for record in records:
                await store.put(record)

    asyncio.run(_go())


def _run_cli(monkeypatch, *args: str) -> None:
    monkeypatch.setattr(sys, "argv", ["txstore_tool", *args])
    txstore_tool.main()


class TestTxstoreTool:
    def test_no_args_prints_usage(self, monkeypatch, capsys) -> None:
        monkeypatch.setattr(sys, "argv", ["txstore_tool"])
        with pytest.raises(SystemExit) as exc_info:
            txstore_tool.main()
        assert exc_info.value.code == 1
        assert "Txstore Tool" in capsys.readouterr().out

    def test_unknown_command(self, monkeypatch, capsys) -> None:
        with pytest.raises(SystemExit):
            _run_cli(monkeypatch, "frobnicate")
        assert "Unknown command: frobnicate" in capsys.readouterr().out

    def test_list_empty(self, workdir, monkeypatch, capsys) -> None:
        _run_cli(monkeypatch, "list")
        assert "No pending transactions" in capsys.readouterr().out

    def test_list_and_filter(self, workdir, monkeypatch, capsys, make_record) -> None:
        _seed(
            workdir,
            [
                make_record(nonce=1, tx_id="0x01"),
                make_record(nonce=2, tx_id="0x02", from_address=OTHER_SIGNER),
            ],
        )
        _run_cli(monkeypatch, "list")
        out = capsys.readouterr().out
        assert "Total: 2" in out

        _run_cli(monkeypatch, "list", OTHER_SIGNER)
        out = capsys.readouterr().out
        assert "Total: 1" in out
        assert "0x02" in out

    def test_get(self, workdir, monkeypatch, capsys, make_record) -> None:
        _seed(workdir, [make_record(nonce=1, tx_id="0xdead")])
        _run_cli(monkeypatch, "get", "0xDEAD")
        out = capsys.readouterr().out
        assert "tx_id:" in out
        assert "0xdead" in out

        _run_cli(monkeypatch, "get", "0xbeef")
        assert "not found" in capsys.readouterr().out

    def test_get_requires_argument(self, workdir, monkeypatch) -> None:
        with pytest.raises(SystemExit):
            _run_cli(monkeypatch, "get")

    def test_prune(self, workdir, monkeypatch, capsys, make_record) -> None:
        _seed(workdir, [make_record(nonce=n) for n in range(4)])
        _run_cli(monkeypatch, "prune", SIGNER, "2")
        assert "Removed 3 transaction(s)" in capsys.readouterr().out
        _run_cli(monkeypatch, "list", SIGNER)
        assert "Total: 1" in capsys.readouterr().out

    def test_clear(self, workdir, monkeypatch, capsys, make_record) -> None:
        _seed(workdir, [make_record(nonce=n) for n in range(2)])
        _run_cli(monkeypatch, "clear")
        assert "Removed 2 transaction(s)" in capsys.readouterr().out
