"""Tests for the command-line entry point."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
import structlog

from statecheck.config import CheckerConfig, load_config
from statecheck.main import _parse_args, apply_overrides, main

STATE_YAML = """
l1:
  rpcUrl: STATECHECK_TEST_UNSET_RPC
  contracts:
    token:
      name: Missing
      address: "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
      checks:
        decimals: 18
"""


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


class TestArguments:
    def test_two_positional_arguments(self):
        args = _parse_args(["state.yml", "artifacts"])
        assert args.state_file == "state.yml"
        assert args.abi_dir == "artifacts"

    def test_overrides_win(self):
        args = _parse_args(["state.yml", "artifacts", "--section", "l1", "--section", "l2", "--log-level", "DEBUG"])
        config = apply_overrides(CheckerConfig(), args)
        assert config.abi_dir == Path("artifacts")
        assert config.sections == ["l1", "l2"]
        assert config.logging.level == "DEBUG"
        assert config.logging.format == "console"

    def test_no_overrides(self):
        config = CheckerConfig()
        assert apply_overrides(config, _parse_args(["state.yml"])) is config


class TestLoadConfig:
    def test_yaml_then_env(self, tmp_path, monkeypatch):
        path = tmp_path / "checker.yaml"
        path.write_text("abi_dir: out\nrpc:\n  request_timeout_s: 5\n")
        monkeypatch.setenv("STATECHECK_LOGGING__LEVEL", "WARNING")
        config = load_config(path)
        assert config.abi_dir == Path("out")
        assert config.rpc.request_timeout_s == 5
        assert config.logging.level == "WARNING"

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(tmp_path / "absent.yaml")
        assert config.rpc.request_timeout_s == 30.0


class TestMain:
    @pytest.mark.asyncio
    async def test_missing_abi_exits_one(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        state = tmp_path / "state.yml"
        state.write_text(STATE_YAML)
        abi_dir = tmp_path / "abi"
        abi_dir.mkdir()

        code = await main(_parse_args([str(state), str(abi_dir)]))

        assert code == 1
        assert "No ABI for 'Missing'" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_malformed_state_exits_one(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        state = tmp_path / "state.yml"
        state.write_text("l1:\n  rpcUrl: X\n  contracts:\n    t:\n      name: T\n      address: nope\n")

        code = await main(_parse_args([str(state), str(tmp_path)]))

        assert code == 1
