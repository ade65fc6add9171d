"""Tests for tools/check_invariants.py — proves the shipped config passes and bad config fails."""

import importlib.util
import json
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]


def _load_tool():
    spec = importlib.util.spec_from_file_location(
        "check_invariants", ROOT / "tools" / "check_invariants.py",
    )
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture(scope="module")
def tool():
    return _load_tool()


def _write(tmp_path: Path, params: dict, tiers: dict) -> tuple[Path, Path]:
    params_path = tmp_path / "commission_params.json"
    tiers_path = tmp_path / "agent_tiers.json"
    params_path.write_text(json.dumps(params), encoding="utf-8")
    tiers_path.write_text(json.dumps(tiers), encoding="utf-8")
    return params_path, tiers_path


def _shipped() -> tuple[dict, dict]:
    params = json.loads((ROOT / "config" / "commission_params.json").read_text("utf-8"))
    tiers = json.loads((ROOT / "config" / "agent_tiers.json").read_text("utf-8"))
    return params, tiers


class TestShippedConfig:
    def test_passes(self, tool, capsys) -> None:
        assert tool.check() == 0
        assert "All commission invariants passed." in capsys.readouterr().out


class TestBrokenConfig:
    def test_decreasing_split(self, tool, tmp_path: Path, capsys) -> None:
        params, tiers = _shipped()
        tiers["tiers"][2]["commission_split"] = "75"
        assert tool.check(*_write(tmp_path, params, tiers)) == 1
        assert "team_leader.commission_split" in capsys.readouterr().out

    def test_float_decimal(self, tool, tmp_path: Path, capsys) -> None:
        params, tiers = _shipped()
        params["review"]["unusual_rate_percent"] = 20.0
        assert tool.check(*_write(tmp_path, params, tiers)) == 1
        assert "must be a string decimal" in capsys.readouterr().out

    def test_unknown_policy(self, tool, tmp_path: Path, capsys) -> None:
        params, tiers = _shipped()
        params["co_broking"]["split_policy"] = "lenient"
        assert tool.check(*_write(tmp_path, params, tiers)) == 1
        assert "split_policy" in capsys.readouterr().out

    def test_entry_tier_with_requirements(self, tool, tmp_path: Path) -> None:
        params, tiers = _shipped()
        tiers["tiers"][0]["requirements"]["monthly_sales"] = 1
        assert tool.check(*_write(tmp_path, params, tiers)) == 1

    def test_missing_key(self, tool, tmp_path: Path, capsys) -> None:
        params, tiers = _shipped()
        del params["money"]
        assert tool.check(*_write(tmp_path, params, tiers)) == 1
        assert "missing config key" in capsys.readouterr().out
