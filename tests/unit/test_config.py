from __future__ import annotations

from pathlib import Path

import pytest

from liquidity.core.config import Config, EngineOverride, RuntimeConfig
from liquidity.core.exceptions import ConfigError


def test_runtime_defaults() -> None:
    r = RuntimeConfig()
    assert r.timeout_ms == 10_000
    assert r.cache_ttl_ms == 30_000
    assert r.graceful_degradation is True
    assert r.degraded_confidence == 25


def test_repo_default_yaml_loads(test_config: Config) -> None:
    assert test_config.orchestrator.inter_engine_delay_ms == 0
    assert test_config.provider.fixtures_path is not None
    assert test_config.provider.fixtures_path.exists()
    assert test_config.runtime_for("volatility-regime").timeout_ms == 5000


def test_config_loads_from_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    cfg_dir = tmp_path / "config"
    cfg_dir.mkdir()
    (cfg_dir / "default.yaml").write_text("orchestrator:\n  inter_engine_delay_ms: 250\nlogging:\n  level: DEBUG\n")

    cfg = Config.from_yaml(cfg_dir / "default.yaml")
    assert cfg.orchestrator.inter_engine_delay_ms == 250
    assert cfg.logging.level == "DEBUG"
    assert cfg.config_dir == cfg_dir


def test_user_yaml_wins_over_default(tmp_path: Path) -> None:
    cfg_dir = tmp_path / "config"
    cfg_dir.mkdir()
    (cfg_dir / "default.yaml").write_text("api:\n  port: 1111\n")
    (cfg_dir / "user.yaml").write_text("api:\n  port: 2222\n")
    assert Config.from_repo_defaults(tmp_path).api.port == 2222


def test_config_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LIQUIDITY_RUNTIME__TIMEOUT_MS", "2500")
    cfg = Config()  # BaseSettings reads env
    assert cfg.runtime.timeout_ms == 2500


def test_env_wins_over_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cfg_dir = tmp_path / "config"
    cfg_dir.mkdir()
    (cfg_dir / "default.yaml").write_text("runtime:\n  timeout_ms: 1000\n  cache_ttl_ms: 700\n")
    monkeypatch.setenv("LIQUIDITY_RUNTIME__TIMEOUT_MS", "2500")

    cfg = Config.from_yaml(cfg_dir / "default.yaml")
    assert cfg.runtime.timeout_ms == 2500
    assert cfg.runtime.cache_ttl_ms == 700


def test_per_engine_override_is_merged() -> None:
    cfg = Config(engines={"a": EngineOverride(runtime={"timeout_ms": 50})})
    merged = cfg.runtime_for("a")
    assert merged.timeout_ms == 50
    assert merged.cache_ttl_ms == cfg.runtime.cache_ttl_ms
    assert cfg.runtime_for("other") is cfg.runtime
    assert cfg.is_enabled("other")


def test_invalid_override_raises_config_error() -> None:
    cfg = Config(engines={"a": EngineOverride(runtime={"timeout_ms": 0})})
    with pytest.raises(ConfigError):
        cfg.runtime_for("a")


def test_config_from_yaml_raises_if_missing(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        Config.from_yaml(tmp_path / "missing.yaml")


def test_config_from_yaml_rejects_invalid_values(tmp_path: Path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("runtime:\n  degraded_confidence: 250\n")
    with pytest.raises(ConfigError):
        Config.from_yaml(path)
