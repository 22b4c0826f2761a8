"""liquidity.core.config

Two config surfaces only:
1) `config/default.yaml` (or `config/user.yaml` when present)
2) Environment variables, `LIQUIDITY_` prefix, `__` for nesting

Per-engine overrides are deep-merged over the shared runtime section.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from liquidity.core.exceptions import ConfigError


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


class RuntimeConfig(BaseModel):
    """Knobs for a single engine runtime."""

    timeout_ms: int = 10_000
    cache_ttl_ms: int = 30_000
    report_ttl_ms: int = 15_000
    graceful_degradation: bool = True
    degraded_confidence: float = 25.0
    enable_events: bool = True

    @field_validator("timeout_ms")
    @classmethod
    def timeout_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("timeout_ms must be >= 1")
        return v

    @field_validator("cache_ttl_ms", "report_ttl_ms")
    @classmethod
    def ttl_cannot_be_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("ttl must be >= 0")
        return v

    @field_validator("degraded_confidence")
    @classmethod
    def confidence_in_range(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError("degraded_confidence must be within 0..100")
        return v


class EngineOverride(BaseModel):
    enabled: bool = True
    runtime: dict[str, Any] = Field(default_factory=dict)


class OrchestratorConfig(BaseModel):
    inter_engine_delay_ms: int = 100

    @field_validator("inter_engine_delay_ms")
    @classmethod
    def delay_cannot_be_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("inter_engine_delay_ms must be >= 0")
        return v


class ProviderConfig(BaseModel):
    base_url: str = ""
    fixtures_path: Path | None = None
    timeout_s: float = 20.0
    rate_limit_rps: float = 5.0
    max_retries: int = 3
    breaker_threshold: int = 5
    breaker_cooldown_s: float = 30.0


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = False


class ApiConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 5050


class Config(BaseSettings):
    """Root configuration. Single source of truth."""

    config_dir: Path = Path("config")

    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    engines: dict[str, EngineOverride] = Field(default_factory=dict)
    orchestrator: OrchestratorConfig = Field(default_factory=OrchestratorConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    model_config = {"env_prefix": "LIQUIDITY_", "env_nested_delimiter": "__"}

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML arrives as init kwargs; environment variables win over it.
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    def runtime_for(self, engine_id: str) -> RuntimeConfig:
        override = self.engines.get(engine_id)
        if override is None or not override.runtime:
            return self.runtime
        merged = _deep_merge(self.runtime.model_dump(), override.runtime)
        try:
            return RuntimeConfig(**merged)
        except ValidationError as e:
            raise ConfigError(f"invalid runtime override for {engine_id}: {e}") from e

    def is_enabled(self, engine_id: str) -> bool:
        override = self.engines.get(engine_id)
        return override is None or override.enabled

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        try:
            raw = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Config file is not valid YAML: {path}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"Config root must be a mapping: {path}")

        raw.setdefault("config_dir", str(path.parent))

        # Relative fixture paths resolve against the repo root, not the cwd.
        fixtures = (raw.get("provider") or {}).get("fixtures_path")
        if fixtures and not Path(fixtures).is_absolute():
            raw["provider"]["fixtures_path"] = str(path.parent.parent / fixtures)

        try:
            return cls(**raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid config {path}: {e}") from e

    @classmethod
    def from_repo_defaults(cls, repo_root: Path | None = None) -> Config:
        root = repo_root or Path.cwd()
        user_path = root / "config" / "user.yaml"
        if user_path.exists():
            return cls.from_yaml(user_path)
        return cls.from_yaml(root / "config" / "default.yaml")
