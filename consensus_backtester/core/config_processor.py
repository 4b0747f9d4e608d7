"""ConfigProcessor centralises loading, merging, and validating configs."""

from __future__ import annotations

import os
from collections.abc import Mapping, MutableMapping
from pathlib import Path
from typing import Any, cast

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError

from consensus_backtester.core.config import (
    BacktesterConfig,
    DataSourceConfig,
    EngineConfig,
    LoggingConfig,
    MonitoringConfig,
    validate_run_config,
)
from consensus_backtester.core.errors import (
    ConfigProcessorError,
    ConfigSourceError,
    ConfigValidationError,
)

type ConfigInput = BacktesterConfig | Mapping[str, Any] | str | bytes | Path | None

__all__ = [
    "ENV_OVERRIDES",
    "ConfigInput",
    "ConfigProcessor",
    "ConfigProcessorError",
    "ConfigSourceError",
    "ConfigValidationError",
]

# Environment variable -> (component, field)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "BACKTEST_CSV_PATH": ("data", "csv_path"),
    "BACKTEST_TICKER": ("data", "ticker"),
    "BACKTEST_INTERVAL": ("data", "interval"),
    "BACKTEST_TIMESPAN": ("data", "timespan"),
    "BACKTEST_START_DATE": ("data", "start_date"),
    "BACKTEST_END_DATE": ("data", "end_date"),
    "BACKTEST_TRACK_ITERATIONS": ("engine", "track_iterations"),
    "BACKTEST_ON_ERROR": ("engine", "on_error"),
    "BACKTEST_LOG_LEVEL": ("logging", "level"),
    "BACKTEST_LOG_FILE": ("logging", "file_path"),
    "BACKTEST_MONITORING_BACKEND": ("monitoring", "backend"),
    "BACKTEST_MONITORING_PORT": ("monitoring", "port"),
}


class ConfigProcessor:
    """Utility that normalises BacktesterConfig loading and merging."""

    _COMPONENT_MODELS: dict[str, type[BaseModel]] = {
        "data": DataSourceConfig,
        "engine": EngineConfig,
        "logging": LoggingConfig,
        "monitoring": MonitoringConfig,
    }

    def __init__(self, base: BacktesterConfig | None = None) -> None:
        """Initialise the processor with a snapshot of the provided base config."""
        self._base_config = (base or BacktesterConfig()).model_copy(deep=True)

    # ------------------------------------------------------------------#
    # Public API
    # ------------------------------------------------------------------#
    def apply(
        self,
        source: ConfigInput = None,
        *,
        component_overrides: Mapping[str, Mapping[str, Any] | None] | None = None,
        validate: bool = True,
    ) -> BacktesterConfig:
        """Merge the provided sources over the base and return a BacktesterConfig.

        Args:
            source: Full config as a model, mapping, or YAML path
            component_overrides: Per-component field overrides applied last
            validate: Run the cross-field run validation

        Returns:
            Resolved configuration snapshot

        Raises:
            ConfigSourceError: If a source cannot be read
            ConfigValidationError: If the merged payload is invalid
        """
        payload = self._base_config.model_dump(mode="python")

        if source is not None:
            update_payload = self._coerce_config_payload(source)
            payload = self._deep_merge(payload, update_payload)

        if component_overrides:
            for name, override_payload in component_overrides.items():
                normalized = self._normalize_component_name(name)
                if not override_payload:
                    continue
                base_value = payload.get(normalized)
                if isinstance(base_value, Mapping):
                    payload[normalized] = self._deep_merge(dict(base_value), override_payload)
                else:
                    payload[normalized] = dict(override_payload)

        resolved = self._build_config(payload)
        if validate:
            resolved = self.validate(resolved)
        return resolved

    def apply_environment(
        self,
        source: ConfigInput = None,
        *,
        env: Mapping[str, str] | None = None,
        dotenv_path: str | Path | None = None,
        validate: bool = True,
    ) -> BacktesterConfig:
        """Resolve ``source`` with ``BACKTEST_*`` environment overrides applied on top."""
        overrides = self.environment_overrides(env, dotenv_path=dotenv_path)
        return self.apply(source, component_overrides=overrides, validate=validate)

    def environment_overrides(
        self,
        env: Mapping[str, str] | None = None,
        *,
        dotenv_path: str | Path | None = None,
    ) -> dict[str, dict[str, Any]]:
        """Collect component overrides from ``BACKTEST_*`` environment variables.

        When ``env`` is omitted the process environment is used, after loading a
        ``.env`` file (``dotenv_path`` or the nearest one) without overriding
        variables that are already set.
        """
        if env is None:
            load_dotenv(dotenv_path=dotenv_path, override=False)
            env = os.environ

        overrides: dict[str, dict[str, Any]] = {}
        for variable, (component, field_name) in ENV_OVERRIDES.items():
            raw = env.get(variable)
            if raw is None or not raw.strip():
                continue
            overrides.setdefault(component, {})[field_name] = raw.strip()
        return overrides

    def load_yaml(self, path: str | Path) -> Mapping[str, Any]:
        """Read a YAML file and return its mapping payload."""
        resolved_path = Path(path).expanduser()
        if not resolved_path.is_file():
            raise ConfigSourceError(f"Config file not found: {resolved_path}")

        try:
            with resolved_path.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigSourceError(f"Invalid YAML in {resolved_path}: {exc}") from exc

        if not isinstance(data, MutableMapping):
            raise ConfigSourceError(f"YAML root must be a mapping: {resolved_path}")

        return dict(data)

    def resolve_component(
        self,
        component: str,
        overrides: Mapping[str, Any] | None = None,
    ) -> BaseModel:
        """Resolve a single component model from the base plus ``overrides``."""
        normalized = self._normalize_component_name(component)
        model_cls = self._COMPONENT_MODELS[normalized]
        payload = getattr(self._base_config, normalized).model_dump(mode="python")
        if overrides:
            payload = self._deep_merge(payload, overrides)
        try:
            return model_cls(**payload)
        except ValidationError as exc:
            raise ConfigValidationError(
                f"Unable to resolve component '{normalized}'",
                component=normalized,
                errors=exc.errors(),
            ) from exc

    def validate(self, config: BacktesterConfig) -> BacktesterConfig:
        """Validate a BacktesterConfig snapshot."""
        try:
            return validate_run_config(config)
        except ValueError as exc:
            raise ConfigValidationError(str(exc), source="validation") from exc

    # ------------------------------------------------------------------#
    # Internal helpers
    # ------------------------------------------------------------------#
    def _build_config(self, payload: Mapping[str, Any]) -> BacktesterConfig:
        try:
            return BacktesterConfig(**payload)
        except ValidationError as exc:
            raise ConfigValidationError(
                "Unable to build BacktesterConfig",
                source="payload",
                errors=exc.errors(),
            ) from exc

    def _coerce_config_payload(self, source: ConfigInput) -> Mapping[str, Any]:
        if isinstance(source, BacktesterConfig):
            return source.model_dump(mode="python")
        if isinstance(source, BaseModel):
            raise ConfigSourceError(
                f"Expected BacktesterConfig, received {source.__class__.__name__}",
            )
        if isinstance(source, Mapping):
            return dict(source)
        path = self._path_from_source(source)
        if path:
            return dict(self.load_yaml(path))
        raise ConfigSourceError(f"Unsupported config source: {source!r}")

    @staticmethod
    def _normalize_component_name(name: str) -> str:
        normalized = name.strip().lower()
        if normalized not in ConfigProcessor._COMPONENT_MODELS:
            raise ConfigSourceError(f"Unknown component: {name}")
        return normalized

    @staticmethod
    def _deep_merge(
        base: Mapping[str, Any],
        update: Mapping[str, Any],
    ) -> dict[str, Any]:
        merged: dict[str, Any] = dict(base)
        for key, value in update.items():
            if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
                nested_base = cast(Mapping[str, Any], merged[key])
                merged[key] = ConfigProcessor._deep_merge(
                    nested_base,
                    cast(Mapping[str, Any], value),
                )
            else:
                merged[key] = value
        return merged

    @staticmethod
    def _path_from_source(source: Any) -> Path | None:
        if isinstance(source, (str, bytes)):
            candidate = Path(os.fsdecode(source)).expanduser()
        elif isinstance(source, Path):
            candidate = source.expanduser()
        else:
            return None

        if candidate.is_file():
            return candidate
        if candidate.suffix.lower() in {".yml", ".yaml"}:
            return candidate
        return None
