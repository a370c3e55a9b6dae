"""Configuration loading from YAML/JSON files and environment variables."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import numpy as np
import yaml

from est.calendar import BusinessCalendar
from est.errors import EstError
from est.forecast import AccuracyRatio, ForecastEngine
from est.report import HISTORY_DAYS, accuracy_history


class ConfigError(EstError):
    """Raised when a configuration file or value is malformed."""


DEFAULT_WORKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday"]
# 9:30am-noon, 30 minutes for lunch, then 12:30pm-5:30pm.
DEFAULT_WORKHOURS = ["9:30am", "12:00pm", "12:30pm", "5:30pm"]


@dataclass
class EstConfig:
    estfile: Path = field(default_factory=lambda: Path.home() / ".estfile.json")
    workdays: list[str | int] = field(default_factory=lambda: list(DEFAULT_WORKDAYS))
    workhours: list[str] = field(default_factory=lambda: list(DEFAULT_WORKHOURS))
    timezone: str | None = None
    history_days: int = HISTORY_DAYS
    forecast_workers: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EstConfig:
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}", details={"keys": unknown})

        config = cls()
        for key, value in data.items():
            setattr(config, key, value)
        config.estfile = Path(os.path.expandvars(str(config.estfile))).expanduser()
        return config

    @classmethod
    def from_env(cls, base: EstConfig | None = None) -> EstConfig:
        config = base if base is not None else cls()

        if estfile := os.environ.get("EST_FILE"):
            config.estfile = Path(estfile).expanduser()

        if tz := os.environ.get("EST_TIMEZONE"):
            config.timezone = tz

        if workers := os.environ.get("EST_FORECAST_WORKERS"):
            try:
                config.forecast_workers = int(workers)
            except ValueError as e:
                raise ConfigError(f"EST_FORECAST_WORKERS must be an integer; got {workers!r}.") from e

        return config

    def tzinfo(self) -> ZoneInfo | None:
        if self.timezone is None:
            return None
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigError(f"Unknown timezone: {self.timezone!r}") from e

    def build_calendar(self) -> BusinessCalendar:
        return BusinessCalendar.from_strings(self.workdays, self.workhours, tz=self.tzinfo())

    def build_engine(self, rng: np.random.Generator | None = None) -> ForecastEngine:
        return ForecastEngine(self.build_calendar(), rng=rng, workers=self.forecast_workers)

    def recent_accuracy(self, ratios: Iterable[AccuracyRatio], now: datetime) -> list[AccuracyRatio]:
        """Accuracy history over the configured window of `history_days`."""
        return accuracy_history(ratios, now, days=self.history_days)


def load_config(config_path: str | Path) -> EstConfig:
    """Load configuration from a YAML or JSON file."""
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, "r") as f:
        if path.suffix.lower() in [".yaml", ".yml"]:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        elif path.suffix.lower() == ".json":
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"Invalid JSON in {path}: {e}") from e
        else:
            raise ConfigError(f"Unsupported config file format: {path.suffix}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping.")
    return EstConfig.from_dict(data)


def get_default_config() -> EstConfig:
    return EstConfig()


def get_config(config_path: str | Path | None = None) -> EstConfig:
    """File config (when given) with environment overrides applied on top."""
    base = load_config(config_path) if config_path else get_default_config()
    return EstConfig.from_env(base)
