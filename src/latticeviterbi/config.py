"""Configuration loading utilities for latticeviterbi."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

from latticeviterbi.models import DecoderConfig

_UNSET = {"", "none", "null"}


@dataclass(frozen=True)
class AppConfig:
    """Decoder configuration resolved from profile + environment variables."""

    env: str
    log_level: str
    decoder: DecoderConfig


def load_config(env_name: str | None = None, config_dir: Path | None = None) -> AppConfig:
    """Load configuration from `configs/<env>.toml` and environment overrides."""
    env = env_name or os.getenv("LATTICEVITERBI_ENV", "dev")
    resolved_dir = config_dir or _default_config_dir()
    profile_path = resolved_dir / f"{env}.toml"

    defaults: dict[str, str | int | float | None] = {
        "log_level": "INFO",
        "max_states": None,
        "max_cost": None,
    }
    defaults.update(_load_profile(profile_path))

    log_level = os.getenv("LATTICEVITERBI_LOG_LEVEL", str(defaults["log_level"]))
    max_states = _parse_optional(
        "LATTICEVITERBI_MAX_STATES", os.getenv("LATTICEVITERBI_MAX_STATES"), defaults["max_states"], int
    )
    max_cost = _parse_optional(
        "LATTICEVITERBI_MAX_COST", os.getenv("LATTICEVITERBI_MAX_COST"), defaults["max_cost"], float
    )

    return AppConfig(
        env=env,
        log_level=log_level.upper(),
        decoder=DecoderConfig(max_states=max_states, max_cost=max_cost),
    )


def configure_logging(config: AppConfig) -> logging.Logger:
    """Apply the configured level to the package logger."""
    level = logging.getLevelName(config.log_level)
    if not isinstance(level, int):
        raise ValueError(f"log_level must be a logging level name, got {config.log_level!r}")
    logger = logging.getLogger("latticeviterbi")
    logger.setLevel(level)
    return logger


def _default_config_dir() -> Path:
    return Path(__file__).resolve().parents[2] / "configs"


def _load_profile(path: Path) -> dict[str, str | int | float | None]:
    if not path.exists():
        return {}

    with path.open("rb") as handle:
        payload = tomllib.load(handle)

    resolved: dict[str, str | int | float | None] = {}
    for key, raw in payload.items():
        if key == "log_level":
            resolved[key] = _coerce_str(key, raw)
        elif key == "max_states":
            resolved[key] = _coerce_int(key, raw)
        elif key == "max_cost":
            resolved[key] = _coerce_float(key, raw)
    return resolved


def _parse_optional(
    name: str,
    raw: str | None,
    default: str | int | float | None,
    coerce: type[int] | type[float],
) -> int | float | None:
    if raw is None:
        return default
    if raw.strip().casefold() in _UNSET:
        return None
    try:
        return coerce(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be {_describe(coerce)}, got {raw!r}") from exc


def _describe(coerce: type[int] | type[float]) -> str:
    return "an integer" if coerce is int else "a number"


def _coerce_int(name: str, value: object) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got type bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError as exc:
            raise ValueError(f"{name} must be an integer, got {value!r}") from exc
    raise ValueError(f"{name} must be an integer, got type {type(value).__name__}")


def _coerce_float(name: str, value: object) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got type bool")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError as exc:
            raise ValueError(f"{name} must be a number, got {value!r}") from exc
    raise ValueError(f"{name} must be a number, got type {type(value).__name__}")


def _coerce_str(name: str, value: object) -> str:
    if isinstance(value, str):
        return value
    raise ValueError(f"{name} must be a string, got type {type(value).__name__}")
