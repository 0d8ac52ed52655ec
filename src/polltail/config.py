from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


class ConfigError(ValueError):
    """Config file unreadable or with invalid values."""


@dataclass(frozen=True)
class FollowConfig:
    # header con timestamp locale (-t)
    show_time: bool = False

    # argomenti = pattern glob, ri-espansi a ogni ciclo (-g)
    glob_mode: bool = False

    # righe finali mostrate alla prima apertura di ogni file
    first_lines: int = 10

    # pausa tra due cicli di polling
    interval_s: float = 1.0


DEFAULT_CONFIG = FollowConfig()


def _to_dict(cfg: FollowConfig) -> Dict[str, Any]:
    return {
        "show_time": cfg.show_time,
        "glob": cfg.glob_mode,
        "first_lines": cfg.first_lines,
        "interval": cfg.interval_s,
    }


def dump_config(cfg: FollowConfig = DEFAULT_CONFIG) -> str:
    """YAML text for a config, same keys accepted by load_config()."""
    return yaml.safe_dump(_to_dict(cfg), sort_keys=False)


def _as_bool(raw: Dict[str, Any], key: str, default: bool) -> bool:
    v = raw.get(key, default)
    if not isinstance(v, bool):
        raise ConfigError(f"'{key}' must be true/false, got {v!r}")
    return v


def _as_number(raw: Dict[str, Any], key: str, default, kind):
    v = raw.get(key, default)
    if isinstance(v, bool):
        raise ConfigError(f"'{key}' must be a number, got {v!r}")
    try:
        return kind(v)
    except (TypeError, ValueError):
        raise ConfigError(f"'{key}' must be a number, got {v!r}") from None


def validate(cfg: FollowConfig) -> FollowConfig:
    if cfg.first_lines < 0:
        raise ConfigError("first_lines must be >= 0")
    if cfg.interval_s <= 0:
        raise ConfigError("interval must be > 0")
    return cfg


def load_config(path: str | Path) -> FollowConfig:
    """Carica un config YAML e applica fallback sui default."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot read {p}: {e.strerror or e}") from e

    try:
        raw = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {p}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"{p}: top level must be a mapping")

    return validate(
        FollowConfig(
            show_time=_as_bool(raw, "show_time", DEFAULT_CONFIG.show_time),
            glob_mode=_as_bool(raw, "glob", DEFAULT_CONFIG.glob_mode),
            first_lines=_as_number(raw, "first_lines", DEFAULT_CONFIG.first_lines, int),
            interval_s=_as_number(raw, "interval", DEFAULT_CONFIG.interval_s, float),
        )
    )


def merge_cli(
    cfg: FollowConfig,
    *,
    show_time: bool = False,
    glob_mode: bool = False,
    first_lines: Optional[int] = None,
    interval_s: Optional[float] = None,
) -> FollowConfig:
    """CLI flags win: booleans are OR-ed, numbers override when given."""
    out = replace(
        cfg,
        show_time=cfg.show_time or show_time,
        glob_mode=cfg.glob_mode or glob_mode,
    )
    if first_lines is not None:
        out = replace(out, first_lines=int(first_lines))
    if interval_s is not None:
        out = replace(out, interval_s=float(interval_s))
    return validate(out)
