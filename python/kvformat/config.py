"""Run configuration."""

from __future__ import annotations

import json
import random
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Iterable

from kvformat.errors import ConfigError
from kvformat.layout import Layout


@dataclass
class RunConfig:
    layout: str = "row"
    rows: int = 100
    ops: int = 2000
    delete_pct: int = 10
    insert_pct: int = 10
    write_pct: int = 40
    key_min: int = 20
    key_max: int = 128
    value_min: int = 20
    value_max: int = 256
    bitcnt: int = 8
    max_stride: int = 17
    reverse: bool = False
    seed: int = 0
    sut_path: str = ":memory:"

    def validate(self) -> "RunConfig":
        valid_layouts = [l.value for l in Layout]
        if self.layout not in valid_layouts:
            raise ConfigError(f"layout must be one of {', '.join(valid_layouts)}, not {self.layout!r}")
        _check_range("rows", self.rows, 1, 2**32 - 1)
        _check_range("ops", self.ops, 0, 2**32 - 1)
        for name in ("delete_pct", "insert_pct", "write_pct"):
            _check_range(name, getattr(self, name), 0, 100)
        _check_range("key_min", self.key_min, 1, 4096)
        _check_range("key_max", self.key_max, self.key_min, 4096)
        _check_range("value_min", self.value_min, 1, 65536)
        _check_range("value_max", self.value_max, self.value_min, 65536)
        _check_range("bitcnt", self.bitcnt, 1, 8)
        _check_range("max_stride", self.max_stride, 1, 1000)
        if self.reverse and self.layout != Layout.ROW.value:
            raise ConfigError("reverse collation is only supported by the row layout")
        return self


def _check_range(name: str, value: Any, lo: int, hi: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{name} must be an integer, not {value!r}")
    if not lo <= value <= hi:
        raise ConfigError(f"{name} must be between {lo} and {hi}")


def default_config() -> RunConfig:
    return RunConfig()


def config_to_dict(config: RunConfig) -> dict[str, Any]:
    return asdict(config)


def load_config(config_path: Path, base: RunConfig | None = None) -> RunConfig:
    """Apply the JSON object in config_path on top of base (or the defaults)."""
    with Path(config_path).open(encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise ConfigError(f"{config_path}: expected a JSON object")
    known = {f.name for f in fields(RunConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"{config_path}: unknown key(s): {', '.join(unknown)}")
    return replace(base or default_config(), **raw).validate()


def randomize_config(rng: random.Random, base: RunConfig, fixed: Iterable[str] = ()) -> RunConfig:
    """
    Draw a fresh configuration for another run.

    Fields named in fixed keep their value from base; everything else is
    drawn from ranges that keep a run short.
    """
    fixed = set(fixed)
    drawn: dict[str, Any] = {}
    layout = rng.choice([l.value for l in Layout])
    drawn["layout"] = layout
    drawn["rows"] = rng.randint(10, 1000)
    drawn["ops"] = rng.randint(100, 5000)
    drawn["delete_pct"] = rng.randint(0, 45)
    drawn["insert_pct"] = rng.randint(0, 45)
    drawn["write_pct"] = rng.randint(0, 90)
    drawn["key_min"] = rng.randint(10, 32)
    drawn["key_max"] = rng.randint(64, 128)
    drawn["value_min"] = rng.randint(10, 32)
    drawn["value_max"] = rng.randint(64, 512)
    drawn["bitcnt"] = rng.randint(1, 8)
    drawn["reverse"] = rng.randrange(10) == 0
    drawn["seed"] = rng.randint(0, 2**32 - 1)

    if base.reverse and "reverse" in fixed:
        drawn["layout"] = Layout.ROW.value

    drawn = {k: v for k, v in drawn.items() if k not in fixed}
    config = replace(base, **drawn)
    if config.layout != Layout.ROW.value and config.reverse:
        config.reverse = False
    config.key_min = min(config.key_min, config.key_max)
    config.value_min = min(config.value_min, config.value_max)
    return config.validate()
