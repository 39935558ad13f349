"""
Runtime configuration.

Values come from (in order of preference) an explicit YAML file, the
environment, or the dataclass defaults. Environment parsing is lenient
(bad values fall back to the default); YAML parsing is strict.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Union

import yaml

from .kernels.python.fixed_point import BPS_DENOM


DEFAULT_FEE_BPS = 30
DEFAULT_AMM_ID = "default"

_KNOWN_KEYS = frozenset({"default_fee_bps", "default_amm_id"})


def _env_int(name: str, default: int, *, lo: int, hi: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return int(default)
    try:
        v = int(raw.strip())
    except ValueError:
        return int(default)
    if v < lo:
        return int(lo)
    if v > hi:
        return int(hi)
    return int(v)


def _env_str(name: str, default: str) -> str:
    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


@dataclass(frozen=True)
class AmmConfig:
    """Defaults applied by the exchange facade."""

    default_fee_bps: int = DEFAULT_FEE_BPS
    default_amm_id: str = DEFAULT_AMM_ID

    def __post_init__(self) -> None:
        if not isinstance(self.default_fee_bps, int) or isinstance(self.default_fee_bps, bool):
            raise TypeError("default_fee_bps must be an int")
        if not (0 <= self.default_fee_bps < BPS_DENOM):
            raise ValueError(f"default_fee_bps must be in [0, {BPS_DENOM}): {self.default_fee_bps}")
        if not isinstance(self.default_amm_id, str) or not self.default_amm_id.strip():
            raise TypeError("default_amm_id must be a non-empty str")

    @classmethod
    def from_env(cls) -> "AmmConfig":
        return cls(
            default_fee_bps=_env_int("CPAMM_DEFAULT_FEE_BPS", DEFAULT_FEE_BPS, lo=0, hi=BPS_DENOM - 1),
            default_amm_id=_env_str("CPAMM_DEFAULT_AMM_ID", DEFAULT_AMM_ID),
        )

    @classmethod
    def from_mapping(cls, obj: Mapping[str, Any]) -> "AmmConfig":
        if not isinstance(obj, Mapping):
            raise TypeError("config must be a mapping")
        unknown = sorted(set(obj) - _KNOWN_KEYS)
        if unknown:
            raise ValueError(f"unknown config keys: {unknown}")
        return cls(**dict(obj))

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "AmmConfig":
        obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
        if obj is None:
            return cls()
        return cls.from_mapping(obj)
