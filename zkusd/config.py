"""YAML-backed protocol configuration.

Only the fixed-point risk constants and the oracle capacity knobs are
configurable; collaborator wiring happens in code through `VaultCollaborators`.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from .core.vault.types import RiskParams
from .logging_config import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class ProtocolConfig:
    """Protocol constants. Defaults match the deployed zkUSD parameters."""

    unit_precision: int = 1_000_000_000
    collateral_ratio: int = 150
    collateral_ratio_precision: int = 100
    protocol_fee_precision: int = 100
    min_health_factor: int = 100
    max_participants: int = 10
    price_validity_blocks: int = 10

    def __post_init__(self) -> None:
        for f in fields(self):
            v = getattr(self, f.name)
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{f.name} must be an int, got {type(v).__name__}")
            if f.name == "price_validity_blocks":
                if v < 0:
                    raise ValueError(f"{f.name} must be non-negative: {v}")
            elif v <= 0:
                raise ValueError(f"{f.name} must be positive: {v}")

    def risk_params(self) -> RiskParams:
        return RiskParams(
            unit_precision=self.unit_precision,
            collateral_ratio=self.collateral_ratio,
            collateral_ratio_precision=self.collateral_ratio_precision,
            protocol_fee_precision=self.protocol_fee_precision,
            min_health_factor=self.min_health_factor,
        )


def config_from_mapping(data: Mapping[str, Any]) -> ProtocolConfig:
    """Build a config from a parsed mapping; unknown keys are rejected."""
    if not isinstance(data, Mapping):
        raise TypeError("protocol config must be a mapping")
    known = {f.name for f in fields(ProtocolConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"unknown protocol config keys: {unknown}")
    return ProtocolConfig(**dict(data))


def load_config(path: str | Path) -> ProtocolConfig:
    """Load ``ProtocolConfig`` from a YAML file.

    The file may hold the fields at top level or under a ``protocol:`` key. An
    empty file yields the defaults. A missing file raises ``FileNotFoundError``.
    """
    p = Path(path)
    with p.open("r", encoding="utf-8") as config_file:
        data = yaml.safe_load(config_file) or {}
    if isinstance(data, Mapping) and set(data) == {"protocol"}:
        data = data["protocol"] or {}
    cfg = config_from_mapping(data)
    logger.info("Protocol configuration loaded from %s", p)
    return cfg
