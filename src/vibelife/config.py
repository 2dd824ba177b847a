from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from .errors import ConfigError


@dataclass
class EnvironmentConfig:
    temperature: float = 0.5
    light_level: float = 0.8
    moisture: float = 0.6
    organic: float = 100.0
    minerals: float = 100.0
    light: float = 100.0


@dataclass
class OrganismConfig:
    history_limit: int = 20
    min_size: float = 0.1
    motility_threshold: float = 0.05
    movement_scale: float = 0.5
    movement_energy_cost: float = 2.0
    photosynthesis_threshold: float = 0.05
    photosynthesis_gain: float = 5.0
    reproduction_energy_threshold: float = 50.0
    reproduction_trait_threshold: float = 0.2
    reproduction_energy_scale: float = 200.0
    offspring_energy_share: float = 0.3
    # Full width of the uniform jitter window, centered on the parent.
    offspring_jitter: float = 0.5
    offspring_size_min: float = 0.8
    offspring_size_span: float = 0.4


@dataclass
class MutationConfig:
    step: float = 0.1
    bias: float = 0.05


@dataclass
class FounderConfig:
    count: int = 5
    motility: float = 0.1
    photosynthesis: float = 0.5
    size: float = 1.0
    predation: float = 0.1
    defense: float = 0.1
    sensory: float = 0.1
    reproduction: float = 0.5
    metabolism: float = 0.5
    energy: float = 100.0


@dataclass
class SimulationConfig:
    seed: Optional[int] = None
    config_version: str = "v1"
    environment: EnvironmentConfig = field(default_factory=EnvironmentConfig)
    organism: OrganismConfig = field(default_factory=OrganismConfig)
    mutation: MutationConfig = field(default_factory=MutationConfig)
    founders: FounderConfig = field(default_factory=FounderConfig)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text())
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: expected a mapping at the top level, got {type(data).__name__}")
        return load_config(data)


_SECTIONS = {
    "environment": EnvironmentConfig,
    "organism": OrganismConfig,
    "mutation": MutationConfig,
    "founders": FounderConfig,
}


def _build_section(name: str, cls: type, raw: Any) -> Any:
    if raw is None:
        return cls()
    if not isinstance(raw, dict):
        raise ConfigError(f"section '{name}' must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"unknown keys in section '{name}': {', '.join(unknown)}")
    return cls(**raw)


def load_config(raw: dict) -> SimulationConfig:
    sections = {name: _build_section(name, cls, raw.get(name)) for name, cls in _SECTIONS.items()}
    sim_values = {k: v for k, v in raw.items() if k not in _SECTIONS}
    known = {f.name for f in fields(SimulationConfig)}
    unknown = sorted(set(sim_values) - known)
    if unknown:
        raise ConfigError(f"unknown top-level keys: {', '.join(unknown)}")
    return SimulationConfig(**sections, **sim_values)
