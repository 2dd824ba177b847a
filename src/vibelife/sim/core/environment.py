from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from ...config import EnvironmentConfig
from ..utils.math3d import _clamp_unit


@dataclass(frozen=True, slots=True)
class Resources:
    organic: float = 100.0
    minerals: float = 100.0
    light: float = 100.0

    def to_dict(self) -> Dict[str, float]:
        return {"organic": self.organic, "minerals": self.minerals, "light": self.light}


@dataclass(frozen=True, slots=True)
class Environment:
    """Ambient conditions shared by every organism.

    Only ``light_level`` feeds behavior; the resource pool is informational.
    """

    temperature: float = 0.5
    light_level: float = 0.8
    moisture: float = 0.6
    resources: Resources = field(default_factory=Resources)

    def __post_init__(self) -> None:
        object.__setattr__(self, "temperature", _clamp_unit(self.temperature))
        object.__setattr__(self, "light_level", _clamp_unit(self.light_level))
        object.__setattr__(self, "moisture", _clamp_unit(self.moisture))

    @classmethod
    def from_config(cls, config: EnvironmentConfig) -> "Environment":
        return cls(
            temperature=config.temperature,
            light_level=config.light_level,
            moisture=config.moisture,
            resources=Resources(organic=config.organic, minerals=config.minerals, light=config.light),
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "temperature": self.temperature,
            "light_level": self.light_level,
            "moisture": self.moisture,
            "resources": self.resources.to_dict(),
        }
