from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class GenerationMetrics:
    generation: int
    population: int
    births: int
    deaths: int
    average_energy: float
    average_age: float
    average_size: float
    max_lineage_depth: int
    duration_ms: float = 0.0
