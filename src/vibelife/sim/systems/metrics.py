from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from ..types.metrics import GenerationMetrics

if TYPE_CHECKING:
    from ..core.organism import Organism


def create_metrics(
    generation: int,
    births: int,
    deaths: int,
    duration_ms: float,
    organisms: Sequence[Organism],
) -> GenerationMetrics:
    population = len(organisms)
    if population:
        avg_energy = sum(o.energy for o in organisms) / population
        avg_age = sum(o.age for o in organisms) / population
        avg_size = sum(o.size for o in organisms) / population
        max_depth = max(o.generation for o in organisms)
    else:
        avg_energy = avg_age = avg_size = 0.0
        max_depth = 0
    return GenerationMetrics(
        generation=generation,
        population=population,
        births=births,
        deaths=deaths,
        average_energy=avg_energy,
        average_age=avg_age,
        average_size=avg_size,
        max_lineage_depth=max_depth,
        duration_ms=duration_ms,
    )
