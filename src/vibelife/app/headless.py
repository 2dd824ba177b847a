from __future__ import annotations

import argparse
import csv
import dataclasses
import json
import logging
import math
from pathlib import Path
from typing import Optional

from ..config import SimulationConfig
from ..logging_config import configure_logging
from ..sim.core.simulation import Simulation
from ..sim.core.traits import GENE_NAMES
from ..sim.types.metrics import GenerationMetrics

logger = logging.getLogger(__name__)

_HEADER = [
    "generation",
    "population",
    "births",
    "deaths",
    "avg_energy",
    "avg_age",
    "avg_size",
    "max_lineage_depth",
    "generation_ms",
]


def _format_row(metrics: GenerationMetrics, generation_ms: float) -> list[object]:
    return [
        metrics.generation,
        metrics.population,
        metrics.births,
        metrics.deaths,
        f"{metrics.average_energy:.4f}",
        f"{metrics.average_age:.4f}",
        f"{metrics.average_size:.4f}",
        metrics.max_lineage_depth,
        f"{generation_ms:.3f}",
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0}
    sorted_values = sorted(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / len(values)),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
    }


def _mean_traits(simulation: Simulation) -> dict[str, float]:
    organisms = simulation.organisms
    if not organisms:
        return {name: 0.0 for name in GENE_NAMES}
    return {
        name: sum(getattr(o.traits, name) for o in organisms) / len(organisms) for name in GENE_NAMES
    }


def run_headless(
    generations: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    summary_path: Optional[Path] = None,
    config: Optional[SimulationConfig] = None,
    founders: Optional[int] = None,
    motility: Optional[float] = None,
    photosynthesis: Optional[float] = None,
    size: Optional[float] = None,
    temperature: Optional[float] = None,
    light: Optional[float] = None,
    moisture: Optional[float] = None,
) -> Simulation:
    config = config if config is not None else SimulationConfig()
    if seed is not None:
        config = dataclasses.replace(config, seed=seed)
    simulation = Simulation(temperature, light, moisture, config=config)
    simulation.create_initial_population(founders, motility, photosynthesis, size)
    logger.info(
        "Running %d generations seed=%d founders=%d", generations, simulation.seed, simulation.get_organism_count()
    )

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_HEADER)

    population_series: list[float] = []
    births_total = 0
    deaths_total = 0
    peak_population = (simulation.get_organism_count(), 0)
    extinct_at: Optional[int] = None

    try:
        for _ in range(generations):
            metrics = simulation.step()
            generation_ms = 0.0 if deterministic_log else metrics.duration_ms
            population_series.append(float(metrics.population))
            births_total += metrics.births
            deaths_total += metrics.deaths
            if metrics.population > peak_population[0]:
                peak_population = (metrics.population, metrics.generation)
            if writer:
                writer.writerow(_format_row(metrics, generation_ms))
            if metrics.population == 0:
                extinct_at = metrics.generation
                logger.info("Population went extinct at generation %d", extinct_at)
                break
    finally:
        if csv_file:
            csv_file.close()

    if summary_path:
        summary = {
            "generations": generations,
            "completed_generations": simulation.generation_count,
            "seed": simulation.seed,
            "environment": simulation.environment.to_dict(),
            "final_population": simulation.get_organism_count(),
            "births": births_total,
            "deaths": deaths_total,
            "extinct_at": extinct_at,
            "population": _summary_stats(population_series),
            "peaks": {"population": {"value": peak_population[0], "generation": peak_population[1]}},
            "mean_traits": _mean_traits(simulation),
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
    return simulation


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless vibelife ecosystem simulation")
    parser.add_argument("--generations", type=int, default=200)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML configuration file")
    parser.add_argument("--founders", type=int, default=None, help="Number of founder organisms")
    parser.add_argument("--motility", type=float, default=None)
    parser.add_argument("--photosynthesis", type=float, default=None)
    parser.add_argument("--size", type=float, default=None)
    parser.add_argument("--temperature", type=float, default=None)
    parser.add_argument("--light", type=float, default=None)
    parser.add_argument("--moisture", type=float, default=None)
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write per-generation metrics")
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (generation_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: VIBELIFE_LOG_LEVEL or INFO)")
    args = parser.parse_args()
    configure_logging(level=args.log_level)
    config = SimulationConfig.from_yaml(args.config) if args.config else None
    run_headless(
        args.generations,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        summary_path=args.summary,
        config=config,
        founders=args.founders,
        motility=args.motility,
        photosynthesis=args.photosynthesis,
        size=args.size,
        temperature=args.temperature,
        light=args.light,
        moisture=args.moisture,
    )


if __name__ == "__main__":
    main()
