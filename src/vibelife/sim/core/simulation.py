from __future__ import annotations

import logging
from time import perf_counter
from typing import Dict, List, Optional

from ...config import SimulationConfig
from ...errors import OrganismNotFoundError, SnapshotError
from ...rng import DeterministicRng
from ..systems import lifecycle, metrics as metrics_system
from ..types.metrics import GenerationMetrics
from ..types.snapshot import OrganismSnapshot, build_population_snapshot
from ..utils.math3d import Position
from .environment import Environment
from .organism import Organism
from .traits import OrganismTraits

logger = logging.getLogger(__name__)


class Simulation:
    """One self-contained ecosystem: population, environment, RNG and id counter.

    Every randomness-consuming step draws from the single ``DeterministicRng``
    owned here, so two instances built with the same seed and driven by the
    same calls produce identical populations.
    """

    def __init__(
        self,
        temperature: Optional[float] = None,
        light: Optional[float] = None,
        moisture: Optional[float] = None,
        *,
        seed: Optional[int] = None,
        config: Optional[SimulationConfig] = None,
    ):
        self._config = config if config is not None else SimulationConfig()
        env_config = self._config.environment
        self._environment = Environment.from_config(env_config)
        if temperature is not None or light is not None or moisture is not None:
            self._environment = Environment(
                temperature=env_config.temperature if temperature is None else temperature,
                light_level=env_config.light_level if light is None else light,
                moisture=env_config.moisture if moisture is None else moisture,
                resources=self._environment.resources,
            )
        self._rng = DeterministicRng(seed if seed is not None else self._config.seed)
        self._organisms: List[Organism] = []
        self._next_id = 0
        self._generation_count = 0
        self._metrics: GenerationMetrics | None = None
        logger.debug(
            "Simulation created seed=%d light=%.3f", self._rng.seed, self._environment.light_level
        )

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def environment(self) -> Environment:
        return self._environment

    @property
    def rng(self) -> DeterministicRng:
        return self._rng

    @property
    def seed(self) -> int:
        return self._rng.seed

    @property
    def organisms(self) -> List[Organism]:
        return self._organisms

    @property
    def generation_count(self) -> int:
        return self._generation_count

    @property
    def metrics(self) -> GenerationMetrics | None:
        return self._metrics

    def reset(self) -> None:
        self._organisms.clear()
        self._rng.reset()
        self._next_id = 0
        self._generation_count = 0
        self._metrics = None

    def create_initial_organism(self, motility: float, photosynthesis: float, size: float) -> OrganismSnapshot:
        return self._admit_founders(1, motility, photosynthesis, size)[0]

    def create_initial_population(
        self,
        count: Optional[int] = None,
        motility: Optional[float] = None,
        photosynthesis: Optional[float] = None,
        size: Optional[float] = None,
    ) -> List[OrganismSnapshot]:
        founders = self._config.founders
        count = founders.count if count is None else count
        if count < 0:
            raise ValueError(f"founder count must be non-negative, got {count}")
        return self._admit_founders(
            count,
            founders.motility if motility is None else motility,
            founders.photosynthesis if photosynthesis is None else photosynthesis,
            founders.size if size is None else size,
        )

    def simulate_generation(self) -> List[OrganismSnapshot]:
        self.step()
        return build_population_snapshot(self._organisms)

    def fast_forward(self, generations: int) -> List[OrganismSnapshot]:
        if generations < 0:
            raise ValueError(f"generations must be non-negative, got {generations}")
        for _ in range(generations):
            self.step()
        logger.debug(
            "Fast-forwarded %d generations, population=%d", generations, len(self._organisms)
        )
        return build_population_snapshot(self._organisms)

    def get_organism_count(self) -> int:
        return len(self._organisms)

    def get_organism(self, organism_id: str) -> Organism:
        for organism in self._organisms:
            if organism.id == organism_id:
                return organism
        raise OrganismNotFoundError(organism_id)

    def get_organism_actions(self, organism_id: str) -> List[str]:
        return self.get_organism(organism_id).actions()

    def get_organism_action_weights(self, organism_id: str) -> Dict[str, float]:
        return self.get_organism(organism_id).action_weights()

    def snapshot(self) -> List[OrganismSnapshot]:
        return build_population_snapshot(self._organisms)

    def step(self) -> GenerationMetrics:
        """Advance one generation without building snapshots."""
        start = perf_counter()
        next_population: List[Organism] = []
        births = 0
        deaths = 0
        for organism in self._organisms:
            born, died = lifecycle.apply_life_cycle(self, organism, next_population)
            births += born
            deaths += died
        self._organisms = next_population
        self._generation_count += 1

        elapsed_ms = (perf_counter() - start) * 1000.0
        metrics = metrics_system.create_metrics(
            self._generation_count, births, deaths, elapsed_ms, self._organisms
        )
        self._metrics = metrics
        logger.debug(
            "Generation %d: population=%d births=%d deaths=%d",
            metrics.generation,
            metrics.population,
            births,
            deaths,
        )
        return metrics

    def _admit_founders(
        self, count: int, motility: float, photosynthesis: float, size: float
    ) -> List[OrganismSnapshot]:
        # Founders join the population only once every snapshot is built.
        first_id = self._next_id
        created = [self._spawn_founder(motility, photosynthesis, size) for _ in range(count)]
        try:
            snapshots = build_population_snapshot(created)
        except SnapshotError:
            self._next_id = first_id
            raise
        self._organisms.extend(created)
        return snapshots

    def _spawn_founder(self, motility: float, photosynthesis: float, size: float) -> Organism:
        founders = self._config.founders
        traits = OrganismTraits(
            motility=motility,
            photosynthesis=photosynthesis,
            predation=founders.predation,
            defense=founders.defense,
            sensory=founders.sensory,
            reproduction=founders.reproduction,
            metabolism=founders.metabolism,
        )
        return Organism(
            id=self._allocate_id(),
            position=Position(0.0, 0.0, 0.0),
            size=size,
            traits=traits,
            energy=founders.energy,
            generation=0,
            parent_id=None,
            config=self._config.organism,
        )

    def _allocate_id(self) -> str:
        organism_id = f"organism-{self._next_id}"
        self._next_id += 1
        return organism_id
