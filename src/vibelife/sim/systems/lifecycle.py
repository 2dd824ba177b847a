from __future__ import annotations

from typing import TYPE_CHECKING, List, Tuple

from ..core.organism import ACTION_REPRODUCED, Organism

if TYPE_CHECKING:
    from ..core.simulation import Simulation


def spawn_offspring(sim: Simulation, parent: Organism) -> Organism:
    config = sim.config.organism
    rng = sim.rng
    offspring_id = sim._allocate_id()
    # Frequencies over the whole current window, not the raw counts.
    weights = parent.normalized_action_weights()
    child_traits = parent.traits.mutate(rng, weights, sim.config.mutation)
    position = parent.position.translated(
        dx=rng.next_centered(config.offspring_jitter),
        dz=rng.next_centered(config.offspring_jitter),
    )
    size_factor = config.offspring_size_min + rng.next_float() * config.offspring_size_span
    return Organism(
        id=offspring_id,
        position=position,
        size=parent.size * size_factor,
        traits=child_traits,
        energy=parent.energy * config.offspring_energy_share,
        generation=parent.generation + 1,
        parent_id=parent.id,
        config=config,
    )


def apply_life_cycle(sim: Simulation, organism: Organism, next_population: List[Organism]) -> Tuple[int, int]:
    """Advance one organism by a generation.

    Survivors (and any offspring, placed first) are appended to
    ``next_population``. Returns ``(births, deaths)`` for this organism.
    """
    if not organism.is_alive:
        return 0, 1

    organism.age += 1

    organism.energy -= organism.traits.metabolism * organism.size
    if not organism.is_alive:
        return 0, 1

    organism.move_organism(sim.rng)
    if not organism.is_alive:
        return 0, 1

    organism.process_photosynthesis(sim.environment.light_level)

    births = 0
    if organism.can_reproduce() and sim.rng.next_float() < organism.reproduction_chance():
        offspring = spawn_offspring(sim, organism)
        organism.energy *= 1.0 - sim.config.organism.offspring_energy_share
        organism.record_action(ACTION_REPRODUCED)
        next_population.append(offspring)
        births = 1

    next_population.append(organism)
    return births, 0
