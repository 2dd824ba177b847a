from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from ...errors import SnapshotError

if TYPE_CHECKING:
    from ..core.organism import Organism


@dataclass(frozen=True, slots=True)
class PositionSnapshot:
    x: float
    y: float
    z: float


@dataclass(frozen=True, slots=True)
class TraitsSnapshot:
    motility: float
    photosynthesis: float
    predation: float
    defense: float
    sensory: float
    reproduction: float
    metabolism: float


@dataclass(frozen=True, slots=True)
class OrganismSnapshot:
    id: str
    position: PositionSnapshot
    size: float
    traits: TraitsSnapshot
    energy: float
    age: int
    generation: int
    parent_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "position": {"x": self.position.x, "y": self.position.y, "z": self.position.z},
            "size": self.size,
            "traits": {
                "motility": self.traits.motility,
                "photosynthesis": self.traits.photosynthesis,
                "predation": self.traits.predation,
                "defense": self.traits.defense,
                "sensory": self.traits.sensory,
                "reproduction": self.traits.reproduction,
                "metabolism": self.traits.metabolism,
            },
            "energy": self.energy,
            "age": self.age,
            "generation": self.generation,
        }
        if self.parent_id is not None:
            payload["parent_id"] = self.parent_id
        return payload


def _require_finite(organism: Organism, name: str, value: float) -> float:
    if not math.isfinite(value):
        raise SnapshotError(f"organism {organism.id!r} has non-finite {name}: {value!r}")
    return float(value)


def build_organism_snapshot(organism: Organism) -> OrganismSnapshot:
    position = organism.position
    traits = organism.traits
    return OrganismSnapshot(
        id=organism.id,
        position=PositionSnapshot(
            x=_require_finite(organism, "position.x", position.x),
            y=_require_finite(organism, "position.y", position.y),
            z=_require_finite(organism, "position.z", position.z),
        ),
        size=_require_finite(organism, "size", organism.size),
        traits=TraitsSnapshot(**{name: _require_finite(organism, name, value) for name, value in traits.to_dict().items()}),
        energy=_require_finite(organism, "energy", organism.energy),
        age=organism.age,
        generation=organism.generation,
        parent_id=organism.parent_id,
    )


def build_population_snapshot(organisms: Iterable[Organism]) -> List[OrganismSnapshot]:
    # Built fully before returning so a failure never leaks a partial population.
    return [build_organism_snapshot(organism) for organism in organisms]
