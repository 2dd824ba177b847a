from __future__ import annotations

from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Dict, Mapping, Optional

from ...config import MutationConfig
from ..utils.math3d import _clamp_unit

if TYPE_CHECKING:
    from ...rng import DeterministicRng


GENE_NAMES = (
    "motility",
    "photosynthesis",
    "predation",
    "defense",
    "sensory",
    "reproduction",
    "metabolism",
)

_DEFAULT_MUTATION = MutationConfig()


@dataclass(frozen=True, slots=True)
class OrganismTraits:
    """Seven behavioral genes, each saturated into [0, 1].

    Instances are immutable; ``mutate`` returns a fresh vector so parent and
    offspring never share trait state. predation, defense and sensory are
    carried through mutation but no behavior reads them yet.
    """

    motility: float = 0.0
    photosynthesis: float = 0.0
    predation: float = 0.0
    defense: float = 0.0
    sensory: float = 0.0
    reproduction: float = 0.0
    metabolism: float = 0.0

    def __post_init__(self) -> None:
        for gene in fields(self):
            object.__setattr__(self, gene.name, _clamp_unit(getattr(self, gene.name)))

    def mutate(
        self,
        rng: DeterministicRng,
        action_weights: Mapping[str, float],
        config: Optional[MutationConfig] = None,
    ) -> "OrganismTraits":
        config = config or _DEFAULT_MUTATION
        values: Dict[str, float] = {}
        for name in GENE_NAMES:
            base = rng.next_centered(config.step)
            bias = action_weights.get(name, 0.0) * config.bias * rng.next_float()
            values[name] = getattr(self, name) + base + bias
        return OrganismTraits(**values)

    def to_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in GENE_NAMES}
