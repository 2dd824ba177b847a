from __future__ import annotations

from collections import Counter, deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Deque, Dict, List, Optional

from ...config import OrganismConfig
from ..utils.math3d import Position, _ground_offset
from .traits import OrganismTraits

if TYPE_CHECKING:
    from ...rng import DeterministicRng


ACTION_MOVED = "moved"
ACTION_PHOTOSYNTHESIS = "photosynthesis"
ACTION_REPRODUCED = "reproduced"

DEFAULT_ORGANISM_CONFIG = OrganismConfig()


class ActionHistory:
    """Bounded log of action labels with a count per label kept in lockstep.

    The counts always equal the multiset of labels currently in the window;
    a label disappears from the counts once its last occurrence is evicted.
    """

    __slots__ = ("_limit", "_records", "_counts")

    def __init__(self, limit: int = DEFAULT_ORGANISM_CONFIG.history_limit):
        if limit < 1:
            raise ValueError("history limit must be positive")
        self._limit = limit
        self._records: Deque[str] = deque()
        self._counts: Counter[str] = Counter()

    def __len__(self) -> int:
        return len(self._records)

    @property
    def limit(self) -> int:
        return self._limit

    def record(self, label: str) -> None:
        self._records.append(label)
        self._counts[label] += 1
        if len(self._records) > self._limit:
            removed = self._records.popleft()
            self._counts[removed] -= 1
            if self._counts[removed] <= 0:
                del self._counts[removed]

    def labels(self) -> List[str]:
        return list(self._records)

    def counts(self) -> Dict[str, float]:
        return {label: float(count) for label, count in self._counts.items()}

    def frequencies(self) -> Dict[str, float]:
        total = len(self._records)
        if total == 0:
            return {}
        tally: Dict[str, float] = {}
        for label in self._records:
            tally[label] = tally.get(label, 0.0) + 1.0
        return {label: count / total for label, count in tally.items()}


@dataclass(slots=True)
class Organism:
    id: str
    position: Position
    size: float
    traits: OrganismTraits
    energy: float
    generation: int = 0
    parent_id: Optional[str] = None
    age: int = 0
    config: Optional[OrganismConfig] = field(default=None, repr=False, compare=False)
    history: ActionHistory = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.config is None:
            self.config = DEFAULT_ORGANISM_CONFIG
        self.size = max(self.config.min_size, float(self.size))
        self.history = ActionHistory(self.config.history_limit)

    @property
    def is_alive(self) -> bool:
        return self.energy > 0.0

    def record_action(self, action: str) -> None:
        self.history.record(action)

    def actions(self) -> List[str]:
        return self.history.labels()

    def action_weights(self) -> Dict[str, float]:
        return self.history.counts()

    def normalized_action_weights(self) -> Dict[str, float]:
        return self.history.frequencies()

    def move_organism(self, rng: DeterministicRng) -> None:
        if self.traits.motility < self.config.motility_threshold:
            return
        # Smaller bodies travel farther for the same motility.
        move_distance = self.traits.motility * (1.0 / self.size) * self.config.movement_scale
        offset = _ground_offset(rng.next_angle(), move_distance)
        self.position.x += offset.x
        self.position.z += offset.y
        self.energy -= move_distance * self.size * self.config.movement_energy_cost
        self.record_action(ACTION_MOVED)

    def process_photosynthesis(self, light_level: float) -> None:
        if self.traits.photosynthesis < self.config.photosynthesis_threshold:
            return
        self.energy += self.traits.photosynthesis * light_level * self.size * self.config.photosynthesis_gain
        self.record_action(ACTION_PHOTOSYNTHESIS)

    def can_reproduce(self) -> bool:
        return (
            self.energy >= self.config.reproduction_energy_threshold
            and self.traits.reproduction >= self.config.reproduction_trait_threshold
        )

    def reproduction_chance(self) -> float:
        # Not clamped: above 1.0 the roll always succeeds.
        return self.traits.reproduction * (self.energy / self.config.reproduction_energy_scale)
