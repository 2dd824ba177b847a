from __future__ import annotations


class VibelifeError(Exception):
    """Base class for errors raised by the simulation package."""


class ConfigError(VibelifeError, ValueError):
    """Raised when a configuration document cannot be turned into a SimulationConfig."""


class SnapshotError(VibelifeError):
    """Raised when organism state cannot be marshalled into a snapshot.

    Only non-finite numeric state triggers this; negative energy is a normal,
    transient condition and is exported as-is.
    """


class OrganismNotFoundError(VibelifeError, KeyError):
    def __init__(self, organism_id: str):
        super().__init__(organism_id)
        self.organism_id = organism_id

    def __str__(self) -> str:
        return f"no live organism with id {self.organism_id!r}"
