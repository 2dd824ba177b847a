import sys
from pathlib import Path
from typing import Callable, Iterable, List

import pytest

ROOT = Path(__file__).resolve().parents[2]
src_root = ROOT / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))


class ScriptedRng:
    """Stand-in for DeterministicRng that replays a fixed list of unit draws."""

    def __init__(self, draws: Iterable[float]):
        self._draws: List[float] = list(draws)
        self.consumed = 0

    @property
    def seed(self) -> int:
        return 0

    def next_float(self) -> float:
        if self.consumed >= len(self._draws):
            raise AssertionError("scripted rng exhausted")
        value = self._draws[self.consumed]
        self.consumed += 1
        return value

    def next_centered(self, width: float) -> float:
        return (self.next_float() - 0.5) * width

    def next_angle(self) -> float:
        return self.next_float() * 2.0 * 3.141592653589793


@pytest.fixture
def scripted_rng() -> Callable[..., ScriptedRng]:
    def factory(*draws: float) -> ScriptedRng:
        return ScriptedRng(draws)

    return factory


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run long multi-generation soak tests",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "slow: marks long multi-generation runs that only execute with --run-slow",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-slow"):
        return

    skip_marker = pytest.mark.skip(
        reason="Long-running soak test (use --run-slow)",
    )

    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_marker)
