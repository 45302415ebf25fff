import pytest

from trackr import set_server_rendering, toggle_observing


class Spy:
    """Subscriber that only counts how often it was asked to re-run."""

    def __init__(self, name: str = "spy", log: list | None = None) -> None:
        self.name = name
        self.runs = 0
        self._log = log

    def update(self) -> None:
        self.runs += 1
        if self._log is not None:
            self._log.append(self.name)

    def __repr__(self) -> str:
        return f"Spy({self.name}, runs={self.runs})"


@pytest.fixture
def spy():
    return Spy()


@pytest.fixture
def make_spy():
    return Spy


@pytest.fixture(autouse=True)
def _reset_switches(monkeypatch):
    monkeypatch.delenv("TRACKR_ENV", raising=False)
    yield
    toggle_observing(True)
    set_server_rendering(None)
