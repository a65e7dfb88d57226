import pytest

from helpers.clock import FakeScheduler

from tariff_screener.controller import ScreenerController
from tariff_screener.graph import ScreenGraph
from tariff_screener.ruleset import ScreenerRuleset
from tariff_screener.sequencer import ProcessingSequencer

# Tests pin the interval instead of reading SCREENER_STAGE_INTERVAL_MS.
INTERVAL_MS = 1200


@pytest.fixture(scope="session")
def ruleset():
    """Load the packaged ruleset once for the entire test session."""
    r = ScreenerRuleset()
    r.load()
    return r


@pytest.fixture(scope="session")
def graph(ruleset):
    return ScreenGraph(ruleset)


@pytest.fixture
def scheduler():
    """Fresh virtual clock for each test."""
    return FakeScheduler()


@pytest.fixture
def sequencer(scheduler):
    return ProcessingSequencer(scheduler, interval_ms=INTERVAL_MS)


@pytest.fixture
def controller(graph, sequencer):
    """Strict controller on a virtual clock: invalid transitions raise."""
    return ScreenerController(graph, sequencer=sequencer, strict=True)


@pytest.fixture
def lenient_controller(graph, sequencer):
    """Production-mode controller: invalid transitions are ignored."""
    return ScreenerController(graph, sequencer=sequencer, strict=False)
