from __future__ import annotations

import pytest

from resasm.reporting import MemoryReporter, set_reporter, set_verbosity


@pytest.fixture(autouse=True)
def reporter():
    """Route diagnostics into memory so tests can inspect them."""
    rep = MemoryReporter()
    set_reporter(rep)
    set_verbosity(0)
    yield rep
