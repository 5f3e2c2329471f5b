from __future__ import annotations

import pytest

from steamgraph.infrastructure.observability import reset_metrics


@pytest.fixture(autouse=True)
def _fresh_metrics():
    reset_metrics()
    yield
    reset_metrics()
