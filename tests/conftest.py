# tests/conftest.py
from __future__ import annotations

import numpy as np
import pytest

from fftcorr.core.plans import reset_plan_cache


@pytest.fixture(autouse=True)
def fresh_plan_cache():
    """Each test starts with an empty thread-local plan cache."""
    reset_plan_cache()
    yield
    reset_plan_cache()


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(0)


def sliding_reference(signal, template) -> np.ndarray:
    """Full correlation by explicit double loop over Python floats."""
    s = [float(v) for v in signal]
    t = [float(v) for v in template]
    n, m = len(s), len(t)
    if n == 0 or m == 0:
        return np.zeros(0)
    out = []
    for k in range(n + m - 1):
        acc = 0.0
        for i in range(n):
            j = i - k + m - 1
            if 0 <= j < m:
                acc += s[i] * t[j]
        out.append(acc)
    return np.asarray(out)


@pytest.fixture
def reference():
    return sliding_reference
