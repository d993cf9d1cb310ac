# tests/test_core_fft.py
from importlib import import_module

import numpy as np
import pytest

from fftcorr.core.fft import (
    TransformPlan,
    _thread_count,
    full_length,
    next_fast_len_ge,
    next_pow2_ge,
    transform_size,
    zero_pad,
)
from fftcorr.errors import InvalidModeError, InvalidSizeError


def test_full_length():
    assert full_length(5, 3) == 7
    assert full_length(1, 1) == 1
    assert full_length(3, 5) == 7
    assert full_length(0, 4) == 0
    assert full_length(4, 0) == 0
    assert full_length(0, 0) == 0


def test_next_fast_len_ge_monotonic():
    for n in [1, 2, 3, 7, 16, 31, 100, 257, 1024, 12345]:
        m = next_fast_len_ge(n)
        assert m >= n
        assert next_fast_len_ge(n + 1) >= m


def test_next_fast_len_is_5_smooth():
    for n in [7, 11, 13, 97, 1001]:
        m = next_fast_len_ge(n)
        for p in (2, 3, 5):
            while m % p == 0:
                m //= p
        assert m == 1


def test_next_pow2_ge():
    assert next_pow2_ge(0) == 1
    assert next_pow2_ge(1) == 1
    assert next_pow2_ge(7) == 8
    assert next_pow2_ge(8) == 8
    assert next_pow2_ge(9) == 16


@pytest.mark.parametrize("policy", ["fast", "pow2"])
def test_transform_size_never_below_full_length(policy):
    for n in range(1, 40):
        for m in range(1, 40, 3):
            size = transform_size(n, m, policy)
            assert size >= n + m - 1
            if policy == "pow2":
                assert size & (size - 1) == 0


def test_transform_size_deterministic_and_known_values():
    assert transform_size(5, 3) == 8
    assert transform_size(5, 3, "pow2") == 8
    assert transform_size(6, 5) == 10
    assert transform_size(6, 5, "pow2") == 16
    assert transform_size(100, 29) == transform_size(100, 29)


def test_transform_size_unknown_policy():
    with pytest.raises(InvalidModeError):
        transform_size(4, 4, "prime")


def test_zero_pad_forward_and_reversed():
    x = np.array([1.0, 2.0, 3.0])
    np.testing.assert_array_equal(zero_pad(x, 5), [1, 2, 3, 0, 0])
    np.testing.assert_array_equal(zero_pad(x, 5, reverse=True), [3, 2, 1, 0, 0])
    # input untouched
    np.testing.assert_array_equal(x, [1, 2, 3])
    with pytest.raises(ValueError):
        zero_pad(x, 2)


def test_plan_round_trip_scales_by_size():
    rng = np.random.default_rng(4)
    plan = TransformPlan(size=12)
    assert plan.n_bins == 7
    x = rng.standard_normal(12)
    X = plan.forward(x)
    assert X.shape == (7,)
    np.testing.assert_allclose(plan.inverse(X), x * 12, rtol=1e-12, atol=1e-12)


def test_plan_forward_is_unnormalized_rfft():
    x = np.arange(8, dtype=float)
    plan = TransformPlan(size=8)
    np.testing.assert_allclose(plan.forward(x), np.fft.rfft(x), rtol=1e-12, atol=1e-12)


def test_plan_rejects_wrong_shapes():
    plan = TransformPlan(size=8)
    with pytest.raises(ValueError):
        plan.forward(np.zeros(7))
    with pytest.raises(ValueError):
        plan.inverse(np.zeros(8, dtype=complex))


@pytest.mark.parametrize("size", [0, -4, 2.5, True])
def test_plan_rejects_bad_sizes(size):
    with pytest.raises(InvalidSizeError):
        TransformPlan(size=size)


def test_plan_spectra_survive_later_calls():
    plan = TransformPlan(size=16)
    a = np.zeros(16)
    a[0] = 1.0
    b = np.arange(16, dtype=float)
    A = plan.forward(a)
    B = plan.forward(b)
    np.testing.assert_allclose(A, np.ones(9), atol=1e-12)
    np.testing.assert_allclose(B, np.fft.rfft(b), rtol=1e-12, atol=1e-9)


def test_plan_builds_fftw_objects_once(monkeypatch):
    fft_module = import_module("fftcorr.core.fft")
    built = []
    original = fft_module.pyfftw.builders.rfft

    def counting(*args, **kwargs):
        built.append(kwargs["n"])
        return original(*args, **kwargs)

    monkeypatch.setattr(fft_module.pyfftw.builders, "rfft", counting)
    plan = TransformPlan(size=10)
    for _ in range(3):
        plan.inverse(plan.forward(np.ones(10)))
    assert built == [10]


def test_plan_thread_counts(monkeypatch):
    assert _thread_count(None) == 1
    assert _thread_count(3) == 3
    monkeypatch.setattr(import_module("fftcorr.core.fft").os, "cpu_count", lambda: 4)
    assert _thread_count(-1) == 4
    assert _thread_count(-2) == 3
    assert _thread_count(-10) == 1
    with pytest.raises(ValueError):
        _thread_count(0)
