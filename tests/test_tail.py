"""Tests for single-vector Pareto smoothing (paretosmooth.psis._tail).

Validates the tail length rule, the degenerate-tail checks, in-place tail
replacement, the infinite-ratio short circuit and the log-domain branch.
"""

import numpy as np
import pytest
from scipy import stats

from paretosmooth.errors import DegenerateTailError, InvalidInputError
from paretosmooth.psis._tail import (
    MIN_TAIL_LEN,
    default_tail_length,
    psis_smooth,
    smooth_tail,
)


# --------------------------------------------------------------------------
# Fixtures
# --------------------------------------------------------------------------


@pytest.fixture
def scaled_ratios():
    """Log-normal importance ratios scaled to a maximum of 1."""
    rng = np.random.default_rng(12)
    ratios = np.exp(rng.normal(0.0, 1.0, size=1000))
    return ratios / ratios.max()


# --------------------------------------------------------------------------
# default_tail_length
# --------------------------------------------------------------------------


def test_default_tail_length_large_S():
    """For S=1000, M = min(ceil(1000/5), ceil(3*sqrt(1000))) = min(200, 95)."""
    assert default_tail_length(1000, 1.0) == 95


def test_default_tail_length_small_S():
    """For small S the S/5 branch is active."""
    assert default_tail_length(50) == 10
    assert default_tail_length(10) == 2


def test_default_tail_length_r_eff():
    """Lower r_eff lengthens the tail until S/5 caps it."""
    assert default_tail_length(1000, 0.5) == int(np.ceil(3 * np.sqrt(2000)))
    assert default_tail_length(1000, 0.01) == 200


def test_default_tail_length_is_int():
    assert isinstance(default_tail_length(4000, 0.7), int)


# --------------------------------------------------------------------------
# Degenerate tails
# --------------------------------------------------------------------------


def test_short_vector_raises_degenerate_tail():
    """A vector of length 10 gets a tail of 2 < 5 and is rejected."""
    rng = np.random.default_rng(0)
    with pytest.raises(DegenerateTailError, match="too short"):
        psis_smooth(rng.random(10))


def test_explicit_short_tail_raises():
    rng = np.random.default_rng(1)
    with pytest.raises(DegenerateTailError):
        psis_smooth(rng.random(100), tail_length=MIN_TAIL_LEN - 1)


@pytest.mark.parametrize("length", [6, 100, 5000])
def test_constant_tail_raises_degenerate_tail(length):
    """A constant vector never has a fittable tail."""
    with pytest.raises(DegenerateTailError):
        psis_smooth(np.ones(length))


def test_constant_tail_with_explicit_length():
    """[1, 1, 1, 1, 1, 1] with a tail of 5 has identical tail values."""
    with pytest.raises(DegenerateTailError, match="all tail values are"):
        psis_smooth(np.ones(6), tail_length=5)


def test_tail_without_body_raises():
    """The tail must leave at least one draw to act as the cutoff."""
    rng = np.random.default_rng(2)
    with pytest.raises(InvalidInputError):
        psis_smooth(rng.random(20), tail_length=20)


def tail_tied_with_cutoff(rng):
    """Ratios whose tail is mostly tied with the largest value below it."""
    return np.concatenate(
        [
            rng.uniform(0.01, 0.4, size=800),
            np.full(190, 0.5),
            np.linspace(0.6, 1.0, 10),
        ]
    )


def test_tail_tied_with_cutoff_raises():
    """A tail whose lower quarter equals the cutoff cannot seed the fit."""
    ratios = tail_tied_with_cutoff(np.random.default_rng(4))
    with pytest.raises(DegenerateTailError, match="tied"):
        psis_smooth(ratios)
    with pytest.raises(DegenerateTailError, match="tied"):
        psis_smooth(np.log(ratios), log_weights=True)


def test_degenerate_tail_is_value_error():
    """Callers catching ValueError still see the failure."""
    with pytest.raises(ValueError):
        psis_smooth(np.ones(100))


# --------------------------------------------------------------------------
# psis_smooth / smooth_tail
# --------------------------------------------------------------------------


def test_psis_smooth_output_shape(scaled_ratios):
    """Smoothed ratios should have same shape as input."""
    smoothed, k_hat = psis_smooth(scaled_ratios)
    assert smoothed.shape == scaled_ratios.shape
    assert isinstance(k_hat, float)


def test_psis_smooth_does_not_mutate_input(scaled_ratios):
    before = scaled_ratios.copy()
    psis_smooth(scaled_ratios)
    np.testing.assert_array_equal(scaled_ratios, before)


def test_psis_smooth_does_not_change_bulk(scaled_ratios):
    """Only the tail (M largest) should change; bulk should be unchanged."""
    S = scaled_ratios.shape[0]
    M = default_tail_length(S)
    bulk_idx = np.argsort(scaled_ratios)[: S - M]

    smoothed, _ = psis_smooth(scaled_ratios)
    np.testing.assert_array_equal(smoothed[bulk_idx], scaled_ratios[bulk_idx])


def test_psis_smooth_tail_changes_and_stays_in_unit_interval(scaled_ratios):
    """Tail values are replaced, stay above the cutoff and at most 1."""
    S = scaled_ratios.shape[0]
    M = default_tail_length(S)
    order = np.argsort(scaled_ratios)
    tail_idx, cutoff = order[S - M:], scaled_ratios[order[S - M - 1]]

    smoothed, _ = psis_smooth(scaled_ratios)
    assert not np.allclose(smoothed[tail_idx], scaled_ratios[tail_idx])
    assert np.all(smoothed[tail_idx] >= cutoff)
    assert np.all((smoothed >= 0.0) & (smoothed <= 1.0))


def test_psis_smooth_preserves_tail_order(scaled_ratios):
    """Smoothed tail values keep the rank order of the raw tail."""
    S = scaled_ratios.shape[0]
    M = default_tail_length(S)
    tail_idx = np.argsort(scaled_ratios)[S - M:]
    smoothed, _ = psis_smooth(scaled_ratios)
    assert np.all(np.diff(smoothed[tail_idx]) >= 0)


def test_psis_smooth_explicit_tail_length(scaled_ratios):
    """Exactly tail_length values are replaced."""
    smoothed, _ = psis_smooth(scaled_ratios, tail_length=50)
    n_changed = np.sum(smoothed != scaled_ratios)
    assert n_changed <= 50
    assert n_changed > 40


def test_smooth_tail_in_place(scaled_ratios):
    """smooth_tail writes into the given array and returns k-hat."""
    row = scaled_ratios.copy()
    expected, k_expected = psis_smooth(scaled_ratios, tail_length=95)
    k_hat = smooth_tail(row, 95)
    np.testing.assert_array_equal(row, expected)
    assert k_hat == k_expected


def test_smooth_tail_on_row_view(scaled_ratios):
    """Smoothing a row view modifies only that row of the parent array."""
    parent = np.vstack([scaled_ratios, scaled_ratios])
    smooth_tail(parent[0], 95)
    np.testing.assert_array_equal(parent[1], scaled_ratios)
    assert not np.array_equal(parent[0], scaled_ratios)


def test_infinite_tail_returns_inf():
    """An infinite ratio short-circuits to k = inf, leaving values alone."""
    rng = np.random.default_rng(3)
    ratios = rng.random(500)
    ratios[17] = np.inf
    smoothed, k_hat = psis_smooth(ratios)
    assert k_hat == np.inf
    np.testing.assert_array_equal(smoothed, ratios)


def test_heavy_tail_has_high_k():
    """Ratios with an infinite-variance tail give a large k-hat."""
    ratios = stats.pareto.rvs(0.8, size=4000, random_state=11)
    _, k_hat = psis_smooth(ratios / ratios.max())
    assert k_hat > 0.7


def test_smoothing_recovers_gpd_tail():
    """A tail drawn from GPD(0.4, 1.0) above a bounded body is recovered."""
    rng = np.random.default_rng(99)
    M = 10_000
    body = rng.uniform(0.0, 0.5, size=4 * M)
    tail = 0.5 + stats.genpareto.rvs(0.4, scale=1.0, size=M, random_state=100)
    ratios = np.concatenate([body, tail])
    scale = ratios.max()

    row = ratios / scale
    k_hat = smooth_tail(row, M)
    assert abs(k_hat - 0.4) < 0.05

    # The smoothed tail follows GPD quantiles with scale sigma / max
    sorted_tail = np.sort(row)[-M:] * scale
    cutoff = np.max(body)
    q75 = np.quantile(sorted_tail - cutoff, 0.75)
    sigma_hat = q75 * k_hat / np.expm1(-k_hat * np.log1p(-0.75))
    assert abs(sigma_hat - 1.0) < 0.1


# --------------------------------------------------------------------------
# Log-domain branch
# --------------------------------------------------------------------------


def test_log_weights_matches_raw_path(scaled_ratios):
    """Smoothing log-ratios equals the log of smoothing the ratios."""
    raw, k_raw = psis_smooth(scaled_ratios)
    logged, k_log = psis_smooth(np.log(scaled_ratios), log_weights=True)
    assert k_log == pytest.approx(k_raw, rel=1e-6)
    np.testing.assert_allclose(np.exp(logged), raw, rtol=1e-6)


def test_log_weights_shift_invariant(scaled_ratios):
    """Adding a constant to the log-ratios shifts the output by that constant."""
    log_ratios = np.log(scaled_ratios)
    base, k_base = psis_smooth(log_ratios, log_weights=True)
    shifted, k_shift = psis_smooth(log_ratios + 25.0, log_weights=True)
    assert k_shift == pytest.approx(k_base, rel=1e-6)
    np.testing.assert_allclose(shifted, base + 25.0, rtol=1e-8, atol=1e-8)


def test_log_weights_tail_not_above_max(scaled_ratios):
    """The smoothed log tail never exceeds the largest raw log-ratio."""
    log_ratios = np.log(scaled_ratios) + 3.0
    smoothed, _ = psis_smooth(log_ratios, log_weights=True)
    assert np.max(smoothed) <= np.max(log_ratios) + 1e-12
