"""Tests for Pareto-k diagnostics (paretosmooth.diagnostics)."""

import logging
import warnings

import numpy as np
import pytest

from paretosmooth.config import ParetoKCategory
from paretosmooth.diagnostics import (
    classify_pareto_k,
    pareto_k_counts,
    tier_mask,
    warn_pareto_k,
)


# --------------------------------------------------------------------------
# classify_pareto_k
# --------------------------------------------------------------------------


@pytest.mark.parametrize(
    "k, expected",
    [
        (0.3, ParetoKCategory.ACCEPTABLE),
        (-0.2, ParetoKCategory.ACCEPTABLE),
        (0.5, ParetoKCategory.INFORMATIONAL),
        (0.6, ParetoKCategory.INFORMATIONAL),
        (0.7, ParetoKCategory.HIGH),
        (0.8, ParetoKCategory.HIGH),
        (1.0, ParetoKCategory.SEVERE),
        (1.2, ParetoKCategory.SEVERE),
        (np.inf, ParetoKCategory.SEVERE),
        (np.nan, ParetoKCategory.SEVERE),
    ],
)
def test_classify_scalar(k, expected):
    assert classify_pareto_k(k) is expected


def test_classify_array():
    tiers = classify_pareto_k(np.array([0.1, 0.55, 0.75, 1.5]))
    assert tiers.shape == (4,)
    assert list(tiers) == [
        ParetoKCategory.ACCEPTABLE,
        ParetoKCategory.INFORMATIONAL,
        ParetoKCategory.HIGH,
        ParetoKCategory.SEVERE,
    ]


def test_categories_compare_as_strings():
    assert classify_pareto_k(0.9) == "high"


def test_classify_array_keeps_enum_members():
    """Every tier, including acceptable, comes back as a ParetoKCategory."""
    tiers = classify_pareto_k([0.3, 0.6, 0.8, 1.2])
    assert all(isinstance(t, ParetoKCategory) for t in tiers)
    assert tiers[0] is ParetoKCategory.ACCEPTABLE
    assert [t.value for t in tiers] == [
        "acceptable",
        "informational",
        "high",
        "severe",
    ]


def test_classify_keeps_shape():
    tiers = classify_pareto_k(np.array([[0.1, 0.9], [np.nan, 0.6]]))
    assert tiers.shape == (2, 2)
    assert tiers[1, 0] is ParetoKCategory.SEVERE


def test_tier_mask():
    tiers = classify_pareto_k([0.3, 0.8, 0.75, 1.2])
    np.testing.assert_array_equal(
        tier_mask(tiers, ParetoKCategory.HIGH), [False, True, True, False]
    )
    assert not np.any(tier_mask(tiers, ParetoKCategory.INFORMATIONAL))


# --------------------------------------------------------------------------
# pareto_k_counts
# --------------------------------------------------------------------------


def test_counts_table():
    counts = pareto_k_counts([0.1, 0.2, 0.6, 0.8, 1.1, np.nan])
    assert list(counts.index) == ["severe", "high", "informational", "acceptable"]
    assert counts.index.name == "pareto_k"
    assert list(counts["count"]) == [2, 1, 1, 2]
    assert counts["share"].sum() == pytest.approx(1.0)
    assert counts.loc["acceptable", "share"] == pytest.approx(2 / 6)


def test_counts_one_per_tier():
    counts = pareto_k_counts([0.3, 0.6, 0.8, 1.2])
    assert list(counts["count"]) == [1, 1, 1, 1]


def test_counts_empty():
    counts = pareto_k_counts([])
    assert counts["count"].sum() == 0
    assert np.all(counts["share"] == 0.0)


# --------------------------------------------------------------------------
# warn_pareto_k
# --------------------------------------------------------------------------


def test_warns_on_severe():
    with pytest.warns(UserWarning, match="extremely high"):
        warn_pareto_k(np.array([0.2, 1.3]))


def test_warns_once_on_severe():
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        warn_pareto_k([0.3, 0.6, 0.8, 1.2])
    assert len(caught) == 1
    assert "extremely high" in str(caught[0].message)


def test_warns_on_high():
    with pytest.warns(UserWarning, match=r"high \(>\.7\)"):
        warn_pareto_k(np.array([0.2, 0.75]))


def test_informational_logs_without_warning(caplog):
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        with caplog.at_level(logging.INFO, logger="paretosmooth"):
            warn_pareto_k(np.array([0.2, 0.55]))
    assert "slightly high" in caplog.text


def test_acceptable_is_silent(caplog):
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        with caplog.at_level(logging.INFO, logger="paretosmooth"):
            warn_pareto_k(np.array([0.1, 0.3]))
    assert caplog.text == ""
