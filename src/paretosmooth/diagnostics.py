"""Pareto-k diagnostics.

The fitted GPD shape ``k`` of each data point says how far the importance
sampling estimate for that point can be trusted:

- ``k < 0.5``         acceptable
- ``0.5 <= k < 0.7``  informational: may converge slowly / high variance
- ``0.7 <= k < 1``    high: PSIS has likely failed for this point
- ``k >= 1``          severe: estimates are unusable

These functions only report; they never change computed values.
"""

from __future__ import annotations

import logging
import warnings

import numpy as np
import pandas as pd

from .config.enums import PARETO_K_THRESHOLDS, ParetoKCategory

logger = logging.getLogger(__name__)


def _classify_one(k: float) -> ParetoKCategory:
    if np.isnan(k):
        return ParetoKCategory.SEVERE
    for category, lower in PARETO_K_THRESHOLDS:
        if k >= lower:
            return category
    return ParetoKCategory.ACCEPTABLE


def classify_pareto_k(pareto_k):
    """Severity tier of each Pareto shape estimate.

    Parameters
    ----------
    pareto_k : float or array-like
        Fitted shapes. NaN is treated as ``severe``.

    Returns
    -------
    ParetoKCategory or np.ndarray of ParetoKCategory
        A single category for scalar input, otherwise an object array with
        the shape of ``pareto_k``.

    Examples
    --------
    >>> classify_pareto_k(0.6)
    <ParetoKCategory.INFORMATIONAL: 'informational'>
    """
    k = np.asarray(pareto_k, dtype=np.float64)
    if k.ndim == 0:
        return _classify_one(float(k))
    # Element-wise assignment keeps the enum members as objects
    out = np.empty(k.shape, dtype=object)
    for idx, value in np.ndenumerate(k):
        out[idx] = _classify_one(value)
    return out


def tier_mask(tiers, category: ParetoKCategory) -> np.ndarray:
    """Boolean mask of the entries of ``tiers`` that are ``category``."""
    tiers = np.asarray(tiers, dtype=object)
    mask = np.array([t is category for t in tiers.ravel()], dtype=bool)
    return mask.reshape(tiers.shape)


def pareto_k_counts(pareto_k) -> pd.DataFrame:
    """Count data points in each Pareto-k tier.

    Returns
    -------
    pd.DataFrame
        Indexed by tier (most severe first) with columns ``count`` and
        ``share``.
    """
    tiers = np.atleast_1d(classify_pareto_k(pareto_k))
    order = [c for c, _ in PARETO_K_THRESHOLDS] + [ParetoKCategory.ACCEPTABLE]
    counts = [int(np.sum(tier_mask(tiers, c))) for c in order]
    n = max(tiers.size, 1)
    return pd.DataFrame(
        {"count": counts, "share": [c / n for c in counts]},
        index=pd.Index([c.value for c in order], name="pareto_k"),
    )


def warn_pareto_k(pareto_k) -> None:
    """Warn about the worst Pareto-k tier present in ``pareto_k``."""
    tiers = np.atleast_1d(classify_pareto_k(pareto_k))
    if np.any(tier_mask(tiers, ParetoKCategory.SEVERE)):
        warnings.warn(
            "Some Pareto k values are extremely high (>1). PSIS will not "
            "produce consistent estimates.",
            UserWarning,
            stacklevel=3,
        )
    elif np.any(tier_mask(tiers, ParetoKCategory.HIGH)):
        warnings.warn(
            "Some Pareto k values are high (>.7), indicating PSIS has failed "
            "to approximate the true distribution.",
            UserWarning,
            stacklevel=3,
        )
    elif np.any(tier_mask(tiers, ParetoKCategory.INFORMATIONAL)):
        logger.info(
            "Some Pareto k values are slightly high (>.5); some pointwise "
            "estimates may be slow to converge or have high variance."
        )
