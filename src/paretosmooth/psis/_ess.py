"""Effective sample sizes for PSIS.

- :func:`relative_eff`: autocorrelation-aware relative efficiency of raw
  posterior draws, ``ESS / S``, via NumPyro's FFT-based estimator.
- :func:`psis_ess`: variance-based ESS of normalized importance weights,
  ``r_eff / sum(w^2)``.
- :func:`sup_ess`: supremum-based ESS, ``r_eff / max(w)``. More sensitive to
  PSIS failure than :func:`psis_ess`, at the cost of higher variance.
"""

from __future__ import annotations

import numpy as np
from numpyro.diagnostics import effective_sample_size

from ..errors import InvalidInputError, LIKELY_ERROR_CAUSES


def relative_eff(draws: np.ndarray) -> np.ndarray:
    """Relative efficiency of posterior draws for each data point.

    Parameters
    ----------
    draws : array-like, shape ``(n, S_draw, C)``
        Draws indexed as ``[data, draw, chain]``, typically likelihood values
        ``exp(log_lik)``.

    Returns
    -------
    np.ndarray, shape ``(n,)``
        ``ESS_i / (S_draw * C)``.

    Raises
    ------
    InvalidInputError
        If the ESS estimate is not finite for some data point.
    """
    draws = np.asarray(draws, dtype=np.float64)
    if draws.ndim != 3:
        raise InvalidInputError(
            f"`draws` must be indexed as [data, draw, chain]; got {draws.ndim} "
            "dimensions."
        )
    n_draws, n_chains = draws.shape[1], draws.shape[2]

    # NumPyro expects (chain, draw, ...)
    ess = np.asarray(effective_sample_size(np.transpose(draws, (2, 1, 0))))
    r_eff = ess / (n_draws * n_chains)

    if not np.all(np.isfinite(r_eff)):
        raise InvalidInputError(
            "PSIS-LOO has encountered an error calculating ESS values for your "
            f"Markov chains. Please check your inputs.\n{LIKELY_ERROR_CAUSES}"
        )
    return r_eff


def psis_ess(weights: np.ndarray, r_eff: np.ndarray) -> np.ndarray:
    """Variance-based ESS of normalized weights ``[data, draw, chain]``."""
    return np.asarray(r_eff) / np.sum(np.square(weights), axis=(1, 2))


def sup_ess(weights: np.ndarray, r_eff: np.ndarray) -> np.ndarray:
    """Supremum-based ESS of normalized weights ``[data, draw, chain]``."""
    return np.asarray(r_eff) / np.max(weights, axis=(1, 2))
