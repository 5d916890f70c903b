"""Pareto smoothing of the upper tail of one vector of importance ratios.

For a single data point the procedure is:

1.  Pick the ``M`` largest ratios (``M`` from :func:`default_tail_length`)
    with a partial sort that keeps track of their original positions.
2.  Check the tail can be fitted (at least 5 values, not all equal).
3.  Shift the tail by the largest non-tail value (the cutoff) so that its
    support starts at 0, and fit a generalized Pareto distribution.
4.  Replace the tail, in rank order, by the GPD quantiles at the plotting
    positions ``(j - 0.5) / M`` plus the cutoff.
5.  Clamp to ``[0, 1]`` (the ratios are pre-scaled to a maximum of 1).

Weights are not normalized here; that is the caller's job.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from ..errors import DegenerateTailError, InvalidInputError, LIKELY_ERROR_CAUSES
from ._gpd import gpd_fit, gpd_quantile

# Minimum tail size for the GPD fit to be meaningful
MIN_TAIL_LEN = 5

# Relative tolerance for deciding that all tail values are the same
_TAIL_RTOL = np.sqrt(np.finfo(np.float64).eps)


# ---------------------------------------------------------------------------
# Tail length
# ---------------------------------------------------------------------------


def default_tail_length(n_samples: int, r_eff: float = 1.0) -> int:
    """Number of tail draws to smooth, as in Vehtari et al. (2019).

    ``M = min(ceil(S / 5), ceil(3 * sqrt(S / r_eff)))``

    Parameters
    ----------
    n_samples : int
        Total number of posterior draws ``S`` (draws x chains).
    r_eff : float, default=1.0
        Relative efficiency of the draws.

    Returns
    -------
    int
        Tail length ``M``. Not clamped: values below 5 are rejected later.
    """
    return int(
        min(np.ceil(n_samples / 5), np.ceil(3.0 * np.sqrt(n_samples / r_eff)))
    )


# ---------------------------------------------------------------------------
# Tail checks
# ---------------------------------------------------------------------------


def _check_tail_length(tail_length: int, n_samples: int) -> None:
    if tail_length < MIN_TAIL_LEN:
        raise DegenerateTailError(
            "Unable to fit generalized Pareto distribution: tail length was too "
            f"short ({tail_length} < {MIN_TAIL_LEN}). Likely causes are:\n"
            f"{LIKELY_ERROR_CAUSES}"
        )
    if tail_length >= n_samples:
        raise InvalidInputError(
            f"Tail length {tail_length} leaves no draws below the tail "
            f"(only {n_samples} draws)."
        )


def _check_tail(tail: np.ndarray, cutoff: float) -> None:
    """Reject a sorted tail that cannot be fitted above ``cutoff``."""
    if tail.shape[0] < MIN_TAIL_LEN:
        raise DegenerateTailError(
            "Unable to fit generalized Pareto distribution: tail length was too "
            f"short. Likely causes are:\n{LIKELY_ERROR_CAUSES}"
        )
    if np.isclose(tail[-1], tail[0], rtol=_TAIL_RTOL, atol=0.0):
        raise DegenerateTailError(
            "Unable to fit generalized Pareto distribution: all tail values are "
            f"the same. Likely causes are:\n{LIKELY_ERROR_CAUSES}"
        )
    # The GPD grid is seeded by the first quartile above the cutoff
    if tail[(tail.shape[0] + 2) // 4 - 1] <= cutoff:
        raise DegenerateTailError(
            "Unable to fit generalized Pareto distribution: a quarter or more "
            "of the tail values are tied with the largest value below the "
            f"tail. Likely causes are:\n{LIKELY_ERROR_CAUSES}"
        )


# ---------------------------------------------------------------------------
# Smoothing
# ---------------------------------------------------------------------------


def _smooth_sorted_tail(
    tail: np.ndarray,
    cutoff: float,
    wip: bool = True,
    min_grid_pts: int = 30,
) -> Tuple[np.ndarray, float]:
    """Fit a GPD to an ascending tail and return its smoothed replacement."""
    M = tail.shape[0]
    xi, sigma = gpd_fit(tail - cutoff, wip=wip, min_grid_pts=min_grid_pts)
    if not (np.isfinite(xi) and np.isfinite(sigma)):
        raise DegenerateTailError(
            "Unable to fit generalized Pareto distribution: the fit did not "
            f"converge. Likely causes are:\n{LIKELY_ERROR_CAUSES}"
        )
    probs = (np.arange(1, M + 1) - 0.5) / M
    return gpd_quantile(probs, xi, sigma) + cutoff, xi


def smooth_tail(
    row: np.ndarray,
    tail_length: int,
    log_weights: bool = False,
    wip: bool = True,
    min_grid_pts: int = 30,
) -> float:
    """Pareto-smooth the tail of ``row`` in place.

    Parameters
    ----------
    row : np.ndarray, shape ``(S,)``
        Importance ratios scaled to a maximum of 1, or log-ratios when
        ``log_weights`` is True. Modified in place.
    tail_length : int
        Number of largest values to smooth.
    log_weights : bool, default=False
        Treat ``row`` as log importance ratios. The tail is exponentiated
        relative to its maximum, smoothed, clamped so it does not exceed that
        maximum, and mapped back to the log scale.
    wip, min_grid_pts
        Passed to :func:`gpd_fit`.

    Returns
    -------
    float
        Fitted Pareto shape ``k``. ``inf`` when the tail holds an infinite
        ratio, in which case ``row`` is left unchanged.

    Raises
    ------
    DegenerateTailError
        If the tail is shorter than 5, all its values are equal, or its
        lower quarter is tied with the cutoff.
    """
    S = row.shape[0]
    _check_tail_length(tail_length, S)

    # Partial sort: positions S - M .. S - 1 hold the M largest values
    kth = S - tail_length - 1
    order = np.argpartition(row, kth)
    tail_idx = order[kth + 1:]
    tail_idx = tail_idx[np.argsort(row[tail_idx], kind="stable")]
    tail = row[tail_idx].astype(np.float64)
    cutoff = float(row[order[kth]])

    _check_tail(tail, cutoff)
    if np.any(np.isinf(tail)):
        return np.inf

    if log_weights:
        biggest = tail[-1]
        tail = np.exp(tail - biggest)
        cutoff = float(np.exp(cutoff - biggest))

    smoothed, xi = _smooth_sorted_tail(
        tail, cutoff, wip=wip, min_grid_pts=min_grid_pts
    )

    if log_weights:
        # Largest raw tail ratio is 1 after the shift
        row[tail_idx] = np.log(np.clip(smoothed, 0.0, 1.0)) + biggest
    else:
        row[tail_idx] = smoothed
        np.clip(row, 0.0, 1.0, out=row)

    return xi


def psis_smooth(
    is_ratios: np.ndarray,
    r_eff: float = 1.0,
    tail_length: Optional[int] = None,
    log_weights: bool = False,
    wip: bool = True,
    min_grid_pts: int = 30,
) -> Tuple[np.ndarray, float]:
    """Pareto-smooth a single vector of importance ratios.

    Unlike :func:`~paretosmooth.psis.psis`, performs no input validation and
    no normalization.

    Parameters
    ----------
    is_ratios : array-like, shape ``(S,)``
        Importance ratios scaled to a maximum of 1, or log-ratios when
        ``log_weights`` is True.
    r_eff : float, default=1.0
        Relative efficiency, used to derive the tail length when
        ``tail_length`` is not given.
    tail_length : int, optional
        Explicit tail length.
    log_weights : bool, default=False
        Input is on the log scale.
    wip, min_grid_pts
        Passed to :func:`gpd_fit`.

    Returns
    -------
    ratios : np.ndarray, shape ``(S,)``
        Smoothed copy of the input.
    k_hat : float
        Fitted Pareto shape.

    Examples
    --------
    >>> import numpy as np
    >>> from paretosmooth.psis import psis_smooth
    >>> rng = np.random.default_rng(0)
    >>> ratios = rng.pareto(3.0, size=1000)
    >>> smoothed, k_hat = psis_smooth(ratios / ratios.max())
    """
    new_ratios = np.array(is_ratios, dtype=np.float64)
    if tail_length is None:
        tail_length = default_tail_length(new_ratios.shape[0], r_eff)
    xi = smooth_tail(
        new_ratios,
        int(tail_length),
        log_weights=log_weights,
        wip=wip,
        min_grid_pts=min_grid_pts,
    )
    return new_ratios, xi
