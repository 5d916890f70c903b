"""Pareto-Smoothed Importance Sampling (PSIS) over many data points.

Given log importance ratios indexed ``[data, draw, chain]``, each data point
is smoothed independently:

1.  Exponentiate its log-ratios relative to their maximum, so the largest
    raw ratio is 1.
2.  Derive the tail length from the number of draws and the point's
    ``r_eff``.
3.  Pareto-smooth the tail in place (:func:`smooth_tail`), recording k-hat.

Data points share nothing but disjoint rows of the output array, so they are
smoothed on a thread pool. Afterwards each point's weights are normalized to
sum to 1 and, optionally, effective sample sizes are computed.

References
----------
Vehtari, Simpson, Gelman, Yao, Gabry (2019), "Pareto smoothed importance
    sampling." arXiv:1507.02646.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import numpy as np

from ..config import PsisConfig, make_config
from ..diagnostics import warn_pareto_k
from ..errors import DegenerateTailError, InvalidInputError, LIKELY_ERROR_CAUSES
from ._chains import ChainSource, convert_to_array, from_chains
from ._ess import psis_ess, relative_eff, sup_ess
from ._tail import default_tail_length, psis_smooth, smooth_tail
from .results import Psis

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _check_log_ratios(log_ratios: np.ndarray) -> None:
    """Reject empty or non-finite input."""
    if log_ratios.size == 0:
        raise InvalidInputError("Invalid input for `log_ratios` (array is empty).")
    if not np.all(np.isfinite(log_ratios)):
        raise InvalidInputError(
            "Invalid input for `log_ratios` (contains NaN or inf values)."
        )


def _generate_r_eff(
    log_ratios: np.ndarray,
    r_eff: Optional[np.ndarray],
    config: PsisConfig,
) -> np.ndarray:
    """Return ``r_eff``, estimating it from the draws when not supplied."""
    data_size = log_ratios.shape[0]
    if r_eff is not None:
        r_eff = np.asarray(r_eff, dtype=np.float64).ravel()
        if r_eff.shape[0] != data_size:
            raise InvalidInputError(
                "Size of `r_eff` does not equal the number of data points."
            )
        if not np.all(np.isfinite(r_eff) & (r_eff > 0)):
            raise InvalidInputError("`r_eff` must be finite and positive.")
        return r_eff

    if config.source.autocorrelated:
        logger.info(
            "Adjusting for autocorrelation. If the posterior samples are not "
            "autocorrelated, specify the source of the posterior sample using "
            "the keyword argument `source`. MCMC samples are always "
            "autocorrelated; VI samples are not."
        )
        constant = np.flatnonzero(np.ptp(log_ratios, axis=(1, 2)) == 0)
        if constant.size:
            raise DegenerateTailError(
                "Unable to fit generalized Pareto distribution: all values are "
                f"the same for data points {constant.tolist()}. Likely causes "
                f"are:\n{LIKELY_ERROR_CAUSES}"
            )
        # Likelihood scale, shifted so the largest value is 1
        shifted = log_ratios - np.min(log_ratios, axis=(1, 2), keepdims=True)
        return relative_eff(np.exp(-shifted))

    logger.info(
        "Samples have not been adjusted for autocorrelation. If the posterior "
        "samples are autocorrelated, as in MCMC methods, ESS estimates will be "
        "upward-biased, and standard error estimates will be downward-biased."
    )
    return np.ones(data_size)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def psis(
    log_ratios,
    r_eff=None,
    source=None,
    calc_ess: Optional[bool] = None,
    chain_index=None,
    max_workers: Optional[int] = None,
    config: Optional[PsisConfig] = None,
):
    """Pareto-smoothed importance sampling.

    Parameters
    ----------
    log_ratios : array-like
        Unnormalized log importance ratios:

        - shape ``(n, S_draw, C)``, indexed ``[data, draw, chain]``, or a
          :class:`ChainSource` adapter producing such an array;
        - shape ``(n, S)`` together with ``chain_index`` (one chain assumed
          when omitted);
        - shape ``(S,)``: importance ratios (not logs) of a single data point,
          scaled to a maximum of 1, smoothed directly without validation.
    r_eff : array-like, shape ``(n,)``, optional
        Relative efficiency of the draws for each data point. Estimated from
        the draws when ``source="mcmc"``, 1 otherwise. For 1-D input a scalar.
    source : {"mcmc", "vi", "other"}, optional
        Origin of the draws. Defaults to ``"mcmc"``.
    calc_ess : bool, optional
        Compute effective sample sizes. Defaults to True.
    chain_index : array-like of int, optional
        Chain (numbered from 1) of each column of a 2-D ``log_ratios``.
    max_workers : int, optional
        Thread pool size. Defaults to ``os.cpu_count()``.
    config : PsisConfig, optional
        Base configuration; explicit keyword arguments override it.

    Returns
    -------
    Psis
        For 2-D and 3-D input.
    tuple of (np.ndarray, float)
        Smoothed ratios and k-hat, for 1-D input.

    Raises
    ------
    InvalidInputError
        On non-finite or empty input, mismatched ``r_eff``, unknown
        ``source`` or malformed ``chain_index``.
    DegenerateTailError
        If the tail of any data point cannot be fitted.

    Examples
    --------
    >>> import numpy as np
    >>> from paretosmooth import psis
    >>> rng = np.random.default_rng(0)
    >>> log_ratios = rng.normal(size=(20, 500, 2))
    >>> result = psis(log_ratios, source="other")
    >>> result.weights.sum(axis=(1, 2))[:3]
    array([1., 1., 1.])
    """
    config = make_config(
        config, source=source, calc_ess=calc_ess, max_workers=max_workers
    )

    if isinstance(log_ratios, ChainSource):
        log_ratios = from_chains(log_ratios)
    log_ratios = np.asarray(log_ratios, dtype=np.float64)
    if chain_index is not None and log_ratios.ndim != 2:
        raise InvalidInputError(
            "`chain_index` only applies to a [data, sample] matrix; got "
            f"{log_ratios.ndim} dimensions."
        )
    if log_ratios.ndim == 1:
        return psis_smooth(
            log_ratios,
            r_eff=1.0 if r_eff is None else float(r_eff),
            wip=config.wip,
            min_grid_pts=config.min_grid_pts,
        )
    if log_ratios.ndim == 2:
        log_ratios = convert_to_array(log_ratios, chain_index)
    elif log_ratios.ndim != 3:
        raise InvalidInputError(
            "`log_ratios` must be indexed as [data, draw, chain]; got "
            f"{log_ratios.ndim} dimensions."
        )

    _check_log_ratios(log_ratios)
    r_eff = _generate_r_eff(log_ratios, r_eff, config)

    data_size = log_ratios.shape[0]
    post_sample_size = log_ratios.shape[1] * log_ratios.shape[2]

    weights = np.exp(log_ratios - np.max(log_ratios, axis=(1, 2), keepdims=True))
    # Rows are views into `weights`; each task writes only its own row
    weights_mat = weights.reshape(data_size, post_sample_size)

    tail_len = np.array(
        [default_tail_length(post_sample_size, r) for r in r_eff], dtype=int
    )

    def _smooth_row(i: int) -> float:
        return smooth_tail(
            weights_mat[i],
            int(tail_len[i]),
            wip=config.wip,
            min_grid_pts=config.min_grid_pts,
        )

    n_workers = config.max_workers or os.cpu_count() or 1
    with ThreadPoolExecutor(max_workers=n_workers) as pool:
        pareto_k = np.array(list(pool.map(_smooth_row, range(data_size))))

    weights /= np.sum(weights, axis=(1, 2), keepdims=True)

    if config.calc_ess:
        ess = psis_ess(weights, r_eff)
        inf_ess = sup_ess(weights, r_eff)
    else:
        ess = np.full(data_size, np.nan)
        inf_ess = np.full(data_size, np.nan)

    warn_pareto_k(pareto_k)

    return Psis(
        weights=weights,
        pareto_k=pareto_k,
        ess=ess,
        sup_ess=inf_ess,
        r_eff=r_eff,
        tail_len=tail_len,
        posterior_sample_size=post_sample_size,
        data_size=data_size,
    )
