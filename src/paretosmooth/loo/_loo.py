"""Pareto-Smoothed Importance Sampling Leave-One-Out (PSIS-LOO) cross-validation.

PSIS-LOO approximates exact leave-one-out cross-validation from a single
posterior fit. For data point ``i`` the importance ratio of draw ``s`` for
the leave-one-out posterior is ``1 / p(y_i | theta^s)``, so PSIS is run on
the *negated* log-likelihood. With normalized smoothed weights ``w``:

    loo_est_i   = log sum_s w_s p(y_i | theta^s)
    naive_est_i = log mean_s p(y_i | theta^s)
    overfit_i   = naive_est_i - loo_est_i
    mcse_i      = sqrt(sum_s w_s (log p(y_i | theta^s) - loo_est_i)^2)
                  / sqrt(r_eff_i)

The pointwise values are summarized by their mean, total and standard errors
across data points.

References
----------
Vehtari, Gelman, Gabry (2017), "Practical Bayesian model evaluation using
    leave-one-out cross-validation and WAIC." Statistics and Computing.
"""

from __future__ import annotations

from typing import Optional, Union

import numpy as np
import pandas as pd
from scipy.special import logsumexp

from ..config import LooMethod, PsisConfig
from ..errors import InvalidInputError
from ..psis import ChainSource, convert_to_array, from_chains, psis
from ._naive_lpd import naive_lpd
from .results import ESTIMATE_COLUMNS, ESTIMATE_ROWS, PsisLoo


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _generate_loo_table(pointwise: pd.DataFrame, data_size: int) -> pd.DataFrame:
    """Summary table of ``loo_est``, ``naive_est`` and ``overfit``."""
    columns = [pointwise[c].to_numpy() for c in ESTIMATE_ROWS]

    mean = np.array([np.mean(col) for col in columns])
    total = mean * data_size
    if data_size > 1:
        se_mean = np.array([np.std(col, ddof=1) for col in columns])
        se_mean = se_mean / np.sqrt(data_size)
    else:
        se_mean = np.full(len(ESTIMATE_ROWS), np.nan)
    se_total = se_mean * data_size

    return pd.DataFrame(
        np.column_stack([total, se_total, mean, se_mean]),
        index=pd.Index(ESTIMATE_ROWS, name="criterion"),
        columns=pd.Index(ESTIMATE_COLUMNS, name="statistic"),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def psis_loo(
    log_likelihood,
    r_eff=None,
    source=None,
    calc_ess: Optional[bool] = None,
    chain_index=None,
    max_workers: Optional[int] = None,
    config: Optional[PsisConfig] = None,
) -> PsisLoo:
    """PSIS-LOO estimate of out-of-sample predictive performance.

    Parameters
    ----------
    log_likelihood : array-like
        Log-likelihoods, shape ``(n, S_draw, C)`` indexed
        ``[data, draw, chain]``, or ``(n, S)`` together with ``chain_index``,
        or a :class:`~paretosmooth.psis.ChainSource` adapter.
    r_eff, source, calc_ess, max_workers, config
        Passed to :func:`~paretosmooth.psis.psis`.
    chain_index : array-like of int, optional
        Chain (numbered from 1) of each column of a 2-D ``log_likelihood``.

    Returns
    -------
    PsisLoo

    Raises
    ------
    InvalidInputError
        On invalid input (see :func:`~paretosmooth.psis.psis`).
    DegenerateTailError
        If the tail of any data point cannot be fitted.

    Examples
    --------
    >>> import numpy as np
    >>> from paretosmooth import psis_loo
    >>> rng = np.random.default_rng(0)
    >>> log_lik = rng.normal(-3.0, 0.3, size=(50, 1000, 4))
    >>> result = psis_loo(log_lik, source="other")
    >>> result.estimates.loc["loo_est", "total"]
    """
    if isinstance(log_likelihood, ChainSource):
        log_likelihood = from_chains(log_likelihood)
    log_likelihood = np.asarray(log_likelihood, dtype=np.float64)
    if chain_index is not None and log_likelihood.ndim != 2:
        raise InvalidInputError(
            "`chain_index` only applies to a [data, sample] matrix; got "
            f"{log_likelihood.ndim} dimensions."
        )
    if log_likelihood.ndim == 2:
        log_likelihood = convert_to_array(log_likelihood, chain_index)
    elif log_likelihood.ndim != 3:
        raise InvalidInputError(
            "`log_likelihood` must be indexed as [data, draw, chain]; got "
            f"{log_likelihood.ndim} dimensions."
        )

    psis_object = psis(
        -log_likelihood,
        r_eff=r_eff,
        source=source,
        calc_ess=calc_ess,
        max_workers=max_workers,
        config=config,
    )
    weights = psis_object.weights
    data_size = psis_object.data_size

    loo_est = logsumexp(log_likelihood, b=weights, axis=(1, 2))
    naive_est = naive_lpd(log_likelihood)
    overfit = naive_est - loo_est
    mcse = np.sqrt(
        np.sum(weights * np.square(log_likelihood - loo_est[:, None, None]), axis=(1, 2))
    ) / np.sqrt(psis_object.r_eff)

    pointwise = pd.DataFrame(
        {
            "loo_est": loo_est,
            "naive_est": naive_est,
            "overfit": overfit,
            "mcse": mcse,
            "pareto_k": psis_object.pareto_k,
        },
        index=pd.RangeIndex(data_size, name="data"),
    )
    estimates = _generate_loo_table(pointwise, data_size)

    return PsisLoo(estimates, pointwise, psis_object)


# Every LooMethod member must have an entry
_LOO_METHODS = {
    LooMethod.PSIS: psis_loo,
}


def loo(
    log_likelihood,
    method: Union[LooMethod, str] = LooMethod.PSIS,
    **kwargs,
) -> PsisLoo:
    """Approximate leave-one-out cross-validation with the given method.

    Currently only PSIS-LOO is available; prefer :func:`psis_loo` when the
    method must stay fixed across releases.

    Parameters
    ----------
    log_likelihood : array-like
        See :func:`psis_loo`.
    method : LooMethod or str, default=LooMethod.PSIS
        Cross-validation method.
    **kwargs
        Passed to the method.
    """
    valid_methods = [m.value for m in LooMethod]
    try:
        method = LooMethod(method)
    except ValueError as e:
        raise InvalidInputError(
            f"Invalid method provided. Valid methods are {valid_methods}."
        ) from e
    return _LOO_METHODS[method](log_likelihood, **kwargs)
