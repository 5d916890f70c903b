"""In-sample (naive) log pointwise predictive density.

Given log-likelihoods ``L[i, s, c] = log p(y_i | theta^(s, c))``, the naive
estimate for data point ``i`` is

    lpd_i = log( 1/S sum_{s,c} exp(L[i, s, c]) )

computed with the log-sum-exp trick. It scores the model on the data it was
fitted to and therefore overestimates out-of-sample performance; the gap to
the LOO estimate is the effective number of parameters.
"""

from __future__ import annotations

from typing import Union

import numpy as np
from scipy.special import logsumexp


def naive_lpd(
    log_likelihood: np.ndarray,
    aggregate: bool = False,
) -> Union[float, np.ndarray]:
    """Naive (in-sample) log predictive density.

    Parameters
    ----------
    log_likelihood : array-like, shape ``(n, S_draw, C)``
        Log-likelihoods indexed ``[data, draw, chain]``.
    aggregate : bool, default=False
        If ``True`` return the scalar ``sum_i lpd_i``; otherwise the vector
        ``lpd_i`` of shape ``(n,)``.

    Returns
    -------
    float or np.ndarray
    """
    log_likelihood = np.asarray(log_likelihood, dtype=np.float64)
    n_samples = log_likelihood.shape[1] * log_likelihood.shape[2]
    lpd = logsumexp(log_likelihood, axis=(1, 2)) - np.log(n_samples)
    if aggregate:
        return float(np.sum(lpd))
    return lpd
