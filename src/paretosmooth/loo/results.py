"""PsisLoo: structured results of PSIS leave-one-out cross-validation.

Terminology
-----------
- ``loo_est``: estimated out-of-sample log predictive density (elpd).
- ``naive_est``: in-sample log predictive density.
- ``overfit``: ``naive_est - loo_est``, the effective number of
  parameters ``p_eff``: a model with ``p_eff = 2`` is about as overfit as an
  unregularized model with 2 parameters.

Total scores depend on the sample size and only differences between models
are meaningful; averages estimate the expected log score of a new point.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from ..psis.results import Psis

ESTIMATE_ROWS = ("loo_est", "naive_est", "overfit")
ESTIMATE_COLUMNS = ("total", "se_total", "mean", "se_mean")
POINTWISE_COLUMNS = ("loo_est", "naive_est", "overfit", "mcse", "pareto_k")


@dataclass(frozen=True)
class PsisLoo:
    """Results of PSIS-LOO cross-validation.

    Parameters
    ----------
    estimates : pd.DataFrame
        Summary table indexed by ``loo_est``, ``naive_est``, ``overfit`` with
        columns ``total``, ``se_total``, ``mean``, ``se_mean``.
    pointwise : pd.DataFrame
        One row per data point with columns ``loo_est``, ``naive_est``,
        ``overfit``, ``mcse``, ``pareto_k``.
    psis_object : Psis
        The PSIS result the estimates were computed from.

    Notes
    -----
    The tables are copied on construction and every access returns a fresh
    copy, so editing a returned table never changes the result.

    Examples
    --------
    >>> result = psis_loo(log_lik)
    >>> result.estimates.loc["loo_est", "total"]
    >>> result.p_eff
    """

    _estimates: pd.DataFrame
    _pointwise: pd.DataFrame = field(repr=False)
    psis_object: Psis = field(repr=False)

    def __post_init__(self):
        object.__setattr__(self, "_estimates", self._estimates.copy())
        object.__setattr__(self, "_pointwise", self._pointwise.copy())

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    @property
    def estimates(self) -> pd.DataFrame:
        """Summary table of ``loo_est``, ``naive_est`` and ``overfit``."""
        return self._estimates.copy()

    @property
    def pointwise(self) -> pd.DataFrame:
        """Pointwise values, one row per data point."""
        return self._pointwise.copy()

    # ------------------------------------------------------------------
    # Alias views
    # ------------------------------------------------------------------

    @property
    def p_eff(self) -> pd.Series:
        """Summary statistics of the effective number of parameters."""
        return self._estimates.loc["overfit"].rename("p_eff")

    @property
    def pointwise_p_eff(self) -> pd.Series:
        """Pointwise effective number of parameters."""
        return self._pointwise["overfit"].rename("p_eff")

    @property
    def data_size(self) -> int:
        return self.psis_object.data_size

    @property
    def posterior_sample_size(self) -> int:
        return self.psis_object.posterior_sample_size

    # ------------------------------------------------------------------
    # Derived scores
    # ------------------------------------------------------------------

    @property
    def mcse(self) -> float:
        """Monte Carlo standard error of the total ``loo_est``."""
        return float(np.sqrt(np.sum(np.square(self._pointwise["mcse"]))))

    @property
    def gmpd(self) -> float:
        """Geometric mean predictive density, ``exp(mean loo_est)``.

        Only interpretable for discrete outcomes, where it lies in ``[0, 1]``
        and measures how much probability the model gives to what happened.
        """
        return float(np.exp(self._estimates.loc["loo_est", "mean"]))

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def diagnostics(self) -> np.ndarray:
        """Severity tier of each data point's ``pareto_k``."""
        return self.psis_object.diagnostics()

    def diagnostic_counts(self) -> pd.DataFrame:
        """Number and share of data points in each ``pareto_k`` tier."""
        return self.psis_object.diagnostic_counts()
