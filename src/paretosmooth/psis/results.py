"""Psis: results of Pareto-smoothed importance sampling."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from ..config.enums import ParetoKCategory
from ..diagnostics import classify_pareto_k, pareto_k_counts, tier_mask


@dataclass(frozen=True)
class Psis:
    """Results of PSIS over ``n`` data points.

    Parameters
    ----------
    weights : np.ndarray, shape ``(n, S_draw, C)``
        Smoothed importance weights indexed ``[data, draw, chain]``,
        normalized so each data point's weights sum to 1.
    pareto_k : np.ndarray, shape ``(n,)``
        Fitted GPD shape for each data point. ``inf`` when the tail contained
        an infinite ratio.
    ess : np.ndarray, shape ``(n,)``
        Variance-based effective sample size, ``r_eff / sum(w^2)``; NaN when
        not computed.
    sup_ess : np.ndarray, shape ``(n,)``
        Supremum-based effective sample size, ``r_eff / max(w)``; NaN when
        not computed.
    r_eff : np.ndarray, shape ``(n,)``
        Relative efficiency of the draws for each data point.
    tail_len : np.ndarray of int, shape ``(n,)``
        Number of draws smoothed for each data point.
    posterior_sample_size : int
        Total number of draws, ``S_draw * C``.
    data_size : int
        Number of data points ``n``.

    Notes
    -----
    Arrays are made read-only on construction.
    """

    weights: np.ndarray = field(repr=False)
    pareto_k: np.ndarray
    ess: np.ndarray = field(repr=False)
    sup_ess: np.ndarray = field(repr=False)
    r_eff: np.ndarray = field(repr=False)
    tail_len: np.ndarray = field(repr=False)
    posterior_sample_size: int = 0
    data_size: int = 0

    def __post_init__(self):
        for name in ("weights", "pareto_k", "ess", "sup_ess", "r_eff", "tail_len"):
            arr = np.array(getattr(self, name))
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)

    # ------------------------------------------------------------------
    # Tables and diagnostics
    # ------------------------------------------------------------------

    def to_frame(self) -> pd.DataFrame:
        """Per-point ``pareto_k``, ``ess`` and ``sup_ess`` as a DataFrame."""
        return pd.DataFrame(
            {
                "pareto_k": self.pareto_k,
                "ess": self.ess,
                "sup_ess": self.sup_ess,
            },
            index=pd.RangeIndex(self.data_size, name="data"),
        )

    def diagnostics(self) -> np.ndarray:
        """Severity tier of each data point's ``pareto_k``.

        Returns
        -------
        np.ndarray of ParetoKCategory, shape ``(n,)``
        """
        return classify_pareto_k(self.pareto_k)

    def diagnostic_counts(self) -> pd.DataFrame:
        """Number and share of data points in each ``pareto_k`` tier."""
        return pareto_k_counts(self.pareto_k)

    @property
    def n_bad(self) -> int:
        """Number of data points with ``pareto_k >= 0.7``."""
        tiers = self.diagnostics()
        bad = tier_mask(tiers, ParetoKCategory.HIGH) | tier_mask(
            tiers, ParetoKCategory.SEVERE
        )
        return int(np.sum(bad))
