"""Pareto-smoothed importance sampling.

- ``psis()``: smooth the importance ratios of many data points and return a
  :class:`Psis` result with normalized weights and diagnostics.
- ``psis_smooth()`` / ``smooth_tail()``: smoothing of a single vector.
- ``gpd_fit()`` / ``gpd_quantile()``: generalized Pareto fit and quantiles.
- ``relative_eff()``, ``psis_ess()``, ``sup_ess()``: effective sample sizes.
- ``convert_to_array()`` / ``from_chains()``: alternative input layouts.
"""

from ._gpd import gpd_fit, gpd_quantile
from ._tail import MIN_TAIL_LEN, default_tail_length, smooth_tail, psis_smooth
from ._ess import relative_eff, psis_ess, sup_ess
from ._chains import ChainSource, assume_one_chain, convert_to_array, from_chains
from ._psis import psis
from .results import Psis

__all__ = [
    "psis",
    "Psis",
    "psis_smooth",
    "smooth_tail",
    "default_tail_length",
    "MIN_TAIL_LEN",
    "gpd_fit",
    "gpd_quantile",
    "relative_eff",
    "psis_ess",
    "sup_ess",
    "ChainSource",
    "assume_one_chain",
    "convert_to_array",
    "from_chains",
]
