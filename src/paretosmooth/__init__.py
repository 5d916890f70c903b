"""
paretosmooth: Pareto-smoothed importance sampling and PSIS-LOO

Computes Pareto-smoothed importance sampling (PSIS) weights from posterior
draws and uses them to estimate leave-one-out cross-validation (LOO-CV)
predictive performance of Bayesian models.

Quick start
-----------

>>> from paretosmooth import psis_loo
>>> result = psis_loo(log_lik)          # log_lik[data, draw, chain]
>>> result.estimates                    # summary table (pandas)
>>> result.pointwise                    # per data point, with pareto_k
>>> result.diagnostic_counts()          # Pareto k tiers
"""

from .errors import InvalidInputError, DegenerateTailError
from .config import PsisConfig, SampleSource, LooMethod, ParetoKCategory
from .diagnostics import classify_pareto_k, pareto_k_counts, tier_mask, warn_pareto_k
from .psis import (
    Psis,
    psis,
    psis_smooth,
    gpd_fit,
    gpd_quantile,
    default_tail_length,
    relative_eff,
    psis_ess,
    sup_ess,
    ChainSource,
    convert_to_array,
    from_chains,
)
from .loo import PsisLoo, psis_loo, loo, naive_lpd

__version__ = "0.1.0"

__all__ = [
    # Errors
    "InvalidInputError",
    "DegenerateTailError",
    # Configuration
    "PsisConfig",
    "SampleSource",
    "LooMethod",
    "ParetoKCategory",
    # PSIS
    "Psis",
    "psis",
    "psis_smooth",
    "gpd_fit",
    "gpd_quantile",
    "default_tail_length",
    "relative_eff",
    "psis_ess",
    "sup_ess",
    "ChainSource",
    "convert_to_array",
    "from_chains",
    # LOO
    "PsisLoo",
    "psis_loo",
    "loo",
    "naive_lpd",
    # Diagnostics
    "classify_pareto_k",
    "pareto_k_counts",
    "tier_mask",
    "warn_pareto_k",
]
