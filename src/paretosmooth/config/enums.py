"""
Enums and constants for PSIS and LOO configuration.

All fixed choices a caller can make (where the posterior draws came from,
which cross-validation method to run) and the diagnostic tiers the library
reports are collected here, so string options are validated in one place.
"""

from enum import Enum

# ==============================================================================
# Enums for run configuration
# ==============================================================================


class SampleSource(str, Enum):
    """Origin of the posterior draws.

    Only MCMC draws are autocorrelated; draws from variational inference or
    other independent samplers are treated as independent.
    """

    MCMC = "mcmc"
    VI = "vi"
    OTHER = "other"

    @property
    def autocorrelated(self) -> bool:
        """Whether draws from this source need an autocorrelation adjustment."""
        return self is SampleSource.MCMC


# ------------------------------------------------------------------------------


class LooMethod(str, Enum):
    """Supported approximate leave-one-out methods."""

    PSIS = "psis"


# ==============================================================================
# Diagnostic tiers
# ==============================================================================


class ParetoKCategory(str, Enum):
    """Severity tiers for the fitted Pareto shape ``k``.

    Thresholds follow Vehtari et al. (2019): ``k < 0.5`` is fine,
    ``0.5 <= k < 0.7`` may converge slowly, ``0.7 <= k < 1`` means PSIS has
    likely failed and ``k >= 1`` makes the estimates unusable.
    """

    ACCEPTABLE = "acceptable"
    INFORMATIONAL = "informational"
    HIGH = "high"
    SEVERE = "severe"


# Lower bounds (inclusive) of each tier, from most to least severe
PARETO_K_THRESHOLDS = (
    (ParetoKCategory.SEVERE, 1.0),
    (ParetoKCategory.HIGH, 0.7),
    (ParetoKCategory.INFORMATIONAL, 0.5),
)
