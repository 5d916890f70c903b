"""Run configuration for PSIS and PSIS-LOO using Pydantic."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import InvalidInputError
from .enums import SampleSource

# ==============================================================================
# PSIS Configuration Class
# ==============================================================================


class PsisConfig(BaseModel):
    """
    Options controlling a PSIS (or PSIS-LOO) run.

    Parameters
    ----------
    source : SampleSource
        Origin of the posterior draws. ``"mcmc"`` draws are adjusted for
        autocorrelation when ``r_eff`` is not supplied; ``"vi"`` and
        ``"other"`` draws are assumed independent (``r_eff = 1``). Matched
        case-insensitively.
    calc_ess : bool
        Whether to compute the variance- and supremum-based effective sample
        sizes. When ``False`` both are filled with NaN.
    max_workers : int, optional
        Size of the thread pool smoothing data points in parallel. ``None``
        uses ``os.cpu_count()``.
    wip : bool
        Apply the weakly informative prior that shrinks the fitted Pareto
        shape towards 0.5.
    min_grid_pts : int
        Minimum number of grid points used by the GPD profile-likelihood fit.

    Notes
    -----
    Configuration objects are immutable; unknown options are rejected.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    source: SampleSource = Field(
        SampleSource.MCMC, description="Origin of the posterior draws"
    )
    calc_ess: bool = Field(True, description="Compute effective sample sizes")
    max_workers: Optional[int] = Field(
        None, gt=0, description="Thread pool size for per-point smoothing"
    )
    wip: bool = Field(True, description="Shrink k towards 0.5")
    min_grid_pts: int = Field(
        30, ge=1, description="Minimum GPD fit grid points"
    )

    # --------------------------------------------------------------------------
    # Validation Methods
    # --------------------------------------------------------------------------

    @field_validator("source", mode="before")
    @classmethod
    def normalize_source(cls, v):
        """Accept sources regardless of case."""
        if isinstance(v, SampleSource):
            return v
        valid_sources = [s.value for s in SampleSource]
        if str(v).lower() not in valid_sources:
            raise ValueError(
                f"{v} is not a valid source. Valid sources are {valid_sources}."
            )
        return str(v).lower()


# ------------------------------------------------------------------------------


def make_config(config: Optional[PsisConfig] = None, **options) -> PsisConfig:
    """Build a ``PsisConfig``, reporting bad options as ``InvalidInputError``.

    Parameters
    ----------
    config : PsisConfig, optional
        Existing configuration. Any non-``None`` keyword in ``options``
        overrides the matching field.
    **options
        Field values. ``None`` values are ignored so that keyword defaults of
        public functions fall through to the configuration defaults.
    """
    overrides = {k: v for k, v in options.items() if v is not None}
    try:
        if config is None:
            return PsisConfig(**overrides)
        if not overrides:
            return config
        return PsisConfig(**{**config.model_dump(), **overrides})
    except ValidationError as e:
        raise InvalidInputError(str(e)) from e
