"""Approximate leave-one-out cross-validation.

- ``psis_loo()``: PSIS-LOO estimates with pointwise values and diagnostics.
- ``loo()``: dispatch over the supported ``LooMethod`` values.
- ``naive_lpd()``: in-sample log predictive density.
"""

from ._naive_lpd import naive_lpd
from ._loo import psis_loo, loo
from .results import PsisLoo

__all__ = ["psis_loo", "loo", "naive_lpd", "PsisLoo"]
