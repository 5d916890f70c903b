"""Exceptions raised by paretosmooth.

Two failure modes are fatal for a whole PSIS call:

- ``InvalidInputError``: the arrays or options handed to the library are
  malformed (non-finite values, empty arrays, mismatched ``r_eff``, unknown
  sample source, malformed ``chain_index``).
- ``DegenerateTailError``: the upper tail of one data point cannot be fitted
  by a generalized Pareto distribution (too short, or constant).

Both subclass ``ValueError`` so callers catching ``ValueError`` keep working.
An infinite importance ratio in a tail is *not* an error: the affected data
point gets ``pareto_k = inf`` and the batch continues.
"""

LIKELY_ERROR_CAUSES = """\
1. Incorrect inputs -- check your program for bugs. If you provided an `r_eff`
   argument, double check it is correct.
2. Your chains failed to converge. Check diagnostics.
3. You do not have enough posterior samples (ESS < ~25).
"""


class InvalidInputError(ValueError):
    """Raised when the inputs to a PSIS or LOO computation are invalid."""


class DegenerateTailError(ValueError):
    """Raised when a tail cannot be fitted with a generalized Pareto distribution."""
