"""Conversion of alternative input layouts to the ``[data, draw, chain]`` array.

Two input forms are supported besides a 3-D array:

- A 2-D matrix ``[data, sample]`` plus a ``chain_index`` vector giving the
  (1-based) chain each column belongs to.
- Any object implementing :class:`ChainSource`, i.e. an adapter around an
  external sampler's output that can produce the 3-D array itself. No such
  adapter ships with this package.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, runtime_checkable

import numpy as np

from ..errors import InvalidInputError

logger = logging.getLogger(__name__)


@runtime_checkable
class ChainSource(Protocol):
    """Adapter protocol for external MCMC chain containers."""

    def to_log_likelihood_array(self) -> np.ndarray:
        """Return values indexed as ``[data, draw, chain]``."""
        ...


def from_chains(source: ChainSource) -> np.ndarray:
    """Extract the ``[data, draw, chain]`` array from a chain adapter."""
    if not isinstance(source, ChainSource):
        raise InvalidInputError(
            f"{type(source).__name__} does not implement "
            "`to_log_likelihood_array()`."
        )
    arr = np.asarray(source.to_log_likelihood_array(), dtype=np.float64)
    if arr.ndim != 3:
        raise InvalidInputError(
            "Chain adapters must return an array indexed as [data, draw, chain]; "
            f"got shape {arr.shape}."
        )
    return arr


def assume_one_chain(matrix: np.ndarray) -> np.ndarray:
    """Chain index placing every column of ``matrix`` in a single chain."""
    logger.info(
        "Chain information was not provided; all samples are assumed to be "
        "drawn from a single chain."
    )
    return np.ones(np.shape(matrix)[1], dtype=int)


def convert_to_array(
    matrix: np.ndarray, chain_index: Optional[np.ndarray] = None
) -> np.ndarray:
    """Reshape a ``[data, sample]`` matrix into ``[data, draw, chain]``.

    Parameters
    ----------
    matrix : array-like, shape ``(n, S)``
        Values for each data point and posterior sample.
    chain_index : array-like of int, shape ``(S,)``, optional
        ``chain_index[s]`` is the chain (numbered from 1) that column ``s``
        belongs to. Defaults to a single chain.

    Returns
    -------
    np.ndarray, shape ``(n, S // C, C)``
        Column order within each chain is preserved.

    Raises
    ------
    InvalidInputError
        If some columns have no chain, chains are not numbered ``1..C`` or
        chains have different lengths.

    Examples
    --------
    >>> m = np.arange(40.0).reshape(5, 8)
    >>> convert_to_array(m, [1, 1, 1, 1, 2, 2, 2, 2]).shape
    (5, 4, 2)
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    if matrix.ndim != 2:
        raise InvalidInputError(
            f"Expected a [data, sample] matrix; got {matrix.ndim} dimensions."
        )
    if chain_index is None:
        chain_index = assume_one_chain(matrix)
    chain_index = np.asarray(chain_index).astype(int).ravel()

    n, S = matrix.shape
    if S == 0:
        raise InvalidInputError("Invalid input (matrix has no samples).")
    if chain_index.shape[0] != S:
        raise InvalidInputError("Some entries do not have a chain index.")

    chains = np.unique(chain_index)
    n_chains = int(chains.max())
    if not np.array_equal(chains, np.arange(1, n_chains + 1)):
        raise InvalidInputError(
            "Indices must be numbered from 1 through the total number of chains."
        )

    counts = np.bincount(chain_index)[1:]
    if not np.all(counts == counts[0]):
        raise InvalidInputError("All chains must be of equal length.")

    out = np.empty((n, S // n_chains, n_chains), dtype=matrix.dtype)
    for c in range(n_chains):
        out[:, :, c] = matrix[:, chain_index == c + 1]
    return out
