"""
Shared test fixtures and configuration for paretosmooth tests.
"""

import os

import numpy as np
import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--max-workers",
        default="4",
        help="Thread pool size used by PSIS in tests (integer)",
    )


def pytest_configure(config):
    """Keep JAX (pulled in by NumPyro's diagnostics) on the CPU."""
    os.environ.setdefault("JAX_PLATFORM_NAME", "cpu")


@pytest.fixture(scope="session")
def max_workers(request):
    return int(request.config.getoption("--max-workers"))


@pytest.fixture
def rng():
    """Provide a consistent random generator for tests."""
    return np.random.default_rng(42)


@pytest.fixture(scope="session")
def normal_log_lik():
    """Well-behaved log-likelihood array indexed [data, draw, chain].

    Log-likelihoods drawn from a moderate-variance normal, so importance
    weights have light tails and k-hat should be low.
    """
    rng = np.random.default_rng(2024)
    return rng.normal(-3.0, 0.3, size=(50, 1000, 4))


@pytest.fixture(scope="session")
def small_log_lik():
    """Small log-likelihood array for fast tests."""
    rng = np.random.default_rng(7)
    return rng.normal(-2.0, 0.5, size=(8, 200, 2))
