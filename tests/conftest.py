"""Pytest configuration and shared fixtures for the minimizers tests.

This module provides:
- A deterministic numpy RNG fixture
- Small objectives reused across test modules
"""

import os

import numpy as np
import pytest


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    This ensures tests are reproducible while allowing override for debugging.

    Returns:
        A seeded numpy.random.Generator instance.
    """
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    return np.random.default_rng(seed)


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Auto-use fixture to set the global numpy seed for reproducibility."""
    np.random.seed(int(os.environ.get("TEST_RNG_SEED", "0")))


@pytest.fixture
def spd_quadratic():
    """Oracle for ``0.5 x'Ax - b'x`` with a fixed SPD ``A``, plus its minimizer."""
    a_mat = np.array([[3.0, 1.0], [1.0, 2.0]])
    b_vec = np.array([1.0, -1.0])

    def oracle(x):
        return 0.5 * x @ a_mat @ x - b_vec @ x, a_mat @ x - b_vec, a_mat

    return oracle, np.linalg.solve(a_mat, b_vec)
