"""Pytest configuration and shared fixtures for bfgsmin tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- Logging reset between tests
"""

import logging
import os

import numpy as np
import pytest
import torch

from bfgsmin.logging import set_log_level


def _seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    """
    return np.random.default_rng(_seed())


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Seed the global numpy and torch generators for every test."""
    np.random.seed(_seed())
    torch.manual_seed(_seed())


@pytest.fixture(scope="function", autouse=True)
def reset_log_level():
    """Restore the default bfgsmin log level after each test."""
    yield
    set_log_level(logging.WARNING)
