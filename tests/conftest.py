"""Shared fixtures."""

import random
import pytest


@pytest.fixture
def rng():
    """Deterministic randomness for reproducible tests."""
    return random.Random(42)
