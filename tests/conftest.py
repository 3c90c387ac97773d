"""Pytest fixtures for admit_cv tests."""

import numpy as np
import pandas as pd
import pytest

from admit_cv import simulate_admissions


@pytest.fixture
def admissions() -> pd.DataFrame:
    """A 200-record simulated admissions table."""
    return simulate_admissions(200, seed=7)


@pytest.fixture
def balanced_admissions() -> pd.DataFrame:
    """100 records with exactly 50 admitted."""
    return simulate_admissions(100, seed=11, admit_rate=0.5)


@pytest.fixture
def tiny_admissions() -> pd.DataFrame:
    """20 records with a hand-written layout."""
    rng = np.random.default_rng(3)
    return pd.DataFrame(
        {
            "admit": [0, 1] * 10,
            "gre_v": rng.integers(130, 171, 20),
            "gre_q": rng.integers(130, 171, 20),
            "gre_w": rng.integers(0, 13, 20) / 2,
            "gpa": np.round(rng.uniform(2.5, 4.0, 20), 2),
            "gender": ["Male", "Female"] * 10,
        }
    )
