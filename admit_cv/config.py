from __future__ import annotations

"""
Run configuration for repeated k-fold evaluation. Fixed once the pipeline starts.
"""

import math
from dataclasses import dataclass

from .constants import (
    DEFAULT_CONFIDENCE_LEVELS,
    DEFAULT_FOLD_COUNT,
    DEFAULT_REPEAT_COUNT,
    LOG_LOSS_EPS,
)
from .errors import InvalidConfig
from .model_specs import DEFAULT_MODEL_SPECS, ModelSpec, validate_model_specs


@dataclass(frozen=True)
class EvaluationConfig:
    """Configuration for one cross-validation run."""

    # Seed for the resampler; every repeat's stream is derived from it
    random_seed: int

    fold_count: int = DEFAULT_FOLD_COUNT
    repeat_count: int = DEFAULT_REPEAT_COUNT
    model_specs: tuple[ModelSpec, ...] = DEFAULT_MODEL_SPECS

    # Two-sided percentile bands, in percent
    confidence_levels: tuple[float, ...] = DEFAULT_CONFIDENCE_LEVELS

    # Keep the outcome balance of each assessment fold close to the whole dataset
    stratify: bool = False

    # Workers for the fit/score stage (joblib semantics, 1 = serial)
    n_jobs: int = 1

    log_loss_eps: float = LOG_LOSS_EPS

    def validate(self, n_records: int | None = None) -> None:
        """Raise InvalidConfig for any parameter out of range.

        When n_records is given the fold count is also checked against it.
        """
        if not isinstance(self.random_seed, int) or isinstance(self.random_seed, bool):
            raise InvalidConfig(f"random_seed must be an integer, got {self.random_seed!r}")
        if self.random_seed < 0:
            raise InvalidConfig("random_seed must be non-negative")
        if self.fold_count < 2:
            raise InvalidConfig(f"fold_count must be at least 2, got {self.fold_count}")
        if n_records is not None and self.fold_count > n_records:
            raise InvalidConfig(
                f"fold_count={self.fold_count} exceeds the dataset size {n_records}"
            )
        if self.repeat_count < 1:
            raise InvalidConfig(f"repeat_count must be at least 1, got {self.repeat_count}")

        if not self.confidence_levels:
            raise InvalidConfig("at least one confidence level is required")
        for level in self.confidence_levels:
            if not math.isfinite(level) or not 0 < level < 100:
                raise InvalidConfig(f"confidence level {level} must lie in (0, 100)")

        if self.n_jobs == 0:
            raise InvalidConfig("n_jobs must be non-zero")
        if not 0 < self.log_loss_eps < 0.5:
            raise InvalidConfig(f"log_loss_eps must lie in (0, 0.5), got {self.log_loss_eps}")

        validate_model_specs(self.model_specs)
