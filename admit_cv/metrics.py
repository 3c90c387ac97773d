from __future__ import annotations

"""
Metric helpers: per-split accuracy and log loss, then per-model percentile summaries.
"""

import logging
from typing import Sequence

import numpy as np
import pandas as pd

from .constants import DEFAULT_CONFIDENCE_LEVELS, LOG_LOSS_EPS, SPLIT_KEYS
from .errors import InvalidConfig, NumericGuardError

logger = logging.getLogger(__name__)

# Linear interpolation between order statistics (R's type 7)
PERCENTILE_METHOD = "linear"


def clamp_probabilities(probs, eps: float = LOG_LOSS_EPS) -> np.ndarray:
    """Clip probabilities into [eps, 1 - eps] so log loss stays finite."""
    p = np.asarray(probs, dtype=float)
    if np.isnan(p).any():
        raise NumericGuardError("fitted probabilities contain NaN")
    if ((p < 0) | (p > 1)).any():
        raise NumericGuardError("fitted probabilities fall outside [0, 1]")

    clamped = np.clip(p, eps, 1 - eps)
    n_clamped = int(np.count_nonzero(clamped != p))
    if n_clamped:
        logger.warning("Clamped %d fitted probabilities into [%g, 1 - %g]", n_clamped, eps, eps)
    return clamped


def log_loss_terms(y_true, probs, eps: float = LOG_LOSS_EPS) -> np.ndarray:
    """Per-record negative log-likelihood of the observed outcome."""
    y = np.asarray(y_true, dtype=float)
    p = clamp_probabilities(probs, eps)
    return -(y * np.log(p) + (1 - y) * np.log(1 - p))


def split_metrics(predictions: pd.DataFrame, eps: float = LOG_LOSS_EPS) -> pd.DataFrame:
    """
    Accuracy and log loss for every (repeat, fold, model) group.

    Rows are sorted before grouping so the result does not depend on the order
    in which predictions arrived.
    """
    keys = list(SPLIT_KEYS)
    ordered = predictions.sort_values(keys + ["row"], kind="stable").reset_index(drop=True)
    ordered = ordered.assign(
        loss=log_loss_terms(ordered["admit"], ordered["fitted"], eps),
        correct=ordered["correct"].astype(float),
    )
    metrics = (
        ordered.groupby(keys, sort=True, observed=True)
        .agg(
            n=("correct", "size"),
            accuracy=("correct", "mean"),
            log_loss=("loss", "mean"),
        )
        .reset_index()
    )
    return metrics


def confidence_bounds(level: float) -> tuple[float, float]:
    """Two-sided percentile pair for a confidence level in percent, e.g. 95 -> (2.5, 97.5)."""
    if not 0 < level < 100:
        raise InvalidConfig(f"confidence level {level} must lie in (0, 100)")
    tail = (100 - level) / 2
    return tail, 100 - tail


def _level_label(level: float) -> str:
    return f"{level:g}"


def summarize_metric(
    metrics: pd.DataFrame,
    column: str = "log_loss",
    confidence_levels: Sequence[float] = DEFAULT_CONFIDENCE_LEVELS,
    model_order: Sequence[str] | None = None,
) -> pd.DataFrame:
    """
    Median and percentile bands of one metric per model, across all splits.

    Output columns: model, n_splits, median, then lower_<c>/upper_<c> for each
    confidence level c. Every model uses the same percentile estimator.
    """
    bounds = {level: confidence_bounds(level) for level in confidence_levels}
    if model_order is None:
        model_order = list(dict.fromkeys(metrics["model"]))

    rows = []
    for model in model_order:
        values = metrics.loc[metrics["model"] == model, column].to_numpy(dtype=float)
        if values.size == 0:
            continue
        row = {
            "model": model,
            "n_splits": int(values.size),
            "median": float(np.median(values)),
        }
        for level, (low, high) in bounds.items():
            lower, upper = np.percentile(values, [low, high], method=PERCENTILE_METHOD)
            row[f"lower_{_level_label(level)}"] = float(lower)
            row[f"upper_{_level_label(level)}"] = float(upper)
        rows.append(row)

    return pd.DataFrame(rows)


def metric_distribution(metrics: pd.DataFrame, column: str = "accuracy") -> pd.DataFrame:
    """Value counts of a metric per model, for downstream density plots."""
    counts = (
        metrics.groupby(["model", column], sort=True, observed=True)
        .size()
        .rename("count")
        .reset_index()
    )
    counts["share"] = counts["count"] / counts.groupby("model", observed=True)["count"].transform("sum")
    return counts
