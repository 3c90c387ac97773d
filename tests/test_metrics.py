"""Tests for per-split metrics and per-model summaries."""

import numpy as np
import pandas as pd
import pytest

from admit_cv.errors import InvalidConfig, NumericGuardError
from admit_cv.metrics import (
    clamp_probabilities,
    confidence_bounds,
    log_loss_terms,
    metric_distribution,
    split_metrics,
    summarize_metric,
)


def _predictions():
    return pd.DataFrame(
        {
            "repeat": [1, 1, 1, 1, 1, 1],
            "fold": [1, 1, 2, 2, 1, 1],
            "model": ["empty"] * 4 + ["full"] * 2,
            "row": [0, 1, 2, 3, 0, 1],
            "admit": [1, 0, 1, 1, 1, 0],
            "fitted": [0.8, 0.4, 0.3, 0.9, 1.0, 0.0],
            "prediction": [1, 0, 0, 1, 1, 0],
            "correct": [True, True, False, True, True, True],
        }
    )


class TestLogLoss:
    """Tests for probability clamping and log loss terms."""

    def test_exact_zero_and_one_are_clamped(self):
        clamped = clamp_probabilities([0.0, 0.5, 1.0], eps=1e-6)
        assert clamped.tolist() == [1e-6, 0.5, 1 - 1e-6]

    def test_terms_are_finite_and_non_negative(self):
        y = np.array([1, 0, 1, 0])
        p = np.array([0.0, 1.0, 1.0, 0.0])
        terms = log_loss_terms(y, p)
        assert np.all(np.isfinite(terms))
        assert np.all(terms >= 0)
        assert terms[2] == pytest.approx(0.0, abs=1e-12)

    def test_matches_closed_form(self):
        terms = log_loss_terms([1, 0], [0.8, 0.4])
        assert terms.tolist() == pytest.approx([-np.log(0.8), -np.log(0.6)])

    def test_nan_probability_raises(self):
        with pytest.raises(NumericGuardError):
            clamp_probabilities([0.2, np.nan])

    def test_out_of_range_probability_raises(self):
        with pytest.raises(NumericGuardError):
            clamp_probabilities([1.2])


class TestSplitMetrics:
    """Tests for the (repeat, fold, model) aggregation."""

    def test_accuracy_and_log_loss(self):
        metrics = split_metrics(_predictions())
        assert len(metrics) == 3

        first = metrics[(metrics["model"] == "empty") & (metrics["fold"] == 1)].iloc[0]
        assert first["n"] == 2
        assert first["accuracy"] == 1.0
        assert first["log_loss"] == pytest.approx((-np.log(0.8) - np.log(0.6)) / 2)

        second = metrics[(metrics["model"] == "empty") & (metrics["fold"] == 2)].iloc[0]
        assert second["accuracy"] == 0.5

        clamped = metrics[metrics["model"] == "full"].iloc[0]
        assert np.isfinite(clamped["log_loss"])
        assert clamped["log_loss"] >= 0

    def test_result_does_not_depend_on_row_order(self):
        predictions = _predictions()
        shuffled = predictions.sample(frac=1.0, random_state=4)
        pd.testing.assert_frame_equal(split_metrics(predictions), split_metrics(shuffled))

    def test_accuracy_in_unit_interval(self):
        metrics = split_metrics(_predictions())
        assert metrics["accuracy"].between(0, 1).all()


class TestSummaries:
    """Tests for the per-model percentile summaries."""

    def test_confidence_bounds(self):
        assert confidence_bounds(80) == (10, 90)
        assert confidence_bounds(95) == (2.5, 97.5)
        assert confidence_bounds(99) == pytest.approx((0.5, 99.5))

    @pytest.mark.parametrize("level", [0, 100, -5, 120])
    def test_invalid_level(self, level):
        with pytest.raises(InvalidConfig):
            confidence_bounds(level)

    def test_bands_are_monotonic_and_nested(self):
        rng = np.random.default_rng(0)
        metrics = pd.DataFrame(
            {
                "model": ["a"] * 100 + ["b"] * 100,
                "log_loss": np.concatenate([rng.gamma(2.0, 0.3, 100), rng.gamma(3.0, 0.2, 100)]),
            }
        )
        summary = summarize_metric(metrics, "log_loss", (80, 95, 99))
        assert summary["model"].tolist() == ["a", "b"]
        for _, row in summary.iterrows():
            assert row["lower_80"] <= row["median"] <= row["upper_80"]
            assert row["lower_99"] <= row["lower_95"] <= row["lower_80"]
            assert row["upper_80"] <= row["upper_95"] <= row["upper_99"]

    def test_linear_interpolation(self):
        metrics = pd.DataFrame({"model": ["a"] * 5, "log_loss": [1.0, 2.0, 3.0, 4.0, 5.0]})
        row = summarize_metric(metrics, "log_loss", (80,)).iloc[0]
        assert row["median"] == 3.0
        assert row["lower_80"] == pytest.approx(1.4)
        assert row["upper_80"] == pytest.approx(4.6)
        assert row["n_splits"] == 5

    def test_model_order_is_kept(self):
        metrics = pd.DataFrame({"model": ["x", "y", "z"], "accuracy": [0.5, 0.6, 0.7]})
        summary = summarize_metric(metrics, "accuracy", (95,), model_order=["z", "x", "y"])
        assert summary["model"].tolist() == ["z", "x", "y"]
        assert summary.columns.tolist() == ["model", "n_splits", "median", "lower_95", "upper_95"]

    def test_distribution_shares(self):
        metrics = pd.DataFrame(
            {"model": ["a", "a", "a", "b"], "accuracy": [0.5, 0.5, 0.75, 1.0]}
        )
        dist = metric_distribution(metrics, "accuracy")
        assert dist[dist["model"] == "a"]["count"].tolist() == [2, 1]
        assert dist.groupby("model")["share"].sum().tolist() == pytest.approx([1.0, 1.0])
