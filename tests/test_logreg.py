"""Tests for the IRLS logistic regression."""

import numpy as np
import pandas as pd
import pytest
from sklearn.linear_model import LogisticRegression

from admit_cv.errors import FitError
from admit_cv.logreg import LogisticRegressionIRLS


def _simulated_problem(n=500, seed=0):
    rng = np.random.default_rng(seed)
    X = rng.normal(size=(n, 2))
    logits = -0.3 + 1.2 * X[:, 0] - 0.8 * X[:, 1]
    y = (rng.uniform(size=n) < 1 / (1 + np.exp(-logits))).astype(int)
    return X, y


class TestLogisticRegressionIRLS:
    """Tests for fitting and prediction."""

    def test_score_equations_hold_at_solution(self):
        """The gradient of the log-likelihood vanishes at the fitted coefficients."""
        X, y = _simulated_problem()
        model = LogisticRegressionIRLS().fit(X, y)
        mu = model.predict_proba(X)
        X_bias = np.hstack([np.ones((len(X), 1)), X])
        assert np.allclose(X_bias.T @ (y - mu), 0.0, atol=1e-6)
        assert 0 < model.n_iter_ <= model.max_iter

    def test_matches_unpenalized_sklearn(self):
        X, y = _simulated_problem(seed=1)
        model = LogisticRegressionIRLS().fit(X, y)
        reference = LogisticRegression(C=1e10, max_iter=10000, tol=1e-10).fit(X, y)
        assert np.allclose(model.coef_, reference.coef_[0], atol=1e-3)
        assert model.intercept_ == pytest.approx(reference.intercept_[0], abs=1e-3)

    def test_raw_coefficients_reproduce_linear_predictor(self):
        X, y = _simulated_problem(seed=2)
        X = X * [10.0, 0.1] + [150.0, 3.0]
        model = LogisticRegressionIRLS().fit(X, y)
        expected = model.intercept_ + X @ model.coef_
        assert np.allclose(model.decision_function(X), expected)

    def test_feature_names_from_dataframe(self):
        X, y = _simulated_problem(n=100, seed=3)
        model = LogisticRegressionIRLS().fit(pd.DataFrame(X, columns=["a", "b"]), y)
        assert model.feature_names_ == ["a", "b"]

    def test_intercept_only_predicts_training_rate(self):
        y = np.array([1, 0, 0, 1, 0, 0, 0, 1])
        X = np.empty((len(y), 0))
        model = LogisticRegressionIRLS().fit(X, y)
        assert np.allclose(model.predict_proba(np.empty((3, 0))), 3 / 8)

    def test_intercept_only_balanced_is_exactly_half(self):
        """A probability of exactly 0.5 is predicted as the negative class."""
        y = np.array([0, 1] * 5)
        model = LogisticRegressionIRLS().fit(np.empty((10, 0)), y)
        probs = model.predict_proba(np.empty((4, 0)))
        assert np.all(probs == 0.5)
        assert np.all(model.predict(np.empty((4, 0))) == 0)

    def test_intercept_only_without_variation_does_not_fail(self):
        model = LogisticRegressionIRLS().fit(np.empty((5, 0)), np.zeros(5))
        probs = model.predict_proba(np.empty((2, 0)))
        assert np.all((probs > 0) & (probs < 1e-10))

    def test_predict_before_fit(self):
        with pytest.raises(RuntimeError):
            LogisticRegressionIRLS().predict_proba(np.zeros((1, 1)))


class TestFitErrors:
    """Degenerate analysis sets raise FitError."""

    def test_rank_deficient_design(self):
        X, y = _simulated_problem(n=100)
        X = np.hstack([X, X[:, :1] * 2.0])
        with pytest.raises(FitError, match="rank deficient"):
            LogisticRegressionIRLS().fit(X, y)

    def test_constant_column_is_rank_deficient(self):
        X, y = _simulated_problem(n=100)
        X[:, 1] = 4.0
        with pytest.raises(FitError, match="rank deficient"):
            LogisticRegressionIRLS().fit(X, y)

    def test_outcome_without_variation(self):
        X, _ = _simulated_problem(n=50)
        with pytest.raises(FitError, match="no variation"):
            LogisticRegressionIRLS().fit(X, np.ones(50))

    def test_non_convergence(self):
        X, y = _simulated_problem(n=200)
        with pytest.raises(FitError, match="did not converge"):
            LogisticRegressionIRLS(max_iter=1).fit(X, y)
