from __future__ import annotations

"""
Unpenalized logistic regression fit by iteratively reweighted least squares.
Matches a binomial GLM with logit link; features are standardized internally.
"""

import logging

import numpy as np

from .constants import LOG_LOSS_EPS, PREDICTION_THRESHOLD
from .errors import FitError

logger = logging.getLogger(__name__)


class LogisticRegressionIRLS:
    """
    Binomial GLM (logit link) trained with Newton-Raphson / IRLS steps.

    Convergence follows the usual GLM rule: stop once the relative change in
    deviance drops below tol. Degenerate inputs raise FitError instead of
    returning unreliable coefficients.
    """

    def __init__(self, max_iter: int = 25, tol: float = 1e-8):
        self.max_iter = max_iter
        self.tol = tol
        self.weights_: np.ndarray | None = None
        self.mean_: np.ndarray | None = None
        self.std_: np.ndarray | None = None
        self.feature_names_: list[str] = []
        self.n_iter_: int = 0
        self.deviance_: float = float("nan")

    @staticmethod
    def _sigmoid(z: np.ndarray) -> np.ndarray:
        z = np.clip(z, -500, 500)
        return 1.0 / (1.0 + np.exp(-z))

    @staticmethod
    def _add_bias(X: np.ndarray) -> np.ndarray:
        return np.hstack([np.ones((X.shape[0], 1)), X])

    @staticmethod
    def _deviance(y: np.ndarray, mu: np.ndarray) -> float:
        mu = np.clip(mu, LOG_LOSS_EPS, 1 - LOG_LOSS_EPS)
        return float(-2.0 * np.sum(y * np.log(mu) + (1 - y) * np.log(1 - mu)))

    def _standardize(self, X: np.ndarray) -> np.ndarray:
        return (X - self.mean_) / self.std_

    def fit(self, X, y):
        """Estimate coefficients; raises FitError on degenerate data or non-convergence."""
        self.feature_names_ = [str(c) for c in getattr(X, "columns", [])]
        X_arr = np.asarray(X, dtype=float)
        y_arr = np.asarray(y, dtype=float)
        if X_arr.ndim == 1:
            X_arr = X_arr.reshape(-1, 1)
        if X_arr.shape[0] == 0:
            raise FitError("no training records")

        self.mean_ = X_arr.mean(axis=0)
        self.std_ = X_arr.std(axis=0)
        self.std_[self.std_ == 0] = 1.0

        if X_arr.shape[1] == 0:
            return self._fit_intercept_only(y_arr)

        if np.unique(y_arr).size < 2:
            raise FitError(f"outcome has no variation (all {int(y_arr[0])})")

        X_bias = self._add_bias(self._standardize(X_arr))
        rank = np.linalg.matrix_rank(X_bias)
        if rank < X_bias.shape[1]:
            raise FitError(f"design matrix is rank deficient (rank {rank} < {X_bias.shape[1]})")

        weights = np.zeros(X_bias.shape[1])
        deviance = self._deviance(y_arr, self._sigmoid(X_bias @ weights))
        for step in range(1, self.max_iter + 1):
            mu = self._sigmoid(X_bias @ weights)
            w = mu * (1 - mu)
            hessian = X_bias.T @ (X_bias * w[:, None])
            gradient = X_bias.T @ (y_arr - mu)
            try:
                weights = weights + np.linalg.solve(hessian, gradient)
            except np.linalg.LinAlgError as exc:
                raise FitError(f"singular information matrix at iteration {step}") from exc

            new_deviance = self._deviance(y_arr, self._sigmoid(X_bias @ weights))
            if not np.all(np.isfinite(weights)) or not np.isfinite(new_deviance):
                raise FitError(f"non-finite coefficients at iteration {step}")

            change = abs(new_deviance - deviance) / (abs(new_deviance) + 0.1)
            deviance = new_deviance
            self.n_iter_ = step
            logger.debug("[IRLS] step=%d, deviance=%.6f", step, deviance)
            if change < self.tol:
                break
        else:
            raise FitError(f"did not converge in {self.max_iter} iterations")

        self.weights_ = weights
        self.deviance_ = deviance
        self._set_raw_coefficients()
        return self

    def _fit_intercept_only(self, y_arr: np.ndarray):
        rate = float(np.clip(y_arr.mean(), LOG_LOSS_EPS, 1 - LOG_LOSS_EPS))
        self.weights_ = np.array([np.log(rate / (1 - rate))])
        self.deviance_ = self._deviance(y_arr, np.full_like(y_arr, rate))
        self.n_iter_ = 0
        self._set_raw_coefficients()
        return self

    def _set_raw_coefficients(self):
        """Convert standardized-space weights back to original feature units."""
        scaled_coef = self.weights_[1:]
        self.coef_ = scaled_coef / self.std_
        self.intercept_ = float(self.weights_[0] - np.sum((self.mean_ / self.std_) * scaled_coef))

    def decision_function(self, X) -> np.ndarray:
        """Linear predictor for each row in X."""
        if self.weights_ is None:
            raise RuntimeError("Model is not fitted.")
        X_arr = np.asarray(X, dtype=float)
        if X_arr.ndim == 1:
            X_arr = X_arr.reshape(-1, 1)
        if X_arr.shape[1] != len(self.mean_):
            raise ValueError(f"expected {len(self.mean_)} features, got {X_arr.shape[1]}")
        return self._add_bias(self._standardize(X_arr)) @ self.weights_

    def predict_proba(self, X) -> np.ndarray:
        """Return P(y=1) for each row in X."""
        return self._sigmoid(self.decision_function(X))

    def predict(self, X, threshold: float = PREDICTION_THRESHOLD) -> np.ndarray:
        """Binary predictions; a probability equal to the threshold maps to 0."""
        return (self.predict_proba(X) > threshold).astype(int)
