"""
Repeated k-fold evaluation of logistic-regression models of graduate admission.

This package contains data preparation helpers, an IRLS logistic regression,
the resampler, and the metric/summary utilities used by main.py.
"""

from .config import EvaluationConfig
from .constants import OUTCOME, PREDICTORS
from .data_prep import (
    build_design_matrix,
    load_admissions,
    simulate_admissions,
    validate_schema,
)
from .errors import (
    CrossValidationError,
    FitError,
    InvalidConfig,
    NumericGuardError,
    SchemaError,
)
from .evaluation import (
    CrossValidationResult,
    FittedModel,
    fit_split_model,
    run_cross_validation,
    score_split_model,
)
from .logreg import LogisticRegressionIRLS
from .metrics import split_metrics, summarize_metric
from .model_specs import ACADEMICS, DEFAULT_MODEL_SPECS, EMPTY, FULL, ModelSpec
from .resampling import Split, repeated_kfold

__all__ = [
    "OUTCOME",
    "PREDICTORS",
    "EvaluationConfig",
    "build_design_matrix",
    "load_admissions",
    "simulate_admissions",
    "validate_schema",
    "CrossValidationError",
    "FitError",
    "InvalidConfig",
    "NumericGuardError",
    "SchemaError",
    "CrossValidationResult",
    "FittedModel",
    "fit_split_model",
    "run_cross_validation",
    "score_split_model",
    "LogisticRegressionIRLS",
    "split_metrics",
    "summarize_metric",
    "ACADEMICS",
    "DEFAULT_MODEL_SPECS",
    "EMPTY",
    "FULL",
    "ModelSpec",
    "Split",
    "repeated_kfold",
]
