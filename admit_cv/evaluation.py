from __future__ import annotations

"""
Repeated cross-validation driver: fit every model spec on every split, score the
held-out rows, and aggregate the scores per split and per model.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from .config import EvaluationConfig
from .constants import OUTCOME, PREDICTION_THRESHOLD, SPLIT_KEYS
from .data_prep import build_design_matrix, validate_schema
from .errors import FitError
from .logreg import LogisticRegressionIRLS
from .metrics import split_metrics, summarize_metric
from .model_specs import ModelSpec
from .resampling import Split, check_partition, repeated_kfold

logger = logging.getLogger(__name__)

PREDICTION_COLUMNS = list(SPLIT_KEYS) + ["row", OUTCOME, "fitted", "prediction", "correct"]


@dataclass(frozen=True)
class FittedModel:
    """Coefficients of one model spec fit on one split's analysis set."""

    spec: ModelSpec
    repeat: int
    fold: int
    estimator: LogisticRegressionIRLS

    def coefficients(self) -> pd.Series:
        """Intercept and coefficients in original feature units."""
        names = ["(Intercept)"] + self.estimator.feature_names_
        values = np.concatenate([[self.estimator.intercept_], self.estimator.coef_])
        return pd.Series(values, index=names, name=self.spec.name)


@dataclass
class CrossValidationResult:
    splits: list[Split]
    predictions: pd.DataFrame
    metrics: pd.DataFrame
    log_loss_summary: pd.DataFrame
    accuracy_summary: pd.DataFrame

    def write_csv(self, output_dir: Path) -> dict[str, Path]:
        """Write every result table to output_dir as CSV and return the paths."""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        tables = {
            "predictions": self.predictions,
            "split_metrics": self.metrics,
            "log_loss_summary": self.log_loss_summary,
            "accuracy_summary": self.accuracy_summary,
        }
        paths = {}
        for name, table in tables.items():
            path = output_dir / f"{name}.csv"
            table.to_csv(path, index=False)
            paths[name] = path
        logger.info("Wrote %d result tables to %s", len(paths), output_dir)
        return paths


def fit_split_model(data: pd.DataFrame, split: Split, spec: ModelSpec) -> FittedModel:
    """Fit one spec on the split's analysis rows; FitError names the split and model."""
    analysis = data.iloc[split.analysis]
    X_train = build_design_matrix(analysis, spec)
    y_train = analysis[OUTCOME].to_numpy(dtype=float)
    try:
        estimator = LogisticRegressionIRLS().fit(X_train, y_train)
    except FitError as exc:
        raise FitError(exc.message, repeat=split.repeat, fold=split.fold, model=spec.name) from exc
    logger.debug(
        "%s %s fit in %d iterations (deviance %.4f)",
        split.id,
        spec.name,
        estimator.n_iter_,
        estimator.deviance_,
    )
    return FittedModel(spec=spec, repeat=split.repeat, fold=split.fold, estimator=estimator)


def score_split_model(data: pd.DataFrame, fitted: FittedModel, split: Split) -> pd.DataFrame:
    """One prediction row per assessment record, tagged with repeat, fold and model."""
    if (fitted.repeat, fitted.fold) != (split.repeat, split.fold):
        raise ValueError(
            f"model fit on Repeat{fitted.repeat:02d}/Fold{fitted.fold:02d} cannot score {split.id}"
        )
    assessment = data.iloc[split.assessment]
    probs = fitted.estimator.predict_proba(build_design_matrix(assessment, fitted.spec))
    observed = assessment[OUTCOME].to_numpy(dtype=int)
    prediction = (probs > PREDICTION_THRESHOLD).astype(int)

    return pd.DataFrame(
        {
            "repeat": split.repeat,
            "fold": split.fold,
            "model": fitted.spec.name,
            "row": split.assessment,
            OUTCOME: observed,
            "fitted": probs,
            "prediction": prediction,
            "correct": prediction == observed,
        },
        columns=PREDICTION_COLUMNS,
    )


def _evaluate_task(data: pd.DataFrame, split: Split, spec: ModelSpec) -> pd.DataFrame:
    fitted = fit_split_model(data, split, spec)
    return score_split_model(data, fitted, split)


def run_cross_validation(data: pd.DataFrame, config: EvaluationConfig) -> CrossValidationResult:
    """
    Run the whole evaluation: resample, fit, score, aggregate.

    Raises InvalidConfig or SchemaError before any model is fit, and FitError
    for the first (split, model) that cannot be fit. Nothing is skipped.
    """
    config.validate(n_records=len(data) if isinstance(data, pd.DataFrame) else None)
    validate_schema(data, config.model_specs)
    data = data.reset_index(drop=True)

    labels = data[OUTCOME].to_numpy(dtype=int) if config.stratify else None
    splits = repeated_kfold(
        len(data),
        config.fold_count,
        config.repeat_count,
        config.random_seed,
        labels=labels,
    )
    check_partition(splits, len(data))

    tasks = [(split, spec) for split in splits for spec in config.model_specs]
    logger.info(
        "Fitting %d models (%d splits x %d specs) with n_jobs=%d",
        len(tasks),
        len(splits),
        len(config.model_specs),
        config.n_jobs,
    )
    frames = Parallel(n_jobs=config.n_jobs)(
        delayed(_evaluate_task)(data, split, spec) for split, spec in tasks
    )

    model_names = [spec.name for spec in config.model_specs]
    predictions = pd.concat(frames, ignore_index=True)
    predictions["model"] = pd.Categorical(predictions["model"], categories=model_names)
    predictions = predictions.sort_values(
        list(SPLIT_KEYS) + ["row"], kind="stable"
    ).reset_index(drop=True)

    metrics = split_metrics(predictions, eps=config.log_loss_eps)
    log_loss_summary = summarize_metric(
        metrics, "log_loss", config.confidence_levels, model_order=model_names
    )
    accuracy_summary = summarize_metric(
        metrics, "accuracy", config.confidence_levels, model_order=model_names
    )
    logger.info("Scored %d held-out predictions", len(predictions))

    return CrossValidationResult(
        splits=splits,
        predictions=predictions,
        metrics=metrics,
        log_loss_summary=log_loss_summary,
        accuracy_summary=accuracy_summary,
    )
