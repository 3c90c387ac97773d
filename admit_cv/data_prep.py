from __future__ import annotations

"""
Data helpers for the admissions models: loading, simulation, schema checks and
design matrices built from a ModelSpec.
"""

from pathlib import Path
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from .constants import CATEGORICAL_PREDICTORS, NUMERIC_PREDICTORS, OUTCOME, PREDICTORS
from .errors import SchemaError
from .model_specs import ModelSpec


def _encoded_name(predictor: str) -> str:
    """Design column for a predictor (categoricals are coded against their first level)."""
    if predictor in CATEGORICAL_PREDICTORS:
        return f"{predictor}_{CATEGORICAL_PREDICTORS[predictor][1]}"
    return predictor


def load_admissions(csv_path: Path) -> pd.DataFrame:
    """Read an admissions CSV and coerce the categorical column to its fixed levels."""
    df = pd.read_csv(csv_path)
    for column, levels in CATEGORICAL_PREDICTORS.items():
        if column in df.columns:
            df[column] = pd.Categorical(df[column], categories=list(levels))
    return df


def simulate_admissions(
    n_records: int,
    seed: int = 42,
    admit_rate: float | None = None,
) -> pd.DataFrame:
    """
    Generate a synthetic admissions table with the expected schema.

    Outcomes follow a logistic model of the academic scores. When admit_rate is
    given, exactly round(n_records * admit_rate) records are admitted (the ones
    with the highest noisy latent score), which fixes the outcome balance.
    """
    rng = np.random.default_rng(seed)

    gre_v = np.clip(np.rint(rng.normal(152, 8, n_records)), 130, 170).astype(int)
    gre_q = np.clip(np.rint(rng.normal(154, 8, n_records)), 130, 170).astype(int)
    gre_w = np.clip(np.rint(rng.normal(3.8, 0.8, n_records) * 2) / 2, 0, 6)
    gpa = np.round(np.clip(rng.normal(3.4, 0.35, n_records), 2.0, 4.0), 2)
    gender = rng.choice(list(CATEGORICAL_PREDICTORS["gender"]), size=n_records)

    latent = (
        -0.4
        + 0.05 * (gre_v - 152)
        + 0.1 * (gre_q - 154)
        + 0.4 * (gre_w - 3.8)
        + 2.5 * (gpa - 3.4)
    )
    noisy = latent + rng.logistic(size=n_records)
    if admit_rate is None:
        admit = (noisy > 0).astype(int)
    else:
        n_admitted = int(round(n_records * admit_rate))
        admit = np.zeros(n_records, dtype=int)
        admit[np.argsort(-noisy, kind="stable")[:n_admitted]] = 1

    return pd.DataFrame(
        {
            OUTCOME: admit,
            "gre_v": gre_v,
            "gre_q": gre_q,
            "gre_w": gre_w,
            "gpa": gpa,
            "gender": pd.Categorical(gender, categories=list(CATEGORICAL_PREDICTORS["gender"])),
        }
    )


def required_columns(specs: Iterable[ModelSpec]) -> list[str]:
    """Outcome plus every predictor any of the specs uses, in schema order."""
    used = {p for spec in specs for p in spec.predictors}
    return [OUTCOME] + [p for p in PREDICTORS if p in used]


def validate_schema(data: pd.DataFrame, specs: Sequence[ModelSpec]) -> None:
    """Raise SchemaError unless data carries the fields the specs need, with usable types."""
    if not isinstance(data, pd.DataFrame):
        raise SchemaError(f"expected a pandas DataFrame, got {type(data).__name__}")
    if data.empty:
        raise SchemaError("dataset has no records")

    columns = required_columns(specs)
    missing = [c for c in columns if c not in data.columns]
    if missing:
        raise SchemaError(f"missing required fields: {missing}")

    for column in columns:
        series = data[column]
        if series.isna().any():
            raise SchemaError(f"field '{column}' contains missing values")
        if column in CATEGORICAL_PREDICTORS:
            levels = set(CATEGORICAL_PREDICTORS[column])
            unknown = sorted(set(series.astype(str)) - levels)
            if unknown:
                raise SchemaError(f"field '{column}' has unexpected levels {unknown}")
        elif not pd.api.types.is_numeric_dtype(series) or pd.api.types.is_bool_dtype(series):
            raise SchemaError(f"field '{column}' must be numeric, got dtype {series.dtype}")

    if not data[OUTCOME].isin([0, 1]).all():
        raise SchemaError(f"field '{OUTCOME}' must only hold 0 and 1")


def build_design_matrix(data: pd.DataFrame, spec: ModelSpec) -> pd.DataFrame:
    """
    Numeric design matrix for one model spec, without an intercept column.

    Numeric predictors are used as-is, categoricals become a 0/1 indicator for
    their second level, and each interaction pair becomes the product column
    named "left:right".
    """
    features = {}
    for predictor in spec.predictors:
        if predictor in CATEGORICAL_PREDICTORS:
            level = CATEGORICAL_PREDICTORS[predictor][1]
            features[_encoded_name(predictor)] = (data[predictor].astype(str) == level).astype(float)
        elif predictor in NUMERIC_PREDICTORS:
            features[predictor] = data[predictor].astype(float)
        else:
            raise SchemaError(f"model '{spec.name}' uses unknown predictor '{predictor}'")

    for left, right in spec.interactions:
        features[f"{left}:{right}"] = features[_encoded_name(left)] * features[_encoded_name(right)]

    return pd.DataFrame(features, index=data.index)
