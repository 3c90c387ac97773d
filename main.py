from __future__ import annotations

"""
CLI entrypoint for the admissions model comparison. Runs repeated k-fold
cross-validation over the empty / academics / full logistic models and prints
per-model log loss and accuracy summaries.
"""

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd

from admit_cv import (
    CrossValidationError,
    EvaluationConfig,
    load_admissions,
    run_cross_validation,
    simulate_admissions,
)
from admit_cv.constants import (
    DEFAULT_CONFIDENCE_LEVELS,
    DEFAULT_FOLD_COUNT,
    DEFAULT_REPEAT_COUNT,
    OUTCOME,
)
from admit_cv.model_specs import DEFAULT_MODEL_SPECS, specs_by_name


def describe_dataset(data: pd.DataFrame):
    """Print a short summary of dataset size and outcome balance."""
    print(f"Records: {len(data)}, admit rate: {data[OUTCOME].mean():.3f}")


def print_summary(label: str, summary: pd.DataFrame):
    """Format one per-model summary table produced by summarize_metric."""
    print(f"\n{label}")
    with pd.option_context("display.float_format", "{:.4f}".format, "display.width", 120):
        print(summary.to_string(index=False))


def _parse_levels(text: str) -> tuple[float, ...]:
    return tuple(float(level.strip()) for level in text.split(",") if level.strip())


def build_arg_parser():
    """CLI parser with knobs for the data source, resampling and summaries."""
    parser = argparse.ArgumentParser(
        description="Compare admission logistic models with repeated k-fold cross-validation."
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--csv-path", type=Path, help="Admissions CSV to evaluate.")
    source.add_argument(
        "--simulate",
        type=int,
        default=400,
        metavar="N",
        help="Simulate N records when no CSV is given.",
    )
    parser.add_argument("--folds", type=int, default=DEFAULT_FOLD_COUNT)
    parser.add_argument("--repeats", type=int, default=DEFAULT_REPEAT_COUNT)
    parser.add_argument("--seed", type=int, default=42, help="Seed for fold assignment.")
    parser.add_argument(
        "--models",
        type=str,
        default=",".join(spec.name for spec in DEFAULT_MODEL_SPECS),
        help="Comma-separated model names, in reporting order.",
    )
    parser.add_argument(
        "--confidence-levels",
        type=str,
        default=",".join(f"{level:g}" for level in DEFAULT_CONFIDENCE_LEVELS),
        help="Comma-separated percentile band widths, in percent.",
    )
    parser.add_argument("--stratify", action="store_true", help="Stratify folds on the outcome.")
    parser.add_argument("--n-jobs", type=int, default=1, help="Parallel workers for fitting.")
    parser.add_argument("--output-dir", type=Path, help="Write result tables as CSV here.")
    parser.add_argument("--verbose", action="store_true", help="Log pipeline progress.")
    return parser


def main(args: argparse.Namespace | None = None) -> int:
    """Run the evaluation; returns 0 on success and 2 on a pipeline error."""
    args = args or build_arg_parser().parse_args()
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = EvaluationConfig(
            random_seed=args.seed,
            fold_count=args.folds,
            repeat_count=args.repeats,
            model_specs=specs_by_name([m.strip() for m in args.models.split(",") if m.strip()]),
            confidence_levels=_parse_levels(args.confidence_levels),
            stratify=args.stratify,
            n_jobs=args.n_jobs,
        )
        if args.csv_path is not None:
            data = load_admissions(args.csv_path)
        else:
            data = simulate_admissions(args.simulate, seed=args.seed)

        result = run_cross_validation(data, config)
    except CrossValidationError as exc:
        print(exc, file=sys.stderr)
        return 2

    describe_dataset(data)
    print(f"Splits: {len(result.splits)}, models: {', '.join(s.formula() for s in config.model_specs)}")
    print_summary("Log loss by model (median and percentile bands)", result.log_loss_summary)
    print_summary("Accuracy by model (median and percentile bands)", result.accuracy_summary)

    if args.output_dir is not None:
        for name, path in result.write_csv(args.output_dir).items():
            print(f"Wrote {name}: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
