from __future__ import annotations

"""
Repeated k-fold resampling. Each repeat gets its own random stream derived from
one seed, so partitions are reproducible in any execution order.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from sklearn.model_selection import KFold, StratifiedKFold

from .errors import InvalidConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Split:
    """One (repeat, fold) split: positional row indices for analysis and assessment."""

    repeat: int
    fold: int
    analysis: np.ndarray
    assessment: np.ndarray

    @property
    def id(self) -> str:
        return f"Repeat{self.repeat:02d}/Fold{self.fold:02d}"


def repeat_seeds(seed: int | np.random.SeedSequence, repeat_count: int) -> list[int]:
    """One integer seed per repeat, spawned deterministically from the run seed."""
    root = seed if isinstance(seed, np.random.SeedSequence) else np.random.SeedSequence(seed)
    return [int(child.generate_state(1)[0]) for child in root.spawn(repeat_count)]


def repeated_kfold(
    n_records: int,
    fold_count: int,
    repeat_count: int,
    seed: int | np.random.SeedSequence,
    labels: Sequence[int] | np.ndarray | None = None,
) -> list[Split]:
    """
    Partition range(n_records) into fold_count folds, repeat_count times.

    Every repeat shuffles independently. With labels the folds are stratified
    on them. Splits come back ordered by (repeat, fold), both 1-based.
    """
    if fold_count < 2:
        raise InvalidConfig(f"fold_count must be at least 2, got {fold_count}")
    if fold_count > n_records:
        raise InvalidConfig(f"fold_count={fold_count} exceeds the dataset size {n_records}")
    if repeat_count < 1:
        raise InvalidConfig(f"repeat_count must be at least 1, got {repeat_count}")

    if labels is not None:
        labels = np.asarray(labels)
        if len(labels) != n_records:
            raise InvalidConfig(f"got {len(labels)} labels for {n_records} records")
        largest_class = int(np.unique(labels, return_counts=True)[1].max())
        if fold_count > largest_class:
            raise InvalidConfig(
                f"cannot stratify {fold_count} folds when the largest class has {largest_class} records"
            )

    positions = np.arange(n_records)
    splits = []
    for repeat, repeat_seed in enumerate(repeat_seeds(seed, repeat_count), start=1):
        if labels is None:
            splitter = KFold(n_splits=fold_count, shuffle=True, random_state=repeat_seed)
            folds = splitter.split(positions)
        else:
            splitter = StratifiedKFold(n_splits=fold_count, shuffle=True, random_state=repeat_seed)
            folds = splitter.split(positions, labels)

        for fold, (analysis, assessment) in enumerate(folds, start=1):
            splits.append(
                Split(
                    repeat=repeat,
                    fold=fold,
                    analysis=np.sort(analysis),
                    assessment=np.sort(assessment),
                )
            )

    logger.info(
        "Built %d splits (%d repeats x %d folds) over %d records%s",
        len(splits),
        repeat_count,
        fold_count,
        n_records,
        " (stratified)" if labels is not None else "",
    )
    return splits


def check_partition(splits: Sequence[Split], n_records: int) -> None:
    """Raise InvalidConfig unless every repeat's assessment sets cover each record exactly once."""
    by_repeat: dict[int, list[Split]] = {}
    for split in splits:
        if np.intersect1d(split.analysis, split.assessment).size:
            raise InvalidConfig(f"{split.id}: analysis and assessment sets overlap")
        if split.analysis.size + split.assessment.size != n_records:
            raise InvalidConfig(f"{split.id}: split does not cover all {n_records} records")
        by_repeat.setdefault(split.repeat, []).append(split)

    for repeat, repeat_splits in by_repeat.items():
        held_out = np.concatenate([s.assessment for s in repeat_splits])
        counts = np.bincount(held_out, minlength=n_records)
        if held_out.size != n_records or not np.all(counts == 1):
            raise InvalidConfig(f"repeat {repeat}: assessment sets do not partition the records")
