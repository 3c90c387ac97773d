from __future__ import annotations

"""
Candidate model definitions: a named, ordered predictor list plus interaction pairs.
"""

from dataclasses import dataclass
from typing import Sequence

from .constants import PREDICTORS
from .errors import InvalidConfig


@dataclass(frozen=True)
class ModelSpec:
    name: str
    predictors: tuple[str, ...] = ()
    interactions: tuple[tuple[str, str], ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.predictors

    def formula(self) -> str:
        """R-style formula, used in logs and printed summaries."""
        terms = list(self.predictors) + [f"{a}:{b}" for a, b in self.interactions]
        return "admit ~ " + (" + ".join(terms) if terms else "1")


EMPTY = ModelSpec("empty")
ACADEMICS = ModelSpec(
    "academics",
    predictors=("gre_v", "gre_q", "gre_w", "gpa"),
    interactions=(("gre_v", "gre_q"),),
)
FULL = ModelSpec(
    "full",
    predictors=ACADEMICS.predictors + ("gender",),
    interactions=ACADEMICS.interactions,
)

DEFAULT_MODEL_SPECS = (EMPTY, ACADEMICS, FULL)


def validate_model_specs(specs: Sequence[ModelSpec]) -> None:
    if not specs:
        raise InvalidConfig("at least one model spec is required")

    names = [spec.name for spec in specs]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise InvalidConfig(f"duplicate model spec names: {duplicates}")

    for spec in specs:
        unknown = [p for p in spec.predictors if p not in PREDICTORS]
        if unknown:
            raise InvalidConfig(f"model '{spec.name}' uses unknown predictors {unknown}")
        for left, right in spec.interactions:
            if left not in spec.predictors or right not in spec.predictors:
                raise InvalidConfig(
                    f"model '{spec.name}' interaction {left}:{right} needs both main effects"
                )


def specs_by_name(names: Sequence[str]) -> tuple[ModelSpec, ...]:
    """Look up default specs by name, keeping the requested order."""
    known = {spec.name: spec for spec in DEFAULT_MODEL_SPECS}
    missing = [name for name in names if name not in known]
    if missing:
        raise InvalidConfig(f"unknown model names {missing}; choose from {list(known)}")
    return tuple(known[name] for name in names)
