from __future__ import annotations

"""
Exceptions raised by the evaluation pipeline. Each one names the stage it came from.
"""


class CrossValidationError(Exception):
    """Base class for pipeline failures."""

    stage = "pipeline"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"[{self.stage}] {self.message}"


class InvalidConfig(CrossValidationError):
    """Resampling or summary parameters are out of range."""

    stage = "config"


class SchemaError(CrossValidationError):
    """The input dataset is missing required fields or has the wrong types."""

    stage = "load"


class FitError(CrossValidationError):
    """A model could not be fit on one split's analysis set."""

    stage = "fit"

    def __init__(
        self,
        message: str,
        repeat: int | None = None,
        fold: int | None = None,
        model: str | None = None,
    ):
        super().__init__(message)
        self.repeat = repeat
        self.fold = fold
        self.model = model

    def __reduce__(self):
        # joblib workers pickle the exception back to the parent process
        return (self.__class__, (self.message, self.repeat, self.fold, self.model))

    def __str__(self) -> str:
        if self.repeat is None:
            return super().__str__()
        return (
            f"[{self.stage}] Repeat{self.repeat:02d}/Fold{self.fold:02d} "
            f"model={self.model}: {self.message}"
        )


class NumericGuardError(CrossValidationError):
    """Probabilities that clamping cannot repair (NaN or outside [0, 1])."""

    stage = "score"
