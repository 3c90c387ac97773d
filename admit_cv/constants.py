"""
Column names and fixed numbers shared by the admissions cross-validation code.
"""

OUTCOME = "admit"
NUMERIC_PREDICTORS = ("gre_v", "gre_q", "gre_w", "gpa")
CATEGORICAL_PREDICTORS = {"gender": ("Female", "Male")}  # first level is the reference
PREDICTORS = NUMERIC_PREDICTORS + tuple(CATEGORICAL_PREDICTORS)

# Identifier columns carried by every prediction and metric row
SPLIT_KEYS = ("repeat", "fold", "model")

PREDICTION_THRESHOLD = 0.5
LOG_LOSS_EPS = 1e-15

DEFAULT_FOLD_COUNT = 10
DEFAULT_REPEAT_COUNT = 10
DEFAULT_CONFIDENCE_LEVELS = (80, 95, 99)
