"""
decisionsight configuration
contains all thresholds defaults and labels
shared by every analysis module in core
"""

import os
from pathlib import Path

# ============================================================================
#                                PATHS
# ============================================================================

# ---------- USER DIRECTORIES ----------
USER_HOME = Path.home()
APP_DATA_DIR = Path(os.environ.get("DECISIONSIGHT_HOME", USER_HOME / ".decisionsight"))
LOG_DIR = APP_DATA_DIR / "logs"

# ============================================================================
#                              APPLICATION
# ============================================================================

# ---------- APP INFO ----------
APP_NAME = "DecisionSight"
APP_VERSION = "1.0.0"
LOGGER_NAME = "decisionsight"

# ============================================================================
#                              STATISTICS
# ============================================================================

# ---------- DESCRIPTIVE STATS AND BOX-COX ----------
STATISTICS = {
    "lambda_grid": [-2, -1.5, -1, -0.5, 0, 0.5, 1, 1.5, 2],
    "interpretable_lambdas": [-2, -1, -0.5, 0, 0.5, 1, 2, 3],
    "default_lambda": 1,
    "normal_skew_limit": 1.0,      # |skewness| below this
    "normal_kurtosis_limit": 1.0,  # |excess kurtosis| below this
    "zero_lambda_tolerance": 1e-10
}

# ---------- INTERPRETABLE POWER TRANSFORMS ----------
POWER_TRANSFORMS = {
    -2: {"name": "Inverse square", "description": "Inverse of squared values"},
    -1: {"name": "Inverse", "description": "Inverse/reciprocal transformation"},
    -0.5: {"name": "Inverse square root", "description": "Inverse of square root"},
    0: {"name": "Logarithmic", "description": "Natural logarithm transformation"},
    0.5: {"name": "Square root", "description": "Square root transformation"},
    1: {"name": "None", "description": "No transformation (original values)"},
    2: {"name": "Square", "description": "Squared values"},
    3: {"name": "Cube", "description": "Cubed values"}
}

# ============================================================================
#                              CORRELATION
# ============================================================================

# ---------- SIGNIFICANCE ----------
CORRELATION = {
    "min_variables": 2,
    "significance_level": 0.05,
    # (upper bound on |t|, p-value) checked in order
    "p_value_bands": [
        (1.0, 0.5),
        (2.0, 0.2),
        (2.5, 0.05),
        (3.0, 0.01),
        (4.0, 0.001)
    ],
    "p_value_floor": 0.0001,
    "insufficient_dof_p_value": 1.0
}

# ---------- STRENGTH LABELS ----------
CORRELATION_STRENGTH = [
    (0.9, "Very strong"),
    (0.7, "Strong"),
    (0.5, "Moderate"),
    (0.3, "Weak"),
    (0.1, "Very weak"),
    (0.0, "Negligible")
]

# ============================================================================
#                                RANKING
# ============================================================================

# ---------- MULTI CRITERIA ----------
RANKING = {
    "methods": ["topsis", "euclidean"],
    "default_method": "topsis",
    "weight_tolerance": 1e-3,
    "constant_column_score": 0.5,  # min-max fallback
    "ideal_point": 1.0             # euclidean ideal after min-max
}

METHOD_LABELS = {
    "topsis": "TOPSIS",
    "euclidean": "Euclidean Distance"
}

# ============================================================================
#                              FORECASTING
# ============================================================================

# ---------- EXPONENTIAL SMOOTHING ----------
FORECASTING = {
    "default_alpha": 0.4,
    "default_threshold_pct": 5.0,
    "min_observations": 3,
    "grade_bands": [
        (85, "A"),
        (70, "B"),
        (50, "C")
    ],
    "lowest_grade": "D",
    "at_risk_grades": ["C", "D"]
}

# ---------- TREND LABELS ----------
TREND_LABELS = {
    "up": "Increasing",
    "down": "Decreasing",
    "stable": "Stable"
}

# ============================================================================
#                              SENSITIVITY
# ============================================================================

# ---------- WEIGHT REALLOCATION ----------
SENSITIVITY = {
    "goals": ["maximize", "minimize"],
    "default_goal": "maximize",
    "min_criteria": 2,
    "scale_factor": 2.0,
    "target_floor": 0.1,
    "target_ceiling": 0.9,
    "weight_tolerance": 1e-3
}

# ============================================================================
#                               LOGGING
# ============================================================================

# ---------- LOG SETTINGS ----------
LOGGING = {
    "level": "INFO",
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    "file_format": "decisionsight_{date}.log",
    "max_file_size_mb": 10,
    "backup_count": 5
}


def ensure_directories():
    # create required directories if missing
    APP_DATA_DIR.mkdir(parents=True, exist_ok=True)
    LOG_DIR.mkdir(parents=True, exist_ok=True)


def get_transform_info(lam):
    # return name and description for power transform lambda
    info = POWER_TRANSFORMS.get(lam)
    if info is None:
        return {"name": "Box-Cox", "description": f"General power transformation (lambda={lam})"}
    return dict(info)


def get_correlation_strength(value):
    # describe magnitude of correlation coefficient
    magnitude = abs(value)
    for lower, label in CORRELATION_STRENGTH:
        if magnitude >= lower:
            return label
    return CORRELATION_STRENGTH[-1][1]
