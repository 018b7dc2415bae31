"""
statistics engine module
descriptive statistics and box-cox lambda search
feeds the per-variable transforms used by correlation
"""

from dataclasses import dataclass, asdict
from typing import Dict, Sequence, Union

import numpy as np

import config
from core.dataset import NumericSeries
from utils.candidates import best_candidate, closest_candidate
from utils.logging_config import get_logger


SeriesLike = Union[NumericSeries, Sequence[float], np.ndarray]


# ============================================================================
#                               DATA CLASSES
# ============================================================================

@dataclass
class VariableStatistics:
    # summary of one numeric series
    mean: float
    std_dev: float          # population, divisor n
    min: float
    max: float
    skewness: float
    kurtosis: float         # excess, normal = 0
    is_normal: bool
    optimal_lambda: float
    rounded_lambda: float

    def to_dict(self) -> Dict:
        return asdict(self)


def _as_array(series: SeriesLike) -> np.ndarray:
    # accept numeric series or plain sequence
    if isinstance(series, NumericSeries):
        return series.as_array()
    return np.asarray(series, dtype=float)


# ============================================================================
#                            STATISTICS ENGINE
# ============================================================================

class StatisticsEngine:
    # descriptive statistics and power transform selection

    def __init__(self):
        # initialize with statistics configuration
        self.config = dict(config.STATISTICS)
        self.lambda_grid = tuple(self.config["lambda_grid"])
        self.interpretable_lambdas = tuple(self.config["interpretable_lambdas"])
        self.default_lambda = self.config["default_lambda"]
        self.zero_tolerance = self.config["zero_lambda_tolerance"]
        self.logger = get_logger("statistics")

    # ---------- DESCRIPTIVE STATISTICS ----------

    def describe(self, series: SeriesLike) -> VariableStatistics:
        # summary statistics, zeroed record for empty input
        values = _as_array(series)
        n = len(values)

        if n == 0:
            return VariableStatistics(
                mean=0.0, std_dev=0.0, min=0.0, max=0.0,
                skewness=0.0, kurtosis=0.0, is_normal=False,
                optimal_lambda=self.default_lambda,
                rounded_lambda=self.default_lambda
            )

        mean = float(values.mean())
        deviations = values - mean
        std_dev = float(np.sqrt(np.sum(deviations ** 2) / n))

        # moments stay zero for constant series
        skewness = 0.0
        kurtosis = 0.0
        if std_dev > 0:
            skewness = float((np.sum(deviations ** 3) / n) / std_dev ** 3)
            kurtosis = float((np.sum(deviations ** 4) / n) / std_dev ** 4 - 3)

        is_normal = (
            abs(skewness) < self.config["normal_skew_limit"]
            and abs(kurtosis) < self.config["normal_kurtosis_limit"]
        )

        optimal_lambda = self.default_lambda
        rounded_lambda = self.default_lambda
        if not is_normal and bool(np.all(values > 0)):
            optimal_lambda = self.find_optimal_lambda(values)
            rounded_lambda = self.round_to_interpretable(optimal_lambda)

        return VariableStatistics(
            mean=mean,
            std_dev=std_dev,
            min=float(values.min()),
            max=float(values.max()),
            skewness=skewness,
            kurtosis=kurtosis,
            is_normal=bool(is_normal),
            optimal_lambda=optimal_lambda,
            rounded_lambda=rounded_lambda
        )

    # ---------- BOX-COX ----------

    def box_cox(self, series: SeriesLike, lam: float) -> np.ndarray:
        # general box-cox formula, log near zero lambda
        values = _as_array(series)
        if abs(lam) < self.zero_tolerance:
            return np.log(values)
        return (np.power(values, lam) - 1) / lam

    def box_cox_log_likelihood(self, series: SeriesLike, lam: float) -> float:
        # profile log-likelihood of lambda, -inf when undefined
        values = _as_array(series)
        n = len(values)
        if n == 0 or bool(np.any(values <= 0)):
            return float("-inf")

        transformed = self.box_cox(values, lam)
        variance = float(np.sum((transformed - transformed.mean()) ** 2) / n)
        if not np.isfinite(variance) or variance <= 0:
            return float("-inf")

        return float(-n * np.log(np.sqrt(variance)) + (lam - 1) * np.sum(np.log(values)))

    def find_optimal_lambda(self, series: SeriesLike) -> float:
        # grid search for best lambda, 1 when data is not strictly positive
        values = _as_array(series)
        if len(values) == 0 or bool(np.any(values <= 0)):
            return self.default_lambda

        best = best_candidate(
            self.lambda_grid,
            lambda lam: self.box_cox_log_likelihood(values, lam),
            default=self.default_lambda
        )
        self.logger.debug(f"optimal lambda {best} over {len(values)} values")
        return best

    def round_to_interpretable(self, lam: float) -> float:
        # snap to nearest interpretable lambda
        return closest_candidate(lam, self.interpretable_lambdas)

    # ---------- POWER TRANSFORMS ----------

    def apply_power_transform(self, series: SeriesLike, lam: float) -> np.ndarray:
        # named transform for interpretable lambdas, floored box-cox otherwise
        values = _as_array(series)
        positive = values > 0
        safe = np.where(positive, values, 1.0)

        if lam == 1:
            return values.copy()
        if lam == 2:
            return values * values
        if lam == 3:
            return values * values * values
        if lam == 0.5:
            return np.where(values < 0, 0.0, np.sqrt(np.where(values < 0, 0.0, values)))
        if lam == 0:
            return np.where(positive, np.log(safe), 0.0)
        if lam == -0.5:
            return np.where(positive, 1 / np.sqrt(safe), 0.0)
        if lam == -1:
            return np.where(positive, 1 / safe, 0.0)
        if lam == -2:
            return np.where(positive, 1 / (safe * safe), 0.0)

        return np.where(positive, self.box_cox(safe, lam), 0.0)

    def transform_label(self, lam: float) -> Dict[str, str]:
        # display name and description of transform
        return config.get_transform_info(lam)
