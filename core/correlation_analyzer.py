"""
correlation analyzer module
pearson correlation matrix over power transformed variables
each variable gets its own box-cox lambda
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

import config
from core.dataset import DatasetView, as_dataset
from core.exceptions import ConfigurationError
from core.statistics_engine import StatisticsEngine, VariableStatistics
from utils.logging_config import get_logger


# ============================================================================
#                               DATA CLASSES
# ============================================================================

@dataclass
class CorrelationCell:
    # one entry of the correlation matrix
    coefficient: float
    p_value: float
    is_significant: bool


@dataclass
class VariableTransform:
    # power transform chosen for one variable
    variable: str
    optimal_lambda: float
    applied_lambda: float
    name: str
    description: str


@dataclass
class CorrelationResult:
    # correlation matrix with per variable statistics
    variables: List[str]
    matrix: List[List[CorrelationCell]]
    statistics: Dict[str, VariableStatistics]
    transforms: Dict[str, VariableTransform]
    sample_sizes: Dict[str, int] = field(default_factory=dict)

    def get_cell(self, first: str, second: str) -> CorrelationCell:
        # lookup cell by variable names
        i = self.variables.index(first)
        j = self.variables.index(second)
        return self.matrix[i][j]

    def significant_pairs(self) -> List[Tuple[str, str, CorrelationCell]]:
        # off diagonal significant pairs from upper triangle
        pairs = []
        for i, first in enumerate(self.variables):
            for j in range(i + 1, len(self.variables)):
                cell = self.matrix[i][j]
                if cell.is_significant:
                    pairs.append((first, self.variables[j], cell))
        return pairs

    def to_dataframe(self, value: str = "coefficient") -> pd.DataFrame:
        # matrix of coefficient, p_value or is_significant
        data = [[getattr(cell, value) for cell in row] for row in self.matrix]
        return pd.DataFrame(data, index=self.variables, columns=self.variables)

    def transform_table(self) -> pd.DataFrame:
        # per variable statistics and applied transform
        rows = []
        for name in self.variables:
            stats = self.statistics[name]
            transform = self.transforms[name]
            rows.append({
                "variable": name,
                "n": self.sample_sizes.get(name, 0),
                "mean": stats.mean,
                "std_dev": stats.std_dev,
                "min": stats.min,
                "max": stats.max,
                "skewness": stats.skewness,
                "kurtosis": stats.kurtosis,
                "is_normal": stats.is_normal,
                "optimal_lambda": transform.optimal_lambda,
                "applied_lambda": transform.applied_lambda,
                "transform": transform.name
            })
        return pd.DataFrame(rows)


# ============================================================================
#                          CORRELATION ANALYZER
# ============================================================================

class CorrelationAnalyzer:
    # pearson correlation with approximate significance

    def __init__(self, statistics_engine: Optional[StatisticsEngine] = None):
        # initialize with correlation configuration
        self.config = dict(config.CORRELATION)
        self.stats_engine = statistics_engine or StatisticsEngine()
        self.logger = get_logger("correlation")

    # ---------- MAIN ANALYSIS ----------

    def analyze(self, data, variables: Sequence[str]) -> CorrelationResult:
        # correlation matrix for selected columns
        dataset: DatasetView = as_dataset(data)
        selected = list(dict.fromkeys(variables))

        if len(selected) < self.config["min_variables"]:
            raise ConfigurationError(
                "select at least two variables for correlation analysis"
            )

        self.logger.info(f"correlation analysis started for {len(selected)} variables")

        # extract and describe each variable
        raw = {}
        statistics = {}
        transforms = {}
        for name in selected:
            series = dataset.numeric_series(name, role="variable")
            if series.is_empty:
                self.logger.warning(f"variable '{name}' contains no numeric data")
            series.require_values(role="variable")
            raw[name] = series.as_array()
            statistics[name] = self.stats_engine.describe(series)
            transforms[name] = self._choose_transform(name, raw[name], statistics[name])

        # transform each variable with its own lambda
        transformed = {
            name: self.stats_engine.apply_power_transform(raw[name], transforms[name].applied_lambda)
            for name in selected
        }

        matrix = self._build_matrix(selected, transformed)

        self.logger.info(f"correlation analysis complete: {len(selected)}x{len(selected)} matrix")

        return CorrelationResult(
            variables=selected,
            matrix=matrix,
            statistics=statistics,
            transforms=transforms,
            sample_sizes={name: len(raw[name]) for name in selected}
        )

    def _choose_transform(self,
                          name: str,
                          values: np.ndarray,
                          stats: VariableStatistics) -> VariableTransform:
        # lambda decision for single variable
        if not stats.is_normal and bool(np.all(values > 0)):
            optimal = stats.optimal_lambda
            applied = stats.rounded_lambda
        else:
            optimal = self.stats_engine.default_lambda
            applied = self.stats_engine.default_lambda

        label = self.stats_engine.transform_label(applied)
        if applied != self.stats_engine.default_lambda:
            self.logger.debug(f"variable '{name}' transformed with lambda {applied}")

        return VariableTransform(
            variable=name,
            optimal_lambda=optimal,
            applied_lambda=applied,
            name=label["name"],
            description=label["description"]
        )

    def _build_matrix(self,
                      names: List[str],
                      transformed: Dict[str, np.ndarray]) -> List[List[CorrelationCell]]:
        # symmetric matrix from upper triangle
        size = len(names)
        matrix: List[List[Optional[CorrelationCell]]] = [[None] * size for _ in range(size)]

        for i in range(size):
            matrix[i][i] = CorrelationCell(coefficient=1.0, p_value=0.0, is_significant=True)
            for j in range(i + 1, size):
                x = transformed[names[i]]
                y = transformed[names[j]]
                coefficient = self.pearson(x, y)
                p_value = self.approximate_p_value(coefficient, min(len(x), len(y)))
                cell = CorrelationCell(
                    coefficient=coefficient,
                    p_value=p_value,
                    is_significant=p_value <= self.config["significance_level"]
                )
                matrix[i][j] = cell
                matrix[j][i] = CorrelationCell(cell.coefficient, cell.p_value, cell.is_significant)

        return matrix

    # ---------- CORRELATION MATH ----------

    def pearson(self, x: Sequence[float], y: Sequence[float]) -> float:
        # pearson coefficient over common prefix, 0 for degenerate input
        n = min(len(x), len(y))
        if n == 0:
            return 0.0

        xs = np.asarray(x, dtype=float)[:n]
        ys = np.asarray(y, dtype=float)[:n]
        x_diff = xs - xs.mean()
        y_diff = ys - ys.mean()

        numerator = float(np.sum(x_diff * y_diff))
        x_ss = float(np.sum(x_diff * x_diff))
        y_ss = float(np.sum(y_diff * y_diff))

        if x_ss == 0 or y_ss == 0:
            return 0.0

        return float(np.clip(numerator / np.sqrt(x_ss * y_ss), -1.0, 1.0))

    def approximate_p_value(self, r: float, n: int) -> float:
        # banded two tailed p-value from t statistic
        dof = n - 2
        if dof < 1:
            return self.config["insufficient_dof_p_value"]

        denominator = 1 - r * r
        if denominator <= 0:
            t_abs = float("inf")
        else:
            t_abs = abs(r * np.sqrt(dof) / np.sqrt(denominator))

        for upper, p_value in self.config["p_value_bands"]:
            if t_abs < upper:
                return p_value
        return self.config["p_value_floor"]

    def strength_label(self, r: float) -> str:
        # verbal strength of coefficient
        return config.get_correlation_strength(r)
