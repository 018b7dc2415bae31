"""
trend forecaster module
single parameter exponential smoothing per alternative and category
classifies trends and grades observed versus fitted values
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

import config
from core.dataset import DatasetView, as_dataset, is_present, to_label
from core.exceptions import ConfigurationError, DataError, EmptyVariableError
from utils.logging_config import get_logger


# ============================================================================
#                               DATA CLASSES
# ============================================================================

@dataclass
class SeriesHistory:
    # ordered observations for one alternative and category
    values: List[float] = field(default_factory=list)
    times: List[Any] = field(default_factory=list)


# alternative -> category -> history, in first appearance order
SupplierHistory = Dict[str, Dict[str, SeriesHistory]]


@dataclass
class PredictionResult:
    # forecast for single alternative and category
    supplier: str
    category: str
    actual_values: List[float]
    predicted_values: List[float]
    next_prediction: float
    accuracy: float
    trend: str              # up down or stable
    letter_grade: str
    predicted_letter_grade: str


@dataclass
class ForecastSummary:
    # all forecasts plus grade prediction accuracy
    results: List[PredictionResult]
    grade_match_rate: Optional[float]
    at_risk_match_rate: Optional[float]
    excluded: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def declining(self) -> List[PredictionResult]:
        return [r for r in self.results if r.trend == "down"]

    def warning_suppliers(self) -> Dict[str, List[str]]:
        # declining categories grouped by alternative
        grouped: Dict[str, List[str]] = OrderedDict()
        for result in self.declining:
            grouped.setdefault(result.supplier, []).append(result.category)
        return dict(grouped)

    def to_dataframe(self) -> pd.DataFrame:
        # one row per forecast
        rows = []
        for r in self.results:
            rows.append({
                "supplier": r.supplier,
                "category": r.category,
                "observations": len(r.actual_values),
                "last_actual": r.actual_values[-1],
                "last_fitted": r.predicted_values[-1],
                "next_prediction": r.next_prediction,
                "accuracy": r.accuracy,
                "trend": r.trend,
                "trend_label": config.TREND_LABELS[r.trend],
                "letter_grade": r.letter_grade,
                "predicted_letter_grade": r.predicted_letter_grade
            })
        return pd.DataFrame(rows)


# ============================================================================
#                              TREND POLICY
# ============================================================================

class TrendPolicy:
    # classifies percent change against one symmetric threshold

    def __init__(self, threshold_pct: float):
        if threshold_pct < 0:
            raise ConfigurationError("trend threshold must not be negative")
        self.threshold_pct = float(threshold_pct)

    def percent_change(self, previous: float, current: float) -> float:
        # change in percent, infinite when base is zero
        if previous == 0:
            if current == 0:
                return 0.0
            return float("inf") if current > 0 else float("-inf")
        return (current - previous) / previous * 100

    def classify_change(self, change_pct: float) -> str:
        if change_pct > self.threshold_pct:
            return "up"
        if change_pct < -self.threshold_pct:
            return "down"
        return "stable"

    def classify(self, sequence: Sequence[float]) -> str:
        # compare last value against the one before it
        if len(sequence) < 2:
            return "stable"
        return self.classify_change(self.percent_change(sequence[-2], sequence[-1]))


# ============================================================================
#                            TREND FORECASTER
# ============================================================================

class TrendForecaster:
    # exponential smoothing early warning over grouped history

    def __init__(self):
        # initialize with forecasting configuration
        self.config = dict(config.FORECASTING)
        self.logger = get_logger("forecasting")

    # ---------- MAIN FORECAST ----------

    def forecast(self,
                 data,
                 time_column: str,
                 supplier_column: str,
                 category_columns: Sequence[str],
                 alpha: Optional[float] = None,
                 threshold_pct: Optional[float] = None) -> ForecastSummary:
        # forecast every alternative and category with enough history
        alpha = self.config["default_alpha"] if alpha is None else float(alpha)
        threshold_pct = self.config["default_threshold_pct"] if threshold_pct is None else threshold_pct

        if not 0 <= alpha <= 1:
            raise ConfigurationError(f"smoothing factor must be between 0 and 1, got {alpha}")
        policy = TrendPolicy(threshold_pct)

        history = self.build_history(data, time_column, supplier_column, category_columns)

        self.logger.info(f"forecasting started: {len(history)} alternatives, alpha={alpha}")

        results = []
        excluded = []
        for supplier, categories in history.items():
            for category, series in categories.items():
                if len(series.values) < self.config["min_observations"]:
                    excluded.append((supplier, category))
                    continue
                results.append(self.predict(supplier, category, series.values, alpha, policy))

        if excluded:
            self.logger.debug(f"{len(excluded)} series skipped with insufficient history")

        grade_rate, at_risk_rate = self.grade_accuracy(results)

        # declining first, then by alternative
        results.sort(key=lambda r: (r.trend != "down", r.supplier.casefold()))

        self.logger.info(
            f"forecasting complete: {len(results)} series, "
            f"{sum(1 for r in results if r.trend == 'down')} declining"
        )

        return ForecastSummary(
            results=results,
            grade_match_rate=grade_rate,
            at_risk_match_rate=at_risk_rate,
            excluded=excluded
        )

    def predict(self,
                supplier: str,
                category: str,
                values: Sequence[float],
                alpha: float,
                policy: TrendPolicy) -> PredictionResult:
        # smooth one series and grade it
        fitted, next_prediction = self.exponential_smoothing(values, alpha)
        actual = list(values)

        return PredictionResult(
            supplier=supplier,
            category=category,
            actual_values=actual,
            predicted_values=fitted,
            next_prediction=next_prediction,
            accuracy=self.fit_accuracy(actual, fitted),
            trend=policy.classify(fitted + [next_prediction]),
            letter_grade=self.letter_grade(actual[-1]),
            predicted_letter_grade=self.letter_grade(fitted[-1])
        )

    # ---------- HISTORY ----------

    def build_history(self,
                      data,
                      time_column: str,
                      supplier_column: str,
                      category_columns: Sequence[str]) -> SupplierHistory:
        # group numeric observations by alternative and category in row order
        if not time_column or not supplier_column or not category_columns:
            raise ConfigurationError("select the time, alternative and category columns")

        dataset: DatasetView = as_dataset(data)
        time_idx = dataset.column_index(time_column, role="time column")
        supplier_idx = dataset.column_index(supplier_column, role="alternative column")
        categories = list(dict.fromkeys(category_columns))
        cells = {c: dataset.numeric_cells(c, role="category") for c in categories}
        for category, values in cells.items():
            if np.isnan(values).all():
                self.logger.warning(f"category '{category}' contains no numeric data")
                raise EmptyVariableError(category, role="category")

        history: SupplierHistory = OrderedDict()
        used_rows = 0

        for row_number, row in enumerate(dataset.iter_rows()):
            if not is_present(row[time_idx]) or not is_present(row[supplier_idx]):
                continue

            observed = [(c, cells[c][row_number]) for c in categories
                        if not np.isnan(cells[c][row_number])]
            if not observed:
                continue

            used_rows += 1
            supplier = to_label(row[supplier_idx])
            by_category = history.setdefault(supplier, OrderedDict())
            for category, value in observed:
                series = by_category.setdefault(category, SeriesHistory())
                series.values.append(float(value))
                series.times.append(row[time_idx])

        if used_rows == 0:
            self.logger.warning("no valid rows found for forecasting")
            raise DataError("no valid data found for analysis")

        return history

    # ---------- SMOOTHING ----------

    def exponential_smoothing(self, values: Sequence[float], alpha: float) -> Tuple[List[float], float]:
        # fitted sequence and one step ahead forecast
        if len(values) == 0:
            return [], 0.0

        fitted = [float(values[0])]
        for i in range(1, len(values)):
            fitted.append(alpha * values[i - 1] + (1 - alpha) * fitted[i - 1])

        next_prediction = alpha * values[-1] + (1 - alpha) * fitted[-1]
        return fitted, float(next_prediction)

    def fit_accuracy(self, actual: Sequence[float], fitted: Sequence[float]) -> float:
        # 100 minus mean absolute error, not clamped
        if len(actual) == 0 or len(actual) != len(fitted):
            return 0.0
        errors = np.abs(np.asarray(actual, dtype=float) - np.asarray(fitted, dtype=float))
        return float(100 - errors.sum() / len(actual))

    def classify_trend(self, sequence: Sequence[float], threshold_pct: Optional[float] = None) -> str:
        # trend of last step in smoothed plus forecast sequence
        if threshold_pct is None:
            threshold_pct = self.config["default_threshold_pct"]
        return TrendPolicy(threshold_pct).classify(sequence)

    # ---------- GRADING ----------

    def letter_grade(self, score: float) -> str:
        for lower, grade in self.config["grade_bands"]:
            if score >= lower:
                return grade
        return self.config["lowest_grade"]

    def grade_accuracy(self, results: Sequence[PredictionResult]) -> Tuple[Optional[float], Optional[float]]:
        # grade match rate overall and for at risk observations
        if not results:
            return None, None

        at_risk_grades = self.config["at_risk_grades"]
        matches = sum(1 for r in results if r.letter_grade == r.predicted_letter_grade)
        at_risk = [r for r in results if r.letter_grade in at_risk_grades]
        at_risk_matches = sum(1 for r in at_risk if r.letter_grade == r.predicted_letter_grade)

        overall = matches / len(results) * 100
        at_risk_rate = at_risk_matches / len(at_risk) * 100 if at_risk else None
        return overall, at_risk_rate
