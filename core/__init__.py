"""
core analysis package
contains all numeric processing without ui dependencies
"""

from .dataset import DatasetView, NumericSeries
from .exceptions import (
    AnalysisError,
    ConfigurationError,
    DataError,
    ColumnNotFoundError,
    EmptyVariableError
)
from .statistics_engine import StatisticsEngine, VariableStatistics
from .correlation_analyzer import CorrelationAnalyzer, CorrelationResult, CorrelationCell
from .decision_ranking import DecisionRankingEngine, RankingResult, SupplierScore
from .trend_forecaster import TrendForecaster, TrendPolicy, ForecastSummary, PredictionResult
from .weight_sensitivity import WeightSensitivityOptimizer, SensitivityResult

__all__ = [
    "DatasetView",
    "NumericSeries",
    "AnalysisError",
    "ConfigurationError",
    "DataError",
    "ColumnNotFoundError",
    "EmptyVariableError",
    "StatisticsEngine",
    "VariableStatistics",
    "CorrelationAnalyzer",
    "CorrelationResult",
    "CorrelationCell",
    "DecisionRankingEngine",
    "RankingResult",
    "SupplierScore",
    "TrendForecaster",
    "TrendPolicy",
    "ForecastSummary",
    "PredictionResult",
    "WeightSensitivityOptimizer",
    "SensitivityResult"
]
