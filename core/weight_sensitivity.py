"""
weight sensitivity module
reallocates criterion weights toward or away from one target
rescores alternatives with the new weights
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

import config
from core.dataset import DatasetView, as_dataset, is_present, to_label
from core.exceptions import ConfigurationError, EmptyVariableError
from core.weights import WeightsLike, as_weight_map, validate_weights
from utils.logging_config import get_logger


# ============================================================================
#                               DATA CLASSES
# ============================================================================

@dataclass
class AlternativeScore:
    # weighted score of one alternative before and after reallocation
    supplier: str
    category_scores: Dict[str, float]
    original_score: float
    new_score: float

    @property
    def score_change(self) -> float:
        return self.new_score - self.original_score


@dataclass
class SensitivityResult:
    # weight reallocation outcome
    target: str
    goal: str
    original_weights: Dict[str, float]
    new_weights: Dict[str, float]
    absolute_changes: Dict[str, float]
    scores: List[AlternativeScore] = field(default_factory=list)

    def direction(self, criterion: str) -> str:
        # increase decrease or no change for criterion
        old = self.original_weights[criterion]
        new = self.new_weights[criterion]
        if new > old:
            return "increase"
        if new < old:
            return "decrease"
        return "no change"

    def weights_dataframe(self) -> pd.DataFrame:
        # old and new weight per criterion
        rows = []
        for criterion, old in self.original_weights.items():
            rows.append({
                "criterion": criterion,
                "original_weight": old,
                "new_weight": self.new_weights[criterion],
                "absolute_change": self.absolute_changes[criterion],
                "direction": self.direction(criterion),
                "is_target": criterion == self.target
            })
        return pd.DataFrame(rows)

    def to_dataframe(self) -> pd.DataFrame:
        # alternative scores sorted by new score
        rows = []
        for position, s in enumerate(self.scores):
            rows.append({
                "rank": position + 1,
                "supplier": s.supplier,
                "original_score": s.original_score,
                "new_score": s.new_score,
                "score_change": s.score_change
            })
        return pd.DataFrame(rows)


# ============================================================================
#                       WEIGHT SENSITIVITY OPTIMIZER
# ============================================================================

class WeightSensitivityOptimizer:
    # closed form doubling or halving of the target weight

    def __init__(self):
        # initialize with sensitivity configuration
        self.config = dict(config.SENSITIVITY)
        self.logger = get_logger("sensitivity")

    # ---------- WEIGHT REALLOCATION ----------

    def optimize(self,
                 weights: WeightsLike,
                 target: str,
                 goal: Optional[str] = None) -> SensitivityResult:
        # move target weight then share the remainder proportionally
        goal = goal or self.config["default_goal"]
        original = self._validate(weights, target, goal)

        current = original[target]
        if goal == "maximize":
            new_target = min(self.config["target_ceiling"], current * self.config["scale_factor"])
        else:
            new_target = max(self.config["target_floor"], current / self.config["scale_factor"])
        new_target = min(self.config["target_ceiling"], max(self.config["target_floor"], new_target))

        others = [c for c in original if c != target]
        total_other = sum(original[c] for c in others)
        remaining = 1.0 - new_target

        new_weights = OrderedDict()
        for criterion in original:
            if criterion == target:
                new_weights[criterion] = new_target
            elif total_other > 0:
                new_weights[criterion] = remaining * (original[criterion] / total_other)
            else:
                new_weights[criterion] = remaining / len(others)

        changes = {c: abs(new_weights[c] - original[c]) for c in original}

        self.logger.info(
            f"sensitivity {goal} '{target}': weight {current:.4f} -> {new_target:.4f}"
        )

        return SensitivityResult(
            target=target,
            goal=goal,
            original_weights=dict(original),
            new_weights=dict(new_weights),
            absolute_changes=changes
        )

    def _validate(self, weights: WeightsLike, target: str, goal: str) -> Dict[str, float]:
        # check selection, target and goal
        weights = as_weight_map(weights)
        if goal not in self.config["goals"]:
            raise ConfigurationError(f"unknown optimization goal: {goal}")
        if len(weights) < self.config["min_criteria"]:
            raise ConfigurationError("select at least 2 categories for the analysis")
        if not target:
            raise ConfigurationError("select a target category to optimize")
        if target not in weights:
            raise ConfigurationError(f"target category '{target}' is not selected")

        return validate_weights(weights, list(weights), self.config["weight_tolerance"])

    # ---------- ALTERNATIVE SCORES ----------

    def analyze(self,
                data,
                supplier_column: str,
                weights: WeightsLike,
                target: str,
                goal: Optional[str] = None) -> SensitivityResult:
        # reallocate weights and rescore every alternative
        result = self.optimize(weights, target, goal)

        dataset: DatasetView = as_dataset(data)
        averages = self.category_averages(dataset, supplier_column, list(result.original_weights))

        scores = []
        for supplier, category_scores in averages.items():
            scores.append(AlternativeScore(
                supplier=supplier,
                category_scores=category_scores,
                original_score=self.weighted_score(category_scores, result.original_weights),
                new_score=self.weighted_score(category_scores, result.new_weights)
            ))

        scores.sort(key=lambda s: s.new_score, reverse=True)
        result.scores = scores
        return result

    def category_averages(self,
                          dataset: DatasetView,
                          supplier_column: str,
                          categories: Sequence[str]) -> Dict[str, Dict[str, float]]:
        # mean numeric value per alternative and category, 0 when none
        if not supplier_column:
            raise ConfigurationError("select the alternative column")

        supplier_idx = dataset.column_index(supplier_column, role="alternative column")
        cells = {c: dataset.numeric_cells(c, role="category") for c in categories}
        for category, values in cells.items():
            if np.isnan(values).all():
                self.logger.warning(f"category '{category}' contains no numeric data")
                raise EmptyVariableError(category, role="category")

        rows_by_supplier: Dict[str, List[int]] = OrderedDict()
        for row_number, row in enumerate(dataset.iter_rows()):
            if is_present(row[supplier_idx]):
                rows_by_supplier.setdefault(to_label(row[supplier_idx]), []).append(row_number)

        averages = OrderedDict()
        for supplier, row_numbers in rows_by_supplier.items():
            category_scores = {}
            for category in categories:
                values = cells[category][row_numbers]
                values = values[~np.isnan(values)]
                category_scores[category] = float(values.mean()) if len(values) else 0.0
            averages[supplier] = category_scores

        return averages

    def weighted_score(self, category_scores: Mapping[str, float], weights: Mapping[str, float]) -> float:
        # simple weighted sum, no normalization
        return float(sum(category_scores.get(c, 0.0) * w for c, w in weights.items()))
