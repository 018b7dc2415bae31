"""
decision ranking module
ranks alternatives over weighted criteria
supports topsis and euclidean distance scoring
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

import config
from core.dataset import DatasetView, as_dataset, is_present, to_label
from core.exceptions import ConfigurationError, EmptyVariableError
from core.weights import CriterionWeight, WeightsLike, to_weight_list, validate_weights
from utils.logging_config import get_logger


# ============================================================================
#                               DATA CLASSES
# ============================================================================

@dataclass
class SupplierScore:
    # ranking row for single alternative
    supplier: str
    score: float
    criteria_scores: Dict[str, float]
    distance: Optional[float] = None
    original_rank: int = 0
    rank: int = 0
    rank_change: int = 0    # original rank - new rank, positive means improved


@dataclass
class RankingResult:
    # ranked alternatives for one method
    method: str
    identifier_column: str
    criteria: List[str]
    weights: Dict[str, float]
    ranked: List[SupplierScore]
    dropped_rows: int = 0

    def weight_list(self) -> List[CriterionWeight]:
        # weights in criteria order
        return to_weight_list({c: self.weights[c] for c in self.criteria})

    def get_score(self, supplier: str) -> Optional[SupplierScore]:
        # first ranking row for alternative
        for row in self.ranked:
            if row.supplier == supplier:
                return row
        return None

    def to_dataframe(self) -> pd.DataFrame:
        # ranking table with one column per criterion score
        rows = []
        for row in self.ranked:
            record = {
                "rank": row.rank,
                "supplier": row.supplier,
                "score": row.score,
                "distance": row.distance,
                "original_rank": row.original_rank,
                "rank_change": row.rank_change
            }
            for criterion in self.criteria:
                record[criterion] = row.criteria_scores.get(criterion)
            rows.append(record)

        df = pd.DataFrame(rows)
        if self.method != "euclidean" and not df.empty:
            df = df.drop(columns=["distance"])
        return df


@dataclass
class CriteriaMatrix:
    # alternatives aligned with criterion values
    alternatives: List[str]
    values: Dict[str, np.ndarray] = field(default_factory=dict)
    dropped_rows: int = 0


# ============================================================================
#                          DECISION RANKING ENGINE
# ============================================================================

class DecisionRankingEngine:
    # weighted multi criteria ranking with rank change tracking

    def __init__(self):
        # initialize with ranking configuration
        self.config = dict(config.RANKING)
        self.logger = get_logger("ranking")

    # ---------- MAIN RANKING ----------

    def rank(self,
             data,
             identifier_column: str,
             criteria: Sequence[str],
             weights: WeightsLike,
             method: Optional[str] = None) -> RankingResult:
        # rank alternatives with selected method
        method = method or self.config["default_method"]
        if method not in self.config["methods"]:
            raise ConfigurationError(f"unknown ranking method: {method}")

        if not identifier_column:
            raise ConfigurationError("select the alternative column")

        selected = list(dict.fromkeys(criteria))
        if not selected:
            raise ConfigurationError("select at least one criterion")

        selected_weights = validate_weights(weights, selected, self.config["weight_tolerance"])

        dataset = as_dataset(data)
        matrix = self.extract_criteria(dataset, identifier_column, selected)

        self.logger.info(
            f"{config.METHOD_LABELS[method]} ranking started: "
            f"{len(matrix.alternatives)} alternatives, {len(selected)} criteria"
        )

        baseline = self.baseline_ranks(matrix, selected_weights)

        if method == "topsis":
            scores, criteria_scores, distances = self.topsis(matrix, selected_weights)
        else:
            scores, criteria_scores, distances = self.euclidean(matrix, selected_weights)

        ranked = self._assemble(matrix, scores, criteria_scores, distances, baseline)

        self.logger.info(f"{config.METHOD_LABELS[method]} ranking complete")

        return RankingResult(
            method=method,
            identifier_column=identifier_column,
            criteria=selected,
            weights=selected_weights,
            ranked=ranked,
            dropped_rows=matrix.dropped_rows
        )

    # ---------- DATA EXTRACTION ----------

    def extract_criteria(self,
                         dataset: DatasetView,
                         identifier_column: str,
                         criteria: Sequence[str]) -> CriteriaMatrix:
        # criterion values aligned with alternative rows
        id_idx = dataset.column_index(identifier_column, role="identifier column")
        cells = {c: dataset.numeric_cells(c, role="criterion") for c in criteria}

        # skip rows without identifier
        kept = [i for i, row in enumerate(dataset.rows) if is_present(row[id_idx])]
        kept_idx = np.asarray(kept, dtype=int)

        complete = np.ones(len(kept), dtype=bool)
        for criterion in criteria:
            values = cells[criterion][kept_idx] if len(kept) else np.array([], dtype=float)
            numeric = ~np.isnan(values)
            if not numeric.any():
                self.logger.warning(f"criterion '{criterion}' contains no numeric data")
                raise EmptyVariableError(criterion, role="criterion")
            complete &= numeric

        dropped = int((~complete).sum())
        if dropped:
            self.logger.warning(f"dropped {dropped} rows with non numeric criterion values")

        rows = kept_idx[complete]
        return CriteriaMatrix(
            alternatives=[to_label(dataset.rows[i][id_idx]) for i in rows],
            values={c: cells[c][rows] for c in criteria},
            dropped_rows=dropped
        )

    # ---------- BASELINE ----------

    def baseline_ranks(self, matrix: CriteriaMatrix, weights: Mapping[str, float]) -> List[int]:
        # rank per alternative from weighted average of raw values
        n = len(matrix.alternatives)
        if n == 0:
            return []

        totals = np.zeros(n)
        for criterion, values in matrix.values.items():
            totals += values * weights[criterion]
        averages = totals / len(matrix.values)

        order = sorted(range(n), key=lambda i: averages[i], reverse=True)
        ranks = [0] * n
        for position, i in enumerate(order):
            ranks[i] = position + 1
        return ranks

    # ---------- SCORING METHODS ----------

    def topsis(self,
               matrix: CriteriaMatrix,
               weights: Mapping[str, float]) -> Tuple[np.ndarray, Dict[str, np.ndarray], None]:
        # per criterion closeness to ideal after vector normalization
        n = len(matrix.alternatives)
        scores = np.zeros(n)
        criteria_scores = {}

        for criterion, values in matrix.values.items():
            norm = float(np.sqrt(np.sum(values * values)))
            normalized = np.zeros(n) if norm == 0 else values / norm

            if n:
                ideal = normalized.max()
                anti_ideal = normalized.min()
            else:
                ideal = anti_ideal = 0.0

            to_ideal = np.abs(normalized - ideal)
            to_anti_ideal = np.abs(normalized - anti_ideal)
            total = to_ideal + to_anti_ideal

            # both distances zero divides by 1
            criterion_scores = to_anti_ideal / np.where(total == 0, 1.0, total)

            criteria_scores[criterion] = criterion_scores
            scores += criterion_scores * weights[criterion]

        return scores, criteria_scores, None

    def euclidean(self,
                  matrix: CriteriaMatrix,
                  weights: Mapping[str, float]) -> Tuple[np.ndarray, Dict[str, np.ndarray], np.ndarray]:
        # per criterion distance to ideal point after min-max normalization
        n = len(matrix.alternatives)
        ideal = self.config["ideal_point"]
        scores = np.zeros(n)
        distances = np.zeros(n)
        criteria_scores = {}

        for criterion, values in matrix.values.items():
            if n == 0:
                normalized = np.zeros(0)
            else:
                low = values.min()
                high = values.max()
                if high == low:
                    normalized = np.full(n, self.config["constant_column_score"])
                else:
                    normalized = (values - low) / (high - low)

            criterion_scores = 1 - np.abs(normalized - ideal)

            criteria_scores[criterion] = criterion_scores
            scores += criterion_scores * weights[criterion]
            distances += (1 - criterion_scores) * weights[criterion]

        return scores, criteria_scores, distances

    # ---------- RESULT ASSEMBLY ----------

    def _assemble(self,
                  matrix: CriteriaMatrix,
                  scores: np.ndarray,
                  criteria_scores: Dict[str, np.ndarray],
                  distances: Optional[np.ndarray],
                  baseline: List[int]) -> List[SupplierScore]:
        # sort by score descending, ties keep input order
        n = len(matrix.alternatives)
        order = sorted(range(n), key=lambda i: scores[i], reverse=True)

        ranked = []
        for position, i in enumerate(order):
            new_rank = position + 1
            ranked.append(SupplierScore(
                supplier=matrix.alternatives[i],
                score=float(scores[i]),
                criteria_scores={c: float(v[i]) for c, v in criteria_scores.items()},
                distance=None if distances is None else float(distances[i]),
                original_rank=baseline[i],
                rank=new_rank,
                rank_change=baseline[i] - new_rank
            ))

        return ranked
