"""
weight allocation helpers
keep criterion weights on the unit simplex
shared by ranking and sensitivity analysis
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence, Union

import config
from core.exceptions import ConfigurationError


# ============================================================================
#                               DATA CLASSES
# ============================================================================

@dataclass
class CriterionWeight:
    # weight assigned to single criterion
    criterion: str
    weight: float


WeightsLike = Union[Mapping[str, float], Sequence[CriterionWeight]]


def to_weight_list(weights: Mapping[str, float]) -> List[CriterionWeight]:
    # mapping to ordered criterion weights
    return [CriterionWeight(criterion=c, weight=float(w)) for c, w in weights.items()]


def to_weight_map(weights: Sequence[CriterionWeight]) -> Dict[str, float]:
    # criterion weights to mapping
    return {cw.criterion: float(cw.weight) for cw in weights}


def as_weight_map(weights: WeightsLike) -> Dict[str, float]:
    # accept a mapping or a list of criterion weights
    if isinstance(weights, Mapping):
        return dict(weights)
    return to_weight_map(weights)


# ============================================================================
#                             WEIGHT OPERATIONS
# ============================================================================

def equal_weights(criteria: Sequence[str]) -> Dict[str, float]:
    # equal share for every criterion
    if not criteria:
        return {}
    share = 1.0 / len(criteria)
    return {criterion: share for criterion in criteria}


def weights_sum_to_one(weights: Mapping[str, float],
                       tolerance: float = config.RANKING["weight_tolerance"]) -> bool:
    return abs(sum(weights.values()) - 1.0) < tolerance


def distribute_remaining_weight(weights: Mapping[str, float]) -> Dict[str, float]:
    # spread 1 - total over non zero weights proportionally
    result = dict(weights)
    if not result:
        return result

    total = sum(result.values())
    if total == 1:
        return result

    non_zero = {c: w for c, w in result.items() if w > 0}
    if not non_zero:
        return equal_weights(list(result))

    remaining = 1.0 - total
    total_non_zero = sum(non_zero.values())
    for criterion, weight in non_zero.items():
        result[criterion] = weight + remaining * (weight / total_non_zero)

    return result


def normalize_weights(weights: Mapping[str, float],
                      tolerance: float = config.RANKING["weight_tolerance"]) -> Dict[str, float]:
    # divide by total unless already normalized
    result = dict(weights)
    if not result:
        return result

    total = sum(result.values())
    if total <= 0:
        return equal_weights(list(result))
    if abs(total - 1.0) < tolerance:
        return result

    return {criterion: weight / total for criterion, weight in result.items()}


def adjust_weight(weights: Mapping[str, float], criterion: str, value: float) -> Dict[str, float]:
    # set one weight, capped so the total never exceeds 1
    if criterion not in weights:
        raise ConfigurationError(f"criterion '{criterion}' has no weight")
    if value < 0:
        raise ConfigurationError(f"weight for '{criterion}' must not be negative")

    result = dict(weights)
    current = result[criterion]
    total = sum(result.values())

    if total + (value - current) > 1:
        value = max(0.0, current + (1 - total))

    result[criterion] = value
    return result


def validate_weights(weights: WeightsLike,
                     criteria: Sequence[str],
                     tolerance: float = config.RANKING["weight_tolerance"]) -> Dict[str, float]:
    # weights restricted to criteria, each in [0, 1] and summing to 1
    weights = as_weight_map(weights)
    selected = {}
    for criterion in criteria:
        if criterion not in weights:
            raise ConfigurationError(f"criterion '{criterion}' has no weight")
        weight = float(weights[criterion])
        if weight < 0 or weight > 1:
            raise ConfigurationError(
                f"weight for '{criterion}' must be between 0 and 1, got {weight}"
            )
        selected[criterion] = weight

    if not weights_sum_to_one(selected, tolerance):
        raise ConfigurationError(
            f"weights must sum to 1, got {sum(selected.values()):.4f}"
        )

    return selected
