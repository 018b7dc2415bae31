"""
weight sensitivity tests
target weight reallocation and alternative rescoring
"""

import sys
from pathlib import Path

import pytest

# add project root to path before any other imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.dataset import DatasetView
from core.exceptions import ColumnNotFoundError, ConfigurationError, EmptyVariableError
from core.weight_sensitivity import WeightSensitivityOptimizer
from core.weights import CriterionWeight
from utils.logging_config import LogCapture


# ============================================================================
#                           TEST FIXTURES
# ============================================================================

@pytest.fixture
def optimizer():
    return WeightSensitivityOptimizer()


@pytest.fixture
def three_weights():
    return {"a": 0.3, "b": 0.5, "c": 0.2}


@pytest.fixture
def supplier_data():
    # two rows for A, one for B, one row without supplier
    return DatasetView.from_rows(
        ["supplier", "Price", "Quality"],
        [
            ["A", 10, 5],
            ["B", 30, 1],
            ["A", 20, 7],
            [None, 99, 99]
        ]
    )


# ============================================================================
#                        REALLOCATION TESTS
# ============================================================================

class TestReallocation:
    # closed form target weight movement

    def test_maximize_doubles(self, optimizer, three_weights):
        result = optimizer.optimize(three_weights, "a", "maximize")

        assert result.new_weights["a"] == pytest.approx(0.6)
        assert result.new_weights["b"] == pytest.approx(0.4 * 0.5 / 0.7)
        assert result.new_weights["c"] == pytest.approx(0.4 * 0.2 / 0.7)
        assert result.absolute_changes["a"] == pytest.approx(0.3)

    def test_maximize_capped(self, optimizer):
        result = optimizer.optimize({"a": 0.6, "b": 0.4}, "a", "maximize")

        assert result.new_weights["a"] == pytest.approx(0.9)
        assert result.new_weights["b"] == pytest.approx(0.1)

    def test_minimize_halves(self, optimizer):
        result = optimizer.optimize({"a": 0.3, "b": 0.7}, "a", "minimize")
        assert result.new_weights["a"] == pytest.approx(0.15)

    def test_minimize_floored(self, optimizer):
        result = optimizer.optimize({"a": 0.15, "b": 0.85}, "a", "minimize")
        assert result.new_weights["a"] == pytest.approx(0.1)

    def test_small_target_clamped_up(self, optimizer):
        # doubling 0.02 still lands below the floor
        result = optimizer.optimize({"a": 0.02, "b": 0.98}, "a", "maximize")
        assert result.new_weights["a"] == pytest.approx(0.1)

    def test_zero_others_split_equally(self, optimizer):
        result = optimizer.optimize({"a": 1.0, "b": 0.0, "c": 0.0}, "a", "minimize")

        assert result.new_weights["a"] == pytest.approx(0.5)
        assert result.new_weights["b"] == pytest.approx(0.25)
        assert result.new_weights["c"] == pytest.approx(0.25)

    @pytest.mark.parametrize("goal", ["maximize", "minimize"])
    @pytest.mark.parametrize("target", ["a", "b", "c"])
    def test_weights_stay_on_simplex(self, optimizer, three_weights, goal, target):
        result = optimizer.optimize(three_weights, target, goal)

        assert sum(result.new_weights.values()) == pytest.approx(1.0)
        assert 0.1 <= result.new_weights[target] <= 0.9
        assert all(w >= 0 for w in result.new_weights.values())

    def test_direction(self, optimizer, three_weights):
        result = optimizer.optimize(three_weights, "a", "maximize")

        assert result.direction("a") == "increase"
        assert result.direction("b") == "decrease"

        unchanged = optimizer.optimize({"a": 0.9, "b": 0.1}, "a", "maximize")
        assert unchanged.direction("a") == "no change"

    def test_weights_dataframe(self, optimizer, three_weights):
        frame = optimizer.optimize(three_weights, "b", "minimize").weights_dataframe()

        assert list(frame["criterion"]) == ["a", "b", "c"]
        assert frame.loc[frame["is_target"], "criterion"].tolist() == ["b"]


# ============================================================================
#                        RESCORING TESTS
# ============================================================================

class TestRescoring:
    # alternative scores before and after reallocation

    def test_scores(self, optimizer, supplier_data):
        result = optimizer.analyze(supplier_data, "supplier",
                                   {"Price": 0.5, "Quality": 0.5}, "Quality", "maximize")

        assert result.new_weights["Quality"] == pytest.approx(0.9)
        assert result.new_weights["Price"] == pytest.approx(0.1)

        assert [s.supplier for s in result.scores] == ["A", "B"]
        a, b = result.scores
        assert a.category_scores == {"Price": 15.0, "Quality": 6.0}
        assert a.new_score == pytest.approx(6.9)
        assert b.new_score == pytest.approx(3.9)
        assert a.original_score == pytest.approx(10.5)
        assert b.original_score == pytest.approx(15.5)
        assert b.score_change == pytest.approx(-11.6)

    def test_missing_values_average_zero(self, optimizer):
        data = DatasetView.from_rows(
            ["s", "x", "y"],
            [["A", 4, "n/a"], ["B", 2, 6]]
        )
        result = optimizer.analyze(data, "s", {"x": 0.5, "y": 0.5}, "x", "minimize")

        scores = {s.supplier: s for s in result.scores}
        assert scores["A"].category_scores["y"] == 0.0
        assert scores["B"].category_scores["y"] == 6.0

    def test_dataframe_output(self, optimizer, supplier_data):
        result = optimizer.analyze(supplier_data, "supplier",
                                   {"Price": 0.5, "Quality": 0.5}, "Quality", "maximize")
        frame = result.to_dataframe()

        assert list(frame["rank"]) == [1, 2]
        assert list(frame["supplier"]) == ["A", "B"]

    def test_deterministic(self, optimizer, supplier_data):
        weights = {"Price": 0.4, "Quality": 0.6}
        first = optimizer.analyze(supplier_data, "supplier", weights, "Price", "minimize")
        second = optimizer.analyze(supplier_data, "supplier", weights, "Price", "minimize")
        assert first == second

    def test_accepts_criterion_weights(self, optimizer, supplier_data):
        weights = [CriterionWeight("Price", 0.5), CriterionWeight("Quality", 0.5)]
        result = optimizer.analyze(supplier_data, "supplier", weights, "Quality", "maximize")

        assert result.original_weights == {"Price": 0.5, "Quality": 0.5}
        assert result.new_weights["Quality"] == pytest.approx(0.9)


# ============================================================================
#                        FAILURE TESTS
# ============================================================================

class TestSensitivityErrors:
    # configuration and data failures

    def test_unknown_goal(self, optimizer, three_weights):
        with pytest.raises(ConfigurationError):
            optimizer.optimize(three_weights, "a", "balance")

    def test_needs_two_criteria(self, optimizer):
        with pytest.raises(ConfigurationError):
            optimizer.optimize({"a": 1.0}, "a")

    def test_target_required(self, optimizer, three_weights):
        with pytest.raises(ConfigurationError):
            optimizer.optimize(three_weights, "")
        with pytest.raises(ConfigurationError):
            optimizer.optimize(three_weights, "d")

    def test_weights_must_sum_to_one(self, optimizer):
        with pytest.raises(ConfigurationError):
            optimizer.optimize({"a": 0.3, "b": 0.3}, "a")

    def test_missing_supplier_column(self, optimizer, supplier_data):
        with pytest.raises(ColumnNotFoundError):
            optimizer.analyze(supplier_data, "vendor",
                              {"Price": 0.5, "Quality": 0.5}, "Quality")

    def test_text_category_rejected(self, optimizer):
        data = DatasetView.from_rows(
            ["supplier", "quality", "notes"],
            [["A", 4, "late"], ["B", 2, "ok"]]
        )
        with LogCapture("sensitivity") as capture:
            with pytest.raises(EmptyVariableError) as exc:
                optimizer.analyze(data, "supplier", {"quality": 0.5, "notes": 0.5}, "notes", "maximize")

        assert exc.value.column == "notes"
        assert len(capture.get_messages("WARNING")) == 1
