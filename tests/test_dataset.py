"""
dataset and logging tests
cell parsing, immutable snapshot and log capture
"""

import dataclasses
import logging
import logging.handlers
import math
import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# add project root to path before any other imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import config
from core.dataset import DatasetView, NumericSeries, as_dataset, is_present, to_label, to_number
from core.decision_ranking import DecisionRankingEngine
from core.exceptions import ColumnNotFoundError, DataError, EmptyVariableError
from utils.logging_config import LogCapture, get_logger, setup_logging


# ============================================================================
#                           TEST FIXTURES
# ============================================================================

@pytest.fixture
def dataset():
    # mixed text and numeric columns with blanks
    return DatasetView.from_rows(
        ["name", "score", "comment"],
        [
            ["a", "1.5", "ok"],
            ["b", 2, None],
            ["c", "n/a", "late"],
            ["d", None, ""]
        ]
    )


# ============================================================================
#                        CELL PARSING TESTS
# ============================================================================

class TestCellParsing:
    # single cell conversion

    @pytest.mark.parametrize("cell, expected", [
        (3, 3.0),
        (2.5, 2.5),
        (" 4.25 ", 4.25),
        ("1e3", 1000.0),
        (np.int64(7), 7.0)
    ])
    def test_numbers(self, cell, expected):
        assert to_number(cell) == expected

    @pytest.mark.parametrize("cell", [None, "", "  ", "abc", True, float("nan"), float("inf"), "inf", [1]])
    def test_not_numbers(self, cell):
        assert math.isnan(to_number(cell))

    def test_presence(self):
        assert is_present(0)
        assert is_present("x")
        assert not is_present(None)
        assert not is_present("  ")
        assert not is_present(float("nan"))

    def test_labels(self):
        assert to_label(3.0) == "3"
        assert to_label(3.5) == "3.5"
        assert to_label(" Acme ") == "Acme"


# ============================================================================
#                        DATASET VIEW TESTS
# ============================================================================

class TestDatasetView:
    # snapshot construction and column access

    def test_shape(self, dataset):
        assert dataset.row_count == 4
        assert dataset.column_count == 3
        assert dataset.has_column("score")
        assert not dataset.has_column("missing")

    def test_ragged_rows_padded(self):
        view = DatasetView.from_rows(["a", "b", "c"], [[1], [1, 2, 3]])
        assert view.rows[0] == (1, None, None)

    def test_long_row_rejected(self):
        with pytest.raises(DataError):
            DatasetView.from_rows(["a"], [[1, 2]])

    def test_duplicate_columns_rejected(self):
        with pytest.raises(DataError) as exc:
            DatasetView.from_rows(["a", "a"], [])
        assert exc.value.column == "a"

    def test_frozen(self, dataset):
        with pytest.raises(dataclasses.FrozenInstanceError):
            dataset.rows = ()

    def test_numeric_series(self, dataset):
        series = dataset.numeric_series("score")

        assert series.values == (1.5, 2.0)
        assert len(series) == 2
        assert not series.is_empty

    def test_numeric_cells_row_aligned(self, dataset):
        cells = dataset.numeric_cells("score")

        assert len(cells) == dataset.row_count
        assert cells[0] == 1.5
        assert np.isnan(cells[2])

    def test_numeric_columns(self, dataset):
        assert dataset.numeric_columns() == ["score"]

    def test_missing_column(self, dataset):
        with pytest.raises(ColumnNotFoundError) as exc:
            dataset.numeric_series("weight", role="criterion")

        assert exc.value.column == "weight"
        assert "criterion 'weight'" in str(exc.value)

    def test_require_values(self, dataset):
        with pytest.raises(EmptyVariableError):
            dataset.numeric_series("comment").require_values()
        assert NumericSeries("x", (1.0,)).require_values() is not None

    def test_dataframe_roundtrip_blanks(self):
        frame = pd.DataFrame({"x": [1.0, np.nan, 3.0], "y": ["p", None, "r"]})
        view = DatasetView.from_dataframe(frame)

        assert view.rows[1] == (None, None)
        assert view.numeric_series("x").values == (1.0, 3.0)
        assert list(view.to_dataframe().columns) == ["x", "y"]

    def test_as_dataset(self, dataset):
        assert as_dataset(dataset) is dataset
        assert isinstance(as_dataset(pd.DataFrame({"a": [1]})), DatasetView)
        with pytest.raises(TypeError):
            as_dataset([[1, 2]])

    def test_column_index_stable(self, dataset):
        assert dataset.require_columns(["comment", "name"]) == [2, 0]

    def test_iter_rows(self, dataset):
        rows = list(dataset.iter_rows())

        assert len(rows) == dataset.row_count
        assert rows[3] == ("d", None, "")


# ============================================================================
#                        LOGGING TESTS
# ============================================================================

class TestLogging:
    # engine logger hierarchy and capture

    def test_child_logger_names(self):
        assert get_logger().name == config.LOGGER_NAME
        assert get_logger("ranking").name == f"{config.LOGGER_NAME}.ranking"

    def test_dropped_rows_warning(self):
        data = DatasetView.from_rows(["s", "c"], [["A", 1], ["B", "x"], ["C", 3]])

        with LogCapture("ranking") as capture:
            DecisionRankingEngine().rank(data, "s", ["c"], {"c": 1.0})

        warnings = capture.get_messages("WARNING")
        assert len(warnings) == 1
        assert "dropped 1 rows" in warnings[0]["message"]

    def test_capture_restores_level(self):
        logger = get_logger("capture-check")
        logger.setLevel("ERROR")

        with LogCapture("capture-check") as capture:
            logger.debug("visible while capturing")

        assert logger.level == 40
        assert capture.get_messages("DEBUG")[0]["message"] == "visible while capturing"

    def test_setup_console_only(self):
        logger = setup_logging("DEBUG", log_to_file=False)
        try:
            assert logger.name == config.LOGGER_NAME
            assert logger.level == logging.DEBUG
            assert len(logger.handlers) == 1
            assert isinstance(logger.handlers[0], logging.StreamHandler)
        finally:
            logger.handlers.clear()
            logger.setLevel(logging.NOTSET)

    def test_setup_with_file(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config, "APP_DATA_DIR", tmp_path)
        monkeypatch.setattr(config, "LOG_DIR", tmp_path / "logs")

        logger = setup_logging(log_to_file=True)
        try:
            file_handlers = [h for h in logger.handlers
                             if isinstance(h, logging.handlers.RotatingFileHandler)]
            assert len(logger.handlers) == 2
            assert len(file_handlers) == 1
            assert (tmp_path / "logs").is_dir()
        finally:
            for handler in logger.handlers:
                handler.close()
            logger.handlers.clear()
            logger.setLevel(logging.NOTSET)
