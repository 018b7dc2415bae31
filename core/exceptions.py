"""
analysis exceptions
configuration and data failures raised by the engine
degenerate numeric input never raises
"""

from typing import Optional


class AnalysisError(Exception):
    # base class for all engine failures
    pass


class ConfigurationError(AnalysisError):
    # missing or invalid selection, weights or parameters
    pass


class DataError(AnalysisError):
    # dataset cannot support the requested analysis

    def __init__(self, message: str, column: Optional[str] = None):
        super().__init__(message)
        self.column = column


class ColumnNotFoundError(DataError):
    # named column is absent from the dataset

    def __init__(self, column: str, role: str = "column"):
        super().__init__(f"{role} '{column}' not found in data", column)
        self.role = role


class EmptyVariableError(DataError):
    # named column holds no numeric values

    def __init__(self, column: str, role: str = "variable"):
        super().__init__(f"{role} '{column}' contains no numeric data", column)
        self.role = role
