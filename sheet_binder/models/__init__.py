"""Domain models for the sheet import tool.

This package contains the plain data classes shared by the binder, the import
session and the CLI.
"""

from .config_models import ImportConfig, SourceOverride
from .error_record import ErrorRecord
from .processing_result import ImportResult, SourceStat
from .row_data import RowData
from .sheet_source import SheetSource, SourceStatus

__all__ = [
    # Configuration models
    "ImportConfig",
    "SourceOverride",
    # Processing models
    "ErrorRecord",
    "ImportResult",
    "RowData",
    "SheetSource",
    "SourceStat",
    "SourceStatus",
]
