"""sheet_binder: bind spreadsheet rows onto existing typed Python objects.

Typical use::

    from dataclasses import dataclass
    from sheet_binder import Case, sheet, sheet_field

    @sheet("1AbC...", gid="0", casing=Case.TITLE)
    @dataclass
    class Monster:
        name: str
        max_health: int = sheet_field(default=0)   # column "Max Health"
"""

from .binding import (
    AssignmentFailure,
    BindError,
    BindOutcome,
    Case,
    ConversionFailure,
    MethodResolver,
    RowBinder,
    SheetField,
    SheetRegistry,
    default_registry,
    normalize,
    sheet,
    sheet_assigner,
    sheet_converter,
    sheet_field,
    sheet_imported,
)
from .models import ImportConfig, ImportResult, RowData, SheetSource
from .services import ImportSession, InMemoryObjectStore, ObjectStore, PostImportNotifier
from .tabular import FetchFailure, SheetFetcher, SheetTable

__version__ = "0.1.0"

__all__ = [
    "AssignmentFailure",
    "BindError",
    "BindOutcome",
    "Case",
    "ConversionFailure",
    "FetchFailure",
    "ImportConfig",
    "ImportResult",
    "ImportSession",
    "InMemoryObjectStore",
    "MethodResolver",
    "ObjectStore",
    "PostImportNotifier",
    "RowBinder",
    "RowData",
    "SheetField",
    "SheetFetcher",
    "SheetRegistry",
    "SheetSource",
    "SheetTable",
    "default_registry",
    "normalize",
    "sheet",
    "sheet_assigner",
    "sheet_converter",
    "sheet_field",
    "sheet_imported",
]
