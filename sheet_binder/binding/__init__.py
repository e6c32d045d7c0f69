"""Reflective row binding.

Declares bindable record types (``@sheet``, ``sheet_field``), resolves
converter/assigner functions for them and binds tabular rows onto existing
objects.
"""

from .binder import BindOutcome, BindPass, RowBinder
from .case import Case, normalize, split_words
from .converter import ValueConverter, coerce, default_of
from .assigner import ValueAssigner, is_assignable
from .errors import AssignmentFailure, BindError, ConversionFailure
from .introspect import FieldSpec, field_specs
from .metadata import SheetField, SheetInfo, sheet_assigner, sheet_converter, sheet_field
from .registry import SheetRegistry, default_registry, sheet, sheet_imported
from .resolver import MethodResolver, ResolutionTable

__all__ = [
    # Declaration
    "Case",
    "SheetField",
    "SheetInfo",
    "SheetRegistry",
    "default_registry",
    "sheet",
    "sheet_field",
    "sheet_converter",
    "sheet_assigner",
    "sheet_imported",
    # Binding
    "BindOutcome",
    "BindPass",
    "RowBinder",
    "MethodResolver",
    "ResolutionTable",
    "ValueConverter",
    "ValueAssigner",
    "FieldSpec",
    "field_specs",
    "normalize",
    "split_words",
    "coerce",
    "default_of",
    "is_assignable",
    # Failures
    "BindError",
    "ConversionFailure",
    "AssignmentFailure",
]
