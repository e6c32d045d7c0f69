from __future__ import annotations

from typing import Any

"""Field-level binding failures.

Neither failure aborts a row: the converter substitutes the target type's
default and the assigner leaves the field untouched. Both are reported to the
caller through a ``report`` callable so the session can log them with
source/row context.
"""

__all__ = [
    "BindError",
    "ConversionFailure",
    "AssignmentFailure",
    "type_name",
]


def type_name(tp: Any) -> str:
    """Readable name for a (possibly generic) annotation."""
    if isinstance(tp, type):
        return tp.__name__
    return str(tp).replace("typing.", "")


class BindError(Exception):
    """Base class for per-field failures raised during a bind pass."""

    error_type = "BIND_ERROR"

    def __init__(
        self,
        column: str,
        raw: str | None,
        target_type: Any,
        message: str,
        cause: BaseException | None = None,
    ) -> None:
        self.column = column
        self.raw = raw
        self.target_type = target_type
        self.message = message
        self.cause = cause
        super().__init__(self.describe())

    def describe(self) -> str:
        return (
            f"column='{self.column}' input='{self.raw}' "
            f"target={type_name(self.target_type)}: {self.message}"
        )


class ConversionFailure(BindError):
    """Raw text could not be turned into the field's value type."""

    error_type = "CONVERSION_FAILURE"


class AssignmentFailure(BindError):
    """A converted value could not be written into the field."""

    error_type = "ASSIGNMENT_FAILURE"
