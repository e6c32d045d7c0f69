from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..models.sheet_source import SheetSource
from .case import Case

"""Declarative binding metadata.

Fields opt in to binding through ``sheet_field(...)`` (dataclass field
metadata) or ``Annotated[T, SheetField(...)]``. Converter and assigner
functions are marked with ``@sheet_converter`` / ``@sheet_assigner``; the marks
are plain attributes read once per type by the resolver.
"""

__all__ = [
    "SHEET_FIELD_KEY",
    "CONVERTER",
    "ASSIGNER",
    "FunctionRef",
    "SheetField",
    "SheetInfo",
    "MethodBinding",
    "sheet_field",
    "sheet_converter",
    "sheet_assigner",
    "method_bindings",
]

SHEET_FIELD_KEY = "sheet_binder.field"
_BINDINGS_ATTR = "__sheet_bindings__"

CONVERTER = "converter"
ASSIGNER = "assigner"

# Explicit function reference: a callable, or the name of a static/class method
FunctionRef = Callable[..., Any] | str


@dataclass(frozen=True)
class SheetField:
    """Binding metadata for one field.

    ``column=None`` derives the column from the field name using the record
    type's casing policy.
    """
    column: str | None = None
    converter: FunctionRef | None = None
    assigner: FunctionRef | None = None


@dataclass(frozen=True)
class SheetInfo:
    """Record-type metadata attached by ``@sheet``.

    ``casing=None`` defers to the configured default casing.
    """
    source: SheetSource
    casing: Case | None = None


@dataclass(frozen=True)
class MethodBinding:
    """What a converter/assigner function is matched against.

    Exactly one of ``column`` / ``value_type`` is set.
    """
    kind: str
    column: str | None = None
    value_type: Any = None

    def __post_init__(self) -> None:
        if self.kind not in (CONVERTER, ASSIGNER):
            raise ValueError(f"unknown binding kind '{self.kind}'")
        if (self.column is None) == (self.value_type is None):
            raise ValueError("exactly one of column / value_type must be given")


def sheet_field(
    column: str | None = None,
    *,
    converter: FunctionRef | None = None,
    assigner: FunctionRef | None = None,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
    **kwargs: Any,
) -> Any:
    """``dataclasses.field`` carrying a SheetField in its metadata.

    Example:
        >>> @dataclass
        ... class Monster:
        ...     health: int = sheet_field("Health", default=0)
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[SHEET_FIELD_KEY] = SheetField(column=column, converter=converter, assigner=assigner)
    return dataclasses.field(
        default=default, default_factory=default_factory, metadata=metadata, **kwargs
    )


def _unwrap(func: Any) -> Any:
    # staticmethod / classmethod objects carry the marks on the wrapped function
    return getattr(func, "__func__", func)


def _mark(kind: str, column: str | None, value_type: Any) -> Callable[[Any], Any]:
    binding = MethodBinding(kind=kind, column=column, value_type=value_type)

    def decorator(func: Any) -> Any:
        target = _unwrap(func)
        existing = list(getattr(target, _BINDINGS_ATTR, ()))
        existing.append(binding)
        setattr(target, _BINDINGS_ATTR, tuple(existing))
        return func

    return decorator


def sheet_converter(column: str | None = None, *, value_type: Any = None) -> Callable[[Any], Any]:
    """Mark a ``str -> value`` function as a converter.

    Matched by column name, or by the target value type of the field. May be
    stacked to serve several columns/types.
    """
    return _mark(CONVERTER, column, value_type)


def sheet_assigner(column: str | None = None, *, value_type: Any = None) -> Callable[[Any], Any]:
    """Mark a ``(target, value) -> None`` function as a custom assigner."""
    return _mark(ASSIGNER, column, value_type)


def method_bindings(obj: Any) -> tuple[MethodBinding, ...]:
    """Marks attached to a function, staticmethod or classmethod (empty if none)."""
    target = _unwrap(obj)
    if not callable(target):
        return ()
    return tuple(getattr(target, _BINDINGS_ATTR, ()))
