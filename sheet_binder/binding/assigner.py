from __future__ import annotations

import logging
import typing
from collections.abc import Callable, Iterable
from typing import Any

from .errors import AssignmentFailure, BindError
from .introspect import FieldSpec, is_union
from .metadata import ASSIGNER, FunctionRef
from .resolver import MethodResolver

"""Converted value -> field write.

Resolution mirrors the converter but matches assigner functions, with the
type lookup keyed on the field's declared type. Without a custom assigner the
value is written with ``setattr`` after an assignability check. Any failure is
reported and leaves the field at its prior value.
"""

__all__ = [
    "ValueAssigner",
    "is_assignable",
]

logger = logging.getLogger(__name__)


def is_assignable(value: Any, declared: Any) -> bool:
    """Loose runtime check that ``value`` fits the declared annotation.

    None is always accepted (it is the default for reference-like types), an
    int fits a float, generics are checked against their origin and unions
    against any member. Unknown annotation shapes are accepted.
    """
    if value is None or declared is Any:
        return True
    if is_union(declared):
        return any(is_assignable(value, arg) for arg in typing.get_args(declared))
    origin = typing.get_origin(declared)
    if origin is not None:
        declared = origin
    if not isinstance(declared, type):
        return True
    if declared is float and isinstance(value, int) and not isinstance(value, bool):
        return True
    return isinstance(value, declared)


class ValueAssigner:
    """Writes a converted value into one field of one object."""

    def __init__(self, resolver: MethodResolver) -> None:
        self.resolver = resolver

    def select(
        self,
        column: str,
        declared_type: Any,
        explicit: FunctionRef | None,
        root_type: type,
        owners: Iterable[type] = (),
    ) -> Callable[[Any, Any], Any] | None:
        if explicit is not None:
            func = self.resolver.resolve_explicit(explicit, (root_type, *owners))
            if func is not None:
                return func
            logger.warning(
                "assigner '%s' not found on %s; falling back to automatic resolution",
                explicit,
                root_type.__name__,
            )
        return self.resolver.resolve(root_type, column, ASSIGNER) or self.resolver.resolve(
            root_type, declared_type, ASSIGNER
        )

    def assign(
        self,
        column: str,
        raw: str,
        target_type: Any,
        explicit: FunctionRef | None,
        root_type: type,
        field: FieldSpec,
        target: Any,
        value: Any,
        *,
        report: Callable[[BindError], None],
    ) -> bool:
        """Write ``value`` into ``field`` of ``target``. Returns False when the write failed."""
        func = self.select(column, target_type, explicit, root_type, (field.owner,))
        if func is not None:
            try:
                func(target, value)
            except Exception as e:
                self._fail(column, raw, target_type, f"assigner {_func_name(func)} raised: {e}", e, report)
                return False
            return True

        if not is_assignable(value, field.annotation):
            self._fail(
                column,
                raw,
                target_type,
                f"{type(value).__name__} value is not assignable to field '{field.name}'",
                None,
                report,
            )
            return False
        try:
            setattr(target, field.name, value)
        except (AttributeError, TypeError) as e:
            # frozen dataclasses raise FrozenInstanceError (an AttributeError)
            self._fail(column, raw, target_type, f"cannot write field '{field.name}': {e}", e, report)
            return False
        return True

    def _fail(
        self,
        column: str,
        raw: str,
        target_type: Any,
        message: str,
        error: BaseException | None,
        report: Callable[[BindError], None],
    ) -> None:
        failure = AssignmentFailure(column, raw, target_type, message, error)
        logger.error("Failed to assign %s", failure.describe())
        report(failure)


def _func_name(func: Callable[..., Any]) -> str:
    return getattr(func, "__qualname__", repr(func))
