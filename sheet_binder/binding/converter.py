from __future__ import annotations

import enum
import logging
import typing
from collections.abc import Callable, Iterable
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from .errors import BindError, ConversionFailure, type_name
from .introspect import unwrap_optional
from .metadata import CONVERTER, FunctionRef
from .resolver import MethodResolver

"""Raw cell text -> typed field value.

Resolution order: explicit converter reference, converter matched by column
name, converter matched by target type, built-in coercion. A failing
conversion never aborts the row: the failure is reported and the target
type's default value is returned instead.
"""

__all__ = [
    "ValueConverter",
    "coerce",
    "default_of",
]

logger = logging.getLogger(__name__)

_TRUE = {"true", "yes", "y", "on", "1"}
_FALSE = {"false", "no", "n", "off", "0"}

_SCALAR_DEFAULTS: dict[type, Any] = {
    str: "",
    bool: False,
    int: 0,
    float: 0.0,
    Decimal: Decimal(0),
}


def default_of(target_type: Any) -> Any:
    """Zero value for value-like types, None for reference-like / optional ones."""
    _, optional = unwrap_optional(target_type)
    if optional or not isinstance(target_type, type) or typing.get_origin(target_type) is not None:
        return None
    if target_type in _SCALAR_DEFAULTS:
        return _SCALAR_DEFAULTS[target_type]
    if issubclass(target_type, enum.Enum):
        members = list(target_type)
        return members[0] if members else None
    return None


def _parse_bool(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"not a boolean: '{text}'")


def _parse_int(text: str) -> int:
    stripped = text.strip().replace("_", "")
    try:
        return int(stripped)
    except ValueError:
        pass
    try:
        number = float(stripped)  # "12.0" from spreadsheet exports
    except ValueError:
        raise ValueError(f"not an integer: '{text}'") from None
    if not number.is_integer():
        raise ValueError(f"not an integer: '{text}'")
    return int(number)


def _parse_enum(text: str, enum_type: type[enum.Enum]) -> enum.Enum:
    name = text.strip()
    try:
        return enum_type[name]
    except KeyError:
        for member in enum_type:
            if member.name.lower() == name.lower():
                return member
        raise ValueError(f"'{text}' is not a member of {enum_type.__name__}") from None


def coerce(raw: str, target_type: Any) -> Any:
    """Built-in string -> primitive coercion.

    Raises ValueError / TypeError when the text cannot be coerced or the
    target type has no built-in coercion.
    """
    inner, optional = unwrap_optional(target_type)
    if optional:
        if raw.strip() == "":
            return None
        return coerce(raw, inner)
    if target_type is Any or target_type is str:
        return raw
    if not isinstance(target_type, type) or typing.get_origin(target_type) is not None:
        raise TypeError(f"no built-in conversion to {type_name(target_type)}")
    # bool before int: bool is an int subclass
    if issubclass(target_type, bool):
        return _parse_bool(raw)
    if issubclass(target_type, enum.Enum):
        return _parse_enum(raw, target_type)
    if issubclass(target_type, int):
        return target_type(_parse_int(raw))
    if issubclass(target_type, float):
        return target_type(raw.strip())
    if issubclass(target_type, Decimal):
        try:
            return target_type(raw.strip())
        except InvalidOperation:
            raise ValueError(f"not a decimal: '{raw}'") from None
    if issubclass(target_type, datetime):
        return target_type.fromisoformat(raw.strip())
    if issubclass(target_type, date):
        return target_type.fromisoformat(raw.strip())
    if issubclass(target_type, str):
        return target_type(raw)
    raise TypeError(f"no built-in conversion to {type_name(target_type)}")


class ValueConverter:
    """Turns one raw cell into a typed value for one field."""

    def __init__(self, resolver: MethodResolver) -> None:
        self.resolver = resolver

    def select(
        self,
        column: str,
        target_type: Any,
        explicit: FunctionRef | None,
        root_type: type,
        owners: Iterable[type] = (),
    ) -> Callable[[str], Any] | None:
        if explicit is not None:
            func = self.resolver.resolve_explicit(explicit, (root_type, *owners))
            if func is not None:
                return func
            logger.warning(
                "converter '%s' not found on %s; falling back to automatic resolution",
                explicit,
                root_type.__name__,
            )
        return self.resolver.resolve(root_type, column, CONVERTER) or self.resolver.resolve(
            root_type, target_type, CONVERTER
        )

    def convert(
        self,
        column: str,
        raw: str,
        target_type: Any,
        explicit: FunctionRef | None,
        root_type: type,
        *,
        report: Callable[[BindError], None],
        owners: Iterable[type] = (),
    ) -> Any:
        """Convert ``raw`` for ``column``; on failure report and return ``default_of``."""
        func = self.select(column, target_type, explicit, root_type, owners)
        if func is not None:
            try:
                return func(raw)
            except Exception as e:
                return self._fail(column, raw, target_type, e, report)
        try:
            return coerce(raw, target_type)
        except (ValueError, TypeError, ArithmeticError) as e:
            return self._fail(column, raw, target_type, e, report)

    def _fail(
        self,
        column: str,
        raw: str,
        target_type: Any,
        error: BaseException,
        report: Callable[[BindError], None],
    ) -> Any:
        failure = ConversionFailure(column, raw, target_type, str(error) or type(error).__name__, error)
        logger.error("Failed to convert %s", failure.describe())
        report(failure)
        return default_of(target_type)
