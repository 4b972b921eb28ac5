"""Type-constraint converters for route parameters.

Built-in converters for parameter constraints like ``{id:int}`` plus a
registry for application-defined types. A converter is any callable taking
the raw argument text and returning the converted value; it signals bad input
by raising ``ValueError``, ``TypeError`` or ``ArithmeticError``.
"""

import ipaddress
import re
import uuid
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
from pathlib import Path
from typing import Any
from urllib.parse import SplitResult, urlsplit

from ..common.logging import get_logger
from ..exceptions import ConversionError

logger = get_logger(__name__)

Converter = Callable[[str], Any]

_INTEGER_RE = re.compile(r"^\s*[+-]?[0-9]+\s*$")
_TIMESPAN_RE = re.compile(
    r"^\s*(?P<sign>-)?(?:(?P<days>[0-9]+)\.)?(?P<hours>[0-9]{1,2}):(?P<minutes>[0-9]{1,2})"
    r"(?::(?P<seconds>[0-9]{1,2})(?:\.(?P<fraction>[0-9]{1,7}))?)?\s*$"
)
_TIMESPAN_DAYS_RE = re.compile(r"^\s*(?P<sign>-)?(?P<days>[0-9]+)\s*$")
_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")
_FLOAT32_MAX = 3.4028234663852886e38

# (min, max) for each fixed-width integer constraint
_INTEGER_RANGES: dict[str, tuple[int, int]] = {
    "byte": (0, 2**8 - 1),
    "sbyte": (-(2**7), 2**7 - 1),
    "short": (-(2**15), 2**15 - 1),
    "ushort": (0, 2**16 - 1),
    "int": (-(2**31), 2**31 - 1),
    "uint": (0, 2**32 - 1),
    "long": (-(2**63), 2**63 - 1),
    "ulong": (0, 2**64 - 1),
}

# Alternative spellings accepted for built-in constraints
_ALIASES: dict[str, str] = {
    "int16": "short",
    "int32": "int",
    "int64": "long",
    "uint16": "ushort",
    "uint32": "uint",
    "uint64": "ulong",
    "single": "float",
    "boolean": "bool",
}


def _integer(type_name: str) -> Converter:
    low, high = _INTEGER_RANGES[type_name]

    def convert(text: str) -> int:
        if not _INTEGER_RE.match(text):
            raise ValueError("not an integer")
        value = int(text)
        if not low <= value <= high:
            raise ValueError(f"out of range for {type_name} ({low}..{high})")
        return value

    return convert


def _double(text: str) -> float:
    if "_" in text:
        raise ValueError("not a number")
    return float(text)


def _single(text: str) -> float:
    value = _double(text)
    if abs(value) > _FLOAT32_MAX and value not in (float("inf"), float("-inf")):
        raise ValueError("out of range for float")
    return value


def _decimal(text: str) -> Decimal:
    try:
        value = Decimal(text.strip())
    except InvalidOperation:
        raise ValueError("not a decimal number") from None
    if not value.is_finite():
        raise ValueError("not a finite decimal number")
    return value


def _bool(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError("expected 'true' or 'false'")


def _char(text: str) -> str:
    if len(text) != 1:
        raise ValueError("expected exactly one character")
    return text


def _timespan(text: str) -> timedelta:
    days_only = _TIMESPAN_DAYS_RE.match(text)
    if days_only:
        value = timedelta(days=int(days_only["days"]))
        return -value if days_only["sign"] else value

    found = _TIMESPAN_RE.match(text)
    if not found:
        raise ValueError("expected [-][d.]hh:mm[:ss[.fffffff]]")
    hours = int(found["hours"])
    minutes = int(found["minutes"])
    seconds = int(found["seconds"] or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        raise ValueError("time component out of range")
    fraction = found["fraction"] or "0"
    value = timedelta(
        days=int(found["days"] or 0),
        hours=hours,
        minutes=minutes,
        seconds=seconds,
        microseconds=int(fraction.ljust(7, "0")) // 10,
    )
    return -value if found["sign"] else value


def _uri(text: str) -> SplitResult:
    if not text or any(ch.isspace() for ch in text):
        raise ValueError("not a valid URI")
    return urlsplit(text)


def _path(text: str) -> Path:
    if not text or "\x00" in text:
        raise ValueError("not a valid path")
    return Path(text)


def _ip_address(text: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
    return ipaddress.ip_address(text.strip())


# (converter, python_type) for each built-in constraint
BUILTIN_CONVERTERS: dict[str, tuple[Converter, Any]] = {
    **{name: (_integer(name), int) for name in _INTEGER_RANGES},
    "string": (str, str),
    "double": (_double, float),
    "float": (_single, float),
    "decimal": (_decimal, Decimal),
    "bool": (_bool, bool),
    "char": (_char, str),
    "guid": (uuid.UUID, uuid.UUID),
    "datetime": (datetime.fromisoformat, datetime),
    "dateonly": (date.fromisoformat, date),
    "timeonly": (time.fromisoformat, time),
    "timespan": (_timespan, timedelta),
    "uri": (_uri, SplitResult),
    "fileinfo": (_path, Path),
    "directoryinfo": (_path, Path),
    "ipaddress": (_ip_address, ipaddress.IPv4Address | ipaddress.IPv6Address),
}


@dataclass(frozen=True, slots=True)
class TypeConverter:
    """A resolved type constraint bound to its conversion function."""

    name: str
    convert: Converter
    python_type: Any = None

    def convert_arg(self, name: str, raw: str) -> Any:
        """Convert one raw argument.

        Args:
            name: Bound parameter name, used in the error
            raw: Raw argument text

        Returns:
            Converted value

        Raises:
            ConversionError: If the converter rejects the text
        """
        try:
            return self.convert(raw)
        except (ValueError, TypeError, ArithmeticError) as e:
            raise ConversionError(name, raw, self.name, str(e)) from e


class ConverterRegistry:
    """Maps type-constraint names to converters.

    Lookups are case-insensitive and ignore a trailing ``?``. Converters must
    be registered before any pattern using them is compiled; compiled routes
    keep a reference to the converter they resolved.
    """

    def __init__(self, include_builtins: bool = True) -> None:
        self._converters: dict[str, TypeConverter] = {}
        if include_builtins:
            for name, (convert, python_type) in BUILTIN_CONVERTERS.items():
                self._converters[name] = TypeConverter(name, convert, python_type)
            for alias, target in _ALIASES.items():
                self._converters[alias] = self._converters[target]

    @staticmethod
    def _normalize(name: str) -> str:
        return name.strip().rstrip("?").lower()

    def register(
        self,
        name: str,
        converter: Converter,
        *,
        python_type: Any = None,
        replace: bool = False,
    ) -> TypeConverter:
        """Register a converter under a constraint name.

        Args:
            name: Constraint name used in patterns (``{x:name}``)
            converter: Callable converting raw text, raising ValueError on bad input
            python_type: Optional result type, informational only
            replace: Allow overriding an existing registration

        Returns:
            The registered converter entry

        Raises:
            ValueError: If the name is invalid or already registered
            TypeError: If converter is not callable
        """
        if not isinstance(name, str) or not _NAME_RE.match(name.strip()):
            raise ValueError(f"Invalid type constraint name: {name!r}")
        if not callable(converter):
            raise TypeError(f"Converter for '{name}' must be callable")

        key = self._normalize(name)
        if key in self._converters and not replace:
            raise ValueError(f"Type constraint '{name}' is already registered")

        entry = TypeConverter(key, converter, python_type)
        self._converters[key] = entry
        logger.debug("Type converter registered", type_name=key, replace=replace)
        return entry

    def register_enum(
        self, name: str, enum_cls: type[Enum], *, replace: bool = False
    ) -> TypeConverter:
        """Register a case-insensitive converter for an Enum class.

        Members are matched by name first, then by string value.
        """
        by_name = {member.name.lower(): member for member in enum_cls}
        by_value = {str(member.value).lower(): member for member in enum_cls}

        def convert(text: str) -> Enum:
            lowered = text.strip().lower()
            if lowered in by_name:
                return by_name[lowered]
            if lowered in by_value:
                return by_value[lowered]
            choices = ", ".join(member.name for member in enum_cls)
            raise ValueError(f"expected one of: {choices}")

        return self.register(name, convert, python_type=enum_cls, replace=replace)

    def resolve(self, name: str) -> TypeConverter | None:
        """Look up a constraint name, returning None when unknown."""
        return self._converters.get(self._normalize(name))

    def copy(self) -> "ConverterRegistry":
        """Independent registry with the same registrations."""
        clone = ConverterRegistry(include_builtins=False)
        clone._converters = dict(self._converters)
        return clone

    def names(self) -> list[str]:
        """All registered constraint names, aliases included."""
        return sorted(self._converters)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.resolve(name) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._converters)


default_registry = ConverterRegistry()


def register_converter(
    name: str,
    converter: Converter,
    *,
    python_type: Any = None,
    replace: bool = False,
) -> TypeConverter:
    """Register a converter in the default registry.

    See ``ConverterRegistry.register``.
    """
    return default_registry.register(
        name, converter, python_type=python_type, replace=replace
    )
