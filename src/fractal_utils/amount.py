"""
amount.py — Fixed-point currency amount for Fractal Global Credits

================================================================================
DESIGN PRINCIPLES
================================================================================

1. INTERNAL REPRESENTATION
   An unsigned 64 bit integer of thousandths: a value of 1_000 is displayed
   as 1, a value of 1_654 as 1.654. Never floating point internally.

2. NO SIGN
   Amounts are unsigned. Any operation whose result would leave
   [0, 2**64 - 1] raises OverflowError instead of wrapping.

3. IMMUTABILITY
   Frozen dataclass. Every operation returns a new instance.

4. EXACT TEXT FORMAT
   [<digits>][.<digits>], ASCII digits only, no sign, no grouping, no
   exponent. Extra decimals are rounded half-up to thousandths while
   parsing; display precision is rounded half-up while formatting.

5. INTERCHANGE
   The raw integer (``value``) is the serialization form. The float
   conversion exists only for systems that insist on approximate JSON
   numbers and must never be used for storage.

================================================================================
USAGE
================================================================================

    amount = Amount.from_repr(1_654)      # 1.654
    ten = Amount.parse("10")
    assert amount + ten == Amount.from_repr(11_654)

    assert f"{Amount.from_repr(56_000):.2}" == "56.00"
    assert f"{Amount.from_repr(56_000):05.1}" == "056.0"

================================================================================
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Final, Optional

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema


logger = logging.getLogger(__name__)


# ==============================================================================
# CONSTANTS
# ==============================================================================

# The symbol of Fractal Global Credits: dotted lunate sigma, U+03FE.
CURRENCY_SYMBOL: Final[str] = "Ͼ"

# Representation units per displayed unit.
SCALE: Final[int] = 1_000

# Decimal digits carried by the representation.
FRACTION_DIGITS: Final[int] = 3

U64_MAX: Final[int] = 2**64 - 1

# Largest integer part that can still be scaled without overflowing.
MAX_UNITS: Final[int] = U64_MAX // SCALE

_DIGITS = re.compile(r"[0-9]+")
_U64_DIGITS = len(str(U64_MAX))
_FORMAT_SPEC = re.compile(r"(?P<zero>0)?(?P<width>[0-9]+)?(?:\.(?P<precision>[0-9]+))?")


def _parse_u64(text: str) -> int:
    """Parses an unsigned 64 bit integer written in plain ASCII digits."""
    if not text:
        raise ValueError("cannot parse integer from empty string")
    if _DIGITS.fullmatch(text) is None:
        raise ValueError(f"invalid digit found in string {text!r}")
    # Leading zeros are dropped so int() never meets its digit limit.
    significant = text.lstrip("0") or "0"
    if len(significant) > _U64_DIGITS:
        raise ValueError(f"number {text!r} too large to fit in an unsigned 64 bit integer")
    value = int(significant)
    if value > U64_MAX:
        raise ValueError(f"number {text!r} too large to fit in an unsigned 64 bit integer")
    return value


# ==============================================================================
# PARSE ERRORS
# ==============================================================================

class AmountParseErrorKind(Enum):
    """Reasons for which a string is not a valid amount."""
    MULTIPLE_SEPARATORS = (
        "multiple_separators",
        "an amount can only have one period to separate units and decimals",
    )
    INVALID_INTEGER_PART = (
        "invalid_integer_part",
        "the units part is not a valid unsigned 64 bit amount",
    )
    INVALID_FRACTIONAL_PART = (
        "invalid_fractional_part",
        "the decimal part is not a valid unsigned 64 bit number",
    )
    EMPTY_FRACTION = (
        "empty_fraction",
        "no decimals were found after the decimal separator",
    )
    INTEGER_PART_TOO_LARGE = (
        "integer_part_too_large",
        "it is too big, the maximum amount is",
    )
    AMOUNT_TOO_LARGE = (
        "amount_too_large",
        "it is too big once the decimals are added, the maximum amount is",
    )

    def __init__(self, code: str, reason: str):
        self._code = code
        self._reason = reason

    @property
    def code(self) -> str:
        return self._code

    @property
    def reason(self) -> str:
        return self._reason


class AmountParseError(ValueError):
    """
    Amount parsing error.

    Carries the rejected text, the kind of failure and a human readable
    message. When the failure comes from a lower level integer parse, that
    error is chained as ``__cause__``.
    """

    def __init__(self, text: str, kind: AmountParseErrorKind):
        reason = kind.reason
        if kind in (
            AmountParseErrorKind.INTEGER_PART_TOO_LARGE,
            AmountParseErrorKind.AMOUNT_TOO_LARGE,
        ):
            reason = f"{reason} {Amount.max_value()}"
        self.text = text
        self.kind = kind
        self.message = f"the amount {text!r} is not a valid Fractal Global amount, {reason}"
        ValueError.__init__(self, self.message)


def _reject(text: str, kind: AmountParseErrorKind) -> AmountParseError:
    logger.debug("rejected amount %r (%s)", text, kind.code)
    return AmountParseError(text, kind)


# ==============================================================================
# AMOUNT
# ==============================================================================

@dataclass(frozen=True, slots=True, order=True)
class Amount:
    """
    Fractal Global Credits amount.

    INVARIANTS:
    1. _value is always an int in [0, 2**64 - 1]
    2. arithmetic never wraps, it raises OverflowError
    3. Amount.parse(a.format()) == a for every amount

    SERIALIZATION:
        The raw integer of thousandths, never the float.
    """
    _value: int

    def __post_init__(self) -> None:
        if not isinstance(self._value, int) or isinstance(self._value, bool):
            raise TypeError(
                f"An amount is built from an int of thousandths, not {type(self._value).__name__}"
            )
        if not 0 <= self._value <= U64_MAX:
            raise ValueError(f"Amount representation out of range [0, {U64_MAX}]: {self._value}")

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def from_repr(cls, value: int) -> Amount:
        """Creates a new amount from its internal representation (thousandths)."""
        return cls(value)

    @classmethod
    def min_value(cls) -> Amount:
        """Smallest value that can be represented as a currency amount."""
        return cls(0)

    @classmethod
    def max_value(cls) -> Amount:
        """Largest value that can be represented as a currency amount."""
        return cls(U64_MAX)

    @classmethod
    def parse(cls, text: str) -> Amount:
        """
        Parses a decimal string such as ``"175.646"``, ``"175"`` or ``".6"``.

        Decimals beyond thousandths are rounded half-up:
        ``"175.6465"`` -> 175.647, ``"175.6464"`` -> 175.646.

        Raises:
            AmountParseError: if the text is not a valid amount
        """
        if not isinstance(text, str):
            raise TypeError(f"Only strings can be parsed as amounts, not {type(text).__name__}")

        if text.count(".") > 1:
            raise _reject(text, AmountParseErrorKind.MULTIPLE_SEPARATORS)
        units_str, separator, decimals_str = text.partition(".")

        units = 0
        if units_str or not separator:
            try:
                units = _parse_u64(units_str)
            except ValueError as e:
                raise _reject(text, AmountParseErrorKind.INVALID_INTEGER_PART) from e
            if units > MAX_UNITS:
                raise _reject(text, AmountParseErrorKind.INTEGER_PART_TOO_LARGE)
        units *= SCALE

        if not separator:
            return cls(units)
        if not decimals_str:
            raise _reject(text, AmountParseErrorKind.EMPTY_FRACTION)

        decimals_str = decimals_str.ljust(FRACTION_DIGITS, "0")
        try:
            decimals = _parse_u64(decimals_str)
        except ValueError as e:
            raise _reject(text, AmountParseErrorKind.INVALID_FRACTIONAL_PART) from e

        excess = len(decimals_str) - FRACTION_DIGITS
        if excess:
            divisor = 10**excess
            decimals, remainder = divmod(decimals, divisor)
            if remainder >= divisor // 2:
                decimals += 1

        if U64_MAX - decimals < units:
            raise _reject(text, AmountParseErrorKind.AMOUNT_TOO_LARGE)
        return cls(units + decimals)

    # -------------------------------------------------------------------------
    # Formatting
    # -------------------------------------------------------------------------

    def format(self, precision: Optional[int] = None, width: Optional[int] = None) -> str:
        """
        Formats the amount as a decimal string.

        Args:
            precision: number of decimals. None prints the shortest exact
                form; 0, 1 and 2 round half-up; 3 or more pad with zeros.
            width: minimum length, reached by left-padding with ``'0'``.
        """
        if precision is not None and precision < 0:
            raise ValueError(f"precision must be >= 0, got: {precision}")
        if width is not None and width < 0:
            raise ValueError(f"width must be >= 0, got: {width}")

        units, decimals = divmod(self._value, SCALE)
        if precision is None:
            if decimals == 0:
                result = f"{units}"
            elif decimals % 100 == 0:
                result = f"{units}.{decimals // 100}"
            elif decimals % 10 == 0:
                result = f"{units}.{decimals // 10:02d}"
            else:
                result = f"{units}.{decimals:03d}"
        elif precision < FRACTION_DIGITS:
            # Round half-up at the requested digit, carrying into the units.
            step = 10 ** (FRACTION_DIGITS - precision)
            scaled, remainder = divmod(self._value, step)
            if remainder >= step // 2:
                scaled += 1
            if precision == 0:
                result = f"{scaled}"
            else:
                units, digits = divmod(scaled, 10**precision)
                result = f"{units}.{digits:0{precision}d}"
        else:
            result = f"{units}.{decimals:03d}" + "0" * (precision - FRACTION_DIGITS)

        if width is not None:
            result = result.rjust(width, "0")
        return result

    def display(self, precision: Optional[int] = None) -> str:
        """Formatted amount prefixed with the currency symbol, e.g. ``'Ͼ 30'``."""
        return f"{CURRENCY_SYMBOL} {self.format(precision)}"

    def __format__(self, format_spec: str) -> str:
        """Supports ``[0][width][.precision]``, e.g. ``f"{amount:05.1}"``."""
        match = _FORMAT_SPEC.fullmatch(format_spec)
        if match is None:
            raise ValueError(f"Invalid format specifier {format_spec!r} for Amount")
        width = match.group("width")
        precision = match.group("precision")
        return self.format(
            precision=int(precision) if precision is not None else None,
            width=int(width) if width is not None else None,
        )

    def __str__(self) -> str:
        return self.format()

    def __repr__(self) -> str:
        return f"Amount({self._value}) ({CURRENCY_SYMBOL} {self})"

    # -------------------------------------------------------------------------
    # Arithmetic (checked)
    # -------------------------------------------------------------------------

    def __add__(self, other: Amount) -> Amount:
        if not isinstance(other, Amount):
            raise TypeError(
                f"Operation not allowed: Amount + {type(other).__name__}. "
                f"Use Amount.from_repr() or Amount.parse() to convert."
            )
        return _checked(self._value + other._value, "addition")

    def __sub__(self, other: Amount) -> Amount:
        if not isinstance(other, Amount):
            raise TypeError(f"Operation not allowed: Amount - {type(other).__name__}.")
        return _checked(self._value - other._value, "subtraction")

    def __mul__(self, factor: int) -> Amount:
        """Multiplication by an unsigned integer quantity."""
        _check_scalar(factor, "multiplied")
        return _checked(self._value * factor, "multiplication")

    def __rmul__(self, factor: int) -> Amount:
        return self.__mul__(factor)

    def __floordiv__(self, divisor: int) -> Amount:
        """Division by an unsigned integer, truncating to thousandths."""
        _check_scalar(divisor, "divided")
        return Amount(self._value // divisor)

    def __mod__(self, divisor: int) -> Amount:
        """
        Remainder of dividing by an unsigned integer of whole units.

        ``Amount.parse("12.345") % 10 == Amount.parse("2.345")``
        """
        _check_scalar(divisor, "divided")
        return Amount(self._value % (divisor * SCALE))

    # -------------------------------------------------------------------------
    # Properties and conversion
    # -------------------------------------------------------------------------

    @property
    def value(self) -> int:
        """Internal representation in thousandths. Use it for serialization."""
        return self._value

    def get_repr(self) -> int:
        return self._value

    def is_zero(self) -> bool:
        return self._value == 0

    def to_float(self) -> float:
        """
        Approximate value as a float.

        WARNING: lossy for large amounts. Interchange only, never storage.
        """
        units, decimals = divmod(self._value, SCALE)
        return units + decimals / SCALE

    # -------------------------------------------------------------------------
    # Pydantic integration
    # -------------------------------------------------------------------------

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """
        Lets records declare ``Amount`` fields.

        Accepts an Amount, an int of thousandths or a decimal string, and
        serializes to the int of thousandths.
        """
        return core_schema.no_info_plain_validator_function(
            cls._coerce,
            json_schema_input_schema=core_schema.union_schema(
                [core_schema.int_schema(ge=0, le=U64_MAX), core_schema.str_schema()]
            ),
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda amount: amount.value,
                return_schema=core_schema.int_schema(ge=0, le=U64_MAX),
            ),
        )

    @classmethod
    def _coerce(cls, value: Any) -> Amount:
        if isinstance(value, Amount):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        if isinstance(value, int) and not isinstance(value, bool):
            return cls.from_repr(value)
        raise ValueError(f"Cannot build an Amount from {type(value).__name__}")


def _check_scalar(scalar: int, verb: str) -> None:
    if not isinstance(scalar, int) or isinstance(scalar, bool):
        raise TypeError(
            f"An Amount can only be {verb} by an int, not {type(scalar).__name__}."
        )
    if scalar < 0:
        raise ValueError(f"An Amount can only be {verb} by a non-negative int, got: {scalar}")


def _checked(value: int, operation: str) -> Amount:
    if value < 0:
        raise OverflowError(f"Amount {operation} underflows below zero")
    if value > U64_MAX:
        raise OverflowError(f"Amount {operation} overflows the maximum amount {Amount.max_value()}")
    return Amount(value)
