"""Exact Kubernetes resource quantities.

Quantities keep their magnitude as a :class:`fractions.Fraction`, so sums of
many small requests never drift. The suffix family a quantity was written
with only affects how it is rendered back to text.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from fractions import Fraction
from typing import Any


class QuantityParseError(ValueError):
    """Raised when a value cannot be parsed as a resource quantity."""


class QuantityFormat(str, Enum):
    """Suffix family used to render a quantity."""

    DECIMAL_SI = "DecimalSI"
    BINARY_SI = "BinarySI"
    DECIMAL_EXPONENT = "DecimalExponent"


DECIMAL_SUFFIXES: dict[str, int] = {
    "n": -9,
    "u": -6,
    "m": -3,
    "": 0,
    "k": 3,
    "M": 6,
    "G": 9,
    "T": 12,
    "P": 15,
    "E": 18,
}

BINARY_SUFFIXES: dict[str, int] = {
    "Ki": 10,
    "Mi": 20,
    "Gi": 30,
    "Ti": 40,
    "Pi": 50,
    "Ei": 60,
}

_MAX_EXPONENT = 64

_QUANTITY_RE = re.compile(
    r"(?P<sign>[+-]?)(?P<number>[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?P<suffix>.*)"
)
_EXPONENT_RE = re.compile(r"[eE](?P<exponent>[+-]?[0-9]+)")

# Largest suffix first so formatting picks the shortest mantissa.
_DECIMAL_BY_EXPONENT = sorted(
    ((exp, suffix) for suffix, exp in DECIMAL_SUFFIXES.items()), reverse=True
)
_BINARY_BY_BITS = sorted(
    ((bits, suffix) for suffix, bits in BINARY_SUFFIXES.items()), reverse=True
)


@dataclass(frozen=True, order=True)
class Quantity:
    """Immutable resource amount compared and added by true magnitude."""

    value: Fraction
    format_style: QuantityFormat = field(
        default=QuantityFormat.DECIMAL_SI, compare=False
    )

    @classmethod
    def zero(cls) -> Quantity:
        """Return the additive identity."""
        return cls(Fraction(0))

    @classmethod
    def parse(cls, raw: Any) -> Quantity:
        """Parse a quantity string or YAML scalar."""
        return parse_quantity(raw)

    def __add__(self, other: object) -> Quantity:
        if not isinstance(other, Quantity):
            return NotImplemented
        return Quantity(self.value + other.value, self.format_style)

    def __str__(self) -> str:
        return self.format_text()

    def __repr__(self) -> str:
        return f"Quantity({self.format_text()!r})"

    def milli_value(self) -> int:
        """Return the magnitude in milli-units, rounded up."""
        return math.ceil(self.value * 1000)

    def format_text(self) -> str:
        """Render canonical text that parses back to an equal magnitude."""
        if self.value == 0:
            return "0"
        if self.format_style is QuantityFormat.BINARY_SI:
            rendered = _format_binary(self.value)
            if rendered is not None:
                return rendered
        if self.format_style is QuantityFormat.DECIMAL_EXPONENT:
            return _format_decimal(self.value, exponent_style=True)
        return _format_decimal(self.value, exponent_style=False)


def _format_binary(value: Fraction) -> str | None:
    if value.denominator != 1 or abs(value) < 1024:
        return None
    integer = value.numerator
    for bits, suffix in _BINARY_BY_BITS:
        if integer % (1 << bits) == 0:
            return f"{integer >> bits}{suffix}"
    return str(integer)


def _format_decimal(value: Fraction, *, exponent_style: bool) -> str:
    for exp, suffix in _DECIMAL_BY_EXPONENT:
        mantissa = value / Fraction(10) ** exp
        if mantissa.denominator == 1:
            if exponent_style:
                return f"{mantissa.numerator}e{exp}" if exp else str(mantissa.numerator)
            return f"{mantissa.numerator}{suffix}"
    return _plain_decimal(value)


def _plain_decimal(value: Fraction) -> str:
    """Render a terminating fraction as an exact decimal literal."""
    sign = "-" if value < 0 else ""
    value = abs(value)
    places = 0
    while (value * 10**places).denominator != 1:
        places += 1
    digits = str((value * 10**places).numerator).rjust(places + 1, "0")
    return f"{sign}{digits[:-places]}.{digits[-places:]}"


def parse_quantity(raw: Any) -> Quantity:
    """Parse a Kubernetes quantity such as ``500m``, ``1Gi`` or ``2``.

    Integers and floats coming from YAML are rendered with ``str()`` first.
    Booleans and ``None`` are rejected.
    """
    if isinstance(raw, Quantity):
        return raw
    if raw is None or isinstance(raw, bool):
        raise QuantityParseError(f"not a quantity: {raw!r}")

    text = str(raw)
    match = _QUANTITY_RE.fullmatch(text)
    if match is None:
        raise QuantityParseError(f"invalid quantity: {text!r}")

    number = Fraction(match.group("number"))
    if match.group("sign") == "-":
        number = -number
    suffix = match.group("suffix")

    if suffix in DECIMAL_SUFFIXES:
        scale = Fraction(10) ** DECIMAL_SUFFIXES[suffix]
        return Quantity(number * scale, QuantityFormat.DECIMAL_SI)
    if suffix in BINARY_SUFFIXES:
        scaled = number * (1 << BINARY_SUFFIXES[suffix])
        return Quantity(scaled, QuantityFormat.BINARY_SI)

    exponent_match = _EXPONENT_RE.fullmatch(suffix)
    if exponent_match is None:
        raise QuantityParseError(f"unknown quantity suffix {suffix!r} in {text!r}")
    exponent = int(exponent_match.group("exponent"))
    if abs(exponent) > _MAX_EXPONENT:
        raise QuantityParseError(f"quantity exponent out of range in {text!r}")
    return Quantity(number * Fraction(10) ** exponent, QuantityFormat.DECIMAL_EXPONENT)
