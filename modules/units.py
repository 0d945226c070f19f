"""
Unit Resolver - Convert measurement tokens into pixels

Supported tokens:
    "4711"   absolute pixels ("4711px" is accepted too)
    "20%"    20% of a reference length (document width or height)
    "2in"    inches at the document dpi
    "20mm"   millimetres at the document dpi
    "2.5 cm" centimetres at the document dpi
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from utils.exceptions import MalformedCommandSyntaxError, UnresolvedReferenceError


MM_PER_INCH = 25.4
CM_PER_INCH = 2.54

_MEASUREMENT_RE = re.compile(
    r"^\s*([-+]?(?:\d+\.?\d*|\.\d+))\s*(%|in|mm|cm|px)?\s*$",
    re.IGNORECASE,
)


class Unit(str, Enum):
    ABSOLUTE = "px"
    PERCENT = "%"
    INCH = "in"
    MM = "mm"
    CM = "cm"


@dataclass(frozen=True)
class Measurement:
    """A number plus the unit it was written in"""
    value: float
    unit: Unit = Unit.ABSOLUTE

    @classmethod
    def parse(cls, token: str) -> "Measurement":
        match = _MEASUREMENT_RE.match(str(token))
        if match is None:
            raise MalformedCommandSyntaxError(f"Not a measurement: {token!r}")
        value, unit = match.groups()
        return cls(float(value), Unit((unit or "px").lower()))

    def to_pixels(self, reference: Optional[float], dpi: float) -> float:
        """
        Resolve to pixels

        Args:
            reference: Length a percentage refers to (None when undefined)
            dpi: Resolution used for physical units

        Returns:
            Pixel value (not rounded)
        """
        if self.unit is Unit.PERCENT:
            if reference is None:
                raise UnresolvedReferenceError(f"{self.value:g}%")
            return self.value * reference / 100
        if self.unit is Unit.INCH:
            return self.value * dpi
        if self.unit is Unit.MM:
            return self.value * dpi / MM_PER_INCH
        if self.unit is Unit.CM:
            return self.value * dpi / CM_PER_INCH
        return self.value


def resolve(token, reference: Optional[float], dpi: float) -> float:
    """
    Convert a measurement token to pixels

    Args:
        token: e.g. "20%", "3in", "12 mm", "640"
        reference: Reference length for percentages, None if undefined
        dpi: Dots per inch for in/mm/cm

    Returns:
        Pixels as float
    """
    if isinstance(token, (int, float)):
        return float(token)
    return Measurement.parse(token).to_pixels(reference, dpi)


def split_measurements(text: str) -> List[str]:
    """
    Split a whitespace separated coordinate list into tokens.
    A unit separated by a space ("20 cm") stays attached to its number.
    """
    tokens: List[str] = []
    for part in text.split():
        if tokens and part.lower() in ("%", "in", "mm", "cm", "px"):
            tokens[-1] += part
        else:
            tokens.append(part)
    return tokens
