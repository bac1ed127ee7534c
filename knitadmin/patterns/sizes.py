"""
Size Ranges

Sixteen body-size bins followed by the two slack bins "min" and "max",
which hold how far a knitter may adjust a measurement rather than a size.
Tables always render in this order.
"""
from typing import Iterable, List

from ..config import get_settings
from ..db import SizeRange
from .errors import UnknownSizeRangeError

SIZE_RANGES: List[SizeRange] = list(SizeRange)

SLACK_RANGES = (SizeRange.MIN, SizeRange.MAX)

_POSITION = {size: idx for idx, size in enumerate(SIZE_RANGES)}


def parse_size_range(value) -> SizeRange:
    """Accept a SizeRange or its string value ("74-79", "min")."""
    if isinstance(value, SizeRange):
        return value
    try:
        return SizeRange(value)
    except ValueError:
        raise UnknownSizeRangeError(value)


def ordered_size_ranges(values: Iterable) -> List[SizeRange]:
    """Sort any subset of bins into canonical display order."""
    return sorted({parse_size_range(v) for v in values}, key=_POSITION.__getitem__)


def base_size() -> SizeRange:
    return parse_size_range(get_settings().base_size)


def is_slack_range(size_range) -> bool:
    return parse_size_range(size_range) in SLACK_RANGES
