"""
Numeric helpers shared by the view builders.

Every helper ignores entries that are not finite numbers (None, NaN,
strings), so records with a missing measurement never count as 0.
"""

import math
import numbers
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np


def is_number(value) -> bool:
    """True for finite real numbers; booleans are not measurements."""
    if isinstance(value, (bool, np.bool_)):
        return False
    if not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value)


def numeric(values: Iterable) -> np.ndarray:
    """Return the comparable entries of ``values`` as a float array."""
    return np.asarray([float(v) for v in values if is_number(v)], dtype=float)


def mean(values: Iterable) -> float:
    """
    Arithmetic mean of the numeric entries.

    Returns:
        float: The mean, or 0 when there is nothing to average
    """
    arr = numeric(values)
    if arr.size == 0:
        return 0
    return float(arr.mean())


def extent(values: Iterable) -> Tuple[Optional[float], Optional[float]]:
    """Return (min, max) of the numeric entries, (None, None) if there are none."""
    arr = numeric(values)
    if arr.size == 0:
        return None, None
    return float(arr.min()), float(arr.max())


@dataclass(frozen=True)
class Bin:
    """One histogram bucket, ``[lower, upper)`` or ``[lower, upper]`` when closed."""
    lower: float
    upper: float
    count: int
    closed: bool = False

    def contains(self, value) -> bool:
        if not is_number(value):
            return False
        if self.closed:
            return self.lower <= value <= self.upper
        return self.lower <= value < self.upper


def bin(values: Iterable, domain_min: float, domain_max: float, bucket_count: int) -> List[Bin]:
    """
    Partition a domain into equal-width buckets and count the values in each.

    Buckets are half-open ``[lower, upper)`` except the last one, which also
    includes ``domain_max``. Values outside the domain are dropped.

    Args:
        values: Sequence of numbers (non-numeric entries are ignored)
        domain_min: Lower bound of the first bucket
        domain_max: Upper bound of the last bucket
        bucket_count: Number of buckets

    Returns:
        list[Bin]: Buckets ordered from low to high
    """
    if bucket_count < 1:
        raise ValueError(f"bucket_count must be at least 1, got {bucket_count}")
    if not domain_max > domain_min:
        raise ValueError(f"empty domain [{domain_min}, {domain_max}]")

    edges = np.linspace(domain_min, domain_max, bucket_count + 1)
    # np.histogram uses the same convention: half-open, last bin closed
    counts, _ = np.histogram(numeric(values), bins=edges)

    last = bucket_count - 1
    return [
        Bin(float(edges[i]), float(edges[i + 1]), int(counts[i]), closed=(i == last))
        for i in range(bucket_count)
    ]


def find_bin(bins: Sequence[Bin], value) -> Optional[int]:
    """Index of the bucket containing ``value``, or None."""
    for i, b in enumerate(bins):
        if b.contains(value):
            return i
    return None


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def signed(value: float) -> str:
    """
    Format a delta as a rounded integer carrying the sign of the raw value.

    0.2 gives '+0' and -0.2 gives '-0', so a reading just above or below the
    average still shows which side it is on.
    """
    n = abs(round_half_away(value))
    if value > 0:
        return f"+{n}"
    if value < 0:
        return f"-{n}"
    return "0"
