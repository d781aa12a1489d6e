"""Specificity scoring for rule patterns.

When several rules match one request, candidates are ranked by how
narrowly their pattern targets the path. Scoring walks the unresolved
pattern segment by segment:

    literal segment          100   (/users)
    variable segment          50   (/${id})
    single wildcard segment   10   (/*)
    glob segment               1   (/**)

The score is (weight_sum, segment_count). Tuples compare element-wise,
so segment count only breaks ties on weight, favoring longer patterns.
Remaining ties are broken by the caller's stable sort (evaluation order).

Example scores:
- /users/admin     -> (200, 2)
- /users/${id}     -> (150, 2)
- /users/*         -> (110, 2)
- /users/**        -> (101, 2)
- /**              -> (1, 1)
"""

from __future__ import annotations

__all__ = [
    "Specificity",
    "SpecificityCalculator",
    "calculate_specificity",
]

from typing import NamedTuple

from path_acl.constants import (
    GLOB_SEGMENT_WEIGHT,
    LITERAL_SEGMENT_WEIGHT,
    VARIABLE_SEGMENT_WEIGHT,
    WILDCARD_SEGMENT_WEIGHT,
)
from path_acl.pdp.matcher import normalize_path


class Specificity(NamedTuple):
    """Orderable specificity score. Higher is more specific."""

    weight: int
    segments: int


def _segment_weight(segment: str) -> int:
    # "**" must be tested before "*"
    if "**" in segment:
        return GLOB_SEGMENT_WEIGHT
    if "${" in segment:
        return VARIABLE_SEGMENT_WEIGHT
    if "*" in segment:
        return WILDCARD_SEGMENT_WEIGHT
    return LITERAL_SEGMENT_WEIGHT


def calculate_specificity(pattern: str) -> Specificity:
    """Score a rule pattern.

    Args:
        pattern: Rule pattern as written (variables unresolved).

    Returns:
        Specificity(weight, segments).
    """
    segments = [s for s in normalize_path(pattern).split("/") if s]
    return Specificity(sum(_segment_weight(s) for s in segments), len(segments))


class SpecificityCalculator:
    """Injectable wrapper around calculate_specificity()."""

    def calculate(self, pattern: str) -> Specificity:
        return calculate_specificity(pattern)
