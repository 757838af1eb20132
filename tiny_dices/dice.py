"""Bounded die rolls and roll-config parsing.

A die is described by its bound: the highest face value it can show. Rolls
land in ``[1, bound]``, or ``[0, bound]`` when zero is allowed. A bound of
zero or less is a degenerate die that always shows 0.

Roll configs arrive either as comma-separated text ("6,8,20") or as an
ordered list of bounds. Malformed text tokens are kept in position as
``INVALID_ENTRY`` so callers can tell which die was bad.
"""

from __future__ import annotations

import math
import random
import re
from typing import Protocol

INVALID_ENTRY = -1

_LEADING_INT_RE = re.compile(r"[+-]?[0-9]+")


class InvalidBoundError(ValueError):
    """Raised when a die bound is not a finite number."""


class TooManyDiceError(ValueError):
    """Raised when a roll config lists more dice than allowed."""


class RandomSource(Protocol):
    """Anything that can pick an integer in ``[a, b]``, e.g. ``random.Random``."""

    def randint(self, a: int, b: int) -> int: ...


def as_bound(max_value: object) -> int:
    """Validate a die bound and floor it to an int.

    Raises:
        InvalidBoundError: If ``max_value`` is not a finite int or float.
    """
    if isinstance(max_value, bool) or not isinstance(max_value, (int, float)):
        raise InvalidBoundError(f"Invalid die max value: {max_value!r}. Bounds must be numbers.")
    if isinstance(max_value, float):
        if not math.isfinite(max_value):
            raise InvalidBoundError(f"Invalid die max value: {max_value!r}. Bounds must be finite.")
        return math.floor(max_value)
    return max_value


def roll_number(
    max_value: object = 0, can_zero: bool = False, *, rng: RandomSource | None = None
) -> int:
    """Roll a single die.

    Args:
        max_value: Highest face value of the die.
        can_zero: Widen the range to include 0.
        rng: Random source to draw from. Defaults to the ``random`` module.

    Returns:
        An integer in ``[1, max_value]``, or ``[0, max_value]`` when ``can_zero``
        is set. Always 0 when ``max_value <= 0``.

    Raises:
        InvalidBoundError: If ``max_value`` is not a finite number.
    """
    bound = as_bound(max_value)
    if bound <= 0:
        return 0
    source = rng if rng is not None else random
    return source.randint(0 if can_zero else 1, bound)


def _parse_token(raw: str) -> int:
    m = _LEADING_INT_RE.match(raw.strip())
    if not m:
        return INVALID_ENTRY
    value = int(m.group())
    return value if value >= 0 else INVALID_ENTRY


def parse_roll_config(value: object = "") -> list[int]:
    """Normalize user input into an ordered list of die bounds.

    Text is split on commas and each token is read as a base-10 integer
    prefix. Tokens that don't start with an integer, or that are negative,
    become ``INVALID_ENTRY``. Lists and tuples pass through as-is; bound
    validation happens when the dice are rolled. Anything else yields ``[]``.
    """
    if isinstance(value, str):
        if not value:
            return []
        return [_parse_token(raw) for raw in value.strip().split(",")]
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def limit_dice(bounds: list[int], max_dice: int) -> list[int]:
    """Return bounds unchanged, or raise if there are more than max_dice of them.

    Raises:
        TooManyDiceError: If ``len(bounds) > max_dice``.
    """
    if len(bounds) > max_dice:
        raise TooManyDiceError(f"Too many dice: {len(bounds)} (max {max_dice})")
    return bounds
