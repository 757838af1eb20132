"""Face sequences for a six-sided display die.

The front face shows the rolled result. The other five faces are filler, but
they should look like a real die: distinct values when the range has room for
them, and never a value the die couldn't roll.

Assignment policy
-----------------
Faces 2–6 are drawn with ``roll_number`` and redrawn while they collide with
any face already placed (front included). Once the number of placed faces
reaches the bound there may be nothing left to draw, so the assigner switches
to a deterministic walk: a counter climbs from the lowest legal value, and
when it passes the bound it starts over and forgets which values were used.
The walk always terminates, at the cost of repeats on small dice.
"""

from __future__ import annotations

from dataclasses import dataclass

from tiny_dices.dice import RandomSource, as_bound, roll_number

FACE_COUNT = 6


@dataclass(frozen=True)
class RollOutcome:
    """One rolled die: the front result and all six face values."""

    result: int
    sequence: list[int]


def _next_face(
    used: set[int],
    placed: int,
    bound: int,
    can_zero: bool,
    low: int,
    rng: RandomSource | None,
) -> int:
    counter = low
    walking = False
    while True:
        candidate = counter if walking else roll_number(bound, can_zero, rng=rng)
        if walking or placed >= bound:
            if counter >= bound:
                counter = low
                used.clear()
            counter += 1
            walking = True
        if candidate not in used:
            return candidate


def assign_faces(
    result: int,
    max_value: object,
    can_zero: bool = False,
    *,
    rng: RandomSource | None = None,
) -> list[int]:
    """Build the six face values for a die whose front shows ``result``.

    Args:
        result: Value for the front face; stored unchanged at index 0.
        max_value: The die's bound.
        can_zero: Whether 0 is a legal face.
        rng: Random source for the filler faces.

    Returns:
        A list of ``FACE_COUNT`` integers with ``result`` first.

    Raises:
        InvalidBoundError: If ``max_value`` is not a finite number.
    """
    bound = as_bound(max_value)
    low = -1 if can_zero else 0

    sequence = [result]
    used = {result}
    for _ in range(FACE_COUNT - 1):
        if bound > low:
            face = _next_face(used, len(sequence), bound, can_zero, low, rng)
        else:
            face = bound
        if face < 1:
            face = 0
        sequence.append(face)
        used.add(face)
    return sequence


def roll_outcome(
    max_value: object, can_zero: bool = False, *, rng: RandomSource | None = None
) -> RollOutcome:
    """Roll a die and assign its faces in one step."""
    result = roll_number(max_value, can_zero, rng=rng)
    return RollOutcome(result=result, sequence=assign_faces(result, max_value, can_zero, rng=rng))
