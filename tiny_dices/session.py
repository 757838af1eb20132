"""Roll and skin state for one dice table.

A ``DiceSession`` owns the dice currently on the table, the skin overrides,
and the stacking counter that keeps newer dice above older ones. Rendering is
optional: without a renderer the session still rolls and tracks outcomes.

Lifecycle
---------
A session is active until ``destroy()``. After that every operation that
would change state or touch the renderer raises ``InstanceDestroyedError``.
Getters keep working and report ``None``, since destroy also drops the
built-in defaults.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from tiny_dices.dice import RandomSource, as_bound, parse_roll_config, roll_number
from tiny_dices.faces import FACE_COUNT, RollOutcome, assign_faces
from tiny_dices.rendering import FaceRenderer
from tiny_dices.skins import (
    SkinSnapshot,
    SkinState,
    default_skin,
    sanitize_background,
    sanitize_border,
    sanitize_color,
    sanitize_image,
)

logger = logging.getLogger(__name__)

FaceBuilder = Callable[..., list[int]]


class InstanceDestroyedError(RuntimeError):
    """Raised when a destroyed DiceSession is asked to change state."""


class RenderSurfaceError(RuntimeError):
    """Raised when rendering is requested but no renderer is attached."""


@dataclass
class _Die:
    outcome: RollOutcome
    handle: object | None = None


def _checked(bounds: Iterable[object]) -> list[object]:
    """Return bounds as a list, raising InvalidBoundError on the first bad one."""
    bounds = list(bounds)
    for bound in bounds:
        as_bound(bound)
    return bounds


class DiceSession:
    """Rolls dice for one table and keeps their skin in a safe state.

    Args:
        renderer: Where dice get drawn. ``None`` keeps the session headless.
        rng: Random source for results and filler faces.
        face_builder: Replaces ``assign_faces``. Called as
            ``face_builder(result, max_value, can_zero, rng=rng)`` and must
            return ``FACE_COUNT`` integers starting with ``result``.
        defaults: Built-in skin values. Copied, so destroy() never touches
            the caller's object.
    """

    def __init__(
        self,
        renderer: FaceRenderer | None = None,
        *,
        rng: RandomSource | None = None,
        face_builder: FaceBuilder | None = None,
        defaults: SkinState | None = None,
    ) -> None:
        self._renderer = renderer
        self._rng = rng
        self._face_builder = face_builder if face_builder is not None else assign_faces
        self._skin = SkinState()
        self._defaults = dataclasses.replace(defaults) if defaults is not None else default_skin()
        self._dice: list[_Die] = []
        self._stacking_order = 0
        self._destroyed = False

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------

    def _ensure_active(self, operation: str) -> None:
        if self._destroyed:
            raise InstanceDestroyedError(f"{operation}: this dice session was destroyed.")

    def is_destroyed(self) -> bool:
        return self._destroyed

    def has_surface(self) -> bool:
        """Return True if a renderer is attached."""
        return self._renderer is not None

    def destroy(self) -> None:
        """Clear the table, release the renderer and drop every skin value.

        Safe to call more than once.
        """
        if self._destroyed:
            return
        self.clear()
        self._renderer = None
        self._skin.reset()
        self._defaults.reset()
        self._destroyed = True
        logger.debug("Dice session destroyed")

    @property
    def outcomes(self) -> list[RollOutcome]:
        """Outcomes of the dice currently on the table, oldest first."""
        return [die.outcome for die in self._dice]

    def next_stacking_order(self) -> int:
        """Return the current stacking order and advance it."""
        self._ensure_active("next_stacking_order")
        order = self._stacking_order
        self._stacking_order += 1
        return order

    def clear(self) -> None:
        """Remove all dice and reset the stacking counter."""
        self._ensure_active("clear")
        self._stacking_order = 0
        if self._renderer is not None:
            self._renderer.remove_all()
        self._dice = []

    # -----------------------------------------------------------------------
    # Rolling
    # -----------------------------------------------------------------------

    def roll_number(self, max_value: object = 0, can_zero: bool = False) -> int:
        """Roll a bare number with this session's random source."""
        return roll_number(max_value, can_zero, rng=self._rng)

    @staticmethod
    def parse_roll_config(value: object = "") -> list[int]:
        return parse_roll_config(value)

    def _build_faces(self, result: int, max_value: object, can_zero: bool) -> list[int]:
        sequence = self._face_builder(result, max_value, can_zero, rng=self._rng)
        if (
            not isinstance(sequence, list)
            or len(sequence) != FACE_COUNT
            or not all(isinstance(v, int) for v in sequence)
            or sequence[0] != result
        ):
            raise ValueError(
                f"Face builder must return {FACE_COUNT} integers starting with {result}, "
                f"got {sequence!r}"
            )
        return sequence

    def _place(self, outcome: RollOutcome, roll_infinity: bool) -> None:
        handle = None
        if self._renderer is not None:
            handle = self._renderer.attach_die(
                outcome,
                self.skin_snapshot(),
                stacking_order=self.next_stacking_order(),
                spin_forever=roll_infinity,
            )
        self._dice.append(_Die(outcome=outcome, handle=handle))

    def _roll_one(self, max_value: object, can_zero: bool, roll_infinity: bool) -> RollOutcome:
        result = roll_number(max_value, can_zero, rng=self._rng)
        sequence = self._build_faces(result, max_value, can_zero)
        outcome = RollOutcome(result=result, sequence=sequence)
        self._place(outcome, roll_infinity)
        return outcome

    def insert_die(
        self,
        result: int,
        max_value: object,
        can_zero: bool = False,
        roll_infinity: bool = False,
    ) -> list[int]:
        """Render a die showing a result chosen by the caller.

        Returns:
            The die's six face values.

        Raises:
            RenderSurfaceError: If no renderer is attached.
            ValueError: If a custom face builder returns a bad sequence.
        """
        self._ensure_active("insert_die")
        if self._renderer is None:
            raise RenderSurfaceError("insert_die: no renderer is attached to this session.")
        sequence = self._build_faces(result, max_value, can_zero)
        self._place(RollOutcome(result=result, sequence=sequence), roll_infinity)
        return sequence

    def roll_single(
        self, max_value: object, can_zero: bool = False, roll_infinity: bool = False
    ) -> RollOutcome:
        """Add one die to the table without clearing it."""
        self._ensure_active("roll_single")
        return self._roll_one(max_value, can_zero, roll_infinity)

    def roll_many(
        self, bounds: Iterable[object], can_zero: bool = False, roll_infinity: bool = False
    ) -> list[RollOutcome]:
        """Add one die per bound to the table without clearing it.

        Every bound is checked before any die is rolled, so a bad bound
        leaves the table untouched.
        """
        self._ensure_active("roll_many")
        bounds = _checked(bounds)
        return [self._roll_one(bound, can_zero, roll_infinity) for bound in bounds]

    def roll(
        self, value: object, can_zero: bool = False, roll_infinity: bool = False
    ) -> list[RollOutcome]:
        """Clear the table and roll the dice described by value.

        Args:
            value: Comma-separated bounds ("6,8,20") or a list of bounds.
            can_zero: Let every die show 0.
            roll_infinity: Keep the dice spinning instead of stopping them.

        Returns:
            One ``RollOutcome`` per die, in input order.
        """
        self._ensure_active("roll")
        bounds = _checked(parse_roll_config(value))
        self.clear()
        outcomes = self.roll_many(bounds, can_zero, roll_infinity)
        logger.debug("Rolled %s: %s", bounds, [o.result for o in outcomes])
        return outcomes

    # -----------------------------------------------------------------------
    # Skins
    # -----------------------------------------------------------------------

    def _accept(self, slot: str, raw: object, sanitized: str | None) -> str | None:
        if sanitized is None and raw is not None:
            logger.debug("Rejected %s skin %r, falling back to default", slot, raw)
        return sanitized

    def set_bg_skin(self, skin: object) -> None:
        """Set the face background to a color or ``linear-gradient(...)``."""
        self._ensure_active("set_bg_skin")
        self._skin.bg = self._accept("background", skin, sanitize_background(skin))

    def get_bg_skin(self) -> str | None:
        return self._skin.bg or self._defaults.bg

    def set_text_skin(self, skin: object) -> None:
        self._ensure_active("set_text_skin")
        self._skin.text = self._accept("text", skin, sanitize_color(skin))

    def get_text_skin(self) -> str | None:
        return self._skin.text or self._defaults.text

    def set_border_skin(self, skin: object) -> None:
        """Set the face border, e.g. ``"2px solid black"``."""
        self._ensure_active("set_border_skin")
        self._skin.border = self._accept("border", skin, sanitize_border(skin))

    def get_border_skin(self) -> str | None:
        return self._skin.border or self._defaults.border

    def set_bg_img(self, value: object, force_unsafe: bool = False) -> None:
        """Set the face background image.

        Only base64 ``data:image/...`` URIs are accepted unless
        ``force_unsafe`` is passed, which lets any URL through. Use it only
        for trusted values.
        """
        self._ensure_active("set_bg_img")
        self._skin.bg_img = self._accept(
            "background image", value, sanitize_image(value, force_unsafe=force_unsafe)
        )

    def get_bg_img(self) -> str | None:
        return self._skin.bg_img or self._defaults.bg_img

    def set_selection_bg_skin(self, skin: object) -> None:
        self._ensure_active("set_selection_bg_skin")
        self._skin.selection_bg = self._accept(
            "selection background", skin, sanitize_background(skin)
        )

    def get_selection_bg_skin(self) -> str | None:
        return self._skin.selection_bg or self._defaults.selection_bg

    def set_selection_text_skin(self, skin: object) -> None:
        self._ensure_active("set_selection_text_skin")
        self._skin.selection_text = self._accept("selection text", skin, sanitize_color(skin))

    def get_selection_text_skin(self) -> str | None:
        return self._skin.selection_text or self._defaults.selection_text

    def skin_snapshot(self) -> SkinSnapshot:
        """Return the effective value of every skin slot."""
        return SkinSnapshot(
            bg=self.get_bg_skin(),
            text=self.get_text_skin(),
            border=self.get_border_skin(),
            bg_img=self.get_bg_img(),
            selection_bg=self.get_selection_bg_skin(),
            selection_text=self.get_selection_text_skin(),
        )

    def restyle_die(self, index: int | str) -> bool:
        """Re-apply the current skin to one rendered die.

        Args:
            index: Position of the die on the table, as an int or numeric string.

        Returns:
            True if the die exists and was restyled.

        Raises:
            ValueError: If index is a string that isn't a number.
        """
        self._ensure_active("restyle_die")
        if isinstance(index, str):
            try:
                position = int(index.strip())
            except ValueError:
                raise ValueError(
                    "restyle_die: index must be a number or a numeric string."
                ) from None
        elif isinstance(index, int) and not isinstance(index, bool):
            position = index
        else:
            return False

        if not 0 <= position < len(self._dice):
            return False
        die = self._dice[position]
        if die.handle is None or self._renderer is None:
            return False
        self._renderer.restyle(die.handle, self.skin_snapshot())
        return True

    def restyle_all(self) -> None:
        """Re-apply the current skin to every rendered die."""
        self._ensure_active("restyle_all")
        for position in range(len(self._dice)):
            self.restyle_die(position)
