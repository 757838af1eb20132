"""Shared Jinja2 templates and the default HTML dice renderer.

A ``DiceSession`` never touches markup itself. It hands each rolled die to a
``FaceRenderer`` and keeps whatever handle comes back. ``HtmlFaceRenderer`` is
the built-in implementation: it keeps one ``RenderedDie`` per die and renders
them to HTML fragments on demand.
"""

from __future__ import annotations

import logging
import random
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from fastapi.templating import Jinja2Templates
from jinja2 import Environment, FileSystemLoader, select_autoescape

from tiny_dices.config import settings
from tiny_dices.dice import RandomSource
from tiny_dices.faces import RollOutcome
from tiny_dices.skins import SkinSnapshot

logger = logging.getLogger(__name__)

_env = Environment(
    loader=FileSystemLoader(Path(__file__).parent / "templates"),
    autoescape=select_autoescape(["html", "xml"]),
)

templates = Jinja2Templates(env=_env)


class Cancellable(Protocol):
    def cancel(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], Cancellable]


def start_timer(delay: float, callback: Callable[[], None]) -> threading.Timer:
    """Run callback once after delay seconds on a daemon thread."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class FaceRenderer(Protocol):
    """The rendering surface a ``DiceSession`` draws onto."""

    def attach_die(
        self,
        outcome: RollOutcome,
        skin: SkinSnapshot,
        *,
        stacking_order: int,
        spin_forever: bool,
    ) -> object:
        """Draw one die and return an opaque handle for it."""
        ...

    def restyle(self, handle: object, skin: SkinSnapshot) -> None:
        """Re-apply skin to a die previously returned by attach_die."""
        ...

    def remove_all(self) -> None:
        """Remove every die and release their handles."""
        ...


# ---------------------------------------------------------------------------
# Inline styles
# ---------------------------------------------------------------------------


def css_string(value: str) -> str:
    """Quote value as a CSS string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\a ")
    return f'"{escaped}"'


def face_style(skin: SkinSnapshot) -> str:
    """Build the inline style for a die face from the effective skin."""
    declarations: list[tuple[str, str]] = []
    if skin.bg:
        declarations.append(("background", skin.bg))
    if skin.text:
        declarations.append(("color", skin.text))
    if skin.border:
        declarations.append(("border", skin.border))
    if skin.selection_bg:
        declarations.append(("--dice-selection-bg", skin.selection_bg))
    if skin.selection_text:
        declarations.append(("--dice-selection-text", skin.selection_text))
    if skin.bg_img:
        declarations.append(("background-image", f"url({css_string(skin.bg_img)})"))
        declarations.append(("background-position", "center"))
        declarations.append(("background-size", "100%"))
        declarations.append(("background-repeat", "repeat"))
    return "; ".join(f"{name}: {value}" for name, value in declarations)


# ---------------------------------------------------------------------------
# HTML renderer
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class RenderedDie:
    """A die drawn by ``HtmlFaceRenderer``."""

    outcome: RollOutcome
    style: str
    z_index: int
    spin_forever: bool
    spin_seconds: float
    rot_x: int
    rot_y: int
    stopped: bool = False
    released: bool = False
    timer: Cancellable | None = None

    @property
    def wrapper_class(self) -> str:
        classes = ["cube-wrapper"]
        if self.spin_forever:
            classes.append("spin-infinite")
        if self.stopped:
            classes.append("stopped")
        return " ".join(classes)

    def stop(self) -> None:
        """Mark the die as done spinning. No-op once released."""
        self.timer = None
        if self.released:
            logger.debug("Ignoring stop for released die z-index %d", self.z_index)
            return
        self.stopped = True

    def cancel_stop(self) -> None:
        """Cancel the pending stop timer, if any."""
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None

    def release(self) -> None:
        self.cancel_stop()
        self.released = True


class HtmlFaceRenderer:
    """Keeps rendered dice in memory and turns them into HTML.

    Dice that don't spin forever get a stop timer from ``scheduler``. Tests
    can pass a scheduler that records callbacks instead of starting threads.
    """

    def __init__(
        self,
        *,
        spin_duration: float | None = None,
        stacking_base: int | None = None,
        scheduler: Scheduler = start_timer,
        rng: RandomSource | None = None,
    ) -> None:
        self.spin_duration = (
            settings.spin_duration_seconds if spin_duration is None else spin_duration
        )
        self.stacking_base = settings.stacking_base if stacking_base is None else stacking_base
        self._scheduler = scheduler
        self._rng = rng if rng is not None else random
        self.dice: list[RenderedDie] = []

    def attach_die(
        self,
        outcome: RollOutcome,
        skin: SkinSnapshot,
        *,
        stacking_order: int,
        spin_forever: bool,
    ) -> RenderedDie:
        die = RenderedDie(
            outcome=outcome,
            style=face_style(skin),
            z_index=self.stacking_base + stacking_order,
            spin_forever=spin_forever,
            spin_seconds=self.spin_duration,
            rot_x=360 * self._rng.randint(3, 7),
            rot_y=360 * self._rng.randint(3, 7),
        )
        if not spin_forever:
            die.timer = self._scheduler(self.spin_duration, die.stop)
        self.dice.append(die)
        logger.debug("Rendered die %s at z-index %d", outcome.sequence, die.z_index)
        return die

    def restyle(self, handle: object, skin: SkinSnapshot) -> None:
        if not isinstance(handle, RenderedDie):
            raise TypeError(f"Not a die rendered by this renderer: {handle!r}")
        handle.style = face_style(skin)

    def remove_all(self) -> None:
        for die in self.dice:
            die.release()
        self.dice = []

    def render(self) -> str:
        """Render the dice area fragment for the current dice."""
        return _env.get_template("_dice_area.html").render(dice=self.dice)
