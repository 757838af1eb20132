"""Shared test fixtures for the tiny_dices test suite.

scripted_rng
    Factory for a random source that replays fixed values, for tests that
    need to pin down exactly which faces a die gets.

recording_renderer
    A FaceRenderer that records every call instead of drawing anything.

registry / client
    A fresh SessionRegistry per test, and an AsyncClient wired to the app
    with the registry dependency overridden. Tables never leak between tests.
"""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tiny_dices.dependencies import SessionRegistry, get_registry
from tiny_dices.faces import RollOutcome
from tiny_dices.main import app
from tiny_dices.skins import SkinSnapshot


class ScriptedRandom:
    """Returns queued values from randint, ignoring the requested range."""

    def __init__(self, values: list[int]) -> None:
        self.values = list(values)
        self.calls: list[tuple[int, int]] = []

    def randint(self, a: int, b: int) -> int:
        self.calls.append((a, b))
        if not self.values:
            raise AssertionError(f"ScriptedRandom ran out of values (randint({a}, {b}))")
        return self.values.pop(0)


class RecordingRenderer:
    def __init__(self) -> None:
        self.attached: list[tuple[RollOutcome, SkinSnapshot, int, bool]] = []
        self.restyled: list[tuple[object, SkinSnapshot]] = []
        self.remove_all_calls = 0

    def attach_die(
        self,
        outcome: RollOutcome,
        skin: SkinSnapshot,
        *,
        stacking_order: int,
        spin_forever: bool,
    ) -> object:
        self.attached.append((outcome, skin, stacking_order, spin_forever))
        return ("handle", len(self.attached) - 1)

    def restyle(self, handle: object, skin: SkinSnapshot) -> None:
        self.restyled.append((handle, skin))

    def remove_all(self) -> None:
        self.remove_all_calls += 1

    @property
    def stacking_orders(self) -> list[int]:
        return [order for _, _, order, _ in self.attached]


@pytest.fixture
def scripted_rng():
    return ScriptedRandom


@pytest.fixture
def recording_renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry(limit=3)


@pytest_asyncio.fixture
async def client(registry):
    """AsyncClient wired to the app, backed by a per-test registry."""
    app.dependency_overrides[get_registry] = lambda: registry

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.pop(get_registry, None)
    registry.clear()
