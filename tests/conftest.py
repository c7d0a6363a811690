"""Shared fixtures."""

import asyncio

import pytest


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, now: int = 0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int):
        self.now += ms


async def spin(times: int = 50):
    """Let other tasks run for a while without advancing the clock."""
    for _ in range(times):
        await asyncio.sleep(0)


@pytest.fixture
def clock():
    return FakeClock()
