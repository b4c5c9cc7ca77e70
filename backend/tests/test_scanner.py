"""
Tests for the QR scan session: debouncing and camera release.
"""

import asyncio
from contextlib import aclosing, asynccontextmanager

import pytest

from shuttle.scanner import ScanDebouncer, ScanSession


class FakeCamera:
    """Plays back a fixed list of frames, then reports no frame forever."""

    def __init__(self, frames):
        self.frames = list(frames)
        self.opened = 0
        self.released = 0

    @asynccontextmanager
    async def open(self):
        self.opened += 1
        try:
            yield self
        finally:
            self.released += 1

    async def read(self):
        if self.frames:
            return self.frames.pop(0)
        return None


def decode(frame):
    if frame == "garbage":
        raise ValueError("corrupt frame")
    return frame


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def test_debouncer_drops_repeats_within_window():
    clock = FakeClock()
    debouncer = ScanDebouncer(window_seconds=3.0, clock=clock)

    assert debouncer.accept("AAA")
    clock.now += 1
    assert not debouncer.accept("AAA")
    assert debouncer.accept("BBB")
    clock.now += 1
    assert debouncer.accept("AAA")
    clock.now += 3
    assert debouncer.accept("AAA")


def test_debouncer_reset():
    debouncer = ScanDebouncer(window_seconds=3.0, clock=FakeClock())
    assert debouncer.accept("AAA")
    debouncer.reset()
    assert debouncer.accept("AAA")


@pytest.mark.asyncio
async def test_codes_are_debounced():
    camera = FakeCamera(["AAA", "AAA", None, "AAA", "BBB"])
    session = ScanSession(camera.open, decode, debounce_seconds=60, idle_delay=0)

    seen = []
    async with aclosing(session.codes()) as codes:
        async for code in codes:
            seen.append(code)
            if len(seen) == 2:
                break

    assert seen == ["AAA", "BBB"]


@pytest.mark.asyncio
async def test_camera_released_when_consumer_stops():
    camera = FakeCamera(["AAA"])
    session = ScanSession(camera.open, decode, idle_delay=0)

    async with aclosing(session.codes()) as codes:
        async for _ in codes:
            break

    assert (camera.opened, camera.released) == (1, 1)


@pytest.mark.asyncio
async def test_camera_released_when_decoding_fails():
    camera = FakeCamera(["garbage"])
    session = ScanSession(camera.open, decode, idle_delay=0)

    with pytest.raises(ValueError):
        async with aclosing(session.codes()) as codes:
            async for _ in codes:
                pass

    assert camera.released == 1


@pytest.mark.asyncio
async def test_stop_cancels_and_releases():
    camera = FakeCamera(["AAA"])
    session = ScanSession(camera.open, decode, idle_delay=0.001)
    received = asyncio.Event()
    codes = []

    async def handler(code):
        codes.append(code)
        received.set()

    session.start(handler)
    assert session.running
    await asyncio.wait_for(received.wait(), timeout=1)

    await session.stop()

    assert not session.running
    assert codes == ["AAA"]
    assert camera.released == 1


@pytest.mark.asyncio
async def test_start_twice_rejected():
    camera = FakeCamera([])
    session = ScanSession(camera.open, decode, idle_delay=0.001)

    async def handler(code):
        pass

    session.start(handler)
    with pytest.raises(RuntimeError):
        session.start(handler)
    await session.stop()


@pytest.mark.asyncio
async def test_restart_forgets_previous_codes():
    camera = FakeCamera(["AAA"])
    session = ScanSession(camera.open, decode, debounce_seconds=60, idle_delay=0)

    async with aclosing(session.codes()) as codes:
        assert await codes.__anext__() == "AAA"

    camera.frames = ["AAA"]
    async with aclosing(session.codes()) as codes:
        assert await codes.__anext__() == "AAA"

    assert (camera.opened, camera.released) == (2, 2)


@pytest.mark.asyncio
async def test_stop_without_start():
    session = ScanSession(FakeCamera([]).open, decode)
    await session.stop()
    assert not session.running


@pytest.mark.asyncio
async def test_camera_released_when_handler_fails():
    camera = FakeCamera(["AAA"])
    session = ScanSession(camera.open, decode, idle_delay=0.001)

    async def handler(code):
        raise RuntimeError("check-in service unreachable")

    task = session.start(handler)
    with pytest.raises(RuntimeError, match="unreachable"):
        await asyncio.wait_for(task, timeout=1)

    assert not session.running
    assert (camera.opened, camera.released) == (1, 1)
