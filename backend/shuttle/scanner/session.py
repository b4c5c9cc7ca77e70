"""
Scan session.

`codes()` is a lazy, endless async stream of decoded QR payloads. The frame
source is opened when iteration starts and released as soon as the stream
is closed, on any exit path. Consumers must close it explicitly
(`aclosing`); an abandoned generator only releases the camera when it is
garbage collected.
`start()` / `stop()` wrap that stream in a task for callers that want a
background loop, closing it when the handler raises too. A session can be
restarted; each run starts with a fresh debouncer.
"""

import asyncio
from contextlib import AbstractAsyncContextManager, aclosing
from typing import Any, AsyncIterator, Awaitable, Callable, Optional, Protocol

from shuttle.core.logging import get_logger
from shuttle.scanner.debounce import ScanDebouncer

logger = get_logger(__name__)


class FrameSource(Protocol):
    async def read(self) -> Optional[Any]:
        """Next frame, or None when no frame is ready."""


SourceFactory = Callable[[], AbstractAsyncContextManager[FrameSource]]
Decoder = Callable[[Any], Optional[str]]
CodeHandler = Callable[[str], Awaitable[None]]


class ScanSession:
    def __init__(
        self,
        open_source: SourceFactory,
        decode: Decoder,
        debounce_seconds: float = 3.0,
        idle_delay: float = 0.05,
    ):
        self._open_source = open_source
        self._decode = decode
        self._debouncer = ScanDebouncer(debounce_seconds)
        self._idle_delay = idle_delay
        self._task: Optional[asyncio.Task] = None

    async def codes(self) -> AsyncIterator[str]:
        self._debouncer.reset()
        async with self._open_source() as source:
            logger.info("scan_started")
            try:
                while True:
                    frame = await source.read()
                    code = self._decode(frame) if frame is not None else None
                    if code and self._debouncer.accept(code):
                        yield code
                    else:
                        await asyncio.sleep(self._idle_delay)
            finally:
                logger.info("scan_stopped")

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, handler: CodeHandler) -> asyncio.Task:
        if self.running:
            raise RuntimeError("scan session already running")

        async def _run():
            async with aclosing(self.codes()) as codes:
                async for code in codes:
                    await handler(code)

        self._task = asyncio.create_task(_run())
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
