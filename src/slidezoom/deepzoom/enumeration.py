"""Cancellable enumeration of every tile in a pyramid.

A producer task walks the pyramid (by level, then row, then column) and
hands ``TileResult`` values to the consumer through a bounded queue.
A shared ``asyncio.Event`` is checked before each tile is emitted on both
sides of the queue, so once it is set the consumer sees no further tiles
even if the producer had already queued one.

Usage:
    cancel = asyncio.Event()
    async with generator.iter_tiles(cancel) as tiles:
        async for result in tiles:
            tile = result.unwrap()
            ...
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING, NoReturn

from slidezoom.deepzoom.types import TileResult
from slidezoom.utils.logging import get_logger, set_correlation_context

if TYPE_CHECKING:
    from types import TracebackType

    from slidezoom.deepzoom.generator import DeepZoomGenerator

logger = get_logger(__name__)

# Queued by the producer after the last tile
_END = None


class TileEnumeration:
    """Single-use async iterator over every tile of a ``DeepZoomGenerator``.

    Elements are ``TileResult``: a tile, or the error raised computing it.
    The enumeration is not restartable; iterating again after it finished
    or was cancelled yields nothing.
    """

    def __init__(
        self,
        generator: DeepZoomGenerator,
        cancel_event: asyncio.Event | None = None,
        queue_size: int = 1,
    ) -> None:
        if queue_size <= 0:
            raise ValueError(f"queue_size must be positive, got {queue_size}")
        self._generator = generator
        self._cancel_event = cancel_event or asyncio.Event()
        self._queue: asyncio.Queue[TileResult | None] = asyncio.Queue(maxsize=queue_size)
        self._producer: asyncio.Task[None] | None = None
        self._failure: BaseException | None = None
        self._finished = False
        self._emitted = 0

    @property
    def emitted(self) -> int:
        """Return how many results the consumer has received."""
        return self._emitted

    @property
    def cancelled(self) -> bool:
        """Return True once cancellation was requested."""
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        """Request that no further tiles be emitted."""
        self._cancel_event.set()

    async def _produce(self) -> None:
        current_level = -1
        try:
            for level, col, row in self._generator.iter_addresses():
                if self._cancel_event.is_set():
                    return
                if level != current_level:
                    current_level = level
                    set_correlation_context(dz_level=level)
                    logger.debug("Enumerating level", grid=self._generator.level_tiles[level])
                result = self._generator.get_tile_result(level, col, row)
                if not result.ok:
                    logger.warning("Tile geometry failed", col=col, row=row, error=str(result.error))
                await self._queue.put(result)
        except Exception as e:
            # Re-raised to the consumer once the queue drains
            self._failure = e
        await self._queue.put(_END)

    def __aiter__(self) -> TileEnumeration:
        return self

    async def __anext__(self) -> TileResult:
        if self._finished:
            raise StopAsyncIteration
        if self._producer is None:
            logger.debug("Tile enumeration started", tiles=self._generator.tile_count)
            self._producer = asyncio.create_task(self._produce())

        if self._cancel_event.is_set():
            await self._stop_cancelled()

        getter = asyncio.ensure_future(self._queue.get())
        stopper = asyncio.ensure_future(self._cancel_event.wait())
        try:
            await asyncio.wait({getter, stopper}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            getter.cancel()
            stopper.cancel()

        # A tile that arrived together with the cancel signal is dropped
        if self._cancel_event.is_set():
            await self._stop_cancelled()

        item = getter.result()
        if item is _END:
            await self.aclose()
            if self._failure is not None:
                raise self._failure
            logger.debug("Tile enumeration finished", emitted=self._emitted)
            raise StopAsyncIteration

        self._emitted += 1
        return item

    async def _stop_cancelled(self) -> NoReturn:
        logger.info("Tile enumeration cancelled", emitted=self._emitted)
        await self.aclose()
        raise StopAsyncIteration

    async def aclose(self) -> None:
        """Stop the producer and mark the enumeration finished."""
        self._finished = True
        producer = self._producer
        if producer is not None and not producer.done():
            producer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await producer

    async def __aenter__(self) -> TileEnumeration:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()
