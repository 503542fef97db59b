"""Server — the transport loop tying codec, dispatcher and transport together.

On start the server announces ``notifications/ready``, then reads lines in
arrival order until EOF.  In ``sequential`` mode each line is answered before
the next is read.  In ``concurrent`` mode every line becomes its own task and
responses are written in completion order; clients correlate them by ``id``.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING

from toolwire.protocol import codec
from toolwire.protocol.errors import ParseError
from toolwire.protocol.models import ErrorCode

if TYPE_CHECKING:
    from toolwire.protocol.dispatcher import Dispatcher
    from toolwire.protocol.transport import LineTransport

logger = logging.getLogger(__name__)

READY_NOTIFICATION = "notifications/ready"


class Concurrency(str, Enum):
    """How many requests may be in flight at once."""

    SEQUENTIAL = "sequential"
    CONCURRENT = "concurrent"


class Server:
    """Reads requests from a :class:`LineTransport` and writes the replies.

    Usage::

        server = Server(dispatcher, StdioTransport())
        await server.serve()   # returns at EOF
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        transport: LineTransport,
        *,
        concurrency: Concurrency = Concurrency.SEQUENTIAL,
    ) -> None:
        self._dispatcher = dispatcher
        self._transport = transport
        self._concurrency = Concurrency(concurrency)
        self._write_lock = asyncio.Lock()
        self._in_flight: set[asyncio.Task[None]] = set()

    async def serve(self) -> None:
        """Announce readiness, then process lines until the input closes."""
        await self._write(codec.encode_notification(READY_NOTIFICATION, {}))
        logger.info("Server started (%s mode)", self._concurrency.value)

        try:
            while True:
                line = await self._transport.read_line()
                if line is None:
                    break
                if not line.strip():
                    continue
                if self._concurrency == Concurrency.SEQUENTIAL:
                    await self.process_line(line)
                else:
                    task = asyncio.create_task(self.process_line(line))
                    self._in_flight.add(task)
                    task.add_done_callback(self._in_flight.discard)
        finally:
            if self._in_flight:
                await asyncio.gather(*self._in_flight)

        logger.info("Input closed, server stopping")

    async def process_line(self, line: str) -> None:
        """Parse, dispatch and answer one input line."""
        try:
            message = codec.parse_line(line)
        except ParseError as exc:
            logger.error("Error processing request: %s", exc)
            await self._write(codec.encode_error(None, ErrorCode.PARSE_ERROR, "Parse error"))
            return

        response = await self._dispatcher.dispatch(message)
        if response is None:
            return
        try:
            text = codec.encode(response)
        except (TypeError, ValueError) as exc:
            logger.error("Cannot encode response for request %s: %s", response.id, exc)
            text = codec.encode_error(response.id, ErrorCode.INTERNAL_ERROR, "Internal error")
        logger.info("Sending response: %s", text)
        await self._write(text)

    async def _write(self, text: str) -> None:
        async with self._write_lock:
            await self._transport.write_line(text)
