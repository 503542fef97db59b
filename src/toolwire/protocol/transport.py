"""Line transports — where the server reads requests and writes envelopes.

Each transport satisfies the :class:`LineTransport` protocol, providing
``read_line`` and ``write_line``.
"""

from __future__ import annotations

import asyncio
import sys
from typing import Protocol, TextIO, runtime_checkable


@runtime_checkable
class LineTransport(Protocol):
    """Abstract line-oriented transport for the JSON-RPC stream."""

    async def read_line(self) -> str | None: ...
    async def write_line(self, line: str) -> None: ...


class StdioTransport:
    """Reads newline-delimited JSON from stdin and writes it to stdout.

    Reads happen on a worker thread so a slow client never blocks the event
    loop; every written line is flushed immediately.
    """

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout

    async def read_line(self) -> str | None:
        """Return the next line without its terminator, or ``None`` at EOF."""
        line = await asyncio.to_thread(self._stdin.readline)
        if not line:
            return None
        return line.rstrip("\r\n")

    async def write_line(self, line: str) -> None:
        """Write *line* followed by a newline and flush."""
        if "\n" in line:
            msg = "Envelope text must not contain newlines"
            raise ValueError(msg)
        self._stdout.write(line + "\n")
        self._stdout.flush()
