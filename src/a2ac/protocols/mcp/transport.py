"""Stdio transport for the MCP server: newline-delimited JSON.

Each request arrives as one JSON document on its own line of stdin and
each reply is written as one line to stdout.  Nothing else may be written
to stdout while serving; logs go to stderr.
"""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any, Protocol, TextIO, runtime_checkable


@runtime_checkable
class MCPServerTransport(Protocol):
    """Server side of an MCP JSON-RPC channel."""

    async def receive(self) -> str | None: ...
    async def send(self, data: dict[str, Any]) -> None: ...


class StdioServerTransport:
    """Reads requests from *reader* and writes replies to *writer*.

    Defaults to the process's stdin and stdout.  Blocking reads run in a
    worker thread so the event loop stays free while waiting for input.
    """

    def __init__(self, reader: TextIO | None = None, writer: TextIO | None = None) -> None:
        self._reader = reader if reader is not None else sys.stdin
        self._writer = writer if writer is not None else sys.stdout

    async def receive(self) -> str | None:
        """Return the next non-blank line, or ``None`` at end of input."""
        while True:
            line = await asyncio.to_thread(self._reader.readline)
            if not line:
                return None
            if line.strip():
                return line

    async def send(self, data: dict[str, Any]) -> None:
        """Write *data* as a single JSON line and flush."""
        self._writer.write(json.dumps(data) + "\n")
        self._writer.flush()
