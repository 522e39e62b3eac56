"""Server-Sent-Events decoding for streamed JSON-RPC responses.

A streamed A2A response is a sequence of blocks separated by a blank line,
each block of interest being ``data: <json-rpc envelope>``.  Network chunks
do not line up with blocks, so :class:`SSEDecoder` keeps a carry-over
buffer and only ever emits complete frames.

Typical usage::

    async with http.stream("POST", url, json=body) as response:
        async for result in iter_sse_results(response.aiter_bytes()):
            ...
"""

from __future__ import annotations

import codecs
import json
import logging
from typing import TYPE_CHECKING, Any

from a2ac.protocols.errors import ProtocolError, StreamFrameError
from a2ac.protocols.jsonrpc import JsonRpcResponse, parse_envelope

if TYPE_CHECKING:
    from collections.abc import AsyncIterable, AsyncIterator, Iterator

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
FRAME_SEPARATOR = "\n\n"


def decode_frame(frame: str) -> JsonRpcResponse | None:
    """Decode one complete SSE block.

    Returns ``None`` for blocks that carry no data (comments, other fields,
    empty ``data:`` lines).

    Raises:
        StreamFrameError: If the data is not a valid JSON-RPC 2.0 envelope.
    """
    if not frame.startswith(DATA_PREFIX):
        return None
    payload = frame[len(DATA_PREFIX) :].strip()
    if not payload:
        return None
    try:
        data = json.loads(payload)
    except ValueError as exc:
        raise StreamFrameError(f"invalid JSON ({exc})", payload) from exc
    try:
        return parse_envelope(data)
    except ProtocolError as exc:
        raise StreamFrameError(str(exc), payload) from exc


class SSEDecoder:
    """Incrementally turns SSE bytes into JSON-RPC ``result`` values.

    * Malformed frames are logged and dropped; the stream continues.
    * A frame with an ``error`` member raises :class:`AgentError`; nothing
      after it is decoded.
    * The trailing fragment of every chunk is kept for the next one.
    """

    def __init__(self, method: str = "unknown") -> None:
        self._method = method
        self._buffer = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    @property
    def pending(self) -> str:
        """Data received but not yet terminated by a blank line."""
        return self._buffer

    def feed(self, chunk: bytes | str) -> Iterator[Any]:
        """Add *chunk* and yield the result of every frame it completes."""
        text = chunk if isinstance(chunk, str) else self._decoder.decode(chunk)
        frames = (self._buffer + text).replace("\r", "").split(FRAME_SEPARATOR)
        self._buffer = frames.pop()

        for frame in frames:
            try:
                envelope = decode_frame(frame)
            except StreamFrameError as exc:
                logger.error(
                    "Invalid SSE data received for method %s: %s (%r)",
                    self._method,
                    exc.detail,
                    exc.frame,
                )
                continue
            if envelope is None:
                continue

            if envelope.error is not None:
                logger.error(
                    "Error received in SSE stream for method %s: %s",
                    self._method,
                    envelope.error.model_dump(),
                )
                raise envelope.error.to_exception()
            if envelope.has_result:
                yield envelope.result
            else:
                logger.warning(
                    "SSE data for %s has neither result nor error: %r", self._method, frame
                )

    def finish(self) -> None:
        """Signal end-of-data; leftover bytes are reported, not decoded."""
        self._buffer += self._decoder.decode(b"", final=True)
        if self._buffer.strip():
            logger.warning(
                "SSE stream ended with partial data in buffer for method %s: %r",
                self._method,
                self._buffer,
            )


async def iter_sse_results(
    chunks: AsyncIterable[bytes], *, method: str = "unknown"
) -> AsyncIterator[Any]:
    """Yield each JSON-RPC ``result`` carried by an SSE byte stream, in order."""
    decoder = SSEDecoder(method)
    async for chunk in chunks:
        for result in decoder.feed(chunk):
            yield result
    decoder.finish()
