"""StdioServer — serves MCP over newline-delimited JSON on stdin/stdout.

Lines are handled strictly one at a time: the next line is not read until
the response to the current one has been written (or suppressed).  There
is no request correlation on stdio, so responses are never interleaved.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import TYPE_CHECKING, Protocol

from mcpifier.protocols.models import JsonRpcResponse
from mcpifier.transport.framing import decode_request, encode_response

if TYPE_CHECKING:
    from mcpifier.protocols.dispatcher import JsonRpcDispatcher

logger = logging.getLogger(__name__)

# Tool results and OpenAPI-derived schemas can make for long lines.
STDIO_LINE_LIMIT = 16 * 1024 * 1024


class LineReader(Protocol):
    async def readuntil(self, separator: bytes = ...) -> bytes: ...
    async def readexactly(self, n: int) -> bytes: ...


class LineWriter(Protocol):
    def write(self, data: bytes) -> None: ...
    async def drain(self) -> None: ...


class StdioServer:
    """Reads JSON-RPC requests line by line and writes one response line each.

    Usage::

        reader, writer = await open_stdio()
        await StdioServer(dispatcher, reader, writer).serve()
    """

    def __init__(
        self,
        dispatcher: JsonRpcDispatcher,
        reader: LineReader,
        writer: LineWriter,
    ) -> None:
        self._dispatcher = dispatcher
        self._reader = reader
        self._writer = writer

    async def serve(self) -> None:
        """Process lines until end of input."""
        logger.info("Listening for MCP requests on stdio")
        try:
            while True:
                try:
                    line = await self._reader.readuntil(b"\n")
                except asyncio.IncompleteReadError as exc:
                    line = exc.partial
                except asyncio.LimitOverrunError as exc:
                    logger.warning("Discarding oversized stdio line: %s", exc)
                    await self._skip_line()
                    await self._write_line(encode_response(JsonRpcResponse.parse_error()))
                    continue

                if not line:
                    logger.info("Standard input closed, stopping stdio server")
                    return

                await self.handle_line(line)
        except asyncio.CancelledError:
            logger.info("Stdio server cancelled")
            raise

    async def _skip_line(self) -> None:
        """Drop input up to and including the next newline, or to end of input."""
        while True:
            try:
                await self._reader.readuntil(b"\n")
                return
            except asyncio.LimitOverrunError as exc:
                await self._reader.readexactly(exc.consumed)
            except asyncio.IncompleteReadError:
                return

    async def handle_line(self, line: str | bytes) -> None:
        """Decode, dispatch and answer a single line."""
        request, error = decode_request(line)
        if error is not None:
            await self._write_line(encode_response(error))
            return

        assert request is not None
        response = await self._dispatcher.dispatch(request)
        if response.is_empty:
            return

        await self._write_line(encode_response(response))

    async def _write_line(self, text: str) -> None:
        self._writer.write(text.encode("utf-8") + b"\n")
        await self._writer.drain()


async def open_stdio(
    limit: int = STDIO_LINE_LIMIT,
) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """Wrap the process's stdin/stdout in asyncio streams."""
    loop = asyncio.get_running_loop()

    reader = asyncio.StreamReader(limit=limit)
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)

    transport, protocol = await loop.connect_write_pipe(
        asyncio.streams.FlowControlMixin, sys.stdout
    )
    writer = asyncio.StreamWriter(transport, protocol, reader, loop)
    return reader, writer
