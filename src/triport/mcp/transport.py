"""
STDIO Transport — newline-delimited JSON-RPC

Reads from stdin, writes to stdout.
NEVER pollutes stdout with logs.
"""

import asyncio
import json
import sys
from typing import Any, Dict, Optional

from triport.logger import get_logger

log = get_logger("mcp.transport")

# Marker returned for a line that was not valid JSON (distinct from EOF)
MALFORMED = object()


class StdioTransport:
    """Async stdin reader, direct stdout writer."""

    def __init__(self, stdin=None, stdout=None):
        self._stdin = stdin or sys.stdin.buffer
        self._stdout = stdout or sys.stdout.buffer
        self._reader: Optional[asyncio.StreamReader] = None
        self._write_lock = asyncio.Lock()
        self.running = False

    async def start(self):
        """Attach an async reader to stdin."""
        loop = asyncio.get_running_loop()

        self._reader = asyncio.StreamReader(limit=2**20)
        protocol = asyncio.StreamReaderProtocol(self._reader)
        await loop.connect_read_pipe(lambda: protocol, self._stdin)

        self.running = True
        log.info("Transport initialized")

    async def read_message(self) -> Any:
        """
        Read one JSON-RPC message.
        Returns the parsed message, MALFORMED for an undecodable line, or None on EOF.
        """
        if not self._reader:
            raise RuntimeError("Transport not started")

        while True:
            try:
                raw_bytes = await self._reader.readline()
            except ValueError as exc:
                # Line over the reader limit; readline has already discarded it
                log.error(f"Read error: {exc}")
                return MALFORMED
            if not raw_bytes:
                return None
            if raw_bytes.strip():
                break

        try:
            return json.loads(raw_bytes)
        except json.JSONDecodeError as exc:
            log.error(f"JSON parse error: {exc}")
            return MALFORMED

    async def write_message(self, message: Dict[str, Any]):
        """Write a JSON-RPC message to stdout."""
        raw_bytes = (json.dumps(message, separators=(",", ":")) + "\n").encode("utf-8")
        async with self._write_lock:
            self._stdout.write(raw_bytes)
            self._stdout.flush()

    async def close(self):
        self.running = False
        log.info("Transport closed")
