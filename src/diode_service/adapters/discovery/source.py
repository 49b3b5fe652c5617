"""Discovery sources: a JSON-lines reader and an in-process queue."""

from __future__ import annotations

import asyncio
import os
import stat
import sys
from dataclasses import dataclass, field
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING

from diode_service.domain.errors import MalformedFactError

from .translator import parse_fact

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable, Sequence
    from pathlib import Path
    from typing import BinaryIO

    from diode_service.domain.facts import DiscoveryFact

type ReadLine = Callable[[], Awaitable[str | bytes]]

log = getLogger(__name__)

DEFAULT_BATCH_SIZE = 100
PIPE_LINE_LIMIT = 1 << 20


@dataclass(slots=True)
class JsonLinesDiscoverySource:
    """Read one JSON fact per line from ``path`` (``stream`` when ``None``).

    Facts are grouped into batches of ``batch_size``; a blank line closes the
    current batch early. Lines that fail validation are logged and dropped.

    ``stream`` defaults to stdin. Pipes and terminals are read through the
    event loop so a pending read can be cancelled; regular files are read in
    a worker thread.
    """

    path: Path | None = None
    batch_size: int = DEFAULT_BATCH_SIZE
    stream: BinaryIO | None = None

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")

    async def batches(self) -> AsyncGenerator[Sequence[DiscoveryFact], None]:
        if self.path is not None:
            with self.path.open(encoding="utf-8") as handle:
                readline = partial(asyncio.to_thread, handle.readline)
                async for batch in self._read(readline, str(self.path)):
                    yield batch
            return

        stream = self.stream if self.stream is not None else sys.stdin.buffer
        label = "<stdin>" if self.stream is None else str(getattr(stream, "name", "<stream>"))
        if _is_regular_file(stream):
            async for batch in self._read(partial(asyncio.to_thread, stream.readline), label):
                yield batch
            return

        loop = asyncio.get_running_loop()
        reader = asyncio.StreamReader(limit=PIPE_LINE_LIMIT)
        transport, _ = await loop.connect_read_pipe(
            lambda: asyncio.StreamReaderProtocol(reader), stream
        )
        try:
            async for batch in self._read(reader.readline, label):
                yield batch
        finally:
            transport.close()

    async def _read(
        self, readline: ReadLine, label: str
    ) -> AsyncGenerator[Sequence[DiscoveryFact], None]:
        batch: list[DiscoveryFact] = []
        lineno = 0
        while True:
            line = await readline()
            if not line:
                break
            lineno += 1
            text = line.decode("utf-8", errors="replace") if isinstance(line, bytes) else line
            text = text.strip()
            if not text:
                if batch:
                    yield batch
                    batch = []
                continue
            try:
                batch.append(parse_fact(text))
            except MalformedFactError as exc:
                log.warning("Dropping %s:%s: %s", label, lineno, exc)
                continue
            if len(batch) >= self.batch_size:
                yield batch
                batch = []
        if batch:
            yield batch


@dataclass(slots=True)
class QueueDiscoverySource:
    """Batches pushed in-process; ``close`` ends the stream after queued batches."""

    queue: asyncio.Queue[Sequence[DiscoveryFact] | None] = field(default_factory=asyncio.Queue)

    async def put(self, batch: Sequence[DiscoveryFact]) -> None:
        await self.queue.put(batch)

    def put_nowait(self, batch: Sequence[DiscoveryFact]) -> None:
        self.queue.put_nowait(batch)

    def close(self) -> None:
        self.queue.put_nowait(None)

    async def batches(self) -> AsyncGenerator[Sequence[DiscoveryFact], None]:
        while True:
            batch = await self.queue.get()
            if batch is None:
                return
            yield batch


def _is_regular_file(stream: BinaryIO) -> bool:
    try:
        mode = os.fstat(stream.fileno()).st_mode
    except (AttributeError, OSError, ValueError):
        return False
    return stat.S_ISREG(mode)
