"""Line reader: raw bytes to an ordered stream of ``LineRecord``.

Also provides the channel helpers used by the load pipeline. A channel is
a ``queue.Queue``; every producer ends its stream with ``END_OF_STREAM``,
also when it fails, so a consumer can always drain to completion.
"""

from __future__ import annotations

import logging
import queue
from collections.abc import Iterator
from typing import Any

from modulus_tables.types import Err, LineRecord, RecordParseError, ReferenceDataError

log = logging.getLogger(__name__)

END_OF_STREAM: Any = object()


def iter_line_records(data: bytes) -> Iterator[LineRecord]:
    """Yield one ``LineRecord`` per ``\\n``-delimited line of *data*.

    A trailing ``\\r`` is dropped so CRLF files read the same as LF files.
    A final newline does not produce an extra empty record. Raises
    ``ReferenceDataError`` at the first line that is not valid UTF-8.
    """
    lines = data.split(b"\n")
    if lines and lines[-1] == b"":
        lines.pop()
    for line_number, raw in enumerate(lines, start=1):
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        try:
            content = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ReferenceDataError(RecordParseError(
                kind="undecodable",
                line_number=line_number,
                content=raw.decode("utf-8", errors="replace"),
                message=f"invalid UTF-8 at byte {exc.start}",
            )) from exc
        yield LineRecord(content=content, line_number=line_number)


def produce_line_records(data: bytes, channel: queue.Queue[Any]) -> int:
    """Producer stage: put every line of *data* on *channel*, then close it.

    A decode failure is forwarded as an ``Err`` item. Returns the number of
    records produced.
    """
    produced = 0
    try:
        for record in iter_line_records(data):
            channel.put(record)
            produced += 1
    except ReferenceDataError as exc:
        log.debug("line reader stopped at line %d", exc.error.line_number)
        channel.put(Err(exc.error))
    finally:
        channel.put(END_OF_STREAM)
    return produced


def drain(channel: queue.Queue[Any]) -> Iterator[Any]:
    """Yield items from *channel* until the end-of-stream sentinel."""
    while True:
        item = channel.get()
        if item is END_OF_STREAM:
            return
        yield item
