"""Load pipeline: raw reference files to compiled lookup tables.

Per file, a small producer/consumer pipeline runs on worker threads::

    weights:        reader -> [lines] -> parser -> [ranges] -> builder
    substitutions:  reader -> [lines] -> consumer writes the mapping

Channels are bounded ``queue.Queue`` objects closed with a sentinel. No
stage reorders items, so line numbers reach the builder in file order.
The builder runs in the caller's thread. The pipeline always drains to
completion; the first malformed line is then raised as
``ReferenceDataError``. There is no partial result.
"""

from __future__ import annotations

import logging
import queue
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from modulus_tables.config import DEFAULT_QUEUE_SIZE, ReferenceDataConfig
from modulus_tables.line_reader import END_OF_STREAM, drain, produce_line_records
from modulus_tables.record_parser import is_blank, parse_substitution_line, parse_weights_line
from modulus_tables.table_builder import WeightsTableBuilder
from modulus_tables.types import (
    Err,
    LineRecord,
    Ok,
    RecordParseError,
    ReferenceDataError,
    Result,
    SortCodeData,
)

log = logging.getLogger(__name__)


def _discard_rest(channel: queue.Queue[Any]) -> None:
    for _ in drain(channel):
        pass


def _parse_weights_stage(lines: queue.Queue[Any], ranges: queue.Queue[Any]) -> int:
    """Parser stage: line records in, ``Result[SortCodeRange, ...]`` out."""
    parsed = 0
    drained = False
    try:
        for item in drain(lines):
            if isinstance(item, Err):
                ranges.put(item)
            elif not is_blank(item):
                ranges.put(parse_weights_line(item))
                parsed += 1
        drained = True
    finally:
        if not drained:
            _discard_rest(lines)
        ranges.put(END_OF_STREAM)
    return parsed


def load_weights(
    data: bytes,
    *,
    queue_size: int = DEFAULT_QUEUE_SIZE,
) -> Mapping[str, SortCodeData]:
    """Compile the weights file into a sort code -> ``SortCodeData`` table."""
    lines: queue.Queue[Any] = queue.Queue(maxsize=queue_size)
    ranges: queue.Queue[Any] = queue.Queue(maxsize=queue_size)
    builder = WeightsTableBuilder()
    first_error: RecordParseError | None = None

    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="weights") as pool:
        reader = pool.submit(produce_line_records, data, lines)
        parser = pool.submit(_parse_weights_stage, lines, ranges)
        log.debug("weights pipeline started (%d bytes)", len(data))

        drained = False
        try:
            for result in drain(ranges):
                match result:
                    case Ok(value=scr) if first_error is None:
                        builder.add_range(scr)
                    case Err(error=err) if first_error is None:
                        first_error = err
                    case _:
                        pass
            drained = True
        finally:
            if not drained:
                _discard_rest(ranges)
        line_count = reader.result()
        range_count = parser.result()

    if first_error is not None:
        log.warning("weights file rejected: %s", first_error.describe())
        raise ReferenceDataError(first_error)

    table = builder.build()
    log.info(
        "weights table built: %d lines, %d ranges, %d sort codes, %d chained",
        line_count, range_count, len(table), builder.chained_codes(),
    )
    return table


def load_substitutions(
    data: bytes,
    *,
    queue_size: int = DEFAULT_QUEUE_SIZE,
) -> Mapping[str, str]:
    """Compile the substitutions file into a sort code -> sort code mapping.

    Duplicate keys: the line declared last wins.
    """
    lines: queue.Queue[Any] = queue.Queue(maxsize=queue_size)
    substitutions: dict[str, str] = {}
    first_error: RecordParseError | None = None

    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="substitutions") as pool:
        reader = pool.submit(produce_line_records, data, lines)
        log.debug("substitutions pipeline started (%d bytes)", len(data))

        drained = False
        try:
            for item in drain(lines):
                if first_error is not None:
                    continue
                if isinstance(item, Err):
                    first_error = item.error
                    continue
                record: LineRecord = item
                if is_blank(record):
                    continue
                match parse_substitution_line(record):
                    case Ok(value=(key, value)):
                        substitutions[key] = value
                    case Err(error=err):
                        first_error = err
            drained = True
        finally:
            if not drained:
                _discard_rest(lines)
        line_count = reader.result()

    if first_error is not None:
        log.warning("substitutions file rejected: %s", first_error.describe())
        raise ReferenceDataError(first_error)

    log.info(
        "substitutions built: %d lines, %d sort codes", line_count, len(substitutions),
    )
    return MappingProxyType(substitutions)


# ---------------------------------------------------------------------------
# Compiled pair of tables
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ModulusTables:
    """Read-only pair of lookup tables handed to the modulus validator."""

    substitutions: Mapping[str, str]
    weights: Mapping[str, SortCodeData]

    def rules_for(self, sort_code: str) -> list[SortCodeData]:
        """Rules for a six-digit sort code in check order (no substitution)."""
        head = self.weights.get(sort_code)
        return list(head.chain()) if head is not None else []


def build_tables(
    weights_data: bytes,
    substitutions_data: bytes,
    *,
    queue_size: int = DEFAULT_QUEUE_SIZE,
) -> Result[ModulusTables, RecordParseError]:
    """Build both tables, or return the error for the first malformed line."""
    try:
        weights = load_weights(weights_data, queue_size=queue_size)
        substitutions = load_substitutions(substitutions_data, queue_size=queue_size)
    except ReferenceDataError as exc:
        return Err(exc.error)
    return Ok(ModulusTables(substitutions=substitutions, weights=weights))


class ReferenceDataParser:
    """Parser over the two raw reference buffers.

    Each table is built on first access and cached; both are read-only.
    """

    def __init__(
        self,
        weights_data: bytes,
        substitutions_data: bytes,
        *,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ) -> None:
        self._weights_data = weights_data
        self._substitutions_data = substitutions_data
        self._queue_size = queue_size
        self._weights: Mapping[str, SortCodeData] | None = None
        self._substitutions: Mapping[str, str] | None = None

    @classmethod
    def from_config(cls, config: ReferenceDataConfig) -> ReferenceDataParser:
        """Read both reference files named by *config*."""
        return cls(
            config.read_weights(),
            config.read_substitutions(),
            queue_size=config.queue_size,
        )

    def substitutions(self) -> Mapping[str, str]:
        """Sort code -> replacement sort code mapping, built on first call."""
        if self._substitutions is None:
            self._substitutions = load_substitutions(
                self._substitutions_data, queue_size=self._queue_size,
            )
        return self._substitutions

    def weights(self) -> Mapping[str, SortCodeData]:
        """Sort code -> ``SortCodeData`` table, built on first call."""
        if self._weights is None:
            self._weights = load_weights(self._weights_data, queue_size=self._queue_size)
        return self._weights

    def tables(self) -> ModulusTables:
        """Both tables as one read-only ``ModulusTables`` pair."""
        return ModulusTables(substitutions=self.substitutions(), weights=self.weights())
