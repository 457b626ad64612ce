"""Range resolver: expands sort-code ranges into a per-code weights table.

Each declared ``SortCodeRange`` is expanded into one table entry per sort
code, keyed by the six-digit zero-padded code. This trades memory (at most
10^6 keys) for O(1) lookups instead of a range scan per query.

Overlapping ranges are never resolved first-wins. A code covered by
several ranges maps to a fallback chain:

    table["089500"] -> data(line 1) -> data(line 5) -> ...

The table value is always the rule with the smallest line number, and the
chain lists the remaining covering rules in ascending line-number order.
Ranges may be added in any order; the chain is ordered by line number,
not by insertion order.
"""

from __future__ import annotations

import bisect
from collections.abc import Iterable, Mapping
from dataclasses import replace
from types import MappingProxyType

from modulus_tables.record_parser import sort_code_key
from modulus_tables.types import SortCodeData, SortCodeRange


def merge_into_chain(head: SortCodeData, node: SortCodeData) -> SortCodeData:
    """Return a new chain with *node* inserted into *head*'s chain by line number.

    Nodes after the insertion point are reused as-is; nodes before it are
    copied with a new ``next``. Raises ``ValueError`` if the chain already
    holds a rule declared on the same line.
    """
    nodes = list(head.chain())
    line_numbers = [n.line_number for n in nodes]
    idx = bisect.bisect_left(line_numbers, node.line_number)
    if idx < len(nodes) and line_numbers[idx] == node.line_number:
        raise ValueError(
            f"Duplicate rule declaration for line {node.line_number}"
        )

    tail = nodes[idx] if idx < len(nodes) else None
    merged = replace(node, next=tail)
    for prev in reversed(nodes[:idx]):
        merged = replace(prev, next=merged)
    return merged


class WeightsTableBuilder:
    """Single-writer builder for the sort code -> ``SortCodeData`` table.

    Not thread-safe. After ``build()`` the builder is sealed and the
    returned mapping is read-only.
    """

    def __init__(self) -> None:
        self._table: dict[str, SortCodeData] = {}
        self._ranges = 0
        self._sealed = False

    def __len__(self) -> int:
        return len(self._table)

    @property
    def ranges_added(self) -> int:
        return self._ranges

    def add_range(self, scr: SortCodeRange) -> None:
        """Expand *scr* and merge its rule into every covered sort code.

        All merges are computed before the table is touched, so a
        ``ValueError`` leaves the table exactly as it was.
        """
        if self._sealed:
            raise RuntimeError("WeightsTableBuilder is sealed; build() was already called")

        node = SortCodeData.from_range(scr)
        # Codes in one range often share the same existing chain; merge it once.
        # The head is stored alongside so its id() cannot be reused mid-range.
        merged_by_head: dict[int, tuple[SortCodeData, SortCodeData]] = {}
        updates: list[tuple[str, SortCodeData]] = []

        for code in scr.codes():
            key = sort_code_key(code)
            existing = self._table.get(key)
            if existing is None:
                updates.append((key, node))
                continue
            cached = merged_by_head.get(id(existing))
            if cached is None:
                cached = (existing, merge_into_chain(existing, node))
                merged_by_head[id(existing)] = cached
            updates.append((key, cached[1]))

        self._table.update(updates)
        self._ranges += 1

    def build(self) -> Mapping[str, SortCodeData]:
        """Seal the builder and return the table as a read-only mapping."""
        self._sealed = True
        return MappingProxyType(self._table)

    def chained_codes(self) -> int:
        """Number of sort codes that carry at least one fallback rule."""
        return sum(1 for data in self._table.values() if data.next is not None)


def build_weights_table(ranges: Iterable[SortCodeRange]) -> Mapping[str, SortCodeData]:
    """Build a read-only weights table from already-parsed ranges."""
    builder = WeightsTableBuilder()
    for scr in ranges:
        builder.add_range(scr)
    return builder.build()
