"""Core types for the modulus reference-data tables.

Every stage of the load pipeline shares these types. All dataclasses are
frozen and use slots=True; a compiled table is immutable once built.

Type hierarchy:
  Ok[T] / Err[E]      : Strict algebraic Result type
  LineRecord          : One line of a raw reference file
  SortCodeRange       : One declared rule from the weights file
  SortCodeData        : Compiled rule for one sort code, with fallback chain
  RecordParseError    : Typed failure for a single malformed line
  ReferenceDataError  : Exception wrapper raised by the table loaders
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Generic, Literal, TypeAlias, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")

MIN_SORT_CODE = 0
MAX_SORT_CODE = 999_999
WEIGHT_COUNT = 14

# ---------------------------------------------------------------------------
# Result ADT
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Success case of Result[T, E].

    Usage::

        result: Result[SortCodeRange, RecordParseError] = Ok(scr)
        match result:
            case Ok(value=v): print(v)
            case Err(error=e): print(e.kind)
    """
    value: T


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failure case of Result[T, E]."""
    error: E


Result: TypeAlias = Union[Ok[T], Err[E]]


# ---------------------------------------------------------------------------
# LineRecord : raw line with its position in the source file
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class LineRecord:
    """One newline-delimited line of a reference file.

    Blank lines are kept as empty-content records so line numbers stay
    aligned with the source file.
    """
    content: str
    line_number: int  # 1-based

    def __post_init__(self) -> None:
        if self.line_number < 1:
            raise ValueError(
                f"LineRecord.line_number must be >= 1, got {self.line_number}"
            )


# ---------------------------------------------------------------------------
# SortCodeRange : one rule declared in the weights file
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SortCodeRange:
    """Inclusive sort-code range carrying one algorithm and its weights.

    Invariants (enforced in __post_init__):
        - MIN_SORT_CODE <= start <= end <= MAX_SORT_CODE
        - len(weights) == WEIGHT_COUNT
        - line_number >= 1
    """
    start: int
    end: int
    algorithm: str                 # Opaque token ("MOD10", "MOD11", "DBLAL", ...)
    weights: tuple[int, ...]       # 14 per-position weights
    exception_value: int           # 0 when the line declares no exception
    line_number: int               # Declaration order in the weights file

    def __post_init__(self) -> None:
        if not MIN_SORT_CODE <= self.start <= MAX_SORT_CODE:
            raise ValueError(
                f"SortCodeRange.start out of bounds: {self.start}"
            )
        if not MIN_SORT_CODE <= self.end <= MAX_SORT_CODE:
            raise ValueError(
                f"SortCodeRange.end out of bounds: {self.end}"
            )
        if self.end < self.start:
            raise ValueError(
                f"SortCodeRange.end ({self.end}) must be >= start ({self.start})"
            )
        if len(self.weights) != WEIGHT_COUNT:
            raise ValueError(
                f"SortCodeRange.weights must have {WEIGHT_COUNT} entries, "
                f"got {len(self.weights)}"
            )
        if self.line_number < 1:
            raise ValueError(
                f"SortCodeRange.line_number must be >= 1, got {self.line_number}"
            )

    def codes(self) -> range:
        """Every integer sort code covered by this range."""
        return range(self.start, self.end + 1)


# ---------------------------------------------------------------------------
# SortCodeData : compiled rule with ordered fallback chain
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SortCodeData:
    """The compiled rule attached to one six-digit sort code.

    ``next`` points at the rule of the range declared *later* in the weights
    file. Consumers apply ``next`` when the primary check fails. Along a
    chain ``line_number`` is strictly ascending, so walking it terminates.
    """
    algorithm: str
    weights: tuple[int, ...]
    exception_value: int
    line_number: int
    next: SortCodeData | None = None

    @classmethod
    def from_range(cls, scr: SortCodeRange) -> SortCodeData:
        """Chain-less node carrying the rule of *scr*."""
        return cls(
            algorithm=scr.algorithm,
            weights=scr.weights,
            exception_value=scr.exception_value,
            line_number=scr.line_number,
        )

    def chain(self) -> Iterator[SortCodeData]:
        """Yield this rule followed by every fallback, in check order."""
        node: SortCodeData | None = self
        while node is not None:
            yield node
            node = node.next


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

ParseErrorKind: TypeAlias = Literal[
    "field_count", "invalid_integer", "invalid_range", "undecodable",
]


@dataclass(frozen=True, slots=True)
class RecordParseError:
    """Typed failure for one line. Keeps the offending line and its number."""
    kind: ParseErrorKind
    line_number: int
    content: str
    message: str

    def describe(self) -> str:
        return (
            f"parse error at line {self.line_number} ({self.kind}): "
            f"{self.message}: {self.content!r}"
        )


class ReferenceDataError(ValueError):
    """Raised when a reference file cannot be compiled into a table."""

    def __init__(self, error: RecordParseError) -> None:
        super().__init__(error.describe())
        self.error = error
