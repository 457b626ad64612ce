"""Record parsers for the weights and substitutions files.

Weights line (comma separated, no header)::

    start,end,algorithm,w0,w1,...,w13[,exception]

Substitutions line (whitespace separated, no header)::

    KEY VALUE

Parsers never raise on bad input; they return ``Err(RecordParseError)``
naming the line and the reason.
"""

from __future__ import annotations

from modulus_tables.types import (
    MAX_SORT_CODE,
    MIN_SORT_CODE,
    WEIGHT_COUNT,
    Err,
    LineRecord,
    Ok,
    RecordParseError,
    Result,
    SortCodeRange,
)

# 2 range bounds + 1 algorithm + 14 weights
WEIGHTS_FIELD_COUNT = 2 + 1 + WEIGHT_COUNT
EXCEPTION_FIELD = WEIGHTS_FIELD_COUNT

SORT_CODE_DIGITS = 6


def sort_code_key(code: int) -> str:
    """Canonical six-digit, zero-padded table key for *code*."""
    return f"{code:0{SORT_CODE_DIGITS}d}"


def is_blank(record: LineRecord) -> bool:
    return not record.content.strip()


def _to_int(value: str) -> int | None:
    text = value.strip()
    # int() would accept "1_000", "+5" and non-ASCII digits; the tables only carry plain digits
    digits = text[1:] if text.startswith("-") else text
    if not (digits.isascii() and digits.isdecimal()):
        return None
    return int(text)


def parse_weights_line(record: LineRecord) -> Result[SortCodeRange, RecordParseError]:
    """Parse one weights-file line into a ``SortCodeRange``.

    A line with strictly more than 17 fields is exceptional: field 17 is the
    exception value. Otherwise the exception value is 0.
    """
    fields = [f.strip() for f in record.content.split(",")]
    if len(fields) < WEIGHTS_FIELD_COUNT:
        return Err(RecordParseError(
            kind="field_count",
            line_number=record.line_number,
            content=record.content,
            message=(
                f"expected at least {WEIGHTS_FIELD_COUNT} fields, "
                f"got {len(fields)}"
            ),
        ))

    algorithm = fields[2]
    if not algorithm:
        return Err(RecordParseError(
            kind="field_count",
            line_number=record.line_number,
            content=record.content,
            message="empty algorithm field",
        ))

    numeric_positions = [0, 1, *range(3, WEIGHTS_FIELD_COUNT)]
    if len(fields) > WEIGHTS_FIELD_COUNT:
        numeric_positions.append(EXCEPTION_FIELD)

    numbers: dict[int, int] = {}
    for pos in numeric_positions:
        parsed = _to_int(fields[pos])
        if parsed is None:
            return Err(RecordParseError(
                kind="invalid_integer",
                line_number=record.line_number,
                content=record.content,
                message=f"field {pos} is not an integer: {fields[pos]!r}",
            ))
        numbers[pos] = parsed

    start, end = numbers[0], numbers[1]
    if not MIN_SORT_CODE <= start <= end <= MAX_SORT_CODE:
        return Err(RecordParseError(
            kind="invalid_range",
            line_number=record.line_number,
            content=record.content,
            message=f"invalid sort code range {fields[0]}-{fields[1]}",
        ))

    return Ok(SortCodeRange(
        start=start,
        end=end,
        algorithm=algorithm,
        weights=tuple(numbers[pos] for pos in range(3, WEIGHTS_FIELD_COUNT)),
        exception_value=numbers.get(EXCEPTION_FIELD, 0),
        line_number=record.line_number,
    ))


def parse_substitution_line(record: LineRecord) -> Result[tuple[str, str], RecordParseError]:
    """Parse one substitutions-file line into a ``(key, value)`` pair.

    Only the first two fields are used; anything after them is ignored.
    """
    fields = record.content.split()
    if len(fields) < 2:
        return Err(RecordParseError(
            kind="field_count",
            line_number=record.line_number,
            content=record.content,
            message=f"expected 2 fields, got {len(fields)}",
        ))
    return Ok((fields[0], fields[1]))
