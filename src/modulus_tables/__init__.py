"""Sort-code weight and substitution tables for modulus checking."""

from modulus_tables.config import ReferenceDataConfig
from modulus_tables.pipeline import (
    ModulusTables,
    ReferenceDataParser,
    build_tables,
    load_substitutions,
    load_weights,
)
from modulus_tables.table_builder import WeightsTableBuilder, build_weights_table
from modulus_tables.types import (
    Err,
    LineRecord,
    Ok,
    RecordParseError,
    ReferenceDataError,
    Result,
    SortCodeData,
    SortCodeRange,
)

__all__ = [
    "Err",
    "LineRecord",
    "ModulusTables",
    "Ok",
    "RecordParseError",
    "ReferenceDataConfig",
    "ReferenceDataError",
    "ReferenceDataParser",
    "Result",
    "SortCodeData",
    "SortCodeRange",
    "WeightsTableBuilder",
    "build_tables",
    "build_weights_table",
    "load_substitutions",
    "load_weights",
]
