"""JSON snapshots and content fingerprints of compiled tables.

Snapshots are orjson-encoded with sorted keys so two builds of the same
input buffers produce byte-identical output. The fingerprint is the
SHA-256 of that canonical encoding.
"""
from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any

import orjson

from modulus_tables.pipeline import ModulusTables
from modulus_tables.types import SortCodeData

SNAPSHOT_VERSION = "1.0"


def rule_to_dict(data: SortCodeData) -> dict[str, Any]:
    return {
        "algorithm": data.algorithm,
        "weights": list(data.weights),
        "exception_value": data.exception_value,
        "line_number": data.line_number,
    }


def tables_to_dict(tables: ModulusTables) -> dict[str, Any]:
    """JSON-ready view; each weights entry is its chain in check order."""
    return {
        "snapshot_version": SNAPSHOT_VERSION,
        "substitutions": dict(sorted(tables.substitutions.items())),
        "weights": {
            code: [rule_to_dict(rule) for rule in head.chain()]
            for code, head in sorted(tables.weights.items())
        },
    }


def _encode(payload: dict[str, Any], *, pretty: bool = False) -> bytes:
    opts = orjson.OPT_SORT_KEYS
    if pretty:
        opts |= orjson.OPT_INDENT_2
    return orjson.dumps(payload, option=opts)


def tables_fingerprint(tables: ModulusTables) -> str:
    """SHA256 of the canonical snapshot encoding."""
    return hashlib.sha256(_encode(tables_to_dict(tables))).hexdigest()


def save_snapshot(tables: ModulusTables, path: Path, *, pretty: bool = True) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(_encode(tables_to_dict(tables), pretty=pretty))


def load_snapshot(path: Path) -> dict[str, Any]:
    return orjson.loads(path.read_bytes())
