"""Tests for modulus_tables.snapshot."""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from modulus_tables.pipeline import ModulusTables, ReferenceDataParser
from modulus_tables.snapshot import (
    load_snapshot,
    save_snapshot,
    tables_fingerprint,
    tables_to_dict,
)

WEIGHTS = ",".join(str(w) for w in range(1, 15))
WEIGHTS_FILE = (
    f"000000,000001,MOD10,{WEIGHTS}\n"
    f"000001,000002,DBLAL,{WEIGHTS},5\n"
).encode()
SUBSTITUTIONS_FILE = b"000002 000001\n"


def _tables() -> ModulusTables:
    return ReferenceDataParser(WEIGHTS_FILE, SUBSTITUTIONS_FILE).tables()


class TestTablesToDict:
    def test_lists_chains_in_check_order(self) -> None:
        payload = tables_to_dict(_tables())
        assert payload["substitutions"] == {"000002": "000001"}
        assert list(payload["weights"]) == ["000000", "000001", "000002"]
        chain = payload["weights"]["000001"]
        assert [rule["algorithm"] for rule in chain] == ["MOD10", "DBLAL"]
        assert chain[1]["exception_value"] == 5
        assert chain[0]["weights"] == list(range(1, 15))


class TestFingerprint:
    def test_stable_across_builds(self) -> None:
        assert tables_fingerprint(_tables()) == tables_fingerprint(_tables())

    def test_changes_with_content(self) -> None:
        other = ReferenceDataParser(WEIGHTS_FILE, b"000002 000000\n").tables()
        assert tables_fingerprint(other) != tables_fingerprint(_tables())


class TestSnapshotFiles:
    def test_save_and_load(self, tmp_path: Path) -> None:
        path = tmp_path / "out" / "tables.json"
        save_snapshot(_tables(), path)
        assert load_snapshot(path) == tables_to_dict(_tables())
