"""Tests for modulus_tables.config."""

import sys
from pathlib import Path

import orjson
import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from modulus_tables.config import (
    DEFAULT_QUEUE_SIZE,
    ENV_DATA_DIR,
    ENV_QUEUE_SIZE,
    ReferenceDataConfig,
)


class TestFromDir:
    def test_uses_default_filenames(self, tmp_path: Path) -> None:
        cfg = ReferenceDataConfig.from_dir(tmp_path)
        assert cfg.weights_path == tmp_path / "weights.txt"
        assert cfg.substitutions_path == tmp_path / "substitutions.txt"
        assert cfg.queue_size == DEFAULT_QUEUE_SIZE

    def test_queue_size_must_be_positive(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="queue_size"):
            ReferenceDataConfig.from_dir(tmp_path, queue_size=0)


class TestFromJson:
    def test_resolves_relative_paths(self, tmp_path: Path) -> None:
        data_dir = tmp_path / "data"
        data_dir.mkdir()
        (data_dir / "w.txt").write_bytes(b"weights")
        (data_dir / "s.txt").write_bytes(b"subs")
        cfg_path = tmp_path / "modulus.json"
        cfg_path.write_bytes(orjson.dumps({
            "weights_path": "data/w.txt",
            "substitutions_path": "data/s.txt",
            "queue_size": 8,
        }))

        cfg = ReferenceDataConfig.from_json(cfg_path)
        assert cfg.queue_size == 8
        assert cfg.read_weights() == b"weights"
        assert cfg.read_substitutions() == b"subs"


class TestFromEnv:
    def test_reads_data_dir_and_queue_size(self, tmp_path: Path) -> None:
        cfg = ReferenceDataConfig.from_env({ENV_DATA_DIR: str(tmp_path), ENV_QUEUE_SIZE: "16"})
        assert cfg.weights_path == tmp_path / "weights.txt"
        assert cfg.queue_size == 16

    def test_requires_data_dir(self) -> None:
        with pytest.raises(ValueError, match=ENV_DATA_DIR):
            ReferenceDataConfig.from_env({})

    def test_rejects_bad_queue_size(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="must be an integer"):
            ReferenceDataConfig.from_env({ENV_DATA_DIR: str(tmp_path), ENV_QUEUE_SIZE: "many"})
