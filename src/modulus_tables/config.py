"""Where the reference files live and how the load pipeline is sized.

Three ways to build a config:

* ``ReferenceDataConfig.from_dir(path)`` : ``weights.txt`` and
  ``substitutions.txt`` inside one directory.
* ``ReferenceDataConfig.from_json(path)`` : a JSON file; relative paths
  are resolved against the JSON file's directory.
* ``ReferenceDataConfig.from_env()`` : ``MODULUS_TABLES_DATA_DIR`` and the
  optional ``MODULUS_TABLES_QUEUE_SIZE``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import orjson

DEFAULT_QUEUE_SIZE = 1024
WEIGHTS_FILENAME = "weights.txt"
SUBSTITUTIONS_FILENAME = "substitutions.txt"

ENV_DATA_DIR = "MODULUS_TABLES_DATA_DIR"
ENV_QUEUE_SIZE = "MODULUS_TABLES_QUEUE_SIZE"


@dataclass(frozen=True, slots=True)
class ReferenceDataConfig:
    weights_path: Path
    substitutions_path: Path
    queue_size: int = DEFAULT_QUEUE_SIZE  # Bound of each pipeline channel

    def __post_init__(self) -> None:
        if self.queue_size < 1:
            raise ValueError(f"queue_size must be >= 1, got {self.queue_size}")

    @classmethod
    def from_dir(
        cls,
        data_dir: Path,
        *,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ) -> ReferenceDataConfig:
        return cls(
            weights_path=data_dir / WEIGHTS_FILENAME,
            substitutions_path=data_dir / SUBSTITUTIONS_FILENAME,
            queue_size=queue_size,
        )

    @classmethod
    def from_json(cls, path: Path) -> ReferenceDataConfig:
        """Load from a JSON file with ``weights_path``/``substitutions_path``."""
        data = orjson.loads(path.read_bytes())
        base = path.parent
        return cls(
            weights_path=base / data["weights_path"],
            substitutions_path=base / data["substitutions_path"],
            queue_size=int(data.get("queue_size", DEFAULT_QUEUE_SIZE)),
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ReferenceDataConfig:
        env = os.environ if environ is None else environ
        data_dir = env.get(ENV_DATA_DIR, "").strip()
        if not data_dir:
            raise ValueError(f"{ENV_DATA_DIR} is not set")
        raw_size = env.get(ENV_QUEUE_SIZE, "").strip()
        try:
            queue_size = int(raw_size) if raw_size else DEFAULT_QUEUE_SIZE
        except ValueError as exc:
            raise ValueError(
                f"{ENV_QUEUE_SIZE} must be an integer, got {raw_size!r}"
            ) from exc
        return cls.from_dir(Path(data_dir), queue_size=queue_size)

    def read_weights(self) -> bytes:
        return self.weights_path.read_bytes()

    def read_substitutions(self) -> bytes:
        return self.substitutions_path.read_bytes()
