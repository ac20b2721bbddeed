"""Pytest configuration to make the project root importable as a package.

This ensures that ``import seqcount`` and similar absolute imports work when
tests are run from the repository root or other locations. It also provides a
fixture that writes small sequence records to disk.
"""

import os
import sys
from pathlib import Path

import pytest

# Project root = parent directory of this tests/ folder
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


@pytest.fixture
def write_record(tmp_path: Path):
    """Return a helper that writes ``<tmp>/seq/<id[:4]>/<id>.seq``."""

    data_dir = tmp_path / "seq"

    def _write(seq_id: str, terms: list[int] | None = None, name: str | None = None, raw: str | None = None) -> Path:
        shard = data_dir / seq_id[:4]
        shard.mkdir(parents=True, exist_ok=True)
        path = shard / f"{seq_id}.seq"
        if raw is None:
            lines = [f"%I {seq_id}"]
            if terms is not None:
                lines.append(f"%S {seq_id} " + ",".join(str(t) for t in terms) + ",")
            if name is not None:
                lines.append(f"%N {seq_id} {name}")
            raw = "\n".join(lines) + "\n"
        path.write_text(raw, encoding="utf-8")
        return path

    _write.data_dir = data_dir
    return _write
