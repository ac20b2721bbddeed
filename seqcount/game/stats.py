"""Game counters, their JSON persistence and the paged leaderboards.

The counters are stored as a single JSON object::

    {"seqs": {...}, "users": {...}, "total": 0, "high": 0, "numbers": {...}}

- seqs: how many times each sequence id was broken
- users: accepted submissions per submitter
- numbers: how often each value (decimal text) was accepted
- total / high: accepted submissions overall / longest chain ever

The file is read once at startup and rewritten wholesale on every flush.
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import pandas as pd

TALLY_NAMES = ("users", "seqs", "numbers")


@dataclass
class Stats:
    seqs: dict[str, int] = field(default_factory=dict)
    users: dict[str, int] = field(default_factory=dict)
    total: int = 0
    high: int = 0
    numbers: dict[str, int] = field(default_factory=dict)

    def record_failure(self, seq_id: str) -> None:
        self.seqs[seq_id] = self.seqs.get(seq_id, 0) + 1

    def record_success(self, submitter: str, value: int, chain_length: int) -> None:
        if chain_length > self.high:
            self.high = chain_length
        self.users[submitter] = self.users.get(submitter, 0) + 1
        key = str(value)
        self.numbers[key] = self.numbers.get(key, 0) + 1
        self.total += 1

    def tally(self, name: str) -> dict[str, int]:
        if name not in TALLY_NAMES:
            raise KeyError(f"Unknown tally {name!r}; expected one of {', '.join(TALLY_NAMES)}")
        return getattr(self, name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "seqs": dict(self.seqs),
            "users": dict(self.users),
            "total": self.total,
            "high": self.high,
            "numbers": dict(self.numbers),
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Stats":
        return cls(
            seqs={str(k): int(v) for k, v in (d.get("seqs") or {}).items()},
            users={str(k): int(v) for k, v in (d.get("users") or {}).items()},
            total=int(d.get("total", 0)),
            high=int(d.get("high", 0)),
            numbers={str(k): int(v) for k, v in (d.get("numbers") or {}).items()},
        )


def load_stats(path: str | Path) -> Stats:
    """Load counters from ``path``; a missing file means a fresh game."""

    p = Path(path)
    if not p.exists():
        return Stats()
    data = json.loads(p.read_text(encoding="utf-8") or "null")
    if data is None:
        return Stats()
    if not isinstance(data, dict):
        raise ValueError(f"{p}: stats JSON must be an object")
    return Stats.from_dict(data)


def save_stats(path: str | Path, data: Mapping[str, Any]) -> None:
    """Replace the stats file with ``data``.

    The JSON is written to a sibling temp file first so a crash mid-write never
    leaves a truncated stats file behind.
    """

    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_name(p.name + ".tmp")
    tmp.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
    os.replace(tmp, p)


def top_by_tally(tally: Mapping[str, int], page: int, page_size: int) -> list[tuple[str, int]]:
    """Return one page of ``tally`` ranked by count, highest first.

    Ties keep the order in which the keys were first counted.
    """

    if page < 0:
        raise ValueError(f"page must be >= 0, got {page}")
    if not tally:
        return []
    ranked = pd.Series(dict(tally), dtype="int64").sort_values(ascending=False, kind="stable")
    window = ranked.iloc[page * page_size : (page + 1) * page_size]
    return [(str(key), int(count)) for key, count in window.items()]
