"""Read-only store of reference sequences.

The corpus is loaded once at startup from ``CorpusConfig.data_dir`` and never
changes afterwards. Every record the game needs must be readable: a missing or
malformed record raises :class:`CorpusLoadError` and the engine must not
start.
"""
from __future__ import annotations

import bisect
import logging
import time
from pathlib import Path
from typing import Iterable

from seqcount.config import CORPUS, CorpusConfig
from seqcount.corpus.records import Sequence, parse_record

logger = logging.getLogger(__name__)


class CorpusLoadError(RuntimeError):
    """A sequence record could not be read or parsed."""


class SequenceCorpus:
    """Sequences keyed by id, also kept as a list in ascending-id order."""

    def __init__(self, config: CorpusConfig = CORPUS) -> None:
        self._config = config
        self._cache: dict[str, Sequence] = {}
        self._ordered: list[Sequence] = []
        self._loaded = False

    @classmethod
    def from_sequences(cls, sequences: Iterable[Sequence], config: CorpusConfig = CORPUS) -> "SequenceCorpus":
        """Build an already-loaded corpus from in-memory sequences."""

        corpus = cls(config)
        for seq in sequences:
            if seq.id in corpus._cache:
                raise ValueError(f"Duplicate sequence id: {seq.id}")
            corpus._add(seq)
        corpus._loaded = True
        return corpus

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self) -> "SequenceCorpus":
        """Read every record of the configured id range. Idempotent."""

        if self._loaded:
            return self
        started = time.monotonic()
        for seq_id in self._config.ids():
            self.get(seq_id)
        self._loaded = True
        logger.info(
            "Loaded %d sequences from %s in %.1fs",
            len(self._ordered),
            self._config.data_dir,
            time.monotonic() - started,
        )
        return self

    def get(self, seq_id: str) -> Sequence:
        """Return the sequence ``seq_id``, reading its record on first access."""

        cached = self._cache.get(seq_id)
        if cached is not None:
            return cached
        seq = self._read(seq_id)
        self._add(seq)
        return seq

    def all(self) -> list[Sequence]:
        """All loaded sequences in ascending-id order."""

        return list(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)

    def __contains__(self, seq_id: object) -> bool:
        return seq_id in self._cache

    def _read(self, seq_id: str) -> Sequence:
        path = Path(self._config.record_path(seq_id))
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise CorpusLoadError(f"Unable to read sequence {seq_id} from {path}: {exc}") from exc
        try:
            return parse_record(seq_id, text)
        except ValueError as exc:
            raise CorpusLoadError(f"Malformed record for {seq_id} in {path}: {exc}") from exc

    def _add(self, seq: Sequence) -> None:
        self._cache[seq.id] = seq
        bisect.insort(self._ordered, seq, key=lambda s: s.id)
