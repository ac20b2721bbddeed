"""Reference sequence corpus.

This package provides:
- Record parsing and the Sequence type (seqcount.corpus.records)
- The cached, read-only corpus (seqcount.corpus.store)
- Prefix matching against the corpus (seqcount.corpus.matcher)
"""

from __future__ import annotations

from seqcount.corpus.matcher import (
    LinearScanMatcher,
    Matched,
    MatchResult,
    NoMatch,
    RanOut,
    SequenceMatcher,
)
from seqcount.corpus.records import DEFAULT_NAME, Sequence, parse_record
from seqcount.corpus.store import CorpusLoadError, SequenceCorpus

__all__ = [
    "CorpusLoadError",
    "DEFAULT_NAME",
    "LinearScanMatcher",
    "MatchResult",
    "Matched",
    "NoMatch",
    "RanOut",
    "Sequence",
    "SequenceCorpus",
    "SequenceMatcher",
    "parse_record",
]
