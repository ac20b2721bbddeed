"""Find the reference sequence a chain of values is following.

Matching is a linear scan over the corpus in ascending-id order, so the first
sequence that agrees with every value wins even if a later one agrees too.
The scan costs O(corpus size x chain length) per call.

Outcomes:
- ``Matched(seq)``: ``seq`` agrees with every value.
- ``RanOut(seq)``: nothing agrees fully, but ``seq`` agreed with every value
  it knows and simply has too few terms to judge the rest. When several do,
  the one with the most known terms is kept (the earliest among equals).
- ``NoMatch``: nothing is consistent with the values.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence as SequenceOf, Union

from seqcount.corpus.records import Sequence
from seqcount.corpus.store import SequenceCorpus


@dataclass(frozen=True)
class Matched:
    sequence: Sequence


@dataclass(frozen=True)
class RanOut:
    sequence: Sequence


@dataclass(frozen=True)
class NoMatch:
    pass


MatchResult = Union[Matched, RanOut, NoMatch]


class SequenceMatcher(Protocol):
    """Anything that can resolve a chain of values against the corpus."""

    def match_prefix(self, values: SequenceOf[int]) -> MatchResult:
        ...


class LinearScanMatcher:
    """Reference matcher: scan every sequence, first full match wins."""

    def __init__(self, corpus: SequenceCorpus) -> None:
        self._corpus = corpus

    def match_prefix(self, values: SequenceOf[int]) -> MatchResult:
        backup: Sequence | None = None
        n = len(values)
        for seq in self._corpus.all():
            elements = seq.elements
            known = min(n, len(elements))
            if any(elements[i] != values[i] for i in range(known)):
                continue
            if known == n:
                return Matched(seq)
            # Every known term agreed but the record is too short.
            if backup is None or len(backup.elements) < len(elements):
                backup = seq
        if backup is not None:
            return RanOut(backup)
        return NoMatch()
