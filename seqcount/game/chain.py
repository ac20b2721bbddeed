"""Turn-by-turn state of the counting chain.

State is ``values`` (the chain so far), ``matched`` (the sequence the chain
is following) and ``last_submitter``. A submission either extends the chain
or resets all three; there is no terminal state.

Invariant: while ``matched`` is set, ``matched.elements[i] == values[i]`` for
every index of ``values``.

Failure tallies: breaking a followed sequence (wrong value, or the same
submitter twice) counts against that sequence. Running past the known terms
of a sequence does not.
"""
from __future__ import annotations

from seqcount.corpus.matcher import Matched, RanOut, SequenceMatcher
from seqcount.corpus.records import Sequence
from seqcount.game.contracts import Accepted, RejectReason, Rejected
from seqcount.game.stats import Stats


class ChainStateMachine:
    def __init__(self, matcher: SequenceMatcher, stats: Stats) -> None:
        self._matcher = matcher
        self._stats = stats
        self.values: list[int] = []
        self.matched: Sequence | None = None
        self.last_submitter: str | None = None

    @property
    def length(self) -> int:
        return len(self.values)

    def reset(self) -> None:
        self.values = []
        self.matched = None
        self.last_submitter = None

    def submit(self, submitter: str, value: int) -> Accepted | Rejected:
        if self.values and submitter == self.last_submitter:
            return self._reject(submitter, value, RejectReason.SAME_SUBMITTER_TWICE, self.matched, count_failure=True)

        self.values.append(value)
        previous = self.matched

        # Fast path: the chain keeps following the same sequence.
        if previous is not None and previous.term(len(self.values) - 1) == value:
            return self._accept(submitter, value, previous)

        result = self._matcher.match_prefix(self.values)
        if isinstance(result, Matched):
            self.matched = result.sequence
            return self._accept(submitter, value, result.sequence)
        if isinstance(result, RanOut):
            return self._reject(submitter, value, RejectReason.SEQUENCE_EXHAUSTED, result.sequence, count_failure=False)
        if previous is None:
            return self._reject(submitter, value, RejectReason.NO_SEQUENCE_STARTS_HERE, None, count_failure=False)
        return self._reject(submitter, value, RejectReason.CHAIN_BROKEN, previous, count_failure=True)

    def _accept(self, submitter: str, value: int, seq: Sequence) -> Accepted:
        self.last_submitter = submitter
        self._stats.record_success(submitter, value, len(self.values))
        return Accepted(
            submitter=submitter,
            value=value,
            sequence_id=seq.id,
            chain_length=len(self.values),
        )

    def _reject(
        self,
        submitter: str,
        value: int,
        reason: RejectReason,
        seq: Sequence | None,
        *,
        count_failure: bool,
    ) -> Rejected:
        if count_failure and seq is not None:
            self._stats.record_failure(seq.id)
        self.reset()
        return Rejected(
            submitter=submitter,
            value=value,
            reason=reason,
            sequence_id=seq.id if seq is not None else None,
            sequence_name=seq.name if seq is not None else None,
        )
