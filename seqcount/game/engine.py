"""Counting engine: the one object a host talks to.

The engine owns the corpus, the matcher, the chain state machine and the
counters of a single game. Submissions are serialized by one lock held for
the whole accept/reject decision and its counter updates, so no two
submissions ever observe the chain or the last submitter at the same time.
Evaluating the submitted text happens outside the lock; it touches no state.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from seqcount.calc.errors import EvaluationError
from seqcount.calc.evaluator import ExpressionEvaluator
from seqcount.config import CORPUS, STATS, CorpusConfig, StatsConfig
from seqcount.corpus.matcher import LinearScanMatcher, SequenceMatcher
from seqcount.corpus.store import SequenceCorpus
from seqcount.game.chain import ChainStateMachine
from seqcount.game.contracts import GameStats, Ignored, Outcome, Rejected, describe_rejection
from seqcount.game.flusher import StatsFlusher
from seqcount.game.stats import Stats, load_stats, top_by_tally

logger = logging.getLogger(__name__)


class CountingEngine:
    def __init__(
        self,
        corpus: SequenceCorpus,
        *,
        stats: Stats | None = None,
        matcher: SequenceMatcher | None = None,
        evaluator: ExpressionEvaluator | None = None,
        page_size: int = STATS.page_size,
    ) -> None:
        if not corpus.loaded:
            raise ValueError("The corpus must be loaded before the engine accepts submissions")
        self.corpus = corpus
        self.stats = stats if stats is not None else Stats()
        self._evaluator = evaluator or ExpressionEvaluator()
        self._chain = ChainStateMachine(matcher or LinearScanMatcher(corpus), self.stats)
        self._page_size = page_size
        self._lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        corpus_config: CorpusConfig = CORPUS,
        stats_config: StatsConfig = STATS,
    ) -> "CountingEngine":
        """Load the corpus and persisted counters. Raises CorpusLoadError."""

        corpus = SequenceCorpus(corpus_config).load()
        stats = load_stats(stats_config.stats_path)
        return cls(corpus, stats=stats, page_size=stats_config.page_size)

    def submit(self, submitter_id: str, raw_text: str) -> Outcome:
        """Take one turn. Text that does not evaluate is ignored."""

        try:
            value = self._evaluator.evaluate(raw_text)
        except EvaluationError as exc:
            return Ignored(submitter=submitter_id, text=raw_text, error=str(exc))

        with self._lock:
            outcome = self._chain.submit(submitter_id, value)

        if isinstance(outcome, Rejected):
            logger.debug("Rejected %s from %s: %s", value, submitter_id, describe_rejection(outcome))
        return outcome

    def calc(self, raw_text: str) -> int:
        """Evaluate ``raw_text``. Raises EvaluationError."""

        return self._evaluator.evaluate(raw_text)

    def get_stats(self) -> GameStats:
        with self._lock:
            return GameStats(total=self.stats.total, high=self.stats.high, current=self._chain.length)

    def top_by_tally(self, tally_name: str, page: int = 0) -> list[tuple[str, int]]:
        """One leaderboard page of ``users``, ``seqs`` or ``numbers``."""

        with self._lock:
            tally = dict(self.stats.tally(tally_name))
        return top_by_tally(tally, page, self._page_size)

    def snapshot_stats(self) -> dict[str, Any]:
        with self._lock:
            return self.stats.to_dict()

    def make_flusher(self, stats_config: StatsConfig = STATS) -> StatsFlusher:
        return StatsFlusher(self.snapshot_stats, stats_config.stats_path, stats_config.flush_interval_seconds)
