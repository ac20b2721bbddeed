from __future__ import annotations

import threading

import pytest

from seqcount.config import CorpusConfig, StatsConfig
from seqcount.corpus import CorpusLoadError, Sequence, SequenceCorpus
from seqcount.game.engine import CountingEngine
from seqcount.game.contracts import Accepted, GameStats, Ignored, RejectReason, Rejected

NATURALS = Sequence("A000027", "The positive integers", tuple(range(1, 501)))
FIB = Sequence("A000045", "Fibonacci numbers", (0, 1, 1, 2, 3, 5, 8, 13))


@pytest.fixture
def engine() -> CountingEngine:
    return CountingEngine(SequenceCorpus.from_sequences([NATURALS, FIB]))


def test_engine_requires_loaded_corpus() -> None:
    with pytest.raises(ValueError):
        CountingEngine(SequenceCorpus(CorpusConfig(data_dir="/nonexistent")))


def test_expressions_are_evaluated_before_matching(engine: CountingEngine) -> None:
    first = engine.submit("alice", "sqrt(1)")
    second = engine.submit("bob", "1+1")

    assert isinstance(first, Accepted) and first.value == 1
    assert isinstance(second, Accepted) and second.chain_length == 2
    assert engine.get_stats() == GameStats(total=2, high=2, current=2)


def test_unevaluable_text_is_ignored_and_leaves_state_alone(engine: CountingEngine) -> None:
    engine.submit("alice", "1")
    outcome = engine.submit("alice", "hello")

    assert isinstance(outcome, Ignored)
    assert "hello is not defined" in outcome.error
    assert engine.get_stats().current == 1
    assert isinstance(engine.submit("bob", "2"), Accepted)


def test_rejection_resets_current(engine: CountingEngine) -> None:
    engine.submit("alice", "1")
    outcome = engine.submit("alice", "2")

    assert isinstance(outcome, Rejected)
    assert outcome.reason is RejectReason.SAME_SUBMITTER_TWICE
    assert engine.get_stats() == GameStats(total=1, high=1, current=0)
    assert engine.top_by_tally("seqs") == [("A000027", 1)]


def test_calc_returns_integer_and_propagates_errors(engine: CountingEngine) -> None:
    from seqcount.calc import EvaluationError

    assert engine.calc("2**64") == 2**64
    with pytest.raises(EvaluationError):
        engine.calc("1/0")


def test_top_by_tally_pages(engine: CountingEngine) -> None:
    for i, who in enumerate(["a", "b", "a", "c", "a", "b"], start=1):
        engine.submit(who, str(i))

    assert engine.top_by_tally("users") == [("a", 3), ("b", 2), ("c", 1)]
    with pytest.raises(KeyError):
        engine.top_by_tally("nope")


def test_page_size_is_configurable() -> None:
    engine = CountingEngine(SequenceCorpus.from_sequences([NATURALS]), page_size=1)
    engine.submit("a", "1")
    engine.submit("b", "2")
    assert engine.top_by_tally("numbers", page=1) == [("2", 1)]


def test_concurrent_submissions_keep_counters_consistent(engine: CountingEngine) -> None:
    barrier = threading.Barrier(8)
    outcomes = []
    lock = threading.Lock()

    def worker(n: int) -> None:
        barrier.wait()
        for i in range(25):
            outcome = engine.submit(f"user{n}", str(i % 5 + 1))
            with lock:
                outcomes.append(outcome)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    accepted = sum(isinstance(o, Accepted) for o in outcomes)
    stats = engine.get_stats()
    assert len(outcomes) == 200
    assert stats.total == accepted
    assert sum(engine.snapshot_stats()["users"].values()) == accepted
    assert stats.current <= stats.high


def test_from_config_loads_corpus_and_counters(write_record, tmp_path) -> None:
    write_record("A000001", [1, 2, 3], name="Counting.")
    stats_path = tmp_path / "stats.json"
    stats_path.write_text('{"total": 7, "high": 4, "users": {"old": 7}}', encoding="utf-8")

    engine = CountingEngine.from_config(
        CorpusConfig(data_dir=str(write_record.data_dir), first_id=1, last_id=1),
        StatsConfig(stats_path=str(stats_path)),
    )

    assert engine.get_stats() == GameStats(total=7, high=4, current=0)
    assert isinstance(engine.submit("new", "1"), Accepted)
    assert engine.top_by_tally("users") == [("old", 7), ("new", 1)]


def test_from_config_refuses_incomplete_corpus(write_record, tmp_path) -> None:
    write_record("A000001", [1])
    with pytest.raises(CorpusLoadError):
        CountingEngine.from_config(
            CorpusConfig(data_dir=str(write_record.data_dir), first_id=1, last_id=2),
            StatsConfig(stats_path=str(tmp_path / "stats.json")),
        )


def test_flusher_persists_engine_counters(engine: CountingEngine, tmp_path) -> None:
    from seqcount.game.stats import load_stats

    path = tmp_path / "stats.json"
    flusher = engine.make_flusher(StatsConfig(stats_path=str(path), flush_interval_seconds=60))
    engine.submit("a", "1")
    flusher.start()
    flusher.stop()

    assert load_stats(path).total == 1


@pytest.mark.parametrize("text", ["String(10n ** 5000n)", "10n ** 5000n", "'" + "9" * 5000 + "'"])
def test_oversized_values_are_ignored(engine: CountingEngine, text: str) -> None:
    outcome = engine.submit("alice", text)

    assert isinstance(outcome, Ignored)
    assert engine.get_stats().current == 0
