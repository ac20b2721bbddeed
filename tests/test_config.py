from __future__ import annotations

from pathlib import Path

from seqcount import config
from seqcount.config import CorpusConfig, StatsConfig


def test_record_path_is_sharded_by_id_prefix(tmp_path: Path) -> None:
    cfg = CorpusConfig(data_dir=str(tmp_path))
    path = Path(cfg.record_path("A000045"))

    assert path.name == "A000045.seq"
    assert path.parent.name == "A000"
    assert path.parent.parent == tmp_path


def test_ids_cover_inclusive_range() -> None:
    cfg = CorpusConfig(data_dir="unused", first_id=9, last_id=11)
    assert list(cfg.ids()) == ["A000009", "A000010", "A000011"]


def test_env_overrides(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("SEQCOUNT_DATA_DIR", str(tmp_path / "seq"))
    monkeypatch.setenv("SEQCOUNT_FIRST_ID", "5")
    monkeypatch.setenv("SEQCOUNT_LAST_ID", "6")
    monkeypatch.setenv("SEQCOUNT_STATS_PATH", str(tmp_path / "s.json"))
    monkeypatch.setenv("SEQCOUNT_FLUSH_INTERVAL", "0.5")

    corpus = CorpusConfig()
    stats = StatsConfig()

    assert corpus.data_dir == str(tmp_path / "seq")
    assert (corpus.first_id, corpus.last_id) == (5, 6)
    assert stats.stats_path == str(tmp_path / "s.json")
    assert stats.flush_interval_seconds == 0.5


def test_defaults_live_under_base_dir(monkeypatch) -> None:
    for name in ("SEQCOUNT_DATA_DIR", "SEQCOUNT_FIRST_ID", "SEQCOUNT_LAST_ID", "SEQCOUNT_STATS_PATH"):
        monkeypatch.delenv(name, raising=False)

    base = Path(config.BASE_DIR)
    corpus = CorpusConfig()

    assert corpus.first_id == 1
    assert corpus.last_id == 9999
    assert base in Path(corpus.data_dir).parents
    assert Path(StatsConfig().stats_path).parent == base
