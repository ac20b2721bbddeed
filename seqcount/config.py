# seqcount/config.py

import os
from dataclasses import dataclass, field
from typing import Iterator

# --- Base paths ---
# Project root can be overridden if needed (e.g. for tests or deployment)
BASE_DIR = os.path.abspath(os.getenv("SEQCOUNT_BASE_DIR", os.path.join(os.path.dirname(__file__), "..")))


# ---------------------------
# Structured configuration
# ---------------------------

@dataclass(frozen=True)
class CorpusConfig:
    """Location and id range of the reference sequence dataset.

    Values can be overridden via environment variables:
    - SEQCOUNT_DATA_DIR
    - SEQCOUNT_FIRST_ID
    - SEQCOUNT_LAST_ID

    Records live at ``<data_dir>/<id[:shard_width]>/<id>.seq`` so that no
    directory holds more than a thousand files.
    """

    data_dir: str = field(
        default_factory=lambda: os.getenv(
            "SEQCOUNT_DATA_DIR", os.path.join(BASE_DIR, "data", "seq")
        )
    )
    first_id: int = field(default_factory=lambda: int(os.getenv("SEQCOUNT_FIRST_ID", "1")))
    last_id: int = field(default_factory=lambda: int(os.getenv("SEQCOUNT_LAST_ID", "9999")))
    id_prefix: str = "A"
    id_digits: int = 6
    shard_width: int = 4

    def format_id(self, number: int) -> str:
        return f"{self.id_prefix}{number:0{self.id_digits}d}"

    def ids(self) -> Iterator[str]:
        """Yield every sequence id in the configured range, ascending."""
        for number in range(self.first_id, self.last_id + 1):
            yield self.format_id(number)

    def record_path(self, seq_id: str) -> str:
        return os.path.join(self.data_dir, seq_id[: self.shard_width], f"{seq_id}.seq")


@dataclass(frozen=True)
class StatsConfig:
    """Counter persistence and leaderboard settings.

    Values can be overridden via environment variables:
    - SEQCOUNT_STATS_PATH
    - SEQCOUNT_FLUSH_INTERVAL
    """

    stats_path: str = field(
        default_factory=lambda: os.getenv(
            "SEQCOUNT_STATS_PATH", os.path.join(BASE_DIR, "stats.json")
        )
    )
    flush_interval_seconds: float = field(
        default_factory=lambda: float(os.getenv("SEQCOUNT_FLUSH_INTERVAL", "5.0"))
    )
    page_size: int = 10  # leaderboard rows per page


# Instantiate structured configs
CORPUS = CorpusConfig()
STATS = StatsConfig()
