"""Counting game module.

This module provides:
- Outcome contracts shared with hosts (seqcount.game.contracts)
- The chain state machine (seqcount.game.chain)
- Counters and leaderboards (seqcount.game.stats)
- Background persistence (seqcount.game.flusher)
- The engine hosts talk to (seqcount.game.engine)
"""

from __future__ import annotations

__all__ = ["chain", "contracts", "engine", "flusher", "stats"]
