"""Contracts between the counting engine and its hosts.

Every submission produces exactly one outcome:
- Accepted: the value extends the chain.
- Rejected: the chain was reset; ``reason`` says why.
- Ignored: the text did not evaluate to an integer, so it was not a turn.

Values are serialized as decimal strings by ``to_dict`` because they can be
arbitrarily large.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class RejectReason(str, Enum):
    SAME_SUBMITTER_TWICE = "same_submitter_twice"
    CHAIN_BROKEN = "chain_broken"
    SEQUENCE_EXHAUSTED = "sequence_exhausted"
    NO_SEQUENCE_STARTS_HERE = "no_sequence_starts_here"


@dataclass(frozen=True)
class Accepted:
    """The value extended the chain."""

    submitter: str
    value: int
    sequence_id: str
    chain_length: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "accepted",
            "submitter": self.submitter,
            "value": str(self.value),
            "sequence_id": self.sequence_id,
            "chain_length": self.chain_length,
        }


@dataclass(frozen=True)
class Rejected:
    """The chain was reset."""

    submitter: str
    value: int
    reason: RejectReason
    sequence_id: str | None = None
    sequence_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "rejected",
            "submitter": self.submitter,
            "value": str(self.value),
            "reason": self.reason.value,
            "sequence_id": self.sequence_id,
            "sequence_name": self.sequence_name,
            "message": describe_rejection(self),
        }


@dataclass(frozen=True)
class Ignored:
    """The text was not a countable expression."""

    submitter: str
    text: str
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "ignored", "submitter": self.submitter, "text": self.text, "error": self.error}


Outcome = Union[Accepted, Rejected, Ignored]


@dataclass(frozen=True)
class GameStats:
    """Running totals shown by the stats command."""

    total: int
    high: int
    current: int

    def to_dict(self) -> dict[str, Any]:
        return {"total": self.total, "high": self.high, "current": self.current}


def describe_rejection(outcome: Rejected) -> str:
    """Message a host replies with when a submission resets the chain."""

    if outcome.reason is RejectReason.SAME_SUBMITTER_TWICE:
        return "You broke the chain! You can't count two times in a row!"
    if outcome.reason is RejectReason.NO_SEQUENCE_STARTS_HERE:
        return "No sequence starts with that number!"
    if outcome.reason is RejectReason.SEQUENCE_EXHAUSTED:
        return f"The sequence ran out of example terms ({outcome.sequence_id})"
    return f"You broke the chain! We were following {outcome.sequence_id} ({outcome.sequence_name})"
