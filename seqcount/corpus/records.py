"""Parsing of sequence records.

A record is a small text file with one tagged line per field::

    %I A000045 M0692 N0256
    %S A000045 0,1,1,2,3,5,8,13,21,34,55,89,144,233,377,610,987,1597,2584,4181,
    %T A000045 6765,10946,17711,28657,46368,75025,121393,196418,317811,514229,
    %N A000045 Fibonacci numbers: F(n) = F(n-1) + F(n-2) with F(0) = 0 and F(1) = 1.

The kind tag is the character after ``%``. ``S``/``T``/``U`` lines carry the
terms (concatenated in file order), ``N`` carries the name. Everything else is
ignored.
"""
from __future__ import annotations

from dataclasses import dataclass

DEFAULT_NAME = "<no name provided>"

VALUE_KINDS = frozenset({"S", "T", "U"})
NAME_KIND = "N"


@dataclass(frozen=True)
class Sequence:
    """A named, immutable list of reference integers."""

    id: str
    name: str
    elements: tuple[int, ...]

    def term(self, index: int) -> int | None:
        """Return the term at ``index`` or ``None`` when the data runs out."""

        if 0 <= index < len(self.elements):
            return self.elements[index]
        return None


def parse_record(seq_id: str, text: str) -> Sequence:
    """Build a :class:`Sequence` from the text of its record.

    Raises ValueError when a value line holds something other than integers.
    """

    name = DEFAULT_NAME
    elements: list[int] = []
    for row in text.splitlines():
        parts = row.split(" ")
        head = parts[0]
        if len(head) < 2:
            continue
        kind = head[1]
        data = " ".join(parts[2:])
        if kind in VALUE_KINDS:
            # Continued lines end with a comma; skip the empty field it leaves.
            elements.extend(int(field) for field in data.split(",") if field.strip())
        elif kind == NAME_KIND:
            name = data[:-1] if data.endswith(".") else data
    return Sequence(id=seq_id, name=name, elements=tuple(elements))
