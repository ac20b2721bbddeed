"""Command-line host for the counting game.

Usage::

    python -m seqcount.cli calc "2**10 + sqrt(16)"
    python -m seqcount.cli play transcript.tsv
    python -m seqcount.cli stats
    python -m seqcount.cli top users --page 1

``play`` replays a transcript of ``submitter<TAB>text`` lines through a fresh
chain (counters are loaded from and saved back to the stats file).
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from seqcount.calc.errors import EvaluationError
from seqcount.calc.evaluator import evaluate
from seqcount.config import CORPUS, STATS
from seqcount.corpus.store import CorpusLoadError
from seqcount.game.contracts import Accepted, Ignored, Outcome, describe_rejection
from seqcount.game.engine import CountingEngine
from seqcount.game.stats import TALLY_NAMES, load_stats, top_by_tally


def format_outcome(outcome: Outcome) -> str:
    if isinstance(outcome, Accepted):
        return (
            f"{outcome.submitter} {outcome.value} -> accepted "
            f"({outcome.sequence_id}, chain {outcome.chain_length})"
        )
    if isinstance(outcome, Ignored):
        return f"{outcome.submitter} {outcome.text!r} -> ignored ({outcome.error})"
    return f"{outcome.submitter} {outcome.value} -> rejected: {describe_rejection(outcome)}"


def read_transcript(path: Path) -> list[tuple[str, str]]:
    turns = []
    for lineno, line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        if not line.strip() or line.startswith("#"):
            continue
        submitter, sep, text = line.partition("\t")
        if not sep:
            raise ValueError(f"{path}:{lineno}: expected 'submitter<TAB>text'")
        turns.append((submitter.strip(), text))
    return turns


def _cmd_calc(args: argparse.Namespace) -> int:
    try:
        print(evaluate(" ".join(args.expression)))
    except EvaluationError as exc:
        print(f"[seqcount] {type(exc).__name__}: {exc}", file=sys.stderr)
        return 1
    return 0


def _cmd_play(args: argparse.Namespace) -> int:
    turns = read_transcript(Path(args.transcript))
    try:
        engine = CountingEngine.from_config(CORPUS, STATS)
    except CorpusLoadError as exc:
        print(f"[seqcount] Cannot start without the sequence data: {exc}", file=sys.stderr)
        return 2

    flusher = engine.make_flusher(STATS)
    if not args.no_save:
        flusher.start()
    try:
        for submitter, text in turns:
            print(format_outcome(engine.submit(submitter, text)))
    finally:
        flusher.stop(final_flush=not args.no_save)

    stats = engine.get_stats()
    print(f"[seqcount] total={stats.total} high={stats.high} current={stats.current}")
    return 0


def _cmd_stats(args: argparse.Namespace) -> int:
    stats = load_stats(STATS.stats_path)
    print(f"Total numbers counted: {stats.total}")
    print(f"Highest chain: {stats.high}")
    return 0


def _cmd_top(args: argparse.Namespace) -> int:
    stats = load_stats(STATS.stats_path)
    try:
        rows = top_by_tally(stats.tally(args.tally), args.page, STATS.page_size)
    except ValueError as exc:
        print(f"[seqcount] {exc}", file=sys.stderr)
        return 1
    if not rows:
        print("No data!")
    for key, count in rows:
        print(f"{key}: {count}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Sequence counting game.")
    p.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...).")
    sub = p.add_subparsers(dest="command", required=True)

    calc = sub.add_parser("calc", help="Evaluate an expression.")
    calc.add_argument("expression", nargs="+")
    calc.set_defaults(func=_cmd_calc)

    play = sub.add_parser("play", help="Replay a submitter<TAB>text transcript.")
    play.add_argument("transcript", type=str)
    play.add_argument("--no-save", action="store_true", help="Do not write counters back to the stats file.")
    play.set_defaults(func=_cmd_play)

    stats = sub.add_parser("stats", help="Show persisted totals.")
    stats.set_defaults(func=_cmd_stats)

    top = sub.add_parser("top", help="Show a leaderboard page.")
    top.add_argument("tally", choices=TALLY_NAMES)
    top.add_argument("--page", type=int, default=0)
    top.set_defaults(func=_cmd_top)
    return p


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
