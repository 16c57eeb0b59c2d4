"""Ledger replay CLI.

Usage:
  ledger-replay <transactions.csv>  > accounts.csv

Replays the transactions in the file and writes one summary row per client
to stdout. Diagnostics go to stderr. Exit status is 1 when the input is
missing or malformed, in which case nothing is written to stdout.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from ledger_replay import __version__
from ledger_replay.config import ReplayConfig, get_config
from ledger_replay.events import EventDispatcher, ProcessingStats
from ledger_replay.logging_config import setup_logging, get_logger, log_action
from ledger_replay.processor import TransactionProcessor, OutcomeLogger
from ledger_replay.reader import (
    InputSourceError, MalformedRecordError, open_input, read_transactions
)
from ledger_replay.reporting import summarize, write_summary_csv


def program_directory() -> Path:
    """Directory of the running program, falling back to the working directory"""
    if sys.argv and sys.argv[0]:
        return Path(sys.argv[0]).resolve().parent
    return Path.cwd()


def resolve_input_path(csv_file: str, base_dir: Optional[str] = None) -> Path:
    """
    Locate the input file.

    Absolute paths are used as given. Relative paths are looked up in
    ``base_dir`` (or the program directory), then in the working directory.
    When neither exists the first candidate is returned so the error names it.
    """
    path = Path(csv_file)
    if path.is_absolute():
        return path

    primary = (Path(base_dir) if base_dir else program_directory()) / path
    if primary.is_file():
        return primary

    fallback = Path.cwd() / path
    if fallback.is_file():
        return fallback
    return primary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ledger-replay",
        description=f"Replay client transactions and print account summaries (v{__version__})",
    )
    parser.add_argument("csv_file", help="Transaction CSV (type, client, tx, amount)")
    return parser


def main(argv: Optional[List[str]] = None, config: Optional[ReplayConfig] = None) -> int:
    args = build_parser().parse_args(argv)
    config = config or get_config()

    setup_logging(config.log_level, log_format=config.log_format, log_file=config.log_file)
    logger = get_logger("ledger_replay.cli")

    dispatcher = EventDispatcher()
    OutcomeLogger().attach(dispatcher)
    stats = ProcessingStats().attach(dispatcher)
    processor = TransactionProcessor(event_dispatcher=dispatcher)

    path = resolve_input_path(args.csv_file, config.input_base_dir)
    try:
        with open_input(path) as stream:
            account_book = processor.replay(read_transactions(stream))
    except InputSourceError as e:
        logger.error(f"ERR: {e}")
        return 1
    except MalformedRecordError as e:
        logger.error(f"Error while parsing CSV: {e}")
        return 1

    summaries = summarize(account_book, config.output_precision)
    write_summary_csv(summaries, sys.stdout, config.output_precision)

    log_action(
        logger, "info", f"Replayed {stats.processed} transactions for {len(summaries)} clients",
        action="replay", resource=f"file:{path}", extra=stats.to_dict()
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
