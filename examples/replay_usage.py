#!/usr/bin/env python3
"""
Example: Replaying a transaction file from Python

Wires the processor to an event dispatcher, replays examples/transactions.csv,
and prints the rejection counts alongside the account summary.
"""

import os
import sys

# Add the package to the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from ledger_replay.events import EventDispatcher, ProcessingStats
from ledger_replay.processor import TransactionProcessor
from ledger_replay.reader import open_input, read_transactions
from ledger_replay.reporting import summarize, write_summary_csv


def main():
    print("📒 Ledger Replay - Python API Example")
    print("=" * 60)

    dispatcher = EventDispatcher()
    stats = ProcessingStats().attach(dispatcher)
    processor = TransactionProcessor(event_dispatcher=dispatcher)

    path = os.path.join(os.path.dirname(__file__), "transactions.csv")
    with open_input(path) as stream:
        account_book = processor.replay(read_transactions(stream))

    print(f"\nProcessed: {stats.processed}  applied: {stats.applied}  rejected: {stats.rejected}")
    for reason, count in stats.rejections_by_reason.items():
        print(f"   {reason}: {count}")

    print("\nAccounts:")
    write_summary_csv(summarize(account_book), sys.stdout)


if __name__ == "__main__":
    main()
