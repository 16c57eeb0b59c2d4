"""
Transaction Ledger Module

Keeps the history of deposits and withdrawals keyed by transaction id so that
later disputes, resolutions and chargebacks can find the transaction they
reference. Entries are never removed during a run.
"""

from typing import Dict, Iterator, Optional

from .transactions import TransactionRecord
from .logging_config import get_logger


class Ledger:
    """
    Append-only store of deposit and withdrawal records

    ``lookup`` hands out the stored record itself, so dispute handlers mutate
    its ``disputed``/``locked`` flags in place.
    """

    def __init__(self):
        self._records: Dict[int, TransactionRecord] = {}
        self.logger = get_logger("ledger_replay.ledger")

    def record(self, transaction: TransactionRecord) -> None:
        """
        Store a deposit or withdrawal under its transaction id

        A repeated id overwrites the earlier entry (last write wins).

        Raises:
            ValueError: If the transaction is a dispute-family transaction
        """
        if not transaction.transaction_type.carries_amount:
            raise ValueError(
                f"Only deposits and withdrawals are recorded, got {transaction.transaction_type.value}"
            )

        previous = self._records.get(transaction.transaction_id)
        if previous is not None:
            self.logger.warning(
                f"Transaction {transaction.transaction_id} recorded twice, "
                f"replacing {previous.transaction_type.value} for client {previous.client_id}"
            )

        self._records[transaction.transaction_id] = transaction

    def lookup(self, transaction_id: int) -> Optional[TransactionRecord]:
        """Get the stored record for a transaction id, or None"""
        return self._records.get(transaction_id)

    def __contains__(self, transaction_id: int) -> bool:
        return transaction_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[TransactionRecord]:
        return iter(self._records.values())
