"""
Transaction Model Module

Defines the transaction types that can appear in a replay stream and the
record kept for each deposit and withdrawal. Dispute-family transactions
reference an earlier deposit by id and carry no amount of their own.
"""

from decimal import Decimal
from dataclasses import dataclass
from typing import Optional
from enum import Enum


MAX_CLIENT_ID = 2 ** 16 - 1
MAX_TRANSACTION_ID = 2 ** 32 - 1


class TransactionType(Enum):
    """Types of replayed transactions"""
    DEPOSIT = "deposit"          # Credit to the client's account
    WITHDRAWAL = "withdrawal"    # Debit from the client's account
    DISPUTE = "dispute"          # Claim against an earlier deposit
    RESOLVE = "resolve"          # Dispute settled in the client's favour
    CHARGEBACK = "chargeback"    # Dispute settled by reversing the deposit

    @property
    def carries_amount(self) -> bool:
        """Deposits and withdrawals carry an amount, the dispute family does not"""
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)

    @property
    def is_dispute_family(self) -> bool:
        return not self.carries_amount


class DisputeState(Enum):
    """Dispute lifecycle of a recorded transaction"""
    UNDISPUTED = "undisputed"
    DISPUTED = "disputed"
    CHARGED_BACK = "charged_back"  # Terminal


@dataclass
class TransactionRecord:
    """
    A single transaction from the input stream

    ``disputed`` and ``locked`` are only ever changed on records held by the
    ledger, by dispute-family transactions referencing them.
    """
    transaction_id: int
    transaction_type: TransactionType
    client_id: int
    amount: Optional[Decimal] = None
    disputed: bool = False
    locked: bool = False

    def __post_init__(self):
        if not 0 <= self.client_id <= MAX_CLIENT_ID:
            raise ValueError(f"client_id out of range: {self.client_id}")

        if not 0 <= self.transaction_id <= MAX_TRANSACTION_ID:
            raise ValueError(f"transaction_id out of range: {self.transaction_id}")

        if self.transaction_type.carries_amount and self.amount is None:
            raise ValueError(f"{self.transaction_type.value} requires an amount")

        if self.amount is not None and not isinstance(self.amount, Decimal):
            self.amount = Decimal(str(self.amount))

    @property
    def dispute_state(self) -> DisputeState:
        """Current position in the dispute state machine"""
        if self.locked:
            return DisputeState.CHARGED_BACK
        if self.disputed:
            return DisputeState.DISPUTED
        return DisputeState.UNDISPUTED

    @property
    def is_disputable(self) -> bool:
        """Only deposits can be disputed"""
        return self.transaction_type == TransactionType.DEPOSIT

    def __repr__(self) -> str:
        return (
            f"TransactionRecord({self.transaction_type.value}, client={self.client_id}, "
            f"tx={self.transaction_id}, amount={self.amount})"
        )
