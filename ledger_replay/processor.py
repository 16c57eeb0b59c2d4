"""
Transaction Processing Module

Replays transactions against the ledger and account book. Each transaction
type has its own handler; handlers validate first and only then mutate state,
so a rejected transaction leaves everything untouched except where a side
effect is part of the rule (a failed withdrawal locks the account).

Dispute lifecycle of a recorded deposit:

    UNDISPUTED --dispute--> DISPUTED --resolve--> UNDISPUTED
                            DISPUTED --chargeback--> CHARGED_BACK (terminal)
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Tuple
from enum import Enum

from .accounts import Account, AccountBook
from .ledger import Ledger
from .transactions import TransactionRecord, TransactionType, DisputeState
from .events import EventDispatcher, EventPayload, ReplayEvent
from .logging_config import get_logger, log_action


class RejectionReason(Enum):
    """Why a transaction was skipped"""
    UNKNOWN_CLIENT = "unknown_client"              # No account for the client
    ACCOUNT_LOCKED = "account_locked"              # Deposit/withdrawal on a locked account
    INSUFFICIENT_FUNDS = "insufficient_funds"      # Available does not exceed the amount
    UNKNOWN_TRANSACTION = "unknown_transaction"    # Referenced id not in the ledger
    CLIENT_MISMATCH = "client_mismatch"            # Referenced transaction belongs to another client
    NOT_DISPUTABLE = "not_disputable"              # Referenced transaction is not a deposit
    ALREADY_DISPUTED = "already_disputed"
    CHARGED_BACK = "charged_back"                  # Referenced transaction already charged back
    NOT_DISPUTED = "not_disputed"                  # Resolve/chargeback without an open dispute


@dataclass(frozen=True)
class ProcessingOutcome:
    """Result of applying one transaction"""
    transaction: TransactionRecord
    reason: Optional[RejectionReason] = None
    sequence: int = 0

    @property
    def accepted(self) -> bool:
        return self.reason is None

    @property
    def rejected(self) -> bool:
        return self.reason is not None


class TransactionProcessor:
    """
    Applies a stream of transactions in arrival order

    Owns the ledger and account book for the duration of a replay. Outcomes
    are returned to the caller and, when a dispatcher is attached, published
    as events.
    """

    def __init__(
        self,
        ledger: Optional[Ledger] = None,
        account_book: Optional[AccountBook] = None,
        event_dispatcher: Optional[EventDispatcher] = None
    ):
        self.ledger = ledger if ledger is not None else Ledger()
        self.account_book = account_book if account_book is not None else AccountBook()
        self._event_dispatcher = event_dispatcher
        self._sequence = 0

        self._handlers: Dict[TransactionType, Callable[[TransactionRecord], Optional[RejectionReason]]] = {
            TransactionType.DEPOSIT: self._deposit,
            TransactionType.WITHDRAWAL: self._withdraw,
            TransactionType.DISPUTE: self._dispute,
            TransactionType.RESOLVE: self._resolve,
            TransactionType.CHARGEBACK: self._chargeback,
        }

    def _publish_event(self, event_type: ReplayEvent, entity_type: str, entity_id: int, data: dict) -> None:
        """Publish a replay event if an event dispatcher is attached"""
        if self._event_dispatcher:
            self._event_dispatcher.publish(EventPayload(
                event_type=event_type,
                entity_type=entity_type,
                entity_id=entity_id,
                data=data,
                sequence=self._sequence
            ))

    def process(self, transaction: TransactionRecord) -> ProcessingOutcome:
        """
        Apply a single transaction

        Args:
            transaction: Parsed transaction from the input stream

        Returns:
            ProcessingOutcome, rejected outcomes carry the reason
        """
        self._sequence += 1

        # Recorded before applying, whether or not the transaction succeeds
        if transaction.transaction_type.carries_amount:
            self.ledger.record(transaction)

        handler = self._handlers[transaction.transaction_type]
        reason = handler(transaction)
        outcome = ProcessingOutcome(transaction=transaction, reason=reason, sequence=self._sequence)

        data = {
            "transaction_type": transaction.transaction_type.value,
            "client_id": transaction.client_id,
            "amount": str(transaction.amount) if transaction.amount is not None else None,
        }
        if outcome.accepted:
            self._publish_event(ReplayEvent.TRANSACTION_APPLIED, "transaction", transaction.transaction_id, data)
        else:
            data["reason"] = reason.value
            self._publish_event(ReplayEvent.TRANSACTION_REJECTED, "transaction", transaction.transaction_id, data)

        return outcome

    def replay(self, transactions: Iterable[TransactionRecord]) -> AccountBook:
        """
        Apply every transaction in order and return the resulting account book

        Rejections do not stop the replay. Exceptions raised by the source
        iterable (malformed input) propagate unchanged.
        """
        for transaction in transactions:
            self.process(transaction)
        return self.account_book

    # Deposit / withdrawal

    def _deposit(self, transaction: TransactionRecord) -> Optional[RejectionReason]:
        account, created = self.account_book.get_or_create(transaction.client_id)
        if created:
            self._publish_event(ReplayEvent.ACCOUNT_OPENED, "account", account.client_id, {})

        if not account.can_deposit():
            return RejectionReason.ACCOUNT_LOCKED

        account.credit(transaction.amount)
        return None

    def _withdraw(self, transaction: TransactionRecord) -> Optional[RejectionReason]:
        account = self.account_book.get(transaction.client_id)
        if account is None:
            return RejectionReason.UNKNOWN_CLIENT

        if account.locked:
            return RejectionReason.ACCOUNT_LOCKED

        if not account.can_withdraw(transaction.amount):
            # A failed withdrawal locks the account
            self._lock(account, transaction)
            return RejectionReason.INSUFFICIENT_FUNDS

        account.debit(transaction.amount)
        return None

    # Dispute family

    def _find_disputed_target(
        self, transaction: TransactionRecord
    ) -> Tuple[Optional[TransactionRecord], Optional[Account], Optional[RejectionReason]]:
        """
        Resolve the deposit and account a dispute-family transaction refers to

        Checks, in order: the id is known, it belongs to the same client, it
        is a deposit, and the owning account exists.
        """
        target = self.ledger.lookup(transaction.transaction_id)
        if target is None:
            return None, None, RejectionReason.UNKNOWN_TRANSACTION

        if target.client_id != transaction.client_id:
            return None, None, RejectionReason.CLIENT_MISMATCH

        if not target.is_disputable:
            return None, None, RejectionReason.NOT_DISPUTABLE

        account = self.account_book.get(target.client_id)
        if account is None:
            return None, None, RejectionReason.UNKNOWN_CLIENT

        return target, account, None

    def _dispute(self, transaction: TransactionRecord) -> Optional[RejectionReason]:
        target, account, reason = self._find_disputed_target(transaction)
        if reason:
            return reason

        state = target.dispute_state
        if state == DisputeState.DISPUTED:
            return RejectionReason.ALREADY_DISPUTED
        if state == DisputeState.CHARGED_BACK:
            return RejectionReason.CHARGED_BACK

        account.hold(target.amount)
        target.disputed = True
        return None

    def _resolve(self, transaction: TransactionRecord) -> Optional[RejectionReason]:
        target, account, reason = self._find_disputed_target(transaction)
        if reason:
            return reason

        if target.dispute_state != DisputeState.DISPUTED:
            return RejectionReason.NOT_DISPUTED

        account.release(target.amount)
        target.disputed = False
        return None

    def _chargeback(self, transaction: TransactionRecord) -> Optional[RejectionReason]:
        target, account, reason = self._find_disputed_target(transaction)
        if reason:
            return reason

        if target.dispute_state != DisputeState.DISPUTED:
            return RejectionReason.NOT_DISPUTED

        was_locked = account.locked
        account.charge_back(target.amount)
        target.disputed = False
        target.locked = True
        if not was_locked:
            self._publish_lock(account, transaction)
        return None

    def _lock(self, account: Account, transaction: TransactionRecord) -> None:
        account.lock()
        self._publish_lock(account, transaction)

    def _publish_lock(self, account: Account, transaction: TransactionRecord) -> None:
        self._publish_event(ReplayEvent.ACCOUNT_LOCKED, "account", account.client_id, {
            "transaction_id": transaction.transaction_id,
            "transaction_type": transaction.transaction_type.value,
        })


class OutcomeLogger:
    """
    Surfaces replay events as log lines

    Rejections are warnings, account locks are info, applied transactions are
    debug.
    """

    def __init__(self, logger_name: str = "ledger_replay.outcomes"):
        self.logger = get_logger(logger_name)

    def attach(self, dispatcher: EventDispatcher) -> 'OutcomeLogger':
        dispatcher.subscribe(ReplayEvent.TRANSACTION_APPLIED, self.on_applied)
        dispatcher.subscribe(ReplayEvent.TRANSACTION_REJECTED, self.on_rejected)
        dispatcher.subscribe(ReplayEvent.ACCOUNT_LOCKED, self.on_account_locked)
        return self

    def on_applied(self, event: EventPayload) -> None:
        log_action(
            self.logger, "debug", f"Applied {event.data['transaction_type']}",
            action=event.data["transaction_type"], resource=f"transaction:{event.entity_id}",
            extra=dict(event.data, sequence=event.sequence)
        )

    def on_rejected(self, event: EventPayload) -> None:
        log_action(
            self.logger, "warning",
            f"Rejected {event.data['transaction_type']}: {event.data['reason'].replace('_', ' ')}",
            action=event.data["transaction_type"], resource=f"transaction:{event.entity_id}",
            extra=dict(event.data, sequence=event.sequence)
        )

    def on_account_locked(self, event: EventPayload) -> None:
        log_action(
            self.logger, "info", f"Account {event.entity_id} locked",
            action="lock_account", resource=f"account:{event.entity_id}",
            extra=dict(event.data, sequence=event.sequence)
        )
