"""
Account Book Module

Holds per-client balances. Every account tracks available and held funds plus
their total, and a lock flag that is set by chargebacks and failed
withdrawals. Accounts are opened by a client's first deposit and never closed.
"""

from decimal import Decimal
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .currency import ZERO
from .logging_config import get_logger


@dataclass
class Account:
    """
    Client account balances

    Invariant: total == available + held after every operation.
    """
    client_id: int
    available: Decimal = ZERO
    held: Decimal = ZERO
    total: Decimal = ZERO
    locked: bool = False

    @property
    def is_balanced(self) -> bool:
        """Check the total == available + held invariant"""
        return self.total == self.available + self.held

    def can_deposit(self) -> bool:
        """Locked accounts accept no new funds"""
        return not self.locked

    def can_withdraw(self, amount: Decimal) -> bool:
        """
        Check whether a withdrawal of ``amount`` may proceed

        Available funds must strictly exceed the amount, so withdrawing the
        exact available balance is refused.
        """
        return not self.locked and self.available > amount

    def credit(self, amount: Decimal) -> None:
        self.available += amount
        self.total += amount

    def debit(self, amount: Decimal) -> None:
        self.available -= amount
        self.total -= amount

    def hold(self, amount: Decimal) -> None:
        """Move funds from available to held"""
        self.available -= amount
        self.held += amount

    def release(self, amount: Decimal) -> None:
        """Move funds from held back to available"""
        self.held -= amount
        self.available += amount

    def charge_back(self, amount: Decimal) -> None:
        """Remove held funds from the account entirely and lock it"""
        self.held -= amount
        self.total -= amount
        self.locked = True

    def lock(self) -> None:
        self.locked = True


class AccountBook:
    """
    Per-client account store

    Only deposits open accounts; every other handler uses ``get`` so that a
    withdrawal or dispute for an unknown client has no side effects.
    """

    def __init__(self):
        self._accounts: Dict[int, Account] = {}
        self.logger = get_logger("ledger_replay.accounts")

    def get_or_create(self, client_id: int) -> Tuple[Account, bool]:
        """
        Get the account for a client, opening an empty one if needed

        Returns:
            Tuple of (account, created)
        """
        account = self._accounts.get(client_id)
        if account is not None:
            return account, False

        account = Account(client_id=client_id)
        self._accounts[client_id] = account
        self.logger.debug(f"Opened account for client {client_id}")
        return account, True

    def get(self, client_id: int) -> Optional[Account]:
        """Get the account for a client, or None"""
        return self._accounts.get(client_id)

    def accounts(self) -> List[Account]:
        """All accounts ordered by client id"""
        return [self._accounts[client_id] for client_id in sorted(self._accounts)]

    def __contains__(self, client_id: int) -> bool:
        return client_id in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)
