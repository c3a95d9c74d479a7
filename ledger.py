from decimal import Decimal
from typing import Dict, List, Set
import structlog

from models import (
    ZERO,
    AccountSnapshot,
    EntryKind,
    LedgerEntry,
    Outcome,
    RejectedWithdrawal,
)

logger = structlog.get_logger()


class Account:
    """Balances and dispute state for a single client account.

    Every operation either applies in full or is a silent no-op; policy
    outcomes are reported through the returned ``Outcome`` and debug logs,
    never raised.
    """

    def __init__(self, account_id: int):
        self.account_id = account_id
        self.available: Decimal = ZERO
        self.held: Decimal = ZERO
        self.total: Decimal = ZERO
        self.locked = False
        self.ledger: Dict[int, LedgerEntry] = {}
        self.open_disputes: Set[int] = set()
        self.pending_rejections: List[RejectedWithdrawal] = []

    def deposit(self, tx_id: int, amount: Decimal) -> Outcome:
        if self.locked:
            return self._ignored("deposit", tx_id, reason="account_locked")

        self.total += amount
        self.available += amount
        self.ledger[tx_id] = LedgerEntry(EntryKind.deposit, amount)

        logger.debug(
            "Deposit applied",
            account_id=self.account_id,
            tx_id=tx_id,
            amount=str(amount),
            available=str(self.available)
        )
        return Outcome.applied

    def withdraw(self, tx_id: int, amount: Decimal) -> Outcome:
        if self.locked:
            return self._ignored("withdraw", tx_id, reason="account_locked")

        # Exceeding total can never become valid, whatever disputes resolve
        if self.total < amount:
            return self._rejected(tx_id, amount, reason="insufficient_total")

        if self.available < amount:
            if not self.open_disputes:
                return self._rejected(tx_id, amount, reason="insufficient_available")

            self.pending_rejections.append(
                RejectedWithdrawal(amount, frozenset(self.open_disputes))
            )
            logger.debug(
                "Withdrawal pending on open disputes",
                account_id=self.account_id,
                tx_id=tx_id,
                amount=str(amount),
                available=str(self.available),
                open_disputes=sorted(self.open_disputes)
            )
            return Outcome.pending

        self.total -= amount
        self.available -= amount
        self.ledger[tx_id] = LedgerEntry(EntryKind.withdraw, amount)

        logger.debug(
            "Withdrawal applied",
            account_id=self.account_id,
            tx_id=tx_id,
            amount=str(amount),
            available=str(self.available)
        )
        return Outcome.applied

    def dispute(self, tx_id: int) -> Outcome:
        if self.locked:
            return self._ignored("dispute", tx_id, reason="account_locked")
        if tx_id in self.open_disputes:
            return self._ignored("dispute", tx_id, reason="already_disputed")

        entry = self.ledger.get(tx_id)
        if entry is None:
            return self._ignored("dispute", tx_id, reason="unknown_transaction")
        # Only deposits can be disputed
        if entry.kind != EntryKind.deposit:
            return self._ignored("dispute", tx_id, reason="not_a_deposit")

        self.available -= entry.amount
        self.held += entry.amount
        self.open_disputes.add(tx_id)

        logger.debug(
            "Dispute opened",
            account_id=self.account_id,
            tx_id=tx_id,
            amount=str(entry.amount),
            held=str(self.held)
        )
        return Outcome.applied

    def resolve(self, tx_id: int) -> Outcome:
        if self.locked:
            return self._ignored("resolve", tx_id, reason="account_locked")
        if tx_id not in self.open_disputes:
            return self._ignored("resolve", tx_id, reason="not_disputed")

        entry = self.ledger[tx_id]
        if entry.kind != EntryKind.deposit:
            # Disputed id was overwritten by a duplicate withdrawal record
            self.open_disputes.discard(tx_id)
            return self._ignored("resolve", tx_id, reason="not_a_deposit")

        self.available += entry.amount
        self.held -= entry.amount
        self._resolve_pending_rejections(tx_id)
        self.open_disputes.discard(tx_id)

        logger.debug(
            "Dispute resolved",
            account_id=self.account_id,
            tx_id=tx_id,
            amount=str(entry.amount),
            available=str(self.available)
        )
        return Outcome.applied

    def chargeback(self, tx_id: int) -> Outcome:
        if self.locked:
            return self._ignored("chargeback", tx_id, reason="account_locked")
        if tx_id not in self.open_disputes:
            return self._ignored("chargeback", tx_id, reason="not_disputed")

        entry = self.ledger[tx_id]
        if entry.kind != EntryKind.deposit:
            return self._ignored("chargeback", tx_id, reason="not_a_deposit")

        self.held -= entry.amount
        self.total -= entry.amount
        self.locked = True

        logger.info(
            "Chargeback applied, account locked",
            account_id=self.account_id,
            tx_id=tx_id,
            amount=str(entry.amount),
            total=str(self.total)
        )
        return Outcome.applied

    def snapshot(self) -> AccountSnapshot:
        return AccountSnapshot(
            client=self.account_id,
            available=self.available,
            held=self.held,
            total=self.total,
            locked=self.locked
        )

    def _resolve_pending_rejections(self, resolved_tx_id: int) -> None:
        """Accept withdrawals that were rejected while ``resolved_tx_id`` was disputed.

        Entries are visited in rejection order and each acceptance reduces
        ``available`` before the next entry is checked.
        """
        accepted = set()
        for index, rejection in enumerate(self.pending_rejections):
            if resolved_tx_id not in rejection.disputes_at_time:
                continue
            if rejection.amount > self.available:
                continue

            self.available -= rejection.amount
            self.total -= rejection.amount
            accepted.add(index)

            logger.debug(
                "Pending withdrawal accepted",
                account_id=self.account_id,
                resolved_tx_id=resolved_tx_id,
                amount=str(rejection.amount),
                available=str(self.available)
            )

        if accepted:
            self.pending_rejections = [
                rejection
                for index, rejection in enumerate(self.pending_rejections)
                if index not in accepted
            ]

    def _ignored(self, operation: str, tx_id: int, reason: str) -> Outcome:
        logger.debug(
            "Operation ignored",
            operation=operation,
            account_id=self.account_id,
            tx_id=tx_id,
            reason=reason
        )
        return Outcome.ignored

    def _rejected(self, tx_id: int, amount: Decimal, reason: str) -> Outcome:
        logger.debug(
            "Withdrawal rejected",
            account_id=self.account_id,
            tx_id=tx_id,
            amount=str(amount),
            available=str(self.available),
            total=str(self.total),
            reason=reason
        )
        return Outcome.rejected
