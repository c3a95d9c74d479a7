from typing import Iterable, List, Optional
import structlog

from ledger import Account
from models import AccountSnapshot, Outcome, ProcessingSummary, TransactionRecord, TransactionType
from repositories import AccountRepository, InMemoryAccountRepository

logger = structlog.get_logger()


class TransactionProcessor:
    """Routes each transaction record to the ledger of the account it names."""

    def __init__(self, account_repo: AccountRepository):
        self.account_repo = account_repo
        self.summary = ProcessingSummary()

    def process_records(self, records: Iterable[TransactionRecord]) -> ProcessingSummary:
        logger.info("Processing transaction records")

        for record in records:
            self.process_record(record)

        self.summary.accounts_count = self.account_repo.get_accounts_count()

        logger.info(
            "Transaction records processed",
            records_processed=self.summary.records_processed,
            accounts_count=self.summary.accounts_count,
            **{outcome.value: count for outcome, count in self.summary.outcomes.items()}
        )
        return self.summary

    def process_record(self, record: TransactionRecord) -> Outcome:
        account = self._get_account(record)
        if account is None:
            logger.debug(
                "Record for unknown account dropped",
                type=record.type.value,
                account_id=record.client,
                tx_id=record.tx
            )
            outcome = Outcome.ignored
        else:
            outcome = self._dispatch(account, record)

        self.summary.record(outcome)
        return outcome

    def snapshots(self) -> List[AccountSnapshot]:
        return [account.snapshot() for account in self.account_repo.list_accounts()]

    def _get_account(self, record: TransactionRecord) -> Optional[Account]:
        """Look up the record's account, creating it only for deposits and withdrawals."""
        account = self.account_repo.get(record.client)
        if account is None and record.type.carries_amount:
            account = self.account_repo.create(record.client)
            logger.debug("Account created", account_id=record.client)
        return account

    def _dispatch(self, account: Account, record: TransactionRecord) -> Outcome:
        if record.type == TransactionType.deposit:
            return account.deposit(record.tx, record.amount)
        elif record.type == TransactionType.withdrawal:
            return account.withdraw(record.tx, record.amount)
        elif record.type == TransactionType.dispute:
            return account.dispute(record.tx)
        elif record.type == TransactionType.resolve:
            return account.resolve(record.tx)
        elif record.type == TransactionType.chargeback:
            return account.chargeback(record.tx)

        logger.error(
            "Invalid transaction type",
            type=record.type,
            tx_id=record.tx
        )
        raise ValueError(f"Invalid transaction type: {record.type}")


# Factory function
def get_transaction_processor(account_repo: Optional[AccountRepository] = None) -> TransactionProcessor:
    return TransactionProcessor(account_repo or InMemoryAccountRepository())
