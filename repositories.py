from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ledger import Account


class AccountRepository(ABC):
    @abstractmethod
    def get(self, account_id: int) -> Optional[Account]:
        """Get account by id. Returns None if account doesn't exist."""
        pass

    @abstractmethod
    def create(self, account_id: int) -> Account:
        """Create a fresh, zero-balance account."""
        pass

    @abstractmethod
    def list_accounts(self) -> List[Account]:
        """Get every account, in creation order."""
        pass

    @abstractmethod
    def get_accounts_count(self) -> int:
        """Get total number of accounts."""
        pass


class InMemoryAccountRepository(AccountRepository):
    def __init__(self):
        self.accounts: Dict[int, Account] = {}

    def get(self, account_id: int) -> Optional[Account]:
        return self.accounts.get(account_id)

    def create(self, account_id: int) -> Account:
        if account_id in self.accounts:
            raise ValueError(f"Account {account_id} already exists")
        account = Account(account_id)
        self.accounts[account_id] = account
        return account

    def list_accounts(self) -> List[Account]:
        return list(self.accounts.values())

    def get_accounts_count(self) -> int:
        return len(self.accounts)
