from typing import Dict, Optional

from models import Transaction, ClientAccount


class LedgerState:
    """
    Account table and transaction history for a single run.
    Owned by one LedgerEngine; not shared between threads.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, Transaction] = {}

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        """Return the account for a client, or None if it was never opened."""
        return self._accounts.get(client_id)

    def open_account(self, client_id: int) -> ClientAccount:
        """Create an empty account. Caller checks it does not exist yet."""
        account = ClientAccount(client_id=client_id)
        self._accounts[client_id] = account
        return account

    def store_transaction(self, transaction: Transaction) -> Optional[Transaction]:
        """
        Store transaction for future dispute lookups.
        Returns the record it replaced when the id was already taken.
        """
        previous = self._transactions.get(transaction.transaction_id)
        self._transactions[transaction.transaction_id] = transaction
        return previous

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Retrieve stored transaction by ID."""
        return self._transactions.get(transaction_id)

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)

    def __len__(self) -> int:
        return len(self._accounts)
