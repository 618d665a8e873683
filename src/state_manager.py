from decimal import Decimal
from typing import Dict, Optional, Set

from models import ClientAccount


class StateManager:
    """
    State for a single run.
    Stores client accounts and every deposit/withdrawal transaction id seen so far.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        # Keyed on transaction id alone: ids are unique across all clients.
        self._seen_transaction_ids: Set[int] = set()

    def register_transaction_id(self, transaction_id: int) -> bool:
        """
        Record a deposit/withdrawal transaction id.
        Returns False if the id was already seen during this run.
        """
        if transaction_id in self._seen_transaction_ids:
            return False
        self._seen_transaction_ids.add(transaction_id)
        return True

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        """Retrieve an existing account, or None for an unknown client."""
        return self._accounts.get(client_id)

    def create_account(self, client_id: int, transaction_id: int, amount: Decimal) -> ClientAccount:
        """Open a new account from its first deposit."""
        account = ClientAccount.from_deposit(client_id, transaction_id, amount)
        self._accounts[client_id] = account
        return account

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)
