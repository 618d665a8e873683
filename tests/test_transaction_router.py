import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models import Transaction, TransactionType, ProcessingStats
from state_manager import StateManager
from transaction_processor import TransactionProcessor
from transaction_router import TransactionRouter


class TestStateManager:
    def test_register_transaction_id(self):
        state = StateManager()
        assert state.register_transaction_id(1) is True
        assert state.register_transaction_id(1) is False
        assert state.register_transaction_id(2) is True

    def test_create_and_get_account(self):
        state = StateManager()
        assert state.get_account(1) is None

        account = state.create_account(1, 10, Decimal("2.5"))
        assert state.get_account(1) is account
        assert account.total == Decimal("2.5")
        assert state.get_all_accounts() == {1: account}

    def test_get_all_accounts_is_a_copy(self):
        state = StateManager()
        state.create_account(1, 10, Decimal("1"))
        accounts = state.get_all_accounts()
        accounts.clear()
        assert state.get_account(1) is not None


class TestTransactionRouter:
    def setup_method(self):
        self.state = StateManager()
        self.stats = ProcessingStats()
        self.router = TransactionRouter(self.state, TransactionProcessor(), self.stats)

    def test_first_deposit_creates_account(self):
        self.router.route(Transaction(TransactionType.DEPOSIT, 1, 1, Decimal("3.0")))

        account = self.state.get_account(1)
        assert account.available == Decimal("3.0")
        assert account.total == Decimal("3.0")
        assert len(account.deposits) == 1
        assert self.stats.processed == 1

    def test_existing_account_receives_transaction(self):
        self.router.route(Transaction(TransactionType.DEPOSIT, 1, 1, Decimal("3.0")))
        self.router.route(Transaction(TransactionType.WITHDRAWAL, 1, 2, Decimal("1.0")))

        assert self.state.get_account(1).available == Decimal("2.0")
        assert self.stats.processed == 2

    def test_non_deposit_for_unknown_client_dropped(self):
        for transaction_type in (TransactionType.DISPUTE, TransactionType.RESOLVE, TransactionType.CHARGEBACK):
            self.router.route(Transaction(transaction_type, 7, 1))
        self.router.route(Transaction(TransactionType.WITHDRAWAL, 7, 2, Decimal("1.0")))

        assert self.state.get_all_accounts() == {}
        assert self.stats.unknown_client == 4

    def test_duplicate_deposit_dropped(self):
        deposit = Transaction(TransactionType.DEPOSIT, 1, 1, Decimal("3.0"))
        self.router.route(deposit)
        self.router.route(deposit)

        assert self.state.get_account(1).total == Decimal("3.0")
        assert len(self.state.get_account(1).deposits) == 1
        assert self.stats.duplicates == 1

    def test_duplicate_id_across_clients_dropped(self):
        self.router.route(Transaction(TransactionType.DEPOSIT, 1, 1, Decimal("3.0")))
        self.router.route(Transaction(TransactionType.DEPOSIT, 2, 1, Decimal("5.0")))

        assert self.state.get_account(2) is None
        assert self.stats.duplicates == 1

    def test_withdrawal_id_reserved_even_for_unknown_client(self):
        self.router.route(Transaction(TransactionType.WITHDRAWAL, 9, 1, Decimal("1.0")))
        self.router.route(Transaction(TransactionType.DEPOSIT, 1, 1, Decimal("3.0")))

        assert self.state.get_account(1) is None
        assert self.stats.duplicates == 1

    def test_rejected_withdrawal_still_consumes_id(self):
        self.router.route(Transaction(TransactionType.DEPOSIT, 1, 1, Decimal("1.0")))
        self.router.route(Transaction(TransactionType.WITHDRAWAL, 1, 2, Decimal("5.0")))
        self.router.route(Transaction(TransactionType.DEPOSIT, 1, 3, Decimal("10.0")))
        self.router.route(Transaction(TransactionType.WITHDRAWAL, 1, 2, Decimal("5.0")))

        assert self.state.get_account(1).available == Decimal("11.0")
        assert self.stats.ignored == 1
        assert self.stats.duplicates == 1

    def test_dispute_ids_are_not_deduplicated(self):
        self.router.route(Transaction(TransactionType.DEPOSIT, 1, 1, Decimal("3.0")))
        self.router.route(Transaction(TransactionType.DISPUTE, 1, 1))
        self.router.route(Transaction(TransactionType.RESOLVE, 1, 1))

        account = self.state.get_account(1)
        assert account.available == Decimal("3.0")
        assert account.find_deposit(1).is_dispute_handled is True
        assert self.stats.duplicates == 0

    def test_dispute_routed_to_own_account_only(self):
        self.router.route(Transaction(TransactionType.DEPOSIT, 1, 1, Decimal("3.0")))
        self.router.route(Transaction(TransactionType.DEPOSIT, 2, 2, Decimal("3.0")))
        self.router.route(Transaction(TransactionType.DISPUTE, 2, 1))

        assert self.state.get_account(1).held == Decimal("0")
        assert self.state.get_account(2).held == Decimal("0")
        assert self.stats.ignored == 1

    def test_block_locked_accounts(self):
        router = TransactionRouter(self.state, TransactionProcessor(block_locked_accounts=True), self.stats)
        router.route(Transaction(TransactionType.DEPOSIT, 1, 1, Decimal("3.0")))
        router.route(Transaction(TransactionType.DISPUTE, 1, 1))
        router.route(Transaction(TransactionType.CHARGEBACK, 1, 1))
        router.route(Transaction(TransactionType.DEPOSIT, 1, 5, Decimal("1.0")))

        account = self.state.get_account(1)
        assert account.locked is True
        assert account.total == Decimal("0")
