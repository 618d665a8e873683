import logging

from models import Transaction, TransactionType, ProcessingResult, ProcessingStats
from state_manager import StateManager
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)


class TransactionRouter:
    """
    Sends each valid transaction to the account it belongs to.
    Drops duplicate deposit/withdrawal ids and opens accounts on first deposit.
    """

    def __init__(self, state: StateManager, processor: TransactionProcessor, stats: ProcessingStats):
        self._state = state
        self._processor = processor
        self._stats = stats

    def route(self, transaction: Transaction) -> None:
        if transaction.transaction_type in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL):
            if not self._state.register_transaction_id(transaction.transaction_id):
                logger.debug(f"Tx {transaction.transaction_id}: already processed, skipping")
                self._stats.record_duplicate()
                return

        account = self._state.get_account(transaction.client_id)
        if account is not None:
            self._stats.record_result(self._processor.process_transaction(account, transaction))
        elif transaction.transaction_type == TransactionType.DEPOSIT:
            self._state.create_account(transaction.client_id, transaction.transaction_id, transaction.amount)
            self._stats.record_result(ProcessingResult.SUCCESS)
        else:
            logger.debug(f"Client {transaction.client_id}: no account, dropping {transaction}")
            self._stats.record_unknown_client()
