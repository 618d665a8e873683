import logging

from models import Transaction, TransactionType, ClientAccount, DepositRecord, ProcessingResult

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies one transaction to one client account.
    Returns ProcessingResult to indicate whether the account changed.
    Rejections are business rules, never errors: the account is left untouched.
    """

    def __init__(self, block_locked_accounts: bool = False):
        self._block_locked_accounts = block_locked_accounts

    def process_transaction(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction against the given account.

        Returns:
            SUCCESS: Balances or dispute state changed
            IGNORED: Silently rejected (insufficient funds, unknown deposit, locked account, ...)
        """
        if self._block_locked_accounts and account.locked:
            logger.debug(f"Client {account.client_id}: account locked, ignoring {transaction}")
            return ProcessingResult.IGNORED

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(account, transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                return self._handle_dispute_outcome(account, transaction, is_chargeback=False)
            case TransactionType.CHARGEBACK:
                return self._handle_dispute_outcome(account, transaction, is_chargeback=True)

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        account.credit(transaction.amount)
        account.deposits.append(DepositRecord(transaction.transaction_id, transaction.amount))
        return ProcessingResult.SUCCESS

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        if transaction.amount > account.available:
            logger.debug(f"Withdrawal tx {transaction.transaction_id}: insufficient funds ({account.available} < {transaction.amount})")
            return ProcessingResult.IGNORED

        account.debit(transaction.amount)
        return ProcessingResult.SUCCESS

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        deposit = account.find_deposit(transaction.transaction_id)

        if deposit is None:
            logger.debug(f"Dispute for tx {transaction.transaction_id}: no such deposit for client {account.client_id}")
            return ProcessingResult.IGNORED

        if deposit.is_disputed or deposit.is_dispute_handled:
            logger.debug(f"Dispute for tx {transaction.transaction_id}: already disputed or handled")
            return ProcessingResult.IGNORED

        # The deposit stays undisputed so a later dispute can still succeed.
        if account.available < deposit.amount:
            logger.debug(f"Dispute for tx {transaction.transaction_id}: insufficient available funds to hold {deposit.amount}")
            return ProcessingResult.IGNORED

        deposit.is_disputed = True
        account.hold(deposit.amount)
        return ProcessingResult.SUCCESS

    def _handle_dispute_outcome(self, account: ClientAccount, transaction: Transaction, is_chargeback: bool) -> ProcessingResult:
        """Resolve or charge back a disputed deposit. Either way the dispute is closed for good."""
        deposit = account.find_deposit(transaction.transaction_id)

        if deposit is None or not deposit.is_disputed or deposit.is_dispute_handled:
            logger.debug(f"{transaction.transaction_type.value.capitalize()} for tx {transaction.transaction_id}: no open dispute")
            return ProcessingResult.IGNORED

        deposit.is_dispute_handled = True
        if is_chargeback:
            account.remove_held(deposit.amount)
            account.locked = True
        else:
            account.release_hold(deposit.amount)
        return ProcessingResult.SUCCESS
