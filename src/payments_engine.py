import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, Optional

from models import (
    Transaction,
    TransactionType,
    ClientAccount,
    ProcessingStats,
    MAX_CLIENT_ID,
    MAX_TRANSACTION_ID,
)
from state_manager import StateManager
from transaction_processor import TransactionProcessor
from transaction_router import TransactionRouter

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("type", "client", "tx")


class InputFormatError(Exception):
    """The input stream is structurally malformed; the whole run is aborted."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class PaymentsEngine:
    """
    Replays a transaction stream, in order, into per-client account snapshots.
    A fresh engine (and so a fresh set of accounts and seen transaction ids) is needed per run.
    """

    def __init__(self, block_locked_accounts: bool = False):
        self._state = StateManager()
        self._processor = TransactionProcessor(block_locked_accounts=block_locked_accounts)
        self._stats = ProcessingStats()
        self._router = TransactionRouter(self._state, self._processor, self._stats)

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing transactions from {filepath}")
        with open(filepath, "r", encoding="utf-8", newline="") as f:
            return self.process_transactions(self._read_transactions(f))

    def process_transactions(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """Apply transactions one at a time, in order, and return final account states."""
        for transaction in transactions:
            if not transaction.is_valid():
                logger.info(f"Dropping invalid record: {transaction}")
                self._stats.record_invalid()
                continue
            self._router.route(transaction)

        logger.info(self._stats.summary())
        return self._state.get_all_accounts()

    def _read_transactions(self, lines: Iterable[str]) -> Iterator[Transaction]:
        """Read CSV rows lazily, raising InputFormatError on the first malformed one."""
        reader = csv.DictReader(lines)
        try:
            if reader.fieldnames is None:
                return

            reader.fieldnames = [name.strip().lower() for name in reader.fieldnames]
            missing = [column for column in REQUIRED_COLUMNS if column not in reader.fieldnames]
            if missing:
                raise InputFormatError(f"missing column(s): {', '.join(missing)}", reader.line_num)

            for row in reader:
                yield self._parse_csv_row(row, reader.line_num)
        except UnicodeDecodeError as e:
            raise InputFormatError(f"input is not valid UTF-8: {e}") from e
        except csv.Error as e:
            raise InputFormatError(f"malformed CSV: {e}", reader.line_num) from e

    def _parse_csv_row(self, row: Dict[str, Optional[str]], line_number: int) -> Transaction:
        """Parse CSV row into Transaction."""
        # DictReader stores surplus fields under the None key
        if None in row:
            raise InputFormatError(f"too many fields in row {row[None]!r}", line_number)

        normalized = {k: (v or "").strip() for k, v in row.items()}

        try:
            transaction_type = TransactionType(normalized["type"].lower())
        except ValueError:
            raise InputFormatError(f"unknown transaction type {normalized['type']!r}", line_number) from None

        client_id = self._parse_int(normalized["client"], "client", MAX_CLIENT_ID, line_number)
        transaction_id = self._parse_int(normalized["tx"], "tx", MAX_TRANSACTION_ID, line_number)

        amount = None
        amount_str = normalized.get("amount", "")
        if amount_str:
            try:
                amount = Decimal(amount_str)
            except InvalidOperation:
                raise InputFormatError(f"invalid amount {amount_str!r}", line_number) from None
            if not amount.is_finite():
                raise InputFormatError(f"invalid amount {amount_str!r}", line_number)

        return Transaction(
            transaction_type=transaction_type,
            client_id=client_id,
            transaction_id=transaction_id,
            amount=amount,
        )

    @staticmethod
    def _parse_int(value: str, column: str, maximum: int, line_number: int) -> int:
        # Plain ASCII digits only: no sign, no underscores
        if not (value.isascii() and value.isdigit()):
            raise InputFormatError(f"invalid {column} {value!r}", line_number)
        if len(value.lstrip("0")) > len(str(maximum)) or int(value) > maximum:
            raise InputFormatError(f"{column} {value} out of range 0..{maximum}", line_number)
        return int(value)

