from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional


MAX_CLIENT_ID = 65535
MAX_TRANSACTION_ID = 4294967295


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class ProcessingResult(Enum):
    SUCCESS = "success"
    IGNORED = "ignored"


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def is_valid(self) -> bool:
        """Deposits and withdrawals need a strictly positive amount, the rest are always valid."""
        if self.transaction_type in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL):
            return self.amount is not None and self.amount > 0
        return True

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class DepositRecord:
    transaction_id: int
    amount: Decimal
    is_disputed: bool = False
    is_dispute_handled: bool = False


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False
    deposits: List[DepositRecord] = field(default_factory=list, repr=False)

    @classmethod
    def from_deposit(cls, client_id: int, transaction_id: int, amount: Decimal) -> "ClientAccount":
        """Open an account seeded by its first deposit."""
        return cls(
            client_id=client_id,
            available=amount,
            deposits=[DepositRecord(transaction_id=transaction_id, amount=amount)],
        )

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    def find_deposit(self, transaction_id: int) -> Optional[DepositRecord]:
        for deposit in self.deposits:
            if deposit.transaction_id == transaction_id:
                return deposit
        return None

    def credit(self, amount: Decimal) -> None:
        self.available += amount

    def debit(self, amount: Decimal) -> None:
        self.available -= amount

    def hold(self, amount: Decimal) -> None:
        self.available -= amount
        self.held += amount

    def release_hold(self, amount: Decimal) -> None:
        self.held -= amount
        self.available += amount

    def remove_held(self, amount: Decimal) -> None:
        self.held -= amount


class ProcessingStats:
    """Counters for tracking what happened to each record of a run."""

    def __init__(self):
        self.processed = 0
        self.ignored = 0
        self.duplicates = 0
        self.unknown_client = 0
        self.invalid = 0

    def record_result(self, result: ProcessingResult):
        if result == ProcessingResult.SUCCESS:
            self.processed += 1
        else:
            self.ignored += 1

    def record_duplicate(self):
        self.duplicates += 1

    def record_unknown_client(self):
        self.unknown_client += 1

    def record_invalid(self):
        self.invalid += 1

    def summary(self) -> str:
        return (
            f"Processed: {self.processed}, "
            f"Ignored: {self.ignored}, "
            f"Duplicates: {self.duplicates}, "
            f"Unknown client: {self.unknown_client}, "
            f"Invalid: {self.invalid}"
        )
