from dataclasses import dataclass
from decimal import Decimal, ROUND_DOWN
from enum import Enum
from typing import Optional

AMOUNT_PLACES = 4
AMOUNT_QUANTUM = Decimal(1).scaleb(-AMOUNT_PLACES)

# 14 integer digits per amount keeps balances exact under the default
# 28-digit decimal context.
MAX_AMOUNT = Decimal(10) ** 14

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN

    @property
    def carries_amount(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class DisputeState(Enum):
    NOT_DISPUTED = "not_disputed"
    DISPUTED = "disputed"
    RESOLVED = "resolved"


class ProcessingResult(Enum):
    APPLIED = "applied"
    DENIED = "denied"
    IGNORED = "ignored"


def truncate_amount(amount: Decimal) -> Decimal:
    """Cut an amount down to 4 decimal places. Never rounds up."""
    return amount.quantize(AMOUNT_QUANTUM, rounding=ROUND_DOWN)


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None
    dispute_state: DisputeState = DisputeState.NOT_DISPUTED

    def __post_init__(self):
        if self.amount is not None:
            self.amount = truncate_amount(self.amount)

    @property
    def is_disputed(self) -> bool:
        return self.dispute_state is DisputeState.DISPUTED

    def __repr__(self) -> str:
        return (
            f"Transaction({self.transaction_type.value}, client={self.client_id}, "
            f"tx={self.transaction_id}, amount={self.amount}, {self.dispute_state.value})"
        )


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return self.available + self.held

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

    def charge_back(self, amount: Decimal) -> None:
        """Remove held funds for good and freeze the account."""
        self.held -= amount
        self.locked = True


class ProcessingStats:
    """Counters for the end-of-run processing report."""

    def __init__(self):
        self.applied = 0
        self.denied = 0
        self.ignored = 0

    def record(self, result: ProcessingResult) -> None:
        if result == ProcessingResult.APPLIED:
            self.applied += 1
        elif result == ProcessingResult.DENIED:
            self.denied += 1
        else:
            self.ignored += 1

    def __str__(self) -> str:
        return f"Applied: {self.applied}, Denied: {self.denied}, Ignored: {self.ignored}"
