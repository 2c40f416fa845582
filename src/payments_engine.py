import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, Iterable, Mapping, Optional

from errors import MalformedRecordError
from ledger_engine import LedgerEngine
from models import (
    Transaction,
    TransactionType,
    ClientAccount,
    ProcessingStats,
    MAX_CLIENT_ID,
    MAX_TRANSACTION_ID,
    MAX_AMOUNT,
)

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Reads ledger events from CSV and folds them through a LedgerEngine.
    Rows are applied one by one in file order; a malformed row aborts the run.
    """

    def __init__(self, engine: Optional[LedgerEngine] = None):
        self._engine = engine if engine is not None else LedgerEngine()
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing {filepath}")
        with open(filepath, "r", newline="") as f:
            reader = csv.DictReader(f)
            accounts = self.process_rows(reader, line_numbers=lambda: reader.line_num)

        logger.info(str(self._stats))
        return accounts

    def process_rows(
        self,
        rows: Iterable[Mapping[str, Optional[str]]],
        line_numbers: Optional[Callable[[], int]] = None,
    ) -> Dict[int, ClientAccount]:
        """Apply already-split rows in order. Keys and values are trimmed."""
        for index, row in enumerate(rows, start=2):
            line_number = line_numbers() if line_numbers is not None else index
            transaction = self._parse_csv_row(row, line_number)
            result = self._engine.apply(transaction)
            self._stats.record(result)

        return self._engine.get_all_accounts()

    def _parse_csv_row(self, row: Mapping[str, Optional[str]], line_number: int) -> Transaction:
        """Parse CSV row into Transaction."""
        if None in row:
            raise MalformedRecordError("more fields than the header", line_number, row)

        normalized = {k.strip(): (v or "").strip() for k, v in row.items()}

        try:
            transaction_type = TransactionType(normalized["type"])
            client_id = self._parse_id(normalized["client"], "client", MAX_CLIENT_ID)
            transaction_id = self._parse_id(normalized["tx"], "tx", MAX_TRANSACTION_ID)
        except KeyError as e:
            raise MalformedRecordError(f"missing column {e}", line_number, row) from e
        except ValueError as e:
            raise MalformedRecordError(str(e), line_number, row) from e

        amount = None
        if transaction_type.carries_amount:
            amount_str = normalized.get("amount", "")
            if not amount_str:
                raise MalformedRecordError(f"{transaction_type.value} requires an amount", line_number, row)
            if "_" in amount_str:
                raise MalformedRecordError(f"invalid amount {amount_str!r}", line_number, row)
            try:
                amount = Decimal(amount_str)
            except InvalidOperation as e:
                raise MalformedRecordError(f"invalid amount {amount_str!r}", line_number, row) from e
            if not amount.is_finite():
                raise MalformedRecordError(f"invalid amount {amount_str!r}", line_number, row)
            if abs(amount) >= MAX_AMOUNT:
                raise MalformedRecordError(f"amount {amount_str!r} exceeds {MAX_AMOUNT:f}", line_number, row)

        return Transaction(
            transaction_type=transaction_type,
            client_id=client_id,
            transaction_id=transaction_id,
            amount=amount,
        )

    @staticmethod
    def _parse_id(value: str, field: str, upper: int) -> int:
        # Unsigned digits, optionally prefixed with "+".
        digits = value[1:] if value.startswith("+") else value
        if not (digits.isascii() and digits.isdigit()):
            raise ValueError(f"invalid {field} {value!r}")
        parsed = int(digits)
        if not 0 <= parsed <= upper:
            raise ValueError(f"{field} {parsed} out of range 0..{upper}")
        return parsed
