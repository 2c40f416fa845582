import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models import (
    Transaction,
    TransactionType,
    ClientAccount,
    DisputeState,
    ProcessingResult,
    ProcessingStats,
    truncate_amount,
)


class TestTransactionType:
    def test_known_values(self):
        assert TransactionType("deposit") == TransactionType.DEPOSIT
        assert TransactionType("chargeback") == TransactionType.CHARGEBACK

    def test_unrecognised_value_is_unknown(self):
        assert TransactionType("transfer") == TransactionType.UNKNOWN

    def test_match_is_case_sensitive(self):
        assert TransactionType("Deposit") == TransactionType.UNKNOWN

    def test_carries_amount(self):
        assert TransactionType.DEPOSIT.carries_amount
        assert TransactionType.WITHDRAWAL.carries_amount
        assert not TransactionType.DISPUTE.carries_amount
        assert not TransactionType.UNKNOWN.carries_amount


class TestTruncateAmount:
    def test_truncates_instead_of_rounding(self):
        assert truncate_amount(Decimal("2.05678")) == Decimal("2.0567")

    def test_short_amount_unchanged(self):
        assert truncate_amount(Decimal("1.5")) == Decimal("1.5")

    def test_negative_truncates_towards_zero(self):
        assert truncate_amount(Decimal("-1.99999")) == Decimal("-1.9999")


class TestTransaction:
    def test_create_deposit(self):
        transaction = Transaction(
            transaction_type=TransactionType.DEPOSIT,
            client_id=1,
            transaction_id=1,
            amount=Decimal("100.0"),
        )
        assert transaction.transaction_type == TransactionType.DEPOSIT
        assert transaction.client_id == 1
        assert transaction.transaction_id == 1
        assert transaction.amount == Decimal("100.0")
        assert transaction.dispute_state == DisputeState.NOT_DISPUTED
        assert transaction.is_disputed is False

    def test_amount_truncated_on_creation(self):
        transaction = Transaction(TransactionType.DEPOSIT, client_id=1, transaction_id=1, amount=Decimal("2.05678"))
        assert transaction.amount == Decimal("2.0567")

    def test_create_dispute_no_amount(self):
        transaction = Transaction(
            transaction_type=TransactionType.DISPUTE,
            client_id=1,
            transaction_id=1,
        )
        assert transaction.amount is None


class TestClientAccount:
    def test_default_values(self):
        account = ClientAccount(client_id=1)
        assert account.available == Decimal("0")
        assert account.held == Decimal("0")
        assert account.total == Decimal("0")
        assert account.locked is False

    def test_total_property(self):
        account = ClientAccount(
            client_id=1,
            available=Decimal("100"),
            held=Decimal("50"),
        )
        assert account.total == Decimal("150")

    def test_hold_and_release_keep_total(self):
        account = ClientAccount(client_id=1, available=Decimal("10"))
        account.hold(Decimal("4"))
        assert account.available == Decimal("6")
        assert account.held == Decimal("4")
        assert account.total == Decimal("10")

        account.release_hold(Decimal("4"))
        assert account.available == Decimal("10")
        assert account.held == Decimal("0")

    def test_charge_back_locks(self):
        account = ClientAccount(client_id=1, available=Decimal("1"), held=Decimal("2"))
        account.charge_back(Decimal("2"))
        assert account.available == Decimal("1")
        assert account.held == Decimal("0")
        assert account.total == Decimal("1")
        assert account.locked is True


class TestProcessingStats:
    def test_enum_values(self):
        assert ProcessingResult.APPLIED.value == "applied"
        assert ProcessingResult.DENIED.value == "denied"
        assert ProcessingResult.IGNORED.value == "ignored"

    def test_record(self):
        stats = ProcessingStats()
        stats.record(ProcessingResult.APPLIED)
        stats.record(ProcessingResult.APPLIED)
        stats.record(ProcessingResult.DENIED)
        stats.record(ProcessingResult.IGNORED)
        assert str(stats) == "Applied: 2, Denied: 1, Ignored: 1"
