import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models import (
    ClientAccount,
    ProcessingStats,
    StoredTransaction,
    Transaction,
    TransactionType,
    is_representable_amount,
    scale_amount,
)


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

    def test_create_dispute_no_amount(self):
        transaction = Transaction(
            transaction_type=TransactionType.DISPUTE,
            client_id=1,
            transaction_id=1,
        )
        assert transaction.amount is None


class TestStoredTransaction:
    def test_from_deposit(self):
        stored = StoredTransaction.from_transaction(
            Transaction(TransactionType.DEPOSIT, client_id=3, transaction_id=7, amount=Decimal("1.5"))
        )
        assert stored.kind == TransactionType.DEPOSIT
        assert stored.id == 7
        assert stored.client_id == 3
        assert stored.amount == Decimal("1.5")
        assert stored.under_dispute is False

    def test_missing_amount_defaults_to_zero(self):
        stored = StoredTransaction.from_transaction(
            Transaction(TransactionType.WITHDRAWAL, client_id=1, transaction_id=1)
        )
        assert stored.amount == Decimal("0")
        assert not stored.is_not_valid()

    def test_instruction_carries_no_amount(self):
        stored = StoredTransaction.from_transaction(
            Transaction(TransactionType.CHARGEBACK, client_id=1, transaction_id=1, amount=Decimal("9"))
        )
        assert stored.amount is None
        assert not stored.is_ledger_entry()
        assert not stored.is_not_valid()

    def test_negative_amount_is_not_valid(self):
        deposit = StoredTransaction(TransactionType.DEPOSIT, id=1, client_id=1, amount=Decimal("-0.0001"))
        withdrawal = StoredTransaction(TransactionType.WITHDRAWAL, id=2, client_id=1, amount=Decimal("-5"))
        assert deposit.is_not_valid()
        assert withdrawal.is_not_valid()

    def test_only_deposits_take_dispute_flag(self):
        deposit = StoredTransaction(TransactionType.DEPOSIT, id=1, client_id=1, amount=Decimal("1"))
        withdrawal = StoredTransaction(TransactionType.WITHDRAWAL, id=2, client_id=1, amount=Decimal("1"))

        deposit.set_under_dispute(True)
        withdrawal.set_under_dispute(True)

        assert deposit.under_dispute is True
        assert withdrawal.under_dispute is False


class TestClientAccount:
    def test_default_values(self):
        account = ClientAccount(client_id=1)
        assert account.available == Decimal("0")
        assert account.held == Decimal("0")
        assert account.total == Decimal("0")
        assert account.locked is False

    def test_mutators_keep_total_consistent(self):
        account = ClientAccount(client_id=1)
        account.credit(Decimal("100"))
        account.hold(Decimal("40"))
        account.debit(Decimal("10"))
        account.release_hold(Decimal("15"))
        account.charge_back(Decimal("25"))

        assert account.available == Decimal("65")
        assert account.held == Decimal("0")
        assert account.total == Decimal("65")
        assert account.total == account.available + account.held
        assert account.locked is True

    def test_no_precision_lost_on_large_values(self):
        account = ClientAccount(client_id=1)
        account.credit(Decimal("12345678901234567890123456789012345"))
        account.credit(Decimal("0.00001"))
        assert account.available == Decimal("12345678901234567890123456789012345.00001")

    def test_copy_is_independent(self):
        account = ClientAccount(client_id=1)
        snapshot = account.copy()
        snapshot.credit(Decimal("5"))
        assert account.available == Decimal("0")

    def test_scaled(self):
        account = ClientAccount(
            client_id=1,
            available=Decimal("1.23456"),
            held=Decimal("2.5"),
            total=Decimal("3.73456"),
        )
        scaled = account.scaled()
        assert str(scaled.available) == "1.2346"
        assert str(scaled.held) == "2.5"
        assert str(scaled.total) == "3.7346"
        assert account.available == Decimal("1.23456")


class TestScaleAmount:
    def test_values_within_precision_untouched(self):
        assert str(scale_amount(Decimal("2.0"))) == "2.0"
        assert str(scale_amount(Decimal("7"))) == "7"
        assert str(scale_amount(Decimal("0.1234"))) == "0.1234"

    def test_extra_digits_rescaled(self):
        assert str(scale_amount(Decimal("0.123449"))) == "0.1234"
        assert str(scale_amount(Decimal("-1.99999"))) == "-2.0000"

    def test_ties_round_away_from_zero(self):
        assert str(scale_amount(Decimal("0.00005"))) == "0.0001"
        assert str(scale_amount(Decimal("-0.00005"))) == "-0.0001"
        assert str(scale_amount(Decimal("1.00025"))) == "1.0003"
        assert str(scale_amount(Decimal("1.45555"))) == "1.4556"


class TestIsRepresentableAmount:
    def test_accepts_regular_amounts(self):
        assert is_representable_amount(Decimal("0"))
        assert is_representable_amount(Decimal("1.2345"))
        assert is_representable_amount(Decimal("9999999999999999999999999999"))
        assert is_representable_amount(Decimal("0.0000000000000000000000000001"))

    def test_rejects_oversized_or_special_amounts(self):
        assert not is_representable_amount(Decimal("1E+1000000"))
        assert not is_representable_amount(Decimal("10000000000000000000000000000"))
        assert not is_representable_amount(Decimal("0.00000000000000000000000000001"))
        assert not is_representable_amount(Decimal("Infinity"))
        assert not is_representable_amount(Decimal("NaN"))


class TestProcessingStats:
    def test_counters(self):
        stats = ProcessingStats()
        stats.record_success()
        stats.record_success()
        stats.record_failure()
        stats.record_skipped()
        assert (stats.processed, stats.failed, stats.skipped) == (2, 1, 1)
