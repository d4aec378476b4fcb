from dataclasses import dataclass, replace
from decimal import Context, Decimal, MAX_PREC, ROUND_HALF_UP
from enum import Enum
from typing import Optional

AMOUNT_PRECISION = 4
MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1
MAX_AMOUNT_DIGITS = 28

# Balances are never rounded mid-computation, only when handed to output.
AMOUNT_CONTEXT = Context(prec=MAX_PREC)
ZERO = Decimal("0")


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


@dataclass
class Transaction:
    """Transaction as it arrives from the input source."""

    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class StoredTransaction:
    """
    Internal form of a transaction, tagged by kind.
    Only deposits and withdrawals carry an amount and are kept in the ledger;
    disputes, resolves and chargebacks are instructions referencing a deposit.
    """

    kind: TransactionType
    id: int
    client_id: int
    amount: Optional[Decimal] = None
    under_dispute: bool = False

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "StoredTransaction":
        match transaction.transaction_type:
            case TransactionType.DEPOSIT | TransactionType.WITHDRAWAL:
                amount = transaction.amount if transaction.amount is not None else ZERO
                return cls(transaction.transaction_type, transaction.transaction_id, transaction.client_id, amount)
            case _:
                return cls(transaction.transaction_type, transaction.transaction_id, transaction.client_id)

    def is_ledger_entry(self) -> bool:
        return self.kind in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)

    def is_not_valid(self) -> bool:
        return self.is_ledger_entry() and self.amount < ZERO

    def set_under_dispute(self, under_dispute: bool) -> None:
        if self.kind == TransactionType.DEPOSIT:
            self.under_dispute = under_dispute

    def copy(self) -> "StoredTransaction":
        return replace(self)

    def __repr__(self) -> str:
        if self.is_ledger_entry():
            return f"StoredTransaction({self.kind.value}, client={self.client_id}, tx={self.id}, amount={self.amount}, under_dispute={self.under_dispute})"
        return f"StoredTransaction({self.kind.value}, client={self.client_id}, tx={self.id})"


def is_representable_amount(amount: Decimal) -> bool:
    """
    Amounts are limited to 28 integral digits and 28 fractional digits.
    Anything larger could overflow the ledger context once accumulated.
    """
    if not amount.is_finite():
        return False
    return amount.adjusted() < MAX_AMOUNT_DIGITS and amount.as_tuple().exponent >= -MAX_AMOUNT_DIGITS


def scale_amount(amount: Decimal) -> Decimal:
    """Rescale to AMOUNT_PRECISION only when the value carries more digits."""
    if -amount.as_tuple().exponent > AMOUNT_PRECISION:
        return amount.quantize(Decimal(1).scaleb(-AMOUNT_PRECISION), rounding=ROUND_HALF_UP, context=AMOUNT_CONTEXT)
    return amount


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = ZERO
    held: Decimal = ZERO
    total: Decimal = ZERO
    locked: bool = False

    # Every mutator updates both components it touches, keeping
    # total == available + held.

    def credit(self, amount: Decimal) -> None:
        self.available = AMOUNT_CONTEXT.add(self.available, amount)
        self.total = AMOUNT_CONTEXT.add(self.total, amount)

    def debit(self, amount: Decimal) -> None:
        self.available = AMOUNT_CONTEXT.subtract(self.available, amount)
        self.total = AMOUNT_CONTEXT.subtract(self.total, amount)

    def hold(self, amount: Decimal) -> None:
        self.available = AMOUNT_CONTEXT.subtract(self.available, amount)
        self.held = AMOUNT_CONTEXT.add(self.held, amount)

    def release_hold(self, amount: Decimal) -> None:
        self.held = AMOUNT_CONTEXT.subtract(self.held, amount)
        self.available = AMOUNT_CONTEXT.add(self.available, amount)

    def charge_back(self, amount: Decimal) -> None:
        self.held = AMOUNT_CONTEXT.subtract(self.held, amount)
        self.total = AMOUNT_CONTEXT.subtract(self.total, amount)
        self.locked = True

    def copy(self) -> "ClientAccount":
        return replace(self)

    def scaled(self) -> "ClientAccount":
        return replace(
            self,
            available=scale_amount(self.available),
            held=scale_amount(self.held),
            total=scale_amount(self.total),
        )


class ProcessingStats:
    """Counters for one sequential processing run."""

    def __init__(self):
        self.processed = 0
        self.failed = 0
        self.skipped = 0

    def record_success(self):
        self.processed += 1

    def record_failure(self):
        self.failed += 1

    def record_skipped(self):
        self.skipped += 1
