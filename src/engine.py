import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, Optional, TextIO

from config import get_settings
from errors import ProcessingError, UnknownError
from models import (
    MAX_CLIENT_ID,
    MAX_TRANSACTION_ID,
    ClientAccount,
    ProcessingStats,
    StoredTransaction,
    Transaction,
    TransactionType,
    is_representable_amount,
)
from processor import TransactionProcessor
from state import StateManager

logger = logging.getLogger(__name__)

OUTPUT_HEADER = ["client", "available", "held", "total", "locked"]


class PaymentsEngine:
    """
    Replays transactions from a CSV source in arrival order and reports the
    resulting account balances.
    """

    def __init__(self, state: Optional[StateManager] = None):
        if state is None:
            state = StateManager(lock_timeout=get_settings().lock_timeout)
        self._state = state
        self._processor = TransactionProcessor(self._state)
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> List[ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing transactions from {filepath}")
        with open(filepath, "r", newline="") as f:
            return self.process_rows(csv.DictReader(f))

    def process_rows(self, rows: Iterable[Dict[str, str]]) -> List[ClientAccount]:
        for row in rows:
            transaction = self._parse_csv_row(row)
            if transaction is None:
                self._stats.record_skipped()
                continue
            self.apply(transaction)

        logger.info(
            f"Processed: {self._stats.processed}, "
            f"Failed: {self._stats.failed}, "
            f"Skipped rows: {self._stats.skipped}"
        )
        return self.get_accounts()

    def apply(self, transaction: Transaction) -> bool:
        """
        Feed one transaction to the processor.
        Returns False when it was rejected; store failures propagate and end the run.
        """
        try:
            self._processor.process(StoredTransaction.from_transaction(transaction))
        except UnknownError:
            logger.error(f"Aborting run, store failure while processing {transaction}")
            raise
        except ProcessingError as e:
            self._stats.record_failure()
            logger.warning(f"Rejected {transaction}: {e}")
            return False

        self._stats.record_success()
        return True

    def get_accounts(self) -> List[ClientAccount]:
        """Final account states rounded to output precision."""
        return [account.scaled() for account in self._processor.get_accounts()]

    def _parse_csv_row(self, row: Dict[str, str]) -> Optional[Transaction]:
        """Parse CSV row into Transaction."""
        try:
            # Short rows leave missing columns as None, extra columns land under a None key
            normalized = {k.strip(): (v or "").strip() for k, v in row.items() if k is not None}

            transaction_type_str = normalized["type"].lower()
            client_id = int(normalized["client"])
            transaction_id = int(normalized["tx"])

            if not 0 <= client_id <= MAX_CLIENT_ID:
                raise ValueError(f"client id {client_id} out of range")
            if not 0 <= transaction_id <= MAX_TRANSACTION_ID:
                raise ValueError(f"transaction id {transaction_id} out of range")

            amount = None
            amount_str = normalized.get("amount", "")
            if amount_str:
                amount = Decimal(amount_str)
                if not is_representable_amount(amount):
                    raise ValueError(f"amount {amount_str} is out of range")

            return Transaction(
                transaction_type=TransactionType(transaction_type_str),
                client_id=client_id,
                transaction_id=transaction_id,
                amount=amount,
            )
        except (KeyError, ValueError, InvalidOperation) as e:
            logger.warning(f"Failed to parse row {row}: {e}")
            return None


def format_decimal(value: Decimal) -> str:
    """Plain (non-exponent) notation of an already scaled amount."""
    return f"{value:f}"


def write_accounts(accounts: Iterable[ClientAccount], stream: TextIO) -> None:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_HEADER)
    for account in accounts:
        writer.writerow([
            account.client_id,
            format_decimal(account.available),
            format_decimal(account.held),
            format_decimal(account.total),
            str(account.locked).lower(),
        ])
