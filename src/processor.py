import logging
from typing import List, Optional

from errors import (
    AccountInsufficientAvailableFunds,
    AccountInsufficientHeldFunds,
    AccountIsLocked,
    TransactionAccessDenied,
    TransactionAlreadyUnderDispute,
    TransactionIsNotDisputable,
    TransactionIsNotValid,
    TransactionNotFound,
)
from models import ClientAccount, StoredTransaction, TransactionType
from state import StateManager

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions to account state held by a StateManager.
    Raises a ProcessingError subclass when a transaction cannot be applied;
    the processor keeps no state of its own and can be shared between callers.
    """

    def __init__(self, state: StateManager):
        self._state = state

    def process(self, transaction: StoredTransaction) -> None:
        """
        Process a single transaction.

        Deposits and withdrawals are recorded in the ledger before the account
        is touched, so a rejected withdrawal is still stored as requested.
        The account is only written back when the adjustment succeeds.
        """
        if transaction.is_not_valid():
            raise TransactionIsNotValid(transaction.id)

        logger.debug(f"Processing {transaction!r}")
        with self._state.client_lock(transaction.client_id):
            transaction = self._state.insert_transaction(transaction)

            account = self._state.get_account(transaction.client_id)
            if account.locked:
                raise AccountIsLocked(account.client_id)

            self._adjust_account(account, transaction)
            self._state.upsert_account(account)

    def get_accounts(self) -> List[ClientAccount]:
        return self._state.get_all_accounts()

    def _adjust_account(self, account: ClientAccount, transaction: StoredTransaction) -> None:
        match transaction.kind:
            case TransactionType.DEPOSIT:
                account.credit(transaction.amount)
            case TransactionType.WITHDRAWAL:
                self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                self._handle_chargeback(account, transaction)

    def _handle_withdrawal(self, account: ClientAccount, transaction: StoredTransaction) -> None:
        if account.available < transaction.amount:
            raise AccountInsufficientAvailableFunds(account.client_id)
        account.debit(transaction.amount)

    def _handle_dispute(self, account: ClientAccount, transaction: StoredTransaction) -> None:
        deposit = self._find_deposit(account, transaction)
        if deposit is None:
            return

        if deposit.under_dispute:
            raise TransactionAlreadyUnderDispute(deposit.id)

        if account.available < deposit.amount:
            raise AccountInsufficientAvailableFunds(account.client_id)

        account.hold(deposit.amount)
        self._state.under_dispute(deposit.id, True)

    def _handle_resolve(self, account: ClientAccount, transaction: StoredTransaction) -> None:
        deposit = self._find_deposit(account, transaction)
        if deposit is None:
            return

        if not deposit.under_dispute:
            logger.info(f"Resolve for tx {deposit.id}: transaction is not under dispute, nothing to resolve")
            return

        if account.held < deposit.amount:
            raise AccountInsufficientHeldFunds(account.client_id)

        account.release_hold(deposit.amount)
        self._state.under_dispute(deposit.id, False)

    def _handle_chargeback(self, account: ClientAccount, transaction: StoredTransaction) -> None:
        deposit = self._find_deposit(account, transaction)
        if deposit is None:
            return

        if not deposit.under_dispute:
            logger.info(f"Chargeback for tx {deposit.id}: transaction is not under dispute, nothing to charge back")
            return

        if account.held < deposit.amount:
            raise AccountInsufficientHeldFunds(account.client_id)

        account.charge_back(deposit.amount)
        self._state.under_dispute(deposit.id, False)

    def _find_deposit(self, account: ClientAccount, transaction: StoredTransaction) -> Optional[StoredTransaction]:
        """
        Look up the deposit referenced by a dispute, resolve or chargeback.

        Returns None when the referenced transaction is unknown, which callers
        treat as a no-op. Raises when the reference is not a deposit or belongs
        to another client.
        """
        try:
            referenced = self._state.get_transaction(transaction.id)
        except TransactionNotFound:
            logger.info(f"{transaction.kind.value.capitalize()} for tx {transaction.id}: transaction not found, ignoring")
            return None

        if referenced.kind != TransactionType.DEPOSIT:
            raise TransactionIsNotDisputable(referenced.id)

        if referenced.client_id != account.client_id:
            raise TransactionAccessDenied(referenced.id, account.client_id)

        return referenced
