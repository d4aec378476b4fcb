import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List

from errors import TransactionAlreadyExists, TransactionNotFound, UnknownError
from models import ClientAccount, StoredTransaction

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 5.0


class StateManager:
    """
    Thread-safe in-memory store for client accounts and ledger transactions.
    Every operation is atomic on its own; multi-step sequences are not, so
    callers serialize them per client with client_lock().
    """

    def __init__(self, lock_timeout: float = DEFAULT_LOCK_TIMEOUT):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, StoredTransaction] = {}

        # One lock per map so account writes never wait on transaction lookups.
        self._accounts_lock = threading.Lock()
        self._transactions_lock = threading.Lock()
        self._lock_timeout = lock_timeout

        self._client_locks_guard = threading.Lock()
        self._client_locks: Dict[int, threading.Lock] = {}

    @contextmanager
    def _acquire(self, lock: threading.Lock, name: str) -> Iterator[None]:
        if not lock.acquire(timeout=self._lock_timeout):
            logger.error(f"Could not acquire {name} lock within {self._lock_timeout}s")
            raise UnknownError(f"{name} store is unavailable")
        try:
            yield
        finally:
            lock.release()

    def client_lock(self, client_id: int) -> threading.Lock:
        """
        Get or create a lock for a specific client.
        Held for the whole read-modify-write of that client's account.
        """
        with self._client_locks_guard:
            if client_id not in self._client_locks:
                self._client_locks[client_id] = threading.Lock()
            return self._client_locks[client_id]

    def get_transaction(self, transaction_id: int) -> StoredTransaction:
        """Retrieve a stored deposit or withdrawal, raising TransactionNotFound on a miss."""
        logger.debug(f"Retrieving transaction {transaction_id}")
        with self._acquire(self._transactions_lock, "transactions"):
            transaction = self._transactions.get(transaction_id)
            if transaction is None:
                raise TransactionNotFound(transaction_id)
            return transaction.copy()

    def insert_transaction(self, transaction: StoredTransaction) -> StoredTransaction:
        """
        Store a deposit or withdrawal for future dispute lookups.
        Instructions (dispute, resolve, chargeback) are returned untouched and never stored.
        """
        if not transaction.is_ledger_entry():
            return transaction

        logger.debug(f"Inserting {transaction!r}")
        with self._acquire(self._transactions_lock, "transactions"):
            if transaction.id in self._transactions:
                raise TransactionAlreadyExists(transaction.id)
            self._transactions[transaction.id] = transaction.copy()
        return transaction

    def under_dispute(self, transaction_id: int, under_dispute: bool) -> None:
        """Set the dispute flag of a stored deposit. Unknown ids are ignored."""
        logger.debug(f"Updating transaction {transaction_id} to under dispute = {under_dispute}")
        with self._acquire(self._transactions_lock, "transactions"):
            transaction = self._transactions.get(transaction_id)
            if transaction is not None:
                transaction.set_under_dispute(under_dispute)

    def get_account(self, client_id: int) -> ClientAccount:
        """Return a snapshot of the client's account, or a fresh zeroed one."""
        logger.debug(f"Retrieving account for client {client_id}")
        with self._acquire(self._accounts_lock, "accounts"):
            account = self._accounts.get(client_id)
            if account is None:
                return ClientAccount(client_id=client_id)
            return account.copy()

    def upsert_account(self, account: ClientAccount) -> None:
        logger.debug(f"Upserting {account!r}")
        with self._acquire(self._accounts_lock, "accounts"):
            self._accounts[account.client_id] = account.copy()

    def get_all_accounts(self) -> List[ClientAccount]:
        """Return snapshots of all accounts ordered by client id (for final output)."""
        logger.debug("Retrieving all client account balances")
        with self._acquire(self._accounts_lock, "accounts"):
            return [self._accounts[client_id].copy() for client_id in sorted(self._accounts)]
