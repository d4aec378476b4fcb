class ProcessingError(Exception):
    """Base class for every failure raised while applying a single transaction."""


class TransactionIsNotValid(ProcessingError):
    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction with id {transaction_id} is not valid")


class TransactionNotFound(ProcessingError):
    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction with id {transaction_id} not found")


class TransactionAlreadyExists(ProcessingError):
    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction with id {transaction_id} already exists")


class TransactionAlreadyUnderDispute(ProcessingError):
    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction with id {transaction_id} already under dispute")


class TransactionIsNotDisputable(ProcessingError):
    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction with id {transaction_id} is not disputable")


class TransactionAccessDenied(ProcessingError):
    def __init__(self, transaction_id: int, client_id: int):
        self.transaction_id = transaction_id
        self.client_id = client_id
        super().__init__(f"Transaction with id {transaction_id} can't be accessed by client with id {client_id}")


class AccountInsufficientAvailableFunds(ProcessingError):
    def __init__(self, client_id: int):
        self.client_id = client_id
        super().__init__(f"Account with id {client_id} has insufficient available funds")


class AccountInsufficientHeldFunds(ProcessingError):
    def __init__(self, client_id: int):
        self.client_id = client_id
        super().__init__(f"Account with id {client_id} has insufficient held funds")


class AccountIsLocked(ProcessingError):
    def __init__(self, client_id: int):
        self.client_id = client_id
        super().__init__(f"Account with id {client_id} is locked")


class UnknownError(ProcessingError):
    """
    Store could not be accessed. The run state can no longer be trusted,
    so callers treat this as fatal instead of skipping the record.
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Unknown error: {reason}")
