"""Storage-related exceptions for permstore."""

from .base import PermStoreError


class StorageError(PermStoreError):
    """Raised when a query against the permissions table fails."""
    pass


class PermissionAlreadyExistsError(StorageError):
    """Raised when inserting a permission whose name is already stored."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Permission '{name}' already exists",
            details={"name": name}
        )


class TransactionConflictError(StorageError):
    """Raised when a serializable transaction keeps conflicting."""

    def __init__(self, operation: str, attempts: int):
        self.operation = operation
        self.attempts = attempts
        super().__init__(
            f"Transaction for {operation} conflicted {attempts} times",
            details={"operation": operation, "attempts": attempts}
        )
