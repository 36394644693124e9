"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidMonthKeyError(DomainException):
    """Month key is not a valid "YYYY-MM" string"""

    pass


class OperationNotAllowedError(DomainException):
    """Operation is not permitted in the current view mode"""

    pass


class RolloverNotAllowedError(OperationNotAllowedError):
    """New month cannot be started from the current state"""

    pass


class InvalidBudgetDocumentError(DomainException):
    """Imported or stored budget document is malformed"""

    pass


class StorageError(DomainException):
    """Budget state could not be loaded from or saved to storage"""

    pass


class BackupNotFoundError(DomainException):
    """Requested backup slot is empty"""

    pass
