class SupermarketError(Exception):
    """Base class for every failure the data core classifies."""
    pass


class ValidationError(SupermarketError):
    """
    Raised when a required field is missing or a value is malformed
    (e.g. a negative price). Nothing is written.

    Expected Result: 400 Bad Request
    """
    pass


class DuplicateKeyError(SupermarketError):
    """
    Raised when a unique key (category name, product barcode) collides
    with an existing record. Nothing is written.

    Expected Result: 409 Conflict
    """
    pass


class DuplicateNameError(DuplicateKeyError):
    """Category name already in use."""
    pass


class DuplicateBarcodeError(DuplicateKeyError):
    """Product barcode already in use."""
    pass


class NotFoundError(SupermarketError):
    """
    Raised when an operation targets an id that does not exist.

    Expected Result: 404 Not Found
    """
    pass


class HasDependentsError(SupermarketError):
    """
    Raised when a delete is blocked by records that still reference
    the target (a category that still has products).

    Expected Result: 409 Conflict
    """
    pass


class StorageIOError(SupermarketError):
    """
    Raised when the persistence layer fails (disk full, permission denied,
    corrupt database). Never retried inside the core.

    Expected Result: 503 Service Unavailable
    """
    pass


class InvalidFormatError(SupermarketError):
    """
    Raised when a backup snapshot fails the shape check on import.
    Always raised before any data is touched.

    Expected Result: 422 Unprocessable Entity
    """
    pass


class OperationCancelledError(SupermarketError):
    """Raised when the user dismisses the save or open dialog of a backup."""
    pass


class PasswordVerificationError(SupermarketError):
    """Raised when the lock password is wrong or cannot be hashed."""
    pass
