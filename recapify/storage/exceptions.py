class StorageError(Exception):
    """Raised when an object cannot be stored or read."""
