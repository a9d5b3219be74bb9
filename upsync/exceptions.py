# Upsync Exceptions
# Error taxonomy shared by the store client, the executor and the CLI


class UpsyncError(Exception):
    """Base class for all upsync errors."""


class ConfigurationError(UpsyncError):
    """Raised when configuration or the local sync root is invalid."""


class NotFoundError(UpsyncError):
    """Raised when a bucket or object does not exist."""


class AuthenticationError(UpsyncError):
    """Raised when the store rejects or is missing credentials."""


class StoreError(UpsyncError):
    """Raised when a store operation fails for any other reason."""


class LocalIOError(UpsyncError):
    """Raised when a local file cannot be read."""

    def __init__(self, path, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path
