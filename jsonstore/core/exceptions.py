"""JSON store exception hierarchy."""


class JsonStoreError(Exception):
    """Base exception for all store-related errors."""


class SerializationError(JsonStoreError, ValueError):
    """Value could not be serialized to JSON. Nothing was written."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Cannot serialize value for key '{key}': {reason}")


class StorageError(JsonStoreError):
    """Failure reported by the backing database."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"[{operation}] {message}")
