"""Errors raised by the calculator core."""

from uuid import UUID


class InvalidInputError(ValueError):
    """A proposed gram value was rejected."""

    def __init__(self, field: str, value: object, reason: str) -> None:
        super().__init__(f"Invalid value for {field}: {value!r} ({reason})")
        self.field = field
        self.value = value
        self.reason = reason


class EntryNotFoundError(LookupError):
    """No entry with the requested id exists in the store."""

    def __init__(self, entry_id: UUID) -> None:
        super().__init__(f"Entry not found: {entry_id}")
        self.entry_id = entry_id
