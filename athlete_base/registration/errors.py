"""Domain errors raised by the registration repositories.

Messages are safe to show to callers; the database error that caused
them is chained as ``__cause__`` and only ever logged.
"""


class RegistrationError(Exception):
    """Base class for registration domain errors."""


class EmailAlreadyRegisteredError(RegistrationError):
    """Raised when the email is already taken by an existing record."""

    def __init__(self, message: str = "Email already registered") -> None:
        super().__init__(message)


class AvailabilityCheckError(RegistrationError):
    """Raised when the email existence check cannot be completed."""

    def __init__(self, message: str = "Failed to check email availability") -> None:
        super().__init__(message)


class RecordCreationError(RegistrationError):
    """Raised when an insert fails for any reason other than a duplicate email."""

    def __init__(self, entity: str) -> None:
        self.entity = entity
        super().__init__(f"Failed to create {entity} record")


class RecordLookupError(RegistrationError):
    """Raised when a record lookup fails at the database layer."""

    def __init__(self, entity: str) -> None:
        self.entity = entity
        super().__init__(f"Failed to fetch {entity} record")
