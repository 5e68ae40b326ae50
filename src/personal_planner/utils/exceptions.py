"""Custom exceptions for the personal planner."""


class PersonalPlannerError(Exception):
    """Base exception for all personal planner errors."""

    pass


class ConfigurationError(PersonalPlannerError):
    """Raised when there is a configuration error."""

    pass


class StorageError(PersonalPlannerError):
    """Raised when the storage backend cannot read or write a document."""

    pass
