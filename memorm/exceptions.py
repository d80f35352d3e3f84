"""Memorm public exceptions."""

__all__ = ["MemormError", "ConfigurationError", "ReferentNotFoundError", "RecordDoesNotExistError",
           "MultipleRecordsReturnedError"]


class MemormError(Exception):
    """Base class of memorm exceptions."""

    pass


class ConfigurationError(MemormError):
    """
    Exception when a model or a schema is badly configured (missing schema or type, unknown or duplicate type).

    Parameters
    ----------
    message: str
    type_name: str or None
    """

    def __init__(self, message, type_name=None):
        super().__init__(message)
        self.type_name = type_name


class ReferentNotFoundError(MemormError):
    """
    Exception when a foreign key is set to an id that does not exist in the referent's collection.

    Parameters
    ----------
    referent: str
        referent type ref
    id
        offending identifier
    """

    def __init__(self, referent, id):
        super().__init__(f"Couldn't find {referent} with id = {id}")
        self.referent = referent
        self.id = id


class RecordDoesNotExistError(MemormError):
    """Record does not exist exception."""

    pass


class MultipleRecordsReturnedError(MemormError):
    """Exception when more than one record is returned and only one was expected."""

    pass
