from __future__ import annotations


class ValuesError(Exception):
    """Base class for failures the HTTP layer reports to the caller."""

    status_code = 400
    kind = "values_error"

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict:
        return {"success": False, "error": self.kind, "detail": self.message}


class DataIntegrityError(ValuesError):
    """A response references a dilemma or choice the catalog does not define."""

    kind = "data_integrity_error"


class ConfigurationError(ValuesError):
    """Unknown template id, invalid generation option or a broken catalog."""

    kind = "configuration_error"


class EmptyInputError(ValuesError):
    kind = "empty_input_error"


class SessionClosedError(ValuesError):
    """A completed session was asked to accept another response."""

    status_code = 409
    kind = "session_closed_error"


class SessionConflictError(ValuesError):
    """Another request changed the session between reading and writing it."""

    status_code = 409
    kind = "session_conflict_error"
