class CdcSinkError(Exception):
    """Base exception for cdcsink errors."""


class DecodeError(CdcSinkError):
    """Raw message is not a well-formed change envelope."""


class MissingPayloadError(DecodeError):
    """Envelope parsed but carries no payload."""


class MissingFieldSetError(CdcSinkError):
    """The before/after row image required by the operation is absent."""


class UnsupportedOperationError(CdcSinkError):
    """Operation code is not one of c, u, d, r."""


class InvalidIdentifierError(CdcSinkError):
    """Table name taken from the event is not a safe SQL identifier."""


class ExecutionError(CdcSinkError):
    """The database rejected or failed to run a statement."""


class ConnectError(CdcSinkError):
    """Initial database connection could not be established."""


class QueueError(CdcSinkError):
    """General queue-related issues."""


class ZeroRowsWarning(UserWarning):
    """Statement ran but matched no rows."""
