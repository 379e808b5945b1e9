"""Exceptions raised by the operator package."""


class OperatorError(Exception):
    """Base class for operator failures."""


class OperatorConfigurationError(OperatorError):
    """Raised when the operator settings or port wiring are invalid."""


class RecordError(OperatorError):
    """Raised when a record does not fit its schema."""


class DispatchError(OperatorError):
    """Raised when a POST could not be delivered to the remote endpoint."""
