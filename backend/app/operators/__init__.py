"""Stream operators and the in-process host that drives them."""

from .errors import DispatchError, OperatorConfigurationError, OperatorError, RecordError
from .http_post import HttpPostOperator, HttpPostSettings
from .records import Attribute, Record, StreamSchema, record_from_mapping
from .runtime import OperatorContext, OperatorHost, Punctuation, StreamingOutput

__all__ = [
    "Attribute",
    "DispatchError",
    "HttpPostOperator",
    "HttpPostSettings",
    "OperatorConfigurationError",
    "OperatorContext",
    "OperatorError",
    "OperatorHost",
    "Punctuation",
    "Record",
    "RecordError",
    "StreamSchema",
    "StreamingOutput",
    "record_from_mapping",
]
