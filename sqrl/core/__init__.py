"""Core domain types and logic."""

from .config import ConfigurationError, ReleaseOptions, build_options
from .errors import ErrorCode
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # config
    "ConfigurationError",
    "ReleaseOptions",
    "build_options",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
