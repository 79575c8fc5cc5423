"""Error handling for spanlog.

- ErrorCode: Standard error codes for propagation failures
- TracingError/TracingException: Structured errors and exceptions
- UnsupportedFormatError: Raised by Tracer.inject / Tracer.extract
"""

from .errors import ErrorCode, TracingError, TracingException, UnsupportedFormatError

__all__ = ["ErrorCode", "TracingError", "TracingException", "UnsupportedFormatError"]
