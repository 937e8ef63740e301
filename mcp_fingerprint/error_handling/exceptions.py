"""
Custom exceptions for the MCP fingerprint comparator.
This module provides the exception classes raised by the protocol client
and the canonicalization engine.
"""

from typing import Optional

class MCPFingerprintError(Exception):
    """Base exception class for comparator errors."""
    def __init__(self, message: str, code: int = -32000, original_exception: Optional[Exception] = None):
        self.message = message
        self.code = code
        self.original_exception = original_exception
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert exception to a JSON-RPC style error object."""
        error_data = {
            'exception': self.__class__.__name__,
            'args': self.args
        }
        if self.original_exception:
            error_data['original_exception'] = str(self.original_exception)
        return {
            'code': self.code,
            'message': self.message,
            'data': error_data
        }

class NetworkError(MCPFingerprintError):
    """Transport failure: connection refused, reset, DNS failure."""
    def __init__(self, message: str = "Network error occurred", original_exception: Optional[Exception] = None, code: int = -32002):
        super().__init__(message, code=code, original_exception=original_exception)

class RequestTimeoutError(NetworkError):
    """The call did not complete within the configured timeout."""
    def __init__(self, message: str = "Request timed out", original_exception: Optional[Exception] = None):
        super().__init__(message, original_exception=original_exception, code=-32003)

class HTTPStatusError(MCPFingerprintError):
    """Non-success HTTP status."""
    def __init__(self, status_code: int, reason: str = "", original_exception: Optional[Exception] = None):
        self.status_code = status_code
        message = f"HTTP {status_code}: {reason}" if reason else f"HTTP {status_code}"
        super().__init__(message, code=-32004, original_exception=original_exception)

class ProtocolError(MCPFingerprintError):
    """Protocol error."""
    def __init__(self, message: str = "Protocol error occurred", original_exception: Optional[Exception] = None, code: int = -32005):
        super().__init__(message, code=code, original_exception=original_exception)

class MalformedResponseError(ProtocolError):
    """Response body is neither a streaming-event frame nor bare JSON-RPC."""
    def __init__(self, message: str = "Malformed response", original_exception: Optional[Exception] = None):
        super().__init__(message, original_exception=original_exception, code=-32006)

class ConfigurationError(MCPFingerprintError):
    """Configuration error."""
    def __init__(self, message: str = "Configuration error occurred", original_exception: Optional[Exception] = None):
        super().__init__(message, code=-32007, original_exception=original_exception)

class CanonicalizationError(MCPFingerprintError):
    """A descriptor value cannot be represented in canonical form."""
    def __init__(self, message: str = "Value cannot be canonicalized", path: str = "$", original_exception: Optional[Exception] = None):
        self.path = path
        super().__init__(f"{message} at {path}", code=-32008, original_exception=original_exception)
