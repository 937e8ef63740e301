from .exceptions import (
    MCPFingerprintError,
    NetworkError,
    RequestTimeoutError,
    HTTPStatusError,
    ProtocolError,
    MalformedResponseError,
    ConfigurationError,
    CanonicalizationError,
)

__all__ = [
    'MCPFingerprintError',
    'NetworkError',
    'RequestTimeoutError',
    'HTTPStatusError',
    'ProtocolError',
    'MalformedResponseError',
    'ConfigurationError',
    'CanonicalizationError',
]
