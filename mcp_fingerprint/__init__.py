"""
MCP server fingerprinting.
This package retrieves the capability surface of MCP servers and decides
whether two servers expose identical capabilities.
"""

from .core.canonical import canonicalize_descriptor
from .core.comparator import compare_descriptors, describe_differences
from .core.compare_runner import compare_local_servers, compare_servers
from .core.config import ComparatorConfig, load_config
from .core.fingerprint import compute_fingerprint
from .core.models import (
    CapabilityDescriptor,
    ComparisonResult,
    RetrievedDescriptor,
    ServerComparison,
)
from .core.normalizer import normalize_descriptor
from .core.protocol_client import MCPProtocolClient, SessionIdSource

__version__ = "1.0.0"

__all__ = [
    'canonicalize_descriptor',
    'compare_descriptors',
    'describe_differences',
    'compare_local_servers',
    'compare_servers',
    'ComparatorConfig',
    'load_config',
    'compute_fingerprint',
    'CapabilityDescriptor',
    'ComparisonResult',
    'RetrievedDescriptor',
    'ServerComparison',
    'normalize_descriptor',
    'MCPProtocolClient',
    'SessionIdSource',
]
