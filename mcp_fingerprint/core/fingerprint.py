"""
Fingerprint engine: SHA-256 over the canonical serialization of a descriptor.
"""

import hashlib
import logging
from typing import Optional

from mcp_fingerprint.core.canonical import JsonValue, canonicalize_descriptor, serialize_canonical
from mcp_fingerprint.core.models import CapabilityDescriptor

logger = logging.getLogger(__name__)

FINGERPRINT_LENGTH = 64


def fingerprint_canonical(canonical: JsonValue, sort_keys: bool = True) -> str:
    """Hash an already canonical value into a 64-character lowercase hex digest."""
    return hashlib.sha256(serialize_canonical(canonical, sort_keys)).hexdigest()


def compute_fingerprint(descriptor: CapabilityDescriptor, sort_nested_keys: bool = True) -> Optional[str]:
    """
    Compute the fingerprint of a normalized descriptor.

    Returns None for a descriptor carrying a retrieval error: its lists are
    vacuous, so a digest would not identify any capability contract.

    Raises:
        CanonicalizationError: If the descriptor holds an unserializable value.
    """
    if descriptor.error:
        logger.debug(f"Not fingerprinting {descriptor.endpoint}: {descriptor.error}")
        return None
    canonical = canonicalize_descriptor(descriptor, sort_nested_keys=sort_nested_keys)
    digest = fingerprint_canonical(canonical, sort_keys=sort_nested_keys)
    logger.debug(f"Fingerprint of {descriptor.endpoint}: {digest}")
    return digest
