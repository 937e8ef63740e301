"""
Descriptor normalization.
Turns a RetrievedDescriptor, whose lists may be missing because a call
failed, into a structurally complete CapabilityDescriptor.
"""

import logging

from mcp_fingerprint.core.models import CapabilityDescriptor, RetrievedDescriptor

logger = logging.getLogger(__name__)

LIST_FIELDS = ("tools", "resources", "prompts", "roots")


def normalize_descriptor(retrieved: RetrievedDescriptor) -> CapabilityDescriptor:
    """
    Fill absent lists and capabilities with empty defaults.

    Every field that had to be defaulted is listed in ``defaulted_fields``,
    so "the server has none" and "we could not find out" stay
    distinguishable after normalization.

    Args:
        retrieved: Descriptor as produced by the protocol client.

    Returns:
        A complete CapabilityDescriptor.
    """
    defaulted = []
    lists = {}
    for field in LIST_FIELDS:
        value = getattr(retrieved, field)
        if value is None:
            defaulted.append(field)
            value = []
        lists[field] = list(value)

    capabilities = retrieved.capabilities
    if capabilities is None:
        defaulted.append("capabilities")
        capabilities = {}

    if defaulted and not retrieved.error:
        logger.info(f"Defaulted {', '.join(defaulted)} to empty for {retrieved.endpoint}")

    return CapabilityDescriptor(
        endpoint=retrieved.endpoint,
        identity=retrieved.identity.model_copy(),
        protocol_version=retrieved.protocol_version or "",
        capabilities=dict(capabilities),
        ping_ok=retrieved.ping_ok,
        call_failures=dict(retrieved.call_failures),
        defaulted_fields=defaulted,
        error=retrieved.error,
        **lists,
    )
