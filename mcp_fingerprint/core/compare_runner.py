"""
Runs a full comparison of two MCP servers.
Both descriptors are retrieved concurrently by independent clients; the
comparison starts once both retrievals are done.
"""

import asyncio
import logging
from typing import Optional

from mcp_fingerprint.core.comparator import compare_descriptors
from mcp_fingerprint.core.config import ComparatorConfig
from mcp_fingerprint.core.models import CapabilityDescriptor, ServerComparison
from mcp_fingerprint.core.normalizer import normalize_descriptor
from mcp_fingerprint.core.protocol_client import MCPProtocolClient

logger = logging.getLogger(__name__)


async def fetch_descriptor(endpoint: str, config: ComparatorConfig) -> CapabilityDescriptor:
    """Retrieve and normalize the descriptor of one endpoint."""
    async with MCPProtocolClient.from_config(endpoint, config) as client:
        retrieved = await client.retrieve_descriptor()
    return normalize_descriptor(retrieved)


async def compare_servers(endpoint1: str, endpoint2: str, config: Optional[ComparatorConfig] = None) -> ServerComparison:
    """
    Compare the capability surfaces of two MCP servers.

    Args:
        endpoint1: URL of the first server's MCP endpoint.
        endpoint2: URL of the second server's MCP endpoint.
        config: Client settings; defaults are used when omitted.

    Returns:
        ServerComparison with both normalized descriptors and the verdict.
    """
    config = config or ComparatorConfig()
    logger.info(f"Comparing MCP servers: {endpoint1} and {endpoint2}")

    server1, server2 = await asyncio.gather(
        fetch_descriptor(endpoint1, config),
        fetch_descriptor(endpoint2, config),
    )
    result = compare_descriptors(server1, server2, sort_nested_keys=config.sort_nested_keys)
    return ServerComparison(server1=server1, server2=server2, result=result)


async def compare_local_servers(port1: int = 8080, port2: int = 8081, config: Optional[ComparatorConfig] = None) -> ServerComparison:
    """Compare two servers listening on localhost at ``/mcp``."""
    return await compare_servers(
        f"http://localhost:{port1}/mcp",
        f"http://localhost:{port2}/mcp",
        config,
    )
