"""
Command line entry point: compare two MCP servers and print a report.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from mcp_fingerprint.core.compare_runner import compare_servers
from mcp_fingerprint.core.config import load_config
from mcp_fingerprint.core.logging_config import setup_logging, setup_logging_from_config
from mcp_fingerprint.core.models import CapabilityDescriptor, ServerComparison
from mcp_fingerprint.core.protocol_client import SessionIdSource
from mcp_fingerprint.error_handling.exceptions import ConfigurationError, MCPFingerprintError

logger = logging.getLogger(__name__)

EXIT_EQUIVALENT = 0
EXIT_DIFFERENT = 1
EXIT_ERROR = 2


def _describe_server(label: str, descriptor: CapabilityDescriptor) -> List[str]:
    lines = [f"{label}: {descriptor.endpoint}"]
    if descriptor.error:
        lines.append(f"  error: {descriptor.error}")
        return lines
    lines.append(f"  server: {descriptor.name or 'Unknown'} {descriptor.version}".rstrip())
    lines.append(f"  protocol version: {descriptor.protocol_version or '-'}")
    lines.append(
        f"  tools: {len(descriptor.tools)}, resources: {len(descriptor.resources)}, "
        f"prompts: {len(descriptor.prompts)}, roots: {len(descriptor.roots)}"
    )
    for method, message in sorted(descriptor.call_failures.items()):
        lines.append(f"  {method} failed: {message}")
    return lines


def format_report(comparison: ServerComparison) -> str:
    """Render a comparison as plain text."""
    result = comparison.result
    lines = []
    lines.extend(_describe_server("Server 1", comparison.server1))
    lines.extend(_describe_server("Server 2", comparison.server2))
    lines.append("")
    lines.append(f"Server 1 hash: {result.fingerprint1 or '-'}")
    lines.append(f"Server 2 hash: {result.fingerprint2 or '-'}")
    lines.append(f"Match: {'yes' if result.equivalent else 'no'}")
    if result.equivalent:
        lines.append("Both servers have identical configurations.")
    else:
        lines.append("Servers have different configurations.")
        if result.differences:
            lines.append("Differences found:")
            lines.extend(f"  - {difference}" for difference in result.differences)
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Compare the capability fingerprints of two MCP servers')
    parser.add_argument('endpoint1', nargs='?', help='URL of the first MCP endpoint')
    parser.add_argument('endpoint2', nargs='?', help='URL of the second MCP endpoint')
    parser.add_argument('--config', help='Path to a YAML configuration file')
    parser.add_argument('--timeout', type=float, help='Per-call timeout in seconds')
    parser.add_argument('--legacy-session', action='store_true',
                        help='Take the session ID from the streamed event id instead of the response header')
    parser.add_argument('--json', action='store_true', dest='as_json', help='Print the comparison as JSON')
    parser.add_argument('--log-level', help='Logging level (DEBUG, INFO, WARNING, ...)')
    return parser


def main_cli(argv: Optional[List[str]] = None) -> int:
    """Command line entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(
            args.config,
            endpoint1=args.endpoint1,
            endpoint2=args.endpoint2,
            timeout=args.timeout,
            session_id_source=SessionIdSource.EVENT_ID if args.legacy_session else None,
            log_level=args.log_level,
        )
    except (ConfigurationError, FileNotFoundError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_ERROR

    if config.logging:
        setup_logging_from_config(config.logging, default_level=config.log_level)
    else:
        setup_logging(config.log_level)

    try:
        comparison = asyncio.run(compare_servers(config.endpoint1, config.endpoint2, config))
    except KeyboardInterrupt:
        logger.info("Comparison interrupted by user")
        return EXIT_ERROR
    except MCPFingerprintError as e:
        logger.error(f"Comparison failed: {e}")
        return EXIT_ERROR

    if args.as_json:
        print(json.dumps(comparison.model_dump(mode="json"), indent=2))
    else:
        print(format_report(comparison))
    return EXIT_EQUIVALENT if comparison.result.equivalent else EXIT_DIFFERENT


if __name__ == "__main__":
    sys.exit(main_cli())
