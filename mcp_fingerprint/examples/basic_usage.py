import asyncio

from mcp_fingerprint import compare_local_servers, compute_fingerprint
from mcp_fingerprint.core.config import load_config
from mcp_fingerprint.core.logging_config import setup_logging
from mcp_fingerprint.error_handling.exceptions import ConfigurationError


async def run_example(config_file_path=None):
    """
    Compares two MCP servers running on localhost ports 8080 and 8081.
    """
    # --- Configuration ---
    # 1. COPY `mcp_fingerprint/config/comparator.example.yaml` to a new file.
    # 2. EDIT timeout or session_id_source to match your servers.
    # 3. Pass its path as config_file_path, or leave it as None for the defaults.

    print("--- MCP Server Comparison Example ---")
    print("Start the two servers under test first, e.g. on ports 8080 and 8081.")
    print("-" * 30)

    try:
        config = load_config(config_file_path)
    except ConfigurationError as e:
        print(f"\nCONFIG ERROR: {e}")
        return

    setup_logging(config.log_level)
    comparison = await compare_local_servers(8080, 8081, config)

    for label, descriptor in (("Server 1", comparison.server1), ("Server 2", comparison.server2)):
        if descriptor.error:
            print(f"{label} could not be retrieved: {descriptor.error}")
            continue
        print(f"{label}: {descriptor.name} {descriptor.version}")
        print(f"  tools: {[tool.get('name') for tool in descriptor.tools]}")
        print(f"  fingerprint: {compute_fingerprint(descriptor, sort_nested_keys=config.sort_nested_keys)}")

    print("-" * 30)
    if comparison.result.equivalent:
        print("Both servers expose the same capabilities.")
    else:
        for difference in comparison.result.differences:
            print(f"  - {difference}")


if __name__ == "__main__":
    asyncio.run(run_example())
