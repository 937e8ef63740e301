import json
import logging

import pytest

from mcp_fingerprint import cli
from mcp_fingerprint.core.comparator import compare_descriptors
from mcp_fingerprint.core.models import CapabilityDescriptor, ServerComparison, ServerIdentity
from mcp_fingerprint.error_handling.exceptions import NetworkError


@pytest.fixture(autouse=True)
def isolate(monkeypatch):
    for name in ("MCP_COMPARE_ENDPOINT1", "MCP_COMPARE_ENDPOINT2", "MCP_COMPARE_TIMEOUT",
                 "MCP_COMPARE_SESSION_SOURCE", "MCP_COMPARE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


def _comparison(server1, server2):
    return ServerComparison(server1=server1, server2=server2, result=compare_descriptors(server1, server2))


@pytest.fixture
def patch_compare(monkeypatch):
    calls = []

    def install(comparison=None, error=None):
        async def fake_compare_servers(endpoint1, endpoint2, config=None):
            calls.append((endpoint1, endpoint2, config))
            if error is not None:
                raise error
            return comparison
        monkeypatch.setattr(cli, "compare_servers", fake_compare_servers)
        return calls

    return install


def test_equivalent_servers_exit_zero(patch_compare, descriptor_factory, capsys):
    calls = patch_compare(_comparison(descriptor_factory(), descriptor_factory()))

    code = cli.main_cli(["http://a/mcp", "http://b/mcp"])

    assert code == cli.EXIT_EQUIVALENT
    assert calls[0][:2] == ("http://a/mcp", "http://b/mcp")
    output = capsys.readouterr().out
    assert "Match: yes" in output
    assert "Both servers have identical configurations." in output


def test_different_servers_exit_one(patch_compare, descriptor_factory, tool_specs, capsys):
    patch_compare(_comparison(
        descriptor_factory(),
        descriptor_factory(tools=[tool_specs["add"], tool_specs["subtract"]]),
    ))

    code = cli.main_cli(["http://a/mcp", "http://b/mcp"])

    assert code == cli.EXIT_DIFFERENT
    output = capsys.readouterr().out
    assert "Match: no" in output
    assert "Differences found:" in output
    assert "  - Tools count: 1 vs 2" in output


def test_json_output(patch_compare, descriptor_factory, capsys):
    patch_compare(_comparison(descriptor_factory(), descriptor_factory(identity=ServerIdentity(name="My Server", version="1.0.1"))))

    code = cli.main_cli(["http://a/mcp", "http://b/mcp", "--json"])

    assert code == cli.EXIT_DIFFERENT
    data = json.loads(capsys.readouterr().out)
    assert data["result"]["equivalent"] is False
    assert data["result"]["differences"] == ['Version: "1.0.0" vs "1.0.1"']
    assert len(data["result"]["fingerprint1"]) == 64


def test_defaults_to_local_endpoints(patch_compare, descriptor_factory):
    calls = patch_compare(_comparison(descriptor_factory(), descriptor_factory()))

    cli.main_cli([])

    assert calls[0][:2] == ("http://localhost:8080/mcp", "http://localhost:8081/mcp")


def test_legacy_session_and_timeout_flags(patch_compare, descriptor_factory):
    calls = patch_compare(_comparison(descriptor_factory(), descriptor_factory()))

    cli.main_cli(["http://a/mcp", "http://b/mcp", "--legacy-session", "--timeout", "3"])

    config = calls[0][2]
    assert config.session_header == "X-Session-ID"
    assert config.timeout == 3.0


def test_missing_config_file_exit_two(capsys):
    code = cli.main_cli(["--config", "/nonexistent/comparator.yaml"])

    assert code == cli.EXIT_ERROR
    assert "Configuration error" in capsys.readouterr().err


def test_invalid_timeout_exit_two(capsys):
    code = cli.main_cli(["--timeout", "-1"])

    assert code == cli.EXIT_ERROR
    assert "Configuration error" in capsys.readouterr().err


def test_unexpected_failure_exit_two(patch_compare):
    patch_compare(error=NetworkError("boom"))

    assert cli.main_cli(["http://a/mcp", "http://b/mcp"]) == cli.EXIT_ERROR


def test_report_for_unreachable_server(descriptor_factory):
    unreachable = CapabilityDescriptor(endpoint="http://b/mcp", error="Connection refused")

    report = cli.format_report(_comparison(descriptor_factory(), unreachable))

    assert "  error: Connection refused" in report
    assert "Server 2 hash: -" in report
    assert "  - Server errors: none vs Connection refused" in report


def test_logging_handler_without_type_exit_two(tmp_path, capsys):
    config_file = tmp_path / "comparator.yaml"
    config_file.write_text("logging:\n  handlers:\n    - filename: out.log\n")

    code = cli.main_cli(["http://a/mcp", "http://b/mcp", "--config", str(config_file)])

    assert code == cli.EXIT_ERROR
    assert "missing 'type'" in capsys.readouterr().err
