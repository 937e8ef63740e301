from mcp_fingerprint.core.models import CapabilityDescriptor, RetrievedDescriptor, ServerIdentity
from mcp_fingerprint.core.normalizer import normalize_descriptor


def test_failed_initialize_normalizes_to_empty_lists():
    retrieved = RetrievedDescriptor(endpoint="http://localhost:8081/mcp", error="Connection refused")

    descriptor = normalize_descriptor(retrieved)

    assert isinstance(descriptor, CapabilityDescriptor)
    assert descriptor.error == "Connection refused"
    assert descriptor.tools == []
    assert descriptor.resources == []
    assert descriptor.prompts == []
    assert descriptor.roots == []
    assert descriptor.capabilities == {}
    assert descriptor.defaulted_fields == ["tools", "resources", "prompts", "roots", "capabilities"]


def test_partial_retrieval_records_defaulted_fields():
    retrieved = RetrievedDescriptor(
        endpoint="http://localhost:8080/mcp",
        identity=ServerIdentity(name="My Server", version="1.0.0"),
        protocol_version="2024-11-05",
        capabilities={"tools": {}},
        tools=[{"name": "add"}],
        resources=None,
        prompts=[],
        roots=None,
        call_failures={"resources/list": "Method not found", "roots/list": "HTTP 404: Not Found"},
    )

    descriptor = normalize_descriptor(retrieved)

    assert descriptor.tools == [{"name": "add"}]
    assert descriptor.resources == []
    assert descriptor.prompts == []
    assert descriptor.defaulted_fields == ["resources", "roots"]
    assert descriptor.call_failures == retrieved.call_failures
    assert descriptor.name == "My Server"
    assert descriptor.version == "1.0.0"
    assert descriptor.error is None


def test_complete_retrieval_defaults_nothing():
    retrieved = RetrievedDescriptor(
        endpoint="http://localhost:8080/mcp",
        capabilities={},
        tools=[],
        resources=[],
        prompts=[],
        roots=[],
        ping_ok=True,
    )
    descriptor = normalize_descriptor(retrieved)
    assert descriptor.defaulted_fields == []
    assert descriptor.ping_ok is True


def test_normalization_does_not_alias_retrieved_lists():
    retrieved = RetrievedDescriptor(endpoint="x", tools=[{"name": "add"}], capabilities={})
    descriptor = normalize_descriptor(retrieved)
    descriptor.tools.append({"name": "other"})
    assert retrieved.tools == [{"name": "add"}]
