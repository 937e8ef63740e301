"""Shared fixtures for the mcp_fingerprint test suite."""

import json
from typing import Any, Dict, List, Optional

import httpx
import pytest

from mcp_fingerprint.core.models import CapabilityDescriptor, ServerIdentity

ENDPOINT = "http://mock-mcp:8080/mcp"
ENDPOINT2 = "http://mock-mcp:8081/mcp"

ADD_TOOL = {
    "name": "add",
    "description": "Add two numbers",
    "inputSchema": {
        "type": "object",
        "properties": {"a": {"type": "number"}, "b": {"type": "number"}},
        "required": ["a", "b"],
    },
}

SUBTRACT_TOOL = {
    "name": "subtract",
    "description": "Subtract two numbers",
    "inputSchema": {
        "type": "object",
        "properties": {"a": {"type": "number"}, "b": {"type": "number"}},
        "required": ["a", "b"],
    },
}

MATH_RESOURCE = {
    "uri": "math://operations",
    "name": "Math Operations Guide",
    "mimeType": "text/plain",
}

MATH_PROMPT = {
    "name": "math-problem",
    "description": "Generate a math problem for practice",
    "arguments": [
        {"name": "difficulty", "description": "Difficulty level (easy, medium, hard)", "required": False},
    ],
}


def init_result(name: str = "My Server", version: str = "1.0.0", capabilities: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "protocolVersion": "2024-11-05",
        "capabilities": capabilities if capabilities is not None else {"tools": {"listChanged": True}},
        "serverInfo": {"name": name, "version": version},
    }


class FakeMCPServer:
    """
    respx side effect answering JSON-RPC calls like a small MCP server.

    results: method -> result payload
    errors: method -> error object returned instead of a result
    raises: method -> exception raised instead of answering
    """

    def __init__(
        self,
        results: Optional[Dict[str, Any]] = None,
        errors: Optional[Dict[str, Dict[str, Any]]] = None,
        raises: Optional[Dict[str, Exception]] = None,
        statuses: Optional[Dict[str, int]] = None,
        session_id: Optional[str] = "session-abcdef123456",
        streaming: bool = False,
        legacy_event_ids: bool = False,
    ):
        self.results = {
            "initialize": init_result(),
            "tools/list": {"tools": [ADD_TOOL]},
            "resources/list": {"resources": []},
            "prompts/list": {"prompts": []},
            "roots/list": {"roots": []},
            "ping": {},
        }
        self.results.update(results or {})
        self.errors = errors or {}
        self.raises = raises or {}
        self.statuses = statuses or {}
        self.session_id = session_id
        self.streaming = streaming
        self.legacy_event_ids = legacy_event_ids
        self.requests: List[httpx.Request] = []
        self._event_counter = 0

    @property
    def methods(self) -> List[str]:
        return [json.loads(request.content)["method"] for request in self.requests]

    def payload(self, index: int) -> Dict[str, Any]:
        return json.loads(self.requests[index].content)

    def _body(self, message: Dict[str, Any]) -> str:
        if not self.streaming:
            return json.dumps(message)
        lines = ["event: message"]
        if self.legacy_event_ids and self.session_id:
            lines.append(f"id: {self.session_id}_{self._event_counter}")
            self._event_counter += 1
        lines.append(f"data: {json.dumps(message)}")
        return "\n".join(lines) + "\n\n"

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = json.loads(request.content)
        method = body["method"]

        if method in self.raises:
            raise self.raises[method]
        if method in self.statuses:
            return httpx.Response(self.statuses[method], request=request)

        if method in self.errors:
            message = {"jsonrpc": "2.0", "id": body["id"], "error": self.errors[method]}
        elif method in self.results:
            message = {"jsonrpc": "2.0", "id": body["id"], "result": self.results[method]}
        else:
            message = {"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32601, "message": "Method not found"}}

        headers = {"content-type": "text/event-stream" if self.streaming else "application/json"}
        if method == "initialize" and self.session_id and not self.legacy_event_ids:
            headers["mcp-session-id"] = self.session_id
        return httpx.Response(200, text=self._body(message), headers=headers, request=request)


@pytest.fixture
def fake_server():
    """Provides a FakeMCPServer with default answers."""
    return FakeMCPServer()


@pytest.fixture
def server_factory():
    """Provides the FakeMCPServer class for tests needing custom answers."""
    return FakeMCPServer


@pytest.fixture
def tool_specs():
    """Provides the sample tool, resource and prompt entries."""
    return {
        "add": ADD_TOOL,
        "subtract": SUBTRACT_TOOL,
        "resource": MATH_RESOURCE,
        "prompt": MATH_PROMPT,
    }


def make_descriptor(**kwargs) -> CapabilityDescriptor:
    """Build a normalized descriptor exposing the single 'add' tool by default."""
    data = {
        "endpoint": ENDPOINT,
        "identity": ServerIdentity(name="My Server", version="1.0.0"),
        "protocol_version": "2024-11-05",
        "capabilities": {"tools": {"listChanged": True}},
        "tools": [dict(ADD_TOOL)],
    }
    data.update(kwargs)
    return CapabilityDescriptor(**data)


@pytest.fixture
def descriptor_factory():
    """Provides the make_descriptor helper."""
    return make_descriptor
