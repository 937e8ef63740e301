"""
Protocol client for MCP servers reachable over streamable HTTP.

One client instance talks to one endpoint. It owns the request-id counter
and the session token for that endpoint, issues calls strictly one at a
time, and assembles a RetrievedDescriptor from the fixed
initialize / list / ping call sequence.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import httpx
from pydantic import ValidationError

from mcp_fingerprint.core.event_stream import decode_response, session_id_from_event_id
from mcp_fingerprint.core.models import (
    JSONRPCRequest,
    JSONRPCResponse,
    NotReady,
    RetrievedDescriptor,
    ServerIdentity,
)
from mcp_fingerprint.error_handling.exceptions import (
    HTTPStatusError,
    MalformedResponseError,
    MCPFingerprintError,
    NetworkError,
    RequestTimeoutError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_PROTOCOL_VERSION = "2024-11-05"
DEFAULT_CLIENT_NAME = "mcp-server-comparator"
DEFAULT_CLIENT_VERSION = "1.0.0"

INITIALIZE = "initialize"
PING = "ping"
TOOLS_LIST = "tools/list"
RESOURCES_LIST = "resources/list"
PROMPTS_LIST = "prompts/list"
ROOTS_LIST = "roots/list"

ACCEPT_HEADER = "application/json, text/event-stream"


class SessionIdSource(str, Enum):
    """Where the session token is taken from on the initialize response."""
    HEADER = "header"
    EVENT_ID = "event_id"


DEFAULT_SESSION_HEADERS = {
    SessionIdSource.HEADER: "mcp-session-id",
    SessionIdSource.EVENT_ID: "X-Session-ID",
}


class ClientState(Enum):
    CREATED = "created"
    INITIALIZING = "initializing"
    INITIALIZED = "initialized"
    ERRORED = "errored"
    DONE = "done"


@dataclass
class Session:
    """Per-endpoint state: request-id counter, session token and initialized flag."""

    next_request_id: int = 1
    session_id: Optional[str] = None
    initialized: bool = False

    def allocate_id(self) -> int:
        request_id = self.next_request_id
        self.next_request_id += 1
        return request_id


def mask_session_id(session_id: Optional[str]) -> str:
    if not session_id:
        return "<none>"
    if len(session_id) <= 8:
        return session_id
    return f"{session_id[:8]}..."


class MCPProtocolClient:
    """
    Speaks JSON-RPC over HTTP POST to a single MCP endpoint.

    Manages an `httpx.AsyncClient` and the session established by the
    initialize call. Listing calls are refused with a NotReady value until
    initialize has succeeded.
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = DEFAULT_TIMEOUT,
        session_id_source: SessionIdSource = SessionIdSource.HEADER,
        session_header: Optional[str] = None,
        protocol_version: str = DEFAULT_PROTOCOL_VERSION,
        client_name: str = DEFAULT_CLIENT_NAME,
        client_version: str = DEFAULT_CLIENT_VERSION,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the protocol client.

        Args:
            endpoint: Full URL of the MCP endpoint (e.g. http://localhost:8080/mcp).
            timeout: Per-call timeout in seconds.
            session_id_source: Whether the session token comes from the
                initialize response header or from the leading segment of the
                streamed event id.
            session_header: Header name used to send (and, for the header
                variant, receive) the session token. Defaults per variant.
            protocol_version: Protocol version offered in initialize.
            client_name: clientInfo.name sent in initialize.
            client_version: clientInfo.version sent in initialize.
            http_client: Optional pre-built client; the caller then owns it.
        """
        self.endpoint = endpoint
        self.timeout = timeout
        self.session_id_source = SessionIdSource(session_id_source)
        self.session_header = session_header or DEFAULT_SESSION_HEADERS[self.session_id_source]
        self.protocol_version = protocol_version
        self.client_name = client_name
        self.client_version = client_version

        self.session = Session()
        self.state = ClientState.CREATED

        self._owns_client = http_client is None
        self.async_client = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_config(cls, endpoint: str, config: Any) -> "MCPProtocolClient":
        """Build a client for ``endpoint`` from a ComparatorConfig."""
        return cls(
            endpoint,
            timeout=config.timeout,
            session_id_source=config.session_id_source,
            session_header=config.session_header,
            protocol_version=config.protocol_version,
            client_name=config.client_name,
            client_version=config.client_version,
        )

    async def __aenter__(self) -> "MCPProtocolClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self.async_client.aclose()

    @property
    def session_id(self) -> Optional[str]:
        return self.session.session_id

    @property
    def initialized(self) -> bool:
        return self.session.initialized

    def _get_headers(self, method: str) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": ACCEPT_HEADER,
        }
        if self.session.session_id and method != INITIALIZE:
            headers[self.session_header] = self.session.session_id
        return headers

    def _adopt_session_id(self, session_id: Optional[str]) -> None:
        # The first token wins; later responses never replace it.
        if self.session.session_id or not session_id:
            return
        self.session.session_id = session_id
        logger.info(f"Session ID acquired from {self.session_id_source.value}: {mask_session_id(session_id)}")

    async def invoke(self, method: str, params: Optional[Dict[str, Any]] = None) -> JSONRPCResponse:
        """
        Send one JSON-RPC call and return the decoded response.

        A response carrying an ``error`` object is returned, not raised; the
        caller decides what a protocol-level error means.

        Raises:
            RequestTimeoutError: The call exceeded the configured timeout.
            NetworkError: The request could not be delivered.
            HTTPStatusError: The server answered with a non-success status.
            MalformedResponseError: The body could not be decoded.
        """
        request = JSONRPCRequest(id=self.session.allocate_id(), method=method, params=params)
        logger.debug(f"Sending {method} (id={request.id}) to {self.endpoint}")

        try:
            response = await asyncio.wait_for(
                self.async_client.post(
                    self.endpoint,
                    json=request.to_payload(),
                    headers=self._get_headers(method),
                ),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise RequestTimeoutError(f"{method} timed out after {self.timeout}s", original_exception=e)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise NetworkError(f"{method} failed: {e}", original_exception=e)

        if not response.is_success:
            raise HTTPStatusError(response.status_code, response.reason_phrase)

        if method == INITIALIZE and self.session_id_source is SessionIdSource.HEADER:
            self._adopt_session_id(response.headers.get(self.session_header))

        decoded = await decode_response(response, request.id)

        if method == INITIALIZE and self.session_id_source is SessionIdSource.EVENT_ID:
            self._adopt_session_id(session_id_from_event_id(decoded.event_id))

        try:
            return JSONRPCResponse.model_validate(decoded.message)
        except ValidationError as e:
            raise MalformedResponseError(f"Invalid JSON-RPC response to {method}", original_exception=e)

    async def initialize(self) -> JSONRPCResponse:
        """Open the session. Listing calls become available only if this succeeds."""
        self.state = ClientState.INITIALIZING
        params = {
            "protocolVersion": self.protocol_version,
            "capabilities": {
                "roots": {"listChanged": True},
                "sampling": {},
            },
            "clientInfo": {
                "name": self.client_name,
                "version": self.client_version,
            },
        }
        try:
            response = await self.invoke(INITIALIZE, params)
        except MCPFingerprintError:
            self.state = ClientState.ERRORED
            raise

        if response.is_error:
            self.state = ClientState.ERRORED
        else:
            self.session.initialized = True
            self.state = ClientState.INITIALIZED
        return response

    async def _invoke_when_ready(self, method: str) -> Union[JSONRPCResponse, NotReady]:
        if not self.session.initialized:
            logger.warning(f"Refusing {method} on {self.endpoint}: client is not initialized")
            return NotReady(method=method)
        return await self.invoke(method)

    async def list_tools(self) -> Union[JSONRPCResponse, NotReady]:
        return await self._invoke_when_ready(TOOLS_LIST)

    async def list_resources(self) -> Union[JSONRPCResponse, NotReady]:
        return await self._invoke_when_ready(RESOURCES_LIST)

    async def list_prompts(self) -> Union[JSONRPCResponse, NotReady]:
        return await self._invoke_when_ready(PROMPTS_LIST)

    async def list_roots(self) -> Union[JSONRPCResponse, NotReady]:
        return await self._invoke_when_ready(ROOTS_LIST)

    async def ping(self) -> JSONRPCResponse:
        return await self.invoke(PING)

    async def _collect(self, method: str, key: str, call, descriptor: RetrievedDescriptor) -> Optional[List[Dict[str, Any]]]:
        """Run one listing call; any failure is recorded and yields None."""
        try:
            response = await call()
        except MCPFingerprintError as e:
            return self._record_failure(descriptor, method, e.message)

        if isinstance(response, NotReady):
            return self._record_failure(descriptor, method, response.reason)
        if response.is_error:
            return self._record_failure(descriptor, method, response.error.message)

        result = response.result if isinstance(response.result, dict) else {}
        items = result.get(key)
        if not isinstance(items, list):
            return self._record_failure(descriptor, method, f"response has no '{key}' list")

        entries = [item for item in items if isinstance(item, dict)]
        if len(entries) != len(items):
            logger.warning(f"Dropped {len(items) - len(entries)} non-object entries from {method} on {self.endpoint}")
        logger.info(f"Found {len(entries)} {key} on {self.endpoint}")
        for entry in entries:
            logger.debug(f"  {key[:-1]} {entry.get('name', entry.get('uri'))}: {entry.get('description', '')}")
        return entries

    def _record_failure(self, descriptor: RetrievedDescriptor, method: str, message: str) -> Optional[List[Dict[str, Any]]]:
        logger.warning(f"Failed {method} on {self.endpoint}: {message}")
        descriptor.call_failures[method] = message
        return None

    async def _check_ping(self, descriptor: RetrievedDescriptor) -> bool:
        try:
            response = await self.ping()
        except MCPFingerprintError as e:
            self._record_failure(descriptor, PING, e.message)
            return False
        if response.is_error:
            self._record_failure(descriptor, PING, response.error.message)
            return False
        logger.info(f"Ping successful on {self.endpoint}")
        return True

    def _fail(self, descriptor: RetrievedDescriptor, message: str) -> RetrievedDescriptor:
        logger.error(f"Failed to connect to MCP server at {self.endpoint}: {message}")
        self.state = ClientState.DONE
        return RetrievedDescriptor(
            endpoint=descriptor.endpoint,
            call_failures={INITIALIZE: message},
            error=message,
        )

    async def retrieve_descriptor(self) -> RetrievedDescriptor:
        """
        Run the full call sequence and assemble a descriptor.

        initialize must succeed; otherwise the descriptor only carries
        ``error``. Each later call is isolated: its failure leaves that field
        unset and is recorded in ``call_failures``.
        """
        descriptor = RetrievedDescriptor(endpoint=self.endpoint)
        logger.info(f"Initializing MCP connection to {self.endpoint}...")

        try:
            init_response = await self.initialize()
        except MCPFingerprintError as e:
            return self._fail(descriptor, e.message)
        if init_response.is_error:
            return self._fail(descriptor, f"Initialize failed: {init_response.error.message}")

        init_result = init_response.result if isinstance(init_response.result, dict) else {}
        server_info = init_result.get("serverInfo")
        if not isinstance(server_info, dict):
            server_info = {}
        capabilities = init_result.get("capabilities")
        descriptor.protocol_version = str(init_result.get("protocolVersion") or "")
        descriptor.capabilities = capabilities if isinstance(capabilities, dict) else {}
        descriptor.identity = ServerIdentity(
            name=str(server_info.get("name") or ""),
            version=str(server_info.get("version") or ""),
        )
        logger.info(f"Connected to MCP server: {descriptor.identity.name or 'Unknown'}")

        descriptor.tools = await self._collect(TOOLS_LIST, "tools", self.list_tools, descriptor)
        descriptor.resources = await self._collect(RESOURCES_LIST, "resources", self.list_resources, descriptor)
        descriptor.prompts = await self._collect(PROMPTS_LIST, "prompts", self.list_prompts, descriptor)
        descriptor.roots = await self._collect(ROOTS_LIST, "roots", self.list_roots, descriptor)
        descriptor.ping_ok = await self._check_ping(descriptor)

        self.state = ClientState.DONE
        return descriptor


async def get_server_descriptor(endpoint: str, **kwargs) -> RetrievedDescriptor:
    """Retrieve the descriptor of one endpoint with a short-lived client."""
    async with MCPProtocolClient(endpoint, **kwargs) as client:
        return await client.retrieve_descriptor()
