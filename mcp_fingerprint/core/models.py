"""
Wire and data models for the MCP fingerprint comparator.
These types describe the JSON-RPC envelope spoken to a server and the
capability descriptors assembled from its answers.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

JSONRPC_VERSION = "2.0"


class JSONRPCRequest(BaseModel):
    """Request envelope sent by the protocol client."""
    jsonrpc: str = JSONRPC_VERSION
    id: int
    method: str
    params: Optional[Dict[str, Any]] = None

    def to_payload(self) -> Dict[str, Any]:
        # params is left out entirely when the call has none
        return self.model_dump(exclude_none=True)


class JSONRPCErrorObject(BaseModel):
    """Protocol-level error carried inside a response."""
    code: int
    message: str = ""
    data: Optional[Any] = None


class JSONRPCResponse(BaseModel):
    """Response envelope returned by a server."""
    model_config = ConfigDict(extra="ignore")

    jsonrpc: Optional[str] = None
    id: Optional[Union[int, str]] = None
    result: Optional[Any] = None
    error: Optional[JSONRPCErrorObject] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None


class NotReady(BaseModel):
    """Returned instead of a response when a call is issued before initialize succeeded."""
    method: str
    reason: str = "Client must be initialized before this call"


class ServerIdentity(BaseModel):
    """Server's self-reported identity from initialize.serverInfo."""
    name: str = ""
    version: str = ""


class RetrievedDescriptor(BaseModel):
    """
    Capability snapshot exactly as the protocol client retrieved it.

    A list is None when its call did not produce data; the normalizer is the
    only place where that absence turns into an empty list.
    """
    endpoint: str
    identity: ServerIdentity = Field(default_factory=ServerIdentity)
    protocol_version: str = ""
    capabilities: Optional[Dict[str, Any]] = None
    tools: Optional[List[Dict[str, Any]]] = None
    resources: Optional[List[Dict[str, Any]]] = None
    prompts: Optional[List[Dict[str, Any]]] = None
    roots: Optional[List[Dict[str, Any]]] = None
    ping_ok: Optional[bool] = None
    call_failures: Dict[str, str] = Field(default_factory=dict)
    error: Optional[str] = None


class CapabilityDescriptor(BaseModel):
    """Structurally complete descriptor, ready for fingerprinting and comparison."""
    endpoint: str
    identity: ServerIdentity = Field(default_factory=ServerIdentity)
    protocol_version: str = ""
    capabilities: Dict[str, Any] = Field(default_factory=dict)
    tools: List[Dict[str, Any]] = Field(default_factory=list)
    resources: List[Dict[str, Any]] = Field(default_factory=list)
    prompts: List[Dict[str, Any]] = Field(default_factory=list)
    roots: List[Dict[str, Any]] = Field(default_factory=list)
    ping_ok: Optional[bool] = None
    call_failures: Dict[str, str] = Field(default_factory=dict)
    defaulted_fields: List[str] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def name(self) -> str:
        return self.identity.name

    @property
    def version(self) -> str:
        return self.identity.version


class ComparisonResult(BaseModel):
    """Verdict of comparing two descriptors."""
    equivalent: bool
    fingerprint1: Optional[str] = None
    fingerprint2: Optional[str] = None
    differences: List[str] = Field(default_factory=list)


class ServerComparison(BaseModel):
    """Both normalized descriptors together with the comparison verdict."""
    server1: CapabilityDescriptor
    server2: CapabilityDescriptor
    result: ComparisonResult
