"""
Response body decoding for the streamable HTTP transport.

A server may answer a POST either with a bare JSON-RPC object or with a
text/event-stream body whose ``data`` field carries that same object.
Streamed bodies are read with httpx-sse; anything that is not an event
stream, or carries no JSON event, is parsed as plain JSON.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import httpx
from httpx_sse import EventSource, SSEError

from mcp_fingerprint.error_handling.exceptions import MalformedResponseError

logger = logging.getLogger(__name__)

# Prefix separating the session token from the per-event counter in
# legacy event ids ("<session>_<n>").
EVENT_ID_SEPARATOR = "_"


@dataclass(frozen=True)
class DecodedBody:
    """
    Result of decoding one HTTP response body.

    Attributes:
        message: The JSON-RPC response object.
        event_id: Id of the event that carried the message, if it was streamed.
        streamed: True when the body was an event stream.
    """

    message: Dict[str, Any]
    event_id: Optional[str] = None
    streamed: bool = False


def session_id_from_event_id(event_id: Optional[str]) -> Optional[str]:
    """Legacy session token: the part of an event id before its first separator."""
    if not event_id:
        return None
    token = event_id.split(EVENT_ID_SEPARATOR, 1)[0].strip()
    return token or None


async def _decode_events(response: httpx.Response, request_id: Optional[Union[int, str]]) -> Optional[DecodedBody]:
    """Choose the event answering ``request_id``, else the first one holding a JSON object."""
    first: Optional[DecodedBody] = None
    event_source = EventSource(response)
    async for sse in event_source.aiter_sse():
        if not sse.data:
            continue
        try:
            payload = json.loads(sse.data)
        except json.JSONDecodeError:
            logger.debug(f"Skipping non-JSON {sse.event} event: {sse.data[:80]!r}")
            continue
        if not isinstance(payload, dict):
            continue
        decoded = DecodedBody(message=payload, event_id=sse.id or None, streamed=True)
        if request_id is not None and payload.get("id") == request_id:
            return decoded
        if first is None:
            first = decoded
    return first


async def decode_response(response: httpx.Response, request_id: Optional[Union[int, str]] = None) -> DecodedBody:
    """
    Decode a received response in either encoding.

    Args:
        response: The HTTP response, body already read.
        request_id: Id of the request being answered, used to pick the right
            event when a stream carries more than one message.

    Returns:
        DecodedBody holding the JSON-RPC response object.

    Raises:
        MalformedResponseError: If the body is neither an event stream with a
            JSON payload nor a bare JSON object.
    """
    try:
        decoded = await _decode_events(response, request_id)
    except SSEError:
        decoded = None
    else:
        if decoded is not None:
            return decoded
        logger.debug("Event stream carried no JSON payload, falling back to plain parsing")

    text = response.text
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(
            f"Response is neither an event stream nor JSON: {text[:80]!r}", original_exception=e
        )
    if not isinstance(payload, dict):
        raise MalformedResponseError(f"Expected a JSON object, got {type(payload).__name__}")
    return DecodedBody(message=payload)
