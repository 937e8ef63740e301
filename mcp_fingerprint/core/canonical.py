"""
Canonical form of a capability descriptor.

The canonical value keeps only the fields that define a server's capability
contract (identity, tools, resources, prompts, capability flags), projects
each list entry to its declared fields and orders entries by name, so that
its serialization depends on content alone.
"""

import json
import logging
import math
import unicodedata
from typing import Any, Dict, Iterable, List, Sequence, Tuple, Union

from mcp_fingerprint.core.models import CapabilityDescriptor
from mcp_fingerprint.error_handling.exceptions import CanonicalizationError

logger = logging.getLogger(__name__)

JsonValue = Union[None, bool, int, float, str, List["JsonValue"], Dict[str, "JsonValue"]]

TOOL_FIELDS = ("name", "description", "inputSchema")
RESOURCE_FIELDS = ("name", "description", "mimeType", "uriTemplate")
PROMPT_FIELDS = ("name", "description", "arguments")

# Integral floats below this magnitude are written as integers (1.0 == 1).
_MAX_SAFE_INTEGER = 2 ** 53


def to_structured_value(value: Any, path: str = "$", sort_keys: bool = True) -> JsonValue:
    """
    Convert an arbitrary decoded JSON value into a plain structured value.

    Args:
        value: The value to convert.
        path: JSON path of ``value``, used in error messages.
        sort_keys: Rebuild every object with its keys in sorted order.

    Returns:
        The converted value: None, bool, int, float, str, list or dict.

    Raises:
        CanonicalizationError: If the value (or anything nested in it) has no
            JSON representation, e.g. NaN, bytes, sets or non-string keys.
    """
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise CanonicalizationError(f"Non-finite number {value!r}", path=path)
        if value.is_integer() and abs(value) < _MAX_SAFE_INTEGER:
            return int(value)
        return value
    if isinstance(value, (list, tuple)):
        return [to_structured_value(item, f"{path}[{index}]", sort_keys) for index, item in enumerate(value)]
    if isinstance(value, dict):
        for key in value:
            if not isinstance(key, str):
                raise CanonicalizationError(f"Object key {key!r} is not a string", path=path)
        keys = sorted(value) if sort_keys else list(value)
        return {key: to_structured_value(value[key], f"{path}.{key}", sort_keys) for key in keys}
    raise CanonicalizationError(f"Unserializable value of type {type(value).__name__}", path=path)


def serialize_canonical(value: JsonValue, sort_keys: bool = True) -> bytes:
    """Compact UTF-8 JSON encoding used both for hashing and for tie-breaking."""
    try:
        text = json.dumps(
            value,
            sort_keys=sort_keys,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise CanonicalizationError(f"Cannot serialize canonical value: {e}", original_exception=e)
    return text.encode("utf-8")


def collation_key(name: str) -> Tuple[str, str, str]:
    """
    Locale-independent approximation of locale-aware string ordering.

    Letters compare without regard to accents or case first, then by case
    (lowercase before uppercase), so the order is the same on every machine.

    Punctuation and symbols are not given collation weights: they compare by
    code point after casefolding. This differs from ICU collation, e.g.
    "a-b" sorts before "a_b" here while ICU puts "a_b" first.
    """
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), name.casefold(), name.swapcase()


def _entry_name(entry: Dict[str, JsonValue], keys: Sequence[str] = ("name",)) -> str:
    for key in keys:
        value = entry.get(key)
        if value is not None:
            return value if isinstance(value, str) else str(value)
    return ""


def sort_entries(entries: Iterable[Dict[str, JsonValue]], name_keys: Sequence[str] = ("name",), sort_keys: bool = True) -> List[Dict[str, JsonValue]]:
    """Order entries by name; entries sharing a name are ordered by their serialization."""
    return sorted(
        entries,
        key=lambda entry: (collation_key(_entry_name(entry, name_keys)), serialize_canonical(entry, sort_keys)),
    )


def project_entry(entry: Dict[str, Any], fields: Sequence[str], path: str, sort_keys: bool = True) -> Dict[str, JsonValue]:
    """Keep only ``fields`` of a list entry; fields the server did not send stay absent."""
    return {
        field: to_structured_value(entry[field], f"{path}.{field}", sort_keys)
        for field in fields
        if field in entry
    }


def _canonical_list(entries: List[Dict[str, Any]], fields: Sequence[str], path: str, sort_keys: bool) -> List[Dict[str, JsonValue]]:
    projected = [
        project_entry(entry, fields, f"{path}[{index}]", sort_keys)
        for index, entry in enumerate(entries)
    ]
    return sort_entries(projected, sort_keys=sort_keys)


def canonicalize_descriptor(descriptor: CapabilityDescriptor, sort_nested_keys: bool = True) -> Dict[str, JsonValue]:
    """
    Build the canonical value of a descriptor.

    protocol_version, roots, endpoint and error are not part of it.

    Args:
        descriptor: A normalized descriptor.
        sort_nested_keys: Sort object keys at every depth. When False, keys
            inside schemas, arguments and capabilities keep the order the
            server sent them in.

    Returns:
        Dict with name, version, tools, resources, prompts and capabilities.
    """
    return {
        "name": descriptor.identity.name,
        "version": descriptor.identity.version,
        "tools": _canonical_list(descriptor.tools, TOOL_FIELDS, "$.tools", sort_nested_keys),
        "resources": _canonical_list(descriptor.resources, RESOURCE_FIELDS, "$.resources", sort_nested_keys),
        "prompts": _canonical_list(descriptor.prompts, PROMPT_FIELDS, "$.prompts", sort_nested_keys),
        "capabilities": to_structured_value(descriptor.capabilities, "$.capabilities", sort_nested_keys),
    }
