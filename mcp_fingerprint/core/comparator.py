"""
Comparator for two normalized capability descriptors.

The verdict is fingerprint equality. When the fingerprints differ, a
field-level walk produces human-readable difference strings; that walk is
diagnostic only and never changes the verdict.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from mcp_fingerprint.core.canonical import (
    PROMPT_FIELDS,
    RESOURCE_FIELDS,
    TOOL_FIELDS,
    JsonValue,
    project_entry,
    serialize_canonical,
    sort_entries,
    to_structured_value,
)
from mcp_fingerprint.core.fingerprint import compute_fingerprint
from mcp_fingerprint.core.models import CapabilityDescriptor, ComparisonResult

logger = logging.getLogger(__name__)

# (attribute, singular label, plural label, projected fields, keys naming an entry)
LIST_COMPARISONS = (
    ("tools", "Tool", "Tools", TOOL_FIELDS, ("name",)),
    ("resources", "Resource", "Resources", RESOURCE_FIELDS, ("name",)),
    ("prompts", "Prompt", "Prompts", PROMPT_FIELDS, ("name",)),
    ("roots", "Root", "Roots", None, ("name", "uri")),
)


def _error_difference(error1: Optional[str], error2: Optional[str]) -> str:
    return f"Server errors: {error1 or 'none'} vs {error2 or 'none'}"


def _prepare_entries(entries: List[Dict[str, Any]], fields: Optional[Sequence[str]], name_keys: Sequence[str], path: str, sort_keys: bool) -> List[Dict[str, JsonValue]]:
    if fields is None:
        prepared = [to_structured_value(entry, f"{path}[{i}]", sort_keys) for i, entry in enumerate(entries)]
    else:
        prepared = [project_entry(entry, fields, f"{path}[{i}]", sort_keys) for i, entry in enumerate(entries)]
    return sort_entries(prepared, name_keys=name_keys, sort_keys=sort_keys)


def _entry_label(label: str, entry: Dict[str, JsonValue], name_keys: Sequence[str], position: int) -> str:
    for key in name_keys:
        value = entry.get(key)
        if value not in (None, ""):
            return f'{label} "{value}"'
    return f"{label} #{position + 1}"


def _compare_lists(differences: List[str], descriptor1: CapabilityDescriptor, descriptor2: CapabilityDescriptor, sort_keys: bool) -> None:
    for attribute, singular, plural, fields, name_keys in LIST_COMPARISONS:
        entries1 = getattr(descriptor1, attribute)
        entries2 = getattr(descriptor2, attribute)
        if len(entries1) != len(entries2):
            differences.append(f"{plural} count: {len(entries1)} vs {len(entries2)}")
            continue

        prepared1 = _prepare_entries(entries1, fields, name_keys, f"$.{attribute}", sort_keys)
        prepared2 = _prepare_entries(entries2, fields, name_keys, f"$.{attribute}", sort_keys)
        for position, (entry1, entry2) in enumerate(zip(prepared1, prepared2)):
            if serialize_canonical(entry1, sort_keys) != serialize_canonical(entry2, sort_keys):
                differences.append(f"{_entry_label(singular, entry1, name_keys, position)} configuration differs")


def describe_differences(descriptor1: CapabilityDescriptor, descriptor2: CapabilityDescriptor, sort_nested_keys: bool = True) -> List[str]:
    """
    List field-level differences between two descriptors.

    If either descriptor failed retrieval, only the reachability difference
    is reported: the failed side has nothing to compare.
    """
    differences: List[str] = []

    if descriptor1.error or descriptor2.error:
        differences.append(_error_difference(descriptor1.error, descriptor2.error))
        return differences

    if descriptor1.name != descriptor2.name:
        differences.append(f'Name: "{descriptor1.name}" vs "{descriptor2.name}"')
    if descriptor1.version != descriptor2.version:
        differences.append(f'Version: "{descriptor1.version}" vs "{descriptor2.version}"')
    if descriptor1.protocol_version != descriptor2.protocol_version:
        differences.append(f'Protocol Version: "{descriptor1.protocol_version}" vs "{descriptor2.protocol_version}"')

    capabilities1 = to_structured_value(descriptor1.capabilities, "$.capabilities", sort_nested_keys)
    capabilities2 = to_structured_value(descriptor2.capabilities, "$.capabilities", sort_nested_keys)
    if serialize_canonical(capabilities1, sort_nested_keys) != serialize_canonical(capabilities2, sort_nested_keys):
        differences.append("Capabilities differ")

    _compare_lists(differences, descriptor1, descriptor2, sort_nested_keys)
    return differences


def compare_descriptors(descriptor1: CapabilityDescriptor, descriptor2: CapabilityDescriptor, sort_nested_keys: bool = True) -> ComparisonResult:
    """
    Compare two normalized descriptors.

    Args:
        descriptor1: First server's descriptor.
        descriptor2: Second server's descriptor.
        sort_nested_keys: Passed through to canonicalization.

    Returns:
        ComparisonResult with both fingerprints, the verdict and, when not
        equivalent, the list of differences.
    """
    fingerprint1 = compute_fingerprint(descriptor1, sort_nested_keys)
    fingerprint2 = compute_fingerprint(descriptor2, sort_nested_keys)
    equivalent = fingerprint1 is not None and fingerprint1 == fingerprint2

    differences: List[str] = []
    if not equivalent:
        differences = describe_differences(descriptor1, descriptor2, sort_nested_keys)
        logger.info(f"Servers differ: {len(differences)} difference(s) found")
    else:
        logger.info("Both servers have identical configurations")

    return ComparisonResult(
        equivalent=equivalent,
        fingerprint1=fingerprint1,
        fingerprint2=fingerprint2,
        differences=differences,
    )
