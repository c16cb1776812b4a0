"""Translate raw declaration data into typed ResourceNode values."""

from typing import Any, Dict, List
from .models import (
    BoolValue,
    Declarations,
    ListValue,
    MapValue,
    NumberValue,
    ReferenceValue,
    ResourceKind,
    ResourceNode,
    SecretValue,
    StringValue,
)
from ..utils.errors import DeclarationLoadError
from ..utils.logging import get_logger

logger = get_logger("ingest.declaration_normalizer")

_KIND_LOOKUP = {kind.value.lower(): kind for kind in ResourceKind}


def _normalize_kind(raw_kind: Any, resource_id: str) -> ResourceKind:
    """Match a kind name case-insensitively against the closed kind set."""
    kind = _KIND_LOOKUP.get(str(raw_kind).replace("_", "").lower())
    if kind is None:
        raise DeclarationLoadError(
            f"Resource '{resource_id}' has unknown kind '{raw_kind}'. "
            f"Supported kinds: {', '.join(k.value for k in ResourceKind)}"
        )
    return kind


def to_attribute_value(raw: Any, path: str):
    """
    Convert a raw YAML/JSON value into a tagged attribute value.
    
    ``{ref: <id>}`` becomes a reference and ``{secret: <NAME>}`` a secret
    reference; any other mapping is a map of nested values.
    """
    # bool before number: bool is a subclass of int
    if isinstance(raw, bool):
        return BoolValue(value=raw)
    if isinstance(raw, (int, float)):
        return NumberValue(value=raw)
    if isinstance(raw, str):
        return StringValue(value=raw)
    if isinstance(raw, list):
        return ListValue(items=[to_attribute_value(item, f"{path}[{i}]") for i, item in enumerate(raw)])
    if isinstance(raw, dict):
        if set(raw) == {"ref"}:
            return ReferenceValue(target=str(raw["ref"]))
        if set(raw) == {"secret"}:
            return SecretValue(name=str(raw["secret"]))
        return MapValue(entries={str(k): to_attribute_value(v, f"{path}.{k}") for k, v in raw.items()})
    raise DeclarationLoadError(f"Unsupported value at '{path}': {raw!r}")


def normalize_resource(raw: Dict[str, Any]) -> ResourceNode:
    """Build one ResourceNode; dependencies are explicit depends_on plus references."""
    resource_id = str(raw["id"])
    kind = _normalize_kind(raw["kind"], resource_id)
    attributes = {
        str(key): to_attribute_value(value, f"{resource_id}.{key}")
        for key, value in (raw.get("attributes") or {}).items()
    }
    
    node = ResourceNode(id=resource_id, kind=kind, attributes=attributes)
    
    depends_on: List[str] = []
    for dep in list(raw.get("depends_on") or []) + node.references():
        dep = str(dep)
        if dep not in depends_on:
            depends_on.append(dep)
    node.depends_on = depends_on
    return node


def normalize_declarations(data: Dict[str, Any]) -> Declarations:
    """
    Normalize loaded declarations, preserving declaration order.
    
    Raises:
        DeclarationLoadError: If a resource cannot be normalized
    """
    resources = [normalize_resource(raw) for raw in data.get("resources", [])]
    logger.debug(f"Normalized {len(resources)} resources")
    return Declarations(resources=resources)
