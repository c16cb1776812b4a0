"""Pydantic models for declared resources and their tagged attribute values."""

from enum import Enum
from typing import Annotated, Any, Callable, Dict, Iterator, List, Literal, Union
from pydantic import BaseModel, Field


class ResourceKind(str, Enum):
    """Closed set of resource kinds the engine knows how to reconcile."""
    NETWORK = "Network"
    SUBNET = "Subnet"
    GATEWAY = "Gateway"
    ROUTE_TABLE = "RouteTable"
    SECURITY_GROUP = "SecurityGroup"
    INSTANCE = "Instance"
    LOAD_BALANCER = "LoadBalancer"
    TARGET_GROUP = "TargetGroup"
    DB_INSTANCE = "DbInstance"


class StringValue(BaseModel):
    type: Literal["string"] = "string"
    value: str


class NumberValue(BaseModel):
    type: Literal["number"] = "number"
    value: Union[int, float]


class BoolValue(BaseModel):
    type: Literal["bool"] = "bool"
    value: bool


class ReferenceValue(BaseModel):
    """Points at another declared resource; rendered as its provider id."""
    type: Literal["reference"] = "reference"
    target: str


class SecretValue(BaseModel):
    """Names a secret the provider client resolves; never holds the secret itself."""
    type: Literal["secret"] = "secret"
    name: str


class ListValue(BaseModel):
    type: Literal["list"] = "list"
    items: List["AttributeValue"] = Field(default_factory=list)


class MapValue(BaseModel):
    type: Literal["map"] = "map"
    entries: Dict[str, "AttributeValue"] = Field(default_factory=dict)


AttributeValue = Annotated[
    Union[StringValue, NumberValue, BoolValue, ReferenceValue, SecretValue, ListValue, MapValue],
    Field(discriminator="type"),
]

ListValue.model_rebuild()
MapValue.model_rebuild()

Attributes = Dict[str, AttributeValue]


def iter_references(value) -> Iterator[str]:
    """Yield every reference target inside a tagged value (depth-first)."""
    if isinstance(value, ReferenceValue):
        yield value.target
    elif isinstance(value, ListValue):
        for item in value.items:
            yield from iter_references(item)
    elif isinstance(value, MapValue):
        for item in value.entries.values():
            yield from iter_references(item)


def render_value(value, resolve_reference: Callable[[str], str]) -> Any:
    """Convert a tagged value to plain JSON data for a provider call."""
    if isinstance(value, (StringValue, NumberValue, BoolValue)):
        return value.value
    if isinstance(value, ReferenceValue):
        return resolve_reference(value.target)
    if isinstance(value, SecretValue):
        return {"secret": value.name}
    if isinstance(value, ListValue):
        return [render_value(item, resolve_reference) for item in value.items]
    if isinstance(value, MapValue):
        return {key: render_value(item, resolve_reference) for key, item in value.entries.items()}
    raise TypeError(f"Unsupported attribute value: {value!r}")


def render_attributes(attributes: Attributes, resolve_reference: Callable[[str], str]) -> Dict[str, Any]:
    """Render an attribute map, replacing references with provider ids."""
    return {key: render_value(value, resolve_reference) for key, value in attributes.items()}


class ResourceNode(BaseModel):
    """A single declared resource with typed attributes and dependencies."""
    id: str = Field(..., description="Unique resource identifier within the declarations")
    kind: ResourceKind = Field(..., description="Resource kind")
    attributes: Attributes = Field(default_factory=dict, description="Tagged attribute values")
    depends_on: List[str] = Field(default_factory=list, description="Ids of resources this one depends on")

    def references(self) -> List[str]:
        """Ids referenced from attribute values, in first-seen order."""
        seen: List[str] = []
        for value in self.attributes.values():
            for target in iter_references(value):
                if target not in seen:
                    seen.append(target)
        return seen


class Declarations(BaseModel):
    """Ordered collection of declared resources."""
    resources: List[ResourceNode] = Field(default_factory=list, description="Resources in declaration order")
