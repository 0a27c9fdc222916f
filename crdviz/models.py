"""Data model for CRD records, their schemas and rendered field views.

Records are built from the JSON form of ``CustomResourceDefinition`` objects
(camelCase keys, as returned by the API server). Schema nodes materialize
their children one level at a time, so a schema is only walked as deep as the
renderer asks for.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple


class NodeKind(str, Enum):
    OBJECT = "object"
    ARRAY = "array"
    SCALAR = "scalar"


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _union_types(data: Mapping[str, Any]) -> Tuple[str, ...]:
    """Collect member types of a type union (``type`` list, anyOf, oneOf)."""
    members: List[str] = []
    raw_type = data.get("type")
    if isinstance(raw_type, list):
        members.extend(t for t in raw_type if isinstance(t, str))
    for key in ("anyOf", "oneOf"):
        branches = data.get(key)
        if not isinstance(branches, list):
            continue
        for branch in branches:
            branch_type = _as_mapping(branch).get("type")
            if isinstance(branch_type, str):
                members.append(branch_type)
    unique: List[str] = []
    for member in members:
        if member != "null" and member not in unique:
            unique.append(member)
    return tuple(unique)


@dataclass(frozen=True)
class SchemaNode:
    """One node of an OpenAPI v3 schema.

    ``properties`` and ``items`` are exposed as properties that wrap the raw
    children on access; the raw children may be plain mappings or already
    built ``SchemaNode`` objects.
    """

    type: Optional[str] = None
    description: str = ""
    nullable: bool = False
    required: FrozenSet[str] = frozenset()
    format: Optional[str] = None
    enum: Optional[Tuple[Any, ...]] = None
    default: Any = None
    int_or_string: bool = False
    preserve_unknown_fields: bool = False
    union_types: Tuple[str, ...] = ()
    raw_properties: Optional[Mapping[str, Any]] = field(default=None, repr=False)
    raw_items: Optional[Any] = field(default=None, repr=False)

    @classmethod
    def from_dict(cls, data: Any) -> "SchemaNode":
        """Build a node from a JSON schema mapping.

        Malformed fragments degrade instead of raising: anything that is not
        a mapping becomes an untyped node, and ``properties`` or ``items`` of
        the wrong shape are treated as absent.
        """
        if isinstance(data, SchemaNode):
            return data
        if not isinstance(data, Mapping):
            return cls()

        raw_type = data.get("type")
        node_type = raw_type if isinstance(raw_type, str) and raw_type else None
        nullable = data.get("nullable") is True
        if isinstance(raw_type, list) and "null" in raw_type:
            nullable = True

        required = data.get("required")
        if isinstance(required, (list, tuple, set, frozenset)):
            required_names = frozenset(r for r in required if isinstance(r, str))
        else:
            required_names = frozenset()

        enum = data.get("enum")
        description = data.get("description")
        fmt = data.get("format")
        properties = data.get("properties")
        items = data.get("items")

        return cls(
            type=node_type,
            description=description if isinstance(description, str) else "",
            nullable=nullable,
            required=required_names,
            format=fmt if isinstance(fmt, str) and fmt else None,
            enum=tuple(enum) if isinstance(enum, list) else None,
            default=data.get("default"),
            int_or_string=data.get("x-kubernetes-int-or-string") is True,
            preserve_unknown_fields=data.get("x-kubernetes-preserve-unknown-fields") is True,
            union_types=() if node_type else _union_types(data),
            raw_properties=properties if isinstance(properties, Mapping) else None,
            raw_items=items if isinstance(items, (Mapping, SchemaNode)) else None,
        )

    @property
    def kind(self) -> NodeKind:
        if self.type == "array":
            return NodeKind.ARRAY
        if self.type is None and not self.int_or_string and not self.union_types:
            return NodeKind.OBJECT
        if self.type == "object":
            return NodeKind.OBJECT
        return NodeKind.SCALAR

    @property
    def properties(self) -> Optional[Dict[str, "SchemaNode"]]:
        if self.raw_properties is None:
            return None
        return {
            name: SchemaNode.from_dict(child)
            for name, child in self.raw_properties.items()
            if isinstance(name, str)
        }

    @property
    def items(self) -> Optional["SchemaNode"]:
        if self.raw_items is None:
            return None
        return SchemaNode.from_dict(self.raw_items)


@dataclass(frozen=True)
class CRDVersion:
    name: str
    served: bool = False
    storage: bool = False
    schema: Optional[SchemaNode] = None

    @classmethod
    def from_dict(cls, data: Any) -> "CRDVersion":
        data = _as_mapping(data)
        raw_schema = _as_mapping(data.get("schema")).get("openAPIV3Schema")
        return cls(
            name=str(data.get("name") or ""),
            served=data.get("served") is True,
            storage=data.get("storage") is True,
            schema=SchemaNode.from_dict(raw_schema) if isinstance(raw_schema, Mapping) else None,
        )


@dataclass(frozen=True)
class CRDRecord:
    """A registered CustomResourceDefinition, reduced to what crdviz shows."""

    name: str
    group: str
    kind: str = ""
    plural: str = ""
    scope: str = ""
    versions: Tuple[CRDVersion, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> "CRDRecord":
        data = _as_mapping(data)
        metadata = _as_mapping(data.get("metadata"))
        spec = _as_mapping(data.get("spec"))
        names = _as_mapping(spec.get("names"))
        versions = spec.get("versions")
        return cls(
            name=str(metadata.get("name") or ""),
            group=str(spec.get("group") or ""),
            kind=str(names.get("kind") or ""),
            plural=str(names.get("plural") or ""),
            scope=str(spec.get("scope") or ""),
            versions=tuple(
                CRDVersion.from_dict(v) for v in (versions if isinstance(versions, list) else [])
            ),
        )

    @property
    def storage_versions(self) -> List[CRDVersion]:
        return [v for v in self.versions if v.storage]

    def summary(self) -> Dict[str, Any]:
        storage = self.storage_versions
        return {
            "name": self.name,
            "group": self.group,
            "kind": self.kind,
            "plural": self.plural,
            "scope": self.scope,
            "storageVersion": storage[0].name if len(storage) == 1 else None,
        }


@dataclass
class FieldView:
    """A rendered schema field, ready for presentation."""

    field_name: str
    type_label: str
    description: str = ""
    required: bool = False
    children: List["FieldView"] = field(default_factory=list)
    format: Optional[str] = None
    enum: Optional[List[Any]] = None
    default: Any = None
    truncated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "fieldName": self.field_name,
            "typeLabel": self.type_label,
            "description": self.description,
            "required": self.required,
            "children": [child.to_dict() for child in self.children],
        }
        if self.format:
            result["format"] = self.format
        if self.enum is not None:
            result["enum"] = self.enum
        if self.default is not None:
            result["default"] = self.default
        if self.truncated:
            result["truncated"] = True
        return result
