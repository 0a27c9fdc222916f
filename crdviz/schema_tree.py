"""Render CRD schemas into presentation-ready field trees.

Given the OpenAPI v3 schema of a CRD version, :func:`render` produces a
:class:`~crdviz.models.FieldView` tree: one view per property, ordered by
field name, with array element schemas shown as a single ``[]`` child.

Schemas come from cluster-stored data and may be malformed or nested
arbitrarily deep, so rendering stops at a fixed depth ceiling and marks the
cut with a truncation view instead of descending further. Structural gaps
(missing ``properties`` or ``items``) render as leaves.
"""

from typing import List

from crdviz.models import FieldView, NodeKind, SchemaNode

MAX_DEPTH = 32

ITEMS_FIELD_NAME = "[]"
TRUNCATED_FIELD_NAME = "..."
TRUNCATED_TYPE_LABEL = "truncated"


def type_label(node: SchemaNode) -> str:
    """Human readable type of a node, e.g. ``"string (nullable)"``."""
    if node.type:
        label = node.type
    elif node.int_or_string:
        label = "integer|string"
    elif node.union_types:
        label = "|".join(node.union_types)
    else:
        label = "object"
    if node.nullable:
        label += " (nullable)"
    return label


def truncation_marker(max_depth: int) -> FieldView:
    return FieldView(
        field_name=TRUNCATED_FIELD_NAME,
        type_label=TRUNCATED_TYPE_LABEL,
        description=f"Nesting deeper than {max_depth} levels is not shown",
        truncated=True,
    )


def _has_children(node: SchemaNode) -> bool:
    if node.kind is NodeKind.OBJECT:
        return bool(node.raw_properties)
    if node.kind is NodeKind.ARRAY:
        return node.raw_items is not None
    return False


def _render_children(node: SchemaNode, depth: int, max_depth: int) -> List[FieldView]:
    if node.kind is NodeKind.OBJECT:
        properties = node.properties or {}
        return [
            render(
                properties[name],
                field_name=name,
                required_by_parent=name in node.required,
                depth=depth + 1,
                max_depth=max_depth,
            )
            for name in sorted(properties)
        ]
    if node.kind is NodeKind.ARRAY:
        items = node.items
        if items is None:
            return []
        return [render(items, ITEMS_FIELD_NAME, False, depth + 1, max_depth)]
    return []


def render(
    node: SchemaNode,
    field_name: str = "",
    required_by_parent: bool = False,
    depth: int = 0,
    max_depth: int = MAX_DEPTH,
) -> FieldView:
    """Render ``node`` and its descendants.

    Args:
        node: Schema node to render.
        field_name: Name the parent uses for this node.
        required_by_parent: Whether the parent lists ``field_name`` as required.
        depth: Depth of ``node``; the root is 0.
        max_depth: Nodes at this depth or deeper get a truncation marker
            as their only child instead of their real children.

    Returns:
        The rendered view. The input is never modified, and identical input
        yields an identical tree.
    """
    if max_depth < 1:
        raise ValueError(f"max_depth must be a positive integer, got {max_depth}")

    view = FieldView(
        field_name=field_name,
        type_label=type_label(node),
        description=node.description,
        required=required_by_parent,
        format=node.format,
        enum=list(node.enum) if node.enum is not None else None,
        default=node.default,
    )
    if depth >= max_depth:
        if _has_children(node):
            view.children = [truncation_marker(max_depth)]
        return view

    view.children = _render_children(node, depth, max_depth)
    return view


def count_fields(view: FieldView) -> int:
    """Number of real (non-marker) views in the tree rooted at ``view``."""
    total = 0
    pending = [view]
    while pending:
        current = pending.pop()
        if current.truncated:
            continue
        total += 1
        pending.extend(current.children)
    return total
