"""Syntax tree serialization to plain dicts and JSON.

Each node becomes ``{"kind": <class name>, <populated fields>..., "loc": {...}}``.
Absent fields are left out, so the output stays close to what was written.
Fields whose type separates "absent" from "empty" (``f()`` versus ``f``)
keep their empty lists.

Usage:
    from ttcn3.ast.serde import to_json, from_json, count_nodes
"""

from __future__ import annotations

import json
from dataclasses import asdict, fields
from typing import Any

from ttcn3.ast import nodes
from ttcn3.ast.nodes import Node, SourceLocation

NODE_TYPES: dict[str, type[Node]] = {
    name: obj for name, obj in vars(nodes).items()
    if isinstance(obj, type) and issubclass(obj, Node)
}


def _is_absent(value: Any, keep_empty: bool) -> bool:
    if value is None or value is False or value == "":
        return True
    return value == [] and not keep_empty


def _optional_list(node: Node, name: str) -> bool:
    """True for `list | None` fields, where an empty list is meaningful."""
    annotation = next(f.type for f in fields(node) if f.name == name)
    return isinstance(annotation, str) and annotation.startswith("list") and "None" in annotation


def to_dict(node: Node, locations: bool = True) -> dict[str, Any]:
    """Convert a node and its descendants to JSON-compatible dicts."""
    result: dict[str, Any] = {"kind": node.kind}
    for f in fields(node):
        if f.name == "loc":
            continue
        value = getattr(node, f.name)
        if _is_absent(value, keep_empty=isinstance(value, list) and _optional_list(node, f.name)):
            continue
        result[f.name] = _value_to_dict(value, locations)
    if locations:
        result["loc"] = asdict(node.loc)
    return result


def _value_to_dict(value: Any, locations: bool) -> Any:
    if isinstance(value, Node):
        return to_dict(value, locations)
    if isinstance(value, list):
        return [_value_to_dict(v, locations) for v in value]
    return value


def from_dict(data: dict[str, Any]) -> Node:
    """Rebuild a node from the output of `to_dict`.

    Raises:
        ValueError: if a dict names an unknown node kind.
    """
    kind = data.get("kind")
    node_type = NODE_TYPES.get(kind)
    if node_type is None:
        raise ValueError(f"Unknown node kind: {kind!r}")
    kwargs = {
        key: _value_from_dict(value)
        for key, value in data.items()
        if key not in ("kind", "loc")
    }
    if "loc" in data:
        kwargs["loc"] = SourceLocation(**data["loc"])
    return node_type(**kwargs)


def _value_from_dict(value: Any) -> Any:
    if isinstance(value, dict):
        return from_dict(value)
    if isinstance(value, list):
        return [_value_from_dict(v) for v in value]
    return value


def to_json(node: Node, indent: int | None = None, locations: bool = True) -> str:
    """Serialize a tree to a JSON string; compact unless `indent` is given."""
    separators = None if indent is not None else (",", ":")
    return json.dumps(to_dict(node, locations), indent=indent, separators=separators)


def from_json(data: str | bytes) -> Node:
    if isinstance(data, bytes):
        data = data.decode("utf-8")
    return from_dict(json.loads(data))


def count_nodes(data: dict[str, Any]) -> int:
    """Count the nodes in a serialized tree."""
    count = 1
    for key, value in data.items():
        if key == "loc":
            continue
        if isinstance(value, dict):
            count += count_nodes(value)
        elif isinstance(value, list):
            count += sum(count_nodes(v) for v in value if isinstance(v, dict))
    return count
