"""Base utilities for walking and copying JSON-like OpenAPI trees.

Inlined documents can nest far deeper than the interpreter's recursion limit
(one level per ``$ref`` hop), so every walk here uses an explicit stack.
"""

from collections.abc import Iterator
from typing import Any

CIRCULAR_KEY = "circular"
REFERENCE_KEY = "reference"

Location = tuple[str | int, ...]


def copy_tree(data: Any) -> Any:
    """
    Copy a nested dict/list structure.

    Every dict and list in the result is a new object, so the copy can be
    mutated without touching the source. Scalars are immutable and shared.
    Tuples become lists since JSON has no tuple type.

    Args:
        data: The node being copied (can be dict, list, or scalar)

    Returns:
        An independent copy of the node

    Example:
        source = {"schema": {"type": "string"}}
        result = copy_tree(source)
        result["schema"]["type"] = "integer"
        # source["schema"]["type"] is still "string"
    """
    result: list[Any] = [None]
    stack: list[tuple[Any, Any, Any]] = [(data, result, 0)]
    while stack:
        node, parent, slot = stack.pop()
        if isinstance(node, dict):
            out: Any = dict.fromkeys(node)
            stack.extend((v, out, k) for k, v in node.items())
        elif isinstance(node, (list, tuple)):
            out = [None] * len(node)
            stack.extend((item, out, i) for i, item in enumerate(node))
        else:
            out = node
        parent[slot] = out
    return result[0]


def escape_segment(segment: str | int) -> str:
    """Escape a key for use inside a JSON Pointer (``~`` → ``~0``, ``/`` → ``~1``)."""
    return str(segment).replace("~", "~0").replace("/", "~1")


def unescape_segment(segment: str) -> str:
    """Undo ``escape_segment``: ``~1`` → ``/`` first, then ``~0`` → ``~``."""
    return segment.replace("~1", "/").replace("~0", "~")


def format_location(path: Location) -> str:
    """Join key segments into a JSON Pointer location like ``/paths/~1users/get``."""
    return "".join(f"/{escape_segment(segment)}" for segment in path)


def _walk(data: Any, path: Location) -> Iterator[tuple[Location, Any]]:
    """Yield ``(path, node)`` for every node, parents before children, in document order."""
    stack: list[tuple[Location, Any]] = [(path, data)]
    while stack:
        path, node = stack.pop()
        yield path, node
        if isinstance(node, dict):
            children = [(path + (k,), v) for k, v in node.items()]
        elif isinstance(node, list):
            children = [(path + (i,), item) for i, item in enumerate(node)]
        else:
            continue
        stack.extend(reversed(children))


def iter_refs(data: Any, path: Location = ()) -> Iterator[tuple[str, Any]]:
    """
    Yield ``(location, pointer)`` for every ``$ref`` node in the tree.

    The walk does not descend into reference nodes: siblings of ``$ref``
    are ignored by OpenAPI 3.0 tooling anyway.
    """
    stack: list[tuple[Location, Any]] = [(path, data)]
    while stack:
        path, node = stack.pop()
        if isinstance(node, dict):
            if "$ref" in node:
                yield format_location(path), node["$ref"]
                continue
            children = [(path + (k,), v) for k, v in node.items()]
        elif isinstance(node, list):
            children = [(path + (i,), item) for i, item in enumerate(node)]
        else:
            continue
        stack.extend(reversed(children))


def is_circular_marker(data: Any) -> bool:
    """Return True if ``data`` is a ``{"reference": ..., "circular": True}`` marker."""
    return (
        isinstance(data, dict)
        and data.get(CIRCULAR_KEY) is True
        and REFERENCE_KEY in data
        and len(data) == 2
    )


def iter_circular_markers(data: Any, path: Location = ()) -> Iterator[tuple[str, str]]:
    """Yield ``(location, pointer)`` for every circular marker in the tree."""
    for location, node in _walk(data, path):
        if is_circular_marker(node):
            yield format_location(location), node[REFERENCE_KEY]
