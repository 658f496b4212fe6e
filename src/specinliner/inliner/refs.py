"""Recursive inlining of local ``$ref`` nodes.

Every reference node is replaced by a fresh copy of the value it points to,
itself inlined recursively. Cycle detection is branch-scoped: the visited set
only holds the pointers expanded on the path from the starting node down to
the current one, so two siblings referencing the same component never see
each other's expansions.

When a pointer shows up again on its own branch, the cycle is broken with:

1. a same-named entry from a different component bucket, if one exists
   (``#/components/schemas/Pet`` → ``#/components/responses/Pet``). This is a
   best-effort guess at what the author meant, not a correctness guarantee,
   and can be turned off with ``recover_circular=False``.
2. otherwise a ``{"reference": <pointer>, "circular": True}`` marker.

Nothing in here raises on document content: dangling pointers are logged and
left in place, cycles degrade to a substitute or a marker.
"""

from typing import Any

from loguru import logger

from specinliner.inliner.pointer import (
    COMPONENT_BUCKETS,
    NOT_FOUND,
    resolve_pointer,
    split_component_pointer,
)
from specinliner.inliner.tree import CIRCULAR_KEY, REFERENCE_KEY, copy_tree

_EMPTY: frozenset[str] = frozenset()


def circular_marker(pointer: str) -> dict:
    """Build the placeholder emitted for a reference cycle that could not be broken."""
    return {REFERENCE_KEY: pointer, CIRCULAR_KEY: True}


def find_alternative(pointer: str, root: dict) -> tuple[str, Any] | None:
    """
    Look for an entry with the same name in another component bucket.

    Only ``#/components/<bucket>/<name>`` pointers qualify. Buckets are tried
    in ``COMPONENT_BUCKETS`` order, skipping the pointer's own bucket, and the
    first mapping found wins.

    Args:
        pointer: The pointer that closed a cycle
        root: The document to search

    Returns:
        ``(alternative_pointer, value)`` or None if nothing plausible exists
    """
    parts = split_component_pointer(pointer)
    if parts is None:
        return None
    original_bucket, name = parts
    for bucket in COMPONENT_BUCKETS:
        if bucket == original_bucket:
            continue
        candidate = f"#/components/{bucket}/{name}"
        value = resolve_pointer(candidate, root)
        if isinstance(value, dict):
            return candidate, value
    return None


def _follow(
    node: Any,
    root: dict,
    visited: frozenset[str],
    recovered: frozenset[str],
    recover_circular: bool,
) -> tuple[Any, frozenset[str], frozenset[str], bool]:
    """
    Follow a chain of reference nodes until a non-reference value is reached.

    Returns ``(value, visited, recovered, final)``. ``final`` is True when
    ``value`` is a finished result (dangling copy or circular marker) that
    must not be walked any further.
    """
    while isinstance(node, dict) and "$ref" in node:
        pointer = node["$ref"]

        if not isinstance(pointer, str):
            logger.warning(f"Could not resolve $ref: {pointer!r} is not a string")
            return copy_tree(node), visited, recovered, True

        if pointer in visited:
            logger.warning(f"Circular reference detected for {pointer}")
            alternative = find_alternative(pointer, root) if recover_circular else None
            # An alternative already being expanded higher up this branch would loop forever.
            if alternative is None or alternative[0] in recovered:
                logger.error(
                    f"Could not resolve circular reference {pointer}, leaving a circular marker"
                )
                return circular_marker(pointer), visited, recovered, True
            alt_pointer, node = alternative
            logger.info(f"Inlining {alt_pointer} in place of circular {pointer}")
            visited, recovered = _EMPTY, recovered | {alt_pointer}
            continue

        target = resolve_pointer(pointer, root)
        if target is NOT_FOUND:
            logger.warning(f"Could not resolve $ref: {pointer}")
            return copy_tree(node), visited, recovered, True

        # Only the expansion below sees the pointer; siblings keep their own set.
        node, visited = target, visited | {pointer}

    return node, visited, recovered, False


def _inline(
    data: Any,
    root: dict,
    visited: frozenset[str],
    recovered: frozenset[str],
    recover_circular: bool,
) -> Any:
    # Walked with an explicit stack so long $ref chains cannot exhaust the
    # interpreter's recursion limit. Sources are only read, never mutated:
    # every dict and list in the result is built here.
    result: list[Any] = [None]
    stack: list[tuple[Any, frozenset[str], frozenset[str], Any, Any]] = [
        (data, visited, recovered, result, 0)
    ]

    while stack:
        node, visited, recovered, parent, slot = stack.pop()
        node, visited, recovered, final = _follow(
            node, root, visited, recovered, recover_circular
        )

        if final or not isinstance(node, (dict, list)):
            parent[slot] = node
            continue

        if isinstance(node, list):
            out: Any = [None] * len(node)
            children = list(enumerate(node))
        else:
            out = dict.fromkeys(node)
            children = list(node.items())
        parent[slot] = out

        # Reversed so that items are processed, and logged, in document order.
        for key, value in reversed(children):
            stack.append((value, visited, recovered, out, key))

    return result[0]


def inline_refs(
    data: Any,
    root: dict,
    visited: frozenset[str] = _EMPTY,
    recover_circular: bool = True,
) -> Any:
    """
    Return a copy of ``data`` with every local ``$ref`` inlined.

    Args:
        data: The subtree to process (not mutated)
        root: The full original document pointers are resolved against
        visited: Pointers already being expanded on the current branch
        recover_circular: Try a same-named entry from another component bucket
            before falling back to a circular marker

    Returns:
        A new subtree; primitives are returned as they are

    Example:
        root = {"components": {"responses": {"OK": {"description": "fine"}}}}
        inline_refs({"200": {"$ref": "#/components/responses/OK"}}, root)
        # {"200": {"description": "fine"}}
    """
    return _inline(data, root, frozenset(visited), _EMPTY, recover_circular)
