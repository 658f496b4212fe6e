"""Resolution of document-local JSON pointers like ``#/components/schemas/Foo``."""

from typing import Any, Final

from specinliner.inliner.tree import unescape_segment

POINTER_PREFIX: Final = "#/"

# Order matters: the circular-reference fallback searches buckets in this order.
COMPONENT_BUCKETS: Final = (
    "schemas",
    "responses",
    "examples",
    "parameters",
    "requestBodies",
    "headers",
    "links",
    "callbacks",
)


class _NotFound:
    """Sentinel type for pointers that do not resolve."""

    def __repr__(self) -> str:
        return "NOT_FOUND"


# `None` is a legal JSON value, so a dedicated sentinel marks a failed lookup.
NOT_FOUND: Final = _NotFound()


def resolve_pointer(pointer: Any, document: Any) -> Any:
    """
    Follow a local pointer through ``document`` by successive key lookups.

    Segments are unescaped per RFC 6901, so ``#/paths/~1pets/get`` looks up
    the ``/pets`` key.

    Args:
        pointer: The ``$ref`` value, e.g. ``#/components/responses/OK``
        document: The root document to resolve against

    Returns:
        The referenced value (returned as-is, not copied), or ``NOT_FOUND`` if
        the pointer is not a local ``#/`` pointer, a segment is missing, or
        an intermediate node is not a mapping.
    """
    if not isinstance(pointer, str) or not pointer.startswith(POINTER_PREFIX):
        return NOT_FOUND  # external refs are not our responsibility
    node: Any = document
    for segment in pointer[len(POINTER_PREFIX) :].split("/"):
        key = unescape_segment(segment)
        if not isinstance(node, dict) or key not in node:
            return NOT_FOUND
        node = node[key]
    return node


def split_component_pointer(pointer: Any) -> tuple[str, str] | None:
    """
    Return ``(bucket, name)`` for ``#/components/<bucket>/<name>``, else None.

    Segments are returned still escaped so they can be put back into a pointer.
    """
    if not isinstance(pointer, str):
        return None
    segments = pointer.split("/")
    if len(segments) != 4 or segments[0] != "#" or segments[1] != "components":
        return None
    return segments[2], segments[3]
