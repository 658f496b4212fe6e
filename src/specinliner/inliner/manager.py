"""Whole-document inlining.

This module coordinates:
1. Inlining every ``$ref`` under ``paths`` against the original document
2. Emptying the component registry, which is consumed by the inlining
3. Loading and saving specification files around that transform
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger
from rich.console import Console

from specinliner.config import InlinerSettings
from specinliner.core.loader import load_spec
from specinliner.core.writer import write_spec
from specinliner.inliner.pointer import NOT_FOUND, resolve_pointer
from specinliner.inliner.refs import inline_refs
from specinliner.inliner.tree import copy_tree, iter_circular_markers, iter_refs


@dataclass
class InlineSummary:
    """What is left under ``paths`` after inlining."""

    dangling: list[tuple[str, Any]] = field(default_factory=list)
    circular: list[tuple[str, str]] = field(default_factory=list)

    @property
    def is_self_contained(self) -> bool:
        return not self.dangling and not self.circular


def inline_all_components(spec: Any, recover_circular: bool = True) -> Any:
    """
    Return a copy of ``spec`` with every ``$ref`` under ``paths`` inlined.

    Only ``paths`` is scanned; every other top-level key is carried over from
    a copy of the input as it is. ``components`` is always reset to ``{}``.
    The input is never mutated.

    Args:
        spec: The OpenAPI specification
        recover_circular: Allow the same-name/other-bucket fallback for cycles

    Returns:
        A new, self-contained specification, or ``spec`` itself if it is not
        a mapping

    Example:
        Before:
        {
          "paths": {"/x": {"get": {"responses": {
              "200": {"$ref": "#/components/responses/OK"}}}}},
          "components": {"responses": {"OK": {"description": "fine"}}}
        }

        After:
        {
          "paths": {"/x": {"get": {"responses": {
              "200": {"description": "fine"}}}}},
          "components": {}
        }
    """
    if not isinstance(spec, dict):
        return spec

    result = copy_tree(spec)

    if "paths" in result:
        logger.debug("Inlining $ref nodes under paths")
        result["paths"] = inline_refs(
            result["paths"], spec, recover_circular=recover_circular
        )

    result["components"] = {}
    return result


def summarize_inlining(spec: Any) -> InlineSummary:
    """Collect the dangling references and circular markers left under ``paths``."""
    summary = InlineSummary()
    if not isinstance(spec, dict):
        return summary
    paths = spec.get("paths")
    summary.dangling = [
        ("/paths" + location, pointer) for location, pointer in iter_refs(paths)
    ]
    summary.circular = [
        ("/paths" + location, pointer) for location, pointer in iter_circular_markers(paths)
    ]
    return summary


def check_refs(spec: Any) -> list[tuple[str, Any, bool]]:
    """
    List every ``$ref`` under ``paths`` with whether it resolves.

    Returns:
        ``(location, pointer, resolves)`` triples in document order
    """
    if not isinstance(spec, dict):
        return []
    return [
        ("/paths" + location, pointer, resolve_pointer(pointer, spec) is not NOT_FOUND)
        for location, pointer in iter_refs(spec.get("paths"))
    ]


def prepare_spec_for_save(spec: Any, settings: InlinerSettings) -> Any:
    """
    Apply the inline-on-save policy to a specification about to be persisted.

    When ``settings.inline_components_on_save`` is off the spec is returned
    unchanged.
    """
    if not settings.inline_components_on_save:
        return spec
    logger.info("Inlining components for OpenAPI spec on save")
    return inline_all_components(spec, recover_circular=settings.recover_circular)


def inline_spec_file(
    input_path: Path,
    output_path: Path,
    settings: InlinerSettings | None = None,
    console: Console | None = None,
) -> InlineSummary:
    """
    Load an OpenAPI spec, inline all components, and save the result.

    The output is written in the input's format.

    Args:
        input_path: Path to the input OpenAPI specification file (.json, .yaml, or .yml)
        output_path: Path where the inlined specification will be written
        settings: Inliner settings (defaults from the environment)
        console: Optional Rich Console for progress output

    Returns:
        Summary of what could not be inlined

    Raises:
        FileNotFoundError: If the input file doesn't exist
        ValueError: If the input file has an unsupported extension
        json.JSONDecodeError: If JSON parsing fails
        yaml.YAMLError: If YAML parsing fails
        OSError: If writing to output_path fails
    """
    settings = settings or InlinerSettings()
    spec, file_format = load_spec(input_path)

    if console:
        console.print(f"  [dim]→ inlining {input_path.name}[/dim]")
    inlined = inline_all_components(spec, recover_circular=settings.recover_circular)

    write_spec(inlined, output_path, file_format)
    return summarize_inlining(inlined)
