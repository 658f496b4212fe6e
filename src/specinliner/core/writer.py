"""Module for writing OpenAPI specification files."""

import json
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from specinliner.config import FileFormat


class NoAliasDumper(yaml.SafeDumper):
    """
    YAML dumper that never emits anchors or aliases.

    Inlined components are equal values at many places in the document;
    without this PyYAML would fold repeated objects back into `&id001`
    anchors, which defeats the point of a self-contained file.
    """

    def ignore_aliases(self, data):
        return True


def dump_spec(data: Any, format: FileFormat) -> str:
    """Serialize a specification to JSON or YAML text."""
    if format == FileFormat.JSON:
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    if format == FileFormat.YAML:
        return yaml.dump(
            data,
            Dumper=NoAliasDumper,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            indent=2,
        )
    raise ValueError(f"Unsupported file format: {format}")


def write_spec(data: Any, path: Path, format: FileFormat) -> None:
    """
    Write an OpenAPI specification to a JSON or YAML file.

    Args:
        data: The OpenAPI spec
        path: Path where the file should be written
        format: FileFormat indicating whether to write JSON or YAML

    Raises:
        ValueError: If an unsupported FileFormat is provided
        OSError: If writing to the file fails
    """
    text = dump_spec(data, format)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    logger.debug(f"Wrote {format.value} specification to {path}")
