"""Module for loading OpenAPI specification files."""

import json
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from specinliner.config import FileFormat

_SUFFIXES = {
    ".json": FileFormat.JSON,
    ".yaml": FileFormat.YAML,
    ".yml": FileFormat.YAML,
}


def detect_format(path: Path) -> FileFormat:
    """
    Map a file extension to its FileFormat.

    Raises:
        ValueError: If the file extension is not .json, .yaml, or .yml
    """
    suffix = path.suffix.lower()
    try:
        return _SUFFIXES[suffix]
    except KeyError:
        raise ValueError(
            f"Unsupported file format: {suffix}. Expected .json, .yaml, or .yml"
        ) from None


def load_spec(path: Path) -> tuple[Any, FileFormat]:
    """
    Load an OpenAPI specification from a JSON or YAML file.

    The parsed value is returned whatever its shape; the inliner passes
    non-mapping documents through untouched.

    Args:
        path: Path to the OpenAPI specification file (.json, .yaml, or .yml)

    Returns:
        A tuple of (parsed_document, FileFormat)

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file extension is not .json, .yaml, or .yml
        json.JSONDecodeError: If JSON parsing fails
        yaml.YAMLError: If YAML parsing fails
    """
    if not path.exists():
        raise FileNotFoundError(f"OpenAPI file not found: {path}")

    file_format = detect_format(path)

    with open(path, encoding="utf-8") as f:
        if file_format == FileFormat.JSON:
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    logger.debug(f"Loaded {file_format.value} specification from {path}")
    return data, file_format
