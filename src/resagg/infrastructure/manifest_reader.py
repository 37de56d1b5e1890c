"""Manifest source reading and YAML/JSON decoding."""

import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

STDIN_SOURCE = "-"


class ManifestDecodeError(ValueError):
    """Raised when manifest text is not a usable YAML/JSON document."""


class ManifestReadError(RuntimeError):
    """Raised when a manifest source cannot be read."""


def read_manifest_source(source: str) -> str:
    """Read manifest text from a file path, or stdin for ``-``."""
    if source == STDIN_SOURCE:
        return sys.stdin.read()
    try:
        return Path(source).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestReadError(f"cannot read manifest {source}: {exc}") from exc


def _expand_document(document: Any, index: int) -> list[dict[str, Any]]:
    if not isinstance(document, Mapping):
        raise ManifestDecodeError(
            f"document #{index} is not a mapping ({type(document).__name__})"
        )
    if document.get("kind") != "List":
        return [dict(document)]

    items = document.get("items") or []
    if not isinstance(items, list):
        raise ManifestDecodeError(f"document #{index}: List items must be a list")
    expanded: list[dict[str, Any]] = []
    for item in items:
        expanded.extend(_expand_document(item, index))
    return expanded


def load_manifests(text: str) -> list[dict[str, Any]]:
    """Decode every document of a YAML/JSON stream into a mapping.

    Empty documents are skipped and ``kind: List`` wrappers are flattened.
    """
    try:
        documents = list(yaml.safe_load_all(text))
    except yaml.YAMLError as exc:
        raise ManifestDecodeError(f"invalid manifest YAML: {exc}") from exc

    manifests: list[dict[str, Any]] = []
    for index, document in enumerate(documents):
        if document is None:
            continue
        manifests.extend(_expand_document(document, index))

    if not manifests:
        raise ManifestDecodeError("no manifest documents found")
    return manifests
