"""
Loader for test data roots.

Walks a directory tree and parses it into a ``DirNode`` model.

Layout::

    users/                      ← group
      _context.yaml             ← GroupConfig (summary, cleaner, template, setup flow)
      create.yaml               ← Case
      delete.yaml               ← Case
      admin/                    ← nested group
        _context.yaml
        promote.yaml

Case file::

    description: create a user
    flow:
      - description: create
        request: {method: POST, path: /users, body: {name: alice}}
        response: {statusCode: 201, variables: {userId: body.id}}
      - description: read back
        request: {path: "/users/{{ userId }}"}
        response: {statusCode: 200, body: {name: alice}}

JSON files are accepted wherever YAML is, since every JSON document is
valid YAML.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError

from arbor.core.errors import DataLoadError
from arbor.core.logging import get_logger
from arbor.data.models import Case, DirNode, GroupConfig

logger = get_logger(__name__)

CONTEXT_STEM = "_context"
DATA_SUFFIXES = frozenset({".yaml", ".yml", ".json"})


def _read_document(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise DataLoadError(f"Invalid YAML in {path}: {e}", path=str(path), cause=e)
    except OSError as e:
        raise DataLoadError(f"Cannot read {path}: {e}", path=str(path), cause=e)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise DataLoadError(
            f"Expected a mapping in {path}, got {type(data).__name__}", path=str(path)
        )
    return data


def _parse(model: type[BaseModel], path: Path) -> Any:
    try:
        return model.model_validate(_read_document(path))
    except ValidationError as e:
        raise DataLoadError(f"Failed to parse {path}: {e}", path=str(path), cause=e)


def _load_dir(path: Path) -> DirNode:
    node = DirNode(path=path)

    entries = sorted(p for p in path.iterdir() if not p.name.startswith("."))
    for entry in entries:
        if entry.is_dir():
            child = _load_dir(entry)
            node.dirs[entry.name] = child
            node.case_num += child.case_num
        elif entry.suffix in DATA_SUFFIXES:
            if entry.stem == CONTEXT_STEM:
                node.config = _parse(GroupConfig, entry)
            else:
                node.files[entry.name] = _parse(Case, entry)
                node.case_num += 1

    return node


def load_tree(root: Path | str) -> DirNode:
    """
    Load a data root into a directory model.

    Args:
        root: Directory to load

    Returns:
        The root ``DirNode``; ``case_num`` counts every case in the tree

    Raises:
        DataLoadError: Missing root, unreadable file or invalid schema
    """
    root = Path(root)
    if not root.is_dir():
        raise DataLoadError(f"Data root not found: {root}", path=str(root))

    logger.debug("loader.load_tree", path=str(root))
    node = _load_dir(root)
    logger.info(
        "loader.loaded",
        path=str(root),
        summary=node.config.summary,
        cases=node.case_num,
    )
    return node


__all__ = ["CONTEXT_STEM", "DATA_SUFFIXES", "load_tree"]
