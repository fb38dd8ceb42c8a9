"""Build an in-memory host from a JSON option document."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from result import Err, Ok, Result

from chooser.data.host import ListSelectHost
from chooser.data.parser import host_tree_from_rows
from chooser.models.options import HostGroup, HostNode, HostOption

logger = logging.getLogger(__name__)


def parse_host_nodes(raw_nodes: list[Any]) -> list[HostNode]:
    """Validate raw option rows, skipping invalid ones."""
    nodes: list[HostNode] = []
    for position, raw in enumerate(raw_nodes):
        try:
            match raw:
                case {"label": _, "options": list()}:
                    nodes.append(HostGroup.model_validate(raw))
                case dict():
                    nodes.append(HostOption.model_validate(raw))
                case _:
                    logger.warning("Skipping non-object option entry at position %d", position)
        except ValidationError:
            logger.warning("Skipping invalid option entry at position %d", position)
    if nodes and all(isinstance(node, HostOption) for node in nodes):
        if any(node.group_label is not None for node in nodes):  # type: ignore[union-attr]
            return host_tree_from_rows(nodes)  # type: ignore[arg-type]
    return nodes


def load_host(path: Path, *, multiple: bool | None = None) -> Result[ListSelectHost, str]:
    """Read a JSON list of options, or an object with an ``options`` list."""
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        return Err(f"Cannot read {path}: {exc}")
    except json.JSONDecodeError as exc:
        return Err(f"Invalid JSON in {path}: {exc}")

    settings: dict[str, Any] = {}
    if isinstance(document, dict):
        settings = document
        document = document.get("options", [])
    if not isinstance(document, list):
        return Err(f"Expected a list of options in {path}")

    nodes = parse_host_nodes(document)
    cardinality = settings.get("cardinality")
    classes = settings.get("classes") or ()
    if isinstance(classes, str):
        classes = classes.split()
    host = ListSelectHost(
        nodes,
        multiple=bool(settings.get("multiple", False)) if multiple is None else multiple,
        disabled=bool(settings.get("disabled", False)),
        placeholder=str(settings.get("placeholder") or ""),
        no_results_text=str(settings.get("no_results_text") or ""),
        classes=classes,
        cardinality=cardinality if isinstance(cardinality, int) else None,
        name=path.stem,
    )
    logger.debug("Loaded %d options from %s", host.option_count, path)
    return Ok(host)
