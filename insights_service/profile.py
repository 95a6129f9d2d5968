"""
Personality profile tree as returned by the analysis service.

The analysis response is validated here, once, so the rest of the service can
rely on typed `ProfileNode` values instead of probing raw JSON.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional, Union


class ProfileFormatError(ValueError):
    pass


@dataclass(frozen=True)
class ProfileNode:
    id: str
    name: str
    percentage: Optional[float] = None
    # None when the source had no "children" field at all, () when it was empty.
    children: Optional[tuple[ProfileNode, ...]] = None

    @property
    def has_children_field(self) -> bool:
        return self.children is not None

    @property
    def child_nodes(self) -> tuple[ProfileNode, ...]:
        return self.children or ()


def _as_percentage(value: Any, *, node_id: str) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ProfileFormatError(f"node {node_id!r}: percentage must be a number, got {value!r}")
    return float(value)


def parse_profile_node(obj: Any, *, path: str = "tree") -> ProfileNode:
    if not isinstance(obj, dict):
        raise ProfileFormatError(f"{path}: expected JSON object, got {type(obj).__name__}")

    node_id = obj.get("id")
    if not isinstance(node_id, str):
        raise ProfileFormatError(f"{path}: missing string 'id'")

    name = obj.get("name", node_id)
    if not isinstance(name, str):
        raise ProfileFormatError(f"{path}: 'name' must be a string")

    percentage = _as_percentage(obj.get("percentage"), node_id=node_id)

    children: Optional[tuple[ProfileNode, ...]] = None
    if "children" in obj:
        raw_children = obj["children"]
        if not isinstance(raw_children, list):
            raise ProfileFormatError(f"{path}: 'children' must be a list")
        children = tuple(
            parse_profile_node(child, path=f"{path}.{node_id}[{i}]") for i, child in enumerate(raw_children)
        )

    return ProfileNode(id=node_id, name=name, percentage=percentage, children=children)


def parse_profile(payload: Union[str, dict[str, Any]]) -> ProfileNode:
    """
    Parse an analysis response into its root `ProfileNode`.

    Accepts either the decoded response or the JSON string kept in the session
    store. The root itself is structural; callers usually want `root_children`.
    """
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            raise ProfileFormatError(f"Invalid profile JSON: {e}") from e

    if not isinstance(payload, dict):
        raise ProfileFormatError("Expected top-level JSON object in profile response")
    if "tree" not in payload:
        raise ProfileFormatError("Missing required key 'tree' in profile response")
    return parse_profile_node(payload["tree"])


def root_children(root: ProfileNode) -> tuple[ProfileNode, ...]:
    return root.child_nodes
