"""
Flatten a profile tree into display rows for the description feed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Optional
from urllib.parse import urlencode

from .policy import DEFAULT_DISPLAY_POLICY, DisplayPolicy
from .profile import ProfileNode


@dataclass(frozen=True)
class DisplayItem:
    id: str
    name: str
    value: Optional[str]
    depth: int
    has_children: bool
    graph_url: Optional[str]
    is_header: bool
    is_subheader: bool
    is_leaf: bool

    @property
    def depth_tag(self) -> str:
        return str(self.depth)

    @property
    def show_graph(self) -> bool:
        return self.graph_url is not None

    def to_dict(self) -> dict[str, Any]:
        """Feed row in the shape the mobile client reads."""
        out: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.value is not None:
            out["value"] = self.value
        out["type"] = self.depth_tag
        out["hasChildren"] = "true" if self.has_children else "false"
        if self.graph_url is not None:
            out["graphURL"] = self.graph_url
        out["showGraph"] = self.show_graph
        out["isHeader"] = self.is_header
        out["isSubheader"] = self.is_subheader
        out["isLeaf"] = self.is_leaf
        return out


def format_percentage(percentage: Optional[float]) -> Optional[str]:
    if percentage is None:
        return None
    return f"{percentage * 100:.2f}%"


def graph_url(base_url: str, node_id: str, session_id: str) -> str:
    return f"{base_url.rstrip('/')}/getGraph/{node_id}?{urlencode({'sessionId': session_id})}"


def iter_nodes(children: Iterable[ProfileNode], depth: int = 1) -> Iterator[tuple[ProfileNode, int]]:
    """Pre-order walk yielding (node, depth); the root's children are depth 1."""
    for node in children:
        yield node, depth
        yield from iter_nodes(node.child_nodes, depth + 1)


def _make_item(
    node: ProfileNode,
    depth: int,
    *,
    base_url: str,
    session_id: str,
    policy: DisplayPolicy,
) -> DisplayItem:
    has_children = node.has_children_field
    url = graph_url(base_url, node.id, session_id) if policy.is_chartable(node.id) else None
    return DisplayItem(
        id=node.id,
        name=node.name,
        value=format_percentage(node.percentage),
        depth=depth,
        has_children=has_children,
        graph_url=url,
        is_header=policy.is_header(depth),
        is_subheader=policy.is_subheader(depth, has_children),
        is_leaf=policy.is_leaf(depth, has_children),
    )


def flatten_profile(
    root_children: Iterable[ProfileNode],
    *,
    base_url: str,
    session_id: str,
    policy: DisplayPolicy = DEFAULT_DISPLAY_POLICY,
) -> list[DisplayItem]:
    """
    Turn the profile tree into an ordered list of display rows.

    Rows come out in pre-order. Rows at the policy's hidden depths are
    classified like any other and then left out of the result.
    """
    items = [
        _make_item(node, depth, base_url=base_url, session_id=session_id, policy=policy)
        for node, depth in iter_nodes(root_children)
    ]
    return [item for item in items if not policy.is_hidden(item.depth)]
