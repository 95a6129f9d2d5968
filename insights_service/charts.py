"""
Locate one trait in the profile tree and build doughnut chart data for it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from .flatten import iter_nodes
from .policy import DEFAULT_CHART_STYLE, ChartStyle
from .profile import ProfileNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChartSlice:
    value: str
    color: str
    highlight: str
    label: str

    def to_dict(self) -> dict[str, str]:
        return {"value": self.value, "color": self.color, "highlight": self.highlight, "label": self.label}


@dataclass(frozen=True)
class ChartData:
    slices: tuple[ChartSlice, ...]
    options: Mapping[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"data": [s.to_dict() for s in self.slices], "options": dict(self.options)}


def find_node(target_id: str, root_children: Iterable[ProfileNode]) -> Optional[ProfileNode]:
    """
    Return the first node (pre-order) whose id is `target_id`.

    A match with exactly one child stands in for that child, so wrapper nodes
    such as "needs" can be addressed by their own id. Returns None on a miss.
    """
    for node, _depth in iter_nodes(root_children):
        if node.id != target_id:
            continue
        if len(node.child_nodes) == 1:
            return node.child_nodes[0]
        return node
    return None


def build_chart_slices(node: ProfileNode, style: ChartStyle = DEFAULT_CHART_STYLE) -> list[ChartSlice]:
    slices: list[ChartSlice] = []
    for child in node.child_nodes:
        if child.percentage is None:
            logger.warning("Skipping chart slice %r under %r: no percentage", child.id, node.id)
            continue
        index = len(slices)
        slices.append(
            ChartSlice(
                value=f"{child.percentage * 100:.2f}",
                color=style.color_at(index),
                highlight=style.highlight_at(index),
                label=child.name,
            )
        )
    return slices


def build_chart(node: ProfileNode, style: ChartStyle = DEFAULT_CHART_STYLE) -> ChartData:
    return ChartData(slices=tuple(build_chart_slices(node, style)), options=style.options)
