"""
Display and chart configuration.

These are plain immutable values handed to the flattener and the chart
builder, so callers (and tests) can swap them without touching module state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


CHARTABLE_IDS = frozenset(
    {
        "personality",
        "Openness",
        "Conscientiousness",
        "Extraversion",
        "Agreeableness",
        "Neuroticism",
        "needs",
        "values",
    }
)


@dataclass(frozen=True)
class DisplayPolicy:
    """
    How flattened profile rows are classified.

    The analysis service always returns four meaningful tiers: trait groups
    (1), a structural wrapper (2), traits (3) and facets (4). Tier 2 rows only
    carry nesting and are dropped from the output.
    """

    chartable_ids: frozenset[str] = CHARTABLE_IDS
    header_depth: int = 1
    subheader_depth: int = 3
    leaf_depths: tuple[int, ...] = (3, 4)
    hidden_depths: tuple[int, ...] = (2,)

    def is_header(self, depth: int) -> bool:
        return depth == self.header_depth

    def is_subheader(self, depth: int, has_children: bool) -> bool:
        return depth == self.subheader_depth and has_children

    def is_leaf(self, depth: int, has_children: bool) -> bool:
        return not has_children and depth in self.leaf_depths

    def is_hidden(self, depth: int) -> bool:
        return depth in self.hidden_depths

    def is_chartable(self, node_id: str) -> bool:
        return node_id in self.chartable_ids


def _default_chart_options() -> Mapping[str, Any]:
    # Chart.js 1.x doughnut options, passed through to the page untouched.
    return MappingProxyType(
        {
            "scaleShowLabelBackdrop": True,
            "scaleBackdropColor": "rgba(255,255,255,0.75)",
            "scaleBeginAtZero": True,
            "scaleBackdropPaddingY": 2,
            "scaleBackdropPaddingX": 2,
            "scaleShowLine": True,
            "segmentShowStroke": True,
            "segmentStrokeColor": "#fff",
            "segmentStrokeWidth": 2,
            "animationSteps": 100,
            "animationEasing": "easeOutBounce",
            "animateRotate": True,
            "animateScale": False,
            "legendTemplate": (
                '<ul class="<%=name.toLowerCase()%>-legend">'
                "<% for (var i=0; i<segments.length; i++){%>"
                '<li><span style="background-color:<%=segments[i].fillColor%>"></span>'
                "<%if(segments[i].label){%><%=segments[i].label%><%}%></li><%}%></ul>"
            ),
        }
    )


@dataclass(frozen=True)
class ChartStyle:
    colors: tuple[str, ...] = ("#4178BD", "#9854D4", "#01B4A0", "#D74009", "#323232", "#EDC01C")
    highlights: tuple[str, ...] = ("#5596E6", "#AF6EE8", "#41D6C3", "#FF5006", "#555555", "#FAE249")
    options: Mapping[str, Any] = field(default_factory=_default_chart_options)

    def __post_init__(self) -> None:
        if not self.colors or not self.highlights:
            raise ValueError("ChartStyle needs at least one color and one highlight")

    def color_at(self, index: int) -> str:
        return self.colors[index % len(self.colors)]

    def highlight_at(self, index: int) -> str:
        return self.highlights[index % len(self.highlights)]


DEFAULT_DISPLAY_POLICY = DisplayPolicy()
DEFAULT_CHART_STYLE = ChartStyle()
