"""Tests for trait lookup and chart data."""
import pytest

from insights_service.charts import build_chart, build_chart_slices, find_node
from insights_service.policy import DEFAULT_CHART_STYLE, ChartStyle
from insights_service.profile import ProfileNode, parse_profile, root_children


@pytest.fixture
def sample_children(sample_response):
    return root_children(parse_profile(sample_response))


def test_find_unwraps_single_child(sample_children):
    node = find_node("personality", sample_children)
    assert node.id == "Openness_parent"
    assert [c.id for c in node.children] == ["Openness", "Conscientiousness"]


def test_find_returns_match_with_several_children():
    needs = ProfileNode("needs", "Needs", children=tuple(ProfileNode(f"n{i}", f"N{i}", 0.1) for i in range(3)))
    assert find_node("needs", (needs,)) is needs


def test_find_values_wrapper():
    inner = ProfileNode("Y", "Y", children=(ProfileNode("a", "A", 0.5), ProfileNode("b", "B", 0.5)))
    values = ProfileNode("values", "Values", children=(inner,))
    assert find_node("values", (values,)) is inner


def test_find_nested_trait(sample_children):
    node = find_node("Openness", sample_children)
    assert node.id == "Openness"
    assert len(node.children) == 2


def test_find_first_match_in_preorder():
    first = ProfileNode("dup", "first")
    second = ProfileNode("dup", "second")
    tree = (ProfileNode("a", "A", children=(first,)), second)
    assert find_node("dup", tree) is first


def test_find_leaf_returns_itself(sample_children):
    assert find_node("Intellect", sample_children).percentage == pytest.approx(0.4212)


def test_find_missing_returns_none(sample_children):
    assert find_node("doesNotExist", sample_children) is None
    assert find_node("anything", ()) is None


def test_chart_slices(sample_children):
    slices = build_chart_slices(find_node("needs", sample_children))
    assert [s.to_dict() for s in slices] == [
        {"value": "50.00", "color": "#4178BD", "highlight": "#5596E6", "label": "Challenge"},
        {"value": "25.00", "color": "#9854D4", "highlight": "#AF6EE8", "label": "Closeness"},
        {"value": "75.00", "color": "#01B4A0", "highlight": "#41D6C3", "label": "Curiosity"},
    ]


def test_palette_cycles_after_six():
    node = ProfileNode("p", "P", children=tuple(ProfileNode(f"c{i}", f"C{i}", 0.1 * i) for i in range(8)))
    slices = build_chart_slices(node)
    assert len(slices) == 8
    assert slices[6].color == slices[0].color
    assert slices[6].highlight == slices[0].highlight
    assert slices[7].color == slices[1].color


def test_child_without_percentage_is_skipped():
    node = ProfileNode("p", "P", children=(
        ProfileNode("a", "A", 0.5),
        ProfileNode("b", "B"),
        ProfileNode("c", "C", 0.25),
    ))
    slices = build_chart_slices(node)
    assert [s.label for s in slices] == ["A", "C"]
    assert slices[1].color == DEFAULT_CHART_STYLE.colors[1]


def test_leaf_node_has_no_slices():
    assert build_chart_slices(ProfileNode("x", "X", 0.3)) == []


def test_build_chart_carries_options(sample_children):
    chart = build_chart(find_node("Openness", sample_children)).to_dict()
    assert [d["label"] for d in chart["data"]] == ["Adventurousness", "Intellect"]
    assert chart["options"]["animationEasing"] == "easeOutBounce"
    assert chart["options"]["segmentStrokeColor"] == "#fff"


def test_custom_style():
    style = ChartStyle(colors=("red",), highlights=("pink",), options={"animateScale": True})
    node = ProfileNode("p", "P", children=(ProfileNode("a", "A", 0.5), ProfileNode("b", "B", 0.5)))
    chart = build_chart(node, style).to_dict()
    assert [d["color"] for d in chart["data"]] == ["red", "red"]
    assert chart["options"] == {"animateScale": True}


def test_empty_palette_rejected():
    with pytest.raises(ValueError):
        ChartStyle(colors=())
