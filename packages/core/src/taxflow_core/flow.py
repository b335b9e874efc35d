"""Sankey flow data for a breakdown result.

Three layers: the taxpayer's income tax (layer 0) flows into spending
categories (layer 1), which flow into subcategories (layer 2). Rendering is
left to whatever draws the diagram; this module only shapes the data.
"""

from dataclasses import asdict, dataclass, field
from typing import Optional

from .models import BreakdownResult

SOURCE_NODE_NAME = "Your Federal Taxes"

# Used for categories whose budget entry has no color, by category index.
DEFAULT_PALETTE = (
    "#002868",  # navy blue
    "#BF0A30",  # red
    "#0047AB",  # cobalt blue
    "#C41E3A",
    "#003f87",
    "#cd2026",
    "#1c3a70",
    "#a8132e",  # crimson
    "#4d6fa3",
    "#e03c31",
)


def node_id(layer: int, name: str) -> str:
    return f"{layer}:{name}"


@dataclass
class FlowNode:
    id: str
    name: str
    value: int
    layer: int
    color: Optional[str] = None
    parent: Optional[str] = None


@dataclass
class FlowLink:
    source: str
    target: str
    value: int


@dataclass
class FlowDiagram:
    nodes: list[FlowNode] = field(default_factory=list)
    links: list[FlowLink] = field(default_factory=list)

    def node(self, layer: int, name: str) -> Optional[FlowNode]:
        wanted = node_id(layer, name)
        return next((n for n in self.nodes if n.id == wanted), None)

    def to_dict(self) -> dict:
        return {
            "nodes": [asdict(n) for n in self.nodes],
            "links": [asdict(link) for link in self.links],
        }


def build_flow(result: BreakdownResult) -> FlowDiagram:
    """Build Sankey nodes and links from a breakdown.

    Subcategories with the same name under different categories share one
    node whose value is the sum of their amounts; each still gets its own
    link from its category.
    """
    diagram = FlowDiagram()

    source = FlowNode(
        id=node_id(0, SOURCE_NODE_NAME),
        name=SOURCE_NODE_NAME,
        value=result.income_tax,
        layer=0,
    )
    diagram.nodes.append(source)

    subcategory_nodes: dict[str, FlowNode] = {}

    for idx, category in enumerate(result.category_breakdown):
        category_node = FlowNode(
            id=node_id(1, category.name),
            name=category.name,
            value=category.amount,
            layer=1,
            color=category.color or DEFAULT_PALETTE[idx % len(DEFAULT_PALETTE)],
        )
        diagram.nodes.append(category_node)
        diagram.links.append(FlowLink(source.id, category_node.id, category.amount))

        for sub in category.subcategories:
            sub_node = subcategory_nodes.get(sub.name)
            if sub_node is None:
                sub_node = FlowNode(
                    id=node_id(2, sub.name),
                    name=sub.name,
                    value=sub.amount,
                    layer=2,
                    parent=category.name,
                )
                subcategory_nodes[sub.name] = sub_node
                diagram.nodes.append(sub_node)
            else:
                sub_node.value += sub.amount

            diagram.links.append(FlowLink(category_node.id, sub_node.id, sub.amount))

    return diagram


__all__ = [
    "SOURCE_NODE_NAME",
    "DEFAULT_PALETTE",
    "FlowNode",
    "FlowLink",
    "FlowDiagram",
    "build_flow",
    "node_id",
]
