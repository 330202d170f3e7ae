from __future__ import annotations

from typing import Dict, List, Mapping, Sequence

from .flags import DEFAULT_TITLE, Combination


FORMATS = ("dot", "json", "graphml")


def names_label(names: Sequence[str]) -> str:
    return ", ".join(names)


def _dot_quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def export_dot(results: Mapping[Combination, Sequence[str]], *, title: str = DEFAULT_TITLE) -> str:
    lines = [
        "digraph {",
        f'\tlabel="{_dot_quote(title)}";',
        "\tlabelloc=top;",
        "\trankdir=LR;",
    ]
    for combo, names in results.items():
        src = _dot_quote(combo.label)
        dst = _dot_quote(names_label(names))
        lines.append(f'\t"{src}" -> "{dst}"')
    lines.append("}")
    return "\n".join(lines) + "\n"


def build_graph(
    results: Mapping[Combination, Sequence[str]], *, title: str = DEFAULT_TITLE
) -> Dict[str, object]:
    nodes: Dict[str, Dict[str, str]] = {}
    edge_list: List[Dict[str, object]] = []

    def add_node(node_id: str, node_type: str, label: str) -> None:
        if node_id not in nodes:
            nodes[node_id] = {"id": node_id, "type": node_type, "label": label}

    for combo, names in results.items():
        src = f"opts:{combo.label}"
        dst = f"gc:{names_label(names)}"
        add_node(src, "options", combo.label)
        add_node(dst, "collectors", names_label(names))
        edge_list.append(
            {
                "source": src,
                "target": dst,
                "flags": combo.tokens,
                "collectors": list(names),
            }
        )

    return {
        "directed": True,
        "label": title,
        "nodes": list(nodes.values()),
        "edges": edge_list,
    }


def export_graph_json(graph: Dict[str, object]) -> str:
    import json

    return json.dumps(graph, ensure_ascii=True, indent=2)


def export_graphml(graph: Dict[str, object]) -> str:
    def esc(value: object) -> str:
        text = "" if value is None else str(value)
        return (
            text.replace("&", "&amp;")
            .replace("<", "&lt;")
            .replace(">", "&gt;")
            .replace('"', "&quot;")
            .replace("'", "&apos;")
        )

    keys = [
        ("g_label", "graph", "label", "string"),
        ("n_label", "node", "label", "string"),
        ("n_type", "node", "type", "string"),
        ("e_flags", "edge", "flags", "string"),
        ("e_collectors", "edge", "collectors", "string"),
    ]

    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<graphml xmlns="http://graphml.graphdrawing.org/xmlns">',
    ]
    for key_id, scope, name, key_type in keys:
        lines.append(
            f'<key id="{key_id}" for="{scope}" attr.name="{name}" attr.type="{key_type}"/>'
        )
    lines.append('<graph id="G" edgedefault="directed">')
    lines.append(f'  <data key="g_label">{esc(graph.get("label"))}</data>')

    for node in graph.get("nodes", []):
        node_id = esc(node.get("id"))
        lines.append(f'<node id="{node_id}">')
        lines.append(f'  <data key="n_label">{esc(node.get("label"))}</data>')
        lines.append(f'  <data key="n_type">{esc(node.get("type"))}</data>')
        lines.append("</node>")

    for edge in graph.get("edges", []):
        src = esc(edge.get("source"))
        dst = esc(edge.get("target"))
        lines.append(f'<edge source="{src}" target="{dst}">')
        lines.append(f'  <data key="e_flags">{esc(" ".join(edge.get("flags", [])))}</data>')
        lines.append(
            f'  <data key="e_collectors">{esc(names_label(edge.get("collectors", [])))}</data>'
        )
        lines.append("</edge>")

    lines.append("</graph>")
    lines.append("</graphml>")
    return "\n".join(lines)


def render_report(
    results: Mapping[Combination, Sequence[str]], *, fmt: str = "dot", title: str = DEFAULT_TITLE
) -> str:
    if fmt == "dot":
        return export_dot(results, title=title)
    graph = build_graph(results, title=title)
    if fmt == "graphml":
        return export_graphml(graph) + "\n"
    if fmt == "json":
        return export_graph_json(graph) + "\n"
    raise ValueError(f"unknown report format: {fmt}")
