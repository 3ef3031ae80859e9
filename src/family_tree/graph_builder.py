from __future__ import annotations

from collections import Counter

import graphviz

from family_tree.models import Person, Registry

# 関係タグによるエッジの色分け
EDGE_COLORS = {
    "wife": "darkred",
    "husband": "darkred",
    "son": "gray30",
    "daughter": "gray30",
    "father": "navy",
    "mother": "navy",
}
DEFAULT_EDGE_COLOR = "black"


def _format_label(person: Person) -> str:
    """名前と関係タグの集計をラベルにする。"""
    if not person.relations:
        return person.name
    counts = Counter(person.relations)
    summary = ", ".join(
        tag if n == 1 else f"{tag} x{n}" for tag, n in counts.items()
    )
    return f"{person.name}\n({summary})"


def build_graph(registry: Registry) -> graphviz.Digraph:
    """Registry から Graphviz の Digraph オブジェクトを生成する。

    ノードは人物ごと、エッジは connect で記録した順方向のリンクごと。
    逆方向のリンク（inverse）は順方向エッジと重複するため描かない。
    """
    dot = graphviz.Digraph(
        "family_tree",
        graph_attr={
            "rankdir": "BT",
            "splines": "polyline",
            "nodesep": "0.8",
            "ranksep": "1.0",
        },
        node_attr={
            "fontname": "Helvetica",
            "fontsize": "11",
            "shape": "box",
            "style": "filled,rounded",
            "fillcolor": "lightyellow",
        },
        edge_attr={
            "fontname": "Helvetica",
            "fontsize": "9",
        },
    )

    # 名前は空文字や記号を含みうるため、ノードIDは登録順の連番にする
    node_ids = {key: f"n{i}" for i, key in enumerate(registry.persons)}

    for key, person in registry.persons.items():
        dot.node(node_ids[key], label=_format_label(person))

    for key, person in registry.persons.items():
        for link in person.links:
            if link.inverse:
                continue
            # 削除はされないが、手で編集されたファイルでは相手が居ない場合がある
            if link.person not in registry:
                continue
            dot.edge(
                node_ids[key],
                node_ids[link.person],
                label=link.relation,
                color=EDGE_COLORS.get(link.relation, DEFAULT_EDGE_COLOR),
            )

    return dot
