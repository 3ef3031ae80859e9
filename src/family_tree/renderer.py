from __future__ import annotations

from pathlib import Path

import graphviz
import structlog

logger = structlog.get_logger(__name__)

FORMATS = ("png", "svg", "dot")


def render_graph(
    dot: graphviz.Digraph,
    output_path: str | Path,
    fmt: str = "png",
) -> Path:
    """Graphviz グラフをファイルとして出力する。

    Args:
        dot: Graphviz Digraph オブジェクト
        output_path: 出力ファイルパス（例: output/tree.png）
        fmt: 出力形式（"png"、"svg" または "dot"）。
             "dot" は DOT ソースをそのまま書き出すため Graphviz 本体は不要。

    Returns:
        出力されたファイルのパス
    """
    if fmt not in FORMATS:
        raise ValueError(f"unsupported format: {fmt}")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if fmt == "dot":
        output_path.write_text(dot.source, encoding="utf-8")
    else:
        dot.render(
            outfile=str(output_path),
            format=fmt,
            cleanup=True,
            quiet=True,
        )

    logger.debug("graph_rendered", path=str(output_path), format=fmt)
    return output_path
