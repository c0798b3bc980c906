from typing import Optional

from canvas_mermaid.compiler.normalize import build_graph
from canvas_mermaid.compiler.render_mermaid import render_mermaid
from canvas_mermaid.compiler.types import ConversionSettings
from canvas_mermaid.ir.canvas import CanvasInput


def compile_to_mermaid(data: CanvasInput, settings: Optional[ConversionSettings] = None) -> str:
    settings = settings or ConversionSettings()
    graph = build_graph(data, settings)
    return render_mermaid(graph, settings)
