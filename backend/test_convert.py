"""Tests for the canvas → callout conversion use case"""

from canvas_mermaid.compiler.types import ConversionSettings
from canvas_mermaid.dsl.callout import extract_mermaid
from canvas_mermaid.pipeline import convert
from canvas_mermaid.pipeline.convert import ConvertCanvasToMermaid
from canvas_mermaid.repositories.base import ClipboardSink
from canvas_mermaid.repositories.clipboard import MemoryClipboard

CANVAS = {
    "nodes": [
        {"id": "g", "type": "group", "label": "Core", "x": 0, "y": 0, "width": 600, "height": 400},
        {"id": "a", "type": "text", "text": "Hello", "x": 10, "y": 10, "width": 100, "height": 60},
        {"id": "b", "type": "file", "file": "World.md", "x": 200, "y": 10, "width": 100, "height": 60},
        {"id": "c", "type": "text", "text": "Outside", "x": 900, "y": 900, "width": 100, "height": 60},
    ],
    "edges": [
        {"id": "e1", "fromNode": "a", "toNode": "b", "label": "next"},
        {"id": "e2", "fromNode": "b", "toNode": "c"},
    ],
}


class BrokenClipboard(ClipboardSink):
    def write(self, text: str) -> None:
        raise OSError("clipboard locked")

    def read(self) -> str:
        return ""


def test_successful_conversion():
    result = ConvertCanvasToMermaid().execute(CANVAS, "Flow.canvas")

    assert result.success
    assert result.message == "Canvas conversion successful"
    assert result.error is None
    assert result.valid_mermaid
    assert result.mermaid.startswith("flowchart TB\n")
    assert result.callout.startswith("> [!quote] [[Flow.canvas]]\n")
    assert extract_mermaid(result.callout) == result.mermaid


def test_statistics_count_nodes_edges_groups():
    result = ConvertCanvasToMermaid().execute(CANVAS, "Flow.canvas")
    stats = result.statistics

    assert (stats.nodes_count, stats.edges_count, stats.groups_count) == (3, 2, 1)
    assert stats.processing_time_ms >= 0


def test_settings_passed_per_call_win():
    converter = ConvertCanvasToMermaid(settings=ConversionSettings(direction="LR"))

    assert converter.execute(CANVAS, "Flow.canvas").mermaid.startswith("flowchart LR\n")
    result = converter.execute(CANVAS, "Flow.canvas", settings=ConversionSettings(direction="BT"))
    assert result.mermaid.startswith("flowchart BT\n")


def test_empty_canvas_fails_without_output():
    result = ConvertCanvasToMermaid().execute({"nodes": [], "edges": []}, "Empty.canvas")

    assert not result.success
    assert result.message == "Canvas data is invalid or empty"
    assert result.mermaid == ""
    assert result.callout == ""
    assert [issue["code"] for issue in result.issues] == ["NO_NODES"]


def test_dangling_edge_fails_with_issue():
    canvas = {
        "nodes": [{"id": "a", "text": "A"}],
        "edges": [{"id": "e", "fromNode": "ghost", "toNode": "a"}],
    }
    result = ConvertCanvasToMermaid().execute(canvas, "Flow.canvas")

    assert not result.success
    assert result.callout == ""
    assert "MISSING_SOURCE_NODE" in [issue["code"] for issue in result.issues]
    assert result.statistics.nodes_count == 1


def test_unparseable_canvas_fails():
    result = ConvertCanvasToMermaid().execute({"nodes": [{"id": "a", "x": "left"}]}, "Bad.canvas")

    assert not result.success
    assert result.message == "Canvas content parsing failed"
    assert result.error


def test_warnings_do_not_fail_conversion():
    canvas = {
        "nodes": [{"id": "a", "text": "A"}],
        "edges": [{"id": "loop", "fromNode": "a", "toNode": "a"}],
    }
    result = ConvertCanvasToMermaid().execute(canvas, "Loop.canvas")

    assert result.success
    assert result.warnings
    assert "  a --> a" in result.mermaid.splitlines()


def test_copy_to_clipboard():
    clipboard = MemoryClipboard()
    result = ConvertCanvasToMermaid(clipboard=clipboard).execute(
        CANVAS, "Flow.canvas", copy_to_clipboard=True
    )

    assert result.success
    assert result.copied_to_clipboard
    assert clipboard.read() == result.callout


def test_clipboard_failure_keeps_output():
    result = ConvertCanvasToMermaid(clipboard=BrokenClipboard()).execute(
        CANVAS, "Flow.canvas", copy_to_clipboard=True
    )

    assert not result.success
    assert result.message == "Failed to copy to clipboard"
    assert result.error == "clipboard locked"
    assert result.callout
    assert not result.copied_to_clipboard


def test_clipboard_not_touched_unless_requested():
    clipboard = MemoryClipboard()
    ConvertCanvasToMermaid(clipboard=clipboard).execute(CANVAS, "Flow.canvas")
    assert clipboard.history == []


def test_clipboard_history_is_bounded():
    clipboard = MemoryClipboard(max_history=2)
    for text in ("one", "two", "three"):
        clipboard.write(text)

    assert clipboard.history == ["two", "three"]
    assert clipboard.read() == "three"


def test_result_serializes():
    data = ConvertCanvasToMermaid().execute(CANVAS, "Flow.canvas").to_dict()

    assert data["success"] is True
    assert data["name"] == "Flow.canvas"
    assert data["statistics"]["nodes_count"] == 3
    assert set(data) >= {"mermaid", "callout", "warnings", "issues", "valid_mermaid"}


def test_canvas_with_only_groups_fails():
    canvas = {"nodes": [{"id": "g", "type": "group", "x": 0, "y": 0, "width": 300, "height": 300}]}
    result = ConvertCanvasToMermaid().execute(canvas, "G.canvas")

    assert not result.success
    assert result.message == "Canvas data is invalid or empty"
    assert result.mermaid == ""
    assert [issue["code"] for issue in result.issues] == ["NO_NODES"]
    assert result.statistics.groups_count == 1


def test_unexpected_render_error_becomes_failure(monkeypatch):
    def broken_render(graph, settings=None):
        raise RuntimeError("renderer exploded")

    monkeypatch.setattr(convert, "render_mermaid", broken_render)
    result = ConvertCanvasToMermaid().execute(CANVAS, "Flow.canvas")

    assert result.success is False
    assert result.message == "Conversion failed"
    assert result.error == "Conversion failed: renderer exploded"
    assert result.callout == ""
    stats = result.statistics
    assert (stats.nodes_count, stats.edges_count, stats.groups_count) == (3, 2, 1)
    assert stats.processing_time_ms >= 0
