from typing import List

from canvas_mermaid.repositories.base import ClipboardSink


class MemoryClipboard(ClipboardSink):
    """Process-local clipboard keeping a bounded history of written entries."""

    def __init__(self, max_history: int = 10):
        self.max_history = max_history
        self._history: List[str] = []

    def write(self, text: str) -> None:
        self._history.append(text)
        if len(self._history) > self.max_history:
            self._history = self._history[-self.max_history:]

    def read(self) -> str:
        return self._history[-1] if self._history else ""

    def clear(self) -> None:
        self._history = []

    @property
    def history(self) -> List[str]:
        return list(self._history)
