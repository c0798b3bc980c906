import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List

from canvas_mermaid.repositories.base import CanvasSource, DocumentStore

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = (".md", ".markdown")
CANVAS_EXTENSION = ".canvas"


def link_pattern(name: str) -> "re.Pattern[str]":
    return re.compile(r"\[\[" + re.escape(name) + r"(?:\|[^\]]*)?\]\]")


class _VaultFiles:
    """Resolves vault-relative paths and refuses to leave the vault root."""

    def __init__(self, root):
        self.root = Path(root).resolve()

    def resolve(self, path: str) -> Path:
        candidate = (self.root / path).resolve()
        if candidate != self.root and self.root not in candidate.parents:
            raise ValueError(f"Path escapes the vault: {path}")
        return candidate

    def relative(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()


class FileDocumentStore(_VaultFiles, DocumentStore):
    """Markdown documents stored under a vault directory."""

    def exists(self, path: str) -> bool:
        try:
            return self.resolve(path).is_file()
        except ValueError:
            return False

    def read(self, path: str) -> str:
        file = self.resolve(path)
        if not file.is_file():
            raise FileNotFoundError(f"File does not exist: {path}")
        with open(file, encoding="utf-8", newline="") as handle:
            return handle.read()

    def write(self, path: str, content: str) -> None:
        file = self.resolve(path)
        if not file.is_file():
            raise FileNotFoundError(f"File does not exist: {path}")
        # newline="" keeps the line endings already present in content
        with open(file, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)

    def iter_documents(self) -> List[Path]:
        return sorted(
            path
            for path in self.root.rglob("*")
            if path.is_file() and path.suffix.lower() in MARKDOWN_EXTENSIONS
        )

    def find_referencing(self, name: str) -> List[str]:
        pattern = link_pattern(name)
        found = []
        for path in self.iter_documents():
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping unreadable document %s: %s", path, e)
                continue
            if pattern.search(text):
                found.append(self.relative(path))
        return found


class FileCanvasSource(_VaultFiles, CanvasSource):
    """JSON canvas files stored under a vault directory."""

    def exists(self, path: str) -> bool:
        try:
            return self.resolve(path).is_file()
        except ValueError:
            return False

    def load(self, path: str) -> Dict[str, Any]:
        file = self.resolve(path)
        if not file.is_file():
            raise FileNotFoundError(f"Canvas file does not exist: {path}")

        try:
            data = json.loads(file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Canvas content parsing failed: {path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Canvas content parsing failed: {path}: expected a JSON object")
        return data
