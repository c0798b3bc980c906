from abc import ABC, abstractmethod
from typing import Any, Dict, List


class DocumentStore(ABC):
    @abstractmethod
    def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def read(self, path: str) -> str:
        """Return the full text of a document"""
        pass

    @abstractmethod
    def write(self, path: str, content: str) -> None:
        pass

    @abstractmethod
    def find_referencing(self, name: str) -> List[str]:
        """Paths of documents linking to ``name`` as [[name]] or [[name|alias]]"""
        pass


class ClipboardSink(ABC):
    @abstractmethod
    def write(self, text: str) -> None:
        pass

    @abstractmethod
    def read(self) -> str:
        pass


class CanvasSource(ABC):
    @abstractmethod
    def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def load(self, path: str) -> Dict[str, Any]:
        """Return the deserialized canvas record (nodes / edges / groups)"""
        pass
