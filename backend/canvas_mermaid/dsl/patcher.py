"""
Document patch engine.

Finds quote callouts that embed a canvas as a Mermaid flowchart and swaps
them for a freshly generated callout. Everything outside the matched blocks
is left byte-for-byte untouched. When a document has no such callout, the
new one is appended at the end.

Only two entry points are public, ``find_callouts`` and ``patch_document``;
callers never see the pattern itself.
"""

import re
from dataclasses import dataclass
from typing import List

REPLACED = "replaced"
APPENDED = "appended"


@dataclass
class PatchResult:
    content: str
    action: str              # replaced | appended
    replaced_count: int = 0

    def to_dict(self) -> dict:
        return {
            "content": self.content,
            "action": self.action,
            "replaced_count": self.replaced_count,
        }


def callout_pattern(name: str) -> "re.Pattern[str]":
    """
    > [!quote] [[<name>]]
    >
    > ```mermaid
    > ...
    > ```

    The name is escaped, so names with regex metacharacters match literally.
    The body only spans quoted lines: a callout left without its closing
    fence never matches.
    """
    escaped = re.escape(name)
    return re.compile(
        r"^>[ \t]*\[!(?i:quote)\][ \t]*\[\[" + escaped + r"\]\][ \t]*\r?\n"
        r">[ \t]*\r?\n"
        r">[ \t]*```mermaid[ \t]*\r?\n"
        r"(?:>[^\r\n]*\r?\n)*?"
        r">[ \t]*```[ \t]*(?:\r?\n|\Z)",
        re.MULTILINE,
    )


def find_callouts(text: str, name: str) -> List[str]:
    """Return every embedded callout for ``name``, in document order."""
    return [match.group(0) for match in callout_pattern(name).finditer(text)]


def append_block(text: str, block: str) -> str:
    if not text.strip():
        return block
    return text.rstrip("\r\n") + "\n\n" + block


def patch_document(text: str, name: str, block: str) -> PatchResult:
    """
    Replace every embedded callout for ``name`` with ``block``,
    or append ``block`` (one blank line after the existing content) if none exists.
    """
    pattern = callout_pattern(name)
    # A function replacement keeps backslashes in the block literal
    updated, count = pattern.subn(lambda _: block, text)

    if count:
        return PatchResult(content=updated, action=REPLACED, replaced_count=count)

    return PatchResult(content=append_block(text, block), action=APPENDED)
