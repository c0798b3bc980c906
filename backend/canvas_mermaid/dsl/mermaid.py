import re

MERMAID_DIRECTIVE_RE = re.compile(r"^flowchart\s+(TD|TB|BT|RL|LR)$", re.IGNORECASE)
SUBGRAPH_RE = re.compile(r"^subgraph\b")


def validate_mermaid(code: str) -> bool:
    """
    Cheap structural check of generated flowchart text:
    a valid directive first, balanced subgraph/end blocks, and nothing that
    would break out of the fenced block it gets embedded in.
    """
    if not code:
        return False

    lines = [l.strip() for l in code.splitlines() if l.strip()]
    if not lines:
        return False

    # First line must be a valid directive like "flowchart TB"
    if not MERMAID_DIRECTIVE_RE.match(lines[0]):
        return False

    depth = 0
    for line in lines[1:]:
        if SUBGRAPH_RE.match(line):
            depth += 1
        elif line == "end":
            depth -= 1
            if depth < 0:
                return False
    if depth != 0:
        return False

    # Basic safety: no script tags or markdown fences
    forbidden = re.search(r"<script|```", code, re.IGNORECASE)
    return forbidden is None
