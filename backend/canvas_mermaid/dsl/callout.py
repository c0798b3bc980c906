import re

CALLOUT_TYPE = "quote"
QUOTE_MARKER = "> "
FENCE = "```"
FENCE_LANGUAGE = "mermaid"

_MERMAID_BODY_RE = re.compile(r"```mermaid[ \t]*\r?\n(.*?)^>?[ \t]*```", re.DOTALL | re.MULTILINE)


def callout_title(name: str) -> str:
    return f"[[{name}]]"


def format_callout(name: str, mermaid_code: str) -> str:
    """
    Wrap flowchart text in a quote callout titled with a link to the canvas.

        > [!quote] [[Flow.canvas]]
        >
        > ```mermaid
        > flowchart TB
        > ...
        > ```
    """
    body = mermaid_code[:-1] if mermaid_code.endswith("\n") else mermaid_code

    lines = [
        f"{QUOTE_MARKER}[!{CALLOUT_TYPE}] {callout_title(name)}",
        QUOTE_MARKER,
        f"{QUOTE_MARKER}{FENCE}{FENCE_LANGUAGE}",
    ]
    lines.extend(f"{QUOTE_MARKER}{line}" for line in body.split("\n"))
    lines.append(f"{QUOTE_MARKER}{FENCE}")
    return "\n".join(lines) + "\n"


def extract_mermaid(callout: str) -> str:
    """Return the flowchart text inside a callout, without quote markers."""
    match = _MERMAID_BODY_RE.search(callout)
    if not match:
        return ""

    lines = []
    for line in match.group(1).splitlines():
        if line.startswith(QUOTE_MARKER):
            line = line[len(QUOTE_MARKER):]
        elif line.startswith(">"):
            line = line[1:]
        lines.append(line)
    return "\n".join(lines).strip() + "\n" if lines else ""
