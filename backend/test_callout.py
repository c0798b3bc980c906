"""Tests for callout formatting and the document patch engine"""

from canvas_mermaid.dsl.callout import extract_mermaid, format_callout
from canvas_mermaid.dsl.patcher import APPENDED, REPLACED, find_callouts, patch_document

FLOW = (
    "flowchart TB\n"
    "\n"
    "  %% Node Definitions\n"
    '  A["Hello"]\n'
    '  B["World"]\n'
    "\n"
    "  %% Edge Connections\n"
    "  A -->|next| B\n"
)


# -------------------------
# Callout formatting
# -------------------------

def test_callout_layout():
    block = format_callout("Flow.canvas", FLOW)

    assert block == (
        "> [!quote] [[Flow.canvas]]\n"
        "> \n"
        "> ```mermaid\n"
        "> flowchart TB\n"
        "> \n"
        ">   %% Node Definitions\n"
        '>   A["Hello"]\n'
        '>   B["World"]\n'
        "> \n"
        ">   %% Edge Connections\n"
        ">   A -->|next| B\n"
        "> ```\n"
    )


def test_every_callout_line_is_quoted():
    block = format_callout("Flow.canvas", FLOW)
    assert all(line.startswith(">") for line in block.splitlines())


def test_extract_returns_original_flowchart():
    assert extract_mermaid(format_callout("Flow.canvas", FLOW)) == FLOW


def test_extract_without_mermaid_fence():
    assert extract_mermaid("> [!quote] nothing here\n") == ""


# -------------------------
# Patching
# -------------------------

OLD_FLOW = "flowchart LR\n\n  %% Node Definitions\n  X[\"Old\"]\n"


def test_replaces_existing_callout_and_keeps_surroundings():
    before = "# Notes\n\nSome intro.\n\n"
    after = "\n## Later\n\nTrailing text.\n"
    document = before + format_callout("Flow.canvas", OLD_FLOW) + after
    block = format_callout("Flow.canvas", FLOW)

    result = patch_document(document, "Flow.canvas", block)

    assert result.action == REPLACED
    assert result.replaced_count == 1
    assert result.content == before + block + after


def test_appends_when_no_callout_exists():
    block = format_callout("Flow.canvas", FLOW)
    result = patch_document("# Notes\n\nSee [[Flow.canvas]].\n", "Flow.canvas", block)

    assert result.action == APPENDED
    assert result.replaced_count == 0
    assert result.content == "# Notes\n\nSee [[Flow.canvas]].\n\n" + block


def test_append_to_empty_document():
    block = format_callout("Flow.canvas", FLOW)
    assert patch_document("", "Flow.canvas", block).content == block


def test_patch_is_idempotent():
    block = format_callout("Flow.canvas", FLOW)
    once = patch_document("# Notes\n", "Flow.canvas", block).content
    twice = patch_document(once, "Flow.canvas", block)

    assert twice.action == REPLACED
    assert twice.content == once


def test_only_the_named_canvas_is_replaced():
    other = format_callout("Other.canvas", OLD_FLOW)
    mine = format_callout("Flow.canvas", OLD_FLOW)
    document = other + "\n" + mine
    block = format_callout("Flow.canvas", FLOW)

    result = patch_document(document, "Flow.canvas", block)

    assert result.replaced_count == 1
    assert result.content == other + "\n" + block


def test_every_occurrence_is_replaced():
    old = format_callout("Flow.canvas", OLD_FLOW)
    document = old + "\nmiddle\n\n" + old
    block = format_callout("Flow.canvas", FLOW)

    result = patch_document(document, "Flow.canvas", block)

    assert result.replaced_count == 2
    assert result.content == block + "\nmiddle\n\n" + block


def test_names_with_regex_metacharacters_match_literally():
    name = "Plan (v2) [draft]+.canvas"
    block = format_callout(name, FLOW)
    document = "intro\n\n" + format_callout(name, OLD_FLOW)

    result = patch_document(document, name, block)
    assert result.action == REPLACED
    assert result.content == "intro\n\n" + block

    # "." in the name must not match any character
    assert find_callouts(format_callout("FlowXcanvas", OLD_FLOW), "Flow.canvas") == []


def test_backslashes_in_block_are_kept_literally():
    flow = 'flowchart TB\n\n  %% Node Definitions\n  a["C:\\temp\\1"]\n'
    block = format_callout("Flow.canvas", flow)
    document = format_callout("Flow.canvas", OLD_FLOW)

    assert patch_document(document, "Flow.canvas", block).content == block


def test_crlf_document_callout_is_found():
    crlf = format_callout("Flow.canvas", OLD_FLOW).replace("\n", "\r\n")
    document = "title\r\n\r\n" + crlf + "tail\r\n"
    block = format_callout("Flow.canvas", FLOW)

    result = patch_document(document, "Flow.canvas", block)

    assert result.action == REPLACED
    assert result.content == "title\r\n\r\n" + block + "tail\r\n"


def test_callout_type_is_case_insensitive():
    document = format_callout("Flow.canvas", OLD_FLOW).replace("[!quote]", "[!QUOTE]")
    assert len(find_callouts(document, "Flow.canvas")) == 1


def test_callout_at_end_without_trailing_newline():
    document = "x\n\n" + format_callout("Flow.canvas", OLD_FLOW).rstrip("\n")
    block = format_callout("Flow.canvas", FLOW)

    result = patch_document(document, "Flow.canvas", block)
    assert result.content == "x\n\n" + block


def test_unclosed_callout_does_not_swallow_following_prose():
    document = (
        "> [!quote] [[Flow.canvas]]\n"
        "> \n"
        "> ```mermaid\n"
        "> flowchart TB\n"
        "\n"
        "Important prose paragraph.\n"
        "\n"
        "> [!note] snippet\n"
        "> ```\n"
        "> code\n"
        "> ```\n"
    )
    block = format_callout("Flow.canvas", FLOW)

    assert find_callouts(document, "Flow.canvas") == []
    result = patch_document(document, "Flow.canvas", block)

    assert result.action == APPENDED
    assert result.content == document + "\n" + block
    assert "Important prose paragraph." in result.content
    assert "> [!note] snippet\n" in result.content


def test_unrelated_quote_block_is_untouched():
    document = "> [!quote] [[Flow.canvas]]\n> just a quote, no diagram\n"
    block = format_callout("Flow.canvas", FLOW)

    result = patch_document(document, "Flow.canvas", block)

    assert result.action == APPENDED
    assert result.content.startswith(document)
