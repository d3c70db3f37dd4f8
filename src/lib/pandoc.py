"""
Pandoc JSON AST adapter

Connects the span engine to pandoc documents (`pandoc -t json`):
- converts inline element lists to engine tokens and back
- walks the document, handing every configured block's inline list to
  the engine as one run
- renders spans as raw commands for latex-like targets

Inline containers (Emph, Strong, Link, ...) inside a rewritten block are
processed first, each as its own run, then the block's own inline list.
Spans built by the engine are never walked again.

Example:
    doc = document_load(sys.stdin.read())
    store = store_load(meta=doc.get("meta"))
    document_rewrite(doc, SpanEngine(store))
    document_render(doc, store.commands_get(), "latex")
    sys.stdout.write(document_dump(doc))
"""

import json
from typing import Any, Callable, Dict, List, Optional, Set

from ..config import appsettings
from ..models.tokens import Inline, Opaque, Span, Text, Token
from .engine import SpanEngine
from .render import span_render
from .log import LOG


class DocumentError(Exception):
    """Raised when the input is not a pandoc JSON document"""
    pass


# Element type -> index of its inline list inside "c" (None: "c" itself)
BLOCK_INLINES: Dict[str, Optional[int]] = {
    "Para": None,
    "Plain": None,
    "Header": 2,
}

INLINE_CONTAINERS: Dict[str, Optional[int]] = {
    "Emph": None,
    "Strong": None,
    "Underline": None,
    "Strikeout": None,
    "Superscript": None,
    "Subscript": None,
    "SmallCaps": None,
    "Quoted": 1,
    "Cite": 1,
    "Link": 1,
    "Image": 1,
    "Span": 1,
}


def document_load(text: str) -> Dict[str, Any]:
    """
    Parse pandoc JSON

    Raises:
        DocumentError: If text is not JSON or has no "blocks" list
    """
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        raise DocumentError(f"Input is not valid JSON: {e}")
    if not isinstance(doc, dict) or not isinstance(doc.get("blocks"), list):
        raise DocumentError("Input is not a pandoc JSON document (no 'blocks' list)")
    return doc


def document_dump(doc: Dict[str, Any]) -> str:
    return json.dumps(doc, ensure_ascii=False)


def inlines_toTokens(inlines: List[Dict[str, Any]], opaque_types: Optional[List[str]] = None) -> List[Token]:
    """
    Pandoc inline elements -> engine tokens

    Str becomes Text, opaque types become Opaque, everything else Inline.
    """
    if opaque_types is None:
        opaque_types = appsettings.opaque_types

    tokens: List[Token] = []
    for element in inlines:
        kind = element.get("t")
        if kind == "Str":
            tokens.append(Text(element["c"]))
        elif kind in opaque_types:
            tokens.append(Opaque(element))
        else:
            tokens.append(Inline(element))
    return tokens


def tokens_toInlines(tokens: List[Token]) -> List[Dict[str, Any]]:
    """Engine tokens -> pandoc inline elements"""
    inlines: List[Dict[str, Any]] = []
    for token in tokens:
        if isinstance(token, Text):
            inlines.append({"t": "Str", "c": token.text})
        elif isinstance(token, Span):
            attr = ["", [token.classname], [[k, v] for k, v in token.attributes.items()]]
            inlines.append({"t": "Span", "c": [attr, tokens_toInlines(token.children)]})
        else:
            inlines.append(token.node)
    return inlines


def inlines_get(node: Dict[str, Any], index: Optional[int]) -> List[Dict[str, Any]]:
    return node["c"] if index is None else node["c"][index]


def inlines_set(node: Dict[str, Any], index: Optional[int], inlines: List[Dict[str, Any]]) -> None:
    if index is None:
        node["c"] = inlines
    else:
        node["c"][index] = inlines


class DocumentWalker:
    """
    Bottom-up walk over a pandoc JSON document

    Calls inlines_visit(inlines) -> inlines for the inline list of every
    configured block (every block when blocks_only is False) and of every
    inline container inside one. Spans whose first class is in
    skip_classes are left alone entirely, children included.
    """

    def __init__(
        self,
        inlines_visit: Callable[[List[Dict[str, Any]]], List[Dict[str, Any]]],
        block_types: Optional[List[str]] = None,
        blocks_only: bool = True,
        skip_classes: Optional[Set[str]] = None,
    ) -> None:
        self.inlines_visit = inlines_visit
        self.block_types = set(block_types if block_types is not None else appsettings.block_types)
        self.blocks_only = blocks_only
        self.skip_classes = skip_classes or set()

    def document_walk(self, doc: Dict[str, Any]) -> None:
        self.node_walk(doc["blocks"], False)

    def node_walk(self, node: Any, active: bool) -> None:
        if isinstance(node, list):
            for item in node:
                self.node_walk(item, active)
            return
        if not isinstance(node, dict) or "c" not in node:
            return

        kind = node.get("t")
        if kind == "Span" and self.span_skipped(node):
            return
        is_block = kind in BLOCK_INLINES and (kind in self.block_types or not self.blocks_only)
        self.node_walk(node["c"], active or is_block)

        if is_block:
            index = BLOCK_INLINES[kind]
        elif kind in INLINE_CONTAINERS and (active or not self.blocks_only):
            index = INLINE_CONTAINERS[kind]
        else:
            return
        inlines_set(node, index, self.inlines_visit(inlines_get(node, index)))

    def span_skipped(self, node: Dict[str, Any]) -> bool:
        """True for a span already built from one of the skipped commands"""
        classes = node["c"][0][1]
        return bool(classes) and classes[0] in self.skip_classes


def document_rewrite(doc: Dict[str, Any], engine: SpanEngine) -> int:
    """
    Run the engine over every configured block of a document (in place)

    Args:
        doc: Pandoc JSON document
        engine: Engine holding the document's rules

    Returns:
        Number of spans built
    """
    before = engine.span_count

    def inlines_rewrite(inlines: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return tokens_toInlines(engine.run_process(inlines_toTokens(inlines)))

    # Spans of our own commands were built by an earlier run: never reopened
    DocumentWalker(inlines_rewrite, skip_classes=engine.store.commands_get()).document_walk(doc)

    count = engine.span_count - before
    LOG(f"Built {count} spans", level=2)
    return count


def document_render(doc: Dict[str, Any], commands: Set[str], fmt: Optional[str]) -> int:
    """
    Replace recognized spans by raw command invocations (in place)

    Covers every span in the document, including ones written directly
    in the source (e.g. [text]{.mycommand}).

    Args:
        doc: Pandoc JSON document
        commands: Recognized command names
        fmt: Output format; nothing happens unless it supports commands

    Returns:
        Number of spans rendered
    """
    if not appsettings.format_supportsCommands(fmt):
        LOG(f"Format '{fmt}' keeps spans as they are", level=2)
        return 0

    rendered = 0

    def inlines_render(inlines: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        nonlocal rendered
        result: List[Dict[str, Any]] = []
        for element in inlines:
            expansion = span_render(element, commands, fmt)
            if expansion is None:
                result.append(element)
            else:
                result.extend(expansion)
                rendered += 1
        return result

    DocumentWalker(inlines_render, blocks_only=False).document_walk(doc)

    LOG(f"Rendered {rendered} spans as {fmt} commands", level=2)
    return rendered
