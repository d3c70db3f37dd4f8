"""
Command renderer

Turns a span into a raw LaTeX command invocation:

    Span(classes=["custombox"], attributes={"LimeGreen": ""}, [flexspan])
    -> \\custombox[LimeGreen]{flexspan}

Only spans whose class is the command of a configured rule are rendered,
and only for output formats listed in appsettings.command_formats; all
other spans pass through unchanged.
"""

from typing import Any, Dict, List, Optional, Set

from ..config import appsettings


def optionsString_make(attributes: Dict[str, str], separator: str = ",") -> str:
    """
    Rebuild an option string from an attribute mapping

    Flags are written bare, pairs as key=value; a value containing the
    separator or '=' is braced so LaTeX keyval parsing keeps it whole.

    Example:
        >>> optionsString_make({"fg": "blue", "bold": "", "title": "a, b"})
        'fg=blue,bold,title={a, b}'
    """
    parts: List[str] = []
    for key, value in attributes.items():
        if value == "":
            parts.append(key)
            continue
        if separator in value or "=" in value:
            value = "{" + value + "}"
        parts.append(f"{key}={value}")
    return separator.join(parts)


def commandOpen_make(command: str, attributes: Dict[str, str]) -> str:
    r"""
    Opening part of a command invocation

    Example:
        >>> commandOpen_make("mybox", {})
        '\\mybox{'
        >>> commandOpen_make("mybox", {"Red": ""})
        '\\mybox[Red]{'
    """
    opts = optionsString_make(attributes)
    if opts:
        return f"\\{command}[{opts}]{{"
    return f"\\{command}{{"


def rawLatex_make(text: str) -> Dict[str, Any]:
    return {"t": "RawInline", "c": ["latex", text]}


def span_render(node: Dict[str, Any], commands: Set[str], fmt: Optional[str]) -> Optional[List[Dict[str, Any]]]:
    """
    Render a pandoc Span element as a command invocation

    Args:
        node: Pandoc JSON Span ({"t": "Span", "c": [attr, inlines]})
        commands: Recognized command names
        fmt: Output format (e.g. "latex", "beamer", "html")

    Returns:
        [RawInline open, *content, RawInline "}"], or None to keep the span
    """
    if node.get("t") != "Span" or not appsettings.format_supportsCommands(fmt):
        return None

    attr, content = node["c"]
    _, classes, pairs = attr
    if not classes or classes[0] not in commands:
        return None

    attributes = {key: value for key, value in pairs}
    return [rawLatex_make(commandOpen_make(classes[0], attributes))] + list(content) + [rawLatex_make("}")]
