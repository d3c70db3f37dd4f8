"""
Inline token models

The engine rewrites a flat list of inline tokens. Only Text tokens are
searched for delimiters; Opaque tokens split a run into independent
sub-ranges; Inline tokens are carried along untouched (and may be
enclosed by a span); Span tokens are what the builder produces.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Union


@dataclass
class Text:
    """Searchable text (pandoc Str)"""
    text: str


@dataclass
class Opaque:
    """
    Verbatim/code-like element (pandoc Code, Math, RawInline)

    Attributes:
        node: The host element, passed through unchanged
    """
    node: Any


@dataclass
class Inline:
    """
    Any other host element (Space, SoftBreak, Emph, Link, ...)

    Never searched, but transparent: a delimiter pair may enclose it.
    """
    node: Any


@dataclass
class Span:
    """
    Annotated span built from a matched delimiter pair

    Attributes:
        classname: The rule's command
        attributes: Parsed option mapping (key -> value, "" for flags)
        children: Enclosed tokens

    Example:
        "!!flexspan!!(LimeGreen)" with command "custombox":
        Span(classname="custombox", attributes={"LimeGreen": ""},
             children=[Text("flexspan")])
    """
    classname: str
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List["Token"] = field(default_factory=list)


Token = Union[Text, Opaque, Inline, Span]
