"""
Option and trailing punctuation parsing

Two jobs:
1. trailer_parse(): look at what immediately follows a right delimiter
   in a piece of text: a parenthesized option group, or a single
   punctuation mark, or nothing. The scanner hands it the joined text
   of several tokens when a group runs past a blank.
2. options_parse(): turn an option string ("fg=blue, bold, title='a, b'")
   into an attribute mapping.

Example:
    >>> options_parse("fg=blue, bold")
    {'fg': 'blue', 'bold': ''}
    >>> trailer_parse("x!!(Red) y", 3, delimiters=["!!"])
    Trailer(options='Red', punct=None, end=8)
"""

from typing import Dict, Iterable, List, Optional

from ..config import appsettings
from ..models.matching import Trailer


QUOTES = ("'", '"')


def paren_findMatching(text: str, start_pos: int) -> Optional[int]:
    """
    Find the parenthesis closing the one at start_pos using depth tracking

    Quoted substrings are skipped so "(title='a)b')" closes at the end.

    Args:
        text: Token text
        start_pos: Offset of the opening '('

    Returns:
        Offset of the matching ')', or None if the group is unterminated
    """
    depth = 1
    quote: Optional[str] = None
    pos = start_pos + 1

    while pos < len(text):
        char = text[pos]
        if quote:
            if char == quote:
                quote = None
        elif char in QUOTES:
            quote = char
        elif char == '(':
            depth += 1
        elif char == ')':
            depth -= 1
            if depth == 0:
                return pos
        pos += 1

    return None


def trailer_parse(
    text: str,
    end: int,
    delimiters: Iterable[str] = (),
    punctuation: Optional[str] = None,
) -> Trailer:
    """
    Parse what follows a right delimiter ending at offset end

    Tried in order:
    1. optional blanks, then a balanced "(...)" group -> options
    2. a single punctuation character that does not start another
       delimiter -> punct
    3. nothing

    Args:
        text: Token text containing the delimiter
        end: Offset just past the delimiter
        delimiters: All configured delimiter strings
        punctuation: Characters counted as punctuation
                     (default: appsettings.trailing_punctuation)

    Returns:
        Trailer describing the options/punctuation and where it ends
    """
    if punctuation is None:
        punctuation = appsettings.trailing_punctuation

    pos = end
    while pos < len(text) and text[pos] in ' \t':
        pos += 1

    if pos < len(text) and text[pos] == '(':
        close = paren_findMatching(text, pos)
        if close is not None:
            return Trailer(options=text[pos + 1:close], punct=None, end=close + 1)

    if end < len(text) and text[end] in punctuation:
        if not any(text.startswith(d, end) for d in delimiters):
            return Trailer(options=None, punct=text[end], end=end + 1)

    return Trailer(options=None, punct=None, end=end)


def components_split(text: str, separators: str) -> List[str]:
    """
    Split on separators that are not inside a quoted substring

    Quotes are kept; options_parse() strips them per key/value.
    """
    parts: List[str] = []
    current: List[str] = []
    quote: Optional[str] = None

    for char in text:
        if quote:
            current.append(char)
            if char == quote:
                quote = None
        elif char in QUOTES:
            quote = char
            current.append(char)
        elif char in separators:
            parts.append(''.join(current))
            current = []
        else:
            current.append(char)

    parts.append(''.join(current))
    return parts


def unquote(text: str) -> str:
    """Strip whitespace and one pair of surrounding quotes"""
    text = text.strip()
    if len(text) >= 2 and text[0] in QUOTES and text[-1] == text[0]:
        return text[1:-1]
    return text


def equals_find(component: str) -> int:
    """Offset of the first '=' outside quotes, -1 if none"""
    quote: Optional[str] = None
    for pos, char in enumerate(component):
        if quote:
            if char == quote:
                quote = None
        elif char in QUOTES:
            quote = char
        elif char == '=':
            return pos
    return -1


def options_parse(text: Optional[str], separators: Optional[str] = None) -> Dict[str, str]:
    """
    Parse an option string into an attribute mapping

    Components are separated by any of the separator characters outside
    quotes. "key=value" gives a pair, a bare "key" gives key -> "" (a
    flag). Blank components are skipped.

    Args:
        text: Option string (inline group contents or a rule default)
        separators: Separator characters (default: appsettings.option_separators)

    Returns:
        Mapping in the order the keys first appeared; a repeated key
        keeps its last value

    Example:
        >>> options_parse("Cerulean")
        {'Cerulean': ''}
        >>> options_parse("title='Hello, world', fg = red")
        {'title': 'Hello, world', 'fg': 'red'}
    """
    if not text:
        return {}
    if separators is None:
        separators = appsettings.option_separators

    attributes: Dict[str, str] = {}
    for component in components_split(text, separators):
        if not component.strip():
            continue
        split_at = equals_find(component)
        if split_at < 0:
            key, value = unquote(component), ""
        else:
            key, value = unquote(component[:split_at]), unquote(component[split_at + 1:])
        if not key:
            continue
        attributes[key] = value

    return attributes
