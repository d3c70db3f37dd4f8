"""
Delimiter scanner

Finds every occurrence of every configured delimiter inside the Text
tokens of a run, in document order.

Within one token the scan is leftmost-longest: a single compiled
alternation of all (escaped) delimiters, longest first, is run with
finditer(). At each hit every delimiter that starts there is reported
(so "---" also yields "--" at the same offset), and the search resumes
after the longest one (so "---" never yields a "--" one character
later).

Example:
    >>> store = RuleStore.rules_make([FilterRule("--", "--", "cmd")])
    >>> scanner = DelimiterScanner(store)
    >>> [(o.token_index, o.start) for o in scanner.delimiters_scan([Text("a --b--")])]
    [(0, 2), (0, 5)]
"""

import re
from typing import List, Optional, Pattern, Tuple

from ..models.rules import RuleStore
from ..models.tokens import Inline, Text, Token
from ..models.matching import Occurrence, Trailer
from .options import paren_findMatching, trailer_parse
from .log import LOG


# Inline elements read as a blank inside a trailer
BLANK_TYPES = ("Space", "SoftBreak")


class DelimiterScanner:
    """
    Scanner over a run of tokens for one RuleStore

    Attributes:
        store: The rules whose delimiters are searched
        delimiters: All delimiter strings, longest first
        pattern: Compiled alternation of the escaped delimiters
        punctuation: Trailing punctuation characters
    """

    def __init__(self, store: RuleStore, punctuation: Optional[str] = None) -> None:
        self.store = store
        self.delimiters: List[str] = store.delimiters_get()
        self.punctuation = punctuation
        self.pattern: Optional[Pattern[str]] = None
        if self.delimiters:
            self.pattern = re.compile('|'.join(re.escape(d) for d in self.delimiters))

    def delimiters_scan(self, tokens: List[Token], start_index: int = 0) -> List[Occurrence]:
        """
        Find all delimiter occurrences from token start_index onwards

        Only Text tokens are searched. Right-usable occurrences get their
        trailer (inline options or punctuation) parsed here.

        Args:
            tokens: The run being rewritten
            start_index: First token index to search

        Returns:
            Occurrences in document order (token index, then offset, then
            longest delimiter first)
        """
        occurrences: List[Occurrence] = []
        if self.pattern is None:
            return occurrences

        for index in range(start_index, len(tokens)):
            if not isinstance(tokens[index], Text):
                continue
            occurrences.extend(self.token_scan(tokens, index))

        LOG(f"Scanned {len(tokens) - start_index} tokens: {len(occurrences)} delimiter occurrences", level=3)
        return occurrences

    def token_scan(self, tokens: List[Token], index: int) -> List[Occurrence]:
        """
        Find occurrences inside one token text

        Args:
            tokens: The run being rewritten
            index: Index of the Text token to search (recorded in each
                   Occurrence)

        Returns:
            Occurrences in offset order
        """
        found: List[Occurrence] = []
        token = tokens[index]
        if self.pattern is None or not isinstance(token, Text):
            return found
        text = token.text

        for hit in self.pattern.finditer(text):
            start = hit.start()
            # Every delimiter starting here, longest first (the hit itself is the longest)
            for delimiter in self.delimiters:
                if not text.startswith(delimiter, start):
                    continue
                end = start + len(delimiter)
                left_rules = self.store.left_index.get(delimiter, ())
                right_rules = self.store.right_index.get(delimiter, ())
                trailer = None
                if right_rules:
                    trailer = self.trailer_find(tokens, index, end)
                found.append(Occurrence(
                    token_index=index,
                    start=start,
                    end=end,
                    delimiter=delimiter,
                    left_rules=left_rules,
                    right_rules=right_rules,
                    trailer=trailer,
                ))

        return found

    def trailer_find(self, tokens: List[Token], index: int, end: int) -> Trailer:
        """
        Parse the trailer of a right delimiter ending at offset end

        Pandoc splits text at every blank, so "!!x!!(fg=blue, bold)"
        arrives as Str "!!x!!(fg=blue,", Space, Str "bold)" and
        "!!x!! (Red)" as Str "!!x!!", Space, Str "(Red)". When the token
        holds no complete option group but the rest of it is blank or an
        open group, the following Str/Space/SoftBreak tokens are read too.

        Args:
            tokens: The run being rewritten
            index: Index of the Text token holding the delimiter
            end: Offset just past the delimiter

        Returns:
            Trailer; token_index is set when it ends in a later token
        """
        text = tokens[index].text
        trailer = trailer_parse(text, end, self.delimiters, self.punctuation)
        rest = text[end:].strip(' \t')
        if trailer.options is not None or (rest and not rest.startswith('(')):
            return trailer

        # (token index, offset of the piece in that token, piece text)
        pieces: List[Tuple[int, int, str]] = [(index, end, text[end:])]
        joined = text[end:]
        for next_index in range(index + 1, len(tokens)):
            piece = self.token_flatten(tokens[next_index])
            if piece is None:
                break
            pieces.append((next_index, 0, piece))
            joined += piece
            opened = joined.lstrip(' \t')
            if not opened:
                continue
            if not opened.startswith('('):
                break
            if paren_findMatching(joined, len(joined) - len(opened)) is not None:
                break

        group = trailer_parse(joined, 0, punctuation="")
        if group.options is None:
            return trailer

        # Map the end of the group back to a token and an offset in it
        piece_start = 0
        for token_index, offset, piece in pieces:
            if piece_start < group.end <= piece_start + len(piece):
                return Trailer(
                    options=group.options,
                    punct=None,
                    end=offset + group.end - piece_start,
                    token_index=token_index if token_index != index else None,
                )
            piece_start += len(piece)
        return trailer

    @staticmethod
    def token_flatten(token: Token) -> Optional[str]:
        """Text a token contributes to a trailer, None if it ends one"""
        if isinstance(token, Text):
            return token.text
        if isinstance(token, Inline) and isinstance(token.node, dict) and token.node.get("t") in BLANK_TYPES:
            return " "
        return None
