"""
Matching-specific data models

Type-safe structures passed between the scanner, the matcher and the
span builder. None of them outlive a single scan/match/build iteration.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .rules import FilterRule
from .tokens import Token


@dataclass
class Trailer:
    """
    What follows a right delimiter

    Returned by options.trailer_parse() for one token text, and by
    DelimiterScanner.trailer_find() when an option group continues into
    the following Str/Space tokens. At most one of options and punct
    is set.

    Attributes:
        options: Contents of a parenthesized group, parentheses removed
                 (None if there was no group; "" for "()")
        punct: A single trailing punctuation character, or None
        end: Offset just past the trailer, in the token holding its last
             character (equals the delimiter end when there is no trailer)
        token_index: Token holding the end of the trailer; None for the
                     right delimiter's own token

    Example:
        For "!!(fg=red) more" with the delimiter ending at offset 2:
        Trailer(options="fg=red", punct=None, end=10)
    """
    options: Optional[str]
    punct: Optional[str]
    end: int
    token_index: Optional[int] = None


@dataclass
class Occurrence:
    """
    One delimiter string found inside a text token

    Returned by DelimiterScanner.delimiters_scan(), in document order.

    Attributes:
        token_index: Index of the Text token in the run
        start: Offset of the delimiter in the token text
        end: Offset just past the delimiter
        delimiter: The literal delimiter found
        left_rules: Rules using this delimiter as left, priority order
        right_rules: Rules using this delimiter as right, priority order
        trailer: Options/punctuation after the delimiter (right use only)
    """
    token_index: int
    start: int
    end: int
    delimiter: str
    left_rules: Tuple[FilterRule, ...]
    right_rules: Tuple[FilterRule, ...]
    trailer: Optional[Trailer] = None

    @property
    def position(self) -> Tuple[int, int]:
        return (self.token_index, self.start)

    def follows(self, other: "Occurrence") -> bool:
        """True if this occurrence starts at or after the end of other"""
        if self.token_index != other.token_index:
            return self.token_index > other.token_index
        return self.start >= other.end

    @property
    def trailer_end(self) -> int:
        return self.trailer.end if self.trailer else self.end

    @property
    def trailer_token(self) -> int:
        """Index of the token where the trailer ends"""
        if self.trailer and self.trailer.token_index is not None:
            return self.trailer.token_index
        return self.token_index


@dataclass
class Match:
    """
    A resolved delimiter pair

    Produced by PairMatcher.pair_find(), consumed right away by
    SpanBuilder.span_build().
    """
    left: Occurrence
    right: Occurrence
    rule: FilterRule

    @property
    def inline_options(self) -> Optional[str]:
        return self.right.trailer.options if self.right.trailer else None

    @property
    def trailing_punct(self) -> Optional[str]:
        return self.right.trailer.punct if self.right.trailer else None


@dataclass
class BuildResult:
    """
    Result of replacing a matched range with a span

    Attributes:
        tokens: The rewritten token list (a new list)
        resume_index: Token index where scanning continues, just past the
                      span and any re-inserted punctuation
    """
    tokens: List[Token]
    resume_index: int
