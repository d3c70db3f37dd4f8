"""
Span engine: drives scanning, matching and building over a run

A run is the inline content of one block (one paragraph's worth). The
engine:
1. Partitions the run into maximal sub-ranges without Opaque tokens,
   so a pair never encloses a code/math/raw element.
2. For each sub-range, loops scan -> match -> build, one pair per
   iteration, resuming after the span just built, until no rule matches.

Example:
    >>> store = RuleStore.rules_make([FilterRule("--", "--", "mycommand")])
    >>> engine = SpanEngine(store)
    >>> engine.run_process([Text("This is a sample --enclosed text--")])
    [Text(text='This is a sample '), Span(classname='mycommand', attributes={},
     children=[Text(text='enclosed text')])]
"""

from typing import List, Optional

from ..config import appsettings
from ..models.rules import RuleStore
from ..models.tokens import Opaque, Token
from .scanner import DelimiterScanner
from .matcher import PairMatcher
from .builder import SpanBuilder
from .log import LOG, NOTICE


class SpanEngine:
    """
    Rewrites runs of inline tokens for one RuleStore

    Attributes:
        store: Immutable rules, shared by the scanner and the matcher
        scanner: DelimiterScanner for the store
        matcher: PairMatcher for the store
        builder: SpanBuilder
        span_count: Total spans built by this engine
    """

    def __init__(
        self,
        store: RuleStore,
        punctuation: Optional[str] = None,
        separators: Optional[str] = None,
    ) -> None:
        """
        Initialize the engine

        Args:
            store: Rules to apply
            punctuation: Trailing punctuation characters
                         (default: appsettings.trailing_punctuation)
            separators: Option separators (default: appsettings.option_separators)
        """
        self.store = store
        self.scanner = DelimiterScanner(store, punctuation)
        self.matcher = PairMatcher(store)
        self.builder = SpanBuilder(separators)
        self.span_count = 0
        self._empty_noticed = False

    def run_process(self, tokens: List[Token]) -> List[Token]:
        """
        Rewrite one run

        Args:
            tokens: Inline tokens of one block; not modified

        Returns:
            A new token list with every matched pair replaced by a Span.
            With no rules configured, a copy of the input.
        """
        if self.store.is_empty():
            if not self._empty_noticed:
                NOTICE("No flexspan rules defined. Skipping")
                self._empty_noticed = True
            return list(tokens)

        result: List[Token] = []
        for segment in self.tokens_partition(tokens):
            if len(segment) == 1 and isinstance(segment[0], Opaque):
                result.append(segment[0])
            else:
                result.extend(self.segment_process(segment))
        return result

    def tokens_partition(self, tokens: List[Token]) -> List[List[Token]]:
        """
        Split a run around Opaque tokens

        Returns:
            Segments in order: maximal lists without Opaque tokens, and
            single-element lists holding one Opaque token each

        Example:
            [Text("a"), Opaque(code), Text("b"), Text("c")]
            -> [[Text("a")], [Opaque(code)], [Text("b"), Text("c")]]
        """
        segments: List[List[Token]] = []
        current: List[Token] = []

        for token in tokens:
            if isinstance(token, Opaque):
                if current:
                    segments.append(current)
                    current = []
                segments.append([token])
            else:
                current.append(token)

        if current:
            segments.append(current)
        return segments

    def segment_process(self, tokens: List[Token]) -> List[Token]:
        """
        Loop scan -> match -> build over one sub-range to a fixed point

        Spans already built are never rescanned: scanning always resumes
        after the last span.
        """
        position = 0
        while position < len(tokens):
            occurrences = self.scanner.delimiters_scan(tokens, position)
            match = self.matcher.pair_find(occurrences, tokens)
            if match is None:
                break
            built = self.builder.span_build(tokens, match)
            tokens, position = built.tokens, built.resume_index
            self.span_count += 1

        return tokens


def engine_make(store: RuleStore) -> SpanEngine:
    """Build an engine configured from appsettings"""
    LOG(f"Engine with {len(store)} rules", level=2)
    return SpanEngine(
        store,
        punctuation=appsettings.trailing_punctuation,
        separators=appsettings.option_separators,
    )
