"""
Span builder

Replaces the token range of a resolved Match with a Span.

For tokens [..., Text("a --b"), Inline(Space), Text("c--. d"), ...] and
the rule "--" -> "cmd" the result is:

    [..., Text("a "), Span("cmd", {}, [Text("b"), Inline(Space), Text("c")]),
     Text("."), Text(" d"), ...]

Text before the left delimiter and after the right delimiter's trailer
stays outside the span; empty texts are dropped. The token list is never
mutated in place, a new one is returned.
"""

from typing import Dict, List, Optional

from ..models.tokens import Span, Text, Token
from ..models.matching import BuildResult, Match
from .options import options_parse
from .log import LOG


class SpanBuilder:
    """
    Builds Span tokens from matches

    Attributes:
        separators: Option component separators (None: settings default)
    """

    def __init__(self, separators: Optional[str] = None) -> None:
        self.separators = separators

    def span_build(self, tokens: List[Token], match: Match) -> BuildResult:
        """
        Replace the matched range with a span

        Args:
            tokens: The run the match refers to
            match: Resolved pair

        Returns:
            BuildResult with the new token list and the index where
            scanning resumes (first token after the span and punctuation)
        """
        left, right, rule = match.left, match.right, match.rule
        left_token = tokens[left.token_index]
        right_token = tokens[right.token_index]
        tail_token = tokens[right.trailer_token]
        if not (isinstance(left_token, Text) and isinstance(right_token, Text) and isinstance(tail_token, Text)):
            raise TypeError("Delimiter pairs can only be built from Text tokens")

        prefix = left_token.text[:left.start]
        # An option group may run on into later tokens; those are consumed
        suffix = tail_token.text[right.trailer_end:]

        children: List[Token]
        if left.token_index == right.token_index:
            children = self.texts_keep([Text(left_token.text[left.end:right.start])])
        else:
            children = self.texts_keep(
                [Text(left_token.text[left.end:])]
                + list(tokens[left.token_index + 1:right.token_index])
                + [Text(right_token.text[:right.start])]
            )

        if rule.content_override is not None:
            children = [Text(rule.content_override)]

        span = Span(
            classname=rule.command,
            attributes=self.attributes_make(match),
            children=children,
        )

        replacement = self.texts_keep([Text(prefix)])
        replacement.append(span)
        if match.trailing_punct:
            replacement.append(Text(match.trailing_punct))
        resume_index = left.token_index + len(replacement)
        replacement.extend(self.texts_keep([Text(suffix)]))

        LOG(f"Built .{span.classname} span with {len(children)} children", level=3)

        return BuildResult(
            tokens=list(tokens[:left.token_index]) + replacement + list(tokens[right.trailer_token + 1:]),
            resume_index=resume_index,
        )

    def attributes_make(self, match: Match) -> Dict[str, str]:
        """Inline options win wholesale over the rule's default options"""
        if match.inline_options is not None:
            return options_parse(match.inline_options, self.separators)
        return options_parse(match.rule.default_options, self.separators)

    @staticmethod
    def texts_keep(tokens: List[Token]) -> List[Token]:
        """Drop Text tokens left empty by delimiter stripping"""
        return [t for t in tokens if not (isinstance(t, Text) and not t.text)]
