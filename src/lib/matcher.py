"""
Pair matcher

Pairs a left delimiter occurrence with the nearest right occurrence of
the same rule.

Algorithm (one call returns at most one Match):
1. Walk left-usable occurrences in document order.
2. At one position, try the candidate rules of every delimiter found
   there in priority order (exact rules, then longer left delimiters).
3. For a candidate rule, the first later occurrence whose right rules
   contain that very rule closes the pair. "Later" means starting at or
   after the end of the left occurrence, so a palindromic delimiter
   (e.g. "**") never closes itself.
4. If no closer exists the candidate is skipped; its text stays as is.

Exact rules additionally require both occurrences in the same Text
token, with the left delimiter at the token start (or after
whitespace) and the right delimiter plus trailer at the token end (or
before whitespace).
"""

from itertools import groupby
from typing import List, Optional, Tuple

from ..models.rules import FilterRule, RuleStore
from ..models.tokens import Text, Token
from ..models.matching import Match, Occurrence
from .log import LOG


class PairMatcher:
    """
    Matcher for one RuleStore

    Attributes:
        store: Rules, used for the priority ranking of candidates
    """

    def __init__(self, store: RuleStore) -> None:
        self.store = store

    def pair_find(self, occurrences: List[Occurrence], tokens: List[Token]) -> Optional[Match]:
        """
        Find the first valid pair in document order

        Args:
            occurrences: Scanner output, document order
            tokens: The run the occurrences refer to

        Returns:
            The first Match, or None if no rule matches
        """
        for _, group in groupby(occurrences, key=lambda o: o.position):
            for rule, left in self.candidates_rank(list(group)):
                right = self.right_find(occurrences, left, rule, tokens)
                if right is None:
                    LOG(f"No closing '{rule.right}' for '{rule.left}' at token {left.token_index}", level=3)
                    continue
                LOG(
                    f"Pair '{rule.left}'...'{rule.right}' -> .{rule.command} "
                    f"(tokens {left.token_index}-{right.token_index})",
                    level=3,
                )
                return Match(left=left, right=right, rule=rule)

        return None

    def candidates_rank(self, group: List[Occurrence]) -> List[Tuple[FilterRule, Occurrence]]:
        """
        Order the (rule, occurrence) candidates found at one position

        Args:
            group: Occurrences sharing a token index and start offset

        Returns:
            Candidates in priority order of their rules
        """
        candidates = [(rule, occurrence) for occurrence in group for rule in occurrence.left_rules]
        return sorted(candidates, key=lambda c: self.store.rank_get(c[0]))

    def right_find(
        self,
        occurrences: List[Occurrence],
        left: Occurrence,
        rule: FilterRule,
        tokens: List[Token],
    ) -> Optional[Occurrence]:
        """
        Find the nearest occurrence closing rule after left

        Args:
            occurrences: Scanner output, document order
            left: The opening occurrence
            rule: The candidate rule of the opening occurrence
            tokens: The run (needed for the exact-rule boundary checks)

        Returns:
            The closing occurrence, or None
        """
        for right in occurrences:
            if not right.follows(left):
                continue
            if rule.exact and right.token_index != left.token_index:
                # Occurrences are in document order: nothing further can qualify
                return None
            if rule not in right.right_rules:
                continue
            if rule.exact and not self.exact_fits(tokens, left, right):
                continue
            return right

        return None

    def exact_fits(self, tokens: List[Token], left: Occurrence, right: Occurrence) -> bool:
        """
        Check the word shape required by exact rules

        Returns:
            True if left starts the token (or follows whitespace) and the
            right delimiter with its trailer ends it (or precedes whitespace)
        """
        token = tokens[left.token_index]
        tail_token = tokens[right.trailer_token]
        if not (isinstance(token, Text) and isinstance(tail_token, Text)):
            return False
        text = token.text
        opens = left.start == 0 or text[left.start - 1].isspace()
        tail = right.trailer_end
        closes = tail == len(tail_token.text) or tail_token.text[tail].isspace()
        return opens and closes
