"""
Filter rule models

Defines the FilterRule dataclass (one delimiter pair mapped to a command)
and the RuleStore, the immutable priority-sorted collection of rules that
is built once per document and handed to the engine.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple


# Aliases recognized in rule definitions. The first alias present wins.
LEFT_ALIASES: Tuple[str, ...] = ("left", "pre", "before")
RIGHT_ALIASES: Tuple[str, ...] = ("right", "pos", "after")
COMMAND_ALIASES: Tuple[str, ...] = ("command", "cmd", "class")
OPTIONS_ALIASES: Tuple[str, ...] = ("opts", "opt", "options")
CONTENT_ALIASES: Tuple[str, ...] = ("content", "val", "contents", "arg")
EXACT_ALIASES: Tuple[str, ...] = ("exact", "single", "one", "join", "contiguous")


@dataclass(frozen=True)
class FilterRule:
    """
    A delimiter pair mapped to a span class / command name

    Attributes:
        left: Literal opening delimiter (e.g., "[[")
        right: Literal closing delimiter (e.g., "]]"); same as left if omitted
        command: Class name of the produced span and name of the rendered command
        default_options: Option string used when no inline (options) follow
        content_override: Replaces the enclosed content when set
        exact: Pair must sit inside a single text token, word-shaped

    Example:
        FilterRule(left="--", right="--", command="mycommand")
        turns "a --b-- c" into "a " + Span(mycommand, ["b"]) + " c"
    """
    left: str
    right: str
    command: str
    default_options: Optional[str] = None
    content_override: Optional[str] = None
    exact: bool = False

    @property
    def identity(self) -> Tuple[str, str, str]:
        """Rules with the same (left, right, command) are the same rule"""
        return (self.left, self.right, self.command)

    @property
    def priority(self) -> Tuple[int, int, str, str, str]:
        """
        Sort key of the priority order

        Exact rules first, then longer left delimiters, then
        lexicographic by left (right and command break remaining ties).
        """
        return (0 if self.exact else 1, -len(self.left), self.left, self.right, self.command)


@dataclass(frozen=True)
class RuleStore:
    """
    Immutable, deduplicated, priority-sorted collection of FilterRules

    Built with RuleStore.rules_make(); do not construct directly with an
    unsorted tuple.

    Attributes:
        rules: Rules in priority order
        left_index: Delimiter string -> rules using it as left (priority order)
        right_index: Delimiter string -> rules using it as right (priority order)
    """
    rules: Tuple[FilterRule, ...] = ()
    left_index: Dict[str, Tuple[FilterRule, ...]] = field(default_factory=dict)
    right_index: Dict[str, Tuple[FilterRule, ...]] = field(default_factory=dict)

    @classmethod
    def rules_make(cls, rules: Iterable[FilterRule]) -> "RuleStore":
        """
        Build a store from rules in definition order.

        The first of several identical rules is kept; the survivors are
        sorted into priority order and indexed by delimiter.

        Args:
            rules: FilterRules in the order they were defined

        Returns:
            A ready RuleStore
        """
        seen: Set[Tuple[str, str, str]] = set()
        unique: List[FilterRule] = []
        for rule in rules:
            if rule.identity in seen:
                continue
            seen.add(rule.identity)
            unique.append(rule)

        ordered = tuple(sorted(unique, key=lambda r: r.priority))

        left_index: Dict[str, List[FilterRule]] = {}
        right_index: Dict[str, List[FilterRule]] = {}
        for rule in ordered:
            left_index.setdefault(rule.left, []).append(rule)
            right_index.setdefault(rule.right, []).append(rule)

        return cls(
            rules=ordered,
            left_index={k: tuple(v) for k, v in left_index.items()},
            right_index={k: tuple(v) for k, v in right_index.items()},
        )

    def is_empty(self) -> bool:
        return not self.rules

    def delimiters_get(self) -> List[str]:
        """All distinct delimiter strings, longest first"""
        delimiters = set(self.left_index) | set(self.right_index)
        return sorted(delimiters, key=lambda d: (-len(d), d))

    def commands_get(self) -> Set[str]:
        """Command names of all rules (recognized by the renderer)"""
        return {rule.command for rule in self.rules}

    def rank_get(self, rule: FilterRule) -> int:
        """Position of a rule in the priority order"""
        return self.rules.index(rule)

    def __len__(self) -> int:
        return len(self.rules)
