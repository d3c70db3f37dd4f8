"""
Models package for flexspan

Contains data structures and type definitions for the rewrite pipeline.
"""

from .state import ProgramState, pipeline
from .rules import FilterRule, RuleStore
from .tokens import Text, Opaque, Inline, Span, Token
from .matching import Trailer, Occurrence, Match, BuildResult

__all__ = [
    "ProgramState",
    "pipeline",
    "FilterRule",
    "RuleStore",
    "Text",
    "Opaque",
    "Inline",
    "Span",
    "Token",
    "Trailer",
    "Occurrence",
    "Match",
    "BuildResult",
]
