"""
flexspan - Delimiter-to-span rewriting for pandoc documents

Turns user-configured delimiter pairs (--text--, [[text]](opts), ...)
into classed spans, and spans into LaTeX commands.
"""

__version__ = "1.0.0"
__author__ = "Rudolph Pienaar"
__email__ = "rudolph.pienaar@gmail.com"

from .engine import SpanEngine, engine_make
from .loader import store_load, RuleConfigError
from .pandoc import document_load, document_dump, document_rewrite, document_render, DocumentError
from .log import LOG, NOTICE, state_connectToLogger

__all__ = [
    "SpanEngine",
    "engine_make",
    "store_load",
    "RuleConfigError",
    "document_load",
    "document_dump",
    "document_rewrite",
    "document_render",
    "DocumentError",
    "LOG",
    "NOTICE",
    "state_connectToLogger",
    "__version__",
]
