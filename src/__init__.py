"""
flexspan - Delimiter-to-span rewriting for pandoc documents

Turns user-configured delimiter pairs (--text--, [[text]](opts), ...)
into classed spans, and spans into LaTeX commands.
"""

__version__ = "1.0.0"
__author__ = "Rudolph Pienaar"
__email__ = "rudolph.pienaar@gmail.com"

from .lib import SpanEngine, store_load, document_rewrite, document_render, LOG, state_connectToLogger

__all__ = [
    "SpanEngine",
    "store_load",
    "document_rewrite",
    "document_render",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
