"""
Pandoc JSON filter entry point

Pandoc runs a filter with the target format as first argument, the
document as JSON on stdin, and expects the document back on stdout:

    pandoc -F flexspan-filter doc.md -o doc.pdf
    pandoc -F flexspan-filter -t beamer talk.md -o talk.tex

Same stages as the flexspan batch pipeline, without the file handling.
The rules file, if any, comes from FLEXSPAN_RULES_FILE or --rulesFile.
"""

import sys
from argparse import ArgumentParser
from typing import List, Optional, TextIO

from .config import appsettings
from .lib import (
    engine_make,
    store_load,
    document_load,
    document_dump,
    document_rewrite,
    document_render,
    RuleConfigError,
    DocumentError,
)
from .models import ProgramState
from .lib.log import LOG, state_connectToLogger


filter_parser = ArgumentParser(
    prog="flexspan-filter",
    description="pandoc JSON filter: rewrite configured delimiter pairs into spans and commands",
)

filter_parser.add_argument(
    "to", nargs="?", default=None, help="Target format (passed by pandoc)"
)

filter_parser.add_argument(
    "--rulesFile", default=appsettings.rules_file, type=str, help="YAML file with rule definitions"
)

filter_parser.add_argument(
    "-v", "--verbosity", action="count", default=0, help="Log to stderr (can be repeated)"
)


def stream_filter(source: TextIO, sink: TextIO, to: Optional[str], rules_file: Optional[str] = None) -> int:
    """
    Filter one document from source to sink

    Args:
        source: Stream holding pandoc JSON
        sink: Stream receiving the rewritten JSON
        to: Target format
        rules_file: Optional YAML rules file

    Returns:
        Number of spans built
    """
    doc = document_load(source.read())
    store = store_load(meta=doc.get("meta"), rules_file=rules_file)
    count = document_rewrite(doc, engine_make(store))
    document_render(doc, store.commands_get(), to)
    sink.write(document_dump(doc))
    return count


def filter_main(argv: Optional[List[str]] = None) -> int:
    """Console entry point of flexspan-filter"""
    options = filter_parser.parse_args(argv)
    state = ProgramState(verbosity=options.verbosity, to=options.to, rulesFile=options.rulesFile)
    state_connectToLogger(state)

    try:
        count = stream_filter(sys.stdin, sys.stdout, options.to, options.rulesFile)
    except (DocumentError, RuleConfigError) as e:
        print(f"flexspan-filter: {e}", file=sys.stderr)
        return 1

    LOG(f"flexspan-filter: {count} spans", level=1)
    return 0


if __name__ == "__main__":
    sys.exit(filter_main())
