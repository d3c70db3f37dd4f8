#!/usr/bin/env python3
"""
flexspan - Delimiter-to-span rewriting for pandoc documents

Rewrites user-configured delimiter pairs in a pandoc JSON document into
classed spans, and (for LaTeX-like targets) spans into raw command
invocations.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Philosophy:
    - Author-defined markup: the delimiters live in the document metadata
    - Literal delimiters: no regular expressions to get wrong
    - Target-aware: spans for HTML, \\command{...} for LaTeX/beamer

Rules (document front matter or --rulesFile):
    flexspan:
      - left: "!!"
        command: custombox
        opts: Cerulean

Usage:
    pandoc doc.md -t json -o in/doc.json
    flexspan in/ out/ --inputFile doc.json --to latex
    pandoc out/doc.json -o doc.tex

    For direct use inside pandoc see flexspan-filter.

Examples:
    # Basic rewrite, spans kept for HTML output
    flexspan in/ out/ --inputFile doc.json

    # Rules from a file, rendered for beamer
    flexspan in/ out/ --inputFile talk.json --rulesFile spans.yaml --to beamer

    # Verbose output
    flexspan in/ out/ --inputFile doc.json -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .config import appsettings
from .lib import (
    __version__,
    LOG,
    state_connectToLogger,
    engine_make,
    store_load,
    document_load,
    document_dump,
    document_rewrite,
    document_render,
    RuleConfigError,
    DocumentError,
)
from .models import ProgramState, pipeline


DISPLAY_TITLE = r"""
   __ _
  / _| | _____  _____ _ __   __ _ _ __
 | |_| |/ _ \ \/ / __| '_ \ / _` | '_ \
 |  _| |  __/>  <\__ \ |_) | (_| | | | |
 |_| |_|\___/_/\_\___/ .__/ \__,_|_| |_|
                     |_|
  Delimiter-to-span rewriting
"""

# Define CLI arguments
parser = ArgumentParser(
    description="flexspan - rewrite configured delimiter pairs into spans and commands",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile", required=True, type=str, help="Input pandoc JSON document (relative to inputdir)"
)

parser.add_argument(
    "--rulesFile",
    default=appsettings.rules_file,
    type=str,
    help="YAML file with rule definitions (relative to inputdir), applied before document rules",
)

parser.add_argument(
    "--to",
    default=None,
    type=str,
    help="Target output format; latex-like formats get raw command invocations",
)

parser.add_argument(
    "--outputFile",
    default="",
    type=str,
    help="Output filename within outputdir. Defaults to the input filename",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve all file paths.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - inputSourceFile: Resolved path to the input document
            - rulesSourceFile: Resolved path to the rules file (or None)
            - jsonOutputFile: Path of the output document
            - envOK: True if environment is valid

    Exits:
        1 if input file or rules file not found
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    input_file = state.inputdir / state.inputFile
    if not input_file.exists():
        print(f"Error: Input file not found: {input_file}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.inputSourceFile = input_file
    LOG(f"Input file: {input_file}", level=2)

    if state.rulesFile:
        rules_file = state.inputdir / state.rulesFile
        if not rules_file.exists():
            print(f"Error: Rules file not found: {rules_file}", file=sys.stderr)
            state.envOK = False
            sys.exit(1)
        state.rulesSourceFile = rules_file
        LOG(f"Rules file: {rules_file}", level=2)

    state.outputdir.mkdir(parents=True, exist_ok=True)
    state.jsonOutputFile = state.outputdir / (state.outputFile or Path(state.inputFile).name)
    LOG(f"Output file: {state.jsonOutputFile}", level=2)

    state.envOK = True
    return state


def source_read(inputstate: ProgramState) -> ProgramState:
    """
    Read the pandoc JSON document.

    Returns:
        ProgramState with added field:
            - document: Parsed pandoc JSON document

    Exits:
        1 if file read fails or the file is not a pandoc JSON document
    """

    state = inputstate.copy()

    LOG("Reading document...", level=1)

    try:
        source = state.inputSourceFile.read_text(encoding="utf-8")
        LOG(f"Read {len(source)} characters from {state.inputSourceFile.name}", level=2)
    except OSError as e:
        print(f"Error reading input file: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        state.document = document_load(source)
        LOG(f"Document has {len(state.document['blocks'])} top-level blocks", level=2)
    except DocumentError as e:
        print(f"Document error: {e}", file=sys.stderr)
        sys.exit(1)
    return state


def rules_load(inputstate: ProgramState) -> ProgramState:
    """
    Collect rules from the rules file and the document metadata.

    Returns:
        ProgramState with added field:
            - ruleStore: RuleStore for this document

    Exits:
        1 if the rules file cannot be parsed
    """

    state = inputstate.copy()

    LOG("Loading rules...", level=1)
    try:
        state.ruleStore = store_load(
            meta=state.document.get("meta") if state.document else None,
            rules_file=state.rulesSourceFile,
        )
    except RuleConfigError as e:
        print(f"Rules error: {e}", file=sys.stderr)
        sys.exit(1)

    for rule in state.ruleStore.rules:
        LOG(f"  {rule.left} ... {rule.right} -> .{rule.command}", level=3)
    return state


def spans_rewrite(inputstate: ProgramState) -> ProgramState:
    """
    Rewrite delimiter pairs into spans.

    Returns:
        ProgramState with added field:
            - spanCount: Number of spans built
    """

    state = inputstate.copy()

    LOG("Rewriting delimiter pairs...", level=1)
    engine = engine_make(state.ruleStore)
    state.spanCount = document_rewrite(state.document, engine)
    return state


def commands_render(inputstate: ProgramState) -> ProgramState:
    """
    Render recognized spans as raw commands for latex-like targets.

    Returns:
        ProgramState with added field:
            - renderCount: Number of spans rendered
    """

    state = inputstate.copy()

    if state.to:
        LOG(f"Rendering commands for {state.to}...", level=1)
        state.renderCount = document_render(state.document, state.ruleStore.commands_get(), state.to)
    return state


def result_write(inputstate: ProgramState) -> ProgramState:
    """
    Write the rewritten document.

    Returns:
        ProgramState with added field:
            - rewriteResult: Dict containing status, output_file,
              span_count, render_count and rule_count

    Exits:
        1 if the output file cannot be written
    """

    state = inputstate.copy()

    try:
        state.jsonOutputFile.write_text(document_dump(state.document), encoding="utf-8")
    except OSError as e:
        print(f"Error writing output file: {e}", file=sys.stderr)
        sys.exit(1)
    LOG(f"Wrote {state.jsonOutputFile}", level=2)

    state.rewriteResult = {
        "status": True,
        "output_file": str(state.jsonOutputFile),
        "span_count": state.spanCount,
        "render_count": state.renderCount,
        "rule_count": len(state.ruleStore),
    }
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display rewrite results to user.

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if rewriteResult is None
    """
    state: ProgramState = inputstate.copy()
    if not state.rewriteResult:
        print("Error: Rewrite failed", file=sys.stderr)
        sys.exit(1)

    LOG("\n✓ Rewrite successful!", level=1)
    LOG(f"  Output: {state.rewriteResult['output_file']}", level=1)
    LOG(f"  Rules:  {state.rewriteResult['rule_count']}", level=1)
    LOG(f"  Spans:  {state.rewriteResult['span_count']}", level=1)
    if state.to:
        LOG(f"  Commands ({state.to}): {state.rewriteResult['render_count']}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="flexspan - Delimiter-to-span rewriting",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - rewrite a pandoc JSON document.

    Orchestrates the full pipeline:
        1. env_check: Validate paths and environment
        2. source_read: Read the pandoc JSON document
        3. rules_load: Build the RuleStore
        4. spans_rewrite: Delimiter pairs -> spans
        5. commands_render: Spans -> raw commands (latex-like --to only)
        6. result_write: Write the document
        7. results_report: Display results to user

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(
        state,
        env_check,
        source_read,
        rules_load,
        spans_rewrite,
        commands_render,
        result_write,
        results_report,
    )


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
