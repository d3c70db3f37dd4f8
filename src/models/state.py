"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, Dict, Callable, TYPE_CHECKING
from dataclasses import dataclass, field

# Forward reference for type hint - avoid circular import
if TYPE_CHECKING:
    from .rules import RuleStore


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the rewrite pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as the rewrite progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, inputFile, rulesFile, to, outputFile
        - env_check: inputSourceFile, rulesSourceFile, jsonOutputFile, envOK
        - source_read: document
        - rules_load: ruleStore
        - spans_rewrite: spanCount
        - commands_render: renderCount
        - result_write: rewriteResult
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing the pandoc JSON document
        outputdir: Base output directory for the rewritten document
        verbosity: Logging verbosity level (1-3)
        inputFile: Input .json filename (relative to inputdir)
        rulesFile: Optional YAML rules file (relative to inputdir)
        to: Target output format deciding whether commands are rendered
        outputFile: Output filename (relative to outputdir)
        envOK: Environment validation passed
        inputSourceFile: Resolved path to the input document
        rulesSourceFile: Resolved path to the rules file, if any
        jsonOutputFile: Resolved path of the output document
        document: Parsed pandoc JSON document
        ruleStore: Rules from the rules file and document metadata
        spanCount: Number of spans built
        renderCount: Number of spans rendered as raw commands
        rewriteResult: Results (output_file, span_count, rule_count, status)
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputFile: str = field(default="")
    rulesFile: Optional[str] = field(default=None)
    to: Optional[str] = field(default=None)
    outputFile: str = field(default="")

    # Pipeline state
    envOK: bool = field(default=False)
    inputSourceFile: Path = field(default=Path("/"))
    rulesSourceFile: Optional[Path] = field(default=None)
    jsonOutputFile: Path = field(default=Path("/"))
    document: Optional[Dict[str, Any]] = field(default=None)
    ruleStore: Optional["RuleStore"] = field(default=None)
    spanCount: int = field(default=0)
    renderCount: int = field(default=0)
    rewriteResult: Optional[Dict] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Merges CLI options with explicitly provided directories to create
        the initial program state for the rewrite pipeline.

        Args:
            options: Parsed CLI arguments (inputFile, rulesFile, etc.)
            inputdir: Directory containing source files
            outputdir: Directory for rewrite output

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        # Get the dictionary of all attributes from the Namespace
        options_dict = vars(options)

        # Get the set of valid field names for ProgramState
        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        # Filter options_dict to only include fields that exist in ProgramState
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}

        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}

        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Args:
        initial_state: Starting ProgramState
        *stages: Variable number of stage functions to execute in order

    Returns:
        Final ProgramState after all transformations

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            source_read,
            rules_load,
            spans_rewrite,
            result_write,
        )

    This is equivalent to:
        result_write(spans_rewrite(rules_load(source_read(env_check(initial_state)))))

    But reads left-to-right instead of inside-out.
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)
