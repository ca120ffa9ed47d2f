"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing command line stages.
"""

import dataclasses
from argparse import Namespace
from dataclasses import dataclass, field
from functools import reduce
from pathlib import Path
from typing import Callable, Optional, Type, TypeVar, TYPE_CHECKING

from .node import Node

# Forward reference for type hint - avoid circular import
if TYPE_CHECKING:
    from ..lib.exporter import ExportResult


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the export pipeline (state bus pattern).

    Carries all program state through the command line stages, with each
    stage adding new fields as the export progresses.

    Pipeline stages and their state additions:
        - Initial: inputFile, vaultDir, target, slug, lang, outputFile, verbosity
        - env_check: inputSourceFile, envOK
        - document_load: document
        - document_export: exportResult
        - results_report: (no additions, terminal stage)

    Attributes:
        inputFile: Path of the AST file (JSON or YAML)
        vaultDir: Vault directory used to resolve slugs and assets
        target: Output target name ('hugo-blowfish' or 'wechat-post')
        slug: Publish slug override
        lang: Article language override
        outputFile: Where to write the result; stdout when empty
        verbosity: Logging verbosity level (0-3)
        envOK: Environment validation passed
        inputSourceFile: Resolved path to the AST file
        document: Document tree loaded from the AST file
        exportResult: Result of the export
    """

    # CLI arguments
    inputFile: str = field(default="")
    vaultDir: str = field(default=".")
    target: str = field(default="hugo-blowfish")
    slug: Optional[str] = field(default=None)
    lang: Optional[str] = field(default=None)
    outputFile: str = field(default="")
    verbosity: int = field(default=1)

    # Pipeline state
    envOK: bool = field(default=False)
    inputSourceFile: Path = field(default=Path("/"))
    document: Optional[Node] = field(default=None)
    exportResult: Optional["ExportResult"] = field(default=None)

    @classmethod
    def state_createFromNamespace(cls: Type[PS], options: Namespace) -> PS:
        """
        Create ProgramState from an argparse Namespace.

        Options that are not ProgramState fields are ignored.

        Args:
            options: Parsed CLI arguments

        Returns:
            ProgramState instance with the CLI options as attributes
        """
        valid_fields = {f.name for f in dataclasses.fields(cls)}
        filtered_options = {k: v for k, v in vars(options).items() if k in valid_fields}
        return cls(**filtered_options)

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

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            document_load,
            document_export,
            results_report
        )

    This is equivalent to:
        results_report(document_export(document_load(env_check(initial_state))))

    But reads left-to-right instead of inside-out.
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
