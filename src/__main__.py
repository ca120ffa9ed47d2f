#!/usr/bin/env python3
"""
vaultpress - Publish Obsidian-style notes to Hugo and WeChat

Converts a parsed note (a Markdown AST stored as JSON or YAML) into one
of two publishing formats by applying the target's rule set:

    hugo-blowfish   Markdown with Blowfish shortcodes (alerts, refs,
                    katex, mermaid); images are copied next to the article
    wechat-post     one self-contained HTML fragment; images are inlined
                    as data URIs and code is highlighted with inline styles

Slugs of linked notes and image files are looked up in the vault
directory. Settings come from VAULTPRESS_* environment variables or a
.env file (see config/settings.py).

Usage:
    vaultpress --inputFile note.json --vaultDir ~/notes --target hugo-blowfish

Examples:
    # Hugo article to stdout
    vaultpress --inputFile intro.json --vaultDir notes/

    # WeChat post, English, written to a file, verbose
    vaultpress --inputFile intro.yaml --vaultDir notes/ --target wechat-post \\
        --lang en --outputFile intro.html -vv
"""

import sys
from argparse import ArgumentParser, ArgumentDefaultsHelpFormatter, Namespace
from pathlib import Path
from typing import List, Optional

import yaml

from . import __version__
from .config import appsettings
from .lib import LOG, Exporter, Target, Vault, state_connectToLogger
from .models import ProgramState, node_fromDict, pipeline


# Define CLI arguments
parser = ArgumentParser(
    description="vaultpress - rule-based note exporter for Hugo Blowfish and WeChat",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile", required=True, type=str, help="Document AST file (JSON or YAML)"
)

parser.add_argument(
    "--target",
    default=Target.HUGO_BLOWFISH.value,
    choices=[t.value for t in Target],
    help="Output format",
)

parser.add_argument(
    "--vaultDir", default=".", type=str, help="Vault directory for linked notes and images"
)

parser.add_argument("--slug", default=None, type=str, help="Publish slug (default: front matter)")

parser.add_argument("--lang", default=None, type=str, help="Article language (default: front matter)")

parser.add_argument(
    "--outputFile", default="", type=str, help="Write the result here instead of stdout"
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
    Validate the input file and the vault directory.

    Returns:
        ProgramState with added fields:
            - inputSourceFile: Resolved path to the AST file
            - envOK: True if environment is valid

    Exits:
        1 if the input file or the vault directory is missing
    """
    state = inputstate.copy()

    LOG("Checking environment...", level=2)

    input_file = Path(state.inputFile)
    if not input_file.is_file():
        print(f"Error: Input file not found: {input_file}", file=sys.stderr)
        sys.exit(1)
    state.inputSourceFile = input_file

    if not Path(state.vaultDir).is_dir():
        print(f"Error: Vault directory not found: {state.vaultDir}", file=sys.stderr)
        sys.exit(1)

    LOG(f"Input file: {input_file}", level=2)
    LOG(f"Vault: {state.vaultDir}", level=2)
    state.envOK = True
    return state


def document_load(inputstate: ProgramState) -> ProgramState:
    """
    Read the AST file into a document tree.

    JSON is a subset of YAML, so one loader reads both.

    Returns:
        ProgramState with added field:
            - document: Root Node of the document

    Exits:
        1 if the file cannot be read or is not a valid AST
    """
    state = inputstate.copy()

    LOG("Loading document...", level=1)
    try:
        data = yaml.safe_load(state.inputSourceFile.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        print(f"Error reading input file: {e}", file=sys.stderr)
        sys.exit(1)

    if not isinstance(data, dict):
        print("Error: Input file must hold one node mapping", file=sys.stderr)
        sys.exit(1)

    try:
        state.document = node_fromDict(data)
    except ValueError as e:
        print(f"Invalid document: {e}", file=sys.stderr)
        sys.exit(1)

    LOG(f"Loaded {state.document.kind.value} with {len(state.document.children)} top-level nodes", level=2)
    return state


def document_export(inputstate: ProgramState) -> ProgramState:
    """
    Export the document for the selected target.

    Returns:
        ProgramState with added field:
            - exportResult: ExportResult of the run

    Exits:
        1 if the export fails
    """
    state = inputstate.copy()

    if state.document is None:
        print("Error: No document loaded", file=sys.stderr)
        sys.exit(1)

    LOG(f"Exporting for {state.target}...", level=1)
    try:
        exporter = Exporter(state.target, settings=appsettings)
        state.exportResult = exporter.export_sync(
            state.document, slug=state.slug, lang=state.lang, app=Vault(state.vaultDir)
        )
    except Exception as e:
        print(f"Export error: {e}", file=sys.stderr)
        if state.verbosity >= 3:
            import traceback

            traceback.print_exc()
        sys.exit(1)

    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Write the exported content and summarize the run.

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if exportResult is None
    """
    state: ProgramState = inputstate.copy()
    result = state.exportResult
    if result is None:
        print("Error: Export failed", file=sys.stderr)
        sys.exit(1)

    if state.outputFile:
        Path(state.outputFile).write_text(result.content, encoding="utf-8")
        LOG(f"Wrote {state.outputFile}", level=1)
    else:
        sys.stdout.write(result.content)

    LOG(f"  Slug: {result.slug}", level=1)
    LOG(f"  Suggested file name: {result.file_name}", level=1)
    LOG(f"  Assets: {len(result.image_files)}", level=1)
    for kind in sorted(k.value for k in result.unmatched_kinds):
        LOG(f"  Passed through without a rule: {kind}", level=1, severity="WARNING")
    return state


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point - export one document.

    Orchestrates the pipeline:
        1. env_check: Validate the input file and vault
        2. document_load: Read the AST file
        3. document_export: Run the target's rule set
        4. results_report: Write the result
    """
    options: Namespace = parser.parse_args(argv)
    state: ProgramState = ProgramState.state_createFromNamespace(options)

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, document_load, document_export, results_report)


if __name__ == "__main__":
    main()
