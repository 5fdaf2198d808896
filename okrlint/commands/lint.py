"""
okrlint lint - Check reports for formatting errors and missing information.

Checks each input for formatting errors, then parses it and looks for
inconsistencies. Inputs are processed in order and linting stops at the
first report with an error. Reads stdin if no files are given.
"""

import logging
import sys
from pathlib import Path

from okrlint.lib.lint import LintError, LintRun, format_error, run_lines, short_messages
from okrlint.lib.sections import SectionFilter

logger = logging.getLogger(__name__)

STDIN_NAME = "input stream"


def print_lint_error(error: LintError, filename: str | None, short: bool = False) -> None:
    """Print a lint error to stderr in long or short form."""
    if short:
        for message in short_messages(error, filename or "-"):
            print(message, file=sys.stderr)
        return

    where = f"file {filename}" if filename else STDIN_NAME
    sys.stderr.write(f"Error(s) in {where}:\n\n{format_error(error)}")


def check_files_exist(files: list[str]) -> bool:
    missing = [f for f in files if not Path(f).is_file()]
    for f in missing:
        print(f"ERROR: File not found: {f}", file=sys.stderr)
    return not missing


def run_inputs(files: list[str], sections: SectionFilter, short: bool = False) -> list[LintRun] | None:
    """Lint every input in order, stopping at the first failure.

    Returns the successful runs, or None after printing the first error.
    """
    runs = []
    if not files:
        run = run_lines(sys.stdin, sections, STDIN_NAME)
        if run.error:
            print_lint_error(run.error, None, short)
            return None
        return [run]

    for filename in files:
        with open(filename) as f:
            run = run_lines(f, sections, filename)
        if run.error:
            print_lint_error(run.error, filename, short)
            return None
        logger.debug(f"{filename}: {len(run.krs)} KRs")
        runs.append(run)
    return runs


def lint_inputs(files: list[str], sections: SectionFilter, short: bool = False) -> list[LintRun] | None:
    """run_inputs(), announcing unexpected exceptions before re-raising them."""
    try:
        return run_inputs(files, sections, short=short)
    except Exception:
        sys.stderr.write("Caught unknown error while linting:\n\n")
        raise


def cmd_lint(args, sections: SectionFilter) -> int:
    """Lint the given files (or stdin). Returns the process exit code."""
    if not check_files_exist(args.files):
        return 2

    runs = lint_inputs(args.files, sections, short=args.short)
    return 0 if runs is not None else 1
