"""
okrlint cat - Aggregate several reports into one.

Every input is linted first; the KRs of all inputs are then grouped by
project and printed as a single report.
"""

from okrlint.commands.lint import check_files_exist, lint_inputs
from okrlint.lib.conf import Conf
from okrlint.lib.report import aggregate
from okrlint.lib.sections import SectionFilter


def cmd_cat(args, sections: SectionFilter, conf: Conf) -> int:
    """Print the aggregated report of all inputs."""
    if not check_files_exist(args.files):
        return 2

    runs = lint_inputs(args.files, sections, short=args.short)
    if runs is None:
        return 1

    report = aggregate(kr for run in runs for kr in run.krs)
    print(report.to_markdown(section=args.section, footer=conf.footer), end="")
    return 0
