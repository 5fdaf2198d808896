#!/usr/bin/env python3
"""okrlint CLI entrypoint."""

import argparse
import logging
import sys
from pathlib import Path

from okrlint.lib.conf import ConfError, load_conf
from okrlint.lib.sections import resolve_filter
from okrlint.commands import cat as cmd_cat_module
from okrlint.commands import lint as cmd_lint_module
from okrlint.commands import template as cmd_template_module


def get_sections(args):
    """Resolve --include/--ignore-sections and the --engineer/--team aliases."""
    return resolve_filter(
        args.include_sections,
        args.ignore_sections,
        engineer=args.engineer,
        team=args.team,
    )


def get_conf(args):
    """Load the configuration file, or exit 2 if it is invalid."""
    try:
        return load_conf(Path(args.conf) if args.conf else None)
    except ConfError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(2)


def cmd_lint(args):
    return cmd_lint_module.cmd_lint(args, get_sections(args))


def cmd_cat(args):
    return cmd_cat_module.cmd_cat(args, get_sections(args), get_conf(args))


def cmd_template(args):
    return cmd_template_module.cmd_template(args, get_conf(args))


def add_input_args(p):
    """Arguments shared by commands that read reports."""
    p.add_argument('files', nargs='*', metavar='FILE', help='Report files (reads stdin if none)')
    p.add_argument('--include-sections', metavar='NAMES',
                   help='If non-empty, only lint entries under these comma-separated sections')
    p.add_argument('--ignore-sections', metavar='NAMES',
                   help="Don't lint entries under these comma-separated sections (default: 'OKR updates')")
    p.add_argument('--engineer', '-e', action='store_true',
                   help='Engineer report: alias for --include-sections="Last week" --ignore-sections=""')
    p.add_argument('--team', '-t', action='store_true',
                   help='Team report: alias for --ignore-sections="OKR updates"')
    p.add_argument('--short', action='store_true', help='Print errors as FILE:LINE:MESSAGE')


def main(argv=None):
    parser = argparse.ArgumentParser(prog='okrlint', description='OKR report linter')
    parser.add_argument('--conf', help='Configuration file (default: ~/.okra/conf.yaml)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Show debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # okrlint lint
    p_lint = subparsers.add_parser(
        'lint', help='Check for formatting errors and missing information in the report')
    add_input_args(p_lint)
    p_lint.set_defaults(func=cmd_lint)

    # okrlint cat
    p_cat = subparsers.add_parser('cat', help='Aggregate reports into one')
    add_input_args(p_cat)
    p_cat.add_argument('--section', help='Put the aggregated projects under this section heading')
    p_cat.set_defaults(func=cmd_cat)

    # okrlint template
    p_template = subparsers.add_parser('template', help='Print a blank engineer report')
    p_template.add_argument('--name', '-n', default='eng', help='Engineer name for the time entries')
    p_template.set_defaults(func=cmd_template)

    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
