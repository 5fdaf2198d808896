"""
okrlint template - Print a blank engineer report.

Pre-fills the "Last week" section with the KRs from the configuration file so
the result lints cleanly with --engineer once the days are filled in.
"""

from okrlint.lib.conf import Conf
from okrlint.lib.sections import ENGINEER_SECTION

PROJECTS_HEADING = "Projects"
ACTIVITY_HEADING = "Activity (move to the relevant KR)"
PLACEHOLDER_ITEM = "Work item 1"


def render_template(conf: Conf, engineer: str) -> str:
    """Render an engineer report skeleton from conf."""
    lines = [f"# {ENGINEER_SECTION}", "", f"## {PROJECTS_HEADING}", ""]
    for project in conf.projects:
        lines.append(f"- {project.title}")
        lines.append(f"  - @{engineer} (0 days)")
        for item in project.items or [PLACEHOLDER_ITEM]:
            lines.append(f"  - {item}")
    lines.append("")

    if conf.locations:
        lines.extend([
            f"# {ACTIVITY_HEADING}",
            "",
            f"Collected from: {', '.join(conf.locations)}",
            "",
        ])

    if conf.footer:
        lines.extend([conf.footer.rstrip(), ""])

    return "\n".join(lines)


def cmd_template(args, conf: Conf) -> int:
    print(render_template(conf, args.name), end="")
    return 0
