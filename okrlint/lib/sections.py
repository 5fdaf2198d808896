"""
Section include/ignore configuration.

The include and ignore sets decide which top-level sections of a report are
parsed. They are immutable values passed explicitly into the pipeline.
"""

from dataclasses import dataclass

ENGINEER_SECTION = "Last week"
OKR_UPDATES_SECTION = "OKR updates"

DEFAULT_INCLUDE_SECTIONS: tuple[str, ...] = ()
DEFAULT_IGNORE_SECTIONS: tuple[str, ...] = (OKR_UPDATES_SECTION,)


@dataclass(frozen=True)
class SectionFilter:
    """Which sections to parse.

    If include is non-empty only those sections are parsed and every name in
    it must appear in the document. Otherwise all sections except the ignored
    ones are parsed. Names are case-sensitive.
    """
    include: tuple[str, ...] = DEFAULT_INCLUDE_SECTIONS
    ignore: tuple[str, ...] = DEFAULT_IGNORE_SECTIONS

    def visits(self, section: str) -> bool:
        if self.include:
            return section in self.include
        return section not in self.ignore

    def missing_includes(self, seen: set[str]) -> list[str]:
        return [name for name in self.include if name not in seen]


def engineer_filter() -> SectionFilter:
    """Filter for an engineer report: only "Last week", nothing ignored."""
    return SectionFilter(include=(ENGINEER_SECTION,), ignore=())


def team_filter(include: tuple[str, ...] = DEFAULT_INCLUDE_SECTIONS) -> SectionFilter:
    """Filter for a team report: ignore "OKR updates", include unchanged."""
    return SectionFilter(include=include, ignore=(OKR_UPDATES_SECTION,))


def split_names(value: str | None) -> tuple[str, ...]:
    """Parse a comma-separated CLI value, dropping empty names."""
    if not value:
        return ()
    return tuple(name.strip() for name in value.split(',') if name.strip())


def resolve_filter(
    include: str | None,
    ignore: str | None,
    engineer: bool = False,
    team: bool = False,
) -> SectionFilter:
    """Build a SectionFilter from CLI values and the engineer/team aliases.

    --engineer wins over --team, which wins over explicit values. An unset
    --ignore-sections falls back to "OKR updates".
    """
    include_names = split_names(include)
    ignore_names = DEFAULT_IGNORE_SECTIONS if ignore is None else split_names(ignore)

    if engineer:
        return engineer_filter()
    if team:
        return team_filter(include_names)
    return SectionFilter(include=include_names, ignore=ignore_names)
