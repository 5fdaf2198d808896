"""Tests for okrlint.lib.parser module."""

import pytest

from okrlint.lib.markdown import parse_markdown
from okrlint.lib.parser import (
    InvalidTime,
    MultipleTimeEntries,
    NoKRIDFound,
    NoProjectFound,
    NotAllIncludes,
    NoTimeFound,
    NoWorkFound,
    is_placeholder,
    parse_kr_id,
    parse_report,
    parse_text,
    parse_time_entry,
)
from okrlint.lib.sections import SectionFilter, engineer_filter
from okrlint.lib.types import ErrorKind

SCENARIO_A = """\
# Last week

## Improve latency (PLAT123)

- Improve latency (PLAT123)
  - @alice (2 days)
  - Profiled the hot path
"""


def kr_doc(title: str, *children: str, project: str = "Platform", section: str = "Last week") -> str:
    lines = [f"# {section}", "", f"## {project}", "", f"- {title}"]
    lines.extend(f"  - {child}" for child in children)
    return "\n".join(lines) + "\n"


class TestParseKrId:
    """Tests for parse_kr_id()."""

    def test_trailing_id(self):
        assert parse_kr_id("Improve latency (PLAT123)") == "PLAT123"

    def test_issue_style_id(self):
        assert parse_kr_id("Fix the docs (#42)") == "#42"

    def test_new_kr_placeholder(self):
        assert parse_kr_id("New KR") is None

    def test_no_kr_placeholder_in_parens(self):
        assert parse_kr_id("Misc work (No KR)") is None

    def test_missing_id_raises(self):
        with pytest.raises(NoKRIDFound) as exc_info:
            parse_kr_id("Improve latency")
        assert exc_info.value.context == "Improve latency"

    def test_id_with_spaces_is_not_an_id(self):
        with pytest.raises(NoKRIDFound):
            parse_kr_id("Improve latency (some notes here)")


class TestIsPlaceholder:
    """Tests for is_placeholder()."""

    def test_case_insensitive(self):
        assert is_placeholder("new kr")
        assert is_placeholder("NO KR")

    def test_regular_title(self):
        assert not is_placeholder("Improve latency (PLAT123)")


class TestParseTimeEntry:
    """Tests for parse_time_entry()."""

    def test_single_entry(self):
        entry = parse_time_entry("@alice (2 days)")
        assert entry.entries == [("alice", 2.0)]

    def test_singular_day(self):
        assert parse_time_entry("@bob (1 day)").entries == [("bob", 1.0)]

    def test_multiple_people(self):
        entry = parse_time_entry("@alice (2 days), @bob (0.5 days)")
        assert entry.entries == [("alice", 2.0), ("bob", 0.5)]

    def test_non_numeric_days(self):
        assert parse_time_entry("@alice (two days)") is None

    def test_missing_parentheses(self):
        assert parse_time_entry("@alice 2 days") is None

    def test_wrong_separator(self):
        assert parse_time_entry("@alice (2 days); @bob (1 day)") is None

    def test_missing_unit(self):
        assert parse_time_entry("@alice (2)") is None


class TestParseText:
    """Tests for parse_text() on well-formed reports."""

    def test_scenario_a(self):
        krs = parse_text(SCENARIO_A)
        assert len(krs) == 1
        kr = krs[0]
        assert kr.section == "Last week"
        assert kr.project == "Improve latency (PLAT123)"
        assert kr.title == "Improve latency (PLAT123)"
        assert kr.id == "PLAT123"
        assert kr.time.entries == [("alice", 2.0)]
        assert [w.text for w in kr.work] == ["Profiled the hot path"]

    def test_time_entry_need_not_come_first(self):
        krs = parse_text(kr_doc("KR (X1)", "Did things", "@alice (1 day)"))
        assert krs[0].time.entries == [("alice", 1.0)]
        assert [w.text for w in krs[0].work] == ["Did things"]

    def test_work_items_keep_document_order(self):
        krs = parse_text(kr_doc("KR (X1)", "@a (1 day)", "first", "second", "third"))
        assert [w.text for w in krs[0].work] == ["first", "second", "third"]

    def test_nested_work_items(self):
        text = kr_doc("KR (X1)", "@a (1 day)", "parent") + "    - child\n"
        work = parse_text(text)[0].work
        assert work[0].text == "parent"
        assert [c.text for c in work[0].children] == ["child"]

    def test_inline_markup_is_preserved(self):
        krs = parse_text(kr_doc("KR (X1)", "@a (1 day)", "Fixed `make` in [repo](https://example.com)"))
        assert krs[0].work[0].text == "Fixed `make` in [repo](https://example.com)"

    def test_multiple_krs_and_projects(self):
        text = (
            "# Last week\n\n"
            "## Platform\n\n"
            "- KR one (P1)\n  - @a (1 day)\n  - w1\n"
            "- KR two (P2)\n  - @a (2 days)\n  - w2\n\n"
            "## Compiler\n\n"
            "- KR three (C1)\n  - @b (1 day)\n  - w3\n"
        )
        krs = parse_text(text)
        assert [(kr.project, kr.id) for kr in krs] == [
            ("Platform", "P1"), ("Platform", "P2"), ("Compiler", "C1"),
        ]

    def test_heading_as_kr_title(self):
        text = (
            "# Last week\n\n"
            "## Platform\n\n"
            "### Improve latency (PLAT123)\n\n"
            "- @alice (2 days)\n"
            "- Profiled the hot path\n"
        )
        krs = parse_text(text)
        assert len(krs) == 1
        assert krs[0].title == "Improve latency (PLAT123)"
        assert krs[0].project == "Platform"
        assert krs[0].time.entries == [("alice", 2.0)]

    def test_bold_line_as_project(self):
        text = "# Last week\n\n**Infrastructure**\n\n- KR (X1)\n  - @a (1 day)\n  - w\n"
        assert parse_text(text)[0].project == "Infrastructure"

    def test_free_text_is_ignored(self):
        text = "# Last week\n\nSome notes about the week.\n\n## P\n\n- KR (X1)\n  - @a (1 day)\n  - w\n"
        assert len(parse_text(text)) == 1

    def test_new_kr_placeholder(self):
        krs = parse_text(kr_doc("New KR", "@alice (1 day)", "Started a prototype"))
        assert krs[0].id is None
        assert krs[0].title == "New KR"

    def test_no_kr_may_be_empty(self):
        krs = parse_text(kr_doc("No KR", "@alice (1 day)"))
        assert krs[0].work == []

    def test_empty_document(self):
        assert parse_text("") == []


class TestMarkupAsWritten:
    """Titles and work items keep the author's own markdown."""

    def test_underscore_emphasis_in_title(self):
        kr = parse_text(kr_doc("Fix _flaky_ tests (X1)", "@a (1 day)", "Did a thing"))[0]
        assert kr.title == "Fix _flaky_ tests (X1)"
        assert kr.id == "X1"

    def test_underscores_in_work_item(self):
        kr = parse_text(kr_doc("KR (X1)", "@a (1 day)", "snake_case_name and __init__ work"))[0]
        assert kr.work[0].text == "snake_case_name and __init__ work"

    def test_bold_title_has_id(self):
        kr = parse_text(kr_doc("**Improve latency (PLAT1)**", "@a (1 day)", "w"))[0]
        assert kr.title == "**Improve latency (PLAT1)**"
        assert kr.id == "PLAT1"

    def test_emphasised_placeholder(self):
        kr = parse_text(kr_doc("*No KR*", "@a (1 day)"))[0]
        assert kr.id is None
        assert kr.work == []

    def test_missing_id_reports_title_as_written(self):
        with pytest.raises(NoKRIDFound) as exc_info:
            parse_text(kr_doc("**Improve latency**", "@a (1 day)", "w"))
        assert exc_info.value.context == "**Improve latency**"

    def test_heading_kr_and_project(self):
        text = (
            "# Last week\n\n"
            "## Platform __core__\n\n"
            "### Fix _flaky_ tests (X1)\n\n"
            "- @alice (2 days)\n"
            "- Rewrote `wait_for`\n"
        )
        kr = parse_text(text)[0]
        assert kr.project == "Platform __core__"
        assert kr.title == "Fix _flaky_ tests (X1)"
        assert kr.work[0].text == "Rewrote `wait_for`"

    def test_bold_line_project(self):
        text = "# Last week\n\n**Infra _team_**\n\n- KR (X1)\n  - @a (1 day)\n  - w\n"
        assert parse_text(text)[0].project == "Infra _team_"

    def test_repeated_items_keep_their_own_text(self):
        text = kr_doc("KR (X1)", "@a (1 day)", "_same_", "*same*", "_same_")
        assert [w.text for w in parse_text(text)[0].work] == ["_same_", "*same*", "_same_"]

    def test_tokens_without_source_are_rerendered(self):
        tokens = parse_markdown(kr_doc("Fix _flaky_ tests (X1)", "@a (1 day)", "w"))
        assert parse_report(tokens)[0].title == "Fix *flaky* tests (X1)"


class TestParseErrors:
    """Tests for the typed structural errors."""

    def test_scenario_b_no_time(self):
        text = SCENARIO_A.replace("  - @alice (2 days)\n", "")
        with pytest.raises(NoTimeFound) as exc_info:
            parse_text(text)
        assert exc_info.value.context == "Improve latency (PLAT123)"
        assert exc_info.value.kind == ErrorKind.NO_TIME_FOUND

    def test_invalid_time(self):
        with pytest.raises(InvalidTime) as exc_info:
            parse_text(kr_doc("KR (X1)", "@alice (two days)", "work"))
        assert exc_info.value.context == "KR (X1)"

    def test_multiple_time_entries(self):
        with pytest.raises(MultipleTimeEntries):
            parse_text(kr_doc("KR (X1)", "@alice (1 day)", "work", "@bob (1 day)"))

    def test_no_work(self):
        with pytest.raises(NoWorkFound):
            parse_text(kr_doc("KR (X1)", "@alice (1 day)"))

    def test_new_kr_still_needs_work(self):
        with pytest.raises(NoWorkFound):
            parse_text(kr_doc("New KR", "@alice (1 day)"))

    def test_no_kr_id(self):
        with pytest.raises(NoKRIDFound) as exc_info:
            parse_text(kr_doc("Improve latency", "@alice (1 day)", "work"))
        assert exc_info.value.context == "Improve latency"

    def test_no_project(self):
        text = "# Last week\n\n- KR (X1)\n  - @a (1 day)\n  - w\n"
        with pytest.raises(NoProjectFound) as exc_info:
            parse_text(text)
        assert exc_info.value.context == "KR (X1)"

    def test_kr_heading_without_project(self):
        text = "# Last week\n\n### KR (X1)\n\n- @a (1 day)\n- w\n"
        with pytest.raises(NoProjectFound):
            parse_text(text)

    def test_project_does_not_leak_across_sections(self):
        text = (
            "# Last week\n\n## P\n\n- KR (X1)\n  - @a (1 day)\n  - w\n\n"
            "# Next week\n\n- KR (X2)\n  - @a (1 day)\n  - w\n"
        )
        with pytest.raises(NoProjectFound) as exc_info:
            parse_text(text)
        assert exc_info.value.context == "KR (X2)"


class TestSectionFiltering:
    """Tests for include/ignore section handling."""

    DOC = (
        "# Last week\n\n## P\n\n- KR (X1)\n  - @a (1 day)\n  - w\n\n"
        "# Other\n\n## Q\n\n- KR (X2)\n  - @a (1 day)\n  - w\n\n"
        "# OKR updates\n\nAnything goes here\n\n- not a KR\n"
    )

    def test_default_ignores_okr_updates(self):
        krs = parse_text(self.DOC)
        assert [kr.id for kr in krs] == ["X1", "X2"]

    def test_include_only(self):
        krs = parse_text(self.DOC, SectionFilter(include=("Other",), ignore=()))
        assert [kr.id for kr in krs] == ["X2"]

    def test_ignored_section_is_not_validated(self):
        krs = parse_text(self.DOC, SectionFilter(ignore=("Other", "OKR updates")))
        assert [kr.id for kr in krs] == ["X1"]

    def test_okr_updates_fails_when_not_ignored(self):
        with pytest.raises(NoProjectFound):
            parse_text(self.DOC, SectionFilter(ignore=()))

    def test_include_and_ignore_equivalence(self):
        """Including one section equals ignoring all the others."""
        included = parse_text(self.DOC, engineer_filter())
        ignored = parse_text(self.DOC, SectionFilter(include=(), ignore=("Other", "OKR updates")))
        assert included == ignored

    def test_section_names_are_case_sensitive(self):
        with pytest.raises(NotAllIncludes) as exc_info:
            parse_text(self.DOC, SectionFilter(include=("last week",), ignore=()))
        assert exc_info.value.missing == ["last week"]

    def test_scenario_d_missing_include(self):
        text = "# OKR updates\n\nNothing to report.\n"
        with pytest.raises(NotAllIncludes) as exc_info:
            parse_text(text, engineer_filter())
        assert exc_info.value.missing == ["Last week"]
        assert exc_info.value.kind == ErrorKind.NOT_ALL_INCLUDES

    def test_missing_includes_keep_given_order(self):
        with pytest.raises(NotAllIncludes) as exc_info:
            parse_text(self.DOC, SectionFilter(include=("B", "Last week", "A"), ignore=()))
        assert exc_info.value.missing == ["B", "A"]

    def test_preamble_skipped_when_including(self):
        text = "- stray (X0)\n\n" + self.DOC
        krs = parse_text(text, engineer_filter())
        assert [kr.id for kr in krs] == ["X1"]
