"""
Section bounds for plan tables.

Sections are not marked inside the rows; their absolute row ranges are
computed from the per-section counts stored alongside the table.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .models import SECTION_ORDER, Section, SectionCounts


# Heading text and optional prompt text of the rows that precede a section.
# Sections not listed directly follow the previous section.
SECTION_LEADS: Dict[Section, Tuple[str, Optional[str]]] = {
    Section.REASONS: ("Reasons", "Why do I want to start this?"),
    Section.OUTCOMES: ("Outcomes", None),
    Section.NEEDS_QUESTIONS: ("Needs", None),
    Section.SCHEDULE: ("Schedule", "Which activities need time allotted each week?"),
    Section.SUBPROJECTS: (
        "Subprojects",
        "What are the stages or weekly habits required to make these outcomes happen?",
    ),
}


@dataclass(frozen=True)
class SectionBounds:
    """
    Absolute row layout computed from section counts.

    Attributes:
        ranges: Row range of every section, in layout order
        headings: Row index of each heading row, keyed by the section it introduces
        prompts: Row index of each prompt row, keyed by the section it introduces
        total_rows: Number of rows the layout needs
    """
    ranges: Dict[Section, range]
    headings: Dict[Section, int]
    prompts: Dict[Section, int]
    total_rows: int

    def __getitem__(self, section: Section) -> range:
        return self.ranges[section]

    def lead_row(self, section: Section) -> Optional[int]:
        """The heading/prompt row directly above a section, if it has one."""
        if section in self.prompts:
            return self.prompts[section]
        return self.headings.get(section)

    def section_at(self, row_index: int) -> Optional[Section]:
        for section in SECTION_ORDER:
            if row_index in self.ranges[section]:
                return section
        return None


def compute_section_bounds(counts: SectionCounts) -> SectionBounds:
    """
    Compute absolute row ranges for every section.

    Sections are laid out in SECTION_ORDER; a section with a heading (and
    optionally a prompt) gets those rows immediately before its first row.
    Counts below 1 are treated as 1.
    """
    ranges: Dict[Section, range] = {}
    headings: Dict[Section, int] = {}
    prompts: Dict[Section, int] = {}

    cursor = 0
    for section in SECTION_ORDER:
        heading, prompt = SECTION_LEADS.get(section, (None, None))
        if heading is not None:
            headings[section] = cursor
            cursor += 1
        if prompt is not None:
            prompts[section] = cursor
            cursor += 1
        count = max(counts.get(section), 1)
        ranges[section] = range(cursor, cursor + count)
        cursor += count

    return SectionBounds(ranges=ranges, headings=headings, prompts=prompts, total_rows=cursor)


PLAN_TABLE_ROWS = compute_section_bounds(SectionCounts()).total_rows
