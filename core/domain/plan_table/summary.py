"""
Plan summary derived from a project's plan table.

The summary is stored next to each saved shortlist item so that other
views (e.g. a weekly scheduler) can list projects and their scheduled
activities without understanding the table layout.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .models import DURATION_COL, NAME_COL, PlanItem, Section
from .bounds import compute_section_bounds
from .estimates import ZERO_DURATION, format_minutes_hhmm, section_total_minutes


@dataclass
class ScheduleEntry:
    """One scheduled activity: its name and H.MM time value."""
    name: str
    time_value: str = ZERO_DURATION

    def to_dict(self) -> Dict[str, str]:
        return {'name': self.name, 'timeValue': self.time_value}


@dataclass
class PlanSummary:
    """
    Totals and schedule entries of one plan table.

    Attributes:
        subprojects: Schedule rows as named entries, in table order
        needs_plan_minutes: Sum of needs plan durations
        schedule_minutes: Sum of schedule durations
        total_hours: Combined total formatted as H.MM
    """
    subprojects: List[ScheduleEntry] = field(default_factory=list)
    needs_plan_minutes: int = 0
    schedule_minutes: int = 0
    total_hours: str = ZERO_DURATION

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted camelCase shape."""
        return {
            'subprojects': [entry.to_dict() for entry in self.subprojects],
            'needsPlanTotalMinutes': self.needs_plan_minutes,
            'scheduleTotalMinutes': self.schedule_minutes,
            'totalHours': self.total_hours,
        }


def build_plan_summary(item: Optional[PlanItem]) -> PlanSummary:
    """Summarize an item's plan table; a missing item gives an empty summary."""
    if item is None:
        return PlanSummary()

    table = item.table
    bounds = compute_section_bounds(table.counts)

    subprojects = []
    for idx in bounds[Section.SCHEDULE]:
        time_value = table.cell(idx, DURATION_COL) if idx < len(table.rows) else ZERO_DURATION
        subprojects.append(ScheduleEntry(name=table.cell(idx, NAME_COL).strip(), time_value=time_value))

    needs_minutes = section_total_minutes(table, Section.NEEDS_PLANS)
    schedule_minutes = section_total_minutes(table, Section.SCHEDULE)
    return PlanSummary(
        subprojects=subprojects,
        needs_plan_minutes=needs_minutes,
        schedule_minutes=schedule_minutes,
        total_hours=format_minutes_hhmm(needs_minutes + schedule_minutes),
    )


def project_names(shortlist: Sequence[PlanItem]) -> List[Tuple[str, List[str]]]:
    """
    List shortlist projects with the names of their scheduled activities.

    Projects are labelled by nickname, falling back to the full project
    name; items with neither are skipped. Blank and "-" activity names
    are left out.

    Returns:
        List of (project label, [activity names]) in shortlist order
    """
    result = []
    for item in shortlist:
        label = item.project_nickname.strip() or item.project_name.strip()
        if not label or label == '-':
            continue
        names = [
            entry.name for entry in build_plan_summary(item).subprojects
            if entry.name and entry.name != '-'
        ]
        result.append((label, names))
    return result
