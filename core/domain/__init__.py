# Domain layer - business logic with no UI dependencies
from .plan_table import (
    PlanRow,
    PlanTable,
    PlanItem,
    PlanDocument,
    PlanDocumentStore,
    CommandHistory,
    Selection,
    DragDropEngine,
    create_plan_table,
    compute_section_bounds,
)

__all__ = [
    # Plan tables
    'PlanRow',
    'PlanTable',
    'PlanItem',
    'PlanDocument',
    'PlanDocumentStore',
    'CommandHistory',
    'Selection',
    'DragDropEngine',
    'create_plan_table',
    'compute_section_bounds',
]
