# ViewModel layer - Qt integration for domain/service layers
from .plan_table_viewmodel import PlanTableViewModel

__all__ = [
    'PlanTableViewModel',
]
