# Service layer - orchestrates domain operations
from .plan_editor_service import PlanEditorService
from .plan_persistence_service import PlanPersistenceService, create_persistence_service, storage_key

__all__ = [
    'PlanEditorService',
    'PlanPersistenceService',
    'create_persistence_service',
    'storage_key',
]
