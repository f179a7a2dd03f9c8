import pytest

from core.domain.plan_table import (
    PlanDocument,
    PlanDocumentStore,
    PlanItem,
    PlanTable,
    create_plan_table,
)
from core.error_log import ErrorLog
from core.services import PlanEditorService


@pytest.fixture(autouse=True)
def config_dir(tmp_path, monkeypatch):
    """Point the config directory at a temp dir and start a fresh error log session."""
    path = tmp_path / "config"
    monkeypatch.setenv("PLAN_TABLES_CONFIG_DIR", str(path))
    ErrorLog.reset_instance()
    yield path
    ErrorLog.reset_instance()


@pytest.fixture
def table() -> PlanTable:
    """Freshly seeded 15-row plan table."""
    return create_plan_table()


@pytest.fixture
def store(table) -> PlanDocumentStore:
    item = PlanItem(id="item-a", text="Learn piano", table=table)
    return PlanDocumentStore(PlanDocument(shortlist=[item]))


@pytest.fixture
def service() -> PlanEditorService:
    return PlanEditorService()


@pytest.fixture
def item_id(service) -> str:
    """Id of a project added to the service's shortlist."""
    item = service.add_item("Learn piano", color="#22c55e")
    service.clear_undo_history()
    return item.id
