import pytest

QtCore = pytest.importorskip("PyQt6.QtCore")

from core import config  # noqa: E402
from core.adapters.plan_storage_sqlite import InMemoryKeyValueStore  # noqa: E402
from core.services import PlanPersistenceService  # noqa: E402
from viewmodels import PlanTableViewModel  # noqa: E402


@pytest.fixture(scope="module")
def qt_app():
    app = QtCore.QCoreApplication.instance()
    if app is None:
        app = QtCore.QCoreApplication([])
    yield app


def _process_events(ms=100):
    """Run the event loop for a while so queued timers fire."""
    loop = QtCore.QEventLoop()
    QtCore.QTimer.singleShot(ms, loop.quit)
    loop.exec()


@pytest.fixture
def persistence():
    return PlanPersistenceService(InMemoryKeyValueStore())


@pytest.fixture
def vm(qt_app, persistence):
    return PlanTableViewModel(persistence=persistence, scope=2025, max_undo=50, focus_retries=2)


def test_undo_state_signal(vm):
    states = []
    vm.undo_state_changed.connect(lambda can_undo, can_redo: states.append((can_undo, can_redo)))

    item = vm.add_item("Learn piano")
    vm.set_cell(item.id, 2, 2, "Because")
    vm.undo()
    vm.redo()

    assert states == [(True, False), (True, False), (True, True), (True, False)]
    assert vm.can_undo and not vm.can_redo


def test_focus_requested_without_handler(vm):
    item = vm.add_item("Learn piano")
    focused = []
    vm.focus_requested.connect(lambda item_id, row, col: focused.append((item_id, row, col)))

    vm.insert_row(item.id, 2)
    _process_events()

    assert focused == [(item.id, 3, 2)]


def test_focus_retries_are_bounded(vm, capsys):
    item = vm.add_item("Learn piano")
    calls = []
    focused = []
    vm.focus_requested.connect(lambda *args: focused.append(args))
    vm.set_focus_handler(lambda request: calls.append(request) or False)

    vm.add_question_with_outcome(item.id)
    _process_events(300)

    assert len(calls) == 3
    assert focused == []
    assert "Gave up focusing" in capsys.readouterr().out


def test_focus_handler_succeeds_on_retry(vm):
    item = vm.add_item("Learn piano")
    answers = iter([False, True])
    focused = []
    vm.focus_requested.connect(lambda *args: focused.append(args))
    vm.set_focus_handler(lambda request: next(answers))

    vm.add_needs_question_with_plan(item.id)
    _process_events(200)

    assert focused == [(item.id, 8, 1)]


def test_autosave_is_debounced(vm, persistence):
    saved = []
    projects = []
    vm.document_saved.connect(saved.append)
    vm.projects_changed.connect(projects.append)

    item = vm.add_item("Learn piano", project_nickname="Piano")
    vm.set_cell(item.id, 11, 2, "Scales")
    assert vm.has_pending_save
    assert saved == []

    _process_events(vm.AUTOSAVE_DELAY_MS + 200)

    assert saved == ["staging-year-2025-shortlist"]
    assert projects[-1] == [("Piano", ["Scales"])]
    assert persistence.load(2025).shortlist[0].table.cell(11, 2) == "Scales"


def test_save_now_and_load(qt_app, persistence):
    first = PlanTableViewModel(persistence=persistence, scope=2025, autosave=False)
    item = first.add_item("Learn piano")
    first.set_cell(item.id, 2, 2, "Because")
    assert not first.has_pending_save
    first.save_now()

    second = PlanTableViewModel(persistence=persistence, autosave=False)
    changed = []
    second.document_changed.connect(lambda: changed.append(True))
    document = second.load(2025)

    assert second.scope == 2025
    assert document.shortlist[0].table.cell(2, 2) == "Because"
    assert changed
    assert not second.can_undo
    assert not second.has_pending_save


def test_copy_and_paste_with_explicit_text(vm):
    item = vm.add_item("Learn piano")
    vm.set_cell(item.id, 2, 2, "a")
    selections = []
    vm.selection_changed.connect(lambda: selections.append(True))

    vm.click_cell(item.id, 2, 2)
    assert vm.is_cell_selected(item.id, 2, 2)
    assert vm.copy() == "a"

    vm.click_cell(item.id, 14, 2)
    assert vm.paste("a\tb")
    assert vm.document.find_item(item.id).table.rows[14].cells[2:4] == ["a", "b"]
    assert len(selections) == 2


def test_drag_through_view_model(vm):
    item = vm.add_item("Learn piano")
    vm.insert_row(item.id, 2)
    vm.set_cell(item.id, 2, 2, "first")
    vm.set_cell(item.id, 3, 2, "second")
    previews = []
    vm.drag_preview_changed.connect(lambda: previews.append(True))

    vm.start_row_drag(item.id, 2)
    vm.drag_over(item.id, 4)
    assert vm.is_drop_target(item.id, 4)
    assert vm.drop_rows(item.id, 4)

    table = vm.document.find_item(item.id).table
    assert [table.cell(2, 2), table.cell(3, 2)] == ["second", "first"]
    assert len(previews) == 3


def test_scope_defaults_to_config(qt_app, persistence):
    config.update_config('storage_scope', 2024)

    assert PlanTableViewModel(persistence=persistence, autosave=False).scope == 2024
    assert PlanTableViewModel(persistence=persistence, scope=2026, autosave=False).scope == 2026
