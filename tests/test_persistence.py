import pytest

from core import config
from core.adapters.plan_storage_sqlite import InMemoryKeyValueStore, SQLiteKeyValueStore
from core.domain.plan_table import (
    PlanDocument,
    PlanItem,
    RowKind,
    add_paired_rows,
    create_plan_table,
    OUTCOME_PAIRING,
)
from core.error_log import ErrorLog
from core.services.plan_persistence_service import (
    COUNT_KEYS,
    LEGACY_STORAGE_KEY,
    PlanPersistenceService,
    create_persistence_service,
    document_to_dict,
    item_from_dict,
    storage_key,
)


def _document():
    table = create_plan_table()
    table.rows[2].cells[2] = "Because"
    table.rows[11].cells[2:5] = ["Practice", "1 Hour", "1.00"]
    item = PlanItem(id="item-a", text="Learn piano", color="#22c55e",
                    project_name="Learn piano", project_nickname="Piano", table=table)
    archived = PlanItem(id="item-z", text="Old", table=create_plan_table())
    return PlanDocument(shortlist=[item], archived=[archived])


class BrokenStore(InMemoryKeyValueStore):
    def set_json(self, key, value):
        raise OSError("disk full")


def test_storage_key():
    assert storage_key() == LEGACY_STORAGE_KEY
    assert storage_key(2025) == "staging-year-2025-shortlist"
    assert storage_key("custom-key") == "custom-key"


def test_saved_payload_shape():
    payload = document_to_dict(_document())
    item = payload['shortlist'][0]

    assert item['id'] == "item-a"
    assert item['projectNickname'] == "Piano"
    assert len(item['planTableEntries']) == 15
    assert item['planTableEntries'][2][2] == "Because"
    assert item['planReasonRowCount'] == 1
    assert item['planSubprojectRowCount'] == 1
    assert item['planXxxRowCount'] == 1
    assert item['planSummary']['totalHours'] == "1.00"
    assert 'planTableRowMeta' not in item
    assert 'planSummary' not in payload['archived'][0]


def test_round_trip():
    service = PlanPersistenceService(InMemoryKeyValueStore())
    document = _document()

    service.save(document, 2025)
    loaded = service.load(2025)

    assert loaded.shortlist[0].id == "item-a"
    original = document.shortlist[0].table
    assert [r.cells for r in loaded.shortlist[0].table.rows] == [r.cells for r in original.rows]
    assert [r.kind for r in loaded.shortlist[0].table.rows] == [r.kind for r in original.rows]
    assert loaded.shortlist[0].table.counts == original.counts
    assert loaded.archived[0].id == "item-z"
    assert service.load(2024).shortlist == []


def _crossed_document():
    table, _ = add_paired_rows(create_plan_table(), OUTCOME_PAIRING)
    # outcome rows 4, 5; question rows 6, 7; pair row 4 with question 7
    first, second = table.rows[6].pair_id, table.rows[7].pair_id
    table.rows[4].pair_id, table.rows[5].pair_id = second, first
    table.rows[2].kind = RowKind.PROMPT
    return PlanDocument(shortlist=[PlanItem(id="item-a", table=table)])


def test_lossy_save_rederives_pairs_and_kinds():
    service = PlanPersistenceService(InMemoryKeyValueStore())
    service.save(_crossed_document())

    table = service.load().shortlist[0].table

    assert table.rows[4].pair_id == table.rows[6].pair_id
    assert table.rows[5].pair_id == table.rows[7].pair_id
    assert table.rows[2].kind == RowKind.RESPONSE


def test_row_metadata_mode_keeps_pairs_and_kinds():
    service = PlanPersistenceService(InMemoryKeyValueStore(), persist_row_metadata=True)
    service.save(_crossed_document())

    table = service.load().shortlist[0].table

    assert table.rows[4].pair_id == table.rows[7].pair_id
    assert table.rows[5].pair_id == table.rows[6].pair_id
    assert table.rows[2].kind == RowKind.PROMPT


def test_malformed_json_loads_empty_and_is_logged(capsys):
    storage = InMemoryKeyValueStore()
    storage.set_raw(LEGACY_STORAGE_KEY, "{not json")
    service = PlanPersistenceService(storage)

    assert service.load() == PlanDocument()
    assert "[plan-storage] Warning" in capsys.readouterr().out
    assert ErrorLog.get_instance().get_error_count() == 1


def test_non_object_payload_loads_empty():
    storage = InMemoryKeyValueStore()
    storage.set_json(LEGACY_STORAGE_KEY, [1, 2, 3])

    assert PlanPersistenceService(storage).load() == PlanDocument()
    assert ErrorLog.get_instance().get_error_count() == 1


def test_failed_save_is_reported_without_broadcast():
    service = PlanPersistenceService(BrokenStore())
    received = []
    service.on_change(lambda payload, key: received.append(key))

    service.save(_document())

    assert received == []
    assert ErrorLog.get_instance().get_error_count() == 1


def test_save_broadcasts_payload(capsys):
    service = PlanPersistenceService(InMemoryKeyValueStore())
    received = []

    def broken(payload, key):
        raise RuntimeError("listener down")

    service.on_change(broken)
    service.on_change(lambda payload, key: received.append((key, payload['shortlist'][0]['id'])))
    service.save(_document(), 2026)

    assert received == [("staging-year-2026-shortlist", "item-a")]
    assert "listener failed" in capsys.readouterr().out

    service.remove_change_callback(broken)
    service.save(_document(), 2026)
    assert "listener failed" not in capsys.readouterr().out


def test_missing_or_invalid_counts_default_to_one():
    data = {'id': 'x', 'planReasonRowCount': 0, 'planOutcomeRowCount': 'bad',
            'planTableEntries': [["Reasons", "", "", "", "", ""]]}

    item = item_from_dict(data)

    for section in COUNT_KEYS:
        assert item.table.counts.get(section) == 1
    assert len(item.table) == 15
    assert item.table.rows[5].pair_id == item.table.rows[4].pair_id


def test_oversized_counts_fall_back_to_defaults(capsys):
    storage = InMemoryKeyValueStore()
    storage.set_json(LEGACY_STORAGE_KEY, {'shortlist': [
        {'id': 'a', 'planReasonRowCount': 10 ** 9, 'planTableEntries': [["Reasons", "", "", "", "", ""]]},
    ]})

    table = PlanPersistenceService(storage).load().shortlist[0].table

    assert len(table) == 15
    assert table.counts.reasons == 1
    assert table.cell(0, 0) == "Reasons"
    assert "exceed its 1 stored rows" in capsys.readouterr().out


def test_counts_matching_stored_rows_are_kept():
    data = document_to_dict(_document())['shortlist'][0]
    data['planTableEntries'].insert(3, ["", "", "Second", "", "", ""])
    data['planReasonRowCount'] = 2

    table = item_from_dict(data).table

    assert len(table) == 16
    assert table.counts.reasons == 2
    assert table.cell(3, 2) == "Second"


def test_unknown_keys_are_carried_through():
    data = document_to_dict(_document())
    data['shortlist'][0]['weeklyGoal'] = 3
    item = item_from_dict(data['shortlist'][0])

    assert item.extra == {'weeklyGoal': 3}
    assert document_to_dict(PlanDocument(shortlist=[item]))['shortlist'][0]['weeklyGoal'] == 3


def test_sqlite_store_round_trip(tmp_path):
    db_path = tmp_path / "plans.db"
    storage = SQLiteKeyValueStore(db_path)
    PlanPersistenceService(storage).save(_document(), 2025)
    storage.close()

    reopened = SQLiteKeyValueStore(db_path)
    try:
        assert reopened.keys() == ["staging-year-2025-shortlist"]
        loaded = PlanPersistenceService(reopened).load(2025)
        assert loaded.shortlist[0].table.cell(2, 2) == "Because"
    finally:
        reopened.close()


def test_sqlite_store_raises_on_corrupt_value(tmp_path):
    storage = SQLiteKeyValueStore(tmp_path / "plans.db")
    try:
        storage.set_raw("k", "{broken")
        with pytest.raises(ValueError):
            storage.get_json("k")
        assert storage.get_json("missing", "fallback") == "fallback"
    finally:
        storage.close()


def test_create_persistence_service_uses_config(config_dir):
    config.update_config("persist_row_metadata", True)

    service = create_persistence_service()
    try:
        assert service.persist_row_metadata
        assert service.storage.db_path == config_dir / "plan_tables.db"
    finally:
        service.storage.close()
