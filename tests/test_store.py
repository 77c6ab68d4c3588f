import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from equipotrack.definitions import Equipment, DesktopEquipment
from equipotrack.store import (
    InventoryStore, MemoryInventoryStore, StoreError, RecordNotFound, ConfirmationRequired,
)
from .conftest import make_form


@pytest.fixture(params=["sql", "memory"])
def store(request, app):
    if request.param == "sql":
        return InventoryStore()
    return MemoryInventoryStore()


def test_add_assigns_id(store):
    item = store.add_item(make_form())
    assert item.id
    got = store.get_item(item.id)
    assert got == item
    assert got.to_form() == make_form()


def test_add_items_preserves_order(store):
    store.add_item(make_form("Primero"))
    count = store.add_items([make_form("Ana"), make_form("Luis"), make_form("Marta")])
    assert count == 3
    assert [it.responsable for it in store.list_items()] == ["Primero", "Ana", "Luis", "Marta"]
    assert len({it.id for it in store.list_items()}) == 4


def test_empty_equipment_is_stored_as_absent(store):
    item = store.add_item(make_form(laptop=Equipment(), escritorio=DesktopEquipment(cpu=Equipment())))
    got = store.get_item(item.id)
    assert got.laptop is None
    assert got.escritorio is None


def test_update_replaces_whole_record(store):
    item = store.add_item(make_form())
    updated = store.update_item(item.id, make_form("Ana María", status_general="ROBADO",
                                                   laptop=None, obs_generales=""))
    assert updated.id == item.id
    got = store.get_item(item.id)
    assert got.responsable == "Ana María"
    assert got.status_general == "ROBADO"
    assert got.laptop is None
    assert got.escritorio == make_form().escritorio
    assert got.obs_generales == ""


def test_missing_ids(store):
    with pytest.raises(RecordNotFound):
        store.get_item("nope")
    with pytest.raises(RecordNotFound):
        store.update_item("nope", make_form())
    with pytest.raises(RecordNotFound):
        store.delete_item("nope")


def test_delete(store):
    a = store.add_item(make_form("A"))
    b = store.add_item(make_form("B"))
    store.delete_item(a.id)
    assert [it.id for it in store.list_items()] == [b.id]


def test_delete_all_requires_confirmation(store):
    store.add_items([make_form("A"), make_form("B")])
    with pytest.raises(ConfirmationRequired):
        store.delete_all()
    assert len(store.list_items()) == 2
    assert store.delete_all(confirm=True) == 2
    assert store.list_items() == []


def test_memory_store_returns_copies():
    store = MemoryInventoryStore([make_form()])
    item = store.list_items()[0]
    item.responsable = "cambiado"
    item.laptop.marca = "cambiado"
    fresh = store.get_item(item.id)
    assert fresh.responsable == "Ana Pérez"
    assert fresh.laptop.marca == "Dell"


def test_sql_commit_failure_leaves_state_unchanged(app, monkeypatch):
    store = InventoryStore()
    store.add_item(make_form("A"))

    def boom(self):
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(Session, "commit", boom)
    with pytest.raises(StoreError, match="Error al importar los elementos"):
        store.add_items([make_form("B"), make_form("C")])
    monkeypatch.undo()
    assert [it.responsable for it in store.list_items()] == ["A"]


def test_sql_query_failure_raises_store_error(app, monkeypatch):
    store = InventoryStore()
    item = store.add_item(make_form("A"))

    def boom(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("no such table: inventario"))

    monkeypatch.setattr(Session, "get", boom)
    with pytest.raises(StoreError, match="Error al cargar el elemento"):
        store.get_item(item.id)
    with pytest.raises(StoreError, match="Error al cargar el elemento"):
        store.update_item(item.id, make_form("Z"))

    monkeypatch.setattr(Session, "query", boom)
    with pytest.raises(StoreError, match="Error al agregar el elemento"):
        store.add_item(make_form("B"))
    with pytest.raises(StoreError, match="Error al importar los elementos"):
        store.add_items([make_form("C")])
    monkeypatch.undo()
    assert [it.responsable for it in store.list_items()] == ["A"]
