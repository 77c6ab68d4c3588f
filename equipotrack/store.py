"""Almacenes de registros de inventario.

``InventoryStore`` persiste con SQLAlchemy; ``MemoryInventoryStore`` guarda los
registros en memoria con la misma interfaz. Ambos asignan el identificador al
dar de alta y reemplazan el registro completo al actualizar.
"""
import logging
from copy import deepcopy
from typing import List, Iterable, Dict
from uuid import uuid4

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from . import db
from .definitions import InventoryItem, InventoryItemForm
from .inventory_models import InventoryRecord

log = logging.getLogger(__name__)


class StoreError(Exception):
    """Falla del almacén; el mensaje se muestra tal cual al usuario."""


class RecordNotFound(StoreError):
    pass


class ConfirmationRequired(StoreError):
    pass


class InventoryStore:

    def _fail(self, action, e):
        db.session.rollback()
        log.exception("Error al %s", action)
        raise StoreError(f"Error al {action}.") from e

    def _record(self, item_id):
        try:
            rec = db.session.get(InventoryRecord, item_id)
        except SQLAlchemyError as e:
            self._fail("cargar el elemento", e)
        if rec is None:
            raise RecordNotFound(f"No existe el elemento {item_id}.")
        return rec

    def _next_seq(self, action="agregar el elemento"):
        try:
            return (db.session.query(func.max(InventoryRecord.seq)).scalar() or 0) + 1
        except SQLAlchemyError as e:
            self._fail(action, e)

    def _commit(self, action):
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            self._fail(action, e)

    def list_items(self) -> List[InventoryItem]:
        try:
            recs = InventoryRecord.query.order_by(InventoryRecord.seq.asc()).all()
        except SQLAlchemyError as e:
            self._fail("cargar el inventario", e)
        return [r.to_item() for r in recs]

    def get_item(self, item_id) -> InventoryItem:
        return self._record(item_id).to_item()

    def add_item(self, form: InventoryItemForm) -> InventoryItem:
        rec = InventoryRecord(seq=self._next_seq())
        rec.apply_form(form)
        db.session.add(rec)
        self._commit("agregar el elemento")
        return rec.to_item()

    def add_items(self, forms: Iterable[InventoryItemForm]) -> int:
        """Alta en lote: un único commit, todo o nada."""
        seq = self._next_seq("importar los elementos")
        count = 0
        for form in forms:
            rec = InventoryRecord(seq=seq + count)
            rec.apply_form(form)
            db.session.add(rec)
            count += 1
        self._commit("importar los elementos")
        return count

    def update_item(self, item_id, form: InventoryItemForm) -> InventoryItem:
        rec = self._record(item_id)
        rec.apply_form(form)
        self._commit("actualizar el elemento")
        return rec.to_item()

    def delete_item(self, item_id) -> None:
        rec = self._record(item_id)
        db.session.delete(rec)
        self._commit("eliminar el elemento")

    def delete_all(self, confirm=False) -> int:
        if not confirm:
            raise ConfirmationRequired("Se requiere confirmación para borrar todo el inventario.")
        try:
            count = InventoryRecord.query.delete()
        except SQLAlchemyError as e:
            self._fail("eliminar todos los elementos", e)
        self._commit("eliminar todos los elementos")
        return count


class MemoryInventoryStore:
    """Repositorio en memoria; útil sin base de datos y en tests."""

    @staticmethod
    def _stored(item_id, form):
        # pasa por la forma documento: copia y normaliza equipos vacíos a None
        return InventoryItem.from_form(item_id, InventoryItemForm.from_dict(form.to_dict()))

    def __init__(self, items: Iterable[InventoryItemForm] = ()):
        self._items: Dict[str, InventoryItem] = {}
        for form in items:
            self.add_item(form)

    def list_items(self) -> List[InventoryItem]:
        return [deepcopy(it) for it in self._items.values()]

    def get_item(self, item_id) -> InventoryItem:
        try:
            return deepcopy(self._items[item_id])
        except KeyError:
            raise RecordNotFound(f"No existe el elemento {item_id}.") from None

    def add_item(self, form: InventoryItemForm) -> InventoryItem:
        item = self._stored(uuid4().hex, form)
        self._items[item.id] = item
        return deepcopy(item)

    def add_items(self, forms: Iterable[InventoryItemForm]) -> int:
        staged = [self._stored(uuid4().hex, f) for f in forms]
        for item in staged:
            self._items[item.id] = item
        return len(staged)

    def update_item(self, item_id, form: InventoryItemForm) -> InventoryItem:
        if item_id not in self._items:
            raise RecordNotFound(f"No existe el elemento {item_id}.")
        item = self._stored(item_id, form)
        self._items[item_id] = item
        return deepcopy(item)

    def delete_item(self, item_id) -> None:
        if self._items.pop(item_id, None) is None:
            raise RecordNotFound(f"No existe el elemento {item_id}.")

    def delete_all(self, confirm=False) -> int:
        if not confirm:
            raise ConfirmationRequired("Se requiere confirmación para borrar todo el inventario.")
        count = len(self._items)
        self._items.clear()
        return count


def get_store():
    return current_app.extensions["inventory_store"]
