from datetime import datetime
from uuid import uuid4
from . import db
from .definitions import (
    Equipment, DesktopEquipment, InventoryItem, InventoryItemForm, DEFAULT_STATUS,
)


def _new_id():
    return uuid4().hex


class InventoryRecord(db.Model):
    __tablename__ = "inventario"
    id = db.Column(db.String(32), primary_key=True, default=_new_id)
    seq = db.Column(db.Integer, nullable=False, index=True)  # orden de alta
    responsable = db.Column(db.String(200), nullable=False, index=True)
    cedula = db.Column(db.String(60), nullable=False, index=True)
    cargo = db.Column(db.String(120), nullable=False)
    sector = db.Column(db.String(120), nullable=False, index=True)
    status_general = db.Column(db.String(20), nullable=False, default=DEFAULT_STATUS, index=True)
    laptop = db.Column(db.JSON)       # {marca, modelo, serial, etiqueta, status, obs}
    escritorio = db.Column(db.JSON)   # {cpu: {...}, monitor: {...}, ...}
    obs_generales = db.Column(db.Text, nullable=False, default="")
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def apply_form(self, form: InventoryItemForm):
        """Reemplazo completo: todos los campos editables se sobrescriben."""
        self.responsable = form.responsable
        self.cedula = form.cedula
        self.cargo = form.cargo
        self.sector = form.sector
        self.status_general = form.status_general
        laptop = form.laptop
        self.laptop = laptop.to_dict() if laptop is not None and not laptop.is_empty() else None
        desk = form.escritorio
        self.escritorio = desk.to_dict() if desk is not None and not desk.is_empty() else None
        self.obs_generales = form.obs_generales or ""

    def to_item(self) -> InventoryItem:
        return InventoryItem(
            id=self.id,
            responsable=self.responsable,
            cedula=self.cedula,
            cargo=self.cargo,
            sector=self.sector,
            status_general=self.status_general,
            laptop=Equipment.from_dict(self.laptop),
            escritorio=DesktopEquipment.from_dict(self.escritorio),
            obs_generales=self.obs_generales or "",
        )

    def __repr__(self):
        return f"<InventoryRecord {self.id} {self.responsable!r}>"
