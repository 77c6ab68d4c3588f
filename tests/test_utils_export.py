from reportlab.pdfgen.canvas import Canvas

from equipotrack.definitions import InventoryItem
from equipotrack.utils_export import stream_pdf
from .conftest import make_form


def test_pdf_includes_desktop_column(monkeypatch):
    drawn = []
    draw = Canvas.drawString

    def record(self, x, y, text, *args, **kwargs):
        drawn.append(text)
        return draw(self, x, y, text, *args, **kwargs)

    monkeypatch.setattr(Canvas, "drawString", record)
    resp = stream_pdf("inventario.pdf", "Inventario de equipos",
                      [InventoryItem.from_form("abc", make_form())])
    assert resp.get_data().startswith(b"%PDF")
    assert "Escritorio" in drawn
    assert any(t.startswith("CPU: HP/ProDesk") for t in drawn)
