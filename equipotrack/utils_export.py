from io import BytesIO
from flask import Response
from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from reportlab.lib.pagesizes import A4, landscape
from reportlab.pdfgen import canvas
from reportlab.lib.units import cm

from .codec import CSV_HEADERS, format_equipment, format_desktop
from .definitions import FormatMode


def _attachment(filename):
    return {"Content-Disposition": f"attachment; filename={filename}"}


def stream_text(filename, content, mimetype="text/csv"):
    """Descarga de un texto ya armado (el CSV trae su propio BOM)."""
    return Response(content.encode("utf-8"), mimetype=f"{mimetype}; charset=utf-8",
                    headers=_attachment(filename))


def item_rows(items, mode=FormatMode.DISPLAY):
    for it in items:
        yield [it.responsable, it.cedula, it.cargo, it.sector, it.status_general,
               format_equipment(it.laptop, mode), format_desktop(it.escritorio, mode),
               it.obs_generales]


def stream_xlsx(filename, items, sheet_title="Inventario"):
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title
    ws.append(list(CSV_HEADERS))
    for r in item_rows(items, FormatMode.EDIT):
        ws.append(r)
    for i, width in enumerate((28, 16, 22, 22, 14, 60, 90, 40), start=1):
        ws.column_dimensions[get_column_letter(i)].width = width
    bio = BytesIO()
    wb.save(bio)
    return Response(bio.getvalue(),
                    mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                    headers=_attachment(filename))


def stream_pdf(filename, title, items):
    headers = ["Responsable", "Cédula", "Cargo", "Sector", "Status", "Laptop", "Escritorio", "Obs"]
    widths = [3.8, 2.4, 2.8, 2.8, 2.2, 5.0, 5.5, 2.2]

    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=landscape(A4))
    width, height = landscape(A4)

    def header_row(y):
        c.setFont("Helvetica-Bold", 9)
        x = 1.5*cm
        for h, w in zip(headers, widths):
            c.drawString(x, y, h)
            x += w*cm
        c.setFont("Helvetica", 8)
        return y - 0.6*cm

    y = height - 1.5*cm
    c.setFont("Helvetica-Bold", 14)
    c.drawString(1.5*cm, y, title)
    y = header_row(y - 0.9*cm)

    for it in items:
        if y < 1.5*cm:
            c.showPage()
            y = header_row(height - 1.5*cm)
        row = [it.responsable, it.cedula, it.cargo, it.sector, it.status_general,
               format_equipment(it.laptop), format_desktop(it.escritorio), it.obs_generales]
        x = 1.5*cm
        for cell, w in zip(row, widths):
            # recorte aproximado al ancho de la columna
            c.drawString(x, y, str(cell or "")[:int(w * 5)])
            x += w*cm
        y -= 0.5*cm

    c.showPage()
    c.save()
    return Response(buf.getvalue(), mimetype="application/pdf", headers=_attachment(filename))
