"""Small PDF and image builders shared by the tests."""

import io

from PIL import Image
from pypdf import PdfWriter
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas


def make_pdf(pages=1, text=None):
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4, invariant=1)
    for n in range(pages):
        if text:
            c.drawString(72, 720, f"{text} {n + 1}")
        c.showPage()
    c.save()
    return buffer.getvalue()


def make_png(size=(60, 20), color=(0, 0, 0, 255)):
    buffer = io.BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def make_stamped_pdf(stamp):
    """A one page PDF whose document info carries ``stamp`` as its dates."""
    writer = PdfWriter()
    writer.add_blank_page(width=595, height=842)
    writer.add_metadata({"/CreationDate": stamp, "/ModDate": stamp, "/Producer": "Skia/PDF m120"})
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()
