import io
import logging
import os

from PIL import Image
from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from agreement import AGREEMENT_OVERLAY
from assets import fetched_image
from errors import AssetError, RenderError, SchemaError
from renderers import Renderer, document_info
from schema import OverlaySchema

logger = logging.getLogger(__name__)


def fit_within(image_size, box_width, box_height):
    """Largest (width, height) with the image's aspect ratio inside the box."""
    img_w, img_h = image_size
    if img_w <= 0 or img_h <= 0:
        return box_width, box_height
    scale = min(box_width / img_w, box_height / img_h)
    return img_w * scale, img_h * scale


class TemplateStamper(Renderer):
    """Stamps answers onto the pre-printed agreement template.

    Only pages that receive at least one value get an overlay merged in; every
    other template page is copied as it is. The template decides the page
    count, so the schema and the template must agree on it.
    """

    name = "overlay"
    schema_type = OverlaySchema

    font = "Helvetica"
    bold_font = "Helvetica-Bold"
    font_size = 11
    check_font = "ZapfDingbats"
    check_glyph = "4"  # ✔ in ZapfDingbats

    def default_schema(self):
        return AGREEMENT_OVERLAY

    def _render(self, answers, schema, values):
        template_path = self.config.template_path
        if not os.path.exists(template_path):
            raise RenderError("Agreement template not found", template_path)

        try:
            reader = PdfReader(template_path)
            page_count = len(reader.pages)
        except (PdfReadError, OSError) as e:
            raise RenderError("Agreement template is unreadable", e)
        if page_count != schema.page_count:
            raise SchemaError(
                f"Template {template_path} has {page_count} pages, "
                f"schema {schema.version or ''} expects {schema.page_count}"
            )

        writer = PdfWriter()
        try:
            writer.append(reader)
        except PdfReadError as e:
            raise RenderError("Agreement template is unreadable", e)
        for index, entries in sorted(self._entries_by_page(schema, values).items()):
            page = writer.pages[index]
            size = (float(page.mediabox.width), float(page.mediabox.height))
            overlay = self.create_overlay_page(size, entries)
            if overlay is not None:
                page.merge_page(overlay)

        writer.add_metadata(document_info(schema.version))
        out = io.BytesIO()
        writer.write(out)
        return out.getvalue()

    def _entries_by_page(self, schema, values):
        pages = {}
        for field_id, placement in schema.items():
            value = values.get(field_id)
            if placement.kind == "check":
                if value is not True:
                    continue
            elif not value:
                continue
            pages.setdefault(placement.page, []).append((field_id, placement, value))
        return pages

    def create_overlay_page(self, size, entries):
        buffer = io.BytesIO()
        c = canvas.Canvas(buffer, pagesize=size, invariant=1)
        drawn = 0
        for field_id, placement, value in entries:
            if placement.kind == "check":
                c.setFont(self.check_font, self.font_size + 2)
                c.drawString(placement.x, placement.y, self.check_glyph)
            elif placement.kind == "image":
                if not self._draw_image(c, field_id, placement, value):
                    continue
            else:
                c.setFont(self.bold_font if placement.kind == "heading" else self.font, self.font_size)
                c.drawString(placement.x, placement.y, str(value))
            drawn += 1
        if not drawn:
            return None
        c.showPage()
        c.save()
        buffer.seek(0)
        return PdfReader(buffer).pages[0]

    def _draw_image(self, c, field_id, placement, ref):
        try:
            with fetched_image(ref) as path:
                with Image.open(path) as img:
                    img.load()
                    width, height = fit_within(img.size, placement.width, placement.height)
                    c.drawImage(ImageReader(img), placement.x, placement.y,
                                width=width, height=height, mask="auto")
            return True
        except (AssetError, OSError) as e:
            logger.error("Leaving %s out of the agreement: %s", field_id.value, e)
            return False
