"""Programmatic renderer: reportlab draw calls with a hand-kept page cursor.

No layout engine is involved, so every block measures itself, asks the
:class:`PageCursor` whether it still fits, and only then draws. It is the
plainest of the three renderers but needs nothing beyond reportlab and Pillow.
"""
import io
import logging
from dataclasses import dataclass
from xml.sax.saxutils import escape

from PIL import Image
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import inch
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph as RLParagraph
from reportlab.platypus.doctemplate import LayoutError

from agreement import AGREEMENT_FLOW
from assets import fetched_image
from errors import AssetError, RenderError
from overlay import fit_within
from renderers import DOCUMENT_TITLE, Renderer, compose, normalize_pdf
from schema import FlowSchema

logger = logging.getLogger(__name__)

MARGIN = 0.5 * inch
BLANK = "__________"
SIGNATURE_LINE = "_" * 40

BODY = ParagraphStyle("body", fontName="Helvetica", fontSize=9.5, leading=13, spaceAfter=6)
INDENTED = ParagraphStyle("indented", parent=BODY, leftIndent=18)
OPTION = ParagraphStyle("option", parent=BODY, leftIndent=34, spaceAfter=3)
HEADING = ParagraphStyle("heading", parent=BODY, fontName="Helvetica-Bold", fontSize=10.5,
                         leading=14, spaceBefore=6)
TITLE = ParagraphStyle("title", parent=BODY, fontName="Helvetica-BoldOblique", fontSize=14,
                       leading=18, alignment=1, spaceBefore=8, spaceAfter=14)
CENTERED = ParagraphStyle("centered", parent=BODY, fontName="Helvetica-Bold", alignment=1, spaceAfter=0)


@dataclass
class PageCursor:
    """Current page and vertical position, in points from the page bottom."""

    page_height: float
    top_margin: float = MARGIN
    bottom_margin: float = MARGIN
    page_index: int = 0
    y: float = 0.0

    def __post_init__(self):
        self.y = self.top

    @property
    def top(self):
        return self.page_height - self.top_margin

    @property
    def available(self):
        return self.y - self.bottom_margin

    @property
    def at_top(self):
        return self.y >= self.top

    def would_overflow(self, height):
        return self.y - height < self.bottom_margin

    def new_page(self):
        self.page_index += 1
        self.y = self.top

    def advance(self, height):
        self.y -= height


def _markup(segments):
    parts = []
    for seg in segments:
        if seg.is_value:
            parts.append(f"<u>{escape(seg.text)}</u>" if seg.text else BLANK)
        else:
            parts.append(escape(seg.text))
    return "".join(parts)


class CanvasRenderer(Renderer):
    name = "canvas"
    schema_type = FlowSchema

    def default_schema(self):
        return AGREEMENT_FLOW

    def _render(self, answers, schema, values):
        document = AgreementCanvas()
        try:
            for view in compose(answers, schema, values):
                document.draw(view)
            pdf = document.finish()
        except (LayoutError, ValueError) as e:
            raise RenderError("Failed to draw the agreement", e)
        return normalize_pdf(pdf, schema.version)


class AgreementCanvas:
    """Drawing state for one document; never shared between renders."""

    page_size = A4
    signature_box = (150, 40)

    def __init__(self):
        self.buffer = io.BytesIO()
        self.canvas = canvas.Canvas(self.buffer, pagesize=self.page_size, invariant=1)
        self.canvas.setTitle(DOCUMENT_TITLE)
        self.cursor = PageCursor(page_height=self.page_size[1])
        self.width = self.page_size[0] - 2 * MARGIN

    def draw(self, view):
        getattr(self, "_draw_" + view["kind"])(view)

    def finish(self):
        self._finish_page()
        self.canvas.save()
        return self.buffer.getvalue()

    # ── pagination ───────────────────────────────────────────────────────────

    def _finish_page(self):
        c = self.canvas
        c.setFont("Helvetica", 8)
        c.drawCentredString(self.page_size[0] / 2, MARGIN / 2, str(self.cursor.page_index + 1))
        c.showPage()

    def _break_page(self):
        self._finish_page()
        self.cursor.new_page()

    def ensure(self, height):
        """Start a new page first if ``height`` would cross the bottom margin."""
        if self.cursor.would_overflow(height) and not self.cursor.at_top:
            self._break_page()

    # ── primitives ───────────────────────────────────────────────────────────

    def _flow(self, markup, style):
        """Draw wrapped text, splitting it across pages when it is too long."""
        para = RLParagraph(markup, style)
        while para is not None:
            _, height = para.wrap(self.width, self.cursor.available)
            total = height + style.spaceAfter
            if not self.cursor.would_overflow(total):
                para.drawOn(self.canvas, MARGIN, self.cursor.y - height)
                self.cursor.advance(total)
                return
            parts = para.split(self.width, self.cursor.available)
            if len(parts) < 2:
                if self.cursor.at_top:
                    raise RenderError(f"A block is taller than a page and cannot be split ({height:.0f}pt)")
                self._break_page()
                continue
            head, para = parts[0], parts[1]
            _, head_height = head.wrap(self.width, self.cursor.available)
            head.drawOn(self.canvas, MARGIN, self.cursor.y - head_height)
            self._break_page()

    def _checkbox(self, x, y, checked, size=8):
        c = self.canvas
        c.setLineWidth(0.6)
        c.rect(x, y, size, size, stroke=1, fill=0)
        if checked:
            c.setFont("ZapfDingbats", size)
            c.drawString(x + 1, y + 1, "4")

    def _image(self, ref, box_width, box_height, label):
        """Embed ``ref`` at the cursor inside the box; returns the height used."""
        try:
            with fetched_image(ref) as path:
                with Image.open(path) as img:
                    img.load()
                    width, height = fit_within(img.size, box_width, box_height)
                    self.canvas.drawImage(ImageReader(img), MARGIN, self.cursor.y - height,
                                          width=width, height=height, mask="auto")
            return height
        except (AssetError, OSError) as e:
            logger.error("Leaving %s out of the agreement: %s", label, e)
            return 0

    # ── blocks ───────────────────────────────────────────────────────────────

    def _draw_letterhead(self, view):
        for line in view["clinic"]:
            self._flow(escape(line), CENTERED)
        self._flow(escape(view["title"]), TITLE)

    def _draw_heading(self, view):
        # Keep a heading with at least two lines of what follows
        self.ensure(HEADING.leading * 3)
        self._flow(_markup(view["segments"]), HEADING)

    def _draw_paragraph(self, view):
        text = _markup(view["segments"])
        if view["bold"]:
            text = f"<b>{text}</b>"
        if view["lead"]:
            text = f"<b>{_markup(view['lead'])}</b> {text}"
        self._flow(text, INDENTED if view["indent"] else BODY)

    def _draw_checkboxes(self, view):
        c = self.canvas
        line_height = 16
        x = MARGIN
        self.ensure(line_height)
        for item in view["items"]:
            label_width = c.stringWidth(item["label"], "Helvetica", 9.5)
            if x + 12 + label_width > MARGIN + self.width:
                self.cursor.advance(line_height)
                self.ensure(line_height)
                x = MARGIN
            baseline = self.cursor.y - 10
            self._checkbox(x, baseline, item["checked"])
            c.setFont("Helvetica", 9.5)
            c.drawString(x + 12, baseline + 1, item["label"])
            x += 12 + label_width + 18
        self.cursor.advance(line_height)
        if view["other"] is not None:
            self._flow("Other: " + (f"<u>{escape(view['other'])}</u>" if view["other"] else BLANK), BODY)

    def _draw_options(self, view):
        if view["intro"]:
            self.ensure(BODY.leading * 3)
            self._flow(_markup(view["intro"]), BODY)
        for option in view["options"]:
            para = RLParagraph(f"{escape(option['label'])} {escape(view['initials'])}", OPTION)
            _, height = para.wrap(self.width, self.cursor.available)
            self.ensure(height + OPTION.spaceAfter)
            self._checkbox(MARGIN + 18, self.cursor.y - 10, option["checked"])
            para.drawOn(self.canvas, MARGIN, self.cursor.y - height)
            self.cursor.advance(height + OPTION.spaceAfter)

    def _draw_signature(self, view):
        c = self.canvas
        box_w, box_h = self.signature_box
        label_height, line_height = 14, 16
        image_height = box_h if view["image"] else 0
        self.ensure(label_height + image_height + line_height * 2 + 10)

        self._flow(_markup(view["label"]), BODY)
        if view["image"]:
            self.cursor.advance(self._image(view["image"], box_w, box_h, "signature"))

        c.setFont("Helvetica", 9.5)
        self.cursor.advance(line_height)
        signature = view["text"] or ""
        c.drawString(MARGIN, self.cursor.y, signature if signature else SIGNATURE_LINE)

        details = []
        if view["name"] is not None:
            details.append("Print Name: " + (view["name"] or BLANK))
        if view["date"] is not None:
            details.append("Date: " + view["date"])
        if details:
            self.cursor.advance(line_height)
            c.drawString(MARGIN, self.cursor.y, "     ".join(details))
        self.cursor.advance(10)

    def _draw_exhibit(self, view):
        self._flow(escape(view["title"]), TITLE)
        self._flow(_markup(view["caption"]), BODY)
        if view["image"]:
            box_height = min(self.cursor.available, self.page_size[1] / 2)
            self.cursor.advance(self._image(view["image"], self.width, box_height, "ID document"))

    def _draw_rule(self, view):
        self.ensure(20)
        self.cursor.advance(8)
        self.canvas.setLineWidth(0.5)
        self.canvas.line(MARGIN, self.cursor.y, MARGIN + self.width, self.cursor.y)
        self.cursor.advance(12)

    def _draw_page_break(self, view):
        if not self.cursor.at_top:
            self._break_page()
