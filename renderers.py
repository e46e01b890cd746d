"""The renderer capability: ``(AnswerModel, schema) -> PDF bytes``.

Three strategies share this interface and are picked by ``ServiceConfig.renderer``:

* ``flow``    - HTML markup printed by headless Chromium (:mod:`html_renderer`)
* ``overlay`` - values stamped onto the fixed PDF template (:mod:`overlay`)
* ``canvas``  - explicit reportlab draw calls with manual pagination (:mod:`canvas_renderer`)
"""
import io
import logging

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError

import client_settings as cs
from answers import render_checkbox
from errors import ConfigError, RenderError, SchemaError
from schema import (
    CheckboxRow,
    Exhibit,
    Heading,
    Letterhead,
    OptionList,
    PageBreak,
    Paragraph,
    Rule,
    SignatureRow,
    bind_text,
    bind_values,
)

logger = logging.getLogger(__name__)

DOCUMENT_TITLE = "Reproductive Material(s) Storage Agreement"


def document_info(version):
    # No dates: identical answers must give identical bytes
    return {
        "/Title": DOCUMENT_TITLE,
        "/Author": cs.CLINIC_NAME,
        "/Subject": version or "",
        "/Producer": f"{cs.CLINIC_SHORT_NAME} agreement generator",
    }


def normalize_pdf(pdf_bytes, version):
    """Rewrite a PDF with fixed document info and no engine timestamps."""
    writer = PdfWriter()
    try:
        writer.append(PdfReader(io.BytesIO(pdf_bytes)))
    except PdfReadError as e:
        raise RenderError("The PDF engine produced an unreadable document", e)
    writer.add_metadata(document_info(version))
    out = io.BytesIO()
    writer.write(out)
    return out.getvalue()


class Renderer:
    """Base class; subclasses implement :meth:`_render`."""

    name = ""
    schema_type = None

    def __init__(self, config):
        self.config = config

    def default_schema(self):
        raise NotImplementedError

    def render(self, answers, schema=None) -> bytes:
        answers.validate()
        schema = schema if schema is not None else self.default_schema()
        if not isinstance(schema, self.schema_type):
            raise SchemaError(f"The {self.name} renderer needs a {self.schema_type.__name__}")
        values = bind_values(answers, cs.DEFAULT_FACILITY_NAME)
        logger.info("Rendering agreement for %s with the %s renderer (%s)",
                    answers.client_name, self.name, schema.version)
        return self._render(answers, schema, values)

    def _render(self, answers, schema, values):
        raise NotImplementedError


def compose(answers, schema, values):
    """Turn the visible flow blocks into plain dicts the flow renderers can draw."""
    views = []
    for block in schema.visible_blocks(answers):
        if isinstance(block, Letterhead):
            views.append({
                "kind": "letterhead",
                "title": block.title,
                "clinic": [cs.CLINIC_NAME, f"{cs.CLINIC_STREET} {cs.CLINIC_CITY_LINE}",
                           f"Tel {cs.CLINIC_PHONE} Fax {cs.CLINIC_FAX}"],
            })
        elif isinstance(block, Heading):
            views.append({"kind": "heading", "segments": bind_text(block.text, values)})
        elif isinstance(block, Paragraph):
            views.append({
                "kind": "paragraph",
                "lead": bind_text(block.lead, values),
                "segments": bind_text(block.text, values),
                "indent": block.indent,
                "bold": block.bold,
            })
        elif isinstance(block, CheckboxRow):
            views.append({
                "kind": "checkboxes",
                "items": [_checkbox(values.get(field_id), label) for field_id, label in block.items],
                "other": None if block.other is None else (values.get(block.other) or ""),
            })
        elif isinstance(block, OptionList):
            views.append({
                "kind": "options",
                "intro": bind_text(block.intro, values),
                "options": [_checkbox(answers.chosen(block.scenario, option), label)
                            for option, label in block.options],
                "initials": block.initials,
            })
        elif isinstance(block, SignatureRow):
            views.append({
                "kind": "signature",
                "label": bind_text(block.label, values),
                "image": values.get(block.image) if block.image else None,
                "text": (values.get(block.text) or "") if block.text else None,
                "name": (values.get(block.name) or "") if block.name else None,
                "date": values.get(block.date) if block.date else None,
            })
        elif isinstance(block, Exhibit):
            views.append({
                "kind": "exhibit",
                "title": block.title,
                "image": values.get(block.image),
                "caption": bind_text(block.caption, values),
            })
        elif isinstance(block, Rule):
            views.append({"kind": "rule"})
        elif isinstance(block, PageBreak):
            views.append({"kind": "page_break"})
        else:
            raise SchemaError(f"Unsupported block {type(block).__name__}")
    return views


def _checkbox(checked, label):
    return {"checked": checked is True, "glyph": render_checkbox(checked), "label": label}


def build_renderer(config):
    if config.renderer == "flow":
        from html_renderer import FlowRenderer
        return FlowRenderer(config)
    if config.renderer == "overlay":
        from overlay import TemplateStamper
        return TemplateStamper(config)
    if config.renderer == "canvas":
        from canvas_renderer import CanvasRenderer
        return CanvasRenderer(config)
    raise ConfigError(f"Unknown renderer '{config.renderer}'")
