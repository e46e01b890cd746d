"""Tests for stamping answers onto the fixed template."""

import dataclasses
import io
import os

import pytest
from pypdf import PdfReader

from agreement import SCHEMA_VERSION
from answers import AnswerModel
from errors import RenderError, SchemaError
from overlay import TemplateStamper, fit_within
from renderers import build_renderer
from schema import FieldId, FlowSchema, OverlaySchema
from tests.helpers import make_pdf


@pytest.fixture
def stamper(config):
    return TemplateStamper(dataclasses.replace(config, renderer="overlay"))


def page_text(pdf, index):
    return PdfReader(io.BytesIO(pdf)).pages[index].extract_text()


def test_fit_within_keeps_aspect_ratio():
    assert fit_within((300, 100), 150, 40) == pytest.approx((120, 40))
    assert fit_within((100, 400), 150, 40) == pytest.approx((10, 40))
    assert fit_within((0, 0), 150, 40) == (150, 40)


def test_values_land_on_their_pages(stamper, jane):
    pdf = stamper.render(jane)
    reader = PdfReader(io.BytesIO(pdf))
    assert len(reader.pages) == 7
    assert "Jane Doe" in page_text(pdf, 0)
    assert "123 Main" in page_text(pdf, 3)
    assert reader.metadata.subject == SCHEMA_VERSION


def test_pages_without_values_are_untouched(stamper, jane):
    pdf = stamper.render(jane)
    for index in (1, 2, 4, 5):
        assert page_text(pdf, index).strip() == f"Template page {index + 1}"


def test_identical_output_for_identical_input(stamper, jane, signature_png):
    answers = dataclasses.replace(jane, client_signature=signature_png)
    assert stamper.render(answers) == stamper.render(answers)


def test_missing_template(config, jane):
    stamper = TemplateStamper(dataclasses.replace(config, renderer="overlay", template_path="/nowhere.pdf"))
    with pytest.raises(RenderError, match="template not found"):
        stamper.render(jane)


def test_page_count_mismatch(stamper, jane, tmp_path):
    short = tmp_path / "short.pdf"
    short.write_bytes(make_pdf(pages=3))
    stamper.config = dataclasses.replace(stamper.config, template_path=str(short))
    with pytest.raises(SchemaError, match="has 3 pages"):
        stamper.render(jane)


def test_flow_schema_is_rejected(stamper, jane):
    with pytest.raises(SchemaError):
        stamper.render(jane, FlowSchema(blocks=()))


def test_unreadable_signature_is_skipped(stamper, caplog):
    answers = AnswerModel(client_name="Jane Doe", email="jane@x.com", client_signature=b"not an image")
    pdf = stamper.render(answers)
    assert len(PdfReader(io.BytesIO(pdf)).pages) == 7
    assert "Leaving client_signature out of the agreement" in caplog.text


def test_guardian_values_only_for_minor(stamper):
    adult = AnswerModel(client_name="Jane Doe", email="jane@x.com", guardian_name="Mary Guardian")
    minor = dataclasses.replace(adult, is_minor=True)
    assert "Mary Guardian" not in page_text(stamper.render(adult), 6)
    assert "Mary Guardian" in page_text(stamper.render(minor), 6)


def test_custom_schema(stamper, jane, tmp_path):
    one_page = tmp_path / "one.pdf"
    one_page.write_bytes(make_pdf(pages=1))
    stamper.config = dataclasses.replace(stamper.config, template_path=str(one_page))
    schema = OverlaySchema({"email": {"page": 0, "x": 72, "y": 500}}, page_count=1, version="test-1")
    pdf = stamper.render(jane, schema)
    assert "jane@x.com" in page_text(pdf, 0)
    assert PdfReader(io.BytesIO(pdf)).metadata.subject == "test-1"


def test_temp_images_are_removed(stamper, signature_png, tmp_path, monkeypatch):
    monkeypatch.setattr("tempfile.tempdir", str(tmp_path))
    answers = AnswerModel(client_name="Jane Doe", email="jane@x.com", client_signature=signature_png)
    stamper.render(answers)
    assert not [name for name in os.listdir(tmp_path) if name.startswith("agreement_asset_")]


def test_build_renderer_picks_overlay(config):
    assert isinstance(build_renderer(dataclasses.replace(config, renderer="overlay")), TemplateStamper)


def test_unreadable_template(stamper, jane, tmp_path):
    broken = tmp_path / "broken.pdf"
    broken.write_bytes(b"this is not a pdf")
    stamper.config = dataclasses.replace(stamper.config, template_path=str(broken))
    with pytest.raises(RenderError, match="template is unreadable"):
        stamper.render(jane)


def stamped_entries(stamper, answers, monkeypatch):
    """Render ``answers`` and return what was stamped, keyed by page index."""
    stamped = {}
    original = TemplateStamper.create_overlay_page

    def record(self, size, entries):
        page = entries[0][1].page
        stamped[page] = [(field_id, value) for field_id, _, value in entries]
        return original(self, size, entries)

    monkeypatch.setattr(TemplateStamper, "create_overlay_page", record)
    stamper.render(answers)
    return stamped


def test_only_selected_materials_are_checked(stamper, jane, monkeypatch):
    stamped = stamped_entries(stamper, jane, monkeypatch)
    checks = [field_id for field_id, value in stamped[0] if value is True]
    assert checks == [FieldId.MATERIAL_EMBRYO, FieldId.MATERIAL_SPERM]


def test_unknown_material_is_stamped_as_other(stamper, monkeypatch):
    answers = AnswerModel(client_name="Jane Doe", email="jane@x.com", materials={"Cord Blood"})
    stamped = stamped_entries(stamper, answers, monkeypatch)
    assert not [field_id for field_id, value in stamped[0] if value is True]
    assert (FieldId.OTHER_MATERIAL, "Cord Blood") in stamped[0]
