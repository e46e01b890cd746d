"""Tests shared by every renderer: validation, selection and PDF normalization."""

import dataclasses
import io

import pytest
from pypdf import PdfReader

from agreement import SCHEMA_VERSION
from answers import AnswerModel
from config import RENDERERS
from errors import RenderError, ValidationError
from renderers import build_renderer, normalize_pdf
from tests.helpers import make_stamped_pdf


@pytest.mark.parametrize("name", RENDERERS)
def test_every_renderer_validates_before_binding(config, name, monkeypatch):
    renderer = build_renderer(dataclasses.replace(config, renderer=name))

    def bind_values(*args):
        raise AssertionError("answers were bound before validation")

    monkeypatch.setattr("renderers.bind_values", bind_values)

    with pytest.raises(ValidationError) as exc:
        renderer.render(AnswerModel(client_name="", email=""))

    assert exc.value.missing == ["clientName", "email"]


class TestNormalizePdf:

    def test_engine_timestamps_are_dropped(self):
        first = normalize_pdf(make_stamped_pdf("D:20240305101500Z"), SCHEMA_VERSION)
        second = normalize_pdf(make_stamped_pdf("D:20250101000000Z"), SCHEMA_VERSION)

        assert first == second
        metadata = PdfReader(io.BytesIO(first)).metadata
        assert "/CreationDate" not in metadata
        assert "/ModDate" not in metadata
        assert metadata.subject == SCHEMA_VERSION

    @pytest.mark.parametrize("data", [b"", b"this is not a pdf"])
    def test_unreadable_engine_output(self, data):
        with pytest.raises(RenderError, match="unreadable document"):
            normalize_pdf(data, SCHEMA_VERSION)
