"""
Pytest configuration for the storage agreement generator
"""

import logging
import sys
from unittest.mock import MagicMock

import pytest

from answers import AnswerModel
from config import ServiceConfig
from tests.helpers import make_pdf, make_png


@pytest.fixture(autouse=True)
def configure_logging():
    """Console-only logging so caplog sees every record."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter('%(name)s - %(levelname)s - %(message)s'))
    root_logger.addHandler(console_handler)
    root_logger.setLevel(logging.INFO)

    yield

    root_logger.handlers.clear()


@pytest.fixture
def signature_png():
    return make_png()


@pytest.fixture
def jane():
    return AnswerModel.from_form({
        "clientName": "Jane Doe",
        "email": "jane@x.com",
        "dateOfBirth": "1990-01-01",
        "address": "123 Main",
        "reproductiveMaterials": ["Embryo", "Sperm"],
    })


@pytest.fixture
def template_pdf(tmp_path):
    """A blank seven page stand-in for the printed agreement."""
    path = tmp_path / "agreement.pdf"
    path.write_bytes(make_pdf(pages=7, text="Template page"))
    return str(path)


@pytest.fixture
def config(tmp_path, template_pdf):
    return ServiceConfig(
        renderer="canvas",
        template_path=template_pdf,
        email_user="lab@example.com",
        email_pass="secret",
        log_file=str(tmp_path / "submissions.csv"),
    )


@pytest.fixture
def fake_playwright():
    """A sync_playwright() stand-in whose browser prints a one page PDF."""
    playwright = MagicMock(name="playwright")
    browser = playwright.chromium.launch.return_value
    browser.new_page.return_value.pdf.return_value = make_pdf(text="Printed")

    factory = MagicMock(name="sync_playwright")
    factory.return_value.__enter__.return_value = playwright
    factory.return_value.__exit__.return_value = False
    return factory, playwright, browser
