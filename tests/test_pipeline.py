"""Tests for generate_agreement / submit_agreement."""

import dataclasses
from unittest.mock import MagicMock

import pytest

from answers import AnswerModel
from assets import AssetResolver
from dispatcher import DeliveryReceipt
from errors import DeliveryError, GenerationFailure, RenderError
from logger import load_logs
from pipeline import agreement_filename, generate_agreement, submit_agreement


class FailingResolver(AssetResolver):
    def upload(self, data, name):
        raise ConnectionError("bucket unreachable")


@pytest.fixture
def delivery():
    delivery = MagicMock()
    delivery.send.side_effect = lambda recipient, document, filename, display_name: DeliveryReceipt(
        recipient=recipient, filename=filename, message_id="<1@example.com>")
    return delivery


def test_filename():
    assert agreement_filename("Jane  Doe") == "Jane_Doe_Storage_Agreement.pdf"
    assert agreement_filename("José O'Neil") == "José_ONeil_Storage_Agreement.pdf"
    assert agreement_filename("") == "Client_Storage_Agreement.pdf"


def test_generate(config, jane):
    agreement = generate_agreement(jane, config)
    assert agreement.pdf.startswith(b"%PDF")
    assert agreement.filename == "Jane_Doe_Storage_Agreement.pdf"
    assert agreement.answers == jane


@pytest.mark.parametrize("answers", [
    AnswerModel(client_name="", email="a@x.com"),
    AnswerModel(client_name="A", email=""),
])
def test_validation_runs_before_any_side_effect(config, answers, delivery):
    resolver, renderer = MagicMock(), MagicMock()

    with pytest.raises(GenerationFailure) as exc:
        submit_agreement(answers, config, resolver, delivery, renderer=renderer)

    assert exc.value.status == "validation"
    assert exc.value.http_status == 400
    resolver.upload.assert_not_called()
    renderer.render.assert_not_called()
    delivery.send.assert_not_called()


def test_upload_failure_still_generates_and_delivers(config, jane, signature_png, delivery, caplog):
    answers = dataclasses.replace(jane, client_signature=signature_png)

    result = submit_agreement(answers, config, FailingResolver(), delivery)

    assert result.agreement.answers.client_signature is None
    assert result.receipt.recipient == "jane@x.com"
    delivery.send.assert_called_once()
    recipient, document, filename, display_name = delivery.send.call_args.args
    assert (recipient, filename, display_name) == ("jane@x.com", "Jane_Doe_Storage_Agreement.pdf", "Jane Doe")
    assert document == result.agreement.pdf
    assert "Upload of signature for Jane Doe failed" in caplog.text


def test_render_failure(config, jane, delivery):
    renderer = MagicMock()
    renderer.render.side_effect = RenderError("Failed to start the PDF engine", OSError("no chromium"))

    with pytest.raises(GenerationFailure) as exc:
        submit_agreement(jane, config, None, delivery, renderer=renderer)

    assert exc.value.status == "rendering"
    assert exc.value.http_status == 500
    assert "no chromium" in exc.value.to_dict()["details"]
    delivery.send.assert_not_called()


def test_delivery_failure(config, jane, delivery):
    delivery.send.side_effect = DeliveryError("SMTP refused")

    with pytest.raises(GenerationFailure) as exc:
        submit_agreement(jane, config, None, delivery)

    assert exc.value.status == "delivery"
    assert exc.value.http_status == 502
    assert exc.value.to_dict() == {
        "error": "The agreement was generated but could not be emailed to jane@x.com",
        "status": "delivery",
        "details": "SMTP refused",
    }


def test_outcomes_are_logged(config, jane, delivery):
    submit_agreement(jane, config, None, delivery)
    delivery.send.side_effect = DeliveryError("SMTP refused")
    with pytest.raises(GenerationFailure):
        submit_agreement(jane, config, None, delivery)

    logs = load_logs(config.log_file)
    assert list(logs["Status"]) == ["Sent", "Failed (delivery)"]
    assert set(logs["Client"]) == {"Jane Doe"}
    assert set(logs["Renderer"]) == {"canvas"}


def test_unreadable_template_is_a_rendering_failure(config, jane, delivery, tmp_path):
    broken = tmp_path / "broken.pdf"
    broken.write_bytes(b"this is not a pdf")
    overlay = dataclasses.replace(config, renderer="overlay", template_path=str(broken))

    with pytest.raises(GenerationFailure) as exc:
        submit_agreement(jane, overlay, None, delivery)

    assert exc.value.status == "rendering"
    assert "template is unreadable" in exc.value.to_dict()["details"]
    delivery.send.assert_not_called()
