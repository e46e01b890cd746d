"""Tests for SMTP delivery."""

import dataclasses
import smtplib
from unittest.mock import MagicMock

import pytest

import client_settings as cs
from dispatcher import DeliveryReceipt, SmtpDelivery
from errors import DeliveryError


@pytest.fixture
def smtp():
    factory = MagicMock(name="SMTP_SSL")
    server = factory.return_value.__enter__.return_value
    return factory, server


def test_sends_pdf_attachment(config, smtp):
    factory, server = smtp
    delivery = SmtpDelivery(config, smtp_factory=factory)

    receipt = delivery.send("jane@x.com", b"%PDF-1.4 test", "Jane_Doe_Storage_Agreement.pdf", "Jane Doe")

    assert isinstance(receipt, DeliveryReceipt)
    assert receipt.recipient == "jane@x.com"
    assert factory.call_args.args == ("smtp.gmail.com", 465)
    server.login.assert_called_once_with("lab@example.com", "secret")

    msg = server.send_message.call_args.args[0]
    assert msg["Subject"] == cs.EMAIL_SUBJECT
    assert msg["To"] == "jane@x.com"
    assert msg["Message-ID"] == receipt.message_id
    assert "Dear Jane Doe" in msg.get_body(preferencelist=("plain",)).get_content()
    (attachment,) = list(msg.iter_attachments())
    assert attachment.get_filename() == "Jane_Doe_Storage_Agreement.pdf"
    assert attachment.get_content_type() == "application/pdf"
    assert attachment.get_content() == b"%PDF-1.4 test"


def test_smtp_failure_is_not_retried(config, smtp):
    factory, server = smtp
    server.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")

    with pytest.raises(DeliveryError, match="jane@x.com"):
        SmtpDelivery(config, smtp_factory=factory).send("jane@x.com", b"%PDF", "a.pdf", "Jane")

    assert factory.call_count == 1
    server.send_message.assert_not_called()


def test_connection_failure(config):
    factory = MagicMock(side_effect=OSError("connection refused"))
    with pytest.raises(DeliveryError, match="connection refused"):
        SmtpDelivery(config, smtp_factory=factory).send("jane@x.com", b"%PDF", "a.pdf", "Jane")


def test_unconfigured(config, smtp):
    factory, _ = smtp
    delivery = SmtpDelivery(dataclasses.replace(config, email_pass=""), smtp_factory=factory)
    with pytest.raises(DeliveryError, match="not configured"):
        delivery.send("jane@x.com", b"%PDF", "a.pdf", "Jane")
    factory.assert_not_called()
