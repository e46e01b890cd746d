import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid

import client_settings as cs
from errors import DeliveryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeliveryReceipt:
    recipient: str
    filename: str
    message_id: str


class SmtpDelivery:
    """Sends the finished agreement as a PDF attachment over SMTP (SSL)."""

    def __init__(self, config, smtp_factory=smtplib.SMTP_SSL):
        self.config = config
        self.smtp_factory = smtp_factory

    def build_message(self, recipient, document, filename, display_name):
        msg = EmailMessage()
        msg["Subject"] = cs.EMAIL_SUBJECT
        msg["From"] = self.config.email_user
        msg["To"] = recipient
        msg["Message-ID"] = make_msgid(domain=self.config.email_user.partition("@")[2] or None)
        msg.set_content(cs.EMAIL_BODY.format(client_name=display_name))
        msg.add_attachment(document, maintype="application", subtype="pdf", filename=filename)
        return msg

    def send(self, recipient, document, filename, display_name):
        if not self.config.has_smtp:
            raise DeliveryError("Email delivery is not configured (EMAIL_USER / EMAIL_PASS)")

        msg = self.build_message(recipient, document, filename, display_name)
        try:
            context = ssl.create_default_context()
            with self.smtp_factory(self.config.smtp_host, self.config.smtp_port, context=context) as server:
                server.login(self.config.email_user, self.config.email_pass)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Sending %s to %s failed: %s", filename, recipient, e)
            raise DeliveryError(f"Could not send the agreement to {recipient}: {e}")

        logger.info("Sent %s to %s", filename, recipient)
        return DeliveryReceipt(recipient=recipient, filename=filename, message_id=msg["Message-ID"])
