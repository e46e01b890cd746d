"""Validate, host assets, render and deliver one storage agreement."""
import logging
import re
from dataclasses import dataclass

from assets import resolve_assets
from errors import DeliveryError, GenerationFailure, RenderError, SchemaError, ValidationError
from logger import log_submission
from renderers import DOCUMENT_TITLE, build_renderer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedAgreement:
    pdf: bytes
    filename: str
    answers: object


@dataclass(frozen=True)
class SubmissionResult:
    agreement: GeneratedAgreement
    receipt: object


def agreement_filename(client_name):
    name = re.sub(r"\s+", "_", (client_name or "").strip())
    name = re.sub(r"[^\w-]", "", name) or "Client"
    return f"{name}_Storage_Agreement.pdf"


def generate_agreement(answers, config, resolver=None, renderer=None):
    """Render the agreement PDF for ``answers``.

    Raises :class:`GenerationFailure` with status ``validation`` before anything
    is uploaded or rendered, or ``rendering`` when the engine gives up.
    """
    try:
        answers.validate()
    except ValidationError as e:
        logger.warning("Rejected agreement request: %s", e)
        raise GenerationFailure("validation", str(e), e)

    resolved = resolve_assets(answers, resolver)
    renderer = renderer or build_renderer(config)
    try:
        pdf = renderer.render(resolved)
    except (RenderError, SchemaError) as e:
        logger.error("Rendering failed for %s: %s", answers.client_name, e)
        raise GenerationFailure("rendering", "The agreement could not be generated", e)

    return GeneratedAgreement(pdf=pdf, filename=agreement_filename(answers.client_name), answers=resolved)


def submit_agreement(answers, config, resolver, delivery, renderer=None):
    """Generate the agreement, send it to the client, and log the outcome."""
    try:
        agreement = generate_agreement(answers, config, resolver=resolver, renderer=renderer)
    except GenerationFailure as failure:
        log_submission(config.log_file, answers.client_name, DOCUMENT_TITLE, config.renderer,
                       f"Failed ({failure.status})", failure.message)
        raise

    try:
        receipt = delivery.send(answers.email, agreement.pdf, agreement.filename, answers.client_name)
    except DeliveryError as e:
        log_submission(config.log_file, answers.client_name, DOCUMENT_TITLE, config.renderer,
                       "Failed (delivery)", str(e))
        raise GenerationFailure("delivery", f"The agreement was generated but could not be emailed to {answers.email}", e)

    log_submission(config.log_file, answers.client_name, DOCUMENT_TITLE, config.renderer, "Sent")
    return SubmissionResult(agreement=agreement, receipt=receipt)
