import logging

from jinja2 import Environment, FileSystemLoader, select_autoescape
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

import client_settings as cs
from agreement import AGREEMENT_FLOW
from assets import image_src, inline_image
from errors import AssetError, RenderError
from renderers import DOCUMENT_TITLE, Renderer, compose, normalize_pdf
from schema import IMAGE_FIELDS, FlowSchema

logger = logging.getLogger(__name__)

PAGE_MARGIN = {"top": "0.5in", "right": "0.5in", "bottom": "0.5in", "left": "0.5in"}

# Used once when the default launch fails, e.g. in containers without user namespaces
REDUCED_PRIVILEGE_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
]


class FlowRenderer(Renderer):
    """Builds the agreement as HTML and lets Chromium paginate and print it."""

    name = "flow"
    schema_type = FlowSchema

    def __init__(self, config, playwright_factory=sync_playwright):
        super().__init__(config)
        self.env = Environment(
            loader=FileSystemLoader(config.templates_dir),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["image_src"] = image_src
        self.playwright_factory = playwright_factory

    def default_schema(self):
        return AGREEMENT_FLOW

    def embed_images(self, values):
        """Replace image references with checked inline copies.

        Chromium never fetches anything itself; an image that cannot be fetched
        or decoded is logged and left out.
        """
        embedded = dict(values)
        for field_id in IMAGE_FIELDS:
            ref = values.get(field_id)
            if not ref:
                continue
            try:
                embedded[field_id] = inline_image(ref)
            except AssetError as e:
                logger.error("Leaving %s out of the agreement: %s", field_id.value, e)
                embedded[field_id] = None
        return embedded

    def build_html(self, answers, schema, values):
        values = self.embed_images(values)
        template = self.env.get_template("agreement.html")
        return template.render(
            title=DOCUMENT_TITLE,
            clinic_name=cs.CLINIC_NAME,
            version=schema.version,
            blocks=compose(answers, schema, values),
        )

    def _render(self, answers, schema, values):
        html = self.build_html(answers, schema, values)
        return normalize_pdf(self.print_pdf(html), schema.version)

    def launch_options(self, reduced=False):
        options = {"headless": True}
        if self.config.chromium_executable:
            options["executable_path"] = self.config.chromium_executable
        if reduced:
            options["args"] = list(REDUCED_PRIVILEGE_ARGS)
            options["chromium_sandbox"] = False
        return options

    def _launch(self, playwright):
        try:
            return playwright.chromium.launch(**self.launch_options())
        except PlaywrightError as e:
            logger.warning("Chromium launch failed (%s), retrying without the sandbox", e)
        try:
            return playwright.chromium.launch(**self.launch_options(reduced=True))
        except PlaywrightError as e:
            logger.error("Second Chromium launch failed: %s", e)
            raise RenderError("Failed to start the PDF engine", e)

    def print_pdf(self, html) -> bytes:
        try:
            with self.playwright_factory() as playwright:
                browser = self._launch(playwright)
                try:
                    page = browser.new_page()
                    page.set_content(html, wait_until="networkidle", timeout=self.config.render_timeout_ms)
                    page.emulate_media(media="print")
                    return page.pdf(format="A4", print_background=True, margin=PAGE_MARGIN)
                except PlaywrightError as e:
                    raise RenderError("Failed to generate PDF", e)
                finally:
                    try:
                        browser.close()
                    except PlaywrightError as e:
                        logger.warning("Could not close Chromium cleanly: %s", e)
        except PlaywrightError as e:
            # Raised by the driver itself, before any browser exists
            raise RenderError("Failed to start the PDF engine", e)
