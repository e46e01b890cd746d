# config.py

import os
from dataclasses import dataclass, field

from errors import ConfigError

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

RENDERERS = ("flow", "overlay", "canvas")


@dataclass(frozen=True)
class ServiceConfig:
    """Everything the renderers and collaborators need, passed in explicitly."""

    renderer: str = "flow"
    template_path: str = os.path.join(BASE_DIR, "forms", "agreement.pdf")
    templates_dir: str = os.path.join(BASE_DIR, "templates")

    # --- SMTP (delivery) ---
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465
    email_user: str = ""
    email_pass: str = field(default="", repr=False)

    # --- S3 (signature and ID hosting) ---
    s3_bucket: str = ""
    s3_region: str = "us-east-1"
    s3_endpoint: str = ""
    s3_prefix: str = "fertility_signatures"
    aws_access_key_id: str = ""
    aws_secret_access_key: str = field(default="", repr=False)

    # --- Flow renderer ---
    chromium_executable: str = ""
    render_timeout_ms: int = 30000

    # --- Logs ---
    log_file: str = "logs_v2.csv"
    log_level: str = "INFO"

    def __post_init__(self):
        if self.renderer not in RENDERERS:
            raise ConfigError(f"Unknown renderer '{self.renderer}', expected one of {', '.join(RENDERERS)}")

    @property
    def has_smtp(self):
        return bool(self.email_user and self.email_pass)

    @property
    def has_s3(self):
        return bool(self.s3_bucket)

    @classmethod
    def from_secrets(cls, secrets):
        """Build a config from a secrets mapping (``st.secrets`` or a plain dict).

        Keys are the upper-case names used in ``.streamlit/secrets.toml``.
        """
        keys = {
            "renderer": "RENDERER",
            "template_path": "TEMPLATE_PATH",
            "smtp_host": "SMTP_HOST",
            "smtp_port": "SMTP_PORT",
            "email_user": "EMAIL_USER",
            "email_pass": "EMAIL_PASS",
            "s3_bucket": "S3_BUCKET",
            "s3_region": "S3_REGION",
            "s3_endpoint": "S3_ENDPOINT",
            "s3_prefix": "S3_PREFIX",
            "aws_access_key_id": "AWS_ACCESS_KEY_ID",
            "aws_secret_access_key": "AWS_SECRET_ACCESS_KEY",
            "chromium_executable": "CHROMIUM_EXECUTABLE_PATH",
            "render_timeout_ms": "RENDER_TIMEOUT_MS",
            "log_file": "LOG_FILE",
            "log_level": "LOG_LEVEL",
        }
        values = {}
        for attr, key in keys.items():
            if key in secrets and secrets[key] not in (None, ""):
                values[attr] = secrets[key]
        for attr in ("smtp_port", "render_timeout_ms"):
            if attr in values:
                try:
                    values[attr] = int(values[attr])
                except (TypeError, ValueError):
                    raise ConfigError(f"{keys[attr]} must be an integer, got {values[attr]!r}")
        return cls(**values)
