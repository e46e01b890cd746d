"""Signature and ID images: hosting before render, and local copies during render."""
import base64
import binascii
import dataclasses
import hashlib
import io
import logging
import os
import re
import tempfile
from contextlib import contextmanager

import boto3
import requests
from PIL import Image

from errors import AssetError

logger = logging.getLogger(__name__)

_DATA_URL = re.compile(r"^data:(?P<mime>[\w/+.-]+)?(?:;[\w=-]+)*?;base64,(?P<data>.*)$", re.DOTALL)

# Answer fields holding images, with the label used in hosted object names
IMAGE_ANSWERS = {
    "client_signature": "signature",
    "partner_signature": "partner_signature",
    "guardian_signature": "guardian_signature",
    "id_document": "id",
}


def is_hosted(ref):
    return isinstance(ref, str) and ref.lower().startswith(("http://", "https://"))


def decode_image(ref) -> bytes:
    """Raw bytes for an inline image (``bytes`` or a base64 ``data:`` URL)."""
    if isinstance(ref, (bytes, bytearray)):
        return bytes(ref)
    if isinstance(ref, str):
        match = _DATA_URL.match(ref.strip())
        if match:
            try:
                return base64.b64decode(match.group("data"), validate=False)
            except (binascii.Error, ValueError) as e:
                raise AssetError(f"Invalid base64 image payload: {e}")
    raise AssetError("Image is neither a hosted URL nor an inline payload")


def image_src(ref):
    """An inline ``<img src>`` for ``ref``, or ``None``.

    Hosted URLs are never passed through; they have to be fetched and checked
    with :func:`inline_image` first.
    """
    if not ref or is_hosted(ref):
        return None
    if isinstance(ref, str) and ref.startswith("data:"):
        return ref
    if isinstance(ref, (bytes, bytearray)):
        return "data:image/png;base64," + base64.b64encode(bytes(ref)).decode("ascii")
    return None


def _safe_name(text):
    return re.sub(r"[^A-Za-z0-9_-]+", "_", text or "").strip("_") or "client"


class AssetResolver:
    """Turns a raw image into a durable URL."""

    def upload(self, data: bytes, name: str) -> str:
        raise NotImplementedError


class S3AssetResolver(AssetResolver):
    """Hosts images in S3. The boto3 client is built on the first upload, so a
    bad S3 configuration fails that upload rather than the caller."""

    def __init__(self, config, client=None):
        self.bucket = config.s3_bucket
        self.region = config.s3_region
        self.endpoint = config.s3_endpoint.rstrip("/")
        self.prefix = config.s3_prefix.strip("/")
        self.config = config
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client(
                "s3",
                region_name=self.config.s3_region,
                endpoint_url=self.config.s3_endpoint or None,
                aws_access_key_id=self.config.aws_access_key_id or None,
                aws_secret_access_key=self.config.aws_secret_access_key or None,
            )
        return self._client

    def upload(self, data, name):
        key = f"{self.prefix}/{name}.png" if self.prefix else f"{name}.png"
        self.client.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType="image/png")
        if self.endpoint:
            return f"{self.endpoint}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"


def resolve_assets(answers, resolver):
    """Host every inline image on ``answers`` and return the updated copy.

    Hosted URLs are kept as they are. A failed upload is logged and the image
    is dropped from the copy; generation carries on without it.
    """
    if resolver is None:
        return answers

    changes = {}
    for attr, label in IMAGE_ANSWERS.items():
        ref = getattr(answers, attr)
        if not ref or is_hosted(ref):
            continue
        try:
            data = decode_image(ref)
            digest = hashlib.sha1(data).hexdigest()[:12]
            changes[attr] = resolver.upload(data, f"{_safe_name(answers.client_name)}_{label}_{digest}")
            logger.info("Hosted %s for %s", label, answers.client_name)
        except Exception as e:
            logger.error("Upload of %s for %s failed, leaving it out: %s", label, answers.client_name, e)
            changes[attr] = None
    return dataclasses.replace(answers, **changes) if changes else answers


@contextmanager
def fetched_image(ref, timeout=15):
    """Yield a local temp file holding the image behind ``ref``.

    The file is removed when the block exits, whether embedding worked or not.
    Download, decode and verification problems raise :class:`AssetError`.
    """
    if is_hosted(ref):
        try:
            response = requests.get(ref, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise AssetError(f"Could not download {ref}: {e}")
        data = response.content
    else:
        data = decode_image(ref)

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
            suffix = "." + (img.format or "png").lower()
    except Exception as e:
        raise AssetError(f"Unreadable image: {e}")

    fd, path = tempfile.mkstemp(prefix="agreement_asset_", suffix=suffix)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        yield path
    finally:
        try:
            os.remove(path)
        except OSError as e:
            logger.warning("Could not remove temporary image %s: %s", path, e)


def inline_image(ref, timeout=15):
    """Fetch and verify ``ref``, returning it as a ``data:`` URL.

    Raises :class:`AssetError` like :func:`fetched_image`.
    """
    with fetched_image(ref, timeout=timeout) as path:
        try:
            with Image.open(path) as img:
                mime = Image.MIME.get(img.format, "image/png")
        except OSError as e:
            raise AssetError(f"Unreadable image: {e}")
        with open(path, "rb") as f:
            data = f.read()
    return f"data:{mime};base64," + base64.b64encode(data).decode("ascii")
