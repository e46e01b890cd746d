"""Error types raised while generating and delivering an agreement."""


class AgreementError(Exception):
    """Base class for every error raised by the agreement generator."""


class ValidationError(AgreementError):
    """Required answers are missing or malformed."""

    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(f"Missing or invalid required fields: {', '.join(self.missing)}")


class SchemaError(AgreementError):
    """A layout schema or template pairing is inconsistent."""


class ConfigError(AgreementError):
    pass


class AssetError(AgreementError):
    """An image could not be uploaded, downloaded or decoded."""


class RenderError(AgreementError):
    """The rendering engine failed for good."""

    def __init__(self, message, cause=None):
        self.cause = cause
        super().__init__(message if cause is None else f"{message}: {cause}")


class DeliveryError(AgreementError):
    pass


class GenerationFailure(AgreementError):
    """Structured failure handed back to the intake surface.

    ``status`` is one of ``validation``, ``rendering`` or ``delivery``.
    """

    HTTP_STATUS = {"validation": 400, "rendering": 500, "delivery": 502}

    def __init__(self, status, message, cause=None):
        self.status = status
        self.message = message
        self.cause = cause
        super().__init__(message)

    @property
    def http_status(self):
        return self.HTTP_STATUS.get(self.status, 500)

    def to_dict(self):
        payload = {"error": self.message, "status": self.status}
        if self.cause is not None:
            payload["details"] = str(self.cause)
        return payload
