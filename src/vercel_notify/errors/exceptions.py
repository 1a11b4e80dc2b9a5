"""Exception classes surfaced by the webhook relay."""


class RelayError(Exception):
    """Base exception for the relay; carries the HTTP status it maps to."""

    def __init__(self, code: str, message: str, status_code: int = 500, headers: dict[str, str] | None = None):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.headers = headers
        super().__init__(message)


class ConfigurationError(RelayError):
    """A required setting is missing. The message names the setting, never its value."""

    def __init__(self, message: str):
        super().__init__("CONFIGURATION_ERROR", message, status_code=500)


class AuthenticationError(RelayError):
    """Missing or invalid webhook signature.

    The message is identical for every cause so callers cannot tell which
    check failed.
    """

    def __init__(self, message: str = "Invalid or missing signature"):
        super().__init__("AUTHENTICATION_ERROR", message, status_code=401)


class MalformedPayloadError(RelayError):
    """The verified body is not a usable webhook event."""

    def __init__(self, message: str = "Malformed JSON payload"):
        super().__init__("MALFORMED_PAYLOAD", message, status_code=400)


class BodyReadError(RelayError):
    def __init__(self, message: str = "Failed to read request body"):
        super().__init__("BODY_READ_ERROR", message, status_code=500)


class DeliveryError(RelayError):
    """The messaging API did not accept the notification."""

    def __init__(self, message: str = "Failed to send Telegram notification"):
        super().__init__("DELIVERY_FAILED", message, status_code=500)


class MethodNotAllowedError(RelayError):
    def __init__(self, allowed: str = "POST"):
        super().__init__(
            "METHOD_NOT_ALLOWED",
            "Method Not Allowed",
            status_code=405,
            headers={"Allow": allowed},
        )
