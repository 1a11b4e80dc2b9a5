"""HMAC verification of inbound webhook bodies.

Vercel signs the raw request body with HMAC-SHA1 keyed by the integration
secret and sends the lowercase hex digest in ``x-vercel-signature``.
See: https://vercel.com/docs/observability/webhooks-overview/webhooks-api#securing-webhooks

Whether the header carries the bare digest or an ``sha1=`` prefixed value is
a deployment setting (``vercel_signature_scheme``). The scheme only shapes the
expected value; the received header is compared exactly as sent.
"""

import hashlib
import hmac
import logging
from typing import Literal

from vercel_notify.errors.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

SignatureScheme = Literal["bare", "prefixed"]
SignatureAlgorithm = Literal["sha1", "sha256"]

_ALGORITHMS = {
    "sha1": hashlib.sha1,
    "sha256": hashlib.sha256,
}


def compute_digest(body: bytes, secret: str, algorithm: SignatureAlgorithm = "sha1") -> str:
    """Compute the lowercase hex HMAC of ``body`` keyed by ``secret``."""
    return hmac.new(secret.encode("utf-8"), body, _ALGORITHMS[algorithm]).hexdigest()


def expected_signature(
    body: bytes,
    secret: str,
    scheme: SignatureScheme = "bare",
    algorithm: SignatureAlgorithm = "sha1",
) -> str:
    """Return the header value a legitimate sender would attach to ``body``."""
    digest = compute_digest(body, secret, algorithm)
    if scheme == "prefixed":
        return f"{algorithm}={digest}"
    return digest


def verify_signature(
    body: bytes,
    received: str | None,
    secret: str | None,
    *,
    scheme: SignatureScheme = "bare",
    algorithm: SignatureAlgorithm = "sha1",
) -> bool:
    """Return True when ``received`` is the signature of the exact ``body`` bytes.

    Raises:
        ConfigurationError: if no secret is configured. A missing secret is
            never treated as "skip verification".
    """
    if not secret:
        raise ConfigurationError("Webhook signing secret is not configured")

    if not received:
        return False

    try:
        expected = expected_signature(body, secret, scheme, algorithm).encode("ascii")
        candidate = received.encode("utf-8")

        # compare_digest needs equal-length inputs to stay constant-time
        if len(candidate) != len(expected):
            return False

        return hmac.compare_digest(expected, candidate)
    except Exception as exc:
        logger.warning("Signature verification failed with %s", type(exc).__name__)
        return False
