"""Paystack webhook signature verification (HMAC-SHA512 over the raw body)."""

import hashlib
import hmac

from weightwise.billing.errors import WebhookConfigurationError

SIGNATURE_HEADER = "x-paystack-signature"


def compute_signature(payload: bytes, secret: str) -> str:
    """Hex HMAC-SHA512 digest of ``payload`` keyed with ``secret``."""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha512).hexdigest()


def verify_signature(payload: bytes, signature: str | None, secret: str) -> bool:
    """Check a webhook body against the ``x-paystack-signature`` header value.

    ``payload`` must be the exact bytes received on the wire. Re-encoding a
    parsed body changes key order and number formatting, so the digest would
    no longer match what Paystack signed.

    Raises:
        WebhookConfigurationError: If ``secret`` is empty.
    """
    if not secret:
        raise WebhookConfigurationError("Paystack webhook secret is not configured")
    if not signature:
        return False
    expected = compute_signature(payload, secret)
    received = signature.strip().lower().encode("utf-8")
    return hmac.compare_digest(expected.encode("ascii"), received)
