"""Webhook signature verification.

Dropbox signs every notification with HMAC-SHA256 over the raw request body,
keyed by the app secret, and sends the hex digest in ``X-Dropbox-Signature``.

- The digest is computed over the bytes received on the wire, never over a
  re-serialized JSON payload
- Comparison uses hmac.compare_digest() (constant time)
- A missing secret or signature always fails verification (fail-closed)
"""

from __future__ import annotations

import hashlib
import hmac
import logging

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "x-dropbox-signature"


def compute_signature(body: bytes, secret: str) -> str:
    """Return the hex HMAC-SHA256 digest of ``body`` keyed by ``secret``."""

    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_signature(body: bytes, signature: str | None, secret: str) -> bool:
    """Verify a Dropbox webhook signature.

    Args:
        body: Raw request body bytes
        signature: Value of the X-Dropbox-Signature header
        secret: Dropbox app secret

    Returns:
        True if the signature matches
    """
    if not secret:
        logger.warning("DROPBOX_APP_SECRET not set, rejecting webhook")
        return False
    if not signature:
        return False

    expected = compute_signature(body, secret)
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))
