"""
Paystack webhook signature check.

Paystack signs the raw request body with HMAC-SHA512 keyed by the secret key
and sends the hex digest in the ``x-paystack-signature`` header. The digest
must be computed over the exact bytes received, never over re-serialized JSON.
"""

import hashlib
import hmac
from typing import Union


def compute_signature(raw_body: bytes, secret: Union[str, bytes]) -> str:
    key = secret.encode("utf-8") if isinstance(secret, str) else secret
    return hmac.new(key, raw_body, hashlib.sha512).hexdigest()


def verify_signature(raw_body: bytes, secret: Union[str, bytes], provided: str) -> bool:
    """
    Constant-time comparison of ``provided`` with the expected digest.

    Returns False when either the secret or the provided signature is empty.
    """
    if not secret or not provided:
        return False
    expected = compute_signature(raw_body, secret)
    return hmac.compare_digest(expected, provided.strip().lower())
