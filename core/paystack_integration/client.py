"""
Paystack REST Client
====================

Thin wrapper over the two Paystack endpoints the portal uses:

- POST /transaction/initialize
- GET  /transaction/verify/<reference>

Every call is authenticated with ``Authorization: Bearer <PAYSTACK_SECRET_KEY>``
and bounded by ``PAYSTACK_TIMEOUT``. Transport failures, non-2xx answers,
undecodable bodies and ``{"status": false}`` envelopes all raise
``GatewayError`` with the Paystack message where one is available.

Example:
    >>> client = PaystackClient()
    >>> data = client.initialize_transaction(
    ...     email="kwame@example.com", amount=50000, reference="UMaT_...",
    ...     currency="NGN", metadata={"payment_id": 1},
    ... )
    >>> data["access_code"]

Author: Student Portal Development Team
Version: 1.0.0
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests
from django.conf import settings

from core.exceptions import GatewayError

logger = logging.getLogger(__name__)


class PaystackClient:
    """
    Paystack API client.

    Attributes:
        base_url (str): API root, ``https://api.paystack.co`` by default
        secret_key (str): Secret key used for bearer authentication
        timeout (int): Request timeout in seconds
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.secret_key = secret_key if secret_key is not None else settings.PAYSTACK_SECRET_KEY
        self.base_url = (base_url or settings.PAYSTACK_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.PAYSTACK_TIMEOUT
        self.session = session or requests.Session()

    # --- public API ---

    def initialize_transaction(
        self,
        *,
        email: str,
        amount: int,
        reference: str,
        currency: str,
        metadata: Dict[str, Any],
        callback_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Start a transaction.

        Returns:
            The ``data`` object of the Paystack answer
            (``authorization_url``, ``access_code``, ``reference``).
        """
        payload = {
            "email": email,
            "amount": amount,
            "reference": reference,
            "currency": currency,
            "metadata": metadata,
        }
        callback_url = callback_url or settings.PAYSTACK_CALLBACK_URL
        if callback_url:
            payload["callback_url"] = callback_url
        return self._request("POST", "/transaction/initialize", json=payload)

    def verify_transaction(self, reference: str) -> Dict[str, Any]:
        """
        Fetch the authoritative state of a transaction.

        Returns:
            The ``data`` object of the Paystack answer (``status``,
            ``gateway_response``, ``channel``, ``ip_address``, ``paid_at``, ...).
        """
        return self._request("GET", f"/transaction/verify/{quote(reference, safe='')}")

    # --- helpers ---

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.debug("Paystack request: %s %s", method, path)

        try:
            response = self.session.request(
                method, url, headers=self._headers(), timeout=self.timeout, **kwargs
            )
        except requests.exceptions.Timeout:
            raise GatewayError(
                f"Paystack request timed out after {self.timeout}s",
                details={"path": path},
            ) from None
        except requests.exceptions.RequestException as e:
            raise GatewayError(
                f"Paystack request failed: {e}", details={"path": path}
            ) from e

        try:
            body = response.json()
        except ValueError:
            raise GatewayError(
                "Invalid JSON in Paystack response",
                gateway_status=response.status_code,
                details={"path": path},
            ) from None

        if not response.ok or not body.get("status"):
            message = body.get("message") or "Paystack request was not successful"
            logger.error(
                "Paystack %s %s answered %s: %s", method, path, response.status_code, message
            )
            raise GatewayError(
                message, gateway_status=response.status_code, details={"path": path}
            )

        return body.get("data") or {}
