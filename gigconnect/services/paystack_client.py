"""
Paystack API Client

Thin wrapper over the two transaction endpoints the relay needs:
- POST /transaction/initialize
- GET  /transaction/verify/{reference}

Amounts cross the API in minor units (kobo/cents). This client converts
to and from major units so callers never see minor units.
"""

import logging
from typing import Any, Dict, Optional

import requests

from gigconnect.core.config import get_settings
from gigconnect.utils.helpers import to_cents

logger = logging.getLogger(__name__)


class PaystackError(Exception):
    """Gateway call failed; message is the gateway's own when it sent one."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class PaystackClient:
    """
    Usage:
        client = get_paystack_client()
        session = client.initialize_transaction(25.0, "payer@example.com")
        result = client.verify_transaction(session["reference"])
    """

    def __init__(self, secret_key: Optional[str] = None, base_url: Optional[str] = None,
                 timeout: Optional[int] = None, session: Optional[requests.Session] = None):
        settings = get_settings()
        self.secret_key = secret_key if secret_key is not None else settings.paystack_secret_key
        self.base_url = (base_url or settings.paystack_base_url).rstrip("/")
        self.timeout = timeout or settings.paystack_timeout_seconds
        self.session = session or requests.Session()

    def is_configured(self) -> bool:
        return bool(self.secret_key)

    def _make_request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Call the API and return its `data` object."""
        if not self.is_configured():
            raise PaystackError("PAYSTACK_SECRET_KEY is not configured.")

        url = f"{self.base_url}/{path.lstrip('/')}"
        headers = {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }
        try:
            response = self.session.request(method, url, json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except requests.exceptions.HTTPError as e:
            raise PaystackError(self._error_message(e.response, str(e)), e.response.status_code) from e
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning("Paystack %s %s failed: %s", method, path, e)
            raise PaystackError(str(e)) from e

        return body.get("data") or {}

    @staticmethod
    def _error_message(response: Optional[requests.Response], default: str) -> str:
        if response is None:
            return default
        try:
            return response.json().get("message") or default
        except ValueError:
            return response.text or default

    def initialize_transaction(self, amount: float, email: str,
                               metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Start a checkout. Returns {authorization_url, reference}."""
        data = self._make_request("POST", "/transaction/initialize", {
            "amount": to_cents(amount),
            "email": email,
            "metadata": metadata,
        })
        return {
            "authorization_url": data.get("authorization_url"),
            "reference": data.get("reference"),
        }

    def verify_transaction(self, reference: str) -> Dict[str, Any]:
        """Look up a transaction. Returns {status, reference, amount, paid_at}."""
        data = self._make_request("GET", f"/transaction/verify/{reference}")
        return {
            "status": data.get("status"),
            "reference": data.get("reference"),
            "amount": (data.get("amount") or 0) / 100,
            "paid_at": data.get("paid_at"),
        }


# Singleton instance
_paystack_client: PaystackClient = None


def get_paystack_client() -> PaystackClient:
    """Get or create Paystack client (singleton pattern)"""
    global _paystack_client
    if _paystack_client is None:
        _paystack_client = PaystackClient()
    return _paystack_client
