"""Async Paystack REST API wrapper for WeightWise."""

import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from weightwise.billing.errors import BillingConfigurationError, PaymentProviderError
from weightwise.config import settings

logger = logging.getLogger(__name__)


class PaystackClient:
    """Thin client over the Paystack endpoints WeightWise uses.

    The HTTP client is injected so callers control its lifetime and tests can
    swap in an ``httpx.MockTransport``.
    """

    def __init__(self, http_client: httpx.AsyncClient, secret_key: str) -> None:
        self._http = http_client
        self._secret_key = secret_key

    @property
    def is_configured(self) -> bool:
        return bool(self._secret_key)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._secret_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def initialize_transaction(self, payload: dict[str, Any]) -> dict[str, Any]:
        """POST /transaction/initialize and return the response ``data`` object.

        Raises:
            BillingConfigurationError: If no secret key is configured.
            PaymentProviderError: On transport errors, non-2xx responses, or a
                response without an authorization URL.
        """
        if not self.is_configured:
            raise BillingConfigurationError("Paystack secret key is not configured")

        logger.info(
            "Initializing Paystack transaction %s (%s %s)",
            payload.get("reference"),
            payload.get("amount"),
            payload.get("currency"),
        )
        try:
            response = await self._http.post(
                "/transaction/initialize", json=payload, headers=self._headers()
            )
        except httpx.HTTPError as e:
            logger.error("Paystack request failed: %s", e.__class__.__name__)
            raise PaymentProviderError(f"Paystack API error: {e.__class__.__name__}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = body.get("message") or "Failed to initialize Paystack transaction."

        if response.is_error:
            logger.error(
                "Paystack rejected transaction %s: HTTP %s, %s",
                payload.get("reference"),
                response.status_code,
                message,
            )
            raise PaymentProviderError(message, status_code=response.status_code)

        data = body.get("data")
        if not body.get("status") or not isinstance(data, dict) or not data.get("authorization_url"):
            logger.error(
                "Authorization URL missing from Paystack response for %s: %s",
                payload.get("reference"),
                message,
            )
            raise PaymentProviderError(message, status_code=response.status_code)

        logger.info(
            "Paystack authorization URL generated for %s", data.get("reference")
        )
        return data


async def get_paystack_client() -> AsyncIterator[PaystackClient]:
    """Yield a PaystackClient bound to a request-scoped httpx client."""
    async with httpx.AsyncClient(
        base_url=settings.paystack_base_url,
        timeout=settings.paystack_timeout_seconds,
    ) as http_client:
        yield PaystackClient(http_client, settings.paystack_secret_key)
