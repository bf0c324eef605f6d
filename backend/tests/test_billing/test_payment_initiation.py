"""Tests for Paystack payment initiation — service function and API endpoint."""

import math
import re

import httpx
import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.helpers import auth_headers_for, create_user
from weightwise.billing.errors import (
    BillingConfigurationError,
    InvalidPaymentRequestError,
    PaymentProviderError,
)
from weightwise.config import settings
from weightwise.models.user import User
from weightwise.services.payment_service import (
    build_metadata,
    build_reference,
    initiate_payment,
)

INITIALIZE_URL = "/api/v1/billing/initialize"

pytestmark = pytest.mark.asyncio


class TestBuildReference:
    def test_format(self):
        assert build_reference("monthly", "u1", 1760000000123) == "PRO_MONTHLY_u1_1760000000123"

    def test_uses_current_time(self):
        assert re.fullmatch(r"PRO_YEARLY_u1_\d{13}", build_reference("yearly", "u1"))


class TestBuildMetadata:
    def test_direct_and_custom_fields(self):
        metadata = build_metadata("u1", "yearly")
        assert metadata["userId"] == "u1"
        assert metadata["plan"] == "premium"
        assert metadata["billingCycle"] == "yearly"
        by_name = {f["variable_name"]: f["value"] for f in metadata["custom_fields"]}
        assert by_name == {"user_id": "u1", "plan": "premium", "billing_cycle": "yearly"}
        assert all("display_name" in f for f in metadata["custom_fields"])


class TestInitiatePayment:
    async def test_request_sent_to_paystack(self, db_session: AsyncSession, paystack, make_paystack_client):
        user = await create_user(db_session)

        result = await initiate_payment(
            user, amount=390, currency="KES", billing_cycle="monthly", client=make_paystack_client()
        )

        sent = paystack.last_json
        request = paystack.requests[-1]
        assert request.url.path == "/transaction/initialize"
        assert request.headers["Authorization"] == "Bearer sk_test_weightwise"
        assert sent["amount"] == 39000
        assert sent["currency"] == "KES"
        assert sent["email"] == user.email
        assert re.fullmatch(rf"PRO_MONTHLY_{user.id}_\d+", sent["reference"])
        assert sent["metadata"]["userId"] == str(user.id)
        assert sent["metadata"]["billingCycle"] == "monthly"
        assert result.reference == sent["reference"]
        assert result.authorization_url.endswith(sent["reference"])
        assert result.access_code == "ac_test_123"

    async def test_yearly_amount_conversion(self, db_session: AsyncSession, paystack, make_paystack_client):
        user = await create_user(db_session)
        await initiate_payment(user, 3900.5, "KES", "yearly", client=make_paystack_client())
        assert paystack.last_json["amount"] == 390050
        assert paystack.last_json["reference"].startswith("PRO_YEARLY_")

    @pytest.mark.parametrize("amount", [0, -1, math.inf, math.nan, True, "390", None])
    async def test_rejects_bad_amount(self, db_session: AsyncSession, paystack, make_paystack_client, amount):
        user = await create_user(db_session)
        with pytest.raises(InvalidPaymentRequestError):
            await initiate_payment(user, amount, "KES", "monthly", client=make_paystack_client())
        assert paystack.requests == []

    @pytest.mark.parametrize("currency", ["USD", "kes", "", None])
    async def test_rejects_other_currency(self, db_session: AsyncSession, paystack, make_paystack_client, currency):
        user = await create_user(db_session)
        with pytest.raises(InvalidPaymentRequestError):
            await initiate_payment(user, 390, currency, "monthly", client=make_paystack_client())
        assert paystack.requests == []

    @pytest.mark.parametrize("cycle", ["weekly", "Monthly", "", None])
    async def test_rejects_bad_cycle(self, db_session: AsyncSession, make_paystack_client, cycle):
        user = await create_user(db_session)
        with pytest.raises(InvalidPaymentRequestError):
            await initiate_payment(user, 390, "KES", cycle, client=make_paystack_client())

    async def test_rejects_user_without_email(self, make_paystack_client):
        user = User(email="", name="No Email")
        with pytest.raises(InvalidPaymentRequestError, match="email"):
            await initiate_payment(user, 390, "KES", "monthly", client=make_paystack_client())

    async def test_missing_secret_key(self, db_session: AsyncSession, paystack, make_paystack_client):
        user = await create_user(db_session)
        with pytest.raises(BillingConfigurationError):
            await initiate_payment(user, 390, "KES", "monthly", client=make_paystack_client(secret_key=""))
        assert paystack.requests == []

    async def test_provider_rejection(self, db_session: AsyncSession, paystack, make_paystack_client):
        user = await create_user(db_session)
        paystack.reply(400, {"status": False, "message": "Invalid Amount Sent"})
        with pytest.raises(PaymentProviderError, match="Invalid Amount Sent"):
            await initiate_payment(user, 390, "KES", "monthly", client=make_paystack_client())

    async def test_provider_false_status_with_200(self, db_session: AsyncSession, paystack, make_paystack_client):
        user = await create_user(db_session)
        paystack.reply(200, {"status": False, "message": "Duplicate Transaction Reference"})
        with pytest.raises(PaymentProviderError, match="Duplicate Transaction Reference"):
            await initiate_payment(user, 390, "KES", "monthly", client=make_paystack_client())

    async def test_network_failure(self, db_session: AsyncSession, paystack, make_paystack_client):
        user = await create_user(db_session)
        paystack.raise_error = httpx.ConnectError("connection refused")
        with pytest.raises(PaymentProviderError) as excinfo:
            await initiate_payment(user, 390, "KES", "monthly", client=make_paystack_client())
        assert "sk_test_weightwise" not in excinfo.value.message

    async def test_callback_url_forwarded(self, db_session: AsyncSession, paystack, make_paystack_client):
        user = await create_user(db_session)
        config = settings.model_copy(update={"paystack_callback_url": "https://app.test/dashboard"})
        await initiate_payment(user, 390, "KES", "monthly", client=make_paystack_client(), config=config)
        assert paystack.last_json["callback_url"] == "https://app.test/dashboard"


class TestInitializeEndpoint:
    async def test_success(self, client: AsyncClient, db_session: AsyncSession, paystack):
        user = await create_user(db_session)

        response = await client.post(
            INITIALIZE_URL,
            json={"amount": 390, "currency": "KES", "billingCycle": "monthly"},
            headers=auth_headers_for(user),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["authorization_url"].startswith("https://checkout.paystack.com/")
        assert data["access_code"] == "ac_test_123"
        assert re.fullmatch(rf"PRO_MONTHLY_{user.id}_\d+", data["reference"])
        assert paystack.last_json["amount"] == 39000

    async def test_snake_case_billing_cycle_accepted(self, client: AsyncClient, auth_headers, paystack):
        response = await client.post(
            INITIALIZE_URL,
            json={"amount": 3900, "currency": "KES", "billing_cycle": "yearly"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert paystack.last_json["amount"] == 390000

    async def test_unauthenticated(self, client: AsyncClient, paystack):
        response = await client.post(
            INITIALIZE_URL, json={"amount": 390, "currency": "KES", "billingCycle": "monthly"}
        )
        assert response.status_code == 401
        assert paystack.requests == []

    @pytest.mark.parametrize(
        "body",
        [
            {"amount": -5, "currency": "KES", "billingCycle": "monthly"},
            {"amount": True, "currency": "KES", "billingCycle": "monthly"},
            {"amount": "390", "currency": "KES", "billingCycle": "monthly"},
            {"currency": "KES", "billingCycle": "monthly"},
            {"amount": 390, "currency": "USD", "billingCycle": "monthly"},
            {"amount": 390, "currency": "KES", "billingCycle": "weekly"},
        ],
    )
    async def test_invalid_argument(self, client: AsyncClient, auth_headers, paystack, body):
        response = await client.post(INITIALIZE_URL, json=body, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "invalid-argument"
        assert paystack.requests == []

    async def test_missing_secret_key(self, client: AsyncClient, auth_headers, monkeypatch):
        monkeypatch.setattr(settings, "paystack_secret_key", "")
        response = await client.post(
            INITIALIZE_URL,
            json={"amount": 390, "currency": "KES", "billingCycle": "monthly"},
            headers=auth_headers,
        )
        assert response.status_code == 500
        assert response.json()["detail"]["code"] == "internal"

    async def test_provider_error(self, client: AsyncClient, auth_headers, paystack):
        paystack.reply(401, {"status": False, "message": "Invalid key"})
        response = await client.post(
            INITIALIZE_URL,
            json={"amount": 390, "currency": "KES", "billingCycle": "monthly"},
            headers=auth_headers,
        )
        assert response.status_code == 502
        detail = response.json()["detail"]
        assert detail == {"code": "internal", "message": "Invalid key"}
