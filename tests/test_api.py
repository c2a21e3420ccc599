"""HTTP tests for the cart and order workflow."""

from decimal import Decimal
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError

from storefront.api.deps import get_redis_service
from storefront.core.config import settings
from storefront.core.database import get_db
from storefront.core.security import create_access_token
from storefront.main import app
from storefront.services.redis_service import RedisService

SESSION = settings.CART_SESSION_HEADER


@pytest_asyncio.fixture
async def client(session_maker, mock_redis, monkeypatch) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        async with session_maker() as session:
            yield session

    async def override_get_redis_service():
        return RedisService(mock_redis)

    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", False)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis_service] = override_get_redis_service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def bearer(user) -> dict[str, str]:
    token = create_access_token(data={"sub": str(user.user_id), "email": user.email})
    return {"Authorization": f"Bearer {token}"}


async def new_session(client: AsyncClient) -> dict[str, str]:
    response = await client.post("/api/v1/cart/session")
    assert response.status_code == 201
    return {SESSION: response.json()["session_id"]}


class TestCheckoutFlow:

    @pytest.mark.asyncio
    async def test_anonymous_cart_to_tracked_order(self, client, make_product, admin):
        product = await make_product(price=Decimal("20.00"))
        product_id = str(product.product_id)
        variant_id = str(product.variants[0].variant_id)
        session = await new_session(client)

        response = await client.post(
            "/api/v1/cart/lines",
            json={"product_id": product_id, "variant_id": variant_id, "quantity": 2},
            headers=session,
        )
        assert response.status_code == 201
        assert Decimal(response.json()["total"]) == Decimal("40.00")

        response = await client.post(
            "/api/v1/auth/register",
            json={"email": "shopper@loja.com.br", "password": "password123", "name": "Ana"},
        )
        assert response.status_code == 201

        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "shopper@loja.com.br", "password": "password123"},
            headers=session,
        )
        assert response.status_code == 200
        auth = {"Authorization": f"Bearer {response.json()['access_token']}"}

        cart = (await client.get("/api/v1/cart", headers=auth)).json()
        assert Decimal(cart["total"]) == Decimal("40.00")
        assert cart["item_count"] == 2

        response = await client.post("/api/v1/orders", json={"phone": "11977776666"}, headers=auth)
        assert response.status_code == 201
        order = response.json()
        assert order["status"] == "pending"
        assert len(order["lines"]) == 1
        line = order["lines"][0]
        assert (line["payment_status"], line["stock_status"]) == ("pending", "pending")
        assert Decimal(line["unit_price"]) == Decimal("20.00")

        response = await client.patch(
            f"/api/v1/orders/{order['order_id']}/lines/{line['line_id']}/status",
            json={"payment_status": "paid", "stock_status": "arrived"},
            headers=bearer(admin),
        )
        assert response.status_code == 200
        assert (response.json()["payment_status"], response.json()["stock_status"]) == (
            "paid",
            "arrived",
        )

        cart = (await client.get("/api/v1/cart", headers=auth)).json()
        assert cart["lines"] == []

        mine = (await client.get("/api/v1/orders/me", headers=auth)).json()
        assert mine["total"] == 1
        assert mine["orders"][0]["lines"][0]["payment_status"] == "paid"

    @pytest.mark.asyncio
    async def test_customer_cannot_read_other_orders(self, client, customer, admin, make_product):
        product = await make_product()
        customer_auth = bearer(customer)
        await client.post(
            "/api/v1/cart/lines",
            json={
                "product_id": str(product.product_id),
                "variant_id": str(product.variants[0].variant_id),
            },
            headers=customer_auth,
        )
        order = (await client.post("/api/v1/orders", json={}, headers=customer_auth)).json()

        response = await client.get(f"/api/v1/orders/{order['order_id']}", headers=bearer(admin))
        assert response.status_code == 200

        response = await client.get(f"/api/v1/orders/{order['order_id']}", headers=customer_auth)
        assert response.status_code == 200
        assert response.json()["order_id"] == order["order_id"]


class TestErrorCodes:

    @pytest.mark.asyncio
    async def test_cart_requires_an_owner(self, client):
        response = await client.get("/api/v1/cart")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_quantity(self, client, make_product):
        product = await make_product()
        session = await new_session(client)

        response = await client.post(
            "/api/v1/cart/lines",
            json={
                "product_id": str(product.product_id),
                "variant_id": str(product.variants[0].variant_id),
                "quantity": 0,
            },
            headers=session,
        )

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_QUANTITY"

    @pytest.mark.asyncio
    async def test_anonymous_order_is_forbidden(self, client, make_product):
        product = await make_product()
        session = await new_session(client)
        await client.post(
            "/api/v1/cart/lines",
            json={
                "product_id": str(product.product_id),
                "variant_id": str(product.variants[0].variant_id),
            },
            headers=session,
        )

        response = await client.post("/api/v1/orders", json={}, headers=session)

        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_empty_cart(self, client, customer):
        response = await client.post("/api/v1/orders", json={}, headers=bearer(customer))

        assert response.status_code == 409
        assert response.json()["code"] == "EMPTY_CART"

    @pytest.mark.asyncio
    async def test_invalid_status(self, client, customer, admin, make_product):
        product = await make_product()
        customer_auth = bearer(customer)
        await client.post(
            "/api/v1/cart/lines",
            json={
                "product_id": str(product.product_id),
                "variant_id": str(product.variants[0].variant_id),
            },
            headers=customer_auth,
        )
        order = (await client.post("/api/v1/orders", json={}, headers=customer_auth)).json()
        line_id = order["lines"][0]["line_id"]

        response = await client.patch(
            f"/api/v1/orders/{order['order_id']}/lines/{line_id}/status",
            json={"payment_status": "refunded"},
            headers=bearer(admin),
        )

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_STATUS"

    @pytest.mark.asyncio
    async def test_status_update_requires_admin(self, client, customer):
        response = await client.patch(
            "/api/v1/orders/00000000-0000-0000-0000-000000000000/lines/"
            "00000000-0000-0000-0000-000000000000/status",
            json={"payment_status": "paid"},
            headers=bearer(customer),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_malformed_body(self, client):
        session = await new_session(client)

        response = await client.post(
            "/api/v1/cart/lines", json={"product_id": "not-a-uuid"}, headers=session
        )

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_FAILED"

    @pytest.mark.asyncio
    async def test_merge_without_session_header(self, client, customer):
        response = await client.post("/api/v1/cart/merge", headers=bearer(customer))

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_FAILED"


class TestCatalogRoutes:

    @pytest.mark.asyncio
    async def test_recommended_products(self, client, make_campaign, make_product):
        male = await make_campaign(gender="male")
        await make_product(name="Camisa", campaign=male)
        await make_product(name="Vestido")

        response = await client.get("/api/v1/products/recommended/male")

        assert response.status_code == 200
        assert [p["name"] for p in response.json()] == ["Camisa"]

        response = await client.get("/api/v1/products/recommended/kids")
        assert response.json()["code"] == "VALIDATION_FAILED"

    @pytest.mark.asyncio
    async def test_admin_list_reports_units_sold(self, client, customer, admin, make_product):
        product = await make_product()
        customer_auth = bearer(customer)
        await client.post(
            "/api/v1/cart/lines",
            json={
                "product_id": str(product.product_id),
                "variant_id": str(product.variants[0].variant_id),
                "quantity": 4,
            },
            headers=customer_auth,
        )
        await client.post("/api/v1/orders", json={}, headers=customer_auth)

        response = await client.get("/api/v1/products/admin", headers=bearer(admin))

        assert response.status_code == 200
        assert [p["units_sold"] for p in response.json()["products"]] == [4]

        response = await client.get(
            "/api/v1/orders/admin",
            params={"campaign_id": str(product.campaign_id)},
            headers=bearer(admin),
        )
        assert response.json()["total"] == 1


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_requests_pass_when_redis_is_down(self, client, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(
            "storefront.middleware.rate_limit.get_redis",
            AsyncMock(side_effect=RedisConnectionError("connection refused")),
        )

        response = await client.post("/api/v1/cart/session")

        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_limited_client_gets_429(self, client, monkeypatch):
        redis = MagicMock()
        redis.register_script = MagicMock(return_value=AsyncMock(return_value=[0, 3]))
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(
            "storefront.middleware.rate_limit.get_redis", AsyncMock(return_value=redis)
        )

        response = await client.post("/api/v1/cart/session")

        assert response.status_code == 429
        assert response.json()["code"] == "RATE_LIMITED"
        assert response.headers["Retry-After"] == "3"
