"""Tests for campaigns, products and the catalog read API."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest

from storefront.core.exceptions import NotFoundError, ValidationFailedError
from storefront.models.base import utcnow
from storefront.models.campaign import CampaignStatus, Gender
from storefront.schemas.brand import BrandCreate
from storefront.schemas.campaign import CampaignCreate
from storefront.schemas.product import ProductCreate, ProductUpdate, VariantCreate
from storefront.services.brand_service import BrandService
from storefront.services.campaign_service import (
    CampaignService,
    campaign_display_status,
    is_campaign_active,
)
from storefront.services.cart_service import CartService
from storefront.services.order_service import OrderService
from storefront.services.product_service import ProductService


def fake_campaign(start, end, status="active"):
    return SimpleNamespace(start_time=start, end_time=end, status=status)


class TestCampaignWindow:
    """Test campaign activity and display status."""

    def test_active_bounds_are_inclusive(self):
        now = datetime(2026, 3, 1, 12, 0)
        campaign = fake_campaign(now, now + timedelta(hours=1))

        assert is_campaign_active(campaign, now)
        assert is_campaign_active(campaign, now + timedelta(hours=1))
        assert not is_campaign_active(campaign, now + timedelta(hours=1, seconds=1))
        assert not is_campaign_active(campaign, now - timedelta(seconds=1))

    def test_aware_now_is_compared_in_utc(self):
        start = datetime(2026, 3, 1, 12, 0)
        campaign = fake_campaign(start, start + timedelta(hours=1))
        # 09:30 at UTC-3 is 12:30 UTC
        now = datetime(2026, 3, 1, 9, 30, tzinfo=timezone(timedelta(hours=-3)))

        assert is_campaign_active(campaign, now)

    def test_paused_campaign_is_not_active(self):
        now = datetime(2026, 3, 1, 12, 0)
        campaign = fake_campaign(now - timedelta(hours=1), now + timedelta(hours=1), "paused")

        assert not is_campaign_active(campaign, now)
        assert not is_campaign_active(None, now)

    @pytest.mark.parametrize(
        "offset,status,expected",
        [
            (timedelta(hours=-2), "active", "pending"),
            (timedelta(0), "active", "active"),
            (timedelta(hours=2), "active", "ended"),
            (timedelta(0), "paused", "paused"),
            (timedelta(0), "finished", "finished"),
        ],
    )
    def test_display_status(self, offset, status, expected):
        now = datetime(2026, 3, 1, 12, 0)
        campaign = fake_campaign(now - timedelta(hours=1), now + timedelta(hours=1), status)

        assert campaign_display_status(campaign, now + offset) == expected


class TestCampaignService:
    """Test campaign creation and naming."""

    def campaign_data(self, name="Verão", **overrides) -> CampaignCreate:
        now = utcnow()
        fields = {
            "name": name,
            "gender": Gender.FEMALE,
            "start_time": now - timedelta(hours=1),
            "end_time": now + timedelta(days=1),
            "status": CampaignStatus.ACTIVE,
        }
        fields.update(overrides)
        return CampaignCreate(**fields)

    @pytest.mark.asyncio
    async def test_duplicate_names_get_suffix(self, db_session):
        service = CampaignService(db_session)

        first = await service.create(self.campaign_data())
        second = await service.create(self.campaign_data())
        third = await service.create(self.campaign_data())

        assert [first.name, second.name, third.name] == ["Verão", "Verão - 1", "Verão - 2"]

    @pytest.mark.asyncio
    async def test_update_keeps_own_name(self, db_session):
        service = CampaignService(db_session)
        campaign = await service.create(self.campaign_data())

        updated = await service.update(
            campaign.campaign_id, self.campaign_data(status=CampaignStatus.PAUSED)
        )

        assert updated.name == "Verão"
        assert updated.status == "paused"

    def test_end_before_start_is_rejected(self):
        now = utcnow()
        with pytest.raises(ValueError):
            CampaignCreate(name="x", start_time=now, end_time=now - timedelta(seconds=1))

    @pytest.mark.asyncio
    async def test_unknown_brand(self, db_session):
        with pytest.raises(ValidationFailedError):
            await CampaignService(db_session).create(self.campaign_data(brand_id=uuid4()))

    @pytest.mark.asyncio
    async def test_active_listing(self, db_session, make_campaign):
        running = await make_campaign()
        await make_campaign(starts_in=timedelta(days=2))
        await make_campaign(status="paused")

        active = await CampaignService(db_session).get_active()

        assert [c.campaign_id for c in active] == [running.campaign_id]

    @pytest.mark.asyncio
    async def test_products_of_unknown_campaign(self, db_session):
        with pytest.raises(NotFoundError):
            await CampaignService(db_session).get_products(uuid4())


class TestBrandService:
    @pytest.mark.asyncio
    async def test_brand_names_are_unique(self, db_session):
        service = BrandService(db_session)
        await service.create(BrandCreate(name="Atelier"))

        with pytest.raises(ValidationFailedError):
            await service.create(BrandCreate(name="Atelier"))

        assert [b.name for b in await service.get_all()] == ["Atelier"]


class TestProductService:
    """Test product CRUD and visibility."""

    @pytest.mark.asyncio
    async def test_create_product_with_variants(self, db_session, make_campaign):
        campaign = await make_campaign()

        product = await ProductService(db_session).create(
            ProductCreate(
                name="Saia Plissada",
                price=Decimal("99.90"),
                campaign_id=campaign.campaign_id,
                variants=[
                    VariantCreate(size="P", color="Preto", price=Decimal("99.90")),
                    VariantCreate(size="M", color="Vinho", price=Decimal("109.90")),
                ],
            )
        )

        assert len(product.variants) == 2
        assert sorted(product.colors) == ["Preto", "Vinho"]
        assert product.brand_id == campaign.brand_id

    @pytest.mark.asyncio
    async def test_storefront_only_lists_visible_products(
        self, db_session, make_campaign, make_product
    ):
        visible = await make_product(name="Visible")
        upcoming = await make_campaign(starts_in=timedelta(days=3))
        hidden = await make_product(name="Hidden", campaign=upcoming)
        service = ProductService(db_session)

        products, total = await service.get_all()
        assert total == 1
        assert [p.product_id for p in products] == [visible.product_id]

        _, all_total = await service.get_all(visible_only=False)
        assert all_total == 2

        assert await service.get_by_id(hidden.product_id, visible_only=True) is None
        assert await service.get_by_id(hidden.product_id) is not None

    @pytest.mark.asyncio
    async def test_update_fields(self, db_session, make_product):
        product = await make_product()

        updated = await ProductService(db_session).update(
            product.product_id, ProductUpdate(name="Vestido Longo", price=Decimal("250.00"))
        )

        assert updated.name == "Vestido Longo"
        assert updated.price == Decimal("250.00")

    @pytest.mark.asyncio
    async def test_update_rejects_foreign_variant(self, db_session, make_product):
        product = await make_product()

        with pytest.raises(ValidationFailedError):
            await ProductService(db_session).update(
                product.product_id, ProductUpdate(variant_prices={uuid4(): Decimal("1.00")})
            )

    @pytest.mark.asyncio
    async def test_delete_product_removes_cart_lines(
        self, db_session, make_product, anonymous_owner
    ):
        product = await make_product()
        product_id = product.product_id
        await CartService(db_session).add_line(
            anonymous_owner, product_id, product.variants[0].variant_id
        )

        await ProductService(db_session).delete(product_id)

        assert await ProductService(db_session).get_by_id(product_id) is None
        assert (await CartService(db_session).get_cart(anonymous_owner)).lines == []

    @pytest.mark.asyncio
    async def test_ordered_product_cannot_be_deleted(
        self, db_session, make_product, customer_owner
    ):
        product = await make_product()
        await CartService(db_session).add_line(
            customer_owner, product.product_id, product.variants[0].variant_id
        )
        await OrderService(db_session).create_order(customer_owner)

        with pytest.raises(ValidationFailedError):
            await ProductService(db_session).delete(product.product_id)

    @pytest.mark.asyncio
    async def test_variant_info(self, db_session, make_campaign, make_product):
        campaign = await make_campaign()
        product = await make_product(
            price=Decimal("42.00"), colors=("Azul", "Rosa"), campaign=campaign
        )
        variant = product.variants[0]
        service = ProductService(db_session)

        info = await service.get_variant_info(variant.variant_id)

        assert info.product_id == product.product_id
        assert info.unit_price == Decimal("42.00")
        assert set(info.available_colors) == {"Azul", "Rosa"}
        assert info.campaign_end == campaign.end_time
        assert info.visible is True
        assert await service.get_variant_info(uuid4()) is None
        assert await service.is_product_visible(product.product_id) is True
        assert await service.is_product_visible(uuid4()) is False

    @pytest.mark.asyncio
    async def test_variant_infos_skip_missing_variants(self, db_session, make_product):
        product = await make_product(sizes=("P", "M"))
        variant_ids = [v.variant_id for v in product.variants]

        infos = await ProductService(db_session).get_variant_infos(variant_ids + [uuid4()])

        assert set(infos) == set(variant_ids)
        assert all(info.product_name == "Vestido Midi" for info in infos.values())

    @pytest.mark.asyncio
    async def test_null_fields_leave_product_unchanged(self, db_session, make_product):
        product = await make_product(price=Decimal("80.00"))

        updated = await ProductService(db_session).update(
            product.product_id,
            ProductUpdate.model_validate({"name": None, "price": None, "description": "Linho"}),
        )

        assert updated.name == "Vestido Midi"
        assert updated.price == Decimal("80.00")
        assert updated.description == "Linho"

    @pytest.mark.asyncio
    async def test_recommended_by_gender(self, db_session, make_campaign, make_product):
        female = await make_campaign(gender="female")
        male = await make_campaign(gender="male")
        upcoming = await make_campaign(gender="female", starts_in=timedelta(days=2))
        dresses = [await make_product(name=f"Vestido {i}", campaign=female) for i in range(4)]
        await make_product(name="Camisa", campaign=male)
        await make_product(name="Saia", campaign=upcoming)
        service = ProductService(db_session)

        picked = await service.get_recommended(Gender.FEMALE)
        assert len(picked) == 3
        assert {p.product_id for p in picked} <= {d.product_id for d in dresses}

        picked = await service.get_recommended(Gender.MALE, limit=5)
        assert [p.name for p in picked] == ["Camisa"]

    @pytest.mark.asyncio
    async def test_units_sold_ignores_cancelled_lines(
        self, db_session, make_product, customer_owner
    ):
        sold = await make_product(name="Sold")
        unsold = await make_product(name="Unsold")
        sold_id, unsold_id = sold.product_id, unsold.product_id
        sold_variant = sold.variants[0].variant_id
        orders = OrderService(db_session)

        await CartService(db_session).add_line(customer_owner, sold_id, sold_variant, quantity=2)
        await orders.create_order(customer_owner)
        await CartService(db_session).add_line(customer_owner, sold_id, sold_variant, quantity=5)
        cancelled = await orders.create_order(customer_owner)
        await orders.cancel_order(customer_owner, cancelled.order_id)

        units = await ProductService(db_session).get_units_sold([sold_id, unsold_id])

        assert units == {sold_id: 2}
