import pytest

from app.core.variant_cache import VariantIdCache
from app.schemas.order import SnipcartAddress, SnipcartItem
from app.services.order import (
    OrderError,
    build_recipient,
    map_shipping_method,
    product_id_from_url,
    relay_order,
    resolve_variant_id,
    select_variant,
)

from tests.helpers import FakePrintfulClient, make_product, make_variant


@pytest.fixture
def tee_client():
    return FakePrintfulClient([
        make_product(301, "Retro Sunset Tee", variants=[
            make_variant(5001, color="Black", size="M"),
            make_variant(5002, color="White", size="L"),
        ]),
    ])


def order_payload(**overrides):
    payload = {
        "invoiceNumber": "SNIP-1001",
        "email": "buyer@example.com",
        "shippingAddress": {
            "fullName": "Ada Lovelace",
            "address1": "12 Analytical Way",
            "city": "London",
            "country": "GB",
            "postalCode": "N1 9GU",
        },
        "items": [
            {
                "id": "tee-white-l",
                "name": "Retro Sunset Tee",
                "price": 24.5,
                "quantity": 2,
                "url": "/product/301",
                "customFields": [{"name": "Color", "value": "white"}, {"name": "Size", "value": "L"}],
            },
        ],
        "shippingRateUserDefinedId": "RATE_EXPRESS",
    }
    payload.update(overrides)
    return payload


def test_shipping_method_mapping():
    assert map_shipping_method("express") == "EXPRESS"
    assert map_shipping_method("RATE_PRIORITY") == "PRIORITY"
    assert map_shipping_method("unknown") == "STANDARD"
    assert map_shipping_method(None) == "STANDARD"


def test_product_id_from_url():
    assert product_id_from_url("/product/301") == "301"
    assert product_id_from_url("https://shop.example.com/product/301/?ref=cart") == "301"
    assert product_id_from_url("/about") is None
    assert product_id_from_url(None) is None


def test_recipient_name_fallbacks():
    address = SnipcartAddress(firstName="Grace", lastName="Hopper", address1="1 Navy Rd", city="Arlington")
    recipient = build_recipient(address, "grace@example.com")

    assert recipient["name"] == "Grace Hopper"
    assert recipient["country_code"] == "US"
    assert recipient["email"] == "grace@example.com"
    assert "company" not in recipient

    assert build_recipient(SnipcartAddress(), "x@example.com")["name"] == "Customer"


def test_select_variant_matches_case_insensitively():
    variants = [make_variant(1, color="Black", size="M"), make_variant(2, color="White", size="L")]

    assert select_variant(variants, "white", "l").id == 2
    assert select_variant(variants, None, "M").id == 1
    assert select_variant(variants, "Purple", "XXL").id == 1
    assert select_variant([], "Black", "M") is None


@pytest.mark.asyncio
async def test_resolved_variant_is_cached(tee_client):
    cache = VariantIdCache()
    item = SnipcartItem(
        id="tee-black-m",
        url="/product/301",
        customFields=[{"name": "Color", "value": "Black"}, {"name": "Size", "value": "M"}],
    )

    assert await resolve_variant_id(item, tee_client, cache) == 5001
    assert await resolve_variant_id(item, tee_client, cache) == 5001
    assert tee_client.detail_calls == 1
    assert cache.get(VariantIdCache.make_key("301", "black", "m")) == 5001


@pytest.mark.asyncio
async def test_numeric_item_id_is_fallback(tee_client):
    item = SnipcartItem(id="5002", url="/product/999")

    assert await resolve_variant_id(item, tee_client, VariantIdCache()) == 5002


@pytest.mark.asyncio
async def test_unmappable_item_is_rejected(tee_client):
    item = SnipcartItem(id="mystery-item")

    with pytest.raises(OrderError):
        await resolve_variant_id(item, tee_client, VariantIdCache())


@pytest.mark.asyncio
async def test_relay_order_submits_printful_order(tee_client):
    result = await relay_order(order_payload(), tee_client, VariantIdCache())

    assert result.id == 9001
    order = tee_client.created_orders[0]
    assert order["external_id"] == "SNIP-1001"
    assert order["shipping"] == "EXPRESS"
    assert order["recipient"]["name"] == "Ada Lovelace"
    assert order["recipient"]["zip"] == "N1 9GU"
    assert order["items"] == [
        {"sync_variant_id": 5002, "quantity": 2, "name": "Retro Sunset Tee", "retail_price": "24.5"},
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["email", "invoiceNumber", "shippingAddress", "items"])
async def test_relay_order_requires_fields(tee_client, field):
    payload = order_payload()
    payload.pop(field)

    with pytest.raises(OrderError):
        await relay_order(payload, tee_client, VariantIdCache())
    assert tee_client.created_orders == []


def test_variant_cache_evicts_least_recently_used():
    cache = VariantIdCache(max_entries=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.get("a")
    cache.set("c", 3)

    assert cache.get("b") is None
    assert cache.get("a") == 1
    assert cache.get("c") == 3
    assert len(cache) == 2

    cache.clear()
    assert len(cache) == 0
