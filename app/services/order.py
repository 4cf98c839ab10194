import logging
from typing import List, Optional

from pydantic import ValidationError

from app.core.printful_client import PrintfulClient
from app.core.variant_cache import VariantIdCache
from app.schemas.order import PrintfulOrderResult, SnipcartAddress, SnipcartItem, SnipcartOrderContent
from app.schemas.printful import RemoteVariant

logger = logging.getLogger(__name__)

SHIPPING_METHODS = {
    "standard": "STANDARD",
    "rate_standard": "STANDARD",
    "express": "EXPRESS",
    "rate_express": "EXPRESS",
    "priority": "PRIORITY",
    "rate_priority": "PRIORITY",
    "overnight": "OVERNIGHT",
    "rate_overnight": "OVERNIGHT",
    "economy": "ECONOMY",
    "rate_economy": "ECONOMY",
}
DEFAULT_SHIPPING_METHOD = "STANDARD"


class OrderError(ValueError):
    pass


def map_shipping_method(shipping_rate_id: Optional[str]) -> str:
    return SHIPPING_METHODS.get((shipping_rate_id or "").lower(), DEFAULT_SHIPPING_METHOD)


def product_id_from_url(url: Optional[str]) -> Optional[str]:
    if not url or "/product/" not in url:
        return None
    product_id = url.split("/product/", 1)[1].split("?", 1)[0].strip("/")
    return product_id or None


def build_recipient(address: SnipcartAddress, email: str) -> dict:
    name = (
        address.name
        or address.fullName
        or f"{address.firstName or ''} {address.lastName or ''}".strip()
        or "Customer"
    )
    recipient = {
        "name": name,
        "company": address.company,
        "address1": address.address1 or address.fullAddress or "",
        "address2": address.address2,
        "city": address.city or "",
        "state_code": address.province,
        "country_code": address.country or "US",
        "zip": address.postalCode or "",
        "phone": address.phone,
        "email": email,
    }
    return {key: value for key, value in recipient.items() if value is not None}


def _matches(wanted: Optional[str], actual: Optional[str]) -> bool:
    if not wanted or not actual:
        return True
    return wanted.strip().lower() == actual.strip().lower()


def select_variant(variants: List[RemoteVariant], color: Optional[str], size: Optional[str]) -> Optional[RemoteVariant]:
    """First variant whose color and size agree with the cart options, else the first variant."""
    if not variants:
        return None
    for variant in variants:
        if _matches(color, variant.color) and _matches(size, variant.size):
            return variant
    return variants[0]


async def resolve_variant_id(item: SnipcartItem, client: PrintfulClient, cache: VariantIdCache) -> int:
    product_id = product_id_from_url(item.url)
    if product_id and product_id.isdigit():
        color = item.custom_field("Color")
        size = item.custom_field("Size")
        key = cache.make_key(product_id, color, size)
        cached = cache.get(key)
        if cached is not None:
            return cached

        try:
            product = await client.get_product_detail(int(product_id))
        except Exception as e:
            logger.warning(f"Could not load Printful product {product_id} for item {item.id}: {str(e)}")
        else:
            variant = select_variant(product.variants, color, size)
            if variant is not None:
                cache.set(key, variant.id)
                return variant.id
            logger.warning(f"Printful product {product_id} has no variants")

    if item.id.isdigit():
        logger.info(f"Using cart item id {item.id} as Printful variant id")
        return int(item.id)

    raise OrderError(f'Unable to map cart item "{item.id}" to a Printful variant')


async def build_printful_order(content: SnipcartOrderContent, client: PrintfulClient, cache: VariantIdCache) -> dict:
    if not content.invoiceNumber:
        raise OrderError("Invoice number is required")
    if not content.email:
        raise OrderError("Email is required")
    if content.shippingAddress is None:
        raise OrderError("Shipping address is required")
    if not content.items:
        raise OrderError("At least one item is required")

    items = []
    for item in content.items:
        variant_id = await resolve_variant_id(item, client, cache)
        line = {"sync_variant_id": variant_id, "quantity": item.quantity}
        if item.name:
            line["name"] = item.name
        if item.price is not None:
            line["retail_price"] = str(item.price)
        items.append(line)

    return {
        "external_id": content.invoiceNumber,
        "shipping": map_shipping_method(content.shippingRateUserDefinedId),
        "recipient": build_recipient(content.shippingAddress, content.email),
        "items": items,
    }


async def relay_order(payload: dict, client: PrintfulClient, cache: VariantIdCache) -> PrintfulOrderResult:
    """Turn a completed cart order into a Printful draft order."""
    try:
        content = SnipcartOrderContent(**payload)
    except ValidationError as e:
        raise OrderError(f"Invalid order payload: {str(e)}") from e

    order = await build_printful_order(content, client, cache)
    logger.info(f"Relaying order {content.invoiceNumber} ({len(order['items'])} items, shipping {order['shipping']})")
    return await client.create_order(order)
