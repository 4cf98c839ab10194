from typing import Dict, List, Optional

from app.core.printful_client import PrintfulAPIError
from app.schemas.order import PrintfulOrderResult
from app.schemas.printful import RemoteProduct, RemoteProductPage, RemoteProductSummary, RemoteVariant


def make_variant(
    variant_id: int,
    name: str = None,
    retail_price: str = "24.99",
    color: Optional[str] = "Black",
    size: Optional[str] = "M",
    preview_url: Optional[str] = None,
) -> RemoteVariant:
    files = [{"id": variant_id * 10, "type": "default", "url": f"https://files.example.com/print-{variant_id}.png"}]
    if preview_url:
        files.append({"id": variant_id * 10 + 1, "type": "preview", "preview_url": preview_url})
    return RemoteVariant(
        id=variant_id,
        external_id=f"ext-variant-{variant_id}",
        name=name or f"Variant {variant_id}",
        retail_price=retail_price,
        currency="USD",
        color=color,
        size=size,
        variant_id=4000 + variant_id,
        files=files,
    )


def make_product(
    product_id: int,
    name: str = None,
    external_id: str = None,
    variants: List[RemoteVariant] = None,
    tags: List[str] = None,
) -> RemoteProduct:
    return RemoteProduct(
        id=product_id,
        external_id=external_id or f"ext-{product_id}",
        name=name or f"Product {product_id}",
        thumbnail_url=f"https://files.example.com/thumb-{product_id}.png",
        tags=tags or [],
        variants=variants if variants is not None else [make_variant(product_id * 100 + 1)],
    )


class FakePrintfulClient:
    """In-memory stand-in for PrintfulClient; list calls are numbered from 1."""

    def __init__(self, products: List[RemoteProduct] = None):
        self.products: Dict[int, RemoteProduct] = {p.id: p for p in products or []}
        self.list_calls = 0
        self.detail_calls = 0
        self.fail_list_calls = set()
        self.fail_detail_ids = set()
        self.created_orders: List[dict] = []

    def set_products(self, products: List[RemoteProduct]) -> None:
        self.products = {p.id: p for p in products}

    async def list_products(self, offset: int = 0, limit: int = 20) -> RemoteProductPage:
        self.list_calls += 1
        if self.list_calls in self.fail_list_calls:
            raise PrintfulAPIError("Printful GET /store/products failed: 503", 503)
        page = list(self.products.values())[offset:offset + limit]
        return RemoteProductPage(
            items=[
                RemoteProductSummary(id=p.id, external_id=p.external_id, name=p.name, variants=len(p.variants))
                for p in page
            ],
            total=len(self.products),
            offset=offset,
            limit=limit,
        )

    async def get_product_detail(self, product_id: int) -> RemoteProduct:
        self.detail_calls += 1
        if product_id in self.fail_detail_ids or product_id not in self.products:
            raise PrintfulAPIError(f"Printful GET /store/products/{product_id} failed: 404", 404)
        return self.products[product_id].model_copy(deep=True)

    async def create_order(self, order: dict, confirm: bool = False) -> PrintfulOrderResult:
        self.created_orders.append(order)
        return PrintfulOrderResult(id=9001, external_id=order.get("external_id"), status="draft")

    async def close(self):
        pass
