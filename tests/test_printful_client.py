import json

import httpx
import pytest

from app.core.printful_client import PrintfulAPIError, PrintfulClient


DETAIL_PAYLOAD = {
    "code": 200,
    "result": {
        "sync_product": {
            "id": 301,
            "external_id": "68ad4d026311b3",
            "name": "Retro Sunset Tee",
            "thumbnail_url": "https://files.cdn.printful.com/thumb.png",
            "is_ignored": False,
        },
        "sync_variants": [
            {
                "id": 5001,
                "external_id": "68ad4d0263a1f7",
                "name": "Retro Sunset Tee / Black / M",
                "retail_price": "24.50",
                "currency": "USD",
                "size": "M",
                "color": "Black",
                "variant_id": 4012,
                "availability_status": "active",
                "files": [
                    {"id": 1, "type": "default", "url": "https://files.cdn.printful.com/print.png"},
                    {"id": 2, "type": "preview", "preview_url": "https://files.cdn.printful.com/preview-black.png"},
                    {"id": 3, "type": "preview", "preview_url": "file:///tmp/local.png"},
                ],
            },
            {
                "id": 5002,
                "external_id": "68ad4d0263a2c1",
                "name": "Retro Sunset Tee / White / L",
                "retail_price": 24.5,
                "size": "L",
                "color": "White",
                "availability_status": "out_of_stock",
                "files": None,
            },
        ],
    },
}


def client_for(handler) -> PrintfulClient:
    return PrintfulClient(
        api_key="test-key",
        base_url="https://api.printful.test",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_list_products_reads_paging():
    seen = {}

    def handler(request: httpx.Request):
        seen["auth"] = request.headers["Authorization"]
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={
            "code": 200,
            "result": [
                {"id": 301, "external_id": "68ad4d026311b3", "name": "Retro Sunset Tee", "variants": 2, "synced": 2},
                {"id": 302, "external_id": None, "name": "Mug", "variants": 1, "synced": 1},
            ],
            "paging": {"total": 42, "offset": 20, "limit": 20},
        })

    client = client_for(handler)
    page = await client.list_products(offset=20, limit=20)
    await client.close()

    assert seen["auth"] == "Bearer test-key"
    assert seen["params"] == {"offset": "20", "limit": "20"}
    assert [item.id for item in page.items] == [301, 302]
    assert page.items[1].external_id == ""
    assert page.total == 42


@pytest.mark.asyncio
async def test_product_detail_keeps_only_preview_images():
    client = client_for(lambda request: httpx.Response(200, json=DETAIL_PAYLOAD))
    product = await client.get_product_detail(301)
    await client.close()

    assert product.id == 301
    assert product.external_id == "68ad4d026311b3"
    assert len(product.variants) == 2

    black, white = product.variants
    assert black.preview_images == ["https://files.cdn.printful.com/preview-black.png"]
    assert black.in_stock is True
    assert black.retail_price == "24.50"
    assert white.preview_images == []
    assert white.files == []
    assert white.in_stock is False
    assert white.currency == "USD"
    assert product.preview_images == ["https://files.cdn.printful.com/preview-black.png"]


@pytest.mark.asyncio
async def test_http_error_is_wrapped():
    client = client_for(lambda request: httpx.Response(500, text="boom"))

    with pytest.raises(PrintfulAPIError) as exc_info:
        await client.get_product_detail(301)
    await client.close()

    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_transport_error_is_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = client_for(handler)
    with pytest.raises(PrintfulAPIError) as exc_info:
        await client.list_products()
    await client.close()

    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_malformed_variant_price_is_rejected():
    payload = json.loads(json.dumps(DETAIL_PAYLOAD))
    payload["result"]["sync_variants"][0]["retail_price"] = "not-a-price"
    client = client_for(lambda request: httpx.Response(200, json=payload))

    with pytest.raises(PrintfulAPIError):
        await client.get_product_detail(301)
    await client.close()


@pytest.mark.asyncio
async def test_create_order_posts_draft():
    seen = {}

    def handler(request: httpx.Request):
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["confirm"] = request.url.params["confirm"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"result": {"id": 77, "external_id": "SNIP-1", "status": "draft"}})

    client = client_for(handler)
    result = await client.create_order({"external_id": "SNIP-1", "items": [{"sync_variant_id": 5001, "quantity": 1}]})
    await client.close()

    assert seen["method"] == "POST"
    assert seen["path"] == "/orders"
    assert seen["confirm"] == "false"
    assert seen["body"]["external_id"] == "SNIP-1"
    assert result.id == 77
    assert result.status == "draft"
