import logging
import httpx
from typing import Optional

from pydantic import ValidationError

from app.core.config import settings
from app.schemas.printful import RemoteProduct, RemoteProductPage
from app.schemas.order import PrintfulOrderResult

logger = logging.getLogger(__name__)


class PrintfulAPIError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PrintfulClient:
    def __init__(
        self,
        api_key: str = None,
        base_url: str = None,
        timeout: float = None,
        transport: httpx.AsyncBaseTransport = None,
    ):
        self.api_key = api_key if api_key is not None else settings.PRINTFUL_API_KEY
        self.base_url = (base_url or settings.PRINTFUL_API_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.PRINTFUL_REQUEST_TIMEOUT
        self.transport = transport
        self.client = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        return self.client

    async def _request(self, method: str, path: str, **kwargs) -> dict:
        client = await self._get_client()
        try:
            response = await client.request(method, path, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            if status_code == 429:
                logger.warning(f"Printful rate limit hit on {method} {path}")
            else:
                logger.error(f"Printful {method} {path} failed with status {status_code}: {e.response.text}")
            raise PrintfulAPIError(f"Printful {method} {path} failed: {status_code}", status_code) from e
        except httpx.HTTPError as e:
            logger.error(f"Printful {method} {path} transport error: {str(e)}")
            raise PrintfulAPIError(f"Printful {method} {path} failed: {str(e)}") from e
        except ValueError as e:
            raise PrintfulAPIError(f"Printful {method} {path} returned invalid JSON") from e

    async def list_products(self, offset: int = 0, limit: int = 20) -> RemoteProductPage:
        logger.debug(f"Listing Printful store products - offset: {offset}, limit: {limit}")
        data = await self._request("GET", "/store/products", params={"offset": offset, "limit": limit})
        paging = data.get("paging") or {}
        try:
            items = data.get("result") or []
            return RemoteProductPage(
                items=items,
                total=paging.get("total"),
                offset=paging.get("offset", offset),
                limit=paging.get("limit", limit),
            )
        except ValidationError as e:
            raise PrintfulAPIError(f"Malformed product list at offset {offset}: {e}") from e

    async def get_product_detail(self, product_id: int) -> RemoteProduct:
        logger.debug(f"Fetching Printful product detail {product_id}")
        data = await self._request("GET", f"/store/products/{product_id}")
        try:
            return RemoteProduct.from_detail(data.get("result") or {})
        except ValidationError as e:
            raise PrintfulAPIError(f"Malformed product detail for {product_id}: {e}") from e

    async def create_order(self, order: dict, confirm: bool = False) -> PrintfulOrderResult:
        logger.info(f"Submitting Printful order {order.get('external_id')} with {len(order.get('items', []))} items")
        data = await self._request("POST", "/orders", json=order, params={"confirm": str(confirm).lower()})
        try:
            result = PrintfulOrderResult(**(data.get("result") or {}))
        except ValidationError as e:
            raise PrintfulAPIError(f"Malformed order response: {e}") from e
        logger.info(f"Printful order created: {result.id} ({result.status})")
        return result

    async def close(self):
        if self.client:
            await self.client.aclose()
            self.client = None


printful_client = PrintfulClient()
