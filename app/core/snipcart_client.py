import logging
import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)


class SnipcartClient:
    def __init__(
        self,
        secret_key: str = None,
        base_url: str = None,
        transport: httpx.AsyncBaseTransport = None,
    ):
        self.secret_key = secret_key if secret_key is not None else settings.SNIPCART_SECRET_KEY
        self.base_url = (base_url or settings.SNIPCART_API_BASE_URL).rstrip("/")
        self.transport = transport
        self.client = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=15.0,
                transport=self.transport,
                auth=(self.secret_key, ""),
                headers={"Accept": "application/json"},
            )
        return self.client

    async def verify_request_token(self, token: str) -> bool:
        """Ask Snipcart whether a webhook request token is genuine."""
        if not self.secret_key:
            raise RuntimeError("SNIPCART_SECRET_KEY not configured")
        client = await self._get_client()
        response = await client.get(f"/api/requestvalidation/{token}")
        if response.status_code != 200:
            logger.warning(f"Snipcart token verification failed with status {response.status_code}")
            return False
        return True

    async def close(self):
        if self.client:
            await self.client.aclose()
            self.client = None


snipcart_client = SnipcartClient()
