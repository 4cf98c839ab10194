import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer
from fastapi.security.http import HTTPAuthorizationCredentials

from app.core.config import settings
from app.core.printful_client import PrintfulClient, printful_client
from app.core.snipcart_client import SnipcartClient, snipcart_client
from app.core.variant_cache import VariantIdCache


security = HTTPBearer(auto_error=False)

# Lives for the process; entries are evicted least-recently-used
variant_cache = VariantIdCache()


async def require_admin(credentials: HTTPAuthorizationCredentials = Depends(security)) -> None:
    if not settings.ADMIN_API_TOKEN:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin API is not configured",
        )

    if credentials is None or not secrets.compare_digest(credentials.credentials, settings.ADMIN_API_TOKEN):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )


def get_printful_client() -> PrintfulClient:
    return printful_client


def get_snipcart_client() -> SnipcartClient:
    return snipcart_client


def get_variant_cache() -> VariantIdCache:
    return variant_cache
