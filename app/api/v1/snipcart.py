import logging

from fastapi import APIRouter, Depends, Header, HTTPException, status

from app.api.dependencies import get_printful_client, get_snipcart_client, get_variant_cache
from app.core.printful_client import PrintfulAPIError, PrintfulClient
from app.core.snipcart_client import SnipcartClient
from app.core.variant_cache import VariantIdCache
from app.schemas.order import SnipcartWebhookRequest
from app.services.order import OrderError, relay_order

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/snipcart", tags=["snipcart"])

ALLOWED_EVENTS = {"order.completed", "customauth:customer_updated"}


@router.post("/webhook")
async def snipcart_webhook(
    payload: SnipcartWebhookRequest,
    x_snipcart_requesttoken: str = Header(None),
    snipcart: SnipcartClient = Depends(get_snipcart_client),
    printful: PrintfulClient = Depends(get_printful_client),
    cache: VariantIdCache = Depends(get_variant_cache),
):
    if payload.eventName not in ALLOWED_EVENTS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="This event is not permitted")

    if not x_snipcart_requesttoken:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing webhook token")

    try:
        verified = await snipcart.verify_request_token(x_snipcart_requesttoken)
    except Exception as e:
        logger.error(f"Webhook token verification error: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to verify Snipcart webhook token",
        )
    if not verified:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid webhook token")

    if payload.eventName == "customauth:customer_updated":
        return {"message": "Customer updated - no action taken"}

    try:
        order = await relay_order(payload.content, printful, cache)
    except OrderError as e:
        logger.warning(f"Rejected webhook order: {str(e)}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except PrintfulAPIError as e:
        logger.error(f"Printful order creation failed: {str(e)}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    return {"message": "Done", "printful_order_id": order.id}
