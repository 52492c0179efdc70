# storefront/api/routers/webhooks.py
from fastapi import APIRouter, Depends, Header, HTTPException, Request
from starlette.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from storefront.api.deps import get_payment_gateway
from storefront.data.database import get_db
from storefront.domain.errors import NotFoundError, WebhookPayloadError, WebhookVerificationError
from storefront.domain.schemas import WebhookAck
from storefront.services.payment_gateway import PaymentGateway
from storefront.services.webhook_service import PaymentWebhookService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/stripe", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(None, alias="stripe-signature"),
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """
    Gateway callback. Any 400 makes the gateway retry the delivery later.
    """
    if not stripe_signature:
        raise HTTPException(status_code=400, detail="Missing stripe-signature header")

    # signature is computed over the raw body
    payload = await request.body()

    try:
        event = gateway.parse_event(payload, stripe_signature)
    except WebhookVerificationError as e:
        logger.error(f"Webhook verification failed: {e}")
        raise HTTPException(status_code=400, detail="Webhook Error")

    try:
        await run_in_threadpool(PaymentWebhookService(db).handle_event, event)
    except (WebhookPayloadError, NotFoundError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"received": True}
