from __future__ import annotations
from fastapi import APIRouter, Request

from ..services.payments import handle_stripe_webhook

router = APIRouter(prefix="/api", tags=["webhook"])


@router.post("/webhook")
async def stripe_webhook(request: Request):
    # signature is computed over the exact bytes Stripe sent
    raw = await request.body()
    return await handle_stripe_webhook(raw, request.headers.get("stripe-signature"))
