# checkout_api/routes/payments.py
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from ..schemas.orders import (
    CheckoutSessionOut,
    ConfirmPaymentIn,
    CreateCheckoutSessionIn,
    Order,
    OrderPage,
    PaymentIntentIn,
    PaymentIntentOut,
    SessionStatusOut,
)
from ..services import orders as orders_service


router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.post("/create-checkout-session", response_model=CheckoutSessionOut)
async def create_checkout_session(body: CreateCheckoutSessionIn):
    return await orders_service.create_checkout_session(body)


@router.get("/session/{session_id}", response_model=SessionStatusOut)
async def get_session_status(session_id: str):
    """Storefront poll after redirect; reconciles a pending order with Stripe."""
    return await orders_service.get_session_status(session_id)


@router.post("/confirm-payment")
async def confirm_payment(body: ConfirmPaymentIn):
    status_code, payload = await orders_service.confirm_payment(body.sessionId)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))


@router.get("/order/{order_id}", response_model=Order)
async def get_order(order_id: str):
    return await orders_service.get_order(order_id)


@router.get("/orders", response_model=OrderPage)
async def list_orders(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
):
    # raw strings; clamping happens in the service
    return await orders_service.list_orders(page=page, limit=limit)


@router.post("/create-payment-intent", response_model=PaymentIntentOut)
async def create_payment_intent(body: PaymentIntentIn):
    return await orders_service.create_payment_intent(body)
