# checkout_api/services/orders.py
from __future__ import annotations

import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Dict, Any, List, Tuple

from ..db import orders_store
from ..errors import CheckoutError
from ..schemas.orders import (
    CheckoutItemIn,
    CreateCheckoutSessionIn,
    Order,
    OrderLine,
    PaymentIntentIn,
    PaymentStatus,
)
from ..settings import settings
from . import stripe_gateway
from .catalog import find_product
from .reconcile import (
    CONFIRMED_PAID,
    CONFIRMED_UNPAID,
    reconcile_confirmed_session,
    reconcile_polled_session,
)

logger = logging.getLogger(__name__)

# OFFSET is a Postgres bigint
MAX_OFFSET = 2**63 - 1


def _now():
    return datetime.now(timezone.utc)


def _oid():
    return uuid.uuid4().hex[:24]


def _price_lines(items_in: List[CheckoutItemIn]) -> Tuple[List[Dict[str, Any]], float]:
    """
    Resolve each cart line to name/price/quantity.

    Lines that reference a catalog product take the catalog's name and price;
    free-form lines must carry their own.
    """
    priced, total = [], 0.0
    for li in items_in:
        product = find_product(li.productId)
        if product:
            name, price = product["name"], float(product["price"])
            description = li.description or product.get("description")
            image = li.image or product.get("image")
        else:
            if not li.name or li.price is None:
                raise CheckoutError(400, "Each item needs a name and price")
            name, price = li.name, float(li.price)
            description, image = li.description, li.image
        priced.append({
            "name": name,
            "description": description,
            "image": image,
            "price": price,
            "quantity": li.quantity,
        })
        total += price * li.quantity
    return priced, round(total, 2)


def clamp_pagination(page: Any, limit: Any) -> Tuple[int, int]:
    """
    Coerce page/limit to positive integers.

    limit is capped at orders_max_limit, and page so that (page - 1) * limit
    still fits in a bigint OFFSET.
    """
    def _int(v, default):
        try:
            return int(v)
        except (TypeError, ValueError):
            return default

    page_i = max(1, _int(page, 1))
    limit_i = _int(limit, settings.orders_default_limit)
    limit_i = min(max(1, limit_i), max(1, settings.orders_max_limit))
    page_i = min(page_i, MAX_OFFSET // limit_i + 1)
    return page_i, limit_i


async def create_checkout_session(body: CreateCheckoutSessionIn) -> Dict[str, Any]:
    logger.info(
        "checkout session request: items=%s email=%s success_url=%s cancel_url=%s",
        len(body.items or []), body.customerEmail, bool(body.successUrl), bool(body.cancelUrl),
    )

    if not body.items:
        logger.info("validation error: items array is required")
        raise CheckoutError(400, "Items array is required")
    if not body.customerEmail:
        logger.info("validation error: customer email is required")
        raise CheckoutError(400, "Customer email is required")

    lines, total = _price_lines(body.items)

    session = stripe_gateway.create_checkout_session(
        lines=lines,
        customer_email=body.customerEmail,
        total=total,
        success_url=body.successUrl or f"{settings.client_url}/success?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=body.cancelUrl or f"{settings.client_url}/cancel",
    )

    now = _now()
    order = Order(
        id=_oid(),
        stripeSessionId=session["id"],
        customerEmail=body.customerEmail,
        items=[OrderLine(name=li["name"], quantity=li["quantity"], price=li["price"]) for li in lines],
        totalAmount=total,
        currency=settings.currency.lower(),
        paymentStatus=PaymentStatus.pending,
        createdAt=now,
        updatedAt=now,
    )
    await orders_store.insert_order(order)

    logger.info("checkout session %s created for order %s (total %.2f)", session["id"], order.id, total)
    return {"sessionId": session["id"], "url": session.get("url"), "orderId": order.id}


async def get_session_status(session_id: str) -> Dict[str, Any]:
    if not session_id:
        raise CheckoutError(400, "Session ID is required")

    session = stripe_gateway.retrieve_session(session_id)
    order = await orders_store.get_order_by_session(session_id)

    if order and reconcile_polled_session(order, session):
        await orders_store.save_order(order)
        logger.info("order %s -> %s via session status check", order.id, order.paymentStatus.value)

    return {
        "status": session.get("status"),
        "paymentStatus": session.get("payment_status"),
        "customerEmail": session.get("customer_email"),
        "amountTotal": session.get("amount_total"),
        "currency": session.get("currency"),
        "order": order,
    }


async def confirm_payment(session_id: str | None) -> Tuple[int, Dict[str, Any]]:
    """Returns (http_status, body); an unpaid session is reported with 400."""
    if not session_id:
        raise CheckoutError(400, "Session ID is required")

    session = stripe_gateway.retrieve_session(session_id)
    order = await orders_store.get_order_by_session(session_id)
    if not order:
        raise CheckoutError(404, "Order not found")

    outcome = reconcile_confirmed_session(order, session, now=_now())

    if outcome == CONFIRMED_PAID:
        await orders_store.save_order(order)
        logger.info("order %s confirmed as paid via confirm-payment", order.id)
        return 200, {
            "success": True,
            "message": "Payment confirmed successfully",
            "order": order,
        }

    extra = {
        "stripeStatus": session.get("payment_status"),
        "sessionStatus": session.get("status"),
        "order": order,
    }
    if outcome == CONFIRMED_UNPAID:
        if session.get("status") in ("expired", "complete"):
            await orders_store.save_order(order)
            logger.info("order %s marked as failed via confirm-payment", order.id)
        return 400, {"success": False, "message": "Payment not completed", **extra}

    return 200, {
        "success": False,
        "message": f"Payment status: {session.get('payment_status')}",
        **extra,
    }


async def get_order(order_id: str) -> Order:
    order = await orders_store.get_order(order_id)
    if not order:
        raise CheckoutError(404, "Order not found")
    return order


async def list_orders(page: Any = 1, limit: Any = None) -> Dict[str, Any]:
    page, limit = clamp_pagination(page, limit)
    orders = await orders_store.list_orders(limit=limit, offset=(page - 1) * limit)
    total = await orders_store.count_orders()
    return {
        "orders": orders,
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit),
        },
    }


async def create_payment_intent(body: PaymentIntentIn) -> Dict[str, Any]:
    if not body.amount:
        raise CheckoutError(400, "Amount is required")
    if body.amount < 0:
        raise CheckoutError(400, "Amount must be positive")

    intent = stripe_gateway.create_payment_intent(
        amount=body.amount,
        currency=body.currency,
        customer_email=body.customerEmail,
    )
    logger.info("payment intent %s created", intent["id"])
    return {"clientSecret": intent["client_secret"], "paymentIntentId": intent["id"]}
