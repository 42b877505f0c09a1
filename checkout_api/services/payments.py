# checkout_api/services/payments.py
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import stripe

from ..db import orders_store
from ..errors import CheckoutError
from . import stripe_gateway
from .reconcile import (
    apply_paid_session,
    mark_intent_failed,
    mark_intent_succeeded,
    mark_refunded,
)

logger = logging.getLogger(__name__)


async def _on_checkout_session_completed(session: Dict[str, Any]) -> None:
    order = await orders_store.get_order_by_session(session["id"])
    if not order:
        logger.warning("order not found for session %s", session["id"])
        return
    apply_paid_session(order, session)
    await orders_store.save_order(order)
    logger.info("order %s updated to paid (checkout.session.completed)", order.id)


async def _on_payment_intent_succeeded(intent: Dict[str, Any]) -> None:
    order = await orders_store.get_order_by_payment_intent(intent["id"])
    if not order:
        logger.warning("order not found for payment intent %s", intent["id"])
        return
    mark_intent_succeeded(order)
    await orders_store.save_order(order)
    logger.info("order %s marked as paid (payment_intent.succeeded)", order.id)


async def _on_payment_intent_failed(intent: Dict[str, Any]) -> None:
    order = await orders_store.get_order_by_payment_intent(intent["id"])
    if not order:
        logger.warning("order not found for payment intent %s", intent["id"])
        return
    mark_intent_failed(order, intent)
    await orders_store.save_order(order)
    logger.info("order %s marked as failed (payment_intent.payment_failed)", order.id)


async def _on_charge_refunded(charge: Dict[str, Any]) -> None:
    intent_id = charge.get("payment_intent")
    order = await orders_store.get_order_by_payment_intent(intent_id) if intent_id else None
    if not order:
        logger.warning("order not found for refunded charge %s", charge.get("id"))
        return
    mark_refunded(order, charge)
    await orders_store.save_order(order)
    logger.info("order %s marked as refunded (charge.refunded)", order.id)


HANDLERS: Dict[str, Callable[[Dict[str, Any]], Awaitable[None]]] = {
    "checkout.session.completed": _on_checkout_session_completed,
    "payment_intent.succeeded": _on_payment_intent_succeeded,
    "payment_intent.payment_failed": _on_payment_intent_failed,
    "charge.refunded": _on_charge_refunded,
}


async def handle_stripe_webhook(raw_body: bytes, signature: Optional[str]) -> Dict[str, Any]:
    try:
        event = stripe_gateway.construct_event(raw_body, signature)
    except (stripe.SignatureVerificationError, ValueError) as e:
        logger.error("webhook signature verification failed: %s", e)
        raise CheckoutError(400, f"Webhook Error: {e}")

    typ = event.get("type")
    data = (event.get("data") or {}).get("object") or {}

    handler = HANDLERS.get(typ)
    if handler is None:
        logger.info("unhandled event type: %s", typ)
        return {"received": True}

    try:
        await handler(data)
    except Exception as e:
        logger.exception("error handling webhook event %s", typ)
        raise CheckoutError(500, "Webhook handler failed") from e

    return {"received": True}
