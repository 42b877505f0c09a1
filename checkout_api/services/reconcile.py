# checkout_api/services/reconcile.py
"""
Order-state reconciliation against Stripe objects.

Each function takes an Order plus the latest Stripe payload (a plain dict)
and mutates the order in place. No transition table is enforced: whatever
Stripe reports last is what the order ends up saying. Persisting is the
caller's job.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..schemas.orders import Order, PaymentStatus, ShippingAddress

# outcomes of reconcile_confirmed_session
CONFIRMED_PAID = "paid"
CONFIRMED_UNPAID = "unpaid"
CONFIRMED_OTHER = "other"


def _iso(ts: Optional[datetime] = None) -> str:
    return (ts or datetime.now(timezone.utc)).isoformat()


def _shipping_address(session: Dict[str, Any]) -> Optional[ShippingAddress]:
    # newer API versions moved shipping_details under collected_information
    details = (session.get("shipping_details")
               or (session.get("collected_information") or {}).get("shipping_details")
               or {})
    addr = details.get("address")
    if not addr:
        return None
    return ShippingAddress(
        line1=addr.get("line1"),
        line2=addr.get("line2"),
        city=addr.get("city"),
        state=addr.get("state"),
        postal_code=addr.get("postal_code"),
        country=addr.get("country"),
    )


def apply_paid_session(order: Order, session: Dict[str, Any],
                       confirmed_at: Optional[datetime] = None) -> Order:
    """Copy a paid Checkout session onto the order and mark it paid."""
    order.paymentStatus = PaymentStatus.paid
    order.paymentIntentId = session.get("payment_intent")
    order.customerName = (session.get("customer_details") or {}).get("name") or ""

    address = _shipping_address(session)
    if address is not None:
        order.shippingAddress = address

    metadata: Dict[str, Any] = {
        "sessionId": session.get("id"),
        "customerId": session.get("customer"),
        "paymentIntentId": session.get("payment_intent"),
    }
    if confirmed_at is not None:
        metadata["confirmedAt"] = _iso(confirmed_at)
    order.metadata = metadata
    return order


def reconcile_polled_session(order: Order, session: Dict[str, Any]) -> bool:
    """
    Status poll from the storefront. Only a pending order moves.

    Returns True when the order changed and needs saving.
    """
    if order.paymentStatus != PaymentStatus.pending:
        return False

    payment_status = session.get("payment_status")
    status = session.get("status")

    if payment_status == "paid":
        apply_paid_session(order, session)
        return True

    if payment_status == "unpaid" and status == "expired":
        order.paymentStatus = PaymentStatus.failed
        order.metadata = {
            **order.metadata,
            "failureReason": "Session expired without payment",
            "sessionStatus": status,
        }
        return True

    if payment_status == "unpaid" and status == "complete":
        order.paymentStatus = PaymentStatus.failed
        order.metadata = {
            **order.metadata,
            "failureReason": "Payment was not completed",
            "sessionStatus": status,
            "paymentStatus": payment_status,
        }
        return True

    return False


def reconcile_confirmed_session(order: Order, session: Dict[str, Any],
                                now: Optional[datetime] = None) -> str:
    """
    Manual confirmation. Applies regardless of the order's current status.

    Returns CONFIRMED_PAID, CONFIRMED_UNPAID or CONFIRMED_OTHER.
    """
    now = now or datetime.now(timezone.utc)
    payment_status = session.get("payment_status")
    status = session.get("status")

    if payment_status == "paid":
        apply_paid_session(order, session, confirmed_at=now)
        return CONFIRMED_PAID

    if payment_status == "unpaid":
        if status in ("expired", "complete"):
            order.paymentStatus = PaymentStatus.failed
            order.metadata = {
                **order.metadata,
                "failureReason": "Session expired" if status == "expired" else "Payment failed",
                "sessionStatus": status,
                "failedAt": _iso(now),
            }
        return CONFIRMED_UNPAID

    return CONFIRMED_OTHER


def mark_intent_succeeded(order: Order) -> Order:
    order.paymentStatus = PaymentStatus.paid
    return order


def mark_intent_failed(order: Order, payment_intent: Dict[str, Any]) -> Order:
    reason = (payment_intent.get("last_payment_error") or {}).get("message") or "Payment failed"
    order.paymentStatus = PaymentStatus.failed
    order.metadata = {**order.metadata, "failureReason": reason}
    return order


def mark_refunded(order: Order, charge: Dict[str, Any]) -> Order:
    refunds = (charge.get("refunds") or {}).get("data") or []
    first = refunds[0] if refunds else {}
    order.paymentStatus = PaymentStatus.refunded
    order.metadata = {
        **order.metadata,
        "refundId": first.get("id"),
        "refundReason": first.get("reason") or "Refund processed",
    }
    return order
