"""Tests for the order reconciliation functions."""
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from checkout_api.schemas.orders import Order, PaymentStatus
from checkout_api.services.reconcile import (
    CONFIRMED_OTHER,
    CONFIRMED_PAID,
    CONFIRMED_UNPAID,
    apply_paid_session,
    mark_intent_failed,
    mark_intent_succeeded,
    mark_refunded,
    reconcile_confirmed_session,
    reconcile_polled_session,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _order(status=PaymentStatus.pending, **kw) -> Order:
    return Order(
        id="a" * 24,
        stripeSessionId="cs_test_1",
        customerEmail="ada@example.com",
        items=[{"name": "Backpack", "quantity": 1, "price": 119.99}],
        totalAmount=119.99,
        paymentStatus=status,
        createdAt=NOW,
        updatedAt=NOW,
        **kw,
    )


def _paid_session(**kw):
    session = {
        "id": "cs_test_1",
        "status": "complete",
        "payment_status": "paid",
        "payment_intent": "pi_123",
        "customer": "cus_9",
        "customer_details": {"name": "Ada Lovelace"},
        "shipping_details": {"address": {"line1": "1 Way", "city": "London", "country": "GB"}},
    }
    session.update(kw)
    return session


# ---------- apply_paid_session ----------

def test_apply_paid_session_copies_session_fields():
    order = apply_paid_session(_order(metadata={"old": True}), _paid_session())
    assert order.paymentStatus == PaymentStatus.paid
    assert order.paymentIntentId == "pi_123"
    assert order.customerName == "Ada Lovelace"
    assert order.shippingAddress.city == "London"
    assert order.shippingAddress.line2 is None
    # metadata is replaced, not merged
    assert order.metadata == {"sessionId": "cs_test_1", "customerId": "cus_9", "paymentIntentId": "pi_123"}


def test_apply_paid_session_reads_collected_information_address():
    session = _paid_session(shipping_details=None, collected_information={
        "shipping_details": {"address": {"line1": "9 Elm", "city": "Toronto", "country": "CA"}},
    })
    order = apply_paid_session(_order(), session)
    assert order.shippingAddress.city == "Toronto"


def test_apply_paid_session_without_address_or_name():
    session = _paid_session(shipping_details=None, customer_details=None)
    order = apply_paid_session(_order(), session)
    assert order.shippingAddress is None
    assert order.customerName == ""


def test_apply_paid_session_records_confirmation_time():
    order = apply_paid_session(_order(), _paid_session(), confirmed_at=NOW)
    assert order.metadata["confirmedAt"] == NOW.isoformat()


# ---------- polling ----------

def test_poll_marks_pending_order_paid():
    order = _order()
    assert reconcile_polled_session(order, _paid_session()) is True
    assert order.paymentStatus == PaymentStatus.paid


@pytest.mark.parametrize("status,reason", [
    ("expired", "Session expired without payment"),
    ("complete", "Payment was not completed"),
])
def test_poll_marks_unpaid_terminal_session_failed(status, reason):
    order = _order(metadata={"note": "keep"})
    changed = reconcile_polled_session(order, {"status": status, "payment_status": "unpaid"})
    assert changed is True
    assert order.paymentStatus == PaymentStatus.failed
    assert order.metadata["failureReason"] == reason
    assert order.metadata["sessionStatus"] == status
    assert order.metadata["note"] == "keep"


def test_poll_leaves_open_session_pending():
    order = _order()
    assert reconcile_polled_session(order, {"status": "open", "payment_status": "unpaid"}) is False
    assert order.paymentStatus == PaymentStatus.pending


@pytest.mark.parametrize("status", [PaymentStatus.paid, PaymentStatus.failed, PaymentStatus.refunded])
def test_poll_only_moves_pending_orders(status):
    order = _order(status=status)
    assert reconcile_polled_session(order, {"status": "expired", "payment_status": "unpaid"}) is False
    assert order.paymentStatus == status


# ---------- manual confirmation ----------

def test_confirm_paid_overrides_failed_order():
    order = _order(status=PaymentStatus.failed)
    assert reconcile_confirmed_session(order, _paid_session(), now=NOW) == CONFIRMED_PAID
    assert order.paymentStatus == PaymentStatus.paid
    assert order.metadata["confirmedAt"] == NOW.isoformat()


@pytest.mark.parametrize("status,reason", [("expired", "Session expired"), ("complete", "Payment failed")])
def test_confirm_unpaid_terminal_session_fails_order(status, reason):
    order = _order()
    outcome = reconcile_confirmed_session(order, {"status": status, "payment_status": "unpaid"}, now=NOW)
    assert outcome == CONFIRMED_UNPAID
    assert order.paymentStatus == PaymentStatus.failed
    assert order.metadata["failureReason"] == reason
    assert order.metadata["failedAt"] == NOW.isoformat()


def test_confirm_unpaid_open_session_keeps_status():
    order = _order()
    outcome = reconcile_confirmed_session(order, {"status": "open", "payment_status": "unpaid"}, now=NOW)
    assert outcome == CONFIRMED_UNPAID
    assert order.paymentStatus == PaymentStatus.pending


def test_confirm_other_payment_status():
    order = _order()
    outcome = reconcile_confirmed_session(order, {"status": "complete", "payment_status": "no_payment_required"})
    assert outcome == CONFIRMED_OTHER
    assert order.paymentStatus == PaymentStatus.pending


# ---------- webhook effects ----------

def test_intent_succeeded_marks_paid():
    assert mark_intent_succeeded(_order(status=PaymentStatus.failed)).paymentStatus == PaymentStatus.paid


def test_intent_failed_uses_last_payment_error():
    order = mark_intent_failed(_order(), {"id": "pi_1", "last_payment_error": {"message": "Card declined"}})
    assert order.paymentStatus == PaymentStatus.failed
    assert order.metadata["failureReason"] == "Card declined"


def test_intent_failed_default_reason():
    order = mark_intent_failed(_order(), {"id": "pi_1"})
    assert order.metadata["failureReason"] == "Payment failed"


def test_refund_records_first_refund():
    charge = {"id": "ch_1", "payment_intent": "pi_1",
              "refunds": {"data": [{"id": "re_1", "reason": "requested_by_customer"}]}}
    order = mark_refunded(_order(status=PaymentStatus.paid, metadata={"sessionId": "cs_test_1"}), charge)
    assert order.paymentStatus == PaymentStatus.refunded
    assert order.metadata == {"sessionId": "cs_test_1", "refundId": "re_1", "refundReason": "requested_by_customer"}


def test_refund_without_refund_list():
    order = mark_refunded(_order(status=PaymentStatus.paid), {"id": "ch_1", "payment_intent": "pi_1"})
    assert order.metadata["refundId"] is None
    assert order.metadata["refundReason"] == "Refund processed"


def test_latest_observation_wins():
    order = _order()
    mark_intent_failed(order, {"id": "pi_1"})
    mark_intent_succeeded(order)
    mark_refunded(order, {"id": "ch_1"})
    assert order.paymentStatus == PaymentStatus.refunded
