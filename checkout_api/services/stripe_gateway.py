# checkout_api/services/stripe_gateway.py
"""
Thin wrappers around the Stripe SDK.

Everything handed back to the rest of the app is a plain dict so the
reconciliation code never depends on SDK object types.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import stripe

from ..errors import CheckoutError
from ..settings import settings


def _to_cents(amount: float) -> int:
    return int(round(amount * 100))


def _configure() -> None:
    if not settings.stripe_secret_key:
        raise CheckoutError(500, "Stripe configuration error")
    stripe.api_key = settings.stripe_secret_key


def _plain(obj: Any) -> Dict[str, Any]:
    if not isinstance(obj, stripe.StripeObject):
        return obj
    try:
        return obj.to_dict(recursive=True)
    except TypeError:
        # SDK releases without the recursive flag
        return obj.to_dict_recursive()


def create_checkout_session(
    lines: List[Dict[str, Any]],
    customer_email: str,
    total: float,
    success_url: str,
    cancel_url: str,
    currency: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create a hosted Checkout session priced line by line.

    Each line needs name, price and quantity; description and image are optional.
    """
    _configure()
    currency = (currency or settings.currency).lower()

    line_items = [{
        "quantity": li["quantity"],
        "price_data": {
            "currency": currency,
            "unit_amount": _to_cents(li["price"]),
            "product_data": {
                "name": li["name"],
                **({"description": li["description"]} if li.get("description") else {}),
                "images": [li["image"]] if li.get("image") else [],
            },
        },
    } for li in lines]

    session = stripe.checkout.Session.create(
        payment_method_types=["card"],
        mode="payment",
        line_items=line_items,
        customer_email=customer_email,
        success_url=success_url,
        cancel_url=cancel_url,
        metadata={"customerEmail": customer_email, "totalAmount": str(total)},
        billing_address_collection="required",
        shipping_address_collection={"allowed_countries": settings.shipping_countries},
    )
    return _plain(session)


def retrieve_session(session_id: str) -> Dict[str, Any]:
    _configure()
    return _plain(stripe.checkout.Session.retrieve(session_id))


def create_payment_intent(
    amount: float,
    currency: Optional[str] = None,
    customer_email: Optional[str] = None,
) -> Dict[str, Any]:
    _configure()
    params: Dict[str, Any] = {
        "amount": _to_cents(amount),
        "currency": (currency or settings.currency).lower(),
        "metadata": {"customerEmail": customer_email or ""},
    }
    if customer_email:
        params["receipt_email"] = customer_email
    return _plain(stripe.PaymentIntent.create(**params))


def construct_event(payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
    """
    Verify the Stripe-Signature header and return the event as a dict.

    Raises stripe.SignatureVerificationError on a bad signature and
    ValueError on a malformed payload.
    """
    if not settings.stripe_webhook_secret:
        raise CheckoutError(500, "Stripe webhook secret is not configured")

    event = stripe.Webhook.construct_event(
        payload=payload, sig_header=signature or "", secret=settings.stripe_webhook_secret
    )
    return _plain(event)
