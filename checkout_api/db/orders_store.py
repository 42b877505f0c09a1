"""Postgres-backed persistence for orders."""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from . import get_pool
from ..schemas.orders import Order

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS orders (
    id                 TEXT PRIMARY KEY,
    stripe_session_id  TEXT NOT NULL UNIQUE,
    customer_email     TEXT NOT NULL,
    customer_name      TEXT,
    items              JSONB NOT NULL DEFAULT '[]'::jsonb,
    total_amount       NUMERIC(12, 2) NOT NULL,
    currency           TEXT NOT NULL DEFAULT 'usd',
    payment_status     TEXT NOT NULL DEFAULT 'pending'
                       CHECK (payment_status IN ('pending', 'paid', 'failed', 'refunded')),
    payment_intent_id  TEXT,
    shipping_address   JSONB,
    metadata           JSONB NOT NULL DEFAULT '{}'::jsonb,
    created_at         TIMESTAMPTZ NOT NULL,
    updated_at         TIMESTAMPTZ NOT NULL
);
CREATE INDEX IF NOT EXISTS orders_payment_intent_idx ON orders (payment_intent_id);
CREATE INDEX IF NOT EXISTS orders_created_at_idx ON orders (created_at DESC);
"""


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _row_to_order(row) -> Order:
    """Convert a flat Postgres order row into an Order."""
    return Order(
        id=row["id"],
        stripeSessionId=row["stripe_session_id"],
        customerEmail=row["customer_email"],
        customerName=row["customer_name"],
        items=row["items"] or [],
        totalAmount=float(row["total_amount"]),
        currency=row["currency"],
        paymentStatus=row["payment_status"],
        paymentIntentId=row["payment_intent_id"],
        shippingAddress=row["shipping_address"],
        metadata=row["metadata"] or {},
        createdAt=row["created_at"],
        updatedAt=row["updated_at"],
    )


async def ensure_schema() -> None:
    """Create the orders table and its indexes if they are missing."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        await conn.execute(SCHEMA_SQL)


async def insert_order(order: Order) -> Order:
    pool = await get_pool()
    async with pool.acquire() as conn:
        await conn.execute(
            """
            INSERT INTO orders (id, stripe_session_id, customer_email, customer_name, items,
                                total_amount, currency, payment_status, payment_intent_id,
                                shipping_address, metadata, created_at, updated_at)
            VALUES ($1, $2, $3, $4, $5::jsonb, $6, $7, $8, $9, $10::jsonb, $11::jsonb, $12, $13)
            """,
            order.id,
            order.stripeSessionId,
            order.customerEmail,
            order.customerName,
            [li.model_dump() for li in order.items],
            Decimal(str(order.totalAmount)),
            order.currency,
            order.paymentStatus.value,
            order.paymentIntentId,
            order.shippingAddress.model_dump() if order.shippingAddress else None,
            order.metadata,
            order.createdAt,
            order.updatedAt,
        )
    return order


async def save_order(order: Order) -> Order:
    """
    Persist the mutable fields of an order and refresh updatedAt.

    stripe_session_id is never updated once the row exists.
    """
    order.updatedAt = _now()
    pool = await get_pool()
    async with pool.acquire() as conn:
        await conn.execute(
            """
            UPDATE orders
            SET customer_email    = $2,
                customer_name     = $3,
                payment_status    = $4,
                payment_intent_id = $5,
                shipping_address  = $6::jsonb,
                metadata          = $7::jsonb,
                updated_at        = $8
            WHERE id = $1
            """,
            order.id,
            order.customerEmail,
            order.customerName,
            order.paymentStatus.value,
            order.paymentIntentId,
            order.shippingAddress.model_dump() if order.shippingAddress else None,
            order.metadata,
            order.updatedAt,
        )
    return order


async def get_order(order_id: str) -> Optional[Order]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow("SELECT * FROM orders WHERE id = $1", order_id)
    return _row_to_order(row) if row else None


async def get_order_by_session(session_id: str) -> Optional[Order]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            "SELECT * FROM orders WHERE stripe_session_id = $1", session_id
        )
    return _row_to_order(row) if row else None


async def get_order_by_payment_intent(payment_intent_id: str) -> Optional[Order]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            "SELECT * FROM orders WHERE payment_intent_id = $1 ORDER BY created_at DESC LIMIT 1",
            payment_intent_id,
        )
    return _row_to_order(row) if row else None


async def list_orders(limit: int, offset: int) -> List[Order]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch(
            "SELECT * FROM orders ORDER BY created_at DESC LIMIT $1 OFFSET $2",
            limit,
            offset,
        )
    return [_row_to_order(r) for r in rows]


async def count_orders() -> int:
    pool = await get_pool()
    async with pool.acquire() as conn:
        return await conn.fetchval("SELECT COUNT(*) FROM orders")
