import argparse, asyncio, os

from checkout_api.settings import settings


async def init_schema(database_url: str | None) -> None:
    if database_url:
        settings.database_url = database_url
    from checkout_api.db import close_pool
    from checkout_api.db.orders_store import ensure_schema, count_orders
    try:
        await ensure_schema()
        n = await count_orders()
        print(f"orders table ready ({n} rows) -> {settings.database_url}")
    finally:
        await close_pool()

if __name__ == "__main__":
    ap = argparse.ArgumentParser(description="Create the orders table if it does not exist")
    ap.add_argument('--database-url', default=os.environ.get("DATABASE_URL"),
                    help='Postgres DSN (defaults to DATABASE_URL)')
    args = ap.parse_args()
    asyncio.run(init_schema(args.database_url))
