# checkout_api/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .db import close_pool
from .db.orders_store import ensure_schema
from .errors import register_error_handlers
from .logging_config import setup_logging
from .routes import payments, products, webhook
from .settings import settings

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Checkout API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(webhook.router)
app.include_router(payments.router)
app.include_router(products.router)


@app.get("/api/health")
def health():
    return {"status": "OK", "message": "Server is running"}

@app.on_event("startup")
async def _startup_prepare_schema():
    try:
        await ensure_schema()
        logger.info("orders schema ready (env=%s)", settings.app_env)
    except Exception as e:
        # Don't crash; requests will surface the database error
        logger.warning("schema prep failed: %s", e)

@app.on_event("shutdown")
async def _shutdown_close_pool():
    await close_pool()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
