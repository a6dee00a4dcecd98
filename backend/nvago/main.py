import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nvago.api import quote, validate, orders, dashboard
from nvago.db.session import init_db

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("nvago")

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()]

app = FastAPI(title="NVAGo Orders")

# CORS for the customer web app and admin console
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(quote.router, prefix="/quote", tags=["quote"])
app.include_router(validate.router, prefix="/validate", tags=["validate"])
app.include_router(orders.router, prefix="/orders", tags=["orders"])
app.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])


@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("NVAGo service started")


@app.get("/")
async def root():
    return {"status": "ok", "service": "nvago"}
