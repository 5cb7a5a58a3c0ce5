from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bookkeeper.core.config import settings
from bookkeeper.core.database import init_db, session_scope
from bookkeeper.common.error_handlers import register_error_handlers
from bookkeeper.api.v1 import (
    auth,
    customer,
    sale,
    product,
    price_history,
    vendor,
    purchase,
    category,
    expense,
    ai,
)
from bookkeeper.api.v1.ledger import LEDGER_PREFIXES, build_type_router, build_entry_router
from bookkeeper.services.user_service import ensure_default_admin
from bookkeeper.logger_config import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} ({settings.APP_ENV})...")
    init_db()
    with session_scope() as db:
        ensure_default_admin(db)
    yield
    logger.info(f"Shutting down {settings.APP_NAME}...")


app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Register API routers
app.include_router(auth.router, prefix="/api/v1/auth", tags=["authentication"])
app.include_router(
    customer.router, prefix="/api/v1/customers", tags=["customers"])
app.include_router(sale.router, prefix="/api/v1/sales", tags=["sales"])
app.include_router(
    product.router, prefix="/api/v1/products", tags=["products"])
app.include_router(
    price_history.router, prefix="/api/v1/price-history", tags=["price history"])
app.include_router(vendor.router, prefix="/api/v1/vendors", tags=["vendors"])
app.include_router(
    purchase.router, prefix="/api/v1/purchases", tags=["purchases"])
app.include_router(
    category.router, prefix="/api/v1/categories", tags=["categories"])
app.include_router(
    expense.router, prefix="/api/v1/expenses", tags=["expenses"])
app.include_router(ai.router, prefix="/api/v1/ai", tags=["ai"])

for kind, prefix in LEDGER_PREFIXES.items():
    app.include_router(
        build_type_router(kind), prefix=f"/api/v1/{prefix}-types", tags=[f"{prefix} ledger"])
    app.include_router(
        build_entry_router(kind), prefix=f"/api/v1/{prefix}-entries", tags=[f"{prefix} ledger"])


@app.get("/")
def read_root():
    return {"message": f"Welcome to the {settings.APP_NAME} APIs!"}


@app.get("/health", tags=["health"])
def health_check():
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION
    }
