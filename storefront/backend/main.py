# storefront/backend/main.py
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from storefront.backend import models  # noqa: F401  registers every table on Base.metadata
from storefront.backend.database import Base, engine
from storefront.backend.seed import seed
from storefront.backend.routers import (
    admin_sync,
    cart,
    categories,
    health,
    orders,
    products,
    recently_viewed,
    sse,
)
from storefront.exceptions import (
    CategoryCycleError,
    ConflictError,
    CsvFormatError,
    NotFoundError,
)
from storefront.utils.logging import get_logger, setup_logging
from storefront.utils.settings import LOG_LEVEL

logger = get_logger(__name__)

ERROR_STATUS = (
    (NotFoundError, 404),
    (ConflictError, 409),
    (CategoryCycleError, 400),
    (CsvFormatError, 400),
)


def _error_handler(status_code: int):
    async def handler(request: Request, exc: Exception):
        logger.warning(f"{request.method} {request.url.path} -> {status_code}: {exc}")
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    return handler


def create_app(create_tables: bool = True) -> FastAPI:
    setup_logging(LOG_LEVEL)

    if create_tables:
        logger.info(f"Creating tables: {list(Base.metadata.tables.keys())}")
        Base.metadata.create_all(bind=engine)

    app = FastAPI(
        title="Nursery Storefront dev backend",
        version="1.0.0",
    )

    for exc_class, status_code in ERROR_STATUS:
        app.add_exception_handler(exc_class, _error_handler(status_code))

    app.include_router(health.router)
    app.include_router(cart.router)
    app.include_router(categories.router)
    app.include_router(products.router)
    app.include_router(orders.router)
    app.include_router(recently_viewed.router)
    app.include_router(admin_sync.router)
    app.include_router(sse.router)

    return app


app = create_app()

if __name__ == "__main__":
    seed()
    uvicorn.run(app, host="0.0.0.0", port=8000)
