# tawsila_admin/main.py

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tawsila_admin.api.v1.endpoints import auth, finance, orders, tracking, users, vendors
from tawsila_admin.core.cache import close_redis, init_redis_pool
from tawsila_admin.core.config import settings
from tawsila_admin.core.errors import ApiError, NetworkError
from tawsila_admin.core.http_client import close_http_client
from tawsila_admin.core.security import clear_token_cookie

# Set up logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.DESCRIPTION,
)

# Set up CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(auth.router, prefix=settings.API_V1_STR)
app.include_router(orders.router, prefix=settings.API_V1_STR)
app.include_router(finance.router, prefix=settings.API_V1_STR)
app.include_router(users.router, prefix=settings.API_V1_STR)
app.include_router(vendors.router, prefix=settings.API_V1_STR)
app.include_router(tracking.router, prefix=settings.API_V1_STR)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    """Relay platform errors to the UI as {"message", "errors"}"""
    if isinstance(exc, NetworkError):
        status_code = 502
    else:
        status_code = exc.status if exc.status and exc.status >= 400 else 400

    response = JSONResponse(
        status_code=status_code,
        content={"message": exc.message, "errors": exc.field_errors or None},
    )

    # The platform no longer accepts the token, drop it
    if exc.is_unauthorized:
        clear_token_cookie(response)

    return response


@app.get("/health")
async def health():
    return {"status": "ok", "version": settings.VERSION, "timestamp": int(time.time())}


@app.on_event("startup")
async def startup_event():
    """Initialize shared resources"""
    start_time = time.time()
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION}")
    logger.info(f"Environment: {'Development' if settings.DEBUG else 'Production'}")
    logger.info(f"Platform API: {settings.API_BASE_URL}")

    await init_redis_pool()

    elapsed = time.time() - start_time
    logger.info(f"Application startup completed in {elapsed:.2f} seconds")


@app.on_event("shutdown")
async def shutdown_event():
    await close_http_client()
    await close_redis()
    logger.info("Shared clients closed")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tawsila_admin.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        reload=settings.DEBUG
    )
