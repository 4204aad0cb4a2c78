import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from urlpool_app.config import settings
from urlpool_app.dependencies import get_store
from urlpool_app.exceptions import StoreError
from urlpool_app.store.factory import KVStoreFactory
from urlpool_app.api import pool

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Close the store only if a request created it
    if get_store.cache_info().currsize:
        await get_store().close()
        get_store.cache_clear()
        KVStoreFactory.clear_instance()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Submit URLs into a shared pool and draw one at random",
    debug=settings.debug,
    lifespan=lifespan
)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    """Store failures end the request; nothing is retried"""
    logger.error("Store failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage backend unavailable"}
    )


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "environment": settings.environment}


######## Include routers
app.include_router(pool.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())
