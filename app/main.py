import logging

uvicorn_logger = logging.getLogger("uvicorn")

app_logger = logging.getLogger("app")
app_logger.setLevel(logging.DEBUG)
app_logger.handlers = uvicorn_logger.handlers
app_logger.propagate = False

for logger_name in ["app.services.sync", "app.core.printful_client", "app.api.v1.snipcart"]:
    module_logger = logging.getLogger(logger_name)
    module_logger.setLevel(logging.DEBUG)
    module_logger.handlers = uvicorn_logger.handlers
    module_logger.propagate = False

from fastapi import FastAPI, HTTPException, status, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.printful_client import printful_client
from app.core.snipcart_client import snipcart_client
from app.api.v1.sync import router as sync_router
from app.api.v1.products import router as products_router, admin_router as admin_products_router
from app.api.v1.categories import router as categories_router
from app.api.v1.snipcart import router as snipcart_router

logger = logging.getLogger(__name__)
logger.info("Application startup - logging configured")


app = FastAPI(
    title="Printshop",
    description="Print-on-demand storefront backend with Printful catalog sync",
    version="1.0.0",
    openapi_url="/api/openapi.json",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

app.include_router(products_router)
app.include_router(categories_router)
app.include_router(admin_products_router)
app.include_router(sync_router)
app.include_router(snipcart_router)


@app.on_event("shutdown")
async def close_clients():
    await printful_client.close()
    await snipcart_client.close()


@app.get("/health")
async def health_check():
    return {"status": "ok"}


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.errors()},
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )
