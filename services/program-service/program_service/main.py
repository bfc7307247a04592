import structlog
from backend_common.fastapi_app import create_service_app
from fastapi.responses import JSONResponse

from .exceptions import CatalogUnavailableException
from .logging_config import configure_logging
from .routers.programs import router as programs_router

configure_logging()
logger = structlog.get_logger(__name__)

app = create_service_app(
    title="program-service",
    version="0.1.0",
    enable_cors=False,
)


@app.exception_handler(CatalogUnavailableException)
async def catalog_unavailable_exception_handler(request, exc: CatalogUnavailableException):
    logger.warning("exercise_catalog_unavailable", path=request.url.path, detail=exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )


@app.get("/health")
async def health():
    return {"status": "ok"}


app.include_router(programs_router, prefix="/programs")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8010)
