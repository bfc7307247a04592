import uuid
from collections.abc import Sequence
from typing import Any

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator


def instrument_with_metrics(app: FastAPI, *, endpoint: str = "/metrics") -> None:
    Instrumentator(excluded_handlers=[endpoint, "/health"]).instrument(app).expose(
        app,
        endpoint=endpoint,
        include_in_schema=False,
    )


def add_correlation_id_middleware(app: FastAPI, *, header_name: str = "X-Request-ID") -> None:
    app.add_middleware(
        CorrelationIdMiddleware,
        header_name=header_name,
        generator=lambda: str(uuid.uuid4()),
        update_request_header=True,
    )


def create_service_app(
    *,
    title: str,
    version: str = "0.1.0",
    description: str | None = None,
    enable_metrics: bool = True,
    metrics_endpoint: str = "/metrics",
    enable_cors: bool = True,
    cors_allow_origins: Sequence[str] = ("*",),
    enable_correlation_id: bool = True,
    correlation_header_name: str = "X-Request-ID",
    **fastapi_kwargs: Any,
) -> FastAPI:
    """FastAPI app with the platform's standard middleware stack."""
    app = FastAPI(title=title, version=version, description=description or "", **fastapi_kwargs)

    if enable_metrics:
        instrument_with_metrics(app, endpoint=metrics_endpoint)

    if enable_cors:
        origins = list(cors_allow_origins)
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=origins != ["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )

    if enable_correlation_id:
        add_correlation_id_middleware(app, header_name=correlation_header_name)

    return app
