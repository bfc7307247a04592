import logging
import os
import sys
from collections.abc import Iterable

import sentry_sdk
import structlog
from asgi_correlation_id.context import correlation_id
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from structlog.contextvars import merge_contextvars

LOCAL_ENVIRONMENTS = frozenset({"local", "dev", "test"})


def _add_service_and_env(service_name: str, app_env: str):
    def processor(logger, method_name, event_dict):
        event_dict.setdefault("service", service_name)
        event_dict.setdefault("env", app_env)
        return event_dict

    return processor


def _add_correlation_id(logger, method_name, event_dict):
    cid = correlation_id.get(None)
    if cid is not None:
        event_dict["correlation_id"] = cid
        sentry_sdk.set_tag("correlation_id", cid)
    return event_dict


def _init_sentry(service_name: str, app_env: str, extra_integrations: Iterable[object] | None) -> None:
    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        return
    integrations = [FastApiIntegration(), *(extra_integrations or ())]
    integrations.append(LoggingIntegration(level=logging.INFO, event_level=logging.ERROR))
    sentry_sdk.init(
        dsn=dsn,
        environment=app_env,
        integrations=integrations,
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.0")),
        send_default_pii=False,
    )
    sentry_sdk.set_tag("service", service_name)


def configure_logging(default_service_name: str, extra_sentry_integrations: Iterable[object] | None = None) -> None:
    """Route stdlib logging and structlog through one processor chain.

    SERVICE_NAME, APP_ENV and LOG_LEVEL come from the environment. Console
    output in local environments, one JSON object per line everywhere else.
    """
    service_name = os.getenv("SERVICE_NAME", default_service_name)
    app_env = os.getenv("APP_ENV", "local")
    log_level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)

    _init_sentry(service_name, app_env, extra_sentry_integrations)

    shared_processors = [
        merge_contextvars,
        _add_service_and_env(service_name, app_env),
        _add_correlation_id,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    renderer = (
        structlog.dev.ConsoleRenderer() if app_env in LOCAL_ENVIRONMENTS else structlog.processors.JSONRenderer()
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level, force=True)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
