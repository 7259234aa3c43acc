import json
import logging
import os
import time
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Awaitable, Callable
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from prometheus_fastapi_instrumentator import Instrumentator

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")
request_id_var: ContextVar[str] = ContextVar("request_id", default="")
trace_id_var: ContextVar[str] = ContextVar("trace_id", default="")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "service": os.getenv("SERVICE_NAME", "order-desk"),
            "environment": os.getenv("ENVIRONMENT", "local"),
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": correlation_id_var.get() or None,
            "request_id": request_id_var.get() or None,
            "trace_id": trace_id_var.get() or None,
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if hasattr(record, "extra_fields") and isinstance(record.extra_fields, dict):
            payload.update(record.extra_fields)
        return json.dumps({k: v for k, v in payload.items() if v is not None}, default=str)


def configure_logging() -> None:
    root_logger = logging.getLogger()
    if root_logger.hasHandlers():
        root_logger.handlers.clear()
    root_logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)


def _trace_id_from(traceparent: str) -> str:
    parts = traceparent.split("-")
    if len(parts) >= 4 and len(parts[1]) == 32:
        return parts[1]
    return uuid4().hex


def _access_log_fields(request: Request, status_code: int, started: float) -> dict:
    """Access-log fields, including the desk record and idempotency key the request touched."""
    # Routing writes these into the shared scope once a route has matched.
    route = request.scope.get("route")
    path_params = request.scope.get("path_params") or {}
    return {
        "http_method": request.method,
        "endpoint": request.url.path,
        "route": getattr(route, "path", None),
        "order_id": path_params.get("order_id"),
        "idempotency_key": request.headers.get("Idempotency-Key"),
        "status_code": status_code,
        "latency_ms": round((time.perf_counter() - started) * 1000, 2),
    }


def setup_observability(app: FastAPI) -> None:
    configure_logging()
    Instrumentator(excluded_handlers=["/metrics"]).instrument(app).expose(app)
    access_logger = logging.getLogger("http.access")

    @app.middleware("http")
    async def _order_desk_observability_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        started = time.perf_counter()
        ids = {
            "X-Correlation-Id": request.headers.get("X-Correlation-Id")
            or f"corr_{uuid4().hex[:12]}",
            "X-Request-Id": request.headers.get("X-Request-Id") or f"req_{uuid4().hex[:12]}",
            "X-Trace-Id": _trace_id_from(request.headers.get("traceparent", "")),
        }
        tokens = [
            correlation_id_var.set(ids["X-Correlation-Id"]),
            request_id_var.set(ids["X-Request-Id"]),
            trace_id_var.set(ids["X-Trace-Id"]),
        ]
        status_code = 500
        try:
            response: Response = await call_next(request)
            status_code = response.status_code
        finally:
            access_logger.info(
                "request.completed",
                extra={"extra_fields": _access_log_fields(request, status_code, started)},
            )
            for var, token in zip((correlation_id_var, request_id_var, trace_id_var), tokens):
                var.reset(token)

        response.headers.update(ids)
        response.headers["traceparent"] = f"00-{ids['X-Trace-Id']}-0000000000000001-01"
        return response
