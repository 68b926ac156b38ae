import json
import logging
import threading
import time
import uuid
from collections import defaultdict
from typing import DefaultDict

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware


logger = logging.getLogger("events_api.observability")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _escape_label(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


class MetricsRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.http_requests_total = 0
        self.http_request_errors_5xx_total = 0
        self.http_request_duration_ms_sum = 0.0
        self.http_request_duration_ms_count = 0

        self.requests_by_route_method_status: DefaultDict[tuple[str, str, int], int] = defaultdict(int)

    def observe(
        self,
        method: str,
        path: str,
        status_code: int,
        duration_ms: float,
        include_global: bool = True,
    ) -> None:
        with self._lock:
            if include_global:
                self.http_requests_total += 1
                if status_code >= 500:
                    self.http_request_errors_5xx_total += 1
                self.http_request_duration_ms_sum += duration_ms
                self.http_request_duration_ms_count += 1

            self.requests_by_route_method_status[(path, method, status_code)] += 1

    def render_prometheus(self) -> str:
        lines: list[str] = []
        with self._lock:
            lines.append("# HELP http_requests_total Total number of HTTP requests processed.")
            lines.append("# TYPE http_requests_total counter")
            lines.append(f"http_requests_total {self.http_requests_total}")

            lines.append("# HELP http_request_errors_5xx_total Total number of HTTP 5xx responses.")
            lines.append("# TYPE http_request_errors_5xx_total counter")
            lines.append(f"http_request_errors_5xx_total {self.http_request_errors_5xx_total}")

            lines.append("# HELP http_request_duration_ms_sum Sum of request durations in milliseconds.")
            lines.append("# TYPE http_request_duration_ms_sum counter")
            lines.append(f"http_request_duration_ms_sum {self.http_request_duration_ms_sum:.3f}")

            lines.append("# HELP http_request_duration_ms_count Number of observed request durations.")
            lines.append("# TYPE http_request_duration_ms_count counter")
            lines.append(f"http_request_duration_ms_count {self.http_request_duration_ms_count}")

            lines.append("# HELP http_requests_by_route_method_status HTTP requests split by route, method and status code.")
            lines.append("# TYPE http_requests_by_route_method_status counter")
            for (path, method, status_code), count in sorted(self.requests_by_route_method_status.items()):
                lines.append(
                    f'http_requests_by_route_method_status{{path="{_escape_label(path)}",method="{method}",status="{status_code}"}} {count}'
                )

        return "\n".join(lines) + "\n"


def _log_request(level: int, payload: dict) -> None:
    logger.log(level, json.dumps({"event": "http_request", **payload}, ensure_ascii=False), exc_info=level >= logging.ERROR)


UNMATCHED_ROUTE = "unmatched"


def _route_label(request: Request) -> str:
    # route templates keep the metric series bounded
    route = request.scope.get("route")
    template = getattr(route, "path", None)
    return template if template else UNMATCHED_ROUTE


class ObservabilityMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, registry: MetricsRegistry, exclude_paths: set[str] | None = None) -> None:
        super().__init__(app)
        self.registry = registry
        self.exclude_paths = exclude_paths or set()

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else None

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - started) * 1000.0
            self.registry.observe(
                method=method,
                path=_route_label(request),
                status_code=500,
                duration_ms=duration_ms,
                include_global=(path not in self.exclude_paths),
            )
            _log_request(
                logging.ERROR,
                {
                    "request_id": request_id,
                    "method": method,
                    "path": path,
                    "status_code": 500,
                    "duration_ms": round(duration_ms, 3),
                    "client_ip": client_ip,
                },
            )
            raise

        response.headers["X-Request-ID"] = request_id
        duration_ms = (time.perf_counter() - started) * 1000.0
        self.registry.observe(
            method=method,
            path=_route_label(request),
            status_code=response.status_code,
            duration_ms=duration_ms,
            include_global=(path not in self.exclude_paths),
        )
        _log_request(
            logging.INFO,
            {
                "request_id": request_id,
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 3),
                "client_ip": client_ip,
            },
        )
        return response
