"""Prometheus-compatible metrics endpoint and request tracking middleware."""
from __future__ import annotations

import re
import time
from collections import defaultdict
from threading import Lock

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

_PREFIX = "smallyfit"


class _Metrics:
    """Thread-safe in-memory metrics collector."""

    def __init__(self):
        self._lock = Lock()
        self.request_count: dict[tuple[str, str, int], int] = defaultdict(int)
        self.request_duration_sum: dict[tuple[str, str], float] = defaultdict(float)
        self.request_duration_count: dict[tuple[str, str], int] = defaultdict(int)
        self.upgrade_required: dict[str, int] = defaultdict(int)
        self.active_requests = 0
        self.startup_time = time.time()

    def record(self, method: str, path: str, status: int, duration: float):
        with self._lock:
            self.request_count[(method, path, status)] += 1
            self.request_duration_sum[(method, path)] += duration
            self.request_duration_count[(method, path)] += 1

    def record_upgrade_required(self, feature: str):
        """Count a free-tier request denied by an entitlement gate."""
        with self._lock:
            self.upgrade_required[feature] += 1

    def inc_active(self):
        with self._lock:
            self.active_requests += 1

    def dec_active(self):
        with self._lock:
            self.active_requests -= 1

    def reset(self):
        with self._lock:
            self.request_count.clear()
            self.request_duration_sum.clear()
            self.request_duration_count.clear()
            self.upgrade_required.clear()
            self.active_requests = 0

    def _render_locked(self) -> list[str]:
        out = [
            f"# HELP {_PREFIX}_http_requests_total Total HTTP requests",
            f"# TYPE {_PREFIX}_http_requests_total counter",
        ]
        for (method, path, status), count in sorted(self.request_count.items()):
            out.append(
                f'{_PREFIX}_http_requests_total{{method="{method}",path="{path}",status="{status}"}} {count}'
            )

        out += [
            "",
            f"# HELP {_PREFIX}_http_request_duration_seconds HTTP request duration",
            f"# TYPE {_PREFIX}_http_request_duration_seconds summary",
        ]
        for (method, path), total in sorted(self.request_duration_sum.items()):
            labels = f'method="{method}",path="{path}"'
            out.append(f"{_PREFIX}_http_request_duration_seconds_sum{{{labels}}} {total:.6f}")
            out.append(
                f"{_PREFIX}_http_request_duration_seconds_count{{{labels}}} "
                f"{self.request_duration_count[(method, path)]}"
            )

        out += [
            "",
            f"# HELP {_PREFIX}_upgrade_required_total Requests denied by a free-tier limit",
            f"# TYPE {_PREFIX}_upgrade_required_total counter",
        ]
        for feature, count in sorted(self.upgrade_required.items()):
            out.append(f'{_PREFIX}_upgrade_required_total{{feature="{feature}"}} {count}')

        out += [
            "",
            f"# HELP {_PREFIX}_active_requests Current in-flight requests",
            f"# TYPE {_PREFIX}_active_requests gauge",
            f"{_PREFIX}_active_requests {self.active_requests}",
            "",
            f"# HELP {_PREFIX}_uptime_seconds Seconds since process start",
            f"# TYPE {_PREFIX}_uptime_seconds gauge",
            f"{_PREFIX}_uptime_seconds {time.time() - self.startup_time:.1f}",
        ]
        return out

    def render(self) -> str:
        with self._lock:
            lines = self._render_locked()
        return "\n".join(lines) + "\n"


metrics = _Metrics()

_UUID_RE = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")


def _normalize_path(path: str) -> str:
    """Collapse IDs in paths to reduce cardinality. /meals/<uuid>/items -> /meals/:id/items"""
    parts = path.rstrip("/").split("/")
    normalized = [":id" if part.isdigit() or _UUID_RE.match(part) else part for part in parts]
    return "/".join(normalized) or "/"


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path == "/metrics":
            return PlainTextResponse(metrics.render(), media_type="text/plain; version=0.0.4")

        path = _normalize_path(request.url.path)
        metrics.inc_active()
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            metrics.record(request.method, path, 500, time.perf_counter() - start)
            raise
        finally:
            metrics.dec_active()
        metrics.record(request.method, path, response.status_code, time.perf_counter() - start)
        return response
