"""Request latency logging middleware for performance monitoring."""

import logging
import re
import time
from collections import defaultdict
from typing import Callable

from fastapi import Request, Response

logger = logging.getLogger(__name__)

# Thresholds for log levels (in milliseconds)
SLOW_REQUEST_THRESHOLD_MS = 1000
VERY_SLOW_REQUEST_THRESHOLD_MS = 3000

HEALTH_CHECK_PATHS = ("/health", "/health/ready")

_UUID_PATTERN = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE)


class LatencyStats:
    """In-memory latency samples, grouped by route shape."""

    def __init__(self, max_samples: int = 1000):
        self._samples: list[tuple[str, float]] = []
        self._max_samples = max_samples

    def record(self, path: str, latency_ms: float) -> None:
        self._samples.append((_UUID_PATTERN.sub("{id}", path), latency_ms))
        if len(self._samples) > self._max_samples:
            self._samples = self._samples[-self._max_samples:]

    def get_stats_by_path(self) -> dict:
        """Count, average and p95 latency per normalized path."""
        by_path: dict[str, list[float]] = defaultdict(list)
        for path, latency in self._samples:
            by_path[path].append(latency)

        result = {}
        for path, latencies in by_path.items():
            latencies.sort()
            total = len(latencies)
            result[path] = {
                "count": total,
                "avg_ms": round(sum(latencies) / total, 2),
                "p95_ms": round(latencies[min(int(total * 0.95), total - 1)], 2),
            }
        return result


# Global stats instance
_latency_stats: LatencyStats | None = None


def get_latency_stats() -> LatencyStats:
    """Get or create the global latency stats instance."""
    global _latency_stats
    if _latency_stats is None:
        _latency_stats = LatencyStats()
    return _latency_stats


async def latency_logging_with_stats_middleware(
    request: Request, call_next: Callable
) -> Response:
    """Log every request's latency and record it for the stats endpoint.

    Slow requests and server errors are logged at higher levels; health
    checks only when unusually slow.
    """
    start_time = time.perf_counter()

    method = request.method
    path = request.url.path
    is_health_check = path in HEALTH_CHECK_PATHS

    response = None
    error_occurred = False

    try:
        response = await call_next(request)
        return response
    except Exception:
        error_occurred = True
        raise
    finally:
        latency_ms = (time.perf_counter() - start_time) * 1000

        if not is_health_check:
            get_latency_stats().record(path, latency_ms)

        status_code = response.status_code if response else 500
        log_msg = "%s %s - %d - %.2fms"
        log_args = (method, path, status_code, latency_ms)

        if is_health_check:
            if latency_ms > 100:
                logger.debug(log_msg, *log_args)
        elif error_occurred or status_code >= 500:
            logger.error(log_msg, *log_args)
        elif latency_ms > VERY_SLOW_REQUEST_THRESHOLD_MS:
            logger.error("VERY SLOW REQUEST: " + log_msg, *log_args)
        elif latency_ms > SLOW_REQUEST_THRESHOLD_MS:
            logger.warning("SLOW REQUEST: " + log_msg, *log_args)
        elif status_code >= 400:
            logger.warning(log_msg, *log_args)
        else:
            logger.info(log_msg, *log_args)
